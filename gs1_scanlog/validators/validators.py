"""
GS1 Validation Functions

Validation and decoding helpers shared by the decoder and the field
interpreter:
- Check digit validation (Mod10 for GTIN, SSCC, GLN)
- YYMMDD date validation with a sliding century window
- Numeric and alphanumeric (CSET82) checks
- Implied decimal positions for weight/measure/amount AIs

Based on GS1 General Specifications.
"""

from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class ValidationResult:
    """Result of a validation operation."""
    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)


# GS1 Character Sets
CSET82 = frozenset(
    '!"#$%&\'()*+,-./0123456789:;<=>?@'
    'ABCDEFGHIJKLMNOPQRSTUVWXYZ[\\]^_`'
    'abcdefghijklmnopqrstuvwxyz{|}'
)

NUMERIC = frozenset('0123456789')

# Two-digit years up to this many years ahead of the current one stay in
# the current century.
CENTURY_WINDOW_YEARS = 10


def calculate_check_digit_mod10(digits: str) -> int:
    """
    Calculate GS1 Mod10 check digit.

    Algorithm (GS1 General Specifications):
    1. From right to left, alternate multipliers 3 and 1
    2. Sum all products
    3. Check digit = (10 - (sum mod 10)) mod 10

    Args:
        digits: Numeric string without check digit

    Returns:
        Calculated check digit (0-9)
    """
    if not digits or not set(digits) <= NUMERIC:
        raise ValueError("Input must be a non-empty numeric string")

    total = 0
    for i, digit in enumerate(reversed(digits)):
        multiplier = 3 if i % 2 == 0 else 1
        total += int(digit) * multiplier

    return (10 - (total % 10)) % 10


def validate_check_digit(value: str) -> ValidationResult:
    """
    Validate the trailing GS1 check digit of a GTIN, SSCC or GLN.

    Args:
        value: The complete value including check digit

    Returns:
        ValidationResult with check digit status in meta
    """
    result = ValidationResult(valid=True)

    if not value or not set(value) <= NUMERIC:
        result.valid = False
        result.errors.append("Value must be numeric for check digit validation")
        return result

    if len(value) < 2:
        result.valid = False
        result.errors.append("Value too short for check digit validation")
        return result

    provided_check = int(value[-1])
    calculated_check = calculate_check_digit_mod10(value[:-1])

    result.meta['calculated_check_digit'] = calculated_check
    result.meta['provided_check_digit'] = provided_check
    result.meta['check_digit_valid'] = (provided_check == calculated_check)

    if provided_check != calculated_check:
        result.valid = False
        result.errors.append(
            f"Check digit mismatch: expected {calculated_check}, got {provided_check}"
        )

    return result


def window_year(yy: int, reference_year: int) -> int:
    """
    Expand a two-digit year.

    YY up to (current two-digit year + 10) maps to 20YY, anything later to
    19YY, so near-future shelf-life dates stay in the current century.
    """
    if yy <= (reference_year % 100) + CENTURY_WINDOW_YEARS:
        return 2000 + yy
    return 1900 + yy


def validate_date(value: str, reference_year: int) -> ValidationResult:
    """
    Validate a GS1 YYMMDD date.

    Args:
        value: Date string
        reference_year: Current year, used for the century window

    Returns:
        ValidationResult with year/month/day, ``date`` and
        ``date_ddmmyyyy`` in meta when valid
    """
    result = ValidationResult(valid=True)

    if len(value) != 6 or not set(value) <= NUMERIC:
        result.valid = False
        result.errors.append(f"YYMMDD date must be 6 digits, got {value!r}")
        return result

    yy = int(value[0:2])
    mm = int(value[2:4])
    dd = int(value[4:6])
    year = window_year(yy, reference_year)

    if mm < 1 or mm > 12:
        result.valid = False
        result.errors.append(f"Invalid month: {mm}")
        return result

    if dd < 1 or dd > 31:
        result.valid = False
        result.errors.append(f"Invalid day: {dd}")
        return result

    max_day = monthrange(year, mm)[1]
    if dd > max_day:
        result.valid = False
        result.errors.append(f"Day {dd} invalid for month {mm} in year {year}")
        return result

    result.meta['year'] = year
    result.meta['month'] = mm
    result.meta['day'] = dd
    result.meta['date'] = date(year, mm, dd)
    result.meta['iso_date'] = f"{year:04d}-{mm:02d}-{dd:02d}"
    result.meta['date_ddmmyyyy'] = f"{dd:02d}/{mm:02d}/{year:04d}"

    return result


def is_plausible_date(value: str) -> bool:
    """Cheap structural YYMMDD check (month 1-12, day 0-31) without a century."""
    if len(value) != 6 or not set(value) <= NUMERIC:
        return False
    mm = int(value[2:4])
    dd = int(value[4:6])
    return 1 <= mm <= 12 and 0 <= dd <= 31


def validate_numeric(
    value: str,
    max_length: int = 0,
    fixed_length: Optional[int] = None
) -> ValidationResult:
    """
    Validate numeric field.

    Args:
        value: Value to validate
        max_length: Maximum length
        fixed_length: If set, exact length required

    Returns:
        ValidationResult
    """
    result = ValidationResult(valid=True)

    if not value:
        result.valid = False
        result.errors.append("Value is empty")
        return result

    if not set(value) <= NUMERIC:
        result.valid = False
        result.errors.append("Value contains non-numeric characters")
        return result

    if fixed_length is not None:
        if len(value) != fixed_length:
            result.valid = False
            result.errors.append(f"Length must be exactly {fixed_length}, got {len(value)}")
    elif max_length and len(value) > max_length:
        result.valid = False
        result.errors.append(f"Length {len(value)} exceeds maximum {max_length}")

    return result


def validate_alphanumeric(
    value: str,
    max_length: int = 0,
    fixed_length: Optional[int] = None
) -> ValidationResult:
    """
    Validate alphanumeric field against GS1 character set 82.
    """
    result = ValidationResult(valid=True)

    if not value:
        result.valid = False
        result.errors.append("Value is empty")
        return result

    invalid_chars = set(value) - CSET82
    if invalid_chars:
        result.valid = False
        result.errors.append(f"Invalid characters: {sorted(invalid_chars)}")

    if fixed_length is not None:
        if len(value) != fixed_length:
            result.valid = False
            result.errors.append(f"Length must be exactly {fixed_length}, got {len(value)}")
    elif max_length and len(value) > max_length:
        result.valid = False
        result.errors.append(f"Length {len(value)} exceeds maximum {max_length}")

    return result


def decode_decimal_value(
    value: str,
    decimal_positions: int
) -> Tuple[float, str]:
    """
    Decode a numeric value with implied decimal positions.

    Used for weight/measure/amount AIs like 310x, 392x, 393x where the last
    digit of the AI indicates decimal places.

    Example: AI 3102, value "000123" -> (1.23, "1.23")

    Args:
        value: Numeric string value
        decimal_positions: Number of decimal places (0-9)

    Returns:
        (float_value, formatted_string)
    """
    if not value or not set(value) <= NUMERIC:
        raise ValueError("Value must be numeric")

    scaled = Decimal(int(value)).scaleb(-decimal_positions)
    formatted = f"{scaled:.{decimal_positions}f}"

    return float(scaled), formatted
