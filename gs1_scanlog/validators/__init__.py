"""
Validation modules for the GS1 scan decoder.
"""

from .validators import (
    validate_check_digit,
    validate_date,
    validate_numeric,
    validate_alphanumeric,
    calculate_check_digit_mod10,
    decode_decimal_value,
    is_plausible_date,
    window_year,
    ValidationResult,
    CSET82,
    NUMERIC,
)

__all__ = [
    "validate_check_digit",
    "validate_date",
    "validate_numeric",
    "validate_alphanumeric",
    "calculate_check_digit_mod10",
    "decode_decimal_value",
    "is_plausible_date",
    "window_year",
    "ValidationResult",
    "CSET82",
    "NUMERIC",
]
