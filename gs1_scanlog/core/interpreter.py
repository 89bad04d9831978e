"""
GS1 Field Interpreter

Adds human-readable and derived values to a decoded field set:
- YYMMDD dates -> DD/MM/YYYY, with an expiry flag for AIs 15/16/17
- Decimal-indicator families (310n, 392n, ...) -> numeric value with unit
- Mod10 check digits for GTIN, SSCC and GLN
- Numeric / GS1 character set 82 and maximum length checks for the rest
- Registry description for every AI

The result depends only on the fields and the ``now`` timestamp passed in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterator, List, Mapping, Optional

from .ai_registry import AIRegistry, load_registry
from .decoder import PLAIN_TEXT_KEY
from ..validators.validators import (
    NUMERIC,
    decode_decimal_value,
    validate_alphanumeric,
    validate_check_digit,
    validate_date,
    validate_numeric,
)


INVALID_DATE_MARKER = " (invalid date)"
EXPIRED_MARKER = " (EXPIRED)"
PLAIN_TEXT_DESCRIPTION = "Plain text"


@dataclass
class InterpretedField:
    """
    Display-ready view of one decoded AI.

    Attributes:
        code: AI code (or PLAIN_TEXT_KEY)
        description: Registry description ("Unknown" when not registered)
        raw: Value as decoded
        display: Formatted value for display
        numeric: Decoded amount for decimal-indicator AIs
        parsed_date: Parsed calendar date for date AIs
        is_expired: True/False for expiry AIs with a valid date, else None
        valid: False when the value fails a format or check digit test
        errors: Validation messages
        currency: ISO 4217 numeric code for AI 393n
        expiry: True for best-before, sell-by and expiry AIs
    """
    code: str
    description: str
    raw: str
    display: str
    numeric: Optional[float] = None
    parsed_date: Optional[date] = None
    is_expired: Optional[bool] = None
    valid: bool = True
    errors: List[str] = field(default_factory=list)
    currency: Optional[str] = None
    expiry: bool = False

    @property
    def label(self) -> str:
        return f"{self.code} ({self.description})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'code': self.code,
            'description': self.description,
            'raw': self.raw,
            'display': self.display,
            'numeric': self.numeric,
            'date': self.parsed_date.isoformat() if self.parsed_date else None,
            'is_expired': self.is_expired,
            'valid': self.valid,
            'errors': list(self.errors),
        }


@dataclass
class InterpretedFieldSet:
    """Interpreted fields in scan order."""
    fields: List[InterpretedField] = field(default_factory=list)

    def __iter__(self) -> Iterator[InterpretedField]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def get(self, code: str) -> Optional[InterpretedField]:
        for item in self.fields:
            if item.code == code:
                return item
        return None

    @property
    def any_expired(self) -> bool:
        return any(item.is_expired for item in self.fields)

    def to_flat_dict(self) -> Dict[str, Any]:
        """
        Decoded values plus derived keys, e.g.::

            {'17': '231231', '17_formatted': '31/12/2023 (EXPIRED)',
             '17_expired': True, '3102': '000123', '3102_numeric': 1.23,
             '3102_formatted': '1.23 kg'}
        """
        out: Dict[str, Any] = {}
        for item in self.fields:
            out[item.code] = item.raw
            if item.display != item.raw:
                out[f"{item.code}_formatted"] = item.display
            if item.expiry:
                out[f"{item.code}_expired"] = item.is_expired
            if item.numeric is not None:
                out[f"{item.code}_numeric"] = item.numeric
        return out


def _today_utc(now: datetime) -> date:
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.date()


def _interpret_date(item: InterpretedField, now: datetime, expiry: bool) -> None:
    check = validate_date(item.raw, now.year)
    if not check.valid:
        item.valid = False
        item.errors.extend(check.errors)
        item.display = f"{item.raw}{INVALID_DATE_MARKER}"
        return

    item.parsed_date = check.meta['date']
    item.display = check.meta['date_ddmmyyyy']
    if expiry:
        item.is_expired = item.parsed_date < _today_utc(now)
        if item.is_expired:
            item.display += EXPIRED_MARKER


def _interpret_decimal(item: InterpretedField, places: int, unit: Optional[str], currency: bool) -> None:
    amount = item.raw
    if currency:
        if len(amount) < 4 or not set(amount[:3]) <= NUMERIC:
            item.valid = False
            item.errors.append("Expected a 3-digit ISO currency code before the amount")
            return
        item.currency, amount = amount[:3], amount[3:]

    if not amount or not set(amount) <= NUMERIC:
        item.valid = False
        item.errors.append("Value contains non-numeric characters")
        return

    item.numeric, text = decode_decimal_value(amount, places)
    if unit:
        text = f"{text} {unit}"
    elif item.currency:
        text = f"{text} ({item.currency})"
    item.display = text


def interpret_field(code: str, raw: str, now: datetime, registry: Optional[AIRegistry] = None) -> InterpretedField:
    """Interpret a single AI value."""
    registry = registry or load_registry()

    if code == PLAIN_TEXT_KEY:
        return InterpretedField(code=code, description=PLAIN_TEXT_DESCRIPTION, raw=raw, display=raw)

    entry = registry.lookup(code)
    item = InterpretedField(
        code=code,
        description=entry.description if entry else "Unknown",
        raw=raw,
        display=raw,
        expiry=entry.expiry if entry else False,
    )
    if entry is None:
        return item

    if entry.date_format:
        _interpret_date(item, now, entry.expiry)
    elif entry.decimal_places is not None:
        _interpret_decimal(item, entry.decimal_places, entry.unit, entry.currency)
    else:
        if entry.data_type == 'N':
            check = validate_numeric(raw, max_length=entry.length)
        else:
            check = validate_alphanumeric(raw, max_length=entry.length)
        if check.valid and entry.check_digit:
            check = validate_check_digit(raw)
        if not check.valid:
            item.valid = False
            item.errors.extend(check.errors)

    if entry.is_fixed and len(raw) != entry.length:
        item.valid = False
        item.errors.append(f"Expected {entry.length} characters, got {len(raw)}")

    return item


def interpret(fields: Mapping[str, str], now: datetime, registry: Optional[AIRegistry] = None) -> InterpretedFieldSet:
    """
    Interpret a decoded AI -> value mapping.

    Args:
        fields: Ordered mapping from the decoder
        now: Reference time for the century window and expiry checks
        registry: AI registry (default table when omitted)

    Returns:
        InterpretedFieldSet in the order of ``fields``
    """
    registry = registry or load_registry()
    return InterpretedFieldSet(
        fields=[interpret_field(code, raw, now, registry) for code, raw in fields.items()]
    )
