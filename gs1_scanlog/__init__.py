"""
GS1 Scan Log

Decodes GS1 Application Identifier data from barcode/QR scan text,
interprets dates and measures, identifies the provider and keeps a
deduplicated log of scanned items with CSV/Excel/PDF export.

Based on GS1 General Specifications and the GS1 Barcode Syntax Dictionary.
"""

from .core.ai_registry import load_registry, AIDefinition, AIFamily, AIRegistry
from .core.decoder import decode, decode_fields, DecodeResult, ParseOptions, PLAIN_TEXT_KEY
from .core.interpreter import interpret, InterpretedField, InterpretedFieldSet
from .core.classifier import classify, classify_with_reason, load_rules, AIPatternRule, UNIDENTIFIED
from .core.dedupe import ScanRecord, is_duplicate
from .validators.validators import (
    validate_check_digit,
    validate_date,
    validate_numeric,
    validate_alphanumeric,
)
from .storage import ScanStore
from .pipeline import process_scan, handle_scan, ScanOutcome

__version__ = "1.0.0"
__all__ = [
    "load_registry",
    "AIDefinition",
    "AIFamily",
    "AIRegistry",
    "decode",
    "decode_fields",
    "DecodeResult",
    "ParseOptions",
    "PLAIN_TEXT_KEY",
    "interpret",
    "InterpretedField",
    "InterpretedFieldSet",
    "classify",
    "classify_with_reason",
    "load_rules",
    "AIPatternRule",
    "UNIDENTIFIED",
    "ScanRecord",
    "is_duplicate",
    "validate_check_digit",
    "validate_date",
    "validate_numeric",
    "validate_alphanumeric",
    "ScanStore",
    "process_scan",
    "handle_scan",
    "ScanOutcome",
]
