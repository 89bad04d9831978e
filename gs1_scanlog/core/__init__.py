"""
Core decoding modules for the GS1 scan log.
"""

from .ai_registry import AIDefinition, AIFamily, AIRegistry, LengthClass, load_registry
from .decoder import (
    decode,
    decode_fields,
    DecodeResult,
    ElementData,
    ErrorCode,
    ParseError,
    ParseOptions,
    GS,
    PLAIN_TEXT_KEY,
)
from .interpreter import interpret, InterpretedField, InterpretedFieldSet
from .classifier import (
    classify,
    classify_with_reason,
    load_rules,
    AIPatternRule,
    UNIDENTIFIED,
)
from .dedupe import ScanRecord, is_duplicate, find_duplicate

__all__ = [
    "AIDefinition",
    "AIFamily",
    "AIRegistry",
    "LengthClass",
    "load_registry",
    "decode",
    "decode_fields",
    "DecodeResult",
    "ElementData",
    "ErrorCode",
    "ParseError",
    "ParseOptions",
    "GS",
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
    "find_duplicate",
]
