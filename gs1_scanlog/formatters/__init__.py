"""
Output formatters for the GS1 scan log.
"""

from .json_formatter import (
    AI_FIELD_NAMES,
    field_name,
    format_fields_json,
    format_outcome_json,
    scan_to_dict,
    scan_to_json,
)

__all__ = [
    "AI_FIELD_NAMES",
    "field_name",
    "format_fields_json",
    "format_outcome_json",
    "scan_to_dict",
    "scan_to_json",
]
