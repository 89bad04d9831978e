"""
JSON Formatter for GS1 scans

Provides clean JSON output with:
- Human-readable field names
- Date formatting (dd/mm/yyyy) and decoded measures
- Optional provider, duplicate flag and decoder warnings
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence

from ..core.ai_registry import AIRegistry, load_registry
from ..core.decoder import PLAIN_TEXT_KEY
from ..core.interpreter import InterpretedFieldSet

if TYPE_CHECKING:
    from ..pipeline import ScanOutcome


# AI Code to Human-Readable Name Mapping (registry description otherwise)
AI_FIELD_NAMES = {
    "00": "SSCC",
    "01": "GTIN Code",
    "02": "Contained GTIN",
    "10": "Batch/Lot Number",
    "11": "Production Date",
    "13": "Packaging Date",
    "15": "Best Before Date",
    "16": "Sell By Date",
    "17": "Expiry Date",
    "21": "Serial Number",
    "22": "Consumer Product Variant",
    "30": "Variable Count",
    "37": "Count of Trade Items",
    PLAIN_TEXT_KEY: "Plain Text",
}


def field_name(code: str, registry: Optional[AIRegistry] = None) -> str:
    if code in AI_FIELD_NAMES:
        return AI_FIELD_NAMES[code]
    registry = registry or load_registry()
    entry = registry.lookup(code)
    return entry.description if entry else f"AI({code})"


def _field_dict(
    interpreted: InterpretedFieldSet,
    include_raw_values: bool,
    registry: Optional[AIRegistry],
) -> Dict[str, Any]:
    output: Dict[str, Any] = {}
    for item in interpreted:
        name = field_name(item.code, registry)
        if include_raw_values and item.display != item.raw:
            output[name] = {
                "formatted": item.display,
                "raw": item.raw,
            }
        else:
            output[name] = item.display
    return output


def format_fields_json(
    interpreted: InterpretedFieldSet,
    include_raw_values: bool = False,
    registry: Optional[AIRegistry] = None,
) -> str:
    """
    Format interpreted fields as JSON keyed by human-readable names.

    Args:
        interpreted: Result of interpret()
        include_raw_values: Emit {"formatted", "raw"} for derived values

    Returns:
        JSON string
    """
    return json.dumps(_field_dict(interpreted, include_raw_values, registry), ensure_ascii=False, indent=2)


def format_outcome_json(
    outcome: ScanOutcome,
    include_raw_values: bool = False,
    include_warnings: bool = False,
    registry: Optional[AIRegistry] = None,
) -> str:
    """
    Format a pipeline ScanOutcome as JSON.

    Adds "Provider" and "Duplicate" to the field output, and "_warnings"
    when requested.
    """
    output = _field_dict(outcome.interpreted, include_raw_values, registry)
    output["Provider"] = outcome.provider_label
    output["Duplicate"] = outcome.duplicate
    if include_warnings:
        output["_warnings"] = [w.code for w in outcome.decoded.warnings]
    return json.dumps(output, ensure_ascii=False, indent=2)


def scan_to_json(
    raw_text: str,
    now: Optional[datetime] = None,
    rules: Sequence = (),
    include_raw_values: bool = False,
) -> str:
    """
    Decode a scan and return clean JSON output.

    Example:
        >>> print(scan_to_json("010761303438397917231231101B12345",
        ...                    now=datetime(2024, 1, 1)))
        {
          "GTIN Code": "07613034383979",
          "Expiry Date": "31/12/2023 (EXPIRED)",
          "Batch/Lot Number": "1B12345",
          "Provider": "Unidentified",
          "Duplicate": false
        }
    """
    from ..pipeline import process_scan

    outcome = process_scan(
        raw_text,
        now=now or datetime.now(timezone.utc),
        rules=rules,
        existing=(),
    )
    return format_outcome_json(outcome, include_raw_values=include_raw_values)


def scan_to_dict(raw_text: str, now: Optional[datetime] = None, rules: Sequence = ()) -> Dict[str, Any]:
    """Decode a scan and return the JSON output as a dictionary."""
    return json.loads(scan_to_json(raw_text, now=now, rules=rules))
