"""
Tests for JSON formatter output.

Ensures clean JSON output with:
- Human-readable field names
- Proper date formatting (dd/mm/yyyy)
- Provider and duplicate flag
"""

import inspect
import json
from datetime import datetime

from gs1_scanlog.core.interpreter import interpret
from gs1_scanlog.formatters import (
    field_name,
    format_fields_json,
    format_outcome_json,
    scan_to_dict,
    scan_to_json,
)
from gs1_scanlog.pipeline import process_scan


NOW = datetime(2024, 6, 15)


class TestJSONOutput:
    """Test JSON output formatting."""

    def test_basic_json_output(self):
        barcode = "01062867400002491728043010GB2C2171490437969853"

        data = json.loads(scan_to_json(barcode, now=NOW))

        assert data["GTIN Code"] == "06286740000249"
        assert data["Expiry Date"] == "30/04/2028"
        assert data["Batch/Lot Number"] == "GB2C"
        assert data["Serial Number"] == "71490437969853"
        assert data["Provider"] == "Unidentified"
        assert data["Duplicate"] is False

        # Should NOT contain AI codes like "01", "17", etc.
        for code in ("01", "17", "10", "21"):
            assert code not in data

    def test_expired_marker(self):
        data = scan_to_dict("010761303438397917231231101B12345", now=NOW)
        assert data["Expiry Date"] == "31/12/2023 (EXPIRED)"
        assert data["Batch/Lot Number"] == "1B12345"

    def test_measure_uses_registry_name(self):
        data = scan_to_dict("01062850960008423102000123", now=NOW)
        assert data["Net Weight (kg) - 2 dec"] == "1.23 kg"

    def test_raw_values_included_on_request(self):
        interpreted = interpret({"17": "280430", "10": "GB2C"}, NOW)
        data = json.loads(format_fields_json(interpreted, include_raw_values=True))
        assert data["Expiry Date"] == {"formatted": "30/04/2028", "raw": "280430"}
        assert data["Batch/Lot Number"] == "GB2C"

    def test_warnings_on_request(self):
        outcome = process_scan("01062850960008427777", now=NOW, rules=[], existing=[])
        data = json.loads(format_outcome_json(outcome, include_warnings=True))
        assert data["_warnings"] == ["UNKNOWN_AI"]

    def test_unicode_preserved(self):
        interpreted = interpret({"plain_text": "Caducidad: año"}, NOW)
        output = format_fields_json(interpreted)
        assert "año" in output
        assert json.loads(output) == {"Plain Text": "Caducidad: año"}

    def test_field_name_fallbacks(self):
        assert field_name("01") == "GTIN Code"
        assert field_name("400") == "Customer Purchase Order Number"
        assert field_name("7777") == "AI(7777)"

    def test_outcome_parameter_typed(self):
        annotation = inspect.signature(format_outcome_json).parameters["outcome"].annotation
        assert annotation == "ScanOutcome"
