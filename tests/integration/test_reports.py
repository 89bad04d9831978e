"""
Tests for scan log exports.
"""

import pandas as pd

from gs1_scanlog.core.dedupe import ScanRecord
from gs1_scanlog.reports import (
    PROVIDER_COLUMN,
    SCANNED_AT_COLUMN,
    column_label,
    export_csv,
    export_excel,
    export_pdf,
    records_to_dataframe,
)


RECORDS = [
    ScanRecord(
        provider="BIOPROTECE",
        fields={"01": "08411111000001", "17": "280430", "10": "B55555"},
        raw_text="01084111110000011728043010B55555",
        scanned_at="2024-06-15T12:00:00+00:00",
    ),
    ScanRecord(
        provider="Unidentified",
        fields={"01": "06285096000842", "21": "S1"},
        raw_text="010628509600084221S1",
        scanned_at="2024-06-15T12:05:00+00:00",
    ),
]


class TestDataFrame:

    def test_columns_and_rows(self):
        df = records_to_dataframe(RECORDS, ["01", "10", "21"])
        assert list(df.columns) == [
            PROVIDER_COLUMN,
            SCANNED_AT_COLUMN,
            "GTIN (01)",
            "Batch/Lot Number (10)",
            "Serial Number (21)",
        ]
        assert df.iloc[0]["Batch/Lot Number (10)"] == "B55555"
        assert df.iloc[0]["Serial Number (21)"] == ""
        assert df.iloc[1][PROVIDER_COLUMN] == "Unidentified"

    def test_without_meta(self):
        df = records_to_dataframe(RECORDS, ["17"], include_meta=False)
        assert list(df.columns) == ["Expiration Date (17)"]
        assert df["Expiration Date (17)"].tolist() == ["280430", ""]

    def test_empty_log_keeps_headers(self):
        df = records_to_dataframe([], ["01"])
        assert df.empty
        assert list(df.columns) == [PROVIDER_COLUMN, SCANNED_AT_COLUMN, "GTIN (01)"]

    def test_unknown_column_label(self):
        assert column_label("7777") == "Unknown (7777)"


class TestExports:

    def test_csv(self, tmp_path):
        df = records_to_dataframe(RECORDS, ["01", "10"])
        path = export_csv(df, "scans.csv", tmp_path / "out")
        assert path == tmp_path / "out" / "scans.csv"
        loaded = pd.read_csv(path, dtype=str, keep_default_na=False)
        assert loaded["GTIN (01)"].tolist() == ["08411111000001", "06285096000842"]

    def test_excel_with_metadata(self, tmp_path):
        df = records_to_dataframe(RECORDS, ["01", "21"])
        path = export_excel(df, "scans.xlsx", tmp_path, metadata={"Scans": "2"})
        sheets = pd.read_excel(path, sheet_name=None, dtype=str)
        assert list(sheets) == ["Metadata", "Scans"]
        assert sheets["Scans"]["GTIN (01)"].tolist() == ["08411111000001", "06285096000842"]

    def test_pdf(self, tmp_path):
        df = records_to_dataframe(RECORDS * 40, ["01", "10", "17", "21"])
        path = export_pdf("GS1 Scan Log", df, "scans.pdf", tmp_path, metadata={"Scans": str(len(df))})
        assert path.read_bytes().startswith(b"%PDF")

    def test_pdf_empty_log(self, tmp_path):
        df = records_to_dataframe([], ["01"])
        path = export_pdf("GS1 Scan Log", df, "empty.pdf", tmp_path)
        assert path.stat().st_size > 0
