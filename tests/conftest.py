"""
Shared fixtures for the GS1 scan log tests.
"""

from datetime import datetime, timezone

import pytest

from gs1_scanlog.core.classifier import AIPatternRule, load_rules
from gs1_scanlog.storage import ScanStore


GS = "\x1d"


@pytest.fixture
def now():
    return datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def rules():
    return load_rules()


@pytest.fixture
def custom_rules():
    return [
        AIPatternRule(provider="ACME", diagnostic_ais=["7003"], gtin_prefix="0629"),
        AIPatternRule(provider="LABX", lot_pattern=r"^LX\d{3}$", free_text="labx"),
    ]


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "scans.json"


@pytest.fixture
def store(store_path):
    return ScanStore(store_path)
