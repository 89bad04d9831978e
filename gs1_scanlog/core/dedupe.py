"""
Scan records and duplicate detection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional, Union


# AIs compared only when both records carry them
OPTIONAL_KEYS = ("10", "21")


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class ScanRecord:
    """
    One logged scan.

    Attributes:
        provider: Provider label from classification or manual override
        fields: Decoded AI -> value mapping
        raw_text: Scan text as received
        scanned_at: ISO-8601 timestamp
    """
    provider: str
    fields: Dict[str, str] = field(default_factory=dict)
    raw_text: str = ""
    scanned_at: str = field(default_factory=_utc_now)

    @property
    def gtin(self) -> Optional[str]:
        return self.fields.get("01")

    def get(self, code: str, default: str = "") -> str:
        value = self.fields.get(code, default)
        return default if value is None else str(value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "fields": dict(self.fields),
            "raw_text": self.raw_text,
            "scanned_at": self.scanned_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ScanRecord':
        return cls(
            provider=data.get("provider", ""),
            fields={str(k): str(v) for k, v in (data.get("fields") or {}).items()},
            raw_text=data.get("raw_text", ""),
            scanned_at=data.get("scanned_at") or _utc_now(),
        )


def _fields(item: Union[ScanRecord, Mapping[str, str]]) -> Mapping[str, str]:
    return item.fields if isinstance(item, ScanRecord) else item


def same_item(a: Union[ScanRecord, Mapping[str, str]], b: Union[ScanRecord, Mapping[str, str]]) -> bool:
    """
    True if two scans describe the same physical item.

    Either side may be a ScanRecord or a decoded field set. The GTIN must
    be present and equal; batch and serial are compared only when present
    in both.
    """
    a, b = _fields(a), _fields(b)
    gtin = a.get("01")
    if not gtin or gtin != b.get("01"):
        return False
    for key in OPTIONAL_KEYS:
        if key in a and key in b and a[key] != b[key]:
            return False
    return True


def is_duplicate(candidate: Union[ScanRecord, Mapping[str, str]], existing: Iterable[ScanRecord]) -> bool:
    """True if any existing record is the same item as ``candidate``."""
    return any(same_item(candidate, record) for record in existing)


def find_duplicate(candidate: Union[ScanRecord, Mapping[str, str]], existing: Iterable[ScanRecord]) -> Optional[int]:
    """Index of the first existing record matching ``candidate``, or None."""
    for index, record in enumerate(existing):
        if same_item(candidate, record):
            return index
    return None
