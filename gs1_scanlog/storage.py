"""
Scan log persistence.

Records are kept in memory in scan order. When the store has a path, the
whole list is loaded on construction and written back as a JSON array
after every change.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from .core.dedupe import ScanRecord


logger = logging.getLogger(__name__)


def _json_load(path: Path) -> List[Dict[str, Any]]:
    if not path.exists():
        return []
    with path.open("r", encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, list):
        raise ValueError(f"{path}: expected a JSON array of scan records")
    return payload


def _json_save(path: Path, payload: List[Dict[str, Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
    tmp.replace(path)


class ScanStore:
    """
    Ordered list of ScanRecords.

    Args:
        path: JSON file to load from and save to; memory only when None
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else None
        self._records: List[ScanRecord] = []
        if self.path is not None:
            self._records = [ScanRecord.from_dict(item) for item in _json_load(self.path)]
            logger.debug("Loaded %d records from %s", len(self._records), self.path)

    def _save(self) -> None:
        if self.path is None:
            return
        _json_save(self.path, [record.to_dict() for record in self._records])
        logger.debug("Saved %d records to %s", len(self._records), self.path)

    def append(self, record: ScanRecord) -> int:
        """Add a record; returns its index."""
        self._records.append(record)
        self._save()
        logger.info("Logged scan %d (%s)", len(self._records) - 1, record.provider)
        return len(self._records) - 1

    def remove(self, index: int) -> ScanRecord:
        """
        Delete the record at ``index``.

        Raises:
            IndexError: if there is no record at ``index``
        """
        if not 0 <= index < len(self._records):
            raise IndexError(f"No scan record at index {index} (store has {len(self._records)})")
        record = self._records.pop(index)
        self._save()
        logger.info("Removed scan %d", index)
        return record

    def clear(self) -> None:
        self._records.clear()
        self._save()

    def list(self) -> List[ScanRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ScanRecord]:
        return iter(list(self._records))
