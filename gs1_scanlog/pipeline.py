"""
Scan pipeline: decode -> interpret -> classify -> duplicate check -> store.

``process_scan`` has no side effects; everything it depends on is passed
in. ``handle_scan`` adds the store write on top.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Sequence

from .core.ai_registry import AIRegistry
from .core.classifier import AIPatternRule, classify_with_reason
from .core.decoder import DecodeResult, decode
from .core.dedupe import ScanRecord, is_duplicate
from .core.interpreter import InterpretedFieldSet, interpret
from .storage import ScanStore


logger = logging.getLogger(__name__)

MANUAL_REASON = "manual"


@dataclass
class ScanOutcome:
    """
    Everything learned from one scan.

    Attributes:
        decoded: Decoder result (fields, warnings)
        interpreted: Display-ready fields
        provider: Provider label
        reason: How the provider was chosen ("by GTIN", "manual", ...)
        record: Record to log, None when the scan was empty
        duplicate: True if an existing record describes the same item
        accepted: Set by handle_scan once the record is stored
    """
    decoded: DecodeResult
    interpreted: InterpretedFieldSet
    provider: str
    reason: Optional[str]
    record: Optional[ScanRecord]
    duplicate: bool = False
    accepted: bool = False

    @property
    def provider_label(self) -> str:
        if self.reason:
            return f"{self.provider} ({self.reason})"
        return self.provider

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "reason": self.reason,
            "duplicate": self.duplicate,
            "accepted": self.accepted,
            "fields": self.decoded.fields,
            "interpreted": [item.to_dict() for item in self.interpreted],
            "warnings": self.decoded.to_dict()["warnings"],
        }


def process_scan(
    raw_text: Optional[str],
    *,
    now: datetime,
    rules: Sequence[AIPatternRule],
    existing: Iterable[ScanRecord],
    registry: Optional[AIRegistry] = None,
    provider_override: Optional[str] = None,
) -> ScanOutcome:
    """
    Run one scan through the pipeline without touching any store.

    Args:
        raw_text: Scan text
        now: Reference time for date windows, expiry and the record timestamp
        rules: Provider rules
        existing: Records already logged
        registry: AI registry (default table when omitted)
        provider_override: Provider chosen by the user; skips classification

    Returns:
        ScanOutcome
    """
    decoded = decode(raw_text, registry=registry)
    fields = decoded.fields
    interpreted = interpret(fields, now, registry=registry)

    if provider_override:
        provider, reason = provider_override, MANUAL_REASON
    else:
        provider, reason = classify_with_reason(fields, decoded.raw, rules)

    if not fields:
        return ScanOutcome(decoded, interpreted, provider, reason, record=None)

    record = ScanRecord(
        provider=provider,
        fields=dict(fields),
        raw_text=decoded.raw,
        scanned_at=now.isoformat(timespec="seconds"),
    )
    duplicate = is_duplicate(fields, existing)
    return ScanOutcome(decoded, interpreted, provider, reason, record=record, duplicate=duplicate)


def handle_scan(
    store: ScanStore,
    raw_text: Optional[str],
    *,
    rules: Sequence[AIPatternRule],
    now: Optional[datetime] = None,
    registry: Optional[AIRegistry] = None,
    provider_override: Optional[str] = None,
) -> ScanOutcome:
    """Process a scan and log it unless it is empty or a duplicate."""
    outcome = process_scan(
        raw_text,
        now=now or datetime.now(timezone.utc),
        rules=rules,
        existing=store.list(),
        registry=registry,
        provider_override=provider_override,
    )
    if outcome.record is None:
        logger.info("Ignoring empty scan")
    elif outcome.duplicate:
        logger.info("Duplicate scan of GTIN %s", outcome.record.gtin)
    else:
        store.append(outcome.record)
        outcome.accepted = True
    return outcome
