"""
Provider classification for decoded scans.

Rules are plain configuration (``AIPatternRule`` lists, usually loaded
from JSON). Evaluation order across all rules:

1. A diagnostic AI declared by a rule is present in the scan
2. GTIN (01) starts with the rule's prefix
3. Batch/lot (10) matches the rule's lot pattern
4. Serial (21) matches the rule's serial pattern
5. The rule's free-text label occurs in the raw scan (case-insensitive)

The first matching provider wins; otherwise the scan is UNIDENTIFIED.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Pattern, Sequence, Tuple, Union


logger = logging.getLogger(__name__)

UNIDENTIFIED = "Unidentified"

DEFAULT_RULES_PATH = Path(__file__).resolve().parent.parent / "data" / "providers.json"


def _compile(pattern: Optional[str], provider: str, kind: str) -> Optional[Pattern[str]]:
    if not pattern:
        return None
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise ValueError(f"Invalid {kind} pattern for provider {provider!r}: {e}") from e


@dataclass
class AIPatternRule:
    """
    Identification rule for one provider.

    Attributes:
        provider: Label returned when the rule matches
        gtin_prefix: Leading digits of the provider's GTINs
        lot_pattern: Regular expression for batch/lot numbers
        serial_pattern: Regular expression for serial numbers
        free_text: Substring looked for in the raw scan
        diagnostic_ais: AIs only this provider encodes

    Patterns are compiled case-insensitively on construction; an invalid
    pattern raises ValueError.
    """
    provider: str
    gtin_prefix: Optional[str] = None
    lot_pattern: Optional[str] = None
    serial_pattern: Optional[str] = None
    free_text: Optional[str] = None
    diagnostic_ais: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.provider:
            raise ValueError("Rule needs a provider name")
        self._lot_re = _compile(self.lot_pattern, self.provider, "lot")
        self._serial_re = _compile(self.serial_pattern, self.provider, "serial")

    def matches_lot(self, lot: str) -> bool:
        return self._lot_re is not None and self._lot_re.search(lot) is not None

    def matches_serial(self, serial: str) -> bool:
        return self._serial_re is not None and self._serial_re.search(serial) is not None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'AIPatternRule':
        return cls(
            provider=data.get("provider", ""),
            gtin_prefix=data.get("gtin_prefix") or None,
            lot_pattern=data.get("lot_pattern") or None,
            serial_pattern=data.get("serial_pattern") or None,
            free_text=data.get("free_text") or None,
            diagnostic_ais=[str(ai) for ai in data.get("diagnostic_ais", [])],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "gtin_prefix": self.gtin_prefix,
            "lot_pattern": self.lot_pattern,
            "serial_pattern": self.serial_pattern,
            "free_text": self.free_text,
            "diagnostic_ais": list(self.diagnostic_ais),
        }


def classify_with_reason(
    fields: Mapping[str, str],
    raw_text: str,
    rules: Sequence[AIPatternRule],
) -> Tuple[str, Optional[str]]:
    """
    Identify the provider of a scan.

    Returns:
        (provider, reason) where reason is e.g. "by GTIN", or
        (UNIDENTIFIED, None)
    """
    for rule in rules:
        if any(ai in fields for ai in rule.diagnostic_ais):
            return rule.provider, "by AI"

    gtin = fields.get("01")
    if gtin:
        for rule in rules:
            if rule.gtin_prefix and gtin.startswith(rule.gtin_prefix):
                return rule.provider, "by GTIN"

    lot = fields.get("10")
    if lot:
        for rule in rules:
            if rule.matches_lot(lot):
                return rule.provider, "by lot"

    serial = fields.get("21")
    if serial:
        for rule in rules:
            if rule.matches_serial(serial):
                return rule.provider, "by serial"

    text = (raw_text or "").upper()
    for rule in rules:
        if rule.free_text and rule.free_text.upper() in text:
            return rule.provider, "by text"

    return UNIDENTIFIED, None


def classify(fields: Mapping[str, str], raw_text: str, rules: Sequence[AIPatternRule]) -> str:
    """Return the provider label for a scan (UNIDENTIFIED when no rule matches)."""
    return classify_with_reason(fields, raw_text, rules)[0]


def load_rules(path: Optional[Union[str, Path]] = None) -> List[AIPatternRule]:
    """
    Load provider rules from a JSON array.

    Raises:
        OSError: if the file cannot be read
        ValueError: on malformed JSON or an invalid rule
    """
    rules_path = Path(path) if path else DEFAULT_RULES_PATH
    with rules_path.open("r", encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, list):
        raise ValueError(f"{rules_path}: expected a JSON array of rules")
    rules = [AIPatternRule.from_dict(item) for item in payload]
    logger.info("Loaded %d provider rules from %s", len(rules), rules_path)
    return rules
