"""
GS1 Element String Decoder

Turns the text a barcode/QR scanner hands over into an ordered mapping of
Application Identifier -> raw value.

Key GS1 rules:
- Variable-length AIs SHALL be delimited by FNC1/GS unless they are the last element
- FNC1 is transmitted as <GS> (ASCII 29, 0x1D) by scanners
- Fixed-length AIs do not require separators (a superfluous GS is tolerated)

Scanners and keyboard wedges often replace GS with some other control
character, so every control character is normalized to GS first. When the
input carries no GS at all, variable-length fields are delimited by
looking ahead for the next AI from which the rest of the string decodes
cleanly.

Decoding never raises on scan content. Problems are collected as warnings
on the result and decoding stops at the first position where no known AI
can be read, returning what was decoded so far.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .ai_registry import AIDefinition, AIRegistry, load_registry
from ..validators.validators import NUMERIC, is_plausible_date


logger = logging.getLogger(__name__)

GS = '\x1d'

# Field key used when the scan is not GS1 data at all
PLAIN_TEXT_KEY = "plain_text"

# Control characters other than GS that scanners emit in place of FNC1
CONTROL_CHARS = re.compile(r'[\x00-\x1c\x1e-\x1f\x7f]')

# Strings longer than this skip the no-GS lookahead (bounds recursion depth)
MAX_LOOKAHEAD = 512


class ErrorCode(str, Enum):
    """Warning codes."""
    EMPTY_INPUT = "EMPTY_INPUT"
    UNKNOWN_AI = "UNKNOWN_AI"
    TRUNCATED_DATA = "TRUNCATED_DATA"
    MISSING_SEPARATOR = "MISSING_SEPARATOR"
    DUPLICATE_AI = "DUPLICATE_AI"
    AMBIGUOUS_SPLIT = "AMBIGUOUS_SPLIT"


@dataclass
class ParseOptions:
    """
    Configuration options for decoding.

    Attributes:
        normalize_separators: Convert control characters to GS
        strip_symbology: Remove a leading AIM symbology identifier
        gs_aliases: Text sequences some scanners emit instead of GS
        registry: Optional custom AI registry
    """
    normalize_separators: bool = True
    strip_symbology: bool = True
    gs_aliases: Tuple[str, ...] = ('<GS>', '{GS}')
    registry: Optional[AIRegistry] = None


@dataclass
class ParseError:
    """A non-fatal decoding problem."""
    code: str
    message: str
    at_index: Optional[int] = None
    ai: Optional[str] = None


@dataclass
class ElementData:
    """
    One decoded element.

    Attributes:
        ai: Application Identifier code (or PLAIN_TEXT_KEY)
        raw_value: Extracted value
        start_index: Position of the AI in the normalized string
        end_index: Position after the value
        truncated: True if a fixed-length value came up short
    """
    ai: str
    raw_value: str
    start_index: int = 0
    end_index: int = 0
    truncated: bool = False


@dataclass
class DecodeResult:
    """
    Result of decoding one scan.

    Attributes:
        raw: Original input string
        normalized: Input after symbology removal and separator normalization
        symbology_identifier: Name of the stripped symbology prefix, if any
        gs_seen: True if the normalized input contains GS separators
        elements: Decoded elements in scan order
        warnings: Non-fatal problems met while decoding
    """
    raw: str
    normalized: str
    symbology_identifier: Optional[str] = None
    gs_seen: bool = False
    elements: List[ElementData] = field(default_factory=list)
    warnings: List[ParseError] = field(default_factory=list)

    @property
    def fields(self) -> Dict[str, str]:
        """Ordered AI -> value mapping (a repeated AI keeps its last value)."""
        out: Dict[str, str] = {}
        for element in self.elements:
            out[element.ai] = element.raw_value
        return out

    @property
    def is_plain_text(self) -> bool:
        return len(self.elements) == 1 and self.elements[0].ai == PLAIN_TEXT_KEY

    @property
    def complete(self) -> bool:
        """True if the whole input was consumed without warnings."""
        return bool(self.elements) and not self.warnings

    def to_dict(self) -> Dict[str, Any]:
        return {
            'raw': self.raw,
            'normalized': self.normalized,
            'symbology_identifier': self.symbology_identifier,
            'gs_seen': self.gs_seen,
            'fields': self.fields,
            'warnings': [
                {
                    'code': w.code,
                    'message': w.message,
                    'at_index': w.at_index,
                    'ai': w.ai,
                }
                for w in self.warnings
            ],
        }


# Symbology identifier patterns (ISO/IEC 15424)
SYMBOLOGY_PATTERNS = [
    (r'^\]d2', 'GS1 DataMatrix'),        # ]d2
    (r'^\]C1', 'GS1-128'),               # ]C1
    (r'^\]e0', 'GS1 DataBar'),           # ]e0
    (r'^\]e1', 'GS1 DataBar Limited'),   # ]e1
    (r'^\]e2', 'GS1 DataBar Expanded'),  # ]e2
    (r'^\]Q3', 'GS1 QR Code'),           # ]Q3
]

SYMBOLOGY_REGEX = [(re.compile(p), name) for p, name in SYMBOLOGY_PATTERNS]


class GS1Decoder:
    """
    Single-pass GS1 element string decoder.

    Longest-match AI lookup (4, 3, then 2 digits) at every cursor position;
    fixed-length values are read by length, variable-length values up to
    the next GS or, without any GS in the input, up to the last boundary
    from which the remainder decodes completely.
    """

    def __init__(self, options: Optional[ParseOptions] = None):
        self.options = options or ParseOptions()
        self.registry = self.options.registry or load_registry()

    def _strip_symbology(self, text: str) -> Tuple[str, Optional[str]]:
        for pattern, name in SYMBOLOGY_REGEX:
            match = pattern.match(text)
            if match:
                return text[match.end():], name
        return text, None

    def _normalize(self, text: str) -> Tuple[str, Optional[str]]:
        """
        Normalize input string.

        - Trims surrounding whitespace (keyboard wedges append CR/LF)
        - Strips the symbology identifier
        - Converts textual GS aliases and control characters to GS

        Returns:
            (normalized_text, symbology_name)
        """
        text = text.strip()
        symbology = None
        if self.options.strip_symbology:
            text, symbology = self._strip_symbology(text)

        for alias in self.options.gs_aliases:
            text = text.replace(alias, GS)

        if self.options.normalize_separators:
            text = CONTROL_CHARS.sub(GS, text)

        return text, symbology

    def _warn(self, result: DecodeResult, code: ErrorCode, message: str,
              at_index: Optional[int] = None, ai: Optional[str] = None) -> None:
        result.warnings.append(ParseError(code=code, message=message, at_index=at_index, ai=ai))
        logger.warning("%s: %s (input %r)", code.value, message, result.raw)

    def _plausible_fixed(self, entry: AIDefinition, value: str) -> bool:
        """Lookahead check for a fixed-length value taken from a no-GS string."""
        if entry.data_type == 'N' and not set(value) <= NUMERIC:
            return False
        if entry.date_format and not is_plausible_date(value):
            return False
        return True

    def _is_boundary(self, text: str, pos: int, memo: Dict[int, bool]) -> bool:
        """True if a variable-length value may end at ``pos``."""
        entry = self.registry.match(text, pos)
        if entry is None or entry.internal:
            return False
        return self._decodes_fully(text, pos, memo)

    def _decodes_fully(self, text: str, pos: int, memo: Dict[int, bool]) -> bool:
        """True if ``text[pos:]`` is a complete sequence of AI elements."""
        n = len(text)
        if pos >= n:
            return True
        if pos in memo:
            return memo[pos]

        ok = False
        entry = self.registry.match(text, pos)
        if entry is not None:
            data_start = pos + len(entry.code)
            if entry.is_fixed:
                end = data_start + entry.length
                ok = (
                    end <= n
                    and self._plausible_fixed(entry, text[data_start:end])
                    and self._decodes_fully(text, end, memo)
                )
            else:
                remaining = text[data_start:]
                if 0 < len(remaining) <= entry.length and (
                        entry.data_type != 'N' or set(remaining) <= NUMERIC):
                    ok = True
                else:
                    limit = min(n - 1, data_start + entry.length)
                    ok = any(
                        self._is_boundary(text, end, memo)
                        for end in range(limit, data_start, -1)
                    )

        memo[pos] = ok
        return ok

    def _variable_end(self, text: str, start: int, entry: AIDefinition,
                      memo: Dict[int, bool], seen: Iterable[str] = ()) -> Tuple[int, bool]:
        """
        Find where a variable-length value ends when the input has no GS.

        Picks the longest value (bounded by the AI's maximum length) that is
        followed by a recognizable AI from which the rest of the string
        decodes. Boundaries at core AIs (GTIN, dates, batch, serial) win;
        other AIs only split the value when it would not fit otherwise.
        Internal AIs (90-99) are never boundaries: they turn up inside
        numeric serials far too often. Neither is an AI already read from
        this scan (including the current one).

        Returns:
            (end_index, capped) where capped means the maximum length cut
            the value short of the end of the input
        """
        n = len(text)
        fallback = None
        if n - start <= MAX_LOOKAHEAD:
            limit = min(n - 1, start + entry.length)
            for end in range(limit, start, -1):
                if not self._is_boundary(text, end, memo):
                    continue
                nxt = self.registry.match(text, end)
                if nxt.code == entry.code or nxt.code in seen:
                    continue
                if nxt.core:
                    return end, False
                if fallback is None:
                    fallback = end

        if n - start <= entry.length:
            return n, False
        if fallback is not None:
            return fallback, False
        return start + entry.length, True

    def _passed_core(self, text: str, start: int, end: int, entry: AIDefinition,
                     memo: Dict[int, bool], seen: Iterable[str] = ()) -> Optional[Tuple[str, int]]:
        """First core AI inside ``text[start:end]`` that could also have ended the value."""
        if len(text) - start > MAX_LOOKAHEAD:
            return None
        for pos in range(start + 1, end):
            nxt = self.registry.match(text, pos)
            if nxt is None or not nxt.core or nxt.code == entry.code or nxt.code in seen:
                continue
            if self._is_boundary(text, pos, memo):
                return nxt.code, pos
        return None

    def decode(self, text: Optional[str]) -> DecodeResult:
        """
        Decode a scanned string.

        Args:
            text: Raw scan text

        Returns:
            DecodeResult with elements in scan order and any warnings
        """
        raw = text or ""
        normalized, symbology = self._normalize(raw)
        result = DecodeResult(
            raw=raw,
            normalized=normalized,
            symbology_identifier=symbology,
            gs_seen=GS in normalized,
        )

        if not normalized.strip(GS):
            self._warn(result, ErrorCode.EMPTY_INPUT, "Empty input after normalization")
            return result

        n = len(normalized)
        memo: Dict[int, bool] = {}
        seen: Dict[str, int] = {}
        pos = 0

        while pos < n:
            if normalized[pos] == GS:
                pos += 1
                continue

            entry = self.registry.match(normalized, pos)
            if entry is None:
                opaque = raw.strip()
                if not result.elements and GS not in opaque:
                    # Not GS1 data: keep the scan text as received (line breaks included)
                    result.elements.append(ElementData(
                        ai=PLAIN_TEXT_KEY, raw_value=opaque, start_index=0, end_index=n,
                    ))
                else:
                    self._warn(
                        result, ErrorCode.UNKNOWN_AI,
                        f"Unknown AI at position {pos}: {normalized[pos:pos + 4]!r}",
                        at_index=pos,
                    )
                break

            ai_start = pos
            data_start = pos + len(entry.code)
            truncated = False

            if entry.is_fixed:
                end = data_start + entry.length
                next_gs = normalized.find(GS, data_start, end)
                if next_gs != -1:
                    # Separator inside a fixed field: take what is there, resume after it
                    value = normalized[data_start:next_gs]
                    pos = next_gs + 1
                    truncated = True
                elif end > n:
                    value = normalized[data_start:]
                    pos = n
                    truncated = True
                else:
                    value = normalized[data_start:end]
                    pos = end
                    if pos < n and normalized[pos] == GS:
                        pos += 1
                if truncated:
                    self._warn(
                        result, ErrorCode.TRUNCATED_DATA,
                        f"AI({entry.code}) expects {entry.length} characters, got {len(value)}",
                        at_index=data_start, ai=entry.code,
                    )
            elif result.gs_seen:
                next_gs = normalized.find(GS, data_start)
                end = next_gs if next_gs != -1 else n
                value = normalized[data_start:end]
                pos = end
            else:
                end, capped = self._variable_end(normalized, data_start, entry, memo, seen)
                value = normalized[data_start:end]
                pos = end
                if capped:
                    self._warn(
                        result, ErrorCode.MISSING_SEPARATOR,
                        f"AI({entry.code}) value cut at maximum length {entry.length}",
                        at_index=end, ai=entry.code,
                    )
                else:
                    passed = self._passed_core(normalized, data_start, end, entry, memo, seen)
                    if passed is not None:
                        self._warn(
                            result, ErrorCode.AMBIGUOUS_SPLIT,
                            f"AI({entry.code}) value also contains AI({passed[0]}) at position "
                            f"{passed[1]}; no separator marks which one ends it",
                            at_index=passed[1], ai=entry.code,
                        )

            if entry.code in seen:
                self._warn(
                    result, ErrorCode.DUPLICATE_AI,
                    f"AI({entry.code}) appears more than once; keeping the last value",
                    at_index=ai_start, ai=entry.code,
                )
            seen[entry.code] = ai_start

            result.elements.append(ElementData(
                ai=entry.code,
                raw_value=value,
                start_index=ai_start,
                end_index=data_start + len(value),
                truncated=truncated,
            ))

        return result


def decode(
    raw: Optional[str],
    *,
    registry: Optional[AIRegistry] = None,
    options: Optional[ParseOptions] = None
) -> DecodeResult:
    """
    Decode a GS1 element string from a scan.

    Main entry point for the decoder.

    Args:
        raw: Raw scan text
        registry: AI registry to use instead of the default table
        options: Optional decoding configuration

    Returns:
        DecodeResult; ``result.fields`` is the ordered AI -> value mapping

    Examples:
        >>> decode("0106285096000842\\x1d10ABC").fields
        {'01': '06285096000842', '10': 'ABC'}
    """
    if registry is not None:
        options = replace(options or ParseOptions(), registry=registry)
    return GS1Decoder(options).decode(raw)


def decode_fields(raw: Optional[str], *, registry: Optional[AIRegistry] = None,
                  options: Optional[ParseOptions] = None) -> Dict[str, str]:
    """Decode and return only the AI -> value mapping."""
    return decode(raw, registry=registry, options=options).fields
