"""
AI Registry for the GS1 scan decoder

Static table of the GS1 Application Identifiers this tool understands,
written in the GS1 Barcode Syntax Dictionary line format and parsed once
at import time.

Decimal-indicator families (310n, 392n, ...) are kept as explicit family
descriptors: the first three digits name the family and the fourth digit
is the number of implied decimal places. The decoder and the interpreter
both resolve family members through this registry.

Reference: https://ref.gs1.org/tools/gs1-barcode-syntax-resource/syntax-dictionary/
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple


class LengthClass(str, Enum):
    """Whether an AI value has a predefined length."""
    FIXED = "fixed"
    VARIABLE = "variable"


@dataclass(frozen=True)
class AIDefinition:
    """
    A single GS1 Application Identifier.

    Attributes:
        code: The AI code (2-4 digits)
        description: Human-readable title
        length_class: FIXED or VARIABLE
        length: Exact length for FIXED, maximum length for VARIABLE
        data_type: 'N' numeric, 'X' alphanumeric
        check_digit: True if the value ends in a GS1 Mod10 check digit
        date_format: 'YYMMDD' for date fields
        expiry: True for best-before / sell-by / expiry dates
        core: True for the identifiers that carry a trade item (GTIN, dates,
            batch, serial); preferred as field boundaries without GS
        decimal_places: Implied decimal places (family members only)
        unit: Unit suffix for measures
        currency: True if the value starts with a 3-digit ISO 4217 code
    """
    code: str
    description: str
    length_class: LengthClass
    length: int
    data_type: str = "X"
    check_digit: bool = False
    date_format: Optional[str] = None
    expiry: bool = False
    core: bool = False
    decimal_places: Optional[int] = None
    unit: Optional[str] = None
    currency: bool = False

    @property
    def is_fixed(self) -> bool:
        return self.length_class is LengthClass.FIXED

    @property
    def internal(self) -> bool:
        """Company internal AIs (90-99)."""
        return len(self.code) == 2 and self.code.startswith("9")


@dataclass(frozen=True)
class AIFamily:
    """
    A family of 4-digit AIs sharing a 3-digit prefix where the last digit
    is the decimal-place indicator (e.g. 3102 = net weight, 2 decimals).
    """
    prefix: str
    template: AIDefinition

    def member(self, code: str) -> Optional[AIDefinition]:
        if len(code) != 4 or not code.startswith(self.prefix) or code[3] not in NUMERIC:
            return None
        places = int(code[3])
        return replace(
            self.template,
            code=code,
            description=f"{self.template.description} - {places} dec",
            decimal_places=places,
        )


NUMERIC = frozenset("0123456789")


def _parse_syntax_spec(spec: str) -> Tuple[str, int, int, List[str]]:
    """
    Parse one GS1 Syntax Dictionary component.

    Examples:
        "N14,csum" -> ('N', 14, 14, ['csum'])
        "X..20"    -> ('X', 1, 20, [])
        "N6,yymmdd" -> ('N', 6, 6, ['yymmdd'])

    Returns:
        (data_type, min_length, max_length, linters)
    """
    parts = spec.split(',')
    type_len = parts[0]
    linters = parts[1:]

    data_type = type_len[0]
    len_spec = type_len[1:]

    if '..' in len_spec:
        min_len, max_len = 1, int(len_spec.replace('..', ''))
    elif len_spec:
        min_len = max_len = int(len_spec)
    else:
        raise ValueError(f"Missing length in component spec: {spec!r}")

    return data_type, min_len, max_len, linters


# Supported AIs. Columns: AI, '*' when the value has a predefined length,
# component specifications, attributes, '#' title.
RAW_AI_TABLE = """
# AI       Flags  Specification     Attributes       Title
00            *   N18,csum          core             # SSCC
01            *   N14,csum          core             # GTIN
02            *   N14,csum          core             # GTIN of Contained Items
10                X..20             core             # Batch/Lot Number
11            *   N6,yymmdd         core             # Production Date
12            *   N6,yymmdd                          # Due Date
13            *   N6,yymmdd         core             # Packaging Date
15            *   N6,yymmdd         core expiry      # Best Before Date
16            *   N6,yymmdd         core expiry      # Sell By Date
17            *   N6,yymmdd         core expiry      # Expiration Date
20            *   N2                                 # Variant
21                X..20             core             # Serial Number
22                X..20                              # Consumer Product Variant
240               X..30                              # Additional Product ID
241               X..30                              # Customer Part Number
250               X..30                              # Secondary Serial Number
251               X..30                              # Reference to Source Entity
30                N..8                               # Variable Count
310n          *   N6                unit=kg          # Net Weight (kg)
311n          *   N6                unit=m           # Length (m)
312n          *   N6                unit=m           # Width (m)
313n          *   N6                unit=m           # Height (m)
314n          *   N6                unit=m2          # Area (m2)
315n          *   N6                unit=l           # Net Volume (l)
316n          *   N6                unit=m3          # Net Volume (m3)
320n          *   N6                unit=lb          # Net Weight (lb)
330n          *   N6                unit=kg          # Gross Weight (kg)
37                N..8                               # Count of Trade Items
392n              N..15                              # Amount Payable
393n              N3 N..15          currency         # Amount Payable (ISO Currency)
400               X..30                              # Customer Purchase Order Number
410           *   N13,csum                           # Ship To GLN
411           *   N13,csum                           # Bill To GLN
412           *   N13,csum                           # Purchased From GLN
413           *   N13,csum                           # Ship For GLN
414           *   N13,csum                           # Location GLN
415           *   N13,csum                           # Invoicing Party GLN
416           *   N13,csum                           # Production Location GLN
417           *   N13,csum                           # Party GLN
420               X..20                              # Ship To Postal Code
8005          *   N6                                 # Price Per Unit
8020              X..25                              # Payment Slip Reference
90                X..30                              # Mutually Agreed Information
91-99             X..90                              # Company Internal Information
"""


def _create_definition(code: str, title: str, specs: List[str], fixed: bool, attributes: List[str]) -> AIDefinition:
    """Create an AIDefinition from the parsed table columns."""
    data_type = 'X'
    total_len = 0
    date_format = None
    check_digit = False

    for spec in specs:
        dtype, _min_len, max_len, linters = _parse_syntax_spec(spec)
        data_type = dtype
        total_len += max_len
        for linter in linters:
            if linter == 'yymmdd':
                date_format = 'YYMMDD'
            elif linter == 'csum':
                check_digit = True

    unit = None
    for attr in attributes:
        if attr.startswith('unit='):
            unit = attr[5:]

    return AIDefinition(
        code=code,
        description=title,
        length_class=LengthClass.FIXED if fixed else LengthClass.VARIABLE,
        length=total_len,
        data_type=data_type,
        check_digit=check_digit,
        date_format=date_format,
        expiry='expiry' in attributes,
        core='core' in attributes,
        unit=unit,
        currency='currency' in attributes,
    )


def parse_ai_table(raw: str) -> Tuple[List[AIDefinition], List[AIFamily]]:
    """
    Parse a table in RAW_AI_TABLE format.

    Raises:
        ValueError: on malformed lines
    """
    definitions: List[AIDefinition] = []
    families: List[AIFamily] = []

    for line in raw.strip().split('\n'):
        line = line.strip()
        if not line or line.startswith('#'):
            continue

        main_part, sep, title = line.partition('#')
        if not sep:
            raise ValueError(f"Missing title in AI table line: {line!r}")
        title = title.strip()

        tokens = main_part.split()
        ai_spec = tokens[0]
        fixed = len(tokens) > 1 and tokens[1] == '*'
        rest = tokens[2:] if fixed else tokens[1:]
        specs = [t for t in rest if t[0] in ('N', 'X')]
        attributes = [t for t in rest if t[0] not in ('N', 'X')]
        if not specs:
            raise ValueError(f"Missing specification in AI table line: {line!r}")

        if ai_spec.endswith('n'):
            prefix = ai_spec[:-1]
            template = _create_definition(prefix + '0', title, specs, fixed, attributes)
            families.append(AIFamily(prefix=prefix, template=template))
        elif '-' in ai_spec:
            start, end = ai_spec.split('-')
            for i in range(int(start), int(end) + 1):
                code = str(i).zfill(len(start))
                definitions.append(_create_definition(code, title, specs, fixed, attributes))
        else:
            definitions.append(_create_definition(ai_spec, title, specs, fixed, attributes))

    return definitions, families


class AIRegistry:
    """
    Immutable lookup table of AI definitions and decimal families.

    Raises ValueError on construction if a code or family prefix is
    registered twice, or if a code is not 2-4 digits.
    """

    def __init__(self, definitions: Iterable[AIDefinition], families: Iterable[AIFamily] = ()):
        self._entries: Dict[str, AIDefinition] = {}
        self._families: Dict[str, AIFamily] = {}

        for definition in definitions:
            code = definition.code
            if not 2 <= len(code) <= 4 or not set(code) <= NUMERIC:
                raise ValueError(f"Invalid AI code: {code!r}")
            if code in self._entries:
                raise ValueError(f"Duplicate AI code: {code}")
            self._entries[code] = definition

        for family in families:
            if len(family.prefix) != 3 or not set(family.prefix) <= NUMERIC:
                raise ValueError(f"Invalid AI family prefix: {family.prefix!r}")
            if family.prefix in self._families or family.prefix in self._entries:
                raise ValueError(f"Duplicate AI family prefix: {family.prefix}")
            self._families[family.prefix] = family

    @classmethod
    def from_table(cls, raw: str) -> 'AIRegistry':
        definitions, families = parse_ai_table(raw)
        return cls(definitions, families)

    def lookup(self, code: str) -> Optional[AIDefinition]:
        """Return the definition for an exact 2-4 character code."""
        entry = self._entries.get(code)
        if entry is not None:
            return entry
        family = self.family_for(code)
        if family is not None:
            return family.member(code)
        return None

    def family_for(self, code: str) -> Optional[AIFamily]:
        """Return the decimal family a 4-digit code belongs to."""
        if len(code) != 4:
            return None
        return self._families.get(code[:3])

    def is_known(self, candidate: str) -> bool:
        """
        True for any 2-4 character prefix naming a registered AI or a
        registered family prefix.
        """
        if not 2 <= len(candidate) <= 4:
            return False
        if candidate in self._entries or candidate in self._families:
            return True
        return self.lookup(candidate) is not None

    def match(self, text: str, pos: int = 0) -> Optional[AIDefinition]:
        """
        Find the AI starting at ``pos``, trying 4, 3 then 2 characters.
        Longest match first keeps e.g. 3102 from being read as 31 + data.
        """
        for length in (4, 3, 2):
            candidate = text[pos:pos + length]
            if len(candidate) != length or not set(candidate) <= NUMERIC:
                continue
            entry = self.lookup(candidate)
            if entry is not None:
                return entry
        return None

    def describe(self, code: str) -> str:
        entry = self.lookup(code)
        return entry.description if entry else "Unknown"

    def descriptions(self) -> Dict[str, str]:
        """Code -> description for every registered AI (family prefixes as 'NNNn')."""
        out = {code: entry.description for code, entry in self._entries.items()}
        for prefix, family in self._families.items():
            out[f"{prefix}n"] = family.template.description
        return out

    def __contains__(self, code: str) -> bool:
        return self.lookup(code) is not None

    def __len__(self) -> int:
        return len(self._entries) + 10 * len(self._families)


_cached_registry: Optional[AIRegistry] = None


def load_registry(force_reload: bool = False) -> AIRegistry:
    """Return the default registry, parsing RAW_AI_TABLE on first use."""
    global _cached_registry

    if _cached_registry is None or force_reload:
        _cached_registry = AIRegistry.from_table(RAW_AI_TABLE)

    return _cached_registry
