"""
Tests for the AI registry.
"""

import pytest

from gs1_scanlog.core.ai_registry import (
    AIDefinition,
    AIFamily,
    AIRegistry,
    LengthClass,
    load_registry,
    parse_ai_table,
)


class TestLookup:

    def setup_method(self):
        self.registry = load_registry()

    def test_fixed_ai(self):
        entry = self.registry.lookup("01")
        assert entry is not None
        assert entry.length_class is LengthClass.FIXED
        assert entry.length == 14
        assert entry.check_digit
        assert entry.description == "GTIN"

    def test_variable_ai(self):
        entry = self.registry.lookup("10")
        assert entry.length_class is LengthClass.VARIABLE
        assert entry.length == 20
        assert entry.data_type == "X"

    def test_date_and_expiry_flags(self):
        assert self.registry.lookup("17").expiry
        assert self.registry.lookup("15").expiry
        assert self.registry.lookup("16").expiry
        assert self.registry.lookup("11").date_format == "YYMMDD"
        assert not self.registry.lookup("11").expiry

    def test_three_and_four_digit_codes(self):
        assert self.registry.lookup("240").length == 30
        assert self.registry.lookup("8005").length == 6
        assert self.registry.lookup("414").check_digit

    def test_family_member_is_synthesized(self):
        entry = self.registry.lookup("3102")
        assert entry.code == "3102"
        assert entry.decimal_places == 2
        assert entry.unit == "kg"
        assert entry.length == 6
        assert entry.description == "Net Weight (kg) - 2 dec"

    def test_currency_family(self):
        entry = self.registry.lookup("3932")
        assert entry.currency
        assert entry.length == 18
        assert entry.decimal_places == 2

    def test_internal_range(self):
        for code in ("91", "95", "99"):
            entry = self.registry.lookup(code)
            assert entry.internal
            assert entry.length == 90
        assert self.registry.lookup("90").internal
        assert not self.registry.lookup("21").internal

    def test_unknown(self):
        assert self.registry.lookup("77") is None
        assert self.registry.lookup("3172") is None
        assert self.registry.describe("77") == "Unknown"
        assert "77" not in self.registry
        assert "3103" in self.registry


class TestIsKnown:

    def setup_method(self):
        self.registry = load_registry()

    @pytest.mark.parametrize("candidate", ["01", "10", "240", "8005", "310", "3105", "393", "99"])
    def test_known_prefixes(self, candidate):
        assert self.registry.is_known(candidate)

    @pytest.mark.parametrize("candidate", ["7", "77", "999", "31", "12345", "3A02"])
    def test_unknown_prefixes(self, candidate):
        assert not self.registry.is_known(candidate)

    def test_family_for(self):
        family = self.registry.family_for("3925")
        assert isinstance(family, AIFamily)
        assert family.prefix == "392"
        assert self.registry.family_for("01") is None


class TestMatch:

    def setup_method(self):
        self.registry = load_registry()

    def test_longest_match_first(self):
        # 3102 must not be read as an unknown 31 or 310
        assert self.registry.match("3102000123").code == "3102"

    def test_match_at_position(self):
        text = "0106285096000842" + "17290131"
        assert self.registry.match(text, 16).code == "17"

    def test_non_digits(self):
        assert self.registry.match("AB1234") is None
        assert self.registry.match("1") is None


class TestConstruction:

    def _definition(self, code):
        return AIDefinition(code=code, description="Test", length_class=LengthClass.FIXED, length=4)

    def test_duplicate_code_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            AIRegistry([self._definition("01"), self._definition("01")])

    def test_invalid_code_rejected(self):
        with pytest.raises(ValueError, match="Invalid"):
            AIRegistry([self._definition("1")])

    def test_duplicate_family_rejected(self):
        family = AIFamily(prefix="310", template=self._definition("3100"))
        with pytest.raises(ValueError):
            AIRegistry([], [family, family])

    def test_custom_table(self):
        registry = AIRegistry.from_table("""
        01   *   N14,csum   core   # GTIN
        7003 *   N10               # Expiration Date and Time
        """)
        assert len(registry) == 2
        assert registry.lookup("7003").length == 10
        assert registry.lookup("01").core

    def test_table_line_without_title(self):
        with pytest.raises(ValueError, match="Missing title"):
            parse_ai_table("01 * N14")

    def test_cached_registry(self):
        assert load_registry() is load_registry()
        assert load_registry(force_reload=True) is not None

    def test_descriptions_cover_families(self):
        descriptions = load_registry().descriptions()
        assert descriptions["01"] == "GTIN"
        assert descriptions["310n"] == "Net Weight (kg)"
