"""
Tests for the GS1 element string decoder.

Covers scans with and without GS separators, including real
pharmaceutical packs where variable-length fields are concatenated
without FNC1.
"""

import pytest

from gs1_scanlog.core.decoder import (
    GS,
    PLAIN_TEXT_KEY,
    ErrorCode,
    ParseOptions,
    decode,
    decode_fields,
)


def warning_codes(result):
    return [w.code for w in result.warnings]


class TestGroundTruthCases:
    """
    Real packaging scans without separators.
    """

    def test_expiry_then_lot_to_end(self):
        """
        (01)07613034383979 (17)231231 (10)1B12345

        The AI 10 prefix consumes the characters "10"; the lot runs to the
        end of the input.
        """
        result = decode("010761303438397917231231101B12345")

        assert result.fields == {
            "01": "07613034383979",
            "17": "231231",
            "10": "1B12345",
        }
        assert not result.warnings

    def test_lot_first_then_gtin(self):
        """
        (10)B12345 (01)07613034383979 (17)231231

        The GTIN ends the lot even though its check digit is wrong; check
        digits are judged when interpreting, not when splitting.
        """
        result = decode("10B12345" + "0107613034383979" + "17231231")

        assert result.fields == {
            "10": "B12345",
            "01": "07613034383979",
            "17": "231231",
        }
        assert not result.warnings

    def test_case_a_gb2c_serial(self):
        """(01)06286740000249 (17)280430 (10)GB2C (21)71490437969853"""
        result = decode("01062867400002491728043010GB2C2171490437969853")

        elements = result.fields
        assert elements["01"] == "06286740000249"
        assert elements["17"] == "280430"
        assert elements["10"] == "GB2C"
        assert elements["21"] == "71490437969853"

        ai_order = [elem.ai for elem in result.elements]
        assert ai_order == ["01", "17", "10", "21"]

    def test_case_b_hn8x_serial(self):
        """(01)06285096002877 (17)260331 (10)HN8X (21)72869453519267"""
        result = decode("01062850960028771726033110HN8X2172869453519267")

        assert result.fields == {
            "01": "06285096002877",
            "17": "260331",
            "10": "HN8X",
            "21": "72869453519267",
        }

    def test_case_c_embedded_17_in_21(self):
        """
        (01)06291103731555 (21)64SSI54CE688QZ (17)270214 (10)C601

        The expiry date follows the serial; a second AI 21 further on is
        not taken as a boundary.
        """
        result = decode("01062911037315552164SSI54CE688QZ1727021410C601")

        assert result.fields == {
            "01": "06291103731555",
            "21": "64SSI54CE688QZ",
            "17": "270214",
            "10": "C601",
        }
        assert [elem.ai for elem in result.elements] == ["01", "21", "17", "10"]

    def test_case_d_avoid_internal_94_99(self):
        """(01)06223000010365 (17)270903 (10)305644 (21)30564439945626"""
        result = decode("010622300001036517270903103056442130564439945626")

        assert result.fields == {
            "01": "06223000010365",
            "17": "270903",
            "10": "305644",
            "21": "30564439945626",
        }
        internal = [elem.ai for elem in result.elements if elem.ai.startswith("9")]
        assert internal == []

    def test_case_e_avoid_90_and_240(self):
        """(01)06251159026067 (17)290400 (10)456220 (21)06902409792902"""
        result = decode("010625115902606717290400104562202106902409792902")

        assert result.fields == {
            "01": "06251159026067",
            "17": "290400",
            "10": "456220",
            "21": "06902409792902",
        }


class TestSeparators:

    def test_gs_delimited_fields(self):
        result = decode(f"010628509600084210LOT1{GS}21SER42")
        assert result.gs_seen
        assert result.fields == {"01": "06285096000842", "10": "LOT1", "21": "SER42"}

    def test_variable_value_with_gs_ignores_max_length(self):
        lot = "A" * 25
        result = decode(f"10{lot}{GS}21X")
        assert result.fields["10"] == lot
        assert result.fields["21"] == "X"

    def test_gs_after_fixed_value_consumed(self):
        result = decode(f"0106285096000842{GS}17290131")
        assert result.fields == {"01": "06285096000842", "17": "290131"}
        assert not result.warnings

    def test_leading_and_trailing_gs(self):
        result = decode(f"{GS}10ABC{GS}")
        assert result.fields == {"10": "ABC"}

    def test_other_control_characters_become_gs(self):
        result = decode("10ABC\x1e21XYZ")
        assert result.fields == {"10": "ABC", "21": "XYZ"}

    def test_textual_gs_alias(self):
        result = decode("10ABC<GS>21XYZ")
        assert result.fields == {"10": "ABC", "21": "XYZ"}

    def test_normalization_can_be_disabled(self):
        options = ParseOptions(normalize_separators=False, gs_aliases=())
        result = decode("10ABC\x1eXYZ", options=options)
        assert result.fields == {"10": "ABC\x1eXYZ"}
        assert not result.gs_seen

    def test_symbology_identifier_stripped(self):
        result = decode("]d20106285096000842")
        assert result.symbology_identifier == "GS1 DataMatrix"
        assert result.fields == {"01": "06285096000842"}

    def test_surrounding_whitespace_trimmed(self):
        assert decode_fields("0106285096000842\r\n") == {"01": "06285096000842"}


class TestFixedLength:

    def test_fixed_round_trip(self):
        values = {
            "00": "106141411234567897",
            "01": "06285096000842",
            "11": "240101",
            "17": "290131",
            "410": "0614141000012",
            "3103": "001250",
        }
        encoded = "".join(ai + value for ai, value in values.items())
        assert decode_fields(encoded) == values

    def test_truncated_fixed_value(self):
        result = decode("01062850960008")
        assert result.fields == {"01": "062850960008"}
        assert result.elements[0].truncated
        assert warning_codes(result) == [ErrorCode.TRUNCATED_DATA]

    def test_gs_inside_fixed_value(self):
        result = decode(f"011234{GS}10ABC")
        assert result.fields == {"01": "1234", "10": "ABC"}
        assert ErrorCode.TRUNCATED_DATA in warning_codes(result)

    def test_decimal_family(self):
        result = decode("01062850960008423102000123")
        assert result.fields == {"01": "06285096000842", "3102": "000123"}


class TestStopConditions:

    def test_unknown_ai_returns_partial_result(self):
        result = decode("01062850960008427777ABC")
        assert result.fields == {"01": "06285096000842"}
        assert warning_codes(result) == [ErrorCode.UNKNOWN_AI]
        assert result.warnings[0].at_index == 16
        assert not result.complete

    def test_unknown_ai_logged(self, caplog):
        with caplog.at_level("WARNING", logger="gs1_scanlog.core.decoder"):
            decode("01062850960008427777ABC")
        assert "UNKNOWN_AI" in caplog.text

    def test_plain_text(self):
        result = decode("HELLO WORLD")
        assert result.fields == {PLAIN_TEXT_KEY: "HELLO WORLD"}
        assert result.is_plain_text
        assert not result.warnings

    def test_multi_line_plain_text(self):
        result = decode("Lot details\nsee label\tbox 4\r\n")
        assert result.fields == {PLAIN_TEXT_KEY: "Lot details\nsee label\tbox 4"}
        assert result.is_plain_text
        assert not result.warnings

    def test_text_with_gs_is_not_plain(self):
        result = decode(f"ABC{GS}DEF")
        assert result.fields == {}
        assert warning_codes(result) == [ErrorCode.UNKNOWN_AI]

    def test_plain_url(self):
        url = "https://example.com/item?id=5"
        assert decode_fields(url) == {PLAIN_TEXT_KEY: url}

    @pytest.mark.parametrize("raw", ["", None, "   ", GS])
    def test_empty_input(self, raw):
        result = decode(raw)
        assert result.fields == {}
        assert warning_codes(result) == [ErrorCode.EMPTY_INPUT]

    def test_variable_value_capped_without_separator(self):
        result = decode("10" + "A" * 25)
        assert result.fields["10"] == "A" * 20
        codes = warning_codes(result)
        assert ErrorCode.MISSING_SEPARATOR in codes
        assert ErrorCode.UNKNOWN_AI in codes

    def test_passed_over_core_ai_flagged(self):
        # The serial could also end at "10", making LOT a batch number
        result = decode("21ABC10LOT17231231")
        assert result.fields == {"21": "ABC10LOT", "17": "231231"}
        assert warning_codes(result) == [ErrorCode.AMBIGUOUS_SPLIT]
        assert result.warnings[0].at_index == 5
        assert result.warnings[0].ai == "21"

    def test_unambiguous_split_not_flagged(self):
        result = decode("01062867400002491728043010GB2C2171490437969853")
        assert ErrorCode.AMBIGUOUS_SPLIT not in warning_codes(result)

    def test_repeated_ai_keeps_last_value(self):
        result = decode(f"10AAA{GS}10BBB")
        assert result.fields == {"10": "BBB"}
        assert warning_codes(result) == [ErrorCode.DUPLICATE_AI]
        assert len(result.elements) == 2

    def test_never_raises_on_odd_input(self):
        for raw in ["0", "01", "]d2", "\x00\x01", "9" * 600, "10" + "1" * 700, "3102", "🙂"]:
            decode(raw)


class TestDecodeResult:

    def test_to_dict(self):
        data = decode(f"]C110ABC{GS}21X").to_dict()
        assert data["symbology_identifier"] == "GS1-128"
        assert data["fields"] == {"10": "ABC", "21": "X"}
        assert data["gs_seen"] is True
        assert data["warnings"] == []

    def test_element_positions(self):
        result = decode("0106285096000842" + "10ABC")
        first, second = result.elements
        assert (first.start_index, first.end_index) == (0, 16)
        assert (second.start_index, second.end_index) == (16, 21)
        assert result.complete
