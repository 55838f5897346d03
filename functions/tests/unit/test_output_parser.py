"""Unit tests for oracle output decoding."""

import pytest

from config.errors import ErrorCode, OracleOutputMalformed
from services.output_parser import decode_plan_output, salvage_decode, strict_decode
from tests.fixtures.mock_costing_data import (
    get_fenced_oracle_text,
    get_malformed_oracle_text,
    get_valid_oracle_plan,
    get_valid_oracle_text,
    get_wrapped_oracle_text,
)


class TestStrictDecode:
    """Tests for the strict stage."""

    def test_decodes_object(self):
        assert strict_decode(get_valid_oracle_text()) == get_valid_oracle_plan()

    def test_wrapped_text_is_rejected(self):
        assert strict_decode(get_wrapped_oracle_text()) is None

    @pytest.mark.parametrize("text", [None, "", "[1, 2]", "42", '"plan"', "null"])
    def test_non_objects_are_rejected(self, text):
        assert strict_decode(text) is None


class TestSalvageDecode:
    """Tests for the salvage stage."""

    def test_wrapped_text(self):
        assert salvage_decode(get_wrapped_oracle_text()) == get_valid_oracle_plan()

    def test_fenced_text(self):
        assert salvage_decode(get_fenced_oracle_text()) == get_valid_oracle_plan()

    @pytest.mark.parametrize("text", [None, "", "no braces", "} backwards {", "{not json}"])
    def test_nothing_to_salvage(self, text):
        assert salvage_decode(text) is None


class TestDecodePlanOutput:
    """Tests for decode_plan_output."""

    def test_strict_text(self):
        assert decode_plan_output(get_valid_oracle_text()) == get_valid_oracle_plan()

    def test_commentary_around_object(self):
        assert decode_plan_output(get_wrapped_oracle_text()) == get_valid_oracle_plan()

    def test_malformed_raises_with_excerpt(self):
        text = get_malformed_oracle_text()

        with pytest.raises(OracleOutputMalformed) as exc_info:
            decode_plan_output(text)

        assert exc_info.value.code == ErrorCode.ORACLE_OUTPUT_MALFORMED
        assert exc_info.value.excerpt == text

    def test_excerpt_is_truncated(self):
        text = "x" * 2000

        with pytest.raises(OracleOutputMalformed) as exc_info:
            decode_plan_output(text)

        assert len(exc_info.value.excerpt) == OracleOutputMalformed.EXCERPT_CHARS

    def test_json_array_is_malformed(self):
        with pytest.raises(OracleOutputMalformed):
            decode_plan_output("[1, 2, 3]")

    def test_empty_output_is_malformed(self):
        with pytest.raises(OracleOutputMalformed):
            decode_plan_output("")
