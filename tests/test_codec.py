"""
Unit tests for rule <-> row encoding

Covers the fixed-width record, the arity bound, the trailing-empty
convention and the single-line text form.
"""

import pytest

from casbin_rule_adapter.codec import (
    MAX_FIELDS,
    RuleRecord,
    decode_rule,
    encode_rule,
    line_to_rule,
    rule_to_line,
)
from casbin_rule_adapter.core.exceptions import InvalidArgument, InvalidArity

pytestmark = pytest.mark.unit


class TestEncodeDecode:
    """Round trips through the fixed-width record"""

    @pytest.mark.parametrize("arity", range(MAX_FIELDS + 1))
    def test_round_trip_for_every_supported_arity(self, arity):
        fields = [f"value{i}" for i in range(arity)]

        assert decode_rule(encode_rule("p", fields)) == ("p", fields)

    def test_encode_pads_trailing_positions(self):
        record = encode_rule("g", ["alice", "admin"])

        assert record == RuleRecord("g", "alice", "admin")
        assert record.fields == ("alice", "admin", "", "", "", "")
        assert record.arity == 2

    def test_encode_rejects_more_than_six_fields(self):
        with pytest.raises(InvalidArity) as exc_info:
            encode_rule("p", ["a", "b", "c", "d", "e", "f", "g"])

        assert exc_info.value.arity == 7
        assert exc_info.value.limit == MAX_FIELDS
        assert isinstance(exc_info.value, ValueError)

    def test_encode_rejects_non_string_fields(self):
        with pytest.raises(InvalidArgument):
            encode_rule("p", ["alice", 42, "read"])

    def test_encode_rejects_empty_rule_type(self):
        with pytest.raises(InvalidArgument):
            encode_rule("", ["alice"])

    def test_encode_accepts_tuples(self):
        assert encode_rule("p", ("alice", "data1", "read")).v2 == "read"

    def test_empty_field_truncates_decoded_rule(self):
        """An empty value cannot be told apart from an absent one"""
        record = encode_rule("p", ["alice", "", "read"])

        assert decode_rule(record) == ("p", ["alice"])

    def test_as_row_uses_attribute_names(self):
        row = encode_rule("p", ["alice", "data1", "read"]).as_row()

        assert row == {
            "ptype": "p",
            "v0": "alice",
            "v1": "data1",
            "v2": "read",
            "v3": "",
            "v4": "",
            "v5": "",
        }

    def test_from_row_reads_null_as_empty(self):
        class Row:
            ptype = "p"
            v0 = "alice"
            v1 = "data1"
            v2 = None
            v3 = None
            v4 = None
            v5 = None

        assert RuleRecord.from_row(Row()) == RuleRecord("p", "alice", "data1")

    def test_records_are_immutable(self):
        record = encode_rule("p", ["alice"])

        with pytest.raises(AttributeError):
            record.v0 = "bob"


class TestTextForm:
    """Legacy single-column line format"""

    def test_rule_to_line(self):
        assert rule_to_line("p", ["alice", "data1", "read"]) == "p, alice, data1, read"

    def test_line_round_trip(self):
        line = rule_to_line("g", ["alice", "data2_admin"])

        assert line_to_rule(line) == ("g", ["alice", "data2_admin"])

    @pytest.mark.parametrize("line", ["", "   ", "\n"])
    def test_blank_line_parses_to_nothing(self, line):
        assert line_to_rule(line) is None

    def test_trailing_newline_is_ignored(self):
        assert line_to_rule("p, bob, data2, write\n") == ("p", ["bob", "data2", "write"])

    def test_type_only_line(self):
        assert line_to_rule("p") == ("p", [])

    def test_line_with_too_many_fields(self):
        with pytest.raises(InvalidArity):
            line_to_rule("p, 1, 2, 3, 4, 5, 6, 7")

    def test_record_str_is_line_form(self):
        assert str(encode_rule("p", ["alice", "data1", "read"])) == "p, alice, data1, read"
