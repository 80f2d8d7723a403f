"""Rule <-> row encoding.

A policy rule is a rule type plus zero to six string fields. Storage uses a
fixed-width row, so the encoding pads the unused trailing positions with the
empty string and decoding reads fields up to the first empty position.

Because "absent" and "empty" share one representation, a rule whose field
is itself the empty string decodes truncated at that field. Callers that
need empty values must not store them positionally.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from casbin_rule_adapter.core.exceptions import InvalidArgument, InvalidArity

MAX_FIELDS = 6
FIELD_NAMES = tuple(f"v{i}" for i in range(MAX_FIELDS))
LINE_SEPARATOR = ", "


@dataclass(frozen=True)
class RuleRecord:
    """Fixed-width representation of one stored rule."""

    ptype: str
    v0: str = ""
    v1: str = ""
    v2: str = ""
    v3: str = ""
    v4: str = ""
    v5: str = ""

    @property
    def fields(self) -> Tuple[str, ...]:
        return (self.v0, self.v1, self.v2, self.v3, self.v4, self.v5)

    @property
    def arity(self) -> int:
        """Number of leading non-empty fields."""
        count = 0
        for value in self.fields:
            if not value:
                break
            count += 1
        return count

    def as_row(self) -> dict:
        """Column values for an insert statement."""
        row = {"ptype": self.ptype}
        row.update(zip(FIELD_NAMES, self.fields))
        return row

    @classmethod
    def from_row(cls, row: Any) -> "RuleRecord":
        """Build a record from a mapped row; ``NULL`` columns read as empty."""
        values = [getattr(row, name) or "" for name in FIELD_NAMES]
        return cls(row.ptype or "", *values)

    def __str__(self) -> str:
        ptype, fields = decode_rule(self)
        return rule_to_line(ptype, fields)


def encode_rule(ptype: str, rule: Sequence[str]) -> RuleRecord:
    """Encode ``rule`` of type ``ptype`` into a fixed-width record.

    Raises:
        InvalidArity: the rule has more than six fields.
        InvalidArgument: the type or a field is not a string.
    """
    if not isinstance(ptype, str) or not ptype:
        raise InvalidArgument(f"rule type must be a non-empty string, got {ptype!r}")

    values = list(rule)
    if len(values) > MAX_FIELDS:
        raise InvalidArity(ptype, len(values), MAX_FIELDS)

    for position, value in enumerate(values):
        if not isinstance(value, str):
            raise InvalidArgument(
                f"field v{position} of rule type '{ptype}' must be a string, got {type(value).__name__}"
            )

    return RuleRecord(ptype, *values)


def decode_rule(record: RuleRecord) -> Tuple[str, List[str]]:
    """Return ``(ptype, fields)`` keeping the fields before the first empty one."""
    fields: List[str] = []
    for value in record.fields:
        if not value:
            break
        fields.append(value)
    return record.ptype, fields


def rule_to_line(ptype: str, rule: Sequence[str]) -> str:
    """Single-column text form: ``"p, alice, data1, read"``."""
    return LINE_SEPARATOR.join([ptype, *rule])


def line_to_rule(line: str) -> Optional[Tuple[str, List[str]]]:
    """Parse the text form back into ``(ptype, fields)``; blank lines give ``None``."""
    if not line or not line.strip():
        return None

    tokens = line.rstrip("\r\n").split(LINE_SEPARATOR)
    ptype, fields = tokens[0].strip(), tokens[1:]
    if len(fields) > MAX_FIELDS:
        raise InvalidArity(ptype, len(fields), MAX_FIELDS)
    return decode_rule(RuleRecord(ptype, *fields))


__all__ = [
    "MAX_FIELDS",
    "FIELD_NAMES",
    "RuleRecord",
    "encode_rule",
    "decode_rule",
    "rule_to_line",
    "line_to_rule",
]
