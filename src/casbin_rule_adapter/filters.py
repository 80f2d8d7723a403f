"""
Filter construction for selective policy loading and removal.

A Filter lists acceptable values per column. Empty lists leave a column
unconstrained, non-empty lists become an ``IN`` predicate, and all
predicates are combined with AND.

Removal by field index uses a positional template instead: the given values
are placed contiguously from ``field_index`` and every other position is a
wildcard.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields as dataclass_fields
from typing import Any, Dict, List, Sequence

from sqlalchemy import or_
from sqlalchemy.sql.expression import ColumnElement

from casbin_rule_adapter.codec import FIELD_NAMES, MAX_FIELDS, RuleRecord
from casbin_rule_adapter.core.exceptions import InvalidArgument, InvalidFilterType

FILTER_KEYS = ("ptype", *FIELD_NAMES)
_KEY_ALIASES = {"p_type": "ptype"}


@dataclass
class Filter:
    """Acceptable values per column; an empty list means no constraint."""

    ptype: List[str] = field(default_factory=list)
    v0: List[str] = field(default_factory=list)
    v1: List[str] = field(default_factory=list)
    v2: List[str] = field(default_factory=list)
    v3: List[str] = field(default_factory=list)
    v4: List[str] = field(default_factory=list)
    v5: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        for item in dataclass_fields(self):
            setattr(self, item.name, _as_value_list(item.name, getattr(self, item.name)))

    def constraints(self) -> Dict[str, List[str]]:
        """Constrained columns only, in column order."""
        return {key: getattr(self, key) for key in FILTER_KEYS if getattr(self, key)}

    def is_empty(self) -> bool:
        return not self.constraints()

    @classmethod
    def from_mapping(cls, data: Mapping) -> "Filter":
        values: Dict[str, Any] = {}
        for key, value in data.items():
            name = _KEY_ALIASES.get(key, key)
            if name not in FILTER_KEYS:
                raise InvalidFilterType(f"unknown filter key {key!r}; expected one of {FILTER_KEYS}")
            values[name] = value
        return cls(**values)

    @classmethod
    def coerce(cls, candidate: Any) -> "Filter":
        """Accept a Filter, a mapping, or any object exposing filter attributes."""
        if isinstance(candidate, cls):
            return candidate
        if isinstance(candidate, Mapping):
            return cls.from_mapping(candidate)
        if candidate is not None and any(hasattr(candidate, key) for key in FILTER_KEYS):
            return cls(**{key: getattr(candidate, key, None) or [] for key in FILTER_KEYS})
        raise InvalidFilterType(
            f"invalid filter type {type(candidate).__name__}; expected Filter or a mapping of column values"
        )


def _as_value_list(name: str, value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple, set, frozenset)):
        raise InvalidFilterType(
            f"filter values for {name!r} must be a list of strings, got {type(value).__name__}"
        )
    items = list(value)
    for item in items:
        if not isinstance(item, str):
            raise InvalidFilterType(
                f"filter values for {name!r} must be strings, got {type(item).__name__}"
            )
    return items


def build_filter_criteria(rule_model: type, policy_filter: Filter) -> List[ColumnElement[bool]]:
    """``IN`` predicates for every constrained column."""
    return [
        getattr(rule_model, key).in_(values)
        for key, values in policy_filter.constraints().items()
    ]


def build_field_template(ptype: str, field_index: int, field_values: Sequence[str]) -> Dict[str, str]:
    """Equality template for removal by field index.

    Empty strings in ``field_values`` are wildcards at their position, as are
    all positions outside ``[field_index, field_index + len(field_values))``.
    """
    if not isinstance(field_index, int) or isinstance(field_index, bool):
        raise InvalidArgument(f"field index must be an integer, got {field_index!r}")
    if field_index < 0:
        raise InvalidArgument(f"field index {field_index} must not be negative")
    if field_index + len(field_values) > MAX_FIELDS:
        raise InvalidArgument(
            f"{len(field_values)} values from index {field_index} exceed {MAX_FIELDS} fields"
        )

    template = {"ptype": ptype}
    for offset, value in enumerate(field_values):
        if not isinstance(value, str):
            raise InvalidArgument(f"field value must be a string, got {type(value).__name__}")
        if value:
            template[FIELD_NAMES[field_index + offset]] = value
    return template


def template_criteria(rule_model: type, template: Mapping) -> List[ColumnElement[bool]]:
    return [getattr(rule_model, key) == value for key, value in template.items()]


def exact_match_criteria(rule_model: type, record: RuleRecord) -> List[ColumnElement[bool]]:
    """Full-column equality; empty positions also match ``NULL``."""
    criteria: List[ColumnElement[bool]] = [rule_model.ptype == record.ptype]
    for name, value in zip(FIELD_NAMES, record.fields):
        column = getattr(rule_model, name)
        if value:
            criteria.append(column == value)
        else:
            criteria.append(or_(column == "", column.is_(None)))
    return criteria


__all__ = [
    "Filter",
    "FILTER_KEYS",
    "build_filter_criteria",
    "build_field_template",
    "template_criteria",
    "exact_match_criteria",
]
