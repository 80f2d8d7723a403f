"""Casbin rule table definition.

Every rule is stored as one fixed-width row: the rule type in ``p_type`` and
up to six positional values in ``v0``..``v5``. Unused trailing positions hold
the empty string, never ``NULL``, so the columns can be indexed and compared
without null handling. The table name is configurable; each name gets its own
mapped class, created once and reused.
"""

from __future__ import annotations

import re
from typing import Dict

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from casbin_rule_adapter.database.base import Base

DEFAULT_TABLE_NAME = "casbin_rule"
FIELD_LENGTH = 100


def _value_column() -> Mapped[str]:
    return mapped_column(
        String(FIELD_LENGTH),
        index=True,
        nullable=False,
        default="",
        server_default="",
    )


class RuleColumns:
    """Column layout shared by every rule table."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ptype: Mapped[str] = mapped_column(
        "p_type",
        String(FIELD_LENGTH),
        index=True,
        nullable=False,
        default="",
        server_default="",
    )
    v0: Mapped[str] = _value_column()
    v1: Mapped[str] = _value_column()
    v2: Mapped[str] = _value_column()
    v3: Mapped[str] = _value_column()
    v4: Mapped[str] = _value_column()
    v5: Mapped[str] = _value_column()

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__}(ptype={self.ptype!r}, "
            f"v0={self.v0!r}, v1={self.v1!r}, v2={self.v2!r}, "
            f"v3={self.v3!r}, v4={self.v4!r}, v5={self.v5!r})>"
        )


class CasbinRule(RuleColumns, Base):
    """Rule table under the default name."""

    __tablename__ = DEFAULT_TABLE_NAME


_rule_models: Dict[str, type[RuleColumns]] = {DEFAULT_TABLE_NAME: CasbinRule}


def create_rule_model(table_name: str = DEFAULT_TABLE_NAME) -> type[RuleColumns]:
    """Return the mapped rule class for ``table_name``, creating it on first use."""
    model = _rule_models.get(table_name)
    if model is None:
        class_name = "CasbinRule_" + re.sub(r"\W", "_", table_name)
        model = type(class_name, (RuleColumns, Base), {"__tablename__": table_name})
        _rule_models[table_name] = model
    return model


__all__ = ["DEFAULT_TABLE_NAME", "FIELD_LENGTH", "RuleColumns", "CasbinRule", "create_rule_model"]
