"""SQLAlchemy policy adapter for casbin.

The adapter persists the rules of a casbin model into a single table, one
row per rule, and loads them back. Every operation runs in its own
transaction, so batch and update calls either apply completely or leave the
table untouched.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from casbin import persist
from loguru import logger
from sqlalchemy.engine import URL, Engine

from casbin_rule_adapter.codec import RuleRecord, decode_rule, encode_rule
from casbin_rule_adapter.config import Settings, settings as default_settings
from casbin_rule_adapter.core.exceptions import InvalidArgument
from casbin_rule_adapter.database.init_db import ensure_database, ensure_table
from casbin_rule_adapter.database.models import create_rule_model
from casbin_rule_adapter.database.session import RuleStore, create_store_engine
from casbin_rule_adapter.filters import (
    Filter,
    build_field_template,
    build_filter_criteria,
    exact_match_criteria,
    template_criteria,
)

SECTIONS = ("p", "g")


class PolicyAdapter(persist.Adapter, persist.adapters.UpdateAdapter):
    """Stores casbin policy rules in a relational table.

    Args:
        engine_or_url: an existing SQLAlchemy ``Engine`` (used as-is) or a
            database URL. Defaults to ``settings.database_url``.
        table_name: rule table name, defaults to ``settings.table_name``.
        db_specified: when false and a URL is given, the database named by
            ``settings.database_name`` is created if missing and used
            instead of the one in the URL.
        settings: configuration; the module level settings by default.
        engine_kwargs: extra keyword arguments for ``create_engine``.

    The adapter starts unfiltered. A successful ``load_filtered_policy``
    marks it filtered until the next full ``load_policy``.
    """

    def __init__(
        self,
        engine_or_url: Engine | URL | str | None = None,
        table_name: Optional[str] = None,
        db_specified: Optional[bool] = None,
        settings: Optional[Settings] = None,
        engine_kwargs: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.settings = settings or default_settings
        table_name = table_name or self.settings.table_name
        if db_specified is None:
            db_specified = self.settings.db_specified
        if engine_or_url is None:
            engine_or_url = self.settings.database_url

        if isinstance(engine_or_url, Engine):
            engine = engine_or_url
            self._owns_engine = False
        else:
            url = engine_or_url
            if not db_specified:
                url = ensure_database(url, self.settings.database_name)
            engine = create_store_engine(url, self.settings, **(engine_kwargs or {}))
            self._owns_engine = True

        self._store = RuleStore(engine, create_rule_model(table_name))
        self._filtered = False

        try:
            ensure_table(self._store)
        except Exception:
            self.close()
            raise

        logger.info(f"Policy adapter ready on table '{table_name}' ({engine.dialect.name})")

    @classmethod
    def from_settings(cls, settings: Settings) -> "PolicyAdapter":
        return cls(settings=settings)

    @property
    def table_name(self) -> str:
        return self._store.table_name

    @property
    def store(self) -> RuleStore:
        return self._store

    def close(self) -> None:
        """Release pooled connections of an engine the adapter created."""
        if self._owns_engine:
            self._store.close()

    def __enter__(self) -> "PolicyAdapter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_policy(self, model) -> None:
        """Append every stored rule to ``model``."""
        with self._store.session_scope() as store:
            records = store.find()

        loaded = self._load_records(records, model)
        self._filtered = False
        logger.debug(f"Loaded {loaded} of {len(records)} rules from '{self.table_name}'")

    def load_filtered_policy(self, model, filter) -> None:
        """Append the stored rules matching ``filter`` to ``model``.

        ``filter`` is a :class:`Filter`, an object exposing the same
        attributes, or a mapping of column name to accepted values.
        """
        policy_filter = Filter.coerce(filter)
        criteria = build_filter_criteria(self._store.rule_model, policy_filter)

        with self._store.session_scope() as store:
            records = store.find(*criteria)

        loaded = self._load_records(records, model)
        self._filtered = True
        logger.debug(f"Loaded {loaded} filtered rules from '{self.table_name}'")

    def is_filtered(self) -> bool:
        return self._filtered

    # ------------------------------------------------------------------
    # Saving and adding
    # ------------------------------------------------------------------

    def save_policy(self, model) -> bool:
        """Replace the table contents with every rule of ``model``."""
        records = [
            encode_rule(ptype, rule)
            for sec in SECTIONS
            for ptype, assertion in _section(model, sec).items()
            for rule in assertion.policy
        ]

        with self._store.session_scope() as store:
            removed = store.clear()
            store.insert_many(records)

        logger.debug(f"Saved {len(records)} rules to '{self.table_name}' (replaced {removed})")
        return True

    def add_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        record = encode_rule(ptype, rule)
        with self._store.session_scope() as store:
            store.insert(record)
        return True

    def add_policies(self, sec: str, ptype: str, rules: Sequence[Sequence[str]]) -> bool:
        with self._store.session_scope() as store:
            for rule in rules:
                store.insert(encode_rule(ptype, rule))
        logger.debug(f"Added {len(rules)} '{ptype}' rules")
        return True

    # ------------------------------------------------------------------
    # Removing
    # ------------------------------------------------------------------

    def remove_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        """Delete the rows equal to ``rule``; trailing positions must be empty."""
        criteria = exact_match_criteria(self._store.rule_model, encode_rule(ptype, rule))
        with self._store.session_scope() as store:
            removed = store.delete(*criteria)
        return removed > 0

    def remove_policies(self, sec: str, ptype: str, rules: Sequence[Sequence[str]]) -> bool:
        removed = 0
        with self._store.session_scope() as store:
            for rule in rules:
                criteria = exact_match_criteria(self._store.rule_model, encode_rule(ptype, rule))
                removed += store.delete(*criteria)
        logger.debug(f"Removed {removed} rows for {len(rules)} '{ptype}' rules")
        return True

    def remove_filtered_policy(self, sec: str, ptype: str, field_index: int, *field_values: str) -> bool:
        """Delete the rows whose fields from ``field_index`` on equal ``field_values``.

        Returns ``False`` when no row matched.
        """
        template = build_field_template(ptype, field_index, field_values)
        criteria = template_criteria(self._store.rule_model, template)
        with self._store.session_scope() as store:
            removed = store.delete(*criteria)
        logger.debug(f"Removed {removed} rows matching {template}")
        return removed > 0

    # ------------------------------------------------------------------
    # Updating
    # ------------------------------------------------------------------

    def update_policy(self, sec: str, ptype: str, old_rule: Sequence[str], new_rule: Sequence[str]) -> None:
        """Replace ``old_rule`` with ``new_rule`` in one transaction."""
        self.update_policies(sec, ptype, [old_rule], [new_rule])

    def update_policies(
        self,
        sec: str,
        ptype: str,
        old_rules: Sequence[Sequence[str]],
        new_rules: Sequence[Sequence[str]],
    ) -> None:
        """Replace ``old_rules[i]`` with ``new_rules[i]``; all pairs or none.

        Old rules are matched against the table as it was before the call.
        A pair whose old rule is not stored inserts nothing.
        """
        if len(old_rules) != len(new_rules):
            raise InvalidArgument(
                f"old and new rule lists differ in length ({len(old_rules)} != {len(new_rules)})"
            )

        rule_model = self._store.rule_model
        with self._store.session_scope() as store:
            replacements = [
                (exact_match_criteria(rule_model, encode_rule(ptype, old_rule)), encode_rule(ptype, new_rule))
                for old_rule, new_rule in zip(old_rules, new_rules)
            ]
            removed = store.update(replacements)
        logger.debug(f"Replaced {removed} rows for {len(old_rules)} '{ptype}' rule pairs")

    def update_filtered_policies(
        self,
        sec: str,
        ptype: str,
        new_rules: Sequence[Sequence[str]],
        field_index: int,
        *field_values: str,
    ) -> List[List[str]]:
        """Replace the rows matching the field filter with ``new_rules``.

        Returns the removed rules so callers can audit or restore them.
        """
        template = build_field_template(ptype, field_index, field_values)
        criteria = template_criteria(self._store.rule_model, template)

        with self._store.session_scope() as store:
            old_records = store.find(*criteria)
            store.delete(*criteria)
            for rule in new_rules:
                store.insert(encode_rule(ptype, rule))

        logger.debug(f"Replaced {len(old_records)} rows matching {template} with {len(new_rules)} rules")
        return [decode_rule(record)[1] for record in old_records]

    # ------------------------------------------------------------------

    def _load_records(self, records: Sequence[RuleRecord], model) -> int:
        loaded = 0
        for record in records:
            ptype, rule = decode_rule(record)
            assertions = _section(model, ptype[:1])
            if ptype not in assertions:
                logger.debug(f"Skipping rule of undeclared type '{ptype}': {record}")
                continue
            assertions[ptype].policy.append(rule)
            loaded += 1
        return loaded


def _section(model, sec: str) -> dict:
    return model.model.get(sec) or {}


__all__ = ["PolicyAdapter", "SECTIONS"]
