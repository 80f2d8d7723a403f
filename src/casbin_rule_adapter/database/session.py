"""Database engine and rule store sessions."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Sequence, Tuple

from loguru import logger
from sqlalchemy import create_engine, delete, event, select, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from casbin_rule_adapter.codec import RuleRecord
from casbin_rule_adapter.config import Settings
from casbin_rule_adapter.core.exceptions import ConnectivityError, SchemaError


def engine_kwargs(url: str | URL, settings: Settings) -> Dict[str, Any]:
    """Engine options for ``url``: pre-ping, echo and SQLite busy timeout."""
    kwargs: Dict[str, Any] = {
        "echo": settings.db_echo,
        "pool_pre_ping": True,
    }
    if str(url).startswith("sqlite"):
        kwargs.setdefault("connect_args", {})
        kwargs["connect_args"].setdefault("timeout", settings.sqlite_busy_timeout_seconds)
    return kwargs


def create_store_engine(url: str | URL, settings: Settings, **overrides: Any) -> Engine:
    """Create the synchronous engine used by the adapter."""
    kwargs = engine_kwargs(url, settings)
    kwargs.update(overrides)
    engine = create_engine(url, **kwargs)

    if engine.dialect.name == "sqlite":
        journal_mode = settings.sqlite_journal_mode.upper()
        synchronous = settings.sqlite_synchronous.upper()
        busy_timeout_ms = max(settings.sqlite_busy_timeout_seconds, 1) * 1000

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record) -> None:  # pragma: no cover - connection setup
            cursor = dbapi_connection.cursor()
            cursor.execute(f"PRAGMA busy_timeout={busy_timeout_ms}")
            cursor.execute(f"PRAGMA journal_mode={journal_mode}")
            cursor.execute(f"PRAGMA synchronous={synchronous}")
            cursor.close()

    return engine


class StoreSession:
    """Row primitives over one transaction-bound SQLAlchemy session."""

    def __init__(self, session: Session, rule_model: type) -> None:
        self.session = session
        self.rule_model = rule_model

    def find(self, *criteria) -> List[RuleRecord]:
        stmt = select(self.rule_model).where(*criteria).order_by(self.rule_model.id)
        return [RuleRecord.from_row(row) for row in self.session.scalars(stmt)]

    def insert(self, record: RuleRecord) -> None:
        self.session.add(self.rule_model(**record.as_row()))
        self.session.flush()

    def insert_many(self, records: Sequence[RuleRecord]) -> int:
        if not records:
            return 0
        self.session.add_all([self.rule_model(**record.as_row()) for record in records])
        self.session.flush()
        return len(records)

    def delete(self, *criteria) -> int:
        stmt = (
            delete(self.rule_model)
            .where(*criteria)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount

    def find_ids(self, *criteria) -> List[int]:
        stmt = select(self.rule_model.id).where(*criteria).order_by(self.rule_model.id)
        return list(self.session.scalars(stmt))

    def update(self, replacements: Sequence[Tuple[Iterable, RuleRecord]]) -> int:
        """Replace rows pairwise: ``(criteria, record)``.

        Every criteria set is matched against the table before anything
        changes, so a record inserted for one pair is never removed by a
        later pair. Pairs whose criteria match no row insert nothing.
        """
        matched = [(self.find_ids(*criteria), record) for criteria, record in replacements]
        row_ids = sorted({row_id for ids, _ in matched for row_id in ids})

        removed = self.delete(self.rule_model.id.in_(row_ids)) if row_ids else 0
        for ids, record in matched:
            if ids:
                self.insert(record)
        return removed

    def clear(self) -> int:
        return self.delete()


class RuleStore:
    """Owns the engine and the mapped rule class for one table."""

    def __init__(self, engine: Engine, rule_model: type) -> None:
        self.engine = engine
        self.rule_model = rule_model
        self._session_factory = sessionmaker(engine, expire_on_commit=False)

    @property
    def table_name(self) -> str:
        return self.rule_model.__tablename__

    @contextmanager
    def session_scope(self) -> Iterator[StoreSession]:
        """One transaction: commit on success, roll back and re-raise on error."""
        session = self._session_factory()
        try:
            yield StoreSession(session, self.rule_model)
            session.commit()
        except Exception as exc:
            logger.warning(f"Rolling back transaction on '{self.table_name}': {exc}")
            session.rollback()
            raise
        finally:
            session.close()

    def check_connection(self) -> None:
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise ConnectivityError(f"cannot reach policy store: {exc}") from exc

    def create_table(self) -> None:
        try:
            self.rule_model.__table__.create(self.engine, checkfirst=True)
        except SQLAlchemyError as exc:
            raise SchemaError(f"failed to create table '{self.table_name}': {exc}") from exc

    def close(self) -> None:
        self.engine.dispose()


__all__ = [
    "engine_kwargs",
    "create_store_engine",
    "StoreSession",
    "RuleStore",
]
