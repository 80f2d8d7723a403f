"""Database initialization utilities."""

from __future__ import annotations

from pathlib import Path

from loguru import logger
from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from casbin_rule_adapter.core.exceptions import (
    ConnectivityError,
    OperationNotSupportedError,
    SchemaError,
)
from casbin_rule_adapter.database.session import RuleStore


def ensure_database(url: str | URL, database_name: str) -> URL:
    """Create ``database_name`` on the server behind ``url`` if it is missing.

    Returns ``url`` re-pointed at ``database_name``. SQLite needs no server
    side database; only the parent directory of the file is created.
    """
    url = make_url(url)
    backend = url.get_backend_name()

    if backend == "sqlite":
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        return url

    if backend in ("mysql", "mariadb"):
        server_url = url.set(database=None)
    elif backend == "postgresql":
        server_url = url.set(database="postgres")
    else:
        raise OperationNotSupportedError(f"creating databases is not supported for '{backend}'")

    engine = create_engine(server_url, isolation_level="AUTOCOMMIT")
    quoted = engine.dialect.identifier_preparer.quote(database_name)
    try:
        with engine.connect() as connection:
            if backend == "postgresql":
                exists = connection.execute(
                    text("SELECT 1 FROM pg_database WHERE datname = :name"),
                    {"name": database_name},
                ).scalar()
                if not exists:
                    connection.execute(text(f"CREATE DATABASE {quoted}"))
            else:
                connection.execute(text(f"CREATE DATABASE IF NOT EXISTS {quoted}"))
    except OperationalError as exc:
        raise ConnectivityError(f"cannot reach database server: {exc}") from exc
    except SQLAlchemyError as exc:
        raise SchemaError(f"failed to create database '{database_name}': {exc}") from exc
    finally:
        engine.dispose()

    logger.info(f"Database '{database_name}' is available")
    return url.set(database=database_name)


def ensure_table(store: RuleStore) -> None:
    """Create the rule table if it does not exist yet."""
    store.check_connection()
    store.create_table()
    logger.info(f"Rule table '{store.table_name}' is ready")
