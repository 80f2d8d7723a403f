"""Rule table, engine and session exports."""

from .base import Base
from .models import DEFAULT_TABLE_NAME, CasbinRule, RuleColumns, create_rule_model
from .session import RuleStore, StoreSession, create_store_engine
from .init_db import ensure_database, ensure_table

__all__ = [
    "Base",
    "DEFAULT_TABLE_NAME",
    "CasbinRule",
    "RuleColumns",
    "create_rule_model",
    "RuleStore",
    "StoreSession",
    "create_store_engine",
    "ensure_database",
    "ensure_table",
]
