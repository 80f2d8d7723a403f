"""Core utilities: exceptions and logging."""

from casbin_rule_adapter.core.exceptions import (
    AdapterError,
    ConnectivityError,
    InvalidArgument,
    InvalidArity,
    InvalidFilterType,
    OperationNotSupportedError,
    SchemaError,
)
from casbin_rule_adapter.core.logging import setup_logging

__all__ = [
    "AdapterError",
    "ConnectivityError",
    "SchemaError",
    "InvalidArity",
    "InvalidArgument",
    "InvalidFilterType",
    "OperationNotSupportedError",
    "setup_logging",
]
