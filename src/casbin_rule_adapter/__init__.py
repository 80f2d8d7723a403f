"""
Casbin Rule Adapter - SQLAlchemy persistence for casbin policies.

Stores the rules of a casbin model in one relational table and loads them
back, with filtered loading, batch mutations and atomic updates.
"""

from casbin_rule_adapter.__version__ import (
    __version__,
    __version_info__,
    get_version,
    get_version_info,
    get_features,
    FEATURES,
)
from casbin_rule_adapter.adapter import PolicyAdapter
from casbin_rule_adapter.codec import RuleRecord, decode_rule, encode_rule, line_to_rule, rule_to_line
from casbin_rule_adapter.core.exceptions import (
    AdapterError,
    ConnectivityError,
    InvalidArgument,
    InvalidArity,
    InvalidFilterType,
    OperationNotSupportedError,
    SchemaError,
)
from casbin_rule_adapter.filters import Filter

__all__ = [
    "__version__",
    "__version_info__",
    "get_version",
    "get_version_info",
    "get_features",
    "FEATURES",
    "PolicyAdapter",
    "Filter",
    "RuleRecord",
    "encode_rule",
    "decode_rule",
    "rule_to_line",
    "line_to_rule",
    "AdapterError",
    "ConnectivityError",
    "SchemaError",
    "InvalidArity",
    "InvalidArgument",
    "InvalidFilterType",
    "OperationNotSupportedError",
]
