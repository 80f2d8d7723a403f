"""Adapter exception hierarchy."""

from __future__ import annotations


class AdapterError(Exception):
    """Base exception for all adapter errors."""


class ConnectivityError(AdapterError):
    """The policy store cannot be reached."""


class SchemaError(AdapterError):
    """Creating or dropping the database or the rule table failed."""


class InvalidArity(AdapterError, ValueError):
    """A rule has more fields than the row schema can hold."""

    def __init__(self, ptype: str, arity: int, limit: int) -> None:
        self.ptype = ptype
        self.arity = arity
        self.limit = limit
        super().__init__(
            f"rule of type '{ptype}' has {arity} fields, at most {limit} are supported"
        )


class InvalidArgument(AdapterError, ValueError):
    """A field index, field value or rule list is out of bounds or malformed."""


class InvalidFilterType(AdapterError, TypeError):
    """The filter passed to a filtered load does not have the expected shape."""


class OperationNotSupportedError(AdapterError, NotImplementedError):
    """The storage backend cannot perform the requested operation."""


__all__ = [
    "AdapterError",
    "ConnectivityError",
    "SchemaError",
    "InvalidArity",
    "InvalidArgument",
    "InvalidFilterType",
    "OperationNotSupportedError",
]
