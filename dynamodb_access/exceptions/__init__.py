# Base exception class
from .base import StorageAccessError

from .domain_exceptions import (
    AccessDeniedError,
    BackendUnavailableError,
    ConflictError,
    DuplicateSchemaError,
    TableNotFoundError,
    TableProvisionError,
    ThrottledError,
    UnknownIndexError,
    UnknownSchemaError,
    ValidationError,
)

__all__ = [
    # Base exception
    "StorageAccessError",

    # Domain exceptions (alphabetically ordered)
    "AccessDeniedError",
    "BackendUnavailableError",
    "ConflictError",
    "DuplicateSchemaError",
    "TableNotFoundError",
    "TableProvisionError",
    "ThrottledError",
    "UnknownIndexError",
    "UnknownSchemaError",
    "ValidationError",
]
