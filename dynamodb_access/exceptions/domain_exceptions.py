"""
Error taxonomy for the data-access layer.

Organized by category:
1. Caller errors (never retried)
2. Conflict and missing-resource errors
3. Backend and retry errors
4. Table provisioning errors
"""

from typing import Any, Dict, Optional

from .base import StorageAccessError


# =============================================================================
# Caller Errors
# =============================================================================

class ValidationError(StorageAccessError):
    """Raised when a caller-supplied schema, key, record or expression is malformed.

    Used for:
    - Schema descriptor invariant violations
    - Keys of the wrong type or missing key attributes
    - Update expressions that touch the primary key
    - DynamoDB ValidationException and limit errors
    """

    def __init__(
        self,
        message: str,
        errors: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """Initialize validation error.

        Args:
            message: Human-readable error message
            errors: Dictionary of field-level validation errors
            original_error: The original exception that caused this error
            context: Table/operation/key context
        """
        self.errors = errors or {}
        context = dict(context or {})
        if self.errors:
            context['validation_errors'] = self.errors
        super().__init__(message, original_error, context)


class DuplicateSchemaError(StorageAccessError):
    """Raised when a table name is registered twice."""

    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(
            f"Schema for table '{table_name}' is already registered",
            context={'table_name': table_name},
        )


class UnknownSchemaError(StorageAccessError):
    """Raised when a table name has no registered schema."""

    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(
            f"No schema registered for table '{table_name}'",
            context={'table_name': table_name},
        )


class UnknownIndexError(StorageAccessError):
    """Raised when an index name is not declared on the table's schema."""

    def __init__(self, table_name: str, index_name: str):
        self.table_name = table_name
        self.index_name = index_name
        super().__init__(
            f"Table '{table_name}' has no secondary index '{index_name}'",
            context={'table_name': table_name, 'index_name': index_name},
        )


# =============================================================================
# Conflict and Missing-Resource Errors
# =============================================================================

class ConflictError(StorageAccessError):
    """Raised when a conditional operation fails due to existing data.

    Used for:
    - ConditionalCheckFailedException from DynamoDB
    - put_if_absent on a key that already exists
    - Transaction conflicts
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, original_error, context)


class TableNotFoundError(StorageAccessError):
    """Raised when a registered table does not exist in the backend."""

    def __init__(self, message: str, original_error: Optional[Exception] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, original_error, context)


class AccessDeniedError(StorageAccessError):
    """Raised when the backend rejects the configured credentials."""

    def __init__(self, message: str, original_error: Optional[Exception] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, original_error, context)


# =============================================================================
# Backend and Retry Errors
# =============================================================================

class BackendUnavailableError(StorageAccessError):
    """Raised on transient network or service failures.

    Used for:
    - Endpoint connection failures and socket timeouts
    - InternalServerError / ServiceUnavailable responses
    - Unrecognized error codes
    """

    retryable = True

    def __init__(self, message: str, original_error: Optional[Exception] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, original_error, context)


class ThrottledError(StorageAccessError):
    """Raised when the backend rejects a call for exceeding capacity.

    Kept distinct from BackendUnavailableError so callers can count
    throttling separately from outages.
    """

    retryable = True

    def __init__(
        self,
        message: str,
        retry_after_seconds: Optional[float] = None,
        original_error: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """Initialize throttled error.

        Args:
            message: Human-readable error message
            retry_after_seconds: Suggested retry delay in seconds
            original_error: The original exception that caused this error
            context: Table/operation/key context
        """
        self.retry_after_seconds = retry_after_seconds
        context = dict(context or {})
        if retry_after_seconds:
            context['retry_after_seconds'] = retry_after_seconds
        super().__init__(message, original_error, context)


# =============================================================================
# Table Provisioning Errors
# =============================================================================

class TableProvisionError(StorageAccessError):
    """Raised when a table does not become ACTIVE within the allowed time."""

    def __init__(self, table_name: str, last_status: Optional[str], waited_seconds: float):
        self.table_name = table_name
        self.last_status = last_status
        self.waited_seconds = waited_seconds
        super().__init__(
            f"Table '{table_name}' not ready after {waited_seconds:.1f}s",
            context={'table_name': table_name, 'last_status': last_status},
        )
