"""
Translation of botocore failures into the data-access error taxonomy.

Every StorageClient call funnels its botocore exceptions through
map_backend_error so callers only ever see StorageAccessError subclasses,
each carrying the table, operation and key involved.
"""

import logging
from typing import Any, Dict, Optional, Union

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionError as BotoConnectionError,
    EndpointConnectionError,
    NoCredentialsError,
    ParamValidationError,
    PartialCredentialsError,
    ReadTimeoutError,
    ConnectTimeoutError,
)

from ..exceptions import (
    AccessDeniedError,
    BackendUnavailableError,
    ConflictError,
    StorageAccessError,
    TableNotFoundError,
    ThrottledError,
    ValidationError,
)

logger = logging.getLogger(__name__)

CONFLICT_CODES = frozenset({
    'ConditionalCheckFailedException',
    'TransactionConflictException',
    'DuplicateTransactionException',
})

VALIDATION_CODES = frozenset({
    'ValidationException',
    'SerializationException',
    'ItemCollectionSizeLimitExceededException',
    'LimitExceededException',
    'IdempotentParameterMismatchException',
})

THROTTLING_CODES = frozenset({
    'ProvisionedThroughputExceededException',
    'RequestLimitExceeded',
    'ThrottlingException',
    'Throttling',
    'TooManyRequestsException',
    'SlowDown',
})

UNAVAILABLE_CODES = frozenset({
    'InternalServerError',
    'InternalFailure',
    'ServiceUnavailable',
    'ServiceUnavailableException',
    'RequestTimeoutException',
    'RequestExpiredException',
    'TransactionInProgressException',
})

ACCESS_DENIED_CODES = frozenset({
    'UnrecognizedClientException',
    'AccessDeniedException',
    'InvalidSignatureException',
    'IncompleteSignatureException',
    'ExpiredTokenException',
    'MissingAuthenticationTokenException',
})


def error_context(operation: str, table_name: str, key: Optional[Any] = None) -> Dict[str, Any]:
    context = {'operation': operation, 'table_name': table_name}
    if key is not None:
        context['key'] = key
    return context


def map_client_error(
    error: ClientError,
    operation: str,
    table_name: str,
    key: Optional[Any] = None
) -> StorageAccessError:
    """Map a DynamoDB ClientError to the matching taxonomy exception.

    Args:
        error: The boto3 ClientError
        operation: The operation that failed (e.g., "GetItem", "PutItem")
        table_name: The physical DynamoDB table name
        key: Optional key of the item involved

    Returns:
        Exception instance to raise
    """
    error_code = error.response.get('Error', {}).get('Code', 'Unknown')
    error_message = error.response.get('Error', {}).get('Message', str(error))
    context = error_context(operation, table_name, key)
    context['error_code'] = error_code
    full_message = f"{operation} on {table_name}: {error_message}"

    if error_code in CONFLICT_CODES:
        return ConflictError(f"Conditional check failed - {full_message}", error, context)

    if error_code in VALIDATION_CODES:
        return ValidationError(f"Validation failed - {full_message}", original_error=error, context=context)

    if error_code in THROTTLING_CODES:
        return ThrottledError(f"Throttling - {full_message}", original_error=error, context=context)

    if error_code in UNAVAILABLE_CODES:
        return BackendUnavailableError(f"Service unavailable - {full_message}", error, context)

    if error_code in ACCESS_DENIED_CODES:
        return AccessDeniedError(f"Authentication/authorization failed - {full_message}", error, context)

    if error_code == 'ResourceNotFoundException':
        return TableNotFoundError(f"Table not found - {full_message}", error, context)

    if error_code == 'ResourceInUseException':
        return ConflictError(f"Resource in use - {full_message}", error, context)

    status = error.response.get('ResponseMetadata', {}).get('HTTPStatusCode')
    if status is not None and status < 500:
        logger.warning(f"Unknown DynamoDB client error code '{error_code}' mapped to ValidationError")
        return ValidationError(f"DynamoDB rejected request - {full_message}", original_error=error, context=context)

    logger.warning(f"Unknown DynamoDB error code '{error_code}' mapped to BackendUnavailableError")
    return BackendUnavailableError(f"DynamoDB operation failed - {full_message}", error, context)


def map_backend_error(
    error: Union[ClientError, BotoCoreError],
    operation: str,
    table_name: str,
    key: Optional[Any] = None
) -> StorageAccessError:
    """Map any botocore failure (service or transport) to the taxonomy."""
    if isinstance(error, ClientError):
        return map_client_error(error, operation, table_name, key)

    context = error_context(operation, table_name, key)

    if isinstance(error, ParamValidationError):
        return ValidationError(f"Invalid request parameters - {operation} on {table_name}: {error}",
                               original_error=error, context=context)

    if isinstance(error, (NoCredentialsError, PartialCredentialsError)):
        return AccessDeniedError(f"No usable credentials - {operation} on {table_name}: {error}", error, context)

    if isinstance(error, (EndpointConnectionError, BotoConnectionError, ReadTimeoutError, ConnectTimeoutError)):
        return BackendUnavailableError(f"Endpoint unreachable - {operation} on {table_name}: {error}", error, context)

    return BackendUnavailableError(f"DynamoDB transport failure - {operation} on {table_name}: {error}", error, context)
