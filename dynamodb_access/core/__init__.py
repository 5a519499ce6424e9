"""
Core infrastructure for DynamoDB access.

- StorageClient: session owner, request translation, table lifecycle
- StorageDiagnostics: scan/describe/drop, kept off the production surface
- map_backend_error: botocore failures to the error taxonomy
- Deadline / call_with_retry: bounded retries for transient failures
"""

from .diagnostics import StorageDiagnostics
from .errors import map_backend_error
from .retry import Deadline, call_with_retry
from .storage_client import StorageClient

__all__ = [
    "Deadline",
    "StorageClient",
    "StorageDiagnostics",
    "call_with_retry",
    "map_backend_error",
]
