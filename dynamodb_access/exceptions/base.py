from typing import Any, Dict, Optional


class StorageAccessError(Exception):
    """Root of every error raised by the data-access layer.

    Callers catch this (or a subclass) instead of botocore exceptions. The
    backend failure that caused it, if any, stays reachable through
    ``original_error`` and as ``__cause__``.

    Attributes:
        message: What failed, without the context suffix
        original_error: botocore/boto3 exception behind this error, if any
        context: Where it failed: table name, operation and key when known,
            plus the backend error code for mapped failures
        retryable: True when repeating the same call may succeed; the retry
            loop only repeats calls whose error sets this
    """

    retryable = False

    def __init__(self, message: str, original_error: Optional[Exception] = None, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.original_error = original_error
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Message followed by the context, e.g. ``... (Context: operation=GetItem, table_name=t)``."""
        if not self.context:
            return self.message
        context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} (Context: {context_str})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, original_error={self.original_error!r}, context={self.context!r})"
