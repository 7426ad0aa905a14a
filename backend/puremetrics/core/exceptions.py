"""Exception classes for the PureMetrics backend.

The data manager never lets these cross its mutation boundary; they are raised
by the adapters (local store, remote store) and by the HTTP layer.
"""

from typing import Any, Optional


class PureMetricsException(Exception):
    """Base exception for PureMetrics."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class NotFoundError(PureMetricsException):
    """Record not found in a collection."""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            message=f"{resource} not found: {identifier}",
            code="NOT_FOUND",
            status_code=404,
            details={"resource": resource, "identifier": str(identifier)},
        )


class ValidationError(PureMetricsException):
    """A record failed its validity predicate."""

    def __init__(self, field: str, message: str):
        super().__init__(
            message=f"Validation error on {field}: {message}",
            code="VALIDATION_ERROR",
            status_code=422,
            details={"field": field},
        )


class StorageError(PureMetricsException):
    """Local store could not read or write a collection blob."""

    def __init__(self, key: str, message: str):
        super().__init__(
            message=f"Local store error ({key}): {message}",
            code="STORAGE_ERROR",
            status_code=500,
            details={"key": key},
        )


class ExternalServiceError(PureMetricsException):
    """Base class for external service errors."""

    def __init__(self, service: str, message: str):
        super().__init__(
            message=f"External service error ({service}): {message}",
            code="EXTERNAL_SERVICE_ERROR",
            status_code=502,
            details={"service": service},
        )


class RemoteSyncError(ExternalServiceError):
    """Push or pull against the remote document store failed."""

    def __init__(self, message: str, operation: str = "push"):
        super().__init__(service="Firestore", message=message)
        self.details["operation"] = operation
        self.code = "REMOTE_SYNC_ERROR"


class SyncTimeoutError(ExternalServiceError):
    """Sign-in resync did not finish inside the configured bound."""

    def __init__(self, timeout_seconds: float):
        super().__init__(
            service="Firestore",
            message=f"Sync timed out after {timeout_seconds:g}s",
        )
        self.details["timeout_seconds"] = timeout_seconds
        self.code = "SYNC_TIMEOUT"
        self.status_code = 504


class AuthenticationError(PureMetricsException):
    """Authentication required or failed."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            code="AUTHENTICATION_ERROR",
            status_code=401,
        )
