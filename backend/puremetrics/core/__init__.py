from puremetrics.core.exceptions import (
    PureMetricsException,
    NotFoundError,
    ValidationError,
    StorageError,
    ExternalServiceError,
    RemoteSyncError,
    SyncTimeoutError,
    AuthenticationError,
)

__all__ = [
    "PureMetricsException",
    "NotFoundError",
    "ValidationError",
    "StorageError",
    "ExternalServiceError",
    "RemoteSyncError",
    "SyncTimeoutError",
    "AuthenticationError",
]
