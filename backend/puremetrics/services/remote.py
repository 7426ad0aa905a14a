"""Contract between the data manager and a remote document store."""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Protocol, runtime_checkable

from puremetrics.models.base import utc_now
from puremetrics.models.records import SyncRecord


@dataclass(frozen=True)
class AuthSession:
    """Signed-in user as returned by the identity provider."""

    user_id: str
    id_token: str
    email: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None

    @classmethod
    def from_identity_response(cls, payload: dict) -> "AuthSession":
        expires_in = int(payload.get("expiresIn", 3600))
        return cls(
            user_id=payload["localId"],
            id_token=payload["idToken"],
            email=payload.get("email"),
            refresh_token=payload.get("refreshToken"),
            expires_at=utc_now() + timedelta(seconds=expires_in),
        )


@runtime_checkable
class RemoteStore(Protocol):
    """What the data manager needs from a remote store.

    ``push`` replaces the remote copy of every record it is given in one batch
    call. ``pull`` returns the authoritative remote snapshot. Both raise
    ``RemoteSyncError`` or ``AuthenticationError`` on failure.
    """

    @property
    def is_authenticated(self) -> bool: ...

    @property
    def current_user_id(self) -> Optional[str]: ...

    async def push(self, records: list[SyncRecord]) -> None: ...

    async def pull(self) -> list[SyncRecord]: ...


class OfflineRemote:
    """Remote used when no document store is configured. Never authenticated."""

    @property
    def is_authenticated(self) -> bool:
        return False

    @property
    def current_user_id(self) -> Optional[str]:
        return None

    async def push(self, records: list[SyncRecord]) -> None:
        return None

    async def pull(self) -> list[SyncRecord]:
        return []
