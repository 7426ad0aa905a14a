"""Firestore remote store over the REST API.

Documents live at ``users/{uid}/health_data/{kind}/data/{id}``; every record
kind has its own sub-collection so a pull can list them one kind at a time.
"""
import re
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, AsyncIterator, Optional
from uuid import UUID

import httpx
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from puremetrics.config import Settings, get_settings
from puremetrics.core.exceptions import AuthenticationError, RemoteSyncError
from puremetrics.core.logging import get_logger
from puremetrics.models.records import RECORD_KINDS, SyncRecord, parse_record
from puremetrics.services.remote import AuthSession

logger = get_logger(__name__)

PAGE_SIZE = 300

_FRACTION = re.compile(r"\.(\d+)")


# ----------------------------------------------------------------------
# Typed-value codec
# ----------------------------------------------------------------------


def _format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_timestamp(value: str) -> datetime:
    # Firestore sends up to nanosecond precision; datetime keeps microseconds
    value = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def encode_value(value: Any) -> dict[str, Any]:
    """Wrap a Python value in Firestore's typed-value envelope."""
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, Enum):
        return encode_value(value.value)
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, datetime):
        return {"timestampValue": _format_timestamp(value)}
    if isinstance(value, date):
        return {"stringValue": value.isoformat()}
    if isinstance(value, (str, UUID)):
        return {"stringValue": str(value)}
    if isinstance(value, dict):
        return {"mapValue": {"fields": {str(k): encode_value(v) for k, v in value.items()}}}
    if isinstance(value, (list, tuple, set, frozenset)):
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    raise TypeError(f"Cannot encode {type(value).__name__} as a Firestore value")


def decode_value(value: dict[str, Any]) -> Any:
    """Unwrap one Firestore typed value into plain Python."""
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "timestampValue" in value:
        return _parse_timestamp(value["timestampValue"])
    if "stringValue" in value:
        return value["stringValue"]
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    raise ValueError(f"Unsupported Firestore value: {sorted(value)}")


def encode_fields(data: dict[str, Any]) -> dict[str, Any]:
    return {key: encode_value(item) for key, item in data.items()}


def decode_fields(fields: dict[str, Any]) -> dict[str, Any]:
    return {key: decode_value(item) for key, item in fields.items()}


def record_to_document(record: SyncRecord) -> dict[str, Any]:
    return encode_fields(record.payload.model_dump())


# ----------------------------------------------------------------------
# Remote store
# ----------------------------------------------------------------------


class FirestoreRemote:
    """RemoteStore backed by Firestore and the Identity Toolkit REST APIs."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
        session: Optional[AuthSession] = None,
    ):
        self.settings = settings or get_settings()
        self.timeout = httpx.Timeout(self.settings.remote_timeout_seconds)
        self._client = client
        self._session = session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def current_user_id(self) -> Optional[str]:
        return self._session.user_id if self._session else None

    @property
    def session(self) -> Optional[AuthSession]:
        return self._session

    @property
    def _database_path(self) -> str:
        return f"projects/{self.settings.firebase_project_id}/databases/(default)/documents"

    def _collection_path(self, kind: str) -> str:
        return f"{self._database_path}/users/{self.current_user_id}/health_data/{kind}/data"

    def _document_name(self, record: SyncRecord) -> str:
        return f"{self._collection_path(record.kind)}/{record.document_id}"

    @asynccontextmanager
    async def _http(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client

    def _auth_headers(self) -> dict[str, str]:
        if self._session is None:
            raise AuthenticationError("Not signed in to the remote store")
        return {"Authorization": f"Bearer {self._session.id_token}"}

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
        reraise=True,
        before_sleep=lambda retry_state: logger.warning(
            "identity_retry",
            attempt=retry_state.attempt_number,
            wait=retry_state.next_action.sleep,
        ),
    )
    async def _request_sign_in(self, email: str, password: str) -> httpx.Response:
        async with self._http() as client:
            return await client.post(
                f"{self.settings.identity_base_url}/accounts:signInWithPassword",
                params={"key": self.settings.firebase_api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
            )

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Exchange email and password for an ID token."""
        try:
            response = await self._request_sign_in(email, password)
        except httpx.HTTPError as e:
            logger.error("sign_in_failed", error=str(e))
            raise RemoteSyncError(f"Identity service unreachable: {e}", operation="sign_in") from e

        if response.status_code >= 400:
            try:
                reason = response.json().get("error", {}).get("message", "UNKNOWN")
            except ValueError:
                reason = "UNKNOWN"
            logger.warning("sign_in_rejected", status_code=response.status_code, reason=reason)
            raise AuthenticationError(f"Sign-in rejected: {reason}")

        self._session = AuthSession.from_identity_response(response.json())
        logger.info("signed_in", user_id=self._session.user_id)
        return self._session

    def sign_out(self) -> None:
        if self._session is not None:
            logger.info("signed_out", user_id=self._session.user_id)
        self._session = None

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    def _raise_for_status(self, response: httpx.Response, operation: str) -> None:
        if response.status_code in (401, 403):
            raise AuthenticationError(f"Remote store refused {operation} ({response.status_code})")
        if response.status_code >= 400:
            raise RemoteSyncError(
                f"{operation} failed with HTTP {response.status_code}", operation=operation
            )

    async def _list_documents(
        self, client: httpx.AsyncClient, kind: str, headers: dict, operation: str
    ) -> list[dict[str, Any]]:
        """Every raw document stored under one kind, across all pages."""
        documents: list[dict[str, Any]] = []
        page_token: Optional[str] = None
        url = f"{self.settings.firestore_base_url}/{self._collection_path(kind)}"

        while True:
            params: dict[str, Any] = {"pageSize": PAGE_SIZE}
            if page_token:
                params["pageToken"] = page_token
            response = await client.get(url, params=params, headers=headers)
            if response.status_code == 404:
                return documents
            self._raise_for_status(response, operation)

            data = response.json()
            documents.extend(data.get("documents", []))
            page_token = data.get("nextPageToken")
            if not page_token:
                return documents

    async def push(self, records: list[SyncRecord]) -> None:
        """Make the remote collections match ``records`` in a single commit.

        Every record is written, and remote documents whose ids are no longer
        present locally are deleted in the same commit.
        """
        headers = self._auth_headers()
        if not records:
            return

        local_names = {self._document_name(record) for record in records}
        writes: list[dict[str, Any]] = [
            {"update": {"name": self._document_name(record), "fields": record_to_document(record)}}
            for record in records
        ]
        try:
            async with self._http() as client:
                for kind in RECORD_KINDS:
                    for document in await self._list_documents(client, kind, headers, "push"):
                        name = document.get("name")
                        if name and name not in local_names:
                            writes.append({"delete": name})

                response = await client.post(
                    f"{self.settings.firestore_base_url}/{self._database_path}:commit",
                    json={"writes": writes},
                    headers=headers,
                )
        except httpx.HTTPError as e:
            logger.error("push_request_failed", error=str(e))
            raise RemoteSyncError(str(e), operation="push") from e

        self._raise_for_status(response, "push")
        deletes = len(writes) - len(records)
        logger.info(
            "push_committed",
            user_id=self.current_user_id,
            updates=len(records),
            deletes=deletes,
        )

    async def _list_kind(self, client: httpx.AsyncClient, kind: str, headers: dict) -> list[SyncRecord]:
        records: list[SyncRecord] = []
        for document in await self._list_documents(client, kind, headers, "pull"):
            try:
                payload = decode_fields(document.get("fields", {}))
                records.append(parse_record(kind, payload))
            except (PydanticValidationError, ValueError) as e:
                logger.warning(
                    "document_skipped",
                    kind=kind,
                    document=document.get("name"),
                    error=str(e),
                )
        return records

    async def pull(self) -> list[SyncRecord]:
        """List every kind's collection and decode the documents found."""
        headers = self._auth_headers()
        records: list[SyncRecord] = []
        try:
            async with self._http() as client:
                for kind in RECORD_KINDS:
                    records.extend(await self._list_kind(client, kind, headers))
        except httpx.HTTPError as e:
            logger.error("pull_request_failed", error=str(e))
            raise RemoteSyncError(str(e), operation="pull") from e

        logger.info("pull_completed", user_id=self.current_user_id, records=len(records))
        return records
