"""API dependencies for dependency injection."""

from fastapi import Request

from puremetrics.core.exceptions import AuthenticationError
from puremetrics.services.data_manager import DataManager
from puremetrics.services.firestore import FirestoreRemote


def get_manager(request: Request) -> DataManager:
    """The process-wide DataManager built in the application lifespan."""
    return request.app.state.manager


def get_firestore(request: Request) -> FirestoreRemote:
    """The Firestore remote, when one is configured.

    Raises:
        AuthenticationError: If the app runs without a remote store.
    """
    remote = request.app.state.manager.remote
    if not isinstance(remote, FirestoreRemote):
        raise AuthenticationError("No remote store configured")
    return remote
