"""Health check endpoints for monitoring service status."""

from enum import Enum
from typing import Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from puremetrics.api.deps import get_manager
from puremetrics.core.exceptions import StorageError
from puremetrics.services.data_manager import DataManager

router = APIRouter(tags=["health"])


class HealthStatus(str, Enum):
    """Health status values."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class DependencyHealth(BaseModel):
    """Health status of a single dependency."""
    status: HealthStatus
    message: Optional[str] = None


class HealthResponse(BaseModel):
    """Full health check response."""
    status: HealthStatus
    version: str
    dependencies: Dict[str, DependencyHealth]


def check_local_store(manager: DataManager) -> DependencyHealth:
    try:
        manager.store.ping()
    except StorageError as e:
        return DependencyHealth(status=HealthStatus.UNHEALTHY, message=e.message)
    keys = manager.store.keys()
    return DependencyHealth(status=HealthStatus.HEALTHY, message=f"{len(keys)} collections stored")


def check_remote(manager: DataManager) -> DependencyHealth:
    # Remote sync is optional; the app keeps working on local data
    if manager.last_sync_error:
        return DependencyHealth(status=HealthStatus.DEGRADED, message=manager.last_sync_error)
    if not manager.remote.is_authenticated:
        return DependencyHealth(status=HealthStatus.DEGRADED, message="Not signed in")
    return DependencyHealth(status=HealthStatus.HEALTHY)


@router.get("/health", response_model=HealthResponse)
async def health_check(manager: DataManager = Depends(get_manager)) -> HealthResponse:
    """
    Health check with dependency status.

    - local_store: the SQL table holding the collection blobs
    - remote: sign-in state and the last sync error, if any
    """
    dependencies = {
        "local_store": check_local_store(manager),
        "remote": check_remote(manager),
    }

    if dependencies["local_store"].status == HealthStatus.UNHEALTHY:
        overall = HealthStatus.UNHEALTHY
    elif any(d.status != HealthStatus.HEALTHY for d in dependencies.values()):
        overall = HealthStatus.DEGRADED
    else:
        overall = HealthStatus.HEALTHY

    return HealthResponse(status=overall, version="0.1.0", dependencies=dependencies)


@router.get("/health/live")
async def liveness():
    """Always 200 while the process is serving requests."""
    return {"status": "alive"}
