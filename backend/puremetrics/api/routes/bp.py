from datetime import date, datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from pydantic import BaseModel

from puremetrics.api.deps import get_manager
from puremetrics.core.exceptions import NotFoundError, ValidationError
from puremetrics.core.logging import get_logger
from puremetrics.models import BPSession, RollingAverage
from puremetrics.services.data_manager import DataManager

logger = get_logger(__name__)

router = APIRouter()


# =========================================================================
# Request/Response Models
# =========================================================================


class ReadingCreate(BaseModel):
    systolic: int
    diastolic: int
    heart_rate: Optional[int] = None
    timestamp: Optional[datetime] = None


def session_to_response(session: BPSession) -> dict:
    return {
        **session.model_dump(mode="json"),
        "average_systolic": session.average_systolic,
        "average_diastolic": session.average_diastolic,
        "average_heart_rate": session.average_heart_rate,
        "category": session.category.value if session.readings else None,
        "display": session.display_string,
    }


def average_to_response(average: RollingAverage) -> dict:
    return {
        **average.model_dump(mode="json"),
        "label": average.period_label,
        "display": average.display_string,
        "category": average.bp_category.value,
    }


def _invalid_reading() -> ValidationError:
    return ValidationError("reading", "values outside the accepted blood pressure ranges")


# =========================================================================
# Saved sessions
# =========================================================================


@router.get("/sessions")
async def list_sessions(
    limit: int = Query(100, le=1000),
    manager: DataManager = Depends(get_manager),
):
    sessions = manager.sessions[:limit]
    return {"sessions": [session_to_response(s) for s in sessions], "count": len(sessions)}


@router.post("/readings", status_code=201)
async def add_reading(request: ReadingCreate, manager: DataManager = Depends(get_manager)):
    """Record one reading as a completed single-reading session."""
    if not manager.add_reading(
        request.systolic, request.diastolic, request.heart_rate, request.timestamp
    ):
        raise _invalid_reading()
    return session_to_response(manager.sessions[0])


@router.post("/readings/validate")
async def validate_reading(request: ReadingCreate, manager: DataManager = Depends(get_manager)):
    return {"valid": manager.is_valid_reading(request.systolic, request.diastolic, request.heart_rate)}


@router.delete("/sessions/by-date/{day}")
async def delete_sessions_for_date(day: date, manager: DataManager = Depends(get_manager)):
    return {"deleted": manager.delete_sessions_for_date(day)}


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: UUID, manager: DataManager = Depends(get_manager)):
    if not manager.delete_session(session_id):
        raise NotFoundError("BP session", session_id)
    return {"deleted": 1}


@router.delete("/sessions")
async def delete_all_sessions(manager: DataManager = Depends(get_manager)):
    count = len(manager.sessions)
    manager.delete_all_sessions()
    logger.info("sessions_cleared", count=count)
    return {"deleted": count}


# =========================================================================
# Current session
# =========================================================================


@router.get("/current")
async def get_current_session(manager: DataManager = Depends(get_manager)):
    return session_to_response(manager.current_session)


@router.post("/current/start")
async def start_session(manager: DataManager = Depends(get_manager)):
    manager.start_session()
    return session_to_response(manager.current_session)


@router.post("/current/readings", status_code=201)
async def add_current_reading(request: ReadingCreate, manager: DataManager = Depends(get_manager)):
    if not manager.add_reading_to_current_session(
        request.systolic, request.diastolic, request.heart_rate, request.timestamp
    ):
        raise _invalid_reading()
    return session_to_response(manager.current_session)


@router.delete("/current/readings/{index}")
async def remove_current_reading(index: int, manager: DataManager = Depends(get_manager)):
    manager.remove_current_reading(index)
    return session_to_response(manager.current_session)


@router.post("/current/stop")
async def stop_session(manager: DataManager = Depends(get_manager)):
    manager.stop_session()
    return session_to_response(manager.current_session)


@router.post("/current/save", status_code=201)
async def save_current_session(manager: DataManager = Depends(get_manager)):
    if not manager.save_current_session():
        raise ValidationError("readings", "current session has no readings")
    return session_to_response(manager.sessions[0])


@router.delete("/current")
async def clear_current_session(manager: DataManager = Depends(get_manager)):
    manager.clear_current_session()
    return session_to_response(manager.current_session)


# =========================================================================
# Rolling averages
# =========================================================================


@router.get("/rolling-averages")
async def rolling_averages(manager: DataManager = Depends(get_manager)):
    return {"averages": [average_to_response(a) for a in manager.rolling_averages()]}


@router.get("/rolling-averages/{days}")
async def rolling_average(
    days: int = Path(..., gt=0, le=365),
    manager: DataManager = Depends(get_manager),
):
    """A single window; ``average`` is null when the window has no data."""
    average = manager.rolling_average(days)
    return {"average": average_to_response(average) if average else None}
