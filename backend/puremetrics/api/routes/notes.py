from datetime import date, datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from puremetrics.api.deps import get_manager
from puremetrics.core.exceptions import NotFoundError, ValidationError
from puremetrics.models import HealthNote
from puremetrics.services.data_manager import DataManager

router = APIRouter()


class NoteCreate(BaseModel):
    metric_type: str
    date: datetime
    note: str
    user_id: Optional[str] = None


class NoteUpdate(BaseModel):
    note: str


@router.get("")
async def list_notes(
    metric_type: Optional[str] = Query(None),
    day: Optional[date] = Query(None),
    manager: DataManager = Depends(get_manager),
):
    """Notes for one metric on one day, or every note when no filter is given."""
    if metric_type and day:
        notes = manager.health_notes_for(metric_type, day)
    else:
        notes = manager.health_notes
    return {"notes": [n.model_dump(mode="json") for n in notes], "count": len(notes)}


@router.post("", status_code=201)
async def create_note(request: NoteCreate, manager: DataManager = Depends(get_manager)):
    note = HealthNote(
        user_id=request.user_id or "",
        metric_type=request.metric_type,
        date=request.date,
        note=request.note,
    )
    if not manager.add_health_note(note):
        raise ValidationError("note", "note text and metric type must not be blank")
    return manager.get_record("health_notes", note.id).model_dump(mode="json")


@router.put("/{note_id}")
async def update_note(note_id: UUID, request: NoteUpdate, manager: DataManager = Depends(get_manager)):
    if manager.get_record("health_notes", note_id) is None:
        raise NotFoundError("Health note", note_id)
    if not manager.update_health_note(note_id, request.note):
        raise ValidationError("note", "note text must not be blank")
    return manager.get_record("health_notes", note_id).model_dump(mode="json")


@router.delete("/{note_id}")
async def delete_note(note_id: UUID, manager: DataManager = Depends(get_manager)):
    if not manager.delete_health_note(note_id):
        raise NotFoundError("Health note", note_id)
    return {"deleted": 1}
