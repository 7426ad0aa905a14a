"""Free-text annotations attached to a metric on a given day."""

from datetime import date, datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

from puremetrics.models.base import as_utc, same_day, utc_now


class HealthNote(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    user_id: str = ""
    metric_type: str
    date: datetime
    note: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("date", "created_at", "updated_at")
    @classmethod
    def normalize_times(cls, v: datetime) -> datetime:
        return as_utc(v)

    @property
    def is_valid(self) -> bool:
        return bool(self.note.strip()) and bool(self.metric_type.strip())

    def matches(self, metric_type: str, day: date, user_id: Optional[str] = None) -> bool:
        if user_id is not None and self.user_id != user_id:
            return False
        return self.metric_type == metric_type and same_day(self.date, day)

    def edited(self, note: str, at: Optional[datetime] = None) -> "HealthNote":
        return self.model_copy(update={"note": note, "updated_at": at or utc_now()})
