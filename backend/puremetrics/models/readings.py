"""Blood-pressure readings and the sessions that group them."""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from puremetrics.models.base import as_utc, utc_now
from puremetrics.models.metrics import HealthMetric, MetricType

SYSTOLIC_RANGE = (50, 300)
DIASTOLIC_RANGE = (30, 200)
HEART_RATE_RANGE = (30, 200)


class BPCategory(str, Enum):
    NORMAL = "Normal"
    ELEVATED = "Elevated"
    HIGH_STAGE_1 = "High Stage 1"
    HIGH_STAGE_2 = "High Stage 2"
    HYPERTENSIVE_CRISIS = "Hypertensive Crisis"

    @classmethod
    def from_values(cls, systolic: int, diastolic: int) -> "BPCategory":
        if systolic >= 180 or diastolic >= 120:
            return cls.HYPERTENSIVE_CRISIS
        if systolic >= 140 or diastolic >= 90:
            return cls.HIGH_STAGE_2
        if systolic >= 130 or diastolic >= 80:
            return cls.HIGH_STAGE_1
        if systolic >= 120:
            return cls.ELEVATED
        return cls.NORMAL


class Reading(BaseModel):
    """One blood-pressure measurement. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    systolic: int
    diastolic: int
    heart_rate: Optional[int] = None
    timestamp: datetime = Field(default_factory=utc_now)

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return as_utc(v)

    @property
    def is_valid(self) -> bool:
        return (
            SYSTOLIC_RANGE[0] <= self.systolic <= SYSTOLIC_RANGE[1]
            and DIASTOLIC_RANGE[0] <= self.diastolic <= DIASTOLIC_RANGE[1]
            and self.systolic > self.diastolic
            and (
                self.heart_rate is None
                or HEART_RATE_RANGE[0] <= self.heart_rate <= HEART_RATE_RANGE[1]
            )
        )

    @property
    def display_string(self) -> str:
        result = f"{self.systolic}/{self.diastolic}"
        if self.heart_rate is not None:
            result += f" • HR: {self.heart_rate}"
        return result

    def to_health_metrics(self) -> list[HealthMetric]:
        metrics = [
            HealthMetric(type=MetricType.BLOOD_PRESSURE, value=self.systolic, timestamp=self.timestamp),
            HealthMetric(type=MetricType.BLOOD_PRESSURE, value=self.diastolic, timestamp=self.timestamp),
        ]
        if self.heart_rate is not None:
            metrics.append(
                HealthMetric(type=MetricType.HEART_RATE, value=self.heart_rate, timestamp=self.timestamp)
            )
        return metrics


class BPSession(BaseModel):
    """A recording window of readings, closed by ``complete``.

    Readings are appended while the session is active; once completed and
    persisted the session is treated as an immutable record.
    """

    id: UUID = Field(default_factory=uuid4)
    readings: list[Reading] = Field(default_factory=list)
    health_metrics: list[HealthMetric] = Field(default_factory=list)
    start_time: datetime = Field(default_factory=utc_now)
    end_time: Optional[datetime] = None
    is_active: bool = False

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v) if v is not None else None

    @classmethod
    def started(cls, at: Optional[datetime] = None) -> "BPSession":
        return cls(start_time=at or utc_now(), is_active=True)

    def add_reading(self, reading: Reading) -> None:
        self.readings.append(reading)

    def remove_reading(self, index: int) -> None:
        if 0 <= index < len(self.readings):
            del self.readings[index]

    def add_health_metric(self, metric: HealthMetric) -> None:
        self.health_metrics.append(metric)

    def complete(self, at: Optional[datetime] = None) -> None:
        self.end_time = at or utc_now()
        self.is_active = False

    def stop(self) -> None:
        self.is_active = False

    @property
    def average_systolic(self) -> float:
        if not self.readings:
            return 0.0
        return sum(r.systolic for r in self.readings) / len(self.readings)

    @property
    def average_diastolic(self) -> float:
        if not self.readings:
            return 0.0
        return sum(r.diastolic for r in self.readings) / len(self.readings)

    @property
    def average_heart_rate(self) -> Optional[float]:
        rates = [r.heart_rate for r in self.readings if r.heart_rate is not None]
        if not rates:
            return None
        return sum(rates) / len(rates)

    @property
    def is_complete(self) -> bool:
        return self.end_time is not None

    @property
    def duration(self) -> timedelta:
        return (self.end_time or utc_now()) - self.start_time

    @property
    def category(self) -> BPCategory:
        return BPCategory.from_values(round(self.average_systolic), round(self.average_diastolic))

    @property
    def display_string(self) -> str:
        result = f"{round(self.average_systolic)}/{round(self.average_diastolic)}"
        if self.average_heart_rate is not None:
            result += f" • HR: {round(self.average_heart_rate)}"
        return result

    def metrics_for_type(self, metric_type: MetricType) -> list[HealthMetric]:
        return [m for m in self.health_metrics if m.type == metric_type]

    @property
    def all_metrics(self) -> list[HealthMetric]:
        metrics = [m for reading in self.readings for m in reading.to_health_metrics()]
        metrics.extend(self.health_metrics)
        return sorted(metrics, key=lambda m: m.timestamp)
