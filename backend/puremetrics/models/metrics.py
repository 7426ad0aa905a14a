from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from puremetrics.models.base import as_utc, utc_now


class MetricType(str, Enum):
    """Category of a scalar health measurement."""

    BLOOD_PRESSURE = "blood_pressure"
    WEIGHT = "weight"
    BLOOD_SUGAR = "blood_sugar"
    HEART_RATE = "heart_rate"
    BODY_FAT = "body_fat"
    LEAN_BODY_MASS = "lean_body_mass"

    @property
    def unit(self) -> str:
        return METRIC_UNITS[self]

    @property
    def display_name(self) -> str:
        return METRIC_DISPLAY_NAMES[self]


METRIC_UNITS = {
    MetricType.BLOOD_PRESSURE: "mmHg",
    MetricType.WEIGHT: "lbs",
    MetricType.BLOOD_SUGAR: "mg/dL",
    MetricType.HEART_RATE: "bpm",
    MetricType.BODY_FAT: "%",
    MetricType.LEAN_BODY_MASS: "lbs",
}

METRIC_DISPLAY_NAMES = {
    MetricType.BLOOD_PRESSURE: "Blood Pressure",
    MetricType.WEIGHT: "Weight",
    MetricType.BLOOD_SUGAR: "Blood Sugar",
    MetricType.HEART_RATE: "Heart Rate",
    MetricType.BODY_FAT: "Body Fat %",
    MetricType.LEAN_BODY_MASS: "Lean Body Mass",
}

# Inclusive (low, high) bounds per metric type
METRIC_RANGES: dict[MetricType, tuple[float, float]] = {
    MetricType.BLOOD_PRESSURE: (50, 300),
    MetricType.WEIGHT: (50, 500),
    MetricType.BLOOD_SUGAR: (20, 600),
    MetricType.HEART_RATE: (30, 200),
    MetricType.BODY_FAT: (1, 50),
    MetricType.LEAN_BODY_MASS: (20, 400),
}


class HealthMetric(BaseModel):
    """A single scalar measurement. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    type: MetricType
    value: float
    timestamp: datetime = Field(default_factory=utc_now)

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return as_utc(v)

    @property
    def is_valid(self) -> bool:
        low, high = METRIC_RANGES[self.type]
        return low <= self.value <= high

    @property
    def formatted_value(self) -> str:
        if self.type in (MetricType.BLOOD_PRESSURE, MetricType.HEART_RATE):
            return str(int(self.value))
        return f"{self.value:.1f}"

    @property
    def display_string(self) -> str:
        return f"{self.formatted_value} {self.type.unit}"
