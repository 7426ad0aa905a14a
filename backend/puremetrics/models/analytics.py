"""Derived views over the stored records. Never persisted."""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from puremetrics.models.fitness import ExerciseType
from puremetrics.models.readings import BPCategory


class Trend(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class TimeRange(str, Enum):
    WEEK = "Week"
    MONTH = "Month"
    THREE_MONTHS = "3 Months"
    YEAR = "Year"

    @property
    def span(self) -> timedelta:
        return TIME_RANGE_SPANS[self]


TIME_RANGE_SPANS = {
    TimeRange.WEEK: timedelta(days=7),
    TimeRange.MONTH: timedelta(days=30),
    TimeRange.THREE_MONTHS: timedelta(days=90),
    TimeRange.YEAR: timedelta(days=365),
}


class RollingAverage(BaseModel):
    period: int
    average_systolic: float
    average_diastolic: float
    average_heart_rate: Optional[float] = None
    reading_count: int
    session_count: int
    start_date: datetime
    end_date: datetime

    @property
    def display_string(self) -> str:
        return f"{round(self.average_systolic)}/{round(self.average_diastolic)}"

    @property
    def period_label(self) -> str:
        return f"{self.period}-Day"

    @property
    def bp_category(self) -> BPCategory:
        return BPCategory.from_values(round(self.average_systolic), round(self.average_diastolic))


class FitnessTrendData(BaseModel):
    """One exercise session reduced to the numbers a chart needs."""

    date: datetime
    total_reps: int
    average_weight: float
    max_weight: float
    total_time: float
    sets: int


class FitnessTrendAnalysis(BaseModel):
    overall_trend: Trend
    weight_change: float
    average_weight: float
    max_weight: float
    total_sessions: int
    improvement_percentage: float

    @property
    def weight_change_string(self) -> str:
        if self.weight_change > 0:
            return f"+{self.weight_change:.1f} lbs"
        if self.weight_change < 0:
            return f"{self.weight_change:.1f} lbs"
        return "No change"

    @property
    def improvement_string(self) -> str:
        if self.improvement_percentage > 0:
            return f"+{self.improvement_percentage:.1f}%"
        if self.improvement_percentage < 0:
            return f"{self.improvement_percentage:.1f}%"
        return "0%"


class ExerciseStats(BaseModel):
    exercise_type: ExerciseType
    total_sessions: int
    total_sets: int
    total_reps: int
    total_time: float
    max_weight: float
    average_weight: float
