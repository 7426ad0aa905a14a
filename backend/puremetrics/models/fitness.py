"""Strength-training records: sets, exercise sessions, workouts, templates."""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from puremetrics.models.base import as_utc, utc_now


class ExerciseCategory(str, Enum):
    UPPER_BODY = "Upper Body"
    LOWER_BODY = "Lower Body"
    CORE_ABS = "Core / Abs"
    FULL_BODY = "Full Body & Power"
    MACHINE_BASED = "Machine-Based"


class ExerciseType(str, Enum):
    # Upper body
    BENCH_PRESS = "Bench Press"
    INCLINE_BENCH_PRESS = "Incline Bench Press"
    CHEST_FLY = "Chest Fly"
    DEADLIFTS = "Deadlifts"
    BENT_OVER_ROWS = "Bent-Over Rows"
    LAT_PULLDOWN = "Lat Pulldown"
    PULL_UPS = "Pull-ups / Chin-ups"
    OVERHEAD_PRESS = "Overhead Press"
    LATERAL_RAISE = "Lateral Raise"
    BARBELL_CURL = "Barbell Curl"
    DUMBBELL_CURL = "Dumbbell Curl"
    SKULL_CRUSHERS = "Skull Crushers"
    WEIGHTED_DIPS = "Weighted Dips"
    # Lower body
    SQUAT = "Squat"
    LEG_PRESS = "Leg Press"
    LUNGES = "Lunges"
    ROMANIAN_DEADLIFT = "Romanian Deadlift"
    HIP_THRUST = "Hip Thrust"
    STANDING_CALF_RAISE = "Standing Calf Raise"
    # Core
    WEIGHTED_PLANK = "Weighted Plank"
    CABLE_CRUNCH = "Cable Crunch"
    HANGING_LEG_RAISE = "Hanging Leg Raise"
    RUSSIAN_TWIST = "Russian Twist"
    TURKISH_GET_UP = "Turkish Get-Up"
    # Full body & power
    CLEAN_AND_PRESS = "Clean & Press"
    POWER_CLEAN = "Power Clean"
    THRUSTER = "Thruster"
    FARMERS_CARRY = "Farmer's Carry"
    # Machines
    CHEST_PRESS = "Chest Press"
    ROW_MACHINE = "Row Machine"
    LEG_EXTENSION = "Leg Extension"
    LEG_CURL = "Leg Curl"
    SMITH_MACHINE = "Smith Machine"

    @property
    def category(self) -> ExerciseCategory:
        return EXERCISE_CATEGORIES[self]

    @property
    def supports_time(self) -> bool:
        return self in TIMED_EXERCISES


EXERCISE_CATEGORIES: dict[ExerciseType, ExerciseCategory] = {}
for _members, _category in (
    (
        "BENCH_PRESS INCLINE_BENCH_PRESS CHEST_FLY DEADLIFTS BENT_OVER_ROWS LAT_PULLDOWN "
        "PULL_UPS OVERHEAD_PRESS LATERAL_RAISE BARBELL_CURL DUMBBELL_CURL SKULL_CRUSHERS "
        "WEIGHTED_DIPS",
        ExerciseCategory.UPPER_BODY,
    ),
    (
        "SQUAT LEG_PRESS LUNGES ROMANIAN_DEADLIFT HIP_THRUST STANDING_CALF_RAISE",
        ExerciseCategory.LOWER_BODY,
    ),
    (
        "WEIGHTED_PLANK CABLE_CRUNCH HANGING_LEG_RAISE RUSSIAN_TWIST TURKISH_GET_UP",
        ExerciseCategory.CORE_ABS,
    ),
    ("CLEAN_AND_PRESS POWER_CLEAN THRUSTER FARMERS_CARRY", ExerciseCategory.FULL_BODY),
    (
        "CHEST_PRESS ROW_MACHINE LEG_EXTENSION LEG_CURL SMITH_MACHINE",
        ExerciseCategory.MACHINE_BASED,
    ),
):
    for _name in _members.split():
        EXERCISE_CATEGORIES[ExerciseType[_name]] = _category

TIMED_EXERCISES = frozenset(
    {ExerciseType.WEIGHTED_PLANK, ExerciseType.TURKISH_GET_UP, ExerciseType.FARMERS_CARRY}
)


class ExerciseSet(BaseModel):
    """One set: any combination of reps, weight (lbs), time (seconds) and distance (miles)."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    reps: Optional[int] = None
    weight: Optional[float] = None
    time: Optional[float] = None
    distance: Optional[float] = None
    timestamp: datetime = Field(default_factory=utc_now)

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return as_utc(v)

    @property
    def is_valid(self) -> bool:
        return any(
            value is not None and value > 0
            for value in (self.reps, self.weight, self.time, self.distance)
        )


class ExerciseSession(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    exercise_type: Optional[ExerciseType] = None
    custom_exercise_id: Optional[UUID] = None
    exercise_name: str = ""
    sets: list[ExerciseSet] = Field(default_factory=list)
    start_time: datetime = Field(default_factory=utc_now)
    end_time: Optional[datetime] = None
    is_completed: bool = False

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v) if v is not None else None

    @model_validator(mode="after")
    def default_name(self) -> "ExerciseSession":
        if not self.exercise_name and self.exercise_type is not None:
            self.exercise_name = self.exercise_type.value
        return self

    def add_set(self, exercise_set: ExerciseSet) -> None:
        self.sets.append(exercise_set)

    def remove_set(self, index: int) -> None:
        if 0 <= index < len(self.sets):
            del self.sets[index]

    def complete(self, at: Optional[datetime] = None) -> None:
        self.end_time = at or utc_now()
        self.is_completed = True

    @property
    def total_reps(self) -> int:
        return sum(s.reps for s in self.sets if s.reps is not None)

    @property
    def total_weight(self) -> float:
        return sum(s.weight for s in self.sets if s.weight is not None)

    @property
    def total_time(self) -> float:
        return sum(s.time for s in self.sets if s.time is not None)

    @property
    def average_weight(self) -> Optional[float]:
        weights = [s.weight for s in self.sets if s.weight is not None]
        if not weights:
            return None
        return sum(weights) / len(weights)

    @property
    def max_weight(self) -> Optional[float]:
        weights = [s.weight for s in self.sets if s.weight is not None]
        return max(weights) if weights else None


class FitnessSession(BaseModel):
    """A workout: ordered exercise sessions between start and complete."""

    id: UUID = Field(default_factory=uuid4)
    exercise_sessions: list[ExerciseSession] = Field(default_factory=list)
    start_time: datetime = Field(default_factory=utc_now)
    end_time: Optional[datetime] = None
    is_active: bool = False
    is_paused: bool = False
    is_completed: bool = False
    is_favorite: bool = False

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v) if v is not None else None

    def add_exercise_session(self, session: ExerciseSession) -> None:
        self.exercise_sessions.append(session)

    def remove_exercise_session(self, index: int) -> None:
        if 0 <= index < len(self.exercise_sessions):
            del self.exercise_sessions[index]

    def start(self) -> None:
        self.is_active = True
        self.is_paused = False

    def pause(self) -> None:
        self.is_paused = True
        self.is_active = False

    def resume(self) -> None:
        self.is_paused = False
        self.is_active = True

    def complete(self, at: Optional[datetime] = None) -> None:
        self.end_time = at or utc_now()
        self.is_active = False
        self.is_paused = False
        self.is_completed = True

    @property
    def total_exercises(self) -> int:
        return len(self.exercise_sessions)

    @property
    def total_sets(self) -> int:
        return sum(len(e.sets) for e in self.exercise_sessions)

    @property
    def total_reps(self) -> int:
        return sum(e.total_reps for e in self.exercise_sessions)

    @property
    def duration(self) -> timedelta:
        return (self.end_time or utc_now()) - self.start_time


class CustomExercise(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str
    category: ExerciseCategory
    date_created: datetime = Field(default_factory=utc_now)
    date_modified: datetime = Field(default_factory=utc_now)

    @property
    def is_valid(self) -> bool:
        return bool(self.name.strip())

    def update(self, name: str, category: ExerciseCategory) -> None:
        self.name = name
        self.category = category
        self.date_modified = utc_now()

    @property
    def exercise_type(self) -> Optional[ExerciseType]:
        """Built-in exercise with the same name, if any."""
        lowered = self.name.strip().lower()
        return next((t for t in ExerciseType if t.value.lower() == lowered), None)


class WorkoutExercise(BaseModel):
    """One planned exercise line in a custom workout template."""

    exercise_type: Optional[ExerciseType] = None
    custom_exercise_id: Optional[UUID] = None
    exercise_name: str = ""
    sets: int = 3
    reps: Optional[int] = None
    weight: Optional[float] = None
    time: Optional[float] = None
    rest_time: Optional[float] = 60
    notes: Optional[str] = None

    @model_validator(mode="after")
    def default_name(self) -> "WorkoutExercise":
        if not self.exercise_name and self.exercise_type is not None:
            self.exercise_name = self.exercise_type.value
        return self


class CustomWorkout(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str
    description: Optional[str] = None
    exercises: list[WorkoutExercise] = Field(default_factory=list)
    created_date: datetime = Field(default_factory=utc_now)
    is_favorite: bool = False
    last_used: Optional[datetime] = None
    use_count: int = 0

    @property
    def is_valid(self) -> bool:
        return bool(self.name.strip()) and all(e.sets > 0 for e in self.exercises)

    @property
    def total_sets(self) -> int:
        return sum(e.sets for e in self.exercises)

    @property
    def total_reps(self) -> int:
        return sum((e.reps or 0) * e.sets for e in self.exercises)

    @property
    def estimated_duration(self) -> int:
        """Minutes: two per set plus each exercise's rest between sets."""
        rest = sum((e.rest_time or 0) * e.sets for e in self.exercises)
        return int((self.total_sets * 120 + rest) / 60)

    def mark_used(self, at: Optional[datetime] = None) -> None:
        self.use_count += 1
        self.last_used = at or utc_now()
