from puremetrics.models.analytics import (
    ExerciseStats,
    FitnessTrendAnalysis,
    FitnessTrendData,
    RollingAverage,
    TimeRange,
    Trend,
)
from puremetrics.models.fitness import (
    CustomExercise,
    CustomWorkout,
    ExerciseCategory,
    ExerciseSession,
    ExerciseSet,
    ExerciseType,
    FitnessSession,
    WorkoutExercise,
)
from puremetrics.models.metrics import HealthMetric, MetricType
from puremetrics.models.notes import HealthNote
from puremetrics.models.nutrition import (
    CustomNutritionTemplate,
    LegacyNutritionEntry,
    NutritionEntry,
    NutritionGoals,
    NutritionSummary,
)
from puremetrics.models.readings import BPCategory, BPSession, Reading
from puremetrics.models.records import RECORD_KINDS, SyncRecord, parse_record

__all__ = [
    "BPCategory",
    "BPSession",
    "CustomExercise",
    "CustomNutritionTemplate",
    "CustomWorkout",
    "ExerciseCategory",
    "ExerciseSession",
    "ExerciseSet",
    "ExerciseStats",
    "ExerciseType",
    "FitnessSession",
    "FitnessTrendAnalysis",
    "FitnessTrendData",
    "HealthMetric",
    "HealthNote",
    "LegacyNutritionEntry",
    "MetricType",
    "NutritionEntry",
    "NutritionGoals",
    "NutritionSummary",
    "RECORD_KINDS",
    "Reading",
    "RollingAverage",
    "SyncRecord",
    "TimeRange",
    "Trend",
    "WorkoutExercise",
    "parse_record",
]
