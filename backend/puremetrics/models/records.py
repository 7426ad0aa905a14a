"""Tagged union of everything that travels to and from the remote store.

Each variant wraps one payload record under a fixed ``kind`` literal, so a
pulled snapshot is routed by ``record.kind`` rather than by inspecting the
payload's class.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from puremetrics.models.fitness import CustomExercise, CustomWorkout, FitnessSession
from puremetrics.models.metrics import HealthMetric
from puremetrics.models.notes import HealthNote
from puremetrics.models.nutrition import CustomNutritionTemplate, NutritionEntry, NutritionGoals
from puremetrics.models.readings import BPSession

# Document id of the single goals record per user
GOALS_DOCUMENT_ID = "current"


class _Record(BaseModel):
    @property
    def document_id(self) -> str:
        return str(self.payload.id)


class BPSessionRecord(_Record):
    kind: Literal["bp_session"] = "bp_session"
    payload: BPSession


class FitnessSessionRecord(_Record):
    kind: Literal["fitness_session"] = "fitness_session"
    payload: FitnessSession


class HealthMetricRecord(_Record):
    kind: Literal["health_metric"] = "health_metric"
    payload: HealthMetric


class NutritionEntryRecord(_Record):
    kind: Literal["nutrition_entry"] = "nutrition_entry"
    payload: NutritionEntry


class CustomWorkoutRecord(_Record):
    kind: Literal["custom_workout"] = "custom_workout"
    payload: CustomWorkout


class CustomExerciseRecord(_Record):
    kind: Literal["custom_exercise"] = "custom_exercise"
    payload: CustomExercise


class NutritionTemplateRecord(_Record):
    kind: Literal["nutrition_template"] = "nutrition_template"
    payload: CustomNutritionTemplate


class HealthNoteRecord(_Record):
    kind: Literal["health_note"] = "health_note"
    payload: HealthNote


class NutritionGoalsRecord(_Record):
    kind: Literal["nutrition_goals"] = "nutrition_goals"
    payload: NutritionGoals

    @property
    def document_id(self) -> str:
        return GOALS_DOCUMENT_ID


SyncRecord = Annotated[
    Union[
        BPSessionRecord,
        FitnessSessionRecord,
        HealthMetricRecord,
        NutritionEntryRecord,
        CustomWorkoutRecord,
        CustomExerciseRecord,
        NutritionTemplateRecord,
        HealthNoteRecord,
        NutritionGoalsRecord,
    ],
    Field(discriminator="kind"),
]

sync_record_adapter: TypeAdapter[SyncRecord] = TypeAdapter(SyncRecord)

RECORD_KINDS: tuple[str, ...] = (
    "bp_session",
    "fitness_session",
    "health_metric",
    "nutrition_entry",
    "custom_workout",
    "custom_exercise",
    "nutrition_template",
    "health_note",
    "nutrition_goals",
)


def parse_record(kind: str, payload: dict) -> SyncRecord:
    """Build the variant for ``kind`` from a plain payload mapping."""
    return sync_record_adapter.validate_python({"kind": kind, "payload": payload})
