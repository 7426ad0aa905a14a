"""
The data manager owns every in-memory collection.

All mutation goes through it and follows one path: validate, mutate in
memory, save the collection locally, notify observers, then ask for a remote
push. Validation failures come back as ``False``; unknown ids are no-ops;
remote failures land in ``last_sync_error``. Nothing raises to the caller.

The manager is confined to one event loop. Remote pushes run as tasks on that
loop and only touch sync state when they finish.
"""

import asyncio
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from puremetrics.config import Settings, get_settings
from puremetrics.core.exceptions import PureMetricsException, SyncTimeoutError
from puremetrics.core.logging import get_logger
from puremetrics.models.analytics import (
    ExerciseStats,
    FitnessTrendAnalysis,
    FitnessTrendData,
    RollingAverage,
    TimeRange,
    Trend,
)
from puremetrics.models.base import as_utc, same_day, utc_now
from puremetrics.models.fitness import (
    CustomExercise,
    CustomWorkout,
    ExerciseCategory,
    ExerciseSession,
    ExerciseSet,
    ExerciseType,
    FitnessSession,
)
from puremetrics.models.metrics import HealthMetric, MetricType
from puremetrics.models.notes import HealthNote
from puremetrics.models.nutrition import (
    CustomNutritionTemplate,
    NutritionEntry,
    NutritionGoals,
    NutritionSummary,
)
from puremetrics.models.readings import BPSession, Reading
from puremetrics.models.records import (
    BPSessionRecord,
    CustomExerciseRecord,
    CustomWorkoutRecord,
    FitnessSessionRecord,
    HealthMetricRecord,
    HealthNoteRecord,
    NutritionEntryRecord,
    NutritionGoalsRecord,
    NutritionTemplateRecord,
    SyncRecord,
)
from puremetrics.services import analytics
from puremetrics.services import storage
from puremetrics.services.events import StateObserver
from puremetrics.services.remote import RemoteStore
from puremetrics.services.storage import LocalStore

logger = get_logger(__name__)

SYNC_TIMEOUT_MESSAGE = "Sync timed out - using local data"
BACKUP_VERSION = "1.0"


@dataclass(frozen=True)
class _Collection:
    key: str
    model: type
    record: type
    # Attribute used to keep pulled snapshots most-recent-first
    sort_by: Optional[str] = None


COLLECTIONS: dict[str, _Collection] = {
    "sessions": _Collection(storage.SESSIONS_KEY, BPSession, BPSessionRecord, "start_time"),
    "fitness_sessions": _Collection(
        storage.FITNESS_SESSIONS_KEY, FitnessSession, FitnessSessionRecord, "start_time"
    ),
    "health_metrics": _Collection(
        storage.HEALTH_METRICS_KEY, HealthMetric, HealthMetricRecord, "timestamp"
    ),
    "custom_workouts": _Collection(
        storage.CUSTOM_WORKOUTS_KEY, CustomWorkout, CustomWorkoutRecord, "created_date"
    ),
    "custom_exercises": _Collection(
        storage.CUSTOM_EXERCISES_KEY, CustomExercise, CustomExerciseRecord, "date_created"
    ),
    "nutrition_entries": _Collection(
        storage.NUTRITION_ENTRIES_KEY, NutritionEntry, NutritionEntryRecord, "date"
    ),
    "nutrition_templates": _Collection(
        storage.NUTRITION_TEMPLATES_KEY,
        CustomNutritionTemplate,
        NutritionTemplateRecord,
        "date_created",
    ),
    "health_notes": _Collection(storage.HEALTH_NOTES_KEY, HealthNote, HealthNoteRecord, "date"),
}

GOALS = "nutrition_goals"

# Record kind -> owning collection
RECORD_COLLECTIONS: dict[str, str] = {
    entry.record.model_fields["kind"].default: name for name, entry in COLLECTIONS.items()
}
RECORD_COLLECTIONS[NutritionGoalsRecord.model_fields["kind"].default] = GOALS


class DataBackup(BaseModel):
    bp_sessions: list[BPSession]
    fitness_sessions: list[FitnessSession]
    user_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    version: str = BACKUP_VERSION


def _copies(items: list) -> list:
    return [item.model_copy(deep=True) for item in items]


def _index_of(items: list, record_id: UUID) -> Optional[int]:
    return next((i for i, item in enumerate(items) if item.id == record_id), None)


class DataManager:
    """Single owner of the health, fitness and nutrition collections."""

    def __init__(
        self,
        store: LocalStore,
        remote: RemoteStore,
        observer: Optional[StateObserver] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.remote = remote
        self.observer = observer or StateObserver()
        self.settings = settings or get_settings()
        self._now = clock
        self._logger = logger.bind(component="data_manager")

        self._current_session = BPSession()
        self._current_fitness_session = FitnessSession(start_time=self._now())
        self._sessions: list[BPSession] = []
        self._fitness_sessions: list[FitnessSession] = []
        self._health_metrics: list[HealthMetric] = []
        self._custom_workouts: list[CustomWorkout] = []
        self._custom_exercises: list[CustomExercise] = []
        self._nutrition_entries: list[NutritionEntry] = []
        self._nutrition_templates: list[CustomNutritionTemplate] = []
        self._health_notes: list[HealthNote] = []
        self._nutrition_goals = NutritionGoals()

        self.is_syncing = False
        self.last_sync_error: Optional[str] = None
        self.last_synced_at: Optional[datetime] = None
        self._has_synced_for_current_session = False
        self._sync_task: Optional[asyncio.Task] = None

        self.load_local()

    # ------------------------------------------------------------------
    # Read accessors (copies; callers never see live state)
    # ------------------------------------------------------------------

    @property
    def current_session(self) -> BPSession:
        return self._current_session.model_copy(deep=True)

    @property
    def current_fitness_session(self) -> FitnessSession:
        return self._current_fitness_session.model_copy(deep=True)

    @property
    def sessions(self) -> list[BPSession]:
        return _copies(self._sessions)

    @property
    def fitness_sessions(self) -> list[FitnessSession]:
        return _copies(self._fitness_sessions)

    @property
    def health_metrics(self) -> list[HealthMetric]:
        return list(self._health_metrics)

    @property
    def custom_workouts(self) -> list[CustomWorkout]:
        return _copies(self._custom_workouts)

    @property
    def custom_exercises(self) -> list[CustomExercise]:
        return _copies(self._custom_exercises)

    @property
    def nutrition_entries(self) -> list[NutritionEntry]:
        return _copies(self._nutrition_entries)

    @property
    def nutrition_templates(self) -> list[CustomNutritionTemplate]:
        return _copies(self._nutrition_templates)

    @property
    def health_notes(self) -> list[HealthNote]:
        return _copies(self._health_notes)

    @property
    def nutrition_goals(self) -> NutritionGoals:
        return self._nutrition_goals.model_copy()

    def sync_status(self) -> dict[str, Any]:
        return {
            "is_authenticated": self.remote.is_authenticated,
            "user_id": self.remote.current_user_id,
            "is_syncing": self.is_syncing,
            "last_sync_error": self.last_sync_error,
            "last_synced_at": self.last_synced_at,
        }

    # ------------------------------------------------------------------
    # Local persistence
    # ------------------------------------------------------------------

    def load_local(self) -> None:
        """Replace every in-memory collection with what the local store holds."""
        for name, entry in COLLECTIONS.items():
            if name == "nutrition_entries":
                items = self.store.load_nutrition_entries()
            else:
                items = self.store.load(entry.key, entry.model)
            setattr(self, f"_{name}", items)
        self._nutrition_goals = self.store.load_one(
            storage.NUTRITION_GOALS_KEY, NutritionGoals, NutritionGoals
        )
        self._logger.info(
            "local_data_loaded",
            sessions=len(self._sessions),
            fitness_sessions=len(self._fitness_sessions),
            health_metrics=len(self._health_metrics),
            nutrition_entries=len(self._nutrition_entries),
        )
        self.observer.emit("all", "loaded")

    def _save(self, collection: str) -> None:
        if collection == GOALS:
            self.store.save_one(storage.NUTRITION_GOALS_KEY, self._nutrition_goals)
        else:
            self.store.save(COLLECTIONS[collection].key, getattr(self, f"_{collection}"))

    def _commit(self, collection: str, reason: str, push: bool = True) -> None:
        self._save(collection)
        self.observer.emit(collection, reason)
        # Compound operations push once, after their last commit
        if push:
            self.request_push()

    # ------------------------------------------------------------------
    # Remote push
    # ------------------------------------------------------------------

    def snapshot_records(self) -> list[SyncRecord]:
        """Copy every collection into tagged records for a push."""
        records: list[SyncRecord] = []
        for name, entry in COLLECTIONS.items():
            records.extend(
                entry.record(payload=item.model_copy(deep=True)) for item in getattr(self, f"_{name}")
            )
        records.append(NutritionGoalsRecord(payload=self._nutrition_goals.model_copy()))
        return records

    def _set_syncing(self, value: bool) -> None:
        self.is_syncing = value
        self.observer.emit("sync", "started" if value else "finished")

    def request_push(self) -> bool:
        """Start a background push of the current state, if one may run.

        A request made while another sync is in flight is dropped, not queued.
        """
        if not self.remote.is_authenticated:
            self._logger.debug("push_skipped", reason="not_authenticated")
            return False
        if self.is_syncing:
            self._logger.info("push_dropped", reason="sync_in_flight")
            return False
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._logger.warning("push_skipped", reason="no_event_loop")
            return False

        records = self.snapshot_records()
        self.last_sync_error = None
        self._set_syncing(True)
        self._sync_task = loop.create_task(self._push(records))
        return True

    async def _push(self, records: list[SyncRecord]) -> None:
        self._logger.info("push_started", records=len(records))
        error: Optional[str] = None
        try:
            await self.remote.push(records)
        except PureMetricsException as e:
            error = e.message
        except Exception as e:
            self._logger.exception("push_unexpected_error", error=str(e))
            error = str(e) or type(e).__name__
        except asyncio.CancelledError:
            self._logger.warning("push_cancelled", records=len(records))
            error = "Sync cancelled"
            raise
        else:
            self.last_synced_at = self._now()
            self._logger.info("push_succeeded", records=len(records))
        finally:
            if error is not None:
                self._logger.error("push_failed", error=error)
            self.last_sync_error = error
            self._set_syncing(False)

    async def wait_for_sync(self) -> None:
        """Wait for the in-flight push, if any, to finish."""
        task = self._sync_task
        if task is not None and not task.done():
            await task

    async def sync_now(self) -> bool:
        """Push immediately and wait for the result."""
        await self.wait_for_sync()
        if not self.request_push():
            return False
        await self.wait_for_sync()
        return self.last_sync_error is None

    # ------------------------------------------------------------------
    # Remote pull and session events
    # ------------------------------------------------------------------

    def _apply_snapshot(self, records: list[SyncRecord]) -> None:
        buckets: dict[str, list] = {name: [] for name in COLLECTIONS}
        goals: Optional[NutritionGoals] = None
        for record in records:
            collection = RECORD_COLLECTIONS[record.kind]
            if collection == GOALS:
                goals = record.payload
            else:
                buckets[collection].append(record.payload)

        for name, items in buckets.items():
            sort_by = COLLECTIONS[name].sort_by
            if sort_by:
                items.sort(key=lambda item: getattr(item, sort_by), reverse=True)
            setattr(self, f"_{name}", items)
            self._save(name)
        if goals is not None:
            self._nutrition_goals = goals
            self._save(GOALS)

    async def load_from_remote(self) -> bool:
        """Replace local collections with the remote snapshot.

        The snapshot is saved locally but not pushed back. On failure the
        error is recorded and local data is reloaded.
        """
        if not self.remote.is_authenticated:
            self._logger.debug("pull_skipped", reason="not_authenticated")
            return False
        if self.is_syncing:
            self._logger.info("pull_skipped", reason="sync_in_flight")
            return False

        self.last_sync_error = None
        self._set_syncing(True)
        try:
            records = await self.remote.pull()
        except Exception as e:
            message = e.message if isinstance(e, PureMetricsException) else str(e)
            self._logger.error("pull_failed", error=message)
            self.last_sync_error = message
            self._set_syncing(False)
            self.load_local()
            return False
        except asyncio.CancelledError:
            self._set_syncing(False)
            raise

        self._apply_snapshot(records)
        self.last_synced_at = self._now()
        self._set_syncing(False)
        self._logger.info("pull_applied", records=len(records))
        self.observer.emit("all", "pulled")
        return True

    async def on_sign_in(self) -> bool:
        """Pull the remote snapshot once per signed-in session.

        Waits ``sync_debounce_seconds`` first and gives up after
        ``sync_timeout_seconds``, falling back to local data.
        """
        if self.is_syncing or self._has_synced_for_current_session:
            self._logger.info("sign_in_sync_skipped")
            return False
        self._has_synced_for_current_session = True

        await asyncio.sleep(self.settings.sync_debounce_seconds)
        timeout = self.settings.sync_timeout_seconds
        try:
            return await asyncio.wait_for(self.load_from_remote(), timeout=timeout)
        except asyncio.TimeoutError:
            error = SyncTimeoutError(timeout)
            self._logger.warning("sign_in_sync_timeout", error=error.message)
            self.is_syncing = False
            self.last_sync_error = SYNC_TIMEOUT_MESSAGE
            self.load_local()
            self.observer.emit("sync", "timeout")
            return False

    def on_sign_out(self) -> None:
        self._logger.info("sync_state_reset")
        self._has_synced_for_current_session = False
        self.is_syncing = False
        self.last_sync_error = None
        self.observer.emit("sync", "signed_out")

    def create_backup(self) -> bytes:
        backup = DataBackup(
            bp_sessions=self._sessions,
            fitness_sessions=self._fitness_sessions,
            user_id=self.remote.current_user_id,
            created_at=self._now(),
        )
        return backup.model_dump_json().encode()

    # ------------------------------------------------------------------
    # Blood pressure
    # ------------------------------------------------------------------

    def is_valid_reading(self, systolic: int, diastolic: int, heart_rate: Optional[int] = None) -> bool:
        return Reading(systolic=systolic, diastolic=diastolic, heart_rate=heart_rate).is_valid

    def _reading(self, systolic, diastolic, heart_rate, timestamp) -> Reading:
        return Reading(
            systolic=systolic,
            diastolic=diastolic,
            heart_rate=heart_rate,
            timestamp=timestamp or self._now(),
        )

    def add_reading(
        self,
        systolic: int,
        diastolic: int,
        heart_rate: Optional[int] = None,
        timestamp: Optional[datetime] = None,
    ) -> bool:
        """Record a single reading as its own completed session."""
        reading = self._reading(systolic, diastolic, heart_rate, timestamp)
        if not reading.is_valid:
            return False

        session = BPSession(start_time=reading.timestamp)
        session.add_reading(reading)
        session.complete(self._now())
        self._sessions.insert(0, session)
        self._logger.info("reading_added", session_id=str(session.id))
        self._commit("sessions", "reading_added")
        return True

    def start_session(self) -> None:
        self._current_session = BPSession.started(self._now())
        self.observer.emit("current_session", "started")

    def add_reading_to_current_session(
        self,
        systolic: int,
        diastolic: int,
        heart_rate: Optional[int] = None,
        timestamp: Optional[datetime] = None,
    ) -> bool:
        reading = self._reading(systolic, diastolic, heart_rate, timestamp)
        if not reading.is_valid:
            return False
        self._current_session.add_reading(reading)
        self.observer.emit("current_session", "reading_added")
        return True

    def remove_current_reading(self, index: int) -> None:
        self._current_session.remove_reading(index)
        self.observer.emit("current_session", "reading_removed")

    def stop_session(self) -> None:
        self._current_session.stop()
        self.observer.emit("current_session", "stopped")

    def clear_current_session(self) -> None:
        self._current_session = BPSession()
        self.observer.emit("current_session", "cleared")

    def save_current_session(self) -> bool:
        if not self._current_session.readings:
            return False
        session = self._current_session
        session.complete(self._now())
        self._sessions.insert(0, session)
        self._current_session = BPSession()
        self._logger.info("session_saved", session_id=str(session.id), readings=len(session.readings))
        self._commit("sessions", "session_saved")
        return True

    def delete_session(self, session_id: UUID) -> bool:
        index = _index_of(self._sessions, session_id)
        if index is None:
            return False
        del self._sessions[index]
        self._commit("sessions", "session_deleted")
        return True

    def delete_session_at(self, index: int) -> bool:
        if not 0 <= index < len(self._sessions):
            return False
        del self._sessions[index]
        self._commit("sessions", "session_deleted")
        return True

    def delete_sessions_for_date(self, day: date) -> int:
        kept = [s for s in self._sessions if not same_day(s.start_time, day)]
        removed = len(self._sessions) - len(kept)
        if removed:
            self._sessions = kept
            self._commit("sessions", "sessions_deleted")
        return removed

    def delete_all_sessions(self) -> None:
        self._sessions = []
        self._commit("sessions", "sessions_cleared")

    def rolling_average(self, days: int) -> Optional[RollingAverage]:
        return analytics.rolling_average(self._sessions, days, self._now())

    def rolling_averages(self) -> list[RollingAverage]:
        return analytics.rolling_averages(self._sessions, self._now())

    # ------------------------------------------------------------------
    # Health metrics
    # ------------------------------------------------------------------

    def add_health_metric(
        self, metric_type: MetricType, value: float, timestamp: Optional[datetime] = None
    ) -> bool:
        metric = HealthMetric(type=metric_type, value=value, timestamp=timestamp or self._now())
        if not metric.is_valid:
            return False
        self._health_metrics.insert(0, metric)
        self._commit("health_metrics", "metric_added")
        return True

    def remove_health_metric(self, metric_id: UUID) -> bool:
        index = _index_of(self._health_metrics, metric_id)
        if index is None:
            return False
        del self._health_metrics[index]
        self._commit("health_metrics", "metric_removed")
        return True

    def remove_health_metric_at(self, index: int) -> bool:
        if not 0 <= index < len(self._health_metrics):
            return False
        del self._health_metrics[index]
        self._commit("health_metrics", "metric_removed")
        return True

    def get_health_metrics(self, metric_type: MetricType, limit: Optional[int] = None) -> list[HealthMetric]:
        matching = [m for m in self._health_metrics if m.type == metric_type]
        return matching[:limit] if limit is not None else matching

    def latest_health_metric(self, metric_type: MetricType) -> Optional[HealthMetric]:
        return next((m for m in self._health_metrics if m.type == metric_type), None)

    def health_metrics_for_date(self, day: date) -> list[HealthMetric]:
        return [m for m in self._health_metrics if same_day(m.timestamp, day)]

    def health_metrics_between(self, start: datetime, end: datetime) -> list[HealthMetric]:
        start, end = as_utc(start), as_utc(end)
        return [m for m in self._health_metrics if start <= m.timestamp <= end]

    def average_value(self, metric_type: MetricType, days: int = 30) -> Optional[float]:
        return analytics.average_value(self._health_metrics, metric_type, days, self._now())

    def trend(self, metric_type: MetricType, days: int = 7) -> Trend:
        return analytics.metric_trend(
            self._health_metrics,
            metric_type,
            days,
            self._now(),
            threshold_percent=self.settings.trend_percent_threshold,
        )

    # ------------------------------------------------------------------
    # Fitness sessions
    # ------------------------------------------------------------------

    def start_fitness_session(self) -> None:
        if not self._current_fitness_session.exercise_sessions:
            self._current_fitness_session.start_time = self._now()
        self._current_fitness_session.start()
        self.observer.emit("current_fitness_session", "started")

    def pause_fitness_session(self) -> None:
        self._current_fitness_session.pause()
        self.observer.emit("current_fitness_session", "paused")

    def resume_fitness_session(self) -> None:
        self._current_fitness_session.resume()
        self.observer.emit("current_fitness_session", "resumed")

    def stop_fitness_session(self) -> None:
        self._current_fitness_session.complete(self._now())
        self.observer.emit("current_fitness_session", "stopped")

    def add_exercise_session(
        self,
        exercise_type: Optional[ExerciseType] = None,
        custom_exercise_id: Optional[UUID] = None,
    ) -> bool:
        """Append an exercise, built-in or custom, to the current workout."""
        name = ""
        if custom_exercise_id is not None:
            index = _index_of(self._custom_exercises, custom_exercise_id)
            if index is None:
                return False
            custom = self._custom_exercises[index]
            name = custom.name
            exercise_type = exercise_type or custom.exercise_type
        elif exercise_type is None:
            return False

        self._current_fitness_session.add_exercise_session(
            ExerciseSession(
                exercise_type=exercise_type,
                custom_exercise_id=custom_exercise_id,
                exercise_name=name,
                start_time=self._now(),
            )
        )
        self.observer.emit("current_fitness_session", "exercise_added")
        return True

    def add_exercise_set(self, exercise_index: int, exercise_set: ExerciseSet) -> bool:
        exercises = self._current_fitness_session.exercise_sessions
        if not 0 <= exercise_index < len(exercises):
            return False
        if not exercise_set.is_valid:
            return False
        exercises[exercise_index].add_set(exercise_set)
        self.observer.emit("current_fitness_session", "set_added")
        return True

    def remove_exercise_set(self, exercise_index: int, set_index: int) -> None:
        exercises = self._current_fitness_session.exercise_sessions
        if 0 <= exercise_index < len(exercises):
            exercises[exercise_index].remove_set(set_index)
            self.observer.emit("current_fitness_session", "set_removed")

    def remove_exercise_session(self, index: int) -> None:
        self._current_fitness_session.remove_exercise_session(index)
        self.observer.emit("current_fitness_session", "exercise_removed")

    def complete_exercise_session(self, index: int) -> None:
        exercises = self._current_fitness_session.exercise_sessions
        if 0 <= index < len(exercises):
            exercises[index].complete(self._now())
            self.observer.emit("current_fitness_session", "exercise_completed")

    def save_current_fitness_session(self) -> bool:
        if not self._complete_current_fitness_session():
            return False
        self._commit("fitness_sessions", "session_saved")
        return True

    def _complete_current_fitness_session(self) -> bool:
        if not self._current_fitness_session.exercise_sessions:
            return False
        session = self._current_fitness_session
        session.complete(self._now())
        self._fitness_sessions.insert(0, session)
        self._current_fitness_session = FitnessSession(start_time=self._now())
        self._logger.info(
            "fitness_session_saved",
            session_id=str(session.id),
            exercises=session.total_exercises,
            sets=session.total_sets,
        )
        return True

    def clear_current_fitness_session(self) -> None:
        self._current_fitness_session = FitnessSession(start_time=self._now())
        self.observer.emit("current_fitness_session", "cleared")

    def toggle_workout_favorite(self, session_id: UUID) -> bool:
        index = _index_of(self._fitness_sessions, session_id)
        if index is None:
            return False
        session = self._fitness_sessions[index]
        session.is_favorite = not session.is_favorite
        self._commit("fitness_sessions", "favorite_toggled")
        return True

    def delete_fitness_session(self, session_id: UUID) -> bool:
        index = _index_of(self._fitness_sessions, session_id)
        if index is None:
            return False
        del self._fitness_sessions[index]
        self._commit("fitness_sessions", "session_deleted")
        return True

    def fitness_trends(self, exercise_type: ExerciseType, time_range: TimeRange) -> list[FitnessTrendData]:
        return analytics.fitness_trends(self._fitness_sessions, exercise_type, time_range, self._now())

    def fitness_trend_analysis(
        self, exercise_type: ExerciseType, time_range: TimeRange
    ) -> FitnessTrendAnalysis:
        return analytics.fitness_trend_analysis(
            self._fitness_sessions,
            exercise_type,
            time_range,
            self._now(),
            threshold_lbs=self.settings.fitness_weight_threshold_lbs,
        )

    def exercise_stats(self, exercise_type: ExerciseType) -> ExerciseStats:
        return analytics.exercise_stats(self._fitness_sessions, exercise_type)

    # ------------------------------------------------------------------
    # Custom workouts and exercises
    # ------------------------------------------------------------------

    def save_custom_workout(self, workout: CustomWorkout) -> bool:
        if not workout.is_valid:
            return False
        self._custom_workouts.insert(0, workout.model_copy(deep=True))
        self._commit("custom_workouts", "workout_saved")
        return True

    def update_custom_workout(self, workout: CustomWorkout) -> bool:
        index = _index_of(self._custom_workouts, workout.id)
        if index is None or not workout.is_valid:
            return False
        self._custom_workouts[index] = workout.model_copy(deep=True)
        self._commit("custom_workouts", "workout_updated")
        return True

    def delete_custom_workout(self, workout_id: UUID) -> bool:
        index = _index_of(self._custom_workouts, workout_id)
        if index is None:
            return False
        del self._custom_workouts[index]
        self._commit("custom_workouts", "workout_deleted")
        return True

    def toggle_custom_workout_favorite(self, workout_id: UUID) -> bool:
        index = _index_of(self._custom_workouts, workout_id)
        if index is None:
            return False
        workout = self._custom_workouts[index]
        workout.is_favorite = not workout.is_favorite
        self._commit("custom_workouts", "favorite_toggled")
        return True

    def apply_custom_workout(self, workout_id: UUID) -> bool:
        """Load a template's exercises into a fresh current workout.

        A current workout that already has exercises is saved first.
        """
        index = _index_of(self._custom_workouts, workout_id)
        if index is None:
            return False
        if self._complete_current_fitness_session():
            self._commit("fitness_sessions", "session_saved", push=False)

        workout = self._custom_workouts[index]
        session = FitnessSession(start_time=self._now())
        for planned in workout.exercises:
            session.add_exercise_session(
                ExerciseSession(
                    exercise_type=planned.exercise_type,
                    custom_exercise_id=planned.custom_exercise_id,
                    exercise_name=planned.exercise_name,
                    start_time=self._now(),
                )
            )
        self._current_fitness_session = session
        self.observer.emit("current_fitness_session", "workout_applied")

        workout.mark_used(self._now())
        self._commit("custom_workouts", "workout_used")
        return True

    def add_custom_exercise(self, exercise: CustomExercise) -> bool:
        if not exercise.is_valid:
            return False
        self._custom_exercises.insert(0, exercise.model_copy(deep=True))
        self._commit("custom_exercises", "exercise_added")
        return True

    def update_custom_exercise(self, exercise_id: UUID, name: str, category: ExerciseCategory) -> bool:
        index = _index_of(self._custom_exercises, exercise_id)
        if index is None or not name.strip():
            return False
        self._custom_exercises[index].update(name, category)
        self._commit("custom_exercises", "exercise_updated")
        return True

    def delete_custom_exercise(self, exercise_id: UUID) -> bool:
        index = _index_of(self._custom_exercises, exercise_id)
        if index is None:
            return False
        del self._custom_exercises[index]
        self._commit("custom_exercises", "exercise_deleted")
        return True

    # ------------------------------------------------------------------
    # Nutrition
    # ------------------------------------------------------------------

    def add_nutrition_entry(self, entry: NutritionEntry) -> bool:
        if not entry.is_valid:
            return False
        self._nutrition_entries.insert(0, entry.model_copy(deep=True))
        self._commit("nutrition_entries", "entry_added")
        return True

    def update_nutrition_entry(self, entry: NutritionEntry) -> bool:
        index = _index_of(self._nutrition_entries, entry.id)
        if index is None or not entry.is_valid:
            return False
        self._nutrition_entries[index] = entry.model_copy(deep=True)
        self._commit("nutrition_entries", "entry_updated")
        return True

    def delete_nutrition_entry(self, entry_id: UUID) -> bool:
        index = _index_of(self._nutrition_entries, entry_id)
        if index is None:
            return False
        del self._nutrition_entries[index]
        self._commit("nutrition_entries", "entry_deleted")
        return True

    def nutrition_entries_for_date(self, day: date) -> list[NutritionEntry]:
        return [e.model_copy(deep=True) for e in self._nutrition_entries if same_day(e.date, day)]

    def update_nutrition_goals(self, goals: NutritionGoals) -> bool:
        if not goals.is_valid:
            return False
        self._nutrition_goals = goals.model_copy()
        self._commit(GOALS, "goals_updated")
        return True

    def nutrition_summary(self, day: Optional[date] = None) -> NutritionSummary:
        day = day or self._now().date()
        return analytics.nutrition_summary(self._nutrition_entries, self._nutrition_goals, day)

    def save_nutrition_template(self, template: CustomNutritionTemplate) -> bool:
        """Insert a new template, or replace the stored one with the same id."""
        if not template.is_valid:
            return False
        index = _index_of(self._nutrition_templates, template.id)
        if index is None:
            self._nutrition_templates.insert(0, template.model_copy(deep=True))
        else:
            self._nutrition_templates[index] = template.model_copy(deep=True)
        self._commit("nutrition_templates", "template_saved")
        return True

    def delete_nutrition_template(self, template_id: UUID) -> bool:
        index = _index_of(self._nutrition_templates, template_id)
        if index is None:
            return False
        del self._nutrition_templates[index]
        self._commit("nutrition_templates", "template_deleted")
        return True

    def apply_nutrition_template(
        self, template_id: UUID, at: Optional[datetime] = None
    ) -> Optional[NutritionEntry]:
        """Log an entry from a template and bump its usage counters."""
        index = _index_of(self._nutrition_templates, template_id)
        if index is None:
            return None
        template = self._nutrition_templates[index]
        entry = template.to_nutrition_entry(at or self._now())
        if not entry.is_valid:
            return None
        template.mark_used(self._now())
        self._nutrition_entries.insert(0, entry.model_copy(deep=True))
        self._commit("nutrition_entries", "entry_added", push=False)
        self._commit("nutrition_templates", "template_used")
        return entry

    # ------------------------------------------------------------------
    # Health notes
    # ------------------------------------------------------------------

    def add_health_note(self, note: HealthNote) -> bool:
        if not note.is_valid:
            return False
        note = note.model_copy(deep=True)
        if not note.user_id and self.remote.current_user_id:
            note.user_id = self.remote.current_user_id
        self._health_notes.insert(0, note)
        self._commit("health_notes", "note_added")
        return True

    def update_health_note(self, note_id: UUID, text: str) -> bool:
        index = _index_of(self._health_notes, note_id)
        if index is None or not text.strip():
            return False
        self._health_notes[index] = self._health_notes[index].edited(text, self._now())
        self._commit("health_notes", "note_updated")
        return True

    def delete_health_note(self, note_id: UUID) -> bool:
        index = _index_of(self._health_notes, note_id)
        if index is None:
            return False
        del self._health_notes[index]
        self._commit("health_notes", "note_deleted")
        return True

    def health_notes_for(self, metric_type: str, day: date) -> list[HealthNote]:
        notes = [n for n in self._health_notes if n.matches(metric_type, day)]
        return _copies(sorted(notes, key=lambda n: n.created_at, reverse=True))

    def get_record(self, collection: str, record_id: UUID) -> Optional[BaseModel]:
        """Copy of one record from a collection, or None."""
        items = getattr(self, f"_{collection}")
        index = _index_of(items, record_id)
        return items[index].model_copy(deep=True) if index is not None else None

