"""Local persistence: one serialized blob per collection.

The store is total. Writes that fail are logged and dropped, reads that fail
to decode are logged and come back empty, so a corrupted cache resets instead
of taking the app down with it. The raw bytes of an undecodable blob are not
kept.
"""
from datetime import datetime
from functools import lru_cache
from typing import Callable, Optional, Sequence, TypeVar

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from puremetrics.core.exceptions import StorageError
from puremetrics.core.logging import get_logger
from puremetrics.models.nutrition import LegacyNutritionEntry, NutritionEntry
from puremetrics.models.store import LocalBlob

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Blob keys, one per collection
SESSIONS_KEY = "BPSessions"
FITNESS_SESSIONS_KEY = "FitnessSessions"
HEALTH_METRICS_KEY = "HealthMetrics"
CUSTOM_WORKOUTS_KEY = "CustomWorkouts"
NUTRITION_ENTRIES_KEY = "NutritionEntries"
NUTRITION_GOALS_KEY = "NutritionGoals"
CUSTOM_EXERCISES_KEY = "CustomExercises"
NUTRITION_TEMPLATES_KEY = "NutritionTemplates"
HEALTH_NOTES_KEY = "HealthNotes"


@lru_cache(maxsize=None)
def _list_adapter(model: type) -> TypeAdapter:
    return TypeAdapter(list[model])


class LocalStore:
    """Key-value blob store backed by the ``local_blobs`` table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    # ------------------------------------------------------------------
    # Raw blobs
    # ------------------------------------------------------------------

    def _write(self, key: str, data: bytes) -> bool:
        try:
            with self._session_factory() as db:
                blob = db.get(LocalBlob, key)
                if blob:
                    blob.data = data
                    blob.size_bytes = len(data)
                    blob.updated_at = datetime.utcnow()
                else:
                    db.add(LocalBlob(key=key, data=data, size_bytes=len(data)))
                db.commit()
        except SQLAlchemyError as e:
            logger.error("local_save_failed", key=key, error=str(e))
            return False
        return True

    def _read(self, key: str) -> Optional[bytes]:
        try:
            with self._session_factory() as db:
                blob = db.get(LocalBlob, key)
                return bytes(blob.data) if blob else None
        except SQLAlchemyError as e:
            logger.error("local_read_failed", key=key, error=str(e))
            return None

    def delete(self, key: str) -> None:
        try:
            with self._session_factory() as db:
                blob = db.get(LocalBlob, key)
                if blob:
                    db.delete(blob)
                    db.commit()
        except SQLAlchemyError as e:
            logger.error("local_delete_failed", key=key, error=str(e))

    def keys(self) -> list[str]:
        try:
            with self._session_factory() as db:
                return [row.key for row in db.query(LocalBlob.key).order_by(LocalBlob.key)]
        except SQLAlchemyError as e:
            logger.error("local_keys_failed", error=str(e))
            return []

    def ping(self) -> None:
        """Round-trip the database; raises StorageError when it is unreachable."""
        try:
            with self._session_factory() as db:
                db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise StorageError("*", str(e)) from e

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    def save(self, key: str, records: Sequence[BaseModel]) -> bool:
        """Serialize ``records`` and replace the blob stored under ``key``."""
        records = list(records)
        model = type(records[0]) if records else BaseModel
        try:
            data = _list_adapter(model).dump_json(records)
        except (PydanticValidationError, ValueError, TypeError) as e:
            logger.error("local_encode_failed", key=key, error=str(e))
            return False
        saved = self._write(key, data)
        if saved:
            logger.debug("local_saved", key=key, count=len(records), size_bytes=len(data))
        return saved

    def load(self, key: str, model: type[ModelT]) -> list[ModelT]:
        """Decode the collection under ``key``; missing or corrupt gives ``[]``."""
        data = self._read(key)
        if data is None:
            return []
        try:
            return _list_adapter(model).validate_json(data)
        except PydanticValidationError as e:
            logger.warning(
                "local_decode_failed",
                key=key,
                model=model.__name__,
                error_count=e.error_count(),
            )
            return []

    def save_one(self, key: str, record: BaseModel) -> bool:
        return self._write(key, record.model_dump_json().encode())

    def load_one(self, key: str, model: type[ModelT], default: Callable[[], ModelT]) -> ModelT:
        data = self._read(key)
        if data is None:
            return default()
        try:
            return model.model_validate_json(data)
        except PydanticValidationError as e:
            logger.warning("local_decode_failed", key=key, model=model.__name__, error_count=e.error_count())
            return default()

    # ------------------------------------------------------------------
    # Nutrition entries, with the one historical shape migration
    # ------------------------------------------------------------------

    def load_nutrition_entries(self) -> list[NutritionEntry]:
        """Load nutrition entries, upgrading blobs written before ``added_sugar``.

        The upgraded list is written back in the current shape so the
        migration runs once.
        """
        data = self._read(NUTRITION_ENTRIES_KEY)
        if data is None:
            return []
        try:
            return _list_adapter(NutritionEntry).validate_json(data, context={"stored": True})
        except PydanticValidationError as e:
            logger.info("nutrition_entries_legacy_check", error_count=e.error_count())

        try:
            legacy = _list_adapter(LegacyNutritionEntry).validate_json(data)
        except PydanticValidationError as e:
            logger.warning(
                "local_decode_failed",
                key=NUTRITION_ENTRIES_KEY,
                model="LegacyNutritionEntry",
                error_count=e.error_count(),
            )
            return []

        entries = [entry.upgrade() for entry in legacy]
        self.save(NUTRITION_ENTRIES_KEY, entries)
        logger.info("nutrition_entries_migrated", count=len(entries))
        return entries
