"""Nutrition entries, daily goals, summaries and reusable templates."""

import math
from datetime import date, datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from puremetrics.models.base import as_utc, utc_now

# Fields summed into a NutritionSummary, keyed by the NutritionGoals attribute
NUTRIENT_GOALS = {
    "calories": "daily_calories",
    "protein": "daily_protein",
    "carbohydrates": "daily_carbohydrates",
    "fat": "daily_fat",
    "sodium": "daily_sodium",
    "sugar": "daily_sugar",
    "natural_sugar": "daily_natural_sugar",
    "added_sugar": "daily_added_sugar",
    "fiber": "daily_fiber",
    "cholesterol": "daily_cholesterol",
    "water": "daily_water",
}


def _finite(value: Optional[float]) -> float:
    if value is None or not math.isfinite(value):
        return 0.0
    return value


class _NutrientFields(BaseModel):
    calories: float = 0
    protein: float = 0  # g
    carbohydrates: float = 0  # g
    fat: float = 0  # g
    sodium: float = 0  # mg
    sugar: float = 0  # g, total
    natural_sugar: Optional[float] = None  # g
    fiber: float = 0  # g
    cholesterol: float = 0  # mg
    water: float = 0  # oz
    notes: Optional[str] = None


class LegacyNutritionEntry(_NutrientFields):
    """Stored shape from before ``added_sugar`` existed."""

    id: UUID = Field(default_factory=uuid4)
    date: datetime
    label: Optional[str] = None

    def upgrade(self) -> "NutritionEntry":
        return NutritionEntry(**self.model_dump(), added_sugar=0.0)


class NutritionEntry(_NutrientFields):
    id: UUID = Field(default_factory=uuid4)
    date: datetime = Field(default_factory=utc_now)
    added_sugar: float = 0  # g
    label: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def require_stored_fields(cls, data, info: ValidationInfo):
        # Decoding persisted data must reject the legacy shape so it can be migrated
        if info.context and info.context.get("stored") and isinstance(data, dict):
            if "added_sugar" not in data:
                raise ValueError("stored entry is missing added_sugar")
        return data

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return as_utc(v)

    @property
    def is_valid(self) -> bool:
        values = [
            self.calories,
            self.protein,
            self.carbohydrates,
            self.fat,
            self.sodium,
            self.sugar,
            self.added_sugar,
            self.fiber,
            self.cholesterol,
            self.water,
        ]
        if self.natural_sugar is not None:
            values.append(self.natural_sugar)
        return all(math.isfinite(v) and v >= 0 for v in values)

    def _macro_percentage(self, grams: float, kcal_per_gram: int) -> float:
        if self.calories <= 0:
            return 0.0
        return grams * kcal_per_gram / self.calories * 100

    @property
    def protein_percentage(self) -> float:
        return self._macro_percentage(self.protein, 4)

    @property
    def carb_percentage(self) -> float:
        return self._macro_percentage(self.carbohydrates, 4)

    @property
    def fat_percentage(self) -> float:
        return self._macro_percentage(self.fat, 9)


class NutritionGoals(BaseModel):
    daily_calories: float = 2000
    daily_protein: float = 150
    daily_carbohydrates: float = 250
    daily_fat: float = 65
    daily_sodium: float = 2300
    daily_sugar: float = 50
    daily_natural_sugar: float = 30
    daily_added_sugar: float = 20
    daily_fiber: float = 25
    daily_cholesterol: float = 300
    daily_water: float = 64

    @property
    def is_valid(self) -> bool:
        return all(math.isfinite(v) and v >= 0 for v in self.model_dump().values())


class NutritionSummary(BaseModel):
    day: date
    totals: dict[str, float]
    entry_count: int
    goals: NutritionGoals

    @classmethod
    def from_entries(
        cls, entries: list[NutritionEntry], goals: NutritionGoals, day: date
    ) -> "NutritionSummary":
        totals = {
            field: sum(_finite(getattr(entry, field)) for entry in entries)
            for field in NUTRIENT_GOALS
        }
        return cls(day=day, totals=totals, entry_count=len(entries), goals=goals)

    def progress(self, field: str) -> float:
        """Fraction of the daily goal reached, clamped to [0, 1]."""
        goal = getattr(self.goals, NUTRIENT_GOALS[field])
        actual = self.totals.get(field, 0.0)
        if goal <= 0 or not math.isfinite(goal) or not math.isfinite(actual):
            return 0.0
        return max(0.0, min(actual / goal, 1.0))


class CustomNutritionTemplate(_NutrientFields):
    id: UUID = Field(default_factory=uuid4)
    name: str
    added_sugar: float = 0
    serving_size: str = "1 serving"
    category: str = "General"
    date_created: datetime = Field(default_factory=utc_now)
    last_used: Optional[datetime] = None
    use_count: int = 0

    @property
    def is_valid(self) -> bool:
        return bool(self.name.strip()) and self.to_nutrition_entry().is_valid

    def to_nutrition_entry(self, at: Optional[datetime] = None) -> NutritionEntry:
        nutrients = self.model_dump(include=set(_NutrientFields.model_fields) | {"added_sugar"})
        return NutritionEntry(**nutrients, date=at or utc_now(), label=self.name)

    def mark_used(self, at: Optional[datetime] = None) -> None:
        self.use_count += 1
        self.last_used = at or utc_now()
