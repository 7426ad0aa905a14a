"""Tests for metric, fitness, nutrition and note records."""

import math
from datetime import datetime, timedelta, timezone

import pytest

from puremetrics.models import (
    CustomExercise,
    CustomNutritionTemplate,
    CustomWorkout,
    ExerciseCategory,
    ExerciseSession,
    ExerciseSet,
    ExerciseType,
    FitnessSession,
    HealthMetric,
    HealthNote,
    LegacyNutritionEntry,
    MetricType,
    NutritionEntry,
    NutritionGoals,
    NutritionSummary,
    WorkoutExercise,
)

T0 = datetime(2025, 6, 1, 8, 0, tzinfo=timezone.utc)


class TestHealthMetric:
    """Test per-type ranges and formatting."""

    @pytest.mark.parametrize(
        "metric_type,value,valid",
        [
            (MetricType.WEIGHT, 150, True),
            (MetricType.WEIGHT, 49.9, False),
            (MetricType.WEIGHT, 500, True),
            (MetricType.WEIGHT, 501, False),
            (MetricType.BLOOD_SUGAR, 20, True),
            (MetricType.BLOOD_SUGAR, 601, False),
            (MetricType.HEART_RATE, 72, True),
            (MetricType.HEART_RATE, 201, False),
            (MetricType.BODY_FAT, 0.5, False),
            (MetricType.BODY_FAT, 22.5, True),
            (MetricType.LEAN_BODY_MASS, 140, True),
            (MetricType.LEAN_BODY_MASS, 401, False),
        ],
    )
    def test_ranges(self, metric_type, value, valid):
        assert HealthMetric(type=metric_type, value=value).is_valid is valid

    def test_formatting(self):
        assert HealthMetric(type=MetricType.HEART_RATE, value=72.4).display_string == "72 bpm"
        assert HealthMetric(type=MetricType.WEIGHT, value=150.26).display_string == "150.3 lbs"
        assert MetricType.BODY_FAT.display_name == "Body Fat %"


class TestFitnessRecords:
    """Test sets, exercise sessions and workouts."""

    def test_set_needs_one_positive_measure(self):
        assert not ExerciseSet().is_valid
        assert not ExerciseSet(reps=0, weight=0).is_valid
        assert ExerciseSet(reps=10).is_valid
        assert ExerciseSet(time=30).is_valid
        assert ExerciseSet(distance=1.5).is_valid

    def test_exercise_session_totals(self):
        session = ExerciseSession(exercise_type=ExerciseType.BENCH_PRESS)
        assert session.exercise_name == "Bench Press"
        assert session.average_weight is None
        session.add_set(ExerciseSet(reps=10, weight=100))
        session.add_set(ExerciseSet(reps=8, weight=120))
        session.add_set(ExerciseSet(time=60))
        assert session.total_reps == 18
        assert session.total_weight == 220
        assert session.total_time == 60
        assert session.average_weight == 110
        assert session.max_weight == 120

    def test_exercise_catalogue(self):
        assert ExerciseType.SQUAT.category == ExerciseCategory.LOWER_BODY
        assert ExerciseType.WEIGHTED_PLANK.supports_time
        assert not ExerciseType.BENCH_PRESS.supports_time
        assert all(t.category for t in ExerciseType)

    def test_fitness_session_lifecycle(self):
        session = FitnessSession(start_time=T0)
        session.start()
        assert session.is_active
        session.pause()
        assert session.is_paused and not session.is_active
        session.resume()
        assert session.is_active and not session.is_paused
        session.complete(T0 + timedelta(minutes=45))
        assert session.is_completed
        assert not session.is_active
        assert session.duration == timedelta(minutes=45)

    def test_custom_workout_estimates(self):
        workout = CustomWorkout(
            name="Push day",
            exercises=[
                WorkoutExercise(exercise_type=ExerciseType.BENCH_PRESS, sets=3, reps=10, rest_time=60),
                WorkoutExercise(exercise_type=ExerciseType.OVERHEAD_PRESS, sets=3, reps=8, rest_time=60),
            ],
        )
        assert workout.is_valid
        assert workout.total_sets == 6
        assert workout.total_reps == 54
        # 6 sets * 2 min + 6 * 60s rest
        assert workout.estimated_duration == 18

    def test_custom_workout_requires_name_and_sets(self):
        assert not CustomWorkout(name="  ").is_valid
        assert not CustomWorkout(
            name="Legs", exercises=[WorkoutExercise(exercise_type=ExerciseType.SQUAT, sets=0)]
        ).is_valid

    def test_custom_exercise_matches_builtin(self):
        exercise = CustomExercise(name="squat", category=ExerciseCategory.LOWER_BODY)
        assert exercise.exercise_type == ExerciseType.SQUAT
        assert CustomExercise(name="Sled push", category=ExerciseCategory.FULL_BODY).exercise_type is None


class TestNutritionRecords:
    """Test nutrition entries, goals and templates."""

    def test_entry_validity(self):
        assert NutritionEntry(calories=500, protein=30).is_valid
        assert not NutritionEntry(calories=-1).is_valid
        assert not NutritionEntry(calories=math.nan).is_valid
        assert not NutritionEntry(sodium=math.inf).is_valid
        assert not NutritionEntry(natural_sugar=-2).is_valid

    def test_macro_percentages(self):
        entry = NutritionEntry(calories=400, protein=25, carbohydrates=50, fat=10)
        assert entry.protein_percentage == 25
        assert entry.carb_percentage == 50
        assert entry.fat_percentage == 22.5
        assert NutritionEntry().protein_percentage == 0

    def test_legacy_upgrade_backfills_added_sugar(self):
        legacy = LegacyNutritionEntry(date=T0, calories=200, sugar=12)
        entry = legacy.upgrade()
        assert entry.id == legacy.id
        assert entry.added_sugar == 0
        assert entry.sugar == 12

    def test_goal_defaults(self):
        goals = NutritionGoals()
        assert goals.daily_calories == 2000
        assert goals.daily_added_sugar == 20
        assert goals.is_valid
        assert not NutritionGoals(daily_calories=-5).is_valid

    def test_summary_progress_is_clamped(self):
        entries = [NutritionEntry(calories=1500), NutritionEntry(calories=1000, protein=math.nan)]
        summary = NutritionSummary.from_entries(entries, NutritionGoals(), T0.date())
        assert summary.totals["calories"] == 2500
        assert summary.totals["protein"] == 0
        assert summary.progress("calories") == 1.0
        assert summary.progress("fiber") == 0.0

    def test_template_builds_labelled_entry(self):
        template = CustomNutritionTemplate(name="Oatmeal", calories=300, fiber=8, added_sugar=4)
        entry = template.to_nutrition_entry(T0)
        assert entry.label == "Oatmeal"
        assert entry.calories == 300
        assert entry.added_sugar == 4
        assert entry.date == T0
        assert entry.id != template.id


class TestHealthNote:
    """Test note validity and keying."""

    def test_blank_note_is_invalid(self):
        assert not HealthNote(metric_type="weight", date=T0, note="   ").is_valid
        assert not HealthNote(metric_type=" ", date=T0, note="felt fine").is_valid
        assert HealthNote(metric_type="weight", date=T0, note="after travel").is_valid

    def test_matches_day_and_type(self):
        note = HealthNote(user_id="u1", metric_type="weight", date=T0, note="x")
        assert note.matches("weight", T0.date())
        assert note.matches("weight", T0.date(), user_id="u1")
        assert not note.matches("weight", T0.date(), user_id="u2")
        assert not note.matches("steps", T0.date())
        assert not note.matches("weight", (T0 + timedelta(days=1)).date())
