"""Tests for rolling averages, trends and fitness analysis."""

from datetime import timedelta

import pytest

from conftest import NOW
from puremetrics.models import (
    BPSession,
    ExerciseSession,
    ExerciseSet,
    ExerciseType,
    FitnessSession,
    HealthMetric,
    MetricType,
    NutritionEntry,
    NutritionGoals,
    Reading,
    TimeRange,
    Trend,
)
from puremetrics.services import analytics


def bp_session(days_ago, *pairs):
    start = NOW - timedelta(days=days_ago)
    session = BPSession(start_time=start)
    for systolic, diastolic in pairs:
        session.add_reading(Reading(systolic=systolic, diastolic=diastolic, timestamp=start))
    session.complete(start + timedelta(minutes=5))
    return session


def weight(value, days_ago):
    return HealthMetric(type=MetricType.WEIGHT, value=value, timestamp=NOW - timedelta(days=days_ago))


def workout(days_ago, exercise_type, *sets):
    start = NOW - timedelta(days=days_ago)
    exercise = ExerciseSession(exercise_type=exercise_type, start_time=start)
    for reps, lbs in sets:
        exercise.add_set(ExerciseSet(reps=reps, weight=lbs))
    return FitnessSession(start_time=start, exercise_sessions=[exercise], is_completed=True)


class TestRollingAverage:
    """Test trailing-window blood pressure averages."""

    def test_averages_readings_across_sessions(self):
        sessions = [bp_session(1, (120, 80)), bp_session(2, (130, 90))]

        result = analytics.rolling_average(sessions, 7, NOW)

        assert result is not None
        assert result.average_systolic == 125
        assert result.average_diastolic == 85
        assert result.average_heart_rate is None
        assert result.session_count == 2
        assert result.reading_count == 2
        assert result.display_string == "125/85"
        assert result.period_label == "7-Day"
        assert result.end_date == NOW
        assert result.start_date == NOW - timedelta(days=7)

    def test_sessions_outside_window_are_ignored(self):
        sessions = [bp_session(1, (120, 80)), bp_session(10, (180, 110))]

        result = analytics.rolling_average(sessions, 7, NOW)

        assert result.average_systolic == 120
        assert result.session_count == 1

    def test_no_session_in_window_gives_none(self):
        assert analytics.rolling_average([bp_session(10, (120, 80))], 7, NOW) is None
        assert analytics.rolling_average([], 7, NOW) is None

    def test_sessions_without_readings_give_none(self):
        assert analytics.rolling_average([bp_session(1)], 7, NOW) is None

    def test_rolling_averages_skip_empty_windows(self):
        results = analytics.rolling_averages([bp_session(10, (130, 85))], NOW)
        assert [r.period for r in results] == [14, 21, 30]


class TestMetricTrend:
    """Test the first-to-last percentage trend."""

    def test_increase_beyond_threshold(self):
        metrics = [weight(150, 3), weight(160, 1)]
        assert analytics.metric_trend(metrics, MetricType.WEIGHT, 7, NOW) == Trend.INCREASING

    def test_small_change_is_stable(self):
        metrics = [weight(150, 3), weight(152, 1)]
        assert analytics.metric_trend(metrics, MetricType.WEIGHT, 7, NOW) == Trend.STABLE

    def test_decrease_beyond_threshold(self):
        metrics = [weight(160, 1), weight(150, 0)]
        assert analytics.metric_trend(metrics, MetricType.WEIGHT, 7, NOW) == Trend.DECREASING

    def test_middle_values_do_not_count(self):
        metrics = [weight(150, 5), weight(190, 3), weight(151, 1)]
        assert analytics.metric_trend(metrics, MetricType.WEIGHT, 7, NOW) == Trend.STABLE

    def test_fewer_than_two_points_is_stable(self):
        assert analytics.metric_trend([weight(150, 1)], MetricType.WEIGHT, 7, NOW) == Trend.STABLE
        assert analytics.metric_trend([], MetricType.WEIGHT, 7, NOW) == Trend.STABLE

    def test_zero_first_value_is_stable(self):
        metrics = [weight(0, 3), weight(150, 1)]
        assert analytics.metric_trend(metrics, MetricType.WEIGHT, 7, NOW) == Trend.STABLE

    def test_threshold_is_configurable(self):
        metrics = [weight(150, 3), weight(152, 1)]
        result = analytics.metric_trend(metrics, MetricType.WEIGHT, 7, NOW, threshold_percent=1.0)
        assert result == Trend.INCREASING

    def test_average_value_filters_type_and_window(self):
        metrics = [
            weight(150, 1),
            weight(160, 10),
            weight(300, 40),
            HealthMetric(type=MetricType.HEART_RATE, value=70, timestamp=NOW),
        ]
        assert analytics.average_value(metrics, MetricType.WEIGHT, 30, NOW) == 155
        assert analytics.average_value(metrics, MetricType.BLOOD_SUGAR, 30, NOW) is None


class TestFitnessAnalysis:
    """Test per-exercise trend points, analysis and stats."""

    @pytest.fixture
    def bench_history(self):
        return [
            workout(5, ExerciseType.BENCH_PRESS, (8, 110), (8, 110)),
            workout(20, ExerciseType.BENCH_PRESS, (10, 100), (10, 100)),
            workout(3, ExerciseType.SQUAT, (5, 200)),
        ]

    def test_trend_points_are_sorted_oldest_first(self, bench_history):
        points = analytics.fitness_trends(bench_history, ExerciseType.BENCH_PRESS, TimeRange.MONTH, NOW)
        assert [p.average_weight for p in points] == [100, 110]
        assert points[0].sets == 2
        assert points[0].total_reps == 20

    def test_time_range_limits_sessions(self, bench_history):
        points = analytics.fitness_trends(bench_history, ExerciseType.BENCH_PRESS, TimeRange.WEEK, NOW)
        assert len(points) == 1

    def test_analysis_reports_weight_progression(self, bench_history):
        result = analytics.fitness_trend_analysis(
            bench_history, ExerciseType.BENCH_PRESS, TimeRange.MONTH, NOW
        )
        assert result.overall_trend == Trend.INCREASING
        assert result.weight_change == 10
        assert result.average_weight == 105
        assert result.max_weight == 110
        assert result.total_sessions == 2
        assert result.improvement_percentage == 10
        assert result.weight_change_string == "+10.0 lbs"
        assert result.improvement_string == "+10.0%"

    def test_analysis_with_single_point_is_stable(self, bench_history):
        result = analytics.fitness_trend_analysis(
            bench_history, ExerciseType.BENCH_PRESS, TimeRange.WEEK, NOW
        )
        assert result.overall_trend == Trend.STABLE
        assert result.total_sessions == 1
        assert result.average_weight == 110
        assert result.weight_change_string == "No change"

    def test_analysis_with_no_data(self):
        result = analytics.fitness_trend_analysis([], ExerciseType.SQUAT, TimeRange.YEAR, NOW)
        assert result.total_sessions == 0
        assert result.improvement_string == "0%"

    def test_exercise_stats_use_each_sessions_heaviest_set(self):
        sessions = [
            workout(2, ExerciseType.DEADLIFTS, (10, 100), (8, 120)),
            workout(9, ExerciseType.DEADLIFTS, (5, 130)),
        ]
        stats = analytics.exercise_stats(sessions, ExerciseType.DEADLIFTS)
        assert stats.total_sessions == 2
        assert stats.total_sets == 3
        assert stats.total_reps == 23
        assert stats.max_weight == 130
        assert stats.average_weight == 125

    def test_time_range_spans(self):
        assert TimeRange.WEEK.span == timedelta(days=7)
        assert TimeRange.THREE_MONTHS.span == timedelta(days=90)
        assert TimeRange.YEAR.span == timedelta(days=365)


class TestNutritionSummary:
    """Test daily totals."""

    def test_only_entries_for_the_day_count(self):
        entries = [
            NutritionEntry(calories=500, protein=30, date=NOW),
            NutritionEntry(calories=700, added_sugar=5, date=NOW - timedelta(hours=2)),
            NutritionEntry(calories=900, date=NOW - timedelta(days=1)),
        ]
        summary = analytics.nutrition_summary(entries, NutritionGoals(), NOW.date())
        assert summary.entry_count == 2
        assert summary.totals["calories"] == 1200
        assert summary.totals["added_sugar"] == 5
        assert summary.progress("calories") == pytest.approx(0.6)
