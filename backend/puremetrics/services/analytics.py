"""
Derived health and fitness analytics.

Every function here is pure: it takes the records to summarize and an explicit
``now`` and returns a fresh value. Nothing is cached between calls.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from puremetrics.models.analytics import (
    ExerciseStats,
    FitnessTrendAnalysis,
    FitnessTrendData,
    RollingAverage,
    TimeRange,
    Trend,
)
from puremetrics.models.base import as_utc
from puremetrics.models.fitness import ExerciseSession, ExerciseType, FitnessSession
from puremetrics.models.metrics import HealthMetric, MetricType
from puremetrics.models.nutrition import NutritionEntry, NutritionGoals, NutritionSummary
from puremetrics.models.readings import BPSession

# Trailing windows (days) reported by rolling_averages
ROLLING_WINDOWS = (3, 7, 14, 21, 30)

# UI tuning thresholds, overridable through settings
TREND_PERCENT_THRESHOLD = 5.0
FITNESS_WEIGHT_THRESHOLD_LBS = 5.0


def _classify(change: float, threshold: float) -> Trend:
    if change > threshold:
        return Trend.INCREASING
    if change < -threshold:
        return Trend.DECREASING
    return Trend.STABLE


# ----------------------------------------------------------------------
# Blood pressure
# ----------------------------------------------------------------------


def rolling_average(
    sessions: Iterable[BPSession], window_days: int, now: datetime
) -> Optional[RollingAverage]:
    """Average every reading of the sessions started in ``[now - window, now]``.

    Returns None when no session falls in the window or the matching sessions
    hold no readings. Heart rate is averaged over the readings that have one.
    """
    end_date = as_utc(now)
    start_date = end_date - timedelta(days=window_days)
    in_window = [s for s in sessions if start_date <= s.start_time <= end_date]
    if not in_window:
        return None

    readings = [r for s in in_window for r in s.readings]
    if not readings:
        return None

    heart_rates = [r.heart_rate for r in readings if r.heart_rate is not None]
    return RollingAverage(
        period=window_days,
        average_systolic=sum(r.systolic for r in readings) / len(readings),
        average_diastolic=sum(r.diastolic for r in readings) / len(readings),
        average_heart_rate=sum(heart_rates) / len(heart_rates) if heart_rates else None,
        reading_count=len(readings),
        session_count=len(in_window),
        start_date=start_date,
        end_date=end_date,
    )


def rolling_averages(
    sessions: Iterable[BPSession], now: datetime, windows: Iterable[int] = ROLLING_WINDOWS
) -> list[RollingAverage]:
    sessions = list(sessions)
    results = []
    for days in windows:
        average = rolling_average(sessions, days, now)
        if average is not None:
            results.append(average)
    return results


# ----------------------------------------------------------------------
# Health metrics
# ----------------------------------------------------------------------


def _recent(
    metrics: Iterable[HealthMetric], metric_type: MetricType, days: int, now: datetime
) -> list[HealthMetric]:
    cutoff = as_utc(now) - timedelta(days=days)
    return [m for m in metrics if m.type == metric_type and m.timestamp >= cutoff]


def average_value(
    metrics: Iterable[HealthMetric], metric_type: MetricType, days: int, now: datetime
) -> Optional[float]:
    recent = _recent(metrics, metric_type, days, now)
    if not recent:
        return None
    return sum(m.value for m in recent) / len(recent)


def metric_trend(
    metrics: Iterable[HealthMetric],
    metric_type: MetricType,
    window_days: int,
    now: datetime,
    threshold_percent: float = TREND_PERCENT_THRESHOLD,
) -> Trend:
    """Two-point trend: percentage change from the first to the last value.

    Compares only the oldest and newest metric in the window, so a spike in
    the middle does not register. Fewer than two points is STABLE.
    """
    recent = sorted(_recent(metrics, metric_type, window_days, now), key=lambda m: m.timestamp)
    if len(recent) < 2:
        return Trend.STABLE

    first, last = recent[0].value, recent[-1].value
    if first == 0:
        return Trend.STABLE
    change_percent = (last - first) / first * 100
    return _classify(change_percent, threshold_percent)


# ----------------------------------------------------------------------
# Fitness
# ----------------------------------------------------------------------


def _exercise_sessions(
    sessions: Iterable[FitnessSession], exercise_type: ExerciseType
) -> list[ExerciseSession]:
    return [e for s in sessions for e in s.exercise_sessions if e.exercise_type == exercise_type]


def fitness_trends(
    sessions: Iterable[FitnessSession],
    exercise_type: ExerciseType,
    time_range: TimeRange,
    now: datetime,
) -> list[FitnessTrendData]:
    cutoff = as_utc(now) - time_range.span
    recent = [s for s in sessions if s.start_time >= cutoff]
    points = [
        FitnessTrendData(
            date=e.start_time,
            total_reps=e.total_reps,
            average_weight=e.average_weight or 0.0,
            max_weight=e.max_weight or 0.0,
            total_time=e.total_time,
            sets=len(e.sets),
        )
        for e in _exercise_sessions(recent, exercise_type)
    ]
    return sorted(points, key=lambda p: p.date)


def fitness_trend_analysis(
    sessions: Iterable[FitnessSession],
    exercise_type: ExerciseType,
    time_range: TimeRange,
    now: datetime,
    threshold_lbs: float = FITNESS_WEIGHT_THRESHOLD_LBS,
) -> FitnessTrendAnalysis:
    """Weight progression for one exercise, in absolute pounds."""
    trends = fitness_trends(sessions, exercise_type, time_range, now)

    if len(trends) < 2:
        first = trends[0] if trends else None
        return FitnessTrendAnalysis(
            overall_trend=Trend.STABLE,
            weight_change=0.0,
            average_weight=first.average_weight if first else 0.0,
            max_weight=first.max_weight if first else 0.0,
            total_sessions=len(trends),
            improvement_percentage=0.0,
        )

    first_weight = trends[0].average_weight
    weight_change = trends[-1].average_weight - first_weight

    return FitnessTrendAnalysis(
        overall_trend=_classify(weight_change, threshold_lbs),
        weight_change=weight_change,
        average_weight=sum(t.average_weight for t in trends) / len(trends),
        max_weight=max(t.max_weight for t in trends),
        total_sessions=len(trends),
        improvement_percentage=weight_change / first_weight * 100 if first_weight > 0 else 0.0,
    )


def exercise_stats(sessions: Iterable[FitnessSession], exercise_type: ExerciseType) -> ExerciseStats:
    matching = _exercise_sessions(sessions, exercise_type)
    # Average over each session's heaviest set
    weights = [e.max_weight for e in matching if e.max_weight is not None]

    return ExerciseStats(
        exercise_type=exercise_type,
        total_sessions=len(matching),
        total_sets=sum(len(e.sets) for e in matching),
        total_reps=sum(e.total_reps for e in matching),
        total_time=sum(e.total_time for e in matching),
        max_weight=max(weights) if weights else 0.0,
        average_weight=sum(weights) / len(weights) if weights else 0.0,
    )


# ----------------------------------------------------------------------
# Nutrition
# ----------------------------------------------------------------------


def nutrition_summary(
    entries: Iterable[NutritionEntry], goals: NutritionGoals, day: date
) -> NutritionSummary:
    todays = [e for e in entries if e.date.date() == day]
    return NutritionSummary.from_entries(todays, goals, day)
