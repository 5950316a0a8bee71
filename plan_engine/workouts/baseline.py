"""Athlete baseline derived from activity history."""

from collections.abc import Iterable
from datetime import date, timedelta

from loguru import logger

from plan_engine.plans.calendar import calendar_day
from plan_engine.workouts.types import Activity, AthleteBaseline

FREQUENCY_WINDOW_DAYS = 28


def compute_athlete_baseline(
    activities: Iterable[Activity],
    as_of: date | None = None,
    window_days: int = FREQUENCY_WINDOW_DAYS,
) -> AthleteBaseline | None:
    """Aggregate running history into the baseline used for classification.

    Args:
        activities: Activity history (non-running activities are ignored)
        as_of: Reference date for the frequency window (defaults to today)
        window_days: Length of the frequency window in days

    Returns:
        AthleteBaseline, or None when there are no runs
    """
    runs = [activity for activity in activities if activity.is_run]
    if not runs:
        logger.info("No running activities; athlete baseline unavailable")
        return None

    as_of = calendar_day(as_of)

    distances_km = [(run.distance or 0.0) / 1000 for run in runs]
    avg_distance = sum(distances_km) / len(distances_km)
    longest = max(distances_km)

    paces = [1000 / (run.average_speed * 60) for run in runs if run.average_speed and run.average_speed > 0]
    avg_pace = sum(paces) / len(paces) if paces else None

    window_start = as_of - timedelta(days=window_days)
    recent = [run for run in runs if run.activity_date and window_start <= run.activity_date <= as_of]
    runs_per_week = len(recent) / (window_days / 7) if window_days > 0 else None

    baseline = AthleteBaseline(
        avg_pace=round(avg_pace, 2) if avg_pace is not None else None,
        longest_distance=round(longest, 2) if longest > 0 else None,
        avg_distance=round(avg_distance, 2) if avg_distance > 0 else None,
        avg_runs_per_week=round(runs_per_week, 2) if runs_per_week is not None else None,
    )
    logger.debug(
        "Computed athlete baseline",
        runs=len(runs),
        avg_pace=baseline.avg_pace,
        longest_distance=baseline.longest_distance,
    )
    return baseline
