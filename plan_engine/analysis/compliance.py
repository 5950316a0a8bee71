"""Plan compliance analysis.

Compares the day-state recorded on a Plan (completed, missed, linked
activities) with its calendar and derives weekly adherence, multi-week
trends, warnings and plan adjustment suggestions.

Everything here degrades to zeroed or empty results instead of raising, so a
caller can always render a neutral state.
"""

import math
from datetime import date

from loguru import logger

from plan_engine.analysis.types import (
    AdjustmentSuggestion,
    ComplianceReport,
    ComplianceWarning,
    MissedDay,
    MissedWorkoutPattern,
    Trend,
    WeekCompliance,
    WeeklyCompliance,
)
from plan_engine.plans.calendar import calendar_day, get_week_date_range, get_week_status
from plan_engine.plans.types import Plan, Week

TREND_WINDOW_WEEKS = 3
MIN_TREND_WEEKS = 2
LOW_COMPLIANCE_RATE = 50
MODERATE_COMPLIANCE_RATE = 70
TREND_DELTA_POINTS = 20
MISSED_WORKOUTS_WARNING = 2
LOW_OVERALL_RATE = 60
HIGH_OVERALL_RATE = 90


def calculate_week_compliance(week: Week | None) -> WeekCompliance:
    """Calculate adherence statistics for one week.

    A workout day is any non-rest day. It counts as completed when it is
    flagged completed or linked to an activity, and as missed when it is
    flagged missed or neither completed nor linked.

    Args:
        week: Schedule week (None yields zeroed stats)

    Returns:
        WeekCompliance
    """
    if week is None:
        return WeekCompliance()

    workout_days = [day for day in week.days if not day.is_rest_day]
    completed = [day for day in workout_days if day.is_completed or day.is_matched]
    missed = [day for day in workout_days if day.is_missed or not (day.is_completed or day.is_matched)]

    total = len(workout_days)
    return WeekCompliance(
        total_workouts=total,
        completed_workouts=len(completed),
        missed_workouts=len(missed),
        compliance_rate=len(completed) / total * 100 if total > 0 else 0.0,
        missed_days=[
            MissedDay(
                day_name=day.day_name,
                day_index=day.day_index,
                activity_title=day.activity_title,
                is_missed=day.is_missed,
            )
            for day in missed
        ],
    )


def analyze_plan_compliance(plan: Plan | None, current_date: date | None = None) -> ComplianceReport:
    """Analyze adherence across the whole plan.

    Future weeks are reported but excluded from the overall rate.

    Args:
        plan: Training plan
        current_date: Reference date (defaults to today)

    Returns:
        ComplianceReport; empty when there is no plan or no start date
    """
    if plan is None or plan.start_date is None:
        logger.debug("No plan or plan start date; returning empty compliance report")
        return ComplianceReport()

    today = calendar_day(current_date)

    weekly: list[WeeklyCompliance] = []
    for week_index, week in enumerate(plan.schedule):
        week_range = get_week_date_range(week_index, plan.start_date)
        weekly.append(
            WeeklyCompliance(
                **calculate_week_compliance(week).model_dump(),
                week_number=week.week_number,
                week_index=week_index,
                phase=week.phase_name,
                week_status=get_week_status(week_range, today),
                week_range=week_range,
            )
        )

    relevant = [week for week in weekly if week.week_status != "future"]
    overall_total = sum(week.total_workouts for week in relevant)
    overall_completed = sum(week.completed_workouts for week in relevant)
    overall_rate = overall_completed / overall_total * 100 if overall_total > 0 else 0.0

    trends = detect_trends(weekly)
    warnings = generate_warnings(weekly, trends)

    logger.info(
        "Analyzed plan compliance",
        weeks=len(weekly),
        overall_rate=_round_half_up(overall_rate),
        trends=[trend.type for trend in trends],
    )
    return ComplianceReport(
        overall_compliance_rate=_round_half_up(overall_rate),
        weekly_compliance=weekly,
        trends=trends,
        warnings=warnings,
    )


def detect_trends(weekly: list[WeeklyCompliance]) -> list[Trend]:
    """Detect compliance trends over the most recent past weeks.

    Args:
        weekly: Per-week compliance in schedule order

    Returns:
        Trends, empty with fewer than two past weeks
    """
    past_weeks = [week for week in weekly if week.week_status == "past"]
    if len(past_weeks) < MIN_TREND_WEEKS:
        return []

    recent = past_weeks[-TREND_WINDOW_WEEKS:]
    avg_rate = sum(week.compliance_rate for week in recent) / len(recent)

    trends: list[Trend] = []
    if avg_rate < LOW_COMPLIANCE_RATE:
        trends.append(
            Trend(
                type="low_compliance",
                severity="high",
                message="You've completed less than 50% of your workouts recently",
                weeks=len(recent),
                avg_compliance_rate=_round_half_up(avg_rate),
            )
        )
    elif avg_rate < MODERATE_COMPLIANCE_RATE:
        trends.append(
            Trend(
                type="moderate_compliance",
                severity="medium",
                message=f"You've completed about {_round_half_up(avg_rate)}% of your workouts recently",
                weeks=len(recent),
                avg_compliance_rate=_round_half_up(avg_rate),
            )
        )

    if len(recent) == TREND_WINDOW_WEEKS:
        first, second, third = (week.compliance_rate for week in recent)
        if third > second > first and third - first > TREND_DELTA_POINTS:
            trends.append(
                Trend(
                    type="improving",
                    severity="positive",
                    message="Great progress! Your consistency is improving",
                    weeks=TREND_WINDOW_WEEKS,
                )
            )
        elif third < second < first and first - third > TREND_DELTA_POINTS:
            trends.append(
                Trend(
                    type="declining",
                    severity="medium",
                    message="Your consistency has been declining recently",
                    weeks=TREND_WINDOW_WEEKS,
                )
            )

    return trends


def generate_warnings(weekly: list[WeeklyCompliance], trends: list[Trend]) -> list[ComplianceWarning]:
    """Turn the current week's misses and detected trends into warnings."""
    warnings: list[ComplianceWarning] = []

    current_week = next((week for week in weekly if week.week_status == "current"), None)
    if current_week is not None and current_week.missed_workouts >= MISSED_WORKOUTS_WARNING:
        warnings.append(
            ComplianceWarning(
                type="missed_workouts",
                severity="medium",
                week_number=current_week.week_number,
                message=f"You've missed {current_week.missed_workouts} workouts this week",
                action="Consider adjusting your schedule or plan difficulty",
            )
        )

    trend_types = {trend.type for trend in trends}
    if "low_compliance" in trend_types:
        warnings.append(
            ComplianceWarning(
                type="plan_too_aggressive",
                severity="high",
                message="Your plan might be too challenging for your current schedule",
                action="Consider modifying the plan or adjusting your weekly volume",
            )
        )
    if "declining" in trend_types:
        warnings.append(
            ComplianceWarning(
                type="consistency_declining",
                severity="medium",
                message="Your training consistency has been decreasing",
                action="Review what changed and consider taking a recovery week",
            )
        )

    return warnings


def generate_plan_adjustment_suggestions(report: ComplianceReport) -> list[AdjustmentSuggestion]:
    """Suggest plan adjustments from a compliance report.

    Args:
        report: Result of analyze_plan_compliance

    Returns:
        Suggestions, highest priority first
    """
    suggestions: list[AdjustmentSuggestion] = []

    if report.overall_compliance_rate < LOW_OVERALL_RATE:
        suggestions.append(
            AdjustmentSuggestion(
                type="reduce_volume",
                priority="high",
                title="Reduce weekly volume",
                description=(
                    "Your compliance is low. Consider reducing the number of workouts per week "
                    "or shortening workout durations."
                ),
                impact="Makes the plan more sustainable for your schedule",
            )
        )
        suggestions.append(
            AdjustmentSuggestion(
                type="add_rest_days",
                priority="high",
                title="Add more rest days",
                description="Adding recovery days can help prevent burnout and improve consistency.",
                impact="Improves recovery and makes plan more manageable",
            )
        )

    if report.overall_compliance_rate >= HIGH_OVERALL_RATE:
        suggestions.append(
            AdjustmentSuggestion(
                type="increase_difficulty",
                priority="low",
                title="Consider progressing the plan",
                description=(
                    "You're following the plan very well! You might be ready for increased volume or intensity."
                ),
                impact="Accelerates fitness gains",
            )
        )

    for pattern in analyze_missed_workout_patterns(report.weekly_compliance):
        suggestions.append(
            AdjustmentSuggestion(
                type="modify_workout_type",
                priority="medium",
                title=f"Adjust {pattern.type} workouts",
                description=(
                    f"You frequently miss {pattern.type} workouts ({pattern.frequency}%). "
                    "Consider moving them to different days or replacing them."
                ),
                impact="Improves plan compatibility with your schedule",
            )
        )

    return suggestions


def analyze_missed_workout_patterns(weekly: list[WeeklyCompliance]) -> list[MissedWorkoutPattern]:
    """Find workout types that are missed disproportionately often.

    Missed days do not yet carry a workout type, so no patterns are reported.
    """
    # TODO: tag MissedDay with the planned workout type so patterns can be counted per type
    return []


def needs_weekly_check_in(week: WeeklyCompliance | None, current_date: date | None = None) -> bool:
    """Whether a finished week left something to discuss.

    Args:
        week: Week from a compliance report
        current_date: Reference date (defaults to today)

    Returns:
        True if the week ended before current_date and was not fully completed
    """
    if week is None:
        return False
    today = calendar_day(current_date)
    week_has_ended = week.week_range.end < today
    has_issues = week.compliance_rate < 100 or week.missed_workouts > 0
    return week_has_ended and has_issues


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
