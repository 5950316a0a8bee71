"""Workout matching engine.

Matches running activities to planned workouts using weighted scoring:
- Date proximity (40%)
- Workout type (30%)
- Duration similarity (20%)
- Intensity zone (10%)

Scores map to confidence levels:
- high (>= auto_match_threshold): linked automatically
- medium (>= suggest_match_threshold): suggested to the athlete
- low: not suggested

Planned day dates come from the day's position in the week, never from its
encoded day_index.
"""

from collections.abc import Iterable
from datetime import date
from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field

from plan_engine.config.settings import EngineSettings, settings
from plan_engine.plans.calendar import calculate_day_date, calendar_day
from plan_engine.plans.types import Day, Plan, Segment
from plan_engine.plans.updater import MatchData, update_day_completion
from plan_engine.workouts.classifier import classify
from plan_engine.workouts.types import Activity, AthleteBaseline, ClassificationResult, WorkoutType

ConfidenceLevel = Literal["high", "medium", "low"]

DATE_WEIGHT = 0.4
TYPE_WEIGHT = 0.3
DURATION_WEIGHT = 0.2
INTENSITY_WEIGHT = 0.1

NEUTRAL_SCORE = 0.5
BASE_TYPE_SCORE = 0.2
ACCEPTED_SUGGESTION_CONFIDENCE = 0.65

# Partial credit for an activity type (outer key) against a planned type
TYPE_COMPATIBILITY: dict[WorkoutType, dict[WorkoutType, float]] = {
    WorkoutType.INTERVAL: {WorkoutType.TEMPO: 0.6, WorkoutType.RACE: 0.7},
    WorkoutType.TEMPO: {WorkoutType.INTERVAL: 0.6, WorkoutType.RACE: 0.7, WorkoutType.EASY_RUN: 0.5},
    WorkoutType.LONG_RUN: {WorkoutType.EASY_RUN: 0.5, WorkoutType.RACE: 0.4},
    WorkoutType.EASY_RUN: {WorkoutType.RECOVERY: 0.8, WorkoutType.LONG_RUN: 0.5, WorkoutType.TEMPO: 0.4},
    WorkoutType.RECOVERY: {WorkoutType.EASY_RUN: 0.8},
    WorkoutType.RACE: {WorkoutType.TEMPO: 0.7, WorkoutType.INTERVAL: 0.7},
}

# Upper heart-rate bound (exclusive) of zones 1-4; anything above is zone 5
HEART_RATE_ZONE_CEILINGS: tuple[float, ...] = (140, 155, 165, 175)

LONG_RUN_PLANNED_MINUTES = 90


class CandidateWorkout(BaseModel):
    """Planned day eligible for matching, with its calendar date."""

    week_index: int
    day_index: int
    day: Day
    day_date: date


class ScoreComponents(BaseModel):
    date_score: float
    type_score: float
    duration_score: float
    intensity_score: float


class PlanMatch(CandidateWorkout):
    """Scored candidate for one activity.

    Attributes:
        match_score: Weighted score in [0, 1]
        match_reasons: Human-readable reasons behind the score
        confidence: Confidence level of the score
        components: Individual component scores
    """

    match_score: float
    match_reasons: list[str] = Field(default_factory=list)
    confidence: ConfidenceLevel
    components: ScoreComponents


class MatchResult(BaseModel):
    """All scored candidates for one activity, best first."""

    activity_id: int | str | None = None
    matches: list[PlanMatch] = Field(default_factory=list)
    best_match: PlanMatch | None = None
    should_prompt_user: bool = False
    classification: ClassificationResult | None = None


class ActivityMatch(BaseModel):
    """An activity paired with its best plan match."""

    activity: Activity
    match: PlanMatch


class BatchMatchResult(BaseModel):
    """Outcome of matching a batch of activities against a plan.

    Attributes:
        plan: Plan with high-confidence matches applied
        auto_matches: Matches that were linked automatically
        suggestions: Medium-confidence matches left for the athlete to review
    """

    plan: Plan
    auto_matches: list[ActivityMatch] = Field(default_factory=list)
    suggestions: list[ActivityMatch] = Field(default_factory=list)


class MissedWorkout(BaseModel):
    week_index: int
    day_index: int
    day: Day
    day_date: date
    days_past_due: int


def match_activity_to_plan(
    activity: Activity,
    plan: Plan | None,
    baseline: AthleteBaseline | None = None,
    config: EngineSettings | None = None,
) -> MatchResult:
    """Score an activity against every candidate day of a plan.

    Args:
        activity: Activity to match
        plan: Training plan
        baseline: Athlete baseline used for classification
        config: Threshold overrides

    Returns:
        MatchResult; empty when the activity is not a dated run or the plan
        has no start date
    """
    config = config or settings
    if plan is None or plan.start_date is None or not plan.schedule:
        return MatchResult(activity_id=activity.id)

    classification = classify(activity, baseline, config)
    activity_date = activity.activity_date
    if classification is None or activity_date is None:
        return MatchResult(activity_id=activity.id)

    matches: list[PlanMatch] = []
    for candidate in find_candidate_workouts(plan, activity_date, config.match_window_days):
        components = ScoreComponents(
            date_score=calculate_date_score(activity_date, candidate.day_date),
            type_score=calculate_type_score(
                classification.type, infer_planned_workout_type(candidate.day.workout_structure)
            ),
            duration_score=calculate_duration_score(activity, candidate.day),
            intensity_score=calculate_intensity_score(activity, candidate.day),
        )
        score = (
            components.date_score * DATE_WEIGHT
            + components.type_score * TYPE_WEIGHT
            + components.duration_score * DURATION_WEIGHT
            + components.intensity_score * INTENSITY_WEIGHT
        )
        matches.append(
            PlanMatch(
                week_index=candidate.week_index,
                day_index=candidate.day_index,
                day=candidate.day,
                day_date=candidate.day_date,
                match_score=score,
                match_reasons=_match_reasons(components, classification.type, candidate, activity_date),
                confidence=get_confidence_level(score, config),
                components=components,
            )
        )

    matches.sort(key=lambda match: match.match_score, reverse=True)
    best_match = matches[0] if matches else None
    logger.debug(
        "Matched activity against plan",
        activity_id=activity.id,
        candidates=len(matches),
        best_score=best_match.match_score if best_match else None,
    )
    return MatchResult(
        activity_id=activity.id,
        matches=matches,
        best_match=best_match,
        should_prompt_user=best_match is not None and best_match.confidence == "medium",
        classification=classification,
    )


def find_candidate_workouts(
    plan: Plan,
    activity_date: date,
    window_days: int | None = None,
    config: EngineSettings | None = None,
) -> list[CandidateWorkout]:
    """Find non-rest, unmatched days within window_days of the activity date.

    Args:
        plan: Training plan with a start date
        activity_date: Date of the activity
        window_days: Maximum distance in days (defaults to config.match_window_days)
        config: Threshold overrides

    Returns:
        Candidates in schedule order
    """
    start_date = plan.start_date
    if start_date is None:
        return []
    window = (config or settings).match_window_days if window_days is None else window_days

    candidates: list[CandidateWorkout] = []
    for week_index, week in enumerate(plan.schedule):
        for day_index, day in enumerate(week.days):
            if day.is_rest_day or day.is_matched:
                continue
            day_date = calculate_day_date(start_date, week_index, day_index)
            if abs((day_date - activity_date).days) <= window:
                candidates.append(
                    CandidateWorkout(week_index=week_index, day_index=day_index, day=day, day_date=day_date)
                )
    return candidates


def calculate_date_score(activity_date: date, planned_date: date) -> float:
    """Date proximity score: 1.0 same day, decaying to 0.0 beyond a week."""
    days_diff = abs((activity_date - planned_date).days)
    if days_diff == 0:
        return 1.0
    if days_diff == 1:
        return 0.8
    if days_diff == 2:
        return 0.6
    if days_diff <= 7:
        return 0.4 - (days_diff - 2) * 0.05
    return 0.0


def calculate_type_score(activity_type: WorkoutType, planned_type: WorkoutType) -> float:
    """Workout-type agreement: 1.0 exact, partial for compatible types, 0.2 otherwise."""
    if activity_type == planned_type:
        return 1.0
    return TYPE_COMPATIBILITY.get(activity_type, {}).get(planned_type, BASE_TYPE_SCORE)


def calculate_duration_score(activity: Activity, planned_day: Day) -> float:
    """Duration similarity between the activity and the planned estimate.

    Args:
        activity: Activity (moving_time in seconds)
        planned_day: Planned day (total_estimated_duration_min)

    Returns:
        1.0 within 10%, 0.8 within 25%, 0.5 within 50%, else 0.2; neutral
        0.5 when the day has no planned duration
    """
    planned = planned_day.total_estimated_duration_min
    if not planned:
        return NEUTRAL_SCORE

    actual = (activity.moving_time or 0) / 60
    variance = abs(actual - planned) / planned
    if variance < 0.10:
        return 1.0
    if variance < 0.25:
        return 0.8
    if variance < 0.50:
        return 0.5
    return 0.2


def estimate_heart_rate_zone(heart_rate: float) -> int:
    """Rough 1-5 zone from average heart rate (not athlete-specific)."""
    for zone, ceiling in enumerate(HEART_RATE_ZONE_CEILINGS, start=1):
        if heart_rate < ceiling:
            return zone
    return len(HEART_RATE_ZONE_CEILINGS) + 1


def calculate_intensity_score(activity: Activity, planned_day: Day) -> float:
    """Agreement between the estimated heart-rate zone and the average planned zone.

    Returns a neutral 0.5 without heart-rate data or planned zones.
    """
    if not activity.average_heartrate:
        return NEUTRAL_SCORE

    zones = [segment.intensity_zone for segment in planned_day.workout_structure]
    if not zones:
        return NEUTRAL_SCORE

    avg_planned_zone = sum(zones) / len(zones)
    zone_diff = abs(estimate_heart_rate_zone(activity.average_heartrate) - avg_planned_zone)
    if zone_diff < 0.5:
        return 1.0
    if zone_diff < 1.5:
        return 0.7
    if zone_diff < 2.5:
        return 0.4
    return 0.2


def infer_planned_workout_type(workout_structure: list[Segment]) -> WorkoutType:
    """Infer the workout type of a planned day from its segments.

    Any INTERVAL segment makes it an interval session. Otherwise the average
    zone of MAIN segments decides tempo (>= 4) or recovery (<= 1.5), then
    more than 90 planned minutes makes it a long run. Default is an easy run.
    """
    if not workout_structure:
        return WorkoutType.EASY_RUN

    if any(segment.segment_type == "INTERVAL" for segment in workout_structure):
        return WorkoutType.INTERVAL

    main_zones = [segment.intensity_zone for segment in workout_structure if segment.segment_type == "MAIN"]
    if main_zones:
        avg_zone = sum(main_zones) / len(main_zones)
        if avg_zone >= 4:
            return WorkoutType.TEMPO
        if avg_zone <= 1.5:
            return WorkoutType.RECOVERY

    # Only time-based segments count towards planned minutes
    planned_minutes = sum(segment.duration_value for segment in workout_structure if segment.duration_unit == "min")
    if planned_minutes > LONG_RUN_PLANNED_MINUTES:
        return WorkoutType.LONG_RUN

    return WorkoutType.EASY_RUN


def get_confidence_level(score: float, config: EngineSettings | None = None) -> ConfidenceLevel:
    config = config or settings
    if score >= config.auto_match_threshold:
        return "high"
    if score >= config.suggest_match_threshold:
        return "medium"
    return "low"


def match_activities(
    plan: Plan,
    activities: Iterable[Activity],
    baseline: AthleteBaseline | None = None,
    since: date | None = None,
    config: EngineSettings | None = None,
) -> BatchMatchResult:
    """Match a batch of activities, linking high-confidence matches.

    Activities are processed in date order. Activities already linked in the
    plan are skipped, and a day linked by an earlier activity is no longer a
    candidate for later ones.

    Args:
        plan: Training plan
        activities: Activities to match
        baseline: Athlete baseline used for classification
        since: Only match activities on or after this date
        config: Threshold overrides

    Returns:
        BatchMatchResult with the updated plan
    """
    config = config or settings
    linked_ids = {day.matched_activity_id for week in plan.schedule for day in week.days if day.is_matched}

    pending = [
        activity
        for activity in activities
        if activity.activity_date is not None
        and (since is None or activity.activity_date >= since)
        and (activity.id is None or activity.id not in linked_ids)
    ]
    pending.sort(key=lambda activity: activity.activity_date or date.min)

    updated = plan
    result = BatchMatchResult(plan=plan)
    for activity in pending:
        match_result = match_activity_to_plan(activity, updated, baseline, config)
        best = match_result.best_match
        if best is None:
            continue

        if best.confidence == "high":
            updated = update_day_completion(
                updated,
                best.week_index,
                best.day_index,
                MatchData(
                    matched_activity_id=activity.id,
                    match_type="auto",
                    match_confidence=best.match_score,
                    match_score=best.match_score,
                    completion_date=activity.activity_date,
                ),
            )
            result.auto_matches.append(ActivityMatch(activity=activity, match=best))
        elif best.confidence == "medium":
            result.suggestions.append(ActivityMatch(activity=activity, match=best))

    result.plan = updated
    logger.info(
        "Activity matching complete",
        activities=len(pending),
        auto_matches=len(result.auto_matches),
        suggestions=len(result.suggestions),
    )
    return result


def accept_suggestion(plan: Plan, suggestion: ActivityMatch) -> Plan:
    """Link a suggested match the athlete confirmed.

    Raises:
        PlanUpdateError: If the suggested week or day no longer exists
    """
    match_data = MatchData(
        matched_activity_id=suggestion.activity.id,
        match_type="suggested_accepted",
        match_confidence=ACCEPTED_SUGGESTION_CONFIDENCE,
        match_score=suggestion.match.match_score,
        completion_date=suggestion.activity.activity_date,
    )
    return update_day_completion(plan, suggestion.match.week_index, suggestion.match.day_index, match_data)


def detect_missed_workouts(
    plan: Plan,
    today: date | None = None,
    grace_days: int | None = None,
    config: EngineSettings | None = None,
) -> list[MissedWorkout]:
    """Find workout days past due by more than grace_days and not completed.

    Args:
        plan: Training plan
        today: Reference date (defaults to today)
        grace_days: Grace period in days (defaults to config.missed_grace_days)
        config: Threshold overrides

    Returns:
        Missed workouts in schedule order
    """
    start_date = plan.start_date
    if start_date is None:
        return []
    config = config or settings
    today = calendar_day(today)
    grace = config.missed_grace_days if grace_days is None else grace_days

    missed: list[MissedWorkout] = []
    for week_index, week in enumerate(plan.schedule):
        for day_index, day in enumerate(week.days):
            if day.is_rest_day or day.is_completed or day.is_matched:
                continue
            day_date = calculate_day_date(start_date, week_index, day_index)
            days_past_due = (today - day_date).days
            if days_past_due > grace:
                missed.append(
                    MissedWorkout(
                        week_index=week_index,
                        day_index=day_index,
                        day=day,
                        day_date=day_date,
                        days_past_due=days_past_due,
                    )
                )
    return missed


def _match_reasons(
    components: ScoreComponents,
    activity_type: WorkoutType,
    candidate: CandidateWorkout,
    activity_date: date,
) -> list[str]:
    reasons: list[str] = []
    if components.date_score == 1.0:
        reasons.append("Date match: same day")
    elif components.date_score >= 0.8:
        reasons.append(f"Date match: {abs((activity_date - candidate.day_date).days)} day(s) apart")
    elif components.date_score >= 0.4:
        reasons.append("Date match: same week, different order")

    planned_type = infer_planned_workout_type(candidate.day.workout_structure)
    if components.type_score == 1.0:
        reasons.append(f"Type match: both {activity_type.value.lower()} workouts")
    elif components.type_score >= 0.6:
        reasons.append(f"Type compatible: {activity_type.value} matches {planned_type.value}")

    if components.duration_score == 1.0:
        reasons.append("Duration within 10%")
    elif components.duration_score >= 0.8:
        reasons.append("Duration within 25%")

    if components.intensity_score > 0.7:
        reasons.append("Intensity zones match")
    return reasons
