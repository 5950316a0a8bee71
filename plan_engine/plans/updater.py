"""Immutable day-state updates on a Plan.

Every function returns a new Plan and leaves the one it was given untouched.
Week and day positions are 0-based list positions in the schedule.
"""

from datetime import UTC, date, datetime
from typing import Any

from loguru import logger
from pydantic import BaseModel

from plan_engine.errors import PlanUpdateError
from plan_engine.plans.types import Day, MatchType, Plan


class MatchData(BaseModel):
    """Metadata recorded when a day is completed.

    Attributes:
        matched_activity_id: Linked activity id, or None for a manual checkbox completion
        match_type: How the link was made (auto, manual, suggested_accepted)
        match_confidence: Confidence of the link, 0.0-1.0
        match_score: Raw matcher score
        completion_date: Date the workout was done (defaults to today)
        matched_at: Timestamp of the link (defaults to now)
        user_notes: Optional note; None keeps the existing note
    """

    matched_activity_id: int | str | None = None
    match_type: MatchType | None = "manual"
    match_confidence: float | None = None
    match_score: float | None = None
    completion_date: date | None = None
    matched_at: datetime | None = None
    user_notes: str | None = None


class DayUpdate(BaseModel):
    """One entry of a batch update."""

    week_index: int
    day_index: int
    match_data: MatchData


def update_day_completion(plan: Plan, week_index: int, day_index: int, match_data: MatchData) -> Plan:
    """Mark a day completed and record its match metadata.

    Args:
        plan: Training plan
        week_index: Week position (0-based)
        day_index: Day position within the week (0-based)
        match_data: Match metadata

    Returns:
        Updated plan

    Raises:
        PlanUpdateError: If the week or day does not exist
    """
    day = _get_day(plan, week_index, day_index)
    now = datetime.now(UTC)

    changes: dict[str, Any] = {
        "is_completed": True,
        "is_missed": False,
        "matched_activity_id": match_data.matched_activity_id,
        "matched_at": match_data.matched_at or (now if match_data.matched_activity_id is not None else None),
        "match_type": match_data.match_type,
        "match_confidence": match_data.match_confidence,
        "match_score": match_data.match_score,
        "completion_date": match_data.completion_date or now.date(),
        "completion_type": "matched" if match_data.matched_activity_id is not None else "manual_checkbox",
        "user_notes": match_data.user_notes if match_data.user_notes is not None else day.user_notes,
    }
    logger.debug(
        "Completing plan day",
        week_index=week_index,
        day_index=day_index,
        activity_id=match_data.matched_activity_id,
        match_type=match_data.match_type,
    )
    return _replace_day(plan, week_index, day_index, changes)


def mark_day_as_missed(plan: Plan, week_index: int, day_index: int, reason: str | None = None) -> Plan:
    """Mark a day as missed. A missed day cannot also be completed.

    Args:
        plan: Training plan
        week_index: Week position (0-based)
        day_index: Day position within the week (0-based)
        reason: Optional reason (e.g., "injury/illness", "weather")

    Returns:
        Updated plan
    """
    _get_day(plan, week_index, day_index)
    return _replace_day(
        plan,
        week_index,
        day_index,
        {"is_missed": True, "missed_reason": reason, "is_completed": False},
    )


def unmatch_day(plan: Plan, week_index: int, day_index: int) -> Plan:
    """Clear every match and completion field of a day."""
    _get_day(plan, week_index, day_index)
    return _replace_day(
        plan,
        week_index,
        day_index,
        {
            "matched_activity_id": None,
            "matched_at": None,
            "match_type": None,
            "match_confidence": None,
            "match_score": None,
            "completion_date": None,
            "completion_type": None,
            "is_completed": False,
            "is_missed": False,
        },
    )


def manually_match_day(
    plan: Plan,
    week_index: int,
    day_index: int,
    activity_id: int | str,
    completion_date: date | None = None,
) -> Plan:
    """Link a day to an activity chosen by the athlete (full confidence)."""
    match_data = MatchData(
        matched_activity_id=activity_id,
        match_type="manual",
        match_confidence=1.0,
        match_score=1.0,
        completion_date=completion_date,
    )
    return update_day_completion(plan, week_index, day_index, match_data)


def mark_day_completed_manually(plan: Plan, week_index: int, day_index: int, note: str | None = None) -> Plan:
    """Tick a day off without linking an activity."""
    match_data = MatchData(matched_activity_id=None, match_type=None, user_notes=note)
    return update_day_completion(plan, week_index, day_index, match_data)


def add_note_to_day(plan: Plan, week_index: int, day_index: int, note: str) -> Plan:
    _get_day(plan, week_index, day_index)
    return _replace_day(plan, week_index, day_index, {"user_notes": note})


def clear_missed_status(plan: Plan, week_index: int, day_index: int) -> Plan:
    _get_day(plan, week_index, day_index)
    return _replace_day(plan, week_index, day_index, {"is_missed": False, "missed_reason": None})


def batch_update_days(plan: Plan, updates: list[DayUpdate]) -> Plan:
    """Apply several completions in order.

    Raises:
        PlanUpdateError: If any update targets a missing week or day; no
            partial result is returned
    """
    updated = plan
    for update in updates:
        updated = update_day_completion(updated, update.week_index, update.day_index, update.match_data)
    return updated


def _get_day(plan: Plan, week_index: int, day_index: int) -> Day:
    if not 0 <= week_index < len(plan.schedule):
        raise PlanUpdateError(f"Week {week_index} does not exist in plan")
    days = plan.schedule[week_index].days
    if not 0 <= day_index < len(days):
        raise PlanUpdateError(f"Day {day_index} does not exist in week {week_index}")
    return days[day_index]


def _replace_day(plan: Plan, week_index: int, day_index: int, changes: dict[str, Any]) -> Plan:
    """Deep-copy the plan and swap in an updated copy of one day."""
    updated = plan.model_copy(deep=True)
    week = updated.schedule[week_index]
    week.days[day_index] = week.days[day_index].model_copy(update=changes)
    return updated
