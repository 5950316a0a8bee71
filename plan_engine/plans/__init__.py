"""Plans module - canonical training plan model and its transformations.

This module provides:
- The canonical Plan / Week / Day / Segment schema
- Decoding of generated (flattened) plan payloads
- Extraction of plan JSON from free response text
- Calendar math for plan weeks and days
- Immutable day-state updates
"""

from plan_engine.plans.calendar import calculate_day_date, calendar_day, get_week_date_range, get_week_status
from plan_engine.plans.decoder import decode_day, decode_plan, decode_segments, parse_segment_token
from plan_engine.plans.extraction import extract_training_plan_json, is_valid_training_plan
from plan_engine.plans.types import Day, PeriodizationOverview, Plan, PlanMeta, Segment, Week, WeekRange
from plan_engine.plans.updater import (
    DayUpdate,
    MatchData,
    add_note_to_day,
    batch_update_days,
    clear_missed_status,
    manually_match_day,
    mark_day_as_missed,
    mark_day_completed_manually,
    unmatch_day,
    update_day_completion,
)

__all__ = [
    "Day",
    "DayUpdate",
    "MatchData",
    "PeriodizationOverview",
    "Plan",
    "PlanMeta",
    "Segment",
    "Week",
    "WeekRange",
    "add_note_to_day",
    "batch_update_days",
    "calculate_day_date",
    "calendar_day",
    "clear_missed_status",
    "decode_day",
    "decode_plan",
    "decode_segments",
    "extract_training_plan_json",
    "get_week_date_range",
    "get_week_status",
    "is_valid_training_plan",
    "manually_match_day",
    "mark_day_as_missed",
    "mark_day_completed_manually",
    "parse_segment_token",
    "unmatch_day",
    "update_day_completion",
]
