"""Decode generated training plan payloads into the canonical Plan.

The plan generator flattens each day into a pipe-delimited string to keep the
JSON nesting shallow:

    day_name|day_index|is_rest_day|is_completed|activity_category|activity_title|total_duration_min|workout_segments

where workout_segments is a "||"-joined list of tokens shaped like

    SEGMENT_TYPE:description,duration_value duration_unit,Zone N

Days may also arrive as already-structured objects. Both variants are
normalized here so nothing downstream branches on representation.

Only a payload missing one of its root sections is rejected. Everything
below the root is recovered best-effort and logged.
"""

import re
from collections.abc import Mapping
from typing import Any

from loguru import logger
from pydantic import ValidationError

from plan_engine.core.validation import validate_lenient
from plan_engine.errors import MalformedPlanError
from plan_engine.plans.types import (
    ACTIVITY_CATEGORIES,
    ATHLETE_LEVELS,
    DAY_NAMES,
    MIN_RUN_SEGMENTS,
    PLAN_TYPES,
    SEGMENT_TYPES,
    Day,
    PeriodizationOverview,
    Plan,
    PlanMeta,
    Segment,
    Week,
)

ROOT_SECTIONS: tuple[str, ...] = ("meta", "periodization_overview", "schedule")

# Structured days may carry their segments under any of these keys.
# Priority order: the first key holding a non-null value wins.
SEGMENT_KEYS: tuple[str, ...] = ("workout_structure", "workouts", "segments")

DAY_FIELD_COUNT = 7
SEGMENT_SEPARATOR = "||"

_DURATION_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(minutes|mins|min|km|m)\b", re.IGNORECASE)
_ZONE_RE = re.compile(r"zone\s*(\d+)", re.IGNORECASE)

_UNIT_ALIASES: dict[str, str] = {
    "minutes": "min",
    "mins": "min",
    "min": "min",
    "km": "km",
    "m": "m",
}


def decode_plan(raw: Any) -> Plan:
    """Decode a generated plan payload into a canonical Plan.

    The input is never mutated; every week, day and segment is rebuilt.

    Args:
        raw: Plan payload with meta, periodization_overview and schedule

    Returns:
        Canonical Plan with weeks, days and segments in received order

    Raises:
        MalformedPlanError: If the payload is not a mapping or lacks a root section
    """
    if not isinstance(raw, Mapping):
        raise MalformedPlanError(list(ROOT_SECTIONS))

    missing = [key for key in ROOT_SECTIONS if raw.get(key) is None]
    if missing:
        raise MalformedPlanError(missing)

    meta = _decode_meta(raw["meta"])
    overview = _decode_overview(raw["periodization_overview"])
    schedule = _decode_schedule(raw["schedule"])

    plan = Plan(meta=meta, periodization_overview=overview, schedule=schedule)
    logger.debug(
        "Decoded training plan",
        plan_name=meta.plan_name,
        weeks=len(schedule),
        days=sum(len(week.days) for week in schedule),
    )
    return plan


def decode_day(entry: Any) -> Day:
    """Normalize one schedule day, whichever representation it arrived in.

    Args:
        entry: Flattened day string or structured day mapping

    Returns:
        Canonical Day
    """
    if isinstance(entry, str):
        day = decode_day_string(entry)
    elif isinstance(entry, Mapping):
        day = decode_day_object(entry)
    else:
        logger.warning(f"Unsupported day representation {type(entry).__name__}, using a rest day")
        day = Day(is_rest_day=True, activity_category="REST", activity_title="Rest day")

    _check_day_quality(day)
    return day


def decode_day_string(day_string: str) -> Day:
    """Decode a pipe-delimited day string.

    Only the first seven pipes delimit fields: the segments tail uses "||"
    and must be kept intact.

    Args:
        day_string: Flattened day encoding

    Returns:
        Canonical Day
    """
    parts = day_string.split("|", DAY_FIELD_COUNT)

    if len(parts) <= DAY_FIELD_COUNT:
        logger.warning(f"Invalid day format (expected {DAY_FIELD_COUNT} fields before segments), using defaults: {day_string!r}")
        return Day(
            day_name=_part(parts, 0) or "Monday",
            day_index=_parse_int(_part(parts, 1), "day_index"),
            is_rest_day=_parse_bool(_part(parts, 2)),
            is_completed=_parse_bool(_part(parts, 3)),
            activity_category=_part(parts, 4) or "REST",
            activity_title=_part(parts, 5) or "Rest day",
            total_estimated_duration_min=_parse_int(_part(parts, 6), "total_duration_min"),
            workout_structure=[],
        )

    day_name, day_index, is_rest_day, is_completed, category, title, duration, raw_segments = parts
    segments = decode_segments(raw_segments, day_name=day_name)

    return Day(
        day_name=day_name.strip(),
        day_index=_parse_int(day_index, "day_index"),
        is_rest_day=_parse_bool(is_rest_day),
        is_completed=_parse_bool(is_completed),
        activity_category=category.strip(),
        activity_title=title.strip(),
        total_estimated_duration_min=_parse_int(duration, "total_duration_min"),
        workout_structure=segments,
    )


def decode_day_object(day_data: Mapping[str, Any]) -> Day:
    """Decode an already-structured day.

    Segments are read from the canonical key or the first non-null alias.
    Unknown keys on the day are kept.

    Args:
        day_data: Structured day mapping

    Returns:
        Canonical Day
    """
    data = dict(day_data)
    raw_segments: Any = next((data[key] for key in SEGMENT_KEYS if data.get(key) is not None), [])
    for key in SEGMENT_KEYS:
        data.pop(key, None)

    day_name = str(data.get("day_name", ""))
    if not isinstance(raw_segments, list):
        logger.warning(f"Segments for {day_name or 'day'} are {type(raw_segments).__name__}, not a list; wrapping")
        raw_segments = [raw_segments]

    segments: list[Segment] = []
    for raw_segment in raw_segments:
        segment = _decode_segment_entry(raw_segment, day_name)
        if segment is not None:
            segments.append(segment)

    day = validate_lenient(Day, data, f"day {day_name or '?'}")
    return day.model_copy(update={"workout_structure": segments})


def decode_segments(raw_segments: str, day_name: str = "") -> list[Segment]:
    """Decode the "||"-joined segments tail of a day string.

    Args:
        raw_segments: Segments string (may be empty)
        day_name: Day name, for log context

    Returns:
        Parsed segments in order; invalid tokens are dropped
    """
    raw = raw_segments.strip()
    if not raw:
        return []

    if ":" not in raw:
        # Not segment-shaped at all; nothing to recover
        logger.debug(f"Discarding non-segment content for {day_name or 'day'}: {raw[:80]!r}")
        return []

    if SEGMENT_SEPARATOR not in raw:
        logger.warning(
            f"Segments for {day_name or 'day'} are missing the || separator; "
            f"parsing as a single segment (workouts normally have {MIN_RUN_SEGMENTS}+): {raw[:200]!r}"
        )
        tokens = [raw]
    else:
        tokens = raw.split(SEGMENT_SEPARATOR)

    segments: list[Segment] = []
    for token in tokens:
        segment = parse_segment_token(token)
        if segment is not None:
            segments.append(segment)
    return segments


def parse_segment_token(token: str) -> Segment | None:
    """Parse one "TYPE:description,value unit,Zone N" token.

    The description may itself contain commas or colons; the duration and
    zone are always the last two comma-separated parts.

    Args:
        token: Single segment token

    Returns:
        Segment, or None if the token is empty or malformed
    """
    trimmed = token.strip()
    if not trimmed:
        return None

    parts = trimmed.rsplit(",", 2)
    if len(parts) != 3 or not all(part.strip() for part in parts):
        logger.warning(f"Invalid segment format (missing parts): {trimmed!r}")
        return None

    type_and_desc, duration, zone = parts
    segment_type, _, description = type_and_desc.partition(":")

    duration_match = _DURATION_RE.search(duration)
    if not duration_match:
        logger.warning(f"Invalid duration format: {duration.strip()!r}")
        return None

    zone_match = _ZONE_RE.search(zone)
    if not zone_match:
        logger.warning(f"Invalid zone format: {zone.strip()!r}")
        return None

    intensity_zone = int(zone_match.group(1))
    if not 1 <= intensity_zone <= 5:
        logger.warning(f"Intensity zone out of range 1-5: {intensity_zone}")
        return None

    return Segment(
        segment_type=segment_type.strip(),
        description=description.strip(),
        duration_value=float(duration_match.group(1)),
        duration_unit=_UNIT_ALIASES[duration_match.group(2).lower()],
        intensity_zone=intensity_zone,
    )


def _decode_segment_entry(raw_segment: Any, day_name: str) -> Segment | None:
    if isinstance(raw_segment, str):
        return parse_segment_token(raw_segment)
    if isinstance(raw_segment, Mapping):
        try:
            return Segment.model_validate(dict(raw_segment))
        except ValidationError as e:
            logger.warning(f"Dropping invalid segment for {day_name or 'day'}: {e.error_count()} error(s)")
            return None
    logger.warning(f"Dropping unsupported segment entry {type(raw_segment).__name__} for {day_name or 'day'}")
    return None


def _decode_meta(raw_meta: Any) -> PlanMeta:
    if not isinstance(raw_meta, Mapping):
        logger.warning(f"Plan meta is {type(raw_meta).__name__}, not an object; using empty meta")
        return PlanMeta()

    data = {key: raw_meta[key] for key in PlanMeta.model_fields if key in raw_meta}
    meta = validate_lenient(PlanMeta, data, "plan meta")

    if meta.plan_type is not None and meta.plan_type not in PLAN_TYPES:
        logger.warning(f"Unknown plan_type {meta.plan_type!r}; expected one of {PLAN_TYPES}")
    if meta.athlete_level is not None and meta.athlete_level not in ATHLETE_LEVELS:
        logger.warning(f"Unknown athlete_level {meta.athlete_level!r}; expected one of {ATHLETE_LEVELS}")
    if meta.start_date is None:
        logger.warning("Plan meta has no usable start_date; calendar-based analysis will be empty")
    return meta


def _decode_overview(raw_overview: Any) -> PeriodizationOverview:
    if not isinstance(raw_overview, Mapping):
        logger.warning(f"periodization_overview is {type(raw_overview).__name__}, not an object; using empty overview")
        return PeriodizationOverview()

    data = {key: raw_overview[key] for key in PeriodizationOverview.model_fields if key in raw_overview}
    overview = validate_lenient(PeriodizationOverview, data, "periodization overview")
    if not overview.phases:
        logger.warning("periodization_overview has no phases")
    return overview


def _decode_schedule(raw_schedule: Any) -> list[Week]:
    if not isinstance(raw_schedule, list):
        logger.warning(f"Schedule is {type(raw_schedule).__name__}, not a list; using empty schedule")
        return []

    weeks: list[Week] = []
    for position, raw_week in enumerate(raw_schedule):
        week = _decode_week(raw_week, position)
        if weeks and week.week_number <= weeks[-1].week_number:
            logger.warning(
                f"week_number {week.week_number} does not increase after {weeks[-1].week_number}; keeping schedule order"
            )
        weeks.append(week)

    if weeks and weeks[0].week_number != 1:
        logger.warning(f"Schedule starts at week_number {weeks[0].week_number}, expected 1")
    return weeks


def _decode_week(raw_week: Any, position: int) -> Week:
    if not isinstance(raw_week, Mapping):
        logger.warning(f"Week at position {position} is {type(raw_week).__name__}, not an object; using an empty week")
        return Week(week_number=position + 1)

    week_number = raw_week.get("week_number")
    try:
        week_number = int(week_number)
    except (TypeError, ValueError):
        logger.warning(f"Week at position {position} has invalid week_number {week_number!r}; using {position + 1}")
        week_number = position + 1

    raw_days = raw_week.get("days")
    if raw_days is None:
        raw_days = []
    elif not isinstance(raw_days, list):
        logger.warning(f"Week {week_number} days is {type(raw_days).__name__}, not a list; using no days")
        raw_days = []

    return Week(
        week_number=week_number,
        phase_name=str(raw_week.get("phase_name") or ""),
        weekly_focus=str(raw_week.get("weekly_focus") or ""),
        days=[decode_day(entry) for entry in raw_days],
    )


def _check_day_quality(day: Day) -> None:
    if day.day_name not in DAY_NAMES:
        logger.warning(f"Unknown day_name {day.day_name!r}")
    if day.activity_category not in ACTIVITY_CATEGORIES:
        logger.warning(f"Unknown activity_category {day.activity_category!r} on {day.day_name}")

    unknown_types = sorted({segment.segment_type for segment in day.workout_structure} - set(SEGMENT_TYPES))
    if unknown_types:
        logger.warning(f"Unknown segment types {unknown_types} on {day.day_name}")

    segment_count = len(day.workout_structure)
    if day.activity_category == "RUN" and segment_count < MIN_RUN_SEGMENTS:
        logger.warning(
            f"RUN workout on {day.day_name} has only {segment_count} segments; "
            f"expected at least {MIN_RUN_SEGMENTS} (WARMUP, MAIN, COOLDOWN)"
        )


def _part(parts: list[str], index: int) -> str:
    return parts[index].strip() if index < len(parts) else ""


def _parse_bool(value: str) -> bool:
    return value.strip().lower() == "true"


def _parse_int(value: str, field: str) -> int:
    text = value.strip()
    if not text:
        return 0
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return int(float(text))
    except ValueError:
        logger.warning(f"Invalid {field} {text!r}, using 0")
        return 0
