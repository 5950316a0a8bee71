"""Canonical training plan schema.

This module defines the single in-memory shape every plan is normalized into:
- Schedule order (weeks, days, segments) is the chronological order
- Days are always structured objects, never flattened strings
- Rest days carry an empty workout_structure
- matched_activity_id is a lookup key into an external activity store

Enumerated fields are stored as plain strings so that a plan written by an
external generator with an unexpected label still decodes; the decoder logs
values outside the known sets below.
"""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

PLAN_TYPES: tuple[str, ...] = ("BEGINNER", "FITNESS", "WEIGHT_LOSS", "COMPETITION")
ATHLETE_LEVELS: tuple[str, ...] = ("Novice", "Intermediate", "Advanced")
ACTIVITY_CATEGORIES: tuple[str, ...] = ("RUN", "WALK", "STRENGTH", "CROSS_TRAIN", "REST", "MOBILITY")
SEGMENT_TYPES: tuple[str, ...] = ("WARMUP", "MAIN", "COOLDOWN", "INTERVAL", "RECOVERY")
DAY_NAMES: tuple[str, ...] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

# A run session is expected to be at least WARMUP, MAIN, COOLDOWN
MIN_RUN_SEGMENTS = 3

DurationUnit = Literal["min", "km", "m"]
MatchType = Literal["auto", "manual", "suggested_accepted"]
CompletionType = Literal["matched", "manual_checkbox"]


class Segment(BaseModel):
    """One labeled portion of a workout.

    Attributes:
        segment_type: Upper-cased segment label (WARMUP, MAIN, COOLDOWN, INTERVAL, RECOVERY, ...)
        description: Free-text description
        duration_value: Amount of the segment in duration_unit
        duration_unit: "min" for time-based, "km"/"m" for distance-based segments
        intensity_zone: Target intensity zone 1-5
    """

    segment_type: str
    description: str = ""
    duration_value: float
    duration_unit: DurationUnit
    intensity_zone: int = Field(ge=1, le=5)

    @field_validator("segment_type")
    @classmethod
    def normalize_segment_type(cls, v: str) -> str:
        return v.strip().upper()


class Day(BaseModel):
    """A single scheduled day.

    day_index is kept exactly as the source encoded it. Sources disagree on
    whether it is a 0-based offset or a 1-based ordinal, so nothing in the
    engine derives dates from it.
    """

    model_config = ConfigDict(extra="allow")

    day_name: str = "Monday"
    day_index: int = 0
    is_rest_day: bool = False
    is_completed: bool = False
    is_missed: bool = False
    matched_activity_id: int | str | None = None
    activity_category: str = "REST"
    activity_title: str = ""
    total_estimated_duration_min: int = 0
    workout_structure: list[Segment] = Field(default_factory=list)

    # Day-state written by plan updates
    matched_at: datetime | None = None
    match_type: MatchType | None = None
    match_confidence: float | None = None
    match_score: float | None = None
    completion_date: date | None = None
    completion_type: CompletionType | None = None
    missed_reason: str | None = None
    user_notes: str | None = None

    @property
    def is_matched(self) -> bool:
        return self.matched_activity_id is not None


class Week(BaseModel):
    """A training week. Week 1 may be a partial calendar week."""

    week_number: int
    phase_name: str = ""
    weekly_focus: str = ""
    days: list[Day] = Field(default_factory=list)


class PlanMeta(BaseModel):
    """Plan-level metadata.

    Attributes:
        plan_id: Identifier assigned by the generator (optional)
        plan_name: Human-readable plan name
        plan_type: One of PLAN_TYPES (unknown labels are kept)
        athlete_level: One of ATHLETE_LEVELS (unknown labels are kept)
        total_duration_weeks: Planned length in weeks
        start_date: First day of week 1; anchors the calendar
        created_at: Generation timestamp
    """

    plan_id: str | None = None
    plan_name: str = ""
    plan_type: str | None = None
    athlete_level: str | None = None
    total_duration_weeks: int | None = Field(default=None, ge=1)
    start_date: date | None = None
    created_at: datetime | None = None


class PeriodizationOverview(BaseModel):
    """Macrocycle goal and ordered phase names."""

    macrocycle_goal: str = ""
    phases: list[str] = Field(default_factory=list)


class Plan(BaseModel):
    """Root aggregate: metadata, periodization and the ordered schedule."""

    meta: PlanMeta
    periodization_overview: PeriodizationOverview
    schedule: list[Week] = Field(default_factory=list)

    @property
    def start_date(self) -> date | None:
        return self.meta.start_date


class WeekRange(BaseModel):
    """Inclusive calendar range covered by a week."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        if isinstance(day, datetime):
            day = day.date()
        return self.start <= day <= self.end
