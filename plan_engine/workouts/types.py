"""Activity, baseline and classification models.

Activities and baselines are read-only inputs produced by the activity-sync
layer. Every field is optional so that incomplete provider data degrades to
missing signals instead of failing validation.
"""

from collections.abc import Mapping
from datetime import date, datetime
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from plan_engine.core.validation import validate_lenient

RUN_ACTIVITY_TYPE = "run"


class WorkoutType(StrEnum):
    INTERVAL = "INTERVAL"
    TEMPO = "TEMPO"
    LONG_RUN = "LONG_RUN"
    RACE = "RACE"
    EASY_RUN = "EASY_RUN"
    RECOVERY = "RECOVERY"


class Split(BaseModel):
    """One per-kilometre split: distance in meters, moving time in seconds."""

    distance: float | None = None
    moving_time: float | None = None


class Activity(BaseModel):
    """Recorded activity as delivered by the sync layer.

    Attributes:
        id: Provider activity id
        type: Provider activity type ("Run", "Ride", ...)
        name: Athlete-visible activity title
        distance: Distance in meters
        moving_time: Moving time in seconds
        average_speed: Average speed in m/s
        average_heartrate: Average heart rate in bpm
        average_cadence: Average cadence
        has_heartrate: Provider flag for heart rate availability
        start_date: Start timestamp (UTC)
        start_date_local: Start timestamp in the athlete's timezone
        splits: Per-kilometre splits
    """

    model_config = ConfigDict(extra="ignore")

    id: int | str | None = None
    type: str | None = None
    name: str = ""
    distance: float | None = None
    moving_time: float | None = None
    average_speed: float | None = None
    average_heartrate: float | None = None
    average_cadence: float | None = None
    has_heartrate: bool = False
    start_date: datetime | None = None
    start_date_local: datetime | None = None
    splits: list[Split] = Field(default_factory=list)

    @property
    def is_run(self) -> bool:
        return (self.type or "").strip().lower() == RUN_ACTIVITY_TYPE

    @property
    def activity_date(self) -> date | None:
        """Local calendar date of the activity, falling back to the UTC start."""
        started = self.start_date_local or self.start_date
        return started.date() if started else None

    @classmethod
    def from_strava(cls, payload: Mapping[str, Any]) -> "Activity":
        """Build an Activity from a provider-shaped payload.

        Splits are taken from the first non-null of "splits", "splits_metric"
        and "raw_data.splits_metric". Invalid fields are dropped.
        """
        data = dict(payload)
        raw_data = data.pop("raw_data", None)
        nested = raw_data.get("splits_metric") if isinstance(raw_data, Mapping) else None
        candidates = (data.pop("splits", None), data.pop("splits_metric", None), nested)
        splits = next((candidate for candidate in candidates if candidate is not None), None)
        if splits is not None:
            data["splits"] = splits
        return validate_lenient(cls, data, f"activity {data.get('id', '?')}")


class AthleteBaseline(BaseModel):
    """Aggregated historical running statistics.

    Attributes:
        avg_pace: Average pace in min/km
        longest_distance: Longest run in km
        avg_distance: Average run distance in km
        avg_runs_per_week: Average number of runs per week
    """

    model_config = ConfigDict(populate_by_name=True)

    avg_pace: float | None = Field(default=None, validation_alias=AliasChoices("avg_pace", "avgPace"))
    longest_distance: float | None = Field(
        default=None, validation_alias=AliasChoices("longest_distance", "longestDistance")
    )
    avg_distance: float | None = Field(default=None, validation_alias=AliasChoices("avg_distance", "avgDistance"))
    avg_runs_per_week: float | None = Field(
        default=None, validation_alias=AliasChoices("avg_runs_per_week", "avgRunsPerWeek")
    )


class RelativeDistance(BaseModel):
    """Activity distance as a ratio of baseline distances (either may be missing)."""

    to_longest: float | None = None
    to_average: float | None = None


class ClassificationSignals(BaseModel):
    """Signals extracted from one activity; each is None when its data is missing."""

    keyword: WorkoutType | None = None
    relative_pace: float | None = None
    relative_distance: RelativeDistance | None = None
    pace_variation: float | None = None
    duration_minutes: float | None = None
    has_heartrate: bool = False
    has_cadence: bool = False


class ClassificationResult(BaseModel):
    """Workout-type classification of one activity.

    Attributes:
        type: Classified workout type
        confidence: Confidence in [0, 1]
        signals: Signals the decision was based on
        rule: Name of the classification rule that fired
    """

    type: WorkoutType
    confidence: float = Field(ge=0.0, le=1.0)
    signals: ClassificationSignals
    rule: str
