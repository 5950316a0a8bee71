"""Compliance report models."""

from typing import Literal

from pydantic import BaseModel, Field

from plan_engine.plans.calendar import WeekStatus
from plan_engine.plans.types import WeekRange

TrendType = Literal["low_compliance", "moderate_compliance", "improving", "declining"]
WarningType = Literal["missed_workouts", "plan_too_aggressive", "consistency_declining"]
SuggestionType = Literal["reduce_volume", "add_rest_days", "increase_difficulty", "modify_workout_type"]
Severity = Literal["high", "medium", "low", "positive"]
Priority = Literal["high", "medium", "low"]


class MissedDay(BaseModel):
    day_name: str
    day_index: int
    activity_title: str
    is_missed: bool


class WeekCompliance(BaseModel):
    """Adherence statistics for one week.

    Attributes:
        total_workouts: Non-rest days
        completed_workouts: Workout days completed or linked to an activity
        missed_workouts: Workout days flagged missed or not (yet) done
        compliance_rate: 100 * completed / total, 0 for a week without workouts
        missed_days: Details of each missed day
    """

    total_workouts: int = 0
    completed_workouts: int = 0
    missed_workouts: int = 0
    compliance_rate: float = Field(default=0.0, ge=0.0, le=100.0)
    missed_days: list[MissedDay] = Field(default_factory=list)


class WeeklyCompliance(WeekCompliance):
    """Week statistics placed on the plan calendar."""

    week_number: int
    week_index: int
    phase: str = ""
    week_status: WeekStatus
    week_range: WeekRange


class Trend(BaseModel):
    type: TrendType
    severity: Severity
    message: str
    weeks: int
    avg_compliance_rate: int | None = None


class ComplianceWarning(BaseModel):
    type: WarningType
    severity: Severity
    message: str
    action: str
    week_number: int | None = None


class ComplianceReport(BaseModel):
    """Plan-level adherence analysis.

    overall_compliance_rate covers past and current weeks only.
    """

    overall_compliance_rate: int = Field(default=0, ge=0, le=100)
    weekly_compliance: list[WeeklyCompliance] = Field(default_factory=list)
    trends: list[Trend] = Field(default_factory=list)
    warnings: list[ComplianceWarning] = Field(default_factory=list)


class MissedWorkoutPattern(BaseModel):
    """A workout type the athlete misses disproportionately often."""

    type: str
    frequency: int


class AdjustmentSuggestion(BaseModel):
    type: SuggestionType
    priority: Priority
    title: str
    description: str
    impact: str
