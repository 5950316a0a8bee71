from plan_engine.workouts.baseline import compute_athlete_baseline
from plan_engine.workouts.classifier import CLASSIFICATION_RULES, ClassificationRule, classify
from plan_engine.workouts.matcher import (
    ActivityMatch,
    BatchMatchResult,
    MatchResult,
    MissedWorkout,
    PlanMatch,
    accept_suggestion,
    detect_missed_workouts,
    match_activities,
    match_activity_to_plan,
)
from plan_engine.workouts.types import (
    Activity,
    AthleteBaseline,
    ClassificationResult,
    ClassificationSignals,
    RelativeDistance,
    Split,
    WorkoutType,
)

__all__ = [
    "CLASSIFICATION_RULES",
    "Activity",
    "ActivityMatch",
    "AthleteBaseline",
    "BatchMatchResult",
    "ClassificationResult",
    "ClassificationRule",
    "ClassificationSignals",
    "MatchResult",
    "MissedWorkout",
    "PlanMatch",
    "RelativeDistance",
    "Split",
    "WorkoutType",
    "accept_suggestion",
    "classify",
    "compute_athlete_baseline",
    "detect_missed_workouts",
    "match_activities",
    "match_activity_to_plan",
]
