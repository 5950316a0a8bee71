from plan_engine.analysis.compliance import (
    analyze_missed_workout_patterns,
    analyze_plan_compliance,
    calculate_week_compliance,
    detect_trends,
    generate_plan_adjustment_suggestions,
    generate_warnings,
    needs_weekly_check_in,
)
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

__all__ = [
    "AdjustmentSuggestion",
    "ComplianceReport",
    "ComplianceWarning",
    "MissedDay",
    "MissedWorkoutPattern",
    "Trend",
    "WeekCompliance",
    "WeeklyCompliance",
    "analyze_missed_workout_patterns",
    "analyze_plan_compliance",
    "calculate_week_compliance",
    "detect_trends",
    "generate_plan_adjustment_suggestions",
    "generate_warnings",
    "needs_weekly_check_in",
]
