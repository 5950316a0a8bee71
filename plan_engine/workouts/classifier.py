"""Workout classification engine.

Classifies running activities into a workout type using several signals:
- Activity name keywords (strongest signal)
- Pace variation across splits (coefficient of variation)
- Distance relative to the athlete's longest and average runs
- Duration
- Pace relative to the athlete's average pace

Precedence lives in CLASSIFICATION_RULES: an ordered table where the first
rule whose predicate holds decides the type. Confidence is scored separately
from the availability and agreement of the signals.

Classification never raises. Missing data only removes signals.
"""

import math
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from loguru import logger

from plan_engine.config.settings import EngineSettings, settings
from plan_engine.core.validation import validate_lenient
from plan_engine.workouts.types import (
    Activity,
    AthleteBaseline,
    ClassificationResult,
    ClassificationSignals,
    RelativeDistance,
    Split,
    WorkoutType,
)

# Keyword dictionary in priority order: the first matching entry wins
KEYWORD_PATTERNS: tuple[tuple[WorkoutType, re.Pattern[str]], ...] = (
    (
        WorkoutType.RACE,
        re.compile(r"\brace\b|parkrun|competition|\b(?:5|10)k\b|half marathon|\bmarathon\b", re.IGNORECASE),
    ),
    (
        WorkoutType.INTERVAL,
        re.compile(r"interval|repeat|\btrack\b|\b(?:400|800|1000)m\b|speed ?work|fartlek", re.IGNORECASE),
    ),
    (
        WorkoutType.TEMPO,
        re.compile(r"tempo|threshold|\blt run\b|lactate|steady state", re.IGNORECASE),
    ),
    (
        WorkoutType.LONG_RUN,
        re.compile(r"long run|\blong\b|\b(?:20|25|30)k\b", re.IGNORECASE),
    ),
    (
        WorkoutType.EASY_RUN,
        re.compile(r"easy|shake ?out|\bbase\b|aerobic", re.IGNORECASE),
    ),
    (
        WorkoutType.RECOVERY,
        re.compile(r"recovery", re.IGNORECASE),
    ),
)

DEFAULT_CONFIDENCE = 0.50
KEYWORD_CONFIDENCE: dict[WorkoutType, float] = {
    WorkoutType.RACE: 0.70,
    WorkoutType.INTERVAL: 0.70,
    WorkoutType.TEMPO: 0.70,
    WorkoutType.LONG_RUN: 0.65,
    WorkoutType.EASY_RUN: 0.60,
    WorkoutType.RECOVERY: 0.60,
}
PACE_SIGNAL_BOOST = 0.15
HEARTRATE_BOOST = 0.15
SPLITS_BOOST = 0.10
CADENCE_BOOST = 0.05

# Fast pace over a near-longest distance is an atypical combination
CONFLICT_DISTANCE_RATIO = 0.80
CONFLICT_PENALTY = 0.10

SignalPredicate = Callable[[ClassificationSignals, EngineSettings], bool]


@dataclass(frozen=True)
class ClassificationRule:
    """One row of the classification table.

    Attributes:
        name: Stable rule identifier, reported on the result
        workout_type: Type assigned when the predicate holds
        predicate: Test over the extracted signals
    """

    name: str
    workout_type: WorkoutType
    predicate: SignalPredicate

    def matches(self, signals: ClassificationSignals, config: EngineSettings) -> bool:
        return self.predicate(signals, config)


def _keyword_is(workout_type: WorkoutType) -> SignalPredicate:
    def predicate(signals: ClassificationSignals, config: EngineSettings) -> bool:
        return signals.keyword == workout_type

    return predicate


def _has_high_pace_variation(signals: ClassificationSignals, config: EngineSettings) -> bool:
    return signals.pace_variation is not None and signals.pace_variation > config.interval_pace_variation_threshold


def _is_long(signals: ClassificationSignals, config: EngineSettings) -> bool:
    to_longest = signals.relative_distance.to_longest if signals.relative_distance else None
    if to_longest is not None and to_longest > config.long_run_distance_ratio:
        return True
    return signals.duration_minutes is not None and signals.duration_minutes > config.long_run_duration_min


def _is_short_recovery(signals: ClassificationSignals, config: EngineSettings) -> bool:
    to_average = signals.relative_distance.to_average if signals.relative_distance else None
    if to_average is None or signals.duration_minutes is None:
        return False
    return to_average < config.recovery_distance_ratio and signals.duration_minutes < config.recovery_duration_min


def _is_fast(signals: ClassificationSignals, config: EngineSettings) -> bool:
    return signals.relative_pace is not None and signals.relative_pace < config.tempo_relative_pace_threshold


def _always(signals: ClassificationSignals, config: EngineSettings) -> bool:
    return True


CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    *(
        ClassificationRule(f"keyword_{workout_type.value.lower()}", workout_type, _keyword_is(workout_type))
        for workout_type, _ in KEYWORD_PATTERNS
    ),
    ClassificationRule("pace_variation", WorkoutType.INTERVAL, _has_high_pace_variation),
    ClassificationRule("long_distance_or_duration", WorkoutType.LONG_RUN, _is_long),
    ClassificationRule("short_and_brief", WorkoutType.RECOVERY, _is_short_recovery),
    ClassificationRule("fast_relative_pace", WorkoutType.TEMPO, _is_fast),
    ClassificationRule("default_easy", WorkoutType.EASY_RUN, _always),
)


def classify(
    activity: Activity | Mapping[str, Any] | None,
    baseline: AthleteBaseline | Mapping[str, Any] | None = None,
    config: EngineSettings | None = None,
) -> ClassificationResult | None:
    """Classify a running activity by workout type.

    Args:
        activity: Activity (or provider payload) to classify
        baseline: Athlete baseline metrics, if known
        config: Threshold overrides (defaults to module settings)

    Returns:
        ClassificationResult, or None if the activity is missing or not a run
    """
    if activity is None:
        return None
    if isinstance(activity, Mapping):
        activity = Activity.from_strava(activity)
    if not activity.is_run:
        return None

    if isinstance(baseline, Mapping):
        baseline = validate_lenient(AthleteBaseline, dict(baseline), "athlete baseline")

    config = config or settings
    signals = extract_signals(activity, baseline)
    rule = determine_workout_type(signals, config)
    confidence = calculate_confidence(signals, config)

    logger.debug(
        "Classified activity",
        activity_id=activity.id,
        workout_type=rule.workout_type.value,
        rule=rule.name,
        confidence=confidence,
    )
    return ClassificationResult(type=rule.workout_type, confidence=confidence, signals=signals, rule=rule.name)


def extract_signals(activity: Activity, baseline: AthleteBaseline | None) -> ClassificationSignals:
    """Extract every classification signal from an activity."""
    duration_minutes = activity.moving_time / 60 if activity.moving_time else None
    return ClassificationSignals(
        keyword=extract_keyword(activity.name),
        relative_pace=get_relative_pace(activity, baseline),
        relative_distance=get_relative_distance(activity, baseline),
        pace_variation=calculate_pace_variation(activity.splits),
        duration_minutes=duration_minutes,
        has_heartrate=bool(activity.has_heartrate or activity.average_heartrate),
        has_cadence=bool(activity.average_cadence),
    )


def determine_workout_type(signals: ClassificationSignals, config: EngineSettings | None = None) -> ClassificationRule:
    """Return the first rule in CLASSIFICATION_RULES whose predicate holds."""
    config = config or settings
    for rule in CLASSIFICATION_RULES:
        if rule.matches(signals, config):
            return rule
    # default_easy always matches; kept for type completeness
    return CLASSIFICATION_RULES[-1]


def extract_keyword(activity_name: str | None) -> WorkoutType | None:
    """Find the highest-priority workout keyword in an activity name.

    Args:
        activity_name: Activity title

    Returns:
        Keyword workout type, or None if no keyword matched
    """
    if not activity_name:
        return None
    for workout_type, pattern in KEYWORD_PATTERNS:
        if pattern.search(activity_name):
            return workout_type
    return None


def calculate_pace_variation(splits: list[Split]) -> float | None:
    """Coefficient of variation (stddev / mean) of per-split pace.

    Args:
        splits: Per-kilometre splits

    Returns:
        Coefficient of variation, or None with fewer than two usable splits
    """
    if len(splits) < 2:
        return None

    paces = [
        (split.moving_time / 60) / (split.distance / 1000)
        for split in splits
        if split.distance and split.distance > 0 and split.moving_time and split.moving_time > 0
    ]
    if len(paces) < 2:
        return None

    mean = sum(paces) / len(paces)
    variance = sum((pace - mean) ** 2 for pace in paces) / len(paces)
    return math.sqrt(variance) / mean if mean > 0 else 0.0


def get_relative_pace(activity: Activity, baseline: AthleteBaseline | None) -> float | None:
    """Activity pace divided by baseline pace (< 1.0 means faster than usual)."""
    if not activity.average_speed or activity.average_speed <= 0:
        return None
    if baseline is None or not baseline.avg_pace:
        return None

    activity_pace = 1000 / (activity.average_speed * 60)  # min/km
    return activity_pace / baseline.avg_pace


def get_relative_distance(activity: Activity, baseline: AthleteBaseline | None) -> RelativeDistance | None:
    """Activity distance relative to the baseline longest and average runs."""
    if not activity.distance or baseline is None:
        return None

    distance_km = activity.distance / 1000
    return RelativeDistance(
        to_longest=distance_km / baseline.longest_distance if baseline.longest_distance else None,
        to_average=distance_km / baseline.avg_distance if baseline.avg_distance else None,
    )


def calculate_confidence(signals: ClassificationSignals, config: EngineSettings | None = None) -> float:
    """Score confidence from signal availability and agreement.

    Args:
        signals: Extracted signals
        config: Threshold overrides

    Returns:
        Confidence clamped to [0, 1]
    """
    config = config or settings
    confidence = KEYWORD_CONFIDENCE[signals.keyword] if signals.keyword else DEFAULT_CONFIDENCE

    if signals.relative_pace is not None:
        confidence += PACE_SIGNAL_BOOST
    if signals.has_heartrate:
        confidence += HEARTRATE_BOOST
    if signals.pace_variation is not None:
        confidence += SPLITS_BOOST
    if signals.has_cadence:
        confidence += CADENCE_BOOST

    to_longest = signals.relative_distance.to_longest if signals.relative_distance else None
    if (
        signals.relative_pace is not None
        and signals.relative_pace < config.tempo_relative_pace_threshold
        and to_longest is not None
        and to_longest > CONFLICT_DISTANCE_RATIO
    ):
        confidence -= CONFLICT_PENALTY

    return max(0.0, min(1.0, confidence))
