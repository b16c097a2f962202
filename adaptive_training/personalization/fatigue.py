"""Fatigue estimation.

Fatigue blends training load (intensity and density of recent sessions)
with how poorly the athlete has been recovering, then buckets the score.
"""

from adaptive_training.personalization.invariants import (
    FATIGUE_HIGH_FROM,
    FATIGUE_MODERATE_FROM,
    FATIGUE_VERY_HIGH_FROM,
    clamp01,
)
from adaptive_training.personalization.types import FatigueLevel, PerformanceSnapshot

LOAD_WEIGHT = 0.7
RECOVERY_WEIGHT = 0.3

# Six sessions a week saturates the density term
DENSITY_SATURATION_SESSIONS = 6.0


def workout_load_fatigue(performance: PerformanceSnapshot) -> float:
    density = min(performance.sessions_per_week / DENSITY_SATURATION_SESSIONS, 1.0)
    return clamp01(0.5 * performance.average_intensity + 0.5 * density)


def recovery_fatigue(performance: PerformanceSnapshot) -> float:
    return clamp01(1.0 - performance.recovery_quality)


def fatigue_score(performance: PerformanceSnapshot) -> float:
    return clamp01(LOAD_WEIGHT * workout_load_fatigue(performance) + RECOVERY_WEIGHT * recovery_fatigue(performance))


def bucket_fatigue(score: float) -> FatigueLevel:
    """Map a fatigue score to its level.

    Buckets are [0, .25), [.25, .5), [.5, .75), [.75, 1]. Scores outside
    [0, 1] are clamped first.
    """
    score = clamp01(score)
    if score >= FATIGUE_VERY_HIGH_FROM:
        return FatigueLevel.VERY_HIGH
    if score >= FATIGUE_HIGH_FROM:
        return FatigueLevel.HIGH
    if score >= FATIGUE_MODERATE_FROM:
        return FatigueLevel.MODERATE
    return FatigueLevel.LOW


def estimate_fatigue(performance: PerformanceSnapshot) -> tuple[float, FatigueLevel]:
    score = fatigue_score(performance)
    return score, bucket_fatigue(score)
