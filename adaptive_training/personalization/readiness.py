"""Readiness estimation from today's health snapshot."""

from adaptive_training.personalization.invariants import clamp01
from adaptive_training.personalization.types import HealthSnapshot

SLEEP_TARGET_HOURS = 8.0
SLEEP_WEIGHT = 0.4
STRESS_WEIGHT = 0.3
ENERGY_WEIGHT = 0.3


def estimate_readiness(health: HealthSnapshot | None, default: float = 0.6) -> float:
    """Compute a readiness score in [0, 1].

    Sleep beyond the target earns no bonus: its contribution is capped at 1.0
    before the weighted sum is clamped.

    Args:
        health: Today's snapshot, or None when the wearable feed is unavailable
        default: Readiness used when ``health`` is None

    Returns:
        Readiness score between 0 and 1
    """
    if health is None:
        return default

    sleep_score = min(health.sleep_hours / SLEEP_TARGET_HOURS, 1.0)
    stress_score = 1.0 - health.stress_level / 100.0
    energy_score = health.energy_level / 100.0

    readiness = SLEEP_WEIGHT * sleep_score + STRESS_WEIGHT * stress_score + ENERGY_WEIGHT * energy_score
    return clamp01(readiness)
