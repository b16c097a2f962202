"""Personalization Invariants - Single Source of Truth.

Every estimator, reconciler and adjuster imports its bounds from here.
These are not configuration: a deployment cannot widen the clamp.
"""

# Every multiplicative adjustment (difficulty, duration, intensity, volume)
MULTIPLIER_FLOOR = 0.7
MULTIPLIER_CEILING = 1.3

# Volume dead-band: strictly above/below these is a change, anything between is maintain
VOLUME_INCREASE_THRESHOLD = 1.1
VOLUME_DECREASE_THRESHOLD = 0.9

# Performance trend cut-offs on the signed improvement delta
TREND_IMPROVING_THRESHOLD = 0.1
TREND_DECLINING_THRESHOLD = -0.1

# Lower bounds of the fatigue buckets; a boundary value belongs to the higher bucket
FATIGUE_MODERATE_FROM = 0.25
FATIGUE_HIGH_FROM = 0.5
FATIGUE_VERY_HIGH_FROM = 0.75

# Feedback bias is a short-term nudge and must stay small next to the clamp
FEEDBACK_BIAS_LIMIT = 0.1

# Consecutive too-hard reports that allow the overload plan to regress
SUSTAINED_COMPLAINT_COUNT = 3


def clamp(value: float, low: float, high: float) -> float:
    """Clamp ``value`` to the inclusive range [low, high]."""
    if low > high:
        raise ValueError("low must not exceed high")
    return max(low, min(value, high))


def clamp01(value: float) -> float:
    return clamp(value, 0.0, 1.0)


def clamp_multiplier(value: float) -> float:
    return clamp(value, MULTIPLIER_FLOOR, MULTIPLIER_CEILING)
