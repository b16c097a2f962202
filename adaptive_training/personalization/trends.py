"""Trend computation.

Short-term classification of the performance window, plus a linear slope
helper for longer exercise histories.
"""

import numpy as np

from adaptive_training.personalization.invariants import TREND_DECLINING_THRESHOLD, TREND_IMPROVING_THRESHOLD
from adaptive_training.personalization.types import PerformanceSnapshot, PerformanceTrend


def classify_trend(performance: PerformanceSnapshot) -> PerformanceTrend:
    """Classify the recent improvement delta.

    No hysteresis: identical inputs always give the same trend.
    """
    if performance.improvement > TREND_IMPROVING_THRESHOLD:
        return PerformanceTrend.IMPROVING
    if performance.improvement < TREND_DECLINING_THRESHOLD:
        return PerformanceTrend.DECLINING
    return PerformanceTrend.STABLE


def compute_slope(values: list[float]) -> float:
    """Compute the least-squares slope of values over their index.

    Args:
        values: Numeric values over time (chronological order)

    Returns:
        Slope per step, or 0.0 with fewer than two values
    """
    if len(values) < 2:
        return 0.0

    x = np.arange(len(values), dtype=float)
    y = np.array(values, dtype=float)
    slope = np.polyfit(x, y, 1)[0]
    return float(slope)
