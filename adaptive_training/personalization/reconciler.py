"""Difficulty reconciliation.

Heuristic signals and the ML prediction are merged into three multipliers
(difficulty, duration, intensity). Rules are additive nudges on 1.0; a
trusted ML prediction is blended in by confidence; the result is always
clamped to [MULTIPLIER_FLOOR, MULTIPLIER_CEILING].

The blend curve is tunable. The clamp is not.
"""

from dataclasses import dataclass

from adaptive_training.personalization.invariants import FEEDBACK_BIAS_LIMIT, clamp, clamp_multiplier
from adaptive_training.personalization.ml_advisor import MLAdvice
from adaptive_training.personalization.types import FatigueLevel, PerformanceTrend, WorkoutTemplate

HIGH_READINESS = 0.8
LOW_READINESS = 0.4
REDUCED_READINESS = 0.6

# (difficulty, duration, intensity) nudges
FATIGUE_NUDGES: dict[FatigueLevel, tuple[float, float, float]] = {
    FatigueLevel.LOW: (0.0, 0.0, 0.0),
    FatigueLevel.MODERATE: (0.0, 0.0, 0.0),
    FatigueLevel.HIGH: (-0.10, -0.10, -0.15),
    FatigueLevel.VERY_HIGH: (-0.20, -0.20, -0.25),
}
TREND_NUDGES: dict[PerformanceTrend, tuple[float, float, float]] = {
    PerformanceTrend.IMPROVING: (0.02, 0.0, 0.02),
    PerformanceTrend.STABLE: (0.0, 0.0, 0.0),
    PerformanceTrend.DECLINING: (-0.05, 0.0, -0.05),
}
LOW_READINESS_NUDGE = -0.10
REDUCED_READINESS_NUDGE = -0.05
HIGH_READINESS_DURATION_NUDGE = 0.05


@dataclass(frozen=True)
class ReconciledMultipliers:
    difficulty: float
    duration: float
    intensity: float
    ml_confidence: float
    reasoning: tuple[str, ...]


def readiness_bonus(readiness: float) -> float:
    """Linear bonus from +0.05 just above 0.8 up to +0.10 at readiness 1.0."""
    if readiness <= HIGH_READINESS:
        return 0.0
    return 0.05 + 0.05 * (readiness - HIGH_READINESS) / (1.0 - HIGH_READINESS)


class DifficultyReconciler:
    def __init__(self, confidence_threshold: float = 0.5) -> None:
        self.confidence_threshold = confidence_threshold

    def rule_multipliers(
        self,
        readiness: float,
        fatigue: FatigueLevel,
        trend: PerformanceTrend,
        feedback_bias: float = 0.0,
    ) -> tuple[float, float, float, list[str]]:
        """Apply the rule table. Returns unclamped (difficulty, duration, intensity, reasoning)."""
        difficulty = duration = intensity = 1.0
        reasoning: list[str] = []

        if readiness > HIGH_READINESS:
            bonus = readiness_bonus(readiness)
            difficulty += bonus
            intensity += bonus
            duration += HIGH_READINESS_DURATION_NUDGE
            reasoning.append(f"High readiness ({readiness:.2f}) allows a harder session (+{bonus:.3f}).")
        elif readiness < LOW_READINESS:
            difficulty += LOW_READINESS_NUDGE
            duration += LOW_READINESS_NUDGE
            intensity += LOW_READINESS_NUDGE
            reasoning.append(f"Low readiness ({readiness:.2f}) reduces load across the board.")
        elif readiness < REDUCED_READINESS:
            difficulty += REDUCED_READINESS_NUDGE
            duration += REDUCED_READINESS_NUDGE
            intensity += REDUCED_READINESS_NUDGE
            reasoning.append(f"Below-average readiness ({readiness:.2f}) slightly reduces load.")

        d, t, i = FATIGUE_NUDGES[fatigue]
        if d or t or i:
            difficulty += d
            duration += t
            intensity += i
            reasoning.append(f"Fatigue is {fatigue.value}; difficulty {d:+.2f}, duration {t:+.2f}, intensity {i:+.2f}.")

        d, t, i = TREND_NUDGES[trend]
        if d or t or i:
            difficulty += d
            duration += t
            intensity += i
            reasoning.append(f"Performance trend is {trend.value}; difficulty {d:+.2f}.")

        bias = clamp(feedback_bias, -FEEDBACK_BIAS_LIMIT, FEEDBACK_BIAS_LIMIT)
        if bias:
            difficulty += bias
            duration += bias / 2
            intensity += bias
            reasoning.append(f"Recent feedback biases difficulty by {bias:+.3f}.")

        return difficulty, duration, intensity, reasoning

    def reconcile(
        self,
        template: WorkoutTemplate,
        readiness: float,
        fatigue: FatigueLevel,
        trend: PerformanceTrend,
        advice: MLAdvice,
        feedback_bias: float = 0.0,
    ) -> ReconciledMultipliers:
        difficulty, duration, intensity, reasoning = self.rule_multipliers(readiness, fatigue, trend, feedback_bias)

        # An unavailable prediction is reported once, by the caller, as a degradation
        ml_confidence = advice.confidence if advice.available else 0.0
        if advice.available and ml_confidence > self.confidence_threshold:
            prediction = advice.prediction
            difficulty = _blend(difficulty, prediction.predicted_difficulty / template.base_difficulty, ml_confidence)
            duration = _blend(duration, prediction.predicted_duration_min / template.base_duration_min, ml_confidence)
            # The model predicts difficulty only; intensity follows the same ratio
            intensity = _blend(intensity, prediction.predicted_difficulty / template.base_difficulty, ml_confidence)
            reasoning.append(f"Blended with ML prediction at confidence {ml_confidence:.2f}.")
        elif advice.available:
            reasoning.append(f"ML confidence {ml_confidence:.2f} is too low to influence the prescription.")

        clamped = (clamp_multiplier(difficulty), clamp_multiplier(duration), clamp_multiplier(intensity))
        if clamped != (difficulty, duration, intensity):
            reasoning.append("Adjustments were clamped to the safe range.")

        return ReconciledMultipliers(
            difficulty=round(clamped[0], 4),
            duration=round(clamped[1], 4),
            intensity=round(clamped[2], 4),
            ml_confidence=ml_confidence,
            reasoning=tuple(reasoning),
        )


def _blend(rule: float, ml: float, confidence: float) -> float:
    return (1.0 - confidence) * rule + confidence * ml
