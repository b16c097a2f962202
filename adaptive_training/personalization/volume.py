"""Training volume adjustment.

The multiplier moves with trend, recovery and consistency. A dead-band
around 1.0 maps small moves to "maintain" so noisy signals do not make
volume oscillate session to session.
"""

from adaptive_training.personalization.invariants import (
    VOLUME_DECREASE_THRESHOLD,
    VOLUME_INCREASE_THRESHOLD,
    clamp_multiplier,
)
from adaptive_training.personalization.types import (
    FatigueLevel,
    PerformanceSnapshot,
    PerformanceTrend,
    TrainingVolume,
    TrainingVolumeAdjustment,
    VolumeAdjustmentType,
)

TREND_VOLUME_NUDGES: dict[PerformanceTrend, float] = {
    PerformanceTrend.IMPROVING: 0.10,
    PerformanceTrend.STABLE: 0.0,
    PerformanceTrend.DECLINING: -0.10,
}
FATIGUE_VOLUME_NUDGES: dict[FatigueLevel, float] = {
    FatigueLevel.LOW: 0.0,
    FatigueLevel.MODERATE: 0.0,
    FatigueLevel.HIGH: -0.05,
    FatigueLevel.VERY_HIGH: -0.10,
}
RECOVERY_WEIGHT = 0.2
CONSISTENCY_WEIGHT = 0.1
HIGH_READINESS = 0.8
HIGH_READINESS_NUDGE = 0.05


def classify_adjustment(multiplier: float) -> VolumeAdjustmentType:
    if multiplier > VOLUME_INCREASE_THRESHOLD:
        return VolumeAdjustmentType.INCREASE
    if multiplier < VOLUME_DECREASE_THRESHOLD:
        return VolumeAdjustmentType.DECREASE
    return VolumeAdjustmentType.MAINTAIN


def scale_volume(volume: TrainingVolume, multiplier: float) -> TrainingVolume:
    return TrainingVolume(
        sets=max(1, round(volume.sets * multiplier)) if volume.sets else 0,
        reps=max(1, round(volume.reps * multiplier)) if volume.reps else 0,
        weight=round(volume.weight * multiplier, 2),
        duration_sec=round(volume.duration_sec * multiplier, 2),
    )


class VolumeAdjuster:
    def volume_multiplier(
        self,
        trend: PerformanceTrend,
        performance: PerformanceSnapshot,
        *,
        readiness: float | None = None,
        fatigue: FatigueLevel = FatigueLevel.MODERATE,
    ) -> float:
        multiplier = 1.0
        multiplier += TREND_VOLUME_NUDGES[trend]
        multiplier += RECOVERY_WEIGHT * (performance.recovery_quality - 0.5)
        multiplier += CONSISTENCY_WEIGHT * (performance.consistency - 0.5)
        if readiness is not None and readiness > HIGH_READINESS:
            multiplier += HIGH_READINESS_NUDGE
        multiplier += FATIGUE_VOLUME_NUDGES[fatigue]
        return round(clamp_multiplier(multiplier), 4)

    def adjust(
        self,
        current: TrainingVolume,
        trend: PerformanceTrend,
        performance: PerformanceSnapshot,
        *,
        readiness: float | None = None,
        fatigue: FatigueLevel = FatigueLevel.MODERATE,
    ) -> TrainingVolumeAdjustment:
        multiplier = self.volume_multiplier(trend, performance, readiness=readiness, fatigue=fatigue)
        return self.apply(current, multiplier, reasoning=self.explain(trend, performance, multiplier, readiness, fatigue))

    def apply(self, current: TrainingVolume, multiplier: float, reasoning: str = "") -> TrainingVolumeAdjustment:
        multiplier = clamp_multiplier(multiplier)
        adjustment_type = classify_adjustment(multiplier)
        if adjustment_type == VolumeAdjustmentType.MAINTAIN:
            adjusted = current
        else:
            adjusted = scale_volume(current, multiplier)
        return TrainingVolumeAdjustment(
            current_volume=current,
            adjusted_volume=adjusted,
            adjustment_type=adjustment_type,
            multiplier=multiplier,
            reasoning=reasoning,
        )

    @staticmethod
    def explain(
        trend: PerformanceTrend,
        performance: PerformanceSnapshot,
        multiplier: float,
        readiness: float | None = None,
        fatigue: FatigueLevel = FatigueLevel.MODERATE,
    ) -> str:
        adjustment_type = classify_adjustment(multiplier)
        parts = [
            f"Trend {trend.value}",
            f"recovery quality {performance.recovery_quality:.2f}",
            f"consistency {performance.consistency:.2f}",
        ]
        if readiness is not None:
            boost = " (high, +volume)" if readiness > HIGH_READINESS else ""
            parts.append(f"readiness {readiness:.2f}{boost}")
        if FATIGUE_VOLUME_NUDGES[fatigue]:
            parts.append(f"{fatigue.value.replace('_', ' ')} fatigue")
        return f"{', '.join(parts)} -> volume x{multiplier:.2f} ({adjustment_type.value})."
