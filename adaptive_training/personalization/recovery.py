"""Recovery recommendations.

Recovery time grows with session intensity, age and lower fitness level.
Activities and notes come from a fixed table keyed by intensity band.
"""

from adaptive_training.personalization.types import (
    FatigueLevel,
    FitnessLevel,
    HealthSnapshot,
    IntensityBand,
    PersonalizationFactors,
    RecoveryRecommendation,
    UserProfile,
)

BASE_RECOVERY_HOURS: dict[IntensityBand, float] = {
    IntensityBand.LOW: 12.0,
    IntensityBand.MODERATE: 24.0,
    IntensityBand.HIGH: 48.0,
    IntensityBand.MAX: 72.0,
}
LEVEL_RECOVERY_FACTOR: dict[FitnessLevel, float] = {
    FitnessLevel.BEGINNER: 1.25,
    FitnessLevel.INTERMEDIATE: 1.0,
    FitnessLevel.ADVANCED: 0.9,
    FitnessLevel.ATHLETE: 0.8,
}
AGE_FACTOR_FROM = 30
AGE_FACTOR_PER_YEAR = 0.01
AGE_FACTOR_CAP = 1.5

RECOVERY_ACTIVITIES: dict[IntensityBand, tuple[str, ...]] = {
    IntensityBand.LOW: ("Easy walk", "Mobility flow"),
    IntensityBand.MODERATE: ("Light stretching", "Foam rolling", "Easy walk"),
    IntensityBand.HIGH: ("Foam rolling", "Light cycling or swimming", "Mobility flow"),
    IntensityBand.MAX: ("Full rest or gentle walking", "Foam rolling", "Contrast shower"),
}
NUTRITION_NOTES: dict[IntensityBand, tuple[str, ...]] = {
    IntensityBand.LOW: ("Normal balanced meals", "Stay hydrated"),
    IntensityBand.MODERATE: ("Protein within two hours of training", "Stay hydrated"),
    IntensityBand.HIGH: ("Protein and carbohydrates within an hour of training", "Replace fluids and electrolytes"),
    IntensityBand.MAX: (
        "Protein and carbohydrates within an hour of training",
        "Replace fluids and electrolytes",
        "Prioritise carbohydrate intake for the next day",
    ),
}
SLEEP_NOTES: dict[IntensityBand, tuple[str, ...]] = {
    IntensityBand.LOW: ("Keep a regular sleep schedule",),
    IntensityBand.MODERATE: ("Aim for 7-9 hours of sleep",),
    IntensityBand.HIGH: ("Aim for 8-9 hours of sleep",),
    IntensityBand.MAX: ("Aim for 8-9 hours of sleep", "Consider a short nap the next day"),
}
REST_NOTE = "Take a full rest day or light activity only (walking, mobility)"
SHORT_SLEEP_HOURS = 7.0
LOW_READINESS = 0.4


def intensity_band(intensity: float) -> IntensityBand:
    if intensity < 0.4:
        return IntensityBand.LOW
    if intensity < 0.7:
        return IntensityBand.MODERATE
    if intensity < 0.85:
        return IntensityBand.HIGH
    return IntensityBand.MAX


def age_factor(age: int) -> float:
    if age <= AGE_FACTOR_FROM:
        return 1.0
    return min(1.0 + AGE_FACTOR_PER_YEAR * (age - AGE_FACTOR_FROM), AGE_FACTOR_CAP)


class RecoveryAdvisor:
    def recommend(
        self,
        intensity: float,
        profile: UserProfile,
        factors: PersonalizationFactors | None = None,
        health: HealthSnapshot | None = None,
    ) -> RecoveryRecommendation:
        """Recommend recovery for a session of the given final intensity (0-1)."""
        band = intensity_band(intensity)
        hours = BASE_RECOVERY_HOURS[band] * age_factor(profile.age) * LEVEL_RECOVERY_FACTOR[profile.fitness_level]

        activities = list(RECOVERY_ACTIVITIES[band])
        reasons = [f"{band.value} intensity session ({intensity:.2f})"]
        if factors is not None and (
            factors.fatigue_level in (FatigueLevel.HIGH, FatigueLevel.VERY_HIGH) or factors.readiness < LOW_READINESS
        ):
            activities.insert(0, REST_NOTE)
            reasons.append(f"fatigue {factors.fatigue_level.value}, readiness {factors.readiness:.2f}")

        sleep_notes = list(SLEEP_NOTES[band])
        if health is not None and health.sleep_hours < SHORT_SLEEP_HOURS:
            sleep_notes.insert(0, f"Only {health.sleep_hours:g} hours slept last night; go to bed earlier tonight")

        if profile.age > AGE_FACTOR_FROM:
            reasons.append(f"age {profile.age}")
        reasons.append(f"{profile.fitness_level.value} fitness level")

        return RecoveryRecommendation(
            recovery_hours=round(hours, 1),
            intensity_band=band,
            activities=tuple(activities),
            nutrition_notes=NUTRITION_NOTES[band],
            sleep_notes=tuple(sleep_notes),
            reasoning=f"Recovery of {hours:.1f}h based on " + ", ".join(reasons) + ".",
        )
