import pytest

from adaptive_training.personalization.recovery import REST_NOTE, RecoveryAdvisor, age_factor, intensity_band
from adaptive_training.personalization.types import (
    FatigueLevel,
    FitnessLevel,
    HealthSnapshot,
    IntensityBand,
    PersonalizationFactors,
    PerformanceTrend,
)


def _factors(fatigue: FatigueLevel = FatigueLevel.LOW, readiness: float = 0.8) -> PersonalizationFactors:
    return PersonalizationFactors(
        readiness=readiness,
        fatigue_level=fatigue,
        fatigue_score=0.2,
        performance_trend=PerformanceTrend.STABLE,
        ml_confidence=0.0,
    )


@pytest.mark.parametrize(
    ("intensity", "band"),
    [
        (0.1, IntensityBand.LOW),
        (0.4, IntensityBand.MODERATE),
        (0.69, IntensityBand.MODERATE),
        (0.7, IntensityBand.HIGH),
        (0.85, IntensityBand.MAX),
        (1.0, IntensityBand.MAX),
    ],
)
def test_intensity_bands(intensity, band):
    assert intensity_band(intensity) == band


def test_age_factor():
    assert age_factor(25) == 1.0
    assert age_factor(30) == 1.0
    assert age_factor(40) == pytest.approx(1.1)
    assert age_factor(95) == 1.5


def test_recovery_hours_scale_with_age_and_level(profile):
    young_athlete = profile.model_copy(update={"age": 25, "fitness_level": FitnessLevel.ATHLETE})
    older_beginner = profile.model_copy(update={"age": 50, "fitness_level": FitnessLevel.BEGINNER})
    advisor = RecoveryAdvisor()

    assert advisor.recommend(0.75, young_athlete).recovery_hours == pytest.approx(38.4)
    assert advisor.recommend(0.75, older_beginner).recovery_hours == pytest.approx(72.0)


def test_recovery_grows_with_intensity(profile):
    advisor = RecoveryAdvisor()
    hours = [advisor.recommend(i, profile).recovery_hours for i in (0.2, 0.5, 0.75, 0.95)]

    assert hours == sorted(hours)


def test_rest_note_for_high_fatigue(profile):
    recommendation = RecoveryAdvisor().recommend(0.5, profile, _factors(FatigueLevel.HIGH))

    assert recommendation.activities[0] == REST_NOTE


def test_rest_note_for_low_readiness(profile):
    recommendation = RecoveryAdvisor().recommend(0.5, profile, _factors(readiness=0.3))

    assert recommendation.activities[0] == REST_NOTE


def test_no_rest_note_when_fresh(profile):
    assert REST_NOTE not in RecoveryAdvisor().recommend(0.5, profile, _factors()).activities
    assert REST_NOTE not in RecoveryAdvisor().recommend(0.5, profile).activities


def test_short_sleep_note(profile):
    health = HealthSnapshot(sleep_hours=5.5, stress_level=30, energy_level=50)
    recommendation = RecoveryAdvisor().recommend(0.9, profile, health=health)

    assert recommendation.intensity_band == IntensityBand.MAX
    assert "5.5 hours" in recommendation.sleep_notes[0]
    assert recommendation.nutrition_notes
