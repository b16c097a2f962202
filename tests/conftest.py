"""Root conftest for all tests.

Provides in-memory fakes for every collaborator port, plus sample
profiles, templates and an engine factory bound to a fixed calendar day.
"""

import asyncio
from datetime import date

import pytest

from adaptive_training.config.settings import PersonalizationSettings
from adaptive_training.personalization.engine import PersonalizationEngine
from adaptive_training.personalization.errors import MLUnavailableError
from adaptive_training.personalization.stores import InMemoryFeedbackStore
from adaptive_training.personalization.types import (
    CatalogFilters,
    ExerciseDescriptor,
    ExerciseSession,
    FitnessLevel,
    HealthSnapshot,
    MLPrediction,
    MLRequest,
    PerformanceSnapshot,
    TemplateExercise,
    TrainingVolume,
    UserProfile,
    WorkoutTemplate,
)

TODAY = date(2026, 6, 15)


class FakeUserRepository:
    def __init__(self, profiles: dict[str, UserProfile] | None = None, error: Exception | None = None):
        self.profiles = profiles or {}
        self.error = error
        self.calls = 0

    async def get_profile(self, user_id: str) -> UserProfile | None:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.profiles.get(user_id)


class FakeHistoryProvider:
    def __init__(
        self,
        performance: PerformanceSnapshot | None = None,
        exercise_history: dict[str, list[ExerciseSession]] | None = None,
        exposure: dict[str, int] | None = None,
        error: Exception | None = None,
        exposure_error: Exception | None = None,
    ):
        self.performance = performance
        self.exercise_history = exercise_history or {}
        self.exposure = exposure or {}
        self.error = error
        self.exposure_error = exposure_error or error

    async def get_recent_performance(self, user_id: str, window_size: int) -> PerformanceSnapshot | None:
        if self.error is not None:
            raise self.error
        return self.performance

    async def get_exercise_history(self, user_id: str, exercise_id: str, limit: int) -> list[ExerciseSession]:
        if self.error is not None:
            raise self.error
        return self.exercise_history.get(exercise_id, [])[-limit:]

    async def get_recent_exposure(self, user_id: str, days: int) -> dict[str, int]:
        if self.exposure_error is not None:
            raise self.exposure_error
        return dict(self.exposure)


class FakeHealthProvider:
    def __init__(self, snapshot: HealthSnapshot | None = None, error: Exception | None = None):
        self.snapshot = snapshot
        self.error = error

    async def get_current_snapshot(self, user_id: str) -> HealthSnapshot | None:
        if self.error is not None:
            raise self.error
        return self.snapshot


class FakeMLService:
    def __init__(
        self,
        prediction: MLPrediction | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        self.prediction = prediction
        self.error = error
        self.delay = delay
        self.calls = 0

    async def predict(self, request: MLRequest) -> MLPrediction:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.prediction is None:
            raise MLUnavailableError("model not loaded")
        return self.prediction


class FakeCatalog:
    def __init__(self, candidates: list[ExerciseDescriptor] | None = None, error: Exception | None = None):
        self.candidates = candidates or []
        self.error = error
        self.filters: list[CatalogFilters] = []

    async def list_candidates(self, filters: CatalogFilters) -> list[ExerciseDescriptor]:
        self.filters.append(filters)
        if self.error is not None:
            raise self.error
        return [c for c in self.candidates if c.equipment <= filters.equipment] if filters.equipment else list(self.candidates)


def make_exercise(
    exercise_id: str,
    *,
    goals: set[str] | None = None,
    level: FitnessLevel = FitnessLevel.INTERMEDIATE,
    equipment: set[str] | None = None,
    intensity: float = 0.5,
    default_volume: TrainingVolume | None = None,
) -> ExerciseDescriptor:
    return ExerciseDescriptor(
        exercise_id=exercise_id,
        name=exercise_id.replace("_", " ").title(),
        goal_tags=frozenset(goals or {"strength"}),
        level=level,
        equipment=frozenset(equipment or set()),
        intensity=intensity,
        default_volume=default_volume,
    )


@pytest.fixture
def profile() -> UserProfile:
    return UserProfile(
        user_id="user-1",
        fitness_level=FitnessLevel.INTERMEDIATE,
        age=34,
        weight_kg=78.0,
        height_cm=180.0,
        goals=frozenset({"strength", "hypertrophy"}),
        equipment=frozenset({"barbell", "dumbbell", "bench", "rack"}),
    )


@pytest.fixture
def rested_health() -> HealthSnapshot:
    # 0.4 * 1.0 + 0.3 * 0.9 + 0.3 * 0.77 = 0.901
    return HealthSnapshot(sleep_hours=8.5, stress_level=10, energy_level=77, heart_rate=55, hrv=80)


@pytest.fixture
def exhausted_health() -> HealthSnapshot:
    # 0.4 * 0.5 + 0.3 * 0.2 + 0.3 * 0.1 = 0.29
    return HealthSnapshot(sleep_hours=4.0, stress_level=80, energy_level=10)


@pytest.fixture
def improving_performance() -> PerformanceSnapshot:
    # load 0.5 * 0.4 + 0.5 * 0.5 = 0.45, recovery 0.1 -> score 0.345 (moderate)
    return PerformanceSnapshot(
        average_intensity=0.4,
        consistency=0.9,
        improvement=0.2,
        recovery_quality=0.9,
        sessions_per_week=3.0,
        session_count=10,
    )


@pytest.fixture
def fresh_performance() -> PerformanceSnapshot:
    # load 0.5 * 0.2 + 0.5 * (1/6) = 0.1833, recovery 0.05 -> score 0.1433 (low)
    return PerformanceSnapshot(
        average_intensity=0.2,
        consistency=0.9,
        improvement=0.2,
        recovery_quality=0.95,
        sessions_per_week=1.0,
        session_count=10,
    )


@pytest.fixture
def overreached_performance() -> PerformanceSnapshot:
    # load 0.5 * 0.95 + 0.5 * 1.0 = 0.975, recovery 0.9 -> score 0.9525 (very_high)
    return PerformanceSnapshot(
        average_intensity=0.95,
        consistency=0.4,
        improvement=-0.3,
        recovery_quality=0.1,
        sessions_per_week=7.0,
        session_count=10,
    )


@pytest.fixture
def template() -> WorkoutTemplate:
    return WorkoutTemplate(
        workout_id="upper-a",
        name="Upper A",
        base_difficulty=6.0,
        base_duration_min=50.0,
        base_intensity=0.7,
        exercises=(
            TemplateExercise(
                exercise=make_exercise("bench_press", equipment={"barbell", "bench"}, intensity=0.8),
                volume=TrainingVolume(sets=4, reps=8, weight=80.0),
            ),
            TemplateExercise(
                exercise=make_exercise("dumbbell_row", goals={"strength", "hypertrophy"}, equipment={"dumbbell"}),
                volume=TrainingVolume(sets=3, reps=10, weight=30.0),
            ),
            TemplateExercise(
                exercise=make_exercise("push_up", goals={"hypertrophy"}, level=FitnessLevel.BEGINNER, intensity=0.3),
                volume=TrainingVolume(sets=3, reps=15),
            ),
        ),
    )


@pytest.fixture
def catalog_exercises() -> list[ExerciseDescriptor]:
    return [
        make_exercise("incline_press", goals={"strength", "hypertrophy"}, equipment={"dumbbell", "bench"}, intensity=0.6),
        make_exercise("cable_fly", goals={"hypertrophy"}, equipment={"cable"}),
        make_exercise("plank", goals={"core"}, level=FitnessLevel.BEGINNER, intensity=0.2),
        make_exercise(
            "goblet_squat",
            goals={"strength"},
            equipment={"dumbbell"},
            default_volume=TrainingVolume(sets=3, reps=12, weight=24.0),
        ),
    ]


@pytest.fixture
def settings() -> PersonalizationSettings:
    return PersonalizationSettings(ml_timeout_seconds=0.05, log_level="DEBUG")


@pytest.fixture
def make_engine(profile, settings, catalog_exercises):
    """Factory building an engine with fakes; keyword arguments override each collaborator."""

    def _make(
        *,
        users: FakeUserRepository | None = None,
        history: FakeHistoryProvider | None = None,
        health: FakeHealthProvider | None = None,
        catalog: FakeCatalog | None = None,
        ml_service: FakeMLService | None = None,
        feedback_store: InMemoryFeedbackStore | None = None,
        performance: PerformanceSnapshot | None = None,
        health_snapshot: HealthSnapshot | None = None,
        today=lambda: TODAY,
    ) -> PersonalizationEngine:
        return PersonalizationEngine(
            users or FakeUserRepository({profile.user_id: profile}),
            history or FakeHistoryProvider(performance=performance),
            health or FakeHealthProvider(snapshot=health_snapshot),
            catalog or FakeCatalog(catalog_exercises),
            ml_service,
            feedback_store,
            settings=settings,
            today=today,
        )

    return _make
