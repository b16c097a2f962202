"""Collaborator interfaces consumed by the engine.

Implementations live outside this package (storage, wearables, model
serving). Each port is async; the engine never assumes how data is stored.
"""

from typing import Protocol

from adaptive_training.personalization.types import (
    CatalogFilters,
    ExerciseDescriptor,
    ExerciseSession,
    FeedbackRecord,
    HealthSnapshot,
    MLPrediction,
    MLRequest,
    PerformanceSnapshot,
    UserProfile,
)


class UserRepository(Protocol):
    async def get_profile(self, user_id: str) -> UserProfile | None:
        """Return the profile, or None when the user is unknown."""
        ...


class WorkoutHistoryProvider(Protocol):
    async def get_recent_performance(self, user_id: str, window_size: int) -> PerformanceSnapshot | None:
        """Return an aggregate over the last ``window_size`` sessions, or None without history."""
        ...

    async def get_exercise_history(self, user_id: str, exercise_id: str, limit: int) -> list[ExerciseSession]:
        """Return logged sessions for one exercise in chronological order."""
        ...

    async def get_recent_exposure(self, user_id: str, days: int) -> dict[str, int]:
        """Return exercise_id -> days since last performed, for the last ``days`` days."""
        ...


class HealthDataProvider(Protocol):
    async def get_current_snapshot(self, user_id: str) -> HealthSnapshot | None:
        ...


class MLInferenceService(Protocol):
    async def predict(self, request: MLRequest) -> MLPrediction:
        """Return a prediction or raise MLUnavailableError."""
        ...


class ExerciseCatalog(Protocol):
    async def list_candidates(self, filters: CatalogFilters) -> list[ExerciseDescriptor]:
        ...


class FeedbackStore(Protocol):
    async def append(self, record: FeedbackRecord) -> None:
        ...

    async def recent(self, user_id: str, limit: int) -> list[FeedbackRecord]:
        """Return up to ``limit`` records, newest first."""
        ...
