"""Personalization context aggregation.

This module defines the immutable context object that carries every input
needed for one personalization request, and the aggregator that fetches
those inputs concurrently.

Only the profile is mandatory. History, health, exposure and feedback
degrade to documented defaults and record a Degradation.
"""

import asyncio
from dataclasses import dataclass, field

from loguru import logger

from adaptive_training.personalization.errors import DataUnavailableError
from adaptive_training.personalization.ports import FeedbackStore, HealthDataProvider, UserRepository, WorkoutHistoryProvider
from adaptive_training.personalization.types import (
    Degradation,
    FeedbackRecord,
    HealthSnapshot,
    PerformanceSnapshot,
    UserProfile,
)

DEFAULT_PERFORMANCE = PerformanceSnapshot(
    average_intensity=0.5,
    consistency=0.5,
    improvement=0.0,
    recovery_quality=0.5,
    sessions_per_week=3.0,
    session_count=0,
)


@dataclass(frozen=True)
class PersonalizationContext:
    """Immutable per-request context.

    Attributes:
        user_id: Requesting user
        profile: User profile (always present)
        performance: Recent performance window, or DEFAULT_PERFORMANCE
        health: Today's health snapshot, or None when unavailable
        feedback: Recent feedback records, newest first
        exposure: exercise_id -> days since last performed
        degradations: Upstream failures absorbed while building the context
    """

    user_id: str
    profile: UserProfile
    performance: PerformanceSnapshot
    health: HealthSnapshot | None
    feedback: tuple[FeedbackRecord, ...] = ()
    exposure: dict[str, int] = field(default_factory=dict)
    degradations: tuple[Degradation, ...] = ()


class ContextAggregator:
    """Fetches profile, history, health and feedback in parallel."""

    def __init__(
        self,
        users: UserRepository,
        history: WorkoutHistoryProvider,
        health: HealthDataProvider,
        feedback_store: FeedbackStore,
        *,
        history_window: int = 10,
        exposure_window_days: int = 7,
        feedback_window: int = 5,
    ) -> None:
        self.users = users
        self.history = history
        self.health = health
        self.feedback_store = feedback_store
        self.history_window = history_window
        self.exposure_window_days = exposure_window_days
        self.feedback_window = feedback_window

    async def load_profile(self, user_id: str) -> UserProfile:
        try:
            profile = await self.users.get_profile(user_id)
        except Exception as e:
            logger.error("context_aggregator: Profile fetch failed", user_id=user_id, error=str(e))
            raise DataUnavailableError(user_id, f"Profile fetch failed for user_id={user_id}: {e}") from e
        if profile is None:
            logger.error("context_aggregator: Profile not found", user_id=user_id)
            raise DataUnavailableError(user_id)
        return profile

    async def build(self, user_id: str) -> PersonalizationContext:
        """Build a context for ``user_id``.

        Raises:
            DataUnavailableError: If the profile cannot be fetched
        """
        profile_result, performance_result, health_result, exposure_result, feedback_result = await asyncio.gather(
            self.load_profile(user_id),
            self.history.get_recent_performance(user_id, self.history_window),
            self.health.get_current_snapshot(user_id),
            self.history.get_recent_exposure(user_id, self.exposure_window_days),
            self.feedback_store.recent(user_id, self.feedback_window),
            return_exceptions=True,
        )

        if isinstance(profile_result, BaseException):
            raise profile_result

        degradations: list[Degradation] = []

        performance = _unwrap(performance_result, "history", user_id)
        if performance is None:
            performance = DEFAULT_PERFORMANCE
            degradations.append(Degradation.HISTORY_UNAVAILABLE)

        health = _unwrap(health_result, "health", user_id)
        if health is None:
            degradations.append(Degradation.HEALTH_UNAVAILABLE)

        exposure = _unwrap(exposure_result, "exposure", user_id)
        if exposure is None:
            exposure = {}
            degradations.append(Degradation.EXPOSURE_UNAVAILABLE)

        feedback = _unwrap(feedback_result, "feedback", user_id)
        if feedback is None:
            feedback = []
            degradations.append(Degradation.FEEDBACK_UNAVAILABLE)

        return PersonalizationContext(
            user_id=user_id,
            profile=profile_result,
            performance=performance,
            health=health,
            feedback=tuple(feedback),
            exposure=dict(exposure),
            degradations=tuple(degradations),
        )


def _unwrap(result, source: str, user_id: str):
    """Return the fetched value, or None when the fetch failed or found nothing."""
    if isinstance(result, Exception):
        logger.warning(f"context_aggregator: {source} fetch failed, using defaults", user_id=user_id, error=str(result))
        return None
    if isinstance(result, BaseException):
        raise result
    if result is None:
        logger.info(f"context_aggregator: No {source} data, using defaults", user_id=user_id)
    return result
