"""Engine bootstrap: configure logging and wire collaborators."""

from collections.abc import Callable
from datetime import date

from loguru import logger

from adaptive_training.config.settings import PersonalizationSettings
from adaptive_training.config.settings import settings as default_settings
from adaptive_training.core.logger import setup_logger
from adaptive_training.personalization.engine import PersonalizationEngine
from adaptive_training.personalization.ports import (
    ExerciseCatalog,
    FeedbackStore,
    HealthDataProvider,
    MLInferenceService,
    UserRepository,
    WorkoutHistoryProvider,
)


def create_engine(
    users: UserRepository,
    history: WorkoutHistoryProvider,
    health: HealthDataProvider,
    catalog: ExerciseCatalog,
    ml_service: MLInferenceService | None = None,
    feedback_store: FeedbackStore | None = None,
    *,
    settings: PersonalizationSettings | None = None,
    today: Callable[[], date] = date.today,
    configure_logging: bool = True,
) -> PersonalizationEngine:
    """Build a PersonalizationEngine from its collaborators.

    Args:
        users: Profile repository
        history: Workout history provider
        health: Health data provider
        catalog: Exercise catalog
        ml_service: Optional inference service; None runs heuristics only
        feedback_store: Optional durable feedback store; defaults to in-memory
        settings: Settings override (defaults to environment-based settings)
        today: Clock used for calendar-day cache keys
        configure_logging: Install the loguru sinks from settings

    Returns:
        Ready-to-use engine
    """
    settings = settings or default_settings
    if configure_logging:
        setup_logger(level=settings.log_level, log_file=settings.log_file, serialize=settings.log_serialize)

    if ml_service is None:
        logger.warning("No ML inference service configured. Personalization will use heuristics only.")

    return PersonalizationEngine(
        users,
        history,
        health,
        catalog,
        ml_service,
        feedback_store,
        settings=settings,
        today=today,
    )
