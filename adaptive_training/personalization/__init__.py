"""Personalization module - per-user, per-day adaptive workouts.

This module provides:
- Readiness, fatigue and trend estimation from health and history
- Bounded reconciliation of heuristics with ML predictions
- Exercise selection, volume adjustment and recovery guidance
- Progressive overload planning and feedback-driven bias
- A per-day cache with single-flight computation
"""

from adaptive_training.personalization.cache import CacheKey, PersonalizationCache
from adaptive_training.personalization.engine import PersonalizationEngine
from adaptive_training.personalization.errors import (
    CacheInconsistencyError,
    DataUnavailableError,
    InvalidInputError,
    MLUnavailableError,
    PersonalizationError,
)
from adaptive_training.personalization.stores import InMemoryFeedbackStore
from adaptive_training.personalization.types import (
    Degradation,
    ExerciseDescriptor,
    PersonalizedWorkout,
    TemplateExercise,
    TrainingVolume,
    UserProfile,
    WorkoutContext,
    WorkoutFeedback,
    WorkoutTemplate,
)

__all__ = [
    "CacheInconsistencyError",
    "CacheKey",
    "DataUnavailableError",
    "Degradation",
    "ExerciseDescriptor",
    "InMemoryFeedbackStore",
    "InvalidInputError",
    "MLUnavailableError",
    "PersonalizationCache",
    "PersonalizationEngine",
    "PersonalizationError",
    "PersonalizedWorkout",
    "TemplateExercise",
    "TrainingVolume",
    "UserProfile",
    "WorkoutContext",
    "WorkoutFeedback",
    "WorkoutTemplate",
]
