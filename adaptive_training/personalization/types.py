"""Canonical personalization schema.

This module defines the value objects that flow through the engine:
- Inputs owned by external collaborators (profile, health, performance, templates)
- Derived factors (readiness, fatigue, trend, ML confidence)
- Outputs (personalized workout, volume adjustment, overload plan, recovery)

Every model is frozen. A produced PersonalizedWorkout is never mutated.
Enum values are tags, not display strings.
"""

from datetime import date
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class FitnessLevel(StrEnum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    ATHLETE = "athlete"

    @property
    def rank(self) -> int:
        return _LEVEL_ORDER.index(self)


_LEVEL_ORDER = [
    FitnessLevel.BEGINNER,
    FitnessLevel.INTERMEDIATE,
    FitnessLevel.ADVANCED,
    FitnessLevel.ATHLETE,
]


class FatigueLevel(StrEnum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"


class PerformanceTrend(StrEnum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class VolumeAdjustmentType(StrEnum):
    INCREASE = "increase"
    DECREASE = "decrease"
    MAINTAIN = "maintain"


class IntensityBand(StrEnum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    MAX = "max"


class DifficultyFeedback(StrEnum):
    TOO_EASY = "too_easy"
    JUST_RIGHT = "just_right"
    TOO_HARD = "too_hard"


class WorkoutContext(StrEnum):
    GYM = "gym"
    HOME = "home"
    TRAVEL = "travel"
    QUICK = "quick"


class Degradation(StrEnum):
    """Non-fatal upstream failures recorded on a result."""

    HISTORY_UNAVAILABLE = "history_unavailable"
    HEALTH_UNAVAILABLE = "health_unavailable"
    EXPOSURE_UNAVAILABLE = "exposure_unavailable"
    ML_UNAVAILABLE = "ml_unavailable"
    CATALOG_UNAVAILABLE = "catalog_unavailable"
    FEEDBACK_UNAVAILABLE = "feedback_unavailable"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---- Inputs ----


class UserProfile(_Frozen):
    """Athlete profile, owned by the user store and immutable per request."""

    user_id: str
    fitness_level: FitnessLevel
    age: int = Field(ge=0)
    weight_kg: float = Field(gt=0)
    height_cm: float = Field(gt=0)
    goals: frozenset[str]
    equipment: frozenset[str] = frozenset()


class HealthSnapshot(_Frozen):
    sleep_hours: float = Field(ge=0)
    stress_level: float = Field(ge=0, le=100)
    energy_level: float = Field(ge=0, le=100)
    heart_rate: float | None = None
    hrv: float | None = None


class PerformanceSnapshot(_Frozen):
    """Aggregate of a rolling window of recent sessions.

    Attributes:
        average_intensity: Mean session intensity (0-1)
        consistency: Fraction of scheduled sessions completed (0-1)
        improvement: Signed relative performance delta over the window
        recovery_quality: Recovery quality between sessions (0-1)
        sessions_per_week: Training density over the window
        session_count: Number of sessions the snapshot was built from
    """

    average_intensity: float = Field(ge=0.0, le=1.0)
    consistency: float = Field(ge=0.0, le=1.0)
    improvement: float
    recovery_quality: float = Field(ge=0.0, le=1.0)
    sessions_per_week: float = Field(default=3.0, ge=0.0)
    session_count: int = Field(default=0, ge=0)


class TrainingVolume(_Frozen):
    sets: int = Field(ge=0)
    reps: int = Field(ge=0)
    weight: float = Field(default=0.0, ge=0.0)
    duration_sec: float = Field(default=0.0, ge=0.0)


class ExerciseDescriptor(_Frozen):
    exercise_id: str
    name: str
    goal_tags: frozenset[str] = frozenset()
    level: FitnessLevel = FitnessLevel.BEGINNER
    equipment: frozenset[str] = frozenset()
    muscle_groups: frozenset[str] = frozenset()
    intensity: float = Field(default=0.5, ge=0.0, le=1.0)
    default_volume: TrainingVolume | None = None


class TemplateExercise(_Frozen):
    exercise: ExerciseDescriptor
    volume: TrainingVolume


class WorkoutTemplate(_Frozen):
    """Generic workout prescription before personalization.

    Range checks live in validate.py so that bad templates surface as
    InvalidInputError rather than as construction failures upstream.
    """

    workout_id: str
    name: str
    base_difficulty: float
    base_duration_min: float
    base_intensity: float
    exercises: tuple[TemplateExercise, ...] = ()


class ExerciseSession(_Frozen):
    """One logged session of a single exercise."""

    performed_on: date
    load: float = Field(ge=0.0)
    sets: int = Field(default=0, ge=0)
    reps: int = Field(default=0, ge=0)


class CatalogFilters(_Frozen):
    goals: frozenset[str] = frozenset()
    equipment: frozenset[str] = frozenset()
    max_level: FitnessLevel | None = None


# ---- ML boundary ----


class MLRequest(_Frozen):
    """Payload sent to the inference service."""

    workout_id: str
    base_difficulty: float
    base_duration_min: float
    base_intensity: float
    exercise_ids: tuple[str, ...]
    profile: UserProfile
    performance: PerformanceSnapshot
    health: HealthSnapshot | None = None


class MLPrediction(_Frozen):
    predicted_difficulty: float
    predicted_duration_min: float
    predicted_calories: float
    confidence: float


# ---- Derived factors ----


class PersonalizationFactors(_Frozen):
    readiness: float = Field(ge=0.0, le=1.0)
    fatigue_level: FatigueLevel
    fatigue_score: float = Field(ge=0.0, le=1.0)
    performance_trend: PerformanceTrend
    ml_confidence: float = Field(ge=0.0, le=1.0)
    feedback_bias: float = 0.0


# ---- Feedback ----


class WorkoutFeedback(_Frozen):
    difficulty: DifficultyFeedback
    enjoyment: int = Field(ge=1, le=5)
    completion: float = Field(ge=0.0, le=1.0)
    submitted_on: date


class FeedbackRecord(_Frozen):
    """Durable feedback signal consumed by future personalization requests."""

    user_id: str
    workout_id: str
    feedback: WorkoutFeedback
    bias: float


class FeedbackAnalysis(_Frozen):
    difficulty: str
    enjoyment: str
    completion: str
    bias: float
    is_difficulty_complaint: bool


# ---- Outputs ----


class TrainingVolumeAdjustment(_Frozen):
    current_volume: TrainingVolume
    adjusted_volume: TrainingVolume
    adjustment_type: VolumeAdjustmentType
    multiplier: float
    reasoning: str


class RecoveryRecommendation(_Frozen):
    recovery_hours: float
    intensity_band: IntensityBand
    activities: tuple[str, ...]
    nutrition_notes: tuple[str, ...]
    sleep_notes: tuple[str, ...]
    reasoning: str


class PersonalizedExercise(_Frozen):
    exercise: ExerciseDescriptor
    volume: TrainingVolume
    score: float
    from_template: bool


class PersonalizedWorkout(_Frozen):
    template: WorkoutTemplate
    user_id: str
    day: date
    exercises: tuple[PersonalizedExercise, ...]
    adjusted_difficulty: float
    adjusted_duration_min: float
    adjusted_intensity: float
    difficulty_multiplier: float
    duration_multiplier: float
    intensity_multiplier: float
    factors: PersonalizationFactors
    volume_adjustment: TrainingVolumeAdjustment
    recovery: RecoveryRecommendation
    reasoning: tuple[str, ...]
    degradations: tuple[Degradation, ...] = ()


class OverloadPhase(_Frozen):
    index: int
    name: str
    start_week: int
    end_week: int
    target_load: float
    target_sets: int
    target_reps: int


class OverloadMilestone(_Frozen):
    week: int
    target_load: float
    description: str


class ProgressiveOverloadPlan(_Frozen):
    user_id: str
    exercise_id: str
    current_level: float
    improvement_rate: float
    phases: tuple[OverloadPhase, ...]
    timeline_weeks: int
    milestones: tuple[OverloadMilestone, ...]
    reasoning: str
