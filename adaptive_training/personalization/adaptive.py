"""Template-free adaptive workouts.

A WorkoutContext (where and how long the user can train) stands in for a
template: it fixes base duration, base intensity, exercise count and the
equipment that can be used. Everything else goes through the regular
personalization path.
"""

from dataclasses import dataclass

from adaptive_training.personalization.types import WorkoutContext, WorkoutTemplate

ADAPTIVE_BASE_DIFFICULTY = 5.0

# Equipment that plausibly exists at home; anything else is gym-only
HOME_EQUIPMENT = frozenset({"dumbbell", "kettlebell", "resistance_band", "pull_up_bar", "mat", "bench"})


@dataclass(frozen=True)
class ContextProfile:
    duration_min: float
    intensity: float
    exercise_count: int


CONTEXT_PROFILES: dict[WorkoutContext, ContextProfile] = {
    WorkoutContext.GYM: ContextProfile(duration_min=60.0, intensity=0.7, exercise_count=8),
    WorkoutContext.HOME: ContextProfile(duration_min=45.0, intensity=0.6, exercise_count=6),
    WorkoutContext.TRAVEL: ContextProfile(duration_min=30.0, intensity=0.5, exercise_count=5),
    WorkoutContext.QUICK: ContextProfile(duration_min=20.0, intensity=0.75, exercise_count=4),
}


def adaptive_workout_id(context: WorkoutContext) -> str:
    return f"adaptive:{context.value}"


def adaptive_template(context: WorkoutContext) -> WorkoutTemplate:
    profile = CONTEXT_PROFILES[context]
    return WorkoutTemplate(
        workout_id=adaptive_workout_id(context),
        name=f"Adaptive {context.value} workout",
        base_difficulty=ADAPTIVE_BASE_DIFFICULTY,
        base_duration_min=profile.duration_min,
        base_intensity=profile.intensity,
        exercises=(),
    )


def context_equipment(context: WorkoutContext, owned: frozenset[str]) -> frozenset[str]:
    """Equipment usable in ``context`` given what the user owns."""
    if context == WorkoutContext.TRAVEL:
        return frozenset()
    if context == WorkoutContext.HOME:
        return owned & HOME_EQUIPMENT
    return owned
