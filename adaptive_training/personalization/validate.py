"""Request validation.

Runs before any upstream fetch (templates) or right after the profile
fetch (profiles). Collects every violation and raises InvalidInputError
once, so callers see the full list.
"""

from adaptive_training.personalization.errors import InvalidInputError
from adaptive_training.personalization.types import UserProfile, WorkoutTemplate


def validate_template(template: WorkoutTemplate) -> None:
    """Validate a workout template.

    Raises:
        InvalidInputError: If any rule is violated
    """
    errors: list[str] = []

    if not template.workout_id:
        errors.append("MISSING_WORKOUT_ID")
    if template.base_duration_min <= 0:
        errors.append("NON_POSITIVE_DURATION")
    if template.base_difficulty <= 0:
        errors.append("NON_POSITIVE_DIFFICULTY")
    if not 0 < template.base_intensity <= 1:
        errors.append("INTENSITY_OUT_OF_RANGE")

    seen: set[str] = set()
    for item in template.exercises:
        if item.exercise.exercise_id in seen:
            errors.append(f"DUPLICATE_EXERCISE:{item.exercise.exercise_id}")
        seen.add(item.exercise.exercise_id)

    if errors:
        raise InvalidInputError(errors)


def validate_profile(profile: UserProfile) -> None:
    errors: list[str] = []

    if not profile.goals:
        errors.append("EMPTY_GOALS")

    if errors:
        raise InvalidInputError(errors)


def validate_goals(goals: frozenset[str]) -> None:
    if not goals:
        raise InvalidInputError(["EMPTY_GOALS"])


def validate_intensity(intensity: float) -> None:
    """A completed session's intensity lies in [0, 1]; 0 is a rest day."""
    if not 0 <= intensity <= 1:
        raise InvalidInputError(["INTENSITY_OUT_OF_RANGE"])
