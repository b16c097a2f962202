"""Deterministic exercise selection.

Candidates are scored against goals, fitness level, equipment and recent
exposure, then ranked. No randomness: identical inputs give identical
output, and equal scores keep pool insertion order (template exercises
first, then catalog candidates).

Equipment is a hard filter. Everything else is a score term.
"""

from dataclasses import dataclass

from adaptive_training.personalization.types import (
    ExerciseDescriptor,
    FatigueLevel,
    PerformanceTrend,
    UserProfile,
)

GOAL_WEIGHT = 0.4
LEVEL_FIT_BASE = 0.25
LEVEL_DISTANCE_PENALTY = 0.1
LEVEL_ABOVE_PENALTY = 0.15
DECLINING_ABOVE_LEVEL_PENALTY = 0.05
TEMPLATE_BONUS = 0.15

# days since last performed -> penalty; first matching bound wins
EXPOSURE_PENALTIES: list[tuple[int, float]] = [
    (2, 0.2),
    (6, 0.1),
]
FATIGUE_INTENSITY_PENALTY: dict[FatigueLevel, float] = {
    FatigueLevel.LOW: 0.0,
    FatigueLevel.MODERATE: 0.0,
    FatigueLevel.HIGH: 0.1,
    FatigueLevel.VERY_HIGH: 0.2,
}


@dataclass(frozen=True)
class ScoredExercise:
    exercise: ExerciseDescriptor
    score: float
    from_template: bool


def has_equipment(exercise: ExerciseDescriptor, available: frozenset[str]) -> bool:
    return exercise.equipment <= available


def exposure_penalty(days_since: int | None) -> float:
    if days_since is None:
        return 0.0
    for bound, penalty in EXPOSURE_PENALTIES:
        if days_since <= bound:
            return penalty
    return 0.0


def score_exercise(
    exercise: ExerciseDescriptor,
    profile: UserProfile,
    *,
    goals: frozenset[str] | None = None,
    fatigue: FatigueLevel = FatigueLevel.MODERATE,
    trend: PerformanceTrend = PerformanceTrend.STABLE,
    days_since: int | None = None,
    from_template: bool = False,
) -> float:
    """Score one candidate. Higher is better; the scale is unbounded but small."""
    goals = profile.goals if goals is None else goals
    score = 0.0

    if goals:
        score += GOAL_WEIGHT * len(goals & exercise.goal_tags) / len(goals)

    distance = exercise.level.rank - profile.fitness_level.rank
    score += LEVEL_FIT_BASE - LEVEL_DISTANCE_PENALTY * abs(distance)
    if distance > 0:
        score -= LEVEL_ABOVE_PENALTY * distance
        if trend == PerformanceTrend.DECLINING:
            score -= DECLINING_ABOVE_LEVEL_PENALTY

    score -= exposure_penalty(days_since)
    score -= FATIGUE_INTENSITY_PENALTY[fatigue] * exercise.intensity

    if from_template:
        score += TEMPLATE_BONUS

    return round(score, 6)


class ExerciseSelector:
    def __init__(self, max_exercises: int = 8) -> None:
        self.max_exercises = max_exercises

    def rank(
        self,
        profile: UserProfile,
        template_exercises: list[ExerciseDescriptor],
        catalog_candidates: list[ExerciseDescriptor],
        *,
        goals: frozenset[str] | None = None,
        fatigue: FatigueLevel = FatigueLevel.MODERATE,
        trend: PerformanceTrend = PerformanceTrend.STABLE,
        exposure: dict[str, int] | None = None,
        equipment: frozenset[str] | None = None,
    ) -> list[ScoredExercise]:
        """Score the de-duplicated pool and sort by score, descending.

        Args:
            profile: User profile
            template_exercises: Exercises from the workout template, in order
            catalog_candidates: Alternatives from the catalog, in order
            goals: Goal override (defaults to the profile's goals)
            fatigue: Current fatigue level
            trend: Current performance trend
            exposure: exercise_id -> days since last performed
            equipment: Equipment override (defaults to the profile's equipment)

        Returns:
            All eligible candidates, best first
        """
        exposure = exposure or {}
        available = profile.equipment if equipment is None else equipment
        template_ids = {e.exercise_id for e in template_exercises}

        seen: set[str] = set()
        scored: list[ScoredExercise] = []
        for exercise in [*template_exercises, *catalog_candidates]:
            if exercise.exercise_id in seen:
                continue
            seen.add(exercise.exercise_id)
            if not has_equipment(exercise, available):
                continue
            from_template = exercise.exercise_id in template_ids
            score = score_exercise(
                exercise,
                profile,
                goals=goals,
                fatigue=fatigue,
                trend=trend,
                days_since=exposure.get(exercise.exercise_id),
                from_template=from_template,
            )
            scored.append(ScoredExercise(exercise=exercise, score=score, from_template=from_template))

        # sorted() is stable, so equal scores keep insertion order
        return sorted(scored, key=lambda s: -s.score)

    def select(self, ranked: list[ScoredExercise], limit: int | None = None) -> list[ScoredExercise]:
        count = self.max_exercises if limit is None else min(limit, self.max_exercises)
        return ranked[:count]
