"""Progressive overload planning.

Builds a multi-phase load trajectory for one exercise over a horizon of
weeks. Target load never decreases between consecutive phases. The only
exception is a one-week deload prepended when the latest feedback shows
sustained difficulty complaints; progression then restarts from the
deload load and is again non-decreasing.
"""

import math

from loguru import logger

from adaptive_training.personalization.errors import DataUnavailableError
from adaptive_training.personalization.feedback import sustained_difficulty
from adaptive_training.personalization.invariants import clamp
from adaptive_training.personalization.trends import compute_slope
from adaptive_training.personalization.types import (
    ExerciseDescriptor,
    ExerciseSession,
    FeedbackRecord,
    FitnessLevel,
    OverloadMilestone,
    OverloadPhase,
    ProgressiveOverloadPlan,
    UserProfile,
)

# Weekly relative progression cap by fitness level
MAX_WEEKLY_PROGRESSION: dict[FitnessLevel, float] = {
    FitnessLevel.BEGINNER: 0.05,
    FitnessLevel.INTERMEDIATE: 0.03,
    FitnessLevel.ADVANCED: 0.02,
    FitnessLevel.ATHLETE: 0.015,
}
MIN_WEEKLY_PROGRESSION = 0.01

# (name, sets, reps)
PHASE_SEQUENCE: list[tuple[str, int, int]] = [
    ("accumulation", 4, 10),
    ("intensification", 4, 6),
    ("realization", 3, 4),
]
CONSOLIDATION_PHASE = ("consolidation", 3, 5)

DELOAD_FACTOR = 0.9
DELOAD_WEEKS = 1
DELOAD_SETS = 2
DELOAD_REPS = 8

CURRENT_LEVEL_SESSIONS = 3
DEFAULT_SESSIONS_PER_WEEK = 2.0


def current_level(history: list[ExerciseSession]) -> float:
    recent = [s.load for s in history[-CURRENT_LEVEL_SESSIONS:]]
    return sum(recent) / len(recent)


def sessions_per_week(history: list[ExerciseSession]) -> float:
    if len(history) < 2:
        return DEFAULT_SESSIONS_PER_WEEK
    span_days = (history[-1].performed_on - history[0].performed_on).days
    if span_days <= 0:
        return DEFAULT_SESSIONS_PER_WEEK
    return len(history) / (span_days / 7.0)


def improvement_rate(history: list[ExerciseSession], level: float, fitness_level: FitnessLevel) -> float:
    """Relative weekly improvement, clamped to the level's cap with a floor."""
    if level <= 0 or len(history) < 2:
        return MIN_WEEKLY_PROGRESSION
    per_session = compute_slope([s.load for s in history])
    weekly = per_session * sessions_per_week(history) / level
    return clamp(weekly, MIN_WEEKLY_PROGRESSION, MAX_WEEKLY_PROGRESSION[fitness_level])


class ProgressiveOverloadPlanner:
    def __init__(self, horizon_weeks: int = 12, phase_weeks: int = 4) -> None:
        self.horizon_weeks = horizon_weeks
        self.phase_weeks = min(phase_weeks, horizon_weeks)

    def plan(
        self,
        profile: UserProfile,
        exercise_id: str,
        history: list[ExerciseSession],
        feedback: list[FeedbackRecord] | tuple[FeedbackRecord, ...] = (),
        descriptor: ExerciseDescriptor | None = None,
    ) -> ProgressiveOverloadPlan:
        """Create the overload plan.

        Args:
            profile: User profile (drives the progression cap)
            exercise_id: Exercise being planned
            history: Logged sessions in chronological order
            feedback: Recent feedback records, newest first
            descriptor: Catalog entry, used for a baseline when there is no history

        Raises:
            DataUnavailableError: With neither history nor a default load
        """
        history = sorted(history, key=lambda s: s.performed_on)
        if history:
            level = current_level(history)
        elif descriptor is not None and descriptor.default_volume is not None and descriptor.default_volume.weight > 0:
            level = descriptor.default_volume.weight
        else:
            raise DataUnavailableError(profile.user_id, f"No history for exercise_id={exercise_id}")

        rate = improvement_rate(history, level, profile.fitness_level)
        deload = sustained_difficulty(feedback)

        phases: list[OverloadPhase] = []
        week = 1
        base_load = level
        if deload:
            base_load = round(level * DELOAD_FACTOR, 2)
            phases.append(
                OverloadPhase(
                    index=0,
                    name="deload",
                    start_week=week,
                    end_week=week + DELOAD_WEEKS - 1,
                    target_load=base_load,
                    target_sets=DELOAD_SETS,
                    target_reps=DELOAD_REPS,
                )
            )
            week += DELOAD_WEEKS

        progression_start = week
        remaining = self.horizon_weeks - (week - 1)
        phase_count = math.ceil(remaining / self.phase_weeks) if remaining > 0 else 0
        for position in range(phase_count):
            name, sets, reps = PHASE_SEQUENCE[position] if position < len(PHASE_SEQUENCE) else CONSOLIDATION_PHASE
            end_week = min(week + self.phase_weeks - 1, self.horizon_weeks)
            weeks_progressed = end_week - progression_start + 1
            target = round(base_load * (1.0 + rate) ** weeks_progressed, 2)
            if phases and phases[-1].name != "deload":
                target = max(target, phases[-1].target_load)
            phases.append(
                OverloadPhase(
                    index=len(phases),
                    name=name,
                    start_week=week,
                    end_week=end_week,
                    target_load=target,
                    target_sets=sets,
                    target_reps=reps,
                )
            )
            week = end_week + 1

        milestones = tuple(
            OverloadMilestone(
                week=p.end_week,
                target_load=p.target_load,
                description=f"{p.name.capitalize()} complete: {p.target_sets}x{p.target_reps} at {p.target_load:g}",
            )
            for p in phases
        )

        reasoning = (
            f"Current level {level:.2f} from {len(history)} session(s); "
            f"weekly progression {rate:.1%} (cap {MAX_WEEKLY_PROGRESSION[profile.fitness_level]:.1%} "
            f"for {profile.fitness_level.value})."
        )
        if deload:
            reasoning += " Recent sessions were reported too hard, so the plan opens with a deload week."

        logger.info(
            "overload_planner: Plan created",
            user_id=profile.user_id,
            exercise_id=exercise_id,
            phases=len(phases),
            deload=deload,
        )
        return ProgressiveOverloadPlan(
            user_id=profile.user_id,
            exercise_id=exercise_id,
            current_level=round(level, 2),
            improvement_rate=round(rate, 4),
            phases=tuple(phases),
            timeline_weeks=self.horizon_weeks,
            milestones=milestones,
            reasoning=reasoning,
        )
