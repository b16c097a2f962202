"""Explicit user feedback.

Feedback becomes a durable FeedbackRecord that biases *future*
personalization requests. Already-produced workouts are never touched;
the cache entry for the workout is dropped so the next request
recomputes with the new bias.
"""

from loguru import logger

from adaptive_training.personalization.cache import PersonalizationCache
from adaptive_training.personalization.invariants import FEEDBACK_BIAS_LIMIT, SUSTAINED_COMPLAINT_COUNT, clamp
from adaptive_training.personalization.ports import FeedbackStore
from adaptive_training.personalization.types import (
    DifficultyFeedback,
    FeedbackAnalysis,
    FeedbackRecord,
    WorkoutFeedback,
)

DIFFICULTY_BIAS: dict[DifficultyFeedback, float] = {
    DifficultyFeedback.TOO_EASY: 0.05,
    DifficultyFeedback.JUST_RIGHT: 0.0,
    DifficultyFeedback.TOO_HARD: -0.05,
}
LOW_COMPLETION = 0.5
LOW_COMPLETION_BIAS = -0.03


def record_bias(feedback: WorkoutFeedback) -> float:
    bias = DIFFICULTY_BIAS[feedback.difficulty]
    if feedback.completion < LOW_COMPLETION:
        bias += LOW_COMPLETION_BIAS
    return clamp(bias, -FEEDBACK_BIAS_LIMIT, FEEDBACK_BIAS_LIMIT)


def analyse_feedback(feedback: WorkoutFeedback) -> FeedbackAnalysis:
    if feedback.enjoyment >= 4:
        enjoyment = "enjoyed"
    elif feedback.enjoyment <= 2:
        enjoyment = "disliked"
    else:
        enjoyment = "neutral"

    if feedback.completion >= 0.9:
        completion = "completed"
    elif feedback.completion >= LOW_COMPLETION:
        completion = "partial"
    else:
        completion = "abandoned"

    return FeedbackAnalysis(
        difficulty=feedback.difficulty.value,
        enjoyment=enjoyment,
        completion=completion,
        bias=record_bias(feedback),
        is_difficulty_complaint=feedback.difficulty == DifficultyFeedback.TOO_HARD,
    )


def feedback_bias(records: list[FeedbackRecord] | tuple[FeedbackRecord, ...]) -> float:
    """Aggregate bias from recent records (newest first).

    The newest record weighs most; weights fall off as 1/(position + 1).
    The total is clamped to +/- FEEDBACK_BIAS_LIMIT.
    """
    if not records:
        return 0.0
    weighted = 0.0
    total_weight = 0.0
    for position, record in enumerate(records):
        weight = 1.0 / (position + 1)
        weighted += weight * record.bias
        total_weight += weight
    # Several agreeing records push further than one, up to the limit
    strength = min(len(records), SUSTAINED_COMPLAINT_COUNT)
    bias = weighted / total_weight * strength
    return round(clamp(bias, -FEEDBACK_BIAS_LIMIT, FEEDBACK_BIAS_LIMIT), 4)


def sustained_difficulty(
    records: list[FeedbackRecord] | tuple[FeedbackRecord, ...],
    count: int = SUSTAINED_COMPLAINT_COUNT,
) -> bool:
    """True when the ``count`` newest records are all too-hard complaints."""
    if len(records) < count:
        return False
    return all(r.feedback.difficulty == DifficultyFeedback.TOO_HARD for r in records[:count])


class FeedbackAdapter:
    def __init__(self, store: FeedbackStore, cache: PersonalizationCache | None = None) -> None:
        self.store = store
        self.cache = cache

    async def submit(self, user_id: str, workout_id: str, feedback: WorkoutFeedback) -> FeedbackAnalysis:
        analysis = analyse_feedback(feedback)
        record = FeedbackRecord(
            user_id=user_id,
            workout_id=workout_id,
            feedback=feedback,
            bias=analysis.bias,
        )
        await self.store.append(record)
        logger.info(
            "feedback_adapter: Feedback recorded",
            user_id=user_id,
            workout_id=workout_id,
            difficulty=feedback.difficulty.value,
            bias=analysis.bias,
        )

        if self.cache is not None:
            dropped = await self.cache.invalidate(user_id, workout_id)
            logger.debug("feedback_adapter: Cache invalidated", user_id=user_id, workout_id=workout_id, dropped=dropped)

        return analysis
