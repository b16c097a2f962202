from datetime import date

import pytest

from adaptive_training.personalization.cache import PersonalizationCache
from adaptive_training.personalization.feedback import (
    FeedbackAdapter,
    analyse_feedback,
    feedback_bias,
    record_bias,
    sustained_difficulty,
)
from adaptive_training.personalization.stores import InMemoryFeedbackStore
from adaptive_training.personalization.types import DifficultyFeedback, FeedbackRecord, WorkoutFeedback

DAY = date(2026, 6, 15)


def _feedback(difficulty: DifficultyFeedback, enjoyment: int = 3, completion: float = 1.0) -> WorkoutFeedback:
    return WorkoutFeedback(difficulty=difficulty, enjoyment=enjoyment, completion=completion, submitted_on=DAY)


def _record(difficulty: DifficultyFeedback, workout_id: str = "upper-a", completion: float = 1.0) -> FeedbackRecord:
    feedback = _feedback(difficulty, completion=completion)
    return FeedbackRecord(user_id="user-1", workout_id=workout_id, feedback=feedback, bias=record_bias(feedback))


def test_record_bias():
    assert record_bias(_feedback(DifficultyFeedback.TOO_EASY)) == 0.05
    assert record_bias(_feedback(DifficultyFeedback.JUST_RIGHT)) == 0.0
    assert record_bias(_feedback(DifficultyFeedback.TOO_HARD)) == -0.05
    assert record_bias(_feedback(DifficultyFeedback.TOO_HARD, completion=0.3)) == pytest.approx(-0.08)


def test_analyse_feedback_labels():
    enjoyed = analyse_feedback(_feedback(DifficultyFeedback.JUST_RIGHT, enjoyment=5, completion=0.95))
    abandoned = analyse_feedback(_feedback(DifficultyFeedback.TOO_HARD, enjoyment=1, completion=0.2))
    partial = analyse_feedback(_feedback(DifficultyFeedback.TOO_EASY, enjoyment=3, completion=0.6))

    assert (enjoyed.enjoyment, enjoyed.completion) == ("enjoyed", "completed")
    assert (abandoned.enjoyment, abandoned.completion) == ("disliked", "abandoned")
    assert abandoned.is_difficulty_complaint
    assert (partial.enjoyment, partial.completion) == ("neutral", "partial")
    assert not partial.is_difficulty_complaint


def test_feedback_bias_aggregation():
    assert feedback_bias([]) == 0.0
    assert feedback_bias([_record(DifficultyFeedback.TOO_EASY)]) == pytest.approx(0.05)
    # three agreeing complaints saturate the limit
    assert feedback_bias([_record(DifficultyFeedback.TOO_HARD)] * 3) == pytest.approx(-0.1)


def test_feedback_bias_weights_newest_most():
    newest_easy = feedback_bias([_record(DifficultyFeedback.TOO_EASY), _record(DifficultyFeedback.TOO_HARD)])
    newest_hard = feedback_bias([_record(DifficultyFeedback.TOO_HARD), _record(DifficultyFeedback.TOO_EASY)])

    assert newest_easy > 0 > newest_hard


def test_sustained_difficulty():
    hard = _record(DifficultyFeedback.TOO_HARD)
    right = _record(DifficultyFeedback.JUST_RIGHT)

    assert sustained_difficulty([hard, hard, hard])
    assert sustained_difficulty([hard, hard, hard, right])
    assert not sustained_difficulty([right, hard, hard, hard])
    assert not sustained_difficulty([hard, hard])


@pytest.mark.asyncio
async def test_store_returns_newest_first_and_trims():
    store = InMemoryFeedbackStore(max_records_per_user=3)
    for workout_id in ["w1", "w2", "w3", "w4"]:
        await store.append(_record(DifficultyFeedback.JUST_RIGHT, workout_id=workout_id))

    recent = await store.recent("user-1", 10)

    assert [r.workout_id for r in recent] == ["w4", "w3", "w2"]
    assert [r.workout_id for r in await store.recent("user-1", 1)] == ["w4"]
    assert await store.recent("user-1", 0) == []
    assert await store.recent("someone-else", 5) == []


@pytest.mark.asyncio
async def test_adapter_records_feedback():
    store = InMemoryFeedbackStore()
    adapter = FeedbackAdapter(store, PersonalizationCache(today=lambda: DAY))

    analysis = await adapter.submit("user-1", "upper-a", _feedback(DifficultyFeedback.TOO_HARD, completion=0.4))

    assert analysis.bias == pytest.approx(-0.08)
    assert analysis.completion == "abandoned"
    records = await store.recent("user-1", 5)
    assert len(records) == 1
    assert records[0].workout_id == "upper-a"
    assert records[0].bias == analysis.bias
