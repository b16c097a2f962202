import pytest

from adaptive_training.personalization.context import DEFAULT_PERFORMANCE, ContextAggregator
from adaptive_training.personalization.errors import DataUnavailableError, InvalidInputError
from adaptive_training.personalization.stores import InMemoryFeedbackStore
from adaptive_training.personalization.types import Degradation, TemplateExercise, TrainingVolume
from adaptive_training.personalization.validate import validate_goals, validate_profile, validate_template

from conftest import FakeHealthProvider, FakeHistoryProvider, FakeUserRepository, make_exercise


class BrokenFeedbackStore:
    async def append(self, record):
        raise ConnectionError("feedback store down")

    async def recent(self, user_id, limit):
        raise ConnectionError("feedback store down")


def _aggregator(profile, *, users=None, history=None, health=None, feedback_store=None) -> ContextAggregator:
    return ContextAggregator(
        users or FakeUserRepository({profile.user_id: profile}),
        history or FakeHistoryProvider(),
        health or FakeHealthProvider(),
        feedback_store or InMemoryFeedbackStore(),
    )


@pytest.mark.asyncio
async def test_full_context(profile, improving_performance, rested_health):
    history = FakeHistoryProvider(performance=improving_performance, exposure={"bench_press": 2})
    aggregator = _aggregator(profile, history=history, health=FakeHealthProvider(rested_health))

    context = await aggregator.build(profile.user_id)

    assert context.profile == profile
    assert context.performance == improving_performance
    assert context.health == rested_health
    assert context.exposure == {"bench_press": 2}
    assert context.feedback == ()
    assert context.degradations == ()


@pytest.mark.asyncio
async def test_missing_profile_is_fatal(profile):
    aggregator = _aggregator(profile, users=FakeUserRepository({}))

    with pytest.raises(DataUnavailableError) as exc_info:
        await aggregator.build("ghost")

    assert exc_info.value.user_id == "ghost"
    assert str(exc_info.value).startswith("DATA_UNAVAILABLE")


@pytest.mark.asyncio
async def test_profile_fetch_error_is_fatal(profile):
    aggregator = _aggregator(profile, users=FakeUserRepository(error=TimeoutError("db timeout")))

    with pytest.raises(DataUnavailableError):
        await aggregator.build(profile.user_id)


@pytest.mark.asyncio
async def test_failed_upstreams_degrade_to_defaults(profile):
    aggregator = _aggregator(
        profile,
        history=FakeHistoryProvider(error=ConnectionError("history down")),
        health=FakeHealthProvider(error=ConnectionError("wearable down")),
        feedback_store=BrokenFeedbackStore(),
    )

    context = await aggregator.build(profile.user_id)

    assert context.performance == DEFAULT_PERFORMANCE
    assert context.health is None
    assert context.exposure == {}
    assert context.feedback == ()
    assert context.degradations == (
        Degradation.HISTORY_UNAVAILABLE,
        Degradation.HEALTH_UNAVAILABLE,
        Degradation.EXPOSURE_UNAVAILABLE,
        Degradation.FEEDBACK_UNAVAILABLE,
    )


@pytest.mark.asyncio
async def test_empty_upstreams_degrade_without_errors(profile):
    context = await _aggregator(profile).build(profile.user_id)

    assert context.performance == DEFAULT_PERFORMANCE
    assert Degradation.HISTORY_UNAVAILABLE in context.degradations
    assert Degradation.HEALTH_UNAVAILABLE in context.degradations


def test_validate_template_collects_every_violation(template):
    duplicate = TemplateExercise(exercise=make_exercise("bench_press"), volume=TrainingVolume(sets=3, reps=5))
    bad = template.model_copy(
        update={
            "workout_id": "",
            "base_duration_min": 0.0,
            "base_intensity": 1.5,
            "exercises": (*template.exercises, duplicate),
        }
    )

    with pytest.raises(InvalidInputError) as exc_info:
        validate_template(bad)

    assert exc_info.value.details == [
        "MISSING_WORKOUT_ID",
        "NON_POSITIVE_DURATION",
        "INTENSITY_OUT_OF_RANGE",
        "DUPLICATE_EXERCISE:bench_press",
    ]
    assert exc_info.value.code == "INVALID_INPUT"


def test_validate_template_accepts_valid(template):
    validate_template(template)


def test_validate_profile_and_goals(profile):
    validate_profile(profile)

    with pytest.raises(InvalidInputError):
        validate_profile(profile.model_copy(update={"goals": frozenset()}))
    with pytest.raises(InvalidInputError):
        validate_goals(frozenset())


@pytest.mark.asyncio
async def test_exposure_failure_keeps_performance(profile, improving_performance, rested_health):
    history = FakeHistoryProvider(performance=improving_performance, exposure_error=ConnectionError("exposure down"))
    aggregator = _aggregator(profile, history=history, health=FakeHealthProvider(rested_health))

    context = await aggregator.build(profile.user_id)

    assert context.performance == improving_performance
    assert context.exposure == {}
    assert context.degradations == (Degradation.EXPOSURE_UNAVAILABLE,)
