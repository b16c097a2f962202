"""Personalization engine.

Entry point for callers. Wires the collaborators together and exposes the
async operations:
- personalize: per-user, per-day personalized workout (cached)
- submit_feedback: record feedback for future requests
- get_progressive_overload_plan: long-horizon load trajectory
- optimize_exercise_selection, adjust_training_volume, recommend_recovery,
  generate_adaptive_workout: standalone views over the same signals

Only DataUnavailableError and InvalidInputError escape personalize. Every
other upstream failure degrades the result and is listed in its
degradations and reasoning.
"""

import asyncio
from collections.abc import Callable
from datetime import date

from loguru import logger

from adaptive_training.config.settings import PersonalizationSettings
from adaptive_training.config.settings import settings as default_settings
from adaptive_training.personalization.adaptive import CONTEXT_PROFILES, adaptive_template, context_equipment
from adaptive_training.personalization.cache import CacheKey, PersonalizationCache
from adaptive_training.personalization.context import ContextAggregator, PersonalizationContext
from adaptive_training.personalization.fatigue import estimate_fatigue
from adaptive_training.personalization.feedback import FeedbackAdapter, feedback_bias
from adaptive_training.personalization.ml_advisor import MLAdvice, MLAdvisor
from adaptive_training.personalization.overload import ProgressiveOverloadPlanner
from adaptive_training.personalization.ports import (
    ExerciseCatalog,
    FeedbackStore,
    HealthDataProvider,
    MLInferenceService,
    UserRepository,
    WorkoutHistoryProvider,
)
from adaptive_training.personalization.readiness import estimate_readiness
from adaptive_training.personalization.reconciler import DifficultyReconciler
from adaptive_training.personalization.recovery import RecoveryAdvisor
from adaptive_training.personalization.selection import ExerciseSelector
from adaptive_training.personalization.stores import InMemoryFeedbackStore
from adaptive_training.personalization.trends import classify_trend
from adaptive_training.personalization.types import (
    CatalogFilters,
    Degradation,
    ExerciseDescriptor,
    FeedbackAnalysis,
    MLRequest,
    PersonalizationFactors,
    PersonalizedExercise,
    PersonalizedWorkout,
    ProgressiveOverloadPlan,
    RecoveryRecommendation,
    TrainingVolume,
    TrainingVolumeAdjustment,
    WorkoutContext,
    WorkoutFeedback,
    WorkoutTemplate,
)
from adaptive_training.personalization.validate import (
    validate_goals,
    validate_intensity,
    validate_profile,
    validate_template,
)
from adaptive_training.personalization.volume import VolumeAdjuster

DEFAULT_EXERCISE_VOLUME = TrainingVolume(sets=3, reps=10, weight=0.0, duration_sec=0.0)

DEGRADATION_NOTES: dict[Degradation, str] = {
    Degradation.HISTORY_UNAVAILABLE: "Workout history unavailable; default performance values used (reduced confidence).",
    Degradation.HEALTH_UNAVAILABLE: "Health data unavailable; default readiness used (reduced confidence).",
    Degradation.EXPOSURE_UNAVAILABLE: "Recent exercise exposure unavailable; no repetition penalty applied.",
    Degradation.ML_UNAVAILABLE: "ML prediction unavailable; heuristic path used.",
    Degradation.CATALOG_UNAVAILABLE: "Exercise catalog unavailable; template exercises only.",
    Degradation.FEEDBACK_UNAVAILABLE: "Feedback history unavailable; no feedback bias applied.",
}


def workout_volume(template: WorkoutTemplate) -> TrainingVolume:
    """Session-level volume of a template.

    sets and reps are totals across exercises, weight is total tonnage
    (sets x reps x weight) and duration is the template duration.
    """
    return TrainingVolume(
        sets=sum(e.volume.sets for e in template.exercises),
        reps=sum(e.volume.sets * e.volume.reps for e in template.exercises),
        weight=round(sum(e.volume.sets * e.volume.reps * e.volume.weight for e in template.exercises), 2),
        duration_sec=template.base_duration_min * 60.0,
    )


class PersonalizationEngine:
    def __init__(
        self,
        users: UserRepository,
        history: WorkoutHistoryProvider,
        health: HealthDataProvider,
        catalog: ExerciseCatalog,
        ml_service: MLInferenceService | None = None,
        feedback_store: FeedbackStore | None = None,
        *,
        settings: PersonalizationSettings | None = None,
        cache: PersonalizationCache | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.settings = settings or default_settings
        self.history = history
        self.catalog = catalog
        self.feedback_store = feedback_store if feedback_store is not None else InMemoryFeedbackStore()
        self.cache = cache if cache is not None else PersonalizationCache(today=today)
        self._today = today

        self.aggregator = ContextAggregator(
            users,
            history,
            health,
            self.feedback_store,
            history_window=self.settings.history_window,
            exposure_window_days=self.settings.exposure_window_days,
            feedback_window=self.settings.feedback_window,
        )
        self.ml_advisor = MLAdvisor(ml_service, timeout_seconds=self.settings.ml_timeout_seconds)
        self.reconciler = DifficultyReconciler(confidence_threshold=self.settings.ml_confidence_threshold)
        self.selector = ExerciseSelector(max_exercises=self.settings.max_exercises)
        self.volume = VolumeAdjuster()
        self.recovery = RecoveryAdvisor()
        self.overload = ProgressiveOverloadPlanner(
            horizon_weeks=self.settings.overload_horizon_weeks,
            phase_weeks=self.settings.overload_phase_weeks,
        )
        self.feedback = FeedbackAdapter(self.feedback_store, self.cache)

    # ---- Exposed operations ----

    async def personalize(self, user_id: str, template: WorkoutTemplate, day: date | None = None) -> PersonalizedWorkout:
        """Personalize ``template`` for ``user_id`` on ``day`` (default today).

        Computed at most once per (user_id, workout_id, day); later calls the
        same day return the cached object.

        Raises:
            InvalidInputError: If the template or profile is invalid
            DataUnavailableError: If the profile cannot be fetched
        """
        validate_template(template)
        day = day or self._today()
        key = CacheKey(user_id=user_id, workout_id=template.workout_id, day=day)
        return await self.cache.get_or_compute(key, lambda: self._compute(user_id, template, day))

    async def submit_feedback(self, user_id: str, workout_id: str, feedback: WorkoutFeedback) -> FeedbackAnalysis:
        return await self.feedback.submit(user_id, workout_id, feedback)

    async def get_progressive_overload_plan(self, user_id: str, exercise_id: str) -> ProgressiveOverloadPlan:
        profile = await self.aggregator.load_profile(user_id)
        history_result, feedback_result = await asyncio.gather(
            self.history.get_exercise_history(user_id, exercise_id, self.settings.exercise_history_limit),
            self.feedback_store.recent(user_id, self.settings.feedback_window),
            return_exceptions=True,
        )
        if isinstance(history_result, Exception):
            logger.warning("engine: Exercise history fetch failed", user_id=user_id, exercise_id=exercise_id, error=str(history_result))
            history_result = []
        if isinstance(feedback_result, Exception):
            logger.warning("engine: Feedback fetch failed", user_id=user_id, error=str(feedback_result))
            feedback_result = []

        descriptor = None
        if not history_result:
            candidates, _ = await self._catalog_candidates(CatalogFilters())
            descriptor = next((c for c in candidates if c.exercise_id == exercise_id), None)

        return self.overload.plan(profile, exercise_id, list(history_result), feedback_result, descriptor)

    async def optimize_exercise_selection(self, user_id: str, goals: frozenset[str] | None = None) -> list[ExerciseDescriptor]:
        context = await self.aggregator.build(user_id)
        goals = context.profile.goals if goals is None else frozenset(goals)
        validate_goals(goals)

        _, fatigue_level = estimate_fatigue(context.performance)
        trend = classify_trend(context.performance)
        candidates, _ = await self._catalog_candidates(CatalogFilters(goals=goals, equipment=context.profile.equipment))
        ranked = self.selector.rank(
            context.profile,
            [],
            candidates,
            goals=goals,
            fatigue=fatigue_level,
            trend=trend,
            exposure=context.exposure,
        )
        return [s.exercise for s in self.selector.select(ranked)]

    async def adjust_training_volume(self, user_id: str, current_volume: TrainingVolume) -> TrainingVolumeAdjustment:
        context = await self.aggregator.build(user_id)
        readiness = estimate_readiness(context.health, self.settings.default_readiness)
        _, fatigue_level = estimate_fatigue(context.performance)
        trend = classify_trend(context.performance)
        return self.volume.adjust(current_volume, trend, context.performance, readiness=readiness, fatigue=fatigue_level)

    async def recommend_recovery(self, user_id: str, intensity: float) -> RecoveryRecommendation:
        validate_intensity(intensity)
        context = await self.aggregator.build(user_id)
        factors = self.derive_factors(context, ml_confidence=0.0)
        return self.recovery.recommend(intensity, context.profile, factors, context.health)

    async def generate_adaptive_workout(
        self,
        user_id: str,
        workout_context: WorkoutContext,
        day: date | None = None,
    ) -> PersonalizedWorkout:
        template = adaptive_template(workout_context)
        day = day or self._today()
        key = CacheKey(user_id=user_id, workout_id=template.workout_id, day=day)
        return await self.cache.get_or_compute(
            key,
            lambda: self._compute(user_id, template, day, workout_context=workout_context),
        )

    # ---- Internals ----

    def derive_factors(self, context: PersonalizationContext, ml_confidence: float) -> PersonalizationFactors:
        score, level = estimate_fatigue(context.performance)
        return PersonalizationFactors(
            readiness=round(estimate_readiness(context.health, self.settings.default_readiness), 4),
            fatigue_level=level,
            fatigue_score=round(score, 4),
            performance_trend=classify_trend(context.performance),
            ml_confidence=ml_confidence,
            feedback_bias=feedback_bias(context.feedback),
        )

    async def _catalog_candidates(self, filters: CatalogFilters) -> tuple[list[ExerciseDescriptor], bool]:
        """Return (candidates, ok). A failing catalog yields no candidates."""
        try:
            return list(await self.catalog.list_candidates(filters)), True
        except Exception as e:
            logger.warning("engine: Exercise catalog unavailable", error=str(e))
            return [], False

    async def _compute(
        self,
        user_id: str,
        template: WorkoutTemplate,
        day: date,
        workout_context: WorkoutContext | None = None,
    ) -> PersonalizedWorkout:
        context = await self.aggregator.build(user_id)
        profile = context.profile
        validate_profile(profile)

        equipment = profile.equipment
        exercise_limit: int | None = len(template.exercises) or None
        if workout_context is not None:
            equipment = context_equipment(workout_context, profile.equipment)
            exercise_limit = CONTEXT_PROFILES[workout_context].exercise_count

        request = MLRequest(
            workout_id=template.workout_id,
            base_difficulty=template.base_difficulty,
            base_duration_min=template.base_duration_min,
            base_intensity=template.base_intensity,
            exercise_ids=tuple(e.exercise.exercise_id for e in template.exercises),
            profile=profile,
            performance=context.performance,
            health=context.health,
        )
        advice, (candidates, catalog_ok) = await asyncio.gather(
            self.ml_advisor.advise(request),
            self._catalog_candidates(CatalogFilters(goals=profile.goals, equipment=equipment)),
        )

        degradations = list(context.degradations)
        if not advice.available:
            degradations.append(Degradation.ML_UNAVAILABLE)
        if not catalog_ok:
            degradations.append(Degradation.CATALOG_UNAVAILABLE)

        return self._assemble(
            context,
            template,
            day,
            advice,
            candidates,
            equipment=equipment,
            exercise_limit=exercise_limit,
            degradations=degradations,
        )

    def _assemble(
        self,
        context: PersonalizationContext,
        template: WorkoutTemplate,
        day: date,
        advice: MLAdvice,
        candidates: list[ExerciseDescriptor],
        *,
        equipment: frozenset[str],
        exercise_limit: int | None,
        degradations: list[Degradation],
    ) -> PersonalizedWorkout:
        profile = context.profile
        factors = self.derive_factors(context, ml_confidence=0.0)
        reconciled = self.reconciler.reconcile(
            template,
            factors.readiness,
            factors.fatigue_level,
            factors.performance_trend,
            advice,
            factors.feedback_bias,
        )
        factors = factors.model_copy(update={"ml_confidence": reconciled.ml_confidence})

        multiplier = self.volume.volume_multiplier(
            factors.performance_trend,
            context.performance,
            readiness=factors.readiness,
            fatigue=factors.fatigue_level,
        )
        volume_adjustment = self.volume.apply(
            workout_volume(template),
            multiplier,
            reasoning=self.volume.explain(
                factors.performance_trend,
                context.performance,
                multiplier,
                readiness=factors.readiness,
                fatigue=factors.fatigue_level,
            ),
        )

        template_volumes = {e.exercise.exercise_id: e.volume for e in template.exercises}
        ranked = self.selector.rank(
            profile,
            [e.exercise for e in template.exercises],
            candidates,
            fatigue=factors.fatigue_level,
            trend=factors.performance_trend,
            exposure=context.exposure,
            equipment=equipment,
        )
        selected = self.selector.select(ranked, limit=exercise_limit)
        exercises = tuple(
            PersonalizedExercise(
                exercise=s.exercise,
                volume=self.volume.apply(
                    template_volumes.get(s.exercise.exercise_id) or s.exercise.default_volume or DEFAULT_EXERCISE_VOLUME,
                    multiplier,
                ).adjusted_volume,
                score=s.score,
                from_template=s.from_template,
            )
            for s in selected
        )

        adjusted_intensity = round(min(template.base_intensity * reconciled.intensity, 1.0), 3)
        recovery = self.recovery.recommend(adjusted_intensity, profile, factors, context.health)

        reasoning = [DEGRADATION_NOTES[d] for d in degradations]
        reasoning.extend(reconciled.reasoning)
        reasoning.append(volume_adjustment.reasoning)
        swapped = sum(1 for e in exercises if not e.from_template)
        if swapped:
            reasoning.append(f"{swapped} exercise(s) selected from the catalog for variety and fit.")

        workout = PersonalizedWorkout(
            template=template,
            user_id=context.user_id,
            day=day,
            exercises=exercises,
            adjusted_difficulty=round(template.base_difficulty * reconciled.difficulty, 2),
            adjusted_duration_min=round(template.base_duration_min * reconciled.duration, 1),
            adjusted_intensity=adjusted_intensity,
            difficulty_multiplier=reconciled.difficulty,
            duration_multiplier=reconciled.duration,
            intensity_multiplier=reconciled.intensity,
            factors=factors,
            volume_adjustment=volume_adjustment,
            recovery=recovery,
            reasoning=tuple(reasoning),
            degradations=tuple(degradations),
        )
        logger.info(
            "engine: Workout personalized",
            user_id=context.user_id,
            workout_id=template.workout_id,
            day=day.isoformat(),
            difficulty_multiplier=reconciled.difficulty,
            volume=volume_adjustment.adjustment_type.value,
            degradations=[d.value for d in degradations],
        )
        return workout
