"""Boundary to the external inference service.

The advisor never raises and never substitutes a default prediction.
Callers receive an MLAdvice that is either a prediction or the reason
none is available, so "model absent" stays distinguishable from
"model returned a low-confidence prediction".
"""

import asyncio
from dataclasses import dataclass

from loguru import logger

from adaptive_training.personalization.errors import MLUnavailableError
from adaptive_training.personalization.invariants import clamp01
from adaptive_training.personalization.ports import MLInferenceService
from adaptive_training.personalization.types import MLPrediction, MLRequest


@dataclass(frozen=True)
class MLAdvice:
    prediction: MLPrediction | None = None
    error: str | None = None

    @property
    def available(self) -> bool:
        return self.prediction is not None

    @property
    def confidence(self) -> float:
        return self.prediction.confidence if self.prediction is not None else 0.0

    @classmethod
    def unavailable(cls, reason: str) -> "MLAdvice":
        return cls(prediction=None, error=reason)


class MLAdvisor:
    def __init__(self, service: MLInferenceService | None, timeout_seconds: float = 1.5) -> None:
        self.service = service
        self.timeout_seconds = timeout_seconds

    async def advise(self, request: MLRequest) -> MLAdvice:
        """Ask the inference service for a prediction under a timeout.

        Timeouts, MLUnavailableError and any other service failure all map to
        an unavailable advice.
        """
        if self.service is None:
            return MLAdvice.unavailable("no inference service configured")

        try:
            prediction = await asyncio.wait_for(self.service.predict(request), timeout=self.timeout_seconds)
        except TimeoutError:
            logger.warning(
                "ml_advisor: Inference timed out",
                workout_id=request.workout_id,
                timeout_seconds=self.timeout_seconds,
            )
            return MLAdvice.unavailable(f"inference timed out after {self.timeout_seconds}s")
        except MLUnavailableError as e:
            logger.warning("ml_advisor: Inference unavailable", workout_id=request.workout_id, error=e.message)
            return MLAdvice.unavailable(e.message)
        except Exception as e:
            logger.exception(f"ml_advisor: Inference failed for workout_id={request.workout_id}: {e!r}")
            return MLAdvice.unavailable(f"inference failed: {e!r}")

        if not isinstance(prediction, MLPrediction):
            logger.warning("ml_advisor: Inference returned an invalid payload", workout_id=request.workout_id)
            return MLAdvice.unavailable("invalid inference output")

        if not 0.0 <= prediction.confidence <= 1.0:
            prediction = prediction.model_copy(update={"confidence": clamp01(prediction.confidence)})

        logger.debug(
            "ml_advisor: Prediction received",
            workout_id=request.workout_id,
            confidence=prediction.confidence,
        )
        return MLAdvice(prediction=prediction)
