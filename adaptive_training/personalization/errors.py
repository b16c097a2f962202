"""Canonical Personalization Error Types.

Only DataUnavailableError and InvalidInputError abort a request. The other
types are raised at internal seams and absorbed into a degraded result.

Standard error codes:
- DATA_UNAVAILABLE: Required upstream data (the user profile) is missing
- INVALID_INPUT: Request rejected by validation before computation
- ML_UNAVAILABLE: Inference service failed, timed out, or returned garbage
- CACHE_INCONSISTENCY: A cache entry could not be read back
"""


class PersonalizationError(RuntimeError):
    """Base class for personalization failures.

    Attributes:
        code: Error code (e.g., "DATA_UNAVAILABLE", "INVALID_INPUT")
        message: Human-readable description
    """

    code = "PERSONALIZATION_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"{self.code}: {message}")


class DataUnavailableError(PersonalizationError):
    """Raised when data without a fallback (the profile) cannot be fetched."""

    code = "DATA_UNAVAILABLE"

    def __init__(self, user_id: str, message: str | None = None):
        self.user_id = user_id
        super().__init__(message or f"No profile available for user_id={user_id}")


class InvalidInputError(PersonalizationError):
    """Raised when a request fails validation.

    Attributes:
        details: List of violated rules (e.g., "EMPTY_GOALS")
    """

    code = "INVALID_INPUT"

    def __init__(self, details: list[str]):
        self.details = details
        super().__init__(", ".join(details))


class MLUnavailableError(PersonalizationError):
    """Raised by inference services that cannot produce a prediction."""

    code = "ML_UNAVAILABLE"


class CacheInconsistencyError(PersonalizationError):
    """Raised when a cache entry is corrupt or does not match its key."""

    code = "CACHE_INCONSISTENCY"
