from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PersonalizationSettings(BaseSettings):
    ml_timeout_seconds: float = Field(
        default=1.5,
        gt=0,
        validation_alias="PERSONALIZATION_ML_TIMEOUT_SECONDS",
        description="Upper bound on a single inference call before it is treated as unavailable",
    )
    ml_confidence_threshold: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        validation_alias="PERSONALIZATION_ML_CONFIDENCE_THRESHOLD",
        description="Predictions at or below this confidence are ignored by the reconciler",
    )
    history_window: int = Field(default=10, ge=1, validation_alias="PERSONALIZATION_HISTORY_WINDOW")
    exercise_history_limit: int = Field(default=50, ge=1, validation_alias="PERSONALIZATION_EXERCISE_HISTORY_LIMIT")
    exposure_window_days: int = Field(default=7, ge=1, validation_alias="PERSONALIZATION_EXPOSURE_WINDOW_DAYS")
    max_exercises: int = Field(default=8, ge=1, validation_alias="PERSONALIZATION_MAX_EXERCISES")
    default_readiness: float = Field(default=0.6, ge=0.0, le=1.0, validation_alias="PERSONALIZATION_DEFAULT_READINESS")
    overload_horizon_weeks: int = Field(default=12, ge=1, validation_alias="PERSONALIZATION_OVERLOAD_HORIZON_WEEKS")
    overload_phase_weeks: int = Field(default=4, ge=1, validation_alias="PERSONALIZATION_OVERLOAD_PHASE_WEEKS")
    feedback_window: int = Field(default=5, ge=1, validation_alias="PERSONALIZATION_FEEDBACK_WINDOW")
    log_level: str = Field(default="INFO", validation_alias="PERSONALIZATION_LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="PERSONALIZATION_LOG_FILE")
    log_serialize: bool = Field(default=False, validation_alias="PERSONALIZATION_LOG_SERIALIZE")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(sorted(valid_levels))}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @model_validator(mode="after")
    def validate_overload_phases(self) -> "PersonalizationSettings":
        """Phases longer than the horizon collapse into a single phase."""
        if self.overload_phase_weeks > self.overload_horizon_weeks:
            logger.warning(
                f"PERSONALIZATION_OVERLOAD_PHASE_WEEKS={self.overload_phase_weeks} exceeds the horizon "
                f"of {self.overload_horizon_weeks} weeks; using a single phase."
            )
            self.overload_phase_weeks = self.overload_horizon_weeks
        return self


settings = PersonalizationSettings()
