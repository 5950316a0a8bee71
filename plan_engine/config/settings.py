from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Tunable thresholds for classification, matching and compliance.

    Values are read from PLAN_ENGINE_* environment variables or a .env file.
    Functions that depend on a tunable take an explicit ``config`` argument and
    fall back to the module-level ``settings`` instance.
    """

    log_level: str = Field(default="INFO", description="Loguru level used by the CLI")
    log_file: str | None = Field(default=None, description="Optional rotating log file path")
    log_rotation: str = Field(default="10 MB", description="Loguru rotation policy for log_file")
    log_retention: str = Field(default="7 days", description="Loguru retention policy for log_file")

    interval_pace_variation_threshold: float = Field(
        default=0.15,
        ge=0.0,
        description="Split pace coefficient of variation above which a run is an interval session",
    )
    tempo_relative_pace_threshold: float = Field(
        default=0.90,
        gt=0.0,
        description="Relative pace (activity / baseline) below which a run is a tempo effort",
    )
    long_run_distance_ratio: float = Field(
        default=0.75,
        gt=0.0,
        description="Fraction of the longest baseline run above which a run is a long run",
    )
    long_run_duration_min: float = Field(default=90.0, gt=0.0)
    recovery_distance_ratio: float = Field(
        default=0.40,
        gt=0.0,
        description="Fraction of the average baseline run below which a short run is recovery",
    )
    recovery_duration_min: float = Field(default=25.0, gt=0.0)

    auto_match_threshold: float = Field(
        default=0.75,
        ge=0.0,
        le=1.0,
        description="Match score at or above which an activity is linked automatically",
    )
    suggest_match_threshold: float = Field(
        default=0.50,
        ge=0.0,
        le=1.0,
        description="Match score at or above which a match is suggested to the athlete",
    )
    match_window_days: int = Field(default=7, ge=0)
    missed_grace_days: int = Field(default=3, ge=0)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(sorted(valid_levels))}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PLAN_ENGINE_",
        extra="ignore",
    )


settings = EngineSettings()
