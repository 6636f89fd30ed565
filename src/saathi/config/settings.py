"""
SAATHI Application Settings

Configuration management using Pydantic Settings.
All values can be overridden through environment variables.

SAFETY-CRITICAL: Risk thresholds live here. Changing them alters
when crisis escalation fires and requires clinical sign-off.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SessionSettings(BaseSettings):
    """Session lifecycle and retention configuration."""

    model_config = SettingsConfigDict(env_prefix="SAATHI_SESSION_")

    journey_cap: int = Field(default=50, ge=1, le=1000, description="Max emotion signals kept per session")
    interaction_history_cap: int = Field(default=100, ge=1, le=1000)
    archive_cap_per_user: int = Field(default=50, ge=1, le=1000)
    allow_concurrent_user_sessions: bool = Field(
        default=False,
        description="Allow more than one active session per user",
    )
    default_goals: list[str] = Field(
        default=["stress_management", "emotional_regulation"],
    )


class ExtractionSettings(BaseSettings):
    """Multi-modal signal extraction configuration."""

    model_config = SettingsConfigDict(env_prefix="SAATHI_EXTRACTION_")

    extractor_timeout_seconds: float = Field(default=2.0, gt=0.0, le=30.0)
    voice_confidence: float = Field(
        default=0.85,
        ge=0.0,
        le=1.0,
        description="Fixed confidence reported by the voice extractor",
    )


class SafetySettings(BaseSettings):
    """
    Risk scoring and escalation configuration.

    CLINICAL_VALIDATION_REQUIRED: Threshold defaults mirror the
    production lexicon weights (10 direct, 5 indirect).
    """

    model_config = SettingsConfigDict(env_prefix="SAATHI_SAFETY_")

    severe_threshold: float = Field(default=15.0, gt=0.0)
    high_threshold: float = Field(default=10.0, gt=0.0)
    moderate_threshold: float = Field(default=5.0, gt=0.0)
    low_threshold: float = Field(default=2.0, gt=0.0)

    lexicon_path: Optional[str] = Field(default=None, description="Override lexicon JSON file")
    contacts_path: Optional[str] = Field(default=None, description="Override contact directory JSON file")
    default_country_code: str = Field(default="IN", min_length=2, max_length=8)
    audit_log_enabled: bool = Field(default=True)

    @model_validator(mode="after")
    def validate_threshold_order(self) -> "SafetySettings":
        """Thresholds must be strictly increasing from low to severe."""
        if not (
            self.low_threshold
            < self.moderate_threshold
            < self.high_threshold
            < self.severe_threshold
        ):
            raise ValueError("Risk thresholds must satisfy low < moderate < high < severe")
        return self


class GeneratorSettings(BaseSettings):
    """External response generator call policy."""

    model_config = SettingsConfigDict(env_prefix="SAATHI_GENERATOR_")

    timeout_seconds: float = Field(default=8.0, gt=0.0, le=120.0)
    max_attempts: int = Field(default=3, ge=1, le=10)
    history_window: int = Field(default=6, ge=0, le=50, description="Recent turns sent as context")


class Settings(BaseSettings):
    """
    Main application settings.

    All configuration is loaded from environment variables with the
    SAATHI_ prefix (nested groups use their own prefixes).

    Usage:
        settings = get_settings()
        cap = settings.session.journey_cap
    """

    model_config = SettingsConfigDict(
        env_prefix="SAATHI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode - NEVER enable in production")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )
    api_version: str = Field(default="v1", description="API version prefix")
    cors_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins"
    )

    # Nested settings
    session: SessionSettings = Field(default_factory=SessionSettings)
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    safety: SafetySettings = Field(default_factory=SafetySettings)
    generator: GeneratorSettings = Field(default_factory=GeneratorSettings)

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.
    For testing, construct Settings directly and inject it.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
