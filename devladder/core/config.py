"""Configuration management for devladder."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    pass


class Settings(BaseSettings):
    """Settings loaded from environment variables.

    Only defaults live here. The scoring engines take injectable config
    objects (ReadinessConfig, MetricsConfig) which are built from these
    values when the caller does not pass one.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Environment
    DEVLADDER_ENV: str = Field(default="dev", description="Environment: dev, test, staging, prod")
    LOG_LEVEL: str | None = Field(
        default=None, description="Explicit log level; overrides the env-based default"
    )

    # Readiness scoring
    READINESS_ELIGIBLE_THRESHOLD: float = Field(
        default=75, ge=0, le=100, description="Minimum composite score to be eligible"
    )
    READINESS_MAX_BLOCKERS: int = Field(
        default=6, ge=1, description="Blockers kept per readiness result (evaluation order)"
    )

    # Episode metrics gate
    METRICS_MIN_RETENTION: float = Field(default=60, description="Minimum retention score")
    METRICS_MIN_CLIFFHANGER: float = Field(default=60, description="Minimum cliffhanger strength")
    METRICS_MAX_CONFUSION: float = Field(default=70, description="Maximum confusion risk")

    # Tension drift detectors
    TENSION_OVERHEAT_MARGIN: float = Field(
        default=15, description="Points above target that count as overheated"
    )
    TENSION_FLATLINE_DELTA: float = Field(
        default=5, description="Largest |delta| that still counts as flat"
    )
    TENSION_WHIPLASH_DELTA: float = Field(
        default=35, description="|delta| above which a single jump is whiplash"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If an environment variable has an invalid value
    """
    return Settings()
