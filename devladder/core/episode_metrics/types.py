"""Pydantic models for per-episode metrics."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from devladder.core.config import get_settings

Flag = Literal["overheat_risk", "flatline_risk", "whiplash_risk"]
RecommendationSeverity = Literal["high", "med", "low"]
RecommendationType = Literal["hook", "pacing", "emotion", "stakes", "cliffhanger", "clarity"]

DEFAULT_TENSION_WEIGHTS: dict[str, float] = {
    "stakes": 0.30,
    "conflict": 0.25,
    "pacing": 0.25,
    "mystery": 0.20,
}

DEFAULT_RETENTION_WEIGHTS: dict[str, float] = {
    "hook_strength": 0.25,
    "clarity": 0.20,
    "payoff_density": 0.20,
    "emotional_stakes": 0.20,
    "cliffhanger_strength": 0.15,
}

DEFAULT_ENGAGEMENT_WEIGHTS: dict[str, float] = {
    "comment_bait": 0.30,
    "shareability": 0.25,
    "character_attachment": 0.25,
    "twist_intensity": 0.20,
}


def check_weights(weights: dict[str, float]) -> dict[str, float]:
    """Raise ValueError unless weights are non-negative and sum to 1.0."""
    if any(w < 0 for w in weights.values()):
        raise ValueError("weights must be non-negative")
    total = sum(weights.values())
    if abs(total - 1.0) > 1e-6:
        raise ValueError(f"weights must sum to 1.0, got {total:.4f}")
    return weights


# =============================================================================
# Snapshot Types
# =============================================================================


class Recommendation(BaseModel):
    """A canon-safe rewrite suggestion attached to an episode."""

    type: RecommendationType = "pacing"
    severity: RecommendationSeverity
    note: str = ""
    example: str | None = None


class TensionMetrics(BaseModel):
    tension_level: float = Field(..., ge=0, le=100)
    tension_delta: float = Field(default=0, description="Change from the previous episode")
    tension_target: float | None = Field(default=None, description="Expected level for this episode")
    tension_gap: float = Field(default=0, description="tension_level - tension_target")
    flags: list[Flag] = Field(default_factory=list)
    factors: dict[str, float] = Field(
        default_factory=dict, description="Sub-factors when the level was composed from them"
    )


class CompositeMetrics(BaseModel):
    """Weighted composite over named sub-factors (retention, engagement)."""

    factors: dict[str, float] = Field(default_factory=dict)
    score: float = Field(..., ge=0, le=100)


class MetricSnapshot(BaseModel):
    """Metrics for one episode. History is an append-only list of these."""

    episode_number: int = Field(..., ge=1)
    tension: TensionMetrics
    retention: CompositeMetrics
    engagement: CompositeMetrics
    cliffhanger_strength: float = Field(..., ge=0, le=100)
    confusion_risk: float = Field(default=0, ge=0, le=100)
    recommendations: list[Recommendation] = Field(default_factory=list)


class RawEpisodeMetrics(BaseModel):
    """Measured (or simulated) signals for one episode, before derivation."""

    tension_level: float | None = Field(
        default=None, ge=0, le=100,
        description="Measured level; composed from tension_factors when omitted",
    )
    tension_factors: dict[str, float] = Field(default_factory=dict)
    tension_delta: float | None = Field(
        default=None, description="Derived from the previous episode when omitted"
    )
    retention_factors: dict[str, float] = Field(default_factory=dict)
    engagement_factors: dict[str, float] = Field(default_factory=dict)
    cliffhanger_strength: float | None = Field(
        default=None, ge=0, le=100,
        description="Falls back to the retention cliffhanger_strength factor",
    )
    confusion_risk: float = Field(default=0, ge=0, le=100)
    recommendations: list[Recommendation] = Field(default_factory=list)

    @model_validator(mode="after")
    def _needs_tension(self) -> "RawEpisodeMetrics":
        if self.tension_level is None and not self.tension_factors:
            raise ValueError("either tension_level or tension_factors is required")
        return self


# =============================================================================
# Config and results
# =============================================================================


class MetricsConfig(BaseModel):
    """Injectable weights and thresholds for the metrics engine."""

    tension_weights: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_TENSION_WEIGHTS)
    )
    retention_weights: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_RETENTION_WEIGHTS)
    )
    engagement_weights: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_ENGAGEMENT_WEIGHTS)
    )

    # Admission gate
    min_retention: float = 60
    min_cliffhanger: float = 60
    max_confusion: float = 70

    # Drift detectors
    overheat_margin: float = 15
    flatline_delta: float = 5
    whiplash_delta: float = 35

    @field_validator("tension_weights", "retention_weights", "engagement_weights")
    @classmethod
    def _weights_sum_to_one(cls, value: dict[str, float]) -> dict[str, float]:
        return check_weights(value)

    @classmethod
    def from_settings(cls) -> "MetricsConfig":
        settings = get_settings()
        return cls(
            min_retention=settings.METRICS_MIN_RETENTION,
            min_cliffhanger=settings.METRICS_MIN_CLIFFHANGER,
            max_confusion=settings.METRICS_MAX_CONFUSION,
            overheat_margin=settings.TENSION_OVERHEAT_MARGIN,
            flatline_delta=settings.TENSION_FLATLINE_DELTA,
            whiplash_delta=settings.TENSION_WHIPLASH_DELTA,
        )


class GateResult(BaseModel):
    """Per-episode admission gate outcome."""

    passed: bool
    reasons: list[str] = Field(default_factory=list, description="One rendered reason per failure")
    reason_codes: list[str] = Field(default_factory=list)


class SeasonHealth(BaseModel):
    """Season-level rollup of the metric history."""

    total_episodes: int
    episodes_scored: int
    avg_tension: float | None = None
    avg_retention: float | None = None
    avg_engagement: float | None = None
    flag_count: int = 0
    flag_counts: dict[str, int] = Field(default_factory=dict)
    failing_episodes: list[int] = Field(default_factory=list)
    missing_episodes: list[int] = Field(default_factory=list)
