"""Per-episode temporal metrics: target curve, drift flags and admission gate."""

from devladder.core.episode_metrics.flags import detect_tension_flags
from devladder.core.episode_metrics.gate import metrics_pass_gate
from devladder.core.episode_metrics.snapshot import build_snapshot, season_health
from devladder.core.episode_metrics.targets import composite_score, target_tension
from devladder.core.episode_metrics.types import (
    DEFAULT_ENGAGEMENT_WEIGHTS,
    DEFAULT_RETENTION_WEIGHTS,
    DEFAULT_TENSION_WEIGHTS,
    CompositeMetrics,
    Flag,
    GateResult,
    MetricSnapshot,
    MetricsConfig,
    RawEpisodeMetrics,
    Recommendation,
    SeasonHealth,
    TensionMetrics,
)

__all__ = [
    "DEFAULT_ENGAGEMENT_WEIGHTS",
    "DEFAULT_RETENTION_WEIGHTS",
    "DEFAULT_TENSION_WEIGHTS",
    "CompositeMetrics",
    "Flag",
    "GateResult",
    "MetricSnapshot",
    "MetricsConfig",
    "RawEpisodeMetrics",
    "Recommendation",
    "SeasonHealth",
    "TensionMetrics",
    "build_snapshot",
    "composite_score",
    "detect_tension_flags",
    "metrics_pass_gate",
    "season_health",
    "target_tension",
]
