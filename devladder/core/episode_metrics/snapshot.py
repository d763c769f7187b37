"""Snapshot derivation and season rollups."""

from collections.abc import Mapping, Sequence
from typing import Any

from devladder.core.episode_metrics.flags import (
    detect_tension_flags,
    latest_by_episode,
    prior_snapshots,
)
from devladder.core.episode_metrics.gate import metrics_pass_gate
from devladder.core.episode_metrics.targets import composite_score, target_tension
from devladder.core.episode_metrics.types import (
    CompositeMetrics,
    MetricSnapshot,
    MetricsConfig,
    RawEpisodeMetrics,
    SeasonHealth,
    TensionMetrics,
)
from devladder.core.errors import InputShapeError
from devladder.core.logging import get_logger

logger = get_logger(__name__)


def build_snapshot(
    episode_number: int,
    total_episodes: int,
    raw: RawEpisodeMetrics | Mapping[str, Any],
    history: Sequence[MetricSnapshot] = (),
    config: MetricsConfig | None = None,
) -> MetricSnapshot:
    """
    Derive a full MetricSnapshot from raw signals.

    Fills in target, gap and delta (0 for the first episode), computes the
    composites, then runs the drift detectors. A measured tension_level
    wins over tension_factors.

    Args:
        episode_number: 1-based episode number
        total_episodes: Episodes in the season
        raw: Measured signals for this episode
        history: Metric history in append order
        config: Weights and thresholds; built from Settings when omitted

    Raises:
        InputShapeError: if total_episodes or episode_number is not positive
    """
    if episode_number is None or episode_number < 1:
        raise InputShapeError(f"episode_number must be >= 1, got {episode_number}")
    config = config or MetricsConfig.from_settings()
    if not isinstance(raw, RawEpisodeMetrics):
        raw = RawEpisodeMetrics.model_validate(dict(raw))

    target = round(target_tension(episode_number, total_episodes), 2)

    level = raw.tension_level
    if level is None:
        level = composite_score(raw.tension_factors, config.tension_weights)

    delta = raw.tension_delta
    if delta is None:
        previous = prior_snapshots(episode_number, history)
        delta = level - previous[-1].tension.tension_level if previous else 0.0

    cliffhanger = raw.cliffhanger_strength
    if cliffhanger is None:
        cliffhanger = float(raw.retention_factors.get("cliffhanger_strength", 0))

    snapshot = MetricSnapshot(
        episode_number=episode_number,
        tension=TensionMetrics(
            tension_level=level,
            tension_delta=round(delta, 2),
            tension_target=target,
            tension_gap=round(level - target, 2),
            factors=dict(raw.tension_factors),
        ),
        retention=CompositeMetrics(
            factors=dict(raw.retention_factors),
            score=composite_score(raw.retention_factors, config.retention_weights),
        ),
        engagement=CompositeMetrics(
            factors=dict(raw.engagement_factors),
            score=composite_score(raw.engagement_factors, config.engagement_weights),
        ),
        cliffhanger_strength=max(0.0, min(100.0, cliffhanger)),
        confusion_risk=raw.confusion_risk,
        recommendations=list(raw.recommendations),
    )

    flags = detect_tension_flags(snapshot, history, config)
    if not flags:
        return snapshot
    tension = snapshot.tension.model_copy(update={"flags": flags})
    return snapshot.model_copy(update={"tension": tension})


def _average(values: list[float]) -> float | None:
    if not values:
        return None
    return round(sum(values) / len(values), 2)


def season_health(
    history: Sequence[MetricSnapshot],
    total_episodes: int,
    config: MetricsConfig | None = None,
) -> SeasonHealth:
    """
    Roll up a season's metric history.

    Later snapshots for the same episode replace earlier ones.

    Raises:
        InputShapeError: if total_episodes is not positive
    """
    if total_episodes is None or total_episodes <= 0:
        raise InputShapeError(f"total_episodes must be positive, got {total_episodes}")
    config = config or MetricsConfig.from_settings()

    scored = latest_by_episode(history)
    scored_numbers = {s.episode_number for s in scored}

    flag_counts: dict[str, int] = {}
    for snapshot in scored:
        for flag in snapshot.tension.flags:
            flag_counts[flag] = flag_counts.get(flag, 0) + 1

    failing = [s.episode_number for s in scored if not metrics_pass_gate(s, config).passed]
    missing = [n for n in range(1, total_episodes + 1) if n not in scored_numbers]

    logger.info(
        f"Season health: {len(scored)}/{total_episodes} scored, "
        f"{len(failing)} failing, {sum(flag_counts.values())} flags"
    )

    return SeasonHealth(
        total_episodes=total_episodes,
        episodes_scored=len(scored),
        avg_tension=_average([s.tension.tension_level for s in scored]),
        avg_retention=_average([s.retention.score for s in scored]),
        avg_engagement=_average([s.engagement.score for s in scored]),
        flag_count=sum(flag_counts.values()),
        flag_counts=flag_counts,
        failing_episodes=failing,
        missing_episodes=missing,
    )
