"""Tension drift detectors.

All three detectors run on every call, in a fixed order, and several may
fire together. A detector without enough history abstains silently.
"""

from collections.abc import Callable, Sequence

from devladder.core.episode_metrics.types import Flag, MetricSnapshot, MetricsConfig
from devladder.core.logging import get_logger

logger = get_logger(__name__)


def latest_by_episode(history: Sequence[MetricSnapshot]) -> list[MetricSnapshot]:
    """
    Collapse an append-only history to one snapshot per episode.

    A re-scored episode appears more than once; the last entry wins. The
    result is sorted by episode number whatever order entries were appended.
    """
    latest: dict[int, MetricSnapshot] = {}
    for snapshot in history:
        latest[snapshot.episode_number] = snapshot
    return [latest[n] for n in sorted(latest)]


def prior_snapshots(
    episode_number: int, history: Sequence[MetricSnapshot]
) -> list[MetricSnapshot]:
    """One snapshot per episode before ``episode_number``, in episode order."""
    return [h for h in latest_by_episode(history) if h.episode_number < episode_number]


def _overheat(current: MetricSnapshot, prior: list[MetricSnapshot], config: MetricsConfig) -> bool:
    if not prior:
        return False
    return (
        current.tension.tension_gap > config.overheat_margin
        and prior[-1].tension.tension_gap > config.overheat_margin
    )


def _flatline(current: MetricSnapshot, prior: list[MetricSnapshot], config: MetricsConfig) -> bool:
    if len(prior) < 2:
        return False
    window = [current, prior[-1], prior[-2]]
    return all(abs(s.tension.tension_delta) <= config.flatline_delta for s in window)


def _whiplash(current: MetricSnapshot, prior: list[MetricSnapshot], config: MetricsConfig) -> bool:
    return abs(current.tension.tension_delta) > config.whiplash_delta


Detector = Callable[[MetricSnapshot, list[MetricSnapshot], MetricsConfig], bool]

DETECTORS: tuple[tuple[Flag, Detector], ...] = (
    ("overheat_risk", _overheat),
    ("flatline_risk", _flatline),
    ("whiplash_risk", _whiplash),
)


def detect_tension_flags(
    current: MetricSnapshot,
    history: Sequence[MetricSnapshot],
    config: MetricsConfig | None = None,
) -> list[Flag]:
    """
    Run every drift detector against ``current``.

    Args:
        current: Snapshot being assessed
        history: Metric history in append order; the latest entry per
                 episode counts, entries at or after the current episode
                 are ignored
        config: Detector thresholds; built from Settings when omitted

    Returns:
        Flags in detector order (overheat, flatline, whiplash)
    """
    config = config or MetricsConfig.from_settings()
    prior = prior_snapshots(current.episode_number, history)

    flags: list[Flag] = [name for name, detector in DETECTORS if detector(current, prior, config)]

    if flags:
        logger.debug(f"Episode {current.episode_number} flags: {', '.join(flags)}")
    return flags
