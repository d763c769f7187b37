"""Expected tension trajectory and weighted composites.

The target curve is the shape a season is expected to follow; what matters
downstream is how far an episode deviates from it, not its raw level.

    pct <= 0.15        hook ramp          40 → 65
    0.15 < pct <= 0.60 rising middle      60 → 75 base, +5 → +3 entry offset,
                                          4-episode wave, capped at 85
    0.60 < pct <= 0.85 escalation         78 → 88
    pct > 0.85         finale             85 → 95 base, +3 → 0 entry offset
"""

import math
from collections.abc import Mapping

from devladder.core.episode_metrics.types import check_weights
from devladder.core.errors import InputShapeError

HOOK_END = 0.15
MIDDLE_END = 0.60
ESCALATION_END = 0.85

MIDDLE_CAP = 85.0
WAVE_AMPLITUDE = 5.0
WAVE_PERIOD_EPISODES = 4.0


def _lerp(start: float, end: float, t: float) -> float:
    return start + (end - start) * t


def target_tension(episode_number: float, total_episodes: float) -> float:
    """Expected tension level (0-100) for an episode.

    Args:
        episode_number: 1-based episode number (negatives clamp to 0)
        total_episodes: Episodes in the season

    Raises:
        InputShapeError: if total_episodes is not positive
    """
    if total_episodes is None or total_episodes <= 0:
        raise InputShapeError(f"total_episodes must be positive, got {total_episodes}")

    pct = max(0.0, min(1.0, episode_number / total_episodes))

    if pct <= HOOK_END:
        return _lerp(40.0, 65.0, pct / HOOK_END)

    if pct <= MIDDLE_END:
        t = (pct - HOOK_END) / (MIDDLE_END - HOOK_END)
        base = _lerp(60.0, 75.0, t) + _lerp(5.0, 3.0, t)
        # Wave counted in episodes since the segment began, tapered to 0 at both edges
        episodes_in = (pct - HOOK_END) * total_episodes
        wave = (
            WAVE_AMPLITUDE
            * math.sin(2 * math.pi * episodes_in / WAVE_PERIOD_EPISODES)
            * math.sin(math.pi * t)
        )
        return min(MIDDLE_CAP, base + wave)

    if pct <= ESCALATION_END:
        return _lerp(78.0, 88.0, (pct - MIDDLE_END) / (ESCALATION_END - MIDDLE_END))

    t = (pct - ESCALATION_END) / (1.0 - ESCALATION_END)
    return _lerp(85.0, 95.0, t) + _lerp(3.0, 0.0, t)


def composite_score(factors: Mapping[str, float], weights: Mapping[str, float]) -> float:
    """Weighted sum of named sub-factors, clamped to [0, 100].

    Sub-factors missing from ``factors`` count as 0; extra factors are ignored.

    Raises:
        InputShapeError: if weights do not sum to 1.0
    """
    try:
        check_weights(dict(weights))
    except ValueError as e:
        raise InputShapeError(str(e)) from e

    total = sum(float(factors.get(name, 0) or 0) * weight for name, weight in weights.items())
    return round(max(0.0, min(100.0, total)), 2)
