"""Episode 1 quality component.

Episode 1 is the template every later episode is generated against, so it is
judged on screenplay format plus the two audience signals we measure for it.
"""

import math

from devladder.core.readiness.blockers import EP1_NOT_APPROVED, has_blocker, make_blocker
from devladder.core.readiness.components.base import ComponentResult
from devladder.core.readiness.text_checks import clamp_score
from devladder.core.readiness.types import Blocker, ReadinessConfig, ReadinessInput
from devladder.core.stages.registry import Stage

MISSING_SCRIPT = 50
WEAK_FORMAT = 40

# Points of the component carried by each measured signal
SIGNAL_SHARES = {
    "retention": 30,
    "cliffhanger": 30,
}


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def score_episode_one(
    inputs: ReadinessInput,
    present: set[Stage],
    config: ReadinessConfig,
) -> ComponentResult:
    blockers: list[Blocker] = []
    score = 100.0

    if not inputs.episode1_script_text:
        blockers.append(make_blocker(EP1_NOT_APPROVED, "ep1_missing", "high"))
        # Format cannot be validated without a script either
        score -= MISSING_SCRIPT + WEAK_FORMAT
    else:
        valid_format = (
            inputs.episode1_scene_heading_count >= config.min_scene_headings
            and inputs.episode1_dialogue_block_count >= config.min_dialogue_blocks
        )
        if not valid_format:
            blockers.append(
                make_blocker(
                    EP1_NOT_APPROVED,
                    "ep1_format_weak",
                    "high",
                    scene_headings=inputs.episode1_scene_heading_count,
                    dialogue_blocks=inputs.episode1_dialogue_block_count,
                    min_scene_headings=config.min_scene_headings,
                    min_dialogue_blocks=config.min_dialogue_blocks,
                )
            )
            score -= WEAK_FORMAT

        retention = clamp_score(
            inputs.episode1_retention_score
            if inputs.episode1_retention_score is not None
            else config.default_quality_signal
        )
        cliffhanger = clamp_score(
            inputs.episode1_cliffhanger_strength
            if inputs.episode1_cliffhanger_strength is not None
            else config.default_quality_signal
        )
        # Each signal earns round(signal * share / 100) of its share
        for name, signal in (("retention", retention), ("cliffhanger", cliffhanger)):
            share = SIGNAL_SHARES[name]
            score -= share - _round_half_up(signal * share / 100)

        if cliffhanger < config.min_quality_signal:
            blockers.append(make_blocker(EP1_NOT_APPROVED, "ep1_cliffhanger_weak", "med"))
        if retention < config.min_quality_signal:
            blockers.append(make_blocker(EP1_NOT_APPROVED, "ep1_retention_low", "med"))

    return ComponentResult(
        name="episode1_quality",
        score=clamp_score(score),
        gate_met=not has_blocker(blockers, EP1_NOT_APPROVED, "high"),
        blockers=blockers,
    )
