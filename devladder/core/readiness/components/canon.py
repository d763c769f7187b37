"""Canon consistency component."""

from devladder.core.readiness.blockers import CANON_CONFLICTS, has_blocker, make_blocker
from devladder.core.readiness.components.base import ComponentResult
from devladder.core.readiness.text_checks import clamp_score
from devladder.core.readiness.types import Blocker, ReadinessConfig, ReadinessInput
from devladder.core.stages.registry import Stage


def score_canon(
    inputs: ReadinessInput,
    present: set[Stage],
    config: ReadinessConfig,
) -> ComponentResult:
    blockers: list[Blocker] = []
    score = (
        inputs.canon_consistency_score
        if inputs.canon_consistency_score is not None
        else config.default_canon_score
    )

    # Open high-severity drift caps the component no matter what else is true
    if inputs.open_high_drift_flags > 0:
        blockers.append(
            make_blocker(
                CANON_CONFLICTS, "canon_drift_flags", "high", count=inputs.open_high_drift_flags
            )
        )
        score = min(score, config.drift_flag_ceiling)

    if score < config.min_canon_score and not has_blocker(blockers, CANON_CONFLICTS):
        blockers.append(
            make_blocker(
                CANON_CONFLICTS,
                "canon_score_low",
                "med",
                score=score,
                minimum=config.min_canon_score,
            )
        )

    return ComponentResult(
        name="canon_consistency",
        score=clamp_score(score),
        gate_met=not has_blocker(blockers, CANON_CONFLICTS, "high"),
        blockers=blockers,
    )
