"""Blueprint / season arc stability component."""

from devladder.core.readiness.blockers import BLUEPRINT_NOT_STABLE, has_blocker, make_blocker
from devladder.core.readiness.components.base import ComponentResult
from devladder.core.readiness.text_checks import clamp_score, has_placeholders, missing_keywords
from devladder.core.readiness.types import Blocker, ReadinessConfig, ReadinessInput
from devladder.core.stages.registry import Stage

MISSING_ARC = 50
UNAPPROVED_ARC = 15
PER_MISSING_BEAT = 10
NO_STAKES = 10
PLACEHOLDERS = 15
NO_TEXT = 10

ARC_STAGES = (Stage.BLUEPRINT, Stage.SEASON_ARC)


def score_blueprint(
    inputs: ReadinessInput,
    present: set[Stage],
    config: ReadinessConfig,
) -> ComponentResult:
    blockers: list[Blocker] = []
    score = 100.0
    arc_exists = any(stage in present for stage in ARC_STAGES)

    if not arc_exists:
        blockers.append(make_blocker(BLUEPRINT_NOT_STABLE, "arc_missing", "high"))
        score -= MISSING_ARC
    elif not inputs.blueprint_approved:
        score -= UNAPPROVED_ARC

    if inputs.blueprint_text:
        missing_beats = missing_keywords(inputs.blueprint_text, config.arc_keywords)
        score -= len(missing_beats) * PER_MISSING_BEAT
        # Either keyword is enough ("escalat" covers escalation/escalates)
        if len(missing_keywords(inputs.blueprint_text, config.arc_stakes_keywords)) == len(
            config.arc_stakes_keywords
        ):
            score -= NO_STAKES
        if has_placeholders(inputs.blueprint_text, config.placeholder_tokens):
            score -= PLACEHOLDERS
    elif arc_exists:
        score -= NO_TEXT

    return ComponentResult(
        name="blueprint_stability",
        score=clamp_score(score),
        gate_met=not has_blocker(blockers, BLUEPRINT_NOT_STABLE),
        blockers=blockers,
    )
