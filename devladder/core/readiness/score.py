"""Main readiness score computation.

This module orchestrates the readiness scoring by:
1. Running each component scorer in fixed order
2. Calculating the weighted composite
3. Deriving per-component gates from the full blocker list
4. Truncating blockers and picking a recommendation
"""

from collections.abc import Iterable, Mapping
from typing import Any

from devladder.core.logging import get_logger
from devladder.core.messages import RECOMMENDATION_COPY
from devladder.core.readiness.blockers import truncate_blockers
from devladder.core.readiness.components import COMPONENT_SCORERS
from devladder.core.readiness.components.base import ComponentResult, present_stages
from devladder.core.readiness.types import (
    Blocker,
    EpisodeOneEvidence,
    ReadinessConfig,
    ReadinessInput,
    ReadinessResult,
)
from devladder.core.schemas_pipeline import (
    ArtifactRecord,
    ProjectCriteria,
    coerce_artifacts,
    coerce_criteria,
)
from devladder.core.stages.registry import Stage, map_doc_type_to_ladder_stage

logger = get_logger(__name__)

# Component name → gate name exposed on ReadinessResult.gates
GATE_NAMES = {
    "episode_grid_integrity": "grid_complete",
    "blueprint_stability": "blueprint_stable",
    "character_bible_completeness": "bible_complete",
    "episode1_quality": "episode1_ready",
    "canon_consistency": "canon_clear",
}


def is_eligible(gates_met: Iterable[bool], score: float, threshold: float) -> bool:
    """All gates met AND score at or above the threshold."""
    return all(gates_met) and score >= threshold


def _recommendation(eligible: bool, score: float, config: ReadinessConfig) -> str:
    if eligible:
        return "ready"
    if score >= config.almost_ready_threshold:
        return "almost_ready"
    return "not_stable"


def compute_readiness_score(
    inputs: ReadinessInput | Mapping[str, Any],
    config: ReadinessConfig | None = None,
) -> ReadinessResult:
    """
    Compute the composite readiness score for entering series writing.

    Pure function of its inputs: no clock, no I/O. Identical inputs give
    identical results.

    Args:
        inputs: ReadinessInput, or a plain dict with the same keys
        config: Weights and thresholds; built from Settings when omitted

    Returns:
        ReadinessResult with components, gates, blockers and recommendation
    """
    if not isinstance(inputs, ReadinessInput):
        inputs = ReadinessInput.model_validate(dict(inputs))
    config = config or ReadinessConfig.from_settings()

    # ==========================================================================
    # 1. Score each component
    # ==========================================================================
    present = present_stages(inputs)
    results: list[ComponentResult] = [
        scorer(inputs, present, config) for scorer in COMPONENT_SCORERS
    ]

    # ==========================================================================
    # 2. Weighted composite
    # ==========================================================================
    weights = config.weights.model_dump()
    raw_score = sum(r.score * weights[r.name] for r in results)
    score = round(max(0.0, min(100.0, raw_score)), 2)

    # ==========================================================================
    # 3. Gates come from the full blocker list, before truncation
    # ==========================================================================
    gates = {GATE_NAMES[r.name]: r.gate_met for r in results}
    all_blockers: list[Blocker] = [b for r in results for b in r.blockers]

    eligible = is_eligible(gates.values(), score, config.eligible_threshold)
    recommendation = _recommendation(eligible, score, config)

    blockers = truncate_blockers(all_blockers, config.max_blockers)
    if len(all_blockers) > len(blockers):
        logger.debug(f"Dropped {len(all_blockers) - len(blockers)} blocker(s) past the limit")

    logger.info(
        f"Readiness: score={score}, eligible={eligible}, "
        f"gates={sum(gates.values())}/{len(gates)}, blockers={len(all_blockers)}"
    )

    return ReadinessResult(
        score=score,
        components={r.name: r.score for r in results},
        gates=gates,
        blockers=blockers,
        eligible=eligible,
        threshold=config.eligible_threshold,
        recommendation=recommendation,
        recommendation_message=RECOMMENDATION_COPY[recommendation],
    )


# =============================================================================
# Input assembly from document registry rows
# =============================================================================


def _first_records_by_stage(
    records: list[ArtifactRecord], format_key: str | None
) -> dict[Stage, ArtifactRecord]:
    """First existing record per canonical stage, in caller order."""
    found: dict[Stage, ArtifactRecord] = {}
    for record in records:
        if not record.exists:
            continue
        stage = map_doc_type_to_ladder_stage(record.doc_type, format_key)
        if stage is not None and stage not in found:
            found[stage] = record
    return found


def build_readiness_input(
    format_key: str | None,
    artifacts: Iterable[Any],
    criteria: ProjectCriteria | Mapping[str, Any] | None = None,
    episode_one: EpisodeOneEvidence | Mapping[str, Any] | None = None,
) -> ReadinessInput:
    """
    Assemble a ReadinessInput from registry rows and project criteria.

    Args:
        format_key: Project format
        artifacts: Document registry rows (dicts or ArtifactRecord)
        criteria: Project criteria (episode count, canon signals)
        episode_one: Measured Episode 1 facts; the script row's text is used
                     when no evidence text is given

    Returns:
        ReadinessInput ready for compute_readiness_score

    Raises:
        InputShapeError: if artifacts is not a list-like iterable
    """
    records = coerce_artifacts(artifacts)
    criteria = coerce_criteria(criteria)
    if episode_one is None:
        evidence = EpisodeOneEvidence()
    elif isinstance(episode_one, EpisodeOneEvidence):
        evidence = episode_one
    else:
        evidence = EpisodeOneEvidence.model_validate(dict(episode_one))

    by_stage = _first_records_by_stage(records, format_key)
    grid = by_stage.get(Stage.EPISODE_GRID)
    arc = by_stage.get(Stage.SEASON_ARC) or by_stage.get(Stage.BLUEPRINT)
    bible = by_stage.get(Stage.CHARACTER_BIBLE)
    script = by_stage.get(Stage.SCRIPT)

    script_text = evidence.script_text or (script.raw_text if script else None)
    if evidence.approved is not None:
        episode1_approved = evidence.approved
    else:
        episode1_approved = bool(script and script.is_approved)

    return ReadinessInput(
        format_key=format_key,
        existing_doc_types=[stage.value for stage in by_stage],
        season_episode_count=criteria.effective_episode_count,
        episode_grid_text=grid.raw_text if grid else None,
        episode_grid_approved=bool(grid and grid.is_approved),
        blueprint_text=arc.raw_text if arc else None,
        blueprint_approved=bool(arc and arc.is_approved),
        character_bible_text=bible.raw_text if bible else None,
        character_bible_approved=bool(bible and bible.is_approved),
        episode1_script_text=script_text,
        episode1_approved=episode1_approved,
        episode1_scene_heading_count=evidence.scene_heading_count,
        episode1_dialogue_block_count=evidence.dialogue_block_count,
        episode1_cliffhanger_strength=evidence.cliffhanger_strength,
        episode1_retention_score=evidence.retention_score,
        open_high_drift_flags=criteria.open_high_drift_flag_count,
        canon_consistency_score=criteria.canon_consistency_score,
    )
