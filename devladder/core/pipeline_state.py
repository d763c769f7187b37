"""Pipeline state: current stage, completion and next-step recommendations.

Single place that walks a format's ladder against the documents a project
actually has. Recomputed from scratch on every call; nothing is cached
between calls except the static ladder tables.

Next-step rules:
1. Walk forward from the current stage; the first missing stage gets a
   ``create`` step, preceded by ``approve`` when its predecessor requires
   approval and is unapproved.
2. An unapproved approval-required current stage is always the primary step.
3. Nothing left to create → ``converge`` (or backfill steps when earlier
   stages were skipped).
4. Formats that hand off to series writing get a hand-off gate report, and an
   ``enter_series_writer`` step when every gate is met.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Literal

from pydantic import BaseModel, Field

from devladder.core.logging import get_logger, log_with_context
from devladder.core.messages import next_step_copy
from devladder.core.readiness.gates import compute_gates
from devladder.core.readiness.types import GateReport
from devladder.core.schemas_pipeline import (
    ArtifactRecord,
    ProjectCriteria,
    StageStatus,
    coerce_artifacts,
    coerce_criteria,
)
from devladder.core.stages.registry import (
    ALL_KNOWN_STAGES,
    Stage,
    get_ladder,
    get_stage_label,
    is_stage_valid_for_format,
    map_doc_type_to_ladder_stage,
    normalize_format_key,
)

logger = get_logger(__name__)

__all__ = [
    "APPROVAL_REQUIRED_STAGES",
    "SERIES_WRITER_HANDOFF_AFTER",
    "PipelineConfig",
    "PipelineNextStep",
    "PipelineState",
    "compute_pipeline_state",
    "get_duration_midpoint",
    "get_duration_range_label",
    "is_stage_valid_for_format",
]

StepAction = Literal["create", "approve", "converge", "enter_series_writer"]
StepPriority = Literal["primary", "secondary"]

# Stages whose successor is not recommended until they are approved
APPROVAL_REQUIRED_STAGES: frozenset[Stage] = frozenset({
    Stage.EPISODE_GRID,
    Stage.CHARACTER_BIBLE,
    Stage.SEASON_ARC,
    Stage.FORMAT_RULES,
})

# Formats that hand off to series writing, and the stage that triggers it
SERIES_WRITER_HANDOFF_AFTER: dict[str, Stage] = {
    "vertical-drama": Stage.SEASON_MASTER_SCRIPT,
    "tv-series": Stage.SEASON_MASTER_SCRIPT,
    "limited-series": Stage.SEASON_MASTER_SCRIPT,
    "digital-series": Stage.SEASON_MASTER_SCRIPT,
    "anim-series": Stage.SEASON_MASTER_SCRIPT,
}

DEFAULT_EPISODE_LENGTH_MIN = 120
DEFAULT_EPISODE_LENGTH_MAX = 180


# =============================================================================
# Types
# =============================================================================


class PipelineConfig(BaseModel):
    """Tunable knobs for next-step recommendation."""

    max_next_steps: int = Field(default=3, ge=1, description="Cap on forward/backfill steps")
    approval_required_stages: frozenset[Stage] = APPROVAL_REQUIRED_STAGES


class PipelineNextStep(BaseModel):
    """One recommended action."""

    stage: Stage
    label: str
    reason: str = Field(..., description="Reason code, see messages.NEXT_STEP_COPY")
    message: str = Field(..., description="Rendered reason")
    action: StepAction
    priority: StepPriority


class PipelineState(BaseModel):
    """Full pipeline state for one project at one moment."""

    format_key: str
    ladder: tuple[Stage, ...]
    current_stage: Stage | None = None
    current_stage_index: int = -1
    completed_stages: dict[Stage, StageStatus] = Field(default_factory=dict)
    completed_count: int = 0
    total_stages: int = 0
    next_steps: list[PipelineNextStep] = Field(default_factory=list)
    excluded_stages: tuple[Stage, ...] = ()
    handoff_readiness: GateReport | None = None

    @property
    def primary_step(self) -> PipelineNextStep | None:
        return self.next_steps[0] if self.next_steps else None


# =============================================================================
# Helpers
# =============================================================================


def _step(
    stage: Stage,
    reason: str,
    action: StepAction,
    priority: StepPriority,
    format_key: str,
) -> PipelineNextStep:
    label = get_stage_label(stage)
    return PipelineNextStep(
        stage=stage,
        label=label,
        reason=reason,
        message=next_step_copy(reason, label=label, format_key=format_key),
        action=action,
        priority=priority,
    )


def _demoted(steps: list[PipelineNextStep]) -> list[PipelineNextStep]:
    return [s.model_copy(update={"priority": "secondary"}) for s in steps]


def _match_stages(
    records: list[ArtifactRecord],
    ladder: tuple[Stage, ...],
    format_key: str,
) -> dict[Stage, StageStatus]:
    """StageStatus for every ladder stage; the first existing record per stage wins."""
    winners: dict[Stage, ArtifactRecord] = {}
    for record in records:
        if not record.exists:
            continue
        stage = map_doc_type_to_ladder_stage(record.doc_type, format_key)
        if stage is None or stage not in ladder or stage in winners:
            continue
        winners[stage] = record

    completed: dict[Stage, StageStatus] = {}
    for stage in ladder:
        match = winners.get(stage)
        completed[stage] = StageStatus(
            exists=match is not None,
            approved=bool(match and match.is_approved),
            active_version_id=match.active_version_id if match else None,
        )
    return completed


def _needs_approval(
    stage: Stage,
    completed: Mapping[Stage, StageStatus],
    config: PipelineConfig,
) -> bool:
    status = completed.get(stage)
    return (
        stage in config.approval_required_stages
        and status is not None
        and status.exists
        and not status.approved
    )


# =============================================================================
# Core
# =============================================================================


def compute_pipeline_state(
    format: str | None,
    artifacts: Iterable[Any],
    criteria: ProjectCriteria | Mapping[str, Any] | None = None,
    *,
    config: PipelineConfig | None = None,
) -> PipelineState:
    """
    Compute the full pipeline state for a project.

    Args:
        format: Project format string (e.g. "vertical-drama", "film")
        artifacts: Document registry rows, in caller order
        criteria: Optional project criteria (episode count, duration range)
        config: Optional next-step knobs

    Returns:
        PipelineState

    Raises:
        InputShapeError: if artifacts is not a list-like iterable
    """
    config = config or PipelineConfig()
    format_key = normalize_format_key(format)
    ladder = get_ladder(format)
    records = coerce_artifacts(artifacts)
    criteria = coerce_criteria(criteria)

    excluded = tuple(s for s in ALL_KNOWN_STAGES if s not in ladder)
    completed = _match_stages(records, ladder, format_key)
    completed_count = sum(1 for s in completed.values() if s.exists)

    # Current stage: the latest stage that exists
    current_stage: Stage | None = None
    current_index = -1
    for i in range(len(ladder) - 1, -1, -1):
        if completed[ladder[i]].exists:
            current_stage = ladder[i]
            current_index = i
            break

    # ==========================================================================
    # Forward walk
    # ==========================================================================
    steps: list[PipelineNextStep] = []
    for i in range(current_index + 1, len(ladder)):
        stage = ladder[i]
        if completed[stage].exists:
            continue
        prev_stage = ladder[i - 1] if i > 0 else None
        if prev_stage is not None and _needs_approval(prev_stage, completed, config):
            steps.append(
                _step(prev_stage, "approve_before_proceeding", "approve", "primary", format_key)
            )
        steps.append(
            _step(
                stage,
                "next_in_pipeline",
                "create",
                "primary" if not steps else "secondary",
                format_key,
            )
        )
        if len(steps) >= config.max_next_steps:
            break
    steps = steps[: config.max_next_steps]

    # ==========================================================================
    # Current stage awaiting approval
    # ==========================================================================
    if current_stage is not None and _needs_approval(current_stage, completed, config):
        already_listed = any(s.stage is current_stage and s.action == "approve" for s in steps)
        if not already_listed:
            steps = [
                _step(current_stage, "needs_approval", "approve", "primary", format_key),
                *_demoted(steps),
            ]

    # ==========================================================================
    # Nothing ahead: backfill gaps, or converge
    # ==========================================================================
    if current_stage is not None and current_index == len(ladder) - 1:
        missing = [s for s in ladder if not completed[s].exists]
        if missing:
            for stage in missing[: config.max_next_steps]:
                steps.append(
                    _step(
                        stage,
                        "backfill_missing_stage",
                        "create",
                        "primary" if not steps else "secondary",
                        format_key,
                    )
                )
        elif not steps:
            steps.append(
                _step(current_stage, "all_stages_created", "converge", "primary", format_key)
            )

    # ==========================================================================
    # Series writer hand-off
    # ==========================================================================
    handoff: GateReport | None = None
    if format_key in SERIES_WRITER_HANDOFF_AFTER:
        handoff = compute_gates(format_key, completed, criteria)
        if handoff.eligible:
            steps = [
                _step(
                    Stage.SERIES_WRITER, "handoff_ready", "enter_series_writer", "primary",
                    format_key,
                ),
                *_demoted(steps),
            ]

    log_with_context(
        logger,
        logging.DEBUG,
        "Computed pipeline state",
        format_key=format_key,
        current_stage=current_stage.value if current_stage else None,
        completed=f"{completed_count}/{len(ladder)}",
        next_steps=len(steps),
    )

    return PipelineState(
        format_key=format_key,
        ladder=ladder,
        current_stage=current_stage,
        current_stage_index=current_index,
        completed_stages=completed,
        completed_count=completed_count,
        total_stages=len(ladder),
        next_steps=steps,
        excluded_stages=excluded,
        handoff_readiness=handoff,
    )


# =============================================================================
# Query helpers
# =============================================================================


def _seconds(value: float) -> str:
    return f"{value:g}"


def get_duration_range_label(criteria: ProjectCriteria | Mapping[str, Any] | None = None) -> str:
    """Describe the episode duration range. Never assumes a single fixed value."""
    criteria = coerce_criteria(criteria)
    low, high = criteria.episode_length_min, criteria.episode_length_max
    if low and high and low != high:
        return f"{_seconds(low)}–{_seconds(high)}s"
    if low:
        return f"{_seconds(low)}s"
    if high:
        return f"{_seconds(high)}s"
    return f"{DEFAULT_EPISODE_LENGTH_MIN}–{DEFAULT_EPISODE_LENGTH_MAX}s"


def get_duration_midpoint(criteria: ProjectCriteria | Mapping[str, Any] | None = None) -> int:
    """Midpoint episode duration in seconds, for scalar calculations."""
    criteria = coerce_criteria(criteria)
    low = criteria.episode_length_min or DEFAULT_EPISODE_LENGTH_MIN
    high = criteria.episode_length_max or DEFAULT_EPISODE_LENGTH_MAX
    # Half-up, matching how durations are shown elsewhere
    return int((low + high) / 2 + 0.5)
