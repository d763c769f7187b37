"""Hand-off gate assessment.

Gates decide whether a project may leave the document ladder and enter
series writing (generating episodes 2..N). Every gate is format-conditional:
a gate that references a stage absent from the active ladder is skipped
entirely, never reported as unmet.

Gates, in order:
- episode_grid: Episode Grid exists (vertical drama)
- character_bible: Character Bible exists
- season_arc_or_blueprint: Season Arc, or Blueprint where there is no arc stage
- episode_1_script: a script exists
- episode_count_set: season/episode count configured (always applicable)
- format_rules: Format Rules exist (vertical drama)
"""

from collections.abc import Mapping
from typing import Any

from devladder.core.logging import get_logger
from devladder.core.messages import GATE_REPORT_COPY, gate_copy, render
from devladder.core.readiness.types import Gate, GateReport
from devladder.core.schemas_pipeline import ProjectCriteria, StageStatus, coerce_criteria
from devladder.core.stages.registry import Stage, get_ladder, get_stage_label

logger = get_logger(__name__)


def _stage_exists(completed_stages: Mapping[Any, Any], stage: Stage) -> bool:
    """Read ``exists`` for a stage from either model, dict or bool values."""
    status = completed_stages.get(stage)
    if status is None:
        status = completed_stages.get(stage.value)
    if status is None:
        return False
    if isinstance(status, StageStatus):
        return status.exists
    if isinstance(status, Mapping):
        return bool(status.get("exists", False))
    if isinstance(status, bool):
        return status
    return bool(getattr(status, "exists", False))


def _stage_gate(code: str, met: bool, **params: Any) -> Gate:
    label, how_to_fix = gate_copy(code, **params)
    return Gate(code=code, label=label, met=met, how_to_fix=None if met else how_to_fix)


def compute_gates(
    format_key: str | None,
    completed_stages: Mapping[Any, Any],
    criteria: ProjectCriteria | Mapping[str, Any] | None = None,
) -> GateReport:
    """Evaluate the hand-off gates that apply to ``format_key``.

    Args:
        format_key: Project format (normalized internally)
        completed_stages: Stage → StageStatus (or dict / bool) as built by
                          compute_pipeline_state
        criteria: Project criteria; only the episode counts are read here

    Returns:
        GateReport with the applicable gates in fixed order
    """
    ladder = get_ladder(format_key)
    criteria = coerce_criteria(criteria)
    gates: list[Gate] = []

    if Stage.EPISODE_GRID in ladder:
        gates.append(_stage_gate("episode_grid", _stage_exists(completed_stages, Stage.EPISODE_GRID)))

    if Stage.CHARACTER_BIBLE in ladder:
        gates.append(
            _stage_gate("character_bible", _stage_exists(completed_stages, Stage.CHARACTER_BIBLE))
        )

    arc_stage = (
        Stage.SEASON_ARC if Stage.SEASON_ARC in ladder
        else Stage.BLUEPRINT if Stage.BLUEPRINT in ladder
        else None
    )
    if arc_stage is not None:
        gates.append(
            _stage_gate(
                "season_arc_or_blueprint",
                _stage_exists(completed_stages, arc_stage),
                arc_label=get_stage_label(arc_stage),
            )
        )

    if Stage.SCRIPT in ladder:
        gates.append(_stage_gate("episode_1_script", _stage_exists(completed_stages, Stage.SCRIPT)))

    gates.append(_stage_gate("episode_count_set", criteria.effective_episode_count is not None))

    if Stage.FORMAT_RULES in ladder:
        gates.append(_stage_gate("format_rules", _stage_exists(completed_stages, Stage.FORMAT_RULES)))

    met = sum(1 for g in gates if g.met)
    eligible = met == len(gates)
    message_code = "handoff_ready" if eligible else "handoff_prerequisites_pending"

    logger.debug(f"Hand-off gates for '{format_key}': {met}/{len(gates)} met")

    return GateReport(
        gates=gates,
        eligible=eligible,
        message_code=message_code,
        message=render(GATE_REPORT_COPY[message_code], met=met, total=len(gates)),
    )
