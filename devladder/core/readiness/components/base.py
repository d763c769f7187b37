"""Shared shapes for readiness component scorers."""

from dataclasses import dataclass, field

from devladder.core.readiness.types import Blocker, ReadinessInput
from devladder.core.stages.registry import Stage, map_doc_type_to_ladder_stage


@dataclass
class ComponentResult:
    name: str
    score: float
    gate_met: bool
    blockers: list[Blocker] = field(default_factory=list)


def present_stages(inputs: ReadinessInput) -> set[Stage]:
    """Canonical stages for every doc type the caller reported; unknown types drop out."""
    stages = set()
    for doc_type in inputs.existing_doc_types:
        stage = map_doc_type_to_ladder_stage(doc_type, inputs.format_key)
        if stage is not None:
            stages.add(stage)
    return stages
