"""Series-writer readiness: hand-off gates and the composite readiness score."""

from devladder.core.readiness.blockers import blocker_target_stage
from devladder.core.readiness.gates import compute_gates
from devladder.core.readiness.score import (
    build_readiness_input,
    compute_readiness_score,
    is_eligible,
)
from devladder.core.readiness.types import (
    Blocker,
    EpisodeOneEvidence,
    Gate,
    GateReport,
    ReadinessConfig,
    ReadinessInput,
    ReadinessResult,
    ReadinessWeights,
)

__all__ = [
    "Blocker",
    "EpisodeOneEvidence",
    "Gate",
    "GateReport",
    "ReadinessConfig",
    "ReadinessInput",
    "ReadinessResult",
    "ReadinessWeights",
    "blocker_target_stage",
    "build_readiness_input",
    "compute_gates",
    "compute_readiness_score",
    "is_eligible",
]
