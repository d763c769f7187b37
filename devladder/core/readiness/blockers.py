"""Blocker construction, routing and truncation.

Blockers are produced by each component in a fixed order. The list handed
back to callers is cut positionally, never re-sorted, so results stay
byte-identical for identical input.
"""

from typing import Any

from devladder.core.messages import blocker_copy
from devladder.core.readiness.types import Blocker, Severity

GRID_INCOMPLETE = "GRID_INCOMPLETE"
BLUEPRINT_NOT_STABLE = "BLUEPRINT_NOT_STABLE"
BIBLE_INCOMPLETE = "BIBLE_INCOMPLETE"
EP1_NOT_APPROVED = "EP1_NOT_APPROVED"
CANON_CONFLICTS = "CANON_CONFLICTS"

# Blocker code → stage (or tab) the caller should route the user to
_TARGET_STAGES = {
    GRID_INCOMPLETE: "episode_grid",
    BLUEPRINT_NOT_STABLE: "season_arc",
    BIBLE_INCOMPLETE: "character_bible",
    EP1_NOT_APPROVED: "script",
    CANON_CONFLICTS: "development",
}


def blocker_target_stage(code: str) -> str:
    """Map a blocker code to the stage the user should be sent to."""
    return _TARGET_STAGES.get(code, "development")


def make_blocker(code: str, reason: str, severity: Severity, **params: Any) -> Blocker:
    message, how_to_fix = blocker_copy(reason, **params)
    return Blocker(
        code=code,
        reason=reason,
        severity=severity,
        message=message,
        how_to_fix=how_to_fix,
        target_stage=blocker_target_stage(code),
    )


def has_blocker(blockers: list[Blocker], code: str, severity: Severity | None = None) -> bool:
    return any(
        b.code == code and (severity is None or b.severity == severity)
        for b in blockers
    )


def truncate_blockers(blockers: list[Blocker], limit: int) -> list[Blocker]:
    """Keep the first ``limit`` blockers in evaluation order."""
    return list(blockers[:limit])
