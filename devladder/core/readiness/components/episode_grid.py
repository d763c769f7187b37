"""Episode grid integrity component.

Key question: "Do we know how many episodes there are, and what each one does?"
"""

from devladder.core.readiness.blockers import GRID_INCOMPLETE, has_blocker, make_blocker
from devladder.core.readiness.components.base import ComponentResult
from devladder.core.readiness.text_checks import clamp_score, has_placeholders, missing_keywords
from devladder.core.readiness.types import Blocker, ReadinessConfig, ReadinessInput
from devladder.core.stages.registry import Stage

# Deductions (points off 100)
MISSING_EPISODE_COUNT = 50
MISSING_GRID = 40
UNAPPROVED_GRID = 20
PLACEHOLDERS = 20
PER_MISSING_KEYWORD = 5
NO_TEXT = 10


def score_episode_grid(
    inputs: ReadinessInput,
    present: set[Stage],
    config: ReadinessConfig,
) -> ComponentResult:
    blockers: list[Blocker] = []
    score = 100.0
    grid_exists = Stage.EPISODE_GRID in present

    if not inputs.season_episode_count or inputs.season_episode_count <= 0:
        blockers.append(make_blocker(GRID_INCOMPLETE, "episode_count_missing", "high"))
        score -= MISSING_EPISODE_COUNT

    if not grid_exists:
        blockers.append(make_blocker(GRID_INCOMPLETE, "grid_missing", "high"))
        score -= MISSING_GRID
    elif not inputs.episode_grid_approved:
        score -= UNAPPROVED_GRID

    if inputs.episode_grid_text:
        if has_placeholders(inputs.episode_grid_text, config.placeholder_tokens):
            blockers.append(make_blocker(GRID_INCOMPLETE, "grid_placeholders", "high"))
            score -= PLACEHOLDERS
        missing = missing_keywords(inputs.episode_grid_text, config.grid_keywords)
        score -= len(missing) * PER_MISSING_KEYWORD
    elif grid_exists:
        score -= NO_TEXT

    return ComponentResult(
        name="episode_grid_integrity",
        score=clamp_score(score),
        gate_met=not has_blocker(blockers, GRID_INCOMPLETE, "high"),
        blockers=blockers,
    )
