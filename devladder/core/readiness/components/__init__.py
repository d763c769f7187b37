"""Readiness component scorers, listed in evaluation order."""

from devladder.core.readiness.components.blueprint import score_blueprint
from devladder.core.readiness.components.canon import score_canon
from devladder.core.readiness.components.character_bible import score_character_bible
from devladder.core.readiness.components.episode_grid import score_episode_grid
from devladder.core.readiness.components.episode_one import score_episode_one

# Order matters: blockers are truncated positionally
COMPONENT_SCORERS = (
    score_episode_grid,
    score_blueprint,
    score_character_bible,
    score_episode_one,
    score_canon,
)

__all__ = [
    "COMPONENT_SCORERS",
    "score_blueprint",
    "score_canon",
    "score_character_bible",
    "score_episode_grid",
    "score_episode_one",
]
