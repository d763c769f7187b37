"""Character bible completeness component."""

from devladder.core.readiness.blockers import BIBLE_INCOMPLETE, has_blocker, make_blocker
from devladder.core.readiness.components.base import ComponentResult
from devladder.core.readiness.text_checks import clamp_score, has_placeholders, missing_keywords
from devladder.core.readiness.types import Blocker, ReadinessConfig, ReadinessInput
from devladder.core.stages.registry import Stage

MISSING_BIBLE = 50
UNAPPROVED_BIBLE = 15
PER_MISSING_FIELD = 8
PLACEHOLDERS = 15
NO_TEXT = 10


def score_character_bible(
    inputs: ReadinessInput,
    present: set[Stage],
    config: ReadinessConfig,
) -> ComponentResult:
    blockers: list[Blocker] = []
    score = 100.0
    bible_exists = Stage.CHARACTER_BIBLE in present

    if not bible_exists:
        blockers.append(make_blocker(BIBLE_INCOMPLETE, "bible_missing", "high"))
        score -= MISSING_BIBLE
    elif not inputs.character_bible_approved:
        score -= UNAPPROVED_BIBLE

    if inputs.character_bible_text:
        missing = missing_keywords(inputs.character_bible_text, config.bible_keywords)
        score -= len(missing) * PER_MISSING_FIELD
        if has_placeholders(inputs.character_bible_text, config.placeholder_tokens):
            blockers.append(make_blocker(BIBLE_INCOMPLETE, "bible_placeholders", "high"))
            score -= PLACEHOLDERS
    elif bible_exists:
        score -= NO_TEXT

    return ComponentResult(
        name="character_bible_completeness",
        score=clamp_score(score),
        gate_met=not has_blocker(blockers, BIBLE_INCOMPLETE, "high"),
        blockers=blockers,
    )
