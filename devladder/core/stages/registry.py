"""Stage ladder registry — canonical deliverable stages and per-format ladders.

Formats:  film, tv-series, vertical-drama, documentary, animation, short, ...

Every ladder is an ordered tuple of Stage tokens drawn from one closed
vocabulary. Raw doc types (UI labels, legacy names, LLM-invented variants)
are mapped onto that vocabulary through explicit alias tables. Rules are
declarative data, lookups are pure functions.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache

from devladder.core.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# Stage vocabulary
# =============================================================================


class Stage(str, Enum):
    """Canonical deliverable stage token."""

    IDEA = "idea"
    TOPLINE_NARRATIVE = "topline_narrative"
    CONCEPT_BRIEF = "concept_brief"
    MARKET_SHEET = "market_sheet"
    VERTICAL_MARKET_SHEET = "vertical_market_sheet"
    BLUEPRINT = "blueprint"
    ARCHITECTURE = "architecture"
    CHARACTER_BIBLE = "character_bible"
    BEAT_SHEET = "beat_sheet"
    SCRIPT = "script"
    SEASON_MASTER_SCRIPT = "season_master_script"
    PRODUCTION_DRAFT = "production_draft"
    DECK = "deck"
    DOCUMENTARY_OUTLINE = "documentary_outline"
    FORMAT_RULES = "format_rules"
    SEASON_ARC = "season_arc"
    EPISODE_GRID = "episode_grid"
    VERTICAL_EPISODE_BEATS = "vertical_episode_beats"
    SERIES_WRITER = "series_writer"


ALL_KNOWN_STAGES: tuple[Stage, ...] = tuple(Stage)

STAGE_LABELS: dict[Stage, str] = {
    Stage.IDEA: "Idea / Logline",
    Stage.TOPLINE_NARRATIVE: "Topline Narrative",
    Stage.CONCEPT_BRIEF: "Concept Brief",
    Stage.MARKET_SHEET: "Market Sheet",
    Stage.VERTICAL_MARKET_SHEET: "Vertical Market Sheet",
    Stage.BLUEPRINT: "Blueprint",
    Stage.ARCHITECTURE: "Architecture",
    Stage.CHARACTER_BIBLE: "Character Bible",
    Stage.BEAT_SHEET: "Beat Sheet",
    Stage.SCRIPT: "Script",
    Stage.SEASON_MASTER_SCRIPT: "Season Master Script",
    Stage.PRODUCTION_DRAFT: "Production Draft",
    Stage.DECK: "Deck",
    Stage.DOCUMENTARY_OUTLINE: "Documentary Outline",
    Stage.FORMAT_RULES: "Format Rules",
    Stage.SEASON_ARC: "Season Arc",
    Stage.EPISODE_GRID: "Episode Grid",
    Stage.VERTICAL_EPISODE_BEATS: "Vertical Episode Beats",
    Stage.SERIES_WRITER: "Series Writer",
}


# =============================================================================
# Ladders (declarative)
# =============================================================================

DEFAULT_FORMAT = "film"

_FILM_LADDER = (
    Stage.IDEA, Stage.CONCEPT_BRIEF, Stage.MARKET_SHEET, Stage.BLUEPRINT,
    Stage.ARCHITECTURE, Stage.CHARACTER_BIBLE, Stage.BEAT_SHEET, Stage.SCRIPT,
    Stage.PRODUCTION_DRAFT, Stage.DECK,
)

_SERIES_LADDER = (
    Stage.IDEA, Stage.CONCEPT_BRIEF, Stage.MARKET_SHEET, Stage.BLUEPRINT,
    Stage.ARCHITECTURE, Stage.CHARACTER_BIBLE, Stage.BEAT_SHEET, Stage.SCRIPT,
    Stage.SEASON_MASTER_SCRIPT, Stage.PRODUCTION_DRAFT,
)

_VERTICAL_DRAMA_LADDER = (
    Stage.IDEA, Stage.CONCEPT_BRIEF, Stage.VERTICAL_MARKET_SHEET, Stage.FORMAT_RULES,
    Stage.CHARACTER_BIBLE, Stage.SEASON_ARC, Stage.EPISODE_GRID,
    Stage.VERTICAL_EPISODE_BEATS, Stage.SCRIPT, Stage.SEASON_MASTER_SCRIPT,
)

_DOCUMENTARY_LADDER = (
    Stage.IDEA, Stage.CONCEPT_BRIEF, Stage.MARKET_SHEET, Stage.DOCUMENTARY_OUTLINE,
    Stage.DECK,
)

_ANIMATION_LADDER = (
    Stage.IDEA, Stage.CONCEPT_BRIEF, Stage.MARKET_SHEET, Stage.BLUEPRINT,
    Stage.CHARACTER_BIBLE, Stage.BEAT_SHEET, Stage.SCRIPT,
)

_SHORT_LADDER = (Stage.IDEA, Stage.CONCEPT_BRIEF, Stage.SCRIPT)

FORMAT_LADDERS: dict[str, tuple[Stage, ...]] = {
    "film": _FILM_LADDER,
    "feature": _FILM_LADDER,
    "tv-series": _SERIES_LADDER,
    "limited-series": _SERIES_LADDER,
    "digital-series": _SERIES_LADDER,
    "anim-series": _SERIES_LADDER,
    "reality": _SERIES_LADDER,
    "vertical-drama": _VERTICAL_DRAMA_LADDER,
    "documentary": _DOCUMENTARY_LADDER,
    "documentary-series": _DOCUMENTARY_LADDER,
    "hybrid-documentary": _DOCUMENTARY_LADDER,
    "animation": _ANIMATION_LADDER,
    "short": _SHORT_LADDER,
}

SUPPORTED_FORMATS: tuple[str, ...] = tuple(FORMAT_LADDERS)


# =============================================================================
# Alias tables
# =============================================================================

# Raw doc type (normalized) → canonical stage. Identity entries come first so
# every canonical token maps onto itself.
DOC_TYPE_ALIASES: dict[str, Stage] = {
    **{stage.value: stage for stage in Stage},
    # Idea / concept
    "logline": Stage.IDEA,
    "one_pager": Stage.CONCEPT_BRIEF,
    "concept": Stage.CONCEPT_BRIEF,
    "concept_lock": Stage.CONCEPT_BRIEF,
    "notes": Stage.CONCEPT_BRIEF,
    # Structural documents
    "treatment": Stage.BLUEPRINT,
    "series_bible": Stage.BLUEPRINT,
    "outline": Stage.BLUEPRINT,
    "season_outline": Stage.BLUEPRINT,
    "season_blueprint": Stage.BLUEPRINT,
    "story_outline": Stage.ARCHITECTURE,
    "plot_architecture": Stage.ARCHITECTURE,
    "episode_beat_sheet": Stage.BEAT_SHEET,
    "episode_beats": Stage.BEAT_SHEET,
    # Script variants ("draft" is never a stage of its own)
    "feature_script": Stage.SCRIPT,
    "episode_script": Stage.SCRIPT,
    "pilot_script": Stage.SCRIPT,
    "episode_1_script": Stage.SCRIPT,
    "screenplay": Stage.SCRIPT,
    "screenplay_draft": Stage.SCRIPT,
    "script_pdf": Stage.SCRIPT,
    "draft": Stage.SCRIPT,
    "season_script": Stage.SEASON_MASTER_SCRIPT,
    "complete_season_script": Stage.SEASON_MASTER_SCRIPT,
    "writers_room": Stage.SERIES_WRITER,
    # Packaging
    "coverage": Stage.PRODUCTION_DRAFT,
    "pitch_deck": Stage.DECK,
    "lookbook": Stage.DECK,
    "doc_outline": Stage.DOCUMENTARY_OUTLINE,
    # Topline
    "synopsis": Stage.TOPLINE_NARRATIVE,
    "short_synopsis": Stage.TOPLINE_NARRATIVE,
    "long_synopsis": Stage.TOPLINE_NARRATIVE,
    "narrative": Stage.TOPLINE_NARRATIVE,
    "topline": Stage.TOPLINE_NARRATIVE,
}

# Format-specific overrides, checked before DOC_TYPE_ALIASES. In vertical
# drama the season blueprint *is* the season arc, and episode beats are the
# vertical beat sheets.
DOC_TYPE_ALIASES_BY_FORMAT: dict[str, dict[str, Stage]] = {
    "vertical-drama": {
        "blueprint": Stage.SEASON_ARC,
        "season_blueprint": Stage.SEASON_ARC,
        "season_outline": Stage.SEASON_ARC,
        "arc_map": Stage.SEASON_ARC,
        "episode_beats": Stage.VERTICAL_EPISODE_BEATS,
        "market_sheet": Stage.VERTICAL_MARKET_SHEET,
    },
}


# =============================================================================
# Normalization
# =============================================================================

_SEPARATORS = re.compile(r"[\s\-_]+")


def normalize_format_key(format_key: str | None) -> str:
    """Normalize a format string to the registry key (``"TV Series"`` → ``"tv-series"``)."""
    if not isinstance(format_key, str):
        return DEFAULT_FORMAT
    key = _SEPARATORS.sub("-", format_key.strip().lower()).strip("-")
    return key or DEFAULT_FORMAT


def normalize_stage_key(raw: str | None) -> str:
    """Normalize a stage/doc type string (``"Episode-Grid"`` → ``"episode_grid"``)."""
    if not isinstance(raw, str):
        return ""
    return _SEPARATORS.sub("_", raw.strip().lower()).strip("_")


# =============================================================================
# Lookups
# =============================================================================


@lru_cache(maxsize=64)
def _ladder_for_key(key: str) -> tuple[Stage, ...]:
    ladder = FORMAT_LADDERS.get(key)
    if ladder is None:
        logger.debug(f"Unknown format '{key}', falling back to '{DEFAULT_FORMAT}' ladder")
        return FORMAT_LADDERS[DEFAULT_FORMAT]
    return ladder


def get_ladder(format_key: str | None) -> tuple[Stage, ...]:
    """Get the ordered ladder for a project format (unknown → film ladder)."""
    return _ladder_for_key(normalize_format_key(format_key))


def map_doc_type_to_ladder_stage(
    raw_doc_type: str | None,
    format_key: str | None = None,
) -> Stage | None:
    """Map a raw doc type to its canonical stage.

    Format-specific aliases win over global ones. Returns ``None`` only when
    the input is not recognized.
    """
    key = normalize_stage_key(raw_doc_type)
    if not key:
        return None

    if format_key is not None:
        overrides = DOC_TYPE_ALIASES_BY_FORMAT.get(normalize_format_key(format_key))
        if overrides and key in overrides:
            return overrides[key]

    return DOC_TYPE_ALIASES.get(key)


def sanitize_doc_type(raw_doc_type: str | None, format_key: str | None = None) -> Stage:
    """Canonical stage to persist for a raw doc type; unknown input becomes a concept brief."""
    return map_doc_type_to_ladder_stage(raw_doc_type, format_key) or Stage.CONCEPT_BRIEF


def _resolve(stage: Stage | str | None, format_key: str | None = None) -> Stage | None:
    # Stage members are already canonical; only raw strings go through aliases
    if isinstance(stage, Stage):
        return stage
    return map_doc_type_to_ladder_stage(stage, format_key)


def get_stage_label(stage: Stage | str) -> str:
    """Human label for a stage token."""
    resolved = _resolve(stage)
    if resolved is None:
        return str(stage).replace("_", " ")
    return STAGE_LABELS[resolved]


def get_stage_index(stage: Stage | str, format_key: str | None) -> int:
    """0-based index of a stage in the format's ladder, or -1."""
    resolved = _resolve(stage, format_key)
    ladder = get_ladder(format_key)
    return ladder.index(resolved) if resolved in ladder else -1


def is_stage_applicable(stage: Stage | str, format_key: str | None) -> bool:
    """Is this stage on the ladder for this format?"""
    return get_stage_index(stage, format_key) >= 0


def is_stage_valid_for_format(stage: Stage | str, format_key: str | None) -> bool:
    """Guard for notes and recommendations: never reference a stage off the ladder."""
    return is_stage_applicable(stage, format_key)


def get_next_stage(current: Stage | str, format_key: str | None) -> Stage | None:
    """Stage after ``current``; None if it is last or not on the ladder."""
    ladder = get_ladder(format_key)
    idx = get_stage_index(current, format_key)
    if idx < 0 or idx >= len(ladder) - 1:
        return None
    return ladder[idx + 1]


def get_prev_stage(current: Stage | str, format_key: str | None) -> Stage | None:
    """Stage before ``current``; None if it is first or not on the ladder."""
    idx = get_stage_index(current, format_key)
    if idx <= 0:
        return None
    return get_ladder(format_key)[idx - 1]


def get_nearest_existing_stage(
    current: Stage | str,
    format_key: str | None,
    existing_doc_types: list[str],
) -> Stage | None:
    """Walk backwards from ``current`` to the nearest stage that exists.

    When ``current`` is not on the ladder the walk starts at the last stage.
    """
    ladder = get_ladder(format_key)
    existing = {
        map_doc_type_to_ladder_stage(d, format_key) for d in existing_doc_types
    }
    idx = get_stage_index(current, format_key)
    start = idx if idx >= 0 else len(ladder) - 1
    for i in range(start, -1, -1):
        if ladder[i] in existing:
            return ladder[i]
    return None


# =============================================================================
# Self check
# =============================================================================


@dataclass
class RegistryCheck:
    passed: bool
    failures: list[str] = field(default_factory=list)


def run_registry_self_check() -> RegistryCheck:
    """Verify the declarative tables are internally consistent."""
    failures: list[str] = []

    for fmt, ladder in FORMAT_LADDERS.items():
        if not ladder or ladder[0] is not Stage.IDEA:
            failures.append(f"Format '{fmt}': ladder does not start with 'idea'")
        if len(set(ladder)) != len(ladder):
            failures.append(f"Format '{fmt}': duplicate stages")
        for stage in ladder:
            if stage not in ALL_KNOWN_STAGES:
                failures.append(f"Format '{fmt}': unknown stage '{stage}'")
        for i in range(len(ladder) - 1):
            got = get_next_stage(ladder[i], fmt)
            if got is not ladder[i + 1]:
                failures.append(
                    f"get_next_stage('{ladder[i].value}', '{fmt}'): "
                    f"expected '{ladder[i + 1].value}', got '{got}'"
                )

    for fmt in DOC_TYPE_ALIASES_BY_FORMAT:
        if fmt not in FORMAT_LADDERS:
            failures.append(f"Alias overrides for unknown format '{fmt}'")

    for stage in Stage:
        if stage not in STAGE_LABELS:
            failures.append(f"Stage '{stage.value}' has no label")

    if map_doc_type_to_ladder_stage("draft") is not Stage.SCRIPT:
        failures.append("'draft' must map to 'script'")

    if failures:
        logger.warning(f"Stage registry self check failed: {failures}")

    return RegistryCheck(passed=not failures, failures=failures)
