"""Canonical stage vocabulary and per-format ladders."""

from devladder.core.stages.registry import (
    ALL_KNOWN_STAGES,
    FORMAT_LADDERS,
    STAGE_LABELS,
    SUPPORTED_FORMATS,
    Stage,
    get_ladder,
    get_stage_label,
    map_doc_type_to_ladder_stage,
    normalize_format_key,
    normalize_stage_key,
)

__all__ = [
    "ALL_KNOWN_STAGES",
    "FORMAT_LADDERS",
    "STAGE_LABELS",
    "SUPPORTED_FORMATS",
    "Stage",
    "get_ladder",
    "get_stage_label",
    "map_doc_type_to_ladder_stage",
    "normalize_format_key",
    "normalize_stage_key",
]
