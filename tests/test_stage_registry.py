"""Tests for devladder.core.stages.registry — ladders, aliases and lookups."""

import pytest

from devladder.core.stages.registry import (
    ALL_KNOWN_STAGES,
    FORMAT_LADDERS,
    SUPPORTED_FORMATS,
    Stage,
    get_ladder,
    get_nearest_existing_stage,
    get_next_stage,
    get_prev_stage,
    get_stage_index,
    get_stage_label,
    is_stage_applicable,
    is_stage_valid_for_format,
    map_doc_type_to_ladder_stage,
    normalize_format_key,
    normalize_stage_key,
    run_registry_self_check,
    sanitize_doc_type,
)

# =============================================================================
# Ladder coverage
# =============================================================================


class TestLadders:
    @pytest.mark.parametrize("fmt", SUPPORTED_FORMATS)
    def test_every_ladder_non_empty_and_closed(self, fmt):
        ladder = get_ladder(fmt)
        assert ladder
        assert all(stage in ALL_KNOWN_STAGES for stage in ladder)

    @pytest.mark.parametrize("fmt", SUPPORTED_FORMATS)
    def test_every_ladder_starts_with_idea(self, fmt):
        assert get_ladder(fmt)[0] is Stage.IDEA

    def test_unknown_format_falls_back_to_film(self):
        assert get_ladder("interpretive-dance") == FORMAT_LADDERS["film"]

    def test_empty_and_none_fall_back_to_film(self):
        assert get_ladder("") == FORMAT_LADDERS["film"]
        assert get_ladder(None) == FORMAT_LADDERS["film"]

    def test_format_key_is_normalized(self):
        assert get_ladder("TV Series") == FORMAT_LADDERS["tv-series"]
        assert get_ladder("vertical_drama") == FORMAT_LADDERS["vertical-drama"]

    def test_vertical_drama_ladder(self):
        assert get_ladder("vertical-drama") == (
            Stage.IDEA,
            Stage.CONCEPT_BRIEF,
            Stage.VERTICAL_MARKET_SHEET,
            Stage.FORMAT_RULES,
            Stage.CHARACTER_BIBLE,
            Stage.SEASON_ARC,
            Stage.EPISODE_GRID,
            Stage.VERTICAL_EPISODE_BEATS,
            Stage.SCRIPT,
            Stage.SEASON_MASTER_SCRIPT,
        )

    def test_deterministic(self):
        assert get_ladder("documentary") == get_ladder("documentary")

    def test_self_check_passes(self):
        result = run_registry_self_check()
        assert result.passed, result.failures


# =============================================================================
# Normalization
# =============================================================================


class TestNormalization:
    def test_normalize_format_key(self):
        assert normalize_format_key("  Vertical  Drama ") == "vertical-drama"
        assert normalize_format_key("limited__series") == "limited-series"
        assert normalize_format_key("") == "film"
        assert normalize_format_key(None) == "film"

    def test_normalize_stage_key(self):
        assert normalize_stage_key(" Episode-Grid ") == "episode_grid"
        assert normalize_stage_key("Character  Bible") == "character_bible"
        assert normalize_stage_key(None) == ""
        assert normalize_stage_key(42) == ""


# =============================================================================
# Doc type mapping
# =============================================================================


class TestDocTypeMapping:
    def test_canonical_tokens_map_to_themselves(self):
        for stage in Stage:
            assert map_doc_type_to_ladder_stage(stage.value) is stage

    def test_draft_maps_to_script(self):
        assert map_doc_type_to_ladder_stage("draft") is Stage.SCRIPT
        assert map_doc_type_to_ladder_stage("Feature Script") is Stage.SCRIPT

    def test_season_blueprint_depends_on_format(self):
        assert map_doc_type_to_ladder_stage("season_blueprint", "vertical-drama") is Stage.SEASON_ARC
        assert map_doc_type_to_ladder_stage("season_blueprint", "tv-series") is Stage.BLUEPRINT
        assert map_doc_type_to_ladder_stage("season_blueprint") is Stage.BLUEPRINT

    def test_arc_map_is_vertical_only(self):
        assert map_doc_type_to_ladder_stage("arc_map", "vertical-drama") is Stage.SEASON_ARC
        assert map_doc_type_to_ladder_stage("arc_map", "film") is None

    def test_episode_beats_depends_on_format(self):
        assert (
            map_doc_type_to_ladder_stage("episode_beats", "vertical-drama")
            is Stage.VERTICAL_EPISODE_BEATS
        )
        assert map_doc_type_to_ladder_stage("episode_beats", "tv-series") is Stage.BEAT_SHEET

    @pytest.mark.parametrize("raw", [None, "", "   ", "mystery_doc", 42])
    def test_unrecognized_input_maps_to_none(self, raw):
        assert map_doc_type_to_ladder_stage(raw) is None

    def test_sanitize_unknown_becomes_concept_brief(self):
        assert sanitize_doc_type("mystery_doc") is Stage.CONCEPT_BRIEF
        assert sanitize_doc_type("treatment") is Stage.BLUEPRINT


# =============================================================================
# Query helpers
# =============================================================================


class TestQueryHelpers:
    def test_stage_index(self):
        assert get_stage_index(Stage.IDEA, "film") == 0
        assert get_stage_index("deck", "film") == 9
        assert get_stage_index("episode_grid", "film") == -1

    def test_stage_members_are_not_aliased(self):
        # Stage.BLUEPRINT is not on the vertical ladder, even though the raw
        # string "blueprint" aliases to season_arc there
        assert get_stage_index(Stage.BLUEPRINT, "vertical-drama") == -1
        assert get_stage_index("blueprint", "vertical-drama") == 5

    def test_applicability(self):
        assert is_stage_applicable("format_rules", "vertical-drama")
        assert not is_stage_applicable("format_rules", "film")
        assert is_stage_valid_for_format("episode_grid", "vertical-drama")
        assert not is_stage_valid_for_format("episode_grid", "documentary")

    def test_next_and_prev(self):
        assert get_next_stage("idea", "film") is Stage.CONCEPT_BRIEF
        assert get_next_stage("deck", "film") is None
        assert get_next_stage("episode_grid", "film") is None
        assert get_prev_stage("concept_brief", "short") is Stage.IDEA
        assert get_prev_stage("idea", "short") is None

    def test_nearest_existing_stage(self):
        existing = ["logline", "concept_brief"]
        assert get_nearest_existing_stage("script", "film", existing) is Stage.CONCEPT_BRIEF
        assert get_nearest_existing_stage("script", "film", []) is None

    def test_labels(self):
        assert get_stage_label(Stage.SEASON_ARC) == "Season Arc"
        assert get_stage_label("treatment") == "Blueprint"
        assert get_stage_label("mystery_doc") == "mystery doc"
