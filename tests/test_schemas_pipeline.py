"""Tests for devladder.core.schemas_pipeline — tolerant input coercion."""

import pytest

from devladder.core.errors import DevLadderError, InputShapeError
from devladder.core.schemas_pipeline import (
    ArtifactRecord,
    ProjectCriteria,
    coerce_artifacts,
    coerce_criteria,
)


class TestArtifactRecord:
    def test_defaults(self):
        record = ArtifactRecord(doc_type="idea")
        assert record.exists
        assert not record.is_approved
        assert record.active_version_id is None
        assert record.raw_text is None

    def test_camel_case_and_legacy_keys(self):
        record = ArtifactRecord.model_validate(
            {"docType": "script", "hasApproved": True, "activeVersionId": 12, "rawText": "INT."}
        )
        assert record.doc_type == "script"
        assert record.is_approved
        assert record.active_version_id == "12"
        assert record.raw_text == "INT."

    def test_none_flags_are_false(self):
        record = ArtifactRecord.model_validate({"doc_type": "idea", "exists": None, "is_approved": None})
        assert not record.exists
        assert not record.is_approved

    def test_extra_keys_ignored(self):
        record = ArtifactRecord.model_validate({"doc_type": "idea", "project_id": "p1"})
        assert record.doc_type == "idea"


class TestCoerceArtifacts:
    def test_preserves_order(self):
        records = coerce_artifacts([{"doc_type": "b"}, ArtifactRecord(doc_type="a")])
        assert [r.doc_type for r in records] == ["b", "a"]

    def test_skips_unreadable_entries(self):
        records = coerce_artifacts(["x", 3, None, {"doc_type": "idea", "exists": "not-a-bool"}, {"doc_type": "deck"}])
        assert [r.doc_type for r in records] == ["deck"]

    @pytest.mark.parametrize("bad", ["idea", b"idea", {"doc_type": "idea"}, None, 7, 1.5])
    def test_rejects_non_lists(self, bad):
        with pytest.raises(InputShapeError):
            coerce_artifacts(bad)

    def test_error_hierarchy(self):
        with pytest.raises(DevLadderError):
            coerce_artifacts(None)
        with pytest.raises(ValueError):
            coerce_artifacts(None)


class TestProjectCriteria:
    def test_effective_episode_count(self):
        assert ProjectCriteria(season_episode_count=30, episode_count=8).effective_episode_count == 30
        assert ProjectCriteria(episode_count=8).effective_episode_count == 8
        assert ProjectCriteria().effective_episode_count is None

    def test_non_positive_values_are_unset(self):
        criteria = ProjectCriteria.model_validate(
            {"seasonEpisodeCount": 0, "episode_count": -1, "episode_length_min": 0}
        )
        assert criteria.effective_episode_count is None
        assert criteria.episode_length_min is None

    def test_negative_flag_count_clamps(self):
        assert ProjectCriteria(open_high_drift_flag_count=-2).open_high_drift_flag_count == 0

    def test_coerce(self):
        assert coerce_criteria(None) == ProjectCriteria()
        assert coerce_criteria({"episodeCount": 5}).episode_count == 5
        existing = ProjectCriteria(episode_count=3)
        assert coerce_criteria(existing) is existing
        with pytest.raises(InputShapeError):
            coerce_criteria(["episode_count", 5])

    def test_unreadable_fields_are_dropped(self):
        criteria = coerce_criteria(
            {"episode_count": "ten", "seasonEpisodeCount": 12, "episode_length_min": "short"}
        )
        assert criteria.episode_count is None
        assert criteria.season_episode_count == 12
        assert criteria.episode_length_min is None

    def test_unreadable_under_both_keys(self):
        criteria = coerce_criteria({"episode_count": "ten", "episodeCount": [8], "episode_length_max": 90})
        assert criteria.episode_count is None
        assert criteria.episode_length_max == 90
