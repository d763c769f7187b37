"""Pydantic schemas for collaborator inputs (document registry rows, project criteria)."""

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from devladder.core.errors import InputShapeError
from devladder.core.logging import get_logger

logger = get_logger(__name__)


class ArtifactRecord(BaseModel):
    """One document as reported by the document registry.

    Accepts snake_case or camelCase keys. Never mutated by the core.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    doc_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices("doc_type", "docType"),
        description="Raw doc type as stored (may be a legacy label)",
    )
    exists: bool = Field(default=True, description="Whether the document exists")
    is_approved: bool = Field(
        default=False,
        validation_alias=AliasChoices("is_approved", "isApproved", "has_approved", "hasApproved"),
        description="Whether the active version is approved",
    )
    active_version_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("active_version_id", "activeVersionId"),
    )
    raw_text: str | None = Field(
        default=None,
        validation_alias=AliasChoices("raw_text", "rawText"),
        description="Plain text of the active version, when the caller has it",
    )

    @field_validator("active_version_id", "raw_text", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("exists", "is_approved", mode="before")
    @classmethod
    def _none_is_false(cls, value: Any) -> Any:
        return False if value is None else value


class StageStatus(BaseModel):
    """Presence/approval of one ladder stage, derived from the winning artifact."""

    model_config = ConfigDict(frozen=True)

    exists: bool = False
    approved: bool = False
    active_version_id: str | None = None


class ProjectCriteria(BaseModel):
    """Project qualifications relevant to gating."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    episode_count: int | None = Field(
        default=None, validation_alias=AliasChoices("episode_count", "episodeCount")
    )
    season_episode_count: int | None = Field(
        default=None,
        validation_alias=AliasChoices("season_episode_count", "seasonEpisodeCount"),
    )
    episode_length_min: float | None = Field(
        default=None,
        validation_alias=AliasChoices("episode_length_min", "episodeLengthMin"),
        description="Minimum episode length in seconds",
    )
    episode_length_max: float | None = Field(
        default=None,
        validation_alias=AliasChoices("episode_length_max", "episodeLengthMax"),
        description="Maximum episode length in seconds",
    )
    canon_consistency_score: float | None = Field(
        default=None,
        validation_alias=AliasChoices("canon_consistency_score", "canonConsistencyScore"),
    )
    open_high_drift_flag_count: int = Field(
        default=0,
        validation_alias=AliasChoices("open_high_drift_flag_count", "openHighDriftFlagCount"),
    )

    @field_validator("episode_count", "season_episode_count", mode="before")
    @classmethod
    def _non_positive_count_is_unset(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value <= 0:
            return None
        return value

    @field_validator("episode_length_min", "episode_length_max", mode="before")
    @classmethod
    def _non_positive_length_is_unset(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and value <= 0:
            return None
        return value

    @field_validator("open_high_drift_flag_count", mode="before")
    @classmethod
    def _clamp_flag_count(cls, value: Any) -> Any:
        if value is None:
            return 0
        if isinstance(value, (int, float)) and value < 0:
            return 0
        return value

    @property
    def effective_episode_count(self) -> int | None:
        """Season episode count, falling back to the plain episode count."""
        return self.season_episode_count or self.episode_count


# =============================================================================
# Coercion helpers
# =============================================================================


def coerce_artifacts(artifacts: Any) -> list[ArtifactRecord]:
    """Turn a caller-supplied artifact list into records, preserving order.

    Raises:
        InputShapeError: if ``artifacts`` is not a list-like iterable

    Entries that cannot be read are dropped (treated as absent).
    """
    if isinstance(artifacts, (str, bytes, Mapping)) or not isinstance(artifacts, Iterable):
        raise InputShapeError(
            f"artifacts must be an iterable of records, got {type(artifacts).__name__}"
        )

    records: list[ArtifactRecord] = []
    for position, item in enumerate(artifacts):
        if isinstance(item, ArtifactRecord):
            records.append(item)
            continue
        if not isinstance(item, Mapping):
            logger.debug(f"Ignoring artifact #{position}: not a mapping ({type(item).__name__})")
            continue
        try:
            records.append(ArtifactRecord.model_validate(dict(item)))
        except ValidationError as e:
            logger.debug(f"Ignoring artifact #{position}: {e.error_count()} invalid field(s)")
    return records


def coerce_criteria(criteria: ProjectCriteria | Mapping[str, Any] | None) -> ProjectCriteria:
    """Accept criteria as a model, a plain dict, or None.

    Fields that cannot be read (e.g. ``episode_count="ten"``) are dropped and
    fall back to unset; the rest of the criteria still apply.

    Raises:
        InputShapeError: if ``criteria`` is not a mapping
    """
    if criteria is None:
        return ProjectCriteria()
    if isinstance(criteria, ProjectCriteria):
        return criteria
    if not isinstance(criteria, Mapping):
        raise InputShapeError(f"criteria must be a mapping, got {type(criteria).__name__}")

    data = dict(criteria)
    while True:
        try:
            return ProjectCriteria.model_validate(data)
        except ValidationError as e:
            # loc[0] is the key as supplied, alias included
            unreadable = {err["loc"][0] for err in e.errors() if err["loc"]} & data.keys()
            if not unreadable:
                return ProjectCriteria()
            logger.debug(f"Ignoring unreadable criteria field(s): {', '.join(sorted(map(str, unreadable)))}")
            data = {k: v for k, v in data.items() if k not in unreadable}
