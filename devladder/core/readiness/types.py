"""Pydantic models for readiness gates and scoring."""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from devladder.core.config import get_settings

Severity = Literal["high", "med", "low"]


# =============================================================================
# Gate Types
# =============================================================================


class Gate(BaseModel):
    """A named boolean prerequisite with a remediation hint."""

    code: str = Field(..., description="Gate code (e.g. 'episode_grid')")
    label: str = Field(..., description="Human label")
    met: bool = Field(..., description="Whether this gate is met")
    how_to_fix: str | None = Field(None, description="Remediation hint; None when met")


class GateReport(BaseModel):
    """Result of evaluating all applicable hand-off gates for a format."""

    gates: list[Gate] = Field(default_factory=list)
    eligible: bool = Field(..., description="Every applicable gate is met")
    message_code: str = Field(..., description="'handoff_ready' or 'handoff_prerequisites_pending'")
    message: str = Field(..., description="Rendered message for message_code")

    @property
    def met_count(self) -> int:
        return sum(1 for g in self.gates if g.met)


# =============================================================================
# Readiness Scoring Types
# =============================================================================


class Blocker(BaseModel):
    """A specific unmet condition, in evaluation order."""

    code: str = Field(..., description="Machine code (e.g. 'GRID_INCOMPLETE')")
    reason: str = Field(..., description="Finer-grained reason key into the copy table")
    severity: Severity
    message: str
    how_to_fix: str
    target_stage: str = Field(..., description="Stage the user should be routed to")


class ReadinessWeights(BaseModel):
    """Component weights for the composite readiness score. Must sum to 1.0."""

    episode_grid_integrity: float = Field(default=0.25, ge=0, le=1)
    blueprint_stability: float = Field(default=0.25, ge=0, le=1)
    character_bible_completeness: float = Field(default=0.20, ge=0, le=1)
    episode1_quality: float = Field(default=0.20, ge=0, le=1)
    canon_consistency: float = Field(default=0.10, ge=0, le=1)

    @model_validator(mode="after")
    def _check_sum(self) -> "ReadinessWeights":
        total = sum(self.model_dump().values())
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"readiness weights must sum to 1.0, got {total:.4f}")
        return self


class ReadinessConfig(BaseModel):
    """Injectable weights and thresholds for compute_readiness_score."""

    weights: ReadinessWeights = Field(default_factory=ReadinessWeights)
    eligible_threshold: float = Field(default=75, ge=0, le=100)
    almost_ready_threshold: float = Field(default=60, ge=0, le=100)
    max_blockers: int = Field(default=6, ge=1)

    # Episode 1 screenplay format
    min_scene_headings: int = Field(default=6, ge=0)
    min_dialogue_blocks: int = Field(default=12, ge=0)
    default_quality_signal: float = Field(
        default=70, description="Retention/cliffhanger assumed when not measured"
    )
    min_quality_signal: float = Field(default=60, description="Below this a med blocker is raised")

    # Canon
    default_canon_score: float = Field(default=80)
    min_canon_score: float = Field(default=70)
    drift_flag_ceiling: float = Field(default=50, description="Canon clamp when high drift flags are open")

    # Text checks
    placeholder_tokens: tuple[str, ...] = ("TBD", "TK", "???", "TODO", "PLACEHOLDER", "[TBD]", "[TK]")
    grid_keywords: tuple[str, ...] = ("hook", "conflict", "escalation", "cliffhanger")
    arc_keywords: tuple[str, ...] = ("midpoint", "climax", "finale")
    arc_stakes_keywords: tuple[str, ...] = ("stakes", "escalat")
    bible_keywords: tuple[str, ...] = ("want", "flaw", "arc", "relationship")

    @classmethod
    def from_settings(cls) -> "ReadinessConfig":
        settings = get_settings()
        return cls(
            eligible_threshold=settings.READINESS_ELIGIBLE_THRESHOLD,
            max_blockers=settings.READINESS_MAX_BLOCKERS,
        )


def _clamp_count(value: Any) -> Any:
    """None and negative counts read as 0."""
    if value is None:
        return 0
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value < 0:
        return 0
    return value


class EpisodeOneEvidence(BaseModel):
    """Measured facts about the Episode 1 script, supplied by the caller."""

    script_text: str | None = None
    approved: bool | None = None
    scene_heading_count: int = Field(default=0, ge=0)
    dialogue_block_count: int = Field(default=0, ge=0)
    cliffhanger_strength: float | None = None
    retention_score: float | None = None

    @field_validator("scene_heading_count", "dialogue_block_count", mode="before")
    @classmethod
    def _clamp_counts(cls, value: Any) -> Any:
        return _clamp_count(value)


class ReadinessInput(BaseModel):
    """Everything compute_readiness_score looks at. Absent data is just absent."""

    format_key: str | None = Field(None, description="Used to resolve format-specific doc type aliases")
    existing_doc_types: list[str] = Field(default_factory=list)
    season_episode_count: int | None = None

    episode_grid_text: str | None = None
    episode_grid_approved: bool = False
    blueprint_text: str | None = None
    blueprint_approved: bool = False
    character_bible_text: str | None = None
    character_bible_approved: bool = False

    episode1_script_text: str | None = None
    episode1_approved: bool = False
    episode1_scene_heading_count: int = Field(default=0, ge=0)
    episode1_dialogue_block_count: int = Field(default=0, ge=0)
    episode1_cliffhanger_strength: float | None = None
    episode1_retention_score: float | None = None

    open_high_drift_flags: int = Field(default=0, ge=0)
    canon_consistency_score: float | None = None

    @field_validator(
        "episode1_scene_heading_count",
        "episode1_dialogue_block_count",
        "open_high_drift_flags",
        mode="before",
    )
    @classmethod
    def _clamp_counts(cls, value: Any) -> Any:
        return _clamp_count(value)

    @field_validator("season_episode_count", mode="before")
    @classmethod
    def _non_positive_count_is_unset(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value <= 0:
            return None
        return value


class ReadinessResult(BaseModel):
    """Composite readiness assessment. Identical input → identical JSON."""

    score: float = Field(..., ge=0, le=100, description="Weighted composite score")
    components: dict[str, float] = Field(..., description="Component scores, 0-100")
    gates: dict[str, bool] = Field(..., description="Per-component pass/fail gates")
    blockers: list[Blocker] = Field(default_factory=list, description="First N blockers in evaluation order")
    eligible: bool
    threshold: float
    recommendation: str = Field(..., description="'ready', 'almost_ready' or 'not_stable'")
    recommendation_message: str
