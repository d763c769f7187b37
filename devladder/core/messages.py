"""Copy table: maps decision codes to human-readable text.

The engines only emit codes and parameters. Everything a user reads is
looked up here, so wording can change without touching scoring logic.
"""

from typing import Any

# =============================================================================
# Readiness blockers: reason → (message, how_to_fix)
# =============================================================================

BLOCKER_COPY: dict[str, tuple[str, str]] = {
    "episode_count_missing": (
        "Season episode count not defined",
        "Set season_episode_count in project qualifications.",
    ),
    "grid_missing": (
        "Episode Grid document not found",
        "Create an Episode Grid through the pipeline.",
    ),
    "grid_placeholders": (
        "Episode Grid contains placeholder tokens (TBD, TK)",
        "Replace all placeholder text with actual content.",
    ),
    "arc_missing": (
        "Blueprint / Season Arc not found",
        "Create a Season Blueprint through the pipeline.",
    ),
    "bible_missing": (
        "Character Bible not found",
        "Create a Character Bible through the pipeline.",
    ),
    "bible_placeholders": (
        "Character Bible has placeholder motivations",
        "Fill in all character wants, flaws, and arc directions.",
    ),
    "ep1_missing": (
        "Episode 1 script not found",
        "Generate Episode 1 script through the pipeline.",
    ),
    "ep1_format_weak": (
        "Episode 1 script format weak ({scene_headings} scenes, {dialogue_blocks} dialogue blocks)",
        "Rewrite Episode 1 to meet screenplay format requirements "
        "(≥{min_scene_headings} scene headings, ≥{min_dialogue_blocks} dialogue blocks).",
    ),
    "ep1_cliffhanger_weak": (
        "Episode 1 cliffhanger is weak",
        "Strengthen the cliffhanger ending of Episode 1.",
    ),
    "ep1_retention_low": (
        "Episode 1 retention score is low",
        "Improve hook strength and pacing in Episode 1.",
    ),
    "canon_drift_flags": (
        "{count} unresolved high-severity drift flag(s)",
        "Resolve all major drift flags before entering Series Writer.",
    ),
    "canon_score_low": (
        "Canon consistency score is {score:g} (minimum {minimum:g} required)",
        "Resolve conflicts between documents to improve canon consistency.",
    ),
}

RECOMMENDATION_COPY: dict[str, str] = {
    "ready": "Ready to enter Series Writer mode — generate Episodes 2–N.",
    "almost_ready": "Almost ready. Refine the blockers below before scaling.",
    "not_stable": "Structure not stable for Series Writer. Address high-severity blockers first.",
}

# =============================================================================
# Hand-off gates: code → (label, how_to_fix)
# =============================================================================

GATE_COPY: dict[str, tuple[str, str]] = {
    "episode_grid": (
        "Episode Grid exists",
        "Create an Episode Grid through the pipeline.",
    ),
    "character_bible": (
        "Character Bible exists",
        "Create a Character Bible through the pipeline.",
    ),
    "season_arc_or_blueprint": (
        "{arc_label} exists",
        "Create a {arc_label} first.",
    ),
    "episode_1_script": (
        "Episode 1 script exists",
        "Generate or create the Episode 1 script.",
    ),
    "episode_count_set": (
        "Episode count configured",
        "Set season_episode_count in project qualifications.",
    ),
    "format_rules": (
        "Format Rules defined",
        "Create Format Rules through the pipeline.",
    ),
}

GATE_REPORT_COPY: dict[str, str] = {
    "handoff_ready": "Ready for Series Writer — generate episodes 2–N under locked constraints.",
    "handoff_prerequisites_pending": "{met}/{total} prerequisites met. Complete the remaining items.",
}

# =============================================================================
# Pipeline next steps: reason → text
# =============================================================================

NEXT_STEP_COPY: dict[str, str] = {
    "approve_before_proceeding": "Approve {label} before proceeding",
    "needs_approval": "{label} needs approval",
    "next_in_pipeline": "Next in {format_key} pipeline",
    "backfill_missing_stage": "{label} is missing from the {format_key} pipeline",
    "all_stages_created": "All pipeline stages created — review and converge",
    "handoff_ready": "All prerequisites met — generate remaining episodes",
}

# =============================================================================
# Episode metrics gate: reason → text
# =============================================================================

METRIC_GATE_COPY: dict[str, str] = {
    "retention_low": "Retention score {value:g} is below the minimum of {threshold:g}",
    "cliffhanger_weak": "Cliffhanger strength {value:g} is below the minimum of {threshold:g}",
    "confusion_high": "Confusion risk {value:g} exceeds the maximum of {threshold:g}",
    "high_severity_recommendation": "{count} high-severity rewrite recommendation(s) outstanding",
}


def render(template: str, **params: Any) -> str:
    """Fill a copy template; missing params leave the template untouched."""
    try:
        return template.format(**params)
    except (KeyError, IndexError, ValueError):
        return template


def blocker_copy(reason: str, **params: Any) -> tuple[str, str]:
    message, how_to_fix = BLOCKER_COPY[reason]
    return render(message, **params), render(how_to_fix, **params)


def gate_copy(code: str, **params: Any) -> tuple[str, str]:
    label, how_to_fix = GATE_COPY[code]
    return render(label, **params), render(how_to_fix, **params)


def next_step_copy(reason: str, **params: Any) -> str:
    return render(NEXT_STEP_COPY[reason], **params)


def metric_gate_copy(reason: str, **params: Any) -> str:
    return render(METRIC_GATE_COPY[reason], **params)
