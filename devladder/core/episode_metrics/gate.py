"""Per-episode admission gate.

An episode must clear this floor before it is marked complete or the next
episode may be generated.
"""

from devladder.core.episode_metrics.types import GateResult, MetricSnapshot, MetricsConfig
from devladder.core.messages import metric_gate_copy


def metrics_pass_gate(metrics: MetricSnapshot, config: MetricsConfig | None = None) -> GateResult:
    """Check retention, cliffhanger, confusion and outstanding high-severity fixes.

    Every failing condition contributes one reason, in that order.
    """
    config = config or MetricsConfig.from_settings()
    failures: list[tuple[str, str]] = []

    retention = metrics.retention.score
    if retention < config.min_retention:
        failures.append((
            "retention_low",
            metric_gate_copy("retention_low", value=retention, threshold=config.min_retention),
        ))

    if metrics.cliffhanger_strength < config.min_cliffhanger:
        failures.append((
            "cliffhanger_weak",
            metric_gate_copy(
                "cliffhanger_weak",
                value=metrics.cliffhanger_strength,
                threshold=config.min_cliffhanger,
            ),
        ))

    if metrics.confusion_risk > config.max_confusion:
        failures.append((
            "confusion_high",
            metric_gate_copy(
                "confusion_high", value=metrics.confusion_risk, threshold=config.max_confusion
            ),
        ))

    high = sum(1 for r in metrics.recommendations if r.severity == "high")
    if high:
        failures.append((
            "high_severity_recommendation",
            metric_gate_copy("high_severity_recommendation", count=high),
        ))

    return GateResult(
        passed=not failures,
        reasons=[text for _, text in failures],
        reason_codes=[code for code, _ in failures],
    )
