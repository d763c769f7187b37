"""Tests for devladder.core.episode_metrics — target curve, drift flags and gate."""

import pytest
from pydantic import ValidationError

from devladder.core.episode_metrics import (
    CompositeMetrics,
    MetricSnapshot,
    MetricsConfig,
    Recommendation,
    TensionMetrics,
    build_snapshot,
    composite_score,
    detect_tension_flags,
    metrics_pass_gate,
    season_health,
    target_tension,
)
from devladder.core.errors import InputShapeError

# =============================================================================
# Helpers: build snapshots
# =============================================================================

CONFIG = MetricsConfig()


def _snap(
    episode: int,
    level: float = 60,
    delta: float = 0,
    gap: float = 0,
    retention: float = 75,
    engagement: float = 70,
    cliffhanger: float = 75,
    confusion: float = 20,
    severities: tuple[str, ...] = (),
    flags: tuple[str, ...] = (),
) -> MetricSnapshot:
    return MetricSnapshot(
        episode_number=episode,
        tension=TensionMetrics(
            tension_level=level, tension_delta=delta, tension_gap=gap, flags=list(flags)
        ),
        retention=CompositeMetrics(score=retention),
        engagement=CompositeMetrics(score=engagement),
        cliffhanger_strength=cliffhanger,
        confusion_risk=confusion,
        recommendations=[Recommendation(type="pacing", severity=s, note="tighten") for s in severities],
    )


def _raw(level: float | None, retention: float = 80, engagement: float = 50, **extra) -> dict:
    return {
        "tension_level": level,
        "retention_factors": {
            "hook_strength": retention,
            "clarity": retention,
            "payoff_density": retention,
            "emotional_stakes": retention,
            "cliffhanger_strength": retention,
        },
        "engagement_factors": {
            "comment_bait": engagement,
            "shareability": engagement,
            "character_attachment": engagement,
            "twist_intensity": engagement,
        },
        **extra,
    }


# =============================================================================
# Target tension curve
# =============================================================================


class TestTargetTension:
    def test_segment_anchors(self):
        assert target_tension(0, 20) == pytest.approx(40)
        assert target_tension(3, 20) == pytest.approx(65)
        assert target_tension(12, 20) == pytest.approx(78)
        assert target_tension(17, 20) == pytest.approx(88)
        assert target_tension(20, 20) == pytest.approx(95)

    @pytest.mark.parametrize("boundary", [15, 60, 85])
    def test_continuous_at_boundaries(self, boundary):
        eps = 1e-6
        left = target_tension(boundary - eps, 100)
        right = target_tension(boundary + eps, 100)
        assert left == pytest.approx(right, abs=1e-3)

    @pytest.mark.parametrize("total", [8, 20, 30, 60, 100])
    def test_bounded(self, total):
        for n in range(1, total + 1):
            value = target_tension(n, total)
            assert 40 <= value <= 95
            if 0.15 < n / total <= 0.60:
                assert value <= 85

    def test_middle_wave_stays_near_base(self):
        total = 100
        for n in range(16, 61):
            t = (n / total - 0.15) / 0.45
            base = 60 + 15 * t + 5 - 2 * t
            assert abs(target_tension(n, total) - base) <= 5 + 1e-9

    def test_out_of_range_episode_numbers_clamp(self):
        assert target_tension(-4, 20) == pytest.approx(40)
        assert target_tension(45, 20) == pytest.approx(95)

    @pytest.mark.parametrize("total", [0, -3])
    def test_non_positive_total_raises(self, total):
        with pytest.raises(InputShapeError):
            target_tension(1, total)

    def test_deterministic(self):
        assert [target_tension(n, 30) for n in range(31)] == [target_tension(n, 30) for n in range(31)]


# =============================================================================
# Composites
# =============================================================================


class TestCompositeScore:
    def test_uniform_factors(self):
        assert composite_score(_raw(50)["retention_factors"], CONFIG.retention_weights) == 80

    def test_missing_factors_count_as_zero(self):
        assert composite_score({"hook_strength": 100}, CONFIG.retention_weights) == 25

    def test_extra_factors_ignored(self):
        factors = {**_raw(50, engagement=40)["engagement_factors"], "virality": 100}
        assert composite_score(factors, CONFIG.engagement_weights) == 40

    def test_clamped(self):
        factors = {name: 1000 for name in CONFIG.engagement_weights}
        assert composite_score(factors, CONFIG.engagement_weights) == 100

    def test_bad_weights_raise(self):
        with pytest.raises(InputShapeError):
            composite_score({"a": 50}, {"a": 0.5})

    def test_config_validates_weights(self):
        with pytest.raises(ValidationError):
            MetricsConfig(retention_weights={"hook_strength": 0.9})
        with pytest.raises(ValidationError):
            MetricsConfig(engagement_weights={"comment_bait": 1.5, "shareability": -0.5})


# =============================================================================
# Drift flags
# =============================================================================


class TestTensionFlags:
    def test_no_history_never_raises(self):
        assert detect_tension_flags(_snap(1), [], CONFIG) == []

    def test_overheat(self):
        flags = detect_tension_flags(_snap(5, gap=20), [_snap(4, gap=16)], CONFIG)
        assert flags == ["overheat_risk"]

    def test_overheat_needs_prior_above_margin(self):
        assert detect_tension_flags(_snap(5, gap=20), [_snap(4, gap=15)], CONFIG) == []
        assert detect_tension_flags(_snap(5, gap=20), [], CONFIG) == []

    def test_overheat_uses_immediately_prior(self):
        history = [_snap(2, gap=30, delta=10), _snap(3, gap=0, delta=10)]
        assert detect_tension_flags(_snap(4, gap=30, delta=10), history, CONFIG) == []

    def test_flatline(self):
        history = [_snap(1, delta=0), _snap(2, delta=-3), _snap(3, delta=5)]
        assert detect_tension_flags(_snap(4, delta=2), history, CONFIG) == ["flatline_risk"]

    def test_flatline_needs_two_prior(self):
        assert detect_tension_flags(_snap(2, delta=0), [_snap(1, delta=0)], CONFIG) == []

    def test_flatline_broken_by_movement(self):
        history = [_snap(1, delta=0), _snap(2, delta=6)]
        assert detect_tension_flags(_snap(3, delta=0), history, CONFIG) == []

    @pytest.mark.parametrize("delta,expected", [(36, True), (-40, True), (35, False), (0, False)])
    def test_whiplash(self, delta, expected):
        flags = detect_tension_flags(_snap(1, delta=delta), [], CONFIG)
        assert ("whiplash_risk" in flags) is expected

    def test_overheat_and_whiplash_together(self):
        flags = detect_tension_flags(_snap(6, gap=25, delta=40), [_snap(5, gap=18)], CONFIG)
        assert flags == ["overheat_risk", "whiplash_risk"]

    def test_later_episodes_in_history_are_ignored(self):
        history = [_snap(3, gap=0), _snap(5, gap=40), _snap(4, gap=40)]
        assert detect_tension_flags(_snap(4, gap=30), history, CONFIG) == []

    def test_rescored_episode_counts_once_for_flatline(self):
        history = [_snap(1, delta=0), _snap(1, delta=1)]
        assert detect_tension_flags(_snap(2, delta=2), history, CONFIG) == []

    def test_rescored_episode_latest_entry_wins(self):
        history = [_snap(4, gap=30), _snap(4, gap=0)]
        assert detect_tension_flags(_snap(5, gap=30), history, CONFIG) == []
        history = [_snap(4, gap=0), _snap(4, gap=30)]
        assert detect_tension_flags(_snap(5, gap=30), history, CONFIG) == ["overheat_risk"]

    def test_out_of_order_history_uses_episode_order(self):
        history = [_snap(3, gap=20, delta=10), _snap(2, gap=0, delta=10)]
        assert detect_tension_flags(_snap(4, gap=20, delta=10), history, CONFIG) == ["overheat_risk"]

    def test_thresholds_are_configurable(self):
        config = MetricsConfig(whiplash_delta=10)
        assert detect_tension_flags(_snap(1, delta=12), [], config) == ["whiplash_risk"]


# =============================================================================
# Admission gate
# =============================================================================


class TestMetricsPassGate:
    def test_retention_only_failure(self):
        result = metrics_pass_gate(_snap(3, retention=59, cliffhanger=61, confusion=50), CONFIG)
        assert not result.passed
        assert len(result.reasons) == 1
        assert result.reason_codes == ["retention_low"]
        assert "Retention" in result.reasons[0]
        assert result.reasons[0] == "Retention score 59 is below the minimum of 60"

    def test_boundaries_pass(self):
        result = metrics_pass_gate(_snap(1, retention=60, cliffhanger=60, confusion=70), CONFIG)
        assert result.passed
        assert result.reasons == []

    def test_every_failure_in_order(self):
        snapshot = _snap(1, retention=10, cliffhanger=10, confusion=90, severities=("high", "med", "high"))
        result = metrics_pass_gate(snapshot, CONFIG)
        assert result.reason_codes == [
            "retention_low",
            "cliffhanger_weak",
            "confusion_high",
            "high_severity_recommendation",
        ]
        assert result.reasons[3] == "2 high-severity rewrite recommendation(s) outstanding"

    def test_medium_recommendations_do_not_fail(self):
        assert metrics_pass_gate(_snap(1, severities=("med", "low")), CONFIG).passed

    def test_default_config(self):
        assert metrics_pass_gate(_snap(1)).passed


# =============================================================================
# Snapshot derivation and season rollup
# =============================================================================


class TestBuildSnapshot:
    def test_first_episode(self):
        snapshot = build_snapshot(1, 20, _raw(45, confusion_risk=10), [], CONFIG)
        assert snapshot.tension.tension_target == pytest.approx(48.33)
        assert snapshot.tension.tension_gap == pytest.approx(-3.33)
        assert snapshot.tension.tension_delta == 0
        assert snapshot.retention.score == 80
        assert snapshot.engagement.score == 50
        assert snapshot.cliffhanger_strength == 80
        assert snapshot.confusion_risk == 10
        assert snapshot.tension.flags == []

    def test_delta_from_previous_episode(self):
        first = build_snapshot(1, 20, _raw(45), [], CONFIG)
        second = build_snapshot(2, 20, _raw(90), [first], CONFIG)
        assert second.tension.tension_delta == 45
        assert second.tension.flags == ["whiplash_risk"]

    def test_delta_from_out_of_order_history(self):
        history = [_snap(3, level=70), _snap(2, level=50)]
        snapshot = build_snapshot(4, 20, _raw(72), history, CONFIG)
        assert snapshot.tension.tension_delta == 2

    def test_delta_uses_rescored_previous_episode(self):
        history = [_snap(2, level=30), _snap(2, level=45), _snap(1, level=50)]
        snapshot = build_snapshot(3, 20, _raw(60), history, CONFIG)
        assert snapshot.tension.tension_delta == 15

    def test_supplied_delta_and_cliffhanger_win(self):
        snapshot = build_snapshot(
            2, 20, _raw(60, tension_delta=3, cliffhanger_strength=42), [_snap(1, level=10)], CONFIG
        )
        assert snapshot.tension.tension_delta == 3
        assert snapshot.cliffhanger_strength == 42

    def test_tension_composed_from_factors(self):
        factors = {"stakes": 80, "conflict": 60, "pacing": 60, "mystery": 50}
        snapshot = build_snapshot(1, 20, _raw(None, tension_factors=factors), [], CONFIG)
        assert snapshot.tension.tension_level == 64
        assert snapshot.tension.factors == factors
        assert snapshot.tension.tension_gap == pytest.approx(64 - 48.33)

    def test_measured_tension_wins_over_factors(self):
        raw = _raw(70, tension_factors={"stakes": 10})
        assert build_snapshot(1, 20, raw, [], CONFIG).tension.tension_level == 70

    def test_tension_level_or_factors_required(self):
        with pytest.raises(ValidationError):
            build_snapshot(1, 20, _raw(None), [], CONFIG)

    def test_tension_weights_validated(self):
        with pytest.raises(ValidationError):
            MetricsConfig(tension_weights={"stakes": 0.5})

    def test_invalid_episode_numbers(self):
        with pytest.raises(InputShapeError):
            build_snapshot(0, 20, _raw(50), [], CONFIG)
        with pytest.raises(InputShapeError):
            build_snapshot(1, 0, _raw(50), [], CONFIG)


class TestSeasonHealth:
    def test_rollup(self):
        history = [
            _snap(1, level=50, retention=80),
            _snap(2, level=60, retention=50, flags=("whiplash_risk",)),
            _snap(4, level=70, retention=80),
        ]
        health = season_health(history, 5, CONFIG)
        assert health.episodes_scored == 3
        assert health.avg_tension == 60
        assert health.avg_retention == 70
        assert health.avg_engagement == 70
        assert health.flag_count == 1
        assert health.flag_counts == {"whiplash_risk": 1}
        assert health.failing_episodes == [2]
        assert health.missing_episodes == [3, 5]

    def test_latest_snapshot_per_episode_wins(self):
        history = [_snap(1, retention=40), _snap(1, retention=90)]
        health = season_health(history, 1, CONFIG)
        assert health.episodes_scored == 1
        assert health.failing_episodes == []

    def test_empty_history(self):
        health = season_health([], 3, CONFIG)
        assert health.avg_retention is None
        assert health.missing_episodes == [1, 2, 3]

    def test_non_positive_total_raises(self):
        with pytest.raises(InputShapeError):
            season_health([], 0, CONFIG)
