"""Unit tests for composite readiness scoring in grant_engine/core/cre/score.py.

Tests coverage:
- compute_composite() - weighted sum, rounding, missing and malformed domains
- classify_readiness() - threshold boundaries
- coerce_score() - clamping and coercion of untrusted judge values
"""

from decimal import Decimal

import pytest

from grant_engine.core.cre import (
    DOMAIN_WEIGHTS,
    Domain,
    DomainScore,
    ReadinessStatus,
    ScoreIssue,
    classify_readiness,
    coerce_score,
    compute_composite,
)


# =============================================================================
# Helpers
# =============================================================================


def _scores(**overrides):
    """All six domains at 0 unless overridden (domain name -> score)."""
    scores = {d.value: {"score": 0, "reasoning": f"{d.value} reasoning"} for d in Domain}
    for name, value in overrides.items():
        scores[name] = {"score": value, "reasoning": f"{name} reasoning"}
    return scores


def _uniform(value):
    return {d.value: {"score": value, "reasoning": ""} for d in Domain}


# =============================================================================
# Weights
# =============================================================================


def test_weights_sum_to_one():
    assert sum(Decimal(str(w)) for w in DOMAIN_WEIGHTS.values()) == Decimal("1")


def test_weights_cover_every_domain():
    assert set(DOMAIN_WEIGHTS) == {d.value for d in Domain}
    assert DOMAIN_WEIGHTS["hypothesisClarity"] == 0.20
    assert DOMAIN_WEIGHTS["novelty"] == 0.20
    assert DOMAIN_WEIGHTS["fundingAlignment"] == 0.15


# =============================================================================
# compute_composite
# =============================================================================


class TestComputeComposite:
    def test_all_perfect_is_competitive(self):
        result = compute_composite(_uniform(100))

        assert result.overall_score == 100
        assert result.readiness_status == ReadinessStatus.COMPETITIVE

    def test_all_zero_is_high_risk(self):
        result = compute_composite(_uniform(0))

        assert result.overall_score == 0
        assert result.readiness_status == ReadinessStatus.HIGH_RISK

    def test_empty_input_is_high_risk(self):
        result = compute_composite({})

        assert result.overall_score == 0
        assert result.readiness_status == ReadinessStatus.HIGH_RISK
        assert len(result.missing_domains) == 6

    def test_weighted_sum(self):
        """80*0.20 + 80*0.20 + 60*0.15*4 = 68."""
        result = compute_composite(
            _scores(
                hypothesisClarity=80,
                novelty=80,
                mechanisticDepth=60,
                statisticalRigor=60,
                feasibility=60,
                fundingAlignment=60,
            )
        )

        assert result.overall_score == 68
        assert result.readiness_status == ReadinessStatus.NEEDS_REVISION
        assert result.domains["hypothesisClarity"].weighted_score == pytest.approx(16.0)
        assert result.domains["feasibility"].weighted_score == pytest.approx(9.0)

    def test_rounds_half_up(self):
        """5*0.20 + 10*0.15 = 2.5 rounds to 3, not banker's 2."""
        result = compute_composite(_scores(hypothesisClarity=5, mechanisticDepth=10))

        assert result.overall_score == 3

    def test_rounds_down_below_half(self):
        """1*0.20 + 1*0.15 = 0.35 rounds to 0."""
        result = compute_composite(_scores(novelty=1, feasibility=1))

        assert result.overall_score == 0

    @pytest.mark.parametrize(
        "score,expected",
        [
            (75, ReadinessStatus.COMPETITIVE),
            (74, ReadinessStatus.NEEDS_REVISION),
            (55, ReadinessStatus.NEEDS_REVISION),
            (54, ReadinessStatus.HIGH_RISK),
        ],
    )
    def test_status_boundaries_through_composite(self, score, expected):
        result = compute_composite(_uniform(score))

        assert result.overall_score == score
        assert result.readiness_status == expected

    def test_score_above_range_treated_as_100(self):
        over = compute_composite(_scores(novelty=150))
        capped = compute_composite(_scores(novelty=100))

        assert over.overall_score == capped.overall_score == 20
        assert over.domains["novelty"].score == 100
        assert over.domains["novelty"].issue == ScoreIssue.OUT_OF_RANGE
        assert "novelty" in over.invalid_domains

    @pytest.mark.parametrize("bad", [-10, float("nan"), "high", None, [], {"nested": 1}, True])
    def test_malformed_score_treated_as_zero(self, bad):
        base = _uniform(80)
        bad_input = dict(base)
        bad_input["feasibility"] = {"score": bad, "reasoning": "x"}
        zero_input = dict(base)
        zero_input["feasibility"] = {"score": 0, "reasoning": "x"}

        result = compute_composite(bad_input)

        assert result.overall_score == compute_composite(zero_input).overall_score
        assert result.domains["feasibility"].score == 0

    def test_missing_domain_equals_zero(self):
        full = _uniform(90)
        without = {k: v for k, v in full.items() if k != "fundingAlignment"}
        zeroed = dict(full)
        zeroed["fundingAlignment"] = {"score": 0, "reasoning": ""}

        missing = compute_composite(without)
        explicit = compute_composite(zeroed)

        assert missing.overall_score == explicit.overall_score == 77
        assert missing.readiness_status == explicit.readiness_status
        assert missing.domains["fundingAlignment"].issue == ScoreIssue.MISSING
        assert missing.missing_domains == ["fundingAlignment"]

    def test_mapping_without_score_is_missing(self):
        result = compute_composite({"novelty": {"reasoning": "no score given"}})

        assert result.domains["novelty"].score == 0
        assert result.domains["novelty"].issue == ScoreIssue.MISSING

    def test_idempotent(self):
        payload = _scores(hypothesisClarity=71, novelty=64, statisticalRigor=88)

        assert compute_composite(payload) == compute_composite(payload)

    def test_does_not_mutate_input(self):
        payload = _scores(novelty=150)
        snapshot = {k: dict(v) for k, v in payload.items()}

        compute_composite(payload)

        assert payload == snapshot

    @pytest.mark.parametrize("garbage", [None, "not a mapping", 42, ["novelty"]])
    def test_non_mapping_input_never_raises(self, garbage):
        result = compute_composite(garbage)

        assert result.overall_score == 0
        assert result.readiness_status == ReadinessStatus.HIGH_RISK

    def test_accepts_domain_score_models(self):
        payload = {
            d.value: DomainScore(domain=d, score=80, reasoning="solid") for d in Domain
        }

        result = compute_composite(payload)

        assert result.overall_score == 80
        assert result.domains["novelty"].reasoning == "solid"

    def test_accepts_enum_keys(self):
        result = compute_composite({Domain.NOVELTY: {"score": 100}})

        assert result.domains["novelty"].score == 100
        assert result.overall_score == 20

    def test_bare_numeric_entry_is_score(self):
        result = compute_composite({"novelty": 50})

        assert result.domains["novelty"].score == 50
        assert result.overall_score == 10

    def test_reasoning_passed_through(self):
        result = compute_composite(_scores(novelty=70))

        assert result.domains["novelty"].reasoning == "novelty reasoning"
        assert result.domains["novelty"].weight == 0.20

    def test_non_string_reasoning_dropped(self):
        result = compute_composite({"novelty": {"score": 70, "reasoning": 12}})

        assert result.domains["novelty"].reasoning == ""

    def test_upstream_issues_applied_to_coerced_scores(self):
        payload = _uniform(80)
        payload["novelty"] = {"score": 100, "reasoning": ""}

        result = compute_composite(payload, issues={"novelty": ScoreIssue.OUT_OF_RANGE})

        assert result.domains["novelty"].issue == ScoreIssue.OUT_OF_RANGE
        assert result.invalid_domains == ["novelty"]
        assert result.overall_score == compute_composite(payload).overall_score

    def test_own_issue_wins_over_upstream(self):
        result = compute_composite({}, issues={"novelty": ScoreIssue.NON_NUMERIC})

        assert result.domains["novelty"].issue == ScoreIssue.MISSING


# =============================================================================
# classify_readiness
# =============================================================================


class TestClassifyReadiness:
    @pytest.mark.parametrize(
        "score,expected",
        [
            (100, ReadinessStatus.COMPETITIVE),
            (75, ReadinessStatus.COMPETITIVE),
            (74, ReadinessStatus.NEEDS_REVISION),
            (55, ReadinessStatus.NEEDS_REVISION),
            (54, ReadinessStatus.HIGH_RISK),
            (0, ReadinessStatus.HIGH_RISK),
        ],
    )
    def test_thresholds(self, score, expected):
        assert classify_readiness(score) == expected


# =============================================================================
# coerce_score
# =============================================================================


class TestCoerceScore:
    def test_in_range_integer_untouched(self):
        assert coerce_score(73) == (73, None)

    def test_numeric_string_accepted(self):
        assert coerce_score(" 85 ") == (85, None)

    def test_fraction_rounds_half_up(self):
        assert coerce_score(72.5) == (73, None)

    def test_clamps_high(self):
        assert coerce_score(150) == (100, ScoreIssue.OUT_OF_RANGE)

    def test_clamps_low(self):
        assert coerce_score(-10) == (0, ScoreIssue.OUT_OF_RANGE)

    @pytest.mark.parametrize(
        "value", [float("nan"), float("inf"), "NaN", "eighty", "", None, True, object()]
    )
    def test_non_numeric_is_zero(self, value):
        assert coerce_score(value) == (0, ScoreIssue.NON_NUMERIC)
