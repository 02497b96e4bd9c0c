from __future__ import annotations

import pytest

import offer_core.aggregate as aggregate_module
from offer_core.aggregate import (
    BOTTLENECK_PRIORITY,
    DIMENSION_WEIGHTS,
    aggregate,
    check_weights,
    primary_bottleneck,
    raw_score,
    readiness_label,
)
from offer_core.errors import ConfigurationDefect
from offer_core.types import GateResult, LatentScores


def _scores(**values: int) -> LatentScores:
    base = dict.fromkeys(DIMENSION_WEIGHTS, 10)
    base.update(values)
    return LatentScores(**base)


def test_raw_score_range_and_rounding():
    assert raw_score(_scores(**dict.fromkeys(DIMENSION_WEIGHTS, 20))) == 100
    assert raw_score(_scores(**dict.fromkeys(DIMENSION_WEIGHTS, 0))) == 0
    assert raw_score(_scores()) == 50
    # 50.5 rounds half up
    assert raw_score(_scores(economic_feasibility=9, fulfillment_scalability=11, risk_alignment=11)) == 51


def test_readiness_thresholds():
    assert readiness_label(100) == "Strong"
    assert readiness_label(80) == "Strong"
    assert readiness_label(79) == "Moderate"
    assert readiness_label(60) == "Moderate"
    assert readiness_label(59) == "Weak"
    assert readiness_label(0) == "Weak"


def test_cap_only_lowers():
    high = _scores(**dict.fromkeys(DIMENSION_WEIGHTS, 18))
    capped = aggregate(high, GateResult(soft_gates=("marginal_economics",), score_cap=69))
    assert capped.raw_score == 90
    assert capped.alignment_score == 69
    assert capped.readiness_label == "Moderate"

    low = aggregate(_scores(), GateResult(soft_gates=("marginal_economics",), score_cap=69))
    assert low.alignment_score == low.raw_score == 50


def test_hard_gate_blocks_readiness_at_any_score():
    strong = _scores(**dict.fromkeys(DIMENSION_WEIGHTS, 19))
    result = aggregate(strong, GateResult(hard_gates=("guarantee_without_proof",)))
    assert result.alignment_score == 95
    assert result.readiness_label == "Strong"
    assert result.outbound_ready is False
    assert result.score_cap is None


def test_ready_needs_sixty():
    assert aggregate(_scores(**dict.fromkeys(DIMENSION_WEIGHTS, 12)), GateResult()).outbound_ready is True
    assert aggregate(_scores(), GateResult()).outbound_ready is False


def test_bottleneck_tie_break():
    assert primary_bottleneck(_scores(), GateResult()).dimension == "economic_feasibility"
    tie = _scores(economic_feasibility=15, proof_promise=15, fulfillment_scalability=15, channel_fit=4, risk_alignment=4, icp_specificity=15)
    assert primary_bottleneck(tie, GateResult()).dimension == "channel_fit"


def test_bottleneck_severity_follows_hard_gates():
    scores = _scores(risk_alignment=3)
    moderate = primary_bottleneck(scores, GateResult(hard_gates=("proof_promise_gap",)))
    assert moderate.dimension == "risk_alignment"
    assert moderate.severity == "moderate"
    assert "primary constraint" in moderate.explanation

    blocking = primary_bottleneck(scores, GateResult(hard_gates=("guarantee_without_proof",)))
    assert blocking.severity == "blocking"
    assert blocking.explanation.startswith("Outbound is blocked due to Risk Alignment")


def test_weights_cover_every_dimension_once(monkeypatch):
    check_weights()
    assert sum(DIMENSION_WEIGHTS.values()) == 100

    monkeypatch.setitem(DIMENSION_WEIGHTS, "channel_fit", 15)
    with pytest.raises(ConfigurationDefect) as exc:
        check_weights()
    assert exc.value.table == "DIMENSION_WEIGHTS"
    assert exc.value.value == 99

    monkeypatch.setitem(DIMENSION_WEIGHTS, "channel_fit", 16)
    monkeypatch.setattr(aggregate_module, "BOTTLENECK_PRIORITY", BOTTLENECK_PRIORITY[:-1])
    with pytest.raises(ConfigurationDefect) as exc:
        check_weights()
    assert exc.value.table == "BOTTLENECK_PRIORITY"
    assert exc.value.value == ["icp_specificity"]


def test_local_optimum_flag():
    core = dict(economic_feasibility=14, proof_promise=14, fulfillment_scalability=14, channel_fit=14)
    assert aggregate(_scores(**core), GateResult()).is_at_local_optimum is True
    # risk and icp are not core dimensions
    assert aggregate(_scores(**core, risk_alignment=0, icp_specificity=0), GateResult()).is_at_local_optimum is True
    assert aggregate(_scores(**{**core, "channel_fit": 13}), GateResult()).is_at_local_optimum is False
