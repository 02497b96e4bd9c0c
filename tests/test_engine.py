from __future__ import annotations

import json

import pytest

from offer_core.engine import evaluate, evaluate_form, gate_result_of, score, to_payload
from offer_core.errors import ValidationError
from tests.conftest import build_form, build_input, example_one_form, small_coaching_form


def test_strong_offer_end_to_end(base_form):
    ev = evaluate(base_form)
    result = ev.score_result
    assert result.raw_score == 80
    assert result.alignment_score == 80
    assert result.readiness_label == "Strong"
    assert result.outbound_ready is True
    assert result.triggered_hard_gates == ()
    assert result.triggered_soft_gates == ()
    assert result.score_cap is None
    assert result.primary_bottleneck.dimension == "economic_feasibility"
    assert result.is_at_local_optimum is False
    assert result.primary_bottleneck.severity == "moderate"
    assert ev.recommendations == ()


def test_small_buyer_coaching_end_to_end():
    ev = evaluate_form(small_coaching_form())
    assert ev.score_result.alignment_score == 75
    assert ev.score_result.readiness_label == "Moderate"
    assert ev.score_result.outbound_ready is True
    assert [r.category for r in ev.recommendations] == ["pricing_shift"]


def test_capped_and_blocked_end_to_end():
    ev = evaluate(example_one_form())
    result = ev.score_result
    assert result.raw_score == 76
    assert result.score_cap == 75
    assert result.alignment_score == 75
    assert result.readiness_label == "Moderate"
    assert result.outbound_ready is False
    assert result.triggered_hard_gates == ("unsustainable_economics",)
    assert result.triggered_soft_gates == ("compensation_friction",)
    assert result.primary_bottleneck.dimension == "risk_alignment"
    assert result.primary_bottleneck.severity == "blocking"
    assert ev.recommendations[0].severity == "blocking"


def test_broad_icp_with_moderate_proof_is_not_ready():
    result = score(build_input(icp_specificity="broad", proof_level="moderate"))
    assert result.raw_score == 73
    assert result.alignment_score == 73
    assert result.triggered_hard_gates == ("broad_icp_unproven",)
    assert result.triggered_soft_gates == ("volume_promise_moderate_proof",)
    assert result.outbound_ready is False
    assert result.primary_bottleneck.dimension == "icp_specificity"
    assert result.primary_bottleneck.severity == "blocking"


def test_deterministic():
    form = example_one_form()
    first, second = evaluate(form), evaluate(dict(form))
    assert first == second
    assert json.dumps(to_payload(first), sort_keys=True) == json.dumps(to_payload(second), sort_keys=True)


def test_incomplete_raises_before_scoring():
    with pytest.raises(ValidationError) as exc:
        evaluate(build_form(offer_type=None))
    assert "offer_type" in exc.value.fields


def test_gate_result_round_trip():
    result = score(example_one_form())
    gates = gate_result_of(result)
    assert gates.hard_gates == result.triggered_hard_gates
    assert gates.score_cap == 75


def test_payload_is_json_ready():
    payload = to_payload(evaluate(example_one_form()))
    text = json.dumps(payload)
    assert isinstance(payload["score_result"]["triggered_hard_gates"], list)
    assert payload["score_result"]["latent_scores"]["risk_alignment"] == 10
    assert isinstance(payload["recommendations"][0]["action_steps"], list)
    assert "unsustainable_economics" in text
