from __future__ import annotations

import pytest

from offer_core.errors import ValidationError
from offer_core.gates import GATES, GATES_BY_ID, evaluate_gates, implicated_dimensions
from offer_core.scoring import score_dimensions
from offer_core.stability import price_band_status
from offer_core.types import LatentScores
from tests.conftest import build_input, example_one_form


def _flat(value: int = 15, **overrides: int) -> LatentScores:
    values = {
        "economic_feasibility": value,
        "proof_promise": value,
        "fulfillment_scalability": value,
        "risk_alignment": value,
        "channel_fit": value,
        "icp_specificity": value,
    }
    values.update(overrides)
    return LatentScores(**values)


def test_gate_table_shape():
    assert len(GATES_BY_ID) == len(GATES)
    for gate in GATES:
        if gate.kind == "hard":
            assert gate.cap is None
        else:
            assert 0 <= gate.cap <= 100


def test_clean_offer_triggers_nothing(base_input):
    result = evaluate_gates(base_input, score_dimensions(base_input))
    assert result.hard_gates == ()
    assert result.soft_gates == ()
    assert result.score_cap is None


def test_low_subscores_trip_hard_gates(base_input):
    result = evaluate_gates(base_input, _flat(economic_feasibility=4, proof_promise=6, fulfillment_scalability=6, channel_fit=6))
    assert result.hard_gates == ("economic_infeasibility", "proof_promise_gap", "fulfillment_ceiling", "channel_mismatch")
    assert result.score_cap is None


def test_hard_gate_boundaries(base_input):
    result = evaluate_gates(base_input, _flat(economic_feasibility=5, proof_promise=7, fulfillment_scalability=7, channel_fit=7))
    assert result.hard_gates == ()
    assert result.soft_gates == ("marginal_economics",)
    assert result.score_cap == 69


def test_broad_icp_needs_strong_proof():
    inp = build_input(icp_specificity="broad", proof_level="moderate")
    assert "broad_icp_unproven" in evaluate_gates(inp, _flat()).hard_gates
    inp = build_input(icp_specificity="broad", proof_level="strong")
    assert "broad_icp_unproven" not in evaluate_gates(inp, _flat()).hard_gates


def test_unsustainable_economics_and_compensation_friction():
    inp = build_input(**example_one_form())
    result = evaluate_gates(inp, score_dimensions(inp))
    assert result.hard_gates == ("unsustainable_economics",)
    assert result.soft_gates == ("compensation_friction",)
    assert result.score_cap == 75


def test_guarantee_without_proof():
    inp = build_input(risk_model="full_guarantee", proof_level="none")
    assert "guarantee_without_proof" in evaluate_gates(inp, _flat()).hard_gates


def test_lowest_soft_cap_wins():
    inp = build_input(
        pricing_structure="hybrid",
        icp_size="1_5_employees",
        performance_comp_tier="over_500_unit",
    )
    result = evaluate_gates(inp, _flat())
    assert result.soft_gates == ("hybrid_small_icp", "compensation_friction")
    assert result.score_cap == 72


def test_soft_gates_on_promise_and_maturity():
    inp = build_input(proof_level="moderate")
    assert evaluate_gates(inp, _flat()).soft_gates == ("volume_promise_moderate_proof",)

    inp = build_input(proof_level="weak")
    assert "conditional_guarantee_low_proof" in evaluate_gates(inp, _flat()).soft_gates

    inp = build_input(promise_outcome="increase_new_client_sales", icp_maturity="early_traction")
    assert "revenue_promise_early_icp" in evaluate_gates(inp, _flat()).soft_gates

    inp = build_input(
        pricing_structure="performance_only",
        performance_basis="percent_profit",
        performance_comp_tier="10_20_percent",
        icp_maturity="pre_revenue",
    )
    result = evaluate_gates(inp, _flat())
    assert "percent_basis_early_icp" in result.soft_gates
    assert result.score_cap == 65


def test_price_band():
    assert price_band_status(build_input()) == "within"
    low = build_input(recurring_price_tier="under_150")
    assert price_band_status(low) == "under"
    assert "pricing_outside_band" in evaluate_gates(low, _flat()).soft_gates
    high = build_input(icp_size="1_5_employees", proof_level="none", recurring_price_tier="5k_plus")
    assert price_band_status(high) == "over"
    assert price_band_status(build_input(pricing_structure="usage_based")) is None


def test_implicated_dimensions():
    dims = implicated_dimensions(["unsustainable_economics", "broad_icp_unproven"])
    assert dims == {"economic_feasibility", "risk_alignment", "icp_specificity", "proof_promise"}
    assert implicated_dimensions([]) == set()


def test_incomplete_input_is_rejected_before_any_gate():
    inp = build_input(icp_specificity="broad", proof_level=None)
    with pytest.raises(ValidationError) as exc:
        evaluate_gates(inp, _flat())
    assert exc.value.fields == ["proof_level"]
