from __future__ import annotations

from dataclasses import replace

import pytest

from offer_core.errors import ValidationError
from offer_core.types import DiagnosticInput, PerformancePricing, RecurringPricing
from offer_core.validators import BASE_FIELDS, check_complete, from_form, is_complete, missing_fields
from tests.conftest import build_form, build_input


def test_complete_form_builds_typed_input(base_input):
    assert is_complete(base_input)
    assert base_input.promise_bucket == "top_of_funnel_volume"
    assert base_input.scoring_segment == "OtherB2B"
    assert base_input.pricing == RecurringPricing(price_tier="2k_5k")


def test_camel_case_and_blanks():
    form = {
        "offerType": "outbound_sales_enablement",
        "promiseOutcome": "more_booked_meetings",
        "icpIndustry": "b2b_service_agency",
        "verticalSegment": "marketing_agencies",
        "icpSize": "6_20_employees",
        "icpMaturity": "scaling",
        "icpSpecificity": "  ",
        "pricingStructure": "recurring",
        "recurringPriceTier": "2k_5k",
        "riskModel": "conditional_guarantee",
        "fulfillmentComplexity": "package_based",
        "proofLevel": "strong",
        "utmSource": "newsletter",
    }
    inp = from_form(form)
    assert inp.offer_type == "outbound_sales_enablement"
    assert inp.icp_specificity is None
    assert missing_fields(inp) == ["icp_specificity"]


def test_empty_input_lists_every_required_field():
    problems = missing_fields(DiagnosticInput())
    for name in BASE_FIELDS:
        assert name in problems
    assert "promise_bucket" in problems
    assert "scoring_segment" in problems


def test_out_of_scope_values_are_incomplete():
    inp = build_input(promise_outcome="build_brand_awareness")
    assert "promise_outcome" in missing_fields(inp)

    inp = build_input(vertical_segment="b2b_saas")
    assert "vertical_segment" in missing_fields(inp)

    inp = build_input(proof_level="legendary")
    assert missing_fields(inp) == ["proof_level"]


def test_comp_tier_must_match_basis():
    inp = build_input(
        pricing_structure="performance_only",
        performance_basis="percent_revenue",
        performance_comp_tier="over_500_unit",
    )
    assert missing_fields(inp) == ["performance_comp_tier"]


def test_missing_pricing_sub_field():
    inp = build_input(pricing_structure="performance_only", performance_comp_tier=None)
    assert inp.pricing == PerformancePricing(performance_basis="per_appointment", comp_tier=None)
    assert missing_fields(inp) == ["performance_comp_tier"]


def test_derived_field_must_agree_with_source():
    form = build_form(promise_bucket="top_line_revenue")
    assert missing_fields(from_form(form)) == ["promise_bucket"]


def test_pricing_variant_must_match_structure(base_input):
    inp = replace(base_input, pricing=PerformancePricing("per_appointment", "100_500_unit"))
    assert "pricing" in missing_fields(inp)


def test_stray_pricing_field_rejected():
    form = build_form(usage_volume_tier="high")
    with pytest.raises(ValidationError) as exc:
        from_form(form)
    assert exc.value.fields == ["usage_volume_tier"]


def test_check_complete_raises_with_fields():
    with pytest.raises(ValidationError) as exc:
        check_complete(build_input(risk_model=None))
    assert exc.value.message == "incomplete input"
    assert exc.value.fields == ["risk_model"]


def test_to_form_inlines_pricing():
    form = build_input(pricing_structure="hybrid").to_form()
    assert form["hybrid_retainer_tier"] == "500_2k"
    assert form["performance_comp_tier"] == "100_500_unit"
    assert "recurring_price_tier" not in form
