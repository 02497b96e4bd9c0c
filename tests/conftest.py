from __future__ import annotations

import pytest

from offer_core.types import DiagnosticInput
from offer_core.validators import from_form

# Productized outbound agency selling a retainer to scaling agencies with strong proof.
BASE_FORM: dict[str, str] = {
    "offer_type": "outbound_sales_enablement",
    "promise_outcome": "more_booked_meetings",
    "icp_industry": "b2b_service_agency",
    "vertical_segment": "marketing_agencies",
    "icp_size": "6_20_employees",
    "icp_maturity": "scaling",
    "icp_specificity": "narrow",
    "pricing_structure": "recurring",
    "recurring_price_tier": "2k_5k",
    "risk_model": "conditional_guarantee",
    "fulfillment_complexity": "package_based",
    "proof_level": "strong",
}

# sub-fields to drop/add when a test switches ``pricing_structure``
PRICING_DEFAULTS: dict[str, dict[str, str]] = {
    "recurring": {"recurring_price_tier": "2k_5k"},
    "one_time": {"one_time_price_tier": "3k_10k"},
    "usage_based": {"usage_output_type": "lead_based", "usage_volume_tier": "mid"},
    "hybrid": {
        "hybrid_retainer_tier": "500_2k",
        "performance_basis": "per_appointment",
        "performance_comp_tier": "100_500_unit",
    },
    "performance_only": {"performance_basis": "per_appointment", "performance_comp_tier": "100_500_unit"},
}


def build_form(**overrides: str | None) -> dict[str, str]:
    """Return a complete form; changing ``pricing_structure`` swaps in its default sub-fields.

    An override of None removes the key.
    """

    form = dict(BASE_FORM)
    structure = overrides.get("pricing_structure")
    if structure and structure != form["pricing_structure"]:
        for key in PRICING_DEFAULTS[form["pricing_structure"]]:
            form.pop(key, None)
        form.update(PRICING_DEFAULTS[structure])
    for key, value in overrides.items():
        if value is None:
            form.pop(key, None)
        else:
            form[key] = value
    return form


def build_input(**overrides: str | None) -> DiagnosticInput:
    return from_form(build_form(**overrides))


def example_one_form() -> dict[str, str]:
    """Performance-only at 30%+ of revenue with a full guarantee."""
    return build_form(
        pricing_structure="performance_only",
        performance_basis="percent_revenue",
        performance_comp_tier="over_30_percent",
        risk_model="full_guarantee",
    )


def small_coaching_form() -> dict[str, str]:
    return build_form(icp_size="1_5_employees", fulfillment_complexity="coaching_advisory")


@pytest.fixture
def base_form() -> dict[str, str]:
    return build_form()


@pytest.fixture
def base_input() -> DiagnosticInput:
    return build_input()
