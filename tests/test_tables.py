from __future__ import annotations

import pytest

from offer_core import tables as T
from offer_core.errors import ConfigurationDefect


def test_contribution_tables_are_total():
    assert T.audit_tables() == []


def test_outcome_and_vertical_scoping():
    assert "more_booked_meetings" in T.outcomes_for("outbound_sales_enablement")
    assert "more_booked_meetings" not in T.outcomes_for("demand_creation")
    assert T.outcomes_for("unknown") == []
    assert "b2b_saas" in T.verticals_for("saas_tech")
    assert "b2b_saas" not in T.verticals_for("local_services")


def test_derived_lookups():
    assert T.promise_bucket_for("increase_roas") == "top_line_revenue"
    assert T.promise_bucket_for("reduce_support_workload") == "efficiency_cost_savings"
    assert T.scoring_segment_for("marketing_agencies") == "OtherB2B"
    assert T.scoring_segment_for("proptech") == "RealEstate"


def test_comp_tiers_follow_basis():
    assert T.comp_tiers_for("percent_revenue") == list(T.PERCENT_COMP_TIERS)
    assert T.comp_tiers_for("per_closed_deal") == list(T.UNIT_COMP_TIERS)
    assert T.comp_tiers_for("nonsense") == []


def test_lookup_miss_is_configuration_defect():
    with pytest.raises(ConfigurationDefect) as exc:
        T.lookup(T.FULFILLMENT_MOD, "telepathy", "FULFILLMENT_MOD")
    assert exc.value.table == "FULFILLMENT_MOD"
    assert exc.value.value == "telepathy"
    with pytest.raises(ConfigurationDefect):
        T.scoring_segment_for("not_a_vertical")


def test_options_payload_covers_form_fields():
    payload = T.options_payload()
    derived = {"promise_bucket", "scoring_segment"}
    for name in T.ENUMERATIONS:
        if name not in derived:
            assert name in payload, name
    groups = payload["promise_outcome"]["outbound_sales_enablement"]
    values = [o["value"] for g in groups for o in g["outcomes"]]
    assert values == T.outcomes_for("outbound_sales_enablement")
    tiers = [t["value"] for t in payload["performance_comp_tier"]["percent_profit"]]
    assert tiers == list(T.PERCENT_COMP_TIERS)
