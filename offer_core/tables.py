"""Category tables for the offer diagnostic.

Every enumerated form field is listed here with its human label, together with
the scoped/derived lookups (outcome -> promise bucket, vertical -> scoring
segment, basis -> compensation tiers) and the contribution tables the dimension
scorer reads. Everything in this module is read-only data.

`audit_tables()` checks that the contribution tables are total over every
enumerated value; the test-suite asserts it returns no problems.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence, Tuple

from .errors import ConfigurationDefect

# ---- Enumerations (value -> label) ----

OFFER_TYPES: Dict[str, str] = {
    "demand_creation": "Demand Creation",
    "demand_capture": "Demand Capture",
    "outbound_sales_enablement": "Outbound & Sales Enablement",
    "retention_monetization": "Retention & Monetization",
    "operational_enablement": "Operational Enablement",
}

PROMISE_BUCKETS: Dict[str, str] = {
    "top_of_funnel_volume": "Top-of-Funnel Volume",
    "mid_funnel_engagement": "Mid-Funnel Engagement",
    "top_line_revenue": "Top-Line Revenue",
    "efficiency_cost_savings": "Efficiency & Cost Savings",
    "ops_compliance_outcomes": "Ops & Compliance Outcomes",
}

# offer type -> [(group label, [(outcome, label, bucket), ...]), ...]
OUTCOME_GROUPS: Dict[str, List[Tuple[str, List[Tuple[str, str, str]]]]] = {
    "outbound_sales_enablement": [
        ("Lead Generation", [
            ("more_booked_meetings", "More booked meetings", "top_of_funnel_volume"),
            ("more_qualified_pipeline", "More qualified pipeline", "top_of_funnel_volume"),
            ("more_demos_on_calendar", "More demos on calendar", "top_of_funnel_volume"),
            ("replace_founder_led_outreach", "Replace founder-led outreach", "top_of_funnel_volume"),
            ("build_outbound_system", "Build outbound system", "top_of_funnel_volume"),
            ("increase_show_up_rates", "Increase show-up rates", "top_of_funnel_volume"),
        ]),
        ("Sales Performance", [
            ("higher_demo_to_close_rate", "Higher demo-to-close rate", "mid_funnel_engagement"),
            ("shorter_sales_cycles", "Shorter sales cycles", "mid_funnel_engagement"),
            ("improve_follow_up_performance", "Improve follow-up performance", "mid_funnel_engagement"),
        ]),
        ("Revenue", [
            ("increase_new_client_sales", "Increase new client sales", "top_line_revenue"),
            ("increase_mrr_from_outbound", "Increase MRR from outbound", "top_line_revenue"),
        ]),
    ],
    "demand_capture": [
        ("Lead Generation", [
            ("increase_inbound_leads", "Increase inbound leads", "top_of_funnel_volume"),
            ("increase_landing_page_conversion", "Increase conversion rate on landing pages", "top_of_funnel_volume"),
            ("increase_ecommerce_conversions", "Increase ecommerce conversions", "top_of_funnel_volume"),
            ("generate_more_calls_from_paid", "Generate more calls from paid traffic", "top_of_funnel_volume"),
        ]),
        ("Revenue", [
            ("increase_roas", "Increase ROAS", "top_line_revenue"),
            ("increase_sales_from_paid", "Increase sales from paid traffic", "top_line_revenue"),
            ("increase_ltv_from_ad_spend", "Increase LTV from ad spend", "top_line_revenue"),
        ]),
    ],
    "demand_creation": [
        ("Awareness & Traffic", [
            ("build_brand_awareness", "Build brand awareness", "top_of_funnel_volume"),
            ("increase_social_traffic", "Increase social traffic", "top_of_funnel_volume"),
            ("increase_content_driven_leads", "Increase content-driven leads", "top_of_funnel_volume"),
            ("improve_engagement_across_channels", "Improve engagement across channels", "top_of_funnel_volume"),
        ]),
        ("Pipeline Movement", [
            ("improve_nurture_conversion", "Improve nurture conversion", "mid_funnel_engagement"),
            ("increase_pipeline_handoff_rates", "Increase pipeline handoff rates", "mid_funnel_engagement"),
        ]),
    ],
    "retention_monetization": [
        ("Revenue Growth", [
            ("increase_client_ltv", "Increase client LTV", "top_line_revenue"),
            ("increase_repeat_purchases", "Increase repeat purchases", "top_line_revenue"),
            ("increase_upsells", "Increase upsells", "top_line_revenue"),
            ("increase_referrals", "Increase referrals", "top_line_revenue"),
            ("reduce_client_churn", "Reduce client churn", "top_line_revenue"),
        ]),
        ("Customer Success", [
            ("increase_onboarding_activation", "Increase onboarding activation", "mid_funnel_engagement"),
            ("increase_product_adoption", "Increase product adoption", "mid_funnel_engagement"),
        ]),
    ],
    "operational_enablement": [
        ("Efficiency", [
            ("reduce_manual_work_time", "Reduce time spent on manual work", "efficiency_cost_savings"),
            ("reduce_support_workload", "Reduce support workload", "efficiency_cost_savings"),
            ("automate_repetitive_tasks", "Automate repetitive tasks", "efficiency_cost_savings"),
            ("standardize_processes", "Standardize processes", "efficiency_cost_savings"),
        ]),
        ("Operations & Compliance", [
            ("improve_data_accuracy", "Improve data accuracy", "ops_compliance_outcomes"),
            ("improve_reporting_visibility", "Improve reporting visibility", "ops_compliance_outcomes"),
            ("systemize_compliance_documentation", "Systemize compliance and documentation", "ops_compliance_outcomes"),
        ]),
    ],
}

ICP_INDUSTRIES: Dict[str, str] = {
    "local_services": "Local Services",
    "professional_services": "Professional Services",
    "b2b_service_agency": "B2B Service Agency",
    "dtc_ecommerce": "DTC/Ecommerce",
    "saas_tech": "SaaS/Tech",
}

SCORING_SEGMENTS: Dict[str, str] = {
    "SaaS": "SaaS",
    "Professional": "Professional Services",
    "DTC": "Direct-to-Consumer",
    "RealEstate": "Real Estate",
    "Healthcare": "Healthcare",
    "OtherB2B": "Other B2B",
    "Info": "Info / Education",
    "Local": "Local Business",
}

# industry -> [(vertical, label, scoring segment), ...]
VERTICALS_BY_INDUSTRY: Dict[str, List[Tuple[str, str, str]]] = {
    "local_services": [
        ("home_services", "Home Services", "Local"),
        ("med_spa_clinics", "Med Spas & Clinics", "Healthcare"),
        ("fitness_wellness", "Fitness & Wellness", "Local"),
        ("restaurants_hospitality", "Restaurants & Hospitality", "Local"),
        ("real_estate_agents", "Real Estate Agents", "RealEstate"),
    ],
    "professional_services": [
        ("law_firms", "Law Firms", "Professional"),
        ("accounting_firms", "Accounting Firms", "Professional"),
        ("financial_advisors", "Financial Advisors", "Professional"),
        ("healthcare_practices", "Healthcare Practices", "Healthcare"),
        ("consultants_coaches", "Consultants & Coaches", "Info"),
    ],
    "b2b_service_agency": [
        ("marketing_agencies", "Marketing Agencies", "OtherB2B"),
        ("lead_gen_agencies", "Lead Generation Agencies", "OtherB2B"),
        ("recruiting_firms", "Recruiting Firms", "OtherB2B"),
        ("it_msp", "IT / Managed Service Providers", "OtherB2B"),
        ("creative_studios", "Creative Studios", "OtherB2B"),
    ],
    "dtc_ecommerce": [
        ("apparel_beauty", "Apparel & Beauty", "DTC"),
        ("health_supplements", "Health & Supplements", "DTC"),
        ("home_goods", "Home Goods", "DTC"),
        ("info_products", "Courses & Info Products", "Info"),
    ],
    "saas_tech": [
        ("b2b_saas", "Horizontal B2B SaaS", "SaaS"),
        ("vertical_saas", "Vertical SaaS", "SaaS"),
        ("devtools", "Developer Tools", "SaaS"),
        ("proptech", "PropTech", "RealEstate"),
        ("healthtech", "HealthTech", "Healthcare"),
    ],
}

ICP_SIZES: Dict[str, str] = {
    "solo_founder": "Solo Founder",
    "1_5_employees": "1–5 employees",
    "6_20_employees": "6–20 employees",
    "21_100_employees": "21–100 employees",
    "100_plus_employees": "100+ employees",
}

ICP_MATURITIES: Dict[str, str] = {
    "pre_revenue": "Pre-Revenue",
    "early_traction": "Early Traction",
    "scaling": "Scaling",
    "mature": "Mature",
    "enterprise": "Enterprise",
}

ICP_SPECIFICITIES: Dict[str, str] = {
    "broad": "Broad (many industries / sizes)",
    "narrow": "Narrow (one industry or size band)",
    "exact": "Exact (one vertical, size and trigger)",
}

PRICING_STRUCTURES: Dict[str, str] = {
    "recurring": "Recurring (retainer)",
    "one_time": "One-Time (project)",
    "usage_based": "Usage-Based (operational output)",
    "hybrid": "Hybrid (retainer + performance)",
    "performance_only": "Performance-Only",
}

RECURRING_PRICE_TIERS: Dict[str, str] = {
    "under_150": "< $150/mo",
    "150_500": "$150–$500/mo",
    "500_2k": "$500–$2k/mo",
    "2k_5k": "$2k–$5k/mo",
    "5k_plus": "$5k+/mo",
}

ONE_TIME_PRICE_TIERS: Dict[str, str] = {
    "under_3k": "< $3k",
    "3k_10k": "$3k–$10k",
    "10k_plus": "$10k+",
}

USAGE_OUTPUT_TYPES: Dict[str, str] = {
    "lead_based": "Lead-based (per lead / per booked call)",
    "conversion_based": "Conversion-based (per demo / per sale)",
    "task_based": "Task-based (per workflow / per task)",
}

USAGE_VOLUME_TIERS: Dict[str, str] = {
    "low": "Low (<1k units/mo)",
    "mid": "Mid (1k–10k units/mo)",
    "high": "High (10k+ units/mo)",
}

HYBRID_RETAINER_TIERS: Dict[str, str] = dict(RECURRING_PRICE_TIERS)

PERFORMANCE_BASES: Dict[str, str] = {
    "per_appointment": "Per booked appointment",
    "per_opportunity": "Per qualified opportunity",
    "per_closed_deal": "Per closed deal",
    "percent_revenue": "% of revenue generated",
    "percent_profit": "% of profit generated",
    "percent_ad_spend": "% of ad spend",
}

PERCENT_COMP_TIERS: Dict[str, str] = {
    "under_10_percent": "< 10%",
    "10_20_percent": "10–20%",
    "20_30_percent": "20–30%",
    "over_30_percent": "30%+",
}

UNIT_COMP_TIERS: Dict[str, str] = {
    "under_100_unit": "< $100 per unit",
    "100_500_unit": "$100–$500 per unit",
    "over_500_unit": "$500+ per unit",
}

PERFORMANCE_COMP_TIERS: Dict[str, str] = {**PERCENT_COMP_TIERS, **UNIT_COMP_TIERS}

PERCENT_BASES = frozenset({"percent_revenue", "percent_profit", "percent_ad_spend"})
AGGRESSIVE_COMP_TIERS = frozenset({"over_30_percent", "over_500_unit"})

RISK_MODELS: Dict[str, str] = {
    "no_guarantee": "No guarantee",
    "conditional_guarantee": "Conditional guarantee",
    "full_guarantee": "Full guarantee",
    "performance_only": "Performance only",
    "pay_after_results": "Pay after results",
}

FULFILLMENT_COMPLEXITIES: Dict[str, str] = {
    "custom_dfy": "Custom Done-For-You",
    "package_based": "Productized Service",
    "coaching_advisory": "Coaching / Advisory",
    "software_platform": "Software / Platform",
    "staffing_placement": "Staffing / Placement",
}

PROOF_LEVELS: Dict[str, str] = {
    "none": "No proof yet",
    "weak": "A few anecdotal wins",
    "moderate": "Repeatable results with some case studies",
    "strong": "Documented results across many clients",
    "category_killer": "Category-defining proof",
}

PROOF_STRENGTH: Dict[str, int] = {
    "none": 0,
    "weak": 1,
    "moderate": 2,
    "strong": 3,
    "category_killer": 4,
}

SMALL_SIZES = frozenset({"solo_founder", "1_5_employees"})
LARGE_SIZES = frozenset({"21_100_employees", "100_plus_employees"})
EARLY_MATURITIES = frozenset({"pre_revenue", "early_traction"})

DIMENSION_LABELS: Dict[str, str] = {
    "economic_feasibility": "Economic Feasibility (EFI)",
    "proof_promise": "Proof-to-Promise Credibility",
    "fulfillment_scalability": "Fulfillment Scalability",
    "risk_alignment": "Risk Alignment",
    "channel_fit": "Channel Fit",
    "icp_specificity": "ICP Specificity",
}

CATEGORY_LABELS: Dict[str, str] = {
    "icp_shift": "Target Market",
    "promise_shift": "Offer Promise",
    "fulfillment_shift": "Delivery Model",
    "pricing_shift": "Pricing",
    "risk_shift": "Risk & Guarantees",
    "positioning_shift": "Positioning",
    "founder_psychology_check": "Founder Mindset",
}

# ---- Derived lookups ----

OUTCOME_TO_BUCKET: Dict[str, str] = {
    outcome: bucket
    for groups in OUTCOME_GROUPS.values()
    for _, outcomes in groups
    for outcome, _, bucket in outcomes
}

OUTCOME_LABELS: Dict[str, str] = {
    outcome: label
    for groups in OUTCOME_GROUPS.values()
    for _, outcomes in groups
    for outcome, label, _ in outcomes
}

VERTICAL_TO_SEGMENT: Dict[str, str] = {
    vertical: segment
    for rows in VERTICALS_BY_INDUSTRY.values()
    for vertical, _, segment in rows
}

VERTICAL_LABELS: Dict[str, str] = {
    vertical: label
    for rows in VERTICALS_BY_INDUSTRY.values()
    for vertical, label, _ in rows
}


def outcomes_for(offer_type: str) -> List[str]:
    groups = OUTCOME_GROUPS.get(offer_type) or []
    return [outcome for _, outcomes in groups for outcome, _, _ in outcomes]


def verticals_for(industry: str) -> List[str]:
    return [vertical for vertical, _, _ in VERTICALS_BY_INDUSTRY.get(industry) or []]


def comp_tiers_for(basis: str) -> List[str]:
    if basis in PERCENT_BASES:
        return list(PERCENT_COMP_TIERS)
    if basis in PERFORMANCE_BASES:
        return list(UNIT_COMP_TIERS)
    return []


def promise_bucket_for(outcome: str) -> str:
    return lookup(OUTCOME_TO_BUCKET, outcome, "OUTCOME_TO_BUCKET")


def scoring_segment_for(vertical: str) -> str:
    return lookup(VERTICAL_TO_SEGMENT, vertical, "VERTICAL_TO_SEGMENT")


# ---- Contribution tables (dimension scorer) ----

# Economic feasibility
EFI_PRICING_BASE: Dict[str, int] = {
    "performance_only": 16,
    "hybrid": 14,
    "recurring": 11,
    "one_time": 9,
    "usage_based": 7,
}

_EFI_SMALL = {"recurring": -4, "one_time": 0, "usage_based": 0, "hybrid": 1, "performance_only": 3}
_EFI_MID = {"recurring": 0, "one_time": 0, "usage_based": 0, "hybrid": 2, "performance_only": 0}
_EFI_LARGE = {"recurring": 3, "one_time": 0, "usage_based": 0, "hybrid": 0, "performance_only": 0}

EFI_SIZE_MOD: Dict[str, Dict[str, int]] = {
    "solo_founder": _EFI_SMALL,
    "1_5_employees": _EFI_SMALL,
    "6_20_employees": _EFI_MID,
    "21_100_employees": _EFI_LARGE,
    "100_plus_employees": _EFI_LARGE,
}

_EFI_EARLY = {"recurring": -3, "one_time": 0, "usage_based": 0, "hybrid": 0, "performance_only": 3}
_EFI_NEUTRAL = {"recurring": 0, "one_time": 0, "usage_based": 0, "hybrid": 0, "performance_only": 0}
_EFI_ESTABLISHED = {"recurring": 2, "one_time": 0, "usage_based": 0, "hybrid": 0, "performance_only": 0}

EFI_MATURITY_MOD: Dict[str, Dict[str, int]] = {
    "pre_revenue": _EFI_EARLY,
    "early_traction": _EFI_EARLY,
    "scaling": _EFI_NEUTRAL,
    "mature": _EFI_ESTABLISHED,
    "enterprise": _EFI_ESTABLISHED,
}

EFI_BASIS_MOD: Dict[str, int] = {
    "per_appointment": 2,
    "per_opportunity": 1,
    "per_closed_deal": -1,
    "percent_revenue": -3,
    "percent_profit": -3,
    "percent_ad_spend": -2,
}

EFI_RISK_MOD: Dict[str, int] = {
    "no_guarantee": -2,
    "conditional_guarantee": 0,
    "full_guarantee": 0,
    "performance_only": 3,
    "pay_after_results": 3,
}

EFI_RECURRING_TIER_MOD: Dict[str, int] = {
    "under_150": -3,
    "150_500": -1,
    "500_2k": 1,
    "2k_5k": 1,
    "5k_plus": 0,
}

EFI_ONE_TIME_TIER_MOD: Dict[str, int] = {
    "under_3k": -1,
    "3k_10k": 1,
    "10k_plus": 0,
}

EFI_RETAINER_TIER_MOD: Dict[str, int] = {
    "under_150": -2,
    "150_500": 0,
    "500_2k": 1,
    "2k_5k": 0,
    "5k_plus": -2,
}

EFI_USAGE_OUTPUT_MOD: Dict[str, int] = {
    "lead_based": 1,
    "conversion_based": 0,
    "task_based": -1,
}

EFI_USAGE_VOLUME_MOD: Dict[str, int] = {
    "low": -2,
    "mid": 0,
    "high": 2,
}

EFI_COMP_TIER_MOD: Dict[str, int] = {
    "under_10_percent": -1,
    "10_20_percent": 1,
    "20_30_percent": 0,
    "over_30_percent": -2,
    "under_100_unit": -1,
    "100_500_unit": 1,
    "over_500_unit": -2,
}

# Proof-to-promise credibility
PROMISE_DEMAND: Dict[str, int] = {
    "top_of_funnel_volume": 1,
    "mid_funnel_engagement": 2,
    "top_line_revenue": 3,
    "efficiency_cost_savings": 1,
    "ops_compliance_outcomes": 1,
}
PROOF_SURPLUS_BONUS = 8   # proof above what the promise demands
PROOF_MATCH_BONUS = 4     # proof exactly meets the demand
PROOF_SHORT_PENALTY = -4  # one level short
PROOF_GAP_PENALTY = -8    # two or more levels short
CATEGORY_KILLER_BONUS = 4

# Fulfillment scalability
FULFILLMENT_MOD: Dict[str, int] = {
    "software_platform": 10,
    "package_based": 6,
    "coaching_advisory": 2,
    "custom_dfy": -5,
    "staffing_placement": -8,
}

# Risk alignment: risk model x proof level
_RISK_PUNISHES_LOW_PROOF = {"none": -5, "weak": -5, "moderate": 0, "strong": 5, "category_killer": 5}

RISK_PROOF_MOD: Dict[str, Dict[str, int]] = {
    "no_guarantee": {"none": -5, "weak": -5, "moderate": 0, "strong": 4, "category_killer": 4},
    "conditional_guarantee": {"none": 0, "weak": 0, "moderate": 5, "strong": 5, "category_killer": 5},
    "full_guarantee": {"none": -6, "weak": -6, "moderate": 0, "strong": 0, "category_killer": 0},
    "performance_only": _RISK_PUNISHES_LOW_PROOF,
    "pay_after_results": _RISK_PUNISHES_LOW_PROOF,
}

# Channel fit (cold outbound as the delivery channel)
CHANNEL_OFFER_BASE: Dict[str, int] = {
    "outbound_sales_enablement": 17,
    "demand_capture": 16,
    "retention_monetization": 15,
    "demand_creation": 14,
    "operational_enablement": 11,
}

CHANNEL_SEGMENT_MOD: Dict[str, int] = {
    "SaaS": 2,
    "Professional": 1,
    "OtherB2B": 1,
    "RealEstate": 0,
    "Healthcare": 0,
    "DTC": -1,
    "Info": -1,
    "Local": -2,
}

CHANNEL_BUCKET_MOD: Dict[str, int] = {
    "top_of_funnel_volume": 1,
    "mid_funnel_engagement": 0,
    "top_line_revenue": 1,
    "efficiency_cost_savings": 0,
    "ops_compliance_outcomes": -1,
}

OUTBOUND_INCOMPATIBLE_OUTCOMES = frozenset({"build_brand_awareness"})
OUTBOUND_INCOMPATIBLE_PENALTY = -8

# ICP specificity
SPECIFICITY_MOD: Dict[str, int] = {
    "exact": 8,
    "narrow": 4,
    "broad": -4,
}


# ---- Table access ----

def lookup(table: Mapping[str, Any], value: Any, name: str) -> Any:
    """Read ``table[value]``; a miss is a build defect, not bad user input."""
    try:
        return table[value]
    except (KeyError, TypeError):
        raise ConfigurationDefect(name, value) from None


ENUMERATIONS: Dict[str, Mapping[str, str]] = {
    "offer_type": OFFER_TYPES,
    "promise_outcome": OUTCOME_LABELS,
    "promise_bucket": PROMISE_BUCKETS,
    "icp_industry": ICP_INDUSTRIES,
    "vertical_segment": VERTICAL_LABELS,
    "scoring_segment": SCORING_SEGMENTS,
    "icp_size": ICP_SIZES,
    "icp_maturity": ICP_MATURITIES,
    "icp_specificity": ICP_SPECIFICITIES,
    "pricing_structure": PRICING_STRUCTURES,
    "recurring_price_tier": RECURRING_PRICE_TIERS,
    "one_time_price_tier": ONE_TIME_PRICE_TIERS,
    "usage_output_type": USAGE_OUTPUT_TYPES,
    "usage_volume_tier": USAGE_VOLUME_TIERS,
    "hybrid_retainer_tier": HYBRID_RETAINER_TIERS,
    "performance_basis": PERFORMANCE_BASES,
    "performance_comp_tier": PERFORMANCE_COMP_TIERS,
    "risk_model": RISK_MODELS,
    "fulfillment_complexity": FULFILLMENT_COMPLEXITIES,
    "proof_level": PROOF_LEVELS,
}

# (table name, table, enumeration it must cover)
_FLAT_CONTRIBUTIONS: Sequence[Tuple[str, Mapping[str, Any], str]] = (
    ("EFI_PRICING_BASE", EFI_PRICING_BASE, "pricing_structure"),
    ("EFI_SIZE_MOD", EFI_SIZE_MOD, "icp_size"),
    ("EFI_MATURITY_MOD", EFI_MATURITY_MOD, "icp_maturity"),
    ("EFI_BASIS_MOD", EFI_BASIS_MOD, "performance_basis"),
    ("EFI_RISK_MOD", EFI_RISK_MOD, "risk_model"),
    ("EFI_RECURRING_TIER_MOD", EFI_RECURRING_TIER_MOD, "recurring_price_tier"),
    ("EFI_ONE_TIME_TIER_MOD", EFI_ONE_TIME_TIER_MOD, "one_time_price_tier"),
    ("EFI_RETAINER_TIER_MOD", EFI_RETAINER_TIER_MOD, "hybrid_retainer_tier"),
    ("EFI_USAGE_OUTPUT_MOD", EFI_USAGE_OUTPUT_MOD, "usage_output_type"),
    ("EFI_USAGE_VOLUME_MOD", EFI_USAGE_VOLUME_MOD, "usage_volume_tier"),
    ("EFI_COMP_TIER_MOD", EFI_COMP_TIER_MOD, "performance_comp_tier"),
    ("PROOF_STRENGTH", PROOF_STRENGTH, "proof_level"),
    ("PROMISE_DEMAND", PROMISE_DEMAND, "promise_bucket"),
    ("FULFILLMENT_MOD", FULFILLMENT_MOD, "fulfillment_complexity"),
    ("RISK_PROOF_MOD", RISK_PROOF_MOD, "risk_model"),
    ("CHANNEL_OFFER_BASE", CHANNEL_OFFER_BASE, "offer_type"),
    ("CHANNEL_SEGMENT_MOD", CHANNEL_SEGMENT_MOD, "scoring_segment"),
    ("CHANNEL_BUCKET_MOD", CHANNEL_BUCKET_MOD, "promise_bucket"),
    ("SPECIFICITY_MOD", SPECIFICITY_MOD, "icp_specificity"),
)

# nested tables: (name, table, enumeration of the inner keys)
_NESTED_CONTRIBUTIONS: Sequence[Tuple[str, Mapping[str, Mapping[str, Any]], str]] = (
    ("EFI_SIZE_MOD", EFI_SIZE_MOD, "pricing_structure"),
    ("EFI_MATURITY_MOD", EFI_MATURITY_MOD, "pricing_structure"),
    ("RISK_PROOF_MOD", RISK_PROOF_MOD, "proof_level"),
)


def audit_tables() -> List[str]:
    """Return every totality/consistency problem in the tables (empty when sound)."""

    problems: List[str] = []
    for name, table, enum_name in _FLAT_CONTRIBUTIONS:
        for value in ENUMERATIONS[enum_name]:
            if value not in table:
                problems.append(f"{name}: missing {enum_name}={value}")
        for value in table:
            if value not in ENUMERATIONS[enum_name]:
                problems.append(f"{name}: unknown {enum_name}={value}")
    for name, table, enum_name in _NESTED_CONTRIBUTIONS:
        for outer, inner in table.items():
            for value in ENUMERATIONS[enum_name]:
                if value not in inner:
                    problems.append(f"{name}[{outer}]: missing {enum_name}={value}")

    if set(OUTCOME_GROUPS) != set(OFFER_TYPES):
        problems.append("OUTCOME_GROUPS: offer types do not match OFFER_TYPES")
    for outcome, bucket in OUTCOME_TO_BUCKET.items():
        if bucket not in PROMISE_BUCKETS:
            problems.append(f"OUTCOME_TO_BUCKET: {outcome} -> unknown bucket {bucket}")
    seen_outcomes = [o for ot in OFFER_TYPES for o in outcomes_for(ot)]
    if len(seen_outcomes) != len(set(seen_outcomes)):
        problems.append("OUTCOME_GROUPS: an outcome is listed under more than one offer type")

    if set(VERTICALS_BY_INDUSTRY) != set(ICP_INDUSTRIES):
        problems.append("VERTICALS_BY_INDUSTRY: industries do not match ICP_INDUSTRIES")
    for vertical, segment in VERTICAL_TO_SEGMENT.items():
        if segment not in SCORING_SEGMENTS:
            problems.append(f"VERTICAL_TO_SEGMENT: {vertical} -> unknown segment {segment}")
    seen_verticals = [v for ind in ICP_INDUSTRIES for v in verticals_for(ind)]
    if len(seen_verticals) != len(set(seen_verticals)):
        problems.append("VERTICALS_BY_INDUSTRY: a vertical is listed under more than one industry")

    for basis in PERFORMANCE_BASES:
        if not comp_tiers_for(basis):
            problems.append(f"comp_tiers_for: no tiers for basis {basis}")
    for value in OUTBOUND_INCOMPATIBLE_OUTCOMES:
        if value not in OUTCOME_TO_BUCKET:
            problems.append(f"OUTBOUND_INCOMPATIBLE_OUTCOMES: unknown outcome {value}")
    return problems


def _options(table: Mapping[str, str]) -> List[Dict[str, str]]:
    return [{"value": value, "label": label} for value, label in table.items()]


def options_payload() -> Dict[str, Any]:
    """JSON-ready option lists for building the diagnostic form."""

    return {
        "offer_type": _options(OFFER_TYPES),
        "promise_outcome": {
            offer_type: [
                {"group": group, "outcomes": [{"value": v, "label": lbl} for v, lbl, _ in outcomes]}
                for group, outcomes in groups
            ]
            for offer_type, groups in OUTCOME_GROUPS.items()
        },
        "icp_industry": _options(ICP_INDUSTRIES),
        "vertical_segment": {
            industry: [{"value": v, "label": lbl} for v, lbl, _ in rows]
            for industry, rows in VERTICALS_BY_INDUSTRY.items()
        },
        "icp_size": _options(ICP_SIZES),
        "icp_maturity": _options(ICP_MATURITIES),
        "icp_specificity": _options(ICP_SPECIFICITIES),
        "pricing_structure": _options(PRICING_STRUCTURES),
        "recurring_price_tier": _options(RECURRING_PRICE_TIERS),
        "one_time_price_tier": _options(ONE_TIME_PRICE_TIERS),
        "usage_output_type": _options(USAGE_OUTPUT_TYPES),
        "usage_volume_tier": _options(USAGE_VOLUME_TIERS),
        "hybrid_retainer_tier": _options(HYBRID_RETAINER_TIERS),
        "performance_basis": _options(PERFORMANCE_BASES),
        "performance_comp_tier": {
            basis: [{"value": t, "label": PERFORMANCE_COMP_TIERS[t]} for t in comp_tiers_for(basis)]
            for basis in PERFORMANCE_BASES
        },
        "risk_model": _options(RISK_MODELS),
        "fulfillment_complexity": _options(FULFILLMENT_COMPLEXITIES),
        "proof_level": _options(PROOF_LEVELS),
    }
