"""Stability rules shared by the gate table and the recommendation text.

- pricing bands: the monthly price a buyer of a given size and proof level
  will carry; only prices outside the band are treated as a pricing problem
- fulfillment lock: productized delivery never gets "productize" advice
- channel guard: remediation text never tells the user to leave outbound
- local optimum: once every core dimension sits at 14/20 or better, moderate
  advice may refine the offer but not restructure it
- settled selections: a selection that already scores at least half marks is
  never the subject of "go get it" advice (no "add a guarantee" to an offer
  that has one)
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, Optional, Tuple

from .config import LATENT_MAX
from .types import DiagnosticInput, HybridPricing, LatentScores, OneTimePricing, RecurringPricing

# icp size -> proof level -> (lower, upper) monthly USD
PRICING_BANDS: Dict[str, Dict[str, Tuple[int, int]]] = {
    "solo_founder": {
        "none": (100, 500),
        "weak": (150, 750),
        "moderate": (250, 1500),
        "strong": (500, 3000),
        "category_killer": (1000, 5000),
    },
    "1_5_employees": {
        "none": (200, 1000),
        "weak": (300, 1500),
        "moderate": (500, 3000),
        "strong": (1000, 5000),
        "category_killer": (2000, 10000),
    },
    "6_20_employees": {
        "none": (500, 2000),
        "weak": (750, 3000),
        "moderate": (1000, 5000),
        "strong": (2000, 10000),
        "category_killer": (5000, 25000),
    },
    "21_100_employees": {
        "none": (1000, 5000),
        "weak": (1500, 7500),
        "moderate": (2500, 15000),
        "strong": (5000, 30000),
        "category_killer": (10000, 75000),
    },
    "100_plus_employees": {
        "none": (2500, 10000),
        "weak": (5000, 20000),
        "moderate": (7500, 50000),
        "strong": (15000, 100000),
        "category_killer": (25000, 250000),
    },
}

MONTHLY_TIER_VALUE: Dict[str, int] = {
    "under_150": 100,
    "150_500": 325,
    "500_2k": 1250,
    "2k_5k": 3500,
    "5k_plus": 7500,
}

# project price spread over a typical engagement
ONE_TIME_MONTHLY_VALUE: Dict[str, int] = {
    "under_3k": 500,
    "3k_10k": 1100,
    "10k_plus": 3000,
}

FULFILLMENT_LOCKED = frozenset({"package_based", "software_platform"})
LOCKED_STEP_TERMS: Tuple[str, ...] = (
    "productize",
    "productization",
    "packaged service",
    "package your service",
    "standardize",
)

BANNED_CHANNEL_SWITCHES: Tuple[str, ...] = (
    "inbound",
    "seo",
    "ads",
    "partnerships",
    "referrals",
    "content",
    "paid media",
    "organic",
    "word of mouth",
)


def monthly_price_value(inp: DiagnosticInput) -> Optional[int]:
    """Approximate monthly price, or None for usage/performance pricing."""
    p = inp.pricing
    if isinstance(p, RecurringPricing):
        return MONTHLY_TIER_VALUE.get(p.price_tier or "")
    if isinstance(p, HybridPricing):
        return MONTHLY_TIER_VALUE.get(p.retainer_tier or "")
    if isinstance(p, OneTimePricing):
        return ONE_TIME_MONTHLY_VALUE.get(p.price_tier or "")
    return None


def price_band_status(inp: DiagnosticInput) -> Optional[str]:
    """``"under"``, ``"over"`` or ``"within"``; None when no band applies."""
    value = monthly_price_value(inp)
    band = PRICING_BANDS.get(inp.icp_size or "", {}).get(inp.proof_level or "")
    if value is None or band is None:
        return None
    lower, upper = band
    if value < lower:
        return "under"
    if value > upper:
        return "over"
    return "within"


def fulfillment_locked(inp: DiagnosticInput) -> bool:
    return inp.fulfillment_complexity in FULFILLMENT_LOCKED


def is_channel_switch(texts: Iterable[str]) -> bool:
    combined = " ".join(t for t in texts if t).lower()
    if "abandon outbound" in combined:
        return True
    for term in BANNED_CHANNEL_SWITCHES:
        for phrase in (f"switch to {term}", f"try {term}", f"focus on {term}", f"consider {term} instead"):
            if phrase in combined:
                return True
    return False


CORE_DIMENSIONS: Tuple[str, ...] = (
    "proof_promise",
    "economic_feasibility",
    "fulfillment_scalability",
    "channel_fit",
)
LOCAL_OPTIMUM_PCT = 70
SETTLED_PCT = 50

STRUCTURAL_TERMS: Tuple[str, ...] = ("switch", "change", "shift", "restructure", "pivot", "replace")
REFINEMENT_TERMS: Tuple[str, ...] = ("optimize", "refine", "improve")

# (dimension, input field, values that are already the right call, phrases that would undo them)
SETTLED_SELECTIONS: Tuple[Tuple[str, str, FrozenSet[str], Tuple[str, ...]], ...] = (
    (
        "economic_feasibility",
        "pricing_structure",
        frozenset({"hybrid", "performance_only"}),
        ("switch pricing", "change pricing model", "lower price", "raise price", "retainer to hybrid"),
    ),
    (
        "proof_promise",
        "proof_level",
        frozenset({"moderate", "strong", "category_killer"}),
        ("more proof", "build proof", "testimonials", "case studies"),
    ),
    (
        "fulfillment_scalability",
        "fulfillment_complexity",
        FULFILLMENT_LOCKED,
        ("productize", "standardize", "package your service", "packaged service"),
    ),
    (
        "risk_alignment",
        "risk_model",
        frozenset({"conditional_guarantee", "full_guarantee"}),
        ("add guarantee", "add a guarantee", "offer guarantee", "add conditional guarantee",
         "add a conditional guarantee", "reduce risk"),
    ),
    (
        "icp_specificity",
        "icp_specificity",
        frozenset({"narrow", "exact"}),
        ("narrow icp", "focus icp", "tighten icp", "be more specific", "narrow vertical"),
    ),
)


def _at_least(score: int, pct: int) -> bool:
    return score * 100 >= pct * LATENT_MAX


def is_at_local_optimum(scores: LatentScores) -> bool:
    """True when every core dimension clears :data:`LOCAL_OPTIMUM_PCT`."""
    return all(_at_least(scores.get(key), LOCAL_OPTIMUM_PCT) for key in CORE_DIMENSIONS)


def settled_terms(inp: DiagnosticInput, scores: LatentScores) -> Tuple[str, ...]:
    """Phrases that would ask the user to redo a selection that already works."""
    terms = []
    for dimension, field, good, phrases in SETTLED_SELECTIONS:
        if getattr(inp, field) in good and _at_least(scores.get(dimension), SETTLED_PCT):
            terms.extend(phrases)
    return tuple(terms)


def mentions_any(texts: Iterable[str], terms: Iterable[str]) -> bool:
    combined = " ".join(t for t in texts if t).lower()
    return any(term in combined for term in terms)


def is_structural(texts: Iterable[str]) -> bool:
    """Restructuring advice: a switch/pivot word with no refine/improve framing."""
    texts = tuple(texts)
    return mentions_any(texts, STRUCTURAL_TERMS) and not mentions_any(texts, REFINEMENT_TERMS)
