"""Dimension scorer.

Each latent dimension starts from a base, adds contributions looked up in the
category tables, and is clamped into ``[LATENT_MIN, LATENT_MAX]``. Inputs are
checked for completeness before any lookup happens.
"""

from __future__ import annotations

import logging
from typing import Any

from . import tables as T
from .config import LATENT_MAX, LATENT_MIN
from .types import DiagnosticInput, HybridPricing, LatentScores, OneTimePricing, RecurringPricing, UsagePricing
from .validators import check_complete, coerce_input

log = logging.getLogger(__name__)

__all__ = ["score_dimensions", "clamp"]

_DIMENSION_BASE = 10


def clamp(value: int) -> int:
    return max(LATENT_MIN, min(LATENT_MAX, int(value)))


def _price_contribution(inp: DiagnosticInput) -> int:
    p = inp.pricing
    if isinstance(p, RecurringPricing):
        return T.lookup(T.EFI_RECURRING_TIER_MOD, p.price_tier, "EFI_RECURRING_TIER_MOD")
    if isinstance(p, OneTimePricing):
        return T.lookup(T.EFI_ONE_TIME_TIER_MOD, p.price_tier, "EFI_ONE_TIME_TIER_MOD")
    if isinstance(p, UsagePricing):
        return (
            T.lookup(T.EFI_USAGE_OUTPUT_MOD, p.output_type, "EFI_USAGE_OUTPUT_MOD")
            + T.lookup(T.EFI_USAGE_VOLUME_MOD, p.volume_tier, "EFI_USAGE_VOLUME_MOD")
        )
    total = 0
    if isinstance(p, HybridPricing):
        total += T.lookup(T.EFI_RETAINER_TIER_MOD, p.retainer_tier, "EFI_RETAINER_TIER_MOD")
    # hybrid and performance-only both carry a basis and a comp tier
    total += T.lookup(T.EFI_BASIS_MOD, inp.performance_basis, "EFI_BASIS_MOD")
    total += T.lookup(T.EFI_COMP_TIER_MOD, inp.comp_tier, "EFI_COMP_TIER_MOD")
    return total


def _economic_feasibility(inp: DiagnosticInput) -> int:
    structure = inp.pricing_structure
    score = T.lookup(T.EFI_PRICING_BASE, structure, "EFI_PRICING_BASE")
    score += T.lookup(T.lookup(T.EFI_SIZE_MOD, inp.icp_size, "EFI_SIZE_MOD"), structure, "EFI_SIZE_MOD")
    score += T.lookup(T.lookup(T.EFI_MATURITY_MOD, inp.icp_maturity, "EFI_MATURITY_MOD"), structure, "EFI_MATURITY_MOD")
    score += T.lookup(T.EFI_RISK_MOD, inp.risk_model, "EFI_RISK_MOD")
    score += _price_contribution(inp)
    return clamp(score)


def _proof_promise(inp: DiagnosticInput) -> int:
    strength = T.lookup(T.PROOF_STRENGTH, inp.proof_level, "PROOF_STRENGTH")
    demand = T.lookup(T.PROMISE_DEMAND, inp.promise_bucket, "PROMISE_DEMAND")
    score = _DIMENSION_BASE
    if strength >= demand + 1:
        score += T.PROOF_SURPLUS_BONUS
    elif strength == demand:
        score += T.PROOF_MATCH_BONUS
    elif strength == demand - 1:
        score += T.PROOF_SHORT_PENALTY
    else:
        score += T.PROOF_GAP_PENALTY
    if inp.proof_level == "category_killer":
        score += T.CATEGORY_KILLER_BONUS
    if inp.icp_specificity == "broad" and strength <= 1:
        score -= 6
    elif inp.icp_specificity in ("narrow", "exact") and strength >= 2:
        score += 3
    return clamp(score)


def _fulfillment_scalability(inp: DiagnosticInput) -> int:
    complexity = inp.fulfillment_complexity
    score = _DIMENSION_BASE + T.lookup(T.FULFILLMENT_MOD, complexity, "FULFILLMENT_MOD")
    if complexity == "custom_dfy" and inp.pricing_structure == "performance_only":
        score -= 4
    if complexity == "custom_dfy" and inp.icp_size in T.LARGE_SIZES:
        score -= 4
    if complexity == "coaching_advisory" and inp.icp_size in T.SMALL_SIZES:
        score += 2
    return clamp(score)


def _risk_alignment(inp: DiagnosticInput) -> int:
    by_proof = T.lookup(T.RISK_PROOF_MOD, inp.risk_model, "RISK_PROOF_MOD")
    score = _DIMENSION_BASE + T.lookup(by_proof, inp.proof_level, "RISK_PROOF_MOD")
    if inp.icp_maturity == "enterprise" and inp.risk_model == "no_guarantee":
        score -= 3
    return clamp(score)


def _channel_fit(inp: DiagnosticInput) -> int:
    score = T.lookup(T.CHANNEL_OFFER_BASE, inp.offer_type, "CHANNEL_OFFER_BASE")
    score += T.lookup(T.CHANNEL_SEGMENT_MOD, inp.scoring_segment, "CHANNEL_SEGMENT_MOD")
    score += T.lookup(T.CHANNEL_BUCKET_MOD, inp.promise_bucket, "CHANNEL_BUCKET_MOD")
    if inp.offer_type == "operational_enablement" and inp.fulfillment_complexity == "package_based":
        score += 2
    if inp.promise_outcome in T.OUTBOUND_INCOMPATIBLE_OUTCOMES:
        score += T.OUTBOUND_INCOMPATIBLE_PENALTY
    return clamp(score)


def _icp_specificity(inp: DiagnosticInput) -> int:
    strength = T.lookup(T.PROOF_STRENGTH, inp.proof_level, "PROOF_STRENGTH")
    score = _DIMENSION_BASE + T.lookup(T.SPECIFICITY_MOD, inp.icp_specificity, "SPECIFICITY_MOD")
    if inp.icp_specificity == "broad" and strength <= 1:
        score -= 4
    if inp.icp_specificity == "exact" and strength >= 3:
        score += 2
    return clamp(score)


def score_dimensions(inp: Any) -> LatentScores:
    """Compute the six latent subscores for a complete input.

    Parameters
    ----------
    inp:
        A :class:`DiagnosticInput` or a flat form mapping.

    Returns
    -------
    LatentScores
        Fresh, immutable subscores, each within ``[LATENT_MIN, LATENT_MAX]``.

    Raises
    ------
    ValidationError
        When the input is incomplete; no subscore is computed.
    """

    inp = coerce_input(inp)
    check_complete(inp)
    scores = LatentScores(
        economic_feasibility=_economic_feasibility(inp),
        proof_promise=_proof_promise(inp),
        fulfillment_scalability=_fulfillment_scalability(inp),
        risk_alignment=_risk_alignment(inp),
        channel_fit=_channel_fit(inp),
        icp_specificity=_icp_specificity(inp),
    )
    log.debug("latent scores: %s", scores.as_dict())
    return scores
