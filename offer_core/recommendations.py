from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

from . import config as cfg_defaults
from .gates import GATES_BY_ID
from .stability import (
    LOCKED_STEP_TERMS,
    fulfillment_locked,
    is_at_local_optimum,
    is_structural,
    mentions_any,
    price_band_status,
    settled_terms,
)
from .tables import EARLY_MATURITIES, SMALL_SIZES, lookup
from .types import DiagnosticInput, GateResult, LatentScores, Recommendation
from .validators import coerce_input

log = logging.getLogger(__name__)

__all__ = [
    "CATEGORY_PRIORITY",
    "DIMENSION_CATEGORY",
    "FIX_POOLS",
    "RULES",
    "RecommendationRule",
    "RecommendationSettings",
    "generate_recommendations",
]

CATEGORY_PRIORITY: Tuple[str, ...] = (
    "pricing_shift",
    "promise_shift",
    "icp_shift",
    "fulfillment_shift",
    "risk_shift",
    "positioning_shift",
    "founder_psychology_check",
)

DIMENSION_CATEGORY: Dict[str, str] = {
    "economic_feasibility": "pricing_shift",
    "proof_promise": "promise_shift",
    "fulfillment_scalability": "fulfillment_shift",
    "risk_alignment": "risk_shift",
    "channel_fit": "positioning_shift",
    "icp_specificity": "icp_shift",
}

_SEVERITY_RANK: Dict[str, int] = {"blocking": 2, "moderate": 1}

FIX_POOLS: Dict[str, Tuple[str, ...]] = {
    "icp_shift": (
        "Move upmarket to buyers with budget + urgency",
        "Narrow vertical to buyers who strongly feel the problem",
        "Switch to buyers already doing the precursor step (ex: running ads)",
        "Target founders with 3–10 clients instead of pre-revenue",
        "Target buyers with existing lead flow",
        "Prioritize industries with budget (B2B services, SaaS)",
        "Change vertical to higher budget segment",
    ),
    "promise_shift": (
        "Switch promise to revenue if ICP has pipeline",
        "Switch promise to leads/pipeline if ICP lacks revenue control",
        "Switch promise to cost/time savings if ICP is cost-sensitive",
        "Focus on efficiency gains for mature buyers",
        "Lead with compliance outcomes for enterprise",
    ),
    "fulfillment_shift": (
        "Switch from coaching to DFY if outcome requires execution",
        "Switch from DFY to packaged service if margins break",
        "Add automation/tooling layer to increase throughput",
        "Productize delivery to reduce labor dependency",
        "Tighten SOPs so delivery time per client drops",
    ),
    "pricing_shift": (
        "Move from retainer to hybrid model",
        "Add performance slice to justify higher retainer",
        "Reduce retainer but add conditional guarantee",
        "Increase price but narrow ICP",
        "Switch to project-based for high-churn industries",
    ),
    "risk_shift": (
        "Add conditional guarantee to reduce buyer hesitation",
        "Add performance triggers/milestones",
        "Remove full guarantee if hurting economics",
        "Add phased engagement (entry offer + rollout)",
        "Offer pilot program to build trust",
        "Use milestone-based billing",
    ),
    "positioning_shift": (
        "Clarify who it's for in all messaging",
        "Clarify what changes after working with you",
        "Clarify why now (create urgency)",
        "Clarify expected timeline to results",
        "Lead with the transformation, not the service",
    ),
    "founder_psychology_check": (
        "Reduce promise scope for first 3–5 clients",
        "Increase price after early proof",
        "Add guarantee once unit economics are proven",
        "Test with a smaller ICP before scaling",
        "Focus on one promise before expanding",
    ),
}

When = Callable[[DiagnosticInput], bool]


@dataclass(frozen=True)
class RecommendationRule:
    """Text payload for one (category, source, context) combination.

    ``sources`` limits the rule to candidates raised by those gate or dimension
    ids (None matches any source); ``when`` narrows it by input values. The
    first matching rule in :data:`RULES` that does not contradict the offer's
    current state wins; the category's default (no sources, no ``when``) always
    qualifies. ``steps`` of None means the category's :data:`FIX_POOLS` entry.
    """

    category: str
    headline: str
    explanation: str
    desired_state: str
    sources: Optional[FrozenSet[str]] = None
    when: Optional[When] = None
    steps: Optional[Tuple[str, ...]] = None

    @property
    def is_default(self) -> bool:
        return self.sources is None and self.when is None

    def matches(self, category: str, source: str, inp: DiagnosticInput) -> bool:
        if category != self.category:
            return False
        if self.sources is not None and source not in self.sources:
            return False
        return self.when is None or bool(self.when(inp))


def _is_small(inp: DiagnosticInput) -> bool:
    return inp.icp_size in SMALL_SIZES


RULES: Tuple[RecommendationRule, ...] = (
    # pricing
    RecommendationRule(
        category="pricing_shift",
        sources=frozenset({"unsustainable_economics"}),
        headline="Your pricing and guarantee stack every risk on you",
        explanation=(
            "A high performance rate on top of a full refund means one slow month wipes out your margin. "
            "Buyers read it as a deal that cannot last."
        ),
        steps=(
            "Replace the full refund with a conditional guarantee",
            "Cut the performance rate to a level you can carry for 90 days",
            "Add a small base fee that covers delivery cost",
            "Tie payouts to milestones you control",
        ),
        desired_state="Every client is profitable even when results arrive slower than planned",
    ),
    RecommendationRule(
        category="pricing_shift",
        when=lambda inp: (
            inp.icp_industry in ("dtc_ecommerce", "local_services")
            and inp.pricing_structure == "recurring"
            and inp.fulfillment_complexity == "custom_dfy"
        ),
        headline="Recurring custom work burns you out in this industry",
        explanation=(
            "High-churn industries cancel often. Custom retainers leave you constantly onboarding."
        ),
        steps=(
            "Switch to project-based pricing",
            "Create packages with defined scope and timelines",
            "Add setup fees to cover onboarding costs",
            "Productize your most common deliverables",
        ),
        desired_state="Pricing model protects margins even with client churn",
    ),
    RecommendationRule(
        category="pricing_shift",
        when=lambda inp: inp.pricing_structure == "performance_only",
        headline="Performance-only pricing needs control",
        explanation=(
            "You can't do pure performance unless you control the outcome. Add a base retainer."
        ),
        steps=(
            "Add a base retainer plus performance bonus",
            "Switch to hybrid pricing (50% retainer + 50% performance)",
            "Only go full performance where you control the outcome end to end",
            "Add milestones to de-risk your cashflow",
        ),
        desired_state="You get paid for effort while upside comes from results",
    ),
    RecommendationRule(
        category="pricing_shift",
        sources=frozenset({"percent_basis_early_icp"}),
        headline="Revenue share needs revenue to share",
        explanation=(
            "Early-stage buyers have little revenue or profit, so a percentage of it pays you almost nothing."
        ),
        steps=(
            "Charge per booked appointment or qualified opportunity instead",
            "Add a small fixed fee for the first 90 days",
            "Move to a percentage only after the client passes a revenue milestone",
        ),
        desired_state="Your pay tracks outcomes the buyer can already produce",
    ),
    RecommendationRule(
        category="pricing_shift",
        sources=frozenset({"pricing_outside_band"}),
        when=lambda inp: price_band_status(inp) == "under",
        headline="You're charging less than this buyer expects to pay",
        explanation=(
            "Your price sits below what buyers of this size pay for this level of proof. "
            "Low prices read as low confidence and starve delivery."
        ),
        desired_state="Price sits inside the range buyers of this size already pay",
    ),
    RecommendationRule(
        category="pricing_shift",
        sources=frozenset({"pricing_outside_band"}),
        when=lambda inp: price_band_status(inp) == "over",
        headline="Your price is above what this buyer can carry",
        explanation=(
            "Buyers of this size with your current proof rarely approve this budget. "
            "Either bring the price into range or sell to larger buyers."
        ),
        desired_state="Price sits inside the range buyers of this size already pay",
    ),
    RecommendationRule(
        category="pricing_shift",
        headline="Your price doesn't match your buyer's budget",
        explanation="There's a gap between what you charge and what your target can pay.",
        desired_state="Price feels like a no-brainer for your ideal buyer",
    ),
    # promise
    RecommendationRule(
        category="promise_shift",
        when=lambda inp: inp.icp_maturity in EARLY_MATURITIES,
        headline="Your promise is too big for early-stage buyers",
        explanation=(
            "Early-stage companies need leads or pipeline first. Revenue promises feel impossible to them."
        ),
        desired_state="Promise matches what buyer can realistically achieve",
    ),
    RecommendationRule(
        category="promise_shift",
        when=lambda inp: inp.promise_bucket == "top_line_revenue",
        headline="Revenue promises need pipeline-ready buyers",
        explanation=(
            "You're promising revenue but your ICP may not have the sales infrastructure to close deals."
        ),
        desired_state="Buyer can turn your output into revenue themselves",
    ),
    RecommendationRule(
        category="promise_shift",
        sources=frozenset({"proof_promise_gap", "volume_promise_moderate_proof"}),
        headline="Your proof doesn't back up your promise yet",
        explanation=(
            "Buyers weigh what you promise against what you've already shown. Right now the promise is bigger."
        ),
        steps=(
            "Collect two or three case studies on the exact promise",
            "Lower the promise to the result you've already delivered",
            "Run pilot deals to build case studies first",
        ),
        desired_state="Every claim in your offer is backed by a result you can show",
    ),
    RecommendationRule(
        category="promise_shift",
        headline="Align your promise to what this buyer actually needs",
        explanation="Your promise doesn't match the buyer's current stage or priorities.",
        desired_state="Promise directly solves their most urgent problem",
    ),
    # icp
    RecommendationRule(
        category="icp_shift",
        sources=frozenset({"broad_icp_unproven"}),
        headline="Narrow your market until your proof speaks for itself",
        explanation=(
            "A broad target only works with overwhelming proof. With limited proof, every prospect "
            "needs convincing from scratch."
        ),
        steps=(
            "Pick the one vertical where your best results came from",
            "Narrow vertical to buyers who strongly feel the problem",
            "Rewrite your offer for that single segment",
        ),
        desired_state="Your proof comes from the same kind of buyer you're contacting",
    ),
    RecommendationRule(
        category="icp_shift",
        when=lambda inp: inp.icp_maturity == "pre_revenue",
        headline="Switch to a buyer who already feels the pain",
        explanation=(
            "Pre-revenue buyers don't have money or urgency. They delay decisions and rarely close."
        ),
        desired_state="Buyer has money + has the problem + feels urgency now",
    ),
    RecommendationRule(
        category="icp_shift",
        when=lambda inp: _is_small(inp) and inp.icp_industry == "local_services",
        headline="Your buyers can't afford what you're selling",
        explanation=(
            "Small local businesses have tight budgets. Either simplify what you offer or find buyers "
            "with more cash."
        ),
        desired_state="Buyer can comfortably afford your price without hesitation",
    ),
    RecommendationRule(
        category="icp_shift",
        headline="Find buyers who are ready to buy now",
        explanation=(
            "Your current target market isn't showing enough buying signals. Shift to a segment with "
            "active demand."
        ),
        desired_state="Buyer has budget approved and timeline in place",
    ),
    # fulfillment
    RecommendationRule(
        category="fulfillment_shift",
        when=lambda inp: inp.fulfillment_complexity == "coaching_advisory" and inp.icp_maturity == "pre_revenue",
        headline="Coaching doesn't work for pre-revenue buyers",
        explanation="Pre-revenue founders can't implement advice. They need done-for-you help.",
        steps=(
            "Add done-for-you elements to your coaching",
            "Create a hybrid offer with implementation support",
            "Target buyers who already have a team to execute",
            "Switch from coaching to DFY if outcome requires execution",
        ),
        desired_state="Buyer can actually use what you deliver",
    ),
    RecommendationRule(
        category="fulfillment_shift",
        when=lambda inp: inp.fulfillment_complexity in ("custom_dfy", "staffing_placement"),
        headline="Your delivery is too heavy for this buyer",
        explanation=(
            "Labor-intensive fulfillment eats your margins with smaller clients. Simplify or charge more."
        ),
        desired_state="Delivery effort matches the price point profitably",
    ),
    RecommendationRule(
        category="fulfillment_shift",
        headline="Your delivery model doesn't match your promise",
        explanation="How you deliver doesn't reliably produce the outcome you're selling.",
        desired_state="Fulfillment method reliably produces promised results",
    ),
    # risk
    RecommendationRule(
        category="risk_shift",
        when=lambda inp: inp.icp_maturity == "pre_revenue",
        headline="Pre-revenue buyers need risk removed",
        explanation="They don't have cash to gamble. Reduce their perceived risk to close faster.",
        steps=(
            "Add a conditional guarantee (refund if X doesn't happen)",
            "Offer pay-after-results for the first month",
            "Create a pilot program to build trust",
            "Add clear milestones with exit points",
        ),
        desired_state="Buyer feels safe saying yes because risk is on you",
    ),
    RecommendationRule(
        category="risk_shift",
        when=lambda inp: inp.risk_model == "no_guarantee",
        headline="No guarantee means slow decisions",
        explanation="Without risk reversal, buyers hesitate. A smart guarantee can speed up closes.",
        desired_state="Buyer says yes faster because they feel protected",
    ),
    RecommendationRule(
        category="risk_shift",
        sources=frozenset({"conditional_guarantee_low_proof"}),
        headline="Your guarantee is promising more than your proof",
        explanation=(
            "A guarantee without results behind it invites the wrong buyers and exposes you to refunds."
        ),
        steps=(
            "Run pilot deals to build case studies first",
            "Narrow the guarantee to an input you control (meetings held, not revenue)",
            "Add performance triggers/milestones",
        ),
        desired_state="Your guarantee covers only results you've already delivered",
    ),
    RecommendationRule(
        category="risk_shift",
        headline="Adjust your risk model for this market",
        explanation="Your risk structure isn't aligned with what this buyer segment expects.",
        desired_state="Risk feels fair to both you and the buyer",
    ),
    # positioning
    RecommendationRule(
        category="positioning_shift",
        sources=frozenset({"channel_mismatch"}),
        headline="This promise is hard to sell in a cold message",
        explanation=(
            "Cold outreach works when the buyer can picture the result in one sentence. "
            "Reframe the offer around a concrete, near-term outcome."
        ),
        steps=(
            "Lead with the transformation, not the service",
            "Name the measurable result in the first line",
            "Clarify expected timeline to results",
        ),
        desired_state="A prospect understands the result from a two-line email",
    ),
    RecommendationRule(
        category="positioning_shift",
        headline="Clarify exactly who this is for",
        explanation="When your positioning is fuzzy, buyers don't see themselves in your offer.",
        desired_state='Ideal buyer immediately says "this is for me"',
    ),
    # founder psychology
    RecommendationRule(
        category="founder_psychology_check",
        when=lambda inp: inp.icp_maturity == "pre_revenue",
        headline="Start smaller before going big",
        explanation=(
            "Early stage? Test your offer with a smaller scope before committing to guarantees."
        ),
        desired_state="You have proof of what works before scaling",
    ),
    RecommendationRule(
        category="founder_psychology_check",
        headline="Validate before you promise",
        explanation="Make sure you can deliver reliably before making big claims.",
        desired_state="Confidence backed by real results",
    ),
)


@dataclass(frozen=True)
class RecommendationSettings:
    threshold: int
    limit: int
    steps_max: int

    @staticmethod
    def from_cfg(cfg: Mapping[str, Any] | None) -> "RecommendationSettings":
        def _cfg_value(name: str, default: Any) -> Any:
            if cfg is None:
                return default
            if isinstance(cfg, Mapping) and name in cfg:
                return cfg[name]
            return getattr(cfg, name, default)

        return RecommendationSettings(
            threshold=int(_cfg_value("REMEDIATION_THRESHOLD", cfg_defaults.REMEDIATION_THRESHOLD)),
            limit=int(_cfg_value("RECOMMENDATION_LIMIT", cfg_defaults.RECOMMENDATION_LIMIT)),
            steps_max=int(_cfg_value("ACTION_STEPS_MAX", cfg_defaults.ACTION_STEPS_MAX)),
        )


@dataclass(frozen=True)
class _Candidate:
    source: str
    category: str
    severity: str
    subscore: int
    order: int


@dataclass(frozen=True)
class _Context:
    inp: DiagnosticInput
    severity: str
    at_local_optimum: bool
    settled: Tuple[str, ...]

    @property
    def holds_structure(self) -> bool:
        # a hard gate means the structure itself is wrong
        return self.at_local_optimum and self.severity != "blocking"


def _filter_step(step: str, ctx: _Context) -> bool:
    """True when ``step`` should be dropped for this input."""
    inp = ctx.inp
    text = step.lower()
    if inp.icp_maturity == "pre_revenue" and "performance-only" in text:
        return True
    if inp.icp_industry == "local_services" and "enterprise" in text:
        return True
    if inp.pricing_structure == "performance_only" and "performance slice" in text:
        return True
    if _is_small(inp) and "automation" in text:
        return True
    if fulfillment_locked(inp) and any(term in text for term in LOCKED_STEP_TERMS):
        return True
    if mentions_any((text,), ctx.settled):
        return True
    if ctx.holds_structure and is_structural((text,)):
        return True
    return False


def _action_steps(rule: RecommendationRule, ctx: _Context, steps_max: int) -> Tuple[str, ...]:
    pool: Sequence[str] = rule.steps if rule.steps is not None else FIX_POOLS[rule.category]
    kept = [step for step in pool if not _filter_step(step, ctx)]
    return tuple(kept[: max(1, steps_max)])


def _contradicts(rule: RecommendationRule, ctx: _Context) -> bool:
    own_text = (rule.headline, rule.explanation) + tuple(rule.steps or ())
    if mentions_any(own_text, ctx.settled):
        return True
    return ctx.holds_structure and is_structural((rule.headline, rule.explanation))


def _select_rule(category: str, source: str, ctx: _Context) -> RecommendationRule:
    for rule in RULES:
        if not rule.matches(category, source, ctx.inp):
            continue
        if rule.is_default or not _contradicts(rule, ctx):
            return rule
        log.debug("rule %r skipped for %s/%s", rule.headline, category, source)
    raise LookupError(f"no recommendation rule for {category}/{source}")


def _candidates(scores: LatentScores, gate_result: GateResult, threshold: int) -> List[_Candidate]:
    out: List[_Candidate] = []
    for gid in tuple(gate_result.hard_gates) + tuple(gate_result.soft_gates):
        gate = lookup(GATES_BY_ID, gid, "GATES_BY_ID")
        out.append(
            _Candidate(
                source=gate.id,
                category=gate.category,
                severity="blocking" if gate.kind == "hard" else "moderate",
                subscore=min(scores.get(d) for d in gate.dimensions),
                order=len(out),
            )
        )
    for key, value in scores.items():
        if value < threshold:
            out.append(
                _Candidate(
                    source=key,
                    category=DIMENSION_CATEGORY[key],
                    severity="moderate",
                    subscore=value,
                    order=len(out),
                )
            )
    return out


def _dedupe(candidates: Sequence[_Candidate]) -> List[_Candidate]:
    best: Dict[str, _Candidate] = {}
    for cand in candidates:
        current = best.get(cand.category)
        if current is None or _strength_key(cand) < _strength_key(current):
            best[cand.category] = cand
    return list(best.values())


def _strength_key(cand: _Candidate) -> Tuple[int, int, int]:
    return (-_SEVERITY_RANK[cand.severity], cand.subscore, cand.order)


def _order_key(cand: _Candidate) -> Tuple[int, int, int]:
    return (-_SEVERITY_RANK[cand.severity], cand.subscore, CATEGORY_PRIORITY.index(cand.category))


def generate_recommendations(
    inp: Any,
    scores: LatentScores,
    gate_result: GateResult,
    cfg: Mapping[str, Any] | None = None,
) -> List[Recommendation]:
    """Turn triggered gates and weak dimensions into ordered remediation items.

    Parameters
    ----------
    inp:
        The scored :class:`DiagnosticInput` (or its form mapping).
    scores, gate_result:
        Output of :func:`offer_core.scoring.score_dimensions` and
        :func:`offer_core.gates.evaluate_gates` for the same input.
    cfg:
        Optional overrides (``REMEDIATION_THRESHOLD``, ``RECOMMENDATION_LIMIT``,
        ``ACTION_STEPS_MAX``); defaults come from :mod:`offer_core.config`.

    Returns
    -------
    list of Recommendation
        At most one per category, blocking first, then lowest subscore, then
        :data:`CATEGORY_PRIORITY`. Empty when nothing needs fixing.
    """

    settings = RecommendationSettings.from_cfg(cfg)
    inp = coerce_input(inp)
    chosen = sorted(_dedupe(_candidates(scores, gate_result, settings.threshold)), key=_order_key)
    if settings.limit > 0:
        chosen = chosen[: settings.limit]

    at_optimum = is_at_local_optimum(scores)
    settled = settled_terms(inp, scores)
    recs: List[Recommendation] = []
    for cand in chosen:
        ctx = _Context(inp=inp, severity=cand.severity, at_local_optimum=at_optimum, settled=settled)
        rule = _select_rule(cand.category, cand.source, ctx)
        recs.append(
            Recommendation(
                id=f"{cand.category}_{cand.source}",
                category=cand.category,
                headline=rule.headline,
                plain_explanation=rule.explanation,
                action_steps=_action_steps(rule, ctx, settings.steps_max),
                desired_state=rule.desired_state,
                severity=cand.severity,
                source=cand.source,
            )
        )
    log.debug("recommendations: %s", [r.id for r in recs])
    return recs
