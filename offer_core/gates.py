"""Gate table and evaluator.

A gate is a predicate over the frozen ``(input, scores)`` pair plus the data
the rest of the engine needs about it: its kind, the dimensions it implicates,
the recommendation category it maps to, and (soft gates only) the score cap.
Each predicate is evaluated independently; only the cap selection looks at the
set of triggered gates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from . import tables as T
from .stability import price_band_status
from .types import DiagnosticInput, GateKind, GateResult, LatentScores
from .validators import check_complete

log = logging.getLogger(__name__)

__all__ = ["Gate", "GATES", "GATES_BY_ID", "evaluate_gates", "implicated_dimensions"]

Predicate = Callable[[DiagnosticInput, LatentScores], bool]


@dataclass(frozen=True)
class Gate:
    id: str
    kind: GateKind
    label: str
    dimensions: Tuple[str, ...]
    category: str
    predicate: Predicate
    cap: Optional[int] = None


def _proof(inp: DiagnosticInput) -> int:
    return T.lookup(T.PROOF_STRENGTH, inp.proof_level, "PROOF_STRENGTH")


def _aggressive_comp(inp: DiagnosticInput) -> bool:
    return inp.comp_tier in T.AGGRESSIVE_COMP_TIERS


GATES: Tuple[Gate, ...] = (
    # ---- hard gates ----
    Gate(
        id="economic_infeasibility",
        kind="hard",
        label="Economic Feasibility",
        dimensions=("economic_feasibility",),
        category="pricing_shift",
        predicate=lambda inp, s: s.economic_feasibility <= 4,
    ),
    Gate(
        id="proof_promise_gap",
        kind="hard",
        label="Proof-to-Promise Credibility",
        dimensions=("proof_promise",),
        category="promise_shift",
        predicate=lambda inp, s: s.proof_promise <= 6,
    ),
    Gate(
        id="fulfillment_ceiling",
        kind="hard",
        label="Fulfillment Scalability",
        dimensions=("fulfillment_scalability",),
        category="fulfillment_shift",
        predicate=lambda inp, s: s.fulfillment_scalability <= 6,
    ),
    Gate(
        id="channel_mismatch",
        kind="hard",
        label="Channel Fit",
        dimensions=("channel_fit",),
        category="positioning_shift",
        predicate=lambda inp, s: s.channel_fit <= 6,
    ),
    Gate(
        id="broad_icp_unproven",
        kind="hard",
        label="ICP Specificity + Proof",
        dimensions=("icp_specificity", "proof_promise"),
        category="icp_shift",
        predicate=lambda inp, s: inp.icp_specificity == "broad" and _proof(inp) <= 2,
    ),
    Gate(
        id="unsustainable_economics",
        kind="hard",
        label="Unsustainable Economics",
        dimensions=("economic_feasibility", "risk_alignment"),
        category="pricing_shift",
        predicate=lambda inp, s: (
            inp.pricing_structure == "performance_only"
            and _aggressive_comp(inp)
            and inp.risk_model == "full_guarantee"
        ),
    ),
    Gate(
        id="guarantee_without_proof",
        kind="hard",
        label="Guarantee Without Proof",
        dimensions=("risk_alignment", "proof_promise"),
        category="founder_psychology_check",
        predicate=lambda inp, s: inp.risk_model == "full_guarantee" and inp.proof_level == "none",
    ),
    # ---- soft gates ----
    Gate(
        id="marginal_economics",
        kind="soft",
        label="Marginal Economics",
        dimensions=("economic_feasibility",),
        category="pricing_shift",
        predicate=lambda inp, s: 5 <= s.economic_feasibility <= 7,
        cap=69,
    ),
    Gate(
        id="volume_promise_moderate_proof",
        kind="soft",
        label="Volume Promise on Moderate Proof",
        dimensions=("proof_promise",),
        category="promise_shift",
        predicate=lambda inp, s: inp.proof_level == "moderate" and inp.promise_bucket == "top_of_funnel_volume",
        cap=74,
    ),
    Gate(
        id="hybrid_small_icp",
        kind="soft",
        label="Hybrid Pricing for Small Buyers",
        dimensions=("economic_feasibility",),
        category="pricing_shift",
        predicate=lambda inp, s: inp.pricing_structure == "hybrid" and inp.icp_size in T.SMALL_SIZES,
        cap=72,
    ),
    Gate(
        id="conditional_guarantee_low_proof",
        kind="soft",
        label="Conditional Guarantee on Thin Proof",
        dimensions=("risk_alignment",),
        category="risk_shift",
        predicate=lambda inp, s: inp.risk_model == "conditional_guarantee" and _proof(inp) <= 1,
        cap=70,
    ),
    Gate(
        id="percent_basis_early_icp",
        kind="soft",
        label="Revenue Share With Early-Stage Buyers",
        dimensions=("economic_feasibility",),
        category="pricing_shift",
        predicate=lambda inp, s: (
            inp.performance_basis in ("percent_revenue", "percent_profit")
            and inp.icp_maturity in T.EARLY_MATURITIES
        ),
        cap=65,
    ),
    Gate(
        id="compensation_friction",
        kind="soft",
        label="Compensation Friction",
        dimensions=("economic_feasibility",),
        category="pricing_shift",
        predicate=lambda inp, s: (
            inp.pricing_structure in ("hybrid", "performance_only") and _aggressive_comp(inp)
        ),
        cap=75,
    ),
    Gate(
        id="pricing_outside_band",
        kind="soft",
        label="Price Outside Viable Band",
        dimensions=("economic_feasibility",),
        category="pricing_shift",
        predicate=lambda inp, s: price_band_status(inp) in ("under", "over"),
        cap=72,
    ),
    Gate(
        id="revenue_promise_early_icp",
        kind="soft",
        label="Revenue Promise to Early-Stage Buyers",
        dimensions=("proof_promise",),
        category="promise_shift",
        predicate=lambda inp, s: (
            inp.promise_bucket == "top_line_revenue" and inp.icp_maturity in T.EARLY_MATURITIES
        ),
        cap=70,
    ),
)

GATES_BY_ID: Dict[str, Gate] = {g.id: g for g in GATES}


def evaluate_gates(inp: DiagnosticInput, scores: LatentScores) -> GateResult:
    """Run every gate against ``(inp, scores)``.

    Triggered ids are reported in table order. ``score_cap`` is the minimum cap
    among triggered soft gates, or None when no soft gate fired.

    Raises :class:`ValidationError` for incomplete input, like the scorer.
    """

    check_complete(inp)
    hard: List[str] = []
    soft: List[str] = []
    caps: List[int] = []
    for gate in GATES:
        if not gate.predicate(inp, scores):
            continue
        if gate.kind == "hard":
            hard.append(gate.id)
        else:
            soft.append(gate.id)
            caps.append(int(gate.cap))
    result = GateResult(
        hard_gates=tuple(hard),
        soft_gates=tuple(soft),
        score_cap=min(caps) if caps else None,
    )
    if hard or soft:
        log.debug("gates triggered: hard=%s soft=%s cap=%s", hard, soft, result.score_cap)
    return result


def implicated_dimensions(gate_ids) -> set[str]:
    out: set[str] = set()
    for gid in gate_ids:
        gate = T.lookup(GATES_BY_ID, gid, "GATES_BY_ID")
        out.update(gate.dimensions)
    return out
