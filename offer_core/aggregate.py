from __future__ import annotations

import logging
from typing import Dict, Tuple

from .config import LATENT_MAX, MODERATE_THRESHOLD, OUTBOUND_READY_MIN, STRONG_THRESHOLD
from .errors import ConfigurationDefect
from .gates import implicated_dimensions
from .stability import is_at_local_optimum
from .tables import DIMENSION_LABELS
from .types import DIMENSIONS, GateResult, LatentScores, PrimaryBottleneck, ReadinessLabel, ScoreResult

log = logging.getLogger(__name__)

__all__ = [
    "DIMENSION_WEIGHTS",
    "BOTTLENECK_PRIORITY",
    "check_weights",
    "raw_score",
    "readiness_label",
    "primary_bottleneck",
    "aggregate",
]

# percent of the composite carried by each dimension; sums to 100
DIMENSION_WEIGHTS: Dict[str, int] = {
    "economic_feasibility": 20,
    "proof_promise": 20,
    "fulfillment_scalability": 16,
    "channel_fit": 16,
    "risk_alignment": 14,
    "icp_specificity": 14,
}

# tie-break when two dimensions share the lowest subscore; earlier wins
BOTTLENECK_PRIORITY: Tuple[str, ...] = (
    "economic_feasibility",
    "proof_promise",
    "fulfillment_scalability",
    "channel_fit",
    "risk_alignment",
    "icp_specificity",
)


def check_weights() -> None:
    """Raise :class:`ConfigurationDefect` unless the weight and tie-break tables cover each dimension once."""
    total = sum(DIMENSION_WEIGHTS.values())
    if total != 100:
        raise ConfigurationDefect("DIMENSION_WEIGHTS", total)
    for name, keys in (("DIMENSION_WEIGHTS", tuple(DIMENSION_WEIGHTS)), ("BOTTLENECK_PRIORITY", BOTTLENECK_PRIORITY)):
        if len(keys) != len(DIMENSIONS) or set(keys) != set(DIMENSIONS):
            raise ConfigurationDefect(name, sorted(set(DIMENSIONS) ^ set(keys)))


check_weights()


def raw_score(scores: LatentScores) -> int:
    """Weighted composite on 0-100, rounded half up in integer arithmetic."""
    total = sum(DIMENSION_WEIGHTS[key] * value for key, value in scores.items())
    return (2 * total + LATENT_MAX) // (2 * LATENT_MAX)


def readiness_label(score: int) -> ReadinessLabel:
    if score >= STRONG_THRESHOLD:
        return "Strong"
    if score >= MODERATE_THRESHOLD:
        return "Moderate"
    return "Weak"


def primary_bottleneck(scores: LatentScores, gate_result: GateResult) -> PrimaryBottleneck:
    rank = {key: idx for idx, key in enumerate(BOTTLENECK_PRIORITY)}
    dimension = min(DIMENSIONS, key=lambda key: (scores.get(key), rank[key]))
    label = DIMENSION_LABELS[dimension]
    if dimension in implicated_dimensions(gate_result.hard_gates):
        return PrimaryBottleneck(
            dimension=dimension,
            label=label,
            severity="blocking",
            explanation=(
                f"Outbound is blocked due to {label}. "
                "This must be fixed before any other optimizations."
            ),
        )
    return PrimaryBottleneck(
        dimension=dimension,
        label=label,
        severity="moderate",
        explanation=f"{label} is your primary constraint limiting outbound effectiveness.",
    )


def aggregate(scores: LatentScores, gate_result: GateResult) -> ScoreResult:
    """Fold subscores and gate results into the terminal :class:`ScoreResult`."""

    raw = raw_score(scores)
    alignment = raw
    if gate_result.soft_gates and gate_result.score_cap is not None:
        alignment = min(raw, gate_result.score_cap)
    alignment = max(0, min(100, alignment))
    ready = alignment >= OUTBOUND_READY_MIN and not gate_result.hard_gates
    result = ScoreResult(
        alignment_score=alignment,
        raw_score=raw,
        readiness_label=readiness_label(alignment),
        latent_scores=scores,
        primary_bottleneck=primary_bottleneck(scores, gate_result),
        outbound_ready=ready,
        triggered_hard_gates=tuple(gate_result.hard_gates),
        triggered_soft_gates=tuple(gate_result.soft_gates),
        score_cap=gate_result.score_cap,
        is_at_local_optimum=is_at_local_optimum(scores),
    )
    log.debug("aggregate raw=%s alignment=%s ready=%s", raw, alignment, ready)
    return result
