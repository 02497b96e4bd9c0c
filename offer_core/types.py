from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterator, Literal, Optional, Tuple, Union

PricingStructure = Literal["recurring", "one_time", "usage_based", "hybrid", "performance_only"]
Severity = Literal["blocking", "moderate"]
ReadinessLabel = Literal["Strong", "Moderate", "Weak"]
GateKind = Literal["hard", "soft"]

DIMENSIONS: Tuple[str, ...] = (
    "economic_feasibility",
    "proof_promise",
    "fulfillment_scalability",
    "risk_alignment",
    "channel_fit",
    "icp_specificity",
)


@dataclass(frozen=True)
class RecurringPricing:
    price_tier: Optional[str] = None
    structure: str = field(default="recurring", init=False)


@dataclass(frozen=True)
class OneTimePricing:
    price_tier: Optional[str] = None
    structure: str = field(default="one_time", init=False)


@dataclass(frozen=True)
class UsagePricing:
    output_type: Optional[str] = None
    volume_tier: Optional[str] = None
    structure: str = field(default="usage_based", init=False)


@dataclass(frozen=True)
class HybridPricing:
    retainer_tier: Optional[str] = None
    performance_basis: Optional[str] = None
    comp_tier: Optional[str] = None
    structure: str = field(default="hybrid", init=False)


@dataclass(frozen=True)
class PerformancePricing:
    performance_basis: Optional[str] = None
    comp_tier: Optional[str] = None
    structure: str = field(default="performance_only", init=False)


PricingTerms = Union[RecurringPricing, OneTimePricing, UsagePricing, HybridPricing, PerformancePricing]

# form key -> (variant attribute) per structure
PRICING_FORM_FIELDS: Dict[str, Dict[str, str]] = {
    "recurring": {"recurring_price_tier": "price_tier"},
    "one_time": {"one_time_price_tier": "price_tier"},
    "usage_based": {"usage_output_type": "output_type", "usage_volume_tier": "volume_tier"},
    "hybrid": {
        "hybrid_retainer_tier": "retainer_tier",
        "performance_basis": "performance_basis",
        "performance_comp_tier": "comp_tier",
    },
    "performance_only": {
        "performance_basis": "performance_basis",
        "performance_comp_tier": "comp_tier",
    },
}


@dataclass(frozen=True)
class DiagnosticInput:
    offer_type: Optional[str] = None
    promise_outcome: Optional[str] = None
    promise_bucket: Optional[str] = None
    icp_industry: Optional[str] = None
    vertical_segment: Optional[str] = None
    scoring_segment: Optional[str] = None
    icp_size: Optional[str] = None
    icp_maturity: Optional[str] = None
    icp_specificity: Optional[str] = None
    pricing_structure: Optional[str] = None
    pricing: Optional[PricingTerms] = None
    risk_model: Optional[str] = None
    fulfillment_complexity: Optional[str] = None
    proof_level: Optional[str] = None

    @property
    def performance_basis(self) -> Optional[str]:
        return getattr(self.pricing, "performance_basis", None)

    @property
    def comp_tier(self) -> Optional[str]:
        return getattr(self.pricing, "comp_tier", None)

    def to_form(self) -> Dict[str, Optional[str]]:
        """Flatten back to the snake_case form shape (pricing sub-fields inlined)."""
        out: Dict[str, Optional[str]] = {}
        for name in (
            "offer_type", "promise_outcome", "promise_bucket", "icp_industry",
            "vertical_segment", "scoring_segment", "icp_size", "icp_maturity",
            "icp_specificity", "pricing_structure", "risk_model",
            "fulfillment_complexity", "proof_level",
        ):
            out[name] = getattr(self, name)
        if self.pricing is not None:
            for form_key, attr in PRICING_FORM_FIELDS[self.pricing.structure].items():
                out[form_key] = getattr(self.pricing, attr)
        return out


@dataclass(frozen=True)
class LatentScores:
    economic_feasibility: int
    proof_promise: int
    fulfillment_scalability: int
    risk_alignment: int
    channel_fit: int
    icp_specificity: int

    def get(self, key: str) -> int:
        if key not in DIMENSIONS:
            raise KeyError(key)
        return getattr(self, key)

    def items(self) -> Iterator[Tuple[str, int]]:
        for key in DIMENSIONS:
            yield key, getattr(self, key)

    def as_dict(self) -> Dict[str, int]:
        return dict(self.items())


@dataclass(frozen=True)
class GateResult:
    hard_gates: Tuple[str, ...] = ()
    soft_gates: Tuple[str, ...] = ()
    score_cap: Optional[int] = None


@dataclass(frozen=True)
class PrimaryBottleneck:
    dimension: str
    label: str
    severity: Severity
    explanation: str


@dataclass(frozen=True)
class ScoreResult:
    alignment_score: int
    raw_score: int
    readiness_label: ReadinessLabel
    latent_scores: LatentScores
    primary_bottleneck: PrimaryBottleneck
    outbound_ready: bool
    triggered_hard_gates: Tuple[str, ...]
    triggered_soft_gates: Tuple[str, ...]
    score_cap: Optional[int] = None
    is_at_local_optimum: bool = False


@dataclass(frozen=True)
class Recommendation:
    id: str
    category: str
    headline: str
    plain_explanation: str
    action_steps: Tuple[str, ...]
    desired_state: str
    severity: Severity = "moderate"
    source: str = ""


@dataclass(frozen=True)
class Evaluation:
    score_result: ScoreResult
    recommendations: Tuple[Recommendation, ...] = ()
