from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Mapping, Optional

from .errors import ValidationError
from .tables import (
    ENUMERATIONS,
    OUTCOME_TO_BUCKET,
    VERTICAL_TO_SEGMENT,
    comp_tiers_for,
    outcomes_for,
    verticals_for,
)
from .types import (
    PRICING_FORM_FIELDS,
    DiagnosticInput,
    HybridPricing,
    OneTimePricing,
    PerformancePricing,
    PricingTerms,
    RecurringPricing,
    UsagePricing,
)

log = logging.getLogger(__name__)

__all__ = [
    "BASE_FIELDS",
    "from_form",
    "coerce_input",
    "missing_fields",
    "is_complete",
    "check_complete",
]

# Fields that do not depend on any other field; all must be filled.
BASE_FIELDS = (
    "offer_type",
    "promise_outcome",
    "icp_industry",
    "vertical_segment",
    "icp_size",
    "icp_maturity",
    "icp_specificity",
    "pricing_structure",
    "risk_model",
    "fulfillment_complexity",
    "proof_level",
)

_VARIANTS = {
    "recurring": RecurringPricing,
    "one_time": OneTimePricing,
    "usage_based": UsagePricing,
    "hybrid": HybridPricing,
    "performance_only": PerformancePricing,
}

_PRICING_KEYS = sorted({key for fields in PRICING_FORM_FIELDS.values() for key in fields})

_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(key: str) -> str:
    return _CAMEL.sub("_", str(key)).lower()


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _normalise_form(form: Mapping[str, Any]) -> Dict[str, Optional[str]]:
    return {_snake(k): _clean(v) for k, v in form.items()}


def _build_pricing(structure: Optional[str], values: Mapping[str, Optional[str]]) -> Optional[PricingTerms]:
    variant = _VARIANTS.get(structure or "")
    if variant is None:
        return None
    kwargs = {attr: values.get(key) for key, attr in PRICING_FORM_FIELDS[structure].items()}
    return variant(**kwargs)


def from_form(form: Mapping[str, Any]) -> DiagnosticInput:
    """Build a :class:`DiagnosticInput` from a flat form payload.

    Keys may be camelCase or snake_case; blank values count as missing and
    unknown keys are ignored. Derived fields are filled from their sources when
    the form leaves them out. A pricing sub-field that belongs to a structure
    other than the selected ``pricing_structure`` raises
    :class:`ValidationError`; the pricing variant has no slot for it.
    """

    values = _normalise_form(form)
    structure = values.get("pricing_structure")
    allowed = set(PRICING_FORM_FIELDS.get(structure or "", {}))
    stray = [key for key in _PRICING_KEYS if values.get(key) is not None and key not in allowed]
    if stray:
        raise ValidationError("incomplete input", stray)

    outcome = values.get("promise_outcome")
    vertical = values.get("vertical_segment")
    return DiagnosticInput(
        offer_type=values.get("offer_type"),
        promise_outcome=outcome,
        promise_bucket=values.get("promise_bucket") or OUTCOME_TO_BUCKET.get(outcome or ""),
        icp_industry=values.get("icp_industry"),
        vertical_segment=vertical,
        scoring_segment=values.get("scoring_segment") or VERTICAL_TO_SEGMENT.get(vertical or ""),
        icp_size=values.get("icp_size"),
        icp_maturity=values.get("icp_maturity"),
        icp_specificity=values.get("icp_specificity"),
        pricing_structure=structure,
        pricing=_build_pricing(structure, values),
        risk_model=values.get("risk_model"),
        fulfillment_complexity=values.get("fulfillment_complexity"),
        proof_level=values.get("proof_level"),
    )


def coerce_input(obj: Any) -> DiagnosticInput:
    if isinstance(obj, DiagnosticInput):
        return obj
    if isinstance(obj, Mapping):
        return from_form(obj)
    raise TypeError(f"expected DiagnosticInput or mapping, got {type(obj).__name__}")


def missing_fields(inp: DiagnosticInput) -> List[str]:
    """Names of the fields that keep ``inp`` from being complete, in form order."""

    problems: List[str] = []

    def flag(name: str) -> None:
        if name not in problems:
            problems.append(name)

    for name in BASE_FIELDS:
        value = getattr(inp, name)
        if value is None or value not in ENUMERATIONS[name]:
            flag(name)

    if inp.offer_type and inp.promise_outcome and inp.promise_outcome not in outcomes_for(inp.offer_type):
        flag("promise_outcome")
    if inp.icp_industry and inp.vertical_segment and inp.vertical_segment not in verticals_for(inp.icp_industry):
        flag("vertical_segment")

    expected_bucket = OUTCOME_TO_BUCKET.get(inp.promise_outcome or "")
    if inp.promise_bucket is None or inp.promise_bucket != expected_bucket:
        flag("promise_bucket")
    expected_segment = VERTICAL_TO_SEGMENT.get(inp.vertical_segment or "")
    if inp.scoring_segment is None or inp.scoring_segment != expected_segment:
        flag("scoring_segment")

    structure = inp.pricing_structure
    if structure in PRICING_FORM_FIELDS:
        pricing = inp.pricing
        if pricing is None or pricing.structure != structure:
            flag("pricing")
        else:
            for form_key, attr in PRICING_FORM_FIELDS[structure].items():
                value = getattr(pricing, attr)
                if value is None or value not in ENUMERATIONS[form_key]:
                    flag(form_key)
            basis, tier = inp.performance_basis, inp.comp_tier
            if basis and tier and tier not in comp_tiers_for(basis):
                flag("performance_comp_tier")

    if problems:
        log.debug("incomplete diagnostic input: %s", problems)
    return problems


def is_complete(inp: DiagnosticInput) -> bool:
    return not missing_fields(inp)


def check_complete(inp: DiagnosticInput) -> None:
    problems = missing_fields(inp)
    if problems:
        raise ValidationError("incomplete input", problems)
