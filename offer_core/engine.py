from __future__ import annotations

import dataclasses
import json
import logging
from typing import Any, Dict, Mapping

from .aggregate import aggregate
from .config import DEBUG_TRACE, TRACE_FIELDS
from .gates import evaluate_gates
from .recommendations import generate_recommendations
from .scoring import score_dimensions
from .types import Evaluation, GateResult, ScoreResult
from .validators import coerce_input, from_form

log = logging.getLogger(__name__)

__all__ = ["score", "evaluate", "evaluate_form", "gate_result_of", "to_payload"]


def _emit_trace(record: Dict[str, Any]) -> None:
    if not DEBUG_TRACE:
        return
    payload = {k: record.get(k) for k in TRACE_FIELDS if k in record}
    log.debug("TRACE %s", json.dumps(payload, sort_keys=True, default=str))


def score(inp: Any) -> ScoreResult:
    """Synchronous path: subscores, gates and aggregate, no recommendations."""

    inp = coerce_input(inp)
    scores = score_dimensions(inp)
    _emit_trace({"stage": "score", "latent_scores": scores.as_dict()})
    gate_result = evaluate_gates(inp, scores)
    _emit_trace({
        "stage": "gates",
        "hard_gates": list(gate_result.hard_gates),
        "soft_gates": list(gate_result.soft_gates),
        "score_cap": gate_result.score_cap,
    })
    result = aggregate(scores, gate_result)
    _emit_trace({
        "stage": "aggregate",
        "raw_score": result.raw_score,
        "alignment_score": result.alignment_score,
    })
    return result


def evaluate(inp: Any, cfg: Mapping[str, Any] | None = None) -> Evaluation:
    """Score ``inp`` and generate its recommendations in one call."""

    inp = coerce_input(inp)
    result = score(inp)
    recs = generate_recommendations(
        inp,
        result.latent_scores,
        gate_result_of(result),
        cfg,
    )
    return Evaluation(score_result=result, recommendations=tuple(recs))


def evaluate_form(form: Mapping[str, Any], cfg: Mapping[str, Any] | None = None) -> Evaluation:
    return evaluate(from_form(form), cfg)


def gate_result_of(result: ScoreResult) -> GateResult:
    """Rebuild the :class:`GateResult` a score result was aggregated from."""
    return GateResult(
        hard_gates=tuple(result.triggered_hard_gates),
        soft_gates=tuple(result.triggered_soft_gates),
        score_cap=result.score_cap,
    )


def to_payload(obj: Any) -> Any:
    """JSON-ready dict/list form of engine dataclasses."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_payload(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, (list, tuple)):
        return [to_payload(v) for v in obj]
    if isinstance(obj, dict):
        return {k: to_payload(v) for k, v in obj.items()}
    return obj
