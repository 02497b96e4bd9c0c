# offer_core/llm_bridge.py
from __future__ import annotations
import json, logging, os, pathlib
from dataclasses import dataclass, replace
from typing import Any, List, Mapping, Optional, Sequence

from openai import AzureOpenAI

from . import config as cfg_defaults
from .stability import is_channel_switch
from .types import Recommendation, ScoreResult

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AzureSettings:
    endpoint: str
    api_key: str
    deployment: str
    api_version: str


def _from_env() -> dict[str, str]:
    return {
        "endpoint":   os.getenv("AZURE_OPENAI_ENDPOINT", ""),
        "api_key":    os.getenv("AZURE_OPENAI_API_KEY", ""),
        "api_version":os.getenv("AZURE_OPENAI_API_VERSION", ""),
        "deployment": os.getenv("AZURE_OPENAI_DEPLOYMENT", ""),
    }


def _from_json(path: str = ".azure_config.json") -> dict[str, str]:
    p = pathlib.Path(path)
    if not p.exists(): return {}
    try:
        j = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return {k: str(j.get(k, "")) for k in ("endpoint", "api_key", "api_version", "deployment")}


def azure_settings() -> AzureSettings:
    cfg = _from_env()
    if not all(cfg.values()):
        for k, v in _from_json().items():
            if not cfg.get(k): cfg[k] = v
    missing = [k for k, v in cfg.items() if not v]
    if missing:
        raise RuntimeError(f"Azure OpenAI not configured. Missing: {', '.join(missing)}")
    return AzureSettings(**cfg)


def azure_client() -> AzureOpenAI:
    s = azure_settings()
    return AzureOpenAI(azure_endpoint=s.endpoint, api_key=s.api_key, api_version=s.api_version)


def backend_in_use(cfg: Mapping[str, Any] | None = None) -> str:
    cfg = dict(cfg or {})
    cfg.setdefault("PRESCRIPTION_LLM_ENABLED", cfg_defaults.PRESCRIPTION_LLM_ENABLED)
    return cfg_defaults.get_backend(cfg) or "none"


def _complete(system: str, user: str) -> str:
    s = azure_settings(); cli = azure_client()
    resp = cli.chat.completions.create(
        model=s.deployment,
        messages=[{"role": "system", "content": system}, {"role": "user", "content": user}],
        temperature=0.2, top_p=0.9, max_tokens=cfg_defaults.PRESCRIPTION_MAX_TOKENS,
    )
    return (resp.choices[0].message.content if resp.choices else None) or ""


def _prompt(recs: Sequence[Recommendation], result: ScoreResult) -> str:
    payload = {
        "alignment_score": result.alignment_score,
        "readiness_label": result.readiness_label,
        "primary_bottleneck": result.primary_bottleneck.dimension,
        "recommendations": [
            {
                "id": r.id,
                "category": r.category,
                "headline": r.headline,
                "plain_explanation": r.plain_explanation,
                "action_steps": list(r.action_steps),
                "desired_state": r.desired_state,
            }
            for r in recs
        ],
    }
    return (
        "Rewrite each recommendation for a founder selling through cold outbound. Keep the same ids, "
        "order and count. Keep the meaning of every action step. Never suggest leaving outbound for "
        "another channel. Return ONLY JSON: {\"recommendations\": [...]} with the input fields.\n"
        f"Input: {json.dumps(payload, ensure_ascii=False)}"
    )


def merge_rewrite(recs: Sequence[Recommendation], raw: str) -> Optional[List[Recommendation]]:
    """Apply a model rewrite to ``recs``; None when the rewrite is unusable.

    Only text fields change. Id, category, severity and source are locked, the
    count and order must match, and any item that steers away from outbound
    rejects the whole rewrite.
    """
    data = json.loads(raw)
    items = data.get("recommendations") if isinstance(data, Mapping) else data
    if not isinstance(items, list) or len(items) != len(recs):
        return None
    out: List[Recommendation] = []
    for rec, item in zip(recs, items):
        if not isinstance(item, Mapping) or item.get("id", rec.id) != rec.id:
            return None
        steps = item.get("action_steps")
        if not isinstance(steps, list) or not steps or not all(isinstance(s, str) and s.strip() for s in steps):
            return None
        text = {k: item.get(k) for k in ("headline", "plain_explanation", "desired_state")}
        if not all(isinstance(v, str) and v.strip() for v in text.values()):
            return None
        if is_channel_switch([text["headline"], text["plain_explanation"], *steps]):
            return None
        out.append(replace(
            rec,
            headline=text["headline"].strip(),
            plain_explanation=text["plain_explanation"].strip(),
            action_steps=tuple(s.strip() for s in steps[: cfg_defaults.ACTION_STEPS_MAX]),
            desired_state=text["desired_state"].strip(),
        ))
    return out


def refine_recommendations(
    recs: Sequence[Recommendation],
    result: ScoreResult,
    cfg: Mapping[str, Any] | None = None,
) -> List[Recommendation]:
    """Optionally polish recommendation text with Azure OpenAI.

    Returns the deterministic list untouched unless the LLM path is enabled and
    the rewrite passes :func:`merge_rewrite`.
    """
    recs = list(recs)
    if not recs or backend_in_use(cfg) != "azure":
        return recs
    try:
        system = ("You rewrite sales-offer remediation advice. "
                  "Respond strictly with valid JSON matching the input schema.")
        merged = merge_rewrite(recs, _complete(system, _prompt(recs, result)))
        if merged is None:
            log.info("prescription rewrite rejected by guardrails")
            return recs
        return merged
    except Exception as exc:  # pragma: no cover - optional path
        log.debug("prescription LLM fallback: %s", exc)
        return recs
