"""Helpers to export captured diagnostic leads in JSON/CSV formats."""
from __future__ import annotations

from typing import Iterable, List, Dict, Any
import csv
import io

_FIELDS: tuple[str, ...] = (
    "id",
    "created_at",
    "first_name",
    "email",
    "user_id",
    "offer_type",
    "icp_industry",
    "pricing_structure",
    "alignment_score",
    "readiness_label",
    "outbound_ready",
    "primary_bottleneck",
)


def lead_row(result: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten one stored diagnostic result into an export row."""

    lead = result.get("lead") or {}
    form = result.get("input") or {}
    score = result.get("score_result") or {}
    bottleneck = score.get("primary_bottleneck") or {}
    return {
        "id": result.get("id"),
        "created_at": result.get("created_at"),
        "first_name": lead.get("first_name"),
        "email": lead.get("email"),
        "user_id": lead.get("user_id"),
        "offer_type": form.get("offer_type"),
        "icp_industry": form.get("icp_industry"),
        "pricing_structure": form.get("pricing_structure"),
        "alignment_score": score.get("alignment_score"),
        "readiness_label": score.get("readiness_label"),
        "outbound_ready": score.get("outbound_ready"),
        "primary_bottleneck": bottleneck.get("dimension"),
    }


def _normalize_row(row: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key in _FIELDS:
        val = row.get(key)
        if key == "alignment_score":
            try:
                out[key] = int(val)
            except (TypeError, ValueError):
                out[key] = 0
        elif key == "outbound_ready":
            out[key] = bool(val)
        else:
            out[key] = "" if val is None else str(val)
    return out


def to_json(rows: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Return a JSON-safe payload for lead export."""

    normalized: List[Dict[str, Any]] = [_normalize_row(r or {}) for r in rows]
    return {"leads": normalized}


def to_csv(rows: Iterable[Dict[str, Any]]) -> str:
    """Render lead rows as CSV with a fixed header."""

    normalized = [_normalize_row(r or {}) for r in rows]
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=_FIELDS)
    writer.writeheader()
    for row in normalized:
        writer.writerow(row)
    return buf.getvalue()


__all__ = ["lead_row", "to_json", "to_csv"]
