from __future__ import annotations
from html import escape
from typing import Dict, Any, List

from .aggregate import DIMENSION_WEIGHTS
from .config import LATENT_MAX, LEAD_EXPORT_ENABLED
from .gates import GATES_BY_ID
from .tables import CATEGORY_LABELS, DIMENSION_LABELS


def _row(key: str, value: Any, bottleneck: str) -> str:
    mark = " *" if key == bottleneck else ""
    label = escape(DIMENSION_LABELS.get(key, key))
    return (
        f"<tr><td>{label}{mark}</td><td>{int(value or 0)} / {LATENT_MAX}</td>"
        f"<td>{DIMENSION_WEIGHTS.get(key, 0)}%</td></tr>"
    )


def _gate_items(ids: List[str]) -> str:
    items: List[str] = []
    for gid in ids:
        gate = GATES_BY_ID.get(gid)
        label = gate.label if gate else gid
        cap = f" (cap {gate.cap})" if gate is not None and gate.cap is not None else ""
        items.append(f"<li>{escape(label)}{cap}</li>")
    return "".join(items)


def _rec_block(rec: Dict[str, Any]) -> str:
    steps = "".join(f"<li>{escape(str(s))}</li>" for s in rec.get("action_steps") or [])
    category = CATEGORY_LABELS.get(rec.get("category") or "", rec.get("category") or "")
    severity = rec.get("severity") or "moderate"
    return (
        f"<div class=\"rec {escape(severity)}\">"
        f"<h4>{escape(category)}: {escape(rec.get('headline') or '')}</h4>"
        f"<p>{escape(rec.get('plain_explanation') or '')}</p>"
        f"<ul>{steps}</ul>"
        f"<p><b>Target:</b> {escape(rec.get('desired_state') or '')}</p>"
        "</div>"
    )


def render_report_html(result: Dict[str, Any]) -> str:
    """Render a stored diagnostic result (see ``api.app``) as a standalone page."""

    score = result.get("score_result") or {}
    latent = score.get("latent_scores") or {}
    bottleneck = score.get("primary_bottleneck") or {}
    lead = result.get("lead") or {}

    rows = "\n".join(_row(k, v, bottleneck.get("dimension")) for k, v in latent.items())
    alignment = int(score.get("alignment_score") or 0)
    label = escape(str(score.get("readiness_label") or ""))
    ready = "Outbound ready" if score.get("outbound_ready") else "Not outbound ready"

    cap_html = ""
    if score.get("score_cap") is not None and score.get("raw_score", 0) > score.get("score_cap"):
        cap_html = (
            "<div class=\"banner warning\">"
            f"Score capped at {int(score['score_cap'])} (raw {int(score.get('raw_score') or 0)})"
            "</div>"
        )

    gates_html = ""
    hard = list(score.get("triggered_hard_gates") or [])
    soft = list(score.get("triggered_soft_gates") or [])
    if hard:
        gates_html += f"<h3>Blocking issues</h3><ul>{_gate_items(hard)}</ul>"
    if soft:
        gates_html += f"<h3>Score limits</h3><ul>{_gate_items(soft)}</ul>"

    recs = result.get("recommendations")
    if recs is None:
        recs_html = "<p><i>Recommendations are still being prepared.</i></p>"
    elif not recs:
        recs_html = "<p>No structural fixes needed. This offer is well optimized.</p>"
    else:
        recs_html = "".join(_rec_block(r) for r in recs if isinstance(r, dict))

    export_link = ""
    if LEAD_EXPORT_ENABLED and result.get("id"):
        export_link = "<p class=\"export-links\"><a href=\"/leads/export.csv\">Download leads (CSV)</a></p>"

    greeting = f"<p>Prepared for {escape(str(lead.get('first_name')))}</p>" if lead.get("first_name") else ""

    return f"""<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8"/>
<title>Offer Diagnostic</title>
<style>
 body{{font-family:system-ui,-apple-system,Segoe UI,Roboto,Ubuntu,'Helvetica Neue',Arial}}
 .wrap{{max-width:960px;margin:40px auto;padding:0 16px}}
 h1{{margin:0 0 16px}}
 .overall{{font-size:1.1rem;margin:8px 0 16px}}
 .banner{{padding:12px 16px;border-radius:6px;margin:16px 0}}
 .banner.warning{{background:#ffe7d9;border:1px solid #f5a623;color:#7a2d00}}
 .rec{{border-left:4px solid #999;padding:4px 12px;margin:12px 0}}
 .rec.blocking{{border-color:#c0392b}}
 table{{border-collapse:collapse;width:100%}}
 th,td{{text-align:left}}
</style>
</head>
<body>
<div class="wrap">
  <h1>Offer Diagnostic</h1>
  {greeting}
  <div class="overall"><b>Alignment:</b> {alignment} / 100 · {label} · {ready}</div>
  {cap_html}
  <p><b>Primary bottleneck:</b> {escape(str(bottleneck.get('explanation') or ''))}</p>

  <table border='1' cellpadding='6' cellspacing='0'>
    <thead><tr><th>Dimension</th><th>Score</th><th>Weight</th></tr></thead>
    <tbody>{rows}</tbody>
  </table>
  <p><i>* primary bottleneck</i></p>
  {gates_html}

  <h3>Recommendations</h3>
  {recs_html}
  {export_link}
</div>
</body>
</html>
"""


def export_report_html(result: Dict[str, Any], path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(render_report_html(result))
