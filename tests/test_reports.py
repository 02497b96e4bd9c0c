from __future__ import annotations

import csv
import io

from offer_core.engine import evaluate, to_payload
from offer_core.lead_export import lead_row, to_csv, to_json
from offer_core.report_html import export_report_html, render_report_html
from tests.conftest import example_one_form


def _stored(first_name: str = "Ada", recommendations="computed") -> dict:
    ev = evaluate(example_one_form())
    return {
        "id": "r1",
        "created_at": "2026-01-01T00:00:00+00:00",
        "lead": {"first_name": first_name, "email": "ada@example.com", "user_id": "u1"},
        "input": example_one_form(),
        "score_result": to_payload(ev.score_result),
        "recommendations": to_payload(ev.recommendations) if recommendations == "computed" else recommendations,
    }


def test_report_lists_score_gates_and_recommendations():
    html = render_report_html(_stored())
    assert "<b>Alignment:</b> 75 / 100" in html
    assert "Score capped at 75 (raw 76)" in html
    assert "Unsustainable Economics" in html
    assert "Compensation Friction (cap 75)" in html
    assert "Your pricing and guarantee stack every risk on you" in html
    assert "Prepared for Ada" in html


def test_report_escapes_user_text(tmp_path):
    html = render_report_html(_stored(first_name="<script>x</script>"))
    assert "<script>" not in html
    assert "&lt;script&gt;" in html

    path = tmp_path / "report.html"
    export_report_html(_stored(), str(path))
    assert path.read_text(encoding="utf-8").startswith("<!doctype html>")


def test_report_pending_and_empty_recommendations():
    assert "still being prepared" in render_report_html(_stored(recommendations=None))
    assert "No structural fixes needed" in render_report_html(_stored(recommendations=[]))


def test_lead_row_and_exports():
    row = lead_row(_stored())
    assert row["email"] == "ada@example.com"
    assert row["alignment_score"] == 75
    assert row["primary_bottleneck"] == "risk_alignment"
    assert row["pricing_structure"] == "performance_only"

    payload = to_json([row])
    assert payload["leads"][0]["outbound_ready"] is False

    rows = list(csv.DictReader(io.StringIO(to_csv([row, {}]))))
    assert rows[0]["first_name"] == "Ada"
    assert rows[0]["readiness_label"] == "Moderate"
    assert rows[1]["alignment_score"] == "0"
