from __future__ import annotations

import importlib
import os
import sys

from fastapi.testclient import TestClient

from tests.conftest import build_form, example_one_form


def _reload_app(tmp_path) -> tuple[object, object]:
    os.environ["DATA_DIR"] = str(tmp_path)
    if "api.storage" in sys.modules:
        importlib.reload(sys.modules["api.storage"])
    else:
        import api.storage  # noqa: F401
    storage = sys.modules["api.storage"]
    if "api.app" in sys.modules:
        importlib.reload(sys.modules["api.app"])
    else:
        import api.app  # noqa: F401
    app_module = sys.modules["api.app"]
    return storage, app_module


def _submit(client: TestClient, form: dict, user_id: str = "u1") -> dict:
    resp = client.post(
        "/diagnostic/submit",
        json={"firstName": "Ada", "email": " Ada@Example.com ", "userId": user_id, "form": form},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_health_and_options(tmp_path):
    _, app_module = _reload_app(tmp_path)
    client = TestClient(app_module.app)
    assert client.get("/").json()["status"] == "ok"
    assert "llm_backend" in client.get("/health").json()
    options = client.get("/options").json()
    assert {"value": "recurring", "label": "Recurring (retainer)"} in options["pricing_structure"]


def test_score_is_stateless(tmp_path):
    storage, app_module = _reload_app(tmp_path)
    client = TestClient(app_module.app)
    resp = client.post("/diagnostic/score", json=build_form())
    assert resp.status_code == 200
    body = resp.json()["score_result"]
    assert body["alignment_score"] == 80
    assert body["readiness_label"] == "Strong"
    assert not storage.RESULTS_DIR.exists() or not any(storage.RESULTS_DIR.iterdir())


def test_camel_case_form_is_accepted(tmp_path):
    _, app_module = _reload_app(tmp_path)
    client = TestClient(app_module.app)
    form = {"".join(w.capitalize() if i else w for i, w in enumerate(k.split("_"))): v for k, v in build_form().items()}
    assert "offerType" in form
    resp = client.post("/diagnostic/score", json=form)
    assert resp.status_code == 200
    assert resp.json()["score_result"]["raw_score"] == 80


def test_incomplete_form_is_422(tmp_path):
    _, app_module = _reload_app(tmp_path)
    client = TestClient(app_module.app)
    resp = client.post("/diagnostic/evaluate", json=build_form(risk_model=None))
    assert resp.status_code == 422
    assert resp.json()["detail"] == {"error": "incomplete input", "fields": ["risk_model"]}

    resp = client.post("/diagnostic/score", json=build_form(usage_volume_tier="high"))
    assert resp.status_code == 422
    assert resp.json()["detail"]["fields"] == ["usage_volume_tier"]


def test_evaluate_returns_recommendations(tmp_path):
    _, app_module = _reload_app(tmp_path)
    client = TestClient(app_module.app)
    body = client.post("/diagnostic/evaluate", json=example_one_form()).json()
    assert body["score_result"]["outbound_ready"] is False
    assert [r["id"] for r in body["recommendations"]] == [
        "pricing_shift_unsustainable_economics",
        "risk_shift_risk_alignment",
    ]


def test_submit_stores_and_fills_recommendations(tmp_path):
    storage, app_module = _reload_app(tmp_path)
    client = TestClient(app_module.app)

    created = _submit(client, example_one_form())
    assert created["recommendations_status"] == "pending"
    assert created["lead"]["email"] == "ada@example.com"
    assert created["score_result"]["alignment_score"] == 75
    assert (storage.RESULTS_DIR / f"{created['id']}.json").exists()

    stored = client.get(f"/results/{created['id']}").json()
    assert stored["recommendations_status"] == "ready"
    assert stored["recommendations"][0]["severity"] == "blocking"

    again = client.post(f"/results/{created['id']}/recommendations").json()
    assert again["recommendations"] == stored["recommendations"]
    forced = client.post(f"/results/{created['id']}/recommendations", params={"force": True}).json()
    assert [r["id"] for r in forced["recommendations"]] == [r["id"] for r in stored["recommendations"]]


def test_submit_validates_lead_fields(tmp_path):
    _, app_module = _reload_app(tmp_path)
    client = TestClient(app_module.app)
    resp = client.post("/diagnostic/submit", json={"firstName": "Ada", "email": "not-an-email", "form": build_form()})
    assert resp.status_code == 422
    resp = client.post("/diagnostic/submit", json={"firstName": "  ", "email": "a@b.co", "form": build_form()})
    assert resp.status_code == 422


def test_user_results_report_and_delete(tmp_path):
    _, app_module = _reload_app(tmp_path)
    client = TestClient(app_module.app)
    first = _submit(client, build_form())
    _submit(client, build_form(), user_id="someone-else")

    listed = client.get("/users/u1/results").json()["results"]
    assert [r["id"] for r in listed] == [first["id"]]
    assert listed[0]["alignmentScore"] == 80

    html = client.get(f"/results/{first['id']}/report/html").json()["html"]
    assert "Prepared for Ada" in html

    assert client.delete(f"/results/{first['id']}").json() == {"ok": True}
    assert client.get(f"/results/{first['id']}").status_code == 404
    assert client.delete(f"/results/{first['id']}").status_code == 404
    assert client.get("/users/u1/results").json()["results"] == []


def test_lead_export(tmp_path):
    _, app_module = _reload_app(tmp_path)
    client = TestClient(app_module.app)
    created = _submit(client, example_one_form())

    leads = client.get("/leads/export.json").json()["leads"]
    assert [lead["id"] for lead in leads] == [created["id"]]
    assert leads[0]["primary_bottleneck"] == "risk_alignment"

    resp = client.get("/leads/export.csv")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert resp.text.splitlines()[0].startswith("id,created_at,first_name,email")


def test_missing_result_is_404(tmp_path):
    _, app_module = _reload_app(tmp_path)
    client = TestClient(app_module.app)
    assert client.get("/results/nope").status_code == 404
    assert client.post("/results/nope/recommendations").status_code == 404
    assert client.get("/results/nope/report/html").status_code == 404


def test_storage_file_and_index_stay_in_step(tmp_path):
    storage, _ = _reload_app(tmp_path)
    storage.save_result("r1", {"id": "r1", "createdAt": "2024-01-02"}, {"userId": "u1", "createdAt": "2024-01-02"})
    storage.save_result("r0", {"id": "r0", "createdAt": "2024-01-01"}, {"userId": "u1", "createdAt": "2024-01-01"})

    assert [r["id"] for r in storage.list_results_for_user("u1")] == ["r1", "r0"]
    assert [r["id"] for r in storage.load_all_results()] == ["r0", "r1"]
    assert storage.update_result("r1", {"note": "x"})["note"] == "x"
    assert storage.update_result("missing", {"note": "x"}) is None

    assert storage.delete_result("r1") is True
    assert not (storage.RESULTS_DIR / "r1.json").exists()
    assert storage.load_result("r1") is None
    assert storage.delete_result("r1") is False
    assert [r["id"] for r in storage.load_all_results()] == ["r0"]
