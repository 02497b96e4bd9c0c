from __future__ import annotations
from fastapi import FastAPI, HTTPException, BackgroundTasks, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
import logging, os, re, uuid, typing as t

# ---- Engine imports ----
from offer_core.config import load_config, LEAD_EXPORT_ENABLED, PRESCRIPTION_LLM_ENABLED
from offer_core.engine import evaluate, score, to_payload
from offer_core.errors import ValidationError
from offer_core.lead_export import lead_row, to_csv as leads_to_csv, to_json as leads_to_json
from offer_core.llm_bridge import backend_in_use, refine_recommendations
from offer_core.report_html import render_report_html
from offer_core.tables import options_payload
from offer_core.validators import from_form
from .storage import (
    delete_result,
    list_results_for_user,
    load_all_results,
    load_result,
    save_result,
    update_result,
    utcnow_iso,
)

log = logging.getLogger(__name__)

app = FastAPI(title="Offer Diagnostic API")


@app.get("/")
def root():
    return {"status": "ok", "service": "offer-diagnostic-api"}


ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,  # keep False unless you use cookies
)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# ---- Schemas ----
class DiagnosticForm(BaseModel):
    """Flat diagnostic form; accepts snake_case or camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    offer_type: str | None = None
    promise_outcome: str | None = None
    promise_bucket: str | None = None
    icp_industry: str | None = None
    vertical_segment: str | None = None
    scoring_segment: str | None = None
    icp_size: str | None = None
    icp_maturity: str | None = None
    icp_specificity: str | None = None
    pricing_structure: str | None = None
    recurring_price_tier: str | None = None
    one_time_price_tier: str | None = None
    usage_output_type: str | None = None
    usage_volume_tier: str | None = None
    hybrid_retainer_tier: str | None = None
    performance_basis: str | None = None
    performance_comp_tier: str | None = None
    risk_model: str | None = None
    fulfillment_complexity: str | None = None
    proof_level: str | None = None


class SubmitReq(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    first_name: str
    email: str
    user_id: str | None = None
    form: DiagnosticForm

    @field_validator("first_name")
    @classmethod
    def _first_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("first name is required")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        v = v.strip().lower()
        if not _EMAIL_RE.match(v):
            raise ValueError("invalid email address")
        return v


# ---- Helpers ----
def _form_dict(form: DiagnosticForm) -> dict[str, t.Any]:
    return form.model_dump(exclude_none=True)


def _validation_error(exc: ValidationError) -> HTTPException:
    return HTTPException(422, {"error": exc.message, "fields": exc.fields})


def _recommendations_for(result: dict[str, t.Any], cfg: dict[str, t.Any]) -> list[dict[str, t.Any]]:
    evaluation = evaluate(from_form(result.get("input") or {}), cfg)
    recs = refine_recommendations(evaluation.recommendations, evaluation.score_result, cfg)
    return to_payload(recs)


def _metadata(result: dict[str, t.Any]) -> dict[str, t.Any]:
    lead = result.get("lead") or {}
    score_result = result.get("score_result") or {}
    return {
        "userId": lead.get("user_id"),
        "email": lead.get("email"),
        "createdAt": result.get("created_at"),
        "alignmentScore": score_result.get("alignment_score"),
        "readinessLabel": score_result.get("readiness_label"),
        "outboundReady": score_result.get("outbound_ready"),
    }


def _fill_recommendations(result_id: str) -> None:
    """Background step after a submission; the score is already stored."""
    result = load_result(result_id)
    if not result:
        return
    recs = _recommendations_for(result, load_config())
    update_result(result_id, {"recommendations": recs, "recommendations_status": "ready"})
    log.debug("recommendations stored for %s: %d", result_id, len(recs))


# ---- Health / options ----
@app.get("/health")
def health():
    return {
        "llm_backend": backend_in_use(load_config()),
        "prescription_llm_enabled": PRESCRIPTION_LLM_ENABLED,
        "azure_config_present": all(os.getenv(k) for k in [
            "AZURE_OPENAI_ENDPOINT","AZURE_OPENAI_API_KEY","AZURE_OPENAI_API_VERSION","AZURE_OPENAI_DEPLOYMENT"
        ]),
    }


@app.get("/options")
def options():
    return options_payload()


# ---- Stateless scoring ----
@app.post("/diagnostic/score")
def score_endpoint(form: DiagnosticForm):
    try:
        result = score(from_form(_form_dict(form)))
    except ValidationError as exc:
        raise _validation_error(exc)
    return {"score_result": to_payload(result)}


@app.post("/diagnostic/evaluate")
def evaluate_endpoint(form: DiagnosticForm):
    try:
        evaluation = evaluate(from_form(_form_dict(form)), load_config())
    except ValidationError as exc:
        raise _validation_error(exc)
    return {
        "score_result": to_payload(evaluation.score_result),
        "recommendations": to_payload(evaluation.recommendations),
    }


# ---- Lead capture ----
@app.post("/diagnostic/submit")
def submit(req: SubmitReq, background: BackgroundTasks):
    try:
        inp = from_form(_form_dict(req.form))
        result = score(inp)
    except ValidationError as exc:
        raise _validation_error(exc)
    rid = str(uuid.uuid4())
    payload = {
        "id": rid,
        "created_at": utcnow_iso(),
        "lead": {"first_name": req.first_name, "email": req.email, "user_id": req.user_id},
        "input": inp.to_form(),
        "score_result": to_payload(result),
        "recommendations": None,
        "recommendations_status": "pending",
    }
    save_result(rid, payload, _metadata(payload))
    background.add_task(_fill_recommendations, rid)
    return payload


@app.get("/results/{result_id}")
def get_result(result_id: str):
    result = load_result(result_id)
    if not result:
        raise HTTPException(404, "result not found")
    return result


@app.post("/results/{result_id}/recommendations")
def create_recommendations(result_id: str, force: bool = Query(False, description="Regenerate even if cached")):
    result = load_result(result_id)
    if not result:
        raise HTTPException(404, "result not found")

    existing = result.get("recommendations")
    if existing is not None and not force:
        return {"result_id": result_id, "recommendations": existing}

    try:
        recs = _recommendations_for(result, load_config())
    except ValidationError as exc:
        raise _validation_error(exc)
    update_result(result_id, {"recommendations": recs, "recommendations_status": "ready"})
    return {"result_id": result_id, "recommendations": recs}


@app.get("/results/{result_id}/report/html")
def result_html(result_id: str):
    result = load_result(result_id)
    if not result:
        raise HTTPException(404, "result not found")
    return {"html": render_report_html(result)}


@app.delete("/results/{result_id}")
def delete_result_endpoint(result_id: str):
    ok = delete_result(result_id)
    if not ok:
        raise HTTPException(404, "result not found")
    return {"ok": True}


@app.get("/users/{user_id}/results")
def list_results(user_id: str):
    return {"results": list_results_for_user(user_id)}


# ---- Lead export ----
@app.get("/leads/export.json")
def export_leads_json():
    if not LEAD_EXPORT_ENABLED:
        raise HTTPException(404, "lead export disabled")
    return leads_to_json(lead_row(r) for r in load_all_results())


@app.get("/leads/export.csv")
def export_leads_csv():
    if not LEAD_EXPORT_ENABLED:
        raise HTTPException(404, "lead export disabled")
    body = leads_to_csv(lead_row(r) for r in load_all_results())
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=\"offer_diagnostic_leads.csv\""},
    )
