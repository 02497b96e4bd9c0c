from __future__ import annotations
import os, json, pathlib


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


LATENT_MIN: int = 0
LATENT_MAX: int = 20

# readiness thresholds are fixed; no env override
STRONG_THRESHOLD: int = 80
MODERATE_THRESHOLD: int = 60
OUTBOUND_READY_MIN: int = MODERATE_THRESHOLD

REMEDIATION_THRESHOLD: int = 12
RECOMMENDATION_LIMIT: int = 5
ACTION_STEPS_MAX: int = 4

PRESCRIPTION_LLM_ENABLED: bool = False
PRESCRIPTION_MAX_TOKENS: int = 900

LEAD_EXPORT_ENABLED: bool = True

DEBUG_TRACE: bool = False
TRACE_FIELDS: tuple[str, ...] = (
    "stage",
    "latent_scores",
    "hard_gates",
    "soft_gates",
    "score_cap",
    "raw_score",
    "alignment_score",
)
# // env overrides for staging/ops; scoring constants stay fixed.
REMEDIATION_THRESHOLD = _env_int("REMEDIATION_THRESHOLD", REMEDIATION_THRESHOLD)
RECOMMENDATION_LIMIT = _env_int("RECOMMENDATION_LIMIT", RECOMMENDATION_LIMIT)
PRESCRIPTION_LLM_ENABLED = _env_bool("PRESCRIPTION_LLM_ENABLED", PRESCRIPTION_LLM_ENABLED)
LEAD_EXPORT_ENABLED = _env_bool("LEAD_EXPORT_ENABLED", LEAD_EXPORT_ENABLED)
DEBUG_TRACE = _env_bool("DEBUG_TRACE", False)


def _env_true(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("1", "true", "yes", "on")


def load_config() -> dict:
    """Runtime settings: optional ``config.json`` in the working directory, then env."""
    cfg = {}
    p = pathlib.Path("config.json")
    if p.exists():
        try: cfg = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError): cfg = {}
    e = os.environ
    if e.get("PRESCRIPTION_LLM_ENABLED"): cfg["PRESCRIPTION_LLM_ENABLED"] = _env_true("PRESCRIPTION_LLM_ENABLED")
    if e.get("LLM_BACKEND"): cfg["LLM_BACKEND"] = e.get("LLM_BACKEND")
    if e.get("REMEDIATION_THRESHOLD"): cfg["REMEDIATION_THRESHOLD"] = _env_int("REMEDIATION_THRESHOLD", REMEDIATION_THRESHOLD)
    if e.get("RECOMMENDATION_LIMIT"): cfg["RECOMMENDATION_LIMIT"] = _env_int("RECOMMENDATION_LIMIT", RECOMMENDATION_LIMIT)
    return cfg


def get_backend(cfg: dict) -> str|None:
    if not cfg.get("PRESCRIPTION_LLM_ENABLED"): return None
    b = (cfg.get("LLM_BACKEND") or os.getenv("LLM_BACKEND") or "").lower().strip()
    return b if b == "azure" else None
