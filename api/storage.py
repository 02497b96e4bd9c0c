"""JSON-file store behind the diagnostic API.

One file per scored diagnostic under ``DATA_DIR/results`` holds the form, the
score result, any recommendations and the lead captured with it. A single
``results_index.json`` maps result ids to the small metadata the list and
export endpoints need. Writes go through a temp file and a rename, and one
process-wide lock serialises every read-modify-write of the index.
"""

from __future__ import annotations

import json
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


DATA_ROOT = Path(os.getenv("DATA_DIR", "data")).resolve()
RESULTS_DIR = DATA_ROOT / "results"
RESULT_INDEX_PATH = DATA_ROOT / "results_index.json"

_LOCK = threading.Lock()


def _ensure_dirs() -> None:
    RESULTS_DIR.mkdir(parents=True, exist_ok=True)
    DATA_ROOT.mkdir(parents=True, exist_ok=True)


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return default


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    tmp.replace(path)


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _result_path(result_id: str) -> Path:
    return RESULTS_DIR / f"{result_id}.json"


def save_result(result_id: str, result: Dict[str, Any], metadata: Dict[str, Any]) -> None:
    """Write the result file, then register it in the index."""

    _ensure_dirs()
    with _LOCK:
        _write_json(_result_path(result_id), result)
        index: Dict[str, Dict[str, Any]] = _read_json(RESULT_INDEX_PATH, {})
        index[result_id] = metadata
        _write_json(RESULT_INDEX_PATH, index)


def load_result(result_id: str) -> Optional[Dict[str, Any]]:
    path = _result_path(result_id)
    if not path.exists():
        return None
    return _read_json(path, None)


def update_result(result_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Merge ``updates`` into a stored result; None when it no longer exists."""

    path = _result_path(result_id)
    with _LOCK:
        current = _read_json(path, None)
        if current is None:
            return None
        current.update(updates)
        _write_json(path, current)
    return current


def delete_result(result_id: str) -> bool:
    removed = False
    with _LOCK:
        index: Dict[str, Dict[str, Any]] = _read_json(RESULT_INDEX_PATH, {})
        if result_id in index:
            index.pop(result_id, None)
            _write_json(RESULT_INDEX_PATH, index)
            removed = True
        _result_path(result_id).unlink(missing_ok=True)
    return removed


def list_results_for_user(user_id: str) -> List[Dict[str, Any]]:
    index: Dict[str, Dict[str, Any]] = _read_json(RESULT_INDEX_PATH, {})
    out: List[Dict[str, Any]] = []
    for rid, meta in index.items():
        if meta.get("userId") == user_id:
            item = {"id": rid}
            item.update({k: v for k, v in meta.items() if k != "id"})
            out.append(item)
    out.sort(key=lambda r: r.get("createdAt", ""), reverse=True)
    return out


def load_all_results() -> List[Dict[str, Any]]:
    """Every stored result, oldest first (lead export)."""

    index: Dict[str, Dict[str, Any]] = _read_json(RESULT_INDEX_PATH, {})
    out: List[Dict[str, Any]] = []
    for rid, meta in sorted(index.items(), key=lambda kv: kv[1].get("createdAt", "")):
        result = load_result(rid)
        if result:
            out.append(result)
    return out
