import os
import sys
import time
import threading
import uuid
from collections import defaultdict

# Ensure backend/ is on sys.path so sibling imports work
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException
from dotenv import load_dotenv

from course_parser import parse_courses
from data_loader import StoreError, load_courses, save_courses
from llm_extractor import extract_courses
from stats import summarize
from validators import (
    IMPORT_MODES,
    validate_course_list,
    validate_course_payload,
    validate_import_body,
)

load_dotenv()

app = Flask(__name__)
app.json.ensure_ascii = False

VERSION = "1.0.0"

# ── Paths ─────────────────────────────────────────────────────────────────────
BACKEND_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(BACKEND_DIR)
_DEFAULT_COURSES_PATH = os.path.join(PROJECT_ROOT, "data", "courses.csv")
_env_courses_path = os.environ.get("COURSES_PATH")
if not _env_courses_path:
    COURSES_PATH = _DEFAULT_COURSES_PATH
elif not os.path.isabs(_env_courses_path):
    COURSES_PATH = os.path.join(PROJECT_ROOT, _env_courses_path)
else:
    COURSES_PATH = _env_courses_path
_store_lock = threading.Lock()

# -- Rate limiting for AI imports (manual token bucket, 10 req/min per IP) ----
_RATE_LIMIT_MAX = 10
_RATE_LIMIT_WINDOW = 60  # seconds
_rate_limit_lock = threading.Lock()
_rate_limit_tracker: dict[str, list[float]] = defaultdict(list)


def _env_float(name: str, default: float, minimum: float = 0.0) -> float:
    raw = os.environ.get(name, "")
    try:
        return max(minimum, float(raw))
    except (TypeError, ValueError):
        return default


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.environ.get(name, "")
    try:
        return max(minimum, int(raw))
    except (TypeError, ValueError):
        return default


def _env_mode(name: str, default: str) -> str:
    raw = os.environ.get(name, "").strip().lower()
    return raw if raw in IMPORT_MODES else default


_SLOW_REQUEST_LOG_MS = _env_float("SLOW_REQUEST_LOG_MS", 750.0, minimum=0.0)
MAX_IMPORT_CHARS = _env_int("MAX_IMPORT_CHARS", 20000, minimum=1)
IMPORT_MODE_DEFAULT = _env_mode("IMPORT_MODE_DEFAULT", "local")


def _check_rate_limit(ip: str) -> bool:
    """Return True if request is allowed, False if rate-limited."""
    now = time.time()
    with _rate_limit_lock:
        timestamps = _rate_limit_tracker[ip]
        _rate_limit_tracker[ip] = [t for t in timestamps if now - t < _RATE_LIMIT_WINDOW]
        if len(_rate_limit_tracker[ip]) >= _RATE_LIMIT_MAX:
            return False
        _rate_limit_tracker[ip].append(now)
        return True


def _error(error_code: str, message: str, status: int):
    return jsonify({
        "mode": "error",
        "error": {"error_code": error_code, "message": message},
    }), status


def _rounded(value: float) -> float:
    return round(float(value), 2)


def _present_summary(summary: dict) -> dict:
    stats = summary["stats"]
    return {
        "stats": {
            "total_credits": _rounded(stats["total_credits"]),
            "weighted_average": _rounded(stats["weighted_average"]),
            "gpa": _rounded(stats["gpa"]),
            "count": stats["count"],
        },
        "distribution": [
            {"label": band["label"], "credit_value": _rounded(band["credit_value"])}
            for band in summary["distribution"]
        ],
    }


# ── Course store ──────────────────────────────────────────────────────────────
def _read_store() -> list[dict]:
    return load_courses(COURSES_PATH)


def _write_store(courses: list[dict]) -> None:
    save_courses(COURSES_PATH, courses)
    print(f"[OK] Saved {len(courses)} courses to {COURSES_PATH}")


def _find_course(courses: list[dict], course_id: str) -> int:
    for i, course in enumerate(courses):
        if course["id"] == course_id:
            return i
    return -1


try:
    print(f"[OK] Loaded {len(_read_store())} courses from {COURSES_PATH}")
except StoreError as exc:
    print(f"[WARN] Course store unreadable; requests touching it will fail: {exc}", file=sys.stderr)


# -- Security headers ------------------------------------------------------
@app.before_request
def _start_request_timer():
    g._request_start_time = time.perf_counter()


@app.after_request
def _add_security_headers(response):
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "same-origin"

    started = getattr(g, "_request_start_time", None)
    if started is not None:
        duration_ms = (time.perf_counter() - started) * 1000.0
        if duration_ms >= _SLOW_REQUEST_LOG_MS:
            endpoint = request.endpoint or "unknown"
            print(
                f"[SLOW] {request.method} {request.path} "
                f"endpoint={endpoint} status={response.status_code} duration_ms={duration_ms:.1f}"
            )
    return response


# ── Error handlers ─────────────────────────────────────────────────────────────
@app.errorhandler(StoreError)
def handle_store_error(e):
    print(f"[WARN] Course store error: {e}", file=sys.stderr)
    return _error("STORE_ERROR", "Saved course data could not be read.", 500)


@app.errorhandler(Exception)
def handle_unexpected_error(e):
    if isinstance(e, HTTPException):
        return e
    return _error("SERVER_ERROR", "An unexpected server error occurred.", 500)


# -- Health endpoint --------------------------------------------------------
@app.route("/health", methods=["GET"])
def health_endpoint():
    return jsonify({"status": "ok", "version": VERSION})


# ── Import ─────────────────────────────────────────────────────────────────────
@app.route("/api/import", methods=["POST"])
def import_endpoint():
    """Parse pasted text into course records, optionally saving them."""
    body = request.get_json(force=True, silent=True)
    err_code, err_msg = validate_import_body(body, MAX_IMPORT_CHARS)
    if err_code:
        return _error(err_code, err_msg, 400)

    mode = body.get("mode") or IMPORT_MODE_DEFAULT
    if mode != "local":
        client_ip = request.headers.get("X-Forwarded-For", request.remote_addr or "").split(",")[0].strip()
        if not app.config.get("TESTING") and not _check_rate_limit(client_ip):
            return _error("RATE_LIMITED", "Too many requests. Please wait before submitting again.", 429)

    try:
        courses, mode_used = extract_courses(body["text"], mode=mode)
    except Exception as exc:
        print(f"[WARN] AI extraction failed: {exc}", file=sys.stderr)
        return _error("AI_UNAVAILABLE", "The AI extraction service is unavailable. Try local mode.", 502)

    if not courses:
        return _error(
            "NO_COURSES_RECOGNIZED",
            "No valid courses recognized. Each line needs a course name, a credit and a score.",
            422,
        )

    if body.get("save") is True:
        with _store_lock:
            # New imports go on top
            _write_store(courses + _read_store())

    return jsonify({"mode": mode_used, "courses": courses, "count": len(courses)})


@app.route("/api/preview", methods=["POST"])
def preview_endpoint():
    """Live count of recognizable lines while the user is still typing."""
    body = request.get_json(force=True, silent=True) or {}
    text = body.get("text") if isinstance(body, dict) else None
    if not isinstance(text, str):
        return jsonify({"count": 0})
    return jsonify({"count": len(parse_courses(text[:MAX_IMPORT_CHARS]))})


# ── Statistics ─────────────────────────────────────────────────────────────────
@app.route("/api/stats", methods=["POST"])
def stats_endpoint():
    body = request.get_json(force=True, silent=True)
    if body is None:
        body = {}
    if not isinstance(body, dict):
        return _error("INVALID_INPUT", "Request body must be a JSON object.", 400)

    include_planned = body.get("include_planned", False)
    if not isinstance(include_planned, bool):
        return _error("INVALID_INPUT", "'include_planned' must be true or false.", 400)

    if "courses" in body:
        courses, err_msg = validate_course_list(body["courses"])
        if err_msg:
            return _error("INVALID_INPUT", err_msg, 400)
    else:
        courses = _read_store()

    return jsonify(_present_summary(summarize(courses, include_planned=include_planned)))


# ── Course CRUD ────────────────────────────────────────────────────────────────
@app.route("/api/courses", methods=["GET"])
def list_courses():
    return jsonify({"courses": _read_store()})


@app.route("/api/courses", methods=["POST"])
def add_course():
    body = request.get_json(force=True, silent=True)
    err_code, err_msg = validate_course_payload(body)
    if err_code:
        return _error(err_code, err_msg, 400)

    course = {
        "id": uuid.uuid4().hex,
        "name": str(body["name"]).strip(),
        "credit": float(body["credit"]),
        "score": float(body["score"]),
        "is_planned": body.get("is_planned", False),
    }
    with _store_lock:
        _write_store([course] + _read_store())
    return jsonify({"course": course}), 201


@app.route("/api/courses", methods=["DELETE"])
def reset_courses():
    with _store_lock:
        _write_store([])
    return jsonify({"ok": True})


def _apply_update(course_id: str, body: dict):
    err_code, err_msg = validate_course_payload(body, partial=True)
    if err_code:
        return _error(err_code, err_msg, 400)

    with _store_lock:
        courses = _read_store()
        idx = _find_course(courses, course_id)
        if idx == -1:
            return _error("UNKNOWN_COURSE", f"Course '{course_id}' not found.", 404)
        course = dict(courses[idx])
        if "name" in body:
            course["name"] = str(body["name"]).strip()
        for field in ("credit", "score"):
            if field in body:
                course[field] = float(body[field])
        if "is_planned" in body:
            course["is_planned"] = body["is_planned"]
        courses[idx] = course
        _write_store(courses)
    return jsonify({"course": course})


@app.route("/api/courses/<course_id>", methods=["PUT"])
def update_course(course_id):
    body = request.get_json(force=True, silent=True)
    return _apply_update(course_id, body)


@app.route("/api/courses/<course_id>/score", methods=["PATCH"])
def change_score(course_id):
    """Score-only edit used by the inline slider."""
    body = request.get_json(force=True, silent=True)
    if not isinstance(body, dict) or "score" not in body:
        return _error("INVALID_INPUT", "'score' is required.", 400)
    return _apply_update(course_id, {"score": body["score"]})


@app.route("/api/courses/<course_id>", methods=["DELETE"])
def delete_course(course_id):
    with _store_lock:
        courses = _read_store()
        idx = _find_course(courses, course_id)
        if idx == -1:
            return _error("UNKNOWN_COURSE", f"Course '{course_id}' not found.", 404)
        removed = courses.pop(idx)
        _write_store(courses)
    return jsonify({"ok": True, "course": removed})


app.add_url_rule("/api/health", endpoint="api_health", view_func=health_endpoint, methods=["GET"])


# -- API catch-all (404 for unknown /api/* routes) -------------------
@app.route("/api/<path:rest>", methods=["GET", "POST", "PUT", "DELETE", "PATCH"])
def api_catch_all(rest):
    return _error("NOT_FOUND", f"/api/{rest} not found", 404)


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    debug = os.environ.get("FLASK_DEBUG", "1") == "1"
    app.run(host="0.0.0.0", port=port, debug=debug)
