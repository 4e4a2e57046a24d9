"""
Shape checks for course records arriving from outside the local parser:
the remote extraction service, the HTTP API and the course store.
"""

import math
import uuid

from course_parser import MAX_NAME_LENGTH, MAX_SCORE

IMPORT_MODES = ("local", "ai", "auto")


def _as_number(raw) -> float | None:
    if isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def coerce_course_record(item) -> dict | None:
    """
    Turns a loose {name, credit, score} mapping into a full course record.

    Returns None unless all three fields are present and usable: non-empty
    name shorter than MAX_NAME_LENGTH, credit >= 0, score within [0, 100].
    """
    if not isinstance(item, dict):
        return None
    name = str(item.get("name") or "").strip()
    credit = _as_number(item.get("credit"))
    score = _as_number(item.get("score"))
    if not name or len(name) >= MAX_NAME_LENGTH:
        return None
    if credit is None or credit < 0:
        return None
    if score is None or not (0 <= score <= MAX_SCORE):
        return None
    return {
        "id": uuid.uuid4().hex,
        "name": name,
        "credit": credit,
        "score": score,
        "is_planned": item.get("is_planned") is True,
    }


def validate_import_body(body, max_chars: int):
    """Returns (error_code, message) on invalid input, (None, None) on success."""
    if not isinstance(body, dict):
        return "INVALID_INPUT", "Request body must be valid JSON."
    text = body.get("text")
    if not isinstance(text, str) or not text.strip():
        return "INVALID_INPUT", "'text' must be a non-empty string."
    if len(text) > max_chars:
        return "INVALID_INPUT", f"'text' must be at most {max_chars} characters."
    mode = body.get("mode")
    if mode not in (None, "") and mode not in IMPORT_MODES:
        return "INVALID_INPUT", f"'mode' must be one of: {', '.join(IMPORT_MODES)}."
    return None, None


def validate_course_payload(body, partial: bool = False):
    """
    Checks a manually entered course (add/edit form).

    Name required, credit > 0, score >= 0 and <= 100. With partial=True only
    the fields present are checked.
    Returns (error_code, message) on invalid input, (None, None) on success.
    """
    if not isinstance(body, dict):
        return "INVALID_INPUT", "Request body must be valid JSON."

    if not partial or "name" in body:
        name = str(body.get("name") or "").strip()
        if not name:
            return "INVALID_INPUT", "'name' is required."
        if len(name) >= MAX_NAME_LENGTH:
            return "INVALID_INPUT", f"'name' must be shorter than {MAX_NAME_LENGTH} characters."

    if not partial or "credit" in body:
        credit = _as_number(body.get("credit"))
        if credit is None or credit <= 0:
            return "INVALID_INPUT", "'credit' must be a number greater than 0."

    if not partial or "score" in body:
        score = _as_number(body.get("score"))
        if score is None or not (0 <= score <= MAX_SCORE):
            return "INVALID_INPUT", f"'score' must be a number between 0 and {MAX_SCORE}."

    if "is_planned" in body and not isinstance(body["is_planned"], bool):
        return "INVALID_INPUT", "'is_planned' must be true or false."

    return None, None


def validate_course_list(raw) -> tuple[list[dict] | None, str | None]:
    """
    Validates a caller-supplied course list for statistics.

    Returns (courses, None) or (None, message). Ids are kept when supplied.
    """
    if not isinstance(raw, list):
        return None, "'courses' must be a list."
    courses = []
    for i, item in enumerate(raw):
        record = coerce_course_record(item)
        if record is None:
            return None, f"courses[{i}] needs a name, credit >= 0 and score between 0 and {MAX_SCORE}."
        if isinstance(item, dict) and item.get("id"):
            record["id"] = str(item["id"])
        courses.append(record)
    return courses, None
