import math
import re
import uuid

from normalizer import normalize_grade_tokens, preprocess_lines

# Unsigned integer or decimal, ASCII digits only
NUMBER_RE = re.compile(r'[0-9]+(?:\.[0-9]+)?')
WHITESPACE_RE = re.compile(r'\s+')
TRAILING_PUNCT_RE = re.compile(r'[\s\-–—:：]+$')

# Credit loads are small, scores are large
CREDIT_CEILING = 20
MAX_SCORE = 100
MAX_NAME_LENGTH = 50

RULE_CREDIT_FIRST = "credit_first"
RULE_SCORE_FIRST = "score_first"
RULE_POSITIONAL = "positional"


def extract_numeric_tokens(line: str) -> list[str]:
    """Returns every numeric substring in left-to-right order, as matched."""
    return NUMBER_RE.findall(line)


def pick_credit_and_score(first: str, second: str) -> tuple[float, float, str]:
    """
    Decides which of the last two numbers on a line is the credit.

    Magnitude rule first: a value <= 20 paired with a value > 20 is the credit.
    When both sit on the same side of 20 the line is ambiguous and the
    positional "name credit score" order wins.

    Returns (credit, score, rule_name).
    """
    v1 = float(first)
    v2 = float(second)
    if v1 <= CREDIT_CEILING < v2:
        return v1, v2, RULE_CREDIT_FIRST
    if v2 <= CREDIT_CEILING < v1:
        return v2, v1, RULE_SCORE_FIRST
    return v1, v2, RULE_POSITIONAL


def _remove_last(haystack: str, needle: str) -> str:
    idx = haystack.rfind(needle)
    if idx == -1:
        return haystack
    return haystack[:idx] + haystack[idx + len(needle):]


def extract_course_name(line: str, first: str, second: str) -> str:
    """
    Strips the chosen numbers from the line and tidies what is left.

    The later number is removed first so the earlier one is still found at
    its original position.
    """
    name = _remove_last(line, second)
    name = _remove_last(name, first)
    name = WHITESPACE_RE.sub(" ", name).strip()
    return TRAILING_PUNCT_RE.sub("", name).strip()


def parse_line(line: str) -> dict | None:
    """
    Turns one cleaned line into a course record, or None when it cannot be
    fully resolved.
    """
    normalized = normalize_grade_tokens(line)
    tokens = extract_numeric_tokens(normalized)
    if len(tokens) < 2:
        return None

    first, second = tokens[-2], tokens[-1]
    credit, score, _rule = pick_credit_and_score(first, second)
    # Hundreds of digits overflow float() to inf
    if not (math.isfinite(credit) and math.isfinite(score)):
        return None
    if score > MAX_SCORE:
        return None

    name = extract_course_name(normalized, first, second)
    if not name or len(name) >= MAX_NAME_LENGTH:
        return None

    return {
        "id": uuid.uuid4().hex,
        "name": name,
        "credit": credit,
        "score": score,
        "is_planned": False,
    }


def parse_courses(text) -> list[dict]:
    """
    Extracts course records from pasted text (plain lines, Markdown tables,
    spreadsheet or Word paste).

    Lines that cannot be resolved are skipped silently; the result keeps the
    order of the lines that could. Never raises; an empty list means nothing
    was recognized.
    """
    courses = []
    for line in preprocess_lines(text):
        record = parse_line(line)
        if record is not None:
            courses.append(record)
    return courses
