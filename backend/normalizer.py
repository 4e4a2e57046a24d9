import re

from grade_scale import GRADE_TOKENS

# Markdown table divider rows: |---|:---:|---|
DIVIDER_RE = re.compile(r'^[|\s\-:]*$')
SEPARATOR_RE = re.compile(r'[,，\t]')

# A grade token must sit between line start/separator and line end/whitespace.
# The trailing side never accepts "+" or "-", so "A" cannot eat the head of "A+".
_GRADE_PATTERNS = tuple(
    (
        re.compile(r'(^|[\s,，:：\-])' + re.escape(token) + r'(?=$|[\s,，])', re.IGNORECASE),
        value,
    )
    for token, value in GRADE_TOKENS
)


def is_divider_row(line: str) -> bool:
    """True for lines made only of pipes, dashes, colons and whitespace."""
    return bool(DIVIDER_RE.match(line.strip()))


def clean_line(line: str) -> str:
    """
    Dissolves table cell boundaries and normalizes separators.

    '| 高等数学 | 5.0 | 92 |'  -> '高等数学   5.0   92'
    '大学英语,3.0，Pass'       -> '大学英语 3.0 Pass'
    """
    line = line.replace("|", " ")
    line = SEPARATOR_RE.sub(" ", line)
    return line.strip()


def preprocess_lines(text) -> list[str]:
    """
    Splits pasted text into cleaned, non-empty lines.

    Divider rows and blank lines are dropped. The divider check runs on the
    cleaned line as well, so running this on its own joined output is a no-op.
    """
    if text is None:
        return []
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("utf-8", errors="replace")
    elif not isinstance(text, str):
        text = str(text)

    lines = []
    for raw in text.splitlines():
        if not raw.strip() or is_divider_row(raw):
            continue
        cleaned = clean_line(raw)
        if not cleaned or is_divider_row(cleaned):
            continue
        lines.append(cleaned)
    return lines


def normalize_grade_tokens(line: str) -> str:
    """
    Rewrites letter/word grades to their numeric score.

    Only the first occurrence of each token is replaced; a line is expected to
    carry at most one grade.
    """
    for pattern, value in _GRADE_PATTERNS:
        line = pattern.sub(lambda m, v=value: m.group(1) + v, line, count=1)
    return line
