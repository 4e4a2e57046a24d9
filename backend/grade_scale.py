"""
Fixed grading tables shared by the course parser and the statistics engine.

All tables are tuples so nothing can mutate them at runtime.
"""

# Grade token -> numeric score text, in match precedence order.
# Multi-character tokens come before any token they start with
# ("A+"/"A-" before "A", "优秀" before "优", "中等" before "中").
GRADE_TOKENS: tuple[tuple[str, str], ...] = (
    ("A+", "98"),
    ("A-", "90"),
    ("A", "95"),
    ("B+", "88"),
    ("B-", "80"),
    ("B", "85"),
    ("C+", "78"),
    ("C-", "70"),
    ("C", "75"),
    ("D", "65"),
    ("F", "0"),
    ("优秀", "95"),
    ("优", "95"),
    ("良好", "85"),
    ("良", "85"),
    ("中等", "75"),
    ("中", "75"),
    ("不及格", "0"),
    ("及格", "65"),
    ("合格", "80"),
    ("挂科", "0"),
    ("Pass", "80"),
    ("Fail", "0"),
)

# (minimum score, grade point), highest threshold first
GRADE_POINT_CURVE: tuple[tuple[float, float], ...] = (
    (90, 4.0),
    (85, 3.7),
    (82, 3.3),
    (78, 3.0),
    (75, 2.7),
    (72, 2.3),
    (68, 2.0),
    (64, 1.5),
    (60, 1.0),
)

# (minimum score, label); the top band is closed at 100, the rest are [min, next)
SCORE_BANDS: tuple[tuple[float, str], ...] = (
    (90, "90-100 (优)"),
    (80, "80-89 (良)"),
    (70, "70-79 (中)"),
    (60, "60-69 (及格)"),
    (0, "< 60 (不及格)"),
)


def grade_point(score: float) -> float:
    """Step-function lookup on GRADE_POINT_CURVE; anything under 60 earns 0."""
    for threshold, points in GRADE_POINT_CURVE:
        if score >= threshold:
            return points
    return 0.0


def band_for_score(score: float) -> int:
    """Index into SCORE_BANDS for the band containing score."""
    for i, (threshold, _label) in enumerate(SCORE_BANDS):
        if score >= threshold:
            return i
    return len(SCORE_BANDS) - 1
