from grade_scale import SCORE_BANDS, band_for_score, grade_point


def _credit(course: dict) -> float:
    return float(course.get("credit", 0) or 0)


def _score(course: dict) -> float:
    return float(course.get("score", 0) or 0)


def compute_stats(courses: list[dict]) -> dict:
    """
    Credit-weighted summary of a course list.

    Returns:
      {
        "total_credits":    8.0,
        "weighted_average": 78.75,
        "gpa":              2.875,
        "count":            2
      }
    Averages are 0 when the list carries no credits.
    """
    total_credits = 0.0
    weighted_sum = 0.0
    grade_points = 0.0
    for course in courses:
        credit = _credit(course)
        score = _score(course)
        total_credits += credit
        weighted_sum += score * credit
        grade_points += grade_point(score) * credit

    if total_credits > 0:
        weighted_average = weighted_sum / total_credits
        gpa = grade_points / total_credits
    else:
        weighted_average = 0.0
        gpa = 0.0

    return {
        "total_credits": total_credits,
        "weighted_average": weighted_average,
        "gpa": gpa,
        "count": len(courses),
    }


def score_distribution(courses: list[dict]) -> list[dict]:
    """Credits per score band, highest band first. Empty bands are left out."""
    totals = [0.0] * len(SCORE_BANDS)
    for course in courses:
        totals[band_for_score(_score(course))] += _credit(course)
    return [
        {"label": label, "credit_value": total}
        for (_threshold, label), total in zip(SCORE_BANDS, totals)
        if total > 0
    ]


def summarize(courses: list[dict], include_planned: bool = False) -> dict:
    """
    Stats and distribution for either completed courses only (default) or
    the projected set including planned ones.
    """
    if include_planned:
        selected = list(courses)
    else:
        selected = [c for c in courses if not c.get("is_planned", False)]
    return {
        "stats": compute_stats(selected),
        "distribution": score_distribution(selected),
    }
