import os
import uuid

import pandas as pd

from validators import coerce_course_record

COLUMNS = ["id", "name", "credit", "score", "is_planned"]

_BOOL_TRUTHY = {"true", "1", "yes", "y"}


class StoreError(ValueError):
    """The course file exists but cannot be read as a course list."""


# Seed list shown on first run, before anything has been saved
DEMO_COURSES = (
    {"id": "1", "name": "高等数学 I", "credit": 5.0, "score": 92.0, "is_planned": False},
    {"id": "2", "name": "大学物理", "credit": 4.0, "score": 85.0, "is_planned": False},
    {"id": "3", "name": "程序设计基础", "credit": 3.5, "score": 95.0, "is_planned": False},
    {"id": "4", "name": "高级机器学习", "credit": 3.0, "score": 90.0, "is_planned": True},
    {"id": "5", "name": "毕业设计", "credit": 8.0, "score": 85.0, "is_planned": True},
)


def _safe_bool_col(df: pd.DataFrame, col: str) -> pd.DataFrame:
    """Normalize a boolean column to Python bool regardless of CSV format.

    Handles: Python bool, int/float (1/0), and string variants
    (TRUE/FALSE, true/false, 1/0, yes/no, y/n). NaN and "" → False.
    """
    def _coerce(x):
        if pd.isna(x):
            return False
        if isinstance(x, bool):
            return x
        if isinstance(x, (int, float)):
            return bool(x)
        return str(x).strip().lower() in _BOOL_TRUTHY

    if col in df.columns:
        df[col] = df[col].apply(_coerce).astype(object)
    return df


def demo_courses() -> list[dict]:
    return [dict(c) for c in DEMO_COURSES]


def load_courses(path: str) -> list[dict]:
    """
    Load the saved course list. A missing file yields the demo courses.

    Raises StoreError when the file exists but cannot be read as a course list.
    """
    if not os.path.exists(path):
        return demo_courses()

    try:
        # Keep "NA", "null", "None" etc. as literal course names
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError:
        return []
    except (pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise StoreError(f"Could not read course file {path}: {exc}") from exc

    missing = [c for c in ("name", "credit", "score") if c not in df.columns]
    if missing:
        raise StoreError(f"Course file {path} is missing column(s): {missing}")
    if "id" not in df.columns:
        df["id"] = None
    if "is_planned" not in df.columns:
        df["is_planned"] = False
    df = _safe_bool_col(df, "is_planned")

    courses = []
    for row_num, row in enumerate(df.to_dict(orient="records"), start=2):
        record = coerce_course_record(row)
        if record is None:
            raise StoreError(f"Course file {path} has an invalid row at line {row_num}: {row}")
        raw_id = row.get("id")
        record["id"] = str(raw_id) if raw_id else uuid.uuid4().hex
        record["is_planned"] = bool(row.get("is_planned"))
        courses.append(record)
    return courses


def save_courses(path: str, courses: list[dict]) -> None:
    """Write the course list as CSV, creating the parent directory if needed."""
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)
    df = pd.DataFrame(list(courses), columns=COLUMNS)
    df.to_csv(path, index=False, encoding="utf-8")
