"""
Parse a pasted transcript from a file and print the courses and statistics.

Accepts plain text / Markdown (.txt, .md, or "-" for stdin) and spreadsheets
(.csv, .xlsx). Spreadsheet rows are joined with tabs, the same shape Excel
puts on the clipboard, and then parsed like pasted text.

Usage:
    python scripts/import_courses.py grades.md
    cat grades.txt | python scripts/import_courses.py - --mode auto --json
"""

from __future__ import annotations

import argparse
import json
import os
import sys

import pandas as pd

BACKEND_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "backend")
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

from llm_extractor import extract_courses  # noqa: E402
from stats import summarize  # noqa: E402

SPREADSHEET_EXTS = {".csv", ".xlsx", ".xlsm"}


def _cell_text(value) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value).strip()


def frame_to_text(df: pd.DataFrame) -> str:
    """Join each spreadsheet row into one tab-separated line."""
    lines = []
    for row in df.itertuples(index=False):
        cells = [_cell_text(v) for v in row]
        cells = [c for c in cells if c]
        if cells:
            lines.append("\t".join(cells))
    return "\n".join(lines)


def read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    ext = os.path.splitext(path)[1].lower()
    if ext == ".csv":
        return frame_to_text(pd.read_csv(path, header=None, dtype=str))
    if ext in SPREADSHEET_EXTS:
        return frame_to_text(pd.read_excel(path, header=None, dtype=str, engine="openpyxl"))
    with open(path, encoding="utf-8", errors="replace") as f:
        return f.read()


def format_report(courses: list[dict], summary: dict) -> str:
    lines = []
    for c in courses:
        lines.append(f"  {c['name']:<30} credit={c['credit']:g}  score={c['score']:g}")
    stats = summary["stats"]
    lines.append("")
    lines.append(
        f"Courses: {stats['count']}  Credits: {stats['total_credits']:g}  "
        f"Weighted average: {stats['weighted_average']:.2f}  GPA: {stats['gpa']:.2f}"
    )
    for band in summary["distribution"]:
        lines.append(f"  {band['label']:<14} {band['credit_value']:g} credits")
    return "\n".join(lines)


def main(args=None) -> int:
    parser = argparse.ArgumentParser(
        description="Extract courses (name, credit, score) from pasted text and compute GPA.",
    )
    parser.add_argument("path", help="Text, Markdown, CSV or XLSX file; '-' reads stdin.")
    parser.add_argument(
        "--mode", choices=["local", "ai", "auto"], default="local",
        help="Extraction backend (default: local heuristic parser).",
    )
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a table.")
    opts = parser.parse_args(args)

    try:
        text = read_input(opts.path)
    except OSError as exc:
        print(f"[FATAL] Could not read {opts.path}: {exc}", file=sys.stderr)
        return 1

    try:
        courses, mode_used = extract_courses(text, mode=opts.mode)
    except Exception as exc:
        print(f"[FATAL] AI extraction failed: {exc}", file=sys.stderr)
        return 1

    if not courses:
        print("No valid courses recognized. Each line needs a course name, a credit and a score.", file=sys.stderr)
        return 1

    summary = summarize(courses)
    if opts.json:
        print(json.dumps({"mode": mode_used, "courses": courses, **summary}, ensure_ascii=False, indent=2))
    else:
        print(f"[OK] Recognized {len(courses)} course(s) ({mode_used} parser)")
        print(format_report(courses, summary))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
