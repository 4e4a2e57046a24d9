import os
import sys
import json

from openai import OpenAI
from prompt_builder import build_prompt, SYSTEM_PROMPT
from course_parser import parse_courses
from validators import coerce_course_record


def get_openai_client() -> OpenAI:
    api_key = os.environ.get("OPENAI_API_KEY")
    if not api_key:
        raise RuntimeError("OPENAI_API_KEY not set in environment")
    return OpenAI(api_key=api_key)


def ai_available() -> bool:
    return bool(os.environ.get("OPENAI_API_KEY"))


def _strip_code_fences(raw: str) -> str:
    if raw.startswith("```"):
        lines = raw.splitlines()
        raw = "\n".join(lines[1:-1] if lines[-1].strip() == "```" else lines[1:])
    return raw


def call_openai(text: str, client: OpenAI | None = None) -> list[dict]:
    """
    Sends pasted text to OpenAI and returns course records in the same shape
    the local parser produces.

    Items missing a field or out of range are dropped. Raises RuntimeError when
    the key is missing or the reply is not a JSON list.
    """
    client = client or get_openai_client()
    model = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")

    response = client.chat.completions.create(
        model=model,
        max_tokens=2000,
        temperature=0,
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_prompt(text)},
        ],
    )

    raw = _strip_code_fences((response.choices[0].message.content or "").strip())
    if not raw:
        raise RuntimeError("Model returned an empty response.")
    try:
        parsed_output = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise RuntimeError(f"Model response was not valid JSON: {exc}") from exc

    # Some models wrap the list: {"courses": [...]}
    if isinstance(parsed_output, dict):
        parsed_output = parsed_output.get("courses", [])
    if not isinstance(parsed_output, list):
        raise RuntimeError("Model response was not a JSON array.")

    courses = []
    for item in parsed_output:
        record = coerce_course_record(item)
        if record is not None:
            record["is_planned"] = False
            courses.append(record)
    return courses


def extract_courses(text: str, mode: str = "local", client: OpenAI | None = None) -> tuple[list[dict], str]:
    """
    Extracts course records with the requested backend.

    mode:
      "local" -> heuristic parser only
      "ai"    -> OpenAI only; errors propagate
      "auto"  -> OpenAI when configured, local parser on any failure

    Returns (courses, mode_used) where mode_used is "local" or "ai".
    """
    if mode == "ai":
        return call_openai(text, client=client), "ai"

    if mode == "auto" and (client is not None or ai_available()):
        try:
            return call_openai(text, client=client), "ai"
        except Exception as exc:
            print(f"[WARN] AI extraction failed; using local parser: {exc}", file=sys.stderr)

    return parse_courses(text), "local"
