from grade_scale import GRADE_TOKENS

SYSTEM_PROMPT = """You are a transcript reading assistant.
You will receive text a student pasted from a grade report: plain lines, a Markdown table,
or cells copied from Excel or Word. Chinese and English may be mixed.

Your job:
1. Find every course in the text together with its credit value and its final score
2. Convert letter or word grades to a number using the grade table provided
3. Skip header rows, divider rows, totals and anything that is not a single course

Output ONLY a valid JSON array. No markdown. No prose outside the JSON.
Never invent courses that are not in the text.

Schema per item (output exactly this structure, all three fields required):
{
  "name": "course name as written",
  "credit": 3.0,
  "score": 85
}
"credit" is a number >= 0. "score" is a number between 0 and 100."""


def build_prompt(text: str) -> str:
    """
    Builds the user message sent to the LLM: the grade table first, then the
    pasted text verbatim.
    """
    table = ", ".join(f"{token}={value}" for token, value in GRADE_TOKENS)
    context_lines = [
        f"Grade table: {table}",
        "",
        "Text to analyze:",
        text,
    ]
    return "\n".join(context_lines)
