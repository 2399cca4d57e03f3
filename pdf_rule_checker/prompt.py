"""
Judge prompt rendering.

Pure functions only: the same text and rules always render the same prompt.
"""

from __future__ import annotations

from collections.abc import Sequence

# Characters of document text forwarded to the judge. A raw prefix cut:
# evidence located past this point in long documents is never seen.
MAX_TEXT_CHARS = 15_000


PROMPT_TEMPLATE = """\
You are checking a PDF document against user-defined rules.

Document text (may be truncated):
\"\"\"
{document_text}
\"\"\"

User rules:
{rule_list}

For each rule, you must:
- Decide if the rule PASSES or FAILS.
- Find exactly ONE clear evidence sentence from the document.
- If possible, include a page number in the evidence like: "Found on page 2: '<quote>'".
- Provide a short reasoning (1-2 sentences) explaining why it passed or failed.
- Assign a numeric confidence score between 0 and 100 (no % symbol).

Return ONLY a JSON array of {rule_count} {object_word}, one per rule and in the same order as the rules, in this exact format:
[
  {{
    "rule": "original rule text",
    "status": "pass" or "fail",
    "evidence": "one concise evidence sentence, ideally with page number like 'Found on page 2: ...'",
    "reasoning": "short reasoning (1-2 sentences).",
    "confidence": 0-100
  }}
]

Do not include any extra keys, comments, or text outside the JSON array.
"""


def truncate_text(text: str, limit: int = MAX_TEXT_CHARS) -> str:
    """Keep at most ``limit`` leading characters of ``text``."""
    return text[:limit] if len(text) > limit else text


def build_prompt(text: str, rules: Sequence[str]) -> str:
    """Render the judge prompt for ``rules`` against (truncated) ``text``."""
    rule_list = "\n".join(f"{i}. {rule}" for i, rule in enumerate(rules, start=1))
    return PROMPT_TEMPLATE.format(
        document_text=truncate_text(text),
        rule_list=rule_list,
        rule_count=len(rules),
        object_word="object" if len(rules) == 1 else "objects",
    )
