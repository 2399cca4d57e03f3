"""
Main analysis pipeline — orchestrates the full workflow.

Flow:
  ┌────────────┐
  │ Rules + PDF│
  └─────┬──────┘
        │
  ┌─────▼──────┐
  │ Clean rules│   ← trim, drop empty slots
  └─────┬──────┘
        │
  ┌─────▼──────┐
  │  Extract   │   ← pypdf: page count + merged text
  └─────┬──────┘
        │
  ┌─────▼──────┐
  │ Page bounds│   ← 2..10 pages, before any model call
  └─────┬──────┘
        │
  ┌─────▼──────┐
  │   Judge    │   ← truncated text + rules → LLM verdicts
  └─────┬──────┘
        │
  ┌─────▼──────┐
  │ Overrides  │   ← deterministic checks replace LLM verdicts
  └─────┬──────┘
        │
  ┌─────▼──────┐
  │   Result   │
  └────────────┘

Design principles:
  - Every step returns a fully normalized value or raises; no partial results.
  - Errors propagate unchanged to the caller. Nothing here retries.
  - The page count used by overrides comes from the same Document the
    prompt was built from.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .exceptions import PageCountError, ValidationError
from .extractor import extract_text
from .judge import ModelJudge
from .models import AnalysisResult
from .overrides import apply_overrides
from .prompt import truncate_text

logger = logging.getLogger(__name__)

MIN_PAGES = 2
MAX_PAGES = 10
MAX_RULES = 3


def clean_rules(raw_rules: Sequence[str | None], max_rules: int = MAX_RULES) -> list[str]:
    """Trim rule slots and drop the empty ones, preserving order.

    Raises:
        ValidationError: no rule is left, or more than ``max_rules`` are.
    """
    cleaned = [(rule or "").strip() for rule in raw_rules]
    cleaned = [rule for rule in cleaned if rule]

    if not cleaned:
        raise ValidationError("At least one rule is required")
    if len(cleaned) > max_rules:
        raise ValidationError(
            f"At most {max_rules} rules are supported",
            details={"rule_count": len(cleaned)},
        )
    return cleaned


class AnalysisPipeline:
    """Checks a PDF against a handful of natural-language rules.

    Usage:
        pipeline = AnalysisPipeline(ModelJudge(JudgeSettings.from_env()))
        result = pipeline.analyze("report.pdf", pdf_bytes, [rule1, rule2, rule3])
        for verdict in result.results:
            print(verdict.rule, verdict.status)
    """

    def __init__(self, judge: ModelJudge, max_rules: int = MAX_RULES):
        self.judge = judge
        self.max_rules = max_rules

    def analyze(
        self, file_name: str, data: bytes, raw_rules: Sequence[str | None]
    ) -> AnalysisResult:
        """Execute the full pipeline on one uploaded PDF.

        Args:
            file_name: Original file name, echoed back in the result.
            data: Raw PDF bytes.
            raw_rules: Rule slots as submitted; empty slots are allowed.

        Returns:
            AnalysisResult with one verdict per non-empty rule, in order.
        """
        # ── Step 1: Clean rules ─────────────────────────────────────
        rules = clean_rules(raw_rules, self.max_rules)

        # ── Step 2: Extract ─────────────────────────────────────────
        logger.info("Extracting text from %s", file_name)
        document = extract_text(data)

        # ── Step 3: Enforce page bounds ─────────────────────────────
        if not MIN_PAGES <= document.page_count <= MAX_PAGES:
            raise PageCountError(
                f"PDF must be between {MIN_PAGES} and {MAX_PAGES} pages.",
                details={"page_count": document.page_count},
            )

        # ── Step 4: Truncate ────────────────────────────────────────
        text = truncate_text(document.text)

        # ── Step 5: Judge ───────────────────────────────────────────
        logger.info("Judging %d rule(s) for %s", len(rules), file_name)
        verdicts = self.judge.judge(text, rules)

        # ── Step 6: Reconcile with deterministic checks ─────────────
        results = apply_overrides(rules, verdicts, document.page_count)

        # ── Step 7: Assemble ────────────────────────────────────────
        return AnalysisResult(
            file_name=file_name,
            total_pages=document.page_count,
            results=results,
        )
