#!/usr/bin/env python3
"""
PDF Rule Checker — Command Line
===============================

Checks one PDF against up to three rules and prints a verdict report.

Usage:
    GEMINI_API_KEY=... python main.py report.pdf "Document should mention supervisor name."
    python main.py thesis.pdf "Document should have at least 2 pages." "Has a bibliography."

Exit codes: 0 every rule passed, 1 at least one rule failed, 2 analysis failed.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from pdf_rule_checker.config import JudgeSettings
from pdf_rule_checker.exceptions import RuleCheckError
from pdf_rule_checker.judge import ModelJudge
from pdf_rule_checker.models import AnalysisResult, Verdict
from pdf_rule_checker.pipeline import MAX_RULES, AnalysisPipeline

load_dotenv()


# ─── ANSI Color Constants ───────────────────────────────────────────

_RED = "\033[91m"
_GREEN = "\033[92m"
_CYAN = "\033[96m"
_DIM = "\033[2m"
_BOLD = "\033[1m"
_RESET = "\033[0m"
_WIDTH = 72


# ─── Pretty Printer Helpers ─────────────────────────────────────────


def _print_verdict(index: int, verdict: Verdict) -> None:
    """Print one rule with its status, evidence and reasoning."""
    color = _GREEN if verdict.passed else _RED
    label = verdict.status.value.upper()
    print(f"  {_BOLD}{index}. {verdict.rule}{_RESET}")
    print(f"     {color}{_BOLD}{label}{_RESET}  {_DIM}confidence {verdict.confidence:g}{_RESET}")
    if verdict.evidence:
        print(f"     Evidence:  {verdict.evidence}")
    if verdict.reasoning:
        print(f"     Reasoning: {_DIM}{verdict.reasoning}{_RESET}")
    print()


# ─── Pretty Printer ─────────────────────────────────────────────────


def print_report(result: AnalysisResult) -> int:
    """Pretty-print the analysis result with ANSI color codes.

    Returns:
        0 if every rule passed, 1 otherwise.
    """
    print(f"\n{'=' * _WIDTH}")
    print(f"{_BOLD}{_CYAN}  PDF RULE CHECK REPORT{_RESET}")
    print(f"{'=' * _WIDTH}")
    print(f"  File:        {result.file_name}")
    print(f"  Pages:       {result.total_pages}")
    print(f"{'─' * _WIDTH}\n")

    for i, verdict in enumerate(result.results, start=1):
        _print_verdict(i, verdict)

    failed = sum(1 for v in result.results if not v.passed)
    print(f"{'=' * _WIDTH}")
    if failed == 0:
        print(f"  {_GREEN}{_BOLD}ALL RULES PASSED{_RESET}")
    else:
        print(f"  {_RED}{_BOLD}{failed} of {len(result.results)} rule(s) failed{_RESET}")
    print(f"{'=' * _WIDTH}\n")

    return 0 if failed == 0 else 1


# ─── Main ────────────────────────────────────────────────────────────


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check a PDF against natural-language rules.")
    parser.add_argument("pdf", type=Path, help="path to a 2-10 page PDF")
    parser.add_argument("rules", nargs="+", help=f"up to {MAX_RULES} rules")
    parser.add_argument("-v", "--verbose", action="store_true", help="log pipeline steps")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the pipeline on one PDF and print the report."""
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        data = args.pdf.read_bytes()
        pipeline = AnalysisPipeline(ModelJudge(JudgeSettings.from_env()))
        result = pipeline.analyze(args.pdf.name, data, args.rules)
    except OSError as e:
        print(f"  {_RED}Cannot read {args.pdf}: {e}{_RESET}", file=sys.stderr)
        return 2
    except RuleCheckError as e:
        print(f"  {_RED}[{e.code}] {e}{_RESET}", file=sys.stderr)
        return 2

    return print_report(result)


if __name__ == "__main__":
    sys.exit(main())
