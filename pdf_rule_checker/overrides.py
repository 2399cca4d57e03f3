"""
Deterministic overrides for facts the model is never trusted with.

Some rules can be answered exactly from the document itself (page count).
When a rule's ORIGINAL text matches a known pattern, the judge's verdict
for it is discarded and replaced by a locally computed one at confidence 100.

Matching is plain substring search on the lower-cased rule. Rules phrased
any other way ("must span two or more pages") fall through to the judge.

Each override is a (matcher, builder) pair in OVERRIDES; the first match
wins. Adding a new deterministic rule class means adding one entry.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from .models import RuleStatus, Verdict

logger = logging.getLogger(__name__)

MIN_PAGES_FOR_RULE = 2

MIN_PAGE_PHRASES: tuple[str, ...] = ("at least 2 page", "at least two page")


@dataclass(frozen=True)
class RuleOverride:
    """A deterministic rule class: how to recognize it and how to judge it."""

    name: str
    matches: Callable[[str], bool]
    build: Callable[[str, int], Verdict]


# ─── Minimum Page Count ─────────────────────────────────────────────


def _matches_min_pages(normalized_rule: str) -> bool:
    return any(phrase in normalized_rule for phrase in MIN_PAGE_PHRASES)


def _judge_min_pages(rule: str, page_count: int) -> Verdict:
    passed = page_count >= MIN_PAGES_FOR_RULE
    if passed:
        evidence = f"Document has {page_count} pages, which is at least {MIN_PAGES_FOR_RULE}."
        reasoning = (
            "Using the PDF metadata, the document length satisfies "
            "the minimum page requirement."
        )
    else:
        evidence = (
            f"Document has only {page_count} page(s), "
            f"which is less than {MIN_PAGES_FOR_RULE}."
        )
        reasoning = (
            "Using the PDF metadata, the document length does not satisfy "
            "the minimum page requirement."
        )
    return Verdict(
        rule=rule,
        status=RuleStatus.PASS if passed else RuleStatus.FAIL,
        evidence=evidence,
        reasoning=reasoning,
        confidence=100.0,
    )


OVERRIDES: tuple[RuleOverride, ...] = (
    RuleOverride("min_page_count", _matches_min_pages, _judge_min_pages),
)


# ─── Reconciliation ─────────────────────────────────────────────────


def find_override(
    rule: str, overrides: Sequence[RuleOverride] = OVERRIDES
) -> RuleOverride | None:
    """Return the first override whose matcher accepts ``rule``, if any."""
    normalized = rule.lower()
    for override in overrides:
        if override.matches(normalized):
            return override
    return None


def apply_overrides(
    rules: Sequence[str],
    verdicts: Sequence[Verdict],
    page_count: int,
    overrides: Sequence[RuleOverride] = OVERRIDES,
) -> list[Verdict]:
    """Replace the judge's verdict for every rule a deterministic check covers.

    ``rules`` and ``verdicts`` are parallel sequences; order is preserved.
    """
    if len(rules) != len(verdicts):
        raise ValueError(
            f"Got {len(verdicts)} verdict(s) for {len(rules)} rule(s)"
        )

    reconciled: list[Verdict] = []
    for rule, verdict in zip(rules, verdicts):
        override = find_override(rule, overrides)
        if override is None:
            reconciled.append(verdict)
            continue

        logger.info("Rule %r handled by deterministic check %s", rule, override.name)
        reconciled.append(override.build(rule, page_count))

    return reconciled
