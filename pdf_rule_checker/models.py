"""
Pydantic models for documents, verdicts and results.

All models are frozen: once the pipeline builds a value, nothing downstream
may mutate it. Overrides produce new verdicts with ``model_copy``.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ─── Rule Status ────────────────────────────────────────────────────


class RuleStatus(str, Enum):
    """Outcome of checking one rule."""

    PASS = "pass"
    FAIL = "fail"


# ─── Document ───────────────────────────────────────────────────────


class Document(BaseModel):
    """A decoded PDF: original bytes, page count and merged page text."""

    model_config = ConfigDict(frozen=True)

    raw_bytes: bytes = Field(repr=False)
    page_count: int = Field(ge=0)
    text: str


# ─── Verdict ────────────────────────────────────────────────────────


class Verdict(BaseModel):
    """The judgment for a single rule, with its supporting evidence."""

    model_config = ConfigDict(frozen=True)

    rule: str
    status: RuleStatus
    evidence: str = ""
    reasoning: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=100.0)

    @property
    def passed(self) -> bool:
        return self.status == RuleStatus.PASS


# ─── Analysis Result ────────────────────────────────────────────────


class AnalysisResult(BaseModel):
    """The final output of the pipeline.

    Serialized with camelCase keys (``fileName``, ``totalPages``) to keep
    the wire format the UI already consumes.
    """

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    file_name: str
    total_pages: int
    results: list[Verdict] = Field(default_factory=list)

    @property
    def all_passed(self) -> bool:
        return all(v.passed for v in self.results)
