"""Pytest configuration: project root importable, in-memory PDFs, fake judge backend."""

from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Callable

import pytest

sys.path.insert(0, str(Path(__file__).parent))

from pdf_rule_checker.config import JudgeSettings  # noqa: E402
from pdf_rule_checker.judge import ModelJudge  # noqa: E402


# ─── In-memory PDF builder ──────────────────────────────────────────


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_pdf(pages: list[str]) -> bytes:
    """Build a minimal valid PDF with one Helvetica text line per page."""
    font_id = 3
    objects: dict[int, str] = {
        1: "<< /Type /Catalog /Pages 2 0 R >>",
        font_id: "<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    }
    kids = []
    next_id = 4
    for text in pages:
        page_id, content_id = next_id, next_id + 1
        next_id += 2
        stream = f"BT /F1 12 Tf 72 720 Td ({_escape(text)}) Tj ET" if text else ""
        objects[content_id] = (
            f"<< /Length {len(stream.encode('latin-1'))} >>\nstream\n{stream}\nendstream"
        )
        objects[page_id] = (
            "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 {font_id} 0 R >> >> /Contents {content_id} 0 R >>"
        )
        kids.append(f"{page_id} 0 R")
    objects[2] = f"<< /Type /Pages /Kids [{' '.join(kids)}] /Count {len(pages)} >>"

    out = b"%PDF-1.4\n"
    offsets: dict[int, int] = {}
    for obj_id in sorted(objects):
        offsets[obj_id] = len(out)
        out += f"{obj_id} 0 obj\n{objects[obj_id]}\nendobj\n".encode("latin-1")

    size = max(objects) + 1
    xref_at = len(out)
    xref = f"xref\n0 {size}\n0000000000 65535 f \n"
    for obj_id in range(1, size):
        xref += f"{offsets[obj_id]:010d} 00000 n \n"
    out += xref.encode("latin-1")
    out += f"trailer\n<< /Size {size} /Root 1 0 R >>\nstartxref\n{xref_at}\n%%EOF\n".encode("latin-1")
    return out


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    """``make_pdf(3)`` → blank-ish 3-page PDF; ``make_pdf(pages=[...])`` → given texts."""

    def _make(page_count: int = 0, pages: list[str] | None = None) -> bytes:
        if pages is None:
            pages = [f"Page {i}" for i in range(1, page_count + 1)]
        return build_pdf(pages)

    return _make


# ─── Fake judge backend ─────────────────────────────────────────────


class FakeChatClient:
    """Stands in for ``openai.OpenAI``; returns canned completion text."""

    def __init__(self, content: str | None = None, error: Exception | None = None):
        self.content = content
        self.error = error
        self.calls: list[dict[str, Any]] = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    @property
    def last_prompt(self) -> str:
        return self.calls[-1]["messages"][-1]["content"]


@pytest.fixture
def judge_settings() -> JudgeSettings:
    return JudgeSettings(api_key="test-key", model="test-model")


@pytest.fixture
def make_judge(judge_settings: JudgeSettings) -> Callable[..., ModelJudge]:
    """``make_judge(content)`` → ModelJudge backed by a FakeChatClient."""

    def _make(content: str | None = None, error: Exception | None = None) -> ModelJudge:
        return ModelJudge(judge_settings, client=FakeChatClient(content, error))

    return _make


@pytest.fixture(autouse=True)
def _no_llm_credentials(monkeypatch: pytest.MonkeyPatch):
    """Prevent real LLM API calls during tests: no key, no client."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    yield
