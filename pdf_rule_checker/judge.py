"""
LLM judge: asks a generative model to check rules against document text.

The model's answer is untrusted input. It must parse as JSON, be an array,
and carry one entry per submitted rule; anything else is a protocol error.
Individual fields are never trusted either: each one is coerced to a safe
default instead of failing the request.

Design:
  - JSON mode enforced via the OpenAI-compatible chat completions API
    (Gemini by default, see config.py)
  - Timeout and bounded retry with backoff come from the openai client
  - No retry on protocol errors: a model that answered badly once is not
    asked again
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Sequence
from typing import Any

import openai
from openai import OpenAI

from .config import JudgeSettings
from .exceptions import JudgeBackendError, LLMProtocolError
from .models import RuleStatus, Verdict
from .prompt import build_prompt

logger = logging.getLogger(__name__)


class ModelJudge:
    """Evaluates rules against document text with a generative model.

    Usage:
        judge = ModelJudge(JudgeSettings.from_env())
        verdicts = judge.judge(text, ["Document should mention a deadline."])
    """

    def __init__(self, settings: JudgeSettings, client: Any | None = None):
        self.settings = settings
        self.client = client or OpenAI(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            max_retries=settings.max_retries,
        )
        logger.info("Initialized judge with model %s", settings.model)

    def judge(self, text: str, rules: Sequence[str]) -> list[Verdict]:
        """Judge every rule against ``text``; one verdict per rule, same order.

        Raises:
            LLMProtocolError: the response is not a JSON array of len(rules).
            JudgeBackendError: the backend could not be reached or refused.
        """
        prompt = build_prompt(text, rules)
        raw = self._complete(prompt)
        verdicts = parse_verdicts(raw)

        if len(verdicts) != len(rules):
            logger.error(
                "Judge returned %d verdict(s) for %d rule(s): %s",
                len(verdicts), len(rules), raw,
            )
            raise LLMProtocolError(
                f"LLM returned {len(verdicts)} results for {len(rules)} rules",
                raw_response=raw,
            )

        # Verdicts are labelled with the submitted rule, never the model's echo
        return [v.model_copy(update={"rule": rule}) for rule, v in zip(rules, verdicts)]

    def _complete(self, prompt: str) -> str:
        logger.info("Sending %d-character prompt to %s", len(prompt), self.settings.model)
        try:
            response = self.client.chat.completions.create(
                model=self.settings.model,
                messages=[{"role": "user", "content": prompt}],
                response_format={"type": "json_object"},
            )
        except openai.APIError as e:
            logger.error("Judge backend call failed: %s", e)
            raise JudgeBackendError(
                "Judge backend request failed", details={"reason": str(e)}
            ) from e

        content = response.choices[0].message.content if response.choices else None
        if content is None:
            logger.error("Judge returned empty content")
            raise LLMProtocolError("LLM returned an empty response")
        return content


# ─── Response Validation ─────────────────────────────────────────────


def parse_verdicts(raw: str) -> list[Verdict]:
    """Parse the judge's raw text into normalized verdicts.

    Raises:
        LLMProtocolError: ``raw`` is not JSON, or the JSON is not an array.
    """
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        logger.error("Failed to parse judge JSON: %s", raw)
        raise LLMProtocolError("LLM returned invalid JSON", raw_response=raw) from e

    if not isinstance(parsed, list):
        logger.error("Judge result is not an array: %s", raw)
        raise LLMProtocolError("LLM result is not an array", raw_response=raw)

    return [normalize_verdict(item) for item in parsed]


def normalize_verdict(item: object) -> Verdict:
    """Coerce one untrusted response item into a Verdict. Never raises."""
    data = item if isinstance(item, dict) else {}
    return Verdict(
        rule=_safe_str(data.get("rule")),
        status=RuleStatus.PASS if data.get("status") == "pass" else RuleStatus.FAIL,
        evidence=_safe_str(data.get("evidence")),
        reasoning=_safe_str(data.get("reasoning")),
        confidence=_safe_confidence(data.get("confidence")),
    )


# ─── Safe Type Converters ────────────────────────────────────────────


def _safe_str(value: object) -> str:
    """Empty/falsy values become "", anything else its string form."""
    if not value:
        return ""
    return value if isinstance(value, str) else str(value)


def _safe_confidence(value: object) -> float:
    """Finite numbers are clamped to [0, 100]; everything else is 0."""
    # bool is an int subclass, but true/false is not a score
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    try:
        number = float(value)
    except OverflowError:
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return min(max(number, 0.0), 100.0)
