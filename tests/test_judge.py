"""
ModelJudge tests. The judge backend is a FakeChatClient, never the network.

The model's answer is treated as hostile input: every malformed shape must
either raise LLMProtocolError or be coerced to a safe default.
"""

from __future__ import annotations

import json

import httpx
import openai
import pytest

from pdf_rule_checker.exceptions import JudgeBackendError, LLMProtocolError
from pdf_rule_checker.judge import normalize_verdict, parse_verdicts
from pdf_rule_checker.models import RuleStatus
from pdf_rule_checker.prompt import MAX_TEXT_CHARS

RULES = ["Document should mention supervisor name.", "Document should have a title."]


def _item(**overrides):
    item = {
        "rule": "Document should mention supervisor name.",
        "status": "pass",
        "evidence": "Found on page 1: 'The supervisor is Dr. Smith.'",
        "reasoning": "The supervisor is named explicitly.",
        "confidence": 92,
    }
    item.update(overrides)
    return item


# ═══════════════════════════════════════════════════════════════════════
# FIELD NORMALIZATION
# ═══════════════════════════════════════════════════════════════════════


class TestNormalizeVerdict:
    def test_well_formed_item(self):
        v = normalize_verdict(_item())
        assert v.status == RuleStatus.PASS
        assert v.confidence == 92
        assert v.evidence.startswith("Found on page 1")

    def test_non_numeric_confidence_and_unknown_status(self):
        v = normalize_verdict(_item(confidence="high", status="maybe"))
        assert v.confidence == 0
        assert v.status == RuleStatus.FAIL

    @pytest.mark.parametrize("status", ["PASS", "Pass", " pass", "passed", True, None])
    def test_only_exact_pass_literal_passes(self, status):
        assert normalize_verdict(_item(status=status)).status == RuleStatus.FAIL

    @pytest.mark.parametrize("confidence", ["85", None, True, [], float("nan"), float("inf")])
    def test_non_finite_or_non_number_confidence_is_zero(self, confidence):
        assert normalize_verdict(_item(confidence=confidence)).confidence == 0

    def test_float_confidence_kept(self):
        assert normalize_verdict(_item(confidence=72.5)).confidence == 72.5

    def test_confidence_clamped_to_range(self):
        assert normalize_verdict(_item(confidence=250)).confidence == 100
        assert normalize_verdict(_item(confidence=-3)).confidence == 0

    def test_missing_fields_default_to_empty(self):
        v = normalize_verdict({})
        assert v.rule == ""
        assert v.evidence == ""
        assert v.reasoning == ""
        assert v.status == RuleStatus.FAIL
        assert v.confidence == 0

    def test_non_object_item_is_empty_verdict(self):
        v = normalize_verdict("pass")
        assert v.status == RuleStatus.FAIL
        assert v.rule == ""

    def test_non_string_evidence_is_stringified(self):
        assert normalize_verdict(_item(evidence=42)).evidence == "42"


# ═══════════════════════════════════════════════════════════════════════
# RESPONSE SHAPE
# ═══════════════════════════════════════════════════════════════════════


class TestParseVerdicts:
    def test_invalid_json_raises_with_raw_text(self):
        with pytest.raises(LLMProtocolError) as exc:
            parse_verdicts("Sure! Here are the results: [")
        assert exc.value.code == "LLM_PROTOCOL_ERROR"
        assert exc.value.raw_response == "Sure! Here are the results: ["
        assert str(exc.value) == "LLM returned invalid JSON"

    def test_object_instead_of_array_raises(self):
        with pytest.raises(LLMProtocolError, match="not an array"):
            parse_verdicts(json.dumps({"results": [_item()]}))

    def test_preserves_order(self):
        raw = json.dumps([_item(rule="first"), _item(rule="second")])
        assert [v.rule for v in parse_verdicts(raw)] == ["first", "second"]


# ═══════════════════════════════════════════════════════════════════════
# BACKEND CALL
# ═══════════════════════════════════════════════════════════════════════


class TestModelJudge:
    def test_returns_one_verdict_per_rule(self, make_judge):
        judge = make_judge(json.dumps([_item(), _item(rule=RULES[1], status="fail")]))
        verdicts = judge.judge("The supervisor is Dr. Smith.", RULES)
        assert [v.status for v in verdicts] == [RuleStatus.PASS, RuleStatus.FAIL]

    def test_sends_json_mode_request(self, make_judge):
        judge = make_judge(json.dumps([_item(), _item()]))
        judge.judge("text", RULES)
        call = judge.client.calls[0]
        assert call["model"] == "test-model"
        assert call["response_format"] == {"type": "json_object"}
        assert "1. Document should mention supervisor name." in judge.client.last_prompt

    def test_prompt_text_is_truncated(self, make_judge):
        judge = make_judge(json.dumps([_item(), _item()]))
        judge.judge("c" * MAX_TEXT_CHARS + "SECRET_TAIL", RULES)
        assert "SECRET_TAIL" not in judge.client.last_prompt

    def test_rule_text_comes_from_submission(self, make_judge):
        judge = make_judge(json.dumps([_item(rule=""), _item(rule="Paraphrased by the model")]))
        verdicts = judge.judge("text", RULES)
        assert [v.rule for v in verdicts] == RULES

    def test_wrong_length_raises(self, make_judge):
        judge = make_judge(json.dumps([_item()] * 3))
        with pytest.raises(LLMProtocolError, match="3 results for 2 rules"):
            judge.judge("text", RULES)

    def test_malformed_json_raises(self, make_judge):
        with pytest.raises(LLMProtocolError):
            make_judge("not json").judge("text", RULES)

    def test_empty_content_raises(self, make_judge):
        with pytest.raises(LLMProtocolError, match="empty"):
            make_judge(None).judge("text", RULES)

    def test_backend_failure_wrapped(self, make_judge):
        request = httpx.Request("POST", "https://example.invalid/v1/chat/completions")
        error = openai.APIConnectionError(request=request)
        with pytest.raises(JudgeBackendError) as exc:
            make_judge(error=error).judge("text", RULES)
        assert exc.value.code == "JUDGE_BACKEND_FAILED"
        assert isinstance(exc.value.__cause__, openai.APIConnectionError)
