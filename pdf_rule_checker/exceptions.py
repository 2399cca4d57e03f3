"""
Custom exception hierarchy for the rule-checking pipeline.

Each exception type maps to one failure category, so the HTTP boundary
can decide what to show the caller and which status code to return.
"""

from __future__ import annotations


class RuleCheckError(Exception):
    """Base exception for all rule-checking failures."""

    def __init__(self, code: str, message: str, details: dict | None = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(RuleCheckError):
    """The request did not carry a usable set of rules."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("RULES_INVALID", message, details)


class PageCountError(RuleCheckError):
    """The document has too few or too many pages."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("PAGE_COUNT_OUT_OF_RANGE", message, details)


class ExtractionError(RuleCheckError):
    """The uploaded bytes could not be parsed as a PDF."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("EXTRACTION_FAILED", message, details)


class LLMProtocolError(RuleCheckError):
    """The judge answered, but not with the JSON shape we asked for.

    ``details["raw_response"]`` keeps the raw text for logs only.
    """

    def __init__(self, message: str, raw_response: str | None = None):
        super().__init__(
            "LLM_PROTOCOL_ERROR", message, {"raw_response": raw_response}
        )
        self.raw_response = raw_response


class JudgeBackendError(RuleCheckError):
    """The judge backend could not be reached or returned an API error."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("JUDGE_BACKEND_FAILED", message, details)


class ConfigurationError(RuleCheckError):
    """Settings are missing or malformed at startup."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("CONFIGURATION_INVALID", message, details)
