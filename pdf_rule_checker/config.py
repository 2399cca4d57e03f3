"""
Judge backend settings, read once from the environment at process start.

The settings object is passed explicitly into ModelJudge; nothing in the
package reads the environment after startup.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigurationError

DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"


class JudgeSettings(BaseModel):
    """Credentials and transport settings for the generative-model judge."""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(repr=False, min_length=1)
    model: str = DEFAULT_MODEL
    base_url: str | None = DEFAULT_BASE_URL
    timeout_seconds: float = Field(default=60.0, gt=0)
    max_retries: int = Field(default=2, ge=0)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> JudgeSettings:
        """Build settings from environment variables.

        ``GEMINI_API_KEY`` is required. The judge expects a bare JSON array
        back, which the Gemini endpoint returns in JSON mode; the key is
        never read from other providers' variables.

        Raises:
            ConfigurationError: no API key, or a numeric setting is malformed.
        """
        env = os.environ if environ is None else environ

        api_key = env.get("GEMINI_API_KEY")
        if not api_key:
            raise ConfigurationError(
                "No judge API key configured (set GEMINI_API_KEY)"
            )

        try:
            timeout = float(env.get("JUDGE_TIMEOUT_SECONDS", "60"))
            retries = int(env.get("JUDGE_MAX_RETRIES", "2"))
        except ValueError as e:
            raise ConfigurationError(f"Invalid judge setting: {e}") from e

        try:
            return cls(
                api_key=api_key,
                model=env.get("JUDGE_MODEL") or DEFAULT_MODEL,
                base_url=env.get("JUDGE_BASE_URL") or DEFAULT_BASE_URL,
                timeout_seconds=timeout,
                max_retries=retries,
            )
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid judge setting: {e}") from e
