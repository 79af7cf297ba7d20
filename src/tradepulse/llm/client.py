"""Anthropic Messages API client implementing ``TextGenerator``.

Synchronous on purpose: the coach makes one call per user request and
the rest of the journal is synchronous.
"""

from __future__ import annotations

import logging
import os

import httpx

from tradepulse.core.config import CoachConfig

from .errors import LLMConfigError, LLMResponseError

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicTextClient:
    """Minimal Messages API client.

    Parameters
    ----------
    config : CoachConfig
        Model, endpoint, token and timeout settings.
    http : httpx.Client | None
        Injected HTTP client (tests pass one with a mock transport).
    """

    def __init__(self, config: CoachConfig, *, http: httpx.Client | None = None) -> None:
        self._config = config
        self._http = http or httpx.Client(
            base_url=config.base_url, timeout=config.timeout_seconds
        )

    def _api_key(self) -> str:
        api_key = os.environ.get(self._config.api_key_env, "")
        if not api_key:
            raise LLMConfigError(
                f"{self._config.api_key_env} not set, cannot call the coach model"
            )
        return api_key

    def generate(self, prompt: str, system_instruction: str | None = None) -> str:
        payload: dict = {
            "model": self._config.model,
            "max_tokens": self._config.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_instruction:
            payload["system"] = system_instruction

        try:
            resp = self._http.post(
                "/v1/messages",
                headers={
                    "x-api-key": self._api_key(),
                    "anthropic-version": ANTHROPIC_VERSION,
                    "content-type": "application/json",
                },
                json=payload,
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as exc:
            raise LLMResponseError(f"Messages API call failed: {exc}") from exc
        except ValueError as exc:
            raise LLMResponseError(f"Messages API returned invalid JSON: {exc}") from exc

        if not isinstance(data, dict):
            raise LLMResponseError("Messages API response was not a JSON object")
        texts = [
            block.get("text", "")
            for block in data.get("content", [])
            if block.get("type") == "text"
        ]
        if not texts:
            raise LLMResponseError("Messages API response contained no text blocks")
        logger.debug("Coach model returned %d text block(s)", len(texts))
        return "".join(texts)

    def close(self) -> None:
        self._http.close()
