"""LLM-specific error types.

All inherit from :class:`TradePulseError` via :class:`LLMError`.
"""

from __future__ import annotations

from tradepulse.core.errors import TradePulseError


class LLMError(TradePulseError):
    """Base for all text-generation errors."""


class LLMConfigError(LLMError):
    """Client cannot be used as configured (e.g. API key env var unset)."""


class LLMResponseError(LLMError):
    """The API call failed or returned a body without text content."""
