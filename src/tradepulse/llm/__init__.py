"""Text-generation client used by the AI coach."""

from .client import AnthropicTextClient
from .errors import LLMConfigError, LLMError, LLMResponseError

__all__ = [
    "AnthropicTextClient",
    "LLMConfigError",
    "LLMError",
    "LLMResponseError",
]
