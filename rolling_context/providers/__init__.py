from ..types import LLMProviderError
from .openai_compatible import OpenAICompatibleProvider

__all__ = ["LLMProviderError", "OpenAICompatibleProvider"]
