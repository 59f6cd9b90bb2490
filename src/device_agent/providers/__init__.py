"""Provider handlers: one wire format per supported LLM back end."""

from ..model_registry import ModelProvider
from .base import ProviderHandler
from .gemini_provider import GeminiProviderHandler
from .openai_provider import OpenAIProviderHandler
from .openrouter_provider import OpenRouterProviderHandler

_HANDLERS: dict[ModelProvider, ProviderHandler] = {
    ModelProvider.OPENAI: OpenAIProviderHandler(),
    ModelProvider.GEMINI: GeminiProviderHandler(),
    ModelProvider.OPENROUTER: OpenRouterProviderHandler(),
}


def get_handler(provider: ModelProvider) -> ProviderHandler:
    """Handler for a provider; handlers are stateless and shared."""
    return _HANDLERS[provider]


__all__ = [
    "ProviderHandler",
    "OpenAIProviderHandler",
    "GeminiProviderHandler",
    "OpenRouterProviderHandler",
    "get_handler",
]
