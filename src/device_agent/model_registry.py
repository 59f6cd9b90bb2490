"""Static catalog of supported models and their providers."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ModelProvider(str, Enum):
    OPENAI = "openai"
    GEMINI = "gemini"
    OPENROUTER = "openrouter"


class ModelDescriptor(BaseModel):
    """One selectable model. ``identifier`` is the provider's wire-level name."""

    model_config = ConfigDict(frozen=True)

    display_name: str
    identifier: str
    provider: ModelProvider


AVAILABLE_MODELS: tuple[ModelDescriptor, ...] = (
    ModelDescriptor(display_name="GPT-4o", identifier="gpt-4o", provider=ModelProvider.OPENAI),
    ModelDescriptor(display_name="GPT-4o Mini", identifier="gpt-4o-mini", provider=ModelProvider.OPENAI),
    ModelDescriptor(display_name="GPT-4.1", identifier="gpt-4.1", provider=ModelProvider.OPENAI),
    ModelDescriptor(display_name="GPT-4.1 Mini", identifier="gpt-4.1-mini", provider=ModelProvider.OPENAI),
    ModelDescriptor(display_name="o3 Mini", identifier="o3-mini", provider=ModelProvider.OPENAI),
    ModelDescriptor(display_name="o4 Mini", identifier="o4-mini", provider=ModelProvider.OPENAI),
    ModelDescriptor(display_name="Gemini Flash", identifier="gemini-2.0-flash", provider=ModelProvider.GEMINI),
    ModelDescriptor(
        display_name="Gemini Flash Lite", identifier="gemini-2.0-flash-lite", provider=ModelProvider.GEMINI
    ),
    ModelDescriptor(display_name="Gemini 2.5 Flash", identifier="gemini-2.5-flash", provider=ModelProvider.GEMINI),
    ModelDescriptor(display_name="Gemini 2.5 Pro", identifier="gemini-2.5-pro", provider=ModelProvider.GEMINI),
    ModelDescriptor(
        display_name="Claude 3.5 Sonnet", identifier="anthropic/claude-3.5-sonnet", provider=ModelProvider.OPENROUTER
    ),
    ModelDescriptor(
        display_name="Claude 3.7 Sonnet", identifier="anthropic/claude-3.7-sonnet", provider=ModelProvider.OPENROUTER
    ),
    ModelDescriptor(
        display_name="Llama 3.3 70B",
        identifier="meta-llama/llama-3.3-70b-instruct",
        provider=ModelProvider.OPENROUTER,
    ),
    ModelDescriptor(
        display_name="Llama 4 Maverick", identifier="meta-llama/llama-4-maverick", provider=ModelProvider.OPENROUTER
    ),
    ModelDescriptor(
        display_name="Mistral Large", identifier="mistralai/mistral-large", provider=ModelProvider.OPENROUTER
    ),
    ModelDescriptor(display_name="DeepSeek V3", identifier="deepseek/deepseek-chat", provider=ModelProvider.OPENROUTER),
    ModelDescriptor(display_name="Qwen 2.5 72B", identifier="qwen/qwen-2.5-72b-instruct", provider=ModelProvider.OPENROUTER),
)

_BY_IDENTIFIER = {m.identifier: m for m in AVAILABLE_MODELS}


def default_model() -> ModelDescriptor:
    return AVAILABLE_MODELS[0]


def resolve(identifier: str | None) -> ModelDescriptor:
    """Exact match on identifier; unknown or empty identifiers fall back to the first model."""
    if not identifier:
        return default_model()
    return _BY_IDENTIFIER.get(identifier, default_model())


def list_providers() -> list[ModelProvider]:
    """Distinct providers in catalog order."""
    seen: list[ModelProvider] = []
    for m in AVAILABLE_MODELS:
        if m.provider not in seen:
            seen.append(m.provider)
    return seen


def list_models(provider: ModelProvider) -> list[ModelDescriptor]:
    return [m for m in AVAILABLE_MODELS if m.provider == provider]


__all__ = [
    "ModelProvider",
    "ModelDescriptor",
    "AVAILABLE_MODELS",
    "default_model",
    "resolve",
    "list_providers",
    "list_models",
]
