"""OpenRouter: OpenAI-compatible wire format behind a different base URL."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..model_registry import ModelProvider
from ..models import Message, OpenAITools, SerializableToolDefinitions
from ..tools import BaseTool
from .base import ProviderHandler
from .openai_provider import create_openai_tool_definitions, decode_openai_response, encode_openai_request

OPENROUTER_API_URL = "https://openrouter.ai/api/v1/chat/completions"
APP_REFERER = "https://github.com/device-agent/device-agent"
APP_TITLE = "Device Agent"


class OpenRouterProviderHandler(ProviderHandler):
    """OpenRouter models are namespaced identifiers such as ``anthropic/claude-3.5-sonnet``."""

    provider = ModelProvider.OPENROUTER

    def get_api_url(self, model_id: str, api_key: str | None) -> str:
        return OPENROUTER_API_URL

    def get_headers(self, api_key: str | None) -> dict[str, str]:
        if api_key is None:
            return {}
        return {
            "Authorization": f"Bearer {api_key}",
            "HTTP-Referer": APP_REFERER,
            "X-Title": APP_TITLE,
        }

    def create_tool_definitions(self, tools: Sequence[BaseTool]) -> OpenAITools:
        return create_openai_tool_definitions(tools)

    def encode_request(
        self,
        model_id: str,
        messages: Sequence[Message],
        tool_definitions: SerializableToolDefinitions,
        system_prompt: str | None = None,
    ) -> dict[str, Any]:
        return encode_openai_request(model_id, messages, tool_definitions, system_prompt)

    def decode_response(self, body: dict[str, Any]) -> Message:
        return decode_openai_response(body)
