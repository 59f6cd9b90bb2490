"""OpenAI Chat Completions wire format.

The encode/decode functions are module level because OpenRouter speaks the same
protocol; only the URL and headers differ.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from ..errors import ProviderDecodeError
from ..model_registry import ModelProvider
from ..models import (
    Content,
    ImageUrl,
    Message,
    OpenAITools,
    SerializableToolDefinitions,
    Text,
    ToolCall,
    ToolDefinition,
    ToolFunction,
    ToolFunctionDefinition,
    ToolParameter,
    ToolParametersObject,
)
from ..tools import BaseTool
from .base import ProviderHandler, decode_content, optional, require

OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"

_USAGE_KEYS = ("prompt_tokens", "completion_tokens", "total_tokens")


def create_openai_tool_definitions(tools: Sequence[BaseTool]) -> OpenAITools:
    definitions = []
    for tool in tools:
        params = tool.parameters
        definitions.append(
            ToolDefinition(
                function=ToolFunctionDefinition(
                    name=tool.name,
                    description=tool.description,
                    parameters=ToolParametersObject(
                        properties={p.name: ToolParameter(type=p.type, description=p.description) for p in params},
                        required=[p.name for p in params if p.required],
                    ),
                )
            )
        )
    return OpenAITools(definitions=definitions)


def _content_part(item: Content) -> dict[str, Any]:
    if isinstance(item, ImageUrl):
        return {"type": "image_url", "image_url": {"url": item.url}}
    return {"type": "text", "text": item.text}


def _joined_text(content: list[Content] | None) -> str | None:
    if content is None:
        return None
    return "".join(item.text for item in content if isinstance(item, Text))


def _to_openai_message(m: Message) -> dict[str, Any]:
    """Convert one internal Message into an OpenAI chat message dict."""
    out: dict[str, Any] = {"role": m.role}
    if m.role == "user":
        out["content"] = [_content_part(c) for c in m.content or []]
    elif m.role == "tool":
        out["content"] = _joined_text(m.content) or ""
        out["tool_call_id"] = m.tool_call_id or ""
    else:
        out["content"] = _joined_text(m.content)
    if m.role == "assistant" and m.tool_calls:
        out["tool_calls"] = [tc.model_dump() for tc in m.tool_calls]
    return out


def encode_openai_request(
    model_id: str,
    messages: Sequence[Message],
    tool_definitions: SerializableToolDefinitions,
    system_prompt: str | None = None,
) -> dict[str, Any]:
    chat_messages: list[dict[str, Any]] = []
    if system_prompt:
        chat_messages.append({"role": "system", "content": system_prompt})
    chat_messages.extend(_to_openai_message(m) for m in messages)
    body: dict[str, Any] = {"model": model_id, "messages": chat_messages}
    tools = tool_definitions.to_wire()
    # The API rejects an empty tools array.
    if tools:
        body["tools"] = tools
    return body


def _parse_tool_calls(raw: Any) -> list[ToolCall] | None:
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise ProviderDecodeError("tool_calls must be a list")
    calls: list[ToolCall] = []
    for i, tc in enumerate(raw):
        fn = require(tc, "function", dict, "tool call")
        name = require(fn, "name", str, "tool call function")
        arguments = fn.get("arguments") or "{}"
        if not isinstance(arguments, str):
            arguments = json.dumps(arguments)
        try:
            call = ToolCall(
                id=optional(tc, "id", str, "tool call") or f"call_{i}",
                type=optional(tc, "type", str, "tool call") or "function",
                function=ToolFunction(name=name, arguments=arguments),
            )
        except ValidationError as e:
            raise ProviderDecodeError(f"Invalid tool call: {e}") from e
        calls.append(call)
    return calls or None


def _parse_content(raw: Any) -> list[Content] | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        return [Text(text=raw)]
    if isinstance(raw, list):
        return [decode_content(item) for item in raw]
    raise ProviderDecodeError(f"Unexpected message content: {type(raw).__name__}")


def decode_openai_response(body: dict[str, Any]) -> Message:
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        raise ProviderDecodeError(f"Provider error: {body['error'].get('message', body['error'])}")
    choices = require(body, "choices", list, "response")
    if not choices:
        raise ProviderDecodeError("Response has no choices")
    choice_message = require(choices[0], "message", dict, "choice")

    content = _parse_content(choice_message.get("content"))
    tool_calls = _parse_tool_calls(choice_message.get("tool_calls"))
    if content is None and tool_calls is None:
        raise ProviderDecodeError("Response message has neither content nor tool calls")

    stats: dict[str, float] | None = None
    usage = body.get("usage")
    if isinstance(usage, dict):
        stats = {k: float(usage[k]) for k in _USAGE_KEYS if isinstance(usage.get(k), (int, float))} or None

    try:
        return Message(role="assistant", content=content, tool_calls=tool_calls, stats=stats)
    except ValidationError as e:
        raise ProviderDecodeError(f"Invalid assistant message: {e}") from e


class OpenAIProviderHandler(ProviderHandler):
    """OpenAI: fixed endpoint, bearer token auth."""

    provider = ModelProvider.OPENAI

    def get_api_url(self, model_id: str, api_key: str | None) -> str:
        return OPENAI_API_URL

    def get_headers(self, api_key: str | None) -> dict[str, str]:
        if api_key is None:
            return {}
        return {"Authorization": f"Bearer {api_key}"}

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
