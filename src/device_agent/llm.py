"""LLM facade: one provider round-trip for the agent loop."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .model_registry import ModelDescriptor
from .models import Message
from .providers import ProviderHandler, get_handler
from .tools import ToolCatalog
from .transport import HttpTransport, redact_url

logger = logging.getLogger(__name__)

_default_transport: HttpTransport | None = None


def get_default_transport() -> HttpTransport:
    """Return the shared HTTP transport, created on first use."""
    global _default_transport
    if _default_transport is None:
        _default_transport = HttpTransport()
    return _default_transport


def set_default_transport(transport: HttpTransport) -> None:
    global _default_transport
    _default_transport = transport


def build_request(
    handler: ProviderHandler,
    model: ModelDescriptor,
    messages: Sequence[Message],
    tools: ToolCatalog,
    api_key: str | None,
    system_prompt: str | None = None,
) -> tuple[str, dict[str, str], dict]:
    """(url, headers, body) for one dispatch of the full history."""
    tool_definitions = handler.create_tool_definitions(list(tools))
    url = handler.get_api_url(model.identifier, api_key)
    headers = handler.get_headers(api_key)
    body = handler.encode_request(model.identifier, messages, tool_definitions, system_prompt)
    return url, headers, body


async def chat(
    messages: Sequence[Message],
    model: ModelDescriptor,
    tools: ToolCatalog,
    *,
    api_key: str | None,
    system_prompt: str | None = None,
    transport: HttpTransport | None = None,
) -> Message:
    """Send the conversation and return the decoded assistant message.

    Raises ProviderTransportError or ProviderDecodeError.
    """
    handler = get_handler(model.provider)
    url, headers, body = build_request(handler, model, messages, tools, api_key, system_prompt)
    logger.debug("POST %s (%d messages, %d tools)", redact_url(url), len(messages), len(tools))
    data = await (transport or get_default_transport()).post_json(url, headers, body)
    return handler.decode_response(data)
