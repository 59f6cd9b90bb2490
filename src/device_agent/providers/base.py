"""Provider handler interface for the agent loop."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from ..errors import ProviderDecodeError
from ..model_registry import ModelProvider
from ..models import CONTENT_ADAPTER, Content, Message, SerializableToolDefinitions
from ..tools import BaseTool


class ProviderHandler(ABC):
    """
    Translates between the generic message/tool model and one provider's wire format.

    Handlers are pure: they never perform I/O. The agent loop only depends on this
    interface; transport is done by ``HttpTransport``.
    """

    provider: ModelProvider

    @abstractmethod
    def get_api_url(self, model_id: str, api_key: str | None) -> str:
        ...

    @abstractmethod
    def get_headers(self, api_key: str | None) -> dict[str, str]:
        """Provider auth headers. Content-Type is left to the transport."""
        ...

    @abstractmethod
    def create_tool_definitions(self, tools: Sequence[BaseTool]) -> SerializableToolDefinitions:
        ...

    @abstractmethod
    def encode_request(
        self,
        model_id: str,
        messages: Sequence[Message],
        tool_definitions: SerializableToolDefinitions,
        system_prompt: str | None = None,
    ) -> dict[str, Any]:
        """Build the JSON request body from the full history."""
        ...

    @abstractmethod
    def decode_response(self, body: dict[str, Any]) -> Message:
        """Parse a response body into one assistant message. Raises ProviderDecodeError."""
        ...


def decode_content(item: Any) -> Content:
    """Decode one typed content item; unknown ``type`` values are errors, not skipped."""
    try:
        return CONTENT_ADAPTER.validate_python(item)
    except ValidationError as e:
        raise ProviderDecodeError(f"Unsupported content item: {item!r}") from e


def require(mapping: Any, key: str, kind: type | tuple[type, ...], where: str) -> Any:
    """Fetch ``mapping[key]`` and check its JSON type."""
    if not isinstance(mapping, dict) or key not in mapping:
        raise ProviderDecodeError(f"Missing '{key}' in {where}")
    value = mapping[key]
    if not isinstance(value, kind):
        raise ProviderDecodeError(f"Unexpected type for '{key}' in {where}: {type(value).__name__}")
    return value


def optional(mapping: dict[str, Any], key: str, kind: type | tuple[type, ...], where: str) -> Any:
    """Like ``require`` but an absent or null value yields None."""
    value = mapping.get(key)
    if value is not None and not isinstance(value, kind):
        raise ProviderDecodeError(f"Unexpected type for '{key}' in {where}: {type(value).__name__}")
    return value
