"""Google Gemini generateContent wire format."""

from __future__ import annotations

import json
import logging
import mimetypes
import uuid
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from ..errors import ProviderDecodeError
from ..model_registry import ModelProvider
from ..models import (
    Content,
    GeminiFunctionDeclaration,
    GeminiTool,
    GeminiTools,
    ImageUrl,
    Message,
    SerializableToolDefinitions,
    Text,
    ToolCall,
    ToolFunction,
    ToolParameter,
    ToolParametersObject,
)
from ..tools import BaseTool
from .base import ProviderHandler, optional, require

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"

_USAGE_KEYS = {
    "promptTokenCount": "prompt_tokens",
    "candidatesTokenCount": "completion_tokens",
    "totalTokenCount": "total_tokens",
}


def _image_part(image: ImageUrl) -> dict[str, Any]:
    url = image.url
    if url.startswith("data:") and "," in url:
        header, data = url[5:].split(",", 1)
        mime_type = header.split(";", 1)[0] or "image/png"
        return {"inlineData": {"mimeType": mime_type, "data": data}}
    mime_type = mimetypes.guess_type(url)[0] or "image/jpeg"
    return {"fileData": {"mimeType": mime_type, "fileUri": url}}


def _content_parts(content: list[Content] | None) -> list[dict[str, Any]]:
    parts: list[dict[str, Any]] = []
    for item in content or []:
        if isinstance(item, Text):
            if item.text:
                parts.append({"text": item.text})
        else:
            parts.append(_image_part(item))
    return parts


def _call_args(tool_call: ToolCall) -> dict[str, Any]:
    try:
        args = json.loads(tool_call.function.arguments or "{}")
    except json.JSONDecodeError:
        return {}
    return args if isinstance(args, dict) else {}


def _tool_result_text(m: Message) -> str:
    return "".join(item.text for item in m.content or [] if isinstance(item, Text))


class GeminiProviderHandler(ProviderHandler):
    """Gemini: model and key travel in the URL, so no headers are sent."""

    provider = ModelProvider.GEMINI

    def get_api_url(self, model_id: str, api_key: str | None) -> str:
        url = f"{GEMINI_API_BASE}/{quote(model_id, safe='.-_')}:generateContent"
        if api_key is not None:
            url += f"?key={quote(api_key, safe='')}"
        return url

    def get_headers(self, api_key: str | None) -> dict[str, str]:
        return {}

    def create_tool_definitions(self, tools: Sequence[BaseTool]) -> GeminiTools:
        """Function declarations, always wrapped in one tool container (even when empty)."""
        declarations: list[GeminiFunctionDeclaration] = []
        for tool in tools:
            params = tool.parameters
            schema = None
            if params:
                schema = ToolParametersObject(
                    type="OBJECT",
                    properties={
                        p.name: ToolParameter(type=p.type.upper(), description=p.description) for p in params
                    },
                    required=[p.name for p in params if p.required],
                )
            declarations.append(
                GeminiFunctionDeclaration(name=tool.name, description=tool.description, parameters=schema)
            )
        return GeminiTools(tools=[GeminiTool(function_declarations=declarations)])

    @staticmethod
    def _to_gemini_contents(messages: Sequence[Message]) -> tuple[list[dict[str, Any]], list[str]]:
        """Convert internal messages into Gemini contents plus system instruction texts."""
        contents: list[dict[str, Any]] = []
        system_texts: list[str] = []
        # Responses to one model turn go back together in a single content.
        tool_parts: list[dict[str, Any]] | None = None
        for m in messages:
            if m.role == "system":
                text = _tool_result_text(m).strip()
                if text:
                    system_texts.append(text)
                continue
            if m.role == "tool":
                part = {
                    "functionResponse": {
                        "name": m.name or "",
                        "response": {"result": _tool_result_text(m)},
                    }
                }
                if tool_parts is None:
                    tool_parts = []
                    contents.append({"role": "user", "parts": tool_parts})
                tool_parts.append(part)
                continue
            tool_parts = None
            role = "model" if m.role == "assistant" else "user"
            parts = _content_parts(m.content)
            for tc in m.tool_calls or []:
                parts.append({"functionCall": {"name": tc.function.name, "args": _call_args(tc)}})
            if parts:
                contents.append({"role": role, "parts": parts})
        return contents, system_texts

    def encode_request(
        self,
        model_id: str,
        messages: Sequence[Message],
        tool_definitions: SerializableToolDefinitions,
        system_prompt: str | None = None,
    ) -> dict[str, Any]:
        contents, system_texts = self._to_gemini_contents(messages)
        if system_prompt:
            system_texts.insert(0, system_prompt)
        body: dict[str, Any] = {"contents": contents, "tools": tool_definitions.to_wire()}
        if system_texts:
            body["systemInstruction"] = {"parts": [{"text": t} for t in system_texts]}
        return body

    def decode_response(self, body: dict[str, Any]) -> Message:
        if not isinstance(body, dict):
            raise ProviderDecodeError(f"Response is not a JSON object: {type(body).__name__}")
        if isinstance(body.get("error"), dict):
            raise ProviderDecodeError(f"Provider error: {body['error'].get('message', body['error'])}")
        candidates = optional(body, "candidates", list, "response")
        if not candidates:
            feedback = optional(body, "promptFeedback", dict, "response") or {}
            raise ProviderDecodeError(f"Response has no candidates (blockReason={feedback.get('blockReason')})")
        candidate = candidates[0]
        content = require(candidate, "content", dict, "candidate")
        parts = optional(content, "parts", list, "candidate content") or []

        texts: list[str] = []
        tool_calls: list[ToolCall] = []
        ignored: list[str] = []
        for part in parts:
            if not isinstance(part, dict):
                raise ProviderDecodeError(f"Unexpected part: {part!r}")
            if "text" in part:
                texts.append(str(part["text"]))
            elif "functionCall" in part:
                fc = require(part, "functionCall", dict, "part")
                name = require(fc, "name", str, "functionCall")
                args = optional(fc, "args", dict, "functionCall") or {}
                try:
                    call = ToolCall(
                        id=optional(fc, "id", str, "functionCall") or f"call_{uuid.uuid4().hex[:12]}",
                        function=ToolFunction(name=name, arguments=json.dumps(args)),
                    )
                except ValidationError as e:
                    raise ProviderDecodeError(f"Invalid functionCall: {e}") from e
                tool_calls.append(call)
            else:
                ignored.extend(part)
        if ignored:
            logger.debug("Ignoring unsupported Gemini part kinds: %s", ", ".join(ignored))
        if not texts and not tool_calls:
            reason = candidate.get("finishReason")
            raise ProviderDecodeError(
                f"Candidate has neither text nor function calls (finishReason={reason}, parts={ignored})"
            )

        stats: dict[str, float] | None = None
        usage = body.get("usageMetadata")
        if isinstance(usage, dict):
            stats = {
                ours: float(usage[theirs]) for theirs, ours in _USAGE_KEYS.items() if isinstance(usage.get(theirs), (int, float))
            } or None

        try:
            return Message(
                role="assistant",
                content=[Text(text="".join(texts))] if texts else None,
                tool_calls=tool_calls or None,
                stats=stats,
            )
        except ValidationError as e:
            raise ProviderDecodeError(f"Invalid assistant message: {e}") from e
