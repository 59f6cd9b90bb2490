"""Data models for messages, conversations, and tools."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


def now_millis() -> int:
    """Current wall-clock time as epoch milliseconds."""
    return int(time.time() * 1000)


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------


class Image(BaseModel):
    url: str


class Text(BaseModel):
    """Plain text content item."""

    type: Literal["text"] = "text"
    text: str


class ImageUrl(BaseModel):
    """Image content item; the url may be a data: URL."""

    type: Literal["image_url"] = "image_url"
    image_url: Image

    @classmethod
    def of(cls, url: str) -> ImageUrl:
        return cls(image_url=Image(url=url))

    @property
    def url(self) -> str:
        return self.image_url.url


Content = Annotated[Union[Text, ImageUrl], Field(discriminator="type")]

CONTENT_ADAPTER: TypeAdapter[Any] = TypeAdapter(Content)


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class ToolFunction(BaseModel):
    name: str
    arguments: str = "{}"  # JSON object, encoded


class ToolCall(BaseModel):
    """A model-issued request to run one tool."""

    id: str
    type: str = "function"
    function: ToolFunction


class Message(BaseModel):
    """A single message in a conversation."""

    role: str  # "system" | "user" | "assistant" | "tool"
    content: list[Content] | None = None
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None
    name: str | None = None
    time: int = Field(default_factory=now_millis)
    stats: dict[str, float] | None = None

    def to_json_dict(self) -> dict[str, Any]:
        """Persisted form; absent optionals are omitted."""
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# Conversation
# ---------------------------------------------------------------------------


class Conversation(BaseModel):
    """Conversation payload stored as <conversations dir>/<fileName>."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    file_name: str = Field(alias="fileName")
    start_time: int = Field(default_factory=now_millis, alias="startTime")
    end_time: int | None = Field(default=None, alias="endTime")
    messages: list[Message] = Field(default_factory=list)
    is_complete: bool = Field(default=False, alias="isComplete")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)

    @classmethod
    def from_json(cls, raw: str | bytes) -> Conversation:
        return cls.model_validate_json(raw)

    def with_message(self, message: Message) -> Conversation:
        """Copy of this conversation with ``message`` appended."""
        return self.model_copy(update={"messages": [*self.messages, message]})


# ---------------------------------------------------------------------------
# Tool definitions (provider-shaped)
# ---------------------------------------------------------------------------


class ToolParameter(BaseModel):
    type: str
    description: str = ""


class ToolParametersObject(BaseModel):
    type: str = "object"
    properties: dict[str, ToolParameter] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)


class ToolFunctionDefinition(BaseModel):
    name: str
    description: str
    parameters: ToolParametersObject


class ToolDefinition(BaseModel):
    """OpenAI-style function tool."""

    type: str = "function"
    function: ToolFunctionDefinition


class GeminiFunctionDeclaration(BaseModel):
    name: str
    description: str
    parameters: ToolParametersObject | None = None


class GeminiTool(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    function_declarations: list[GeminiFunctionDeclaration] = Field(
        default_factory=list, alias="functionDeclarations"
    )


class OpenAITools(BaseModel):
    """Flat list of function tools."""

    definitions: list[ToolDefinition] = Field(default_factory=list)

    def to_wire(self) -> list[dict[str, Any]]:
        return [d.model_dump() for d in self.definitions]


class GeminiTools(BaseModel):
    """Function declarations, always inside one container."""

    tools: list[GeminiTool] = Field(default_factory=lambda: [GeminiTool()])

    def to_wire(self) -> list[dict[str, Any]]:
        return [t.model_dump(by_alias=True, exclude_none=True) for t in self.tools]


SerializableToolDefinitions = Union[OpenAITools, GeminiTools]


# ---------------------------------------------------------------------------
# Tool results
# ---------------------------------------------------------------------------


@dataclass
class ToolResult:
    """Result of a single tool execution."""

    success: bool
    content: str | None = None
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def as_text(self) -> str:
        if self.success:
            return self.content or ""
        return f"Error: {self.error}"
