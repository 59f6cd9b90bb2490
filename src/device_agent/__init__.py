"""Device agent core: provider handlers, tool catalog, conversation store, and the agent loop."""

from .conversation_store import ConversationStore
from .errors import (
    AgentError,
    ArgumentDecodeError,
    ConversationBusy,
    LoopCancelled,
    LoopLimitExceeded,
    ProviderDecodeError,
    ProviderTransportError,
    ToolExecutionError,
    UnknownTool,
)
from .loop import LoopOptions, LoopResult, LoopState, run_loop
from .model_registry import ModelDescriptor, ModelProvider, resolve
from .models import Content, Conversation, ImageUrl, Message, Text, ToolCall
from .settings import SettingsStore
from .tools import BaseTool, ToolCatalog, ToolCatalogBuilder

__all__ = [
    "run_loop",
    "LoopOptions",
    "LoopResult",
    "LoopState",
    "ConversationStore",
    "SettingsStore",
    "BaseTool",
    "ToolCatalog",
    "ToolCatalogBuilder",
    "Content",
    "Conversation",
    "ImageUrl",
    "Message",
    "Text",
    "ToolCall",
    "ModelDescriptor",
    "ModelProvider",
    "resolve",
    "AgentError",
    "UnknownTool",
    "ArgumentDecodeError",
    "ToolExecutionError",
    "ProviderTransportError",
    "ProviderDecodeError",
    "LoopLimitExceeded",
    "LoopCancelled",
    "ConversationBusy",
]
