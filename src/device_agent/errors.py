"""Error taxonomy for the agent core.

Tool-level errors (``UnknownTool``, ``ArgumentDecodeError``,
``ToolExecutionError``) are recovered inside the loop and written into the
transcript. Provider and limit errors end the loop and are handed back to the
caller together with the partial conversation.
"""

from __future__ import annotations


class AgentError(Exception):
    """Base class for all agent core errors."""


class UnknownTool(AgentError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class ArgumentDecodeError(AgentError):
    """Tool arguments are not a JSON object or miss required fields."""


class ToolExecutionError(AgentError):
    """The host implementation of a tool failed; the original error is ``__cause__``."""

    def __init__(self, name: str, message: str) -> None:
        super().__init__(f"Tool {name} failed: {message}")
        self.name = name


class ProviderTransportError(AgentError):
    """Network or HTTP failure talking to an LLM provider."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProviderDecodeError(AgentError):
    """The provider answered with a body we cannot interpret."""


class LoopLimitExceeded(AgentError):
    def __init__(self, limit: int) -> None:
        super().__init__(f"Tool loop exceeded {limit} iterations")
        self.limit = limit


class LoopCancelled(AgentError):
    """The loop was stopped cooperatively before finishing."""


class ConversationBusy(AgentError):
    """Another loop is already running for this conversation."""


__all__ = [
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
