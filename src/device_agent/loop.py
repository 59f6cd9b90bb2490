"""Agent–tool loop for device assistant conversations."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from .config import DEFAULT_MAX_TOOL_ITERATIONS
from .conversation_store import ConversationStore
from .conversation_utils import content_with_text, current_assistant_message, message_text
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
from .llm import chat
from .model_registry import resolve
from .models import Content, Conversation, ImageUrl, Message, ToolCall, now_millis
from .settings import SettingsStore
from .system_prompt_loader import get_default_system_prompt
from .tools import ToolCatalog
from .transport import HttpTransport

logger = logging.getLogger(__name__)

# Conversation ids with a loop in progress; one writer per conversation.
_active_conversations: set[str] = set()


class LoopState(str, Enum):
    AWAITING_USER_INPUT = "awaiting_user_input"
    DISPATCHING = "dispatching"
    AWAITING_PROVIDER_RESPONSE = "awaiting_provider_response"
    EXECUTING_TOOLS = "executing_tools"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (LoopState.SUCCEEDED, LoopState.FAILED, LoopState.CANCELLED)


@dataclass
class LoopOptions:
    """Options for the agent loop."""

    model: str | None = None  # identifier; None uses the selected model from settings
    max_tool_iterations: int = DEFAULT_MAX_TOOL_ITERATIONS
    system_prompt: str | None = None  # None loads the default prompt file
    transport: HttpTransport | None = None


@dataclass
class LoopResult:
    """Terminal outcome of one turn. The conversation holds every message appended so far."""

    state: LoopState
    conversation: Conversation
    error: AgentError | None = None
    iterations: int = 0

    @property
    def succeeded(self) -> bool:
        return self.state is LoopState.SUCCEEDED

    @property
    def reply(self) -> str:
        """Text of the final assistant answer, or "" when the turn did not succeed."""
        if not self.succeeded:
            return ""
        message = current_assistant_message(self.conversation)
        return message_text(message) if message is not None else ""

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


StateListener = Callable[[LoopState], None]


def _user_content(text: str, image_url: str | None) -> list[Content]:
    content = content_with_text(text)
    if image_url:
        content.append(ImageUrl.of(image_url))
    return content


async def _run_tool(tools: ToolCatalog, tool_call: ToolCall) -> Message:
    """Execute one tool call; tool-level failures become the result text."""
    name = tool_call.function.name
    try:
        result = await tools.execute(name, tool_call.function.arguments)
        text = result.as_text()
        logger.info("Tool %s executed (success=%s)", name, result.success)
    except (UnknownTool, ArgumentDecodeError, ToolExecutionError) as e:
        logger.info("Tool %s failed: %s", name, e)
        text = f"Error: {e}"
    return Message(role="tool", content=content_with_text(text), tool_call_id=tool_call.id, name=name)


async def run_loop(
    user_message: str,
    *,
    store: ConversationStore,
    tools: ToolCatalog,
    settings: SettingsStore,
    conversation_id: str | None = None,
    image_url: str | None = None,
    options: LoopOptions | None = None,
    cancel_event: asyncio.Event | None = None,
    on_state: StateListener | None = None,
) -> LoopResult:
    """
    Run one agent–tool turn: append the user message, then
    LLM → execute tools → repeat until a plain answer, a failure, or the iteration limit.

    Every appended message is published through ``store.update`` immediately.
    Provider and limit failures are returned on the result, not raised. Task
    cancellation propagates after leaving the conversation in its last appended
    state; setting ``cancel_event`` stops the loop before the next dispatch.
    """
    opts = options or LoopOptions()
    model = resolve(opts.model) if opts.model else settings.selected_model
    api_key = settings.get_api_key(model.provider)
    system_prompt = opts.system_prompt if opts.system_prompt is not None else get_default_system_prompt()

    conversation_id = conversation_id or str(uuid.uuid4())
    if conversation_id in _active_conversations:
        raise ConversationBusy(f"A loop is already running for conversation {conversation_id}")

    existing = store.get(conversation_id)
    if existing is None:
        conversation = Conversation(
            id=conversation_id,
            file_name=store.file_name_for(user_message or "conversation"),
        )
    else:
        conversation = existing.model_copy(update={"is_complete": False, "end_time": None})
    _active_conversations.add(conversation.id)

    def set_state(state: LoopState) -> None:
        if on_state is not None:
            on_state(state)

    def finish(state: LoopState, error: AgentError | None, iterations: int) -> LoopResult:
        nonlocal conversation
        if state is not LoopState.CANCELLED:
            conversation = conversation.model_copy(
                update={"is_complete": state is LoopState.SUCCEEDED, "end_time": now_millis()}
            )
            store.update(conversation)
        set_state(state)
        if error is not None:
            logger.warning("Conversation %s ended %s: %s", conversation.id, state.value, error)
        else:
            logger.info("Conversation %s ended %s after %d iterations", conversation.id, state.value, iterations)
        return LoopResult(state=state, conversation=conversation, error=error, iterations=iterations)

    try:
        set_state(LoopState.AWAITING_USER_INPUT)
        conversation = conversation.with_message(
            Message(role="user", content=_user_content(user_message, image_url))
        )
        store.update(conversation)

        iteration = 0
        while True:
            if cancel_event is not None and cancel_event.is_set():
                return finish(LoopState.CANCELLED, LoopCancelled("Cancelled before dispatch"), iteration)
            if iteration >= opts.max_tool_iterations:
                return finish(LoopState.FAILED, LoopLimitExceeded(opts.max_tool_iterations), iteration)
            iteration += 1

            set_state(LoopState.DISPATCHING)
            logger.info(
                "Dispatching conversation %s (iteration %d, model %s)", conversation.id, iteration, model.identifier
            )
            started = time.monotonic()
            set_state(LoopState.AWAITING_PROVIDER_RESPONSE)
            try:
                reply = await chat(
                    conversation.messages,
                    model,
                    tools,
                    api_key=api_key,
                    system_prompt=system_prompt or None,
                    transport=opts.transport,
                )
            except (ProviderTransportError, ProviderDecodeError) as e:
                return finish(LoopState.FAILED, e, iteration)

            stats = {"duration": round(time.monotonic() - started, 3), **(reply.stats or {})}
            reply = reply.model_copy(update={"stats": stats})
            conversation = conversation.with_message(reply)
            store.update(conversation)

            if not reply.tool_calls:
                return finish(LoopState.SUCCEEDED, None, iteration)

            # Sequential, in request order: later calls may depend on earlier device effects.
            set_state(LoopState.EXECUTING_TOOLS)
            for tool_call in reply.tool_calls:
                conversation = conversation.with_message(await _run_tool(tools, tool_call))
                store.update(conversation)
    except asyncio.CancelledError:
        logger.info("Conversation %s cancelled with %d messages", conversation.id, len(conversation.messages))
        set_state(LoopState.CANCELLED)
        raise
    finally:
        _active_conversations.discard(conversation.id)
        if existing is None and store.get(conversation.id) is None:
            store.release_file_name(conversation.file_name)
