"""FastAPI router for conversations and the agent loop."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from .conversation_store import ConversationStore
from .conversation_utils import conversation_title
from .device_tools import GetTimeTool
from .errors import ConversationBusy
from .loop import LoopOptions, run_loop
from .models import Conversation
from .settings import SettingsStore
from .tools import ToolCatalog

router = APIRouter(prefix="/conversations", tags=["conversations"])

_store: ConversationStore | None = None
_settings: SettingsStore | None = None
_tools: ToolCatalog | None = None


def get_store() -> ConversationStore:
    global _store
    if _store is None:
        _store = ConversationStore()
    return _store


def get_settings() -> SettingsStore:
    global _settings
    if _settings is None:
        _settings = SettingsStore()
    return _settings


def get_tool_catalog() -> ToolCatalog:
    """Tools exposed to the model; the host replaces this with its device catalog."""
    global _tools
    if _tools is None:
        _tools = ToolCatalog([GetTimeTool()])
    return _tools


def set_tool_catalog(catalog: ToolCatalog) -> None:
    global _tools
    _tools = catalog


class ConversationSummary(BaseModel):
    id: str
    title: str
    file_name: str
    start_time: int
    end_time: int | None = None
    is_complete: bool
    message_count: int

    @classmethod
    def of(cls, conversation: Conversation) -> ConversationSummary:
        return cls(
            id=conversation.id,
            title=conversation_title(conversation),
            file_name=conversation.file_name,
            start_time=conversation.start_time,
            end_time=conversation.end_time,
            is_complete=conversation.is_complete,
            message_count=len(conversation.messages),
        )


class ChatRequest(BaseModel):
    """Request body for POST /conversations/chat."""

    message: str = Field(..., description="User message")
    image_url: str | None = Field(None, description="Optional image (http(s) or data: URL)")
    conversation_id: str | None = Field(None, description="Optional conversation id to continue")
    model: str | None = Field(None, description="Model identifier; defaults to the selected model")
    system_prompt: str | None = Field(None, description="Optional system prompt")


class ChatResponse(BaseModel):
    """Response for POST /conversations/chat."""

    conversation_id: str
    reply: str
    state: str
    message_count: int = 0
    error: str | None = None


@router.get("", response_model=list[ConversationSummary])
def list_conversations(store: ConversationStore = Depends(get_store)) -> list[ConversationSummary]:
    return [ConversationSummary.of(c) for c in store.conversations]


@router.get("/recent", response_model=list[ConversationSummary])
def recent_conversations(store: ConversationStore = Depends(get_store)) -> list[ConversationSummary]:
    """Conversations started within the last hour, newest first."""
    return [ConversationSummary.of(c) for c in store.recent()]


@router.get("/current", response_model=Conversation)
def current_conversation(store: ConversationStore = Depends(get_store)) -> Conversation:
    current = store.current_conversation
    if current is None:
        raise HTTPException(status_code=404, detail="No current conversation")
    return current


@router.get("/{conversation_id}", response_model=Conversation)
def get_conversation(conversation_id: str, store: ConversationStore = Depends(get_store)) -> Conversation:
    conversation = store.get(conversation_id)
    if conversation is None:
        raise HTTPException(status_code=404, detail=f"Unknown conversation: {conversation_id}")
    return conversation


@router.post("/{conversation_id}/current", status_code=204)
def select_conversation(conversation_id: str, store: ConversationStore = Depends(get_store)) -> None:
    store.set_current(conversation_id)


@router.delete("/{conversation_id}", status_code=204)
def delete_conversation(conversation_id: str, store: ConversationStore = Depends(get_store)) -> None:
    store.delete(conversation_id)


@router.delete("", status_code=204)
def clear_conversations(store: ConversationStore = Depends(get_store)) -> None:
    store.clear()


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    store: ConversationStore = Depends(get_store),
    settings: SettingsStore = Depends(get_settings),
    tools: ToolCatalog = Depends(get_tool_catalog),
) -> ChatResponse:
    """Run the agent loop for one user message and return the outcome."""
    opts = LoopOptions(model=request.model, system_prompt=request.system_prompt)
    try:
        result = await run_loop(
            request.message,
            store=store,
            tools=tools,
            settings=settings,
            conversation_id=request.conversation_id,
            image_url=request.image_url,
            options=opts,
        )
    except ConversationBusy as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return ChatResponse(
        conversation_id=result.conversation.id,
        reply=result.reply,
        state=result.state.value,
        message_count=len(result.conversation.messages),
        error=str(result.error) if result.error else None,
    )
