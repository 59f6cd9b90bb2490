"""Helpers for reading text and images out of messages and conversations."""

from __future__ import annotations

from .config import TITLE_MAX_LENGTH
from .models import Content, Conversation, ImageUrl, Message, Text

EMPTY_PLACEHOLDER = "<empty>"
IMAGE_PLACEHOLDER = "<image>"


def _first_text_item(message: Message) -> Text | None:
    for item in message.content or []:
        if isinstance(item, Text):
            return item
    return None


def first_image(message: Message) -> ImageUrl | None:
    for item in message.content or []:
        if isinstance(item, ImageUrl):
            return item
    return None


def message_text(message: Message) -> str:
    """Raw text of the first text item, "" when there is none. No placeholders."""
    item = _first_text_item(message)
    return item.text if item is not None else ""


def first_text(message: Message) -> str:
    """Display text for a message.

    Images before the first text item do not hide it. Messages without any text
    render as ``<image>`` (if they carry an image) or ``<empty>``.
    """
    item = _first_text_item(message)
    if item is None:
        return IMAGE_PLACEHOLDER if first_image(message) is not None else EMPTY_PLACEHOLDER
    # Some providers send the JSON literal null as text.
    if item.text == "null":
        return ""
    if not item.text.strip():
        return EMPTY_PLACEHOLDER
    return item.text


def content_with_text(text: str) -> list[Content]:
    return [Text(text=text)]


def conversation_title(conversation: Conversation) -> str:
    """Title from the first user message, truncated; falls back to the conversation id."""
    fallback = f"Conversation {conversation.id}"
    user_message = next((m for m in conversation.messages if m.role == "user"), None)
    if user_message is None:
        return fallback
    item = _first_text_item(user_message)
    if item is None or not item.text.strip():
        return fallback
    if len(item.text) > TITLE_MAX_LENGTH:
        return item.text[:TITLE_MAX_LENGTH] + "..."
    return item.text


def current_assistant_message(conversation: Conversation) -> Message | None:
    for m in reversed(conversation.messages):
        if m.role == "assistant":
            return m
    return None
