"""Conversation store: canonical observable list of conversations, one JSON file each."""

from __future__ import annotations

import logging
import os
import re
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from .config import CONVERSATIONS_DIR, FILE_STEM_MAX_LENGTH, RECENT_WINDOW_SECONDS
from .models import Conversation, now_millis

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-z0-9]")


@dataclass(frozen=True)
class StoreSnapshot:
    """What observers receive after every change."""

    conversations: tuple[Conversation, ...]
    current: Conversation | None


Listener = Callable[[StoreSnapshot], None]


class ConversationStore:
    """
    Sole writer of the conversation collection and the current-conversation pointer.

    Every mutation holds one lock for read-modify-write and writes the backing file
    before returning, so a reader of the directory sees the new content as soon as
    ``update`` returns. Listeners are called outside the lock.
    """

    def __init__(self, directory: Path | None = None, *, load: bool = True) -> None:
        self.directory = directory or CONVERSATIONS_DIR
        self._lock = threading.RLock()
        self._conversations: list[Conversation] = []
        self._current: Conversation | None = None
        self._listeners: list[Listener] = []
        self._reserved_names: set[str] = set()
        if load:
            self._load_all()

    # -- persistence -------------------------------------------------------

    def _path(self, conversation: Conversation) -> Path:
        return self.directory / conversation.file_name

    def _load_all(self) -> None:
        if not self.directory.is_dir():
            return
        loaded: list[Conversation] = []
        for path in sorted(self.directory.glob("*.json")):
            try:
                loaded.append(Conversation.from_json(path.read_bytes()))
            except (OSError, ValidationError) as e:
                logger.warning("Skipping unreadable conversation file %s: %s", path.name, e)
        loaded.sort(key=lambda c: c.start_time)
        self._conversations = loaded
        logger.info("Loaded %d conversations from %s", len(loaded), self.directory)

    def _write(self, conversation: Conversation) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(conversation)
        tmp = path.with_name(f".{path.name}.tmp")
        try:
            tmp.write_text(conversation.to_json(), encoding="utf-8")
            os.replace(tmp, path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise

    def _remove_file(self, conversation: Conversation) -> None:
        try:
            self._path(conversation).unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not delete %s: %s", conversation.file_name, e)

    # -- observation -------------------------------------------------------

    @property
    def conversations(self) -> list[Conversation]:
        with self._lock:
            return list(self._conversations)

    @property
    def current_conversation(self) -> Conversation | None:
        with self._lock:
            return self._current

    def get(self, conversation_id: str) -> Conversation | None:
        with self._lock:
            return next((c for c in self._conversations if c.id == conversation_id), None)

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return StoreSnapshot(tuple(self._conversations), self._current)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, snapshot: StoreSnapshot) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Conversation listener failed")

    # -- mutation ----------------------------------------------------------

    def update(self, conversation: Conversation) -> None:
        """Upsert by id (position preserved), make it current, and persist it."""
        with self._lock:
            # Disk first; a failed write leaves memory untouched.
            self._write(conversation)
            for i, existing in enumerate(self._conversations):
                if existing.id == conversation.id:
                    self._conversations[i] = conversation
                    break
            else:
                self._conversations.append(conversation)
            self._current = conversation
            self._reserved_names.discard(conversation.file_name)
            snapshot = StoreSnapshot(tuple(self._conversations), self._current)
        self._publish(snapshot)

    def set_current(self, conversation_id: str) -> None:
        """Switch the current pointer; unknown ids leave it unchanged."""
        with self._lock:
            found = next((c for c in self._conversations if c.id == conversation_id), None)
            if found is None:
                return
            self._current = found
            snapshot = StoreSnapshot(tuple(self._conversations), self._current)
        self._publish(snapshot)

    def delete(self, conversation_id: str) -> None:
        with self._lock:
            found = next((c for c in self._conversations if c.id == conversation_id), None)
            if found is None:
                return
            self._conversations = [c for c in self._conversations if c.id != conversation_id]
            self._remove_file(found)
            if self._current is not None and self._current.id == conversation_id:
                self._current = None
            snapshot = StoreSnapshot(tuple(self._conversations), self._current)
        self._publish(snapshot)

    def clear(self) -> None:
        with self._lock:
            for c in self._conversations:
                self._remove_file(c)
            if self.directory.is_dir():
                for path in self.directory.glob("*.json"):
                    path.unlink(missing_ok=True)
            self._conversations = []
            self._current = None
            self._reserved_names.clear()
            snapshot = StoreSnapshot((), None)
        self._publish(snapshot)

    # -- queries -----------------------------------------------------------

    def recent(self, now: int | None = None) -> list[Conversation]:
        """Conversations started within the last hour, newest first."""
        now = now_millis() if now is None else now
        cutoff = now - RECENT_WINDOW_SECONDS * 1000
        with self._lock:
            recent = [c for c in self._conversations if c.start_time >= cutoff]
        return sorted(recent, key=lambda c: c.start_time, reverse=True)

    def file_name_for(self, title: str) -> str:
        """Unique ``NNNN-<stem>.json`` name for a title.

        The counter starts at the number of names already taken for the stem,
        counting files on disk and names handed out but not yet written.
        """
        stem = _UNSAFE_CHARS.sub("_", title.lower())[:FILE_STEM_MAX_LENGTH]
        pattern = re.compile(rf"^\d{{4}}-{re.escape(stem)}\.json$")
        with self._lock:
            taken = {n for n in self._reserved_names if pattern.match(n)}
            if self.directory.is_dir():
                taken.update(p.name for p in self.directory.iterdir() if pattern.match(p.name))
            counter = len(taken)
            while True:
                name = f"{counter:04d}-{stem}.json"
                if name not in taken:
                    break
                counter += 1
            self._reserved_names.add(name)
        return name

    def release_file_name(self, name: str) -> None:
        """Give back a name from ``file_name_for`` that was never written."""
        with self._lock:
            self._reserved_names.discard(name)
