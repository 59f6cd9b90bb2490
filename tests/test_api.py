"""Tests for the conversations router using FastAPI's TestClient."""
from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from typing import Any

from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.device_agent import llm
from src.device_agent.api import get_settings, get_store, get_tool_catalog, router
from src.device_agent.conversation_store import ConversationStore
from src.device_agent.device_tools import GetTimeTool
from src.device_agent.errors import ProviderTransportError
from src.device_agent.model_registry import ModelProvider
from src.device_agent.models import Conversation, Message, Text
from src.device_agent.settings import SettingsStore
from src.device_agent.tools import ToolCatalog


class QueuedTransport:
    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.bodies: list[dict[str, Any]] = []

    async def post_json(self, url: str, headers: dict[str, str], body: dict[str, Any]) -> dict[str, Any]:
        self.bodies.append(body)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _reply(text: str) -> dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


class TestConversationsApi(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        self.store = ConversationStore(directory=root / "conversations")
        self.settings = SettingsStore(path=root / "settings.json")
        self.settings.llm_model = "gpt-4o"
        self.settings.set_api_key(ModelProvider.OPENAI, "test-key")

        app = FastAPI()
        app.include_router(router)
        app.dependency_overrides[get_store] = lambda: self.store
        app.dependency_overrides[get_settings] = lambda: self.settings
        app.dependency_overrides[get_tool_catalog] = lambda: ToolCatalog([GetTimeTool()])
        self.client = TestClient(app)

        previous = llm._default_transport
        self.addCleanup(setattr, llm, "_default_transport", previous)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _seed(self, conv_id: str, text: str) -> Conversation:
        conv = Conversation(
            id=conv_id,
            file_name=self.store.file_name_for(text),
            messages=[Message(role="user", content=[Text(text=text)])],
        )
        self.store.update(conv)
        return conv

    def test_chat_runs_the_loop(self) -> None:
        transport = QueuedTransport(_reply("Hello from the model"))
        llm.set_default_transport(transport)
        response = self.client.post("/conversations/chat", json={"message": "Hi", "system_prompt": ""})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["reply"], "Hello from the model")
        self.assertEqual(data["state"], "succeeded")
        self.assertEqual(data["message_count"], 2)
        self.assertIsNone(data["error"])
        self.assertIsNotNone(self.store.get(data["conversation_id"]))

    def test_chat_failure_is_reported_in_body(self) -> None:
        llm.set_default_transport(QueuedTransport(ProviderTransportError("HTTP 503", status_code=503)))
        response = self.client.post("/conversations/chat", json={"message": "Hi", "system_prompt": ""})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["state"], "failed")
        self.assertEqual(data["reply"], "")
        self.assertIn("503", data["error"])
        self.assertEqual(data["message_count"], 1)

    def test_list_and_get(self) -> None:
        self._seed("a", "First question")
        self._seed("b", "Second question")
        listed = self.client.get("/conversations").json()
        self.assertEqual([c["id"] for c in listed], ["a", "b"])
        self.assertEqual(listed[0]["title"], "First question")
        self.assertEqual(listed[0]["message_count"], 1)

        recent = self.client.get("/conversations/recent").json()
        self.assertEqual({c["id"] for c in recent}, {"a", "b"})

        conv = self.client.get("/conversations/a").json()
        self.assertEqual(conv["id"], "a")
        self.assertEqual(conv["fileName"], self.store.get("a").file_name)
        self.assertEqual(self.client.get("/conversations/missing").status_code, 404)

    def test_current_selection(self) -> None:
        self.assertEqual(self.client.get("/conversations/current").status_code, 404)
        self._seed("a", "one")
        self._seed("b", "two")
        self.assertEqual(self.client.get("/conversations/current").json()["id"], "b")
        self.assertEqual(self.client.post("/conversations/a/current").status_code, 204)
        self.assertEqual(self.client.get("/conversations/current").json()["id"], "a")

    def test_delete_and_clear(self) -> None:
        self._seed("a", "one")
        self._seed("b", "two")
        self.assertEqual(self.client.delete("/conversations/a").status_code, 204)
        self.assertIsNone(self.store.get("a"))
        self.assertEqual(self.client.delete("/conversations").status_code, 204)
        self.assertEqual(self.store.conversations, [])


if __name__ == "__main__":
    unittest.main()
