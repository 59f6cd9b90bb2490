"""User settings: selected model and per-provider API keys, persisted as JSON."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .config import API_KEY_ENV_VARS, SETTINGS_PATH
from .model_registry import ModelDescriptor, ModelProvider, default_model, resolve

load_dotenv()

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    """Persisted settings payload."""

    llm_model: str = Field(default_factory=lambda: os.getenv("DEVICE_AGENT_MODEL") or default_model().identifier)
    api_keys: dict[ModelProvider, str] = Field(default_factory=dict)
    is_first_time: bool = True
    enable_app_extensions: bool = True
    user_memories: str = ""


class SettingsStore:
    """Settings backed by a JSON file; API keys fall back to environment variables."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or SETTINGS_PATH
        self.settings = self._load()

    def _load(self) -> Settings:
        if not self.path.exists():
            return Settings()
        try:
            return Settings.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", self.path, e)
            return Settings()

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = self.settings.model_dump(mode="json")
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)

    @property
    def llm_model(self) -> str:
        return self.settings.llm_model

    @llm_model.setter
    def llm_model(self, identifier: str) -> None:
        self.settings.llm_model = identifier
        self.save()

    @property
    def selected_model(self) -> ModelDescriptor:
        return resolve(self.settings.llm_model)

    def get_api_key(self, provider: ModelProvider) -> str | None:
        """Stored key, else the provider's environment variable; empty means absent."""
        key = self.settings.api_keys.get(provider)
        if key:
            return key
        for var in API_KEY_ENV_VARS.get(provider.value, ()):
            value = os.getenv(var)
            if value:
                return value
        return None

    def set_api_key(self, provider: ModelProvider, api_key: str) -> None:
        self.settings.api_keys[provider] = api_key
        self.save()
