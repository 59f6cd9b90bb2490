"""Agent configuration: paths and orchestration defaults."""

from __future__ import annotations

from pathlib import Path

from main_config import (
    CONVERSATIONS_DIR as _CONVERSATIONS_DIR,
    DATA_DIR as _DATA_DIR,
    DEFAULT_SYSTEM_PROMPT_PATH as _DEFAULT_SYSTEM_PROMPT_PATH,
    SETTINGS_PATH as _SETTINGS_PATH,
)

# Path objects for use in this package (main_config uses os.path strings)
DATA_DIR = Path(_DATA_DIR)
CONVERSATIONS_DIR = Path(_CONVERSATIONS_DIR)
SETTINGS_PATH = Path(_SETTINGS_PATH)
DEFAULT_SYSTEM_PROMPT_PATH = Path(_DEFAULT_SYSTEM_PROMPT_PATH)

DEFAULT_MAX_TOOL_ITERATIONS = 10
RECENT_WINDOW_SECONDS = 60 * 60
FILE_STEM_MAX_LENGTH = 50
TITLE_MAX_LENGTH = 50
REQUEST_TIMEOUT_SECONDS = 120.0
DEFAULT_TRANSPORT_RETRIES = 0

API_KEY_ENV_VARS = {
    "openai": ("OPENAI_API_KEY",),
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "openrouter": ("OPENROUTER_API_KEY",),
}


def ensure_dirs() -> None:
    """Create data and conversation directories if they do not exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    CONVERSATIONS_DIR.mkdir(parents=True, exist_ok=True)
