"""Default system prompt for device assistant conversations."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from .config import DEFAULT_SYSTEM_PROMPT_PATH

logger = logging.getLogger(__name__)

PROMPT_PATH_ENV = "DEVICE_AGENT_SYSTEM_PROMPT"


def load_system_prompt(path: Path) -> str:
    """Prompt text from ``path``, stripped; a missing or unreadable file yields ""."""
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError as e:
        logger.warning("System prompt not loaded from %s: %s", path, e)
        return ""


@lru_cache(maxsize=1)
def get_default_system_prompt() -> str:
    """The prompt file named by DEVICE_AGENT_SYSTEM_PROMPT, else the bundled one. Read once."""
    override = os.getenv(PROMPT_PATH_ENV)
    return load_system_prompt(Path(override) if override else DEFAULT_SYSTEM_PROMPT_PATH)


def reset_system_prompt_cache() -> None:
    get_default_system_prompt.cache_clear()
