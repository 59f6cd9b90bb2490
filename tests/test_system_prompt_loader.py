"""Tests for loading the default system prompt."""
from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from src.device_agent.system_prompt_loader import (
    PROMPT_PATH_ENV,
    get_default_system_prompt,
    load_system_prompt,
    reset_system_prompt_cache,
)


class TestSystemPromptLoader(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        reset_system_prompt_cache()
        self.addCleanup(reset_system_prompt_cache)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_bundled_prompt_is_not_empty(self) -> None:
        with patch.dict(os.environ, {PROMPT_PATH_ENV: ""}):
            self.assertTrue(get_default_system_prompt())

    def test_override_path_is_read_and_stripped(self) -> None:
        path = self.root / "prompt.md"
        path.write_text("\n  You operate a phone.  \n", encoding="utf-8")
        with patch.dict(os.environ, {PROMPT_PATH_ENV: str(path)}):
            self.assertEqual(get_default_system_prompt(), "You operate a phone.")

    def test_missing_file_yields_empty_prompt(self) -> None:
        self.assertEqual(load_system_prompt(self.root / "missing.md"), "")
