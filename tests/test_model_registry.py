"""Unit tests for the model catalog."""
from __future__ import annotations

import unittest

from src.device_agent.model_registry import (
    AVAILABLE_MODELS,
    ModelDescriptor,
    ModelProvider,
    list_models,
    list_providers,
    resolve,
)


class TestResolve(unittest.TestCase):
    def test_known_openai_identifier(self) -> None:
        model = resolve("gpt-4o")
        self.assertEqual(model.display_name, "GPT-4o")
        self.assertEqual(model.identifier, "gpt-4o")
        self.assertEqual(model.provider, ModelProvider.OPENAI)

    def test_known_gemini_identifier(self) -> None:
        model = resolve("gemini-2.0-flash")
        self.assertEqual(model.display_name, "Gemini Flash")
        self.assertEqual(model.provider, ModelProvider.GEMINI)

    def test_known_openrouter_identifier(self) -> None:
        model = resolve("anthropic/claude-3.5-sonnet")
        self.assertEqual(model.display_name, "Claude 3.5 Sonnet")
        self.assertEqual(model.provider, ModelProvider.OPENROUTER)

    def test_unknown_identifiers_fall_back_to_first_model(self) -> None:
        for identifier in ("non-existent-model", "", None, "GPT-4O", "gpt-4o "):
            with self.subTest(identifier=identifier):
                self.assertEqual(resolve(identifier), AVAILABLE_MODELS[0])


class TestCatalog(unittest.TestCase):
    def test_providers_are_distinct_and_complete(self) -> None:
        providers = list_providers()
        self.assertEqual(len(providers), 3)
        self.assertEqual(len(providers), len(set(providers)))
        self.assertEqual(set(providers), set(ModelProvider))

    def test_list_models_filters_by_provider_in_catalog_order(self) -> None:
        openai = list_models(ModelProvider.OPENAI)
        self.assertTrue(all(m.provider == ModelProvider.OPENAI for m in openai))
        self.assertIn("gpt-4o-mini", [m.identifier for m in openai])
        catalog_order = [m for m in AVAILABLE_MODELS if m.provider == ModelProvider.OPENAI]
        self.assertEqual(openai, catalog_order)

    def test_openrouter_models_are_namespaced(self) -> None:
        models = list_models(ModelProvider.OPENROUTER)
        self.assertTrue(all("/" in m.identifier for m in models))
        self.assertTrue(any(m.identifier.startswith("anthropic/") for m in models))
        self.assertTrue(any(m.identifier.startswith("meta-llama/") for m in models))

    def test_catalog_size_and_unique_identifiers(self) -> None:
        identifiers = [m.identifier for m in AVAILABLE_MODELS]
        self.assertGreaterEqual(len(identifiers), 16)
        self.assertEqual(len(identifiers), len(set(identifiers)))
        for m in AVAILABLE_MODELS:
            self.assertTrue(m.display_name.strip())

    def test_descriptors_compare_by_value(self) -> None:
        a = ModelDescriptor(display_name="Test", identifier="test", provider=ModelProvider.OPENAI)
        b = ModelDescriptor(display_name="Test", identifier="test", provider=ModelProvider.OPENAI)
        c = ModelDescriptor(display_name="Other", identifier="test", provider=ModelProvider.OPENAI)
        self.assertEqual(a, b)
        self.assertNotEqual(a, c)


if __name__ == "__main__":
    unittest.main()
