"""
Model Catalog Tests

Validates the built-in catalog contents, capability listing and
availability updates.

Test Categories:
1. TestModelDescriptor - Descriptor validation and derived fields
2. TestCatalogLookup - get() and list_by_capability()
3. TestAvailability - set_availability() semantics and atomicity
"""

import threading

import pytest
from pydantic import ValidationError

from aihub.registry.models import (
    DEFAULT_MODEL_ID,
    ModelCapability,
    ModelCatalog,
    ModelDescriptor,
    ModelProvider,
    get_model_catalog,
)


class TestModelDescriptor:
    """Tests for ModelDescriptor."""

    def test_api_model_name_is_id_suffix(self, make_model):
        model = make_model("groq/llama3-70b")
        assert model.api_model_name == "llama3-70b"

    def test_api_model_name_keeps_nested_path(self, make_model):
        model = make_model("groq/meta-llama/llama-guard-4-12b")
        assert model.api_model_name == "meta-llama/llama-guard-4-12b"

    def test_capabilities_accept_enum_members(self, make_model):
        model = make_model("xai/grok", capabilities=[ModelCapability.CODE, "chat"])
        assert model.capabilities == frozenset({"code", "chat"})
        assert model.supports("code")
        assert not model.supports("vision")

    def test_descriptor_is_frozen(self, make_model):
        model = make_model("groq/x")
        with pytest.raises(ValidationError):
            model.is_available = False

    def test_negative_cost_rejected(self, make_model):
        with pytest.raises(ValidationError):
            make_model("groq/x", cost=-0.1)

    def test_zero_context_rejected(self, make_model):
        with pytest.raises(ValidationError):
            make_model("groq/x", context=0)

    def test_id_without_provider_prefix_rejected(self):
        with pytest.raises(ValidationError):
            ModelDescriptor(
                id="llama3",
                provider=ModelProvider.GROQ,
                name="Llama",
                cost_per_1k_tokens=0.1,
                context_window=1024,
            )


class TestCatalogLookup:
    """Tests for catalog lookup and listing."""

    def test_builtin_catalog_has_seven_models(self, default_catalog):
        assert len(default_catalog) == 7

    def test_builtin_default_model(self, default_catalog):
        assert default_catalog.default_model.id == DEFAULT_MODEL_ID

    def test_get_known_model(self, default_catalog):
        model = default_catalog.get("openai/gpt-4o")
        assert model is not None
        assert model.provider == ModelProvider.OPENAI
        assert model.context_window == 128000
        assert model.is_available is False

    def test_get_unknown_model_returns_none(self, default_catalog):
        assert default_catalog.get("nope/model") is None

    def test_list_all_preserves_insertion_order(self, default_catalog):
        ids = [m.id for m in default_catalog.list_by_capability()]
        assert ids == [
            "groq/llama3-70b",
            "groq/llama3-8b",
            "xai/grok-1",
            "openai/gpt-4o",
            "anthropic/claude-3-opus",
            "mistral/mistral-large",
            "cohere/command-r",
        ]

    def test_list_by_capability_filters_in_order(self, default_catalog):
        ids = [m.id for m in default_catalog.list_by_capability("code")]
        assert ids == ["xai/grok-1", "openai/gpt-4o", "mistral/mistral-large"]

    def test_list_by_unknown_capability_is_empty(self, default_catalog):
        assert default_catalog.list_by_capability("audio") == []

    def test_default_must_be_in_catalog(self, make_model):
        with pytest.raises(ValueError, match="not in the catalog"):
            ModelCatalog([make_model("groq/x")], default_id="groq/missing")

    def test_duplicate_ids_rejected(self, make_model):
        with pytest.raises(ValueError, match="Duplicate"):
            ModelCatalog([make_model("groq/x"), make_model("groq/x")], default_id="groq/x")

    def test_global_catalog_is_singleton(self):
        assert get_model_catalog() is get_model_catalog()


class TestAvailability:
    """Tests for availability updates."""

    def test_set_availability_known_model(self, default_catalog):
        assert default_catalog.set_availability("openai/gpt-4o", True) is True
        assert default_catalog.get("openai/gpt-4o").is_available is True

    def test_set_availability_unknown_model_is_noop(self, default_catalog):
        before = default_catalog.snapshot()
        assert default_catalog.set_availability("nope/model", True) is False
        assert default_catalog.snapshot() == before

    def test_update_keeps_catalog_order(self, default_catalog):
        order = default_catalog.get_model_ids()
        default_catalog.set_availability("groq/llama3-70b", False)
        assert [m.id for m in default_catalog.snapshot()] == order

    def test_snapshot_not_affected_by_later_updates(self, default_catalog):
        snapshot = default_catalog.snapshot()
        default_catalog.set_availability("groq/llama3-8b", False)

        old = next(m for m in snapshot if m.id == "groq/llama3-8b")
        assert old.is_available is True
        assert default_catalog.get("groq/llama3-8b").is_available is False

    def test_concurrent_updates_leave_consistent_entries(self, default_catalog):
        def flip(value: bool):
            for _ in range(200):
                default_catalog.set_availability("xai/grok-1", value)
                for model in default_catalog.snapshot():
                    assert isinstance(model, ModelDescriptor)

        threads = [threading.Thread(target=flip, args=(i % 2 == 0,)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(default_catalog) == 7
        assert default_catalog.get("xai/grok-1").is_available in (True, False)
