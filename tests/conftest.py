"""
Pytest configuration and shared fixtures.

Provides test utilities, mock clients, an in-memory Redis double and
environment setup for the AI Hub test suite.

IMPORTANT: Environment variables must be set BEFORE importing aihub modules
that use pydantic-settings, as Settings validates on first use.
"""

import os

# Set test environment variables before importing aihub modules
os.environ["GROQ_API_KEY"] = "test-key-not-real"
os.environ["XAI_API_KEY"] = "test-key-not-real"
os.environ["REDIS_URL"] = "redis://localhost:6379/15"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DEBUG"] = "false"

import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient

from tests.fixtures import InMemoryRedis


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "asyncio: mark test as async")
    config.addinivalue_line(
        "markers", "integration: mark test as requiring real API calls"
    )


@pytest.fixture(autouse=True)
def reset_singletons():
    """
    Reset all singleton instances between tests.

    This ensures each test starts with a clean state.
    """
    yield

    from aihub.cache import gateway
    from aihub.dispatcher import handlers
    from aihub.metrics import cost, store
    from aihub.orchestrator import generation
    from aihub.registry import models

    models._catalog_instance = None
    handlers._clients = None
    gateway._gateway = None
    generation._orchestrator = None
    cost._calculator = None
    if store._store is not None:
        store._store.reset()


@pytest.fixture
def make_model():
    """
    Factory fixture for creating ModelDescriptor objects.

    Usage:
        model = make_model("groq/x", cost=0.001, context=4096)
    """

    def _create(
        model_id: str,
        capabilities=("chat",),
        cost: float = 0.001,
        context: int = 8192,
        available: bool = True,
        name: str | None = None,
    ):
        from aihub.registry.models import ModelDescriptor

        return ModelDescriptor(
            id=model_id,
            provider=model_id.split("/", 1)[0],
            name=name or model_id,
            capabilities=capabilities,
            cost_per_1k_tokens=cost,
            context_window=context,
            is_available=available,
        )

    return _create


@pytest.fixture
def two_model_catalog(make_model):
    """
    Two chat models: a cheap small-context one and a pricier large-context one.
    """
    from aihub.registry.models import ModelCatalog

    return ModelCatalog(
        [
            make_model("groq/x", cost=0.001, context=4096),
            make_model("xai/y", cost=0.002, context=16000),
        ],
        default_id="groq/x",
    )


@pytest.fixture
def default_catalog():
    """A fresh catalog with the built-in entries."""
    from aihub.registry.models import ModelCatalog

    return ModelCatalog()


@pytest.fixture
def fake_redis():
    """In-memory stand-in for redis.asyncio.Redis."""
    return InMemoryRedis()


@pytest.fixture
def cache_gateway(fake_redis):
    """CacheGateway backed by the in-memory Redis double."""
    from aihub.cache.gateway import CacheGateway

    return CacheGateway(fake_redis, namespace="test-cache")


@pytest.fixture
def mock_dispatch_result():
    """
    Factory fixture for creating DispatchResult objects.

    Usage:
        result = mock_dispatch_result("Hello", model_used="groq/llama3-8b")
    """

    def _create(
        text: str = "Generated text",
        model_used: str = "groq/llama3-8b",
        provider: str = "groq",
        latency_ms: float = 120.0,
        input_tokens: int = 100,
        output_tokens: int = 50,
    ):
        from aihub.dispatcher.handlers import DispatchResult, TokenUsage

        return DispatchResult(
            text=text,
            model_used=model_used,
            provider=provider,
            latency_ms=latency_ms,
            tokens=TokenUsage(input_tokens=input_tokens, output_tokens=output_tokens),
        )

    return _create


@pytest.fixture
def mock_completion_response():
    """
    Factory for SDK chat-completion response objects.

    Usage:
        response = mock_completion_response("Hello there")
    """

    def _create(content: str | None = "Hello from the model", prompt_tokens=100, completion_tokens=50):
        response = MagicMock()
        response.choices = [MagicMock(message=MagicMock(content=content))]
        response.usage = MagicMock(
            prompt_tokens=prompt_tokens, completion_tokens=completion_tokens
        )
        return response

    return _create


@pytest.fixture
def mock_sdk_client(mock_completion_response):
    """A mocked async SDK client whose create() returns a completion."""
    client = AsyncMock()
    client.chat = MagicMock()
    client.chat.completions = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=mock_completion_response())
    return client


@pytest.fixture
def mock_provider_clients(mock_sdk_client):
    """
    Create a mocked ProviderClients instance.

    Every provider resolves to the same mocked SDK client.
    """
    clients = MagicMock()
    clients.for_provider = MagicMock(return_value=mock_sdk_client)
    return clients


@pytest.fixture
def orchestrator(cache_gateway):
    """GenerationOrchestrator over the built-in catalog and in-memory cache."""
    from aihub.orchestrator.generation import GenerationOrchestrator
    from aihub.registry.models import ModelCatalog

    return GenerationOrchestrator(catalog=ModelCatalog(), cache=cache_gateway)


@pytest.fixture
def test_client(orchestrator):
    """
    FastAPI TestClient whose global orchestrator uses the in-memory cache.

    Dispatch is not mocked here; patch aihub.orchestrator.generation.dispatch
    in the test when a generation must succeed.
    """
    from aihub.orchestrator import generation
    from aihub.main import app

    generation._orchestrator = orchestrator
    with TestClient(app) as client:
        yield client
