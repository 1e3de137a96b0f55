"""
Model Catalog

This module defines the static catalog of backend models the hub can
dispatch to. Each entry carries the properties the selector filters on:
- Provider and model id (`<provider>/<modelName>`)
- Capability tags (chat, code, vision, ...)
- Cost per 1K tokens and context window
- Runtime availability flag

Descriptors are immutable. Marking a model available or unavailable
replaces its catalog entry with an updated copy under a lock, so
concurrent selections always read a consistent snapshot.
"""

from enum import Enum
import logging
import threading

from pydantic import BaseModel, ConfigDict, Field, field_validator

from aihub.config import get_settings

logger = logging.getLogger(__name__)


class ModelProvider(str, Enum):
    """Supported inference providers."""

    GROQ = "groq"
    XAI = "xai"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    MISTRAL = "mistral"
    COHERE = "cohere"


class ModelCapability(str, Enum):
    """Known capability tags."""

    TEXT_GENERATION = "text-generation"
    CHAT = "chat"
    CODE = "code"
    VISION = "vision"
    EMBEDDINGS = "embeddings"


class ModelDescriptor(BaseModel):
    """
    Immutable catalog entry for one backend model.

    The id doubles as the dispatch target: its suffix after the first
    "/" is the model name sent to the provider's API.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        ...,
        pattern=r"^[^/]+/.+$",
        description="Globally unique id in the form <provider>/<modelName>",
    )

    provider: ModelProvider = Field(
        ...,
        description="Inference provider serving this model",
    )

    name: str = Field(
        ...,
        description="Human-readable model name",
    )

    capabilities: frozenset[str] = Field(
        default_factory=frozenset,
        description="Capability tags (e.g. 'chat', 'code')",
    )

    cost_per_1k_tokens: float = Field(
        ...,
        ge=0,
        description="Cost in USD per 1 thousand tokens",
    )

    context_window: int = Field(
        ...,
        gt=0,
        description="Maximum context size in tokens",
    )

    is_available: bool = Field(
        default=True,
        description="Whether the model is currently accepting requests",
    )

    @field_validator("capabilities", mode="before")
    @classmethod
    def normalize_capabilities(cls, v):
        """Store capability tags as plain strings."""
        return frozenset(c.value if isinstance(c, Enum) else str(c) for c in v)

    @property
    def api_model_name(self) -> str:
        """Model name used in provider API calls."""
        return self.id.split("/", 1)[1]

    def supports(self, capability: str) -> bool:
        """Check whether the model carries a capability tag."""
        return capability in self.capabilities


DEFAULT_MODEL_ID = "groq/llama3-8b"


def default_descriptors() -> list[ModelDescriptor]:
    """Build the built-in catalog entries, in catalog order."""
    cap = ModelCapability
    return [
        ModelDescriptor(
            id="groq/llama3-70b",
            provider=ModelProvider.GROQ,
            name="Llama 3 70B",
            capabilities=[cap.TEXT_GENERATION, cap.CHAT, cap.EMBEDDINGS],
            cost_per_1k_tokens=0.0007,
            context_window=8192,
            is_available=True,
        ),
        ModelDescriptor(
            id="groq/llama3-8b",
            provider=ModelProvider.GROQ,
            name="Llama 3 8B",
            capabilities=[cap.TEXT_GENERATION, cap.CHAT, cap.EMBEDDINGS],
            cost_per_1k_tokens=0.0002,
            context_window=8192,
            is_available=True,
        ),
        ModelDescriptor(
            id="xai/grok-1",
            provider=ModelProvider.XAI,
            name="Grok-1",
            capabilities=[cap.TEXT_GENERATION, cap.CHAT, cap.CODE],
            cost_per_1k_tokens=0.0005,
            context_window=8192,
            is_available=True,
        ),
        ModelDescriptor(
            id="openai/gpt-4o",
            provider=ModelProvider.OPENAI,
            name="GPT-4o",
            capabilities=[cap.TEXT_GENERATION, cap.CHAT, cap.VISION, cap.CODE],
            cost_per_1k_tokens=0.005,
            context_window=128000,
            is_available=False,
        ),
        ModelDescriptor(
            id="anthropic/claude-3-opus",
            provider=ModelProvider.ANTHROPIC,
            name="Claude 3 Opus",
            capabilities=[cap.TEXT_GENERATION, cap.CHAT, cap.VISION],
            cost_per_1k_tokens=0.015,
            context_window=200000,
            is_available=False,
        ),
        ModelDescriptor(
            id="mistral/mistral-large",
            provider=ModelProvider.MISTRAL,
            name="Mistral Large",
            capabilities=[cap.TEXT_GENERATION, cap.CHAT, cap.CODE],
            cost_per_1k_tokens=0.002,
            context_window=32768,
            is_available=False,
        ),
        ModelDescriptor(
            id="cohere/command-r",
            provider=ModelProvider.COHERE,
            name="Command R",
            capabilities=[cap.TEXT_GENERATION, cap.CHAT],
            cost_per_1k_tokens=0.001,
            context_window=128000,
            is_available=False,
        ),
    ]


class ModelCatalog:
    """
    Registry of model descriptors keyed by id.

    Entries keep insertion order. The only mutation is the availability
    flag, applied copy-on-write under a lock; readers never block on
    each other and always see whole descriptors.

    Attributes:
        _models: Dictionary mapping model ids to descriptors
        _default_id: Id of the entry returned when selection finds nothing
    """

    def __init__(
        self,
        descriptors: list[ModelDescriptor] | None = None,
        default_id: str = DEFAULT_MODEL_ID,
    ) -> None:
        self._lock = threading.Lock()
        self._models: dict[str, ModelDescriptor] = {}
        for descriptor in default_descriptors() if descriptors is None else descriptors:
            self._register(descriptor)

        if default_id not in self._models:
            raise ValueError(f"Default model '{default_id}' is not in the catalog")
        self._default_id = default_id

    def _register(self, descriptor: ModelDescriptor) -> None:
        """Register a model in the catalog."""
        if descriptor.id in self._models:
            raise ValueError(f"Duplicate model id: {descriptor.id}")
        self._models[descriptor.id] = descriptor

    def get(self, model_id: str) -> ModelDescriptor | None:
        """
        Retrieve a descriptor by id.

        Args:
            model_id: The unique identifier of the model

        Returns:
            ModelDescriptor if found, None otherwise
        """
        return self._models.get(model_id)

    def snapshot(self) -> tuple[ModelDescriptor, ...]:
        """Return every entry, in catalog order, as an immutable view."""
        with self._lock:
            return tuple(self._models.values())

    def list_by_capability(self, capability: str | None = None) -> list[ModelDescriptor]:
        """
        List entries, optionally restricted to one capability.

        Args:
            capability: Tag to filter on; all entries when omitted

        Returns:
            Matching descriptors in catalog order
        """
        entries = self.snapshot()
        if capability is None:
            return list(entries)
        return [m for m in entries if m.supports(capability)]

    def set_availability(self, model_id: str, is_available: bool) -> bool:
        """
        Mark a model available or unavailable.

        Args:
            model_id: Id of the model to update
            is_available: New availability flag

        Returns:
            True if the model exists, False (no-op) otherwise
        """
        with self._lock:
            current = self._models.get(model_id)
            if current is None:
                return False
            self._models[model_id] = current.model_copy(
                update={"is_available": is_available}
            )

        logger.info(f"Model {model_id} marked {'available' if is_available else 'unavailable'}")
        return True

    @property
    def default_model(self) -> ModelDescriptor:
        """The designated default entry."""
        return self._models[self._default_id]

    def get_model_ids(self) -> list[str]:
        """Return all registered model ids."""
        return list(self._models.keys())

    def __len__(self) -> int:
        return len(self._models)


_catalog_instance: ModelCatalog | None = None


def get_model_catalog() -> ModelCatalog:
    """
    Get the global model catalog instance.

    Uses lazy initialization; the default entry comes from settings.

    Returns:
        The singleton ModelCatalog instance
    """
    global _catalog_instance
    if _catalog_instance is None:
        _catalog_instance = ModelCatalog(default_id=get_settings().default_model)
    return _catalog_instance
