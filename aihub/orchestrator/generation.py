"""
Resilient Generation Orchestrator

Composes the catalog, selector, cache gateway and dispatcher into the
end-to-end generate() operation:

1. Reject empty prompts before touching the cache or the network
2. Serve from the cache when use_cache and a cache key are both given
3. Select the primary model from a catalog snapshot
4. Dispatch to the primary; on success, cache the text (best-effort)
5. On primary failure, dispatch once to the fixed fallback model, or to
   the secondary fallback when the primary shares the fallback provider;
   fallback text is returned but never cached
6. If the fallback also fails, raise AllProvidersFailedError

There are at most two dispatch attempts per request and they run
sequentially. Concurrent requests sharing a cache key are not
coordinated: each may miss and dispatch independently.
"""

import logging
import time

from aihub.cache.gateway import CacheGateway, get_cache_gateway
from aihub.config import Settings, get_settings
from aihub.dispatcher.handlers import DispatchResult, dispatch, dispatch_model_id
from aihub.errors import (
    AllProvidersFailedError,
    CacheUnavailable,
    DispatchFailure,
    InvalidRequestError,
)
from aihub.metrics.cost import get_cost_calculator
from aihub.metrics.store import GenerationMetric, get_metrics_store
from aihub.registry.models import ModelCatalog, ModelDescriptor, get_model_catalog
from aihub.router.engine import SelectionPreferences, select_model
from aihub.schemas.generation import (
    CACHED_MODEL_MARKER,
    GenerationRequest,
    GenerationResult,
)

logger = logging.getLogger(__name__)


class GenerationOrchestrator:
    """
    Entry point for text generation with caching and fallback.

    Usage:
        orchestrator = GenerationOrchestrator()
        result = await orchestrator.generate(GenerationRequest(
            prompt="Hello",
            preferences=SelectionPreferences(capability="chat"),
            cache_key="hello",
        ))

    Attributes:
        cache_ttl_seconds: Expiry applied to cached text
    """

    def __init__(
        self,
        catalog: ModelCatalog | None = None,
        cache: CacheGateway | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._catalog = catalog if catalog is not None else get_model_catalog()
        self._cache = cache
        self.cache_ttl_seconds = self._settings.cache_ttl_seconds

    @property
    def cache(self) -> CacheGateway:
        """Cache gateway (lazy initialization)."""
        if self._cache is None:
            self._cache = get_cache_gateway()
        return self._cache

    @property
    def catalog(self) -> ModelCatalog:
        return self._catalog

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """
        Generate text for a request.

        Args:
            request: Prompt, preferences and cache settings

        Returns:
            GenerationResult describing the text and where it came from

        Raises:
            InvalidRequestError: If the prompt is empty
            AllProvidersFailedError: If primary and fallback both fail
        """
        if not request.prompt or not request.prompt.strip():
            raise InvalidRequestError("Prompt is required")

        start_time = time.perf_counter()
        caching = request.use_cache and bool(request.cache_key)

        if caching:
            cached = await self._lookup(request.cache_key)
            if cached is not None:
                result = GenerationResult(
                    text=cached, model_used=CACHED_MODEL_MARKER, from_cache=True
                )
                self._record(result, start_time)
                return result

        primary = select_model(
            self._catalog.snapshot(), request.preferences, self._catalog.default_model
        )

        try:
            dispatched = await dispatch(primary, request.prompt, request.system)
        except DispatchFailure as primary_failure:
            logger.error(f"Error with model {primary.id}: {primary_failure}")
            return await self._generate_with_fallback(
                request, primary, primary_failure, start_time
            )

        if caching and dispatched.text:
            await self._store(request.cache_key, dispatched.text)

        result = GenerationResult(
            text=dispatched.text, model_used=primary.id, from_cache=False
        )
        self._record(result, start_time, dispatched)
        return result

    async def _generate_with_fallback(
        self,
        request: GenerationRequest,
        primary: ModelDescriptor,
        primary_failure: DispatchFailure,
        start_time: float,
    ) -> GenerationResult:
        """Try one fallback model on another provider; its text is not cached."""
        fallback_id = self._settings.fallback_for(primary.provider.value)
        logger.warning(f"Falling back to {fallback_id}")
        try:
            dispatched = await dispatch_model_id(
                fallback_id, request.prompt, request.system
            )
        except DispatchFailure as fallback_failure:
            logger.error(f"Fallback model also failed: {fallback_failure}")
            raise AllProvidersFailedError(primary_failure, fallback_failure) from fallback_failure

        result = GenerationResult(
            text=dispatched.text,
            model_used=fallback_id,
            from_cache=False,
            used_fallback=True,
        )
        self._record(result, start_time, dispatched)
        return result

    async def _lookup(self, key: str) -> str | None:
        try:
            return await self.cache.lookup(key)
        except CacheUnavailable as e:
            logger.warning(f"{e}; treating as cache miss")
            return None

    async def _store(self, key: str, text: str) -> None:
        try:
            await self.cache.store(key, text, self.cache_ttl_seconds)
        except CacheUnavailable as e:
            logger.warning(f"{e}; response not cached")

    def _record(
        self,
        result: GenerationResult,
        start_time: float,
        dispatched: DispatchResult | None = None,
    ) -> None:
        if not self._settings.track_costs:
            return

        input_tokens = dispatched.tokens.input_tokens if dispatched else 0
        output_tokens = dispatched.tokens.output_tokens if dispatched else 0
        cost = get_cost_calculator().calculate_by_model_id(
            result.model_used, input_tokens, output_tokens, catalog=self._catalog
        )

        get_metrics_store().record(
            GenerationMetric(
                timestamp=time.time(),
                model_used=result.model_used,
                from_cache=result.from_cache,
                used_fallback=result.used_fallback,
                latency_ms=(time.perf_counter() - start_time) * 1000,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                estimated_cost_usd=cost.estimated_cost_usd if cost else 0.0,
            )
        )

    def list_models(self, capability: str | None = None) -> list[ModelDescriptor]:
        """List catalog entries, optionally restricted to one capability."""
        return self._catalog.list_by_capability(capability)

    def set_availability(self, model_id: str, is_available: bool) -> bool:
        """Mark a catalog entry available or unavailable; False if unknown."""
        return self._catalog.set_availability(model_id, is_available)


_orchestrator: GenerationOrchestrator | None = None


def get_orchestrator() -> GenerationOrchestrator:
    """
    Get the global orchestrator instance.

    Returns:
        The singleton GenerationOrchestrator bound to the global catalog.
    """
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = GenerationOrchestrator()
    return _orchestrator


async def generate_text(
    prompt: str,
    preferences: SelectionPreferences,
    system: str | None = None,
    cache_key: str | None = None,
    use_cache: bool = True,
) -> GenerationResult:
    """
    Generate text through the global orchestrator.

    Args:
        prompt: User prompt (must not be empty)
        preferences: Model selection preferences
        system: Optional system instruction
        cache_key: Optional key for caching the result
        use_cache: Whether to read/write the cache when a key is given

    Returns:
        GenerationResult
    """
    request = GenerationRequest(
        prompt=prompt,
        system=system,
        preferences=preferences,
        cache_key=cache_key,
        use_cache=use_cache,
    )
    return await get_orchestrator().generate(request)


def list_models(capability: str | None = None) -> list[ModelDescriptor]:
    """List models in the global catalog."""
    return get_orchestrator().list_models(capability)


def set_availability(model_id: str, is_available: bool) -> bool:
    """Update availability in the global catalog."""
    return get_orchestrator().set_availability(model_id, is_available)
