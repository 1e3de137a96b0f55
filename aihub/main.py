"""
AI Hub: FastAPI Application Entry Point

This module initializes the FastAPI application and defines the endpoints:
- /health: Health check endpoint
- /config: Non-sensitive configuration values
- /models: Catalog listing and availability updates
- /generate: Text generation with caching and fallback
- /cache/{key}: Cache invalidation
- /metrics: Generation statistics endpoint
- /metrics/recent: Most recent generation records

The application uses a lifespan context manager to:
1. Load configuration at startup
2. Configure logging based on settings
3. Report which provider credentials are present
"""

from contextlib import asynccontextmanager
import logging
import time

from fastapi import FastAPI, Depends, Query, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError

from aihub import __version__
from aihub.config import Settings, get_settings, configure_logging
from aihub.errors import AllProvidersFailedError, CacheUnavailable, InvalidRequestError
from aihub.metrics import get_metrics_store
from aihub.orchestrator import get_orchestrator
from aihub.registry import ModelProvider
from aihub.schemas import (
    AvailabilityUpdate,
    CacheDeleteResponse,
    ComponentHealth,
    ErrorCodes,
    ErrorResponse,
    GenerationRequest,
    GenerationResult,
    HealthResponse,
    MetricsResponse,
    ModelInfo,
    ModelListResponse,
    RecentGeneration,
    metrics_response_from_aggregate,
    model_info_from_descriptor,
    recent_generations_from_metrics,
)

logger = logging.getLogger(__name__)

_start_time: float = 0.0


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler for startup/shutdown events.

    Credentials are optional: a provider without a key fails at
    dispatch time, which the orchestrator recovers from via fallback.
    """
    settings = get_settings()
    configure_logging(settings)

    logger.info("=" * 60)
    logger.info("AI Hub starting up...")
    logger.info("=" * 60)
    logger.info(f"Default model: {settings.default_model}")
    logger.info(f"Fallback model: {settings.fallback_model}")
    logger.info(f"Secondary fallback model: {settings.secondary_fallback_model}")
    logger.info(f"Cache namespace: {settings.cache_namespace} (ttl={settings.cache_ttl_seconds}s)")
    logger.info(f"Cost tracking: {'enabled' if settings.track_costs else 'disabled'}")
    logger.info(f"Debug mode: {'enabled' if settings.debug else 'disabled'}")

    for provider in ModelProvider:
        configured = settings.api_key_for(provider.value) is not None
        logger.info(
            f"{provider.value} API key: {'configured' if configured else 'not configured'}"
        )

    catalog = get_orchestrator().catalog
    logger.info(
        f"Catalog ready with {len(catalog)} models: {', '.join(catalog.get_model_ids())}"
    )

    global _start_time
    _start_time = time.time()

    logger.info("=" * 60)
    logger.info("AI Hub ready to accept requests")

    yield

    logger.info("AI Hub shutting down...")


app = FastAPI(
    title="AI Hub",
    description="Provider selection and resilient dispatch for text generation",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


@app.get("/")
async def root():
    """
    Root endpoint with API information.
    """
    return {
        "name": "AI Hub",
        "description": "Provider selection and resilient dispatch",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "config": "/config",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check catalog and cache status.",
)
async def health_check():
    """
    Health check endpoint for monitoring and orchestration.

    An unreachable cache only degrades the service, since every request
    can still be served without it.
    """
    components = []
    overall_status = "healthy"
    orchestrator = get_orchestrator()

    catalog = orchestrator.catalog
    available = sum(1 for m in catalog.list_by_capability() if m.is_available)
    components.append(
        ComponentHealth(
            name="catalog",
            status="healthy",
            message=f"{available}/{len(catalog)} models available",
        )
    )

    try:
        await orchestrator.cache.ping()
        components.append(ComponentHealth(name="cache", status="healthy"))
    except CacheUnavailable as e:
        components.append(ComponentHealth(name="cache", status="degraded", message=str(e)))
        overall_status = "degraded"

    uptime = time.time() - _start_time if _start_time > 0 else 0.0

    return HealthResponse(
        status=overall_status,
        version=__version__,
        components=components,
        uptime_seconds=uptime,
    )


@app.get("/config")
async def show_config(settings: Settings = Depends(get_settings)):
    """
    Returns non-sensitive configuration values.

    API keys are SecretStr and are NOT exposed in this endpoint.
    """
    return {
        "selection": {
            "default_model": settings.default_model,
            "fallback_model": settings.fallback_model,
            "secondary_fallback_model": settings.secondary_fallback_model,
        },
        "cache": {
            "namespace": settings.cache_namespace,
            "ttl_seconds": settings.cache_ttl_seconds,
        },
        "dispatch": {"timeout_seconds": settings.dispatch_timeout_seconds},
        "cost_tracking": {"enabled": settings.track_costs},
        "server": {"host": settings.host, "port": settings.port, "debug": settings.debug},
        "logging": {"level": settings.log_level},
        "api_keys_configured": {
            provider.value: settings.api_key_for(provider.value) is not None
            for provider in ModelProvider
        },
    }


@app.get("/models", response_model=ModelListResponse)
async def list_models(
    capability: str | None = Query(
        default=None,
        description="Only return models supporting this capability",
        examples=["chat", "code", "vision"],
    ),
    settings: Settings = Depends(get_settings),
):
    """
    List catalog entries, optionally filtered by capability.
    """
    models = get_orchestrator().list_models(capability)
    return ModelListResponse(
        models=[model_info_from_descriptor(m) for m in models],
        total_models=len(models),
        default_model=settings.default_model,
        fallback_model=settings.fallback_model,
    )


@app.put(
    "/models/{model_id:path}/availability",
    response_model=ModelInfo,
    responses={404: {"model": ErrorResponse}},
)
async def update_availability(model_id: str, update: AvailabilityUpdate):
    """
    Mark a model available or unavailable for selection.
    """
    orchestrator = get_orchestrator()
    if not orchestrator.set_availability(model_id, update.is_available):
        return _error(404, ErrorCodes.MODEL_NOT_FOUND, f"Model not found: {model_id}")
    return model_info_from_descriptor(orchestrator.catalog.get(model_id))


@app.post(
    "/generate",
    response_model=GenerationResult,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Generate text",
    description="Select a model, serve from cache or dispatch, with one fallback attempt.",
)
async def generate(request: GenerationRequest):
    """
    Main generation endpoint.

    Flow:
    1. Serve from cache when permitted
    2. Select the primary model from preferences
    3. Dispatch, falling back once to the fixed fallback model
    4. Return text with provenance flags
    """
    try:
        return await get_orchestrator().generate(request)
    except InvalidRequestError as e:
        return _error(400, ErrorCodes.INVALID_REQUEST, str(e))
    except AllProvidersFailedError as e:
        logger.error(f"Generation failed: {e.primary}; {e.fallback}")
        return _error(502, ErrorCodes.ALL_PROVIDERS_FAILED, str(e))


@app.delete("/cache/{key:path}", response_model=CacheDeleteResponse)
async def invalidate_cache(key: str):
    """
    Remove a cached generation.
    """
    try:
        deleted = await get_orchestrator().cache.invalidate(key)
    except CacheUnavailable as e:
        return _error(503, ErrorCodes.CACHE_UNAVAILABLE, str(e))
    return CacheDeleteResponse(key=key, deleted=deleted)


@app.get(
    "/metrics",
    response_model=MetricsResponse,
    summary="Get metrics",
    description="Retrieve aggregated generation and cost metrics.",
)
async def get_metrics():
    """
    Return aggregated metrics: request counts, cache hits, fallback use,
    token totals and estimated cost per model.
    """
    return metrics_response_from_aggregate(get_metrics_store().get_aggregated())


@app.get("/metrics/recent", response_model=list[RecentGeneration])
async def get_recent_metrics(
    limit: int = Query(default=20, ge=1, le=1000, description="Number of records"),
):
    """
    Return the most recent generations, newest first.
    """
    return recent_generations_from_metrics(get_metrics_store().get_recent(limit))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Returns a consistent error response format with the first validation
    error's details for client-side error handling.
    """
    errors = exc.errors()
    first_error = errors[0] if errors else {}

    return JSONResponse(
        status_code=422,
        content={
            "error": {
                "code": ErrorCodes.VALIDATION_ERROR,
                "message": first_error.get("msg", "Validation failed"),
                "field": ".".join(str(loc) for loc in first_error.get("loc", [])),
            }
        },
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Handle HTTP exceptions with consistent format.
    """
    detail = exc.detail
    if isinstance(detail, dict):
        return JSONResponse(status_code=exc.status_code, content={"error": detail})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": "HTTP_ERROR", "message": str(detail)}},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Logs the full exception for debugging and returns a generic error
    response to avoid leaking implementation details.
    """
    logger.exception("Unhandled exception")
    return _error(500, ErrorCodes.INTERNAL_ERROR, "An unexpected error occurred")
