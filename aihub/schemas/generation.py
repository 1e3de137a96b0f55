"""
Pydantic Schemas for the Generation API

This module defines the request and response models for the AI Hub:
- GenerationRequest: Prompt, optional system instruction, selection preferences
- GenerationResult: Generated text with provenance flags
- Model listing and availability update models
- Error, metrics and health check schemas
"""

from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, ConfigDict, Field

from aihub.router.engine import SelectionPreferences

if TYPE_CHECKING:
    from aihub.metrics.store import AggregatedMetrics, GenerationMetric
    from aihub.registry.models import ModelDescriptor


CACHED_MODEL_MARKER = "cached"


# =============================================================================
# REQUEST MODELS
# =============================================================================


class GenerationRequest(BaseModel):
    """
    Request body for the /generate endpoint.

    The prompt is validated by the orchestrator rather than here, so an
    empty prompt is reported as INVALID_REQUEST on every entry point.

    Example:
        {
            "prompt": "Summarize the release notes",
            "system": "You are a concise assistant.",
            "preferences": {"capability": "chat", "fallback_strategy": "cost"},
            "cache_key": "release-notes-summary",
            "use_cache": true
        }
    """

    prompt: str = Field(
        ...,
        description="User prompt to generate from",
    )

    system: str | None = Field(
        default=None,
        description="Optional system instruction sent before the prompt",
    )

    preferences: SelectionPreferences = Field(
        ...,
        description="Model selection preferences",
    )

    cache_key: str | None = Field(
        default=None,
        description="Key for caching the generated text",
    )

    use_cache: bool = Field(
        default=True,
        description="Read from and write to the cache when a key is given",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "prompt": "Suggest three follow-up tasks for: write release notes",
                    "preferences": {"capability": "chat"},
                    "cache_key": "followups:release-notes",
                }
            ]
        }
    )


class AvailabilityUpdate(BaseModel):
    """Request body for marking a model available or unavailable."""

    is_available: bool = Field(..., description="New availability flag")


# =============================================================================
# RESPONSE MODELS
# =============================================================================


class GenerationResult(BaseModel):
    """
    Outcome of a generation request.

    model_used is a catalog id, the literal "cached" for cache hits, or
    the fallback model id when used_fallback is set.
    """

    text: str = Field(..., description="Generated text")

    model_used: str = Field(..., description="Model id, or 'cached'")

    from_cache: bool = Field(..., description="Served from the cache")

    used_fallback: bool = Field(
        default=False,
        description="Served by the fallback backend after the primary failed",
    )


class ModelInfo(BaseModel):
    """Catalog entry as exposed by the API."""

    id: str
    provider: str
    name: str
    capabilities: list[str]
    cost_per_1k_tokens: float
    context_window: int
    is_available: bool


class ModelListResponse(BaseModel):
    """Response from GET /models."""

    models: list[ModelInfo]
    total_models: int
    default_model: str
    fallback_model: str


class CacheDeleteResponse(BaseModel):
    """Response from DELETE /cache/{key}."""

    key: str
    deleted: bool


# =============================================================================
# ERROR MODELS
# =============================================================================


class ErrorCodes:
    """
    Standard error codes for API responses.

    These codes enable programmatic error handling by clients
    without parsing human-readable messages.
    """

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    MODEL_NOT_FOUND = "MODEL_NOT_FOUND"
    ALL_PROVIDERS_FAILED = "ALL_PROVIDERS_FAILED"
    CACHE_UNAVAILABLE = "CACHE_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorDetail(BaseModel):
    """Machine-readable code, message and optional field for an error."""

    code: str = Field(..., description="Machine-readable error code")

    message: str = Field(..., description="Human-readable error message")

    field: str | None = Field(
        default=None,
        description="Field that caused the error (for validation errors)",
    )


class ErrorResponse(BaseModel):
    """
    Standard error response format for all API errors.

    Example:
        {"error": {"code": "INVALID_REQUEST", "message": "Prompt is required"}}
    """

    error: ErrorDetail


# =============================================================================
# METRICS MODELS
# =============================================================================


class ModelMetrics(BaseModel):
    """Aggregated metrics for one model (or the "cached" marker)."""

    model_id: str
    request_count: int = Field(..., ge=0)
    total_tokens: int = Field(..., ge=0)
    total_cost_usd: float = Field(..., ge=0.0)
    avg_latency_ms: float = Field(..., ge=0.0)


class MetricsResponse(BaseModel):
    """Response from the /metrics endpoint."""

    total_requests: int = Field(..., ge=0)
    cache_hits: int = Field(..., ge=0)
    cache_hit_rate: float = Field(..., ge=0.0, le=1.0)
    fallback_count: int = Field(..., ge=0)
    total_tokens: int = Field(..., ge=0)
    total_cost_usd: float = Field(..., ge=0.0)
    models: list[ModelMetrics] = Field(default_factory=list)


class RecentGeneration(BaseModel):
    """One recorded generation, as returned by /metrics/recent."""

    timestamp: float
    model_used: str
    from_cache: bool
    used_fallback: bool
    latency_ms: float = Field(..., ge=0.0)
    total_tokens: int = Field(..., ge=0)
    estimated_cost_usd: float = Field(..., ge=0.0)


# =============================================================================
# HEALTH MODELS
# =============================================================================


class ComponentHealth(BaseModel):
    """Health status of an individual component (catalog, cache)."""

    name: str

    status: Literal["healthy", "degraded", "unhealthy"]

    message: str | None = None


class HealthResponse(BaseModel):
    """Response from the /health endpoint."""

    status: Literal["healthy", "degraded", "unhealthy"]

    service: str = "ai-hub"

    version: str

    components: list[ComponentHealth] = Field(default_factory=list)

    uptime_seconds: float | None = Field(default=None, ge=0.0)


# =============================================================================
# CONVERSION UTILITIES
# =============================================================================


def model_info_from_descriptor(model: "ModelDescriptor") -> ModelInfo:
    """Convert a catalog descriptor to its API representation."""
    return ModelInfo(
        id=model.id,
        provider=model.provider.value,
        name=model.name,
        capabilities=sorted(model.capabilities),
        cost_per_1k_tokens=model.cost_per_1k_tokens,
        context_window=model.context_window,
        is_available=model.is_available,
    )


def metrics_response_from_aggregate(aggregated: "AggregatedMetrics") -> MetricsResponse:
    """Convert a metrics store snapshot to the /metrics response."""
    return MetricsResponse(
        total_requests=aggregated.total_requests,
        cache_hits=aggregated.cache_hits,
        cache_hit_rate=round(aggregated.cache_hit_rate, 4),
        fallback_count=aggregated.fallback_count,
        total_tokens=aggregated.total_tokens,
        total_cost_usd=round(aggregated.total_cost_usd, 10),
        models=[
            ModelMetrics(
                model_id=model_id,
                request_count=agg.count,
                total_tokens=agg.total_tokens,
                total_cost_usd=round(agg.total_cost, 10),
                avg_latency_ms=round(agg.total_latency_ms / agg.count, 2)
                if agg.count
                else 0.0,
            )
            for model_id, agg in sorted(aggregated.requests_by_model.items())
        ],
    )


def recent_generations_from_metrics(
    metrics: list["GenerationMetric"],
) -> list[RecentGeneration]:
    """Convert stored generation records, newest first."""
    return [
        RecentGeneration(
            timestamp=m.timestamp,
            model_used=m.model_used,
            from_cache=m.from_cache,
            used_fallback=m.used_fallback,
            latency_ms=round(m.latency_ms, 2),
            total_tokens=m.total_tokens,
            estimated_cost_usd=m.estimated_cost_usd,
        )
        for m in reversed(metrics)
    ]
