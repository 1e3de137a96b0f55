"""
Schemas module: Request and response models for the AI Hub API.
"""

from aihub.schemas.generation import (
    CACHED_MODEL_MARKER,
    # Requests
    GenerationRequest,
    AvailabilityUpdate,
    # Responses
    GenerationResult,
    ModelInfo,
    ModelListResponse,
    CacheDeleteResponse,
    # Errors
    ErrorCodes,
    ErrorDetail,
    ErrorResponse,
    # Metrics and health
    ModelMetrics,
    MetricsResponse,
    RecentGeneration,
    ComponentHealth,
    HealthResponse,
    # Conversion
    model_info_from_descriptor,
    metrics_response_from_aggregate,
    recent_generations_from_metrics,
)

__all__ = [
    "CACHED_MODEL_MARKER",
    "GenerationRequest",
    "AvailabilityUpdate",
    "GenerationResult",
    "ModelInfo",
    "ModelListResponse",
    "CacheDeleteResponse",
    "ErrorCodes",
    "ErrorDetail",
    "ErrorResponse",
    "ModelMetrics",
    "MetricsResponse",
    "RecentGeneration",
    "ComponentHealth",
    "HealthResponse",
    "model_info_from_descriptor",
    "metrics_response_from_aggregate",
    "recent_generations_from_metrics",
]
