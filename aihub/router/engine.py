"""
Selection Engine - Model choice for a generation request.

The selector narrows the catalog with a sequence of advisory filters:
1. Capability match
2. Preferred providers
3. Maximum cost per 1K tokens
4. Minimum context window
5. Availability

Each filter after the first is applied only if it leaves at least one
candidate; otherwise its effect is discarded and the previous set is
kept. The survivors are ordered by the fallback strategy and the first
one wins. When nothing supports the capability, the catalog's default
entry is returned, so selection never comes back empty.

select_model() is a pure function over a catalog snapshot; select_for()
binds it to the global catalog.
"""

from enum import Enum
import logging
from typing import Callable, Sequence

from pydantic import BaseModel, ConfigDict, Field

from aihub.registry.models import ModelDescriptor, get_model_catalog

logger = logging.getLogger(__name__)


class FallbackStrategy(str, Enum):
    """Ordering applied to the candidates that survive filtering."""

    COST = "cost"  # cheapest first
    CONTEXT = "context"  # largest context window first
    AVAILABILITY = "availability"  # keep catalog order


class SelectionPreferences(BaseModel):
    """
    Caller preferences for model selection.

    Example:
        {
            "capability": "chat",
            "max_cost_per_1k_tokens": 0.001,
            "preferred_providers": ["groq", "xai"],
            "fallback_strategy": "cost"
        }
    """

    model_config = ConfigDict(frozen=True)

    capability: str = Field(
        ...,
        min_length=1,
        description="Capability tag the model must support",
    )

    max_cost_per_1k_tokens: float | None = Field(
        default=None,
        ge=0,
        description="Upper cost bound (inclusive)",
    )

    min_context_window: int | None = Field(
        default=None,
        ge=0,
        description="Lower context window bound (inclusive)",
    )

    preferred_providers: tuple[str, ...] = Field(
        default=(),
        description="Provider ids to prefer; ids no catalog entry uses are ignored",
    )

    fallback_strategy: FallbackStrategy = Field(
        default=FallbackStrategy.COST,
        description="Tie-break ordering for the remaining candidates",
    )


def _narrow(
    candidates: list[ModelDescriptor],
    keep: Callable[[ModelDescriptor], bool],
    label: str,
) -> list[ModelDescriptor]:
    """Apply a filter, reverting to the input when it would remove everything."""
    narrowed = [m for m in candidates if keep(m)]
    if narrowed:
        return narrowed
    logger.debug(f"Filter '{label}' matched nothing, keeping {len(candidates)} candidates")
    return candidates


def select_model(
    catalog: Sequence[ModelDescriptor],
    preferences: SelectionPreferences,
    default: ModelDescriptor,
) -> ModelDescriptor:
    """
    Pick the single best model for the given preferences.

    Args:
        catalog: Catalog entries in catalog order
        preferences: Caller preferences
        default: Entry returned when no model supports the capability

    Returns:
        The chosen ModelDescriptor (never None)
    """
    candidates = [m for m in catalog if m.supports(preferences.capability)]

    if preferences.preferred_providers:
        preferred = set(preferences.preferred_providers)
        candidates = _narrow(
            candidates, lambda m: m.provider.value in preferred, "providers"
        )

    if preferences.max_cost_per_1k_tokens is not None:
        max_cost = preferences.max_cost_per_1k_tokens
        candidates = _narrow(candidates, lambda m: m.cost_per_1k_tokens <= max_cost, "cost")

    if preferences.min_context_window is not None:
        min_context = preferences.min_context_window
        candidates = _narrow(
            candidates, lambda m: m.context_window >= min_context, "context"
        )

    candidates = _narrow(candidates, lambda m: m.is_available, "availability")

    match preferences.fallback_strategy:
        case FallbackStrategy.COST:
            candidates.sort(key=lambda m: m.cost_per_1k_tokens)
        case FallbackStrategy.CONTEXT:
            candidates.sort(key=lambda m: m.context_window, reverse=True)
        case FallbackStrategy.AVAILABILITY:
            pass

    if not candidates:
        logger.debug(
            f"No model supports '{preferences.capability}', using default {default.id}"
        )
        return default

    chosen = candidates[0]
    logger.debug(
        f"Selected {chosen.id} for capability '{preferences.capability}' "
        f"(strategy={preferences.fallback_strategy.value}, candidates={len(candidates)})"
    )
    return chosen


def select_for(preferences: SelectionPreferences) -> ModelDescriptor:
    """
    Select a model from the global catalog.

    Args:
        preferences: Caller preferences

    Returns:
        The chosen ModelDescriptor
    """
    catalog = get_model_catalog()
    return select_model(catalog.snapshot(), preferences, catalog.default_model)
