"""
Metrics Module: Cost Estimation and Generation Tracking

Components:
    CostCalculator: Estimate per-request cost from catalog pricing
    CostBreakdown: Cost estimate for a single request
    MetricsStore: Thread-safe in-memory metrics aggregation
    GenerationMetric: Individual generation record
    AggregatedMetrics: Pre-computed aggregates for reporting

Singleton Access:
    get_cost_calculator(): Returns global CostCalculator instance
    get_metrics_store(): Returns global MetricsStore instance
"""

from aihub.metrics.cost import (
    CostBreakdown,
    CostCalculator,
    get_cost_calculator,
)

from aihub.metrics.store import (
    AggregatedMetrics,
    GenerationMetric,
    MetricsStore,
    get_metrics_store,
)

__all__ = [
    "CostCalculator",
    "CostBreakdown",
    "get_cost_calculator",
    "MetricsStore",
    "GenerationMetric",
    "AggregatedMetrics",
    "get_metrics_store",
]
