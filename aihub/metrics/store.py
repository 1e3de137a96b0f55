"""
Metrics Store for Generation Tracking

Aggregates per-request metrics for the /metrics endpoint. Uses
in-memory storage; the store is thread-safe using threading.Lock.
"""

import threading
from collections import defaultdict
from dataclasses import dataclass, field


@dataclass
class GenerationMetric:
    """
    Individual generation record.

    Attributes:
        timestamp: Unix timestamp when the request completed
        model_used: Model id, or "cached" for cache hits
        from_cache: Whether the text was served from the cache
        used_fallback: Whether the fixed fallback backend served the request
        latency_ms: End-to-end generation time in milliseconds
        input_tokens: Prompt tokens reported by the provider
        output_tokens: Completion tokens reported by the provider
        estimated_cost_usd: Cost estimate from catalog pricing
    """

    timestamp: float
    model_used: str
    from_cache: bool
    used_fallback: bool
    latency_ms: float
    input_tokens: int = 0
    output_tokens: int = 0
    estimated_cost_usd: float = 0.0

    @property
    def total_tokens(self) -> int:
        """Total tokens processed (input + output)."""
        return self.input_tokens + self.output_tokens


@dataclass
class _ModelAggregate:
    """Internal aggregate for per-model metrics."""

    count: int = 0
    total_tokens: int = 0
    total_cost: float = 0.0
    total_latency_ms: float = 0.0


@dataclass
class AggregatedMetrics:
    """
    Aggregated metrics snapshot for reporting.

    Attributes:
        total_requests: Total number of generations recorded
        cache_hits: Requests served from the cache
        fallback_count: Requests served by the fallback backend
        total_tokens: Tokens across all dispatched requests
        total_cost_usd: Cumulative estimated cost
        requests_by_model: Count, tokens, cost and latency per model
    """

    total_requests: int = 0
    cache_hits: int = 0
    fallback_count: int = 0
    total_tokens: int = 0
    total_cost_usd: float = 0.0
    requests_by_model: dict[str, _ModelAggregate] = field(default_factory=dict)

    @property
    def cache_hit_rate(self) -> float:
        """Fraction of requests served from the cache."""
        return self.cache_hits / self.total_requests if self.total_requests else 0.0


class MetricsStore:
    """
    Thread-safe in-memory metrics storage.

    Example:
        store = MetricsStore()
        store.record(GenerationMetric(
            timestamp=time.time(),
            model_used="groq/llama3-8b",
            from_cache=False,
            used_fallback=False,
            latency_ms=180.0,
        ))
        print(store.get_aggregated().total_requests)
    """

    def __init__(self, max_history: int = 10000):
        """
        Initialize the metrics store.

        Args:
            max_history: Maximum individual metrics to retain.
                         Aggregates are preserved regardless of this limit.
        """
        self._lock = threading.Lock()
        self._metrics: list[GenerationMetric] = []
        self._max_history = max_history

        self._total_requests = 0
        self._cache_hits = 0
        self._fallback_count = 0
        self._total_tokens = 0
        self._total_cost = 0.0
        self._by_model: dict[str, _ModelAggregate] = defaultdict(_ModelAggregate)

    def record(self, metric: GenerationMetric) -> None:
        """Record a new generation metric."""
        with self._lock:
            self._metrics.append(metric)
            if len(self._metrics) > self._max_history:
                self._metrics = self._metrics[-self._max_history :]

            self._total_requests += 1
            self._cache_hits += int(metric.from_cache)
            self._fallback_count += int(metric.used_fallback)
            self._total_tokens += metric.total_tokens
            self._total_cost += metric.estimated_cost_usd

            model_agg = self._by_model[metric.model_used]
            model_agg.count += 1
            model_agg.total_tokens += metric.total_tokens
            model_agg.total_cost += metric.estimated_cost_usd
            model_agg.total_latency_ms += metric.latency_ms

    def get_aggregated(self) -> AggregatedMetrics:
        """
        Get current aggregated metrics.

        Returns:
            AggregatedMetrics snapshot, safe to use outside the lock
        """
        with self._lock:
            return AggregatedMetrics(
                total_requests=self._total_requests,
                cache_hits=self._cache_hits,
                fallback_count=self._fallback_count,
                total_tokens=self._total_tokens,
                total_cost_usd=self._total_cost,
                requests_by_model={
                    model: _ModelAggregate(
                        count=agg.count,
                        total_tokens=agg.total_tokens,
                        total_cost=agg.total_cost,
                        total_latency_ms=agg.total_latency_ms,
                    )
                    for model, agg in self._by_model.items()
                },
            )

    def get_recent(self, count: int = 100) -> list[GenerationMetric]:
        """Get the most recent generation metrics."""
        with self._lock:
            return list(self._metrics[-count:])

    def reset(self) -> None:
        """
        Reset all metrics.

        Primarily used for testing.
        """
        with self._lock:
            self._metrics.clear()
            self._total_requests = 0
            self._cache_hits = 0
            self._fallback_count = 0
            self._total_tokens = 0
            self._total_cost = 0.0
            self._by_model.clear()


_store: MetricsStore | None = None


def get_metrics_store() -> MetricsStore:
    """
    Get the global metrics store instance.

    Returns:
        Singleton MetricsStore instance
    """
    global _store
    if _store is None:
        _store = MetricsStore()
    return _store
