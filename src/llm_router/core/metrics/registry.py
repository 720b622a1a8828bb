"""Per-provider usage and cost telemetry.

One ``ProviderMetrics`` record per provider, updated on every recorded
attempt outcome. ``snapshot()`` hands out copies so callers can never mutate
live counters, and reading has no side effects.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from llm_router.core.metrics.pricing import estimate_cost
from llm_router.core.observability import MetricsCollector, get_metrics

logger = logging.getLogger(__name__)


@dataclass
class ProviderMetrics:
    """Cumulative counters for one provider."""

    provider: str
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    avg_latency_ms: float = 0.0
    estimated_cost_usd: float = 0.0
    last_error: Optional[str] = None
    last_error_at: Optional[datetime] = None
    circuit_breaker_open: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "total_requests": self.total_requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "total_input_tokens": self.total_input_tokens,
            "total_output_tokens": self.total_output_tokens,
            "avg_latency_ms": round(self.avg_latency_ms, 2),
            "estimated_cost_usd": round(self.estimated_cost_usd, 6),
            "last_error": self.last_error,
            "last_error_at": self.last_error_at.isoformat() if self.last_error_at else None,
            "circuit_breaker_open": self.circuit_breaker_open,
        }


class MetricsRegistry:
    """Owns the ProviderMetrics records for every known provider."""

    def __init__(self, providers: Iterable[str], collector: Optional[MetricsCollector] = None):
        self._metrics: Dict[str, ProviderMetrics] = {name: ProviderMetrics(provider=name) for name in providers}
        self._collector = collector or get_metrics()

    def _get(self, provider: str) -> ProviderMetrics:
        metrics = self._metrics.get(provider)
        if metrics is None:
            metrics = ProviderMetrics(provider=provider)
            self._metrics[provider] = metrics
        return metrics

    def record_success(
        self,
        provider: str,
        *,
        model: str,
        input_tokens: int,
        output_tokens: int,
        latency_ms: float,
    ) -> None:
        m = self._get(provider)
        m.total_requests += 1
        m.successful_requests += 1
        m.total_input_tokens += input_tokens
        m.total_output_tokens += output_tokens
        m.circuit_breaker_open = False

        # Rolling average over successful requests
        n = m.successful_requests
        m.avg_latency_ms = (m.avg_latency_ms * (n - 1) + latency_ms) / n

        cost = estimate_cost(model, input_tokens, output_tokens)
        if cost is not None:
            m.estimated_cost_usd += cost

        labels = {"provider": provider, "status": "success", "model": model}
        self._collector.counter("provider.requests", labels=labels)
        self._collector.timer("provider.latency_ms", latency_ms, labels={"provider": provider, "model": model})

    def record_failure(self, provider: str, *, error: str, breaker_open: bool) -> None:
        m = self._get(provider)
        m.total_requests += 1
        m.failed_requests += 1
        m.last_error = error
        m.last_error_at = datetime.now(timezone.utc)
        m.circuit_breaker_open = breaker_open

        self._collector.counter("provider.requests", labels={"provider": provider, "status": "failure"})

    def get(self, provider: str) -> ProviderMetrics:
        return replace(self._get(provider))

    def snapshot(self) -> List[ProviderMetrics]:
        """Copies of every provider's metrics, in registration order."""
        return [replace(m) for m in self._metrics.values()]
