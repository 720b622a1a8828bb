"""Usage, latency and cost accounting per provider."""

from llm_router.core.metrics.pricing import COST_PER_1K_TOKENS, ModelPricing, estimate_cost
from llm_router.core.metrics.registry import MetricsRegistry, ProviderMetrics

__all__ = [
    "COST_PER_1K_TOKENS",
    "ModelPricing",
    "estimate_cost",
    "MetricsRegistry",
    "ProviderMetrics",
]
