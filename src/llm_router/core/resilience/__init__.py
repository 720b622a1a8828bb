"""Resilience primitives for provider calls.

Sub-modules:
- models: CircuitState, BreakerConfig, RetryPolicy, AttemptOutcome, SleepFunc
- breaker: CircuitBreaker and per-provider CircuitBreakerRegistry
- retry: retry_with_backoff and compute_delay
- timeout: call_with_timeout (abandon-or-cancel on expiry)
"""

from llm_router.core.resilience.breaker import CircuitBreaker, CircuitBreakerRegistry
from llm_router.core.resilience.models import (
    DEFAULT_FAILURE_THRESHOLD,
    DEFAULT_FAILURE_WINDOW,
    DEFAULT_OPEN_DURATION,
    AttemptOutcome,
    BreakerConfig,
    CircuitState,
    Clock,
    RetryPolicy,
    SleepFunc,
)
from llm_router.core.resilience.retry import compute_delay, retry_with_backoff
from llm_router.core.resilience.timeout import abandoned_count, call_with_timeout

__all__ = [
    "CircuitBreaker",
    "CircuitBreakerRegistry",
    "DEFAULT_FAILURE_THRESHOLD",
    "DEFAULT_FAILURE_WINDOW",
    "DEFAULT_OPEN_DURATION",
    "AttemptOutcome",
    "BreakerConfig",
    "CircuitState",
    "Clock",
    "RetryPolicy",
    "SleepFunc",
    "compute_delay",
    "retry_with_backoff",
    "abandoned_count",
    "call_with_timeout",
]
