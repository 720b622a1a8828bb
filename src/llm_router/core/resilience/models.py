"""Resilience data models, enums, and protocols.

Defines the core types used across the resilience sub-package:
- CircuitState enum for breaker state
- BreakerConfig for breaker thresholds
- RetryPolicy for backoff tuning
- AttemptOutcome for a single provider attempt
- SleepFunc / Clock protocols for injectable time
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, Protocol, TypeVar

from llm_router.core.errors import ProviderError

T = TypeVar("T")

DEFAULT_FAILURE_THRESHOLD = 5
DEFAULT_FAILURE_WINDOW = 60.0
DEFAULT_OPEN_DURATION = 30.0


class CircuitState(str, Enum):
    """Circuit breaker state."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class BreakerConfig:
    """Circuit breaker thresholds, shared by every provider's breaker.

    A failure arriving more than ``failure_window`` seconds after the
    previous one starts a fresh count.
    """

    failure_threshold: int = DEFAULT_FAILURE_THRESHOLD
    failure_window: float = DEFAULT_FAILURE_WINDOW
    open_duration: float = DEFAULT_OPEN_DURATION


@dataclass
class RetryPolicy:
    """Backoff tuning for same-provider retries.

    Delay before retry ``k`` (1-indexed) is ``base_delay * 2 ** (k - 1)``.
    ``jitter`` is a fractional spread around that delay (0.0 disables it,
    0.5 => 50-150%).
    """

    max_retries: int = 3
    base_delay: float = 1.0
    jitter: float = 0.0

    def delay_for(self, retry_number: int) -> float:
        return self.base_delay * (2 ** (retry_number - 1))


@dataclass
class AttemptOutcome(Generic[T]):
    """Result of one or more attempts against a single provider."""

    value: Optional[T] = None
    error: Optional[ProviderError] = None
    attempts: int = 0

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.attempts > 0


class SleepFunc(Protocol):
    """Protocol for injectable sleep function."""

    async def __call__(self, seconds: float) -> None: ...


class Clock(Protocol):
    """Protocol for injectable monotonic clock."""

    def __call__(self) -> float: ...
