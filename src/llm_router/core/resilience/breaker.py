"""Per-provider circuit breaker.

State machine:

    CLOSED --(failure_threshold consecutive failures)--> OPEN
    OPEN --(open_duration elapsed, next eligibility check)--> HALF_OPEN
    HALF_OPEN --(trial success)--> CLOSED
    HALF_OPEN --(trial failure)--> OPEN

Two eligibility queries are exposed. ``is_available`` is a pure read used to
filter candidate chains. ``acquire`` is the mutating check made immediately
before dispatch: it performs the OPEN -> HALF_OPEN transition and hands out
the single half-open trial slot. Callers must not await between ``acquire``
and dispatching the request.
"""

import logging
import time
from typing import Any, Dict, Iterable, Optional

from llm_router.core.observability import get_audit_logger, get_metrics
from llm_router.core.resilience.models import BreakerConfig, CircuitState, Clock

logger = logging.getLogger(__name__)


class CircuitBreaker:
    """Circuit breaker for a single provider.

    Not locked: all mutation happens synchronously on the event loop thread,
    between suspension points.
    """

    def __init__(
        self,
        name: str,
        config: Optional[BreakerConfig] = None,
        *,
        clock: Optional[Clock] = None,
    ):
        self.name = name
        self.config = config or BreakerConfig()
        self._clock = clock or time.monotonic
        self.state = CircuitState.CLOSED
        self.failures = 0
        self.last_failure_at: Optional[float] = None
        self.opened_at: Optional[float] = None
        self._trial_in_flight = False

    def _open_elapsed(self, now: float) -> bool:
        return self.opened_at is not None and now - self.opened_at > self.config.open_duration

    def is_available(self) -> bool:
        """Return whether a request could be dispatched right now. Never mutates."""
        if self.state == CircuitState.CLOSED:
            return True
        if self.state == CircuitState.OPEN:
            return self._open_elapsed(self._clock())
        return not self._trial_in_flight

    def acquire(self) -> bool:
        """Claim permission to dispatch one request.

        Returns False while OPEN (before ``open_duration`` elapses) and while
        a half-open trial is already in flight.
        """
        if self.state == CircuitState.CLOSED:
            return True

        if self.state == CircuitState.OPEN:
            if not self._open_elapsed(self._clock()):
                return False
            self._transition(CircuitState.HALF_OPEN)

        if self._trial_in_flight:
            return False
        self._trial_in_flight = True
        return True

    def release(self) -> None:
        """Give back an unused half-open trial slot."""
        self._trial_in_flight = False

    def record_success(self) -> None:
        self._trial_in_flight = False
        self.failures = 0
        if self.state != CircuitState.CLOSED:
            self._transition(CircuitState.CLOSED)

    def record_failure(self) -> None:
        now = self._clock()
        self._trial_in_flight = False

        if self.state == CircuitState.HALF_OPEN:
            self.last_failure_at = now
            self._trip(now, reason="half_open_trial_failed")
            return

        if self.state == CircuitState.OPEN:
            # Late result from an abandoned attempt; the breaker is already open.
            self.last_failure_at = now
            return

        if self.last_failure_at is not None and now - self.last_failure_at > self.config.failure_window:
            self.failures = 0
        self.failures += 1
        self.last_failure_at = now

        if self.failures >= self.config.failure_threshold:
            self._trip(now, reason="failure_threshold")

    def reset(self) -> None:
        """Manually reset breaker to CLOSED state."""
        self.state = CircuitState.CLOSED
        self.failures = 0
        self.last_failure_at = None
        self.opened_at = None
        self._trial_in_flight = False

    def _trip(self, now: float, *, reason: str) -> None:
        self.opened_at = now
        self._transition(CircuitState.OPEN, reason=reason)
        logger.warning(
            "Circuit breaker opened for %s after %d failures (%s)",
            self.name,
            self.failures,
            reason,
        )

    def _transition(self, new_state: CircuitState, **details: Any) -> None:
        old_state = self.state
        self.state = new_state
        if old_state != new_state:
            get_audit_logger().circuit_state_change(
                self.name,
                old_state.value,
                new_state.value,
                failures=self.failures,
                **details,
            )
            get_metrics().gauge("circuit.open", int(new_state == CircuitState.OPEN), labels={"provider": self.name})

    @property
    def is_open(self) -> bool:
        return self.state == CircuitState.OPEN

    def to_dict(self) -> Dict[str, Any]:
        """Serialize breaker state for observability."""
        return {
            "name": self.name,
            "state": self.state.value,
            "failures": self.failures,
            "available": self.is_available(),
            "config": {
                "failure_threshold": self.config.failure_threshold,
                "failure_window": self.config.failure_window,
                "open_duration": self.config.open_duration,
            },
        }


class CircuitBreakerRegistry:
    """One breaker per provider, created eagerly for every known name."""

    def __init__(
        self,
        names: Iterable[str],
        config: Optional[BreakerConfig] = None,
        *,
        clock: Optional[Clock] = None,
    ):
        self._config = config or BreakerConfig()
        self._clock = clock
        self._breakers: Dict[str, CircuitBreaker] = {
            name: CircuitBreaker(name, self._config, clock=clock) for name in names
        }

    def get(self, name: str) -> CircuitBreaker:
        breaker = self._breakers.get(name)
        if breaker is None:
            breaker = CircuitBreaker(name, self._config, clock=self._clock)
            self._breakers[name] = breaker
        return breaker

    def states(self) -> Dict[str, Dict[str, Any]]:
        return {name: breaker.to_dict() for name, breaker in self._breakers.items()}

    def reset_all(self) -> None:
        for breaker in self._breakers.values():
            breaker.reset()
