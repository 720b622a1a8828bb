"""Unit tests for the per-provider circuit breaker.

Tests cover:
- CLOSED -> OPEN after the failure threshold
- Failure window resetting the count
- OPEN -> HALF_OPEN after open_duration, single trial slot
- Trial success/failure transitions
- Audit events on state changes
"""

import logging

from fakes import FakeClock

from llm_router.core.resilience import BreakerConfig, CircuitBreaker, CircuitBreakerRegistry, CircuitState


def _breaker(clock: FakeClock, **kwargs) -> CircuitBreaker:
    return CircuitBreaker("openai", BreakerConfig(**kwargs), clock=clock)


class TestClosedState:
    """Counting failures while closed."""

    def test_starts_closed_and_available(self):
        breaker = _breaker(FakeClock())
        assert breaker.state == CircuitState.CLOSED
        assert breaker.is_available() is True
        assert breaker.acquire() is True

    def test_opens_at_threshold(self):
        clock = FakeClock()
        breaker = _breaker(clock)
        for _ in range(4):
            breaker.record_failure()
            clock.advance(1)
        assert breaker.state == CircuitState.CLOSED

        breaker.record_failure()
        assert breaker.state == CircuitState.OPEN
        assert breaker.is_available() is False
        assert breaker.acquire() is False

    def test_success_resets_count(self):
        clock = FakeClock()
        breaker = _breaker(clock)
        for _ in range(4):
            breaker.record_failure()
        breaker.record_success()
        assert breaker.failures == 0

        for _ in range(4):
            breaker.record_failure()
        assert breaker.state == CircuitState.CLOSED

    def test_failure_after_window_restarts_count(self):
        clock = FakeClock()
        breaker = _breaker(clock)
        for _ in range(4):
            breaker.record_failure()
        clock.advance(61)
        breaker.record_failure()
        assert breaker.failures == 1
        assert breaker.state == CircuitState.CLOSED

    def test_failure_exactly_at_window_still_counts(self):
        clock = FakeClock()
        breaker = _breaker(clock)
        for _ in range(4):
            breaker.record_failure()
        clock.advance(60)
        breaker.record_failure()
        assert breaker.state == CircuitState.OPEN


class TestOpenAndHalfOpen:
    """Recovery through a single half-open trial."""

    def _tripped(self, clock: FakeClock) -> CircuitBreaker:
        breaker = _breaker(clock, failure_threshold=2)
        breaker.record_failure()
        breaker.record_failure()
        assert breaker.state == CircuitState.OPEN
        return breaker

    def test_stays_open_until_duration_strictly_elapsed(self):
        clock = FakeClock()
        breaker = self._tripped(clock)
        clock.advance(30)
        assert breaker.is_available() is False
        assert breaker.acquire() is False
        assert breaker.state == CircuitState.OPEN

    def test_is_available_does_not_transition(self):
        clock = FakeClock()
        breaker = self._tripped(clock)
        clock.advance(31)
        assert breaker.is_available() is True
        assert breaker.state == CircuitState.OPEN

    def test_acquire_moves_to_half_open_and_grants_one_trial(self):
        clock = FakeClock()
        breaker = self._tripped(clock)
        clock.advance(31)

        assert breaker.acquire() is True
        assert breaker.state == CircuitState.HALF_OPEN
        assert breaker.acquire() is False
        assert breaker.is_available() is False

    def test_trial_success_closes(self):
        clock = FakeClock()
        breaker = self._tripped(clock)
        clock.advance(31)
        breaker.acquire()

        breaker.record_success()
        assert breaker.state == CircuitState.CLOSED
        assert breaker.failures == 0
        assert breaker.acquire() is True

    def test_trial_failure_reopens_with_new_timestamp(self):
        clock = FakeClock()
        breaker = self._tripped(clock)
        clock.advance(31)
        breaker.acquire()

        breaker.record_failure()
        assert breaker.state == CircuitState.OPEN
        assert breaker.opened_at == clock.now
        clock.advance(10)
        assert breaker.acquire() is False

    def test_release_returns_trial_slot(self):
        clock = FakeClock()
        breaker = self._tripped(clock)
        clock.advance(31)
        breaker.acquire()

        breaker.release()
        assert breaker.acquire() is True

    def test_late_failure_while_open_does_not_extend(self):
        clock = FakeClock()
        breaker = self._tripped(clock)
        opened_at = breaker.opened_at
        clock.advance(5)
        breaker.record_failure()
        assert breaker.opened_at == opened_at

    def test_reset(self):
        clock = FakeClock()
        breaker = self._tripped(clock)
        breaker.reset()
        assert breaker.state == CircuitState.CLOSED
        assert breaker.is_available() is True


class TestObservability:
    def test_state_change_is_audited(self, caplog):
        clock = FakeClock()
        breaker = _breaker(clock, failure_threshold=1)
        with caplog.at_level(logging.INFO, logger="llm_router.core.observability.audit.audit"):
            breaker.record_failure()

        audits = [r for r in caplog.records if getattr(r, "audit", None)]
        assert audits
        event = audits[-1].audit
        assert event["event_type"] == "circuit_state_change"
        assert event["details"]["provider"] == "openai"
        assert event["details"]["old_state"] == "closed"
        assert event["details"]["new_state"] == "open"

    def test_state_change_emits_open_gauge(self, caplog):
        clock = FakeClock()
        breaker = _breaker(clock, failure_threshold=1, open_duration=30.0)
        with caplog.at_level(logging.INFO, logger="llm_router.core.observability.metrics"):
            breaker.record_failure()
            clock.advance(31)
            assert breaker.acquire() is True
            breaker.record_success()

        gauges = [r.metric for r in caplog.records if getattr(r, "metric", None)]
        assert [(g["name"], g["value"]) for g in gauges] == [
            ("circuit.open", 1),
            ("circuit.open", 0),
            ("circuit.open", 0),
        ]
        assert gauges[0]["type"] == "gauge"
        assert gauges[0]["labels"] == {"provider": "openai"}

    def test_trip_logs_warning(self, caplog):
        breaker = _breaker(FakeClock(), failure_threshold=1)
        with caplog.at_level(logging.WARNING, logger="llm_router.core.resilience.breaker"):
            breaker.record_failure()
        assert any("Circuit breaker opened for openai" in r.getMessage() for r in caplog.records)

    def test_to_dict(self):
        breaker = _breaker(FakeClock())
        data = breaker.to_dict()
        assert data["name"] == "openai"
        assert data["state"] == "closed"
        assert data["available"] is True
        assert data["config"]["failure_threshold"] == 5


class TestRegistry:
    def test_one_breaker_per_name(self):
        registry = CircuitBreakerRegistry(["openai", "gemini"], BreakerConfig(failure_threshold=1), clock=FakeClock())
        registry.get("openai").record_failure()
        assert registry.get("openai").is_open
        assert not registry.get("gemini").is_open

        states = registry.states()
        assert states["openai"]["state"] == "open"
        assert states["gemini"]["state"] == "closed"

        registry.reset_all()
        assert not registry.get("openai").is_open
