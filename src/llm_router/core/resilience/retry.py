"""Same-provider retry with exponential backoff.

Invoked by the router only after a provider attempt has already failed with
a retryable error. Never raises an error of its own: the outcome carries
either the successful value or the last ProviderError seen.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional, TypeVar

from llm_router.core.errors import CircuitOpenError, ProviderError
from llm_router.core.observability import audit_log
from llm_router.core.resilience.models import AttemptOutcome, RetryPolicy, SleepFunc

logger = logging.getLogger(__name__)

T = TypeVar("T")


def compute_delay(policy: RetryPolicy, retry_number: int, rng: Optional[random.Random] = None) -> float:
    """Return the sleep before retry ``retry_number`` (1-indexed).

    Pure exponential when ``policy.jitter`` is 0.
    """
    delay = policy.delay_for(retry_number)
    if policy.jitter > 0:
        _rng = rng or random.Random()
        spread = min(policy.jitter, 1.0)
        delay = delay * (1.0 - spread + 2 * spread * _rng.random())
    return delay


async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    *,
    provider: str,
    first_error: ProviderError,
    policy: RetryPolicy,
    stop_when: Optional[Callable[[], bool]] = None,
    time_left: Optional[Callable[[], float]] = None,
    rng: Optional[random.Random] = None,
    sleep_func: Optional[SleepFunc] = None,
) -> AttemptOutcome[T]:
    """Retry a provider call after a retryable failure.

    Args:
        func: Performs one attempt (no arguments; use a closure for args).
            Must raise ProviderError on failure.
        provider: Provider name, for logging and audit.
        first_error: The retryable error from the initial attempt.
        policy: Retry count and backoff tuning.
        stop_when: Checked before each sleep; returning True abandons the
            provider (the router passes "breaker is open").
        time_left: Returns the seconds left in the caller's budget. A retry
            whose backoff would not finish inside it is skipped, so the
            last real error is kept.
        rng: Injectable Random instance for deterministic jitter.
        sleep_func: Injectable sleep function for time control in tests.

    Returns:
        AttemptOutcome with ``attempts`` counting the initial call.

    Example:
        >>> outcome = await retry_with_backoff(
        ...     lambda: attempt(provider, request),
        ...     provider="openai",
        ...     first_error=err,
        ...     policy=RetryPolicy(max_retries=3, base_delay=1.0),
        ... )
    """
    _sleep = sleep_func or asyncio.sleep
    last_error = first_error
    attempts = 1

    for retry_number in range(1, policy.max_retries + 1):
        if not last_error.retryable or isinstance(last_error, CircuitOpenError):
            break
        if stop_when is not None and stop_when():
            logger.debug("Stopping retries for %s: circuit open", provider)
            break

        delay = compute_delay(policy, retry_number, rng)
        if time_left is not None and delay >= time_left():
            logger.debug("Stopping retries for %s: %.2fs backoff exceeds remaining budget", provider, delay)
            break
        audit_log(
            "retry_attempt",
            provider=provider,
            attempt=retry_number,
            max_retries=policy.max_retries,
            delay_ms=int(delay * 1000),
            error=last_error.message,
        )
        await _sleep(delay)

        attempts += 1
        try:
            value = await func()
        except ProviderError as e:
            last_error = e
            continue
        return AttemptOutcome(value=value, error=None, attempts=attempts)

    return AttemptOutcome(value=None, error=last_error, attempts=attempts)
