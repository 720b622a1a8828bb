"""Per-attempt timeout.

The attempt is raced against a timer with ``asyncio.wait``. On timeout the
losing call is abandoned by default: it keeps running in the background and
its eventual result is discarded. Pass ``cancel_on_timeout=True`` to cancel
it instead.
"""

import asyncio
import logging
import time
from typing import Awaitable, Optional, Set, TypeVar

from llm_router.core.errors import ProviderTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Strong references keep abandoned attempts alive until they settle.
_abandoned: Set["asyncio.Future"] = set()


def _drain_abandoned(task: "asyncio.Future") -> None:
    _abandoned.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Abandoned provider attempt finished with %s: %s", type(exc).__name__, exc)


def abandoned_count() -> int:
    """Number of timed-out attempts still running in the background."""
    return len(_abandoned)


async def call_with_timeout(
    awaitable: Awaitable[T],
    timeout: Optional[float],
    *,
    provider: str,
    cancel_on_timeout: bool = False,
) -> T:
    """Await ``awaitable`` for at most ``timeout`` seconds.

    Raises:
        ProviderTimeoutError: Attempt did not finish in time (retryable).
    """
    task = asyncio.ensure_future(awaitable)
    if timeout is None:
        return await task

    start = time.monotonic()
    try:
        done, _ = await asyncio.wait({task}, timeout=max(timeout, 0.0))
    except asyncio.CancelledError:
        task.cancel()
        raise

    if task in done:
        return task.result()

    elapsed = time.monotonic() - start
    if cancel_on_timeout:
        task.cancel()
    else:
        _abandoned.add(task)
        task.add_done_callback(_drain_abandoned)

    raise ProviderTimeoutError(
        f"{provider} timed out after {timeout:.1f}s",
        provider=provider,
        elapsed=elapsed,
        timeout=timeout,
    )
