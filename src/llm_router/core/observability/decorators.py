"""Observability decorator for MCP tool handlers."""

import asyncio
import functools
import logging
import time
from typing import Any, Callable, Optional, TypeVar

from llm_router.core.context import request_context
from llm_router.core.observability.audit import get_audit_logger
from llm_router.core.observability.metrics import get_metrics

logger = logging.getLogger(__name__)

T = TypeVar("T")


def mcp_tool(
    tool_name: Optional[str] = None, emit_metrics: bool = True, audit: bool = True
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator for MCP tool handlers with observability.

    Automatically:
    - Establishes a request id for the invocation
    - Emits latency and status metrics
    - Creates audit log entries

    Args:
        tool_name: Override tool name (defaults to function name)
        emit_metrics: Whether to emit metrics
        audit: Whether to create audit log entries
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        name = tool_name or func.__name__

        def _record(success: bool, duration_ms: float, error_msg: Optional[str]) -> None:
            if emit_metrics:
                labels = {"tool": name, "status": "success" if success else "error"}
                get_metrics().counter("tool.invocations", labels=labels)
                get_metrics().timer("tool.latency", duration_ms, labels={"tool": name})
            if audit:
                get_audit_logger().tool_invocation(
                    tool_name=name,
                    success=success,
                    duration_ms=round(duration_ms, 2),
                    error=error_msg,
                )

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> T:
            start = time.perf_counter()
            success = True
            error_msg = None

            with request_context():
                try:
                    return await func(*args, **kwargs)  # type: ignore[misc]
                except Exception as e:
                    success = False
                    error_msg = str(e)
                    raise
                finally:
                    _record(success, (time.perf_counter() - start) * 1000, error_msg)

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> T:
            start = time.perf_counter()
            success = True
            error_msg = None

            with request_context():
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    success = False
                    error_msg = str(e)
                    raise
                finally:
                    _record(success, (time.perf_counter() - start) * 1000, error_msg)

        if asyncio.iscoroutinefunction(func):
            return async_wrapper  # type: ignore[return-value]
        return sync_wrapper

    return decorator
