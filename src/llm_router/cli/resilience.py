"""Error and interrupt handling shared by CLI commands."""

import functools
import logging
from typing import Any, Callable, TypeVar

from llm_router.cli.output import emit_error, emit_response
from llm_router.core.errors import error_to_response
from llm_router.core.responses import ErrorCode, ErrorType

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def handle_router_errors(func: F) -> F:
    """Render router and configuration errors as JSON envelopes.

    Known error types go through ``error_to_response``; anything else is
    reported as INTERNAL_ERROR. Ctrl-C produces an INTERRUPTED envelope.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            emit_error("Interrupted", code="INTERRUPTED", error_type=ErrorType.INTERNAL.value)
        except Exception as e:
            response = error_to_response(e)
            if response is not None:
                emit_response(response)
                return None
            logger.exception("Unexpected CLI failure")
            emit_error(
                f"{type(e).__name__}: {e}",
                code=ErrorCode.INTERNAL_ERROR.value,
                remediation="Re-run with LLM_ROUTER_LOG_LEVEL=DEBUG for details",
            )

    return wrapper  # type: ignore[return-value]
