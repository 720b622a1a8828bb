"""Error-to-ErrorCode mapping registry.

Provides a centralized mapping from exception types to (ErrorCode, ErrorType)
tuples so the CLI and MCP surfaces render router failures consistently.

Usage:
    from llm_router.core.errors.base import error_to_response

    try:
        await router.route(request)
    except Exception as e:
        result = error_to_response(e)
        if result is not None:
            return result
        raise  # Unknown error, re-raise
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Dict, Optional, Tuple, Type

from llm_router.core.errors.provider import (
    AllProvidersFailedError,
    CircuitOpenError,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from llm_router.core.errors.routing import RoutingConfigError
from llm_router.core.responses import ErrorCode, ErrorType, error_response

ERROR_MAPPINGS: Dict[Type[Exception], Tuple[ErrorCode, ErrorType]] = {
    # --- Provider errors ---
    ProviderError: (ErrorCode.AI_PROVIDER_ERROR, ErrorType.AI_PROVIDER),
    ProviderUnavailableError: (ErrorCode.UNAVAILABLE, ErrorType.UNAVAILABLE),
    ProviderTimeoutError: (ErrorCode.AI_PROVIDER_TIMEOUT, ErrorType.UNAVAILABLE),
    CircuitOpenError: (ErrorCode.CIRCUIT_OPEN, ErrorType.UNAVAILABLE),
    AllProvidersFailedError: (ErrorCode.ALL_PROVIDERS_FAILED, ErrorType.AI_PROVIDER),
    # --- Configuration errors ---
    RoutingConfigError: (ErrorCode.ROUTING_CONFIG_ERROR, ErrorType.VALIDATION),
}


def error_to_response(exc: Exception) -> Optional[dict]:
    """Convert a known exception to a standard error_response dict, or None if unknown.

    Looks up the exception's *exact* type in ERROR_MAPPINGS. Errors that know
    how to serialize themselves (``to_dict``) contribute their fields as
    ``details``.

    Args:
        exc: The exception to convert.

    Returns:
        A dict suitable for a tool/CLI response, or None if the exception type
        is not registered in ERROR_MAPPINGS.
    """
    mapping = ERROR_MAPPINGS.get(type(exc))
    if mapping is None:
        return None

    details = exc.to_dict() if hasattr(exc, "to_dict") else None
    code, error_type = mapping
    return asdict(error_response(str(exc), error_code=code, error_type=error_type, details=details))
