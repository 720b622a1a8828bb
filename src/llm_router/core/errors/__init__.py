"""Unified error hierarchy for llm-router.

All custom exception classes are defined in domain-specific modules within
this package. This __init__.py re-exports everything for convenient access.

Usage:
    from llm_router.core.errors import AllProvidersFailedError, ProviderError
    from llm_router.core.errors import error_to_response
"""

from llm_router.core.errors.base import ERROR_MAPPINGS, error_to_response
from llm_router.core.errors.provider import (
    AllProvidersFailedError,
    CircuitOpenError,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from llm_router.core.errors.routing import RoutingConfigError

__all__ = [
    "ERROR_MAPPINGS",
    "error_to_response",
    "AllProvidersFailedError",
    "CircuitOpenError",
    "ProviderError",
    "ProviderTimeoutError",
    "ProviderUnavailableError",
    "RoutingConfigError",
]
