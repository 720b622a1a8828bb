"""Standard response envelope shared by the CLI and MCP tool surfaces."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from llm_router.core.context import get_request_id


class ErrorCode(str, Enum):
    """Machine-readable error codes for tool and CLI responses."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    ROUTING_CONFIG_ERROR = "ROUTING_CONFIG_ERROR"
    ALL_PROVIDERS_FAILED = "ALL_PROVIDERS_FAILED"
    AI_PROVIDER_ERROR = "AI_PROVIDER_ERROR"
    AI_PROVIDER_TIMEOUT = "AI_PROVIDER_TIMEOUT"
    CIRCUIT_OPEN = "CIRCUIT_OPEN"
    UNAVAILABLE = "UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorType(str, Enum):
    """Error categories for client-side handling."""

    VALIDATION = "validation"  # No retry, fix input
    NOT_FOUND = "not_found"  # No retry
    INTERNAL = "internal"  # Yes, with backoff
    UNAVAILABLE = "unavailable"  # Yes, with backoff
    AI_PROVIDER = "ai_provider"  # Retry varies by error


@dataclass
class ToolResponse:
    """
    Standard response structure for router operations.

    Attributes:
        success: Whether the operation completed successfully
        data: The primary payload
        error: Error message if success is False, None otherwise
        meta: Response metadata including version identifier
    """

    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=lambda: {"version": "response-v2"})


def _build_meta(request_id: Optional[str] = None) -> Dict[str, Any]:
    meta: Dict[str, Any] = {"version": "response-v2"}
    effective_request_id = request_id or get_request_id() or None
    if effective_request_id:
        meta["request_id"] = effective_request_id
    return meta


def success_response(
    data: Optional[Mapping[str, Any]] = None,
    *,
    request_id: Optional[str] = None,
    **fields: Any,
) -> ToolResponse:
    """Create a standardized success response.

    Args:
        data: Optional mapping used as the base payload.
        request_id: Correlation identifier propagated through logs.
        **fields: Additional payload fields (shorthand for ``data.update``).
    """
    payload: Dict[str, Any] = {}
    if data:
        payload.update(dict(data))
    if fields:
        payload.update(fields)
    return ToolResponse(success=True, data=payload, error=None, meta=_build_meta(request_id))


def error_response(
    message: str,
    *,
    data: Optional[Mapping[str, Any]] = None,
    error_code: Optional[Union[ErrorCode, str]] = None,
    error_type: Optional[Union[ErrorType, str]] = None,
    remediation: Optional[str] = None,
    details: Optional[Mapping[str, Any]] = None,
    request_id: Optional[str] = None,
) -> ToolResponse:
    """Create a standardized error response.

    Args:
        message: Human-readable description of the failure.
        data: Optional mapping with additional machine-readable context.
        error_code: Canonical error code.
        error_type: Error category.
        remediation: User-facing guidance on how to fix the issue.
        details: Nested structure describing the failure.
        request_id: Correlation identifier propagated through logs.
    """
    payload: Dict[str, Any] = {}
    if data:
        payload.update(dict(data))

    effective_error_code = error_code if error_code is not None else ErrorCode.INTERNAL_ERROR
    effective_error_type = error_type if error_type is not None else ErrorType.INTERNAL

    payload.setdefault(
        "error_code",
        effective_error_code.value if isinstance(effective_error_code, Enum) else effective_error_code,
    )
    payload.setdefault(
        "error_type",
        effective_error_type.value if isinstance(effective_error_type, Enum) else effective_error_type,
    )
    if remediation is not None:
        payload.setdefault("remediation", remediation)
    if details:
        payload.setdefault("details", dict(details))

    return ToolResponse(success=False, data=payload, error=message, meta=_build_meta(request_id))
