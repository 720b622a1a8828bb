"""Provider call error classes.

Every failure an adapter can report to the router is a ``ProviderError``.
The ``retryable`` flag is the adapter's classification of the transport
outcome and is the only thing the router consults when deciding whether to
retry the same provider.
"""

from typing import Any, Dict, List, Optional, Sequence


class ProviderError(RuntimeError):
    """Base exception for a failed provider call.

    Attributes:
        provider: Provider identifier that produced the failure
        status_code: HTTP status returned by the backend, if any
        retryable: Whether the same provider may be retried
        cause: Underlying exception, if this wraps one
    """

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        retryable: bool = False,
        cause: Optional[BaseException] = None,
    ):
        self.provider = provider
        self.status_code = status_code
        self.retryable = retryable
        self.cause = cause
        super().__init__(message)

    @property
    def message(self) -> str:
        return str(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: Dict[str, Any] = {
            "provider": self.provider,
            "message": self.message,
            "retryable": self.retryable,
            "error_class": type(self).__name__,
        }
        if self.status_code is not None:
            result["status_code"] = self.status_code
        return result


class ProviderUnavailableError(ProviderError):
    """Raised when a provider is not registered or has no credentials."""


class CircuitOpenError(ProviderError):
    """Raised when a provider's circuit breaker refuses dispatch.

    Recorded in the aggregate failure when a candidate passed the initial
    chain filter but lost its half-open trial slot (or reopened) before its
    turn came.
    """

    def __init__(self, message: str, *, provider: Optional[str] = None):
        super().__init__(message, provider=provider, retryable=True)


class ProviderTimeoutError(ProviderError):
    """Raised when a provider attempt exceeds its allotted time.

    Timeouts are always retryable.

    Attributes:
        provider: Provider that timed out
        elapsed: Actual elapsed time in seconds before timeout
        timeout: Configured timeout value in seconds
    """

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        elapsed: Optional[float] = None,
        timeout: Optional[float] = None,
    ):
        super().__init__(message, provider=provider, retryable=True)
        self.elapsed = elapsed
        self.timeout = timeout


class AllProvidersFailedError(RuntimeError):
    """Raised when every candidate in a routing chain has been exhausted.

    Attributes:
        task_type: Task identifier the request was routed for
        errors: One ProviderError per attempted provider, in attempt order
    """

    def __init__(self, task_type: str, errors: Sequence[ProviderError]):
        self.task_type = task_type
        self.errors: List[ProviderError] = list(errors)
        summary = "; ".join(f"{e.provider}: {e.message}" for e in self.errors)
        super().__init__(f"All providers failed for {task_type}: {summary}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "task_type": self.task_type,
            "errors": [e.to_dict() for e in self.errors],
        }
