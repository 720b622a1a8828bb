"""Shared utilities for HTTP-backed provider adapters.

Architecture constraints:
    - Imports only from stdlib and httpx types (no httpx.AsyncClient creation)
    - SECURITY: All error parsing redacts API keys and sensitive headers;
      never expose secrets in logs, error messages, or return values.

Utilities:
    - redact_secrets(text) -> str
    - redact_headers(headers) -> dict
    - parse_retry_after(response) -> Optional[float]
    - extract_error_message(response) -> str
    - is_retryable_status(status_code) -> bool
    - error_from_response(provider, response) -> ProviderError
    - error_from_transport(provider, exc) -> ProviderError
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Callable, Optional

import httpx

from llm_router.core.errors import ProviderError, ProviderTimeoutError

if TYPE_CHECKING:
    from llm_router.core.providers.base import ProviderId

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Regex to detect potential API keys / bearer tokens in strings
_SECRET_PATTERN = re.compile(
    r"(?i)"
    r"(?:"
    r"(?:api[_-]?key|key|token|bearer|authorization|secret|password|credential)"
    r"[\s:=]+"
    r")"
    r"['\"]?([^\s'\"&]{8,})['\"]?",
)

# Bare provider key shapes (sk-..., xai-..., AIza...)
_BARE_KEY_PATTERN = re.compile(r"\b(?:sk-[A-Za-z0-9_\-]{16,}|xai-[A-Za-z0-9]{16,}|AIza[0-9A-Za-z_\-]{20,})")

# Headers that should never appear in logs/errors
_SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "x-api-key",
        "x-goog-api-key",
        "api-key",
        "apikey",
        "cookie",
        "set-cookie",
        "proxy-authorization",
    }
)

# Transient statuses: rate limiting and upstream/server trouble (529 = Anthropic overloaded)
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504, 529})


# ---------------------------------------------------------------------------
# Secret redaction
# ---------------------------------------------------------------------------


def redact_secrets(text: str) -> str:
    """Remove API keys and sensitive tokens from a text string.

    Scans for patterns like ``api_key=...``, ``Bearer ...``, ``token: ...``
    and well-known bare key prefixes, replacing the secret with ``"****"``.
    """
    if not text:
        return text

    def _replace(match: re.Match[str]) -> str:
        full = match.group(0)
        return full.replace(match.group(1), "****")

    text = _SECRET_PATTERN.sub(_replace, text)
    return _BARE_KEY_PATTERN.sub("****", text)


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Return a copy of *headers* with sensitive values redacted."""
    return {key: ("****" if key.lower() in _SENSITIVE_HEADERS else value) for key, value in headers.items()}


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------


def parse_retry_after(response: httpx.Response) -> Optional[float]:
    """Parse a numeric ``Retry-After`` header, or return None."""
    retry_after = response.headers.get("Retry-After")
    if retry_after:
        try:
            return float(retry_after)
        except ValueError:
            pass
    return None


def extract_error_message(
    response: httpx.Response,
    *,
    provider_format: Optional[Callable[[dict[str, Any]], str]] = None,
) -> str:
    """Extract and redact an error message from an HTTP error response.

    Tries ``provider_format`` first, then the common ``{"error": {...}}`` /
    ``{"error": "..."}`` / ``{"message": "..."}`` shapes, then the raw body.
    """
    try:
        data = response.json()

        if provider_format is not None:
            result = provider_format(data)
            if result:
                return redact_secrets(result)

        error_field = data.get("error") if isinstance(data, dict) else None
        if isinstance(error_field, dict):
            msg = error_field.get("message", str(error_field))
        elif isinstance(error_field, str):
            msg = error_field
        elif isinstance(data, dict):
            msg = data.get("message", response.text[:200])
        else:
            msg = response.text[:200]

        return redact_secrets(str(msg))
    except Exception:
        text = response.text[:200] if response.text else "Unknown error"
        return redact_secrets(text)


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------


def is_retryable_status(status_code: Optional[int]) -> bool:
    return status_code in RETRYABLE_STATUS_CODES


def error_from_response(
    provider: "ProviderId",
    response: httpx.Response,
    *,
    provider_format: Optional[Callable[[dict[str, Any]], str]] = None,
) -> ProviderError:
    """Build a classified ProviderError from a non-2xx response."""
    message = extract_error_message(response, provider_format=provider_format)
    retry_after = parse_retry_after(response)
    if retry_after is not None:
        message = f"{message} (retry after {retry_after:g}s)"
    return ProviderError(
        f"HTTP {response.status_code}: {message}",
        provider=provider.value,
        status_code=response.status_code,
        retryable=is_retryable_status(response.status_code),
    )


def error_from_transport(provider: "ProviderId", exc: httpx.HTTPError) -> ProviderError:
    """Map an httpx transport exception to a ProviderError.

    Timeouts and network errors are transient; anything else is fatal.
    """
    message = redact_secrets(str(exc)) or type(exc).__name__
    if isinstance(exc, httpx.TimeoutException):
        error: ProviderError = ProviderTimeoutError(f"Request timed out: {message}", provider=provider.value)
    elif isinstance(exc, httpx.TransportError):
        error = ProviderError(
            f"Network error: {message}",
            provider=provider.value,
            retryable=True,
        )
    else:
        error = ProviderError(message, provider=provider.value, retryable=False)
    error.cause = exc
    return error
