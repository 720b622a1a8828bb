"""Common base for httpx-backed adapters.

Handles credentials, the per-provider concurrency ceiling, JSON POST/GET with
error classification, and latency measurement. Subclasses only build
payloads and parse responses.
"""

import asyncio
import logging
import time
from typing import Any, Dict, Mapping, Optional

import httpx

from llm_router.core.errors import ProviderError
from llm_router.core.providers.base import ProviderClient, ProviderId
from llm_router.core.providers.config import PROVIDER_ENV_KEYS, ProviderConfig, get_provider_config
from llm_router.core.providers.shared import error_from_response, error_from_transport, redact_headers

logger = logging.getLogger(__name__)


class HTTPProviderClient(ProviderClient):
    """Base class for adapters that talk JSON over HTTPS.

    Args:
        api_key: Credential for the backend; None means unavailable
        config: Provider configuration (defaults to the built-in one)
        transport: Optional httpx transport, mainly for tests
    """

    provider: ProviderId
    default_base_url: str = ""

    def __init__(
        self,
        api_key: Optional[str],
        config: Optional[ProviderConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key
        self.config = config or get_provider_config(self.provider)
        self._base_url = (self.config.base_url or self.default_base_url).rstrip("/")
        self._transport = transport
        self._semaphore = asyncio.Semaphore(max(1, self.config.max_concurrent))

    @property
    def is_available(self) -> bool:
        return bool(self._api_key)

    @property
    def default_model(self) -> str:
        return self.config.default_model

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    def _error_format(self, data: Dict[str, Any]) -> str:
        """Hook for provider-specific error JSON shapes."""
        return ""

    def _require_key(self) -> None:
        if not self._api_key:
            raise ProviderError(
                f"{PROVIDER_ENV_KEYS[self.provider]} not configured",
                provider=self.provider.value,
                retryable=False,
            )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Mapping[str, Any]] = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Send one request and return the decoded JSON body.

        Raises:
            ProviderError: Non-2xx status or transport failure, classified
                retryable/fatal.
        """
        self._require_key()
        url = f"{self._base_url}{path}"
        request_headers = dict(headers) if headers is not None else self._headers()
        logger.debug("%s %s %s headers=%s", self.provider.value, method, url, redact_headers(request_headers))

        async with self._semaphore:
            try:
                async with httpx.AsyncClient(
                    timeout=timeout or self.config.timeout,
                    transport=self._transport,
                ) as client:
                    response = await client.request(method, url, json=json, params=params, headers=request_headers)
            except httpx.HTTPError as e:
                raise error_from_transport(self.provider, e) from e

        if response.status_code >= 400:
            error = error_from_response(self.provider, response, provider_format=self._error_format)
            logger.debug("%s returned %s: %s", self.provider.value, response.status_code, error)
            raise error

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(
                f"Invalid JSON in response: {e}",
                provider=self.provider.value,
                status_code=response.status_code,
                retryable=False,
                cause=e,
            ) from e

    async def _post(self, path: str, payload: Mapping[str, Any], **kwargs: Any) -> Dict[str, Any]:
        return await self._request("POST", path, json=payload, **kwargs)

    @staticmethod
    def _elapsed_ms(start: float) -> float:
        return (time.monotonic() - start) * 1000
