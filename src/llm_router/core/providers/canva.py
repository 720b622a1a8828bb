"""Canva Connect adapter for report generation.

Report-only: it fills a brand template through the autofill job API and
polls until the design is ready. It never serves completions and is kept
out of the router's safety-net chain.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from llm_router.core.errors import ProviderError
from llm_router.core.providers.base import LLMRequest, LLMResponse, ProviderId, ReportRequest, ReportResult
from llm_router.core.providers.config import ProviderConfig
from llm_router.core.providers.http import HTTPProviderClient
from llm_router.core.resilience.models import SleepFunc

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_MAX_POLLS = 30


class CanvaProvider(HTTPProviderClient):
    provider = ProviderId.CANVA
    default_base_url = "https://api.canva.com/rest/v1"

    def __init__(
        self,
        api_key: Optional[str],
        config: Optional[ProviderConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_polls: int = DEFAULT_MAX_POLLS,
        sleep_func: Optional[SleepFunc] = None,
    ):
        super().__init__(api_key, config, transport=transport)
        self._poll_interval = poll_interval
        self._max_polls = max_polls
        self._sleep = sleep_func or asyncio.sleep

    @property
    def supports_reports(self) -> bool:
        return True

    async def complete(self, request: LLMRequest) -> LLMResponse:
        raise ProviderError(
            "canva does not serve completions",
            provider=self.provider.value,
            retryable=False,
        )

    async def health_check(self) -> bool:
        try:
            await self._request("GET", "/users/me")
            return True
        except Exception as e:
            logger.warning(f"Health check failed for {self.provider.value}: {e}")
            return False

    async def generate_report(self, request: ReportRequest) -> ReportResult:
        """Autofill a brand template and wait for the resulting design.

        Raises:
            ProviderError: Job creation failed, the job failed, or it did not
                finish within ``max_polls`` polls (retryable).
        """
        payload: Dict[str, Any] = {
            "brand_template_id": request.template_id,
            "title": request.title,
            "data": {name: {"type": "text", "text": value} for name, value in request.fields.items()},
        }
        data = await self._post("/autofills", payload)
        job = data.get("job") or {}
        job_id = job.get("id")
        if not job_id:
            raise ProviderError("Autofill response had no job id", provider=self.provider.value)

        for _ in range(self._max_polls):
            status = job.get("status")
            if status == "success":
                return self._result(job)
            if status == "failed":
                error = job.get("error") or {}
                raise ProviderError(
                    f"Autofill job {job_id} failed: {error.get('message', 'unknown error')}",
                    provider=self.provider.value,
                    retryable=False,
                )
            await self._sleep(self._poll_interval)
            job = (await self._request("GET", f"/autofills/{job_id}")).get("job") or {}

        raise ProviderError(
            f"Autofill job {job_id} did not finish after {self._max_polls} polls",
            provider=self.provider.value,
            retryable=True,
        )

    @staticmethod
    def _result(job: Dict[str, Any]) -> ReportResult:
        design = (job.get("result") or {}).get("design") or {}
        urls = design.get("urls") or {}
        return ReportResult(
            design_id=str(design.get("id", "")),
            url=urls.get("view_url") or design.get("url"),
            edit_url=urls.get("edit_url"),
            status="success",
        )
