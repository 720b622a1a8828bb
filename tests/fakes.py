"""Test doubles: scripted providers, a manual clock and a recording sleep."""

from typing import Dict, Iterable, List, Optional, Union

from llm_router.core.errors import ProviderError
from llm_router.core.providers import (
    LLMRequest,
    LLMResponse,
    ProviderClient,
    ProviderConfig,
    ProviderId,
    ReportRequest,
    ReportResult,
    TokenUsage,
)
from llm_router.core.providers.config import DEFAULT_PROVIDER_CONFIGS

Outcome = Union[str, BaseException]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Sleep replacement that records delays and advances a FakeClock."""

    def __init__(self, clock: Optional[FakeClock] = None):
        self.delays: List[float] = []
        self._clock = clock

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        if self._clock is not None:
            self._clock.advance(seconds)


class FakeProvider(ProviderClient):
    """Provider whose ``complete`` plays back scripted outcomes.

    Each outcome is either response content (str) or an exception to raise.
    When the script runs out, the last outcome repeats.
    """

    def __init__(
        self,
        provider: ProviderId,
        outcomes: Iterable[Outcome] = ("ok",),
        *,
        model: str = "gpt-4o",
        input_tokens: int = 100,
        output_tokens: int = 50,
        latency_ms: float = 10.0,
        available: bool = True,
        healthy: Union[bool, BaseException] = True,
    ):
        self.provider = provider
        self._outcomes = list(outcomes)
        self.model = model
        self.input_tokens = input_tokens
        self.output_tokens = output_tokens
        self.latency_ms = latency_ms
        self._available = available
        self._healthy = healthy
        self.calls: List[LLMRequest] = []
        self.embed_calls: List[List[str]] = []
        self.report_calls: List[ReportRequest] = []

    @property
    def is_available(self) -> bool:
        return self._available

    @property
    def supports_embeddings(self) -> bool:
        return self.provider == ProviderId.OPENAI

    @property
    def supports_reports(self) -> bool:
        return self.provider == ProviderId.CANVA

    def _next(self) -> Outcome:
        index = min(len(self.calls) - 1, len(self._outcomes) - 1)
        return self._outcomes[index]

    async def complete(self, request: LLMRequest) -> LLMResponse:
        self.calls.append(request)
        outcome = self._next()
        if isinstance(outcome, BaseException):
            raise outcome
        return LLMResponse(
            content=outcome,
            provider=self.provider,
            model=request.model or self.model,
            usage=TokenUsage.of(self.input_tokens, self.output_tokens),
            latency_ms=self.latency_ms,
        )

    async def embed(self, texts: List[str], model: Optional[str] = None) -> List[List[float]]:
        self.embed_calls.append(list(texts))
        return [[float(len(t))] for t in texts]

    async def generate_report(self, request: ReportRequest) -> ReportResult:
        self.report_calls.append(request)
        return ReportResult(design_id="design-1", url="https://example.test/view")

    async def health_check(self) -> bool:
        if isinstance(self._healthy, BaseException):
            raise self._healthy
        return self._healthy


def retryable(provider: ProviderId, status: int = 503) -> ProviderError:
    return ProviderError(f"HTTP {status}: unavailable", provider=provider.value, status_code=status, retryable=True)


def fatal(provider: ProviderId, status: int = 400) -> ProviderError:
    return ProviderError(f"HTTP {status}: bad request", provider=provider.value, status_code=status, retryable=False)


def fast_configs(**overrides) -> Dict[ProviderId, ProviderConfig]:
    """Default provider configs with a uniform 1s retry delay plus ``overrides``."""
    return {p: c.merged({"retry_delay": 1.0, **overrides}) for p, c in DEFAULT_PROVIDER_CONFIGS.items()}

