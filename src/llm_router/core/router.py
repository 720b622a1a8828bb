"""Multi-provider request router.

Routes each request to the best provider for its task with automatic
fallback, per-provider circuit breakers, same-provider retry with
exponential backoff, per-attempt timeouts and usage/cost telemetry.

Example:
    from llm_router import LLMRequest, get_router

    response = await get_router().route(
        LLMRequest(task_type="deal_analysis", system_prompt="...", user_prompt="...")
    )
"""

import asyncio
import logging
import random
import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from llm_router.core.context import request_context
from llm_router.core.errors import (
    AllProvidersFailedError,
    CircuitOpenError,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    RoutingConfigError,
)
from llm_router.core.metrics import MetricsRegistry, ProviderMetrics
from llm_router.core.observability import audit_log, get_audit_logger
from llm_router.core.providers import (
    REPORT_ONLY_PROVIDERS,
    LLMRequest,
    LLMResponse,
    ProviderClient,
    ProviderConfig,
    ProviderId,
    ReportRequest,
    ReportResult,
    build_provider_clients,
    get_provider_config,
)
from llm_router.core.resilience import (
    AttemptOutcome,
    BreakerConfig,
    CircuitBreakerRegistry,
    Clock,
    RetryPolicy,
    SleepFunc,
    call_with_timeout,
    retry_with_backoff,
)
from llm_router.core.routing import RoutingRule, RoutingTable, TaskType, merge_rule_defaults, task_key

logger = logging.getLogger(__name__)

DEFAULT_HEALTH_CHECK_TIMEOUT = 15.0


@dataclass
class RouterSettings:
    """Router-wide behaviour that is not specific to one provider.

    Attributes:
        breaker: Thresholds shared by every provider's circuit breaker
        chain_deadline: Overall budget in seconds for one ``route()`` call
            (None = no chain-level limit)
        cancel_on_timeout: Cancel timed-out attempts instead of abandoning them
        health_check_timeout: Per-provider limit for ``health_check()``
        retry_jitter: Fractional jitter applied to retry delays (0 = none)
    """

    breaker: BreakerConfig = field(default_factory=BreakerConfig)
    chain_deadline: Optional[float] = None
    cancel_on_timeout: bool = False
    health_check_timeout: float = DEFAULT_HEALTH_CHECK_TIMEOUT
    retry_jitter: float = 0.0


class Router:
    """Central orchestration engine.

    Args:
        rules: Routing rules (defaults to the built-in table). Validated
            immediately; a missing built-in task raises RoutingConfigError.
        provider_configs: Per-provider configuration overrides.
        providers: Pre-built clients. When given, credentials are not read
            from the environment.
        env: Credential source used when ``providers`` is not given.
        settings: Router-wide settings.
        clock: Monotonic clock for breakers and the chain deadline.
        sleep_func: Sleep used between retries.
        rng: Random source for retry jitter.
    """

    def __init__(
        self,
        rules: Optional[Iterable[RoutingRule]] = None,
        *,
        provider_configs: Optional[Mapping[ProviderId, ProviderConfig]] = None,
        providers: Optional[Mapping[ProviderId, ProviderClient]] = None,
        env: Optional[Mapping[str, str]] = None,
        settings: Optional[RouterSettings] = None,
        clock: Optional[Clock] = None,
        sleep_func: Optional[SleepFunc] = None,
        rng: Optional[random.Random] = None,
    ):
        self._table = RoutingTable(rules)
        self._provider_configs = dict(provider_configs or {})
        self._injected_providers = dict(providers) if providers is not None else None
        self._env = env
        self.settings = settings or RouterSettings()
        self._clock = clock or time.monotonic
        self._sleep = sleep_func or asyncio.sleep
        self._rng = rng

        self._initialized = False
        self._providers: Dict[ProviderId, ProviderClient] = {}
        self._breakers = CircuitBreakerRegistry([p.value for p in ProviderId], self.settings.breaker, clock=self._clock)
        self._metrics = MetricsRegistry([p.value for p in ProviderId])

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def ensure_initialized(self) -> None:
        """Register provider clients. Idempotent."""
        if self._initialized:
            return
        self._initialized = True

        if self._injected_providers is not None:
            candidates = self._injected_providers
        else:
            candidates = build_provider_clients(self._provider_configs, env=self._env)

        self._providers = {p: candidates[p] for p in ProviderId if p in candidates and candidates[p].is_available}
        logger.info(
            "Router initialized with %d providers: %s",
            len(self._providers),
            ", ".join(p.value for p in self._providers) or "(none)",
        )

    def _config_for(self, provider: ProviderId) -> ProviderConfig:
        return get_provider_config(provider, self._provider_configs)

    def _is_ready(self, provider: ProviderId) -> bool:
        return provider in self._providers and self._breakers.get(provider.value).is_available()

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    def _build_chain(self, rule: RoutingRule) -> List[ProviderId]:
        chain = [p for p in rule.chain() if self._is_ready(p)]
        if chain:
            return chain

        safety_net = [p for p in ProviderId if p not in REPORT_ONLY_PROVIDERS and self._is_ready(p)]
        if safety_net:
            logger.warning(
                "No preferred providers for %s, falling back to: %s",
                rule.task_type,
                ", ".join(p.value for p in safety_net),
            )
            audit_log(
                "route_fallback",
                task_type=rule.task_type,
                preferred=[p.value for p in rule.chain()],
                fallback=[p.value for p in safety_net],
            )
        return safety_net

    async def route(self, request: LLMRequest) -> LLMResponse:
        """Serve a request from the first provider in its chain that succeeds.

        Raises:
            RoutingConfigError: No rule exists for the request's task.
            AllProvidersFailedError: Every candidate failed (or none were
                available); carries one error per attempted provider.
        """
        self.ensure_initialized()
        rule = self._table.resolve(request.task_type)
        enriched = merge_rule_defaults(request, rule)

        with request_context():
            chain = self._build_chain(rule)
            if not chain:
                raise AllProvidersFailedError(
                    rule.task_type,
                    [ProviderUnavailableError("No providers available", provider=rule.primary.value)],
                )

            deadline = None
            if self.settings.chain_deadline is not None:
                deadline = self._clock() + self.settings.chain_deadline

            errors: List[ProviderError] = []
            for index, provider in enumerate(chain):
                if deadline is not None and self._clock() >= deadline:
                    logger.warning("Chain deadline spent for %s before trying %s", rule.task_type, provider.value)
                    break

                outcome = await self._try_provider(provider, enriched, deadline)
                if outcome.succeeded and outcome.value is not None:
                    return outcome.value

                error = outcome.error or ProviderError("Unknown failure", provider=provider.value)
                errors.append(error)
                if index < len(chain) - 1:
                    logger.warning(
                        "%s failed for %s: %s. Trying next...",
                        provider.value,
                        rule.task_type,
                        error.message,
                    )

            audit_log(
                "route_exhausted",
                task_type=rule.task_type,
                attempted=[e.provider for e in errors],
            )
            raise AllProvidersFailedError(rule.task_type, errors)

    async def _try_provider(
        self,
        provider: ProviderId,
        request: LLMRequest,
        deadline: Optional[float],
    ) -> AttemptOutcome[LLMResponse]:
        """Initial attempt plus same-provider retries."""
        breaker = self._breakers.get(provider.value)

        # No await between this check and dispatch.
        if not breaker.acquire():
            return AttemptOutcome(
                error=CircuitOpenError(f"Circuit breaker open for {provider.value}", provider=provider.value),
                attempts=0,
            )

        try:
            return AttemptOutcome(value=await self._attempt(provider, request, deadline), attempts=1)
        except ProviderError as e:
            first_error = e

        if not first_error.retryable:
            return AttemptOutcome(error=first_error, attempts=1)

        config = self._config_for(provider)
        policy = RetryPolicy(
            max_retries=config.max_retries,
            base_delay=config.retry_delay,
            jitter=self.settings.retry_jitter,
        )

        async def retry_once() -> LLMResponse:
            if not breaker.acquire():
                raise CircuitOpenError(f"Circuit breaker open for {provider.value}", provider=provider.value)
            return await self._attempt(provider, request, deadline)

        def should_stop() -> bool:
            return breaker.is_open or (deadline is not None and self._clock() >= deadline)

        return await retry_with_backoff(
            retry_once,
            provider=provider.value,
            first_error=first_error,
            policy=policy,
            stop_when=should_stop,
            time_left=(lambda: deadline - self._clock()) if deadline is not None else None,
            rng=self._rng,
            sleep_func=self._sleep,
        )

    async def _attempt(
        self,
        provider: ProviderId,
        request: LLMRequest,
        deadline: Optional[float],
    ) -> LLMResponse:
        """Dispatch one call and record its outcome.

        The caller must already hold breaker permission for this attempt.
        """
        client = self._providers[provider]
        breaker = self._breakers.get(provider.value)
        timeout: Optional[float] = self._config_for(provider).timeout

        if deadline is not None:
            remaining = deadline - self._clock()
            if remaining <= 0:
                breaker.release()
                raise ProviderTimeoutError(
                    f"Chain deadline spent before dispatching to {provider.value}",
                    provider=provider.value,
                    timeout=self.settings.chain_deadline,
                )
            timeout = min(timeout, remaining) if timeout is not None else remaining

        try:
            response = await call_with_timeout(
                client.complete(request),
                timeout,
                provider=provider.value,
                cancel_on_timeout=self.settings.cancel_on_timeout,
            )
        except asyncio.CancelledError:
            breaker.release()
            raise
        except ProviderError as e:
            if e.provider is None:
                e.provider = provider.value
            self._record_failure(provider, e)
            raise
        except Exception as e:
            wrapped = ProviderError(
                str(e) or type(e).__name__,
                provider=provider.value,
                retryable=False,
                cause=e,
            )
            self._record_failure(provider, wrapped)
            raise wrapped from e

        self._record_success(provider, response)
        return response

    def _record_success(self, provider: ProviderId, response: LLMResponse) -> None:
        self._breakers.get(provider.value).record_success()
        self._metrics.record_success(
            provider.value,
            model=response.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            latency_ms=response.latency_ms,
        )

    def _record_failure(self, provider: ProviderId, error: ProviderError) -> None:
        breaker = self._breakers.get(provider.value)
        breaker.record_failure()
        self._metrics.record_failure(provider.value, error=error.message, breaker_open=breaker.is_open)

    # ------------------------------------------------------------------
    # Direct capabilities
    # ------------------------------------------------------------------

    async def embed(self, texts: Sequence[str], model: Optional[str] = None) -> List[List[float]]:
        """Generate embeddings through the embedding-capable provider.

        Raises:
            ProviderUnavailableError: The provider is not registered.
        """
        self.ensure_initialized()
        client = self._providers.get(ProviderId.OPENAI)
        if client is None or not client.supports_embeddings:
            raise ProviderUnavailableError(
                "OpenAI provider not available for embeddings",
                provider=ProviderId.OPENAI.value,
            )
        with request_context():
            return await client.embed(list(texts), model)

    async def generate_report(self, request: ReportRequest) -> ReportResult:
        """Generate a report through the report-only provider.

        Raises:
            ProviderUnavailableError: The provider is not registered.
        """
        self.ensure_initialized()
        client = self._providers.get(ProviderId.CANVA)
        if client is None or not client.supports_reports:
            raise ProviderUnavailableError(
                "Canva provider not available for report generation",
                provider=ProviderId.CANVA.value,
            )
        with request_context():
            return await client.generate_report(request)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def get_metrics(self) -> List[ProviderMetrics]:
        """Snapshot of every provider's metrics. Reading never mutates."""
        self.ensure_initialized()
        return self._metrics.snapshot()

    def get_available_providers(self) -> List[ProviderId]:
        """Providers registered at initialization, regardless of breaker state."""
        self.ensure_initialized()
        return list(self._providers)

    def get_breaker_states(self) -> Dict[str, Dict[str, object]]:
        self.ensure_initialized()
        return self._breakers.states()

    def get_provider_configs(self) -> List[ProviderConfig]:
        return [self._config_for(p) for p in ProviderId]

    async def health_check(self) -> Dict[ProviderId, bool]:
        """Probe every registered provider concurrently.

        A check that raises or exceeds ``health_check_timeout`` reports False.
        """
        self.ensure_initialized()
        timeout = self.settings.health_check_timeout

        async def check_one(provider: ProviderId, client: ProviderClient) -> bool:
            try:
                return bool(await asyncio.wait_for(client.health_check(), timeout))
            except asyncio.TimeoutError:
                logger.warning("Health check for %s timed out after %.1fs", provider.value, timeout)
                return False
            except Exception as e:
                logger.warning("Health check for %s raised: %s", provider.value, e)
                return False

        providers = list(self._providers.items())
        results = await asyncio.gather(*(check_one(p, c) for p, c in providers))
        return {p: ok for (p, _), ok in zip(providers, results)}

    def get_routing_rules(self) -> List[RoutingRule]:
        return self._table.rules()

    def override_route(
        self,
        task_type: Union[str, TaskType],
        primary: Union[str, ProviderId],
        fallbacks: Sequence[Union[str, ProviderId]] = (),
    ) -> RoutingRule:
        """Replace the provider chain for a task at runtime.

        Raises:
            RoutingConfigError: Unknown task or provider.
        """
        try:
            updated = self._table.override(task_type, primary, fallbacks)
        except RoutingConfigError as e:
            audit_log("route_override", task_type=task_key(task_type), rejected=True, reason=str(e))
            raise
        get_audit_logger().route_override(
            updated.task_type,
            updated.primary.value,
            [p.value for p in updated.fallbacks],
        )
        return updated


# Global router instance
_router: Optional[Router] = None


def get_router() -> Router:
    """Get the process-wide router, building it from configuration on first use."""
    global _router
    if _router is None:
        from llm_router.config import get_config

        _router = get_config().build_router()
    return _router


def set_router(router: Optional[Router]) -> None:
    global _router
    _router = router


def reset_router_for_testing() -> None:
    """Drop the process-wide router so the next ``get_router()`` rebuilds it."""
    set_router(None)
