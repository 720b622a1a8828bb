"""Router tools for the MCP server.

Expose routing, metrics, health and the runtime rule override to MCP
clients. Every tool returns the standard response envelope.
"""

import logging
from dataclasses import asdict
from typing import List, Optional

from mcp.server.fastmcp import FastMCP

from llm_router.config import RouterConfig
from llm_router.core.errors import RoutingConfigError, error_to_response
from llm_router.core.naming import canonical_tool
from llm_router.core.providers import LLMRequest, ResponseFormat
from llm_router.core.responses import ErrorCode, ErrorType, error_response, success_response
from llm_router.core.router import get_router

logger = logging.getLogger(__name__)


def _validation_error(message: str, remediation: Optional[str] = None) -> dict:
    return asdict(
        error_response(
            message,
            error_code=ErrorCode.VALIDATION_ERROR,
            error_type=ErrorType.VALIDATION,
            remediation=remediation,
        )
    )


def register_router_tools(mcp: FastMCP, config: RouterConfig) -> None:
    """Register router tools with the FastMCP server.

    Args:
        mcp: FastMCP server instance
        config: Router configuration
    """

    @canonical_tool(
        mcp,
        canonical_name="route-request",
    )
    async def route_request(
        task_type: str,
        user_prompt: str,
        system_prompt: str = "",
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        response_format: Optional[str] = None,
        model: Optional[str] = None,
    ) -> dict:
        """
        Route a prompt to the best provider for a task.

        The router tries the task's primary provider, retries retryable
        failures with backoff and falls back through the configured chain.

        Args:
            task_type: Task identifier (e.g. "deal_analysis", "field_extraction")
            user_prompt: User input
            system_prompt: System instructions
            max_tokens: Override the rule's max_tokens
            temperature: Override the rule's temperature (0.0 - 2.0)
            response_format: "text" or "json"
            model: Override the provider's default model

        Returns:
            JSON object with content, provider, model, usage and latency_ms
        """
        fmt: Optional[ResponseFormat] = None
        if response_format:
            try:
                fmt = ResponseFormat(response_format.strip().lower())
            except ValueError:
                return _validation_error(
                    f"Invalid response_format '{response_format}'",
                    remediation="Use 'text' or 'json'",
                )
        if max_tokens is not None and max_tokens <= 0:
            return _validation_error("max_tokens must be positive")
        if temperature is not None and not 0.0 <= temperature <= 2.0:
            return _validation_error("temperature must be between 0.0 and 2.0")

        request = LLMRequest(
            task_type=task_type,
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            max_tokens=max_tokens,
            temperature=temperature,
            response_format=fmt,
            metadata={"model": model} if model else {},
        )
        try:
            response = await get_router().route(request)
        except Exception as e:
            result = error_to_response(e)
            if result is not None:
                return result
            raise
        return asdict(success_response(response.to_dict()))

    @canonical_tool(
        mcp,
        canonical_name="router-metrics",
    )
    def router_metrics() -> dict:
        """
        Get per-provider usage, latency and estimated cost for this process.

        Returns:
            JSON object with a metrics list and the total estimated cost
        """
        metrics = [m.to_dict() for m in get_router().get_metrics()]
        total = round(sum(m["estimated_cost_usd"] for m in metrics), 6)
        return asdict(success_response(metrics=metrics, total_estimated_cost_usd=total))

    @canonical_tool(
        mcp,
        canonical_name="router-health",
    )
    async def router_health() -> dict:
        """
        Probe every registered provider concurrently.

        Probes that raise or time out report unhealthy.

        Returns:
            JSON object mapping provider id to health plus breaker states
        """
        router = get_router()
        results = await router.health_check()
        return asdict(
            success_response(
                providers={p.value: ok for p, ok in results.items()},
                breakers=router.get_breaker_states(),
            )
        )

    @canonical_tool(
        mcp,
        canonical_name="router-providers",
    )
    def router_providers() -> dict:
        """
        List providers registered with the router and their configuration.

        Returns:
            JSON object with available provider ids and per-provider config
        """
        router = get_router()
        return asdict(
            success_response(
                available=[p.value for p in router.get_available_providers()],
                configs=[c.to_dict() for c in router.get_provider_configs()],
            )
        )

    @canonical_tool(
        mcp,
        canonical_name="router-rules",
    )
    def router_rules() -> dict:
        """
        Show the effective routing table.

        Returns:
            JSON object with one rule per task identifier
        """
        return asdict(success_response(rules=[r.to_dict() for r in get_router().get_routing_rules()]))

    @canonical_tool(
        mcp,
        canonical_name="router-override-route",
    )
    def router_override_route(
        task_type: str,
        primary: str,
        fallbacks: Optional[List[str]] = None,
    ) -> dict:
        """
        Replace the provider chain for a task until the server restarts.

        Rule defaults (max_tokens, temperature, response_format) are kept.

        Args:
            task_type: Task identifier to override
            primary: Provider to try first
            fallbacks: Providers to try next, in order

        Returns:
            JSON object with the updated rule
        """
        try:
            updated = get_router().override_route(task_type, primary, fallbacks or [])
        except RoutingConfigError as e:
            return error_to_response(e) or _validation_error(str(e))
        return asdict(success_response(rule=updated.to_dict()))

    logger.debug("Registered router tools")
