"""Tests for the router MCP tools."""

import logging

import pytest
from fakes import FakeProvider, fatal
from mcp.server.fastmcp import FastMCP

from llm_router.config import RouterConfig
from llm_router.core.providers import ProviderId
from llm_router.core.router import get_router, set_router
from llm_router.server import create_server
from llm_router.tools import register_router_tools

TOOL_NAMES = {
    "route-request",
    "router-metrics",
    "router-health",
    "router-providers",
    "router-rules",
    "router-override-route",
}


@pytest.fixture
def tools(make_router):
    """Register the tools on a bare server around a fake-provider router."""
    router = make_router(
        {
            ProviderId.ANTHROPIC: FakeProvider(ProviderId.ANTHROPIC, ["claude says"]),
            ProviderId.OPENAI: FakeProvider(ProviderId.OPENAI, ["gpt says"]),
        }
    )
    set_router(router)
    mcp = FastMCP("test")
    register_router_tools(mcp, RouterConfig())
    return {name: tool.fn for name, tool in mcp._tool_manager._tools.items()}


class TestRegistration:
    def test_all_tools_registered(self, tools):
        assert set(tools) == TOOL_NAMES

    def test_create_server_installs_router(self):
        server = create_server(RouterConfig())
        assert set(server._tool_manager._tools) == TOOL_NAMES
        assert get_router().get_routing_rules()


class TestRouteRequest:
    @pytest.mark.asyncio
    async def test_success_envelope(self, tools):
        result = await tools["route-request"](task_type="document_analysis", user_prompt="hello")

        assert result["success"] is True
        assert result["data"]["content"] == "claude says"
        assert result["data"]["provider"] == "anthropic"
        assert result["meta"]["version"] == "response-v2"
        assert "request_id" in result["meta"]

    @pytest.mark.asyncio
    async def test_overrides_reach_provider(self, tools):
        await tools["route-request"](
            task_type="field_extraction",
            user_prompt="extract",
            max_tokens=32,
            temperature=0.5,
            response_format="JSON",
            model="gpt-4o-mini",
        )

        sent = get_router()._providers[ProviderId.OPENAI].calls[0]
        assert sent.max_tokens == 32
        assert sent.temperature == 0.5
        assert sent.wants_json
        assert sent.model == "gpt-4o-mini"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs,message",
        [
            ({"response_format": "xml"}, "Invalid response_format"),
            ({"max_tokens": 0}, "max_tokens must be positive"),
            ({"temperature": 2.5}, "temperature must be between"),
        ],
    )
    async def test_validation_errors(self, tools, kwargs, message):
        result = await tools["route-request"](task_type="synthesis", user_prompt="x", **kwargs)

        assert result["success"] is False
        assert message in result["error"]
        assert result["data"]["error_code"] == "VALIDATION_ERROR"
        assert get_router().get_metrics()[0].total_requests == 0

    @pytest.mark.asyncio
    async def test_unknown_task(self, tools):
        result = await tools["route-request"](task_type="poetry", user_prompt="x")
        assert result["data"]["error_code"] == "ROUTING_CONFIG_ERROR"

    @pytest.mark.asyncio
    async def test_all_providers_failed(self, make_router):
        set_router(make_router({ProviderId.OPENAI: FakeProvider(ProviderId.OPENAI, [fatal(ProviderId.OPENAI)])}))
        mcp = FastMCP("test")
        register_router_tools(mcp, RouterConfig())

        result = await mcp._tool_manager._tools["route-request"].fn(task_type="embeddings", user_prompt="x")

        assert result["success"] is False
        assert result["data"]["error_code"] == "ALL_PROVIDERS_FAILED"
        assert result["data"]["details"]["errors"][0]["provider"] == "openai"

    @pytest.mark.asyncio
    async def test_invocation_is_audited(self, tools, caplog):
        with caplog.at_level(logging.INFO, logger="llm_router.core.observability.audit.audit"):
            await tools["route-request"](task_type="document_analysis", user_prompt="hello")

        events = [r.audit for r in caplog.records if getattr(r, "audit", None)]
        invocation = [e for e in events if e["event_type"] == "tool_invocation"]
        assert invocation[-1]["details"]["tool"] == "route-request"
        assert invocation[-1]["details"]["success"] is True


class TestDiagnostics:
    @pytest.mark.asyncio
    async def test_health(self, tools):
        result = await tools["router-health"]()

        assert result["success"] is True
        assert result["data"]["providers"] == {"anthropic": True, "openai": True}
        assert result["data"]["breakers"]["openai"]["state"] == "closed"

    def test_providers(self, tools):
        result = tools["router-providers"]()

        assert result["data"]["available"] == ["anthropic", "openai"]
        assert len(result["data"]["configs"]) == len(ProviderId)

    def test_rules(self, tools):
        result = tools["router-rules"]()
        tasks = [r["task_type"] for r in result["data"]["rules"]]
        assert tasks[0] == "document_analysis"
        assert "embeddings" in tasks

    @pytest.mark.asyncio
    async def test_metrics_after_route(self, tools):
        await tools["route-request"](task_type="document_analysis", user_prompt="hello")

        result = tools["router-metrics"]()

        by_provider = {m["provider"]: m for m in result["data"]["metrics"]}
        assert by_provider["anthropic"]["successful_requests"] == 1
        assert result["data"]["total_estimated_cost_usd"] > 0


class TestOverrideRoute:
    @pytest.mark.asyncio
    async def test_override_then_route(self, tools):
        result = tools["router-override-route"](
            task_type="document_analysis", primary="openai", fallbacks=["anthropic"]
        )

        assert result["success"] is True
        assert result["data"]["rule"]["primary"] == "openai"
        assert result["data"]["rule"]["defaults"]["max_tokens"] == 8192

        routed = await tools["route-request"](task_type="document_analysis", user_prompt="hello")
        assert routed["data"]["provider"] == "openai"

    def test_rejected_override(self, tools):
        result = tools["router-override-route"](task_type="synthesis", primary="canva")

        assert result["success"] is False
        assert result["data"]["error_code"] == "ROUTING_CONFIG_ERROR"
        assert result["data"]["error_type"] == "validation"
