"""MCP tool registrations."""

from llm_router.tools.router import register_router_tools

__all__ = ["register_router_tools"]
