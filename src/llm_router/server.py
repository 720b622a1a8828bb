"""MCP server exposing the LLM router.

Run with ``llm-router-mcp`` (stdio transport).
"""

import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP

from llm_router.config import RouterConfig, get_config
from llm_router.core.router import set_router
from llm_router.tools import register_router_tools

logger = logging.getLogger(__name__)


def create_server(config: Optional[RouterConfig] = None) -> FastMCP:
    """Create the FastMCP server and install the configured router.

    Args:
        config: Router configuration (defaults to ``get_config()``)
    """
    config = config or get_config()
    set_router(config.build_router())

    mcp = FastMCP(
        "llm-router",
        instructions=(
            "Routes LLM requests to the best provider per task with automatic fallback. "
            "Use route-request to run a prompt, router-health and router-metrics to inspect providers, "
            "and router-override-route to change a task's provider chain at runtime."
        ),
    )
    register_router_tools(mcp, config)

    logger.info("llm-router MCP server %s ready", config.version)
    return mcp


def main() -> None:
    """Entry point for ``llm-router-mcp``."""
    config = get_config()
    config.setup_logging()
    create_server(config).run(transport="stdio")


if __name__ == "__main__":
    main()
