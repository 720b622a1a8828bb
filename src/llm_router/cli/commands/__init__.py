"""CLI commands."""

from llm_router.cli.commands.diagnostics import health_cmd, metrics_cmd, providers_cmd, rules_cmd
from llm_router.cli.commands.routing import route_cmd

__all__ = [
    "health_cmd",
    "metrics_cmd",
    "providers_cmd",
    "route_cmd",
    "rules_cmd",
]
