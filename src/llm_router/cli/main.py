"""Entry point for the ``llm-router`` command."""

from typing import Optional

import click

from llm_router.cli.commands import health_cmd, metrics_cmd, providers_cmd, route_cmd, rules_cmd
from llm_router.cli.output import emit_error
from llm_router.cli.registry import CLIContext
from llm_router.config import get_config
from llm_router.core.errors import RoutingConfigError
from llm_router.core.responses import ErrorCode, ErrorType


@click.group()
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="TOML config file (replaces the XDG/home/project layers)",
)
@click.version_option(package_name="llm-router", message="%(version)s")
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[str]) -> None:
    """Route LLM requests across providers with fallback and circuit breaking."""
    ctx.obj = CLIContext(config_file=config_file)


cli.add_command(providers_cmd)
cli.add_command(metrics_cmd)
cli.add_command(health_cmd)
cli.add_command(rules_cmd)
cli.add_command(route_cmd)


def main() -> None:
    """Console-script entry point."""
    try:
        get_config().setup_logging()
    except RoutingConfigError as e:
        emit_error(str(e), code=ErrorCode.ROUTING_CONFIG_ERROR.value, error_type=ErrorType.VALIDATION.value)
    cli()


if __name__ == "__main__":
    main()
