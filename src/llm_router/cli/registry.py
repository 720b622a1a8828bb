"""Per-invocation CLI context.

Holds the ``--config`` choice and lazily builds the router so commands that
fail argument validation never touch configuration or credentials.
"""

from dataclasses import dataclass
from typing import Optional

import click

from llm_router.config import RouterConfig, set_config
from llm_router.core.router import Router, get_router, set_router


@dataclass
class CLIContext:
    config_file: Optional[str] = None
    _router: Optional[Router] = None

    @property
    def router(self) -> Router:
        if self._router is None:
            if self.config_file:
                config = RouterConfig.from_env(self.config_file)
                set_config(config)
                set_router(config.build_router())
            self._router = get_router()
        return self._router


def get_context(ctx: click.Context) -> CLIContext:
    """Return the CLIContext stored on the root click context."""
    obj = ctx.find_root().obj
    if not isinstance(obj, CLIContext):
        obj = CLIContext()
        ctx.find_root().obj = obj
    return obj
