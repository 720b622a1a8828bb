"""Configuration for the LLM router.

Layered TOML files (XDG, home, project) plus ``LLM_ROUTER_*`` environment
variables. See ``RouterConfig.from_env`` for precedence.
"""

from llm_router.config.domains import BreakerSettings, RouterBehaviorConfig
from llm_router.config.loader import CONFIG_FILE_ENV_VAR
from llm_router.config.settings import RouterConfig, get_config, set_config

__all__ = [
    "BreakerSettings",
    "CONFIG_FILE_ENV_VAR",
    "RouterBehaviorConfig",
    "RouterConfig",
    "get_config",
    "set_config",
]
