"""RouterConfig loading and validation logic.

Provides ``_RouterConfigLoader``, a mixin class whose methods are inherited by
``RouterConfig`` (defined in ``settings.py``). Loading and validation live
here so ``settings.py`` stays focused on field definitions and the objects
built from them.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, cast

if TYPE_CHECKING:
    from llm_router.config.settings import RouterConfig

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback

from llm_router.config.domains import BreakerSettings, RouterBehaviorConfig
from llm_router.config.parsing import (
    _normalize_log_level,
    _parse_bool,
)
from llm_router.core.providers import ProviderId
from llm_router.core.routing import parse_provider_tables, parse_routing_tables

logger = logging.getLogger(__name__)

CONFIG_FILE_ENV_VAR = "LLM_ROUTER_CONFIG_FILE"

_ROUTER_ENV_VARS = {
    "LLM_ROUTER_CHAIN_DEADLINE": "chain_deadline",
    "LLM_ROUTER_CANCEL_ON_TIMEOUT": "cancel_on_timeout",
    "LLM_ROUTER_HEALTH_CHECK_TIMEOUT": "health_check_timeout",
    "LLM_ROUTER_RETRY_JITTER": "retry_jitter",
}


class _RouterConfigLoader:
    """Mixin providing config-loading methods for ``RouterConfig``.

    At runtime ``self`` is always a ``RouterConfig`` instance.
    """

    if TYPE_CHECKING:
        log_level: str
        structured_logging: bool
        router: RouterBehaviorConfig
        breaker: BreakerSettings
        routing_tables: Dict[str, Any]
        provider_tables: Dict[str, Any]
        routing_overrides: Dict[str, Any]
        provider_overrides: Dict[ProviderId, Dict[str, Any]]
        loaded_files: List[Path]
        startup_warnings: List[str]

        def _add_startup_warning(self, message: str) -> None: ...

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "RouterConfig":
        """
        Create configuration from environment variables and optional TOML file.

        Priority (highest to lowest):
        1. Environment variables
        2. Project TOML config (./llm-router.toml)
        3. User TOML config (~/.llm-router.toml)
        4. XDG config (~/.config/llm-router/config.toml)
        5. Default values

        An explicit ``config_file`` (or ``LLM_ROUTER_CONFIG_FILE``) replaces
        the file layers 2-4.

        Raises:
            RoutingConfigError: A ``[routing.*]`` or ``[providers.*]`` table
                is invalid.
        """
        config = cls()

        toml_path = config_file or os.environ.get(CONFIG_FILE_ENV_VAR)
        if toml_path:
            config._load_toml(Path(toml_path))
        else:
            xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
            xdg_config = Path(xdg_config_home) / "llm-router" / "config.toml"
            if xdg_config.exists():
                config._load_toml(xdg_config)
                logger.debug(f"Loaded XDG config from {xdg_config}")

            home_config = Path.home() / ".llm-router.toml"
            if home_config.exists():
                config._load_toml(home_config)
                logger.debug(f"Loaded user config from {home_config}")

            project_config = Path("llm-router.toml")
            if project_config.exists():
                config._load_toml(project_config)
                logger.debug(f"Loaded project config from {project_config}")

        config._load_env()
        config._validate_startup_configuration()

        return cast("RouterConfig", config)

    def _load_toml(self, path: Path) -> None:
        """Load configuration from a TOML file, layering over current values."""
        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.error(f"Error loading config file {path}: {e}")
            self._add_startup_warning(f"Could not read config file {path}: {e}")
            return

        self.loaded_files.append(path)

        if "logging" in data:
            log = data["logging"]
            if "level" in log:
                self.log_level = _normalize_log_level(str(log["level"]))
            if "structured" in log:
                self.structured_logging = _parse_bool(log["structured"])

        if "router" in data:
            self._apply_section(path, "router", data["router"])

        if "breaker" in data:
            self._apply_section(path, "breaker", data["breaker"])

        # Raw tables are merged per key here and validated once all layers are in
        if "routing" in data:
            self._merge_tables(path, "routing", data["routing"], self.routing_tables)

        if "providers" in data:
            self._merge_tables(path, "providers", data["providers"], self.provider_tables)

    def _apply_section(self, path: Path, name: str, section: Any) -> None:
        if not isinstance(section, dict):
            self._add_startup_warning(f"Ignoring [{name}] in {path}: expected table/dict, got {type(section).__name__}")
            return
        if name == "router":
            self.router, warnings = RouterBehaviorConfig.from_toml_dict(section, self.router)
        else:
            self.breaker, warnings = BreakerSettings.from_toml_dict(section, self.breaker)
        for warning in warnings:
            self._add_startup_warning(f"{path}: {warning}")

    def _merge_tables(self, path: Path, name: str, section: Any, target: Dict[str, Any]) -> None:
        if not isinstance(section, Mapping):
            self._add_startup_warning(f"Ignoring [{name}] in {path}: expected table/dict, got {type(section).__name__}")
            return
        for key, table in section.items():
            target[str(key)] = table

    def _load_env(self) -> None:
        """Load configuration from environment variables."""
        if level := os.environ.get("LLM_ROUTER_LOG_LEVEL"):
            self.log_level = _normalize_log_level(level)

        if structured := os.environ.get("LLM_ROUTER_STRUCTURED_LOGGING"):
            self.structured_logging = _parse_bool(structured)

        for env_var, key in _ROUTER_ENV_VARS.items():
            if value := os.environ.get(env_var):
                self._apply_router_env(env_var, key, value)

    def _apply_router_env(self, env_var: str, key: str, value: str) -> None:
        self.router, warnings = RouterBehaviorConfig.from_toml_dict({key: value}, self.router)
        for warning in warnings:
            self._add_startup_warning(f"{env_var}: {warning}")

    def _validate_startup_configuration(self) -> None:
        """Validate startup configuration. Raises on invalid routing tables."""
        self.routing_overrides = parse_routing_tables(self.routing_tables)
        self.provider_overrides = parse_provider_tables(self.provider_tables)

        for provider, overrides in self.provider_overrides.items():
            if overrides.get("enabled") is False:
                logger.info("Provider %s disabled by configuration", provider.value)

        for warning in self.startup_warnings:
            logger.warning(warning)
