"""RouterConfig dataclass and global configuration state.

This module defines the ``RouterConfig`` class (field declarations and the
objects built from them) and the global ``get_config`` / ``set_config``
helpers. Loading and validation logic lives in the ``_RouterConfigLoader``
mixin (``loader.py``) which ``RouterConfig`` inherits from.
"""

import logging
from dataclasses import dataclass, field
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_package_version
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from llm_router.config.domains import BreakerSettings, RouterBehaviorConfig
from llm_router.config.loader import _RouterConfigLoader
from llm_router.core.providers import DEFAULT_PROVIDER_CONFIGS, ProviderConfig, ProviderId
from llm_router.core.router import Router, RouterSettings
from llm_router.core.routing import DEFAULT_ROUTING_RULES, RoutingRule, apply_rule_overrides


def _get_version() -> str:
    """Get package version from metadata (single source of truth: pyproject.toml)."""
    try:
        return get_package_version("llm-router")
    except PackageNotFoundError:
        return "0.1.0"  # Fallback for dev without install


_PACKAGE_VERSION = _get_version()


@dataclass
class RouterConfig(_RouterConfigLoader):
    """Router configuration with support for env vars and TOML overrides."""

    # Logging configuration
    log_level: str = "INFO"
    structured_logging: bool = False

    # Router-wide behaviour
    router: RouterBehaviorConfig = field(default_factory=RouterBehaviorConfig)
    breaker: BreakerSettings = field(default_factory=BreakerSettings)

    # Raw [routing.*] / [providers.*] tables, merged across config layers
    routing_tables: Dict[str, Any] = field(default_factory=dict)
    provider_tables: Dict[str, Any] = field(default_factory=dict)

    # Validated overrides
    routing_overrides: Dict[str, RoutingRule] = field(default_factory=dict)
    provider_overrides: Dict[ProviderId, Dict[str, Any]] = field(default_factory=dict)

    version: str = _PACKAGE_VERSION
    loaded_files: List[Path] = field(default_factory=list)
    startup_warnings: List[str] = field(default_factory=list)

    def _add_startup_warning(self, message: str) -> None:
        if message and message not in self.startup_warnings:
            self.startup_warnings.append(message)

    def provider_configs(self) -> Dict[ProviderId, ProviderConfig]:
        """Built-in provider configs with ``[providers.*]`` overrides applied."""
        return {
            provider: config.merged(self.provider_overrides.get(provider, {}))
            for provider, config in DEFAULT_PROVIDER_CONFIGS.items()
        }

    def routing_rules(self) -> List[RoutingRule]:
        """Built-in routing rules with ``[routing.*]`` overrides applied."""
        return apply_rule_overrides(DEFAULT_ROUTING_RULES, self.routing_overrides)

    def router_settings(self) -> RouterSettings:
        return RouterSettings(
            breaker=self.breaker.to_breaker_config(),
            chain_deadline=self.router.chain_deadline,
            cancel_on_timeout=self.router.cancel_on_timeout,
            health_check_timeout=self.router.health_check_timeout,
            retry_jitter=self.router.retry_jitter,
        )

    def build_router(self, env: Optional[Mapping[str, str]] = None) -> Router:
        """Build a Router from this configuration.

        Args:
            env: Credential source (defaults to ``os.environ``)
        """
        return Router(
            self.routing_rules(),
            provider_configs=self.provider_configs(),
            env=env,
            settings=self.router_settings(),
        )

    def setup_logging(self) -> None:
        """Configure logging based on settings."""
        level = getattr(logging, self.log_level, logging.INFO)

        if self.structured_logging:
            # JSON-style structured logging
            formatter = logging.Formatter(
                '{"timestamp":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}'
            )
        else:
            formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

        handler = logging.StreamHandler()
        handler.setFormatter(formatter)

        root_logger = logging.getLogger("llm_router")
        root_logger.setLevel(level)
        root_logger.addHandler(handler)


# Global configuration instance
_config: Optional[RouterConfig] = None


def get_config() -> RouterConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = RouterConfig.from_env()
    return _config


def set_config(config: Optional[RouterConfig]) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
