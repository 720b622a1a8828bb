"""Domain-specific configuration dataclasses.

Small, focused configuration classes for the ``[router]`` and ``[breaker]``
TOML sections. Each collects warnings for values it had to ignore instead of
failing the whole load.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from llm_router.config.parsing import _try_parse_bool, _try_parse_float, _try_parse_int
from llm_router.core.resilience import (
    DEFAULT_FAILURE_THRESHOLD,
    DEFAULT_FAILURE_WINDOW,
    DEFAULT_OPEN_DURATION,
    BreakerConfig,
)
from llm_router.core.router import DEFAULT_HEALTH_CHECK_TIMEOUT


@dataclass
class RouterBehaviorConfig:
    """Configuration for router-wide behaviour.

    Attributes:
        chain_deadline: Overall budget (seconds) for one route() call; None = off
        cancel_on_timeout: Cancel timed-out attempts instead of abandoning them
        health_check_timeout: Per-provider health check limit (seconds)
        retry_jitter: Fractional jitter applied to retry delays (0.0 - 1.0)
    """

    chain_deadline: Optional[float] = None
    cancel_on_timeout: bool = False
    health_check_timeout: float = DEFAULT_HEALTH_CHECK_TIMEOUT
    retry_jitter: float = 0.0

    @classmethod
    def from_toml_dict(
        cls, data: Dict[str, Any], base: Optional["RouterBehaviorConfig"] = None
    ) -> Tuple["RouterBehaviorConfig", List[str]]:
        """Create config from a ``[router]`` TOML dict layered over ``base``.

        Returns:
            (config, warnings)
        """
        current = base or cls()
        warnings: List[str] = []
        config = cls(
            chain_deadline=current.chain_deadline,
            cancel_on_timeout=current.cancel_on_timeout,
            health_check_timeout=current.health_check_timeout,
            retry_jitter=current.retry_jitter,
        )

        if "chain_deadline" in data:
            raw = data["chain_deadline"]
            if raw in (None, 0, "", "none", "off"):
                config.chain_deadline = None
            else:
                parsed = _try_parse_float(raw, minimum=0.001)
                if parsed is None:
                    warnings.append(f"Ignoring [router].chain_deadline: expected positive number, got {raw!r}")
                else:
                    config.chain_deadline = parsed

        if "cancel_on_timeout" in data:
            flag = _try_parse_bool(data["cancel_on_timeout"])
            if flag is None:
                warnings.append(f"Ignoring [router].cancel_on_timeout: expected boolean, got {data['cancel_on_timeout']!r}")
            else:
                config.cancel_on_timeout = flag

        if "health_check_timeout" in data:
            parsed = _try_parse_float(data["health_check_timeout"], minimum=0.001)
            if parsed is None:
                warnings.append(
                    f"Ignoring [router].health_check_timeout: expected positive number, got {data['health_check_timeout']!r}"
                )
            else:
                config.health_check_timeout = parsed

        if "retry_jitter" in data:
            parsed = _try_parse_float(data["retry_jitter"], minimum=0.0)
            if parsed is None or parsed > 1.0:
                warnings.append(f"Ignoring [router].retry_jitter: expected 0.0-1.0, got {data['retry_jitter']!r}")
            else:
                config.retry_jitter = parsed

        return config, warnings


@dataclass
class BreakerSettings:
    """Configuration for the per-provider circuit breakers.

    Attributes:
        failure_threshold: Consecutive failures that open a breaker
        failure_window: Seconds after which a new failure restarts the count
        open_duration: Seconds a breaker stays open before a trial call
    """

    failure_threshold: int = DEFAULT_FAILURE_THRESHOLD
    failure_window: float = DEFAULT_FAILURE_WINDOW
    open_duration: float = DEFAULT_OPEN_DURATION

    @classmethod
    def from_toml_dict(
        cls, data: Dict[str, Any], base: Optional["BreakerSettings"] = None
    ) -> Tuple["BreakerSettings", List[str]]:
        """Create config from a ``[breaker]`` TOML dict layered over ``base``.

        Returns:
            (config, warnings)
        """
        current = base or cls()
        warnings: List[str] = []
        config = cls(
            failure_threshold=current.failure_threshold,
            failure_window=current.failure_window,
            open_duration=current.open_duration,
        )

        if "failure_threshold" in data:
            parsed_int = _try_parse_int(data["failure_threshold"], minimum=1)
            if parsed_int is None:
                warnings.append(
                    f"Ignoring [breaker].failure_threshold: expected integer >= 1, got {data['failure_threshold']!r}"
                )
            else:
                config.failure_threshold = parsed_int

        for key in ("failure_window", "open_duration"):
            if key in data:
                parsed = _try_parse_float(data[key], minimum=0.0)
                if parsed is None:
                    warnings.append(f"Ignoring [breaker].{key}: expected non-negative number, got {data[key]!r}")
                else:
                    setattr(config, key, parsed)

        return config, warnings

    def to_breaker_config(self) -> BreakerConfig:
        return BreakerConfig(
            failure_threshold=self.failure_threshold,
            failure_window=self.failure_window,
            open_duration=self.open_duration,
        )
