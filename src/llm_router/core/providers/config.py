"""Per-provider configuration and credential lookup.

``DEFAULT_PROVIDER_CONFIGS`` holds the built-in tuning for every
``ProviderId``. Values can be overridden per provider from the
``[providers.<id>]`` TOML tables (see ``llm_router.config``).
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

from llm_router.core.providers.base import ProviderId


@dataclass(frozen=True)
class ProviderConfig:
    """Static configuration for one provider.

    Attributes:
        provider: Provider identifier
        default_model: Model used when the request names none
        max_retries: Extra attempts after a retryable failure
        retry_delay: Base backoff delay in seconds
        timeout: Per-attempt timeout in seconds
        max_concurrent: Ceiling on in-flight calls to this backend
        rate_limit_per_minute: Advertised request ceiling (informational)
        enabled: Disabled providers are never registered
        base_url: Override for the backend endpoint
    """

    provider: ProviderId
    default_model: str
    max_retries: int = 3
    retry_delay: float = 1.0
    timeout: float = 60.0
    max_concurrent: int = 5
    rate_limit_per_minute: int = 60
    enabled: bool = True
    base_url: Optional[str] = None

    def merged(self, overrides: Mapping[str, Any]) -> "ProviderConfig":
        """Return a copy with the known keys from ``overrides`` applied."""
        known = {f.name for f in fields(self)} - {"provider"}
        return replace(self, **{k: v for k, v in overrides.items() if k in known and v is not None})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider.value,
            "default_model": self.default_model,
            "max_retries": self.max_retries,
            "retry_delay": self.retry_delay,
            "timeout": self.timeout,
            "max_concurrent": self.max_concurrent,
            "rate_limit_per_minute": self.rate_limit_per_minute,
            "enabled": self.enabled,
        }


PROVIDER_ENV_KEYS: Dict[ProviderId, str] = {
    ProviderId.ANTHROPIC: "ANTHROPIC_API_KEY",
    ProviderId.GEMINI: "GEMINI_API_KEY",
    ProviderId.OPENAI: "OPENAI_API_KEY",
    ProviderId.GROK: "XAI_API_KEY",
    ProviderId.PERPLEXITY: "PERPLEXITY_API_KEY",
    ProviderId.CANVA: "CANVA_API_KEY",
}


DEFAULT_PROVIDER_CONFIGS: Dict[ProviderId, ProviderConfig] = {
    ProviderId.ANTHROPIC: ProviderConfig(
        provider=ProviderId.ANTHROPIC,
        default_model="claude-sonnet-4-20250514",
        timeout=120.0,
        max_concurrent=5,
        rate_limit_per_minute=50,
    ),
    ProviderId.GEMINI: ProviderConfig(
        provider=ProviderId.GEMINI,
        default_model="gemini-2.0-flash",
        timeout=90.0,
        max_concurrent=10,
        rate_limit_per_minute=60,
    ),
    ProviderId.OPENAI: ProviderConfig(
        provider=ProviderId.OPENAI,
        default_model="gpt-4o",
        timeout=60.0,
        max_concurrent=10,
        rate_limit_per_minute=60,
    ),
    ProviderId.GROK: ProviderConfig(
        provider=ProviderId.GROK,
        default_model="grok-3",
        timeout=60.0,
        max_concurrent=5,
        rate_limit_per_minute=30,
    ),
    ProviderId.PERPLEXITY: ProviderConfig(
        provider=ProviderId.PERPLEXITY,
        default_model="sonar-pro",
        timeout=90.0,
        max_concurrent=3,
        rate_limit_per_minute=20,
    ),
    ProviderId.CANVA: ProviderConfig(
        provider=ProviderId.CANVA,
        default_model="autofill",
        max_retries=1,
        retry_delay=2.0,
        timeout=120.0,
        max_concurrent=2,
        rate_limit_per_minute=10,
    ),
}


def get_provider_config(
    provider: ProviderId,
    configs: Optional[Mapping[ProviderId, ProviderConfig]] = None,
) -> ProviderConfig:
    """Look up a provider's configuration, falling back to the built-in default."""
    if configs and provider in configs:
        return configs[provider]
    return DEFAULT_PROVIDER_CONFIGS[provider]


def get_api_key(provider: ProviderId, env: Mapping[str, str]) -> Optional[str]:
    """Return the provider's credential from ``env``, or None if absent/blank."""
    value = env.get(PROVIDER_ENV_KEYS[provider], "")
    value = value.strip() if isinstance(value, str) else ""
    return value or None
