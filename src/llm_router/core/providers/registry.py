"""Provider registry.

Maps every ``ProviderId`` to an adapter factory and builds the set of
usable clients from credentials. A provider is registered only when it is
enabled, its credential is present and non-blank, and its factory succeeds.
"""

import logging
import os
from typing import Callable, Dict, Mapping, Optional

import httpx

from llm_router.core.providers.anthropic import AnthropicProvider
from llm_router.core.providers.base import ProviderClient, ProviderId
from llm_router.core.providers.canva import CanvaProvider
from llm_router.core.providers.config import ProviderConfig, get_api_key, get_provider_config
from llm_router.core.providers.gemini import GeminiProvider
from llm_router.core.providers.openai import GrokProvider, OpenAIProvider, PerplexityProvider

logger = logging.getLogger(__name__)

ProviderFactory = Callable[..., ProviderClient]

PROVIDER_FACTORIES: Dict[ProviderId, ProviderFactory] = {
    ProviderId.ANTHROPIC: AnthropicProvider,
    ProviderId.GEMINI: GeminiProvider,
    ProviderId.OPENAI: OpenAIProvider,
    ProviderId.GROK: GrokProvider,
    ProviderId.PERPLEXITY: PerplexityProvider,
    ProviderId.CANVA: CanvaProvider,
}

_missing_factories = set(ProviderId) - set(PROVIDER_FACTORIES)
if _missing_factories:
    raise RuntimeError(f"No adapter factory for providers: {sorted(p.value for p in _missing_factories)}")


def build_provider_clients(
    configs: Optional[Mapping[ProviderId, ProviderConfig]] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
    factories: Optional[Mapping[ProviderId, ProviderFactory]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[ProviderId, ProviderClient]:
    """Instantiate every provider that has credentials.

    Args:
        configs: Per-provider configuration overrides.
        env: Credential source (defaults to ``os.environ``).
        factories: Factory overrides, keyed by provider.
        transport: httpx transport handed to every adapter (tests).

    Returns:
        Registered clients in ``ProviderId`` declaration order.
    """
    source = os.environ if env is None else env
    _factories = {**PROVIDER_FACTORIES, **(factories or {})}
    clients: Dict[ProviderId, ProviderClient] = {}

    for provider in ProviderId:
        config = get_provider_config(provider, configs)
        if not config.enabled:
            logger.debug("Provider %s disabled by configuration", provider.value)
            continue

        api_key = get_api_key(provider, source)
        if api_key is None:
            continue

        try:
            client = _factories[provider](api_key, config, transport=transport)
        except Exception as e:
            logger.warning("Failed to initialize %s, skipping: %s", provider.value, e)
            continue

        if client.is_available:
            clients[provider] = client

    return clients
