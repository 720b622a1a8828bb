"""Provider adapters and the contract the router depends on."""

from llm_router.core.providers.base import (
    REPORT_ONLY_PROVIDERS,
    ChatRole,
    ContentPart,
    ImageInput,
    LLMMessage,
    LLMRequest,
    LLMResponse,
    ProviderClient,
    ProviderId,
    ReportRequest,
    ReportResult,
    ResponseFormat,
    TokenUsage,
)
from llm_router.core.providers.config import (
    DEFAULT_PROVIDER_CONFIGS,
    PROVIDER_ENV_KEYS,
    ProviderConfig,
    get_api_key,
    get_provider_config,
)
from llm_router.core.providers.registry import PROVIDER_FACTORIES, build_provider_clients

__all__ = [
    "REPORT_ONLY_PROVIDERS",
    "ChatRole",
    "ContentPart",
    "ImageInput",
    "LLMMessage",
    "LLMRequest",
    "LLMResponse",
    "ProviderClient",
    "ProviderId",
    "ReportRequest",
    "ReportResult",
    "ResponseFormat",
    "TokenUsage",
    "DEFAULT_PROVIDER_CONFIGS",
    "PROVIDER_ENV_KEYS",
    "ProviderConfig",
    "get_api_key",
    "get_provider_config",
    "PROVIDER_FACTORIES",
    "build_provider_clients",
]
