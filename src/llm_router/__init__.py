"""llm-router: route LLM requests across providers with fallback.

Example:
    from llm_router import LLMRequest, get_router

    response = await get_router().route(
        LLMRequest(task_type="field_extraction", user_prompt="...")
    )
"""

from llm_router.config import RouterConfig, get_config, set_config
from llm_router.config.settings import _PACKAGE_VERSION
from llm_router.core.errors import (
    AllProvidersFailedError,
    CircuitOpenError,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    RoutingConfigError,
)
from llm_router.core.metrics import ProviderMetrics
from llm_router.core.providers import (
    ImageInput,
    LLMMessage,
    LLMRequest,
    LLMResponse,
    ProviderClient,
    ProviderConfig,
    ProviderId,
    ReportRequest,
    ReportResult,
    ResponseFormat,
    TokenUsage,
)
from llm_router.core.router import Router, RouterSettings, get_router, reset_router_for_testing, set_router
from llm_router.core.routing import RoutingRule, TaskType

__version__ = _PACKAGE_VERSION

__all__ = [
    "__version__",
    "RouterConfig",
    "get_config",
    "set_config",
    "AllProvidersFailedError",
    "CircuitOpenError",
    "ProviderError",
    "ProviderTimeoutError",
    "ProviderUnavailableError",
    "RoutingConfigError",
    "ProviderMetrics",
    "ImageInput",
    "LLMMessage",
    "LLMRequest",
    "LLMResponse",
    "ProviderClient",
    "ProviderConfig",
    "ProviderId",
    "ReportRequest",
    "ReportResult",
    "ResponseFormat",
    "TokenUsage",
    "Router",
    "RouterSettings",
    "get_router",
    "reset_router_for_testing",
    "set_router",
    "RoutingRule",
    "TaskType",
]
