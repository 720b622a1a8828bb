"""
Provider abstraction for llm-router.

Defines the request/response value types every backend adapter speaks and
the ``ProviderClient`` contract the router depends on. Concrete adapters
live next to this module; the router never imports them directly.

Example:
    from llm_router.core.providers.base import (
        LLMRequest, LLMResponse, ProviderClient, ProviderId
    )

    class MyProvider(ProviderClient):
        provider = ProviderId.OPENAI

        @property
        def is_available(self) -> bool:
            return True

        async def complete(self, request: LLMRequest) -> LLMResponse:
            ...
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

logger = logging.getLogger(__name__)


# =============================================================================
# Enums
# =============================================================================


class ProviderId(str, Enum):
    """Closed set of backends the router knows about.

    Declaration order is the safety-net order used when a task's preferred
    chain is entirely unavailable.
    """

    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    OPENAI = "openai"
    GROK = "grok"
    PERPLEXITY = "perplexity"
    CANVA = "canva"

    @classmethod
    def parse(cls, value: Union[str, "ProviderId"]) -> "ProviderId":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


# Report-generation-only backends never serve completions.
REPORT_ONLY_PROVIDERS = frozenset({ProviderId.CANVA})


class ChatRole(str, Enum):
    """Role of a message in a chat conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ResponseFormat(str, Enum):
    TEXT = "text"
    JSON = "json"


# =============================================================================
# Data Classes - Messages
# =============================================================================


@dataclass(frozen=True)
class ImageInput:
    """An image attached to a request.

    Attributes:
        data: Base64 payload, or a URL when ``is_url`` is set
        mime_type: MIME type of the image (e.g. ``image/png``)
        is_url: Whether ``data`` is a URL rather than inline base64
    """

    data: str
    mime_type: str = "image/png"
    is_url: bool = False

    def as_data_url(self) -> str:
        if self.is_url:
            return self.data
        return f"data:{self.mime_type};base64,{self.data}"


@dataclass(frozen=True)
class ContentPart:
    """One part of a multi-part message: text or an image."""

    type: str  # "text" | "image"
    text: Optional[str] = None
    image: Optional[ImageInput] = None

    @classmethod
    def of_text(cls, text: str) -> "ContentPart":
        return cls(type="text", text=text)

    @classmethod
    def of_image(cls, image: ImageInput) -> "ContentPart":
        return cls(type="image", image=image)


@dataclass(frozen=True)
class LLMMessage:
    """A message in the conversation history.

    Attributes:
        role: The role of the message sender
        content: Plain text, or an ordered sequence of content parts
    """

    role: ChatRole
    content: Union[str, Sequence[ContentPart]]

    def text(self) -> str:
        """Flatten content to text, dropping image parts."""
        if isinstance(self.content, str):
            return self.content
        return "\n".join(part.text or "" for part in self.content if part.type == "text")


# =============================================================================
# Data Classes - Requests / Responses
# =============================================================================


@dataclass(frozen=True)
class LLMRequest:
    """Provider-agnostic completion request.

    Immutable once constructed: the router produces a new instance when it
    fills in routing-rule defaults.

    Attributes:
        task_type: Task identifier used to resolve the routing rule
        system_prompt: System instructions
        user_prompt: User input (ignored by adapters when ``messages`` is set)
        messages: Optional ordered conversation history
        images: Optional image attachments for the user turn
        max_tokens: Maximum tokens to generate
        temperature: Sampling temperature
        response_format: ``text`` or ``json``
        schema: Optional JSON schema hint for structured output
        metadata: Free-form metadata; ``metadata["model"]`` overrides the model
    """

    task_type: str
    system_prompt: str = ""
    user_prompt: str = ""
    messages: Optional[Sequence[LLMMessage]] = None
    images: Optional[Sequence[ImageInput]] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    response_format: Optional[ResponseFormat] = None
    schema: Optional[Mapping[str, Any]] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @property
    def model(self) -> Optional[str]:
        value = self.metadata.get("model") if self.metadata else None
        return str(value) if value else None

    @property
    def wants_json(self) -> bool:
        return self.response_format == ResponseFormat.JSON

    def with_defaults(
        self,
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        response_format: Optional[ResponseFormat] = None,
        model: Optional[str] = None,
    ) -> "LLMRequest":
        """Return a copy where unset fields take the given defaults.

        Values already present on the request always win.
        """
        metadata = dict(self.metadata or {})
        if model and not metadata.get("model"):
            metadata["model"] = model
        return replace(
            self,
            max_tokens=self.max_tokens if self.max_tokens is not None else max_tokens,
            temperature=self.temperature if self.temperature is not None else temperature,
            response_format=self.response_format if self.response_format is not None else response_format,
            metadata=metadata,
        )


@dataclass(frozen=True)
class TokenUsage:
    """Token accounting for a single completion."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def of(cls, input_tokens: int, output_tokens: int, total_tokens: Optional[int] = None) -> "TokenUsage":
        total = total_tokens if total_tokens is not None else input_tokens + output_tokens
        return cls(input_tokens=input_tokens, output_tokens=output_tokens, total_tokens=total)


@dataclass(frozen=True)
class LLMResponse:
    """Result of one successful provider attempt."""

    content: str
    provider: ProviderId
    model: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    latency_ms: float = 0.0
    cached: Optional[bool] = None
    metadata: Optional[Mapping[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "content": self.content,
            "provider": self.provider.value,
            "model": self.model,
            "usage": {
                "input_tokens": self.usage.input_tokens,
                "output_tokens": self.usage.output_tokens,
                "total_tokens": self.usage.total_tokens,
            },
            "latency_ms": round(self.latency_ms, 2),
        }
        if self.cached is not None:
            result["cached"] = self.cached
        if self.metadata:
            result["metadata"] = dict(self.metadata)
        return result


@dataclass(frozen=True)
class ReportRequest:
    """Parameters for report generation through a design backend.

    Attributes:
        template_id: Brand template to autofill
        title: Title for the generated design
        fields: Template field name -> text value
    """

    template_id: str
    title: str
    fields: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ReportResult:
    design_id: str
    url: Optional[str] = None
    edit_url: Optional[str] = None
    status: str = "success"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "design_id": self.design_id,
            "url": self.url,
            "edit_url": self.edit_url,
            "status": self.status,
        }


# =============================================================================
# Provider contract
# =============================================================================


class ProviderClient(ABC):
    """Capability interface every backend adapter implements.

    ``complete`` must raise ``ProviderError`` (with ``retryable`` set from
    the transport outcome) on failure. ``health_check`` must never raise.
    """

    provider: ProviderId

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Whether the adapter holds the credentials it needs."""

    @property
    def supports_embeddings(self) -> bool:
        return False

    @property
    def supports_reports(self) -> bool:
        return False

    @abstractmethod
    async def complete(self, request: LLMRequest) -> LLMResponse:
        """Send a completion request."""

    async def embed(self, texts: List[str], model: Optional[str] = None) -> List[List[float]]:
        raise NotImplementedError(f"{self.provider.value} does not support embeddings")

    async def generate_report(self, request: ReportRequest) -> ReportResult:
        raise NotImplementedError(f"{self.provider.value} does not support report generation")

    async def health_check(self) -> bool:
        """Check if the provider is reachable.

        Default implementation sends a tiny completion. Adapters with a
        cheaper check override this.
        """
        try:
            await self.complete(LLMRequest(task_type="health_check", user_prompt="ping", max_tokens=10))
            return True
        except Exception as e:
            logger.warning(f"Health check failed for {self.provider.value}: {e}")
            return False
