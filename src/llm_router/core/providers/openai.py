"""OpenAI-compatible chat completion adapters.

``OpenAICompatibleProvider`` speaks the ``/chat/completions`` wire format
shared by OpenAI, xAI (Grok) and Perplexity. ``OpenAIProvider`` adds the
embeddings endpoint.

Best for: structured JSON output, embeddings, fast extraction.
"""

import logging
import time
from typing import Any, Dict, List, Optional

from llm_router.core.errors import ProviderError
from llm_router.core.providers.base import (
    ChatRole,
    ContentPart,
    LLMRequest,
    LLMResponse,
    ProviderId,
    TokenUsage,
)
from llm_router.core.providers.http import HTTPProviderClient

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 4096
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"


def _convert_parts(parts: List[ContentPart]) -> List[Dict[str, Any]]:
    converted: List[Dict[str, Any]] = []
    for part in parts:
        if part.type == "image" and part.image is not None:
            converted.append({"type": "image_url", "image_url": {"url": part.image.as_data_url()}})
        else:
            converted.append({"type": "text", "text": part.text or ""})
    return converted


class OpenAICompatibleProvider(HTTPProviderClient):
    """Adapter for any backend exposing OpenAI-style chat completions."""

    chat_path = "/chat/completions"
    supports_json_mode = True
    supports_images = True

    def build_messages(self, request: LLMRequest) -> List[Dict[str, Any]]:
        messages: List[Dict[str, Any]] = []
        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})

        if request.messages:
            for msg in request.messages:
                if msg.role == ChatRole.SYSTEM:
                    continue
                if msg.role == ChatRole.USER and not isinstance(msg.content, str) and self.supports_images:
                    messages.append({"role": "user", "content": _convert_parts(list(msg.content))})
                else:
                    messages.append({"role": msg.role.value, "content": msg.text()})
            return messages

        if request.images and self.supports_images:
            parts: List[Dict[str, Any]] = [{"type": "text", "text": request.user_prompt}]
            for image in request.images:
                parts.append({"type": "image_url", "image_url": {"url": image.as_data_url()}})
            messages.append({"role": "user", "content": parts})
        else:
            messages.append({"role": "user", "content": request.user_prompt})
        return messages

    def build_payload(self, request: LLMRequest) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": request.model or self.default_model,
            "messages": self.build_messages(request),
            "max_tokens": request.max_tokens or DEFAULT_MAX_TOKENS,
        }
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        if request.wants_json and self.supports_json_mode:
            payload["response_format"] = {"type": "json_object"}
        return payload

    def parse_response(self, data: Dict[str, Any], latency_ms: float, requested_model: str) -> LLMResponse:
        choices = data.get("choices") or []
        if not choices:
            raise ProviderError(
                "Response contained no choices",
                provider=self.provider.value,
                retryable=False,
            )
        message = choices[0].get("message") or {}
        usage = data.get("usage") or {}
        metadata: Dict[str, Any] = {}
        if choices[0].get("finish_reason"):
            metadata["finish_reason"] = choices[0]["finish_reason"]
        if data.get("citations"):
            metadata["citations"] = list(data["citations"])

        return LLMResponse(
            content=message.get("content") or "",
            provider=self.provider,
            model=data.get("model") or requested_model,
            usage=TokenUsage.of(
                int(usage.get("prompt_tokens") or 0),
                int(usage.get("completion_tokens") or 0),
                usage.get("total_tokens"),
            ),
            latency_ms=latency_ms,
            metadata=metadata or None,
        )

    async def complete(self, request: LLMRequest) -> LLMResponse:
        start = time.monotonic()
        payload = self.build_payload(request)
        data = await self._post(self.chat_path, payload)
        return self.parse_response(data, self._elapsed_ms(start), payload["model"])


class OpenAIProvider(OpenAICompatibleProvider):
    """OpenAI adapter. The only provider that serves embeddings."""

    provider = ProviderId.OPENAI
    default_base_url = "https://api.openai.com/v1"

    @property
    def supports_embeddings(self) -> bool:
        return True

    async def embed(self, texts: List[str], model: Optional[str] = None) -> List[List[float]]:
        """Generate text embeddings, one vector per input in input order."""
        data = await self._post("/embeddings", {"model": model or DEFAULT_EMBEDDING_MODEL, "input": list(texts)})
        items = sorted(data.get("data") or [], key=lambda item: item.get("index", 0))
        return [list(item.get("embedding") or []) for item in items]


class GrokProvider(OpenAICompatibleProvider):
    """xAI Grok adapter (OpenAI-compatible). Used for real-time market context."""

    provider = ProviderId.GROK
    default_base_url = "https://api.x.ai/v1"


class PerplexityProvider(OpenAICompatibleProvider):
    """Perplexity Sonar adapter. Returns sourced answers; citations land in metadata."""

    provider = ProviderId.PERPLEXITY
    default_base_url = "https://api.perplexity.ai"
    supports_json_mode = False
    supports_images = False

    def build_payload(self, request: LLMRequest) -> Dict[str, Any]:
        payload = super().build_payload(request)
        if request.wants_json and request.schema:
            payload["response_format"] = {"type": "json_schema", "json_schema": {"schema": dict(request.schema)}}
        return payload
