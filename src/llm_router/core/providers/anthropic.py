"""Anthropic Messages API adapter.

Best for: long-document analysis, reasoning, synthesis.
"""

import json
import time
from typing import Any, Dict, List

from llm_router.core.providers.base import (
    ChatRole,
    ContentPart,
    ImageInput,
    LLMRequest,
    LLMResponse,
    ProviderId,
    TokenUsage,
)
from llm_router.core.providers.http import HTTPProviderClient

ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MAX_TOKENS = 4096
JSON_INSTRUCTION = "Respond with a single valid JSON object and nothing else."


def _image_block(image: ImageInput) -> Dict[str, Any]:
    if image.is_url:
        return {"type": "image", "source": {"type": "url", "url": image.data}}
    return {
        "type": "image",
        "source": {"type": "base64", "media_type": image.mime_type, "data": image.data},
    }


def _convert_parts(parts: List[ContentPart]) -> List[Dict[str, Any]]:
    blocks: List[Dict[str, Any]] = []
    for part in parts:
        if part.type == "image" and part.image is not None:
            blocks.append(_image_block(part.image))
        else:
            blocks.append({"type": "text", "text": part.text or ""})
    return blocks


class AnthropicProvider(HTTPProviderClient):
    provider = ProviderId.ANTHROPIC
    default_base_url = "https://api.anthropic.com/v1"

    def _headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self._api_key or "",
            "anthropic-version": ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }

    def _system_prompt(self, request: LLMRequest) -> str:
        system = request.system_prompt
        if request.wants_json:
            hint = JSON_INSTRUCTION
            if request.schema:
                hint = f"{hint} It must conform to this JSON schema:\n{json.dumps(dict(request.schema))}"
            system = f"{system}\n\n{hint}" if system else hint
        return system

    def build_messages(self, request: LLMRequest) -> List[Dict[str, Any]]:
        if request.messages:
            messages: List[Dict[str, Any]] = []
            for msg in request.messages:
                if msg.role == ChatRole.SYSTEM:
                    continue
                if isinstance(msg.content, str):
                    messages.append({"role": msg.role.value, "content": msg.content})
                else:
                    messages.append({"role": msg.role.value, "content": _convert_parts(list(msg.content))})
            return messages

        if request.images:
            content: List[Dict[str, Any]] = [_image_block(image) for image in request.images]
            content.append({"type": "text", "text": request.user_prompt})
            return [{"role": "user", "content": content}]
        return [{"role": "user", "content": request.user_prompt}]

    def build_payload(self, request: LLMRequest) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": request.model or self.default_model,
            "max_tokens": request.max_tokens or DEFAULT_MAX_TOKENS,
            "messages": self.build_messages(request),
        }
        system = self._system_prompt(request)
        if system:
            payload["system"] = system
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        return payload

    async def complete(self, request: LLMRequest) -> LLMResponse:
        start = time.monotonic()
        payload = self.build_payload(request)
        data = await self._post("/messages", payload)

        text = "".join(block.get("text", "") for block in data.get("content") or [] if block.get("type") == "text")
        usage = data.get("usage") or {}
        return LLMResponse(
            content=text,
            provider=self.provider,
            model=data.get("model") or payload["model"],
            usage=TokenUsage.of(int(usage.get("input_tokens") or 0), int(usage.get("output_tokens") or 0)),
            latency_ms=self._elapsed_ms(start),
            metadata={"stop_reason": data["stop_reason"]} if data.get("stop_reason") else None,
        )
