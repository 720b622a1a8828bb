"""Google Gemini ``generateContent`` adapter.

Best for: multimodal (spreadsheet, chart, scanned page) extraction.
"""

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


def _image_part(image: ImageInput) -> Dict[str, Any]:
    if image.is_url:
        return {"fileData": {"mimeType": image.mime_type, "fileUri": image.data}}
    return {"inlineData": {"mimeType": image.mime_type, "data": image.data}}


def _convert_parts(parts: List[ContentPart]) -> List[Dict[str, Any]]:
    converted: List[Dict[str, Any]] = []
    for part in parts:
        if part.type == "image" and part.image is not None:
            converted.append(_image_part(part.image))
        else:
            converted.append({"text": part.text or ""})
    return converted


def _google_error_format(data: Dict[str, Any]) -> str:
    error = data.get("error")
    if isinstance(error, dict):
        status = error.get("status")
        message = error.get("message", "")
        return f"{status}: {message}" if status else message
    return ""


class GeminiProvider(HTTPProviderClient):
    provider = ProviderId.GEMINI
    default_base_url = "https://generativelanguage.googleapis.com/v1beta"

    def _headers(self) -> Dict[str, str]:
        return {"x-goog-api-key": self._api_key or "", "Content-Type": "application/json"}

    def _error_format(self, data: Dict[str, Any]) -> str:
        return _google_error_format(data)

    def build_contents(self, request: LLMRequest) -> List[Dict[str, Any]]:
        if request.messages:
            contents: List[Dict[str, Any]] = []
            for msg in request.messages:
                if msg.role == ChatRole.SYSTEM:
                    continue
                role = "model" if msg.role == ChatRole.ASSISTANT else "user"
                parts = [{"text": msg.content}] if isinstance(msg.content, str) else _convert_parts(list(msg.content))
                contents.append({"role": role, "parts": parts})
            return contents

        parts: List[Dict[str, Any]] = [_image_part(image) for image in request.images or ()]
        parts.append({"text": request.user_prompt})
        return [{"role": "user", "parts": parts}]

    def build_payload(self, request: LLMRequest) -> Dict[str, Any]:
        generation_config: Dict[str, Any] = {}
        if request.max_tokens is not None:
            generation_config["maxOutputTokens"] = request.max_tokens
        if request.temperature is not None:
            generation_config["temperature"] = request.temperature
        if request.wants_json:
            generation_config["responseMimeType"] = "application/json"
            if request.schema:
                generation_config["responseSchema"] = dict(request.schema)

        payload: Dict[str, Any] = {"contents": self.build_contents(request)}
        if request.system_prompt:
            payload["systemInstruction"] = {"parts": [{"text": request.system_prompt}]}
        if generation_config:
            payload["generationConfig"] = generation_config
        return payload

    async def complete(self, request: LLMRequest) -> LLMResponse:
        start = time.monotonic()
        model = request.model or self.default_model
        data = await self._post(f"/models/{model}:generateContent", self.build_payload(request))

        candidates = data.get("candidates") or []
        first = candidates[0] if candidates else {}
        parts = (first.get("content") or {}).get("parts") or []
        usage = data.get("usageMetadata") or {}
        metadata = {"finish_reason": first["finishReason"]} if first.get("finishReason") else None

        return LLMResponse(
            content="".join(part.get("text", "") for part in parts),
            provider=self.provider,
            model=data.get("modelVersion") or model,
            usage=TokenUsage.of(
                int(usage.get("promptTokenCount") or 0),
                int(usage.get("candidatesTokenCount") or 0),
                usage.get("totalTokenCount"),
            ),
            latency_ms=self._elapsed_ms(start),
            metadata=metadata,
        )
