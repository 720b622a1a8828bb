"""Tests for the OpenAI-compatible adapters (OpenAI, Grok, Perplexity)."""

import pytest

from llm_router.core.errors import ProviderError
from llm_router.core.providers import ImageInput, LLMRequest, ProviderId, ResponseFormat
from llm_router.core.providers.openai import GrokProvider, OpenAIProvider, PerplexityProvider

CHAT_OK = {
    "model": "gpt-4o-2024-08-06",
    "choices": [{"message": {"role": "assistant", "content": "hi there"}, "finish_reason": "stop"}],
    "usage": {"prompt_tokens": 12, "completion_tokens": 3, "total_tokens": 15},
}


def _request(**kwargs) -> LLMRequest:
    return LLMRequest(task_type="field_extraction", system_prompt="be brief", user_prompt="hello", **kwargs)


class TestOpenAIComplete:
    @pytest.mark.asyncio
    async def test_payload_and_headers(self, api):
        api.queue(200, CHAT_OK)
        provider = OpenAIProvider("sk-test", transport=api.transport)

        await provider.complete(_request(max_tokens=100, temperature=0.0, response_format=ResponseFormat.JSON))

        sent = api.requests[0]
        assert sent.url == "https://api.openai.com/v1/chat/completions"
        assert sent.headers["authorization"] == "Bearer sk-test"
        body = api.body()
        assert body["model"] == "gpt-4o"
        assert body["max_tokens"] == 100
        assert body["temperature"] == 0.0
        assert body["response_format"] == {"type": "json_object"}
        assert body["messages"] == [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": "hello"},
        ]

    @pytest.mark.asyncio
    async def test_parses_response(self, api):
        api.queue(200, CHAT_OK)
        provider = OpenAIProvider("sk-test", transport=api.transport)

        response = await provider.complete(_request())

        assert response.content == "hi there"
        assert response.provider == ProviderId.OPENAI
        assert response.model == "gpt-4o-2024-08-06"
        assert response.usage.input_tokens == 12
        assert response.usage.output_tokens == 3
        assert response.usage.total_tokens == 15
        assert response.metadata == {"finish_reason": "stop"}
        assert response.latency_ms >= 0

    @pytest.mark.asyncio
    async def test_model_override_and_default_max_tokens(self, api):
        api.queue(200, {"choices": [{"message": {"content": "x"}}]})
        provider = OpenAIProvider("sk-test", transport=api.transport)

        response = await provider.complete(_request(metadata={"model": "gpt-4o-mini"}))

        body = api.body()
        assert body["model"] == "gpt-4o-mini"
        assert body["max_tokens"] == 4096
        assert "temperature" not in body
        assert response.model == "gpt-4o-mini"

    @pytest.mark.asyncio
    async def test_images_become_content_parts(self, api):
        api.queue(200, CHAT_OK)
        provider = OpenAIProvider("sk-test", transport=api.transport)

        await provider.complete(_request(images=[ImageInput(data="QUJD", mime_type="image/png")]))

        user = api.body()["messages"][-1]
        assert user["content"][0] == {"type": "text", "text": "hello"}
        assert user["content"][1]["image_url"]["url"] == "data:image/png;base64,QUJD"

    @pytest.mark.asyncio
    async def test_empty_choices_is_fatal(self, api):
        api.queue(200, {"choices": []})
        provider = OpenAIProvider("sk-test", transport=api.transport)

        with pytest.raises(ProviderError) as exc_info:
            await provider.complete(_request())
        assert exc_info.value.retryable is False

    @pytest.mark.asyncio
    async def test_rate_limit_is_retryable(self, api):
        api.queue(429, {"error": {"message": "Rate limit reached"}}, headers={"Retry-After": "2"})
        provider = OpenAIProvider("sk-test", transport=api.transport)

        with pytest.raises(ProviderError) as exc_info:
            await provider.complete(_request())

        err = exc_info.value
        assert err.retryable is True
        assert err.status_code == 429
        assert err.provider == "openai"
        assert "Rate limit reached" in err.message
        assert "retry after 2s" in err.message

    @pytest.mark.asyncio
    async def test_missing_key_is_fatal(self, api):
        provider = OpenAIProvider(None, transport=api.transport)
        assert provider.is_available is False
        with pytest.raises(ProviderError, match="OPENAI_API_KEY not configured"):
            await provider.complete(_request())
        assert api.requests == []


class TestOpenAIEmbed:
    @pytest.mark.asyncio
    async def test_vectors_returned_in_input_order(self, api):
        api.queue(
            200,
            {
                "data": [
                    {"index": 1, "embedding": [0.3, 0.4]},
                    {"index": 0, "embedding": [0.1, 0.2]},
                ]
            },
        )
        provider = OpenAIProvider("sk-test", transport=api.transport)

        vectors = await provider.embed(["first", "second"])

        assert vectors == [[0.1, 0.2], [0.3, 0.4]]
        assert api.requests[0].url.path == "/v1/embeddings"
        assert api.body() == {"model": "text-embedding-3-small", "input": ["first", "second"]}

    def test_only_openai_supports_embeddings(self):
        assert OpenAIProvider("sk-test").supports_embeddings is True
        assert GrokProvider("xai-test").supports_embeddings is False


class TestCompatibleBackends:
    @pytest.mark.asyncio
    async def test_grok_endpoint(self, api):
        api.queue(200, CHAT_OK)
        provider = GrokProvider("xai-test", transport=api.transport)

        response = await provider.complete(_request())

        assert api.requests[0].url == "https://api.x.ai/v1/chat/completions"
        assert api.body()["model"] == "grok-3"
        assert response.provider == ProviderId.GROK

    @pytest.mark.asyncio
    async def test_perplexity_uses_schema_and_keeps_citations(self, api):
        api.queue(200, {**CHAT_OK, "citations": ["https://a.example", "https://b.example"]})
        provider = PerplexityProvider("pplx-test", transport=api.transport)
        schema = {"type": "object", "properties": {"answer": {"type": "string"}}}

        response = await provider.complete(_request(response_format=ResponseFormat.JSON, schema=schema))

        assert api.requests[0].url == "https://api.perplexity.ai/chat/completions"
        body = api.body()
        assert body["response_format"] == {"type": "json_schema", "json_schema": {"schema": schema}}
        assert response.metadata["citations"] == ["https://a.example", "https://b.example"]

    @pytest.mark.asyncio
    async def test_perplexity_json_without_schema_sends_no_format(self, api):
        api.queue(200, CHAT_OK)
        provider = PerplexityProvider("pplx-test", transport=api.transport)

        await provider.complete(_request(response_format=ResponseFormat.JSON))

        assert "response_format" not in api.body()

    @pytest.mark.asyncio
    async def test_perplexity_drops_images(self, api):
        api.queue(200, CHAT_OK)
        provider = PerplexityProvider("pplx-test", transport=api.transport)

        await provider.complete(_request(images=[ImageInput(data="QUJD")]))

        assert api.body()["messages"][-1] == {"role": "user", "content": "hello"}
