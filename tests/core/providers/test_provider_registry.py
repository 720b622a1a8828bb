"""Tests for building provider clients from credentials and configuration."""

import logging

from llm_router.core.providers import (
    DEFAULT_PROVIDER_CONFIGS,
    PROVIDER_FACTORIES,
    ProviderId,
    build_provider_clients,
    get_api_key,
)
from llm_router.core.providers.anthropic import AnthropicProvider
from llm_router.core.providers.openai import OpenAIProvider


class TestGetApiKey:
    def test_present(self):
        assert get_api_key(ProviderId.GROK, {"XAI_API_KEY": "xai-1"}) == "xai-1"

    def test_blank_is_missing(self):
        assert get_api_key(ProviderId.OPENAI, {"OPENAI_API_KEY": "   "}) is None

    def test_absent(self):
        assert get_api_key(ProviderId.CANVA, {}) is None


class TestBuildProviderClients:
    def test_every_provider_has_a_factory(self):
        assert set(PROVIDER_FACTORIES) == set(ProviderId)

    def test_only_providers_with_keys(self):
        clients = build_provider_clients(env={"OPENAI_API_KEY": "sk-1", "ANTHROPIC_API_KEY": "ant-1"})
        assert list(clients) == [ProviderId.ANTHROPIC, ProviderId.OPENAI]
        assert isinstance(clients[ProviderId.ANTHROPIC], AnthropicProvider)
        assert isinstance(clients[ProviderId.OPENAI], OpenAIProvider)

    def test_no_keys_no_clients(self):
        assert build_provider_clients(env={}) == {}

    def test_disabled_provider_skipped(self):
        configs = {ProviderId.OPENAI: DEFAULT_PROVIDER_CONFIGS[ProviderId.OPENAI].merged({"enabled": False})}
        clients = build_provider_clients(configs, env={"OPENAI_API_KEY": "sk-1"})
        assert clients == {}

    def test_config_reaches_adapter(self):
        configs = {ProviderId.OPENAI: DEFAULT_PROVIDER_CONFIGS[ProviderId.OPENAI].merged({"timeout": 5.0})}
        clients = build_provider_clients(configs, env={"OPENAI_API_KEY": "sk-1"})
        assert clients[ProviderId.OPENAI].config.timeout == 5.0

    def test_factory_failure_skips_provider(self, caplog):
        def broken(api_key, config, **kwargs):
            raise RuntimeError("bad sdk")

        with caplog.at_level(logging.WARNING, logger="llm_router.core.providers.registry"):
            clients = build_provider_clients(
                env={"OPENAI_API_KEY": "sk-1", "GEMINI_API_KEY": "g-1"},
                factories={ProviderId.GEMINI: broken},
            )

        assert list(clients) == [ProviderId.OPENAI]
        assert any("Failed to initialize gemini" in r.getMessage() for r in caplog.records)
