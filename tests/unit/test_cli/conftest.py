"""Shared fixtures for CLI command tests."""

import pytest
from click.testing import CliRunner
from fakes import FakeProvider

from llm_router.core.providers import ProviderId
from llm_router.core.router import set_router


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture
def installed_router(make_router):
    """Install a router over fake providers as the process-wide router."""

    def _install(providers=None, **kwargs):
        if providers is None:
            providers = {
                ProviderId.ANTHROPIC: FakeProvider(ProviderId.ANTHROPIC, ["analysis"], model="claude-sonnet-4-20250514"),
                ProviderId.OPENAI: FakeProvider(ProviderId.OPENAI, ['{"ok": true}']),
            }
        router = make_router(providers, **kwargs)
        set_router(router)
        return router

    return _install
