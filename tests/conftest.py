"""Shared fixtures for router tests."""

from typing import Dict, Optional

import pytest
from fakes import FakeClock, RecordingSleep, fast_configs

from llm_router.config import set_config
from llm_router.core.providers import ProviderClient, ProviderConfig, ProviderId
from llm_router.core.router import Router, RouterSettings, set_router


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep(clock) -> RecordingSleep:
    return RecordingSleep(clock)


@pytest.fixture
def make_router(clock, sleep):
    """Build a Router around fake providers with a manual clock and sleep."""

    def _make(
        providers: Dict[ProviderId, ProviderClient],
        *,
        rules=None,
        settings: Optional[RouterSettings] = None,
        provider_configs: Optional[Dict[ProviderId, ProviderConfig]] = None,
    ) -> Router:
        return Router(
            rules,
            providers=providers,
            provider_configs=provider_configs or fast_configs(),
            settings=settings,
            clock=clock,
            sleep_func=sleep,
        )

    return _make


@pytest.fixture(autouse=True)
def _reset_globals():
    """Isolate tests from the process-wide router and config."""
    set_router(None)
    set_config(None)
    yield
    set_router(None)
    set_config(None)
