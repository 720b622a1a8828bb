"""Shared fixtures for provider adapter tests.

Adapters accept an httpx transport, so every test drives them through
``httpx.MockTransport`` with a scripted queue of responses.
"""

import json
from typing import Any, Dict, List, Optional, Union

import httpx
import pytest

Scripted = Union[httpx.Response, Exception]


class ScriptedAPI:
    """Plays back queued responses and records every request it receives."""

    def __init__(self):
        self.responses: List[Scripted] = []
        self.requests: List[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def queue(self, status: int = 200, body: Any = None, headers: Optional[Dict[str, str]] = None) -> "ScriptedAPI":
        if isinstance(body, (dict, list)):
            response = httpx.Response(status, json=body, headers=headers)
        else:
            response = httpx.Response(status, text=body or "", headers=headers)
        self.responses.append(response)
        return self

    def fail(self, exc: Exception) -> "ScriptedAPI":
        self.responses.append(exc)
        return self

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def body(self, index: int = -1) -> Dict[str, Any]:
        return json.loads(self.requests[index].content)


@pytest.fixture
def api() -> ScriptedAPI:
    return ScriptedAPI()
