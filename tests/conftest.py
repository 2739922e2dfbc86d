from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import Any

import pytest
import requests

from storefront_client.credentials import InMemoryCredentialStore


def make_response(status_code: int = 200, payload: Any = None, text: str | None = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.url = "https://store.example.com/"
    response.encoding = "utf-8"
    if text is not None:
        response._content = text.encode("utf-8")
    elif payload is not None:
        response._content = json.dumps(payload).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = b""
    return response


@dataclass
class RecordedCall:
    method: str
    url: str
    headers: dict[str, str]
    json: Any
    data: Any
    params: Any


class FakeHttpSession:
    """Stands in for ``requests.Session``; replays queued responses in order."""

    def __init__(self, *responses: requests.Response | Exception):
        self.responses: list[requests.Response | Exception] = list(responses)
        self.calls: list[RecordedCall] = []

    def queue(self, *responses: requests.Response | Exception) -> None:
        self.responses.extend(responses)

    def request(self, method, url, headers=None, json=None, data=None, params=None, timeout=None):
        self.calls.append(
            RecordedCall(method=method, url=url, headers=dict(headers or {}), json=json, data=data, params=params)
        )
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        response.url = url
        return response


@dataclass
class RecordingSessionHandle:
    revalidate_result: bool = False
    invalidated: int = 0
    revalidated: int = 0
    events: list[str] = field(default_factory=list)

    def invalidate(self) -> None:
        self.invalidated += 1
        self.events.append("invalidate")

    def revalidate(self) -> bool:
        self.revalidated += 1
        self.events.append("revalidate")
        return self.revalidate_result


@pytest.fixture
def credential_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def session_handle() -> RecordingSessionHandle:
    return RecordingSessionHandle()


@pytest.fixture
def http_session() -> FakeHttpSession:
    return FakeHttpSession()
