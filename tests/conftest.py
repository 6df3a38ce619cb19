from __future__ import annotations

import json
from datetime import date

import pytest
import requests


class FakeResponse:
    def __init__(self, body=b"", status_code: int = 200):
        if isinstance(body, (dict, list)):
            body = json.dumps(body).encode()
        elif isinstance(body, str):
            body = body.encode()
        self.content = body
        self.status_code = status_code

    @property
    def text(self) -> str:
        return self.content.decode()

    def json(self):
        return json.loads(self.content)

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession(requests.Session):
    """Serves canned responses by URL; exact match first, then prefix."""

    def __init__(self, routes: dict[str, FakeResponse | dict | list | str | bytes] | None = None):
        super().__init__()
        self.routes = {
            url: body if isinstance(body, FakeResponse) else FakeResponse(body)
            for url, body in (routes or {}).items()
        }
        self.requested: list[str] = []
        self.calls: list[tuple[str, dict]] = []

    def get(self, url, **kwargs):
        self.requested.append(url)
        self.calls.append((url, kwargs))
        if url in self.routes:
            return self.routes[url]
        for prefix, response in self.routes.items():
            if url.startswith(prefix):
                return response
        raise requests.ConnectionError(f"no route for {url}")


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def today() -> date:
    return date(2026, 10, 17)
