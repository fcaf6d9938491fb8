"""
Shared fixtures: settings in a temp dir and an httpx client on a mock transport.
"""

from typing import Callable, Dict, List

import httpx
import pytest

from productr.core.config import Settings
from productr.core.http import create_client
from productr.schemas.product_image import BinaryFile


class FakeBackend:
    """Routes requests to handlers by (method, path) and records them."""

    def __init__(self):
        self.routes: Dict[tuple, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, url: str, handler) -> None:
        if isinstance(handler, httpx.Response):
            handler = _replay(handler)
        self.routes[(method, url)] = handler

    def json(self, method: str, url: str, body, status_code: int = 200) -> None:
        self.add(method, url, lambda request: httpx.Response(status_code, json=body))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = request.url
        key = (request.method, f"{url.scheme}://{url.host}{url.path}")
        if key not in self.routes:
            key = (request.method, url.path)
        handler = self.routes.get(key)
        if handler is None:
            return httpx.Response(404, json={"message": "Not found"})
        return handler(request)

    def last(self, method: str, path: str) -> httpx.Request:
        for request in reversed(self.requests):
            if request.method == method and request.url.path == path:
                return request
        raise AssertionError(f"No {method} {path} request")


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        BASE_URL="http://api.test/",
        USER_STORE_PATH=tmp_path / "user.json",
        RESEND_OTP_SECONDS=30,
    )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
async def client(test_settings, backend):
    async with create_client(test_settings, transport=httpx.MockTransport(backend)) as c:
        yield c


@pytest.fixture
def png() -> BinaryFile:
    return BinaryFile(name="c.png", content_type="image/png", content=b"\x89PNG-c")


def _replay(response: httpx.Response):
    """A fresh copy of a canned response for every request."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            response.status_code,
            headers=response.headers,
            content=response.content,
        )
    return handler
