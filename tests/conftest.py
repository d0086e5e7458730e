"""
Shared fixtures: an in-process fake of the query assistant backend.

The fake is served through httpx.MockTransport, so BackendClient runs its
real request path without any network access.
"""

import json
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest

from query_assistant.config import BackendConfig
from query_assistant.infrastructure.backend_client import BackendClient

BASE_URL = "http://backend.test"

Handler = Callable[[httpx.Request], Union[httpx.Response, Awaitable[httpx.Response]]]


class FakeBackend:
    """Routes requests by (method, path) and records every request it sees."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._routes: Dict[Tuple[str, str], Handler] = {}

    def respond(
        self,
        method: str,
        path: str,
        status_code: int = 200,
        json_body: Any = None,
        text: Optional[str] = None,
    ) -> None:
        """Answer every request to the route with a fixed response."""
        def handler(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status_code, text=text)
            return httpx.Response(status_code, json=json_body)

        self._routes[(method, path)] = handler

    def route(self, method: str, path: str, handler: Handler) -> None:
        """Answer the route with a custom (sync or async) handler."""
        self._routes[(method, path)] = handler

    def calls(self, path: str) -> List[httpx.Request]:
        return [request for request in self.requests if request.url.path == path]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self._routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, text="Not Found")
        response = route(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def backend_config() -> BackendConfig:
    return BackendConfig(base_url=BASE_URL)


@pytest.fixture
async def client(backend, backend_config):
    """Connected BackendClient wired to the fake backend."""
    client = BackendClient(backend_config, transport=httpx.MockTransport(backend.handler))
    await client.connect()
    yield client
    if client.is_connected():
        await client.close()


@pytest.fixture
def deeply_nested_body() -> str:
    """Valid JSON nested far beyond what json.loads can recurse into."""
    return "[" * 200000 + "]" * 200000
