import httpx
import pytest
from fastapi.testclient import TestClient

from media_scraper.app.api.deps import get_http_client
from media_scraper.app.core.config import get_settings
from media_scraper.app.main import create_app
from media_scraper.app.services.media_extraction import build_client


class FakeUpstream:
    """Records every outbound request and answers with ``handler``."""

    def __init__(self):
        self.requests = []
        self.handler = None

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.handler is None:
            raise AssertionError(f"unexpected upstream call to {request.url}")
        response = self.handler(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response

    @property
    def urls(self):
        return [str(request.url) for request in self.requests]


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def make_client(upstream):
    def _make() -> httpx.AsyncClient:
        return build_client(transport=httpx.MockTransport(upstream))

    return _make


@pytest.fixture
def app(upstream):
    app = create_app()

    async def override_client():
        async with build_client(transport=httpx.MockTransport(upstream)) as client:
            yield client

    app.dependency_overrides[get_http_client] = override_client
    return app


@pytest.fixture
def client(app):
    return TestClient(app)
