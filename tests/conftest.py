from typing import Callable, List

import httpx
import pytest
from fastapi.testclient import TestClient

from docs_editor.main import app
from docs_editor.storage import DocsStorage, get_storage
from docs_editor.utils.util import get_ai_client, get_gitlab_client


class Upstream:
    """Fake upstream API: records requests, answers through ``handler``."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(200, json={})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


@pytest.fixture
def docs_root(tmp_path):
    root = tmp_path / "docs"
    root.mkdir()
    return root


@pytest.fixture
def storage(docs_root):
    return DocsStorage(docs_root)


@pytest.fixture
def gitlab():
    return Upstream()


@pytest.fixture
def ai_backend():
    return Upstream()


@pytest.fixture
def client(storage, gitlab, ai_backend):
    async def gitlab_client():
        async with httpx.AsyncClient(base_url="https://gitlab.com/api/v4", transport=httpx.MockTransport(gitlab)) as c:
            yield c

    async def ai_client():
        async with httpx.AsyncClient(base_url="http://ai.test", transport=httpx.MockTransport(ai_backend)) as c:
            yield c

    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_gitlab_client] = gitlab_client
    app.dependency_overrides[get_ai_client] = ai_client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
