import os
import pathlib
import sys
from typing import Callable, Generator, List

import httpx
import pytest
from fastapi.testclient import TestClient

# Ensure project root is on sys.path so `import aison...` works
PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Keep the real key out of tests; generation goes through a mock transport
os.environ["OPENAI_API_KEY"] = ""
os.environ.setdefault("INDICATOR_RESET_SECONDS", "0.05")


class FakeOpenAI:
    """Records requests and answers like the completions/images endpoints."""

    def __init__(self, text_payload=None, image_payload=None, status_code: int = 200):
        self.requests: List[httpx.Request] = []
        self.text_payload = text_payload if text_payload is not None else {"choices": [{"text": "hello"}]}
        self.image_payload = image_payload if image_payload is not None else {"data": [{"url": "https://img.example.com/1.png"}]}
        self.status_code = status_code

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": {"message": "upstream exploded"}})
        path = request.url.path
        if path.endswith("/completions"):
            return httpx.Response(200, json=self.text_payload)
        if path.endswith("/images/generations"):
            return httpx.Response(200, json=self.image_payload)
        return httpx.Response(404, json={"error": {"message": "not found"}})

    def factory(self) -> Callable[[], httpx.AsyncClient]:
        transport = httpx.MockTransport(self.handler)
        return lambda: httpx.AsyncClient(transport=transport)


@pytest.fixture
def fake_openai() -> FakeOpenAI:
    return FakeOpenAI()


@pytest.fixture
def generation_client(fake_openai):
    from aison.services.generation import GenerationClient

    return GenerationClient(
        api_key="sk-test",
        base_url="https://api.test/v1",
        http_client_factory=fake_openai.factory(),
    )


@pytest.fixture(scope="session")
def client() -> Generator[TestClient, None, None]:
    from aison.server.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def live_generation(client, generation_client):
    # Swap the app-wide client; sessions created afterwards pick it up
    original = client.app.state.generation_client
    client.app.state.generation_client = generation_client
    yield generation_client
    client.app.state.generation_client = original
