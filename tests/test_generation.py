from __future__ import annotations

import asyncio
import json

import httpx

from aison.generators.registry import get_generator_class, list_generator_specs
from aison.schemas.session import ErrorResult, ImageUrlResult, TextResult
from aison.services.generation import NOT_CONFIGURED, UNSUPPORTED, GenerationClient


def test_registry_has_text_and_image_only():
    import aison.generators  # noqa: F401

    assert get_generator_class("text") is not None
    assert get_generator_class("image") is not None
    assert get_generator_class("video") is None
    types = [s["content_type"] for s in list_generator_specs()]
    assert types == ["image", "text"]


def test_text_generation_request_and_result(generation_client, fake_openai):
    result = asyncio.run(generation_client.generate("Say hi", "text"))
    assert result == TextResult(text="hello")

    assert len(fake_openai.requests) == 1
    req = fake_openai.requests[0]
    assert req.method == "POST"
    assert req.url.path == "/v1/completions"
    assert req.headers["authorization"] == "Bearer sk-test"
    assert json.loads(req.content) == {"model": "gpt-3.5-turbo-instruct", "prompt": "Say hi", "max_tokens": 150}


def test_text_generation_without_choices(generation_client, fake_openai):
    fake_openai.text_payload = {"choices": []}
    result = asyncio.run(generation_client.generate("Say hi", "text"))
    assert result == TextResult(text="No response received.")


def test_image_generation_request_and_result(generation_client, fake_openai):
    result = asyncio.run(generation_client.generate("a red fox", "image"))
    assert result == ImageUrlResult(url="https://img.example.com/1.png")

    req = fake_openai.requests[0]
    assert req.url.path == "/v1/images/generations"
    assert json.loads(req.content) == {"prompt": "a red fox", "n": 1, "size": "512x512"}


def test_image_generation_without_images(generation_client, fake_openai):
    fake_openai.image_payload = {"data": []}
    result = asyncio.run(generation_client.generate("a red fox", "image"))
    assert result == ErrorResult(message="No image returned.")


def test_video_is_unsupported_without_request(generation_client, fake_openai):
    for ct in ("video", "audio"):
        result = asyncio.run(generation_client.generate("anything", ct))
        assert result == ErrorResult(message=UNSUPPORTED)
    assert fake_openai.requests == []


def test_remote_error_status_becomes_error_result(generation_client, fake_openai):
    fake_openai.status_code = 500
    result = asyncio.run(generation_client.generate("Say hi", "text"))
    assert isinstance(result, ErrorResult)
    assert result.message.startswith("Error generating text:")
    # Single attempt, no retries
    assert len(fake_openai.requests) == 1


def test_transport_error_becomes_error_result():
    def _boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    transport = httpx.MockTransport(_boom)
    gc = GenerationClient(
        api_key="sk-test",
        base_url="https://api.test/v1",
        http_client_factory=lambda: httpx.AsyncClient(transport=transport),
    )
    result = asyncio.run(gc.generate("a red fox", "image"))
    assert isinstance(result, ErrorResult)
    assert result.message.startswith("Error generating image:")


def test_missing_key_refuses_without_request(fake_openai):
    gc = GenerationClient(api_key="", base_url="https://api.test/v1", http_client_factory=fake_openai.factory())
    assert gc.configured is False
    result = asyncio.run(gc.generate("Say hi", "text"))
    assert result == ErrorResult(message=NOT_CONFIGURED)
    assert fake_openai.requests == []


def test_generator_settings_override(fake_openai):
    gc = GenerationClient(
        api_key="sk-test",
        base_url="https://api.test/v1",
        http_client_factory=fake_openai.factory(),
        generator_settings={"text": {"model": "my-model", "max_tokens": 20}, "image": {"size": "256x256"}},
    )
    asyncio.run(gc.generate("p", "text"))
    asyncio.run(gc.generate("p", "image"))
    assert json.loads(fake_openai.requests[0].content)["model"] == "my-model"
    assert json.loads(fake_openai.requests[0].content)["max_tokens"] == 20
    assert json.loads(fake_openai.requests[1].content)["size"] == "256x256"
