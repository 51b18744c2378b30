from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

import httpx
from openai import AsyncOpenAI

from .. import generators  # noqa: F401 - ensure registry is populated
from ..generators.base import GenerationContext
from ..generators.registry import create_generator, get_generator_class
from ..schemas.session import ContentType, ErrorResult, GenerationResult
from ..server.settings import settings
from . import http as http_svc

UNSUPPORTED = "Unsupported content type selected."
NOT_CONFIGURED = "Generation is not configured: OPENAI_API_KEY is missing on the server."

logger = logging.getLogger("generation")


def default_generator_settings() -> Dict[str, Dict[str, Any]]:
    return {
        "text": {"model": settings.TEXT_MODEL, "max_tokens": settings.TEXT_MAX_TOKENS},
        "image": {"size": settings.IMAGE_SIZE, "n": settings.IMAGE_COUNT},
    }


class GenerationClient:
    """Single-attempt calls to the generative API, normalised to a GenerationResult.

    Never raises: transport, status and decoding failures come back as
    ErrorResult carrying the underlying description.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        http_client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
        generator_settings: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> None:
        self._api_key = settings.OPENAI_API_KEY if api_key is None else api_key
        self._base_url = base_url or settings.OPENAI_BASE_URL
        self._http_client_factory = http_client_factory
        self._generator_settings = default_generator_settings() if generator_settings is None else generator_settings

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def generate(self, prompt: str, content_type: ContentType | str) -> GenerationResult:
        try:
            ct = ContentType(content_type)
        except ValueError:
            logger.warning("generation.generate: unknown content type", extra={"content_type": str(content_type)})
            return ErrorResult(message=UNSUPPORTED)

        if get_generator_class(ct.value) is None:
            logger.info("generation.generate: no generator", extra={"content_type": ct.value})
            return ErrorResult(message=UNSUPPORTED)

        if not self._api_key:
            logger.warning("generation.generate: OPENAI_API_KEY missing, refusing request")
            return ErrorResult(message=NOT_CONFIGURED)

        generator = create_generator(ct.value, self._generator_settings.get(ct.value))
        factory = self._http_client_factory or http_svc.create_http_client
        client = AsyncOpenAI(
            api_key=self._api_key,
            base_url=self._base_url,
            http_client=factory(),
            max_retries=0,
        )

        async def log(message: str, data: Dict[str, Any] | None = None) -> None:
            logger.info(message, extra={"data": data or {}})

        try:
            return await generator.run(prompt, GenerationContext(client=client, logger=log))
        except Exception as ex:
            logger.warning("generation.generate: %s request failed: %s", ct.value, ex)
            return ErrorResult(message=f"Error generating {ct.value}: {ex}")
        finally:
            await client.close()
