from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Type

from openai import AsyncOpenAI
from pydantic import BaseModel

from ..schemas.session import GenerationResult


@dataclass
class GenerationContext:
    client: AsyncOpenAI
    logger: Callable[[str, Dict[str, Any] | None], Awaitable[None]]


class Generator:
    """One remote generation capability, keyed by content type.

    Subclasses set `content_type` and implement `run`. Per-call defaults
    (model, size, ...) live in `settings_model`.
    """

    content_type: str = ""
    summary: str = ""
    settings_model: Optional[Type[BaseModel]] = None

    def __init__(self, settings: Dict[str, Any] | None = None) -> None:
        self.settings: Dict[str, Any] = self.validate_settings(settings or {})

    def validate_settings(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        Model = self.settings_model
        if Model is not None:
            model = Model.model_validate(settings)  # type: ignore[arg-type]
            return model.model_dump()
        return settings

    @classmethod
    def settings_schema(cls) -> Optional[Dict[str, Any]]:
        if cls.settings_model is None:
            return None
        return cls.settings_model.model_json_schema()  # type: ignore[return-value]

    async def run(self, prompt: str, ctx: GenerationContext) -> GenerationResult:  # pragma: no cover - to be implemented by subclasses
        raise NotImplementedError
