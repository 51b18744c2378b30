from __future__ import annotations

from typing import Any, Callable, Dict, Type

from .base import Generator

_CLASS_REGISTRY: Dict[str, Type[Generator]] = {}


def register(content_type: str) -> Callable[[Type[Generator]], Type[Generator]]:
    def decorator(cls: Type[Generator]) -> Type[Generator]:
        _CLASS_REGISTRY[content_type] = cls
        return cls
    return decorator


def get_generator_class(content_type: str) -> Type[Generator] | None:
    return _CLASS_REGISTRY.get(content_type)


def create_generator(content_type: str, settings: Dict[str, Any] | None = None) -> Generator:
    cls = _CLASS_REGISTRY.get(content_type)
    if cls is None:
        raise ValueError(f"No generator registered for content type: {content_type}")
    return cls(settings=settings)


def list_generator_specs() -> list[Dict[str, Any]]:
    specs: list[Dict[str, Any]] = []
    for content_type, cls in sorted(_CLASS_REGISTRY.items(), key=lambda kv: kv[0]):
        specs.append({
            "content_type": content_type,
            "summary": getattr(cls, "summary", ""),
            "settings_schema": cls.settings_schema(),
        })
    return specs
