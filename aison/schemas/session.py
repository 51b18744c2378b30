from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from .media import FileHandle


class ContentType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"

    @property
    def is_media(self) -> bool:
        return self in (ContentType.IMAGE, ContentType.VIDEO)

    @property
    def accept(self) -> Optional[str]:
        """File-picker accept filter for this type, None when uploads are hidden."""
        return f"{self.value}/*" if self.is_media else None


@dataclass
class SessionState:
    content_type: ContentType = ContentType.TEXT
    selected_file: Optional[FileHandle] = None
    prompt_text: str = ""


class TextResult(BaseModel):
    kind: Literal["text"] = "text"
    text: str


class ImageUrlResult(BaseModel):
    kind: Literal["image_url"] = "image_url"
    url: str


class ErrorResult(BaseModel):
    kind: Literal["error"] = "error"
    message: str


GenerationResult = Annotated[Union[TextResult, ImageUrlResult, ErrorResult], Field(discriminator="kind")]


class Preview(BaseModel):
    visible: bool
    kind: Literal["hidden", "text", "media", "placeholder", "pending", "result"]
    html: str = ""


IndicatorPhase = Literal["idle", "generating", "generated", "failed"]

INDICATOR_LABELS = {
    "idle": "Generate Content",
    "generating": "Generating...",
    "generated": "Generated!",
    "failed": "Generation failed",
}


class Indicator(BaseModel):
    phase: IndicatorPhase = "idle"
    label: str = INDICATOR_LABELS["idle"]
    busy: bool = False

    @classmethod
    def for_phase(cls, phase: IndicatorPhase) -> "Indicator":
        return cls(phase=phase, label=INDICATOR_LABELS[phase], busy=phase == "generating")


class Banner(BaseModel):
    kind: Literal["success", "error"]
    message: str


class FileInfo(BaseModel):
    name: str
    byte_size: int
    size_label: str
    mime_type: str
    ready: bool = False
    # Where the bytes are served; set once the read has finished
    content_url: Optional[str] = None


class SessionView(BaseModel):
    """Everything the browser needs to redraw the page."""

    session_id: Optional[str] = None
    content_type: ContentType
    prompt: str
    upload_visible: bool
    accept: Optional[str] = None
    file: Optional[FileInfo] = None
    preview: Preview
    indicator: Indicator
    banners: List[Banner] = Field(default_factory=list)
    result: Optional[GenerationResult] = None
