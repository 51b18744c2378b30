from __future__ import annotations

from typing import Optional

from jinja2 import Environment
from markupsafe import escape

from ..schemas.session import ContentType, ErrorResult, GenerationResult, ImageUrlResult, Preview, TextResult

# Autoescape is on: every {{ value }} goes through markupsafe exactly once
_env = Environment(autoescape=True)

_TEMPLATES = {
    "text": "<p>{{ prompt }}</p>",
    "image": (
        '<div class="media-preview"><img src="{{ src }}" alt="Preview">'
        '<p class="caption">{{ prompt }}</p></div>'
    ),
    "video": (
        '<div class="media-preview"><video src="{{ src }}" controls></video>'
        '<p class="caption">{{ prompt }}</p></div>'
    ),
    "placeholder": '<p class="placeholder">Please upload a {{ content_type }} file to see preview</p>',
    "pending": '<p class="pending">Generating {{ content_type }}...</p>',
    "result_text": "<p>{{ text }}</p>",
    "result_image": '<img class="generated" src="{{ url }}" alt="Generated Image">',
    "result_error": '<p class="error">{{ message }}</p>',
}


def _render(name: str, **values) -> str:
    return _env.from_string(_TEMPLATES[name]).render(**values)


def escape_html(text: str) -> str:
    """Neutralise markup characters in `text`.

    Returns a plain str, so calling it twice escapes twice.
    """
    return str(escape(str(text)))


def render_preview(
    content_type: ContentType,
    prompt_text: str,
    file_data_url: Optional[str],
    src: Optional[str] = None,
) -> Preview:
    """Preview markup for the current inputs.

    `src` replaces the data URL in the media tag when the file is served from
    its own URL; whether media is shown still depends on `file_data_url`.
    """
    prompt = (prompt_text or "").strip()
    if not prompt:
        return Preview(visible=False, kind="hidden")
    if content_type == ContentType.TEXT:
        return Preview(visible=True, kind="text", html=_render("text", prompt=prompt))
    if file_data_url:
        html = _render(content_type.value, src=src or file_data_url, prompt=prompt)
        return Preview(visible=True, kind="media", html=html)
    return Preview(visible=True, kind="placeholder", html=_render("placeholder", content_type=content_type.value))


def render_pending(content_type: ContentType) -> Preview:
    return Preview(visible=True, kind="pending", html=_render("pending", content_type=content_type.value))


def render_result(result: GenerationResult) -> Preview:
    if isinstance(result, TextResult):
        html = _render("result_text", text=result.text)
    elif isinstance(result, ImageUrlResult):
        html = _render("result_image", url=result.url)
    elif isinstance(result, ErrorResult):
        html = _render("result_error", message=result.message)
    else:
        raise TypeError(f"Unknown generation result: {type(result).__name__}")
    return Preview(visible=True, kind="result", html=html)
