from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, Response
from jinja2 import Environment, FileSystemLoader
from pydantic import BaseModel

from ..engine.controller import ContentRequestController
from ..engine.errors import ContentRequestError
from ..engine.sessions import SessionRegistry
from ..generators.registry import get_generator_class, list_generator_specs
from ..schemas.media import UploadedFile
from ..schemas.session import ContentType
from .settings import settings

router = APIRouter()

WEB_DIR = Path(__file__).resolve().parent.parent / "web"
_pages = Environment(loader=FileSystemLoader(str(WEB_DIR)), autoescape=True)


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def _http_error(ex: ContentRequestError) -> HTTPException:
    return HTTPException(status_code=ex.status_code, detail=ex.to_detail())


def _controller(registry: SessionRegistry, session_id: str) -> ContentRequestController:
    try:
        return registry.get(session_id)
    except ContentRequestError as ex:
        raise _http_error(ex)


def _view(controller: ContentRequestController) -> Dict[str, Any]:
    return controller.view().model_dump(mode="json")


class ContentTypeBody(BaseModel):
    content_type: ContentType


class PromptBody(BaseModel):
    prompt: str = ""


@router.get("/", response_class=HTMLResponse)
async def index():
    template = _pages.get_template("index.html")
    return template.render(
        content_types=[ct.value for ct in ContentType],
        reset_ms=int(settings.INDICATOR_RESET_SECONDS * 1000),
    )


@router.get("/content-types")
async def content_types():
    specs = {s["content_type"]: s for s in list_generator_specs()}
    return {
        "content_types": [
            {
                "type": ct.value,
                "accept": ct.accept,
                "generation_supported": get_generator_class(ct.value) is not None,
                "settings_schema": (specs.get(ct.value) or {}).get("settings_schema"),
            }
            for ct in ContentType
        ]
    }


@router.post("/sessions")
async def create_session(registry: SessionRegistry = Depends(get_registry)):
    return _view(registry.create())


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    return _view(_controller(registry, session_id))


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    if not registry.drop(session_id):
        raise HTTPException(status_code=404, detail={"error": "session_not_found", "message": "Session not found"})
    return {"deleted": True}


@router.put("/sessions/{session_id}/content-type")
async def select_content_type(session_id: str, body: ContentTypeBody, registry: SessionRegistry = Depends(get_registry)):
    controller = _controller(registry, session_id)
    controller.select_content_type(body.content_type)
    return _view(controller)


@router.put("/sessions/{session_id}/prompt")
async def set_prompt(session_id: str, body: PromptBody, registry: SessionRegistry = Depends(get_registry)):
    controller = _controller(registry, session_id)
    controller.set_prompt(body.prompt)
    return _view(controller)


@router.post("/sessions/{session_id}/file")
async def upload_file(session_id: str, body: UploadedFile, registry: SessionRegistry = Depends(get_registry)):
    controller = _controller(registry, session_id)
    try:
        await controller.handle_file_upload(body)
    except ContentRequestError as ex:
        raise _http_error(ex)
    return _view(controller)


@router.delete("/sessions/{session_id}/file")
async def remove_file(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    controller = _controller(registry, session_id)
    controller.remove_file()
    return _view(controller)


@router.post("/sessions/{session_id}/generate")
async def generate(session_id: str, background_tasks: BackgroundTasks, registry: SessionRegistry = Depends(get_registry)):
    controller = _controller(registry, session_id)
    try:
        token = controller.begin_generation()
    except ContentRequestError as ex:
        raise _http_error(ex)
    # The page polls the session until the indicator leaves "generating"
    background_tasks.add_task(controller.complete_generation, token)
    return _view(controller)


@router.post("/sessions/{session_id}/clear")
async def clear(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    controller = _controller(registry, session_id)
    controller.clear_all()
    return _view(controller)


@router.get("/sessions/{session_id}/file/content")
async def file_content(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    controller = _controller(registry, session_id)
    try:
        mime, data = controller.file_content()
    except ContentRequestError as ex:
        raise HTTPException(status_code=404, detail=ex.to_detail())
    # The URL carries the upload revision, so a cached copy is never stale
    return Response(content=data, media_type=mime, headers={"Cache-Control": "private, max-age=3600"})
