from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Tuple

from ..schemas.media import FileHandle, UploadedFile
from ..schemas.session import (
    Banner,
    ContentType,
    ErrorResult,
    FileInfo,
    GenerationResult,
    Indicator,
    Preview,
    SessionState,
    SessionView,
)
from ..server.settings import settings
from ..services.generation import GenerationClient
from .errors import GenerationInProgress, InvalidFileType, MissingFile, MissingPrompt
from .inspector import check_size, decode_data_url, format_size, read_as_data_url, validate_file_type
from .preview import render_pending, render_preview, render_result

logger = logging.getLogger("controller")


@dataclass
class _PendingRequest:
    token: int
    prompt: str
    content_type: ContentType


class ContentRequestController:
    """Owns one page's state and mediates between user actions, preview and generation.

    Every user action mutates state synchronously. Async completions (file reads,
    generation responses, the indicator reset timer) re-check that they are still
    current before touching state: file reads compare the selected handle,
    generation and the timer compare the generation token.
    """

    def __init__(
        self,
        generation_client: GenerationClient,
        *,
        session_id: Optional[str] = None,
        reader: Callable[[UploadedFile], Awaitable[str]] = read_as_data_url,
        reset_delay: Optional[float] = None,
        max_upload_bytes: Optional[int] = None,
        media_url: Optional[Callable[[int], str]] = None,
    ) -> None:
        self.session_id = session_id
        self.state = SessionState()
        self.preview = Preview(visible=False, kind="hidden")
        self.indicator = Indicator()
        self.banners: List[Banner] = []
        self.result: Optional[GenerationResult] = None

        self._client = generation_client
        self._reader = reader
        self._reset_delay = settings.INDICATOR_RESET_SECONDS if reset_delay is None else reset_delay
        self._max_upload_bytes = settings.MAX_UPLOAD_BYTES if max_upload_bytes is None else max_upload_bytes
        self._media_url = media_url
        self._file_revision = 0
        self._generation_token = 0
        self._pending: Optional[_PendingRequest] = None
        self._reset_handle: Optional[asyncio.TimerHandle] = None

    # ------------------------------------------------------------------
    # User actions

    def select_content_type(self, content_type: ContentType | str) -> None:
        ct = ContentType(content_type)
        self.state.content_type = ct
        selected = self.state.selected_file
        if not ct.is_media:
            self.state.selected_file = None
        elif selected is not None and not validate_file_type(selected.mime_type, ct):
            # An image stays attached only while the type is image, same for video
            self.state.selected_file = None
        self.update_preview()

    def set_prompt(self, prompt: str) -> None:
        self.state.prompt_text = prompt or ""
        self.update_preview()

    async def handle_file_upload(self, file: UploadedFile) -> FileHandle:
        ct = self.state.content_type
        if not validate_file_type(file.mime, ct):
            raise InvalidFileType(f"Please select a valid {ct.value} file.")
        byte_size = file.payload_size()
        check_size(byte_size, self._max_upload_bytes)

        previous = self.state.selected_file
        self._file_revision += 1
        handle = FileHandle(name=file.filename, byte_size=byte_size, mime_type=file.mime, revision=self._file_revision)
        self.state.selected_file = handle
        self.update_preview()
        logger.info("controller.upload: accepted", extra={"session_id": self.session_id, "file_name": file.filename, "mime": file.mime, "size": byte_size})

        try:
            data_url = await self._reader(file)
        except Exception:
            # A rejected payload must not cost the user the file they already had
            if self.state.selected_file is handle:
                self.state.selected_file = previous
                self.update_preview()
            raise

        if self.state.selected_file is not handle:
            logger.info("controller.upload: read finished for a file that is no longer selected", extra={"session_id": self.session_id, "file_name": file.filename})
            return handle
        handle.data_url = data_url
        self.update_preview()
        return handle

    def remove_file(self) -> None:
        self.state.selected_file = None
        self.update_preview()

    def begin_generation(self) -> int:
        """Validate and flip to the busy state. Returns the token for `complete_generation`."""
        prompt = self.state.prompt_text.strip()
        ct = self.state.content_type
        if not prompt:
            raise MissingPrompt("Please enter a prompt first!")
        if ct.is_media and self.state.selected_file is None:
            raise MissingFile(f"Please upload a {ct.value} file first!")
        if self._pending is not None:
            raise GenerationInProgress("A generation is already running; wait for it to finish.")

        self._cancel_reset()
        self._generation_token += 1
        self._pending = _PendingRequest(token=self._generation_token, prompt=prompt, content_type=ct)
        self.indicator = Indicator.for_phase("generating")
        self.preview = render_pending(ct)
        logger.info("controller.generate: started", extra={"session_id": self.session_id, "token": self._generation_token, "content_type": ct.value})
        return self._generation_token

    async def complete_generation(self, token: int) -> Optional[GenerationResult]:
        pending = self._pending
        if pending is None or pending.token != token:
            logger.info("controller.generate: no pending request for token", extra={"session_id": self.session_id, "token": token})
            return None

        try:
            result = await self._client.generate(pending.prompt, pending.content_type)
        except Exception as ex:
            logger.exception("controller.generate: generation client raised")
            result = ErrorResult(message=f"Error generating {pending.content_type.value}: {ex}")
        finally:
            if self._pending is pending:
                self._pending = None

        if token != self._generation_token:
            logger.info("controller.generate: dropping stale result", extra={"session_id": self.session_id, "token": token, "current": self._generation_token})
            return None

        self.result = result
        self.preview = render_result(result)
        if isinstance(result, ErrorResult):
            self.indicator = Indicator.for_phase("failed")
        else:
            self.indicator = Indicator.for_phase("generated")
            self.banners.append(Banner(
                kind="success",
                message=f"Content generated successfully! Your {pending.content_type.value} content is ready.",
            ))
        self._schedule_reset(token)
        logger.info("controller.generate: finished", extra={"session_id": self.session_id, "token": token, "result_kind": result.kind})
        return result

    async def generate_content(self) -> Optional[GenerationResult]:
        token = self.begin_generation()
        return await self.complete_generation(token)

    def clear_all(self) -> None:
        self.state.prompt_text = ""
        self.remove_file()
        self.preview = Preview(visible=False, kind="hidden")
        self.select_content_type(ContentType.TEXT)
        self.banners.clear()
        self.result = None
        # Whatever is still in flight belongs to the old page contents
        self._generation_token += 1
        self._pending = None
        self._cancel_reset()
        self.indicator = Indicator()

    # ------------------------------------------------------------------
    # Rendering

    def update_preview(self) -> None:
        selected = self.state.selected_file
        data_url = selected.data_url if selected is not None else None
        self.preview = render_preview(
            self.state.content_type,
            self.state.prompt_text,
            data_url,
            src=self._content_url(selected),
        )

    def _content_url(self, handle: Optional[FileHandle]) -> Optional[str]:
        if handle is None or handle.data_url is None or self._media_url is None:
            return None
        return self._media_url(handle.revision)

    def file_content(self) -> Tuple[str, bytes]:
        """MIME type and bytes of the selected file, once its read has finished."""
        selected = self.state.selected_file
        if selected is None or selected.data_url is None:
            raise MissingFile("No file is attached to this session.")
        return decode_data_url(selected.data_url)

    def view(self) -> SessionView:
        ct = self.state.content_type
        selected = self.state.selected_file
        file_info = None
        if selected is not None:
            # The bytes are served separately; a view only points at them
            file_info = FileInfo(
                name=selected.name,
                byte_size=selected.byte_size,
                size_label=format_size(selected.byte_size),
                mime_type=selected.mime_type,
                ready=selected.data_url is not None,
                content_url=self._content_url(selected),
            )
        return SessionView(
            session_id=self.session_id,
            content_type=ct,
            prompt=self.state.prompt_text,
            upload_visible=ct.is_media,
            accept=ct.accept,
            file=file_info,
            preview=self.preview,
            indicator=self.indicator,
            banners=list(self.banners),
            result=self.result,
        )

    # ------------------------------------------------------------------
    # Indicator timer

    def _schedule_reset(self, token: int) -> None:
        self._cancel_reset()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._reset_handle = loop.call_later(self._reset_delay, self._reset_indicator, token)

    def _reset_indicator(self, token: int) -> None:
        self._reset_handle = None
        if token != self._generation_token or self._pending is not None:
            return
        self.indicator = Indicator()

    def _cancel_reset(self) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None
