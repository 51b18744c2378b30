from __future__ import annotations

import asyncio
import base64
import binascii
from typing import Tuple

from ..schemas.media import UploadedFile
from ..schemas.session import ContentType
from .errors import FileTooLarge, InvalidFileData

SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]


def validate_file_type(mime: str, content_type: ContentType) -> bool:
    """True iff the MIME type belongs to the media kind of `content_type`."""
    if not content_type.is_media:
        return False
    return (mime or "").lower().startswith(f"{content_type.value}/")


def format_size(num_bytes: int) -> str:
    if num_bytes <= 0:
        return "0 Bytes"
    i = 0
    while i + 1 < len(SIZE_UNITS) and num_bytes >= 1024 ** (i + 1):
        i += 1
    value = round(num_bytes / (1024 ** i), 2)
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {SIZE_UNITS[i]}"


def check_size(byte_size: int, limit: int) -> None:
    if limit and byte_size > limit:
        raise FileTooLarge(f"File is too large ({format_size(byte_size)}); the limit is {format_size(limit)}.")


def decode_data_url(data_url: str) -> Tuple[str, bytes]:
    """Split a `data:<mime>;base64,<payload>` URL back into MIME type and bytes."""
    header, _, payload = data_url.partition(",")
    if not header.startswith("data:") or not header.endswith(";base64"):
        raise InvalidFileData("Not a base64 data URL.")
    mime = header[len("data:"):-len(";base64")]
    try:
        return mime, base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as ex:
        raise InvalidFileData("Data URL payload is not valid base64.") from ex


async def read_as_data_url(file: UploadedFile) -> str:
    # Decoding validates the payload; run it off the loop since uploads can be large
    await asyncio.to_thread(file.content)
    return f"data:{file.mime};base64,{file.bytes_b64.strip()}"
