from __future__ import annotations

import base64
import binascii
from typing import Optional

from pydantic import BaseModel, Field

from ..engine.errors import InvalidFileData


class UploadedFile(BaseModel):
    """A single file picked in the browser, shipped as base64.

    The adapter reads the file with FileReader and strips the data URL prefix,
    so `bytes_b64` is the bare payload.
    """

    filename: str = Field(..., description="Original file name")
    mime: str = Field(..., description="MIME type declared by the browser")
    bytes_b64: str = Field(..., description="Base64-encoded file bytes")
    size: Optional[int] = Field(default=None, ge=0, description="Size the browser reported; informational only")

    def content(self) -> bytes:
        try:
            return base64.b64decode(self.bytes_b64, validate=True)
        except (binascii.Error, ValueError) as ex:
            raise InvalidFileData(f"{self.filename}: payload is not valid base64") from ex

    def payload_size(self) -> int:
        """Byte size computed from the payload; the declared `size` is never trusted."""
        # Base64 expands 3 bytes into 4 chars; padding accounts for the remainder
        payload = self.bytes_b64.strip()
        return max(0, (len(payload) * 3) // 4 - payload.count("=", -2))


class FileHandle(BaseModel):
    name: str
    byte_size: int = Field(..., ge=0)
    mime_type: str
    # Bumped per upload so a content URL never serves a stale cached file
    revision: int = Field(default=0, ge=0)
    # Populated once the asynchronous read finishes
    data_url: Optional[str] = Field(default=None)
