from __future__ import annotations


class ContentRequestError(ValueError):
    """User-facing failure of a controller operation.

    Routes turn these into HTTP errors; the browser shows `message` as an alert.
    Remote call failures never use this type, they come back as an ErrorResult.
    """

    status_code: int = 400
    code: str = "content_request_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_detail(self) -> dict:
        return {"error": self.code, "message": self.message}


class InvalidFileType(ContentRequestError):
    code = "invalid_file_type"


class InvalidFileData(ContentRequestError):
    code = "invalid_file_data"


class FileTooLarge(ContentRequestError):
    status_code = 413
    code = "file_too_large"


class MissingPrompt(ContentRequestError):
    code = "missing_prompt"


class MissingFile(ContentRequestError):
    code = "missing_file"


class GenerationInProgress(ContentRequestError):
    status_code = 409
    code = "generation_in_progress"


class SessionNotFound(ContentRequestError):
    status_code = 404
    code = "session_not_found"
