from __future__ import annotations

import os
from typing import List, Optional

from dotenv import load_dotenv

# Load default .env and optional ENV_FILE override for local runs
load_dotenv()
env_file_override = os.getenv("ENV_FILE")
if env_file_override:
    load_dotenv(env_file_override, override=False)


class Settings:
    def __init__(self) -> None:
        # Core
        self.PORT: int = int(os.getenv("PORT", "8000"))

        # Generative API. The key stays server-side; the browser only talks to this service.
        self.OPENAI_API_KEY: Optional[str] = os.getenv("OPENAI_API_KEY")
        self.OPENAI_BASE_URL: Optional[str] = os.getenv("OPENAI_BASE_URL") or None
        self.TEXT_MODEL: str = os.getenv("TEXT_MODEL", "gpt-3.5-turbo-instruct")
        self.TEXT_MAX_TOKENS: int = int(os.getenv("TEXT_MAX_TOKENS", "150"))
        self.IMAGE_SIZE: str = os.getenv("IMAGE_SIZE", "512x512")
        self.IMAGE_COUNT: int = int(os.getenv("IMAGE_COUNT", "1"))

        # Outbound HTTP
        self.HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))
        self.HTTP_CONNECT_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_CONNECT_TIMEOUT_SECONDS", "10"))

        # UI behaviour
        self.INDICATOR_RESET_SECONDS: float = float(os.getenv("INDICATOR_RESET_SECONDS", "3"))
        self.MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(50 * 1024 * 1024)))
        self.MAX_SESSIONS: int = int(os.getenv("MAX_SESSIONS", "256"))

        # CORS
        cors_origins_csv = os.getenv("CORS_ORIGINS", "*")
        self.CORS_ORIGINS: List[str] = [origin.strip() for origin in cors_origins_csv.split(",") if origin.strip()]


settings = Settings()
