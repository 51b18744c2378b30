from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .settings import settings


def add_cors(app: FastAPI) -> None:
    origins = settings.CORS_ORIGINS or ["*"]
    # Browsers reject credentialed requests against a wildcard origin
    allow_credentials = "*" not in origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )
