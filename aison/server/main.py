from __future__ import annotations

import logging
import logging.config

import uvicorn
from fastapi import FastAPI

from ..engine.controller import ContentRequestController
from ..engine.sessions import SessionRegistry
from ..services.generation import GenerationClient
from .middleware import add_cors
from .settings import settings
from .api import router as api_router


# Configure application logging to stdout so it appears in container logs
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {"format": "%(asctime)s %(levelname)s [%(name)s] %(message)s"}
    },
    "handlers": {
        "default": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": "ext://sys.stdout",
        }
    },
    "loggers": {
        "uvicorn": {"handlers": ["default"], "level": "INFO"},
        "uvicorn.error": {"handlers": ["default"], "level": "INFO"},
        "uvicorn.access": {"handlers": ["default"], "level": "INFO"},
        "generation": {"handlers": ["default"], "level": "INFO", "propagate": False},
        "": {"handlers": ["default"], "level": "INFO"},  # root logger
    },
}

logging.config.dictConfig(LOGGING)


def create_app() -> FastAPI:
    app = FastAPI(title="AIson Content Studio")
    app.include_router(api_router)

    app.state.generation_client = GenerationClient()
    # Controllers look the client up at creation time so it can be swapped (tests, reconfiguration)
    app.state.sessions = SessionRegistry(
        lambda session_id: ContentRequestController(
            app.state.generation_client,
            session_id=session_id,
            media_url=lambda revision: f"/sessions/{session_id}/file/content?v={revision}",
        ),
        capacity=settings.MAX_SESSIONS,
    )

    @app.get("/healthz")
    async def healthz():
        return {"ok": True}

    add_cors(app)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("aison.server.main:app", host="0.0.0.0", port=settings.PORT, reload=True)
