from __future__ import annotations

import logging
import secrets
from collections import OrderedDict
from typing import Callable

from .controller import ContentRequestController
from .errors import SessionNotFound

logger = logging.getLogger("sessions")


class SessionRegistry:
    """In-memory controllers, one per open page, evicted least-recently-used first.

    Nothing is persisted: a restart drops every session and pages start over.
    """

    def __init__(self, factory: Callable[[str], ContentRequestController], capacity: int = 256) -> None:
        self._factory = factory
        self._capacity = max(1, capacity)
        self._controllers: OrderedDict[str, ContentRequestController] = OrderedDict()

    def __len__(self) -> int:
        return len(self._controllers)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._controllers

    def create(self) -> ContentRequestController:
        session_id = secrets.token_urlsafe(16)
        controller = self._factory(session_id)
        self._controllers[session_id] = controller
        while len(self._controllers) > self._capacity:
            evicted, _ = self._controllers.popitem(last=False)
            logger.info("sessions.create: evicted least recently used session", extra={"session_id": evicted})
        return controller

    def get(self, session_id: str) -> ContentRequestController:
        controller = self._controllers.get(session_id)
        if controller is None:
            raise SessionNotFound("Session not found; reload the page to start a new one.")
        self._controllers.move_to_end(session_id)
        return controller

    def drop(self, session_id: str) -> bool:
        return self._controllers.pop(session_id, None) is not None
