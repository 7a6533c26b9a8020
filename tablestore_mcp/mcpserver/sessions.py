"""Registry of live transport sessions for the HTTP transports."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict
from uuid import uuid4

logger = logging.getLogger(__name__)


@dataclass
class Session:
    session_id: str
    transport: str


class SessionStore:
    """Sessions keyed by id; owned by one transport app and passed explicitly.

    Entries are added when a client connects and removed when it disconnects.
    Message routing itself stays inside the MCP transports.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def open(self, transport: str) -> Session:
        session = Session(session_id=uuid4().hex, transport=transport)
        self._sessions[session.session_id] = session
        logger.info("Opened %s session %s (%d active)", transport, session.session_id, len(self))
        return session

    def close(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is not None:
            logger.info("Closed %s session %s (%d active)", session.transport, session_id, len(self))


__all__ = ["Session", "SessionStore"]
