from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from ensemble.detector import FloorAnalysis
from ensemble.errors import NotFoundError
from ensemble.schema import Design, Room


logger = logging.getLogger(__name__)


@dataclass
class Session:
    id: str
    created_at: float = field(default_factory=time.time)
    analysis: Optional[FloorAnalysis] = None
    image_meta: Dict[str, Any] = field(default_factory=dict)
    designs: Dict[str, Design] = field(default_factory=dict)
    history: List[Dict[str, Any]] = field(default_factory=list)

    def room(self, room_id: str) -> Room:
        if self.analysis is None:
            raise NotFoundError(f"Session {self.id} has no floor plan analysis")
        room = self.analysis.room(room_id)
        if room is None:
            raise NotFoundError(f"Room not found: {room_id}")
        return room

    def design(self, room_id: str) -> Design:
        design = self.designs.get(room_id)
        if design is None:
            raise NotFoundError(f"No design generated for room {room_id}")
        return design


class SessionStore:
    """
    In-process session registry. No eviction policy and no persistence.

    There is no locking: two requests mutating the same room design race and the last
    write wins.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}

    def create(self, session_id: Optional[str] = None) -> Session:
        sid = str(session_id) if session_id else str(uuid.uuid4())
        session = Session(id=sid)
        self._sessions[sid] = session
        logger.debug("Created session %s", sid)
        return session

    def get(self, session_id: Optional[str]) -> Optional[Session]:
        if not session_id:
            return None
        return self._sessions.get(str(session_id))

    def get_or_create(self, session_id: Optional[str] = None) -> Session:
        return self.get(session_id) or self.create(session_id)

    def require(self, session_id: Optional[str]) -> Session:
        session = self.get(session_id)
        if session is None:
            raise NotFoundError(f"Session not found: {session_id}")
        return session

    def evict(self, session_id: str) -> bool:
        removed = self._sessions.pop(str(session_id), None) is not None
        if removed:
            logger.debug("Evicted session %s", session_id)
        return removed

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._sessions))
