from __future__ import annotations

import itertools
import logging
from typing import Any, Callable, Dict, List, Mapping, Tuple

logger = logging.getLogger(__name__)

Listener = Callable[[Mapping[str, Any]], None]


class DesignBroadcaster:
    """
    Fire-and-forget fan-out of design changes to observers of a session.

    Delivery is best effort: a failing listener is logged and reported back as a
    warning, and never affects other listeners or engine state.
    """

    def __init__(self) -> None:
        self._listeners: Dict[str, Dict[int, Listener]] = {}
        self._tokens = itertools.count(1)

    def subscribe(self, session_id: str, listener: Listener) -> Tuple[str, int]:
        token = next(self._tokens)
        self._listeners.setdefault(str(session_id), {})[token] = listener
        return str(session_id), token

    def unsubscribe(self, handle: Tuple[str, int]) -> bool:
        session_id, token = handle
        listeners = self._listeners.get(session_id, {})
        removed = listeners.pop(token, None) is not None
        if not listeners:
            self._listeners.pop(session_id, None)
        return removed

    def drop_session(self, session_id: str) -> None:
        self._listeners.pop(str(session_id), None)

    def listener_count(self, session_id: str) -> int:
        return len(self._listeners.get(str(session_id), {}))

    def publish(self, session_id: str, event: Mapping[str, Any]) -> List[str]:
        warnings: List[str] = []
        for token, listener in list(self._listeners.get(str(session_id), {}).items()):
            try:
                listener(event)
            except Exception as e:
                logger.warning("Design listener %s for session %s failed: %s", token, session_id, e)
                warnings.append(f"listener {token} failed: {e}")
        return warnings
