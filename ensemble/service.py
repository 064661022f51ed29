from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ensemble.audit import append_audit_event, design_diff
from ensemble.broadcast import DesignBroadcaster, Listener
from ensemble.catalog import FixtureSpec, default_catalog
from ensemble.chat import respond
from ensemble.config import DETECTOR_TIMEOUT_S
from ensemble.detector import RoomDetector, analyze_floor_plan
from ensemble.errors import CatalogMismatchError, EngineError, MalformedInputError
from ensemble.intent import classify_intent
from ensemble.schema import Design
from ensemble.session import Session, SessionStore
from ensemble.synthesis import synthesize


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceResponse:
    ok: bool
    message: str = ""
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"success": self.ok, "message": self.message, **self.data}
        if self.error is not None:
            d["error"] = self.error
        if self.warnings:
            d["warnings"] = list(self.warnings)
        return d

    @staticmethod
    def failure(err: EngineError) -> "ServiceResponse":
        return ServiceResponse(ok=False, message=str(err), error=err.kind)


def _design_payload(design: Design) -> Dict[str, Any]:
    d = design.to_dict()
    return {
        "design": d,
        "fixtures": d["fixtures"],
        "reasoning": d["reasoning"],
        "metrics": d["metrics"],
        "cost": d["totalCost"],
    }


def _guarded(fn: Callable[..., ServiceResponse]) -> Callable[..., ServiceResponse]:
    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> ServiceResponse:
        try:
            return fn(*args, **kwargs)
        except EngineError as e:
            logger.info("%s rejected: %s", fn.__name__, e)
            return ServiceResponse.failure(e)
        except Exception as e:
            logger.exception("%s failed unexpectedly", fn.__name__)
            return ServiceResponse(ok=False, message=f"{fn.__name__} failed: {e}", error="internal_error")

    return wrapper


class LightingDesignService:
    """
    Session-scoped operations behind the transport layer.

    Every call returns a ServiceResponse. Engine errors become `ok=False` responses with
    their `kind`; any other exception is logged and reported as `internal_error`.
    """

    def __init__(
        self,
        detector: Optional[RoomDetector] = None,
        store: Optional[SessionStore] = None,
        catalog: Optional[Mapping[str, FixtureSpec]] = None,
        broadcaster: Optional[DesignBroadcaster] = None,
        detector_timeout_s: float = DETECTOR_TIMEOUT_S,
    ):
        self.detector = detector
        self.store = store or SessionStore()
        self.catalog = catalog if catalog is not None else default_catalog()
        self.broadcaster = broadcaster or DesignBroadcaster()
        self.detector_timeout_s = float(detector_timeout_s)

    def _publish(self, session: Session, room_id: str, design: Design) -> List[str]:
        return self.broadcaster.publish(
            session.id,
            {"event": "design-updated", "sessionId": session.id, "roomId": room_id, "design": design.to_dict()},
        )

    @_guarded
    def upload(
        self,
        image: Any,
        session_id: Optional[str] = None,
        image_meta: Optional[Mapping[str, Any]] = None,
    ) -> ServiceResponse:
        """Analyze a floor plan and (re)start the session's design state."""
        if image is None:
            raise MalformedInputError("No file uploaded")
        analysis = analyze_floor_plan(self.detector, image, image_meta, timeout_s=self.detector_timeout_s)
        session = self.store.get_or_create(session_id)
        session.analysis = analysis
        session.image_meta = dict(image_meta or {})
        session.designs = {}
        append_audit_event(
            session,
            action="floorplan.analyze",
            plan="Detect rooms in the uploaded plan; fall back to demo rooms when detection is unavailable.",
            warnings=list(analysis.warnings),
            metadata={"source": analysis.source, "room_count": len(analysis.rooms)},
        )
        return ServiceResponse(
            ok=True,
            message=f"Found {len(analysis.rooms)} rooms",
            data={
                "sessionId": session.id,
                "rooms": [r.to_dict() for r in analysis.rooms],
                "summary": dict(analysis.summary),
                "source": analysis.source,
            },
            warnings=list(analysis.warnings),
        )

    @_guarded
    def generate_design(self, session_id: Optional[str], room_id: str) -> ServiceResponse:
        session = self.store.require(session_id)
        room = session.room(room_id)
        design = synthesize(room, self.catalog)
        previous = session.designs.get(room.id)
        session.designs[room.id] = design
        append_audit_event(
            session,
            action="design.generate",
            plan=f"Apply the {room.type or 'default'} lighting rule to {room.name or room.id}.",
            room_id=room.id,
            diffs=[design_diff(previous, design)],
        )
        warnings = self._publish(session, room.id, design)
        return ServiceResponse(ok=True, message="Design generated", data=_design_payload(design), warnings=warnings)

    @_guarded
    def get_design(self, session_id: Optional[str], room_id: str) -> ServiceResponse:
        session = self.store.require(session_id)
        return ServiceResponse(ok=True, data=_design_payload(session.design(room_id)))

    def _chat_once(self, session: Session, room_id: str, message: Any) -> ServiceResponse:
        room = session.room(room_id)
        before = session.design(room_id)
        result = respond(message, room, before, self.catalog)
        if not result.changed:
            return ServiceResponse(ok=True, message=result.message, data={"intent": str(result.intent)})

        # Last write wins; concurrent chats on the same room are not merged.
        session.designs[room.id] = result.design
        append_audit_event(
            session,
            action=f"design.{result.intent.kind}",
            plan=f"Chat request: {message.strip()}",
            room_id=room.id,
            diffs=[design_diff(before, result.design)],
            metadata={"intent": str(result.intent)},
        )
        warnings = self._publish(session, room.id, result.design)
        data = {"intent": str(result.intent), "designUpdate": result.design.to_dict()}
        data["fixtures"] = data["designUpdate"]["fixtures"]
        return ServiceResponse(ok=True, message=result.message, data=data, warnings=warnings)

    @_guarded
    def chat(self, session_id: Optional[str], room_id: str, message: Any) -> ServiceResponse:
        session = self.store.require(session_id)
        return self._chat_once(session, room_id, message)

    @_guarded
    def chat_batch(self, session_id: Optional[str], room_id: str, messages: Any) -> ServiceResponse:
        """Apply several chat messages in order. The whole batch is rejected if any message is malformed."""
        if not isinstance(messages, list):
            raise MalformedInputError("Batch payload must be a list of messages")
        for i, message in enumerate(messages):
            if not isinstance(message, str) or not message.strip():
                raise MalformedInputError(f"Message {i} must be a non-empty string")
            intent = classify_intent(message)
            if intent.kind == "add" and intent.fixture_kind not in self.catalog:
                raise CatalogMismatchError(f"Message {i} asks for {intent.fixture_kind}, which is not in the catalog")
        session = self.store.require(session_id)
        session.room(room_id)
        session.design(room_id)
        results: List[Dict[str, Any]] = []
        warnings: List[str] = []
        for message in messages:
            res = self._chat_once(session, room_id, message)
            results.append(res.to_dict())
            warnings.extend(res.warnings)
        design = session.design(room_id)
        return ServiceResponse(
            ok=True,
            message=f"Processed {len(results)} messages",
            data={"responses": results, **_design_payload(design)},
            warnings=warnings,
        )

    @_guarded
    def history(self, session_id: Optional[str]) -> ServiceResponse:
        session = self.store.require(session_id)
        return ServiceResponse(ok=True, data={"history": list(session.history)})

    def evict(self, session_id: str) -> ServiceResponse:
        removed = self.store.evict(session_id)
        self.broadcaster.drop_session(session_id)
        return ServiceResponse(ok=True, message="Session evicted" if removed else "Session not present")

    def subscribe(self, session_id: str, listener: Listener) -> Tuple[str, int]:
        return self.broadcaster.subscribe(session_id, listener)

    def unsubscribe(self, handle: Tuple[str, int]) -> bool:
        return self.broadcaster.unsubscribe(handle)
