"""Per-session audit trail: floor-plan analyses, design generation and chat edits."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, asdict, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from ensemble.schema import Design

if TYPE_CHECKING:
    from ensemble.session import Session


@dataclass(frozen=True)
class DesignAuditEvent:
    action: str
    plan: str
    room_id: str = ""
    diffs: List[Dict[str, Any]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def design_diff(before: Optional[Design], after: Design) -> Dict[str, Any]:
    """Fixture ids added and removed, and the cost change, between two versions of a room design."""
    old_ids = before.fixture_ids() if before is not None else []
    new_ids = after.fixture_ids()
    return {
        "added": [i for i in new_ids if i not in old_ids],
        "removed": [i for i in old_ids if i not in new_ids],
        "cost_before": before.total_cost if before is not None else 0,
        "cost_after": after.total_cost,
    }


def append_audit_event(
    session: "Session",
    action: str,
    plan: str,
    room_id: str = "",
    diffs: Optional[Sequence[Dict[str, Any]]] = None,
    warnings: Optional[Sequence[str]] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> DesignAuditEvent:
    event = DesignAuditEvent(
        action=action,
        plan=plan,
        room_id=str(room_id),
        diffs=list(diffs or []),
        warnings=list(warnings or []),
        metadata=dict(metadata or {}),
    )
    session.history.append(event.to_dict())
    return event
