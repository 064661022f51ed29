from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from ensemble.catalog import DEFAULT_CATALOG, FixtureSpec
from ensemble.errors import CatalogMismatchError
from ensemble.geometry import find_open_slot
from ensemble.intent import Intent
from ensemble.metrics import recompute
from ensemble.schema import Design, Fixture, ReasoningEntry, Room
from ensemble.units import parse_area_sqft


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DesignDelta:
    created: List[Fixture] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    reasoning: List[ReasoningEntry] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.created and not self.deleted and not self.reasoning

    def to_dict(self) -> Dict[str, object]:
        return {
            "created": [f.to_dict() for f in self.created],
            "deleted": list(self.deleted),
            "reasoning": [{"kind": r.kind, "message": r.message} for r in self.reasoning],
        }


def _slug(kind: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", kind.lower()).strip("_")


def _next_fixture_id(design: Design, kind: str) -> str:
    taken = set(design.fixture_ids())
    n = 1
    while f"user_{_slug(kind)}_{n}" in taken:
        n += 1
    return f"user_{_slug(kind)}_{n}"


def most_common_kind(fixtures: List[Fixture]) -> Optional[str]:
    """Most frequent kind; ties go to the kind that appears first."""
    if not fixtures:
        return None
    counts = Counter(f.kind for f in fixtures)
    return max(counts, key=lambda k: counts[k])


def plan_add(design: Design, kind: str, room: Room, catalog: Mapping[str, FixtureSpec] = DEFAULT_CATALOG) -> DesignDelta:
    if kind not in catalog:
        raise CatalogMismatchError(f"Fixture kind not in catalog: {kind}")
    position = find_open_slot(room.boundary, [f.position for f in design.fixtures])
    fixture = Fixture(
        id=_next_fixture_id(design, kind),
        kind=kind,
        position=position,
        purpose=f"Additional {kind} added per request",
    )
    note = ReasoningEntry(
        "user_added",
        f"Added {kind} based on user preference for more lighting",
        kind,
    )
    return DesignDelta(created=[fixture], reasoning=[note])


def plan_remove(design: Design) -> DesignDelta:
    fixtures = list(design.fixtures)
    kind = most_common_kind(fixtures)
    if kind is None:
        return DesignDelta()
    victim = [f for f in fixtures if f.kind == kind][-1]
    note = ReasoningEntry(
        "user_removed",
        f"Removed {kind} to reduce lighting intensity per user request",
        kind,
    )
    return DesignDelta(deleted=[victim.id], reasoning=[note])


def plan_delta(
    design: Design,
    intent: Intent,
    room: Room,
    catalog: Mapping[str, FixtureSpec] = DEFAULT_CATALOG,
) -> DesignDelta:
    if intent.kind == "add" and intent.fixture_kind:
        return plan_add(design, intent.fixture_kind, room, catalog)
    if intent.kind == "remove":
        return plan_remove(design)
    return DesignDelta()


def apply_delta(
    design: Design,
    delta: DesignDelta,
    room: Room,
    catalog: Mapping[str, FixtureSpec] = DEFAULT_CATALOG,
) -> Design:
    """Build a new Design from `design` plus `delta`, with metrics and cost recomputed."""
    if delta.is_empty:
        return design
    fixtures = list(design.fixtures)
    # Apply in stable order: deletes, then creates.
    for fixture_id in delta.deleted:
        idx = max((i for i, f in enumerate(fixtures) if f.id == fixture_id), default=None)
        if idx is not None:
            fixtures.pop(idx)
    fixtures.extend(delta.created)
    updated = design.with_fixtures(fixtures).with_reasoning(*delta.reasoning)
    return recompute(updated, parse_area_sqft(room.area), catalog)


def mutate(
    design: Design,
    intent: Intent,
    room: Room,
    catalog: Mapping[str, FixtureSpec] = DEFAULT_CATALOG,
) -> Design:
    delta = plan_delta(design, intent, room, catalog)
    updated = apply_delta(design, delta, room, catalog)
    if not delta.is_empty:
        logger.info(
            "Applied %s to %s: +%d -%d fixtures, cost %d -> %d",
            intent,
            design.room.id,
            len(delta.created),
            len(delta.deleted),
            design.total_cost,
            updated.total_cost,
        )
    return updated
