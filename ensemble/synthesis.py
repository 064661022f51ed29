from __future__ import annotations

import logging
from typing import Mapping

from ensemble.catalog import DEFAULT_CATALOG, FixtureSpec
from ensemble.errors import CatalogMismatchError
from ensemble.metrics import recompute
from ensemble.rules import rule_for
from ensemble.schema import Design, Room
from ensemble.units import parse_area_sqft


logger = logging.getLogger(__name__)


def synthesize(room: Room, catalog: Mapping[str, FixtureSpec] = DEFAULT_CATALOG) -> Design:
    """Build the initial Design for a room from its room-type rule."""
    out = rule_for(room.type)(room)
    unknown = sorted({fx.kind for fx in out.fixtures if fx.kind not in catalog})
    if unknown:
        raise CatalogMismatchError(f"Rule for {room.type!r} placed kinds missing from catalog: {unknown}")
    design = Design.empty(room).with_fixtures(out.fixtures).with_reasoning(*out.reasoning)
    design = recompute(design, parse_area_sqft(room.area), catalog)
    logger.info(
        "Synthesized %s design for %s: %d fixtures, cost %d",
        room.type or "untyped",
        room.id,
        len(design.fixtures),
        design.total_cost,
    )
    return design
