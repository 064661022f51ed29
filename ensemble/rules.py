"""
Room-type lighting rules.

Each rule is a pure function of a Room that returns the fixtures it places plus the
rationale behind them. Rules are looked up by room-type tag; unknown types get an
empty layout.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List

from ensemble.catalog import CEILING_CAN, CHANDELIER, LINEAR_COVE, PENDANT, STEP_LIGHT, TRACK_LIGHT, WALL_SCONCE
from ensemble.geometry import center, grid_positions, perimeter
from ensemble.schema import Fixture, ReasoningEntry, Room
from ensemble.units import leading_number, pixels_to_feet

CAN_GRID_SPACING_PX = 100.0
PENDANT_SPACING_PX = 100.0
FT_PER_ISLAND_PENDANT = 3.0
TRACK_COUNT = 3


@dataclass(frozen=True)
class RuleOutput:
    fixtures: List[Fixture] = field(default_factory=list)
    reasoning: List[ReasoningEntry] = field(default_factory=list)


Rule = Callable[[Room], RuleOutput]


def _cove_origin(room: Room) -> tuple:
    x1, y1, _, _ = room.boundary
    return x1 + 50.0, y1 + 20.0


def kitchen_rule(room: Room) -> RuleOutput:
    x1, y1, _, _ = room.boundary
    out = RuleOutput()
    out.reasoning.append(
        ReasoningEntry(
            "overall",
            "Kitchen requires layered lighting: task lighting for work areas, ambient for general illumination",
        )
    )

    island = room.find_object("kitchen_island")
    if island is not None:
        island_ft = leading_number(island.dimensions)
        count = int(math.ceil(island_ft / FT_PER_ISLAND_PENDANT)) if island_ft and island_ft > 0 else 0
        ix, iy = island.position
        for i in range(count):
            out.fixtures.append(
                Fixture(
                    id=f"pendant_{i}",
                    kind=PENDANT,
                    position=(ix - (count - 1) * PENDANT_SPACING_PX / 2.0 + i * PENDANT_SPACING_PX, iy),
                    purpose="Task lighting for island work surface",
                    mounting="30 inches above counter",
                )
            )
        if count:
            out.reasoning.append(
                ReasoningEntry(
                    "pendants",
                    f"{count} pendants spaced evenly over the {island.dimensions} island for optimal task lighting",
                    PENDANT,
                )
            )

    out.fixtures.append(
        Fixture(
            id="undercab_1",
            kind=LINEAR_COVE,
            position=(x1 + 100.0, y1 + 50.0),
            length=10.0,
            purpose="Under-cabinet task lighting",
            placement="Under upper cabinets",
        )
    )
    out.reasoning.append(
        ReasoningEntry("undercab", "Under-cabinet strip lights the counters along the cabinet line", LINEAR_COVE)
    )

    cans = grid_positions(room.boundary, CAN_GRID_SPACING_PX)
    for i, pos in enumerate(cans):
        out.fixtures.append(Fixture(id=f"can_{i}", kind=CEILING_CAN, position=pos, purpose="General ambient lighting"))
    out.reasoning.append(
        ReasoningEntry("cans", f"{len(cans)} can lights in grid pattern for even ambient lighting", CEILING_CAN)
    )
    return out


def living_rule(room: Room) -> RuleOutput:
    x1, y1, x2, _ = room.boundary
    out = RuleOutput()
    out.reasoning.append(
        ReasoningEntry(
            "overall",
            "Living room needs flexible lighting: ambient for general use, accent for artwork, task for reading",
        )
    )

    out.fixtures.append(
        Fixture(
            id="cove_perimeter",
            kind=LINEAR_COVE,
            position=_cove_origin(room),
            length=pixels_to_feet(perimeter(room.boundary)),
            purpose="Indirect ambient lighting",
            placement="Perimeter cove",
        )
    )
    out.reasoning.append(
        ReasoningEntry("cove", "Perimeter cove provides soft, indirect lighting without glare", LINEAR_COVE)
    )

    step = (x2 - x1) / (TRACK_COUNT + 1)
    for i in range(TRACK_COUNT):
        out.fixtures.append(
            Fixture(
                id=f"track_{i}",
                kind=TRACK_LIGHT,
                position=(x1 + step * (i + 1), y1 + 80.0),
                purpose="Accent lighting for artwork",
                aim_angle_deg=30.0,
            )
        )
    out.reasoning.append(
        ReasoningEntry("track", "Track lights positioned to highlight artwork and create visual interest", TRACK_LIGHT)
    )
    return out


def bedroom_rule(room: Room) -> RuleOutput:
    out = RuleOutput()
    out.reasoning.append(
        ReasoningEntry(
            "overall",
            "Bedroom lighting should be restful: soft ambient light with task lighting for reading",
        )
    )
    out.fixtures.append(
        Fixture(
            id="cove_ambient",
            kind=LINEAR_COVE,
            position=_cove_origin(room),
            length=20.0,
            purpose="Soft ambient lighting",
            placement="Three walls, avoiding headboard",
        )
    )
    out.reasoning.append(
        ReasoningEntry("cove", "Cove on three walls keeps light off the headboard wall", LINEAR_COVE)
    )

    bed = room.find_object("bed")
    if bed is None:
        out.reasoning.append(
            ReasoningEntry("bed", "No bed found in the plan, so bedside sconces and step lights were not placed")
        )
        return out

    bx, by = bed.position
    for side, dx in (("left", -100.0), ("right", 100.0)):
        out.fixtures.append(
            Fixture(
                id=f"sconce_{side}",
                kind=WALL_SCONCE,
                position=(bx + dx, by - 50.0),
                purpose=f"Reading light {side} side",
                mounting="60 inches from floor",
            )
        )
    out.reasoning.append(
        ReasoningEntry("sconces", "Wall sconces provide adjustable task lighting without table clutter", WALL_SCONCE)
    )

    for i, dx in enumerate((-80.0, 80.0), start=1):
        out.fixtures.append(
            Fixture(id=f"step_{i}", kind=STEP_LIGHT, position=(bx + dx, by + 80.0), purpose="Night navigation")
        )
    out.reasoning.append(
        ReasoningEntry(
            "stepLights", "Step lights provide safe nighttime navigation without disturbing sleep", STEP_LIGHT
        )
    )
    return out


def bathroom_rule(room: Room) -> RuleOutput:
    out = RuleOutput()
    out.reasoning.append(
        ReasoningEntry(
            "overall",
            "Bathroom needs bright, even lighting for grooming tasks plus ambient lighting",
        )
    )

    vanity = room.find_object("vanity")
    if vanity is not None:
        vx, vy = vanity.position
        out.fixtures.append(
            Fixture(
                id="vanity_light",
                kind=LINEAR_COVE,
                position=(vx, vy - 40.0),
                length=4.0,
                purpose="Task lighting for grooming",
                placement="Above mirror",
            )
        )
        out.reasoning.append(
            ReasoningEntry(
                "vanity", "Linear LED above mirror provides even, shadow-free lighting for grooming", LINEAR_COVE
            )
        )

    shower = room.find_object("shower")
    if shower is not None:
        out.fixtures.append(
            Fixture(
                id="shower_can",
                kind=CEILING_CAN,
                position=shower.position,
                purpose="Shower task lighting",
                mounting="Wet location rated",
            )
        )
        out.reasoning.append(
            ReasoningEntry("shower", "Wet-rated downlight keeps the shower bright and safe", CEILING_CAN)
        )

    out.fixtures.append(
        Fixture(id="bath_can", kind=CEILING_CAN, position=center(room.boundary), purpose="General ambient lighting")
    )
    out.reasoning.append(
        ReasoningEntry("general", "Centered downlight fills the room with general light", CEILING_CAN)
    )
    return out


def office_rule(room: Room) -> RuleOutput:
    out = RuleOutput()
    out.reasoning.append(
        ReasoningEntry(
            "overall",
            "Office lighting optimized for productivity: bright task lighting with minimal glare",
        )
    )

    desk = room.find_object("desk")
    if desk is not None:
        out.fixtures.append(
            Fixture(
                id="desk_pendant",
                kind=PENDANT,
                position=desk.position,
                purpose="Primary task lighting",
                mounting="30 inches above desk",
            )
        )
        out.reasoning.append(
            ReasoningEntry("desk", "Pendant over desk provides focused task lighting for work", PENDANT)
        )

    out.fixtures.append(
        Fixture(
            id="office_cove",
            kind=LINEAR_COVE,
            position=_cove_origin(room),
            length=15.0,
            purpose="Indirect ambient lighting",
            placement="North and west walls",
        )
    )
    out.reasoning.append(
        ReasoningEntry("cove", "Indirect cove light reduces screen glare", LINEAR_COVE)
    )

    shelf = room.find_object("bookshelf")
    if shelf is not None:
        sx, sy = shelf.position
        out.fixtures.append(
            Fixture(
                id="shelf_track",
                kind=TRACK_LIGHT,
                position=(sx, sy - 100.0),
                purpose="Accent lighting for books",
                aim_angle_deg=45.0,
            )
        )
        out.reasoning.append(
            ReasoningEntry("bookshelf", "Track light aimed at the bookshelf adds accent and depth", TRACK_LIGHT)
        )
    return out


def dining_rule(room: Room) -> RuleOutput:
    x1, y1, x2, y2 = room.boundary
    out = RuleOutput()
    out.reasoning.append(
        ReasoningEntry("overall", "Dining room centers on statement lighting with ambient support")
    )

    table = room.find_object("dining_table")
    if table is not None:
        out.fixtures.append(
            Fixture(
                id="chandelier",
                kind=CHANDELIER,
                position=table.position,
                purpose="Statement lighting and task illumination",
                mounting="30-36 inches above table",
            )
        )
        out.reasoning.append(
            ReasoningEntry(
                "chandelier", "Chandelier provides both decorative appeal and functional dining light", CHANDELIER
            )
        )

    mid_y = (y1 + y2) / 2.0
    for i, x in enumerate((x1 + 50.0, x2 - 50.0), start=1):
        out.fixtures.append(
            Fixture(id=f"dining_sconce_{i}", kind=WALL_SCONCE, position=(x, mid_y), purpose="Ambient accent lighting")
        )
    out.reasoning.append(
        ReasoningEntry(
            "sconces", "Wall sconces add layered lighting and create intimate dining atmosphere", WALL_SCONCE
        )
    )
    return out


def no_rule(room: Room) -> RuleOutput:
    return RuleOutput()


RULES: Dict[str, Rule] = {
    "kitchen": kitchen_rule,
    "living": living_rule,
    "bedroom": bedroom_rule,
    "bathroom": bathroom_rule,
    "office": office_rule,
    "study": office_rule,
    "dining": dining_rule,
}


def rule_for(room_type: str) -> Rule:
    return RULES.get(str(room_type).strip().lower(), no_rule)
