from __future__ import annotations

import pytest

from ensemble.catalog import (
    CEILING_CAN,
    CHANDELIER,
    DEFAULT_CATALOG,
    LINEAR_COVE,
    PENDANT,
    STEP_LIGHT,
    TRACK_LIGHT,
    WALL_SCONCE,
    FixtureCatalog,
)
from ensemble.detector import demo_analysis
from ensemble.errors import CatalogMismatchError
from ensemble.rules import RULES, no_rule, office_rule, rule_for
from ensemble.schema import Room
from ensemble.synthesis import synthesize


def _demo(room_id: str) -> Room:
    room = demo_analysis().room(room_id)
    assert room is not None
    return room


def _kinds(design) -> list:
    return [f.kind for f in design.fixtures]


def test_kitchen_layout() -> None:
    design = synthesize(_demo("room_1"))
    assert len(design.fixtures) == 24
    pendants = [f for f in design.fixtures if f.kind == PENDANT]
    assert [f.position for f in pendants] == [(200.0, 250.0), (300.0, 250.0), (400.0, 250.0)]
    assert [f.id for f in pendants] == ["pendant_0", "pendant_1", "pendant_2"]
    undercab = design.fixtures[3]
    assert (undercab.id, undercab.kind, undercab.position, undercab.length) == (
        "undercab_1",
        LINEAR_COVE,
        (150.0, 100.0),
        10.0,
    )
    assert _kinds(design).count(CEILING_CAN) == 20
    assert design.total_cost == 2450
    assert design.reasoning_for("pendants") == [
        "3 pendants spaced evenly over the 8x4 ft island for optimal task lighting"
    ]


def test_kitchen_island_length_drives_pendant_count() -> None:
    room = Room.from_dict(
        {
            "id": "k",
            "type": "kitchen",
            "boundary": [0, 0, 400, 400],
            "objects": [{"type": "kitchen_island", "position": [200, 200], "dimensions": "9x4 ft"}],
        }
    )
    design = synthesize(room)
    pendants = [f for f in design.fixtures if f.kind == PENDANT]
    assert [f.position[0] for f in pendants] == [100.0, 200.0, 300.0]


def test_kitchen_unparseable_island_places_no_pendants() -> None:
    room = Room.from_dict(
        {
            "id": "k",
            "type": "kitchen",
            "boundary": [0, 0, 400, 400],
            "objects": [{"type": "kitchen_island", "position": [200, 200], "dimensions": "large"}],
        }
    )
    design = synthesize(room)
    assert PENDANT not in _kinds(design)
    assert design.reasoning_for("pendants") == []
    assert design.reasoning_for("cans")


def test_living_layout() -> None:
    design = synthesize(_demo("room_2"))
    cove = design.fixtures[0]
    assert (cove.id, cove.kind, cove.length, cove.position) == ("cove_perimeter", LINEAR_COVE, 76.0, (650.0, 70.0))
    tracks = design.fixtures[1:]
    assert [f.id for f in tracks] == ["track_0", "track_1", "track_2"]
    assert [f.position for f in tracks] == [(725.0, 130.0), (850.0, 130.0), (975.0, 130.0)]
    assert all(f.kind == TRACK_LIGHT and f.aim_angle_deg == 30.0 for f in tracks)
    assert design.total_cost == 4055
    assert design.metrics.total_watts == 378.0
    assert design.metrics.room_area_sqft == 360.0


def test_bedroom_layout() -> None:
    design = synthesize(_demo("room_3"))
    assert design.fixture_ids() == ["cove_ambient", "sconce_left", "sconce_right", "step_1", "step_2"]
    assert _kinds(design) == [LINEAR_COVE, WALL_SCONCE, WALL_SCONCE, STEP_LIGHT, STEP_LIGHT]
    assert design.fixtures[1].position == (150.0, 625.0)
    assert design.fixtures[4].position == (330.0, 755.0)
    assert design.total_cost == 1320
    assert design.metrics.total_watts == 112.0


def test_bedroom_without_bed_keeps_cove_and_explains() -> None:
    room = Room.from_dict({"id": "b", "type": "bedroom", "boundary": [0, 0, 300, 300]})
    design = synthesize(room)
    assert design.fixture_ids() == ["cove_ambient"]
    assert design.reasoning_for("bed")
    assert design.reasoning_for("sconces") == []


def test_bathroom_layout() -> None:
    design = synthesize(_demo("room_4"))
    assert design.fixture_ids() == ["vanity_light", "shower_can", "bath_can"]
    vanity, shower, bath = design.fixtures
    assert vanity.position == (625.0, 510.0)
    assert vanity.length == 4.0
    assert shower.mounting == "Wet location rated"
    assert bath.position == (625.0, 600.0)
    assert design.total_cost == 350


def test_office_and_study_share_rule() -> None:
    assert RULES["study"] is office_rule
    design = synthesize(_demo("room_5"))
    assert design.fixture_ids() == ["desk_pendant", "office_cove", "shelf_track"]
    assert design.fixtures[0].position == (950.0, 725.0)
    assert design.fixtures[1].length == 15.0
    assert design.fixtures[2].position == (850.0, 625.0)
    assert design.fixtures[2].aim_angle_deg == 45.0
    assert design.total_cost == 985


def test_dining_layout() -> None:
    design = synthesize(_demo("room_6"))
    assert _kinds(design) == [CHANDELIER, WALL_SCONCE, WALL_SCONCE]
    assert design.fixtures[0].position == (1350.0, 350.0)
    assert [f.position for f in design.fixtures[1:]] == [(1200.0, 350.0), (1500.0, 350.0)]
    assert design.total_cost == 540


@pytest.mark.parametrize("room_type", ["garage", "", "hallway"])
def test_unknown_room_type_gets_empty_design(room_type: str) -> None:
    assert rule_for(room_type) is no_rule
    room = Room.from_dict({"id": "x", "type": room_type, "boundary": [0, 0, 200, 200]})
    design = synthesize(room)
    assert design.fixtures == ()
    assert design.total_cost == 0
    assert design.metrics.meets_energy_code is True


def test_rule_lookup_is_case_insensitive() -> None:
    assert rule_for(" Kitchen ") is RULES["kitchen"]


def test_every_rule_starts_with_overall_rationale() -> None:
    for room in demo_analysis().rooms:
        design = synthesize(room)
        assert design.reasoning[0].kind == "overall"


def test_catalog_without_rule_kinds_is_reported() -> None:
    cat = FixtureCatalog({CEILING_CAN: DEFAULT_CATALOG[CEILING_CAN]})
    with pytest.raises(CatalogMismatchError, match="Linear Cove"):
        synthesize(_demo("room_4"), cat)
    assert len(synthesize(Room.from_dict({"id": "g", "type": "garage", "boundary": [0, 0, 10, 10]}), cat).fixtures) == 0
