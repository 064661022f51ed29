from __future__ import annotations

from ensemble.catalog import CEILING_CAN, LINEAR_COVE, PENDANT, FixtureCatalog, FixtureSpec
from ensemble.detector import demo_analysis
from ensemble.metrics import compute_cost, compute_metrics, cost_breakdown, meets_energy_code, recompute
from ensemble.schema import Design, Fixture
from ensemble.synthesis import synthesize


def _cans(n: int) -> list:
    return [Fixture(id=f"c{i}", kind=CEILING_CAN, position=(0.0, 0.0)) for i in range(n)]


def test_energy_code_boundary_is_inclusive() -> None:
    assert meets_energy_code(120.0, 100.0) is True
    assert meets_energy_code(121.0, 100.0) is False

    at_limit = compute_metrics(_cans(10), 100.0)
    assert at_limit.total_watts == 120.0
    assert at_limit.meets_energy_code is True

    cat = FixtureCatalog({"Flood": FixtureSpec(name="Flood", price=1.0, wattage=121.0, lumens=0.0)})
    over = compute_metrics([Fixture(id="f", kind="Flood", position=(0.0, 0.0))], 100.0, cat)
    assert over.watts_per_sqft == 1.21
    assert over.meets_energy_code is False


def test_linear_fixture_uses_nominal_length() -> None:
    fixtures = [
        Fixture(id="a", kind=LINEAR_COVE, position=(0.0, 0.0)),
        Fixture(id="b", kind=LINEAR_COVE, position=(0.0, 0.0), length=4.0),
    ]
    m = compute_metrics(fixtures, 100.0)
    assert m.total_watts == 10 * 4.5 + 4 * 4.5
    assert m.total_lumens == 14 * 450
    assert compute_cost(fixtures) == 14 * 50


def test_unknown_kind_contributes_nothing() -> None:
    fixtures = [Fixture(id="x", kind="Laser", position=(0.0, 0.0)), Fixture(id="p", kind=PENDANT, position=(0.0, 0.0))]
    m = compute_metrics(fixtures, 100.0)
    assert m.total_watts == 15.0
    assert compute_cost(fixtures) == 150
    assert list(cost_breakdown(fixtures)) == [PENDANT]


def test_metrics_are_idempotent_on_unchanged_design() -> None:
    room = demo_analysis().room("room_1")
    design = synthesize(room)
    again = recompute(design, 320.0)
    assert again.metrics == design.metrics
    assert again.total_cost == design.total_cost
    assert compute_metrics(design.fixtures, 320.0) == compute_metrics(design.fixtures, 320.0)
    assert compute_cost(design.fixtures) == compute_cost(design.fixtures)


def test_kitchen_metrics_values() -> None:
    design = synthesize(demo_analysis().room("room_1"))
    m = design.metrics
    assert design.total_cost == 3 * 150 + 10 * 50 + 20 * 75
    assert m.total_watts == 330.0
    assert m.total_lumens == 28100
    assert m.lumens_per_sqft == 88
    assert abs(m.watts_per_sqft - 330.0 / 320.0) < 1e-12
    assert m.meets_energy_code is True
    assert m.room_area_sqft == 320.0


def test_cost_breakdown_per_kind() -> None:
    design = synthesize(demo_analysis().room("room_1"))
    rows = cost_breakdown(design.fixtures)
    assert list(rows) == [PENDANT, LINEAR_COVE, CEILING_CAN]
    assert rows[PENDANT] == {"count": 3, "cost": 450.0}
    assert rows[LINEAR_COVE] == {"count": 1, "cost": 500.0, "length": 10.0}
    assert rows[CEILING_CAN]["count"] == 20
    assert rows[CEILING_CAN]["cost"] == 1500.0


def test_empty_design_metrics() -> None:
    room = demo_analysis().room("room_4")
    design = recompute(Design.empty(room), 80.0)
    assert design.total_cost == 0
    assert design.metrics.total_watts == 0.0
    assert design.metrics.meets_energy_code is True
