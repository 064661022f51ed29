from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Iterable, Mapping, Optional

from ensemble.catalog import DEFAULT_CATALOG, FixtureSpec, run_length_ft
from ensemble.schema import Design, Fixture, Metrics
from ensemble.units import DEFAULT_AREA_SQFT, round_half_up

ENERGY_CODE_LIMIT_W_PER_SQFT = 1.2


def _spec(catalog: Mapping[str, FixtureSpec], kind: str) -> Optional[FixtureSpec]:
    # Unknown kinds count as zero so a partially corrupt design still renders.
    return catalog.get(kind)


def meets_energy_code(total_watts: float, room_area_sqft: float) -> bool:
    return (float(total_watts) / float(room_area_sqft)) <= ENERGY_CODE_LIMIT_W_PER_SQFT


def compute_metrics(
    fixtures: Iterable[Fixture],
    room_area_sqft: float = DEFAULT_AREA_SQFT,
    catalog: Mapping[str, FixtureSpec] = DEFAULT_CATALOG,
) -> Metrics:
    total_watts = 0.0
    total_lumens = 0.0
    for fx in fixtures:
        spec = _spec(catalog, fx.kind)
        if spec is None:
            continue
        total_watts += spec.watts_for(fx.length)
        total_lumens += spec.lumens_for(fx.length)

    area = float(room_area_sqft) if room_area_sqft else DEFAULT_AREA_SQFT
    return Metrics(
        total_watts=total_watts,
        total_lumens=round_half_up(total_lumens),
        watts_per_sqft=total_watts / area,
        lumens_per_sqft=round_half_up(total_lumens / area),
        meets_energy_code=meets_energy_code(total_watts, area),
        room_area_sqft=area,
    )


def compute_cost(fixtures: Iterable[Fixture], catalog: Mapping[str, FixtureSpec] = DEFAULT_CATALOG) -> int:
    cost = 0.0
    for fx in fixtures:
        spec = _spec(catalog, fx.kind)
        if spec is None:
            continue
        cost += spec.price_for(fx.length)
    return round_half_up(cost)


def cost_breakdown(fixtures: Iterable[Fixture], catalog: Mapping[str, FixtureSpec] = DEFAULT_CATALOG) -> Dict[str, Dict[str, Any]]:
    """Per-kind fixture count and cost, in order of first appearance."""
    rows: Dict[str, Dict[str, Any]] = {}
    for fx in fixtures:
        spec = _spec(catalog, fx.kind)
        if spec is None:
            continue
        row = rows.setdefault(fx.kind, {"count": 0, "cost": 0.0})
        row["count"] = int(row["count"]) + 1
        row["cost"] = float(row["cost"]) + spec.price_for(fx.length)
        if spec.is_linear:
            row["length"] = float(row.get("length", 0.0)) + run_length_ft(fx.length)
    return rows


def recompute(
    design: Design,
    room_area_sqft: float = DEFAULT_AREA_SQFT,
    catalog: Mapping[str, FixtureSpec] = DEFAULT_CATALOG,
) -> Design:
    return replace(
        design,
        metrics=compute_metrics(design.fixtures, room_area_sqft, catalog),
        total_cost=compute_cost(design.fixtures, catalog),
    )
