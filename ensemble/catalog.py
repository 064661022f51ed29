"""
Ensemble Fixture Catalog

Static reference data for every fixture kind the designer can place.

Features:
- Discrete kinds priced per unit (price / wattage / lumens)
- Linear kinds priced per foot of run
- Read-only mapping shared by reference across all designs
- Load / export as JSON for versioned overrides
"""

from __future__ import annotations

import json
from dataclasses import dataclass, asdict
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional

CATALOG_VERSION = 1

LINEAR_COVE = "Linear Cove"
PENDANT = "Pendant"
CEILING_CAN = "Ceiling Can"
WALL_SCONCE = "Wall Sconce"
TRACK_LIGHT = "Track Light"
STEP_LIGHT = "Step Light"
CHANDELIER = "Chandelier"

# Run length used when a linear fixture carries no explicit length.
NOMINAL_LINEAR_LENGTH_FT = 10.0


@dataclass(frozen=True)
class FixtureSpec:
    """A fixture kind in the catalog."""
    name: str

    # Discrete
    price: Optional[float] = None
    wattage: Optional[float] = None
    lumens: Optional[float] = None

    # Linear (per foot of run)
    price_per_foot: Optional[float] = None
    wattage_per_foot: Optional[float] = None
    lumens_per_foot: Optional[float] = None

    # Display only
    color: str = "#FFFFFF"
    icon: str = ""
    description: str = ""

    @property
    def is_linear(self) -> bool:
        return self.price_per_foot is not None or self.wattage_per_foot is not None or self.lumens_per_foot is not None

    def watts_for(self, length: Optional[float]) -> float:
        if self.is_linear:
            return run_length_ft(length) * float(self.wattage_per_foot or 0.0)
        return float(self.wattage or 0.0)

    def lumens_for(self, length: Optional[float]) -> float:
        if self.is_linear:
            return run_length_ft(length) * float(self.lumens_per_foot or 0.0)
        return float(self.lumens or 0.0)

    def price_for(self, length: Optional[float]) -> float:
        if self.is_linear:
            return run_length_ft(length) * float(self.price_per_foot or 0.0)
        return float(self.price or 0.0)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        del d["name"]
        return {k: v for k, v in d.items() if v is not None}

    @staticmethod
    def from_dict(name: str, d: Mapping[str, Any]) -> "FixtureSpec":
        def num(key: str) -> Optional[float]:
            value = d.get(key)
            return None if value is None else float(value)

        return FixtureSpec(
            name=str(name),
            price=num("price"),
            wattage=num("wattage"),
            lumens=num("lumens"),
            price_per_foot=num("price_per_foot"),
            wattage_per_foot=num("wattage_per_foot"),
            lumens_per_foot=num("lumens_per_foot"),
            color=str(d.get("color", "#FFFFFF")),
            icon=str(d.get("icon", "")),
            description=str(d.get("description", "")),
        )


def run_length_ft(length: Optional[float]) -> float:
    # A zero-length run counts as unspecified.
    return float(length) if length else NOMINAL_LINEAR_LENGTH_FT


class FixtureCatalog(Mapping[str, FixtureSpec]):
    """Immutable `kind -> FixtureSpec` lookup."""

    def __init__(self, specs: Mapping[str, FixtureSpec], version: int = CATALOG_VERSION):
        self._specs = MappingProxyType(dict(specs))
        self.version = int(version)

    def __getitem__(self, kind: str) -> FixtureSpec:
        return self._specs[kind]

    def __iter__(self) -> Iterator[str]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    def __repr__(self) -> str:
        return f"FixtureCatalog(version={self.version}, kinds={list(self._specs)})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "fixtures": {name: spec.to_dict() for name, spec in self._specs.items()},
        }

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "FixtureCatalog":
        fixtures = d.get("fixtures", d)
        if not isinstance(fixtures, Mapping):
            raise ValueError("Catalog payload must map fixture kinds to specs")
        specs = {
            str(name): FixtureSpec.from_dict(str(name), payload)
            for name, payload in fixtures.items()
            if isinstance(payload, Mapping)
        }
        return FixtureCatalog(specs, version=int(d.get("version", CATALOG_VERSION)))


DEFAULT_CATALOG = FixtureCatalog(
    {
        LINEAR_COVE: FixtureSpec(
            name=LINEAR_COVE,
            price_per_foot=50.0,
            wattage_per_foot=4.5,
            lumens_per_foot=450.0,
            color="#00CED1",
            icon="━━━",
            description="Continuous LED strip in architectural cove",
        ),
        PENDANT: FixtureSpec(
            name=PENDANT,
            price=150.0,
            wattage=15.0,
            lumens=1200.0,
            color="#FFD700",
            icon="⬇◉",
            description="Suspended decorative light",
        ),
        CEILING_CAN: FixtureSpec(
            name=CEILING_CAN,
            price=75.0,
            wattage=12.0,
            lumens=1000.0,
            color="#87CEEB",
            icon="◉",
            description="Recessed downlight",
        ),
        WALL_SCONCE: FixtureSpec(
            name=WALL_SCONCE,
            price=95.0,
            wattage=8.0,
            lumens=600.0,
            color="#FF6347",
            icon="▣",
            description="Wall-mounted light",
        ),
        TRACK_LIGHT: FixtureSpec(
            name=TRACK_LIGHT,
            price=85.0,
            wattage=12.0,
            lumens=900.0,
            color="#32CD32",
            icon="◊",
            description="Adjustable track spotlight",
        ),
        STEP_LIGHT: FixtureSpec(
            name=STEP_LIGHT,
            price=65.0,
            wattage=3.0,
            lumens=150.0,
            color="#FFA500",
            icon="▢",
            description="Low-level pathway light",
        ),
        CHANDELIER: FixtureSpec(
            name=CHANDELIER,
            price=350.0,
            wattage=60.0,
            lumens=4000.0,
            color="#FF69B4",
            icon="✦",
            description="Decorative centerpiece",
        ),
    }
)


def load_catalog(path: Path) -> FixtureCatalog:
    """Load a catalog from a JSON file."""
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"Catalog file must contain a JSON object: {path}")
    return FixtureCatalog.from_dict(payload)


def save_catalog(catalog: FixtureCatalog, path: Path) -> Path:
    path = Path(path).expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(catalog.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def default_catalog() -> FixtureCatalog:
    """The configured catalog: the JSON override when set, else the built-in table."""
    from ensemble.config import CATALOG_PATH

    if CATALOG_PATH is not None:
        return load_catalog(CATALOG_PATH)
    return DEFAULT_CATALOG
