from __future__ import annotations

from dataclasses import dataclass, field, asdict, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ensemble.errors import MalformedInputError
from ensemble.geometry import Boundary, Point


def _number(value: Any, what: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise MalformedInputError(f"Expected a number for {what}, got {value!r}") from e


def _point(value: Any) -> Point:
    if isinstance(value, Mapping):
        return _number(value.get("x", 0.0), "x"), _number(value.get("y", 0.0), "y")
    if isinstance(value, Sequence) and not isinstance(value, str) and len(value) >= 2:
        return _number(value[0], "x"), _number(value[1], "y")
    raise MalformedInputError(f"Expected a position, got {value!r}")


def _point_dict(p: Point) -> Dict[str, float]:
    return {"x": p[0], "y": p[1]}


@dataclass(frozen=True)
class RoomObject:
    type: str
    position: Point
    dimensions: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "position": list(self.position), "dimensions": self.dimensions}

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "RoomObject":
        return RoomObject(
            type=str(d.get("type", "")),
            position=_point(d.get("position", (0.0, 0.0))),
            dimensions=str(d.get("dimensions", "") or ""),
        )


@dataclass(frozen=True)
class RoomFeature:
    type: str  # door, window
    position: Point
    width: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "position": list(self.position), "width": self.width}

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "RoomFeature":
        return RoomFeature(
            type=str(d.get("type", "")),
            position=_point(d.get("position", (0.0, 0.0))),
            width=_number(d.get("width", 0.0) or 0.0, "width"),
        )


@dataclass(frozen=True)
class Room:
    id: str
    name: str
    type: str
    boundary: Boundary
    objects: Tuple[RoomObject, ...] = ()
    features: Tuple[RoomFeature, ...] = ()
    area: str = ""
    dimensions: str = ""

    def find_object(self, object_type: str) -> Optional[RoomObject]:
        for obj in self.objects:
            if obj.type == object_type:
                return obj
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "boundary": list(self.boundary),
            "dimensions": self.dimensions,
            "area": self.area,
            "objects": [o.to_dict() for o in self.objects],
            "features": [f.to_dict() for f in self.features],
        }

    @staticmethod
    def from_dict(d: Any, fallback_id: str = "") -> "Room":
        if not isinstance(d, Mapping):
            raise MalformedInputError(f"Room payload must be a mapping, got {type(d).__name__}")
        boundary = d.get("boundary")
        if not isinstance(boundary, Sequence) or isinstance(boundary, str) or len(boundary) != 4:
            raise MalformedInputError(f"Room boundary must be [x1, y1, x2, y2], got {boundary!r}")
        objects = d.get("objects") or []
        features = d.get("features") or []
        return Room(
            id=str(d.get("id") or fallback_id),
            name=str(d.get("name", "") or ""),
            type=str(d.get("type", "") or ""),
            boundary=tuple(_number(v, "boundary") for v in boundary),  # type: ignore[arg-type]
            objects=tuple(RoomObject.from_dict(o) for o in objects if isinstance(o, Mapping)),
            features=tuple(RoomFeature.from_dict(f) for f in features if isinstance(f, Mapping)),
            area=str(d.get("area", "") or ""),
            dimensions=str(d.get("dimensions", "") or ""),
        )


@dataclass(frozen=True)
class RoomRef:
    id: str
    name: str
    type: str

    @staticmethod
    def of(room: Room) -> "RoomRef":
        return RoomRef(id=room.id, name=room.name, type=room.type)


@dataclass(frozen=True)
class Fixture:
    id: str
    kind: str
    position: Point
    length: Optional[float] = None  # feet; linear kinds only
    purpose: str = ""
    placement: str = ""
    mounting: str = ""
    aim_angle_deg: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"id": self.id, "type": self.kind, "position": _point_dict(self.position)}
        if self.length is not None:
            d["length"] = self.length
        for key in ("purpose", "placement", "mounting"):
            value = getattr(self, key)
            if value:
                d[key] = value
        if self.aim_angle_deg is not None:
            d["aimAngle"] = self.aim_angle_deg
        return d

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "Fixture":
        length = d.get("length")
        aim = d.get("aimAngle", d.get("aim_angle_deg"))
        return Fixture(
            id=str(d.get("id", "")),
            kind=str(d.get("type", d.get("kind", ""))),
            position=_point(d.get("position", (0.0, 0.0))),
            length=None if length is None else _number(length, "length"),
            purpose=str(d.get("purpose", "") or ""),
            placement=str(d.get("placement", "") or ""),
            mounting=str(d.get("mounting", "") or ""),
            aim_angle_deg=None if aim is None else _number(aim, "aimAngle"),
        )


@dataclass(frozen=True)
class ReasoningEntry:
    kind: str
    message: str
    fixture_kind: Optional[str] = None


@dataclass(frozen=True)
class Metrics:
    total_watts: float = 0.0
    total_lumens: int = 0
    watts_per_sqft: float = 0.0
    lumens_per_sqft: int = 0
    meets_energy_code: bool = True
    room_area_sqft: float = 100.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalWatts": round(self.total_watts, 1),
            "totalLumens": self.total_lumens,
            "wattsPerSqFt": round(self.watts_per_sqft, 2),
            "lumensPerSqFt": self.lumens_per_sqft,
            "meetsEnergyCode": self.meets_energy_code,
            "roomAreaSqFt": self.room_area_sqft,
        }


@dataclass(frozen=True)
class Design:
    """Fixture layout for one room. Metrics and cost are derived from `fixtures`."""

    room: RoomRef
    fixtures: Tuple[Fixture, ...] = ()
    reasoning: Tuple[ReasoningEntry, ...] = ()
    metrics: Metrics = field(default_factory=Metrics)
    total_cost: int = 0

    @staticmethod
    def empty(room: Room) -> "Design":
        return Design(room=RoomRef.of(room))

    def with_fixtures(self, fixtures: Sequence[Fixture]) -> "Design":
        return replace(self, fixtures=tuple(fixtures))

    def with_reasoning(self, *entries: ReasoningEntry) -> "Design":
        return replace(self, reasoning=self.reasoning + tuple(entries))

    def fixture_ids(self) -> List[str]:
        return [f.id for f in self.fixtures]

    def reasoning_for(self, kind: str) -> List[str]:
        return [r.message for r in self.reasoning if r.kind == kind]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "roomId": self.room.id,
            "roomName": self.room.name,
            "roomType": self.room.type,
            "fixtures": [f.to_dict() for f in self.fixtures],
            "reasoning": [asdict(r) for r in self.reasoning],
            "metrics": self.metrics.to_dict(),
            "totalCost": self.total_cost,
        }
