"""
Room detection boundary.

The detector that turns a floor-plan image into rooms is an external collaborator.
Its output is normalized here; whenever it is missing, slow, failing or returns
something unusable, the fixed demo analysis is used instead.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

from ensemble.config import DEMO_IMAGE_HEIGHT, DEMO_IMAGE_WIDTH, DETECTOR_TIMEOUT_S
from ensemble.errors import MalformedInputError, UpstreamUnavailableError
from ensemble.schema import Room


logger = logging.getLogger(__name__)


class RoomDetector(Protocol):
    def analyze(self, image: Any) -> Mapping[str, Any]:
        ...


@dataclass(frozen=True)
class FloorAnalysis:
    summary: Dict[str, Any] = field(default_factory=dict)
    rooms: Tuple[Room, ...] = ()
    source: str = "demo"  # "detector" or "demo"
    warnings: Tuple[str, ...] = ()

    def room(self, room_id: str) -> Optional[Room]:
        for r in self.rooms:
            if r.id == room_id:
                return r
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": dict(self.summary),
            "rooms": [r.to_dict() for r in self.rooms],
            "source": self.source,
            "warnings": list(self.warnings),
        }


_DEMO_ROOMS: List[Dict[str, Any]] = [
    {
        "id": "room_1",
        "name": "Kitchen",
        "type": "kitchen",
        "boundary": [50, 50, 550, 450],
        "dimensions": "20x16 ft",
        "area": "320 sq ft",
        "objects": [
            {"type": "kitchen_island", "position": [300, 250], "dimensions": "8x4 ft"},
            {"type": "refrigerator", "position": [100, 100], "dimensions": "3x2.5 ft"},
            {"type": "stove", "position": [200, 100], "dimensions": "2.5x2 ft"},
            {"type": "sink", "position": [350, 100], "dimensions": "3x2 ft"},
        ],
        "features": [
            {"type": "window", "position": [300, 50], "width": 60},
            {"type": "door", "position": [550, 250], "width": 36},
        ],
    },
    {
        "id": "room_2",
        "name": "Living Room",
        "type": "living",
        "boundary": [600, 50, 1100, 500],
        "dimensions": "20x18 ft",
        "area": "360 sq ft",
        "objects": [
            {"type": "sofa", "position": [850, 300], "dimensions": "8x3 ft"},
            {"type": "coffee_table", "position": [850, 200], "dimensions": "4x2 ft"},
            {"type": "tv_stand", "position": [850, 100], "dimensions": "5x1.5 ft"},
            {"type": "armchair", "position": [700, 300], "dimensions": "3x3 ft"},
        ],
        "features": [
            {"type": "window", "position": [850, 50], "width": 100},
            {"type": "door", "position": [600, 275], "width": 36},
        ],
    },
    {
        "id": "room_3",
        "name": "Master Bedroom",
        "type": "bedroom",
        "boundary": [50, 500, 450, 850],
        "dimensions": "16x14 ft",
        "area": "224 sq ft",
        "objects": [
            {"type": "bed", "position": [250, 675], "dimensions": "6x7 ft"},
            {"type": "nightstand", "position": [150, 675], "dimensions": "2x2 ft"},
            {"type": "nightstand", "position": [350, 675], "dimensions": "2x2 ft"},
            {"type": "dresser", "position": [250, 800], "dimensions": "5x2 ft"},
        ],
        "features": [
            {"type": "window", "position": [250, 500], "width": 48},
            {"type": "door", "position": [450, 675], "width": 32},
        ],
    },
    {
        "id": "room_4",
        "name": "Bathroom",
        "type": "bathroom",
        "boundary": [500, 500, 750, 700],
        "dimensions": "10x8 ft",
        "area": "80 sq ft",
        "objects": [
            {"type": "vanity", "position": [625, 550], "dimensions": "4x2 ft"},
            {"type": "toilet", "position": [575, 650], "dimensions": "2x2.5 ft"},
            {"type": "shower", "position": [700, 625], "dimensions": "3x3 ft"},
        ],
        "features": [{"type": "door", "position": [500, 600], "width": 28}],
    },
    {
        "id": "room_5",
        "name": "Study",
        "type": "office",
        "boundary": [800, 600, 1100, 850],
        "dimensions": "12x10 ft",
        "area": "120 sq ft",
        "objects": [
            {"type": "desk", "position": [950, 725], "dimensions": "5x2.5 ft"},
            {"type": "office_chair", "position": [950, 750], "dimensions": "2x2 ft"},
            {"type": "bookshelf", "position": [850, 725], "dimensions": "3x1 ft"},
        ],
        "features": [
            {"type": "window", "position": [950, 600], "width": 36},
            {"type": "door", "position": [800, 725], "width": 32},
        ],
    },
    {
        "id": "room_6",
        "name": "Dining Room",
        "type": "dining",
        "boundary": [1150, 200, 1550, 500],
        "dimensions": "16x12 ft",
        "area": "192 sq ft",
        "objects": [
            {"type": "dining_table", "position": [1350, 350], "dimensions": "6x4 ft"},
            {"type": "dining_chair", "position": [1300, 350], "dimensions": "1.5x1.5 ft"},
            {"type": "dining_chair", "position": [1400, 350], "dimensions": "1.5x1.5 ft"},
            {"type": "cabinet", "position": [1350, 450], "dimensions": "5x2 ft"},
        ],
        "features": [
            {"type": "window", "position": [1350, 200], "width": 60},
            {"type": "door", "position": [1150, 350], "width": 36},
        ],
    },
]


def demo_analysis(
    image_meta: Optional[Mapping[str, Any]] = None,
    warnings: Tuple[str, ...] = (),
) -> FloorAnalysis:
    """The fixed six-room residential plan used whenever detection is unavailable."""
    meta = dict(image_meta or {})
    width = int(meta.get("width") or DEMO_IMAGE_WIDTH)
    height = int(meta.get("height") or DEMO_IMAGE_HEIGHT)
    return FloorAnalysis(
        summary={
            "total_rooms": len(_DEMO_ROOMS),
            "building_type": "residential",
            "total_area": "2,100 sq ft",
            "image_width": width,
            "image_height": height,
        },
        rooms=tuple(Room.from_dict(r) for r in _DEMO_ROOMS),
        source="demo",
        warnings=tuple(warnings),
    )


def analysis_from_payload(payload: Any) -> FloorAnalysis:
    """Normalize detector output; rooms without an id become `room_<n>`."""
    if not isinstance(payload, Mapping):
        raise MalformedInputError(f"Detector output must be a mapping, got {type(payload).__name__}")
    rooms = payload.get("rooms")
    if not isinstance(rooms, list) or not rooms:
        raise MalformedInputError("Detector output has no rooms")
    summary = payload.get("summary")
    return FloorAnalysis(
        summary=dict(summary) if isinstance(summary, Mapping) else {},
        rooms=tuple(Room.from_dict(r, fallback_id=f"room_{i + 1}") for i, r in enumerate(rooms)),
        source="detector",
    )


def _run_detector(detector: RoomDetector, image: Any, timeout_s: float) -> Mapping[str, Any]:
    pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="room-detector")
    try:
        future = pool.submit(detector.analyze, image)
        try:
            return future.result(timeout=timeout_s)
        except FutureTimeoutError as e:
            future.cancel()
            raise UpstreamUnavailableError(f"Room detector timed out after {timeout_s:g}s") from e
        except Exception as e:
            raise UpstreamUnavailableError(f"Room detector failed: {e}") from e
    finally:
        # Do not block the request on a detector that is still running.
        pool.shutdown(wait=False)


def analyze_floor_plan(
    detector: Optional[RoomDetector],
    image: Any,
    image_meta: Optional[Mapping[str, Any]] = None,
    timeout_s: float = DETECTOR_TIMEOUT_S,
) -> FloorAnalysis:
    """Run the detector with a timeout; fall back to the demo analysis on any failure."""
    if detector is None:
        logger.info("No room detector configured, using demo analysis")
        return demo_analysis(image_meta, warnings=("Room detector unavailable; showing demo rooms",))
    try:
        payload = _run_detector(detector, image, timeout_s)
        return analysis_from_payload(payload)
    except (UpstreamUnavailableError, MalformedInputError) as e:
        logger.warning("Room detection failed, using demo analysis: %s", e)
        return demo_analysis(image_meta, warnings=(f"{e}; showing demo rooms",))
