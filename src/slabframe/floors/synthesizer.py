"""Room floor synthesis: base slab, threshold union chain, top-face loops."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from manifold3d import Manifold

from slabframe.config import EngineConfig
from slabframe.errors import GeometryError
from slabframe.floors.threshold import DOWN, UP, Threshold, build_threshold, threshold_solid
from slabframe.geometry.booleans import union
from slabframe.geometry.faces import require_face
from slabframe.geometry.loops import CurveLoop
from slabframe.geometry.primitives import describe, extrude_loops
from slabframe.geometry.probe import vertical_probe
from slabframe.geometry.transforms import translate
from slabframe.host.ports import DoorGeometry, FloorGeometry, RoomGeometry

logger = logging.getLogger(__name__)

UP = (0.0, 0.0, 1.0)


@dataclass
class RoomFloorResult:
    """Synthesized floor for one room, ready for element creation."""

    room_id: str
    level: str
    solid: Manifold
    existing_floor_id: str | None
    elevation_offset: float
    floor_thickness: float
    floor_type_name: str
    top_loops: list[CurveLoop]
    thresholds: list[Threshold] = field(default_factory=list)
    failed_thresholds: list[Threshold] = field(default_factory=list)


def _overlaps_xy(a: tuple, b: tuple) -> bool:
    (a_min, a_max), (b_min, b_max) = a, b
    return all(a_min[i] <= b_max[i] and b_min[i] <= a_max[i] for i in range(2))


def locate_existing_floor(
    room: RoomGeometry,
    floors: Sequence[FloorGeometry],
    probe_depth: float,
) -> FloorGeometry | None:
    """First floor under the room point, in enumeration order.

    Only floors with volume whose bounding box overlaps the room's (in
    plan) are probed. No nearest-hit tie-break is applied.
    """
    room_box = room.bounding_box()
    point = room.reference_point()
    for floor in floors:
        if floor.solid.is_empty() or floor.solid.volume() <= 0:
            continue
        if not _overlaps_xy(room_box, floor.bounding_box()):
            continue
        if vertical_probe(floor.solid, point, below=probe_depth):
            logger.debug("Room %s sits on floor %s", room.id, floor.id)
            return floor
    return None


def room_thresholds(room: RoomGeometry, doors: Sequence[DoorGeometry]) -> list[Threshold]:
    """One threshold per door with a host wall."""
    point = room.reference_point()
    thresholds = []
    for door in doors:
        wall = door.host_wall
        if wall is None:
            continue
        thresholds.append(
            build_threshold(
                room_id=room.id,
                door_id=door.id,
                location=door.location,
                facing=door.facing,
                width=door.width,
                wall_start=wall.centerline.start,
                wall_end=wall.centerline.end,
                wall_width=wall.width,
                room_point=point,
            )
        )
    return thresholds


class FloorSynthesizer:
    """Builds a room's floor solid extended under each of its door thresholds.

    Responsibility: geometry only. Element creation and replacement of
    the old floor belong to the calling command.
    """

    def __init__(self, config: EngineConfig) -> None:
        self.config = config

    def base_solid(
        self, room: RoomGeometry, existing: FloorGeometry | None
    ) -> tuple[Manifold, float, float]:
        """(solid, elevation offset, thickness) of the slab under the room.

        An existing floor at offset 0 is reused as-is; otherwise the room
        boundary is raised by the offset and extruded down.
        """
        if not room.boundary:
            raise GeometryError(f"Room '{room.id}' has no boundary loops")

        if existing is None:
            thickness = self.config.floor_thickness
            return extrude_loops(room.boundary, DOWN, thickness), 0.0, thickness

        thickness = existing.thickness
        offset = existing.elevation_offset
        if offset == 0:
            return existing.solid, offset, thickness
        raised = [translate(loop, UP, offset) for loop in room.boundary]
        return extrude_loops(raised, DOWN, thickness), offset, thickness

    def synthesize(
        self,
        room: RoomGeometry,
        doors: Sequence[DoorGeometry],
        floors: Sequence[FloorGeometry],
    ) -> RoomFloorResult:
        """Synthesize the floor for one room.

        1. Locate the existing floor under the room (if any)
        2. Build the base slab
        3. Union one threshold prism per door
        4. Extract the top-face loops
        """
        if not room.boundary:
            raise GeometryError(f"Room '{room.id}' has no boundary loops")
        existing = locate_existing_floor(room, floors, self.config.floor_probe_depth)
        solid, offset, thickness = self.base_solid(room, existing)
        floor_type = existing.floor_type if existing else self.config.default_floor_type

        thresholds = room_thresholds(room, doors)
        failed: list[Threshold] = []
        for threshold in thresholds:
            try:
                solid = union(solid, threshold_solid(threshold, thickness, offset))
            except GeometryError as exc:
                if not self.config.isolate_threshold_failures:
                    raise
                logger.warning(
                    "Skipping threshold of door %s in room %s: %s",
                    threshold.door_id, room.id, exc,
                )
                failed.append(threshold)

        logger.debug("Room %s floor: %s", room.id, describe(solid))
        top = require_face(solid, UP, self.config.normal_tolerance)

        return RoomFloorResult(
            room_id=room.id,
            level=room.level,
            solid=solid,
            existing_floor_id=existing.id if existing else None,
            elevation_offset=offset,
            floor_thickness=thickness,
            floor_type_name=floor_type,
            top_loops=list(top.loops),
            thresholds=[t for t in thresholds if t not in failed],
            failed_thresholds=failed,
        )
