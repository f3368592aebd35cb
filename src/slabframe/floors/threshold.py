"""Door thresholds: the floor strip under a door, from the wall centerline into the room."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from manifold3d import Manifold

from slabframe.errors import GeometryError
from slabframe.geometry.curves import Point, as_point, unit
from slabframe.geometry.loops import CurveLoop
from slabframe.geometry.primitives import extrude_loops
from slabframe.geometry.transforms import translate

UP: Point = (0.0, 0.0, 1.0)
DOWN: Point = (0.0, 0.0, -1.0)


@dataclass(frozen=True)
class Threshold:
    """One door incident on a room.

    Attributes:
        location: Door insertion point on the host wall centerline.
        facing: Unit facing direction of the door.
        width: Door width.
        wall_direction: Unit direction of the host wall centerline.
        depth: Half the host wall thickness.
        room_point: Room reference point used to decide the inward side.
    """

    room_id: str
    door_id: str
    location: Point
    facing: Point
    width: float
    wall_direction: Point
    depth: float
    room_point: Point

    @property
    def inward_sign(self) -> float:
        """+1 if the door faces into the room, else -1.

        A door facing exactly along the wall relative to the room point
        counts as facing in.
        """
        to_room = np.asarray(self.room_point) - np.asarray(self.location)
        return 1.0 if float(np.dot(self.facing, to_room)) >= 0 else -1.0


def build_threshold(
    room_id: str,
    door_id: str,
    location,
    facing,
    width: float,
    wall_start,
    wall_end,
    wall_width: float,
    room_point,
) -> Threshold:
    """Assemble a Threshold from a door, its host wall centerline, and the room."""
    if width <= 0:
        raise GeometryError(f"Door '{door_id}' has non-positive width {width}")
    if wall_width <= 0:
        raise GeometryError(f"Host wall of door '{door_id}' has non-positive width")
    wall_direction = unit(np.asarray(wall_end, dtype=np.float64) - np.asarray(wall_start, dtype=np.float64))
    return Threshold(
        room_id=room_id,
        door_id=door_id,
        location=as_point(location),
        facing=as_point(unit(facing)),
        width=float(width),
        wall_direction=as_point(wall_direction),
        depth=wall_width / 2.0,
        room_point=as_point(room_point),
    )


def threshold_loop(threshold: Threshold) -> CurveLoop:
    """Rectangle spanning the door width, pushed depth toward the room."""
    location = np.asarray(threshold.location)
    along = np.asarray(threshold.wall_direction) * threshold.width / 2.0
    inward = np.asarray(threshold.facing) * threshold.depth * threshold.inward_sign

    p1 = location + along
    p2 = location - along
    p3 = p2 + inward
    p4 = p1 + inward
    return CurveLoop.from_points([p1, p2, p3, p4])


def threshold_solid(
    threshold: Threshold, floor_thickness: float, elevation_offset: float = 0.0
) -> Manifold:
    """Threshold prism: the loop raised by the floor offset, extruded down by thickness."""
    loop = translate(threshold_loop(threshold), UP, elevation_offset)
    return extrude_loops([loop], DOWN, floor_thickness)
