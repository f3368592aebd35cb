"""In-memory host model built from a JSON scene.

Backs the HTTP API, the CLI and the tests. Walls become boxes with
their openings cut out, existing floors become extrusions, and every
mutation goes through a snapshot/rollback transaction.
"""

from __future__ import annotations

import copy
import itertools
import logging
from contextlib import contextmanager
from typing import Any, Iterator, Sequence

import numpy as np

from slabframe.config import FloorSpec, LoopSpec, RoomSpec, SceneSpec, WallSpec
from slabframe.errors import GeometryError, HostOperationError
from slabframe.floors.threshold import DOWN, UP
from slabframe.geometry.booleans import difference_all
from slabframe.geometry.curves import Curve, Point, as_point, unit
from slabframe.geometry.loops import CurveLoop
from slabframe.geometry.primitives import BOOLEAN_OVERSHOOT, extrude_loops
from slabframe.geometry.transforms import translate
from slabframe.host.ports import (
    DoorGeometry,
    FloorGeometry,
    HostedOpening,
    HostModel,
    OpeningKind,
    RoomGeometry,
    WallGeometry,
)

logger = logging.getLogger(__name__)

UP = np.array([0.0, 0.0, 1.0])


def loop_from_spec(spec: LoopSpec) -> CurveLoop:
    """CurveLoop from polygon points or explicit curves."""
    if spec.points is not None:
        return CurveLoop.from_points(spec.points)
    curves = []
    for c in spec.curves:
        if c.kind == "arc":
            curves.append(Curve.arc(c.center, c.start, c.end, c.normal))
        else:
            curves.append(Curve.line(c.start, c.end))
    return CurveLoop(tuple(curves))


def room_from_spec(spec: RoomSpec) -> RoomGeometry:
    return RoomGeometry(
        id=spec.id,
        boundary=tuple(loop_from_spec(loop) for loop in spec.boundary),
        location=spec.location,
        level=spec.level,
    )


def floor_from_spec(spec: FloorSpec) -> FloorGeometry:
    """Floor solid: boundary raised by the offset, extruded down by thickness."""
    loops = [
        translate(loop_from_spec(loop), UP, spec.elevation_offset)
        for loop in spec.boundary
    ]
    return FloorGeometry(
        id=spec.id,
        solid=extrude_loops(loops, DOWN, spec.thickness),
        thickness=spec.thickness,
        elevation_offset=spec.elevation_offset,
        floor_type=spec.floor_type,
        level=spec.level,
    )


def wall_from_spec(spec: WallSpec) -> tuple[WallGeometry, list[DoorGeometry]]:
    """Wall solid with openings cut out, and a door record per door opening.

    Doors face the wall's left side (Z x wall direction) unless flipped.
    """
    centerline = Curve.line(spec.start, spec.end)
    start = np.asarray(centerline.start)
    end = np.asarray(centerline.end)
    along = centerline.direction
    side = unit(np.cross(UP, along))
    half = side * spec.width / 2.0

    footprint = CurveLoop.from_points([start - half, end - half, end + half, start + half])
    solid = extrude_loops([footprint], UP, spec.height)

    cutters = []
    openings = []
    doors = []
    for opening in spec.openings:
        center = start + along * opening.position
        half_w = along * opening.width / 2.0
        # Cutters reaching the wall base or top overshoot it
        sill = opening.sill_height if opening.sill_height > 0 else -BOOLEAN_OVERSHOOT
        head = opening.sill_height + opening.height
        if head >= spec.height:
            head = spec.height + BOOLEAN_OVERSHOOT
        bottom = UP * sill
        top = UP * head
        behind = center - side * (spec.width / 2.0 + BOOLEAN_OVERSHOOT)
        profile = CurveLoop.from_points([
            behind - half_w + bottom,
            behind + half_w + bottom,
            behind + half_w + top,
            behind - half_w + top,
        ])
        cutters.append(extrude_loops([profile], side, spec.width + 2 * BOOLEAN_OVERSHOOT))

        location = as_point(center)
        kind = OpeningKind(opening.kind)
        openings.append(HostedOpening(opening.id, kind, location))
        if kind is OpeningKind.DOOR:
            facing = -side if opening.flip_facing else side
            doors.append((opening.id, location, as_point(facing), opening.width))

    wall = WallGeometry(
        id=spec.id,
        centerline=centerline,
        width=spec.width,
        solid=difference_all(solid, cutters),
        openings=tuple(openings),
    )
    return wall, [
        DoorGeometry(door_id, location, facing, width, host_wall=wall)
        for door_id, location, facing, width in doors
    ]


class InMemoryHost(HostModel):
    """HostModel holding plain Python records."""

    def __init__(self, view_type: str = "floor_plan", floor_types: Sequence[str] = ()) -> None:
        self.view_type = view_type
        self._floor_types = list(floor_types)
        self._rooms: dict[str, RoomGeometry] = {}
        self._walls: dict[str, WallGeometry] = {}
        self._doors: list[DoorGeometry] = []
        self._floors: dict[str, FloorGeometry] = {}
        self._parameters: dict[str, dict[str, Any]] = {}
        self.model_curves: dict[str, tuple[Curve, Point, Point]] = {}
        self.committed: list[str] = []
        self._ids = itertools.count(1)
        self._active: str | None = None

    @classmethod
    def from_scene(cls, scene: SceneSpec) -> InMemoryHost:
        """Build a host from a scene description."""
        host = cls(view_type=scene.view_type, floor_types=scene.floor_types)
        for room in scene.rooms:
            host.add_room(room_from_spec(room))
        for wall_spec in scene.walls:
            wall, doors = wall_from_spec(wall_spec)
            host.add_wall(wall, doors)
        for floor_spec in scene.floors:
            host.add_floor(floor_from_spec(floor_spec), mark=floor_spec.mark)
        return host

    # --- population ---

    def add_room(self, room: RoomGeometry) -> None:
        self._rooms[room.id] = room

    def add_wall(self, wall: WallGeometry, doors: Sequence[DoorGeometry] = ()) -> None:
        self._walls[wall.id] = wall
        self._doors.extend(doors)

    def add_door(self, door: DoorGeometry) -> None:
        self._doors.append(door)

    def add_floor(self, floor: FloorGeometry, mark: str | None = None) -> None:
        self._floors[floor.id] = floor
        self._parameters[floor.id] = {"Mark": mark}

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    def _require_transaction(self, action: str) -> None:
        if self._active is None:
            raise HostOperationError(f"Cannot {action} outside a transaction")

    # --- HostModel ---

    def is_floor_plan_view(self) -> bool:
        return self.view_type == "floor_plan"

    def rooms(self) -> list[RoomGeometry]:
        return list(self._rooms.values())

    def doors_near(self, room: RoomGeometry) -> list[DoorGeometry]:
        lo, hi = room.bounding_box()
        near = []
        for door in self._doors:
            reach = door.width / 2.0
            x, y, _ = door.location
            if lo[0] - reach <= x <= hi[0] + reach and lo[1] - reach <= y <= hi[1] + reach:
                near.append(door)
        return near

    def floors(self) -> list[FloorGeometry]:
        return list(self._floors.values())

    def floor_types(self) -> list[str]:
        return list(self._floor_types)

    def wall(self, wall_id: str) -> WallGeometry | None:
        return self._walls.get(wall_id)

    def create_floor(
        self,
        loops: Sequence[CurveLoop],
        floor_type: str,
        level: str,
        elevation_offset: float,
        thickness: float,
    ) -> str:
        self._require_transaction("create a floor")
        if floor_type not in self._floor_types:
            raise HostOperationError(f"Unknown floor type '{floor_type}'")
        try:
            solid = extrude_loops(list(loops), DOWN, thickness)
        except GeometryError as exc:
            raise HostOperationError(f"Floor creation failed: {exc}") from exc
        floor_id = self._next_id("floor")
        self._floors[floor_id] = FloorGeometry(
            id=floor_id,
            solid=solid,
            thickness=thickness,
            elevation_offset=elevation_offset,
            floor_type=floor_type,
            level=level,
        )
        self._parameters[floor_id] = {"Mark": None}
        logger.debug("Created floor %s (%s)", floor_id, floor_type)
        return floor_id

    def get_parameter(self, element_id: str, name: str) -> Any:
        if element_id not in self._parameters:
            raise HostOperationError(f"No element '{element_id}'")
        return self._parameters[element_id].get(name)

    def set_parameter(self, element_id: str, name: str, value: Any) -> None:
        self._require_transaction("set a parameter")
        if element_id not in self._parameters:
            raise HostOperationError(f"No element '{element_id}'")
        self._parameters[element_id][name] = value

    def delete(self, element_id: str) -> None:
        self._require_transaction("delete an element")
        if element_id not in self._floors:
            raise HostOperationError(f"No element '{element_id}' to delete")
        del self._floors[element_id]
        del self._parameters[element_id]

    def create_model_curve(self, curve: Curve, normal: Point, origin: Point) -> str:
        self._require_transaction("create a model curve")
        curve_id = self._next_id("curve")
        self.model_curves[curve_id] = (curve, as_point(normal), as_point(origin))
        return curve_id

    @contextmanager
    def transaction(self, name: str) -> Iterator[None]:
        if self._active is not None:
            raise HostOperationError(f"Transaction '{self._active}' is already open")
        snapshot = (
            dict(self._floors),
            copy.deepcopy(self._parameters),
            dict(self.model_curves),
        )
        self._active = name
        try:
            yield
        except BaseException:
            self._floors, self._parameters, self.model_curves = snapshot
            logger.info("Transaction '%s' rolled back", name)
            raise
        finally:
            self._active = None
        self.committed.append(name)
