"""Host model ports.

The engine never touches host elements directly. It reads immutable
geometry records through `HostModel` and asks it to create or delete
elements inside a transaction.
"""

from __future__ import annotations

import abc
from contextlib import AbstractContextManager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

from manifold3d import Manifold

from slabframe.geometry.curves import Curve, Point, as_point
from slabframe.geometry.loops import CurveLoop


class OpeningKind(str, Enum):
    DOOR = "door"
    WINDOW = "window"


@dataclass(frozen=True)
class RoomGeometry:
    """Room boundary loops (outer first) at level height."""

    id: str
    boundary: tuple[CurveLoop, ...]
    location: Point | None = None
    level: str = "Level 1"

    @property
    def area(self) -> float:
        if not self.boundary:
            return 0.0
        return self.boundary[0].area - sum(loop.area for loop in self.boundary[1:])

    def reference_point(self) -> Point:
        """Room location point, falling back to the outer boundary centroid."""
        if self.location is not None:
            return self.location
        return self.boundary[0].centroid()

    def bounding_box(self) -> tuple[Point, Point]:
        corners = [loop.bounding_box() for loop in self.boundary]
        lo = tuple(min(c[0][i] for c in corners) for i in range(3))
        hi = tuple(max(c[1][i] for c in corners) for i in range(3))
        return as_point(lo), as_point(hi)


@dataclass(frozen=True)
class FloorGeometry:
    """Existing floor element with its solid and type attributes."""

    id: str
    solid: Manifold
    thickness: float
    elevation_offset: float = 0.0
    floor_type: str = "Generic 150mm"
    level: str = "Level 1"

    def bounding_box(self) -> tuple[Point, Point]:
        min_x, min_y, min_z, max_x, max_y, max_z = self.solid.bounding_box()
        return (min_x, min_y, min_z), (max_x, max_y, max_z)


@dataclass(frozen=True)
class HostedOpening:
    """Door or window hosted by a wall; location is on the wall centerline."""

    id: str
    kind: OpeningKind
    location: Point | None = None


@dataclass(frozen=True)
class WallGeometry:
    """Wall solid plus the attributes framing needs.

    face_loops and face_normal describe the wall face to frame (outer
    loop first, then one loop per opening). When omitted they are
    recovered from the largest face of the solid.
    """

    id: str
    centerline: Curve
    width: float
    solid: Manifold
    openings: tuple[HostedOpening, ...] = ()
    face_loops: tuple[CurveLoop, ...] | None = None
    face_normal: Point | None = None


@dataclass(frozen=True)
class DoorGeometry:
    """Door instance: insertion point, facing, width, and host wall."""

    id: str
    location: Point
    facing: Point
    width: float
    host_wall: WallGeometry | None = None


class HostModel(abc.ABC):
    """Geometry-fetch and element-creation port implemented by each host."""

    @abc.abstractmethod
    def is_floor_plan_view(self) -> bool:
        """Whether the active view is a floor plan."""

    @abc.abstractmethod
    def rooms(self) -> list[RoomGeometry]:
        """All placed rooms."""

    @abc.abstractmethod
    def doors_near(self, room: RoomGeometry) -> list[DoorGeometry]:
        """Doors whose extent overlaps the room's bounding box."""

    @abc.abstractmethod
    def floors(self) -> list[FloorGeometry]:
        """Existing floors, in the host's enumeration order."""

    @abc.abstractmethod
    def floor_types(self) -> list[str]:
        """Available floor type names."""

    @abc.abstractmethod
    def wall(self, wall_id: str) -> WallGeometry | None:
        """Wall by id, or None if there is no such wall."""

    @abc.abstractmethod
    def create_floor(
        self,
        loops: Sequence[CurveLoop],
        floor_type: str,
        level: str,
        elevation_offset: float,
        thickness: float,
    ) -> str:
        """Create a floor from top-face loops; returns the new element id."""

    @abc.abstractmethod
    def get_parameter(self, element_id: str, name: str) -> Any:
        """Parameter value, or None when unset."""

    @abc.abstractmethod
    def set_parameter(self, element_id: str, name: str, value: Any) -> None:
        """Set a parameter value."""

    @abc.abstractmethod
    def delete(self, element_id: str) -> None:
        """Delete an element."""

    @abc.abstractmethod
    def create_model_curve(self, curve: Curve, normal: Point, origin: Point) -> str:
        """Create a model line on the plane through origin with the given normal."""

    @abc.abstractmethod
    def transaction(self, name: str) -> AbstractContextManager:
        """Scope a batch of mutations; rolled back if the block raises."""
