"""Stud framing layout for one wall face.

Produces, in order: vertical studs at regular spacing (probed through
the wall solid), the baseplate, boundary studs around the outer loop,
and opening studs around every inner loop.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from slabframe.config import EngineConfig
from slabframe.errors import GeometryError
from slabframe.framing.members import FramingMember, MemberKind, stud_pair
from slabframe.geometry.curves import Curve, Point, as_point
from slabframe.geometry.faces import largest_face
from slabframe.geometry.loops import CurveLoop
from slabframe.geometry.probe import intersect_line
from slabframe.geometry.transforms import translate, trim_curve
from slabframe.host.ports import OpeningKind, WallGeometry

logger = logging.getLogger(__name__)

Z_AXIS = np.array([0.0, 0.0, 1.0])


def stud_positions(length: float, spacing: float, tolerance: float = 0.01) -> list[float]:
    """Distances along the wall where vertical studs are probed.

    Every multiple of spacing up to the wall length, except one that
    coincides with the wall end (the end is framed by a boundary stud).
    """
    if spacing <= 0:
        raise GeometryError(f"Stud spacing must be positive, got {spacing}")
    count = int(length / spacing)
    positions = []
    for i in range(1, count + 1):
        dist = i * spacing
        if abs(dist - length) < tolerance:
            continue
        positions.append(dist)
    return positions


def is_bottom_edge(curve: Curve, height_tolerance: float = 0.01, max_height: float = 1.0) -> bool:
    """Near-horizontal edge close to the floor.

    Horizontal means endpoint heights differ by at most height_tolerance;
    close to the floor means their average is below max_height.
    """
    z0 = curve.start[2]
    z1 = curve.end[2]
    if abs(z0 - z1) <= height_tolerance + 1e-9:
        return (z0 + z1) / 2.0 < max_height
    return False


def lowest_edge_index(loop: CurveLoop) -> int:
    """Index of the curve with the lowest average endpoint height (first on ties)."""
    heights = [(curve.start[2] + curve.end[2]) / 2.0 for curve in loop]
    return int(np.argmin(heights))


@dataclass
class FramingLayoutResult:
    """Members generated for one wall, plus stud points that failed."""

    wall_id: str
    normal: Point
    members: list[FramingMember] = field(default_factory=list)
    skipped_points: list[float] = field(default_factory=list)

    def of_kind(self, kind: MemberKind) -> list[FramingMember]:
        return [m for m in self.members if m.kind is kind]


class FramingLayout:
    """Lays out studs, baseplate and opening surrounds on a wall face."""

    def __init__(self, config: EngineConfig) -> None:
        self.config = config

    def face(self, wall: WallGeometry) -> tuple[tuple[CurveLoop, ...], np.ndarray]:
        """(loops, unit normal) of the face to frame."""
        if wall.face_loops:
            if wall.face_normal is not None:
                normal = np.asarray(wall.face_normal, dtype=np.float64)
                return tuple(wall.face_loops), normal / np.linalg.norm(normal)
            _, normal = wall.face_loops[0].plane()
            return tuple(wall.face_loops), normal
        face = largest_face(wall.solid)
        return face.loops, np.asarray(face.normal, dtype=np.float64)

    def vertical_studs(
        self, wall: WallGeometry, normal: np.ndarray, skipped: list[float]
    ) -> list[FramingMember]:
        """Stud pairs from vertical probes through the wall at each stud position."""
        cfg = self.config
        centerline = wall.centerline
        length = centerline.length
        wall_dir = centerline.direction
        half = cfg.stud_thickness / 2.0
        reach = Z_AXIS * cfg.stud_probe_half_length

        members = []
        for dist in stud_positions(length, cfg.stud_spacing, cfg.stud_end_tolerance):
            point = np.asarray(centerline.point_at(dist / length))
            try:
                segments = intersect_line(wall.solid, as_point(point - reach), as_point(point + reach))
                for segment in segments:
                    trimmed = trim_curve(segment.curve, cfg.trim_length)
                    moved = translate(trimmed, normal, wall.width / 2.0)
                    members.append(
                        FramingMember(
                            MemberKind.VERTICAL_STUD,
                            translate(moved, wall_dir, half),
                            translate(moved, wall_dir, -half),
                            as_point(normal),
                        )
                    )
            except GeometryError as exc:
                logger.warning("Skipping stud at %.3f on wall %s: %s", dist, wall.id, exc)
                skipped.append(dist)
        return members

    def baseplate(self, wall: WallGeometry, normal: np.ndarray) -> FramingMember:
        """Centerline moved to the face, and a copy raised by the stud thickness."""
        moved = translate(wall.centerline, normal, wall.width / 2.0)
        raised = translate(moved, Z_AXIS, self.config.stud_thickness)
        return FramingMember(MemberKind.BASEPLATE, moved, raised, as_point(normal))

    def boundary_studs(self, outer: CurveLoop, normal: np.ndarray) -> list[FramingMember]:
        """Stud pair on every outer-loop edge except bottom edges."""
        cfg = self.config
        return [
            stud_pair(curve, normal, cfg.stud_thickness, MemberKind.BOUNDARY_STUD)
            for curve in outer
            if not is_bottom_edge(curve, cfg.bottom_edge_tolerance, cfg.bottom_edge_height)
        ]

    def opening_studs(
        self, loop: CurveLoop, normal: np.ndarray, is_door: bool
    ) -> list[FramingMember]:
        """Stud pair on every opening edge except bottom edges and a door's threshold edge."""
        cfg = self.config
        skip_index = lowest_edge_index(loop) if is_door else -1
        members = []
        for index, curve in enumerate(loop):
            if index == skip_index:
                continue
            if is_bottom_edge(curve, cfg.bottom_edge_tolerance, cfg.bottom_edge_height):
                continue
            members.append(stud_pair(curve, normal, cfg.stud_thickness, MemberKind.OPENING_STUD))
        return members

    def is_door_loop(self, wall: WallGeometry, loop: CurveLoop) -> bool:
        """Whether an opening loop belongs to one of the wall's doors.

        A door matches when its location, measured along the wall, falls
        within the loop's span. A door with no location matches every loop.
        """
        doors = [o for o in wall.openings if o.kind is OpeningKind.DOOR]
        if not doors:
            return False
        if any(door.location is None for door in doors):
            return True

        origin = np.asarray(wall.centerline.start)
        wall_dir = wall.centerline.direction
        along = (np.asarray(loop.points()) - origin) @ wall_dir
        lo = float(along.min()) - self.config.stud_end_tolerance
        hi = float(along.max()) + self.config.stud_end_tolerance
        return any(
            lo <= float((np.asarray(door.location) - origin) @ wall_dir) <= hi
            for door in doors
        )

    def layout(self, wall: WallGeometry) -> FramingLayoutResult:
        """Full framing layout for a wall."""
        if wall.solid.is_empty() or wall.solid.volume() <= 0:
            raise GeometryError(f"Wall '{wall.id}' has no solid geometry")

        loops, normal = self.face(wall)
        if not loops:
            raise GeometryError(f"Wall '{wall.id}' face has no boundary loops")

        result = FramingLayoutResult(wall_id=wall.id, normal=as_point(normal))
        result.members.extend(self.vertical_studs(wall, normal, result.skipped_points))
        result.members.append(self.baseplate(wall, normal))
        result.members.extend(self.boundary_studs(loops[0], normal))
        for loop in loops[1:]:
            result.members.extend(
                self.opening_studs(loop, normal, self.is_door_loop(wall, loop))
            )

        logger.info(
            "Wall %s: %d framing members (%d stud points skipped)",
            wall.id, len(result.members), len(result.skipped_points),
        )
        return result
