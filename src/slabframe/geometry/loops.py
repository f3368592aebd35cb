"""Closed planar curve loops: profiles for extrusion and face boundaries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence

import numpy as np

from slabframe.errors import GeometryError
from slabframe.geometry.curves import (
    DEFAULT_ARC_SEGMENTS,
    Curve,
    Point,
    as_point,
    distance,
    unit,
)

LOOP_TOLERANCE = 1e-4  # Closure and planarity tolerance (model units)


def plane_frame(normal) -> tuple[np.ndarray, np.ndarray]:
    """Two unit in-plane axes (u, v) with u x v == normal."""
    n = unit(normal)
    helper = np.array([1.0, 0.0, 0.0]) if abs(n[0]) < 0.9 else np.array([0.0, 1.0, 0.0])
    u = unit(np.cross(helper, n))
    v = np.cross(n, u)
    return u, v


def newell_normal(points: np.ndarray) -> np.ndarray:
    """Unnormalized polygon normal; its length is twice the polygon area."""
    return np.cross(points, np.roll(points, -1, axis=0)).sum(axis=0)


@dataclass(frozen=True)
class CurveLoop:
    """Ordered closed sequence of curves.

    In a list of loops describing a face or a profile, the first loop is
    the outer boundary and the rest are holes.
    """

    curves: tuple[Curve, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "curves", tuple(self.curves))

    @classmethod
    def from_points(cls, points: Sequence) -> CurveLoop:
        """Closed polygon of lines through the given vertices."""
        pts = [as_point(p) for p in points]
        if len(pts) > 1 and distance(pts[0], pts[-1]) < LOOP_TOLERANCE:
            pts = pts[:-1]
        if len(pts) < 3:
            raise GeometryError(f"Polygon needs at least 3 points, got {len(pts)}")
        return cls(
            tuple(Curve.line(a, b) for a, b in zip(pts, pts[1:] + pts[:1]))
        )

    def __iter__(self) -> Iterator[Curve]:
        return iter(self.curves)

    def __len__(self) -> int:
        return len(self.curves)

    def __getitem__(self, index: int) -> Curve:
        return self.curves[index]

    def is_closed(self, tolerance: float = LOOP_TOLERANCE) -> bool:
        """True when each curve ends where the next one starts, wrapping around."""
        if not self.curves:
            return False
        following = self.curves[1:] + self.curves[:1]
        return all(
            distance(a.end, b.start) <= tolerance
            for a, b in zip(self.curves, following)
        )

    def points(self, segments_per_turn: int = DEFAULT_ARC_SEGMENTS) -> list[Point]:
        """Polygon vertices with arcs tessellated; no repeated closing vertex."""
        result: list[Point] = []
        for curve in self.curves:
            result.extend(curve.tessellate(segments_per_turn)[:-1])
        return result

    def plane(self, tolerance: float = LOOP_TOLERANCE) -> tuple[np.ndarray, np.ndarray]:
        """(origin, unit normal) of the loop's plane.

        The normal follows the loop's winding (right-hand rule).
        Raises GeometryError if the loop encloses no area or is not planar.
        """
        pts = np.asarray(self.points(), dtype=np.float64)
        if len(pts) < 3:
            raise GeometryError("Curve loop needs at least 3 vertices")
        raw = newell_normal(pts)
        if np.linalg.norm(raw) < tolerance * tolerance:
            raise GeometryError("Curve loop encloses no area")
        normal = unit(raw)
        origin = pts.mean(axis=0)
        deviation = float(np.abs((pts - origin) @ normal).max())
        if deviation > tolerance:
            raise GeometryError(
                f"Curve loop is not planar (deviation {deviation:.6f})"
            )
        return origin, normal

    def validate(self, tolerance: float = LOOP_TOLERANCE) -> None:
        """Raise GeometryError unless the loop is closed and planar."""
        if not self.is_closed(tolerance):
            raise GeometryError("Curve loop is not closed")
        self.plane(tolerance)

    @property
    def area(self) -> float:
        pts = np.asarray(self.points(), dtype=np.float64)
        if len(pts) < 3:
            return 0.0
        return float(np.linalg.norm(newell_normal(pts))) / 2.0

    def centroid(self) -> Point:
        """Area centroid of the enclosed polygon."""
        origin, normal = self.plane()
        u, v = plane_frame(normal)
        pts = np.asarray(self.points(), dtype=np.float64) - origin
        x = pts @ u
        y = pts @ v
        xn = np.roll(x, -1)
        yn = np.roll(y, -1)
        cross = x * yn - xn * y
        signed_area = cross.sum() / 2.0
        cx = ((x + xn) * cross).sum() / (6.0 * signed_area)
        cy = ((y + yn) * cross).sum() / (6.0 * signed_area)
        return as_point(origin + cx * u + cy * v)

    def bounding_box(self) -> tuple[Point, Point]:
        """(min corner, max corner) of the tessellated loop."""
        pts = np.asarray(self.points(), dtype=np.float64)
        return as_point(pts.min(axis=0)), as_point(pts.max(axis=0))

    def translated(self, offset) -> CurveLoop:
        return CurveLoop(tuple(curve.translated(offset) for curve in self.curves))
