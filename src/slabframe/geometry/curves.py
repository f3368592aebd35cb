"""Curve variants (line, circular arc) sharing one set of operations.

Points are plain (x, y, z) float tuples so curves stay hashable and
comparable; numpy is used for the arithmetic.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

from slabframe.errors import GeometryError

Point = tuple[float, float, float]

TOLERANCE = 1e-6  # Coincidence tolerance for points and lengths (model units)
DEFAULT_ARC_SEGMENTS = 32  # Segments per full turn when tessellating arcs

Z_AXIS: Point = (0.0, 0.0, 1.0)


def as_point(value) -> Point:
    """Coerce any 3-sequence into a float tuple."""
    return (float(value[0]), float(value[1]), float(value[2]))


def unit(vector) -> np.ndarray:
    """Normalize a vector. Raises GeometryError on a zero-length vector."""
    v = np.asarray(vector, dtype=np.float64)
    length = float(np.linalg.norm(v))
    if length < TOLERANCE:
        raise GeometryError(f"Cannot normalize near-zero vector {tuple(v)}")
    return v / length


def distance(a, b) -> float:
    """Euclidean distance between two points."""
    return float(np.linalg.norm(np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)))


def _rotate(vector: np.ndarray, axis: np.ndarray, angle: float) -> np.ndarray:
    """Rodrigues rotation of vector about a unit axis."""
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return (
        vector * cos_a
        + np.cross(axis, vector) * sin_a
        + axis * np.dot(axis, vector) * (1.0 - cos_a)
    )


class CurveKind(str, Enum):
    LINE = "line"
    ARC = "arc"


@dataclass(frozen=True)
class Curve:
    """A bounded curve from `start` to `end`.

    Arcs also carry `center` and `normal`; they run counter-clockwise
    about `normal` when viewed from its tip. An arc whose start equals
    its end is a full circle.
    """

    kind: CurveKind
    start: Point
    end: Point
    center: Point | None = None
    normal: Point | None = None

    @classmethod
    def line(cls, start, end) -> Curve:
        """Create a bound line. Raises GeometryError when degenerate."""
        start, end = as_point(start), as_point(end)
        if distance(start, end) < TOLERANCE:
            raise GeometryError(f"Line from {start} to {end} is too short")
        return cls(CurveKind.LINE, start, end)

    @classmethod
    def arc(cls, center, start, end, normal=Z_AXIS) -> Curve:
        """Create a circular arc about `center`, counter-clockwise about `normal`."""
        center, start, end = as_point(center), as_point(start), as_point(end)
        axis = unit(normal)
        r0 = distance(center, start)
        r1 = distance(center, end)
        if r0 < TOLERANCE:
            raise GeometryError("Arc radius is zero")
        if abs(r0 - r1) > TOLERANCE * max(1.0, r0):
            raise GeometryError(
                f"Arc endpoints are not equidistant from center ({r0} vs {r1})"
            )
        offset = np.asarray(start) - np.asarray(center)
        if abs(np.dot(offset, axis)) > TOLERANCE * max(1.0, r0):
            raise GeometryError("Arc normal is not perpendicular to its radius")
        return cls(CurveKind.ARC, start, end, center, as_point(axis))

    @property
    def radius(self) -> float:
        if self.kind is not CurveKind.ARC:
            raise GeometryError("Only arcs have a radius")
        return distance(self.center, self.start)

    @property
    def sweep(self) -> float:
        """Arc sweep angle in radians, in (0, 2*pi]."""
        if self.kind is not CurveKind.ARC:
            raise GeometryError("Only arcs have a sweep angle")
        c = np.asarray(self.center)
        u0 = np.asarray(self.start) - c
        u1 = np.asarray(self.end) - c
        axis = np.asarray(self.normal)
        angle = math.atan2(float(np.dot(axis, np.cross(u0, u1))), float(np.dot(u0, u1)))
        if angle <= TOLERANCE:
            angle += 2.0 * math.pi
        return angle

    @property
    def length(self) -> float:
        if self.kind is CurveKind.LINE:
            return distance(self.start, self.end)
        return self.radius * self.sweep

    @property
    def direction(self) -> np.ndarray:
        """Unit chord direction from start to end."""
        return unit(np.asarray(self.end) - np.asarray(self.start))

    @property
    def midpoint(self) -> Point:
        return self.point_at(0.5)

    def point_at(self, t: float) -> Point:
        """Point at normalized parameter t in [0, 1]."""
        start = np.asarray(self.start)
        if self.kind is CurveKind.LINE:
            return as_point(start + (np.asarray(self.end) - start) * t)
        c = np.asarray(self.center)
        rotated = _rotate(start - c, np.asarray(self.normal), self.sweep * t)
        return as_point(c + rotated)

    def translated(self, offset) -> Curve:
        """Copy of the curve moved by the offset vector."""
        o = np.asarray(offset, dtype=np.float64)
        return Curve(
            self.kind,
            as_point(np.asarray(self.start) + o),
            as_point(np.asarray(self.end) + o),
            None if self.center is None else as_point(np.asarray(self.center) + o),
            self.normal,
        )

    def tessellate(self, segments_per_turn: int = DEFAULT_ARC_SEGMENTS) -> list[Point]:
        """Polyline approximation including both endpoints."""
        if self.kind is CurveKind.LINE:
            return [self.start, self.end]
        count = max(2, math.ceil(segments_per_turn * self.sweep / (2.0 * math.pi)))
        points = [self.point_at(i / count) for i in range(count)]
        points.append(self.end)
        return points
