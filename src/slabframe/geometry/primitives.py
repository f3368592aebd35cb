"""Solid primitives with dimension guards.

All primitives validate inputs and raise GeometryError on invalid
dimensions or degenerate profiles.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
from manifold3d import CrossSection, FillRule, Manifold

from slabframe.errors import GeometryError
from slabframe.geometry.curves import DEFAULT_ARC_SEGMENTS, TOLERANCE, unit
from slabframe.geometry.loops import LOOP_TOLERANCE, CurveLoop, plane_frame

BOOLEAN_OVERSHOOT = 0.01  # Extend cutters past the target surface (model units)


def _check_positive(value: float, name: str) -> None:
    """Raise GeometryError if value is not positive."""
    if value <= 0:
        raise GeometryError(f"{name} must be positive, got {value}")


def _affine(solid: Manifold, origin, x_axis, y_axis, z_axis) -> Manifold:
    """Map local (x, y, z) to origin + x*x_axis + y*y_axis + z*z_axis."""
    basis = np.column_stack([x_axis, y_axis, z_axis]).astype(np.float64)
    if np.linalg.det(basis) <= 0:
        raise GeometryError("Placement frame must be right-handed and non-degenerate")
    o = np.asarray(origin, dtype=np.float64)

    def _warp_batch(verts: np.ndarray) -> np.ndarray:
        return verts[:, :3] @ basis.T + o

    return solid.warp_batch(_warp_batch)


def box(width: float, depth: float, height: float) -> Manifold:
    """Create a box centered on X/Y with base at Z=0.

    Args:
        width: Size along X axis.
        depth: Size along Y axis.
        height: Size along Z axis.
    """
    _check_positive(width, "width")
    _check_positive(depth, "depth")
    _check_positive(height, "height")
    return Manifold.cube([width, depth, height]).translate(
        [-width / 2, -depth / 2, 0]
    )


def oriented_box(origin, axis, length: float, width: float) -> Manifold:
    """Square prism of side `width` whose centerline runs from origin along axis."""
    _check_positive(length, "length")
    direction = unit(axis)
    u, v = plane_frame(direction)
    return _affine(box(width, width, 1.0), origin, u, v, direction * length)


def extrude_loops(
    loops: Sequence[CurveLoop],
    direction,
    distance: float,
    segments_per_turn: int = DEFAULT_ARC_SEGMENTS,
) -> Manifold:
    """Extrude a planar profile by distance along direction.

    Args:
        loops: Profile loops. The first is the outer boundary, the rest
            are holes; all must be closed and coplanar.
        direction: Extrusion direction. Need not be normal to the profile,
            but must not lie in its plane.
        distance: Extrusion length along direction.
        segments_per_turn: Arc tessellation density.
    """
    _check_positive(distance, "distance")
    if not loops:
        raise GeometryError("Extrusion needs at least one curve loop")
    for loop in loops:
        loop.validate()

    origin, normal = loops[0].plane()
    for hole in loops[1:]:
        pts = np.asarray(hole.points(segments_per_turn), dtype=np.float64)
        if float(np.abs((pts - origin) @ normal).max()) > LOOP_TOLERANCE:
            raise GeometryError("Hole loop is not coplanar with the outer loop")

    d = unit(direction)
    along = float(np.dot(d, normal))
    if abs(along) < TOLERANCE:
        raise GeometryError("Extrusion direction lies in the profile plane")
    if along < 0:
        normal = -normal
    u, v = plane_frame(normal)
    # Shared edges of coplanar profiles must round to the same float32 values
    origin = normal * float(origin @ normal)

    polygons = []
    for loop in loops:
        pts = np.asarray(loop.points(segments_per_turn), dtype=np.float64) - origin
        polygons.append([(float(p @ u), float(p @ v)) for p in pts])

    cs = CrossSection(polygons, FillRule.EvenOdd)
    prism = Manifold.extrude(cs, 1.0)
    if prism.is_empty():
        raise GeometryError("Extrude produced an empty manifold (degenerate profile?)")

    result = _affine(prism, origin, u, v, d * distance)
    if result.is_empty() or result.volume() <= 0:
        raise GeometryError("Extrude produced a degenerate solid")
    return result


def describe(m: Manifold) -> str:
    """One-line summary of a manifold for debug logging."""
    if m.is_empty():
        return "EMPTY"
    min_x, min_y, min_z, max_x, max_y, max_z = m.bounding_box()
    return (
        f"volume={m.volume():.4f}, "
        f"bbox=({min_x:.2f},{min_y:.2f},{min_z:.2f})-"
        f"({max_x:.2f},{max_y:.2f},{max_z:.2f})"
    )
