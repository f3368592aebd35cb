"""Line/solid intersection: where a bounded query line passes through material.

The solid is intersected with a thin square prism laid along the line.
Each connected component of the result is one material crossing, and
its extent along the line gives the segment parameters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from manifold3d import Manifold

from slabframe.errors import GeometryError
from slabframe.geometry.booleans import intersect
from slabframe.geometry.curves import Curve, Point, distance
from slabframe.geometry.primitives import oriented_box

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeOptions:
    """Probe prism side length and minimum reported segment length."""

    width: float = 1e-3
    tolerance: float = 1e-6


@dataclass(frozen=True)
class ProbeSegment:
    """Material crossing between two distances measured from the line start."""

    start: float
    end: float
    curve: Curve

    @property
    def length(self) -> float:
        return self.end - self.start


def intersect_line(
    solid: Manifold,
    start: Point,
    end: Point,
    options: ProbeOptions | None = None,
) -> list[ProbeSegment]:
    """Segments of the line start->end that lie inside solid, in order.

    Returns an empty list when the line misses the solid.
    Raises GeometryError for an empty solid or a zero-length line.
    """
    options = options or ProbeOptions()
    if solid.is_empty():
        raise GeometryError("Cannot probe an empty solid")
    length = distance(start, end)
    if length <= options.tolerance:
        raise GeometryError("Probe line has zero length")

    origin = np.asarray(start, dtype=np.float64)
    axis = (np.asarray(end, dtype=np.float64) - origin) / length
    prism = oriented_box(origin, axis, length, options.width)

    hit = intersect(solid, prism)
    if hit.is_empty():
        return []

    segments = []
    for part in hit.decompose():
        verts = np.asarray(part.to_mesh().vert_properties[:, :3], dtype=np.float64)
        params = (verts - origin) @ axis
        t0 = max(0.0, float(params.min()))
        t1 = min(length, float(params.max()))
        if t1 - t0 <= options.tolerance:
            continue
        segments.append(
            ProbeSegment(t0, t1, Curve.line(origin + axis * t0, origin + axis * t1))
        )

    segments.sort(key=lambda s: s.start)
    logger.debug("Probe %s -> %s crossed %d segment(s)", start, end, len(segments))
    return segments


def vertical_probe(
    solid: Manifold,
    point: Point,
    below: float,
    above: float = 0.0,
    options: ProbeOptions | None = None,
) -> list[ProbeSegment]:
    """Probe along Z from point + above down to point - below."""
    x, y, z = point
    return intersect_line(solid, (x, y, z + above), (x, y, z - below), options)
