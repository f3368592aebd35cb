"""Rigid translation of curves and loops, and symmetric curve trimming."""

from __future__ import annotations

import numpy as np

from slabframe.errors import GeometryError
from slabframe.geometry.curves import TOLERANCE, Curve, CurveKind, unit
from slabframe.geometry.loops import CurveLoop


def offset_vector(direction, distance: float) -> np.ndarray:
    """distance * unit(direction)."""
    return unit(direction) * distance


def translate(item: Curve | CurveLoop, direction, distance: float) -> Curve | CurveLoop:
    """Move a curve or a loop by distance along direction."""
    if not isinstance(item, (Curve, CurveLoop)):
        raise GeometryError(f"Cannot translate {type(item).__name__}")
    return item.translated(offset_vector(direction, distance))


def trim_curve(curve: Curve, trim_length: float) -> Curve:
    """Shorten both ends of a curve by trim_length.

    A curve no longer than 2 * trim_length is returned unchanged rather
    than collapsing to a point or flipping over. The trimmed curve keeps
    its midpoint.
    """
    if trim_length < 0:
        raise GeometryError(f"trim_length must be non-negative, got {trim_length}")
    length = curve.length
    if length <= 2.0 * trim_length + TOLERANCE or trim_length == 0:
        return curve

    if curve.kind is CurveKind.LINE:
        direction = curve.direction
        start = np.asarray(curve.start) + direction * trim_length
        end = np.asarray(curve.end) - direction * trim_length
        return Curve.line(start, end)

    fraction = trim_length / length
    return Curve(
        CurveKind.ARC,
        curve.point_at(fraction),
        curve.point_at(1.0 - fraction),
        curve.center,
        curve.normal,
    )
