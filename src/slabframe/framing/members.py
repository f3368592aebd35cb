"""Framing members: pairs of parallel curves, one per face of a stud or plate."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from slabframe.geometry.curves import Curve, Point
from slabframe.geometry.transforms import translate


class MemberKind(str, Enum):
    VERTICAL_STUD = "vertical_stud"
    BOUNDARY_STUD = "boundary_stud"
    OPENING_STUD = "opening_stud"
    BASEPLATE = "baseplate"


@dataclass(frozen=True)
class FramingMember:
    """Two parallel curves bounding one framing piece.

    `normal` is the wall face normal; the host draws both curves on a
    plane with that normal.
    """

    kind: MemberKind
    first: Curve
    second: Curve
    normal: Point

    @property
    def curves(self) -> tuple[Curve, Curve]:
        return self.first, self.second


def stud_pair(curve: Curve, wall_normal, thickness: float, kind: MemberKind) -> FramingMember:
    """The edge curve plus a copy offset by thickness along normal x edge direction."""
    offset_dir = np.cross(np.asarray(wall_normal, dtype=np.float64), curve.direction)
    second = translate(curve, offset_dir, thickness)
    return FramingMember(kind, curve, second, tuple(float(c) for c in wall_normal))
