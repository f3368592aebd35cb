"""Planar faces of a solid and normal-based face lookup.

A manifold is a triangle mesh, so faces are recovered by grouping
triangles that share a plane. A face's loops are the chained boundary
edges of its triangles with collinear vertices merged, largest loop
first.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass

import numpy as np
import trimesh
from manifold3d import Manifold

from slabframe.errors import GeometryError
from slabframe.export.stl import manifold_to_trimesh
from slabframe.geometry.curves import Point, as_point, unit
from slabframe.geometry.loops import CurveLoop

logger = logging.getLogger(__name__)

PLANE_DIGITS = 4  # Rounding used to decide that two triangles share a plane
MIN_FACE_AREA = 1e-9


@dataclass(frozen=True)
class Face:
    """Planar face with its outward unit normal and boundary loops."""

    normal: Point
    origin: Point
    area: float
    loops: tuple[CurveLoop, ...]

    @property
    def outer_loop(self) -> CurveLoop:
        return self.loops[0]


def _chain_boundary(directed: np.ndarray) -> list[list[int]]:
    """Chain directed boundary edges (a, b) into closed vertex cycles."""
    outgoing: dict[int, list[int]] = defaultdict(list)
    for a, b in directed:
        outgoing[int(a)].append(int(b))

    cycles = []
    for start in sorted(outgoing):
        while outgoing[start]:
            cycle = [start]
            current = outgoing[start].pop()
            while current != start:
                cycle.append(current)
                if not outgoing[current]:
                    raise GeometryError("Face boundary is not closed")
                current = outgoing[current].pop()
            cycles.append(cycle)
    return cycles


def _drop_collinear(points: np.ndarray, tolerance: float = 1e-6) -> np.ndarray:
    """Remove vertices lying on the straight line through their neighbours."""
    pts = points
    changed = True
    while changed and len(pts) > 3:
        changed = False
        for i in range(len(pts)):
            prev_pt = pts[i - 1]
            next_pt = pts[(i + 1) % len(pts)]
            a = pts[i] - prev_pt
            b = next_pt - pts[i]
            scale = np.linalg.norm(a) * np.linalg.norm(b)
            if scale == 0 or np.linalg.norm(np.cross(a, b)) <= tolerance * scale:
                if np.dot(a, b) >= 0 or scale == 0:
                    pts = np.delete(pts, i, axis=0)
                    changed = True
                    break
    return pts


def solid_faces(solid: Manifold) -> list[Face]:
    """All planar faces of a solid, in a stable enumeration order."""
    if solid.is_empty():
        raise GeometryError("Cannot list faces of an empty solid")

    tmesh = manifold_to_trimesh(solid)
    normals = tmesh.face_normals
    areas = tmesh.area_faces
    offsets = np.einsum("ij,ij->i", normals, tmesh.triangles[:, 0])
    keys = np.column_stack([normals, offsets])
    groups = trimesh.grouping.group_rows(keys, digits=PLANE_DIGITS)
    groups = sorted(groups, key=lambda g: int(np.min(g)))

    faces = []
    for group in groups:
        area = float(areas[group].sum())
        if area < MIN_FACE_AREA:
            continue
        weights = areas[group]
        normal = unit((normals[group] * weights[:, None]).sum(axis=0))
        origin = (tmesh.triangles_center[group] * weights[:, None]).sum(axis=0) / area

        tris = tmesh.faces[group]
        edges = np.concatenate([tris[:, [0, 1]], tris[:, [1, 2]], tris[:, [2, 0]]])
        once = trimesh.grouping.group_rows(np.sort(edges, axis=1), require_count=1)
        cycles = _chain_boundary(edges[once])

        loops = []
        for cycle in cycles:
            pts = _drop_collinear(tmesh.vertices[cycle])
            if len(pts) >= 3:
                loops.append(CurveLoop.from_points(pts))
        loops.sort(key=lambda loop: loop.area, reverse=True)

        faces.append(Face(as_point(normal), as_point(origin), area, tuple(loops)))
    return faces


def find_face(solid: Manifold, direction, tolerance: float = 0.01) -> Face | None:
    """First face whose normal matches direction, or None.

    A normal matches when its dot product with the unit direction is at
    least 1 - tolerance.
    """
    target = unit(direction)
    for face in solid_faces(solid):
        if float(np.dot(face.normal, target)) >= 1.0 - tolerance:
            return face
    return None


def require_face(solid: Manifold, direction, tolerance: float = 0.01) -> Face:
    """Like find_face, but raises GeometryError when nothing matches."""
    face = find_face(solid, direction, tolerance)
    if face is None:
        raise GeometryError(f"No face with normal matching {tuple(direction)}")
    return face


def largest_face(solid: Manifold) -> Face:
    """Face of maximum area (first one on ties)."""
    faces = solid_faces(solid)
    if not faces:
        raise GeometryError("Solid has no faces")
    best = faces[0]
    for face in faces[1:]:
        if face.area > best.area + MIN_FACE_AREA:
            best = face
    return best
