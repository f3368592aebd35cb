"""Mesh conversion via trimesh and binary STL export of synthesized solids."""

from __future__ import annotations

import io

import numpy as np
import trimesh
from manifold3d import Manifold

from slabframe.errors import GeometryError


def manifold_to_trimesh(solid: Manifold) -> trimesh.Trimesh:
    """Convert a Manifold to a trimesh.Trimesh with shared vertices.

    Uses vert_properties[:, :3] for vertices and tri_verts for faces.
    """
    mesh = solid.to_mesh()
    vertices = np.array(mesh.vert_properties[:, :3], dtype=np.float64)
    faces = np.array(mesh.tri_verts, dtype=np.int64)
    return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)


def export_stl_bytes(solid: Manifold) -> bytes:
    """Export a Manifold as binary STL bytes."""
    if solid.is_empty():
        raise GeometryError("Nothing to export: solid is empty")
    tmesh = manifold_to_trimesh(solid)
    buffer = io.BytesIO()
    tmesh.export(buffer, file_type="stl")
    return buffer.getvalue()
