"""Boolean operations with empty-manifold guards.

Union refuses degenerate operands outright; the multi-part helpers
filter empty manifolds before processing to prevent silent propagation.
"""

from manifold3d import Manifold, OpType

from slabframe.errors import GeometryError


def _filter_empty(parts: list[Manifold]) -> list[Manifold]:
    """Remove empty manifolds from a list."""
    return [p for p in parts if not p.is_empty()]


def _check_solid(solid: Manifold, label: str) -> None:
    if solid.is_empty() or solid.volume() <= 0:
        raise GeometryError(f"Cannot combine degenerate solid ({label} has no volume)")


def union(a: Manifold, b: Manifold) -> Manifold:
    """Union two solids.

    Raises GeometryError if either operand has no volume. The result is
    returned as computed; disjoint operands give a multi-component solid.
    """
    _check_solid(a, "first operand")
    _check_solid(b, "second operand")
    return a + b


def intersect(a: Manifold, b: Manifold) -> Manifold:
    """Common volume of two solids. Empty if either operand is empty."""
    if a.is_empty() or b.is_empty():
        return Manifold()
    return a ^ b


def difference_all(base: Manifold, cutouts: list[Manifold]) -> Manifold:
    """Subtract all cutouts from base. Filters empty manifolds first.

    Raises GeometryError if base is empty.
    """
    if base.is_empty():
        raise GeometryError("Cannot subtract from an empty base manifold")
    valid_cutouts = _filter_empty(cutouts)
    if not valid_cutouts:
        return base
    cutter = valid_cutouts[0]
    for cutout in valid_cutouts[1:]:
        cutter = cutter + cutout
    return base - cutter


def union_all(parts: list[Manifold]) -> Manifold:
    """Union a list of possibly overlapping manifolds. Filters empty manifolds first.

    Returns an empty Manifold if no valid parts remain.
    """
    valid = _filter_empty(parts)
    if not valid:
        return Manifold()
    if len(valid) == 1:
        return valid[0]
    return Manifold.batch_boolean(valid, OpType.Add)
