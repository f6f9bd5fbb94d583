"""
Composition of the base plate with text and icon features.

emboss  features are appended to the plate as separate closed solids that
        rest on its top face; nothing is merged, so the triangle count is
        the sum of the parts.
deboss  each feature volume is subtracted from the plate in turn (text
        first, then icon) with manifold3d; the result is one watertight
        solid or an error.
"""

import logging
from typing import Optional, Protocol, Sequence

import numpy as np
from manifold3d import Error, Manifold, Mesh

from stl_label.errors import GeometryError
from stl_label.geometry.mesh import TriangleSoup
from stl_label.request import ReliefMode

logger = logging.getLogger(__name__)


class BooleanSubtractor(Protocol):
    """Computes ``solid - tool`` for two closed triangle meshes."""

    def subtract(self, solid: TriangleSoup, tool: TriangleSoup) -> TriangleSoup:
        ...


def _to_manifold(soup: TriangleSoup, role: str) -> Manifold:
    vertices, faces = soup.to_indexed()
    manifold = Manifold(Mesh(vertices.astype(np.float32), faces.astype(np.uint32)))
    status = manifold.status()
    if status != Error.NoError:
        raise GeometryError(f"{role} is not a valid closed solid ({status})")
    return manifold


def _from_manifold(manifold: Manifold) -> TriangleSoup:
    mesh = manifold.to_mesh()
    vertices = np.asarray(mesh.vert_properties, dtype=np.float64)[:, :3]
    faces = np.asarray(mesh.tri_verts, dtype=np.int64)
    return TriangleSoup.from_indexed(vertices, faces)


class ManifoldSubtractor:
    """BooleanSubtractor backed by the manifold3d kernel."""

    def subtract(self, solid: TriangleSoup, tool: TriangleSoup) -> TriangleSoup:
        base = _to_manifold(solid, "base solid")
        cutter = _to_manifold(tool, "feature volume")

        result = base - cutter
        status = result.status()
        if status != Error.NoError:
            raise GeometryError(f"Boolean subtraction failed ({status})")
        if result.is_empty() and not base.is_empty():
            raise GeometryError("Boolean subtraction removed the whole solid")
        return _from_manifold(result)


def compose(
    base_plate: TriangleSoup,
    features: Sequence[Optional[TriangleSoup]],
    relief: ReliefMode,
    subtractor: Optional[BooleanSubtractor] = None,
) -> TriangleSoup:
    """Combine the plate with already-placed features.

    Args:
        base_plate: closed plate solid.
        features: placed feature solids in composition order (text, icon);
            None entries are omitted features.
        relief: EMBOSS concatenates, DEBOSS subtracts.
        subtractor: boolean backend for deboss (ManifoldSubtractor by default).

    Raises:
        GeometryError: deboss subtraction did not yield a valid solid.
    """
    present = [f for f in features if f is not None and len(f)]

    if ReliefMode(relief) is ReliefMode.EMBOSS:
        return TriangleSoup.concatenate([base_plate, *present])

    subtractor = subtractor or ManifoldSubtractor()
    result = base_plate
    for index, feature in enumerate(present):
        try:
            result = subtractor.subtract(result, feature)
        except GeometryError:
            logger.error("Deboss subtraction of feature %d failed", index)
            raise
        logger.debug("Subtracted feature %d: %d triangles", index, len(result))
    return result
