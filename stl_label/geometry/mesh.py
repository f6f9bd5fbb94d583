"""
Triangle soup: the mesh type passed between synthesis stages.

A soup is an ordered array of independent triangles, each with its own unit
normal. Nothing is shared between triangles; indexed form is only built on
demand (to_indexed) when a boolean engine needs shared vertices.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from stl_label.geometry.mesh_stats import (
    BoundingBox,
    MeshStatistics,
    calculate_bounding_box,
    calculate_surface_area,
    calculate_volume,
    is_watertight,
)

logger = logging.getLogger(__name__)


def compute_face_normals(vectors: NDArray[np.float64]) -> NDArray[np.float64]:
    """Unit normals from triangle winding (counter-clockwise = front).

    Degenerate triangles get a zero normal.
    """
    if len(vectors) == 0:
        return np.zeros((0, 3), dtype=np.float64)
    cross = np.cross(vectors[:, 1] - vectors[:, 0], vectors[:, 2] - vectors[:, 0])
    norms = np.linalg.norm(cross, axis=1, keepdims=True)
    norms = np.where(norms < 1e-12, 1.0, norms)
    return cross / norms


@dataclass(frozen=True)
class TriangleSoup:
    """Unindexed triangle mesh in millimeters.

    Attributes:
        normals: (N, 3) unit normals, outward for solids
        vectors: (N, 3, 3) vertex positions, counter-clockwise seen from outside
    """
    normals: NDArray[np.float64]
    vectors: NDArray[np.float64]

    def __len__(self) -> int:
        return int(self.vectors.shape[0])

    @classmethod
    def empty(cls) -> 'TriangleSoup':
        return cls(np.zeros((0, 3)), np.zeros((0, 3, 3)))

    @classmethod
    def from_vectors(cls, vectors: NDArray[np.float64]) -> 'TriangleSoup':
        vectors = np.asarray(vectors, dtype=np.float64).reshape(-1, 3, 3)
        return cls(compute_face_normals(vectors), vectors)

    @classmethod
    def from_indexed(cls, vertices: NDArray, faces: NDArray) -> 'TriangleSoup':
        vertices = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
        faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
        return cls.from_vectors(vertices[faces])

    @classmethod
    def from_trimesh(cls, mesh) -> 'TriangleSoup':
        """Build from a trimesh.Trimesh, keeping its face order."""
        if len(mesh.faces) == 0:
            return cls.empty()
        return cls.from_indexed(mesh.vertices, mesh.faces)

    @classmethod
    def concatenate(cls, soups: Iterable[Optional['TriangleSoup']]) -> 'TriangleSoup':
        """Join soups in order; None entries are skipped."""
        parts = [s for s in soups if s is not None and len(s)]
        if not parts:
            return cls.empty()
        return cls(
            np.concatenate([s.normals for s in parts]),
            np.concatenate([s.vectors for s in parts]),
        )

    def translated(self, offset: Tuple[float, float, float]) -> 'TriangleSoup':
        return TriangleSoup(self.normals.copy(), self.vectors + np.asarray(offset, dtype=np.float64))

    def scaled(self, sx: float, sy: float, sz: float = 1.0) -> 'TriangleSoup':
        """Scale about the origin. Normals are recomputed; a mirror flips winding."""
        factors = np.array([sx, sy, sz], dtype=np.float64)
        vectors = self.vectors * factors
        if np.prod(np.sign(factors)) < 0:
            vectors = vectors[:, ::-1, :]
        return TriangleSoup.from_vectors(vectors)

    @property
    def bounding_box(self) -> Optional[BoundingBox]:
        return calculate_bounding_box(self.vectors.reshape(-1, 3))

    def to_indexed(self) -> Tuple[NDArray[np.float64], NDArray[np.int64]]:
        """Merge bit-identical vertices into (vertices, faces).

        Stages that build solids emit shared corners with identical float
        values, so exact matching restores the shared topology.
        """
        if len(self) == 0:
            return np.zeros((0, 3)), np.zeros((0, 3), dtype=np.int64)
        flat = self.vectors.reshape(-1, 3)
        vertices, inverse = np.unique(flat, axis=0, return_inverse=True)
        faces = np.asarray(inverse, dtype=np.int64).reshape(-1, 3)
        return vertices, faces

    def statistics(self) -> MeshStatistics:
        _, faces = self.to_indexed()
        return MeshStatistics(
            n_triangles=len(self),
            bbox=self.bounding_box,
            surface_area=calculate_surface_area(self.vectors),
            volume=calculate_volume(self.vectors),
            is_watertight=is_watertight(faces),
        )
