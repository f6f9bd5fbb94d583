"""
Mesh measurements: bounding box, volume, surface area, closedness.

Used by the validator (bounding box of a parsed buffer) and by tests and
the CLI report (volume and watertightness of composed solids).
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from numpy.typing import NDArray

logger = logging.getLogger(__name__)


@dataclass
class BoundingBox:
    """Axis-aligned bounding box.

    Attributes:
        min_point: Minimum corner (x_min, y_min, z_min)
        max_point: Maximum corner (x_max, y_max, z_max)
    """
    min_point: NDArray[np.float64]
    max_point: NDArray[np.float64]

    @property
    def dimensions(self) -> NDArray[np.float64]:
        """Box size (width, height, depth)."""
        return self.max_point - self.min_point

    @property
    def width(self) -> float:
        """X-axis dimension."""
        return float(self.dimensions[0])

    @property
    def height(self) -> float:
        """Y-axis dimension."""
        return float(self.dimensions[1])

    @property
    def depth(self) -> float:
        """Z-axis dimension."""
        return float(self.dimensions[2])

    @property
    def center(self) -> NDArray[np.float64]:
        return (self.min_point + self.max_point) / 2

    @property
    def is_degenerate(self) -> bool:
        """True if any dimension is non-positive or not finite."""
        dims = self.dimensions
        return bool(not np.all(np.isfinite(dims)) or np.any(dims <= 0))

    def contains(self, other: 'BoundingBox', tolerance: float = 1e-6) -> bool:
        """Check that ``other`` lies inside this box."""
        return bool(
            np.all(other.min_point >= self.min_point - tolerance) and
            np.all(other.max_point <= self.max_point + tolerance)
        )

    def size_str(self) -> str:
        return f"{self.width:.2f} x {self.height:.2f} x {self.depth:.2f} mm"

    def to_dict(self) -> dict:
        return {
            'min': self.min_point.tolist(),
            'max': self.max_point.tolist(),
            'dimensions': self.dimensions.tolist(),
        }


def calculate_bounding_box(points: NDArray[np.float64]) -> Optional[BoundingBox]:
    """Bounding box of an (N, 3) point array, or None when there are no points."""
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    if len(points) == 0:
        return None
    return BoundingBox(
        min_point=np.min(points, axis=0),
        max_point=np.max(points, axis=0),
    )


def calculate_surface_area(vectors: NDArray[np.float64]) -> float:
    """Total area of an (N, 3, 3) triangle array in mm^2."""
    if len(vectors) == 0:
        return 0.0
    cross = np.cross(vectors[:, 1] - vectors[:, 0], vectors[:, 2] - vectors[:, 0])
    return float(0.5 * np.linalg.norm(cross, axis=1).sum())


def calculate_volume(vectors: NDArray[np.float64]) -> float:
    """Signed enclosed volume (divergence theorem) in mm^3.

    Only meaningful for closed meshes; negative means inward normals.
    """
    if len(vectors) == 0:
        return 0.0
    v0, v1, v2 = vectors[:, 0], vectors[:, 1], vectors[:, 2]
    return float(np.sum(v0 * np.cross(v1, v2)) / 6.0)


def is_watertight(faces: NDArray[np.int64]) -> bool:
    """True when every undirected edge is shared by exactly two faces.

    Args:
        faces: (M, 3) vertex indices of an indexed mesh
    """
    if len(faces) == 0:
        return False
    edges = np.concatenate([faces[:, [0, 1]], faces[:, [1, 2]], faces[:, [2, 0]]])
    edges = np.sort(edges, axis=1)
    _, counts = np.unique(edges, axis=0, return_counts=True)
    return bool(np.all(counts == 2))


def is_consistently_oriented(faces: NDArray[np.int64]) -> bool:
    """True when each directed edge occurs once (neighbours wind the same way)."""
    if len(faces) == 0:
        return False
    directed = np.concatenate([faces[:, [0, 1]], faces[:, [1, 2]], faces[:, [2, 0]]])
    _, counts = np.unique(directed, axis=0, return_counts=True)
    return bool(np.all(counts == 1))


@dataclass
class MeshStatistics:
    """Summary numbers for a triangle mesh."""
    n_triangles: int
    bbox: Optional[BoundingBox]
    surface_area: float
    volume: float
    is_watertight: bool

    def summary(self) -> str:
        size = self.bbox.size_str() if self.bbox is not None else "n/a"
        lines = [
            "Mesh Statistics",
            "=" * 40,
            f"Triangles:    {self.n_triangles:,}",
            f"Dimensions:   {size}",
            f"Surface Area: {self.surface_area:.2f} mm^2",
            f"Volume:       {self.volume:.2f} mm^3",
            f"Watertight:   {'Yes' if self.is_watertight else 'No'}",
        ]
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            'n_triangles': self.n_triangles,
            'bbox': self.bbox.to_dict() if self.bbox is not None else None,
            'surface_area_mm2': self.surface_area,
            'volume_mm3': self.volume,
            'is_watertight': self.is_watertight,
        }
