"""
Reading STL files back into triangle soups.

Used by the ``inspect`` CLI command to report on exported labels, or on
labels produced by other tools. Binary and ASCII files are both accepted
(numpy-stl detects the format).
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Tuple, Union

import numpy as np
from stl import mesh

from stl_label.errors import STLLoadError
from stl_label.geometry.mesh import TriangleSoup, compute_face_normals

logger = logging.getLogger(__name__)


class STLFormat(Enum):
    """STL file format type."""
    BINARY = "binary"
    ASCII = "ascii"


@dataclass
class STLInfo:
    """Metadata about a loaded STL file."""
    filepath: str
    format: STLFormat
    file_size_bytes: int
    n_triangles: int

    @property
    def file_size_kb(self) -> float:
        return self.file_size_bytes / 1024


def detect_stl_format(filepath: Union[str, Path]) -> STLFormat:
    """ASCII files start with ``solid`` and contain ``facet`` records."""
    try:
        with open(filepath, 'rb') as f:
            head = f.read(1024)
    except OSError as exc:
        raise STLLoadError(f"Could not read file {str(filepath)!r}: {exc}") from exc

    if head.lstrip().lower().startswith(b'solid') and b'facet' in head.lower():
        return STLFormat.ASCII
    return STLFormat.BINARY


def load_stl(filepath: Union[str, Path]) -> Tuple[TriangleSoup, STLInfo]:
    """Load an STL file.

    Normals are recomputed from winding; stored normals are ignored.

    Raises:
        STLLoadError: file missing, unreadable or without triangles.
    """
    path = Path(filepath)
    stl_format = detect_stl_format(path)

    try:
        stl_mesh = mesh.Mesh.from_file(str(path), calculate_normals=False)
    except FileNotFoundError:
        raise STLLoadError(f"File not found: {str(path)!r}")
    except Exception as exc:
        raise STLLoadError(f"Could not parse STL file {str(path)!r}: {exc}") from exc

    if len(stl_mesh.vectors) == 0:
        raise STLLoadError(f"STL file {str(path)!r} contains no triangles.")

    vectors = np.asarray(stl_mesh.vectors, dtype=np.float64)
    soup = TriangleSoup(compute_face_normals(vectors), vectors)
    info = STLInfo(
        filepath=str(path),
        format=stl_format,
        file_size_bytes=path.stat().st_size,
        n_triangles=len(soup),
    )
    logger.info("Loaded %s: %d triangles (%s, %.1f KB)",
                path.name, info.n_triangles, stl_format.value, info.file_size_kb)
    return soup, info
