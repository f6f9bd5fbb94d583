"""
Export-time validation of binary STL buffers.

The buffer is parsed back with the same record layout the writer uses and
rejected when:
- it is truncated or its size does not match the triangle count
- its bounding box is missing, non-finite or flat along any axis
- it has fewer triangles than the caller's threshold

The default threshold (100) is meant for full labels; lightweight sanity
checks pass ``min_triangles=1``.
"""

import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import numpy as np

from stl_label.config import (
    MIN_EXPORT_TRIANGLES,
    STL_COUNT_SIZE,
    STL_HEADER_SIZE,
    STL_RECORD_SIZE,
)
from stl_label.errors import ValidationError
from stl_label.geometry.mesh_stats import BoundingBox, calculate_bounding_box
from stl_label.io.stl_writer import RECORD_DTYPE

logger = logging.getLogger(__name__)


@dataclass
class ValidationReport:
    """Measured properties of an accepted STL buffer."""
    bounding_box: BoundingBox
    triangle_count: int
    n_bytes: int

    @property
    def width(self) -> float:
        return self.bounding_box.width

    @property
    def height(self) -> float:
        return self.bounding_box.height

    @property
    def depth(self) -> float:
        return self.bounding_box.depth

    def summary(self) -> str:
        return f"{self.bounding_box.size_str()}, {self.triangle_count} triangles"

    def to_dict(self) -> dict:
        return {
            'bounding_box': self.bounding_box.to_dict(),
            'triangle_count': self.triangle_count,
            'n_bytes': self.n_bytes,
        }


def parse_stl_buffer(buffer: bytes) -> np.ndarray:
    """Decode binary STL records.

    Returns:
        Structured array with 'normals', 'vectors' and 'attr' fields.

    Raises:
        ValidationError: buffer too short or size inconsistent with its count.
    """
    prefix = STL_HEADER_SIZE + STL_COUNT_SIZE
    if len(buffer) < prefix:
        raise ValidationError(f"STL buffer too short: {len(buffer)} bytes")

    (count,) = struct.unpack_from('<I', buffer, STL_HEADER_SIZE)
    expected = prefix + count * STL_RECORD_SIZE
    if len(buffer) != expected:
        raise ValidationError(
            f"STL size mismatch: header declares {count} triangles "
            f"({expected} bytes), buffer has {len(buffer)} bytes",
            triangle_count=count,
        )
    if count == 0:
        return np.zeros(0, dtype=RECORD_DTYPE)
    return np.frombuffer(buffer, dtype=RECORD_DTYPE, count=count, offset=prefix)


def validate(buffer: bytes, min_triangles: int = MIN_EXPORT_TRIANGLES) -> ValidationReport:
    """Re-parse a serialized mesh and check it is printable.

    Args:
        buffer: binary STL bytes.
        min_triangles: minimum accepted triangle count.

    Returns:
        ValidationReport with bounding box and triangle count.

    Raises:
        ValidationError: with the measured dimensions in its message.
    """
    records = parse_stl_buffer(buffer)
    count = len(records)
    bbox: Optional[BoundingBox] = calculate_bounding_box(records['vectors'].astype(np.float64))

    if bbox is None:
        logger.error("STL validation failed: no triangles")
        raise ValidationError("STL validation failed: mesh has no bounding box (0 triangles)")

    if bbox.is_degenerate:
        logger.error("STL validation failed: degenerate bounds %s", bbox.size_str())
        raise ValidationError(
            f"STL validation failed: invalid bounds ({bbox.size_str()})",
            width=bbox.width, height=bbox.height, depth=bbox.depth, triangle_count=count,
        )

    if count < min_triangles:
        logger.error("STL validation failed: %d triangles < %d", count, min_triangles)
        raise ValidationError(
            f"STL validation failed: mesh too small or suspicious "
            f"({count} triangles < {min_triangles}; {bbox.size_str()})",
            width=bbox.width, height=bbox.height, depth=bbox.depth, triangle_count=count,
        )

    report = ValidationReport(bounding_box=bbox, triangle_count=count, n_bytes=len(buffer))
    logger.info("STL validated: %s", report.summary())
    return report


def validate_stl_file(filepath: Union[str, Path],
                      min_triangles: int = MIN_EXPORT_TRIANGLES) -> ValidationReport:
    """Read a binary STL file and validate its contents."""
    return validate(Path(filepath).read_bytes(), min_triangles=min_triangles)
