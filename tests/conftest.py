"""
Pytest configuration and fixtures for the nameplate label generator.

Provides:
- Session-wide font handle (DejaVu Sans Bold, shipped with matplotlib)
- Simple 2D shape fixtures (square, ring, triangle)
- STL file fixtures written with numpy-stl
- Icon markup fixtures
- Common assertion helpers
"""

import logging
from pathlib import Path
from typing import Tuple

import numpy as np
import pytest
from shapely.geometry import Polygon
from stl import mesh as stl_mesh

from stl_label.logging_config import PACKAGE_LOGGER

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent


# ============================================================================
# Logging isolation
# ============================================================================

@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Undo setup_logging() so caplog sees package records in every test."""
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ============================================================================
# Font
# ============================================================================

@pytest.fixture(scope="session")
def font():
    """Default label font, loaded once like the CLI does."""
    from stl_label.outline import load_font
    return load_font()


# ============================================================================
# Shape Fixtures
# ============================================================================

@pytest.fixture
def square_shape() -> Polygon:
    """10 x 10 square at the origin."""
    return Polygon([(0, 0), (10, 0), (10, 10), (0, 10)])


@pytest.fixture
def ring_shape() -> Polygon:
    """10 x 10 square with a centered 4 x 4 hole."""
    return Polygon(
        [(0, 0), (10, 0), (10, 10), (0, 10)],
        holes=[[(3, 3), (3, 7), (7, 7), (7, 3)]],
    )


@pytest.fixture
def triangle_shape() -> Polygon:
    """Upward-pointing triangle (apex at max Y)."""
    return Polygon([(0, 0), (1, 0), (0.5, 1)])


# ============================================================================
# Icon Markup Fixtures
# ============================================================================

@pytest.fixture
def square_icon_markup() -> str:
    """Filled square with a square hole, 24 x 24 viewBox."""
    return (
        '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">'
        '<path d="M 2 2 L 22 2 L 22 22 L 2 22 Z M 8 8 L 16 8 L 16 16 L 8 16 Z"/>'
        '</svg>'
    )


# ============================================================================
# STL File Fixtures
# ============================================================================

@pytest.fixture
def cube_stl_path(tmp_path: Path) -> Path:
    """Create a simple binary cube STL for testing."""
    path = tmp_path / "cube.stl"
    _create_cube_stl(path, size=10.0)
    return path


@pytest.fixture
def ascii_stl_path(tmp_path: Path) -> Path:
    """Create ASCII format STL for format detection testing."""
    path = tmp_path / "ascii_cube.stl"
    _create_cube_stl(path, size=10.0, binary=False)
    return path


@pytest.fixture
def empty_stl_path(tmp_path: Path) -> Path:
    """Binary STL header with a zero triangle count."""
    path = tmp_path / "empty.stl"
    path.write_bytes(b"\x00" * 80 + b"\x00\x00\x00\x00")
    return path


# ============================================================================
# Helper Functions for Creating Test STL Files
# ============================================================================

CUBE_FACES = [
    # bottom
    [0, 2, 1], [0, 3, 2],
    # top
    [4, 5, 6], [4, 6, 7],
    # front
    [0, 1, 5], [0, 5, 4],
    # back
    [2, 3, 7], [2, 7, 6],
    # left
    [0, 4, 7], [0, 7, 3],
    # right
    [1, 2, 6], [1, 6, 5],
]


def cube_vectors(size: float = 10.0) -> np.ndarray:
    """(12, 3, 3) outward-wound triangles of a cube centered at the origin."""
    hs = size / 2
    vertices = np.array([
        [-hs, -hs, -hs], [+hs, -hs, -hs], [+hs, +hs, -hs], [-hs, +hs, -hs],  # bottom
        [-hs, -hs, +hs], [+hs, -hs, +hs], [+hs, +hs, +hs], [-hs, +hs, +hs],  # top
    ])
    return vertices[np.array(CUBE_FACES)]


def _create_cube_stl(path: Path, size: float = 10.0, binary: bool = True) -> None:
    """Create a cube STL file."""
    triangles = cube_vectors(size)
    m = stl_mesh.Mesh(np.zeros(len(triangles), dtype=stl_mesh.Mesh.dtype))
    for i, tri in enumerate(triangles):
        m.vectors[i] = tri

    if binary:
        m.save(str(path))
    else:
        with open(str(path), 'w') as f:
            f.write("solid cube\n")
            for tri in triangles:
                v0, v1, v2 = tri
                normal = np.cross(v1 - v0, v2 - v0)
                normal = normal / np.linalg.norm(normal)
                f.write(f"  facet normal {normal[0]} {normal[1]} {normal[2]}\n")
                f.write("    outer loop\n")
                for v in tri:
                    f.write(f"      vertex {v[0]} {v[1]} {v[2]}\n")
                f.write("    endloop\n")
                f.write("  endfacet\n")
            f.write("endsolid cube\n")


# ============================================================================
# Assertion Helpers
# ============================================================================

def assert_unit_normals(normals: np.ndarray) -> None:
    """Assert that every normal has unit length."""
    lengths = np.linalg.norm(normals, axis=1)
    assert np.allclose(lengths, 1.0, atol=1e-6), f"non-unit normals: {lengths.min()}..{lengths.max()}"


def assert_bbox_approx(bbox, expected_min: Tuple[float, float, float],
                       expected_max: Tuple[float, float, float], tolerance: float = 1e-4) -> None:
    """Assert that a BoundingBox matches the expected corners."""
    assert np.allclose(bbox.min_point, expected_min, atol=tolerance), \
        f"min: expected {expected_min}, got {bbox.min_point}"
    assert np.allclose(bbox.max_point, expected_max, atol=tolerance), \
        f"max: expected {expected_max}, got {bbox.max_point}"
