"""
Unit tests for stl_label.io.validator module.

Tests:
- Buffer parsing and size checks
- Degenerate bounds detection
- Minimum triangle threshold
- File validation
"""

import struct

import numpy as np
import pytest

from stl_label.errors import ValidationError
from stl_label.geometry.mesh import TriangleSoup
from stl_label.geometry.plate import build_base_plate
from stl_label.io.stl_writer import serialize
from stl_label.io.validator import (
    ValidationReport,
    parse_stl_buffer,
    validate,
    validate_stl_file,
)
from tests.conftest import cube_vectors


@pytest.fixture
def cube_buffer() -> bytes:
    return serialize(TriangleSoup.from_vectors(cube_vectors(10.0)))


@pytest.fixture
def plate_buffer() -> bytes:
    return serialize(build_base_plate(45.0, 15.0, 1.6, 1.2))


class TestParseBuffer:
    """Tests for parse_stl_buffer."""

    def test_records(self, cube_buffer):
        records = parse_stl_buffer(cube_buffer)

        assert len(records) == 12
        assert records['vectors'].shape == (12, 3, 3)

    def test_too_short(self):
        with pytest.raises(ValidationError, match="too short"):
            parse_stl_buffer(b"\x00" * 40)

    def test_truncated(self, cube_buffer):
        with pytest.raises(ValidationError, match="size mismatch") as exc_info:
            parse_stl_buffer(cube_buffer[:-10])
        assert exc_info.value.triangle_count == 12

    def test_count_too_large(self, cube_buffer):
        tampered = cube_buffer[:80] + struct.pack('<I', 13) + cube_buffer[84:]
        with pytest.raises(ValidationError):
            parse_stl_buffer(tampered)

    def test_empty(self):
        assert len(parse_stl_buffer(serialize(TriangleSoup.empty()))) == 0


class TestValidate:
    """Tests for validate."""

    def test_valid_plate(self, plate_buffer):
        report = validate(plate_buffer)

        assert isinstance(report, ValidationReport)
        assert report.width == pytest.approx(45.0, abs=1e-4)
        assert report.height == pytest.approx(15.0, abs=1e-4)
        assert report.depth == pytest.approx(1.6, abs=1e-4)
        assert report.triangle_count >= 100
        assert report.n_bytes == len(plate_buffer)

    def test_too_few_triangles(self, cube_buffer):
        with pytest.raises(ValidationError, match="12 triangles < 100") as exc_info:
            validate(cube_buffer)

        error = exc_info.value
        assert error.triangle_count == 12
        assert error.width == pytest.approx(10.0)
        assert error.depth == pytest.approx(10.0)

    def test_threshold_configurable(self, cube_buffer):
        assert validate(cube_buffer, min_triangles=1).triangle_count == 12

    def test_empty_buffer(self):
        with pytest.raises(ValidationError, match="no bounding box"):
            validate(serialize(TriangleSoup.empty()), min_triangles=0)

    def test_flat_mesh(self):
        flat = TriangleSoup.from_vectors(np.array([
            [[0, 0, 0], [10, 0, 0], [0, 10, 0]],
            [[10, 0, 0], [10, 10, 0], [0, 10, 0]],
        ], dtype=float))

        with pytest.raises(ValidationError, match="invalid bounds") as exc_info:
            validate(serialize(flat), min_triangles=1)
        assert exc_info.value.depth == 0.0

    def test_non_finite(self, cube_buffer):
        records = parse_stl_buffer(cube_buffer).copy()
        records['vectors'][0, 0, 0] = np.nan
        buffer = cube_buffer[:84] + records.tobytes()

        with pytest.raises(ValidationError, match="invalid bounds"):
            validate(buffer, min_triangles=1)

    def test_report_dict(self, plate_buffer):
        data = validate(plate_buffer).to_dict()

        assert set(data) == {'bounding_box', 'triangle_count', 'n_bytes'}
        assert data['bounding_box']['dimensions'][0] == pytest.approx(45.0, abs=1e-4)


class TestValidateFile:
    """Tests for validate_stl_file."""

    def test_written_plate(self, plate_buffer, tmp_path):
        path = tmp_path / "plate.stl"
        path.write_bytes(plate_buffer)

        assert validate_stl_file(path).triangle_count == len(parse_stl_buffer(plate_buffer))

    def test_fixture_cube(self, cube_stl_path):
        assert validate_stl_file(cube_stl_path, min_triangles=1).triangle_count == 12

    def test_empty_file(self, empty_stl_path):
        with pytest.raises(ValidationError):
            validate_stl_file(empty_stl_path)
