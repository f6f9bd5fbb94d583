"""Binary STL writing, reading and validation."""

from stl_label.io.stl_loader import STLFormat, STLInfo, load_stl
from stl_label.io.stl_writer import serialize, write_stl
from stl_label.io.validator import ValidationReport, parse_stl_buffer, validate, validate_stl_file

__all__ = [
    "STLFormat",
    "STLInfo",
    "ValidationReport",
    "load_stl",
    "parse_stl_buffer",
    "serialize",
    "validate",
    "validate_stl_file",
    "write_stl",
]
