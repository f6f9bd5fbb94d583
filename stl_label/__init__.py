"""
stl_label: 3D-printable nameplate labels as binary STL.

The CLI lives in main.py; generate_label() is the library entry point.
"""

from stl_label.errors import (
    GeometryError,
    InvalidRequestError,
    LabelError,
    STLLoadError,
    ValidationError,
)
from stl_label.logging_config import (
    setup_logging,
    log_timing,
    timed,
    LogContext,
)
from stl_label.outline import FontHandle, load_font
from stl_label.pipeline import LabelResult, generate_label
from stl_label.request import LabelRequest, ReliefMode, normalize_request

__all__ = [
    "FontHandle",
    "GeometryError",
    "InvalidRequestError",
    "LabelError",
    "LabelRequest",
    "LabelResult",
    "LogContext",
    "ReliefMode",
    "STLLoadError",
    "ValidationError",
    "generate_label",
    "load_font",
    "log_timing",
    "normalize_request",
    "setup_logging",
    "timed",
]
