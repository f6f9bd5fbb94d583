"""Rounded-rectangle base plate."""

import logging
from typing import List, Optional, Tuple

import numpy as np
from shapely.geometry import Polygon

from stl_label.config import PLATE_CURVE_SEGMENTS
from stl_label.geometry.extrude import Extruder, ShapelyExtruder
from stl_label.geometry.mesh import TriangleSoup
from stl_label.logging_config import timed

logger = logging.getLogger(__name__)


def rounded_rectangle(width_mm: float, height_mm: float, radius_mm: float,
                      segments: int = PLATE_CURVE_SEGMENTS) -> Polygon:
    """Counter-clockwise rounded rectangle with its lower-left corner at the origin.

    The radius is clamped to [0, min(width, height) / 2].
    """
    r = max(0.0, min(radius_mm, min(width_mm, height_mm) / 2))
    if r == 0.0:
        return Polygon([(0, 0), (width_mm, 0), (width_mm, height_mm), (0, height_mm)])

    # (corner center, start angle) walking counter-clockwise from bottom-right
    corners = [
        (width_mm - r, r, -np.pi / 2),
        (width_mm - r, height_mm - r, 0.0),
        (r, height_mm - r, np.pi / 2),
        (r, r, np.pi),
    ]
    points: List[Tuple[float, float]] = []
    for cx, cy, start in corners:
        for t in np.linspace(start, start + np.pi / 2, segments + 1):
            point = (float(cx + r * np.cos(t)), float(cy + r * np.sin(t)))
            if not points or np.hypot(point[0] - points[-1][0], point[1] - points[-1][1]) > 1e-9:
                points.append(point)
    if np.hypot(points[0][0] - points[-1][0], points[0][1] - points[-1][1]) <= 1e-9:
        points.pop()
    return Polygon(points)


@timed(operation="Base plate")
def build_base_plate(
    width_mm: float,
    height_mm: float,
    thickness_mm: float,
    corner_radius_mm: float,
    extruder: Optional[Extruder] = None,
) -> TriangleSoup:
    """Watertight rounded-rectangle slab occupying [0, w] x [0, h] x [0, t].

    Args:
        width_mm, height_mm: outer footprint.
        thickness_mm: slab thickness along Z.
        corner_radius_mm: corner radius, clamped to half the shorter side.
        extruder: extrusion backend (ShapelyExtruder by default).
    """
    outline = rounded_rectangle(width_mm, height_mm, corner_radius_mm)
    plate = (extruder or ShapelyExtruder()).extrude([outline], thickness_mm)
    logger.debug("Base plate %.2f x %.2f x %.2f mm: %d triangles",
                 width_mm, height_mm, thickness_mm, len(plate))
    return plate
