"""
Extrusion of 2D shapes and their placement on the label.

Frames:
    shape frame   reference units, Y up (glyph baseline / mirrored SVG)
    layout frame  millimeters, origin top-left of the label, Y down
    mesh frame    millimeters, origin bottom-left of the label, Y up, Z up

A box from the layout frame maps to the mesh frame with a vertical flip:
    mesh_y = label_height - layout_y_top - scaled_height
Dropping this flip renders text upside down or off-center.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Tuple

import trimesh
from shapely.affinity import affine_transform
from shapely.geometry import Polygon

from stl_label.config import (
    BASE_THICKNESS_MM,
    ENGRAVE_DEPTH_MM,
    ENGRAVE_OVERSHOOT_MM,
    FEATURE_HEIGHT_MM,
    FIT_MARGIN,
    MIN_REF_EXTENT,
)
from stl_label.geometry.mesh import TriangleSoup
from stl_label.outline.shapes import shapes_bounds
from stl_label.request import ReliefMode

logger = logging.getLogger(__name__)


class Extruder(Protocol):
    """Turns a set of 2D shapes into a closed solid of given depth (z = 0..depth)."""

    def extrude(self, shapes: Sequence[Polygon], depth: float) -> TriangleSoup:
        ...


class ShapelyExtruder:
    """Earcut-triangulated prism extrusion through trimesh.

    Every shape becomes a watertight prism with outward normals; prisms are
    concatenated in input order.
    """

    def __init__(self, engine: str = "earcut"):
        self.engine = engine

    def extrude(self, shapes: Sequence[Polygon], depth: float) -> TriangleSoup:
        parts = []
        for shape in shapes:
            if shape.is_empty or shape.area <= 0:
                continue
            prism = trimesh.creation.extrude_polygon(shape, height=depth, engine=self.engine)
            parts.append(TriangleSoup.from_trimesh(prism))
        return TriangleSoup.concatenate(parts)


@dataclass(frozen=True)
class Placement:
    """Uniform fit of a shape set into a layout box.

    Attributes:
        scale: shape units -> millimeters
        ref_min_x, ref_max_y: reference bounds corner used as anchor
        x: left edge of the placed shapes (layout and mesh frame)
        y_top: top edge of the placed shapes in the layout frame
        width, height: placed size in millimeters
    """
    scale: float
    ref_min_x: float
    ref_min_y: float
    ref_max_y: float
    x: float
    y_top: float
    width: float
    height: float

    def mesh_offset(self, label_height_mm: float) -> Tuple[float, float]:
        """(dx, dy) moving scaled shape-frame geometry into the mesh frame."""
        mesh_y = label_height_mm - self.y_top - self.height
        return (self.x - self.ref_min_x * self.scale,
                mesh_y - self.ref_min_y * self.scale)

    def to_layout(self, shapes: Sequence[Polygon]) -> List[Polygon]:
        """Map shapes into the layout frame (Y down) for flat previews."""
        s = self.scale
        matrix = [s, 0.0, 0.0, -s,
                  self.x - self.ref_min_x * s,
                  self.y_top + self.ref_max_y * s]
        return [affine_transform(shape, matrix) for shape in shapes]


def fit_to_box(
    shapes: Sequence[Polygon],
    box_x: float,
    box_y: float,
    box_width_mm: float,
    box_height_mm: float,
) -> Optional[Placement]:
    """Center the shapes in a layout box at FIT_MARGIN of the limiting side.

    Zero-size reference extents are replaced by MIN_REF_EXTENT.

    Returns:
        Placement, or None for an empty shape set.
    """
    bounds = shapes_bounds(shapes)
    if bounds is None:
        return None
    min_x, min_y, max_x, max_y = bounds
    ref_w = max(MIN_REF_EXTENT, max_x - min_x)
    ref_h = max(MIN_REF_EXTENT, max_y - min_y)
    scale = min(box_width_mm / ref_w, box_height_mm / ref_h) * FIT_MARGIN

    width = (max_x - min_x) * scale
    height = (max_y - min_y) * scale
    return Placement(
        scale=scale,
        ref_min_x=min_x,
        ref_min_y=min_y,
        ref_max_y=max_y,
        x=box_x + (box_width_mm - width) / 2,
        y_top=box_y + (box_height_mm - height) / 2,
        width=width,
        height=height,
    )


def relief_extent(relief: ReliefMode) -> Tuple[float, float]:
    """(z_offset, depth) of feature solids for a relief mode.

    Emboss features stand on the plate top. Deboss cutters start at the
    engraving floor and end ENGRAVE_OVERSHOOT_MM above the top face, so the
    subtraction never meets coplanar faces.
    """
    if ReliefMode(relief) is ReliefMode.DEBOSS:
        return BASE_THICKNESS_MM - ENGRAVE_DEPTH_MM, ENGRAVE_DEPTH_MM + ENGRAVE_OVERSHOOT_MM
    return BASE_THICKNESS_MM, FEATURE_HEIGHT_MM


def extrude_and_place(
    shapes: Sequence[Polygon],
    depth_mm: float,
    box_x: float,
    box_y: float,
    box_width_mm: float,
    box_height_mm: float,
    label_height_mm: float,
    z_offset_mm: float = 0.0,
    extruder: Optional[Extruder] = None,
) -> Optional[TriangleSoup]:
    """Extrude shapes to ``depth_mm`` and fit them into a layout box.

    Args:
        shapes: shape set at reference size (Y up).
        depth_mm: extrusion depth along Z.
        box_x, box_y: top-left of the target box in the layout frame.
        box_width_mm, box_height_mm: target box size.
        label_height_mm: total label height, needed for the Y flip.
        z_offset_mm: Z of the bottom face after placement.
        extruder: extrusion backend (ShapelyExtruder by default).

    Returns:
        Placed TriangleSoup, or None when ``shapes`` is empty.
    """
    placement = fit_to_box(shapes, box_x, box_y, box_width_mm, box_height_mm)
    if placement is None:
        return None

    extruder = extruder or ShapelyExtruder()
    solid = extruder.extrude(shapes, depth_mm)
    if len(solid) == 0:
        logger.warning("Extrusion produced no triangles for %d shapes", len(shapes))
        return None

    dx, dy = placement.mesh_offset(label_height_mm)
    placed = solid.scaled(placement.scale, placement.scale, 1.0).translated((dx, dy, z_offset_mm))

    logger.debug(
        "Placed %d shapes: %.2f x %.2f mm at (%.2f, %.2f), %d triangles",
        len(shapes), placement.width, placement.height, placement.x, placement.y_top, len(placed),
    )
    return placed
