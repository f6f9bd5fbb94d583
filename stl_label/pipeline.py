"""
End-to-end label synthesis.

    request -> layout -> outlines -> extrusion & placement (text, icon)
            -> composition with the base plate -> binary STL -> validation

generate_label() reads no files and keeps no state between calls: the icon
markup travels inside the request and the font arrives as a read-only
FontHandle, so several labels can be generated concurrently.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from stl_label.config import BASE_THICKNESS_MM, CORNER_RADIUS_MM, MIN_EXPORT_TRIANGLES
from stl_label.geometry.compositor import BooleanSubtractor, compose
from stl_label.geometry.extrude import Extruder, extrude_and_place, fit_to_box, relief_extent
from stl_label.geometry.mesh import TriangleSoup
from stl_label.geometry.plate import build_base_plate
from stl_label.io.stl_writer import serialize
from stl_label.io.validator import ValidationReport, validate
from stl_label.layout import compute_layout
from stl_label.logging_config import log_timing
from stl_label.outline import FontHandle, text_to_shapes, vector_markup_to_shapes
from stl_label.preview import LabelPreview
from stl_label.request import LabelRequest

logger = logging.getLogger(__name__)


@dataclass
class LabelResult:
    """Everything one synthesis call produces."""
    request: LabelRequest
    mesh: TriangleSoup
    stl_bytes: bytes
    report: ValidationReport
    preview: LabelPreview
    part_triangles: Dict[str, int] = field(default_factory=dict)

    @property
    def triangle_count(self) -> int:
        return self.report.triangle_count

    def summary(self) -> str:
        parts = ", ".join(f"{name}={count}" for name, count in self.part_triangles.items())
        return f"{self.request.text or '(no text)'}: {self.report.summary()} [{parts}]"

    def to_dict(self) -> dict:
        return {
            'request': self.request.to_dict(),
            'report': self.report.to_dict(),
            'part_triangles': dict(self.part_triangles),
            'layout': self.preview.layout.to_dict(),
        }


def generate_label(
    request: LabelRequest,
    font: FontHandle,
    *,
    extruder: Optional[Extruder] = None,
    subtractor: Optional[BooleanSubtractor] = None,
    min_triangles: int = MIN_EXPORT_TRIANGLES,
) -> LabelResult:
    """Synthesize, serialize and validate one label.

    Empty text or unusable icon markup drops that feature; the plate is
    always produced.

    Args:
        request: normalized label request (see normalize_request()).
        font: font used for the text outlines.
        extruder: extrusion backend (ShapelyExtruder by default).
        subtractor: boolean backend for deboss (ManifoldSubtractor by default).
        min_triangles: validation threshold.

    Raises:
        GeometryError: deboss subtraction failed.
        ValidationError: the serialized mesh was rejected.
    """
    w, h = request.width_mm, request.height_mm
    layout = compute_layout(
        w, h, request.has_icon,
        icon_position=request.icon_position,
        padding_mm=request.padding_mm,
        icon_size_mm=request.icon_size_mm,
    )

    text_shapes = text_to_shapes(request.text, font)
    icon_shapes = vector_markup_to_shapes(request.icon_markup) if request.has_icon else []
    if request.has_icon and not icon_shapes:
        logger.warning("Icon markup produced no shapes; icon omitted")

    z_offset, depth = relief_extent(request.relief)

    with log_timing(logger, "Feature extrusion", relief=request.relief.value) as info:
        text_solid = extrude_and_place(
            text_shapes, depth,
            layout.text_x, layout.text_y, layout.text_width_mm, layout.text_height_mm,
            h, z_offset_mm=z_offset, extruder=extruder,
        )
        icon_solid = extrude_and_place(
            icon_shapes, depth,
            layout.icon_x, layout.icon_y, layout.icon_size_mm, layout.icon_size_mm,
            h, z_offset_mm=z_offset, extruder=extruder,
        )
        info['text_triangles'] = len(text_solid) if text_solid is not None else 0
        info['icon_triangles'] = len(icon_solid) if icon_solid is not None else 0

    plate = build_base_plate(w, h, BASE_THICKNESS_MM, CORNER_RADIUS_MM, extruder=extruder)

    with log_timing(logger, "Compositing", relief=request.relief.value) as info:
        mesh = compose(plate, [text_solid, icon_solid], request.relief, subtractor=subtractor)
        info['triangles'] = len(mesh)

    stl_bytes = serialize(mesh)
    report = validate(stl_bytes, min_triangles=min_triangles)

    preview = LabelPreview(
        width_mm=w,
        height_mm=h,
        layout=layout,
        text=request.text,
        relief=request.relief,
        text_shapes=_placed_outline(text_shapes, layout.text_x, layout.text_y,
                                    layout.text_width_mm, layout.text_height_mm),
        icon_shapes=_placed_outline(icon_shapes, layout.icon_x, layout.icon_y,
                                    layout.icon_size_mm, layout.icon_size_mm),
    )

    result = LabelResult(
        request=request,
        mesh=mesh,
        stl_bytes=stl_bytes,
        report=report,
        preview=preview,
        part_triangles={
            'plate': len(plate),
            'text': len(text_solid) if text_solid is not None else 0,
            'icon': len(icon_solid) if icon_solid is not None else 0,
        },
    )
    logger.info("Label generated: %s", result.summary())
    return result


def _placed_outline(shapes, box_x, box_y, box_w, box_h):
    placement = fit_to_box(shapes, box_x, box_y, box_w, box_h)
    return placement.to_layout(shapes) if placement is not None else []
