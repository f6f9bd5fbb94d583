"""
Flat previews of a label: SVG, PNG and DXF.

All three are drawn from a LabelPreview, the 2D description produced next
to the mesh by pipeline.generate_label(): plate outline plus the placed
text and icon outlines in the layout frame (millimeters, origin top-left,
Y down). Previews are never rendered inside the synthesis call.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import ezdxf
import svgwrite
from ezdxf import units
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.patches import PathPatch
from matplotlib.path import Path as MplPath
from shapely.geometry import Polygon
from shapely.geometry.polygon import orient

from stl_label.config import (
    CORNER_RADIUS_MM,
    PREVIEW_INK,
    PREVIEW_PNG_DPI,
    PREVIEW_PX_PER_MM,
    PREVIEW_STROKE_MM,
)
from stl_label.geometry.plate import rounded_rectangle
from stl_label.layout import LayoutResult
from stl_label.request import ReliefMode

logger = logging.getLogger(__name__)

# DXF layer name -> ACI color
DXF_LAYERS = {
    'PLATE': 7,
    'TEXT': 1,
    'ICON': 5,
}


@dataclass
class LabelPreview:
    """2D description of a label for flat renderers."""
    width_mm: float
    height_mm: float
    layout: LayoutResult
    text: str = ""
    relief: ReliefMode = ReliefMode.EMBOSS
    text_shapes: List[Polygon] = field(default_factory=list)
    icon_shapes: List[Polygon] = field(default_factory=list)

    @property
    def feature_shapes(self) -> List[Polygon]:
        return [*self.text_shapes, *self.icon_shapes]

    def to_dict(self) -> dict:
        return {
            'width_mm': self.width_mm,
            'height_mm': self.height_mm,
            'layout': self.layout.to_dict(),
            'text': self.text,
            'relief': self.relief.value,
            'text_shapes': len(self.text_shapes),
            'icon_shapes': len(self.icon_shapes),
        }


def _rings(polygon: Polygon) -> Iterable[Sequence[Tuple[float, float]]]:
    polygon = orient(polygon, sign=1.0)
    yield list(polygon.exterior.coords)
    for interior in polygon.interiors:
        yield list(interior.coords)


def _path_data(polygon: Polygon) -> str:
    parts = []
    for ring in _rings(polygon):
        points = " L ".join(f"{x:.3f} {y:.3f}" for x, y in ring[:-1])
        parts.append(f"M {points} Z")
    return " ".join(parts)


# ---------------------------------------------------------------------------
# SVG
# ---------------------------------------------------------------------------

def render_svg(preview: LabelPreview, path: Optional[Union[str, Path]] = None,
               px_per_mm: float = PREVIEW_PX_PER_MM) -> str:
    """Render the preview as SVG markup; also saved to ``path`` if given.

    The document is ``round(mm * px_per_mm)`` pixels large with a viewBox
    in millimeters.
    """
    w, h = preview.width_mm, preview.height_mm
    dwg = svgwrite.Drawing(
        str(path) if path else "label.svg",
        size=(f"{round(w * px_per_mm)}px", f"{round(h * px_per_mm)}px"),
        viewBox=f"0 0 {w:g} {h:g}",
        debug=False,
    )
    radius = min(CORNER_RADIUS_MM, min(w, h) / 2)
    dwg.add(dwg.rect(
        insert=(0, 0), size=(w, h), rx=radius, ry=radius,
        fill='white', stroke=PREVIEW_INK, stroke_width=PREVIEW_STROKE_MM,
    ))

    for group_id, shapes in (('text', preview.text_shapes), ('icon', preview.icon_shapes)):
        if not shapes:
            continue
        group = dwg.g(id=group_id, fill=PREVIEW_INK, fill_rule='evenodd')
        for shape in shapes:
            group.add(dwg.path(d=_path_data(shape)))
        dwg.add(group)

    markup = dwg.tostring()
    if path:
        dwg.save()
        logger.info("SVG preview saved: %s", path)
    return markup


# ---------------------------------------------------------------------------
# PNG
# ---------------------------------------------------------------------------

def _mpl_path(polygons: Sequence[Polygon]) -> MplPath:
    vertices: List[Tuple[float, float]] = []
    codes: List[int] = []
    for polygon in polygons:
        for ring in _rings(polygon):
            vertices.extend(ring)
            codes.extend([MplPath.MOVETO] + [MplPath.LINETO] * (len(ring) - 2) + [MplPath.CLOSEPOLY])
    return MplPath(vertices, codes)


def render_png(preview: LabelPreview, path: Union[str, Path], dpi: int = PREVIEW_PNG_DPI) -> Path:
    """Rasterize the preview at ``dpi`` (label size is kept in real units).

    Uses a standalone Figure with the Agg canvas, so no pyplot state is
    touched and concurrent calls are safe.
    """
    w, h = preview.width_mm, preview.height_mm
    fig = Figure(figsize=(w / 25.4, h / 25.4), dpi=dpi)
    FigureCanvasAgg(fig)
    ax = fig.add_axes((0, 0, 1, 1))
    ax.set_xlim(0, w)
    ax.set_ylim(h, 0)
    ax.set_aspect('equal')
    ax.axis('off')

    plate = rounded_rectangle(w, h, CORNER_RADIUS_MM)
    ax.add_patch(PathPatch(_mpl_path([plate]), facecolor='white', edgecolor=PREVIEW_INK,
                           linewidth=PREVIEW_STROKE_MM / 25.4 * 72))
    if preview.feature_shapes:
        ax.add_patch(PathPatch(_mpl_path(preview.feature_shapes), facecolor=PREVIEW_INK,
                               edgecolor='none'))

    path = Path(path)
    fig.savefig(str(path), dpi=dpi, facecolor='white')
    logger.info("PNG preview saved: %s", path)
    return path


# ---------------------------------------------------------------------------
# DXF
# ---------------------------------------------------------------------------

def render_dxf(preview: LabelPreview, path: Union[str, Path], dxf_version: str = 'R2010') -> Path:
    """Write plate and feature outlines as closed polylines (Y up, mm)."""
    doc = ezdxf.new(dxf_version, units=units.MM)
    for name, color in DXF_LAYERS.items():
        doc.layers.add(name, color=color)
    msp = doc.modelspace()
    h = preview.height_mm

    def add_outline(polygon: Polygon, layer: str) -> None:
        for ring in _rings(polygon):
            points = [(x, h - y) for x, y in ring[:-1]]
            msp.add_lwpolyline(points, close=True, dxfattribs={'layer': layer})

    # rounded_rectangle is symmetric, so it needs no flip into layout frame
    add_outline(rounded_rectangle(preview.width_mm, h, CORNER_RADIUS_MM), 'PLATE')
    for shape in preview.text_shapes:
        add_outline(shape, 'TEXT')
    for shape in preview.icon_shapes:
        add_outline(shape, 'ICON')

    path = Path(path)
    doc.saveas(str(path))
    logger.info("DXF preview saved: %s", path)
    return path
