"""
Icon outlines from SVG markup.

Supported elements: path, polygon, polyline, rect, circle, ellipse, with
``transform`` attributes on the element and its ancestor groups. Content of
defs, clipPath, mask, symbol and pattern is ignored. Each element is filled
with the even-odd rule independently of the others; overlapping elements
are unioned afterwards.

Any parsing problem yields an empty shape set: a broken or missing icon
only drops the icon from the label.
"""

import logging
import re
from typing import Iterator, List, Optional, Sequence, Tuple
from xml.etree import ElementTree as ET

import numpy as np
from shapely.affinity import scale as shp_scale
from shapely.geometry import Polygon
from svgpathtools import Line, parse_path
from svgpathtools.parser import parse_transform

from stl_label.config import CURVE_SAMPLES
from stl_label.outline.shapes import loops_to_shapes, merge_shapes

logger = logging.getLogger(__name__)

_SKIPPED_CONTAINERS = {'defs', 'clipPath', 'mask', 'symbol', 'pattern', 'marker', 'style', 'title', 'metadata'}
_NUMBER_RE = re.compile(r'[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?')
_ELLIPSE_SEGMENTS = 48

Loop = List[Tuple[float, float]]


def _local_name(tag: str) -> str:
    return tag.rsplit('}', 1)[-1] if isinstance(tag, str) else ''


def _length(value: Optional[str], default: float = 0.0) -> float:
    """Parse an SVG length, ignoring units (icons are unitless)."""
    if value is None:
        return default
    match = _NUMBER_RE.match(value.strip())
    return float(match.group(0)) if match else default


def _iter_elements(node: ET.Element, matrix: np.ndarray) -> Iterator[Tuple[ET.Element, np.ndarray]]:
    """Walk the tree yielding (element, accumulated transform)."""
    for child in node:
        name = _local_name(child.tag)
        if name in _SKIPPED_CONTAINERS:
            continue
        local = matrix
        transform = child.get('transform')
        if transform:
            local = matrix @ parse_transform(transform)
        yield child, local
        yield from _iter_elements(child, local)


def _sample_path(d: str) -> List[Loop]:
    loops: List[Loop] = []
    path = parse_path(d)
    for subpath in path.continuous_subpaths():
        points: List[complex] = []
        for segment in subpath:
            if isinstance(segment, Line):
                points.append(segment.start)
            else:
                for t in np.linspace(0.0, 1.0, CURVE_SAMPLES, endpoint=False):
                    points.append(segment.point(float(t)))
        # unclosed subpaths are filled as if closed
        if len(subpath) and not subpath.isclosed():
            points.append(subpath.end)
        loops.append([(p.real, p.imag) for p in points])
    return loops


def _points_loop(value: str) -> Loop:
    numbers = [float(n) for n in _NUMBER_RE.findall(value or '')]
    return list(zip(numbers[0::2], numbers[1::2]))


def _ellipse_loop(cx: float, cy: float, rx: float, ry: float) -> Loop:
    angles = np.linspace(0.0, 2.0 * np.pi, _ELLIPSE_SEGMENTS, endpoint=False)
    return [(cx + rx * np.cos(a), cy + ry * np.sin(a)) for a in angles]


def _element_loops(element: ET.Element) -> List[Loop]:
    name = _local_name(element.tag)
    if name == 'path':
        d = element.get('d')
        return _sample_path(d) if d else []
    if name in ('polygon', 'polyline'):
        return [_points_loop(element.get('points', ''))]
    if name == 'rect':
        x, y = _length(element.get('x')), _length(element.get('y'))
        w, h = _length(element.get('width')), _length(element.get('height'))
        if w <= 0 or h <= 0:
            return []
        return [[(x, y), (x + w, y), (x + w, y + h), (x, y + h)]]
    if name == 'circle':
        r = _length(element.get('r'))
        if r <= 0:
            return []
        return [_ellipse_loop(_length(element.get('cx')), _length(element.get('cy')), r, r)]
    if name == 'ellipse':
        rx, ry = _length(element.get('rx')), _length(element.get('ry'))
        if rx <= 0 or ry <= 0:
            return []
        return [_ellipse_loop(_length(element.get('cx')), _length(element.get('cy')), rx, ry)]
    return []


def _transform_loop(loop: Sequence[Tuple[float, float]], matrix: np.ndarray) -> Loop:
    if not len(loop):
        return []
    pts = np.column_stack([np.asarray(loop, dtype=np.float64), np.ones(len(loop))])
    out = pts @ matrix.T
    return [(float(x), float(y)) for x, y in out[:, :2]]


def vector_markup_to_shapes(markup: Optional[str]) -> List[Polygon]:
    """Parse SVG markup into filled shapes at the icon's native size.

    The SVG Y-down frame is mirrored to Y-up so the result can be placed
    exactly like glyph shapes.

    Returns:
        Shapes of all filled elements, or [] for empty or malformed markup.
    """
    if not markup or not markup.strip():
        return []

    try:
        root = ET.fromstring(markup.strip())
        shapes: List[Polygon] = []
        root_matrix = np.identity(3)
        if root.get('transform'):
            root_matrix = parse_transform(root.get('transform'))
        elements = [(root, root_matrix)] + list(_iter_elements(root, root_matrix))
        for element, matrix in elements:
            loops = [_transform_loop(loop, matrix) for loop in _element_loops(element)]
            shapes.extend(loops_to_shapes(loops))
    except (ET.ParseError, ValueError, IndexError, TypeError) as exc:
        logger.warning("Icon markup could not be parsed, icon omitted: %s", exc)
        return []

    shapes = [shp_scale(s, xfact=1.0, yfact=-1.0, origin=(0, 0)) for s in shapes]
    shapes = merge_shapes(shapes)
    if not shapes:
        logger.warning("Icon markup contains no filled shapes, icon omitted")
    return shapes
