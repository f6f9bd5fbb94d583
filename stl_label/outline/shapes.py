"""
Closed-loop polygon helpers shared by the text and icon extractors.

A *shape* is a valid shapely Polygon (exterior plus optional holes) in a
Y-up frame. Raw outline data arrives as loose loops without fill
information; loops_to_shapes() rebuilds solids from them using the
even-odd rule (a loop nested inside an odd number of others is a hole).
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union

from stl_label.config import MIN_SHAPE_AREA

logger = logging.getLogger(__name__)

Bounds = Tuple[float, float, float, float]


def fix_valid(geom: BaseGeometry) -> BaseGeometry:
    """Repair self-touching or bow-tie rings with a zero-width buffer."""
    if geom.is_empty or geom.is_valid:
        return geom
    return geom.buffer(0)


def as_polygons(geom: Optional[BaseGeometry]) -> List[Polygon]:
    """Flatten a geometry into its non-empty Polygon parts."""
    if geom is None or geom.is_empty:
        return []
    if isinstance(geom, Polygon):
        return [geom]
    if isinstance(geom, MultiPolygon):
        return [p for p in geom.geoms if not p.is_empty]
    if hasattr(geom, 'geoms'):
        return [g for g in geom.geoms if isinstance(g, Polygon) and not g.is_empty]
    return []


def _loop_polygon(loop: Sequence[Tuple[float, float]]) -> Optional[Polygon]:
    coords = [(float(x), float(y)) for x, y in loop]
    if len(coords) > 1 and coords[0] == coords[-1]:
        coords = coords[:-1]
    if len(coords) < 3:
        return None
    polygon = fix_valid(Polygon(coords))
    # buffer(0) may split a bow-tie loop; keep the largest lobe
    parts = as_polygons(polygon)
    if not parts:
        return None
    polygon = max(parts, key=lambda p: p.area)
    if polygon.area <= MIN_SHAPE_AREA:
        return None
    return Polygon(polygon.exterior.coords)


def loops_to_shapes(loops: Iterable[Sequence[Tuple[float, float]]]) -> List[Polygon]:
    """Rebuild filled shapes from unordered closed loops (even-odd fill).

    Args:
        loops: iterables of (x, y) points; the closing point may be repeated.

    Returns:
        Valid polygons with holes, ordered left-to-right then bottom-to-top
        by their bounds so the output does not depend on loop order.
    """
    polys = [p for p in (_loop_polygon(loop) for loop in loops) if p is not None]
    if not polys:
        return []

    # Each loop's parent is the smallest strictly larger loop containing it
    order = sorted(range(len(polys)), key=lambda i: polys[i].area)
    parent = [-1] * len(polys)
    for pos, i in enumerate(order):
        probe = polys[i].representative_point()
        for j in order[pos + 1:]:
            if polys[j].area > polys[i].area and polys[j].contains(probe):
                parent[i] = j
                break

    depth = []
    for i in range(len(polys)):
        d, k = 0, parent[i]
        while k != -1:
            d += 1
            k = parent[k]
        depth.append(d)

    # A filled loop is cut only by its direct children; deeper loops are islands
    pieces = []
    for i in range(len(polys)):
        if depth[i] % 2:
            continue
        children = [polys[k] for k in range(len(polys)) if parent[k] == i]
        pieces.append(polys[i].difference(unary_union(children)) if children else polys[i])

    geom = unary_union(pieces)
    return sort_shapes(as_polygons(fix_valid(geom)))


def sort_shapes(shapes: Iterable[Polygon]) -> List[Polygon]:
    return sorted(shapes, key=lambda p: (round(p.bounds[0], 9), round(p.bounds[1], 9), -p.area))


def merge_shapes(shapes: Sequence[Polygon]) -> List[Polygon]:
    """Union overlapping or touching shapes into disjoint ones."""
    if not shapes:
        return []
    return sort_shapes(as_polygons(fix_valid(unary_union(list(shapes)))))


def shapes_bounds(shapes: Sequence[Polygon]) -> Optional[Bounds]:
    """Joint (minx, miny, maxx, maxy) of a shape set, None when empty."""
    if not shapes:
        return None
    b = np.array([s.bounds for s in shapes], dtype=np.float64)
    return (float(b[:, 0].min()), float(b[:, 1].min()),
            float(b[:, 2].max()), float(b[:, 3].max()))
