"""Outline extraction: text and icon markup to closed 2D shapes."""

from stl_label.outline.shapes import loops_to_shapes, merge_shapes, shapes_bounds
from stl_label.outline.text import FontHandle, load_font, text_to_shapes
from stl_label.outline.vector import vector_markup_to_shapes

__all__ = [
    "FontHandle",
    "load_font",
    "loops_to_shapes",
    "merge_shapes",
    "shapes_bounds",
    "text_to_shapes",
    "vector_markup_to_shapes",
]
