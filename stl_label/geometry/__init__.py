"""Mesh geometry: triangle soups, extrusion, base plate, composition."""

from stl_label.geometry.compositor import BooleanSubtractor, ManifoldSubtractor, compose
from stl_label.geometry.extrude import (
    Extruder,
    Placement,
    ShapelyExtruder,
    extrude_and_place,
    fit_to_box,
    relief_extent,
)
from stl_label.geometry.mesh import TriangleSoup
from stl_label.geometry.mesh_stats import BoundingBox, MeshStatistics, calculate_bounding_box
from stl_label.geometry.plate import build_base_plate, rounded_rectangle

__all__ = [
    "BooleanSubtractor",
    "BoundingBox",
    "Extruder",
    "ManifoldSubtractor",
    "MeshStatistics",
    "Placement",
    "ShapelyExtruder",
    "TriangleSoup",
    "build_base_plate",
    "calculate_bounding_box",
    "compose",
    "extrude_and_place",
    "fit_to_box",
    "relief_extent",
    "rounded_rectangle",
]
