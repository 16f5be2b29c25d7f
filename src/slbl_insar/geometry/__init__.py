# src/slbl_insar/geometry/__init__.py
from .vectors import Vector2, Vector3, section_to_geographic, project_amplitudes, angles_2d
from .orientation import Orientation
from .intersect import segment_intersection, intersect_polyline

__all__ = [
    "Vector2",
    "Vector3",
    "Orientation",
    "section_to_geographic",
    "project_amplitudes",
    "angles_2d",
    "segment_intersection",
    "intersect_polyline",
]
