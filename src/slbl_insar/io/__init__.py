# src/slbl_insar/io/__init__.py
from .load_data import (
    load_topography,
    load_surface,
    load_observation,
    load_profile,
    save_profile,
    save_surface,
    save_topography,
    save_observation,
)

__all__ = [
    "load_topography",
    "load_surface",
    "load_observation",
    "load_profile",
    "save_profile",
    "save_surface",
    "save_topography",
    "save_observation",
]
