# src/slbl_insar/displacement/__init__.py
from .interp import interp_linear_clamped, gradient_curve
from .profile import DispProfile, surface_boundaries
from .types import DispObservation

__all__ = [
    "interp_linear_clamped",
    "gradient_curve",
    "DispProfile",
    "DispObservation",
    "surface_boundaries",
]
