# src/slbl_insar/section/__init__.py
from .models import TopographicProfile, SurfaceProfile, SurfaceArena, finite_difference_slope
from .slbl import SLBLMethod, SLBLConfig, SLBLResult, generate, run_slbl
from .tridiag import solve_tridiagonal
from .pillar import NoIntersectionPolicy, project_pillars

__all__ = [
    "TopographicProfile",
    "SurfaceProfile",
    "SurfaceArena",
    "finite_difference_slope",
    "SLBLMethod",
    "SLBLConfig",
    "SLBLResult",
    "generate",
    "run_slbl",
    "solve_tridiagonal",
    "NoIntersectionPolicy",
    "project_pillars",
]
