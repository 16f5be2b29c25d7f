# src/slbl_insar/section/slbl.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import math
import numpy as np

from ..errors import MissingParameter, SingularSystem
from .models import SurfaceProfile, TopographicProfile
from .tridiag import solve_tridiagonal

logger = logging.getLogger(__name__)


class SLBLMethod(str, Enum):
    """
    EXACT               : tridiagonal solve, exact solution without thresholds
    ITERATIVE           : fixed number of relaxation sweeps
    ITERATIVE_THRESHOLD : relaxation sweeps stopped by an elevation floor or a slope ceiling
    """
    EXACT = "exact"
    ITERATIVE = "iterative"
    ITERATIVE_THRESHOLD = "iterative_threshold"


@dataclass(frozen=True)
class SLBLConfig:
    """
    SLBL parameters.

    first, last   : index range of the surface; points outside keep the topography
    tolerance     : lowering applied at each point relative to the mean of its neighbours
    n_iterations  : sweep count, mandatory for the iterative methods
    elevation_min : optional elevation floor (ITERATIVE_THRESHOLD)
    slope_max_deg : optional slope ceiling in degrees (ITERATIVE_THRESHOLD)
    """
    method: SLBLMethod = SLBLMethod.EXACT
    first: int = 0
    last: int = 1
    tolerance: float = 0.0
    n_iterations: int | None = None
    elevation_min: float | None = None
    slope_max_deg: float | None = None

    def __post_init__(self) -> None:
        try:
            method = SLBLMethod(self.method)
        except ValueError:
            raise ValueError(f"unknown SLBL method {self.method!r}") from None
        object.__setattr__(self, "method", method)

        if int(self.first) != self.first or int(self.last) != self.last:
            raise ValueError("first and last must be integer indices")
        object.__setattr__(self, "first", int(self.first))
        object.__setattr__(self, "last", int(self.last))
        if self.first < 0:
            raise ValueError(f"first must be >= 0, got {self.first}")
        if self.last <= self.first:
            raise ValueError(f"last must be greater than first, got first={self.first}, last={self.last}")
        if not math.isfinite(self.tolerance):
            raise ValueError("tolerance must be finite")

        if method is not SLBLMethod.EXACT:
            if self.n_iterations is None:
                raise MissingParameter(f"n_iterations is required for the {method.value} SLBL method")
            if int(self.n_iterations) != self.n_iterations or self.n_iterations < 0:
                raise ValueError(f"n_iterations must be a non-negative integer, got {self.n_iterations}")
            object.__setattr__(self, "n_iterations", int(self.n_iterations))
        if self.slope_max_deg is not None and not 0.0 < self.slope_max_deg < 90.0:
            raise ValueError(f"slope_max_deg must be in (0, 90), got {self.slope_max_deg}")

    def validate(self, n_points: int) -> None:
        if self.last >= n_points:
            raise ValueError(f"last index {self.last} is outside of a profile of {n_points} points")


@dataclass(frozen=True)
class SLBLResult:
    """
    surface      : generated failure surface
    n_iterations : sweeps actually applied, fewer than configured once the
                   surface stops moving (None for the exact method)
    stopped_early: True when a threshold ended the iterations
    """
    surface: SurfaceProfile
    n_iterations: int | None = None
    stopped_early: bool = False


def slbl_exact(z_topo: np.ndarray, first: int, last: int, tolerance: float) -> np.ndarray:
    """
    Exact SLBL surface.

    The unknowns strictly between `first` and `last` satisfy
      z_i = (z_{i-1} + z_{i+1}) / 2 - tolerance
    with z_first and z_last fixed to the topography. The resulting system is
    tridiagonal (1 on the diagonal, -1/2 off the diagonal).

    Elevations are capped by the topography.
    """
    z_topo = np.asarray(z_topo, dtype=float)
    dim = last - first - 1
    if dim < 1:
        raise SingularSystem(
            f"degenerate SLBL range [{first}, {last}]: at least one interior point is required"
        )

    off = np.full(dim - 1, -0.5)
    diag = np.ones(dim)
    rhs = np.full(dim, -float(tolerance))
    rhs[0] += 0.5 * z_topo[first]
    rhs[-1] += 0.5 * z_topo[last]

    interior = solve_tridiagonal(off, diag, off, rhs)

    z_out = z_topo.copy()
    z_out[first + 1:last] = np.minimum(interior, z_topo[first + 1:last])
    return z_out


def slbl_iterative(
    z_topo: np.ndarray, first: int, last: int, tolerance: float, n_iterations: int
) -> tuple[np.ndarray, int]:
    """
    Iterative SLBL: each sweep replaces every interior point by
    min(current, mean(left, right) - tolerance).

    Sweeping stops early once a sweep would lower no point.

    Returns
    -------
    z : (N,) surface after the last sweep
    n_done : number of sweeps that lowered at least one point
    """
    z_out = np.array(z_topo, dtype=float)
    work = z_out[first:last + 1]  # view

    n_done = 0
    for _ in range(int(n_iterations)):
        candidate = 0.5 * (work[:-2] + work[2:]) - tolerance
        lower = candidate < work[1:-1]
        if not lower.any():
            logger.debug("SLBL converged after %d sweeps", n_done)
            break
        work[1:-1] = np.where(lower, candidate, work[1:-1])
        n_done += 1

    return z_out, n_done


def slbl_iterative_threshold(
    x: np.ndarray,
    z_topo: np.ndarray,
    first: int,
    last: int,
    tolerance: float,
    n_iterations: int,
    elevation_min: float | None = None,
    slope_max_deg: float | None = None,
) -> tuple[np.ndarray, int]:
    """
    Iterative SLBL with stopping thresholds.

    A sweep is rejected, and the routine stops, when a point it would lower
    falls below `elevation_min`, or when the slope (degrees, atan(|dz|/dx))
    between that point and one of its neighbours exceeds `slope_max_deg`.

    Returns
    -------
    z : (N,) surface after the last accepted sweep
    n_done : number of accepted sweeps
    """
    x = np.asarray(x, dtype=float)
    z_out = np.array(z_topo, dtype=float)
    work = z_out[first:last + 1]
    xs = x[first:last + 1]
    dx_left = xs[1:-1] - xs[:-2]
    dx_right = xs[2:] - xs[1:-1]

    n_done = 0
    for _ in range(int(n_iterations)):
        candidate = 0.5 * (work[:-2] + work[2:]) - tolerance
        lower = candidate < work[1:-1]

        if elevation_min is not None and np.any(lower & (candidate < elevation_min)):
            break
        if slope_max_deg is not None:
            left = np.degrees(np.arctan(np.abs(work[:-2] - candidate) / dx_left))
            right = np.degrees(np.arctan(np.abs(candidate - work[2:]) / dx_right))
            if np.any(lower & ((left > slope_max_deg) | (right > slope_max_deg))):
                break

        work[1:-1] = np.where(lower, candidate, work[1:-1])
        n_done += 1

    return z_out, n_done


def run_slbl(topography: TopographicProfile, config: SLBLConfig, name: str | None = None) -> SLBLResult:
    """Generate a failure surface and report how it was obtained."""
    config.validate(topography.n_points)
    z = topography.z
    method = config.method

    n_done: int | None = None
    stopped_early = False
    if method is SLBLMethod.EXACT:
        z_slbl = slbl_exact(z, config.first, config.last, config.tolerance)
    elif method is SLBLMethod.ITERATIVE:
        z_slbl, n_done = slbl_iterative(z, config.first, config.last, config.tolerance, config.n_iterations)
    else:
        z_slbl, n_done = slbl_iterative_threshold(
            topography.x,
            z,
            config.first,
            config.last,
            config.tolerance,
            config.n_iterations,
            elevation_min=config.elevation_min,
            slope_max_deg=config.slope_max_deg,
        )
        stopped_early = n_done < config.n_iterations
        if stopped_early:
            logger.warning(
                "SLBL thresholds reached after %d of %d iterations", n_done, config.n_iterations
            )

    if name is None:
        tag = {SLBLMethod.EXACT: "E", SLBLMethod.ITERATIVE: "R", SLBLMethod.ITERATIVE_THRESHOLD: "T"}[method]
        name = f"SLBL_{tag}_{config.first}_{config.last}_{config.tolerance:g}"

    logger.info("Generated %s (method=%s)", name, method.value)
    surface = SurfaceProfile(topography.x, z_slbl, name=name)
    return SLBLResult(surface=surface, n_iterations=n_done, stopped_early=stopped_early)


def generate(topography: TopographicProfile, config: SLBLConfig) -> SurfaceProfile:
    """Failure surface of `topography` for the given configuration."""
    return run_slbl(topography, config).surface
