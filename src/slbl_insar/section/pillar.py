# src/slbl_insar/section/pillar.py
from __future__ import annotations

from enum import Enum
import logging
import math
import numpy as np

from ..errors import DimensionMismatch, NoIntersection
from ..geometry import intersect_polyline

logger = logging.getLogger(__name__)

# surface and topography closer than this are considered identical [m]
SURFACE_EPS: float = 1e-6


class NoIntersectionPolicy(str, Enum):
    """
    What to do when a pillar does not meet the topography.

    SUBSTITUTE : keep the failure-surface point as origin and log a warning
    RAISE      : raise NoIntersection for the whole profile
    """
    SUBSTITUTE = "substitute"
    RAISE = "raise"


DEFAULT_POLICY = NoIntersectionPolicy.SUBSTITUTE


def perpendicular_angle(slope: float) -> float:
    """Rotate a slope angle by 90 degrees, toward the downward normal."""
    return slope - 0.5 * math.pi if slope >= 0.0 else slope + 0.5 * math.pi


def project_pillars(
    first: int,
    last: int,
    surface_z: np.ndarray,
    surface_slope: np.ndarray,
    x: np.ndarray,
    z_topo: np.ndarray,
    policy: NoIntersectionPolicy | str = DEFAULT_POLICY,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Project failure-surface points onto the ground along the surface normal.

    For each interior index of [first, last] where the surface is below the
    topography, a line is drawn through the surface point perpendicular to the
    local surface slope, and intersected with the topography polyline.

    Parameters
    ----------
    first, last : index range of the failure surface
    surface_z : (N,) failure-surface elevations
    surface_slope : (N,) failure-surface slope (radians)
    x, z_topo : (N,) topography

    Returns
    -------
    x_proj, z_proj : (N,) origin of each displacement vector; points that are
        not projected keep their topography position.
    """
    policy = NoIntersectionPolicy(policy)
    x = np.asarray(x, dtype=float)
    z_topo = np.asarray(z_topo, dtype=float)
    surface_z = np.asarray(surface_z, dtype=float)
    surface_slope = np.asarray(surface_slope, dtype=float)

    n = x.size
    if not (z_topo.size == surface_z.size == surface_slope.size == n):
        raise DimensionMismatch(
            f"inputs must share one length, got x={n}, z_topo={z_topo.size}, "
            f"surface_z={surface_z.size}, surface_slope={surface_slope.size}"
        )
    if not 0 <= first < last < n:
        raise ValueError(f"invalid index range [{first}, {last}] for {n} points")

    x_proj = x.copy()
    z_proj = z_topo.copy()

    # long enough to cross the whole profile in any direction
    reach = 2.0 * math.hypot(x[-1] - x[0], float(z_topo.max() - min(z_topo.min(), surface_z.min()))) + 1.0

    for k in range(first + 1, last):
        if abs(z_topo[k] - surface_z[k]) <= SURFACE_EPS:
            continue

        angle = perpendicular_angle(surface_slope[k])
        dx, dz = math.cos(angle) * reach, math.sin(angle) * reach
        start = (x[k] - dx, surface_z[k] - dz)
        end = (x[k] + dx, surface_z[k] + dz)

        hit = intersect_polyline(x, z_topo, start, end)
        if hit is None:
            if policy is NoIntersectionPolicy.RAISE:
                raise NoIntersection(k)
            logger.warning("No ground intersection at point %d, keeping the failure-surface point", k)
            x_proj[k], z_proj[k] = x[k], surface_z[k]
            continue

        x_proj[k], z_proj[k] = hit

    return x_proj, z_proj
