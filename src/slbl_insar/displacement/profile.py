# src/slbl_insar/displacement/profile.py
from __future__ import annotations

from typing import Sequence
import logging
import numpy as np

from ..errors import DimensionMismatch
from ..geometry import Orientation, Vector2, Vector3, angles_2d, project_amplitudes
from ..section.models import SurfaceProfile, TopographicProfile
from ..section.pillar import DEFAULT_POLICY, SURFACE_EPS, NoIntersectionPolicy, project_pillars
from .interp import gradient_curve, interp_linear_clamped

logger = logging.getLogger(__name__)

GradientPoints = Sequence[tuple[int, float]]


class DispProfile:
    """
    Displacement vectors located on a section.

    One 2D vector (vx, vz) per origin point (x, z). A *unit* profile carries
    amplitude 1 over the active range of one failure surface and 0 elsewhere;
    a *combined* profile is a weighted sum of unit profiles on a common grid.

    Weighting, resampling and gradient shaping modify the profile in place and
    return it, so calls can be chained.
    """

    def __init__(
        self,
        origin_x: np.ndarray,
        origin_z: np.ndarray,
        vx: np.ndarray,
        vz: np.ndarray,
        name: str = "profile",
    ):
        arrays = [np.array(a, dtype=float) for a in (origin_x, origin_z, vx, vz)]
        if any(a.ndim != 1 for a in arrays):
            raise ValueError("origins and vector components must be 1D")
        sizes = {a.size for a in arrays}
        if len(sizes) != 1:
            raise DimensionMismatch(
                "origin_x, origin_z, vx and vz must have the same length, got "
                + ", ".join(str(a.size) for a in arrays)
            )
        self.origin_x, self.origin_z, self.vx, self.vz = arrays
        self.name = name

    @classmethod
    def zeros(cls, origin_x: np.ndarray, origin_z: np.ndarray, name: str = "profile") -> "DispProfile":
        n = np.asarray(origin_x).size
        return cls(origin_x, origin_z, np.zeros(n), np.zeros(n), name=name)

    def __len__(self) -> int:
        return int(self.vx.size)

    def __repr__(self) -> str:
        return f"DispProfile(name={self.name!r}, n_points={len(self)})"

    # ------------------------------------------------------------------
    # accessors
    # ------------------------------------------------------------------

    @property
    def origins(self) -> np.ndarray:
        return np.column_stack([self.origin_x, self.origin_z])

    @property
    def vectors(self) -> np.ndarray:
        return np.column_stack([self.vx, self.vz])

    @property
    def amplitude(self) -> np.ndarray:
        return np.hypot(self.vx, self.vz)

    @property
    def angle(self) -> np.ndarray:
        return angles_2d(self.vx, self.vz)

    def vector(self, k: int) -> Vector2:
        return Vector2(self.vx[k], self.vz[k])

    def copy(self, name: str | None = None) -> "DispProfile":
        return DispProfile(
            self.origin_x, self.origin_z, self.vx, self.vz,
            name=self.name if name is None else name,
        )

    def same_grid(self, other: "DispProfile") -> bool:
        return (
            len(self) == len(other)
            and np.array_equal(self.origin_x, other.origin_x)
            and np.array_equal(self.origin_z, other.origin_z)
        )

    # ------------------------------------------------------------------
    # in-place transforms
    # ------------------------------------------------------------------

    def weight(self, factor: float) -> "DispProfile":
        """Scale every vector amplitude by `factor`."""
        self.vx *= factor
        self.vz *= factor
        return self

    def interpolate_onto(self, new_x: np.ndarray, new_z: np.ndarray) -> "DispProfile":
        """
        Resample the vector components on new origins.

        Components are interpolated linearly against the horizontal origin
        coordinate and clamped to the boundary values outside the old range.
        Old origins are ordered by x (stable) before resampling.
        """
        new_x = np.array(new_x, dtype=float)
        new_z = np.array(new_z, dtype=float)
        if new_x.shape != new_z.shape or new_x.ndim != 1:
            raise DimensionMismatch(f"new origins must be 1D and aligned, got {new_x.shape} vs {new_z.shape}")

        order = np.argsort(self.origin_x, kind="stable")
        components = np.column_stack([self.vx[order], self.vz[order]])
        resampled = interp_linear_clamped(self.origin_x[order], components, new_x)

        self.origin_x, self.origin_z = new_x, new_z
        self.vx = np.ascontiguousarray(resampled[:, 0])
        self.vz = np.ascontiguousarray(resampled[:, 1])
        return self

    def apply_amplitude_gradient(self, control_points: GradientPoints) -> "DispProfile":
        """
        Multiply each amplitude by a piecewise-linear curve over point indices,
        defined by (index, multiplier) control points. Angles are preserved for
        non-negative multipliers.
        """
        multiplier = gradient_curve(control_points, len(self))
        self.vx *= multiplier
        self.vz *= multiplier
        return self

    # ------------------------------------------------------------------
    # projection
    # ------------------------------------------------------------------

    def projected_amplitude(self, section_azimuth: float, target: Vector3) -> np.ndarray:
        """Inner product of each vector, lifted to 3D, with `target`."""
        return project_amplitudes(self.vx, self.vz, section_azimuth, target)

    def los_amplitude(self, section: Orientation, los: Orientation, ground_perspective: bool = True) -> np.ndarray:
        """
        Displacement seen along a line of sight.

        With `ground_perspective`, positive values move toward the sensor
        (ground going down reads negative).
        """
        target = los.to_ground_vector() if ground_perspective else los.look_vector()
        return self.projected_amplitude(section.azimuth, target)

    # ------------------------------------------------------------------
    # construction
    # ------------------------------------------------------------------

    @classmethod
    def from_surface(
        cls,
        topography: TopographicProfile,
        surface: SurfaceProfile,
        first: int,
        last: int,
        policy: NoIntersectionPolicy | str = DEFAULT_POLICY,
    ) -> "DispProfile":
        """
        Unit displacement profile of one failure surface.

        Vectors follow the surface slope toward the main sliding direction,
        with amplitude 1 on [first, last] and 0 elsewhere, and are located on
        the ground by pillar projection.
        """
        surface.check_aligned(topography)
        n = topography.n_points
        if not 0 <= first < last < n:
            raise ValueError(f"invalid index range [{first}, {last}] for {n} points")

        slope = surface.slope
        origin_x, origin_z = project_pillars(
            first, last, surface.z, slope, topography.x, topography.z, policy=policy
        )

        amplitude = np.zeros(n)
        amplitude[first:last + 1] = 1.0
        direction = topography.main_direction
        vx = direction * np.cos(slope) * amplitude
        vz = direction * np.sin(slope) * amplitude
        return cls(origin_x, origin_z, vx, vz, name=f"unit_{surface.name}")

    @classmethod
    def from_surface_direct(
        cls,
        topography: TopographicProfile,
        surface: SurfaceProfile,
        policy: NoIntersectionPolicy | str = DEFAULT_POLICY,
    ) -> "DispProfile":
        """
        Unit profile of a surface given without an index range (loaded from
        file or combined from other surfaces). The range is the span where the
        surface departs from the topography, widened by one point each side.
        """
        first, last = surface_boundaries(topography, surface)
        return cls.from_surface(topography, surface, first, last, policy=policy)

    @classmethod
    def combine(
        cls,
        profiles: Sequence["DispProfile"],
        weights: Sequence[float],
        name: str = "combined",
    ) -> "DispProfile":
        """
        Weighted component-wise sum of profiles sharing one origin grid.
        Inputs are copied before weighting and left untouched.
        """
        if len(profiles) != len(weights):
            raise DimensionMismatch(f"{len(profiles)} profiles but {len(weights)} weights")
        if not profiles:
            raise ValueError("at least one profile is required")

        reference = profiles[0]
        out = cls.zeros(reference.origin_x, reference.origin_z, name=name)
        for profile, w in zip(profiles, weights):
            if not reference.same_grid(profile):
                raise ValueError(f"profile {profile.name!r} is not on the shared origin grid")
            contribution = profile.copy().weight(float(w))
            out.vx += contribution.vx
            out.vz += contribution.vz
        return out

    @classmethod
    def from_surfaces(
        cls,
        topography: TopographicProfile,
        surfaces: Sequence[SurfaceProfile],
        boundaries: Sequence[tuple[int, int]],
        gradients: Sequence[GradientPoints | None] | None = None,
        weights: Sequence[float] | None = None,
        policy: NoIntersectionPolicy | str = DEFAULT_POLICY,
        name: str = "combined",
    ) -> "DispProfile":
        """
        Combined profile of several failure surfaces on the topography grid.

        Each surface gives a unit profile (optionally shaped by its gradient),
        which is weighted, resampled on the topography points and summed.
        """
        n = len(surfaces)
        if gradients is None:
            gradients = [None] * n
        if weights is None:
            weights = [1.0] * n
        if not (len(boundaries) == len(gradients) == len(weights) == n):
            raise DimensionMismatch(
                f"got {n} surfaces, {len(boundaries)} boundaries, "
                f"{len(gradients)} gradients and {len(weights)} weights"
            )

        out = cls.zeros(topography.x, topography.z, name=name)
        for surface, (first, last), gradient, w in zip(surfaces, boundaries, gradients, weights):
            unit = cls.from_surface(topography, surface, first, last, policy=policy)
            if gradient is not None and len(gradient):
                unit.apply_amplitude_gradient(gradient)
            unit.weight(float(w)).interpolate_onto(topography.x, topography.z)
            out.vx += unit.vx
            out.vz += unit.vz

        logger.debug("Combined %d surfaces into %s", n, name)
        return out


def surface_boundaries(topography: TopographicProfile, surface: SurfaceProfile) -> tuple[int, int]:
    """Index range where `surface` departs from the topography, padded by one point."""
    surface.check_aligned(topography)
    departs = np.flatnonzero(np.abs(topography.z - surface.z) > SURFACE_EPS)
    if departs.size == 0:
        raise ValueError(f"surface {surface.name!r} does not depart from the topography")
    first = max(int(departs[0]) - 1, 0)
    last = min(int(departs[-1]) + 1, topography.n_points - 1)
    if last == first:
        last = min(first + 1, topography.n_points - 1)
    return first, last
