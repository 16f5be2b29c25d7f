# src/slbl_insar/calibration/model.py
from __future__ import annotations

from typing import Sequence
import logging
import numpy as np

from ..displacement import DispObservation, DispProfile
from ..errors import DimensionMismatch, OptimizerFailure
from ..geometry import Orientation
from ..section.models import SurfaceArena, SurfaceProfile, TopographicProfile
from ..section.pillar import DEFAULT_POLICY, NoIntersectionPolicy
from .metrics import rmse
from .optimizers import BoundedOptimizer, ParticleSwarm
from .types import CalibrationConfig, CalibrationResult

logger = logging.getLogger(__name__)


class ComposedModel:
    """
    Weighted sum of unit displacement profiles, compared to an LOS observation.

    The unit profiles are copied and frozen (read-only arrays) on
    construction, so `objective` can be evaluated concurrently.

    Parameters
    ----------
    topography : ground profile, used to place observation points on the ground
    unit_profiles : unit profiles sharing one origin grid
    section : section orientation (azimuth of the increasing x axis)
    los : sensor line-of-sight orientation
    observation : observed LOS displacement
    ground_perspective : positive LOS values move toward the sensor
    """

    def __init__(
        self,
        topography: TopographicProfile,
        unit_profiles: Sequence[DispProfile],
        section: Orientation,
        los: Orientation,
        observation: DispObservation,
        ground_perspective: bool = True,
    ):
        if not unit_profiles:
            raise ValueError("at least one unit profile is required")
        if not isinstance(section, Orientation) or not isinstance(los, Orientation):
            raise TypeError("section and los must be Orientation instances")

        reference = unit_profiles[0]
        frozen = []
        for profile in unit_profiles:
            if not reference.same_grid(profile):
                raise DimensionMismatch(
                    f"unit profile {profile.name!r} is not on the grid of {reference.name!r}"
                )
            p = profile.copy()
            for arr in (p.origin_x, p.origin_z, p.vx, p.vz):
                arr.setflags(write=False)
            frozen.append(p)

        self.topography = topography
        self.unit_profiles: tuple[DispProfile, ...] = tuple(frozen)
        self.section = section
        self.los = los
        self.observation = observation
        self.ground_perspective = bool(ground_perspective)
        self.handles: tuple[int, ...] | None = None  # arena handles, set by from_arena

        # observation points placed on the ground
        self._obs_z = topography.elevation_at(observation.x)

    @property
    def n_profiles(self) -> int:
        return len(self.unit_profiles)

    def _weights(self, weights) -> np.ndarray:
        w = np.asarray(weights, dtype=float).reshape(-1)
        if w.size != self.n_profiles:
            raise DimensionMismatch(f"expected {self.n_profiles} weights, got {w.size}")
        return w

    def compose(self, weights: Sequence[float]) -> DispProfile:
        """Combined profile on the unit profiles' grid."""
        return DispProfile.combine(self.unit_profiles, self._weights(weights), name="composed")

    def predict_los(self, weights: Sequence[float]) -> np.ndarray:
        """LOS amplitude of the combined profile at the observation positions."""
        profile = self.compose(weights)
        profile.interpolate_onto(self.observation.x, self._obs_z)
        return profile.los_amplitude(self.section, self.los, ground_perspective=self.ground_perspective)

    def objective(self, weights: Sequence[float]) -> float:
        return rmse(self.predict_los(weights), self.observation.amplitude)

    def fit(
        self,
        optimizer: BoundedOptimizer | None = None,
        config: CalibrationConfig = CalibrationConfig(),
        x0: Sequence[float] | None = None,
    ) -> CalibrationResult:
        """
        Minimise `objective` over the [config.lower, config.upper]^n box,
        starting from the all-ones vector unless `x0` is given.

        Raises
        ------
        OptimizerFailure
            The optimizer reported a failure (cancellation included) or
            returned a non-finite point.
        """
        if config.ground_perspective != self.ground_perspective:
            model = ComposedModel(
                self.topography, self.unit_profiles, self.section, self.los, self.observation,
                ground_perspective=config.ground_perspective,
            )
            model.handles = self.handles
            return model.fit(optimizer, config, x0)

        optimizer = optimizer if optimizer is not None else ParticleSwarm()
        n = self.n_profiles
        lower = np.full(n, config.lower)
        upper = np.full(n, config.upper)
        start = np.ones(n) if x0 is None else self._weights(x0)

        result = optimizer.minimize(self.objective, lower, upper, start)
        if not result.success:
            raise OptimizerFailure(f"calibration did not converge: {result.message}")
        weights = np.asarray(result.x, dtype=float)
        if not (np.all(np.isfinite(weights)) and np.isfinite(result.fun)):
            raise OptimizerFailure("calibration returned non-finite weights or objective")

        prediction = self.predict_los(weights)
        error = rmse(prediction, self.observation.amplitude)
        logger.info("Calibrated %d weights: rmse=%.6g", n, error)

        return CalibrationResult(
            weights=weights,
            rmse=error,
            profile=self.compose(weights),
            los_prediction=prediction,
            n_iterations=result.n_iterations,
            n_evaluations=result.n_evaluations,
            converged=result.success,
            message=result.message,
        )

    # ------------------------------------------------------------------
    # construction from failure surfaces
    # ------------------------------------------------------------------

    @classmethod
    def from_surfaces(
        cls,
        topography: TopographicProfile,
        surfaces: Sequence[SurfaceProfile],
        boundaries: Sequence[tuple[int, int]],
        section: Orientation,
        los: Orientation,
        observation: DispObservation,
        gradients: Sequence | None = None,
        policy: NoIntersectionPolicy | str = DEFAULT_POLICY,
        ground_perspective: bool = True,
    ) -> "ComposedModel":
        """
        Build one unit profile per surface (shaped by its optional gradient)
        and resample all of them on the topography grid.
        """
        if gradients is None:
            gradients = [None] * len(surfaces)
        if not (len(surfaces) == len(boundaries) == len(gradients)):
            raise DimensionMismatch(
                f"got {len(surfaces)} surfaces, {len(boundaries)} boundaries and {len(gradients)} gradients"
            )

        units = []
        for surface, (first, last), gradient in zip(surfaces, boundaries, gradients):
            unit = DispProfile.from_surface(topography, surface, first, last, policy=policy)
            if gradient is not None and len(gradient):
                unit.apply_amplitude_gradient(gradient)
            units.append(unit.interpolate_onto(topography.x, topography.z))

        return cls(topography, units, section, los, observation, ground_perspective=ground_perspective)

    @classmethod
    def from_arena(
        cls,
        arena: SurfaceArena,
        handles: Sequence[int],
        boundaries: Sequence[tuple[int, int]],
        section: Orientation,
        los: Orientation,
        observation: DispObservation,
        gradients: Sequence | None = None,
        policy: NoIntersectionPolicy | str = DEFAULT_POLICY,
        ground_perspective: bool = True,
    ) -> "ComposedModel":
        """Same as `from_surfaces`, with surfaces looked up by arena handle."""
        surfaces = [arena.get(h) for h in handles]
        model = cls.from_surfaces(
            arena.topography, surfaces, boundaries, section, los, observation,
            gradients=gradients, policy=policy, ground_perspective=ground_perspective,
        )
        model.handles = tuple(int(h) for h in handles)
        return model
