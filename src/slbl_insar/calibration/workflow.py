# src/slbl_insar/calibration/workflow.py
from __future__ import annotations

from typing import Sequence
import threading
import numpy as np

from ..displacement import DispObservation
from ..geometry import Orientation
from ..section.models import SurfaceProfile, TopographicProfile
from ..section.pillar import DEFAULT_POLICY, NoIntersectionPolicy
from .model import ComposedModel
from .optimizers import ParticleSwarm
from .types import CalibrationConfig, CalibrationResult, SwarmConfig


def synthesize_observation(
    model: ComposedModel,
    weights: Sequence[float],
    noise_sigma: float = 0.0,
    rng: np.random.Generator | None = None,
    name: str = "synthetic",
) -> DispObservation:
    """
    LOS observation predicted by `model` for known weights, at the model's
    observation positions, with optional Gaussian noise.
    """
    los = model.predict_los(weights)
    if noise_sigma > 0.0:
        rng = rng if rng is not None else np.random.default_rng()
        los = los + rng.normal(0.0, noise_sigma, size=los.shape)
    return DispObservation(model.observation.x, los, model.los, name=name)


def run_calibration(
    topography: TopographicProfile,
    surfaces: Sequence[SurfaceProfile],
    boundaries: Sequence[tuple[int, int]],
    section: Orientation,
    observation: DispObservation,
    gradients: Sequence | None = None,
    swarm: SwarmConfig = SwarmConfig(),
    calibration: CalibrationConfig = CalibrationConfig(),
    policy: NoIntersectionPolicy | str = DEFAULT_POLICY,
    stop_event: threading.Event | None = None,
) -> CalibrationResult:
    """
    End-to-end helper:
      1) one unit profile per failure surface (pillar origins, optional gradient)
      2) resample unit profiles on the topography grid
      3) particle-swarm fit of the weights against the observed LOS data
    """
    # 1-2) unit profiles on a common grid
    model = ComposedModel.from_surfaces(
        topography,
        surfaces,
        boundaries,
        section=section,
        los=observation.orientation,
        observation=observation,
        gradients=gradients,
        policy=policy,
        ground_perspective=calibration.ground_perspective,
    )

    # 3) fit
    optimizer = ParticleSwarm(swarm, stop_event=stop_event)
    return model.fit(optimizer, calibration)
