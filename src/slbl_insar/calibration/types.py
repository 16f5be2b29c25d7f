# src/slbl_insar/calibration/types.py
from __future__ import annotations
from dataclasses import dataclass
import math
import numpy as np

from ..displacement import DispProfile


@dataclass(frozen=True)
class SwarmConfig:
    """
    Particle-swarm configuration.

    Stopping: `max_iter` generations, `patience` generations without an
    improvement larger than `min_delta`, an optional wall-clock
    `time_budget_s`, or a cancellation event set by the caller.
    """
    n_particles: int = 30
    max_iter: int = 200

    # velocity update
    inertia: float = 0.7
    cognitive: float = 1.5
    social: float = 1.5

    # early stopping on best objective
    patience: int = 30
    min_delta: float = 1e-9

    seed: int | None = None
    n_workers: int | None = None       # None or 1: serial evaluation
    time_budget_s: float | None = None

    def __post_init__(self) -> None:
        if self.n_particles < 1:
            raise ValueError("n_particles must be >= 1")
        if self.max_iter < 1:
            raise ValueError("max_iter must be >= 1")
        if self.patience < 1:
            raise ValueError("patience must be >= 1")
        if self.min_delta < 0.0:
            raise ValueError("min_delta must be >= 0")
        if self.time_budget_s is not None and not self.time_budget_s > 0.0:
            raise ValueError("time_budget_s must be positive")


@dataclass(frozen=True)
class CalibrationConfig:
    lower: float = 0.0
    upper: float = 1000.0
    ground_perspective: bool = True

    def __post_init__(self) -> None:
        if not (math.isfinite(self.lower) and math.isfinite(self.upper)):
            raise ValueError("weight bounds must be finite")
        if self.upper <= self.lower:
            raise ValueError(f"upper bound {self.upper} must exceed lower bound {self.lower}")


@dataclass(frozen=True)
class OptimizeResult:
    """Outcome of a bounded minimisation."""
    x: np.ndarray                 # (n,)
    fun: float
    n_iterations: int
    n_evaluations: int
    success: bool
    message: str = ""


@dataclass(frozen=True)
class CalibrationResult:
    weights: np.ndarray           # (n_profiles,)
    rmse: float
    profile: DispProfile          # combined profile on the unit-profile grid
    los_prediction: np.ndarray    # (n_obs,)
    n_iterations: int
    n_evaluations: int
    converged: bool
    message: str = ""
