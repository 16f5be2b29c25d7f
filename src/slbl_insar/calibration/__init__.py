# src/slbl_insar/calibration/__init__.py
from .metrics import rmse
from .types import SwarmConfig, CalibrationConfig, CalibrationResult, OptimizeResult
from .optimizers import BoundedOptimizer, ParticleSwarm, DifferentialEvolution
from .model import ComposedModel
from .workflow import run_calibration, synthesize_observation

__all__ = [
    "rmse",
    "SwarmConfig",
    "CalibrationConfig",
    "CalibrationResult",
    "OptimizeResult",
    "BoundedOptimizer",
    "ParticleSwarm",
    "DifferentialEvolution",
    "ComposedModel",
    "run_calibration",
    "synthesize_observation",
]
