# src/slbl_insar/displacement/types.py
from __future__ import annotations
from dataclasses import dataclass
import numpy as np

from ..errors import DimensionMismatch
from ..geometry import Orientation


@dataclass(frozen=True, eq=False)
class DispObservation:
    """
    Observed displacement located on the section.

    x            : (M,) positions along the section
    amplitude    : (M,) displacement measured along the sensor line of sight
    orientation  : sensor viewing geometry (LOS azimuth, incidence)
    """
    x: np.ndarray
    amplitude: np.ndarray
    orientation: Orientation
    name: str = "observation"

    def __post_init__(self) -> None:
        x = np.array(self.x, dtype=float)
        amp = np.array(self.amplitude, dtype=float)
        if x.ndim != 1 or amp.ndim != 1:
            raise ValueError("x and amplitude must be 1D")
        if x.size != amp.size:
            raise DimensionMismatch(
                f"positions and amplitudes must have the same length. "
                f"Got len(x)={x.size} and len(amplitude)={amp.size}."
            )
        if x.size == 0:
            raise ValueError("an observation needs at least one point")
        if not isinstance(self.orientation, Orientation):
            raise TypeError("orientation must be an Orientation")
        x.setflags(write=False)
        amp.setflags(write=False)
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "amplitude", amp)

    def __len__(self) -> int:
        return int(self.x.size)
