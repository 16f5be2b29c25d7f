# src/slbl_insar/calibration/metrics.py
from __future__ import annotations
import numpy as np

from ..errors import DimensionMismatch


def rmse(prediction: np.ndarray, observation: np.ndarray) -> float:
    """
    Root-mean-square error sqrt(mean((p - o)^2)).

    Both inputs must be 1D with the same length.
    """
    p = np.asarray(prediction, dtype=float).reshape(-1)
    o = np.asarray(observation, dtype=float).reshape(-1)
    if p.size != o.size:
        raise DimensionMismatch(f"prediction length {p.size} != observation length {o.size}")
    if p.size == 0:
        raise ValueError("rmse of empty sequences is undefined")
    return float(np.sqrt(np.mean((p - o) ** 2)))
