# src/slbl_insar/displacement/interp.py
from __future__ import annotations
import numpy as np
from scipy.interpolate import interp1d


def interp_linear_clamped(
    x_old: np.ndarray,
    y_old: np.ndarray,   # (N,) or (N, K)
    x_new: np.ndarray,
) -> np.ndarray:
    """
    Piecewise-linear resampling of y_old from x_old onto x_new.

    - x_old must be sorted ascending; repeated positions keep their first value
    - outside [x_old[0], x_old[-1]] the boundary value is returned (no extrapolation)

    Returns
    -------
    y_new : (M,) or (M, K)
    """
    x_old = np.asarray(x_old, float)
    y_old = np.asarray(y_old, float)
    x_new = np.asarray(x_new, float)

    if x_old.ndim != 1:
        raise ValueError("x_old must be 1D")
    if y_old.shape[0] != x_old.size:
        raise ValueError(f"y_old first dim {y_old.shape[0]} must match len(x_old)={x_old.size}")
    if x_old.size == 0:
        raise ValueError("cannot interpolate from an empty grid")
    if np.any(np.diff(x_old) < 0):
        raise ValueError("x_old must be sorted ascending")

    keep = np.concatenate([[True], np.diff(x_old) > 0])
    x_old = x_old[keep]
    y_old = y_old[keep]

    if x_old.size == 1:
        return np.repeat(y_old[:1], x_new.size, axis=0)

    f = interp1d(
        x_old, y_old, kind="linear", axis=0,
        bounds_error=False, fill_value=(y_old[0], y_old[-1]), assume_sorted=True,
    )
    return f(x_new)


def gradient_curve(control_points, n_points: int) -> np.ndarray:
    """
    Multiplier at each index 0..n_points-1 from (index, multiplier) control
    points, linear between control points and constant beyond them.
    """
    pts = sorted((float(i), float(m)) for i, m in control_points)
    if not pts:
        return np.ones(n_points)
    idx = np.array([p[0] for p in pts])
    mult = np.array([p[1] for p in pts])
    return interp_linear_clamped(idx, mult, np.arange(n_points, dtype=float))
