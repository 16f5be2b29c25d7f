# src/slbl_insar/section/tridiag.py
from __future__ import annotations

import numpy as np

from ..errors import DimensionMismatch, SingularSystem


def solve_tridiagonal(
    lower: np.ndarray,
    diag: np.ndarray,
    upper: np.ndarray,
    rhs: np.ndarray,
) -> np.ndarray:
    """
    Solve A x = rhs for a tridiagonal A with the Thomas algorithm, O(n).

    Parameters
    ----------
    lower : (n-1,) sub-diagonal, lower[i] = A[i+1, i]
    diag  : (n,)   main diagonal
    upper : (n-1,) super-diagonal, upper[i] = A[i, i+1]
    rhs   : (n,)

    Inputs are not modified.
    """
    a = np.asarray(lower, dtype=float)
    b = np.array(diag, dtype=float)
    c = np.asarray(upper, dtype=float)
    d = np.array(rhs, dtype=float)

    n = b.size
    if n < 1:
        raise SingularSystem("empty tridiagonal system")
    if d.size != n:
        raise DimensionMismatch(f"rhs has {d.size} entries, expected {n}")
    if a.size != n - 1 or c.size != n - 1:
        raise DimensionMismatch(
            f"off-diagonals must have {n - 1} entries, got {a.size} (lower) and {c.size} (upper)"
        )

    # forward elimination
    for i in range(1, n):
        if b[i - 1] == 0.0:
            raise SingularSystem(f"zero pivot at row {i - 1}")
        factor = a[i - 1] / b[i - 1]
        b[i] -= factor * c[i - 1]
        d[i] -= factor * d[i - 1]

    if b[-1] == 0.0:
        raise SingularSystem(f"zero pivot at row {n - 1}")

    # back substitution
    x = np.empty(n, dtype=float)
    x[-1] = d[-1] / b[-1]
    for i in range(n - 2, -1, -1):
        x[i] = (d[i] - c[i] * x[i + 1]) / b[i]
    return x
