# src/slbl_insar/io/load_data.py
from __future__ import annotations
from pathlib import Path
import numpy as np

from slbl_insar.displacement import DispObservation, DispProfile
from slbl_insar.errors import DimensionMismatch
from slbl_insar.geometry import Orientation
from slbl_insar.section import SurfaceProfile, TopographicProfile

DELIMITER = ";"
FLOAT_FMT = "%.17g"


def _load_columns(path: str | Path, columns: tuple[str, ...]) -> list[np.ndarray]:
    """
    Read named columns of a `;`-delimited file with one header row.
    Extra columns are ignored.
    """
    path = Path(path)
    table = np.genfromtxt(path, delimiter=DELIMITER, names=True, dtype=float, encoding="utf-8")
    table = np.atleast_1d(table)
    names = table.dtype.names or ()
    missing = [c for c in columns if c not in names]
    if missing:
        raise ValueError(f"{path}: missing column(s) {missing}, found {list(names)}")
    out = [np.asarray(table[c], dtype=float) for c in columns]
    for c, arr in zip(columns, out):
        if not np.all(np.isfinite(arr)):
            raise ValueError(f"{path}: column {c!r} contains empty or non-numeric values")
    return out


def _save_columns(path: str | Path, columns: dict[str, np.ndarray]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = np.column_stack([np.asarray(v, dtype=float) for v in columns.values()])
    np.savetxt(path, data, delimiter=DELIMITER, header=DELIMITER.join(columns), comments="", fmt=FLOAT_FMT)
    return path


def load_topography(path: str | Path, x: str = "x", z: str = "z",
                    orientation: Orientation | None = None) -> TopographicProfile:
    """
    Expected columns:
      - x : position along the section (strictly increasing)
      - z : ground elevation
    """
    xs, zs = _load_columns(path, (x, z))
    return TopographicProfile(xs, zs, orientation=orientation, name=Path(path).stem)


def load_surface(path: str | Path, topography: TopographicProfile, x: str = "x", z: str = "z") -> SurfaceProfile:
    """Failure surface sampled on the topography positions."""
    xs, zs = _load_columns(path, (x, z))
    if xs.size != topography.n_points:
        raise DimensionMismatch(f"{path}: {xs.size} points, topography has {topography.n_points}")
    if not np.allclose(xs, topography.x):
        raise ValueError(f"{path}: positions do not match the topography")
    return SurfaceProfile.on_topography(topography, zs, name=Path(path).stem)


def load_observation(path: str | Path, orientation: Orientation,
                     x: str = "x", disp: str = "disp") -> DispObservation:
    """
    Expected columns:
      - x    : position along the section
      - disp : LOS displacement
    """
    xs, amp = _load_columns(path, (x, disp))
    return DispObservation(xs, amp, orientation, name=Path(path).stem)


def load_profile(path: str | Path) -> DispProfile:
    """Displacement profile with columns x, z (origins) and vx, vz (vectors)."""
    ox, oz, vx, vz = _load_columns(path, ("x", "z", "vx", "vz"))
    return DispProfile(ox, oz, vx, vz, name=Path(path).stem)


def save_profile(path: str | Path, profile: DispProfile) -> Path:
    return _save_columns(path, {"x": profile.origin_x, "z": profile.origin_z, "vx": profile.vx, "vz": profile.vz})


def save_surface(path: str | Path, surface: SurfaceProfile) -> Path:
    return _save_columns(path, {"x": surface.x, "z": surface.z})


def save_topography(path: str | Path, topography: TopographicProfile) -> Path:
    return _save_columns(path, {"x": topography.x, "z": topography.z})


def save_observation(path: str | Path, observation: DispObservation) -> Path:
    return _save_columns(path, {"x": observation.x, "disp": observation.amplitude})
