# src/slbl_insar/section/models.py
from __future__ import annotations

from dataclasses import dataclass, field
import numpy as np

from ..errors import DimensionMismatch
from ..geometry import Orientation


def _as_1d(values, name: str) -> np.ndarray:
    arr = np.array(values, dtype=float)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be 1D, got shape {arr.shape}")
    return arr


def finite_difference_slope(x: np.ndarray, z: np.ndarray) -> np.ndarray:
    """
    Slope angle (radians) of z along x.

    Centered differences inside the profile, one-sided at both ends.
    """
    x = np.asarray(x, dtype=float)
    z = np.asarray(z, dtype=float)
    if x.shape != z.shape:
        raise DimensionMismatch(f"x and z must match, got {x.shape} vs {z.shape}")
    if x.size < 2:
        raise ValueError("at least two points are needed to compute a slope")

    grad = np.empty_like(z)
    grad[0] = (z[1] - z[0]) / (x[1] - x[0])
    grad[-1] = (z[-1] - z[-2]) / (x[-1] - x[-2])
    grad[1:-1] = (z[2:] - z[:-2]) / (x[2:] - x[:-2])
    return np.arctan(grad)


@dataclass(frozen=True, eq=False)
class TopographicProfile:
    """
    Ground surface along a section.

    x : (N,) strictly increasing positions along the section
    z : (N,) ground elevation at each position
    orientation : optional section orientation (azimuth of the increasing x axis)
    """
    x: np.ndarray
    z: np.ndarray
    orientation: Orientation | None = None
    name: str = "topography"

    def __post_init__(self) -> None:
        x = _as_1d(self.x, "x")
        z = _as_1d(self.z, "z")
        if x.size != z.size:
            raise DimensionMismatch(
                f"positions and elevations must have the same length. "
                f"Got len(x)={x.size} and len(z)={z.size}."
            )
        if x.size < 2:
            raise ValueError("a topographic profile needs at least two points")
        if not np.all(np.diff(x) > 0):
            raise ValueError("positions must be strictly increasing")

        x.setflags(write=False)
        z.setflags(write=False)
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "z", z)

    def __len__(self) -> int:
        return int(self.x.size)

    @property
    def n_points(self) -> int:
        return int(self.x.size)

    @property
    def main_direction(self) -> float:
        """+1 if the ground descends toward increasing x, -1 otherwise (flat included)."""
        return -1.0 if self.z[-1] - self.z[0] >= 0.0 else 1.0

    def elevation_at(self, positions: np.ndarray) -> np.ndarray:
        """Ground elevation at arbitrary positions, clamped outside the profile."""
        return np.interp(np.asarray(positions, dtype=float), self.x, self.z)

    def as_surface(self) -> "SurfaceProfile":
        return SurfaceProfile(self.x, self.z.copy(), name=self.name)


class SurfaceProfile:
    """
    Elevation sequence aligned index-for-index with a topographic profile.

    Represents either the topography itself or a derived failure surface.
    The slope (radians) is computed on demand and cached; assigning new
    elevations drops the cache.
    """

    def __init__(self, x: np.ndarray, z: np.ndarray, name: str = "surface"):
        x = _as_1d(x, "x")
        z = _as_1d(z, "z")
        if x.size != z.size:
            raise DimensionMismatch(
                f"surface must have one elevation per position. "
                f"Got len(x)={x.size} and len(z)={z.size}."
            )
        x.setflags(write=False)
        self._x = x
        self._z = z
        self._slope: np.ndarray | None = None
        self.name = name

    @classmethod
    def on_topography(cls, topography: TopographicProfile, z: np.ndarray, name: str = "surface") -> "SurfaceProfile":
        z = _as_1d(z, "z")
        if z.size != topography.n_points:
            raise DimensionMismatch(
                f"surface length {z.size} does not match topography length {topography.n_points}"
            )
        return cls(topography.x, z, name=name)

    def __len__(self) -> int:
        return int(self._z.size)

    def __repr__(self) -> str:
        return f"SurfaceProfile(name={self.name!r}, n_points={len(self)})"

    @property
    def x(self) -> np.ndarray:
        return self._x

    @property
    def z(self) -> np.ndarray:
        view = self._z.view()
        view.setflags(write=False)
        return view

    @z.setter
    def z(self, values: np.ndarray) -> None:
        z = _as_1d(values, "z")
        if z.size != self._x.size:
            raise DimensionMismatch(f"expected {self._x.size} elevations, got {z.size}")
        self._z = z
        self._slope = None

    @property
    def has_slope(self) -> bool:
        return self._slope is not None

    @property
    def slope(self) -> np.ndarray:
        if self._slope is None:
            self._slope = finite_difference_slope(self._x, self._z)
        return self._slope

    def copy(self, name: str | None = None) -> "SurfaceProfile":
        out = SurfaceProfile(self._x, self._z.copy(), name=self.name if name is None else name)
        if self._slope is not None:
            out._slope = self._slope.copy()
        return out

    def check_aligned(self, topography: TopographicProfile) -> None:
        if len(self) != topography.n_points:
            raise DimensionMismatch(
                f"surface {self.name!r} has {len(self)} points, topography has {topography.n_points}"
            )

    @staticmethod
    def minimum(first: "SurfaceProfile", second: "SurfaceProfile", name: str | None = None) -> "SurfaceProfile":
        """Element-wise lowest of two surfaces."""
        _check_same_grid(first, second)
        return SurfaceProfile(first.x, np.minimum(first.z, second.z),
                              name=name or f"MIN_{first.name}_{second.name}")

    @staticmethod
    def maximum(first: "SurfaceProfile", second: "SurfaceProfile", name: str | None = None) -> "SurfaceProfile":
        """Element-wise highest of two surfaces."""
        _check_same_grid(first, second)
        return SurfaceProfile(first.x, np.maximum(first.z, second.z),
                              name=name or f"MAX_{first.name}_{second.name}")


def _check_same_grid(first: SurfaceProfile, second: SurfaceProfile) -> None:
    if len(first) != len(second):
        raise DimensionMismatch(f"surfaces have {len(first)} and {len(second)} points")
    if not np.array_equal(first.x, second.x):
        raise ValueError("surfaces are not defined on the same positions")


@dataclass
class SurfaceArena:
    """
    Failure surfaces of one section, addressed by stable integer handles.

    Handles are never reused; removing a surface leaves a gap.
    """
    topography: TopographicProfile
    _surfaces: dict[int, SurfaceProfile] = field(default_factory=dict, repr=False)
    _next_handle: int = field(default=0, repr=False)

    def add(self, surface: SurfaceProfile) -> int:
        surface.check_aligned(self.topography)
        handle = self._next_handle
        self._surfaces[handle] = surface
        self._next_handle += 1
        return handle

    def get(self, handle: int) -> SurfaceProfile:
        try:
            return self._surfaces[handle]
        except KeyError:
            raise KeyError(f"no surface registered under handle {handle}") from None

    def remove(self, handle: int) -> SurfaceProfile:
        surface = self.get(handle)
        del self._surfaces[handle]
        return surface

    def handles(self) -> list[int]:
        return sorted(self._surfaces)

    def __len__(self) -> int:
        return len(self._surfaces)

    def __contains__(self, handle: int) -> bool:
        return handle in self._surfaces

    def add_minimum(self, first: int, second: int) -> int:
        return self.add(SurfaceProfile.minimum(self.get(first), self.get(second)))

    def add_maximum(self, first: int, second: int) -> int:
        return self.add(SurfaceProfile.maximum(self.get(first), self.get(second)))
