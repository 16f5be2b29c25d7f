# src/slbl_insar/geometry/vectors.py
from __future__ import annotations

from dataclasses import dataclass
import math
import numpy as np

from ..errors import InvalidOrientation

HALF_PI: float = 0.5 * math.pi
TWO_PI: float = 2.0 * math.pi


@dataclass
class Vector2:
    """
    Vector in the vertical plane of a section.

    Components
    ----------
    x : horizontal component, positive toward increasing section position
    y : vertical component, positive upward

    The angle is a slope in [-pi/2, pi/2] and does not carry the facing
    direction; use `is_facing_right` for that.
    """
    x: float
    y: float

    def __post_init__(self) -> None:
        self.x = float(self.x)
        self.y = float(self.y)

    @classmethod
    def from_rad(cls, slope: float, facing_right: bool = True) -> "Vector2":
        """Unit vector from a slope angle (radians) and a facing direction."""
        if not -HALF_PI <= slope <= HALF_PI:
            raise InvalidOrientation(f"slope must be in [-pi/2, pi/2], got {slope}")
        if slope == HALF_PI:
            return cls(0.0, 1.0)
        if slope == -HALF_PI:
            return cls(0.0, -1.0)
        sign = 1.0 if facing_right else -1.0
        return cls(sign * abs(math.cos(slope)), math.sin(slope))

    @classmethod
    def from_deg(cls, slope: float, facing_right: bool = True) -> "Vector2":
        return cls.from_rad(math.radians(slope), facing_right)

    @property
    def amplitude(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y)

    def angle_rad(self) -> float:
        # zero vector maps to +pi/2
        if self.x != 0.0:
            return math.atan(self.y / self.x)
        return HALF_PI if self.y >= 0.0 else -HALF_PI

    def angle_deg(self) -> float:
        return math.degrees(self.angle_rad())

    def is_facing_right(self) -> bool:
        return self.x >= 0.0

    def is_facing_down(self) -> bool:
        return self.y < 0.0

    def unit_components(self) -> tuple[float, float]:
        amp = self.amplitude
        if amp == 0.0:
            return 0.0, 0.0
        return self.x / amp, self.y / amp

    def normalize(self) -> "Vector2":
        self.x, self.y = self.unit_components()
        return self

    def unit(self) -> "Vector2":
        return Vector2(*self.unit_components())

    def scale(self, factor: float) -> "Vector2":
        self.x *= factor
        self.y *= factor
        return self

    def with_norm(self, norm: float) -> "Vector2":
        ux, uy = self.unit_components()
        self.x = ux * norm
        self.y = uy * norm
        return self

    def copy(self) -> "Vector2":
        return Vector2(self.x, self.y)

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=float)


def _azimuth(east: float, north: float) -> float:
    """
    Azimuth in [0, 2pi), counted from the east axis toward the north axis.

    Axis directions are resolved first, then each open quadrant uses atan
    plus the quadrant offset.
    """
    if east == 0.0 and north == 0.0:
        return 0.0
    if north == 0.0:
        return 0.0 if east > 0.0 else math.pi
    if east == 0.0:
        return HALF_PI if north > 0.0 else 3.0 * HALF_PI

    ratio = math.atan(north / east)
    if east > 0.0 and north > 0.0:
        return ratio
    if east < 0.0:
        return math.pi + ratio
    return TWO_PI + ratio


def _dip(horizontal: float, up: float) -> float:
    if horizontal != 0.0:
        return math.atan(up / horizontal)
    if up > 0.0:
        return HALF_PI
    if up < 0.0:
        return -HALF_PI
    return 0.0


@dataclass
class Vector3:
    """
    Geographic vector (east, north, up).

    Angles
    ------
    azimuth : [0, 2pi), from east toward north
    dip     : [-pi/2, pi/2], positive upward
    """
    east: float
    north: float
    up: float

    def __post_init__(self) -> None:
        self.east = float(self.east)
        self.north = float(self.north)
        self.up = float(self.up)

    @classmethod
    def from_rad(cls, azimuth: float, dip: float) -> "Vector3":
        """
        Unit vector from (azimuth, dip) in radians.

        The vertical-to-horizontal ratio is tan(dip); the horizontal magnitude
        follows from the unit-length constraint and is split by azimuth.
        """
        if not 0.0 <= azimuth < TWO_PI:
            raise InvalidOrientation(f"azimuth must be in [0, 2pi), got {azimuth}")
        if not -HALF_PI <= dip <= HALF_PI:
            raise InvalidOrientation(f"dip must be in [-pi/2, pi/2], got {dip}")

        if dip == HALF_PI:
            return cls(0.0, 0.0, 1.0)
        if dip == -HALF_PI:
            return cls(0.0, 0.0, -1.0)

        ratio = math.tan(dip)
        horizontal = 1.0 / math.sqrt(1.0 + ratio * ratio)
        return cls(
            horizontal * math.cos(azimuth),
            horizontal * math.sin(azimuth),
            ratio * horizontal,
        )

    @classmethod
    def from_deg(cls, azimuth: float, dip: float) -> "Vector3":
        return cls.from_rad(math.radians(azimuth), math.radians(dip))

    @classmethod
    def from_vertical_section(cls, section_vec: Vector2, azimuth: float) -> "Vector3":
        """
        Lift a section vector into 3D given the section azimuth (radians),
        i.e. the map direction of the increasing section axis.
        """
        return cls(
            section_vec.x * math.cos(azimuth),
            section_vec.x * math.sin(azimuth),
            section_vec.y,
        )

    @property
    def amplitude(self) -> float:
        return math.sqrt(self.east ** 2 + self.north ** 2 + self.up ** 2)

    @property
    def horizontal(self) -> float:
        return math.hypot(self.east, self.north)

    def azimuth_rad(self) -> float:
        return _azimuth(self.east, self.north)

    def dip_rad(self) -> float:
        return _dip(self.horizontal, self.up)

    def angles_rad(self) -> tuple[float, float]:
        return self.azimuth_rad(), self.dip_rad()

    def angles_deg(self) -> tuple[float, float]:
        azimuth, dip = self.angles_rad()
        return math.degrees(azimuth), math.degrees(dip)

    def unit_components(self) -> tuple[float, float, float]:
        amp = self.amplitude
        if amp == 0.0:
            return 0.0, 0.0, 0.0
        return self.east / amp, self.north / amp, self.up / amp

    def normalize(self) -> "Vector3":
        self.east, self.north, self.up = self.unit_components()
        return self

    def scale(self, factor: float) -> "Vector3":
        self.east *= factor
        self.north *= factor
        self.up *= factor
        return self

    def with_norm(self, norm: float) -> "Vector3":
        ue, un, uu = self.unit_components()
        self.east, self.north, self.up = ue * norm, un * norm, uu * norm
        return self

    def inner(self, other: "Vector3") -> float:
        return self.east * other.east + self.north * other.north + self.up * other.up

    def project_onto(self, other: "Vector3") -> "Vector3":
        """Projection of this vector on the direction of `other` (not symmetric)."""
        direction = other.copy().normalize()
        return direction.scale(self.inner(direction))

    def copy(self) -> "Vector3":
        return Vector3(self.east, self.north, self.up)

    def to_array(self) -> np.ndarray:
        return np.array([self.east, self.north, self.up], dtype=float)


def section_to_geographic(vx: np.ndarray, vz: np.ndarray, azimuth: float) -> np.ndarray:
    """
    Batch version of `Vector3.from_vertical_section`.

    Parameters
    ----------
    vx, vz : (N,) section components
    azimuth : section azimuth in radians

    Returns
    -------
    (N, 3) array of (east, north, up)
    """
    vx = np.asarray(vx, dtype=float)
    vz = np.asarray(vz, dtype=float)
    if vx.shape != vz.shape:
        raise ValueError(f"vx and vz must have the same shape, got {vx.shape} vs {vz.shape}")
    return np.stack([vx * np.cos(azimuth), vx * np.sin(azimuth), vz], axis=-1)


def project_amplitudes(vx: np.ndarray, vz: np.ndarray, azimuth: float, target: Vector3) -> np.ndarray:
    """
    Inner product of every section vector (lifted to 3D) with `target`.

    With a unit `target`, this is the amplitude of each vector seen along
    that direction.
    """
    vec3 = section_to_geographic(vx, vz, azimuth)
    return vec3 @ target.to_array()


def angles_2d(vx: np.ndarray, vz: np.ndarray) -> np.ndarray:
    """Batch version of `Vector2.angle_rad`."""
    vx = np.asarray(vx, dtype=float)
    vz = np.asarray(vz, dtype=float)
    safe_x = np.where(vx != 0.0, vx, 1.0)
    vertical = np.where(vz >= 0.0, HALF_PI, -HALF_PI)
    return np.where(vx != 0.0, np.arctan(vz / safe_x), vertical)
