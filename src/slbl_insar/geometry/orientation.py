# src/slbl_insar/geometry/orientation.py
from __future__ import annotations

from dataclasses import dataclass
import math

from ..errors import InvalidOrientation
from .vectors import Vector3, TWO_PI


@dataclass(frozen=True)
class Orientation:
    """
    Direction of a reference line in 3D.

    azimuth   : map direction in [0, 2pi), counted from east toward north
    incidence : angle from the downward vertical, in [0, pi]

    For a section, azimuth is the direction of the increasing section axis and
    incidence is pi/2 (horizontal line). For a radar sensor, azimuth is the LOS
    azimuth (look direction) and incidence the LOS incidence.
    """
    azimuth: float
    incidence: float = 0.5 * math.pi

    def __post_init__(self) -> None:
        az = float(self.azimuth)
        inc = float(self.incidence)
        if not (math.isfinite(az) and 0.0 <= az < TWO_PI):
            raise InvalidOrientation(f"azimuth must be in [0, 2pi), got {az}")
        if not (math.isfinite(inc) and 0.0 <= inc <= math.pi):
            raise InvalidOrientation(f"incidence must be in [0, pi], got {inc}")
        object.__setattr__(self, "azimuth", az)
        object.__setattr__(self, "incidence", inc)

    @classmethod
    def from_deg(cls, azimuth: float, incidence: float = 90.0) -> "Orientation":
        return cls(math.radians(azimuth), math.radians(incidence))

    @property
    def dip(self) -> float:
        """Dip of the look direction, in [-pi/2, pi/2] (negative pointing down)."""
        return self.incidence - 0.5 * math.pi

    def look_vector(self) -> Vector3:
        """Unit vector pointing along the line, from sensor to ground."""
        return Vector3(
            math.cos(self.azimuth) * math.sin(self.incidence),
            math.sin(self.azimuth) * math.sin(self.incidence),
            -math.cos(self.incidence),
        )

    def to_ground_vector(self) -> Vector3:
        """Unit vector from ground toward the sensor (opposite of `look_vector`)."""
        return self.look_vector().scale(-1.0)
