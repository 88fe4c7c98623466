"""
Earth axes conventions.

Every convention dependent sign used by the AHRS and the compass lives in
CONVENTION_RULES. Callers look the rules up once and keep them.

    NWU: x North, y West, z Up
    ENU: x East,  y North, z Up
    NED: x North, y East, z Down
"""

from dataclasses import dataclass
from enum import Enum
import math
from typing import Callable

from pyAHRS.quaternion import Quaternion, Vector3D


class Convention(Enum):
    NWU = "NWU"
    ENU = "ENU"
    NED = "NED"

    @classmethod
    def parse(cls, value) -> "Convention":
        """Accept a Convention or its (case insensitive) name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise ValueError(f"Unknown convention {value!r}, expected one of NWU, ENU, NED")


def _half_gravity_up(q: Quaternion) -> Vector3D:
    # third column of transposed rotation matrix scaled by 0.5
    return Vector3D(
        q.x * q.z - q.w * q.y,
        q.y * q.z + q.w * q.x,
        q.w * q.w - 0.5 + q.z * q.z,
    )


def _half_gravity_down(q: Quaternion) -> Vector3D:
    # third column of transposed rotation matrix scaled by -0.5
    return Vector3D(
        q.w * q.y - q.x * q.z,
        -(q.y * q.z + q.w * q.x),
        0.5 - q.w * q.w - q.z * q.z,
    )


def _half_magnetic_nwu(q: Quaternion) -> Vector3D:
    # second column of transposed rotation matrix scaled by 0.5
    return Vector3D(
        q.x * q.y + q.w * q.z,
        q.w * q.w - 0.5 + q.y * q.y,
        q.y * q.z - q.w * q.x,
    )


def _half_magnetic_enu(q: Quaternion) -> Vector3D:
    # first column of transposed rotation matrix scaled by -0.5
    return Vector3D(
        0.5 - q.w * q.w - q.x * q.x,
        q.w * q.z - q.x * q.y,
        -(q.x * q.z + q.w * q.y),
    )


def _half_magnetic_ned(q: Quaternion) -> Vector3D:
    # second column of transposed rotation matrix scaled by -0.5
    return Vector3D(
        -(q.x * q.y + q.w * q.z),
        0.5 - q.w * q.w - q.y * q.y,
        q.w * q.x - q.y * q.z,
    )


def _heading_west_north(west: Vector3D, north: Vector3D) -> float:
    return math.atan2(west.x, north.x)


def _heading_north_east(west: Vector3D, north: Vector3D) -> float:
    # east is -west
    return math.atan2(north.x, -west.x)


@dataclass(frozen=True)
class ConventionRules:
    """
    Convention dependent formulas.

    half_gravity:  predicted gravity direction in the sensor frame, scaled by 0.5
    half_magnetic: predicted magnetic field direction in the sensor frame, scaled by 0.5
    up_sign:       +1 if the z axis points up, -1 if it points down
    heading:       heading in radians from the horizontal west and north axes
    """

    convention: Convention
    half_gravity: Callable[[Quaternion], Vector3D]
    half_magnetic: Callable[[Quaternion], Vector3D]
    up_sign: float
    heading: Callable[[Vector3D, Vector3D], float]


CONVENTION_RULES = {
    Convention.NWU: ConventionRules(Convention.NWU, _half_gravity_up,   _half_magnetic_nwu,  1.0, _heading_west_north),
    Convention.ENU: ConventionRules(Convention.ENU, _half_gravity_up,   _half_magnetic_enu,  1.0, _heading_north_east),
    Convention.NED: ConventionRules(Convention.NED, _half_gravity_down, _half_magnetic_ned, -1.0, _heading_west_north),
}


def rules_for(convention) -> ConventionRules:
    return CONVENTION_RULES[Convention.parse(convention)]
