"""
Tilt compensated compass heading from accelerometer and magnetometer.
"""

from pyAHRS.convention import rules_for
from pyAHRS.quaternion import Vector3D, RAD2DEG


def calculate_heading(convention, accelerometer: Vector3D, magnetometer: Vector3D) -> float:
    '''
    Magnetic heading in degrees.
    convention    : Convention (or its name)
    accelerometer : Vector3D, any calibrated unit
    magnetometer  : Vector3D, any calibrated unit
    Neither vector may be zero and they may not be parallel.
    '''
    rules = rules_for(convention)
    up = accelerometer * rules.up_sign
    west = up.cross(magnetometer).normalized
    north = west.cross(up).normalized
    return rules.heading(west, north) * RAD2DEG
