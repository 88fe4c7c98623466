"""
Sensor calibration models.

Inertial calibration (accelerometer/gyroscope):
    calibrated = misalignment @ ((raw - offset) * sensitivity)

Magnetometer calibration:
    calibrated = soft_iron @ (raw - hard_iron)

Each sensor owns its own model instance, nothing here is shared between sensors.
"""

from dataclasses import dataclass, field
import numpy as np

from pyAHRS.quaternion import Vector3D, vector_ones, vector_zero, identity_matrix
from pyAHRS.utilities import matrix_multiply_vector


def _to_vector3d(value) -> Vector3D:
    if isinstance(value, Vector3D):
        return Vector3D(value)
    if isinstance(value, (list, tuple, np.ndarray)) and len(value) == 3:
        return Vector3D(value)
    raise TypeError(f"Expected Vector3D or length-3 array-like, got {type(value)}")


def _to_matrix3(value) -> np.ndarray:
    arr = np.asarray(value, dtype=float)
    if arr.shape == (9,):
        arr = arr.reshape(3, 3)
    if arr.shape != (3, 3):
        raise ValueError(f"Expected 3x3 matrix, got shape {arr.shape}")
    return arr


def calibrate_inertial(raw: Vector3D, misalignment=None, sensitivity=None, offset=None) -> Vector3D:
    """Gyroscope and accelerometer calibration model, omitted terms are identity."""
    if misalignment is None:
        misalignment = identity_matrix()
    if sensitivity is None:
        sensitivity = vector_ones()
    if offset is None:
        offset = vector_zero()
    return matrix_multiply_vector(misalignment, (raw - offset) * sensitivity)


def calibrate_magnetic(raw: Vector3D, soft_iron=None, hard_iron=None) -> Vector3D:
    """Magnetometer calibration model, omitted terms are identity."""
    if soft_iron is None:
        soft_iron = identity_matrix()
    if hard_iron is None:
        hard_iron = vector_zero()
    return matrix_multiply_vector(soft_iron, raw - hard_iron)


@dataclass
class InertialCalibration:
    """
    Calibration model for accelerometer or gyroscope.

    Defaults are identity calibration:
    - misalignment = I
    - sensitivity = (1, 1, 1)
    - offset = (0, 0, 0)
    """

    misalignment: np.ndarray = field(default_factory=identity_matrix)
    sensitivity: Vector3D = field(default_factory=vector_ones)
    offset: Vector3D = field(default_factory=vector_zero)

    def __post_init__(self):
        self.misalignment = _to_matrix3(self.misalignment)
        self.sensitivity = _to_vector3d(self.sensitivity)
        self.offset = _to_vector3d(self.offset)

    def apply(self, raw) -> Vector3D:
        return calibrate_inertial(_to_vector3d(raw), self.misalignment, self.sensitivity, self.offset)


@dataclass
class MagnetometerCalibration:
    """
    Calibration model for magnetometer.

    Defaults are identity calibration:
    - soft_iron = I
    - hard_iron = (0, 0, 0)
    """

    soft_iron: np.ndarray = field(default_factory=identity_matrix)
    hard_iron: Vector3D = field(default_factory=vector_zero)

    def __post_init__(self):
        self.soft_iron = _to_matrix3(self.soft_iron)
        self.hard_iron = _to_vector3d(self.hard_iron)

    def apply(self, raw) -> Vector3D:
        return calibrate_magnetic(_to_vector3d(raw), self.soft_iron, self.hard_iron)
