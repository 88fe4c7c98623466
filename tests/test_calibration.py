import numpy as np
import pytest

from pyAHRS.quaternion import Vector3D, identity_matrix, vector_ones, vector_zero
from pyAHRS.calibration import (
    InertialCalibration,
    MagnetometerCalibration,
    calibrate_inertial,
    calibrate_magnetic,
)


def _assert_vector(actual: Vector3D, expected, tol=1e-12):
    for a, e in zip(actual, expected):
        assert abs(a - e) < tol


def test_identity_parameters_leave_samples_unchanged():
    rng = np.random.default_rng(3)
    for _ in range(20):
        raw = Vector3D(rng.normal(scale=100.0, size=3))
        _assert_vector(calibrate_inertial(raw, identity_matrix(), vector_ones(), vector_zero()), raw)
        _assert_vector(calibrate_magnetic(raw, identity_matrix(), vector_zero()), raw)


def test_omitted_parameters_are_identity():
    raw = Vector3D(-0.1, 0.2, 0.3)
    _assert_vector(calibrate_inertial(raw), raw)
    _assert_vector(calibrate_magnetic(raw), raw)
    _assert_vector(InertialCalibration().apply(raw), raw)
    _assert_vector(MagnetometerCalibration().apply(raw), raw)


def test_inertial_order_of_operations():
    # offset removed first, then sensitivity, then misalignment
    misalignment = np.array([
        [1.0, 0.1, 0.0],
        [0.0, 1.0, 0.2],
        [0.0, 0.0, 1.0],
    ])
    gyroscope = InertialCalibration(misalignment, Vector3D(2.0, 3.0, 4.0), Vector3D(1.0, 1.0, 1.0))

    # (2,3,4) - 1 = (1,2,3), scaled (2,6,12), skewed (2.6,8.4,12)
    _assert_vector(gyroscope.apply(Vector3D(2.0, 3.0, 4.0)), (2.6, 8.4, 12.0))


def test_hard_iron_then_soft_iron():
    out = calibrate_magnetic(
        Vector3D(2.0, 4.0, 8.0),
        soft_iron=np.diag([2.0, 3.0, 4.0]),
        hard_iron=Vector3D(1.0, 2.0, 4.0),
    )
    _assert_vector(out, (2.0, 6.0, 16.0))


def test_parameters_from_array_likes():
    accelerometer = InertialCalibration(
        misalignment=[1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0],  # row major
        sensitivity=(2.0, 2.0, 2.0),
        offset=[0.5, 0.5, 0.5],
    )
    _assert_vector(accelerometer.apply(np.array([1.0, 1.5, 2.5])), (1.0, 2.0, 4.0))

    magnetometer = MagnetometerCalibration(soft_iron=np.eye(3).tolist(), hard_iron=(10.0, 0.0, -10.0))
    _assert_vector(magnetometer.apply([10.0, 0.0, -10.0]), (0.0, 0.0, 0.0))


def test_bad_parameters():
    with pytest.raises(ValueError):
        InertialCalibration(misalignment=np.eye(2))
    with pytest.raises(TypeError):
        InertialCalibration(sensitivity=(1.0, 1.0))
    with pytest.raises(ValueError):
        MagnetometerCalibration(soft_iron=np.ones((3, 4)))
    with pytest.raises(TypeError):
        MagnetometerCalibration(hard_iron="origin")


def test_each_sensor_owns_its_parameters():
    gyroscope = InertialCalibration()
    accelerometer = InertialCalibration()
    gyroscope.offset.x = 5.0
    gyroscope.misalignment[0, 0] = 2.0
    assert accelerometer.offset.x == 0.0
    assert accelerometer.misalignment[0, 0] == 1.0
