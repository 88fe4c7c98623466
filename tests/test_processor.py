import numpy as np
import pytest

from pyAHRS.axes import AxesAlignment
from pyAHRS.calibration import InertialCalibration
from pyAHRS.processor import SensorProcessor
from pyAHRS.quaternion import Vector3D

SAMPLE_RATE = 100


def test_gyroscope_offset_is_learned():
    imu = SensorProcessor(SAMPLE_RATE)

    for _ in range(60 * SAMPLE_RATE):
        imu.update(gyr=(1.0, -0.5, 0.25), acc=(0.0, 0.0, 1.0))

    offset = imu.offset.offset
    assert abs(offset.x - 1.0) < 0.01
    assert abs(offset.y + 0.5) < 0.01
    assert abs(offset.z - 0.25) < 0.01
    assert imu.is_ready
    euler = imu.euler
    assert abs(euler.x) < 0.1
    assert abs(euler.y) < 0.1


def test_upside_down_mounting():
    imu = SensorProcessor(SAMPLE_RATE, alignment="PXNYNZ")
    assert imu.alignment is AxesAlignment.PXNYNZ

    for _ in range(4 * SAMPLE_RATE):
        q = imu.update(gyr=(0.0, 0.0, 0.0), acc=(0.0, 0.0, -1.0))

    euler = imu.euler
    assert abs(euler.x) < 0.1
    assert abs(euler.y) < 0.1
    assert abs(q.norm - 1.0) < 1e-9


def test_calibration_is_applied():
    accelerometer_calibration = InertialCalibration(
        sensitivity=(2.0, 2.0, 2.0),
        offset=(0.0, 0.0, 0.5),
    )
    imu = SensorProcessor(SAMPLE_RATE, gain=0.0, accelerometer_calibration=accelerometer_calibration)
    imu.update(gyr=(0.0, 0.0, 0.0), acc=(0.0, 0.0, 1.0))

    # (1.0 - 0.5) * 2 is exactly 1 g, nothing left once gravity is removed
    assert imu.ahrs.linear_acceleration.norm < 1e-12
    assert imu.is_ready
    assert not imu.flags.initialising


def test_magnetometer_path():
    imu = SensorProcessor(SAMPLE_RATE)
    for _ in range(4 * SAMPLE_RATE):
        imu.update(gyr=(0.0, 0.0, 0.0), acc=(0.0, 0.0, 1.0), mag=np.array([0.0, -1.0, -0.5]))

    # field along -y of a level NWU sensor, the sensor faces west
    assert abs(imu.euler.z - 90.0) < 0.1
    assert not imu.ahrs.magnetometer_ignored


def test_reset():
    imu = SensorProcessor(SAMPLE_RATE)
    for _ in range(10 * SAMPLE_RATE):
        imu.update(gyr=(1.0, 0.0, 0.0), acc=(0.0, 0.0, 1.0))
    assert imu.is_ready

    imu.reset()
    assert not imu.is_ready
    assert imu.offset.timer == 0
    assert imu.offset.offset == Vector3D(0.0, 0.0, 0.0)
    assert imu.quaternion.w == 1.0


def test_invalid_sample_rate():
    with pytest.raises(ValueError):
        SensorProcessor(0)
