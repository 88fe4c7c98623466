"""
Per sensor processing chain, one instance per physical IMU:

    raw sample -> calibration -> axes alignment -> offset correction (gyroscope) -> AHRS

Sensor Processor
Example:
>>> from pyAHRS.processor import SensorProcessor
>>> imu = SensorProcessor(sample_rate=200, gyroscope_range=2000.0, acceleration_rejection=30.0)
>>> q = imu.update(gyr=(0.1, -0.2, 0.05), acc=(0.0, 0.0, 1.0))
>>> imu.euler
"""

import logging
from typing import Optional

from pyAHRS.ahrs import Ahrs, AhrsFlags, AhrsSettings
from pyAHRS.axes import AxesAlignment, axes_swap
from pyAHRS.calibration import InertialCalibration, MagnetometerCalibration
from pyAHRS.offset import Offset
from pyAHRS.quaternion import Quaternion, Vector3D

logger = logging.getLogger(__name__)


class SensorProcessor:
    """
    Calibrates, aligns and fuses the samples of one IMU sampled at a fixed rate.

    sample_rate               : Hz, sets the AHRS time step and the offset tracker timing
    settings                  : AhrsSettings, keywords override individual fields
    gyroscope_calibration     : InertialCalibration, default identity
    accelerometer_calibration : InertialCalibration, default identity
    magnetometer_calibration  : MagnetometerCalibration, default identity
    alignment                 : AxesAlignment from sensor to body axes, default +X+Y+Z
    """

    def __init__(self, sample_rate: float, settings: Optional[AhrsSettings] = None,
                 gyroscope_calibration: Optional[InertialCalibration] = None,
                 accelerometer_calibration: Optional[InertialCalibration] = None,
                 magnetometer_calibration: Optional[MagnetometerCalibration] = None,
                 alignment=AxesAlignment.PXPYPZ, **kwargs):
        self.offset = Offset(sample_rate)
        self.sample_rate = sample_rate
        self.dt = 1.0 / sample_rate
        self.gyroscope_calibration = gyroscope_calibration or InertialCalibration()
        self.accelerometer_calibration = accelerometer_calibration or InertialCalibration()
        self.magnetometer_calibration = magnetometer_calibration or MagnetometerCalibration()
        self.alignment = AxesAlignment.parse(alignment)
        self.ahrs = Ahrs(settings, dt=self.dt, **kwargs)
        self._ready = False

    def reset(self):
        self.offset.reset()
        self.ahrs.reset()
        self._ready = False

    def _align(self, sample: Vector3D) -> Vector3D:
        if self.alignment is AxesAlignment.PXPYPZ:
            return sample
        return axes_swap(sample, self.alignment)

    def update(self, gyr, acc, mag=None) -> Quaternion:
        """
        Process one sample.
        gyr : gyroscope in degrees/s, Vector3D or length-3 array-like
        acc : accelerometer in g, Vector3D or length-3 array-like
        mag : magnetometer in arbitrary units, optional
        """
        gyroscope = self._align(self.gyroscope_calibration.apply(gyr))
        accelerometer = self._align(self.accelerometer_calibration.apply(acc))

        gyroscope = self.offset.update(gyroscope)

        if mag is None:
            q = self.ahrs.update_no_magnetometer(gyroscope, accelerometer, self.dt)
        else:
            magnetometer = self._align(self.magnetometer_calibration.apply(mag))
            q = self.ahrs.update(gyroscope, accelerometer, magnetometer, self.dt)

        ready = not self.ahrs.initialising
        if ready and not self._ready:
            logger.info("Sensor orientation available after initialisation")
        self._ready = ready

        return q

    @property
    def is_ready(self) -> bool:
        """True once the AHRS finished its initialisation"""
        return not self.ahrs.initialising

    @property
    def quaternion(self) -> Quaternion:
        return self.ahrs.quaternion

    @property
    def euler(self) -> Vector3D:
        return self.ahrs.euler

    @property
    def flags(self) -> AhrsFlags:
        return self.ahrs.flags
