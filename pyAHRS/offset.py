"""
Gyroscope offset correction.

Detects when the gyroscope has been stationary for a while and slowly learns
its offset (bias) with a first order low pass filter. The estimate is never
updated while the sensor is moving.
"""

import logging
import math

from pyAHRS.quaternion import Vector3D, vector_zero

logger = logging.getLogger(__name__)

CUTOFF_FREQUENCY = 0.02  # Hz
TIMEOUT          = 5     # seconds
THRESHOLD        = 3.0   # degrees per second


class Offset:
    """
    Gyroscope offset tracker.

    Initialization:
      sample_rate : sample rate of the gyroscope in Hz

    Example:
    >>> offset = Offset(sample_rate=200)
    >>> gyr = offset.update(gyr)   # corrected gyroscope in degrees/s
    """

    def __init__(self, sample_rate: float):
        if sample_rate <= 0:
            raise ValueError(f"Sample rate must be greater than zero, got {sample_rate}")
        self.sample_rate = sample_rate
        self.filter_coefficient = 2.0 * math.pi * CUTOFF_FREQUENCY * (1.0 / sample_rate)
        self.timeout = int(TIMEOUT * sample_rate)
        self.reset()

    def reset(self):
        self._timer = 0
        self._offset = vector_zero()

    @property
    def offset(self) -> Vector3D:
        """current gyroscope offset estimate in degrees/s"""
        return Vector3D(self._offset)

    @property
    def timer(self) -> int:
        """number of consecutive stationary samples, saturates at timeout"""
        return self._timer

    def update(self, gyroscope: Vector3D) -> Vector3D:
        """
        Update the offset estimate and return the corrected gyroscope.
        gyroscope : Vector3D in degrees/s
        """
        gyroscope = gyroscope - self._offset

        # Reset timer if gyroscope not stationary
        if abs(gyroscope.x) > THRESHOLD or abs(gyroscope.y) > THRESHOLD or abs(gyroscope.z) > THRESHOLD:
            self._timer = 0
            return gyroscope

        # Increment timer while gyroscope stationary
        if self._timer < self.timeout:
            self._timer += 1
            if self._timer == self.timeout:
                logger.debug("Gyroscope stationary for %d samples, learning offset", self.timeout)
            return gyroscope

        # Adjust offset if timer has elapsed
        self._offset = self._offset + gyroscope * self.filter_coefficient
        return gyroscope
