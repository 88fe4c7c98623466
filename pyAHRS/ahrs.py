"""
AHRS complementary filter with gain ramp and acceleration/magnetic rejection.

Gyroscope in degrees/s, accelerometer in g, magnetometer in arbitrary units.
Orientation is the quaternion describing the sensor relative to the Earth in
the configured convention (NWU, ENU or NED).

Gyroscope offset is not estimated here, correct the gyroscope with
pyAHRS.offset.Offset before calling update.
"""

from copy import copy
from dataclasses import dataclass, replace
import logging
import math
from typing import Optional

from pyAHRS.convention import Convention, rules_for
from pyAHRS.quaternion import Quaternion, Vector3D, GRAVITY, DEG2RAD, RAD2DEG
from pyAHRS.quaternion import identity_quaternion, vector_zero
from pyAHRS.utilities import asin, clamp, q2euler

logger = logging.getLogger(__name__)

INITIAL_GAIN          = 10.0
INITIALISATION_PERIOD = 3.0   # seconds
DISABLED              = math.inf


@dataclass(frozen=True)
class AhrsSettings:
    """
    convention              : Earth axes convention
    gain                    : steady state feedback gain, 0 disables feedback
    gyroscope_range         : gyroscope range in degrees/s, 0 disables angular rate recovery
    acceleration_rejection  : threshold in degrees, 0 disables acceleration rejection
    magnetic_rejection      : threshold in degrees, 0 disables magnetic rejection
    recovery_trigger_period : samples, 0 disables rejection altogether
    """

    convention: Convention = Convention.NWU
    gain: float = 0.5
    gyroscope_range: float = 0.0
    acceleration_rejection: float = 90.0
    magnetic_rejection: float = 90.0
    recovery_trigger_period: int = 0

    def __post_init__(self):
        object.__setattr__(self, "convention", Convention.parse(self.convention))
        for name in ("gain", "gyroscope_range", "acceleration_rejection", "magnetic_rejection"):
            value = float(getattr(self, name))
            if not value >= 0.0:
                raise ValueError(f"{name} must be zero or positive, got {value}")
            object.__setattr__(self, name, value)
        if int(self.recovery_trigger_period) != self.recovery_trigger_period or self.recovery_trigger_period < 0:
            raise ValueError(f"recovery_trigger_period must be a non-negative integer, got {self.recovery_trigger_period}")
        object.__setattr__(self, "recovery_trigger_period", int(self.recovery_trigger_period))


@dataclass(frozen=True)
class AhrsInternalStates:
    acceleration_error: float              # degrees
    accelerometer_ignored: bool
    acceleration_recovery_trigger: float   # 0..1
    magnetic_error: float                  # degrees
    magnetometer_ignored: bool
    magnetic_recovery_trigger: float       # 0..1


@dataclass(frozen=True)
class AhrsFlags:
    initialising: bool
    angular_rate_recovery: bool
    acceleration_recovery: bool
    magnetic_recovery: bool


def _feedback(sensor: Vector3D, reference: Vector3D) -> Vector3D:
    error = sensor.cross(reference)
    # normalise if error is > 90 degrees, an exactly opposite sensor has no defined direction
    if sensor.dot(reference) < 0.0 and not error.is_zero:
        error.normalize()
    return error


def _rejection_threshold(degrees: float) -> float:
    if degrees == 0.0:
        return DISABLED
    return (0.5 * math.sin(degrees * DEG2RAD)) ** 2


class Ahrs:
    """
    Attitude and heading reference system.

    Initialization:
      settings  : AhrsSettings, default AhrsSettings()
      any AhrsSettings field as keyword overrides the corresponding setting
      frequency : float, default: 200.0; Sampling frequency in Hertz, or
      dt        : float; Sampling step in seconds, used when update is called without dt
      acc_in_g  : bool, default: True; False if the accelerometer is in m/s^2

    Example:
    >>> from pyAHRS.ahrs import Ahrs
    >>> ahrs = Ahrs(gain=0.5, acceleration_rejection=10.0, recovery_trigger_period=5*200)
    >>> ahrs.update_no_magnetometer(gyr=gyro_data, acc=acc_data, dt=0.005)
    >>> ahrs.euler
    >>> ahrs.flags.initialising

    Instances are not thread safe, each sensor owns its own Ahrs.
    """

    def __init__(self, settings: Optional[AhrsSettings] = None, **kwargs):
        self.frequency: float = float(kwargs.pop("frequency", 200.0))
        self.dt: float = float(kwargs.pop("dt", (1.0 / self.frequency) if self.frequency else 0.005))
        self.acc_in_g: bool = bool(kwargs.pop("acc_in_g", True))

        self._settings = AhrsSettings() if settings is None else settings
        self.initialising = True
        self.set_settings(**kwargs)
        self.reset()

    ###########################################################
    # Configuration
    ###########################################################

    @property
    def settings(self) -> AhrsSettings:
        """settings as configured (not the internal thresholds)"""
        return self._settings

    def set_settings(self, settings: Optional[AhrsSettings] = None, **kwargs):
        """
        Apply new settings. Keywords override fields of settings,
        or of the current settings if settings is None.
        """
        if settings is None:
            settings = self._settings
        if kwargs:
            settings = replace(settings, **kwargs)
        self._settings = settings
        self._rules = rules_for(settings.convention)
        self._gain = settings.gain
        self._gyroscope_range = DISABLED if settings.gyroscope_range == 0.0 else 0.98 * settings.gyroscope_range
        self._acceleration_rejection = _rejection_threshold(settings.acceleration_rejection)
        self._magnetic_rejection = _rejection_threshold(settings.magnetic_rejection)
        self._recovery_trigger_period = settings.recovery_trigger_period
        self._acceleration_recovery_timeout = self._recovery_trigger_period
        self._magnetic_recovery_timeout = self._recovery_trigger_period
        if settings.gain == 0.0 or settings.recovery_trigger_period == 0:
            # rejection features need feedback and a trigger period
            self._acceleration_rejection = DISABLED
            self._magnetic_rejection = DISABLED
        if not self.initialising:
            self._ramped_gain = self._gain
        self._ramped_gain_step = (INITIAL_GAIN - self._gain) / INITIALISATION_PERIOD
        logger.debug("AHRS settings applied: %s", settings)

    def reset(self):
        """Reinitialise the filter, settings are kept."""
        self.q = identity_quaternion()
        self._accelerometer = vector_zero()
        self.initialising = True
        self._ramped_gain = INITIAL_GAIN
        self.angular_rate_recovery = False
        self._half_accelerometer_feedback = vector_zero()
        self._half_magnetometer_feedback = vector_zero()
        self.accelerometer_ignored = False
        self._acceleration_recovery_trigger = 0
        self._acceleration_recovery_timeout = self._recovery_trigger_period
        self.magnetometer_ignored = False
        self._magnetic_recovery_trigger = 0
        self._magnetic_recovery_timeout = self._recovery_trigger_period
        logger.debug("AHRS reset")

    ###########################################################
    # Update
    ###########################################################

    def _reference_feedback(self, half_feedback: Vector3D, threshold: float, trigger: int, timeout: int):
        """
        Acceptance with recovery trigger hysteresis.
        Returns ignored, trigger, timeout.
        """
        ignored = True
        if self.initialising or half_feedback.norm_squared <= threshold:
            ignored = False
            trigger -= 9
        else:
            trigger += 1

        # Don't ignore during recovery
        if trigger > timeout:
            timeout = 0
            ignored = False
        else:
            timeout = self._recovery_trigger_period

        trigger = clamp(trigger, 0, self._recovery_trigger_period)
        return ignored, trigger, timeout

    def update(self, gyr: Vector3D, acc: Vector3D, mag: Optional[Vector3D] = None, dt: Optional[float] = None) -> Quaternion:
        """
        Update the orientation estimate.
        gyr : Vector3D gyroscope in degrees/s
        acc : Vector3D accelerometer in g (m/s^2 if acc_in_g is False)
        mag : Vector3D magnetometer in arbitrary units, optional, None is the same as a zero vector
        dt  : float, time step in seconds, default self.dt, 0 leaves the orientation unchanged
        Returns a copy of the updated quaternion.
        """
        if dt is None:
            dt = self.dt
        if not self.acc_in_g:
            acc = acc / GRAVITY

        # Store accelerometer
        self._accelerometer = Vector3D(acc)

        # Reinitialise if gyroscope range exceeded
        if abs(gyr.x) > self._gyroscope_range or abs(gyr.y) > self._gyroscope_range or abs(gyr.z) > self._gyroscope_range:
            q = self.q
            if not self.angular_rate_recovery:
                logger.warning("Gyroscope range exceeded (%s), reinitialising", gyr)
            self.reset()
            self.q = q
            self.angular_rate_recovery = True

        # Ramp down gain during initialisation
        if self.initialising:
            self._ramped_gain -= self._ramped_gain_step * dt
            if self._ramped_gain <= self._gain or self._gain == 0.0:
                self._ramped_gain = self._gain
                self.initialising = False
                self.angular_rate_recovery = False
                logger.debug("AHRS initialisation complete")

        # Direction of gravity indicated by algorithm
        half_gravity = self._rules.half_gravity(self.q)

        # Accelerometer feedback
        half_accelerometer_feedback = vector_zero()
        self.accelerometer_ignored = True
        if not acc.is_zero:
            self._half_accelerometer_feedback = _feedback(acc.normalized, half_gravity)
            was_recovering = self._acceleration_recovery_timeout == 0
            (self.accelerometer_ignored,
             self._acceleration_recovery_trigger,
             self._acceleration_recovery_timeout) = self._reference_feedback(
                self._half_accelerometer_feedback,
                self._acceleration_rejection,
                self._acceleration_recovery_trigger,
                self._acceleration_recovery_timeout)
            if not was_recovering and self._acceleration_recovery_timeout == 0:
                logger.info("Acceleration recovery, accelerometer error %.1f degrees",
                            self.internal_states.acceleration_error)
            if not self.accelerometer_ignored:
                half_accelerometer_feedback = self._half_accelerometer_feedback

        # Magnetometer feedback, a magnetometer parallel to gravity carries no heading
        if mag is None:
            mag = vector_zero()
        half_magnetometer_feedback = vector_zero()
        self.magnetometer_ignored = True
        magnetic_west = half_gravity.cross(mag)
        if not mag.is_zero and not magnetic_west.is_zero:
            half_magnetic = self._rules.half_magnetic(self.q)
            self._half_magnetometer_feedback = _feedback(magnetic_west.normalized, half_magnetic)
            was_recovering = self._magnetic_recovery_timeout == 0
            (self.magnetometer_ignored,
             self._magnetic_recovery_trigger,
             self._magnetic_recovery_timeout) = self._reference_feedback(
                self._half_magnetometer_feedback,
                self._magnetic_rejection,
                self._magnetic_recovery_trigger,
                self._magnetic_recovery_timeout)
            if not was_recovering and self._magnetic_recovery_timeout == 0:
                logger.info("Magnetic recovery, magnetic error %.1f degrees",
                            self.internal_states.magnetic_error)
            if not self.magnetometer_ignored:
                half_magnetometer_feedback = self._half_magnetometer_feedback

        # Gyroscope in radians per second scaled by 0.5, with feedback applied
        half_gyroscope = gyr * (0.5 * DEG2RAD)
        adjusted_half_gyroscope = half_gyroscope + (half_accelerometer_feedback + half_magnetometer_feedback) * self._ramped_gain

        # Integrate rate of change of quaternion
        self.q = self.q + self.q * (adjusted_half_gyroscope * dt)
        self.q.normalize()

        return copy(self.q)

    def update_no_magnetometer(self, gyr: Vector3D, acc: Vector3D, dt: Optional[float] = None) -> Quaternion:
        """
        Update with gyroscope and accelerometer only.
        Without a heading reference the heading is held at zero during initialisation.
        """
        self.update(gyr, acc, vector_zero(), dt)

        if self.initialising:
            self.set_heading(0.0)

        return copy(self.q)

    def update_external_heading(self, gyr: Vector3D, acc: Vector3D, heading: float, dt: Optional[float] = None) -> Quaternion:
        """
        Update with gyroscope, accelerometer and a heading in degrees from any external source.
        """
        q = self.q

        # Roll
        roll = math.atan2(q.w * q.x + q.y * q.z, 0.5 - q.y * q.y - q.x * q.x)

        # Magnetometer equivalent of the heading
        heading_radians = heading * DEG2RAD
        sin_heading_radians = math.sin(heading_radians)
        magnetometer = Vector3D(
            math.cos(heading_radians),
            -1.0 * math.cos(roll) * sin_heading_radians,
            sin_heading_radians * math.sin(roll))

        return self.update(gyr, acc, magnetometer, dt)

    ###########################################################
    # Outputs
    ###########################################################

    @property
    def quaternion(self) -> Quaternion:
        """quaternion describing the sensor relative to the Earth"""
        return copy(self.q)

    @quaternion.setter
    def quaternion(self, q: Quaternion):
        self.q = Quaternion(q)

    @property
    def euler(self) -> Vector3D:
        """Vector3D(roll, pitch, yaw) in degrees"""
        return q2euler(self.q)

    @property
    def linear_acceleration(self) -> Vector3D:
        """accelerometer with the 1 g of gravity removed, sensor frame, in g"""
        # gravity in the sensor frame is twice the half gravity for the convention
        return self._accelerometer - self._rules.half_gravity(self.q) * 2.0

    @property
    def earth_acceleration(self) -> Vector3D:
        """accelerometer in the Earth frame with the 1 g of gravity removed, in g"""
        q = self.q
        a = self._accelerometer
        qwqw = q.w * q.w
        qwqx = q.w * q.x
        qwqy = q.w * q.y
        qwqz = q.w * q.z
        qxqy = q.x * q.y
        qxqz = q.x * q.z
        qyqz = q.y * q.z
        # rotation matrix multiplied with the accelerometer
        earth = Vector3D(
            2.0 * ((qwqw - 0.5 + q.x * q.x) * a.x + (qxqy - qwqz) * a.y + (qxqz + qwqy) * a.z),
            2.0 * ((qxqy + qwqz) * a.x + (qwqw - 0.5 + q.y * q.y) * a.y + (qyqz - qwqx) * a.z),
            2.0 * ((qxqz - qwqy) * a.x + (qyqz + qwqx) * a.y + (qwqw - 0.5 + q.z * q.z) * a.z))
        earth.z -= self._rules.up_sign
        return earth

    @property
    def internal_states(self) -> AhrsInternalStates:
        period = self._recovery_trigger_period
        return AhrsInternalStates(
            acceleration_error=asin(2.0 * self._half_accelerometer_feedback.norm) * RAD2DEG,
            accelerometer_ignored=self.accelerometer_ignored,
            acceleration_recovery_trigger=0.0 if period == 0 else self._acceleration_recovery_trigger / period,
            magnetic_error=asin(2.0 * self._half_magnetometer_feedback.norm) * RAD2DEG,
            magnetometer_ignored=self.magnetometer_ignored,
            magnetic_recovery_trigger=0.0 if period == 0 else self._magnetic_recovery_trigger / period,
        )

    @property
    def flags(self) -> AhrsFlags:
        return AhrsFlags(
            initialising=self.initialising,
            angular_rate_recovery=self.angular_rate_recovery,
            acceleration_recovery=self._acceleration_recovery_trigger > self._acceleration_recovery_timeout,
            magnetic_recovery=self._magnetic_recovery_trigger > self._magnetic_recovery_timeout,
        )

    def set_heading(self, heading: float):
        """
        Set the heading (yaw) in degrees, roll and pitch are unchanged.
        Use to remove heading drift when running without a magnetometer.
        """
        q = self.q
        yaw = math.atan2(q.w * q.z + q.x * q.y, 0.5 - q.y * q.y - q.z * q.z)
        half_yaw_minus_heading = 0.5 * (yaw - heading * DEG2RAD)
        rotation = Quaternion(
            w=math.cos(half_yaw_minus_heading),
            x=0.0,
            y=0.0,
            z=-1.0 * math.sin(half_yaw_minus_heading))
        self.q = rotation * self.q
