import math

import pytest

from pyAHRS.offset import Offset, THRESHOLD
from pyAHRS.quaternion import Vector3D

SAMPLE_RATE = 100


def test_parameters_from_sample_rate():
    offset = Offset(SAMPLE_RATE)
    assert abs(offset.filter_coefficient - 2.0 * math.pi * 0.02 / SAMPLE_RATE) < 1e-15
    assert offset.timeout == 5 * SAMPLE_RATE
    assert offset.timer == 0
    assert offset.offset == Vector3D(0., 0., 0.)


def test_invalid_sample_rate():
    with pytest.raises(ValueError):
        Offset(0)


def test_waits_for_sustained_stillness():
    offset = Offset(SAMPLE_RATE)
    bias = Vector3D(1.0, -1.0, 0.5)

    # the timer counts to the timeout, the sample after that is the first one learned from
    for _ in range(offset.timeout + 1):
        assert offset.update(bias) == bias
    assert offset.timer == offset.timeout

    corrected = offset.update(bias)
    assert abs(corrected.x) < 1.0
    assert abs(corrected.y) < 1.0
    assert abs(corrected.z) < 0.5


def test_constant_bias_is_learned():
    offset = Offset(SAMPLE_RATE)
    bias = Vector3D(1.0, 1.0, 1.0)

    previous = None
    for i in range(60 * SAMPLE_RATE):
        corrected = offset.update(bias)
        if previous is not None and i > offset.timeout + 1:
            assert corrected.x < previous.x
        previous = corrected

    assert abs(corrected.x) < 0.01
    assert abs(corrected.y) < 0.01
    assert abs(corrected.z) < 0.01
    assert abs(offset.offset.x - 1.0) < 0.01


def test_motion_resets_timer():
    offset = Offset(SAMPLE_RATE)
    bias = Vector3D(1.0, 0.0, 0.0)

    for _ in range(2 * offset.timeout):
        offset.update(bias)
    learned = offset.offset
    assert learned.x > 0.0

    corrected = offset.update(Vector3D(5.0, 0.0, 0.0))
    assert abs(corrected.x - (5.0 - learned.x)) < 1e-12
    assert offset.timer == 0
    assert offset.offset == learned  # no learning during motion

    # stillness has to be sustained again before learning resumes
    for _ in range(offset.timeout):
        offset.update(bias)
        assert offset.offset == learned
    offset.update(bias)
    assert offset.offset.x > learned.x


def test_threshold_is_per_axis():
    offset = Offset(SAMPLE_RATE)
    offset.update(Vector3D(0.0, 0.0, 0.0))
    assert offset.timer == 1

    offset.update(Vector3D(0.0, THRESHOLD, -THRESHOLD))
    assert offset.timer == 2

    offset.update(Vector3D(0.0, 0.0, -THRESHOLD - 0.1))
    assert offset.timer == 0


def test_reset():
    offset = Offset(SAMPLE_RATE)
    for _ in range(2 * offset.timeout):
        offset.update(Vector3D(1.0, 1.0, 1.0))
    offset.reset()
    assert offset.timer == 0
    assert offset.offset == Vector3D(0., 0., 0.)
