import numpy as np
import pytest

from pyAHRS.convention import Convention, CONVENTION_RULES, rules_for
from pyAHRS.quaternion import Quaternion
from pyAHRS.utilities import q2matrix

# up and west in each Earth frame
AXES = {
    Convention.NWU: (np.array([0.0, 0.0, 1.0]), np.array([0.0, 1.0, 0.0])),
    Convention.ENU: (np.array([0.0, 0.0, 1.0]), np.array([-1.0, 0.0, 0.0])),
    Convention.NED: (np.array([0.0, 0.0, -1.0]), np.array([0.0, -1.0, 0.0])),
}


def test_parse():
    assert Convention.parse("NWU") is Convention.NWU
    assert Convention.parse(" enu ") is Convention.ENU
    assert Convention.parse(Convention.NED) is Convention.NED
    assert rules_for("ned") is CONVENTION_RULES[Convention.NED]

    with pytest.raises(ValueError):
        Convention.parse("XYZ")
    with pytest.raises(ValueError):
        Convention.parse(1)


def test_up_sign():
    assert rules_for(Convention.NWU).up_sign == 1.0
    assert rules_for(Convention.ENU).up_sign == 1.0
    assert rules_for(Convention.NED).up_sign == -1.0


@pytest.mark.parametrize("convention", list(Convention))
def test_half_vectors_are_earth_axes_in_sensor_frame(convention):
    rules = rules_for(convention)
    up, west = AXES[convention]
    rng = np.random.default_rng(5)

    for _ in range(50):
        q = Quaternion(rng.normal(size=4)).normalized
        r_transposed = q2matrix(q).T

        half_gravity = rules.half_gravity(q)
        assert np.allclose(half_gravity.v, 0.5 * r_transposed @ up, atol=1e-12)

        half_magnetic = rules.half_magnetic(q)
        assert np.allclose(half_magnetic.v, 0.5 * r_transposed @ west, atol=1e-12)
