"""
Sensor to body axes alignment.

An alignment names which signed sensor axis ends up on each body axis.
For example, if the body X axis is aligned with the sensor Y axis and the
body Y axis is aligned with the sensor X axis but pointing the opposite
direction, the alignment is +Y-X+Z (AxesAlignment.PYNXPZ).

The 24 alignments are the rotational symmetries of a cube.
"""

from enum import Enum
import re
import numpy as np

from pyAHRS.quaternion import Vector3D

_AXIS_INDEX = {"X": 0, "Y": 1, "Z": 2}
_SIGN = {"P": 1.0, "N": -1.0, "+": 1.0, "-": -1.0}


class AxesAlignment(Enum):
    PXPYPZ = "+X+Y+Z"
    PXNZPY = "+X-Z+Y"
    PXNYNZ = "+X-Y-Z"
    PXPZNY = "+X+Z-Y"
    NXPYNZ = "-X+Y-Z"
    NXPZPY = "-X+Z+Y"
    NXNYPZ = "-X-Y+Z"
    NXNZNY = "-X-Z-Y"
    PYNXPZ = "+Y-X+Z"
    PYNZNX = "+Y-Z-X"
    PYPXNZ = "+Y+X-Z"
    PYPZPX = "+Y+Z+X"
    NYPXPZ = "-Y+X+Z"
    NYNZPX = "-Y-Z+X"
    NYNXNZ = "-Y-X-Z"
    NYPZNX = "-Y+Z-X"
    PZPYNX = "+Z+Y-X"
    PZPXPY = "+Z+X+Y"
    PZNYPX = "+Z-Y+X"
    PZNXNY = "+Z-X-Y"
    NZPYPX = "-Z+Y+X"
    NZNXPY = "-Z-X+Y"
    NZNYNX = "-Z-Y-X"
    NZPXNY = "-Z+X-Y"

    @classmethod
    def parse(cls, value) -> "AxesAlignment":
        """Accept an AxesAlignment, its member name (PYNXPZ) or its spelling (+Y-X+Z)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            text = value.strip().upper()
            if text in cls.__members__:
                return cls[text]
            try:
                return cls(text)
            except ValueError:
                pass
        raise ValueError(f"Unknown axes alignment {value!r}")


def _signed_permutation(spelling: str):
    return tuple((_AXIS_INDEX[axis], _SIGN[sign]) for sign, axis in re.findall(r"([+-])([XYZ])", spelling))


# body axis -> (sensor axis index, sign), for x, y and z
AXES_ALIGNMENT_TABLE = {alignment: _signed_permutation(alignment.value) for alignment in AxesAlignment}


def axes_swap(sensor: Vector3D, alignment: AxesAlignment) -> Vector3D:
    """Swaps sensor axes for alignment with the body axes."""
    (ix, sx), (iy, sy), (iz, sz) = AXES_ALIGNMENT_TABLE[alignment]
    s = (sensor.x, sensor.y, sensor.z)
    return Vector3D(sx * s[ix], sy * s[iy], sz * s[iz])


def alignment_matrix(alignment: AxesAlignment) -> np.ndarray:
    """Signed permutation matrix m with axes_swap(v) == m @ v"""
    m = np.zeros((3, 3))
    for row, (index, sign) in enumerate(AXES_ALIGNMENT_TABLE[alignment]):
        m[row, index] = sign
    return m
