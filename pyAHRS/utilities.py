from pyAHRS.quaternion import Vector3D, Quaternion
from pyAHRS.quaternion import DEG2RAD, RAD2DEG
import numpy as np
import math

###########################################################
# Utility Functions
###########################################################

def deg2rad(degrees: float) -> float:
    return degrees * DEG2RAD

def rad2deg(radians: float) -> float:
    return radians * RAD2DEG

def clip(val, largest):
    '''
    Clip val to [0,largest]
    '''
    return 0 if val < 0 else largest if val > largest else val

def clamp(val, smallest, largest):
    '''
    Clip val to [smallest, largest]
    '''
    if val < smallest: return smallest
    if val > largest: return largest
    return val

def asin(value: float) -> float:
    '''
    Arc sine with the argument limited to [-1,1],
    rounding errors slightly outside the domain return +/- pi/2 instead of raising
    '''
    if value <= -1.0:
        return -math.pi/2
    elif value >= 1.0:
        return math.pi/2
    return math.asin(value)

def matrix_multiply_vector(matrix: np.ndarray, vector: Vector3D) -> Vector3D:
    '''
    matrix (3x3, row major) times column vector
    '''
    m = matrix
    return Vector3D(
        m[0, 0] * vector.x + m[0, 1] * vector.y + m[0, 2] * vector.z,
        m[1, 0] * vector.x + m[1, 1] * vector.y + m[1, 2] * vector.z,
        m[2, 0] * vector.x + m[2, 1] * vector.y + m[2, 2] * vector.z)

def q2matrix(q: Quaternion) -> np.ndarray:
    '''
    quaternion to 3x3 rotation matrix
    simplifications because ww+xx+yy+zz = 1

    Assuming the quaternion R rotates a vector v according to

        v' = R * v * R⁻¹,

    we can also express this rotation in terms of a 3x3 matrix ℛ such that

        v' = ℛ * v.

    This function returns that matrix.
    '''
    qwqw = q.w * q.w
    qwqx = q.w * q.x
    qwqy = q.w * q.y
    qwqz = q.w * q.z
    qxqy = q.x * q.y
    qxqz = q.x * q.z
    qyqz = q.y * q.z

    return np.array([
        [2.*(qwqw - 0.5 + q.x*q.x),        2.*(qxqy - qwqz),        2.*(qxqz + qwqy)],
        [       2.*(qxqy + qwqz), 2.*(qwqw - 0.5 + q.y*q.y),        2.*(qyqz - qwqx)],
        [       2.*(qxqz - qwqy),        2.*(qyqz + qwqx), 2.*(qwqw - 0.5 + q.z*q.z)]
    ])

def q2euler(q: Quaternion) -> Vector3D:
    '''
    quaternion to ZYX Euler angles in degrees
    returns Vector3D(x=roll, y=pitch, z=yaw)
    '''
    half_minus_qy_squared = 0.5 - q.y * q.y

    roll  = math.atan2(q.w * q.x + q.y * q.z, half_minus_qy_squared - q.x * q.x)
    pitch = asin(2.0 * (q.w * q.y - q.z * q.x))
    yaw   = math.atan2(q.w * q.z + q.x * q.y, half_minus_qy_squared - q.z * q.z)

    return Vector3D(x=roll * RAD2DEG, y=pitch * RAD2DEG, z=yaw * RAD2DEG)

def euler2q(roll: float, pitch: float = 0., yaw: float = 0.) -> Quaternion:
    '''
    ZYX Euler angles in degrees to quaternion, inverse of q2euler
    roll may also be a Vector3D(roll, pitch, yaw)
    '''
    if isinstance(roll, Vector3D):
        roll, pitch, yaw = roll.x, roll.y, roll.z

    cy2 = math.cos(yaw   * DEG2RAD * 0.5)
    sy2 = math.sin(yaw   * DEG2RAD * 0.5)
    cp2 = math.cos(pitch * DEG2RAD * 0.5)
    sp2 = math.sin(pitch * DEG2RAD * 0.5)
    cr2 = math.cos(roll  * DEG2RAD * 0.5)
    sr2 = math.sin(roll  * DEG2RAD * 0.5)

    w = cy2 * cp2 * cr2 + sy2 * sp2 * sr2
    x = cy2 * cp2 * sr2 - sy2 * sp2 * cr2
    y = sy2 * cp2 * sr2 + cy2 * sp2 * cr2
    z = sy2 * cp2 * cr2 - cy2 * sp2 * sr2

    return Quaternion(w, x, y, z)
