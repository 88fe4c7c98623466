###########################################################
# Quaternion and Vector3D data types
# Value types used by the AHRS, offset, calibration and compass modules
#
# Vectors carry no implicit unit, the caller documents it
# (degrees/s for gyroscope, g for accelerometer, arbitrary for magnetometer)
###########################################################

import numpy as np
import math
import numbers

###########################################################
# Constants
###########################################################

TWOPI   = 2.0 * math.pi
DEG2RAD = math.pi / 180.0
RAD2DEG = 180.0 / math.pi
EPSILON = 2.0*math.ldexp(1.0, -53)
GRAVITY = 9.80665

class Vector3D():
    '''
    3D Vector Class
    v1 = Vector3D(1., 2., 3.)
    v2 = Vector3D(x=4., y=5., z=6.)
    v3 = Vector3D(np.array([7,8,9]))

    v4 = v1 + v2
    v5 = v1 * v2     (Hadamard product)
    v6 = 2. * v1

    v1.dot(v2)
    v1.cross(v2)
    v1.normalize()   (in place, no zero guard)
    v1.normalized    (new vector, no zero guard)
    v1.norm: length of vector
    v1.norm_squared: squared length of vector
    v1.v: vector as np.array
    '''
    __slots__ = ('x', 'y', 'z')

    def __init__(self, x=0.0, y=0.0, z=0.0):
        if isinstance(x, numbers.Number):
            self.x = float(x)
            self.y = float(y)
            self.z = float(z)
        elif isinstance(x, Vector3D):
            self.x = x.x
            self.y = x.y
            self.z = x.z
        elif isinstance(x, (list, tuple, np.ndarray)) and len(x) == 3:
            self.x = float(x[0])
            self.y = float(x[1])
            self.z = float(x[2])
        else:
            raise TypeError("Unsupported initializer for Vector3D: {}".format(type(x)))

    def __copy__(self):
        return Vector3D(self.x, self.y, self.z)

    def __bool__(self):
        return not self.is_zero

    def __abs__(self):
        return Vector3D(abs(self.x), abs(self.y), abs(self.z))

    def __neg__(self):
        return Vector3D(-self.x, -self.y, -self.z)

    def __len__(self):
        return 3

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z

    def __getitem__(self, index):
        return (self.x, self.y, self.z)[index]

    def __str__(self):
        return f"Vector3D({self.x}, {self.y}, {self.z})"

    def __repr__(self):
        return str(self)

    def __add__(self, other):
        if isinstance(other, Vector3D):
            return Vector3D(self.x + other.x, self.y + other.y, self.z + other.z)
        elif isinstance(other, numbers.Number):
            return Vector3D(self.x + other, self.y + other, self.z + other)
        else:
            raise TypeError("Unsupported operand type for +: Vector3D and {}".format(type(other)))

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        if isinstance(other, Vector3D):
            return Vector3D(self.x - other.x, self.y - other.y, self.z - other.z)
        elif isinstance(other, numbers.Number):
            return Vector3D(self.x - other, self.y - other, self.z - other)
        else:
            raise TypeError("Unsupported operand type for -: Vector3D and {}".format(type(other)))

    def __mul__(self, other):
        if isinstance(other, numbers.Number):
            return Vector3D(self.x * other, self.y * other, self.z * other)
        elif isinstance(other, Vector3D):
            # Hadamard (element wise) product
            return Vector3D(self.x * other.x, self.y * other.y, self.z * other.z)
        else:
            raise TypeError("Unsupported operand type for *: Vector3D and {}".format(type(other)))

    def __rmul__(self, other):
        return self.__mul__(other)

    def __truediv__(self, other):
        if isinstance(other, numbers.Number):
            return Vector3D(self.x / other, self.y / other, self.z / other)
        else:
            raise TypeError("Unsupported operand type for /: Vector3D and {}".format(type(other)))

    def __eq__(self, other):
        '''are the two vectors equal'''
        if isinstance(other, Vector3D):
            return self.x == other.x and self.y == other.y and self.z == other.z
        return NotImplemented

    __hash__ = None

    def hadamard(self, other):
        '''element wise product, same as v1 * v2'''
        return Vector3D(self.x * other.x, self.y * other.y, self.z * other.z)

    def sum(self) -> float:
        return self.x + self.y + self.z

    def dot(self, other) -> float:
        if isinstance(other, Vector3D):
            return self.x * other.x + self.y * other.y + self.z * other.z
        raise TypeError("Unsupported operand type for dot product: Vector3D and {}".format(type(other)))

    def cross(self, other):
        '''
        u × v = [u2v3 - u3v2, u3v1 - u1v3, u1v2 - u2v1]
        '''
        if isinstance(other, Vector3D):
            x = (self.y * other.z) - (self.z * other.y)
            y = (self.z * other.x) - (self.x * other.z)
            z = (self.x * other.y) - (self.y * other.x)
            return Vector3D(x, y, z)
        raise TypeError("Unsupported operand type for cross product: Vector3D and {}".format(type(other)))

    def normalize(self):
        '''
        Normalize in place.
        A zero vector is a precondition violation and raises ZeroDivisionError,
        check is_zero before calling.
        '''
        mag_reciprocal = 1.0 / self.norm
        self.x *= mag_reciprocal
        self.y *= mag_reciprocal
        self.z *= mag_reciprocal

    @property
    def normalized(self):
        '''unit vector in the same direction, same precondition as normalize()'''
        mag_reciprocal = 1.0 / self.norm
        return Vector3D(self.x * mag_reciprocal, self.y * mag_reciprocal, self.z * mag_reciprocal)

    @property
    def q(self):
        '''vector as pure quaternion with w=0'''
        return Quaternion(w=0., x=self.x, y=self.y, z=self.z)

    @property
    def v(self) -> np.ndarray:
        '''returns np array of vector'''
        return np.array([self.x, self.y, self.z])
    @v.setter
    def v(self, val):
        '''set vector'''
        if isinstance(val, (list, tuple, np.ndarray)):
            self.x = float(val[0])
            self.y = float(val[1])
            self.z = float(val[2])
        elif isinstance(val, numbers.Number):
            self.x = float(val)
            self.y = float(val)
            self.z = float(val)
        else:
            raise TypeError("Unsupported type for vector assignment: {}".format(type(val)))

    @property
    def norm_squared(self) -> float:
        return self.x*self.x + self.y*self.y + self.z*self.z

    @property
    def norm(self) -> float:
        return math.sqrt(self.x*self.x + self.y*self.y + self.z*self.z)

    @property
    def is_zero(self) -> bool:
        return (abs(self.x) <= EPSILON and abs(self.y) <= EPSILON and abs(self.z) <= EPSILON)

###############################################################################################

class Quaternion():
    '''
    Quaternion Class
    q1 = Quaternion(1., 2., 3., 4.)
    q2 = Quaternion(w=5., x=6., y=7., z=8.)
    q3 = Quaternion(np.array([9,10,11,12]))

    q5 = q1 + q2
    q6 = q1 * q2     (Hamilton product)
    q7 = q1 * v      (product with pure quaternion [0, v])
    q8 = 2 * q1

    q1.conjugate
    q1.normalize()   (in place, zero stays zero)
    q1.normalized
    q1.norm: length of quaternion
    q1.v: vector part of quaternion as Vector3D
    q1.q: quaternion as np.array
    '''
    __slots__ = ('w', 'x', 'y', 'z')

    def __init__(self, w=0.0, x=0.0, y=0.0, z=0.0):
        # allows any possible combination to be passed in
        if isinstance(w, numbers.Number):
            self.w = float(w)
            self.x = float(x)
            self.y = float(y)
            self.z = float(z)
        elif isinstance(w, Quaternion):
            self.w = w.w
            self.x = w.x
            self.y = w.y
            self.z = w.z
        elif isinstance(w, Vector3D):
            self.w = 0.
            self.x = w.x
            self.y = w.y
            self.z = w.z
        elif isinstance(w, (list, tuple, np.ndarray)):
            if len(w) == 4:
                self.w = float(w[0])
                self.x = float(w[1])
                self.y = float(w[2])
                self.z = float(w[3])
            elif len(w) == 3:
                self.w = 0.
                self.x = float(w[0])
                self.y = float(w[1])
                self.z = float(w[2])
            else:
                raise ValueError("Quaternion needs 3 or 4 elements, got {}".format(len(w)))
        else:
            raise TypeError("Unsupported initializer for Quaternion: {}".format(type(w)))

    def __copy__(self):
        return Quaternion(self.w, self.x, self.y, self.z)

    def __bool__(self):
        return not self.is_zero

    def __neg__(self):
        return Quaternion(-self.w, -self.x, -self.y, -self.z)

    def __len__(self):
        return 4

    def __iter__(self):
        yield self.w
        yield self.x
        yield self.y
        yield self.z

    def __str__(self):
        return f"Quaternion({self.w}, {self.x}, {self.y}, {self.z})"

    def __repr__(self):
        return str(self)

    def __add__(self, other):
        '''add two quaternions'''
        if isinstance(other, Quaternion):
            return Quaternion(self.w+other.w, self.x+other.x, self.y+other.y, self.z+other.z)
        else:
            raise TypeError("Unsupported operand type for +: Quaternion and {}".format(type(other)))

    def __sub__(self, other):
        if isinstance(other, Quaternion):
            return Quaternion(self.w-other.w, self.x-other.x, self.y-other.y, self.z-other.z)
        else:
            raise TypeError("Unsupported operand type for -: Quaternion and {}".format(type(other)))

    def __mul__(self, other):
        '''multiply two quaternions, quaternion and vector or quaternion and scalar'''
        if isinstance(other, Quaternion):
            w = (self.w * other.w) - (self.x * other.x) - (self.y * other.y) - (self.z * other.z)
            x = (self.w * other.x) + (self.x * other.w) + (self.y * other.z) - (self.z * other.y)
            y = (self.w * other.y) - (self.x * other.z) + (self.y * other.w) + (self.z * other.x)
            z = (self.w * other.z) + (self.x * other.y) - (self.y * other.x) + (self.z * other.w)
            return Quaternion(w, x, y, z)
        elif isinstance(other, Vector3D):
            '''
            multiply quaternion with vector
            vector is converted to quaternion with [0,vector]
            then computed the same as above with other.w=0
            '''
            w = - (self.x * other.x) - (self.y * other.y) - (self.z * other.z)
            x =    self.w * other.x  +  self.y * other.z  -  self.z * other.y
            y =    self.w * other.y  -  self.x * other.z  +  self.z * other.x
            z =    self.w * other.z  +  self.x * other.y  -  self.y * other.x
            return Quaternion(w, x, y, z)
        elif isinstance(other, numbers.Number):
            return Quaternion(self.w*other, self.x*other, self.y*other, self.z*other)
        else:
            raise TypeError("Unsupported operand type for *: Quaternion and {}".format(type(other)))

    def __rmul__(self, other):
        if isinstance(other, numbers.Number):
            return self.__mul__(other)
        raise TypeError("Unsupported operand type for *: {} and Quaternion".format(type(other)))

    def __truediv__(self, other):
        if isinstance(other, numbers.Number):
            return Quaternion(self.w/other, self.x/other, self.y/other, self.z/other)
        else:
            raise TypeError("Unsupported operand type for /: Quaternion and {}".format(type(other)))

    def __eq__(self, other):
        '''are the two quaternions equal'''
        if isinstance(other, Quaternion):
            return (self.w==other.w and self.x==other.x and self.y==other.y and self.z==other.z)
        return NotImplemented

    __hash__ = None

    def normalize(self):
        '''normalize in place, a zero quaternion stays zero'''
        mag = self.norm
        mag_reciprocal = 1.0 / mag if mag > 0.0 else 0.0
        self.w *= mag_reciprocal
        self.x *= mag_reciprocal
        self.y *= mag_reciprocal
        self.z *= mag_reciprocal

    @property
    def normalized(self):
        q = Quaternion(self)
        q.normalize()
        return q

    @property
    def v(self) -> Vector3D:
        '''extract the vector component of the quaternion'''
        return Vector3D(self.x, self.y, self.z)

    @property
    def q(self) -> np.ndarray:
        '''quaternion as np.array [w,x,y,z]'''
        return np.array([self.w, self.x, self.y, self.z])

    @property
    def conjugate(self):
        '''conjugate of quaternion'''
        return Quaternion(self.w, -self.x, -self.y, -self.z)

    @property
    def norm(self) -> float:
        '''length of quaternion'''
        return math.sqrt(self.w*self.w + self.x*self.x + self.y*self.y + self.z*self.z)

    @property
    def is_zero(self) -> bool:
        return (abs(self.w) <= EPSILON and abs(self.x) <= EPSILON and abs(self.y) <= EPSILON and abs(self.z) <= EPSILON)

###########################################################
# Common values
###########################################################

def identity_quaternion() -> Quaternion:
    return Quaternion(1.0, 0.0, 0.0, 0.0)

def vector_zero() -> Vector3D:
    return Vector3D(0.0, 0.0, 0.0)

def vector_ones() -> Vector3D:
    return Vector3D(1.0, 1.0, 1.0)

def identity_matrix() -> np.ndarray:
    return np.eye(3, dtype=float)
