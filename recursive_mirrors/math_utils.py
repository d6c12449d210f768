#
# PROJECT: recursive-mirrors
# MODULE: recursive_mirrors/math_utils.py
# STATUS: Level 2 - Implementation
# LOG_REF: 2026-10-17
#

import math
from typing import Optional

EPSILON = 1e-9


class Vec3:
    """Immutable 3-component vector."""
    __slots__ = ('x', 'y', 'z')

    def __init__(self, x: float, y: float, z: float):
        object.__setattr__(self, 'x', float(x))
        object.__setattr__(self, 'y', float(y))
        object.__setattr__(self, 'z', float(z))

    def __setattr__(self, name, value):
        raise AttributeError("Vec3 is immutable")

    @classmethod
    def of(cls, values) -> 'Vec3':
        """Build from any (x, y, z) sequence."""
        if isinstance(values, Vec3):
            return values
        x, y, z = values
        return cls(x, y, z)

    def __repr__(self):
        return f"Vec3({self.x:.2f}, {self.y:.2f}, {self.z:.2f})"

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z

    def __getitem__(self, index):
        if index == 0: return self.x
        if index == 1: return self.y
        if index == 2: return self.z
        raise IndexError("Vec3 index out of range")

    def __eq__(self, other):
        if not isinstance(other, Vec3):
            return NotImplemented
        return self.x == other.x and self.y == other.y and self.z == other.z

    def __hash__(self):
        return hash((self.x, self.y, self.z))

    def __add__(self, other):
        if isinstance(other, Vec3):
            return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, Vec3):
            return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)
        return NotImplemented

    def __neg__(self):
        return Vec3(-self.x, -self.y, -self.z)

    def __mul__(self, scalar):
        return Vec3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar):
        return Vec3(self.x / scalar, self.y / scalar, self.z / scalar)

    def scaled(self, other: 'Vec3') -> 'Vec3':
        """Component-wise product."""
        return Vec3(self.x * other.x, self.y * other.y, self.z * other.z)

    def dot(self, other) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other) -> 'Vec3':
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x
        )

    def magnitude(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalize(self) -> 'Vec3':
        m = self.magnitude()
        if m == 0:
            return Vec3(0, 0, 0)
        return self / m

    def is_zero(self, eps: float = EPSILON) -> bool:
        return self.magnitude() <= eps


UP = Vec3(0, 1, 0)
RIGHT = Vec3(1, 0, 0)
FORWARD = Vec3(0, 0, 1)


class Quat:
    """
    Immutable unit quaternion describing an orientation.

    Local axes follow the renderer's camera space: +X right, +Y up,
    +Z forward.
    """
    __slots__ = ('x', 'y', 'z', 'w')

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0, w: float = 1.0):
        object.__setattr__(self, 'x', float(x))
        object.__setattr__(self, 'y', float(y))
        object.__setattr__(self, 'z', float(z))
        object.__setattr__(self, 'w', float(w))

    def __setattr__(self, name, value):
        raise AttributeError("Quat is immutable")

    def __repr__(self):
        return f"Quat({self.x:.3f}, {self.y:.3f}, {self.z:.3f}, {self.w:.3f})"

    def __eq__(self, other):
        if not isinstance(other, Quat):
            return NotImplemented
        return (self.x, self.y, self.z, self.w) == (other.x, other.y, other.z, other.w)

    def __hash__(self):
        return hash((self.x, self.y, self.z, self.w))

    @classmethod
    def identity(cls) -> 'Quat':
        return cls(0.0, 0.0, 0.0, 1.0)

    @classmethod
    def from_axis_angle(cls, axis: Vec3, rad: float) -> 'Quat':
        a = axis.normalize()
        if a.is_zero():
            return cls.identity()
        s = math.sin(rad / 2.0)
        return cls(a.x * s, a.y * s, a.z * s, math.cos(rad / 2.0))

    @classmethod
    def from_to_rotation(cls, src: Vec3, dst: Vec3) -> 'Quat':
        """Shortest rotation taking direction `src` onto direction `dst`."""
        a = src.normalize()
        b = dst.normalize()
        d = max(-1.0, min(1.0, a.dot(b)))
        if d > 1.0 - EPSILON:
            return cls.identity()
        if d < -1.0 + EPSILON:
            # Opposite directions: any axis orthogonal to src will do
            axis = a.cross(RIGHT)
            if axis.is_zero(1e-6):
                axis = a.cross(UP)
            return cls.from_axis_angle(axis, math.pi)
        return cls.from_axis_angle(a.cross(b), math.acos(d))

    @classmethod
    def from_basis(cls, right: Vec3, up: Vec3, forward: Vec3) -> 'Quat':
        """Quaternion for the rotation whose columns are right, up, forward."""
        m00, m01, m02 = right.x, up.x, forward.x
        m10, m11, m12 = right.y, up.y, forward.y
        m20, m21, m22 = right.z, up.z, forward.z
        trace = m00 + m11 + m22
        if trace > 0:
            s = 0.5 / math.sqrt(trace + 1.0)
            return cls((m21 - m12) * s, (m02 - m20) * s, (m10 - m01) * s, 0.25 / s)
        if m00 > m11 and m00 > m22:
            s = 2.0 * math.sqrt(1.0 + m00 - m11 - m22)
            return cls(0.25 * s, (m01 + m10) / s, (m02 + m20) / s, (m21 - m12) / s)
        if m11 > m22:
            s = 2.0 * math.sqrt(1.0 + m11 - m00 - m22)
            return cls((m01 + m10) / s, 0.25 * s, (m12 + m21) / s, (m02 - m20) / s)
        s = 2.0 * math.sqrt(1.0 + m22 - m00 - m11)
        return cls((m02 + m20) / s, (m12 + m21) / s, 0.25 * s, (m10 - m01) / s)

    @classmethod
    def look_rotation(cls, forward: Vec3, up: Vec3 = UP) -> 'Quat':
        """
        Orientation whose +Z axis points along `forward` and whose +Y axis
        lies in the plane spanned by `forward` and `up`.

        A zero forward vector yields identity; an `up` parallel to
        `forward` is replaced by the closest world axis that is not.
        """
        f = forward.normalize()
        if f.is_zero():
            return cls.identity()
        r = up.cross(f).normalize()
        if r.is_zero(1e-6):
            r = UP.cross(f).normalize()
            if r.is_zero(1e-6):
                r = FORWARD.cross(f).normalize()
        u = f.cross(r)
        return cls.from_basis(r, u, f)

    def __mul__(self, other: 'Quat') -> 'Quat':
        return Quat(
            self.w * other.x + self.x * other.w + self.y * other.z - self.z * other.y,
            self.w * other.y - self.x * other.z + self.y * other.w + self.z * other.x,
            self.w * other.z + self.x * other.y - self.y * other.x + self.z * other.w,
            self.w * other.w - self.x * other.x - self.y * other.y - self.z * other.z,
        )

    def rotate(self, v: Vec3) -> Vec3:
        # v' = v + w*t + q x t, with t = 2 * (q x v)
        q = Vec3(self.x, self.y, self.z)
        t = q.cross(v) * 2.0
        return v + t * self.w + q.cross(t)

    @property
    def right(self) -> Vec3:
        return self.rotate(RIGHT)

    @property
    def up(self) -> Vec3:
        return self.rotate(UP)

    @property
    def forward(self) -> Vec3:
        return self.rotate(FORWARD)


class Mat4:
    """4x4 Matrix using [row][col] storage, column vectors (M @ v)."""
    __slots__ = ('m',)

    def __init__(self, data=None):
        if data:
            self.m = [list(map(float, row)) for row in data]
        else:
            self.m = [[0.0]*4 for _ in range(4)]

    def __repr__(self):
        return f"Mat4({self.m!r})"

    def __eq__(self, other):
        if not isinstance(other, Mat4):
            return NotImplemented
        return self.m == other.m

    def copy(self) -> 'Mat4':
        return Mat4(self.m)

    @classmethod
    def identity(cls) -> 'Mat4':
        res = cls()
        for i in range(4):
            res.m[i][i] = 1.0
        return res

    @classmethod
    def scale(cls, sx, sy, sz) -> 'Mat4':
        mat = cls.identity()
        mat.m[0][0] = sx
        mat.m[1][1] = sy
        mat.m[2][2] = sz
        return mat

    @classmethod
    def perspective(cls, fov_deg: float, aspect: float, near: float, far: float) -> 'Mat4':
        """
        Perspective projection for a camera space looking down +Z.

        After the w-divide, x/y land in [-1, 1] across the view and z maps
        near..far onto -1..1.
        """
        f = 1.0 / math.tan(math.radians(fov_deg) / 2.0)
        mat = cls()
        mat.m[0][0] = f / aspect
        mat.m[1][1] = f
        mat.m[2][2] = (far + near) / (far - near)
        mat.m[2][3] = -2.0 * far * near / (far - near)
        mat.m[3][2] = 1.0
        return mat

    def __matmul__(self, other):
        if isinstance(other, Mat4):
            res = Mat4()
            for r in range(4):
                for c in range(4):
                    val = 0.0
                    for k in range(4):
                        val += self.m[r][k] * other.m[k][c]
                    res.m[r][c] = val
            return res
        return NotImplemented

    def mul_vec3_project(self, v: Vec3) -> Vec3:
        """Multiply as if w=1 and divide by the resulting w (when non-zero)."""
        x = self.m[0][0]*v.x + self.m[0][1]*v.y + self.m[0][2]*v.z + self.m[0][3]
        y = self.m[1][0]*v.x + self.m[1][1]*v.y + self.m[1][2]*v.z + self.m[1][3]
        z = self.m[2][0]*v.x + self.m[2][1]*v.y + self.m[2][2]*v.z + self.m[2][3]
        w = self.m[3][0]*v.x + self.m[3][1]*v.y + self.m[3][2]*v.z + self.m[3][3]
        if w != 1.0 and w != 0.0:
            return Vec3(x/w, y/w, z/w)
        return Vec3(x, y, z)


class Plane:
    """
    Plane in point-normal form.  `distance` is chosen so that
    signed_distance(p) = normal . p + distance.
    """
    __slots__ = ('normal', 'distance')

    def __init__(self, normal: Vec3, point: Vec3):
        self.normal = normal.normalize()
        self.distance = -self.normal.dot(point)

    def __repr__(self):
        return f"Plane(normal={self.normal!r}, distance={self.distance:.3f})"

    def signed_distance(self, p: Vec3) -> float:
        return self.normal.dot(p) + self.distance

    def flipped(self) -> 'Plane':
        plane = Plane.__new__(Plane)
        plane.normal = -self.normal
        plane.distance = -self.distance
        return plane

    def line_intersection(self, origin: Vec3, direction: Vec3) -> Optional[float]:
        """
        Parameter t at which origin + direction * t meets the plane.

        t may be negative (the plane lies behind the origin).  Returns None
        when the line is parallel to the plane or the plane is degenerate.
        """
        denom = direction.dot(self.normal)
        if abs(denom) < EPSILON:
            return None
        return -self.signed_distance(origin) / denom
