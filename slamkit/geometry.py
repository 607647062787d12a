"""Rotations, quaternions, rigid-body transforms and their Lie-algebra maps."""

from __future__ import annotations

import argparse
import math
from dataclasses import dataclass

import numpy as np

_EPS = 1e-10


def _as_vector3(vector) -> np.ndarray:
    array = np.asarray(vector, dtype=float).reshape(-1)
    if array.shape != (3,):
        raise ValueError(f"expected a 3-vector, got shape {array.shape}")
    return array


def _as_matrix3(matrix) -> np.ndarray:
    array = np.asarray(matrix, dtype=float)
    if array.shape != (3, 3):
        raise ValueError(f"expected a 3x3 matrix, got shape {array.shape}")
    return array


def _unit_axis(axis) -> np.ndarray:
    axis = _as_vector3(axis)
    norm = np.linalg.norm(axis)
    if norm == 0.0:
        raise ValueError("rotation axis must be non-zero")
    return axis / norm


def _format_matrix(matrix, precision: int = 6) -> str:
    array = np.atleast_2d(np.asarray(matrix, dtype=float))
    cells = [[f"{value:.{precision}g}" for value in row] for row in array]
    width = max((len(cell) for row in cells for cell in row), default=0)
    return "\n".join(" ".join(cell.rjust(width) for cell in row) for row in cells)


def hat(vector) -> np.ndarray:
    """Return the skew-symmetric matrix of a 3-vector."""
    x, y, z = _as_vector3(vector)
    return np.array([[0.0, -z, y], [z, 0.0, -x], [-y, x, 0.0]])


def vee(matrix) -> np.ndarray:
    """Return the 3-vector of a skew-symmetric matrix."""
    m = _as_matrix3(matrix)
    return np.array([m[2, 1], m[0, 2], m[1, 0]])


def angle_axis_to_matrix(angle: float, axis) -> np.ndarray:
    """Rotation matrix for a rotation of ``angle`` radians about ``axis``."""
    k = hat(_unit_axis(axis))
    return np.eye(3) + math.sin(angle) * k + (1.0 - math.cos(angle)) * (k @ k)


@dataclass(frozen=True)
class Quaternion:
    """A quaternion w + xi + yj + zk; unit quaternions represent rotations."""

    w: float
    x: float
    y: float
    z: float

    @classmethod
    def from_matrix(cls, matrix) -> Quaternion:
        """Build the quaternion of a rotation matrix."""
        m = _as_matrix3(matrix)
        diag_sum = float(m[0, 0] + m[1, 1] + m[2, 2])
        if diag_sum > 0.0:
            s = math.sqrt(diag_sum + 1.0)
            w = 0.5 * s
            s = 0.5 / s
            return cls(
                w,
                (m[2, 1] - m[1, 2]) * s,
                (m[0, 2] - m[2, 0]) * s,
                (m[1, 0] - m[0, 1]) * s,
            )
        i = 0
        if m[1, 1] > m[0, 0]:
            i = 1
        if m[2, 2] > m[i, i]:
            i = 2
        j = (i + 1) % 3
        k = (j + 1) % 3
        s = math.sqrt(m[i, i] - m[j, j] - m[k, k] + 1.0)
        imag = [0.0, 0.0, 0.0]
        imag[i] = 0.5 * s
        s = 0.5 / s
        w = (m[k, j] - m[j, k]) * s
        imag[j] = (m[j, i] + m[i, j]) * s
        imag[k] = (m[k, i] + m[i, k]) * s
        return cls(w, *imag)

    @classmethod
    def from_angle_axis(cls, angle: float, axis) -> Quaternion:
        """Build the unit quaternion rotating ``angle`` radians about ``axis``."""
        unit = _unit_axis(axis)
        half = 0.5 * angle
        x, y, z = math.sin(half) * unit
        return cls(math.cos(half), x, y, z)

    @property
    def vec(self) -> np.ndarray:
        """The imaginary part as a 3-vector."""
        return np.array([self.x, self.y, self.z])

    def norm(self) -> float:
        return math.sqrt(self.w**2 + self.x**2 + self.y**2 + self.z**2)

    def normalized(self) -> Quaternion:
        """Return this quaternion scaled to unit length."""
        n = self.norm()
        if n == 0.0:
            raise ValueError("cannot normalise a zero quaternion")
        return Quaternion(self.w / n, self.x / n, self.y / n, self.z / n)

    def inverse(self) -> Quaternion:
        """Return the multiplicative inverse."""
        n2 = self.w**2 + self.x**2 + self.y**2 + self.z**2
        if n2 == 0.0:
            raise ValueError("a zero quaternion has no inverse")
        return Quaternion(self.w / n2, -self.x / n2, -self.y / n2, -self.z / n2)

    def coeffs(self) -> np.ndarray:
        """Coefficients in (x, y, z, w) order."""
        return np.array([self.x, self.y, self.z, self.w])

    def to_matrix(self) -> np.ndarray:
        """Rotation matrix of this (unit) quaternion."""
        w, x, y, z = self.w, self.x, self.y, self.z
        return np.array(
            [
                [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)],
                [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
                [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)],
            ]
        )

    def rotate(self, vector) -> np.ndarray:
        """Rotate a 3-vector by this (unit) quaternion."""
        return self.to_matrix() @ _as_vector3(vector)

    def __mul__(self, other):
        if isinstance(other, Quaternion):
            w1, x1, y1, z1 = self.w, self.x, self.y, self.z
            w2, x2, y2, z2 = other.w, other.x, other.y, other.z
            return Quaternion(
                w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
                w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
                w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
                w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
            )
        if isinstance(other, (np.ndarray, list, tuple)):
            return self.rotate(other)
        return NotImplemented


def so3_exp(phi) -> np.ndarray:
    """Exponential map from a rotation vector to a rotation matrix."""
    phi = _as_vector3(phi)
    theta = float(np.linalg.norm(phi))
    if theta < _EPS:
        k = hat(phi)
        return np.eye(3) + k + 0.5 * (k @ k)
    return angle_axis_to_matrix(theta, phi / theta)


def so3_log(matrix) -> np.ndarray:
    """Logarithm map from a rotation matrix to a rotation vector."""
    q = Quaternion.from_matrix(matrix).normalized()
    vec = q.vec
    n = float(np.linalg.norm(vec))
    w = q.w
    if n < _EPS:
        factor = 2.0 / w - (2.0 / 3.0) * n * n / w**3
    elif abs(w) < _EPS:
        factor = math.pi / n if w > 0 else -math.pi / n
    else:
        factor = 2.0 * math.atan(n / w) / n
    return factor * vec


def euler_zyx(matrix) -> np.ndarray:
    """Yaw, pitch and roll with R = Rz(yaw) Ry(pitch) Rx(roll); yaw lies in [0, pi]."""
    m = _as_matrix3(matrix)
    yaw = math.atan2(m[1, 0], m[0, 0])
    c2 = math.hypot(m[2, 2], m[2, 1])
    if yaw < 0.0:
        yaw += math.pi
        pitch = math.atan2(-m[2, 0], -c2)
    else:
        pitch = math.atan2(-m[2, 0], c2)
    s1, c1 = math.sin(yaw), math.cos(yaw)
    roll = math.atan2(s1 * m[0, 2] - c1 * m[1, 2], c1 * m[1, 1] - s1 * m[0, 1])
    return np.array([yaw, pitch, roll])


class Isometry3:
    """A rigid-body transform: rotation followed by translation."""

    def __init__(self, rotation=None, translation=None):
        self._rotation = np.eye(3) if rotation is None else _as_matrix3(rotation).copy()
        self._translation = np.zeros(3) if translation is None else _as_vector3(translation).copy()

    @classmethod
    def identity(cls) -> Isometry3:
        return cls()

    @classmethod
    def from_quaternion(cls, quaternion: Quaternion, translation=None) -> Isometry3:
        return cls(quaternion.to_matrix(), translation)

    @property
    def rotation(self) -> np.ndarray:
        return self._rotation.copy()

    @property
    def translation(self) -> np.ndarray:
        return self._translation.copy()

    def rotate(self, rotation) -> Isometry3:
        """Return this transform followed on the right by a rotation."""
        if isinstance(rotation, Quaternion):
            rotation = rotation.to_matrix()
        return Isometry3(self._rotation @ _as_matrix3(rotation), self._translation)

    def pretranslate(self, translation) -> Isometry3:
        """Return this transform with a translation applied after it."""
        return Isometry3(self._rotation, self._translation + _as_vector3(translation))

    def matrix(self) -> np.ndarray:
        """The homogeneous 4x4 matrix."""
        result = np.eye(4)
        result[:3, :3] = self._rotation
        result[:3, 3] = self._translation
        return result

    def inverse(self) -> Isometry3:
        rt = self._rotation.T
        return Isometry3(rt, -rt @ self._translation)

    def apply(self, point) -> np.ndarray:
        """Transform a 3D point."""
        return self._rotation @ _as_vector3(point) + self._translation

    def log(self) -> np.ndarray:
        """Tangent 6-vector: translational part first, rotational part last."""
        phi = so3_log(self._rotation)
        theta = float(np.linalg.norm(phi))
        k = hat(phi)
        if theta < _EPS:
            v_inv = np.eye(3) - 0.5 * k + (k @ k) / 12.0
        else:
            coeff = (1.0 - theta * math.sin(theta) / (2.0 * (1.0 - math.cos(theta)))) / theta**2
            v_inv = np.eye(3) - 0.5 * k + coeff * (k @ k)
        return np.concatenate([v_inv @ self._translation, phi])

    def __matmul__(self, other):
        if isinstance(other, Isometry3):
            return Isometry3(
                self._rotation @ other._rotation,
                self._rotation @ other._translation + self._translation,
            )
        if isinstance(other, (np.ndarray, list, tuple)):
            return self.apply(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Isometry3(rotation={self._rotation.tolist()}, translation={self._translation.tolist()})"


def pose_from_view_matrix(view) -> Isometry3:
    """Camera pose in the world from a 4x4 model-view matrix."""
    m = np.asarray(view, dtype=float)
    if m.shape != (4, 4):
        raise ValueError(f"expected a 4x4 matrix, got shape {m.shape}")
    rotation = m[:3, :3].T
    return Isometry3(rotation, -rotation @ m[:3, 3])


def format_rotation(matrix) -> str:
    """Compact one-line form of a rotation matrix with two decimals."""
    m = _as_matrix3(matrix)
    rows = ",".join("[" + ",".join(f"{value:.2f}" for value in row) + "]" for row in m)
    return "=" + rows


def format_vector(vector) -> str:
    """Compact one-line form of a 3-vector."""
    return "=[" + ",".join(f"{value:g}" for value in _as_vector3(vector)) + "]"


def format_quaternion(quaternion: Quaternion) -> str:
    """Compact one-line form of a quaternion in (x, y, z, w) order."""
    return "=[" + ",".join(f"{value:g}" for value in quaternion.coeffs()) + "]"


def _geometry_demo() -> None:
    axis_z = np.array([0.0, 0.0, 1.0])
    rotation = angle_axis_to_matrix(math.pi / 4, axis_z)
    print("rotation matrix =\n" + _format_matrix(rotation, 3))
    v = np.array([1.0, 0.0, 0.0])
    print("(1,0,0) after rotation (by matrix) =", _format_matrix(rotation @ v, 3))
    print("yaw pitch roll =", _format_matrix(euler_zyx(rotation), 3))

    transform = Isometry3.identity().rotate(rotation).pretranslate([1.0, 3.0, 4.0])
    print("Transform matrix =\n" + _format_matrix(transform.matrix(), 3))
    print("v transformed =", _format_matrix(transform @ v, 3))

    q = Quaternion.from_angle_axis(math.pi / 4, axis_z)
    print("quaternion from rotation vector =", _format_matrix(q.coeffs(), 3))
    q = Quaternion.from_matrix(rotation)
    print("quaternion from rotation matrix =", _format_matrix(q.coeffs(), 3))
    print("(1,0,0) after rotation =", _format_matrix(q.rotate(v), 3))
    conjugated = q * Quaternion(0.0, 1.0, 0.0, 0.0) * q.inverse()
    print("should be equal to", _format_matrix(conjugated.coeffs(), 3))


def _coordinate_demo() -> None:
    q1 = Quaternion(0.35, 0.2, 0.3, 0.1).normalized()
    q2 = Quaternion(-0.5, 0.4, -0.1, 0.2).normalized()
    t1w = Isometry3.from_quaternion(q1).pretranslate([0.3, 0.1, 0.1])
    t2w = Isometry3.from_quaternion(q2).pretranslate([-0.1, 0.5, 0.3])
    p2 = t2w @ t1w.inverse() @ np.array([0.5, 0.0, 0.2])
    print()
    print(_format_matrix(p2))


def _lie_demo() -> None:
    rotation = angle_axis_to_matrix(math.pi / 2, [0.0, 0.0, 1.0])
    q = Quaternion.from_matrix(rotation)
    print("SO(3) from matrix: \n" + _format_matrix(rotation))
    print("SO(3) from quaternion: \n" + _format_matrix(q.to_matrix()))
    print("they are equal")
    so3 = so3_log(rotation)
    print("so3 =", _format_matrix(so3))
    print("so3 hat=\n" + _format_matrix(hat(so3)))
    print("so3 hat vee=", _format_matrix(vee(hat(so3))))


def main(argv: list[str] | None = None) -> int:
    """Print worked examples of rotations, transforms and the SO(3) maps."""
    parser = argparse.ArgumentParser(prog="slamkit-geometry", description="Geometry examples.")
    parser.parse_args(argv)
    _geometry_demo()
    _coordinate_demo()
    _lie_demo()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())