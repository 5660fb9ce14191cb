"""
Rotation and homogeneous transform helpers.

Rotations are carried internally as 3x3 numpy matrices. Roll/pitch/yaw and
rotation vectors only appear at the edges, converted through scipy's
Rotation.
"""

from math import atan2, cos, sin, sqrt

import numpy as np
from scipy.spatial.transform import Rotation as R

_EPSILON = 1e-12


# ---------------------------------------------------------------------------
# Elementary rotations
# ---------------------------------------------------------------------------
def rot_x(theta: float) -> np.ndarray:
    """Rotation about X-axis."""
    return np.array(
        [
            [1.0, 0.0, 0.0],
            [0.0, cos(theta), -sin(theta)],
            [0.0, sin(theta), cos(theta)],
        ]
    )


def rot_y(theta: float) -> np.ndarray:
    """Rotation about Y-axis."""
    return np.array(
        [
            [cos(theta), 0.0, sin(theta)],
            [0.0, 1.0, 0.0],
            [-sin(theta), 0.0, cos(theta)],
        ]
    )


def rot_z(theta: float) -> np.ndarray:
    """Rotation about Z-axis."""
    return np.array(
        [
            [cos(theta), -sin(theta), 0.0],
            [sin(theta), cos(theta), 0.0],
            [0.0, 0.0, 1.0],
        ]
    )


# ---------------------------------------------------------------------------
# Boundary conversions
# ---------------------------------------------------------------------------
def rotation_from_rpy(roll: float, pitch: float, yaw: float) -> np.ndarray:
    """Fixed-axis x-y-z: roll applied first, yaw last (Rz @ Ry @ Rx)."""
    return R.from_euler('xyz', [roll, pitch, yaw]).as_matrix()


def rpy_from_rotation(rotation: np.ndarray) -> tuple[float, float, float]:
    """Inverse of rotation_from_rpy, pitch restricted to [-pi/2, pi/2]."""
    roll, pitch, yaw = R.from_matrix(rotation).as_euler('xyz')
    return float(roll), float(pitch), float(yaw)


# ---------------------------------------------------------------------------
# Rotation algebra
# ---------------------------------------------------------------------------
def angle_between(a: np.ndarray, b: np.ndarray) -> float:
    """Geodesic distance between two rotations, in radians."""
    return float((R.from_matrix(a) * R.from_matrix(b).inv()).magnitude())


def scale_rotation(rotation: np.ndarray, factor: float) -> np.ndarray:
    """Same axis, angle multiplied by factor."""
    return R.from_rotvec(factor * R.from_matrix(rotation).as_rotvec()).as_matrix()


def clamp_rotation(rotation: np.ndarray, max_angle: float) -> np.ndarray:
    """Shrink a rotation so its angle does not exceed max_angle."""
    rotvec = R.from_matrix(rotation).as_rotvec()
    angle = np.linalg.norm(rotvec)
    if angle <= max_angle:
        return np.asarray(rotation, dtype=float)
    return R.from_rotvec(rotvec * (max_angle / angle)).as_matrix()


# ---------------------------------------------------------------------------
# Validity
# ---------------------------------------------------------------------------
def is_rotation(rotation: np.ndarray, tolerance: float = 1e-6) -> bool:
    r = np.asarray(rotation, dtype=float)
    if r.shape != (3, 3) or not np.all(np.isfinite(r)):
        return False
    return bool(np.allclose(r @ r.T, np.eye(3), atol=tolerance) and abs(np.linalg.det(r) - 1.0) < tolerance)


def orthonormalize(rotation: np.ndarray) -> np.ndarray:
    """Project a nearly orthonormal matrix back onto SO(3)."""
    return R.from_matrix(rotation).as_matrix()


def attitude_from_gravity(gravity_direction) -> np.ndarray:
    """
    Body attitude (body to world, zero yaw) implied by a gravity direction
    measured in the body frame. A level body sees gravity along -z.
    """
    g = np.asarray(gravity_direction, dtype=float)
    norm = np.linalg.norm(g)
    if norm < _EPSILON or not np.all(np.isfinite(g)):
        raise ValueError(f'Invalid gravity direction: {gravity_direction}')
    g = g / norm
    roll = atan2(-g[1], -g[2])
    pitch = atan2(g[0], sqrt(g[1] ** 2 + g[2] ** 2))
    return rotation_from_rpy(roll, pitch, 0.0)


# ---------------------------------------------------------------------------
# Homogeneous transform helpers
# ---------------------------------------------------------------------------
def homogeneous(rotation: np.ndarray, translation) -> np.ndarray:
    transform = np.eye(4)
    transform[0:3, 0:3] = rotation
    transform[0:3, 3] = np.asarray(translation, dtype=float)
    return transform


def inverse(transform: np.ndarray) -> np.ndarray:
    """
    Computes the inverse of a homogeneous transformation matrix.
    Transposes the rotation matrix and adjusts the translation vector accordingly.
    """
    rotation_matrix = transform[0:3, 0:3]
    translation_vector = transform[0:3, 3]
    inverse_transform = np.eye(4)
    inverse_transform[0:3, 0:3] = rotation_matrix.T
    inverse_transform[0:3, 3] = -rotation_matrix.T @ translation_vector
    return inverse_transform


def transform_point(transform: np.ndarray, point) -> np.ndarray:
    return transform[0:3, 0:3] @ np.asarray(point, dtype=float) + transform[0:3, 3]
