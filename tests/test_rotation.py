from math import pi

import numpy as np
import pytest

from quadmotion.kinematics.rotation import (
    angle_between,
    attitude_from_gravity,
    clamp_rotation,
    homogeneous,
    inverse,
    is_rotation,
    orthonormalize,
    rot_x,
    rot_y,
    rot_z,
    rotation_from_rpy,
    rpy_from_rotation,
    scale_rotation,
    transform_point,
)


def test_rpy_matches_elementary_rotations():
    rotation = rotation_from_rpy(0.1, -0.2, 0.3)

    assert is_rotation(rotation)
    np.testing.assert_allclose(rotation, rot_z(0.3) @ rot_y(-0.2) @ rot_x(0.1), atol=1e-12)
    np.testing.assert_allclose(rpy_from_rotation(rotation), (0.1, -0.2, 0.3), atol=1e-9)


def test_angle_between():
    assert angle_between(rot_z(0.5), np.eye(3)) == pytest.approx(0.5)
    assert angle_between(rot_x(0.2), rot_x(-0.3)) == pytest.approx(0.5)
    assert angle_between(rot_x(pi), np.eye(3)) == pytest.approx(pi)
    assert angle_between(rot_y(0.4), rot_y(0.4)) == pytest.approx(0.0, abs=1e-9)


def test_scale_and_clamp():
    np.testing.assert_allclose(scale_rotation(rot_x(0.4), 0.5), rot_x(0.2), atol=1e-12)
    np.testing.assert_allclose(scale_rotation(rot_z(0.3), 0.0), np.eye(3), atol=1e-12)
    assert angle_between(clamp_rotation(rot_y(0.8), 0.3), np.eye(3)) == pytest.approx(0.3)
    np.testing.assert_allclose(clamp_rotation(rot_y(0.8), 0.3), rot_y(0.3), atol=1e-12)
    np.testing.assert_allclose(clamp_rotation(rot_y(0.1), 0.3), rot_y(0.1))


def test_orthonormalize_restores_rotation():
    drifted = rot_z(0.3) + 1e-3 * np.array([[0.2, -0.1, 0.4], [0.3, 0.1, -0.2], [0.0, 0.5, 0.1]])
    assert not is_rotation(drifted)
    repaired = orthonormalize(drifted)
    assert is_rotation(repaired)
    assert angle_between(repaired, rot_z(0.3)) < 1e-2


def test_attitude_from_gravity():
    np.testing.assert_allclose(attitude_from_gravity((0.0, 0.0, -1.0)), np.eye(3), atol=1e-12)

    for attitude in (rot_x(0.2), rot_y(0.3), rot_y(0.1) @ rot_x(-0.15)):
        gravity = attitude.T @ np.array([0.0, 0.0, -9.81])
        # yaw is unobservable, roll and pitch only
        np.testing.assert_allclose(attitude_from_gravity(gravity), attitude, atol=1e-9)


def test_attitude_from_gravity_rejects_zero():
    with pytest.raises(ValueError):
        attitude_from_gravity((0.0, 0.0, 0.0))


def test_homogeneous_inverse():
    transform = homogeneous(rot_z(0.7), (0.2, -0.1, 0.05))
    np.testing.assert_allclose(inverse(transform) @ transform, np.eye(4), atol=1e-12)

    point = np.array([0.3, 0.1, -0.2])
    np.testing.assert_allclose(transform_point(inverse(transform), transform_point(transform, point)), point, atol=1e-12)
