import numpy as np
import pytest

from quadmotion.configuration import LEG_ORDER, LegName, QuadrupedParameters
from quadmotion.errors import UnreachableTarget
from quadmotion.kinematics import LegGeometry, LegModel
from quadmotion.kinematics.rotation import rot_z


def make_leg(leg: LegName, parameters: QuadrupedParameters = None) -> LegModel:
    parameters = parameters or QuadrupedParameters.defaults()
    return LegModel(LegGeometry.from_parameters(leg, parameters))


@pytest.mark.parametrize('leg', LEG_ORDER)
def test_ik_round_trip_on_stance(leg, parameters):
    model = make_leg(leg, parameters)
    target = np.array(parameters.stance_position(leg))

    angles = model.compute_ik_in_body(target)

    assert model.kinematics.within_limits(angles)
    np.testing.assert_allclose(model.foot_position_in_body(angles), target, atol=1e-9)


@pytest.mark.parametrize('leg', LEG_ORDER)
def test_ik_round_trip_in_leg_frame(leg):
    model = make_leg(leg)
    for target in ((0.3, 0.05, -0.15), (0.18, 0.0, -0.05), (0.2, -0.08, -0.25)):
        angles = model.compute_ik(target)
        np.testing.assert_allclose(model.foot_position(angles), target, atol=1e-9)


def test_mirrored_legs_flip_pitch_joints():
    left = make_leg(LegName.FRONT_LEFT)
    right = make_leg(LegName.FRONT_RIGHT)
    target = (0.3, 0.05, -0.15)

    left_angles = left.compute_ik(target)
    right_angles = right.compute_ik((0.3, -0.05, -0.15))

    assert right_angles[0] == pytest.approx(-left_angles[0])
    np.testing.assert_allclose(right_angles[1:], -left_angles[1:], atol=1e-12)


@pytest.mark.parametrize('target', [(1.0, 0.0, 0.0), (0.0, 0.0, -0.9), (0.06, 0.0, -0.005)])
def test_targets_outside_workspace_are_rejected(target):
    model = make_leg(LegName.REAR_LEFT)
    with pytest.raises(UnreachableTarget) as error:
        model.compute_ik(target)
    assert error.value.leg_name == 'rear_left'
    np.testing.assert_allclose(error.value.target, target)


def test_target_beyond_joint_limits_is_rejected():
    model = make_leg(LegName.FRONT_LEFT)
    # reachable distance, but the yaw would have to turn past its limit
    with pytest.raises(UnreachableTarget) as error:
        model.compute_ik((-0.2, 0.05, -0.2))
    assert 'joint limits' in str(error.value)


def test_seed_is_a_fixed_point():
    model = make_leg(LegName.FRONT_RIGHT)
    target = (0.25, -0.04, -0.18)

    angles = model.compute_ik(target)
    again = model.compute_ik(target, angles)

    assert np.array_equal(again, angles)


def test_branch_nearest_to_seed():
    model = make_leg(LegName.FRONT_LEFT)
    target = QuadrupedParameters.defaults().rest_foot()

    knee_down = model.compute_ik(target, (0.0, 0.6, -1.8))
    knee_up = model.compute_ik(target, (0.0, -1.7, 2.4))

    assert knee_down[2] < 0.0 < knee_up[2]
    np.testing.assert_allclose(model.foot_position(knee_down), target, atol=1e-9)
    np.testing.assert_allclose(model.foot_position(knee_up), target, atol=1e-9)


def test_base_frame(parameters):
    model = make_leg(LegName.FRONT_LEFT, parameters)
    frame = model.get_base_frame()

    np.testing.assert_allclose(frame[0:3, 3], (0.2, 0.1, 0.0), atol=1e-12)
    np.testing.assert_allclose(frame[0:3, 0:3], rot_z(np.arctan2(0.1, 0.2)), atol=1e-12)
    np.testing.assert_allclose(model.leg_to_body(model.body_to_leg((0.3, 0.2, -0.1))), (0.3, 0.2, -0.1), atol=1e-12)


@pytest.mark.parametrize('leg', LEG_ORDER)
def test_gravity_torque_matches_potential_energy_gradient(leg):
    model = make_leg(leg)
    angles = model.compute_ik((0.3, 0.05, -0.15))
    gravity_direction = np.array([0.1, -0.2, -1.0])
    gravity_direction /= np.linalg.norm(gravity_direction)
    gravity_leg = 9.81 * model.body_to_leg_direction(gravity_direction)
    masses = model.kinematics.masses()

    def potential(q):
        return -sum(m * gravity_leg @ p for m, p in zip(masses, model.kinematics.com_positions(q)))

    step = 1e-6
    expected = np.array(
        [(potential(angles + step * e) - potential(angles - step * e)) / (2 * step) for e in np.eye(3)]
    )

    torques = model.compute_compensation_torque(angles, np.zeros(3), gravity_direction)

    np.testing.assert_allclose(torques, expected, atol=1e-6)


def test_level_gravity_loads_no_yaw_torque():
    model = make_leg(LegName.REAR_RIGHT)
    angles = model.compute_ik((0.3, -0.05, -0.15))
    torques = model.compute_compensation_torque(angles, np.zeros(3), (0.0, 0.0, -1.0))
    assert torques[0] == pytest.approx(0.0, abs=1e-12)


def test_foot_force_torque():
    parameters = QuadrupedParameters(link_masses=[0.0, 0.0, 0.0])
    model = make_leg(LegName.FRONT_LEFT, parameters)
    angles = model.compute_ik((0.3, 0.05, -0.15))
    force = np.array([0.0, 0.0, 10.0])

    torques = model.compute_compensation_torque(angles, np.zeros(3), (0.0, 0.0, -1.0), force)

    expected = -model.kinematics.jacobian(angles).T @ model.body_to_leg_direction(force)
    np.testing.assert_allclose(torques, expected, atol=1e-12)


def test_friction_and_spring_shift():
    plain = QuadrupedParameters(link_masses=[0.0, 0.0, 0.0])
    loaded = QuadrupedParameters(link_masses=[0.0, 0.0, 0.0], spring_shift=0.5, joint_friction=0.1)
    velocities = np.array([1.0, -2.0, 3.0])

    for leg, sign in ((LegName.FRONT_LEFT, 1.0), (LegName.FRONT_RIGHT, -1.0)):
        angles = make_leg(leg, plain).compute_ik((0.3, 0.0, -0.15))
        base = make_leg(leg, plain).compute_compensation_torque(angles, velocities, (0.0, 0.0, -1.0))
        shifted = make_leg(leg, loaded).compute_compensation_torque(angles, velocities, (0.0, 0.0, -1.0))
        np.testing.assert_allclose(shifted - base, 0.1 * velocities + np.array([0.0, sign * 0.5, 0.0]), atol=1e-12)


def test_commit_seeds_next_solve():
    model = make_leg(LegName.REAR_LEFT)
    target = (0.25, 0.03, -0.2)
    angles = model.compute_ik(target)

    model.commit(angles, target)

    assert np.array_equal(model.state.seed, angles)
    assert model.state.consecutive_failures == 0
    assert np.array_equal(model.compute_ik(target), angles)

    model.reset_seed()
    np.testing.assert_allclose(model.state.seed, (0.0, 0.6, -1.8))


@pytest.mark.parametrize('leg', LEG_ORDER)
def test_ik_round_trip_over_sampled_joint_space(leg, parameters):
    model = make_leg(leg, parameters)
    limits = np.array(parameters.joint_limits, dtype=float)
    rng = np.random.default_rng(1234)

    checked = 0
    for angles in rng.uniform(limits[:, 0], limits[:, 1], size=(400, 3)):
        target = model.foot_position(angles)
        # the foot must lie in front of the yaw axis along the yaw direction
        if np.dot(target[0:2], (np.cos(angles[0]), np.sin(angles[0]))) < 0.02:
            continue

        solution = model.nominal_angles(target)

        assert model.kinematics.within_limits(solution)
        np.testing.assert_allclose(model.foot_position(solution), target, atol=1e-8)
        checked += 1

    assert checked > 100
