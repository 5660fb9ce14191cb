import numpy as np
import pytest

from quadmotion.configuration import LegGroup, LegName
from quadmotion.runtime.motion_controller.gait_scheduler import GaitScheduler
from quadmotion.runtime.motion_controller.quadruped_controller import QuadrupedController


@pytest.fixture
def scheduler(parameters):
    return GaitScheduler(parameters)


@pytest.fixture
def reaching_scheduler(parameters):
    controller = QuadrupedController(parameters)
    return GaitScheduler(parameters, reachable=controller.can_reach)


def test_groups_never_swing_together(scheduler):
    for swing in range(8):
        group = LegGroup.A if swing % 2 == 0 else LegGroup.B
        scheduler.prepare_swing(group, 0.5)
        for elapsed in np.linspace(0.0, 0.5, 11):
            scheduler.advance(elapsed)
            swinging = [phase for phase in (scheduler.phase(LegGroup.A), scheduler.phase(LegGroup.B)) if phase.is_swinging]
            assert len(swinging) == 1
            assert scheduler.swinging_group is group


def test_leg_groups_are_diagonal_pairs():
    assert set(LegGroup.A.legs) == {LegName.FRONT_LEFT, LegName.REAR_RIGHT}
    assert set(LegGroup.B.legs) == {LegName.FRONT_RIGHT, LegName.REAR_LEFT}
    assert LegGroup.A.other is LegGroup.B


def test_swing_lifts_and_lands_in_place(scheduler, parameters):
    nominal = np.array(parameters.stance_position(LegName.FRONT_LEFT))
    scheduler.prepare_swing(LegGroup.A, 0.5)

    middle = scheduler.advance(0.25)[LegName.FRONT_LEFT]
    assert middle[2] == pytest.approx(nominal[2] + parameters.step_height)

    end = scheduler.advance(0.5)[LegName.FRONT_LEFT]
    np.testing.assert_allclose(end, nominal, atol=1e-12)


def test_stance_legs_stay_put_without_command(scheduler, parameters):
    scheduler.prepare_swing(LegGroup.A, 0.5)
    targets = scheduler.advance(0.3)
    np.testing.assert_allclose(targets[LegName.FRONT_RIGHT], parameters.stance_position(LegName.FRONT_RIGHT))
    np.testing.assert_allclose(targets[LegName.REAR_LEFT], parameters.stance_position(LegName.REAR_LEFT))


def test_forward_command_moves_feet(scheduler, parameters):
    scheduler.set_velocity_command((0.1, 0.0), 0.0)
    scheduler.prepare_swing(LegGroup.A, 0.5)

    targets = scheduler.advance(0.25)
    assert targets[LegName.FRONT_RIGHT][0] == pytest.approx(parameters.stance_x - 0.025)

    targets = scheduler.advance(0.5)
    # Raibert foothold: half a step ahead of the nominal stance
    assert targets[LegName.FRONT_LEFT][0] == pytest.approx(parameters.stance_x + 0.1 * 0.25)
    assert targets[LegName.FRONT_RIGHT][0] == pytest.approx(parameters.stance_x - 0.05)


def test_velocity_command_is_clamped(scheduler, parameters):
    scheduler.set_velocity_command((5.0, -5.0), 3.0)
    velocity, yaw_rate = scheduler.velocity_command
    np.testing.assert_allclose(velocity, (parameters.max_fwd_velocity, -parameters.max_side_velocity))
    assert yaw_rate == parameters.max_yaw_rate


def test_phase_time_and_completion(scheduler):
    scheduler.prepare_swing(LegGroup.B, 0.5)

    scheduler.advance(0.3)
    assert scheduler.phase(LegGroup.B).phase_time == pytest.approx(0.3)
    assert scheduler.phase(LegGroup.A).phase_time == 0.0
    assert not scheduler.is_phase_complete(0.49)

    scheduler.advance(0.5)
    assert scheduler.is_phase_complete(0.5)
    # wraps at the swing duration
    assert scheduler.phase(LegGroup.B).phase_time == pytest.approx(0.0)


def test_reset_returns_to_stance(scheduler, parameters):
    scheduler.prepare_swing(LegGroup.A, 0.5)
    scheduler.advance(0.2)

    scheduler.reset()

    assert scheduler.swinging_group is None
    for leg, target in scheduler.foot_targets().items():
        np.testing.assert_allclose(target, parameters.stance_position(leg))


def test_reset_clears_velocity_command(scheduler):
    scheduler.set_velocity_command((0.1, 0.05), 0.2)

    scheduler.reset()

    velocity, yaw_rate = scheduler.velocity_command
    np.testing.assert_allclose(velocity, (0.0, 0.0))
    assert yaw_rate == 0.0


def test_full_forward_and_backward_commands_stay_within_reach(reaching_scheduler, parameters):
    for direction in (1.0, -1.0):
        reaching_scheduler.set_velocity_command((direction * parameters.max_fwd_velocity, 0.0), 0.0)
        velocity, yaw_rate = reaching_scheduler.velocity_command
        np.testing.assert_allclose(velocity, (direction * parameters.max_fwd_velocity, 0.0))
        assert yaw_rate == 0.0


def test_combined_full_command_is_scaled_into_reach(reaching_scheduler, parameters):
    reaching_scheduler.set_velocity_command(
        (parameters.max_fwd_velocity, parameters.max_side_velocity), parameters.max_yaw_rate
    )

    velocity, yaw_rate = reaching_scheduler.velocity_command
    scale = velocity[0] / parameters.max_fwd_velocity
    assert 0.0 < scale < 1.0
    # direction of the command is kept
    assert velocity[1] == pytest.approx(parameters.max_side_velocity * scale)
    assert yaw_rate == pytest.approx(parameters.max_yaw_rate * scale)


def test_walking_footholds_are_all_reachable(reaching_scheduler, parameters):
    controller = QuadrupedController(parameters)
    reaching_scheduler.set_velocity_command(
        (parameters.max_fwd_velocity, parameters.max_side_velocity), parameters.max_yaw_rate
    )

    for swing in range(6):
        group = LegGroup.A if swing % 2 == 0 else LegGroup.B
        reaching_scheduler.prepare_swing(group, parameters.leg_swing_time)
        for elapsed in np.linspace(0.0, parameters.leg_swing_time, 26):
            for leg, target in reaching_scheduler.advance(elapsed).items():
                assert controller.can_reach(leg, target), (swing, elapsed, leg)
