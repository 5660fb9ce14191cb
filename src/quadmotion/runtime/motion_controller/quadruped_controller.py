"""
Per-tick leg coordination: turns the body-frame foot targets set by the
active behaviour into a full joint command, one leg model per leg.
"""

from typing import Callable, Dict, Optional

import numpy as np

from quadmotion import constants, labels
from quadmotion.configuration import LEG_ORDER, LegGroup, LegName, QuadrupedParameters
from quadmotion.errors import PersistentUnreachableTarget, UnreachableTarget
from quadmotion.kinematics import LegGeometry, LegModel
from quadmotion.logger import Logger
from quadmotion.runtime.motion_controller.body_pose import BodyPose
from quadmotion.runtime.motion_controller.gait_scheduler import GaitScheduler
from quadmotion.runtime.motion_controller.models import Feedback, JointCommand

log = Logger().setup_logger('Quadruped controller')

Pose = Dict[LegName, np.ndarray]
Behavior = Callable[['QuadrupedController'], None]

# Joint error (rad) under which the commanded posture counts as reached
SETTLED_TOLERANCE = 0.02


def _interpolate(start: Pose, end: Pose, ratio: float) -> Pose:
    ratio = min(1.0, max(0.0, ratio))
    return {leg: start[leg] + (end[leg] - start[leg]) * ratio for leg in LEG_ORDER}


class QuadrupedController:
    """
    Owns the four leg models, the body pose and the gait scheduler.

    Behaviours only move foot targets around (through the capability
    methods below); tick() turns those targets into joint positions,
    velocities and compensation torques.
    """

    def __init__(self, parameters: Optional[QuadrupedParameters] = None):
        self._parameters = parameters or QuadrupedParameters.defaults()
        p = self._parameters

        self._legs: Dict[LegName, LegModel] = {leg: LegModel(LegGeometry.from_parameters(leg, p)) for leg in LEG_ORDER}
        self.body_pose = BodyPose(p.balance_gain, p.max_body_tilt)
        self.gait = GaitScheduler(p, reachable=self.can_reach)

        self._targets: Pose = self.rest_pose()
        self._gravity_direction = np.array(constants.DEFAULT_GRAVITY_DIRECTION, dtype=float)
        self._orientation_updates = False
        self._load_bearing = False
        self._gait_active = False
        self._settled = False
        self._feedback: Optional[Feedback] = None

        rest_angles = np.concatenate([self._legs[leg].nominal_angles(p.rest_foot()) for leg in LEG_ORDER])
        self._last_command = JointCommand.hold(rest_angles)
        for leg in LEG_ORDER:
            self._legs[leg].reset_seed(self._last_command.leg_positions(leg.index))

    @property
    def parameters(self) -> QuadrupedParameters:
        return self._parameters

    @property
    def legs(self) -> Dict[LegName, LegModel]:
        return self._legs

    @property
    def last_command(self) -> JointCommand:
        return self._last_command

    @property
    def gravity_direction(self) -> np.ndarray:
        return self._gravity_direction.copy()

    def initialize(self, feedback: Feedback) -> None:
        """Start from the measured posture: hold it and seed every leg's IK from it."""
        self._feedback = feedback
        self._last_command = JointCommand.hold(feedback.positions)
        for leg, model in self._legs.items():
            angles = feedback.leg_positions(leg.index)
            model.set_measured_angles(angles)
            if model.kinematics.within_limits(angles):
                model.reset_seed(angles)
            self._targets[leg] = model.foot_position_in_body(angles)
        if feedback.gravity_direction is not None:
            self._gravity_direction = feedback.gravity_direction / np.linalg.norm(feedback.gravity_direction)

    # ---------------------------------------------------------------
    # Poses
    # ---------------------------------------------------------------
    def _leg_frame_pose(self, foot) -> Pose:
        return {leg: model.leg_to_body(foot) for leg, model in self._legs.items()}

    def rest_pose(self) -> Pose:
        return self._leg_frame_pose(self._parameters.rest_foot())

    def spread_pose(self) -> Pose:
        return self._leg_frame_pose(self._parameters.spread_foot())

    def standing_pose(self) -> Pose:
        return self._leg_frame_pose(self._parameters.standing_foot())

    def quad_stance(self) -> Pose:
        return {leg: np.array(position, dtype=float) for leg, position in self._parameters.stance().items()}

    def capture_pose(self) -> Pose:
        """Copy of the current body-frame foot targets."""
        return {leg: target.copy() for leg, target in self._targets.items()}

    def foot_targets(self) -> Pose:
        return self.capture_pose()

    def set_foot_targets(self, targets: Pose) -> None:
        for leg, target in targets.items():
            self._targets[leg] = np.array(target, dtype=float)

    # ---------------------------------------------------------------
    # Stand-up capabilities, each returns True once its motion is complete
    # ---------------------------------------------------------------
    def spread_all_legs(self, start_pose: Pose, ratio: float) -> bool:
        self.set_foot_targets(_interpolate(start_pose, self.spread_pose(), ratio))
        return ratio >= 1.0

    def push_all_legs(self, elapsed: float, duration: float) -> bool:
        self._load_bearing = True
        ratio = elapsed / duration if duration > 0 else 1.0
        self.set_foot_targets(_interpolate(self.spread_pose(), self.standing_pose(), ratio))
        return ratio >= 1.0

    def prepare_quad_mode(self, start_pose: Pose, ratio: float) -> bool:
        self._load_bearing = True
        self.set_foot_targets(_interpolate(start_pose, self.quad_stance(), ratio))
        return ratio >= 1.0

    def start_orientation_updates(self) -> None:
        self._orientation_updates = True

    @property
    def orientation_updates(self) -> bool:
        return self._orientation_updates

    # ---------------------------------------------------------------
    # Balance and reorientation
    # ---------------------------------------------------------------
    def capture_balance_target(self) -> np.ndarray:
        return self.body_pose.set_balance_target()

    def re_orient(self, target_rotation) -> None:
        self.body_pose.re_orient(target_rotation)

    # ---------------------------------------------------------------
    # Gait
    # ---------------------------------------------------------------
    def set_velocity_command(self, translation, yaw_rate: float) -> None:
        """Normalised operator command (-1..1) scaled to the gait velocity limits."""
        p = self._parameters
        self.gait.set_velocity_command(
            (translation[0] * p.max_fwd_velocity, translation[1] * p.max_side_velocity),
            yaw_rate * p.max_yaw_rate,
        )

    def can_reach(self, leg: LegName, point_in_body) -> bool:
        model = self._legs[leg]
        return model.can_reach(model.body_to_leg(point_in_body))

    def start_gait(self) -> None:
        """Hand the current foot targets to the scheduler as the stance."""
        self.gait.reset(self.capture_pose())
        self._gait_active = True

    def stop_gait(self) -> None:
        """Leave the gait with the feet where they are and no velocity command."""
        self._gait_active = False
        self.gait.reset(self.capture_pose())

    @property
    def gait_active(self) -> bool:
        return self._gait_active

    def prepare_swing(self, group: LegGroup, duration: Optional[float] = None) -> None:
        for leg in group.other.legs:
            if self.gait.is_swinging(leg):
                # leg is about to touch down
                log.debug(labels.CONTROLLER_RESEED.format(leg.value))
                self._legs[leg].reset_seed()
        self.gait.prepare_swing(group, duration)

    def advance_gait(self, elapsed: float) -> bool:
        self.set_foot_targets(self.gait.advance(elapsed))
        return self.gait.is_phase_complete(elapsed)

    def is_swinging(self, leg: LegName) -> bool:
        return self._gait_active and self.gait.is_swinging(leg)

    # ---------------------------------------------------------------
    # Tick
    # ---------------------------------------------------------------
    def is_settled(self) -> bool:
        """The last command reached the IK solutions of the current targets."""
        return self._settled

    def safe_command(self, feedback: Optional[Feedback] = None) -> JointCommand:
        """Hold the measured positions (or the last command) with zero velocity."""
        feedback = feedback or self._feedback
        if feedback is not None:
            return JointCommand.hold(feedback.positions)
        return JointCommand.hold(self._last_command.positions)

    def tick(self, feedback: Optional[Feedback], dt: float, behavior: Optional[Behavior] = None) -> JointCommand:
        """
        Run one control tick: read feedback, let `behavior` move the foot
        targets, then solve every leg.

        Raises:
            PersistentUnreachableTarget: one leg failed IK on more consecutive
                ticks than max_ik_failures allows.
        """
        if feedback is not None:
            self._read_feedback(feedback)

        if behavior is not None:
            behavior(self)

        return self._compute_command(dt)

    def _read_feedback(self, feedback: Feedback) -> None:
        self._feedback = feedback
        for leg, model in self._legs.items():
            model.set_measured_angles(feedback.leg_positions(leg.index))

        if feedback.gravity_direction is not None:
            norm = np.linalg.norm(feedback.gravity_direction)
            if norm > 0.0 and np.all(np.isfinite(feedback.gravity_direction)):
                self._gravity_direction = feedback.gravity_direction / norm
                if self._orientation_updates:
                    self.body_pose.update(self._gravity_direction)

    def _compute_command(self, dt: float) -> JointCommand:
        p = self._parameters
        previous = self._last_command
        positions = previous.positions.copy()
        velocities = np.zeros(constants.NUM_JOINTS)
        efforts = np.zeros(constants.NUM_JOINTS)
        max_step = p.max_joint_velocity * dt if dt > 0 else 0.0

        # stance feet carry the body rotation and share its weight
        counter_rotation = self.body_pose.commanded.T
        stance_legs = [leg for leg in LEG_ORDER if not self.is_swinging(leg)]
        stance_force = -self._gravity_direction * p.body_mass * constants.STANDARD_GRAVITY / max(1, len(stance_legs))

        settled = True
        for leg in LEG_ORDER:
            model = self._legs[leg]
            index = slice(leg.index * constants.JOINTS_PER_LEG, (leg.index + 1) * constants.JOINTS_PER_LEG)
            held = previous.leg_positions(leg.index)

            target = self._targets[leg]
            if leg in stance_legs:
                target = counter_rotation @ target

            try:
                solution = model.compute_ik_in_body(target)
            except UnreachableTarget as e:
                # keep the previous command for this leg
                self._record_failure(model, e)
                settled = False
            else:
                if model.state.consecutive_failures:
                    log.info(labels.CONTROLLER_IK_RECOVERED.format(leg.value, model.state.consecutive_failures))
                model.commit(solution, model.body_to_leg(target))

                delta = np.clip(solution - held, -max_step, max_step)
                if np.any(np.abs(solution - held) > SETTLED_TOLERANCE):
                    settled = False
                positions[index] = held + delta
                if dt > 0:
                    velocities[index] = delta / dt

            force = stance_force if self._load_bearing and leg in stance_legs else None
            efforts[index] = model.compute_compensation_torque(
                positions[index],
                velocities[index],
                self._gravity_direction,
                force,
            )

        self._settled = settled
        self._last_command = JointCommand(positions, velocities, efforts)
        return self._last_command

    def _record_failure(self, model: LegModel, error: UnreachableTarget) -> None:
        model.state.consecutive_failures += 1
        failures = model.state.consecutive_failures
        log.warning(labels.CONTROLLER_IK_FAILED.format(model.name.value, failures, error))
        if failures > self._parameters.max_ik_failures:
            raise PersistentUnreachableTarget(model.name.value, failures, error)
