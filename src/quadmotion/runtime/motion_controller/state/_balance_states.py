from math import radians
from typing import Optional

import numpy as np

from quadmotion import labels
from quadmotion.kinematics.rotation import rotation_from_rpy, rpy_from_rotation
from quadmotion.runtime.motion_controller.models import InputSnapshot
from quadmotion.runtime.motion_controller.quadruped_controller import QuadrupedController
from quadmotion.runtime.motion_controller.state._base_state import BaseControlState, ControlStateName


class PassiveBalanceState(BaseControlState):
    """Hold the orientation observed on entry by integrating the attitude error."""

    name = ControlStateName.PASSIVE_BALANCE

    def enter(
        self, controller: QuadrupedController, previous: Optional[ControlStateName], snapshot: InputSnapshot
    ) -> None:
        target = controller.capture_balance_target()
        self._log.info(labels.STATE_BALANCE_TARGET.format(*rpy_from_rotation(target)))

    def update(self, controller: QuadrupedController, elapsed: float, snapshot: InputSnapshot) -> None:
        controller.re_orient(controller.body_pose.control)

    def next_state(
        self, controller: QuadrupedController, elapsed: float, snapshot: InputSnapshot
    ) -> Optional[ControlStateName]:
        return None

    def exit(self, controller: QuadrupedController) -> None:
        controller.body_pose.clear_balance_target()
        controller.re_orient(np.eye(3))


class OrientTeleopState(BaseControlState):
    """Operator rotation axes set the body orientation directly."""

    name = ControlStateName.ORIENT_TELEOP

    def __init__(self, max_orient_deg: float):
        self._max_orient = radians(max_orient_deg)

    def target_rotation(self, snapshot: InputSnapshot) -> np.ndarray:
        roll, pitch, yaw = np.clip(snapshot.rotation_velocity, -1.0, 1.0) * self._max_orient
        return rotation_from_rpy(roll, pitch, yaw)

    def update(self, controller: QuadrupedController, elapsed: float, snapshot: InputSnapshot) -> None:
        controller.re_orient(self.target_rotation(snapshot))

    def next_state(
        self, controller: QuadrupedController, elapsed: float, snapshot: InputSnapshot
    ) -> Optional[ControlStateName]:
        return None

    def exit(self, controller: QuadrupedController) -> None:
        controller.re_orient(np.eye(3))
