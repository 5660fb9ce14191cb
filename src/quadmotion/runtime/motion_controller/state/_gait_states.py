from typing import Optional

from quadmotion.configuration import LegGroup
from quadmotion.runtime.motion_controller.models import InputSnapshot
from quadmotion.runtime.motion_controller.quadruped_controller import QuadrupedController
from quadmotion.runtime.motion_controller.state._base_state import BaseControlState, ControlStateName


class _SteadyGaitState(BaseControlState):
    """Swing one diagonal pair for the swing duration, then hand over to the other."""

    group: LegGroup
    _successor: ControlStateName

    def __init__(self, swing_duration: float):
        self._swing_duration = swing_duration

    def enter(
        self, controller: QuadrupedController, previous: Optional[ControlStateName], snapshot: InputSnapshot
    ) -> None:
        if previous is None or not previous.is_gait:
            controller.start_gait()
        # the first swing already lands according to the command
        self._command_velocity(controller, snapshot)
        controller.prepare_swing(self.group, self._swing_duration)

    def update(self, controller: QuadrupedController, elapsed: float, snapshot: InputSnapshot) -> None:
        self._command_velocity(controller, snapshot)
        controller.advance_gait(elapsed)

    @staticmethod
    def _command_velocity(controller: QuadrupedController, snapshot: InputSnapshot) -> None:
        translation = snapshot.translation_velocity
        controller.set_velocity_command(translation[0:2], snapshot.rotation_velocity[2])

    def next_state(
        self, controller: QuadrupedController, elapsed: float, snapshot: InputSnapshot
    ) -> Optional[ControlStateName]:
        if controller.gait.is_phase_complete(elapsed):
            return self._successor
        return None


class SteadyGaitLeftState(_SteadyGaitState):
    name = ControlStateName.STEADY_GAIT_LEFT
    group = LegGroup.A
    _successor = ControlStateName.STEADY_GAIT_RIGHT


class SteadyGaitRightState(_SteadyGaitState):
    name = ControlStateName.STEADY_GAIT_RIGHT
    group = LegGroup.B
    _successor = ControlStateName.STEADY_GAIT_LEFT
