from typing import Optional

from quadmotion import labels
from quadmotion.runtime.motion_controller.models import InputSnapshot
from quadmotion.runtime.motion_controller.quadruped_controller import Pose, QuadrupedController
from quadmotion.runtime.motion_controller.state._base_state import BaseControlState, ControlStateName


class _StandUpPhase(BaseControlState):
    """Time-driven stand-up step, optionally gated on its own completion."""

    def __init__(self, duration: float, requires_completion: bool = False):
        self._duration = duration
        self._requires_completion = requires_completion
        self._complete = False
        self._waiting_logged = False

    @property
    def complete(self) -> bool:
        return self._complete

    def enter(
        self, controller: QuadrupedController, previous: Optional[ControlStateName], snapshot: InputSnapshot
    ) -> None:
        self._complete = False
        self._waiting_logged = False

    def next_state(
        self, controller: QuadrupedController, elapsed: float, snapshot: InputSnapshot
    ) -> Optional[ControlStateName]:
        if elapsed < self._duration:
            return None
        if self._requires_completion and not (self._complete and controller.is_settled()):
            if not self._waiting_logged:
                self._log.info(labels.STATE_PHASE_INCOMPLETE.format(self.name.value))
                self._waiting_logged = True
            return None
        return self._successor

    _successor: ControlStateName


class StandUpPhase1State(_StandUpPhase):
    """Spread the legs outward from the resting pose."""

    name = ControlStateName.STAND_UP_PHASE1
    _successor = ControlStateName.STAND_UP_PHASE2

    def __init__(self, duration: float, requires_completion: bool = False):
        super().__init__(duration, requires_completion)
        self._start_pose: Optional[Pose] = None

    def enter(
        self, controller: QuadrupedController, previous: Optional[ControlStateName], snapshot: InputSnapshot
    ) -> None:
        super().enter(controller, previous, snapshot)
        self._start_pose = controller.capture_pose()

    def update(self, controller: QuadrupedController, elapsed: float, snapshot: InputSnapshot) -> None:
        self._complete = controller.spread_all_legs(self._start_pose, elapsed / self._duration)


class StandUpPhase2State(_StandUpPhase):
    """Push the feet down, lifting the body."""

    name = ControlStateName.STAND_UP_PHASE2
    _successor = ControlStateName.STAND_UP_PHASE3

    def update(self, controller: QuadrupedController, elapsed: float, snapshot: InputSnapshot) -> None:
        self._complete = controller.push_all_legs(elapsed, self._duration)

    def exit(self, controller: QuadrupedController) -> None:
        controller.start_orientation_updates()


class StandUpPhase3State(_StandUpPhase):
    """Walk the feet from under the hips to the quadruped stance."""

    name = ControlStateName.STAND_UP_PHASE3
    _successor = ControlStateName.PASSIVE_BALANCE

    def __init__(self, duration: float, requires_completion: bool = False):
        super().__init__(duration, requires_completion)
        self._start_pose: Optional[Pose] = None

    def enter(
        self, controller: QuadrupedController, previous: Optional[ControlStateName], snapshot: InputSnapshot
    ) -> None:
        super().enter(controller, previous, snapshot)
        self._start_pose = controller.capture_pose()

    def update(self, controller: QuadrupedController, elapsed: float, snapshot: InputSnapshot) -> None:
        self._complete = controller.prepare_quad_mode(self._start_pose, elapsed / self._duration)
