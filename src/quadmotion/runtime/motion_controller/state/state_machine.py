import threading
from typing import Dict, Optional, Union

from quadmotion import labels
from quadmotion.configuration import QuadrupedParameters, SteadyBehavior
from quadmotion.logger import Logger
from quadmotion.runtime.motion_controller.models import Feedback, InputSnapshot, JointCommand
from quadmotion.runtime.motion_controller.quadruped_controller import QuadrupedController
from quadmotion.runtime.motion_controller.state._balance_states import OrientTeleopState, PassiveBalanceState
from quadmotion.runtime.motion_controller.state._base_state import BaseControlState, ControlStateName, STEADY_STATES
from quadmotion.runtime.motion_controller.state._gait_states import SteadyGaitLeftState, SteadyGaitRightState
from quadmotion.runtime.motion_controller.state._stand_up_states import (
    StandUpPhase1State,
    StandUpPhase2State,
    StandUpPhase3State,
)

log = Logger().setup_logger('StateMachine')

_BEHAVIOR_STATES = {
    SteadyBehavior.PASSIVE_BALANCE: ControlStateName.PASSIVE_BALANCE,
    SteadyBehavior.ORIENT_TELEOP: ControlStateName.ORIENT_TELEOP,
    SteadyBehavior.STEADY_GAIT: ControlStateName.STEADY_GAIT_LEFT,
}


class ControlStateMachine:
    """
    Locomotion state machine. Exactly one state is active; the stand-up
    sequence runs once, then the operator chooses between the steady
    behaviours.
    """

    def __init__(self, controller: QuadrupedController, parameters: Optional[QuadrupedParameters] = None):
        self._controller = controller
        self._parameters = parameters or controller.parameters
        p = self._parameters

        self._states: Dict[ControlStateName, BaseControlState] = {
            ControlStateName.STAND_UP_PHASE1: StandUpPhase1State(p.startup_seconds, p.stand_up_requires_completion),
            ControlStateName.STAND_UP_PHASE2: StandUpPhase2State(p.startup_seconds, p.stand_up_requires_completion),
            ControlStateName.STAND_UP_PHASE3: StandUpPhase3State(p.startup_seconds, p.stand_up_requires_completion),
            ControlStateName.STEADY_GAIT_LEFT: SteadyGaitLeftState(p.leg_swing_time),
            ControlStateName.STEADY_GAIT_RIGHT: SteadyGaitRightState(p.leg_swing_time),
            ControlStateName.ORIENT_TELEOP: OrientTeleopState(p.max_orient_deg),
            ControlStateName.PASSIVE_BALANCE: PassiveBalanceState(),
        }

        self._current_state = ControlStateName.STAND_UP_PHASE1
        self._entry_time: Optional[float] = None
        self._requested: Optional[ControlStateName] = None
        self._request_lock = threading.Lock()

    @property
    def current_state(self) -> ControlStateName:
        return self._current_state

    @property
    def entry_time(self) -> Optional[float]:
        return self._entry_time

    @property
    def controller(self) -> QuadrupedController:
        return self._controller

    def is_standing_up(self) -> bool:
        return self._current_state.is_stand_up

    def elapsed(self, now: float) -> float:
        if self._entry_time is None:
            return 0.0
        return now - self._entry_time

    def start(self, now: float) -> None:
        """Enter the first stand-up phase at `now`."""
        self._entry_time = now
        log.info(labels.STATE_ENTER.format(self._current_state.value))
        self._states[self._current_state].enter(self._controller, None, InputSnapshot.idle(now))

    def request_behavior(self, behavior: Union[ControlStateName, SteadyBehavior, str]) -> bool:
        """
        Ask for a steady behaviour; it takes effect on the next tick.
        Returns False while the robot is still standing up.
        """
        if isinstance(behavior, str):
            behavior = SteadyBehavior(behavior)
        if isinstance(behavior, SteadyBehavior):
            behavior = _BEHAVIOR_STATES[behavior]
        if behavior not in STEADY_STATES:
            raise ValueError(f'{behavior.value} is not a steady behavior')

        if self.is_standing_up():
            log.info(labels.STATE_REQUEST_REJECTED.format(behavior.value, self._current_state.value))
            return False

        with self._request_lock:
            self._requested = behavior
        return True

    def tick(
        self,
        now: float,
        dt: float,
        feedback: Optional[Feedback],
        snapshot: Optional[InputSnapshot] = None,
    ) -> JointCommand:
        """Run the active state's action inside a controller tick, then check its transition."""
        if self._entry_time is None:
            self.start(now)

        snapshot = snapshot or InputSnapshot.idle(now)

        with self._request_lock:
            requested, self._requested = self._requested, None
        if requested is not None and not (requested.is_gait and self._current_state.is_gait):
            self._transition_to(requested, now, snapshot)

        state = self._states[self._current_state]
        elapsed = self.elapsed(now)

        command = self._controller.tick(feedback, dt, lambda controller: state.update(controller, elapsed, snapshot))

        next_state = state.next_state(self._controller, elapsed, snapshot)
        if next_state is not None:
            self._transition_to(next_state, now, snapshot)

        return command

    def _transition_to(self, new_state: ControlStateName, now: float, snapshot: InputSnapshot) -> None:
        if new_state == self._current_state:
            return

        old_state = self._current_state
        log.info(labels.STATE_TRANSITION.format(old_state.value, new_state.value, self.elapsed(now)))

        self._states[old_state].exit(self._controller)
        if old_state.is_gait and not new_state.is_gait:
            self._controller.stop_gait()

        self._current_state = new_state
        self._entry_time = now
        self._states[new_state].enter(self._controller, old_state, snapshot)

        if old_state == ControlStateName.STAND_UP_PHASE3:
            steady = _BEHAVIOR_STATES[self._parameters.steady_behavior]
            if steady != ControlStateName.PASSIVE_BALANCE:
                with self._request_lock:
                    self._requested = steady
