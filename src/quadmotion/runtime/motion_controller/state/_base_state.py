from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from quadmotion.logger import Logger
from quadmotion.runtime.motion_controller.models import InputSnapshot
from quadmotion.runtime.motion_controller.quadruped_controller import QuadrupedController


class ControlStateName(Enum):
    STAND_UP_PHASE1 = 'stand_up_phase1'
    STAND_UP_PHASE2 = 'stand_up_phase2'
    STAND_UP_PHASE3 = 'stand_up_phase3'
    STEADY_GAIT_LEFT = 'steady_gait_left'
    STEADY_GAIT_RIGHT = 'steady_gait_right'
    ORIENT_TELEOP = 'orient_teleop'
    PASSIVE_BALANCE = 'passive_balance'

    @property
    def is_stand_up(self) -> bool:
        return self in STAND_UP_STATES

    @property
    def is_gait(self) -> bool:
        return self in (ControlStateName.STEADY_GAIT_LEFT, ControlStateName.STEADY_GAIT_RIGHT)


STAND_UP_STATES = (
    ControlStateName.STAND_UP_PHASE1,
    ControlStateName.STAND_UP_PHASE2,
    ControlStateName.STAND_UP_PHASE3,
)

# Behaviours the operator may switch between once standing
STEADY_STATES = (
    ControlStateName.PASSIVE_BALANCE,
    ControlStateName.ORIENT_TELEOP,
    ControlStateName.STEADY_GAIT_LEFT,
)


class BaseControlState(ABC):
    _log = Logger().setup_logger('ControlState')

    name: ControlStateName

    def enter(
        self, controller: QuadrupedController, previous: Optional[ControlStateName], snapshot: InputSnapshot
    ) -> None:
        """Called once when the state becomes active."""

    @abstractmethod
    def update(self, controller: QuadrupedController, elapsed: float, snapshot: InputSnapshot) -> None:
        """Per-tick action, run inside the controller tick before the legs are solved."""

    @abstractmethod
    def next_state(
        self, controller: QuadrupedController, elapsed: float, snapshot: InputSnapshot
    ) -> Optional[ControlStateName]:
        """Automatic transition checked after the tick action, or None to stay."""

    def exit(self, controller: QuadrupedController) -> None:
        """Called once when the state is left."""
