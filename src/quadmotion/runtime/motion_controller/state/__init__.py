from ._base_state import STAND_UP_STATES, STEADY_STATES, BaseControlState, ControlStateName
from .state_machine import ControlStateMachine

__all__ = [
    "BaseControlState",
    "ControlStateMachine",
    "ControlStateName",
    "STAND_UP_STATES",
    "STEADY_STATES",
]
