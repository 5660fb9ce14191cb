"""
In-process stand-in for the actuator network.

Each joint follows its commanded position with a first-order lag; the
reported gravity direction is whatever the test or caller sets.
"""

import threading
from collections import deque
from typing import Deque, Optional

import numpy as np

from quadmotion import constants
from quadmotion.configuration import LEG_ORDER, QuadrupedParameters
from quadmotion.kinematics import LegGeometry, LegModel
from quadmotion.runtime.motion_controller.models import Feedback, JointCommand


def rest_positions(parameters: QuadrupedParameters) -> np.ndarray:
    """Joint angles of the resting pose, leg-major."""
    return np.concatenate(
        [LegModel(LegGeometry.from_parameters(leg, parameters)).nominal_angles(parameters.rest_foot()) for leg in LEG_ORDER]
    )


class SimulatedActuatorChannel:

    def __init__(
        self,
        parameters: Optional[QuadrupedParameters] = None,
        tracking_gain: float = 0.5,
        gravity_direction=constants.DEFAULT_GRAVITY_DIRECTION,
        initial_positions=None,
        connected: bool = True,
        history: int = constants.SIMULATED_COMMAND_HISTORY,
    ):
        self._parameters = parameters or QuadrupedParameters.defaults()
        self._tracking_gain = tracking_gain
        self._lock = threading.Lock()

        self.connected = connected
        self.gravity_direction = np.array(gravity_direction, dtype=float)
        if initial_positions is None:
            initial_positions = rest_positions(self._parameters)
        self._positions = np.array(initial_positions, dtype=float)
        self._velocities = np.zeros(constants.NUM_JOINTS)
        self._efforts = np.zeros(constants.NUM_JOINTS)
        # newest last, oldest dropped once `history` commands are held
        self.commands: Deque[JointCommand] = deque(maxlen=history)

    def is_connected(self) -> bool:
        return self.connected

    def get_feedback(self, timeout: float = constants.FEEDBACK_TIMEOUT) -> Optional[Feedback]:
        if not self.connected:
            return None
        with self._lock:
            return Feedback(
                self._positions.copy(),
                self._velocities.copy(),
                self._efforts.copy(),
                self.gravity_direction.copy(),
            )

    def send_command(self, command: JointCommand) -> None:
        with self._lock:
            step = self._tracking_gain * (command.positions - self._positions)
            self._positions = self._positions + step
            self._velocities = command.velocities.copy()
            self._efforts = command.efforts.copy()
            self.commands.append(command)

    @property
    def last_command(self) -> Optional[JointCommand]:
        return self.commands[-1] if self.commands else None
