from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from quadmotion import constants


def _zero_joints() -> np.ndarray:
    return np.zeros(constants.NUM_JOINTS)


@dataclass
class Feedback:
    """One sample of actuator feedback, joints in leg-major order."""

    positions: np.ndarray = field(default_factory=_zero_joints)
    velocities: np.ndarray = field(default_factory=_zero_joints)
    efforts: np.ndarray = field(default_factory=_zero_joints)
    # Body frame unit vector, None when the actuators carry no IMU
    gravity_direction: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        self.positions = np.array(self.positions, dtype=float)
        self.velocities = np.array(self.velocities, dtype=float)
        self.efforts = np.array(self.efforts, dtype=float)
        if self.gravity_direction is not None:
            self.gravity_direction = np.array(self.gravity_direction, dtype=float)

    def leg_positions(self, leg_index: int) -> np.ndarray:
        start = leg_index * constants.JOINTS_PER_LEG
        return self.positions[start:start + constants.JOINTS_PER_LEG]
