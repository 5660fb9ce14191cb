"""
Body orientation estimate and passive balance correction.
"""

from typing import Optional

import numpy as np

from quadmotion import constants
from quadmotion.kinematics.rotation import (
    angle_between,
    attitude_from_gravity,
    clamp_rotation,
    orthonormalize,
    scale_rotation,
)
from quadmotion.logger import Logger

log = Logger().setup_logger('Body pose')


class BodyPose:
    """
    Tracks three rotations of the body:

    - estimate: attitude derived from the measured gravity direction (zero yaw)
    - balance_target: attitude to hold while balancing, captured once
    - control: integrated correction applied to the stance feet, bounded by max_tilt

    The commanded rotation handed to the controller is set through re_orient.
    """

    def __init__(self, gain: float = constants.BALANCE_GAIN, max_tilt: float = np.pi):
        self._gain = gain
        self._max_tilt = max_tilt
        self.reset()

    def reset(self) -> None:
        self.estimate = np.eye(3)
        self.balance_target: Optional[np.ndarray] = None
        self.control = np.eye(3)
        self._commanded = np.eye(3)

    @property
    def gain(self) -> float:
        return self._gain

    @property
    def commanded(self) -> np.ndarray:
        """Body rotation the controller applies to the stance feet."""
        return self._commanded.copy()

    def update(self, gravity_direction=constants.DEFAULT_GRAVITY_DIRECTION) -> np.ndarray:
        """
        Refresh the estimate from a body-frame gravity direction and, when a
        balance target is set, integrate one correction step into control.

        Returns:
            The new attitude estimate.
        """
        self.estimate = attitude_from_gravity(gravity_direction)

        if self.balance_target is not None:
            error = self.balance_target @ self.estimate.T
            step = scale_rotation(error, self._gain)
            # stop integrating once the correction reaches the tilt limit
            self.control = clamp_rotation(orthonormalize(self.control @ step), self._max_tilt)

        return self.estimate

    def set_balance_target(self, rotation: Optional[np.ndarray] = None) -> np.ndarray:
        """Hold `rotation`, or the current estimate when none is given."""
        target = self.estimate if rotation is None else np.asarray(rotation, dtype=float)
        self.balance_target = orthonormalize(target)
        self.control = np.eye(3)
        return self.balance_target

    def clear_balance_target(self) -> None:
        self.balance_target = None

    def re_orient(self, target_rotation) -> np.ndarray:
        """Record the body rotation to apply on the next tick, bounded by the tilt limit."""
        self._commanded = clamp_rotation(orthonormalize(np.asarray(target_rotation, dtype=float)), self._max_tilt)
        return self._commanded.copy()

    def angular_error(self) -> float:
        """Angle between balance target and estimate (rad), 0 when not balancing."""
        if self.balance_target is None:
            return 0.0
        return angle_between(self.balance_target, self.estimate)
