from dataclasses import dataclass, field

import numpy as np

from quadmotion import constants


def _zero_joints() -> np.ndarray:
    return np.zeros(constants.NUM_JOINTS)


@dataclass
class JointCommand:
    """Position, velocity and effort targets for all twelve joints."""

    positions: np.ndarray = field(default_factory=_zero_joints)
    velocities: np.ndarray = field(default_factory=_zero_joints)
    efforts: np.ndarray = field(default_factory=_zero_joints)

    def __post_init__(self) -> None:
        self.positions = np.array(self.positions, dtype=float)
        self.velocities = np.array(self.velocities, dtype=float)
        self.efforts = np.array(self.efforts, dtype=float)
        for name in ('positions', 'velocities', 'efforts'):
            values = getattr(self, name)
            if values.shape != (constants.NUM_JOINTS,):
                raise ValueError(f'{name} must hold {constants.NUM_JOINTS} values, got shape {values.shape}')
            if not np.all(np.isfinite(values)):
                raise ValueError(f'{name} contains non-finite values')

    @classmethod
    def hold(cls, positions) -> 'JointCommand':
        """Hold the given positions with zero velocity and effort."""
        return cls(positions=positions)

    def leg_positions(self, leg_index: int) -> np.ndarray:
        start = leg_index * constants.JOINTS_PER_LEG
        return self.positions[start:start + constants.JOINTS_PER_LEG]
