"""
This module defines the InputSnapshot published by the input polling thread.
"""

from dataclasses import dataclass, field

import numpy as np


def _zero_vector() -> np.ndarray:
    return np.zeros(3)


@dataclass(frozen=True)
class InputSnapshot:
    """Operator command sampled at one instant.

    Attributes:
        translation_velocity: Normalised body translation command (x forward, y left, z up), -1..1.
        rotation_velocity: Normalised body rotation command (roll, pitch, yaw), -1..1.
        quit_requested: The operator asked the session to end.
        connected: The input device was reachable when sampled.
        timestamp: Clock reading at sampling time (seconds).
    """

    translation_velocity: np.ndarray = field(default_factory=_zero_vector)
    rotation_velocity: np.ndarray = field(default_factory=_zero_vector)
    quit_requested: bool = False
    connected: bool = True
    timestamp: float = 0.0

    def __post_init__(self) -> None:
        # frozen dataclass, so normalise through object.__setattr__
        object.__setattr__(self, 'translation_velocity', np.array(self.translation_velocity, dtype=float))
        object.__setattr__(self, 'rotation_velocity', np.array(self.rotation_velocity, dtype=float))

    @classmethod
    def idle(cls, timestamp: float = 0.0) -> 'InputSnapshot':
        return cls(timestamp=timestamp)

    def disconnected(self) -> 'InputSnapshot':
        """Same commands, flagged as coming from a device that dropped out."""
        return InputSnapshot(
            self.translation_velocity,
            self.rotation_velocity,
            self.quit_requested,
            False,
            self.timestamp,
        )
