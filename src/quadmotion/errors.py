"""
Exception hierarchy for the Quadmotion control core.
"""

import numpy as np


class QuadmotionError(Exception):
    """Base class for every error raised by the control core."""


class ConfigurationError(QuadmotionError):
    """The parameter file could not be parsed or holds invalid values."""


class ConnectivityFailure(QuadmotionError):
    """The actuator network or the operator input device is unreachable at start-up."""


class UnreachableTarget(QuadmotionError):
    """A leg was asked to place its foot where no IK solution exists."""

    def __init__(self, leg_name: str, target, reason: str):
        self.leg_name = leg_name
        self.target = np.array(target, dtype=float)
        self.reason = reason
        x, y, z = self.target
        super().__init__(f'{leg_name}: target ({x:.4f}, {y:.4f}, {z:.4f}) unreachable, {reason}')


class PersistentUnreachableTarget(QuadmotionError):
    """A leg kept failing IK for more ticks than the safety budget allows."""

    def __init__(self, leg_name: str, failures: int, last_error: UnreachableTarget | None = None):
        self.leg_name = leg_name
        self.failures = failures
        self.last_error = last_error
        super().__init__(f'{leg_name} failed IK on {failures} consecutive ticks')


__all__ = [
    'QuadmotionError',
    'ConfigurationError',
    'ConnectivityFailure',
    'UnreachableTarget',
    'PersistentUnreachableTarget',
]
