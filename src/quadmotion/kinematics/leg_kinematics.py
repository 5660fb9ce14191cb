"""
Closed-form kinematics of a three joint leg: a yaw joint at the mount, a
horizontal hip link, then two pitch joints (hip and knee) in the vertical
plane selected by the yaw.

All positions are expressed in the leg frame: origin on the yaw axis, x
pointing radially out of the body, z up. Pitch angles are positive when
they raise the link. Mirrored legs report pitch angles with the opposite
sign, as their actuators are mounted facing the other way.
"""

from math import acos, atan2, cos, hypot, sin

import numpy as np

from quadmotion import constants

# Fraction of each link (hip, upper, lower) lying before a link's centre of mass
_COM_FRACTIONS = ((0.5, 0.0, 0.0), (1.0, 0.5, 0.0), (1.0, 1.0, 0.5))


def wrap_angle(angle: float) -> float:
    return (angle + np.pi) % (2.0 * np.pi) - np.pi


class LegKinematics:
    """Position, Jacobian and IK queries for one leg."""

    def __init__(
        self,
        hip_length: float,
        upper_length: float,
        lower_length: float,
        masses,
        joint_limits,
        mirrored: bool = False,
    ):
        self._l1 = hip_length
        self._l2 = upper_length
        self._l3 = lower_length
        self._masses = np.array(masses, dtype=float)
        self._limits = np.array(joint_limits, dtype=float)
        # +1 for left legs, -1 for right legs (pitch joints only)
        self._direction = np.array([1.0, -1.0 if mirrored else 1.0, -1.0 if mirrored else 1.0])

    def masses(self) -> np.ndarray:
        return self._masses.copy()

    @property
    def joint_limits(self) -> np.ndarray:
        return self._limits.copy()

    # ---------------------------------------------------------------
    # Forward kinematics
    # ---------------------------------------------------------------
    def _chain_point(self, angles, fractions) -> np.ndarray:
        """Point located `fractions` of the way along each link (0..1 per link)."""
        q1, q2, q3 = np.asarray(angles, dtype=float) * self._direction
        a1, a2, a3 = fractions
        rho = a1 * self._l1 + a2 * self._l2 * cos(q2) + a3 * self._l3 * cos(q2 + q3)
        height = a2 * self._l2 * sin(q2) + a3 * self._l3 * sin(q2 + q3)
        return np.array([cos(q1) * rho, sin(q1) * rho, height])

    def _chain_jacobian(self, angles, fractions) -> np.ndarray:
        q1, q2, q3 = np.asarray(angles, dtype=float) * self._direction
        a1, a2, a3 = fractions
        c1, s1 = cos(q1), sin(q1)
        rho = a1 * self._l1 + a2 * self._l2 * cos(q2) + a3 * self._l3 * cos(q2 + q3)

        d_rho_2 = -a2 * self._l2 * sin(q2) - a3 * self._l3 * sin(q2 + q3)
        d_height_2 = a2 * self._l2 * cos(q2) + a3 * self._l3 * cos(q2 + q3)
        d_rho_3 = -a3 * self._l3 * sin(q2 + q3)
        d_height_3 = a3 * self._l3 * cos(q2 + q3)

        jacobian = np.array(
            [
                [-s1 * rho, c1 * d_rho_2, c1 * d_rho_3],
                [c1 * rho, s1 * d_rho_2, s1 * d_rho_3],
                [0.0, d_height_2, d_height_3],
            ]
        )
        # chain rule through the mirroring
        return jacobian * self._direction

    def forward(self, angles) -> np.ndarray:
        """Foot position for the given joint angles."""
        return self._chain_point(angles, (1.0, 1.0, 1.0))

    def jacobian(self, angles) -> np.ndarray:
        """3x3 foot Jacobian."""
        return self._chain_jacobian(angles, (1.0, 1.0, 1.0))

    def com_positions(self, angles) -> list[np.ndarray]:
        """Centre of mass of each link, links assumed uniform."""
        return [self._chain_point(angles, fractions) for fractions in _COM_FRACTIONS]

    def com_jacobians(self, angles) -> list[np.ndarray]:
        """One Jacobian per link centre of mass."""
        return [self._chain_jacobian(angles, fractions) for fractions in _COM_FRACTIONS]

    # ---------------------------------------------------------------
    # Inverse kinematics
    # ---------------------------------------------------------------
    def workspace_violation(self, target) -> str | None:
        """Reason the target cannot be reached by any joint configuration, or None."""
        x, y, z = np.asarray(target, dtype=float)
        if not np.all(np.isfinite((x, y, z))):
            return 'target is not finite'
        reach = hypot(hypot(x, y) - self._l1, z)
        tolerance = constants.IK_TOLERANCE
        if reach > self._l2 + self._l3 + tolerance:
            return f'{reach:.4f}m from the shoulder exceeds the leg length {self._l2 + self._l3:.4f}m'
        if reach < abs(self._l2 - self._l3) - tolerance:
            return f'{reach:.4f}m from the shoulder is inside the minimum reach {abs(self._l2 - self._l3):.4f}m'
        return None

    def within_limits(self, angles) -> bool:
        angles = np.asarray(angles, dtype=float)
        return bool(np.all(angles >= self._limits[:, 0]) and np.all(angles <= self._limits[:, 1]))

    def solve_ik(self, seed, target) -> np.ndarray | None:
        """
        Joint angles placing the foot at `target`, on the branch nearest to
        `seed`. Returns None when the target is out of reach or every branch
        violates the joint limits.
        """
        seed = np.asarray(seed, dtype=float)
        target = np.asarray(target, dtype=float)

        if np.linalg.norm(self.forward(seed) - target) <= constants.IK_TOLERANCE and self.within_limits(seed):
            return seed.copy()

        if self.workspace_violation(target) is not None:
            return None

        x, y, z = target
        planar = hypot(x, y)
        if planar < 1e-9:
            # foot on the yaw axis, any yaw works; keep the seed's
            yaw = seed[0]
        else:
            yaw = atan2(y, x)

        horizontal = planar - self._l1
        reach = hypot(horizontal, z)
        cos_knee = (reach**2 - self._l2**2 - self._l3**2) / (2.0 * self._l2 * self._l3)
        # only rounding can push this outside [-1, 1] once the workspace check passed
        cos_knee = min(1.0, max(-1.0, cos_knee))
        knee = acos(cos_knee)

        candidates = []
        for knee_branch in (knee, -knee):
            hip = atan2(z, horizontal) - atan2(self._l3 * sin(knee_branch), self._l2 + self._l3 * cos(knee_branch))
            physical = np.array([yaw, wrap_angle(hip), knee_branch])
            angles = physical * self._direction
            if self.within_limits(angles):
                candidates.append(angles)

        if not candidates:
            return None
        return min(candidates, key=lambda angles: _branch_distance(angles, seed))


def _branch_distance(angles: np.ndarray, seed: np.ndarray) -> float:
    return float(sum(wrap_angle(a - s) ** 2 for a, s in zip(angles, seed)))
