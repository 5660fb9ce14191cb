from dataclasses import dataclass, field

import numpy as np

from quadmotion import constants
from quadmotion.configuration import LegName, QuadrupedParameters
from quadmotion.errors import UnreachableTarget
from quadmotion.kinematics.leg_kinematics import LegKinematics
from quadmotion.kinematics.rotation import homogeneous, inverse, rot_z, transform_point

# Knee-down posture used to pick the IK branch when no better seed exists
NOMINAL_SEED = (0.0, 0.6, -1.8)


@dataclass(frozen=True)
class LegGeometry:
    """Immutable mounting and link description of one leg."""

    name: LegName
    mount_angle: float
    radial_offset: float
    is_left: bool
    hip_offset: float
    upper_length: float
    lower_length: float
    link_masses: tuple[float, float, float]
    joint_limits: tuple[tuple[float, float], ...]
    spring_shift: float = 0.0
    joint_friction: float = 0.0

    @classmethod
    def from_parameters(cls, leg: LegName, parameters: QuadrupedParameters) -> 'LegGeometry':
        return cls(
            name=leg,
            mount_angle=parameters.mount_angle(leg),
            radial_offset=parameters.radial_offset(leg),
            is_left=leg.is_left,
            hip_offset=parameters.hip_link_length,
            upper_length=parameters.upper_leg_link_length,
            lower_length=parameters.lower_leg_link_length,
            link_masses=tuple(parameters.link_masses),
            joint_limits=tuple(tuple(limit) for limit in parameters.joint_limits),
            spring_shift=parameters.spring_shift,
            joint_friction=parameters.joint_friction,
        )


@dataclass
class LegState:
    """Per-tick mutable state of one leg."""

    angles: np.ndarray = field(default_factory=lambda: np.zeros(constants.JOINTS_PER_LEG))
    seed: np.ndarray = field(default_factory=lambda: np.zeros(constants.JOINTS_PER_LEG))
    foot_target: np.ndarray = field(default_factory=lambda: np.zeros(3))
    is_swinging: bool = False
    consecutive_failures: int = 0


class LegModel:
    """
    One leg: converts between joint space and foot space, and computes the
    torques that hold the leg against gravity and foot contact forces.
    """

    def __init__(self, geometry: LegGeometry, kinematics: LegKinematics | None = None):
        self._geometry = geometry
        self._kinematics = kinematics or LegKinematics(
            geometry.hip_offset,
            geometry.upper_length,
            geometry.lower_length,
            geometry.link_masses,
            geometry.joint_limits,
            mirrored=not geometry.is_left,
        )

        angle = geometry.mount_angle
        offset = geometry.radial_offset * np.array([np.cos(angle), np.sin(angle), 0.0])
        self._base_frame = homogeneous(rot_z(angle), offset)
        self._base_frame_inverse = inverse(self._base_frame)

        self._nominal_seed = self.mirror(NOMINAL_SEED)
        self.state = LegState(seed=self._nominal_seed.copy(), angles=self._nominal_seed.copy())

    @property
    def name(self) -> LegName:
        return self._geometry.name

    @property
    def geometry(self) -> LegGeometry:
        return self._geometry

    @property
    def kinematics(self) -> LegKinematics:
        return self._kinematics

    def mirror(self, physical_angles) -> np.ndarray:
        """Convert angles from the left-leg convention to this leg's joint convention."""
        angles = np.array(physical_angles, dtype=float)
        if not self._geometry.is_left:
            angles[1:] = -angles[1:]
        return angles

    # ---------------------------------------------------------------
    # Frames
    # ---------------------------------------------------------------
    def get_base_frame(self) -> np.ndarray:
        """Mount transform of the leg relative to the body centre."""
        return self._base_frame.copy()

    def body_to_leg(self, point) -> np.ndarray:
        return transform_point(self._base_frame_inverse, point)

    def leg_to_body(self, point) -> np.ndarray:
        return transform_point(self._base_frame, point)

    def body_to_leg_direction(self, vector) -> np.ndarray:
        return self._base_frame[0:3, 0:3].T @ np.asarray(vector, dtype=float)

    def foot_position(self, angles=None) -> np.ndarray:
        """Foot position in the leg frame, for `angles` or the current state."""
        return self._kinematics.forward(self.state.angles if angles is None else angles)

    def foot_position_in_body(self, angles=None) -> np.ndarray:
        return self.leg_to_body(self.foot_position(angles))

    # ---------------------------------------------------------------
    # Inverse kinematics
    # ---------------------------------------------------------------
    def compute_ik(self, target_foot_position, seed_angles=None) -> np.ndarray:
        """
        Solve for joint angles placing the foot at `target_foot_position`
        (leg frame), staying on the branch closest to `seed_angles`.

        Raises:
            UnreachableTarget: the target is outside the workspace or only
                reachable outside the joint limits.
        """
        seed = self.state.seed if seed_angles is None else np.asarray(seed_angles, dtype=float)
        target = np.asarray(target_foot_position, dtype=float)

        reason = self._kinematics.workspace_violation(target)
        if reason is not None:
            raise UnreachableTarget(self.name.value, target, reason)

        angles = self._kinematics.solve_ik(seed, target)
        if angles is None or not np.all(np.isfinite(angles)):
            raise UnreachableTarget(self.name.value, target, 'no solution within the joint limits')
        return angles

    def compute_ik_in_body(self, target_in_body, seed_angles=None) -> np.ndarray:
        return self.compute_ik(self.body_to_leg(target_in_body), seed_angles)

    def can_reach(self, target_foot_position) -> bool:
        """Some joint configuration within the limits places the foot at the target (leg frame)."""
        target = np.asarray(target_foot_position, dtype=float)
        if self._kinematics.workspace_violation(target) is not None:
            return False
        return self._kinematics.solve_ik(self._nominal_seed, target) is not None

    def nominal_angles(self, target_foot_position) -> np.ndarray:
        """IK solution for `target_foot_position` seeded from the knee-down posture."""
        return self.compute_ik(target_foot_position, self._nominal_seed)

    # ---------------------------------------------------------------
    # Compensation
    # ---------------------------------------------------------------
    def compute_compensation_torque(
        self,
        joint_angles,
        joint_velocities,
        gravity_direction,
        external_foot_force=None,
        gravity: float = constants.STANDARD_GRAVITY,
    ) -> np.ndarray:
        """
        Joint torques offsetting the leg's own weight and the external force
        acting on the foot. Gravity direction and foot force are given in the
        body frame.
        """
        angles = np.asarray(joint_angles, dtype=float)
        velocities = np.asarray(joint_velocities, dtype=float)

        gravity_leg = gravity * self.body_to_leg_direction(gravity_direction)
        torques = np.zeros(constants.JOINTS_PER_LEG)
        for mass, jacobian in zip(self._kinematics.masses(), self._kinematics.com_jacobians(angles)):
            torques -= jacobian.T @ (mass * gravity_leg)

        if external_foot_force is not None:
            force_leg = self.body_to_leg_direction(external_foot_force)
            torques -= self._kinematics.jacobian(angles).T @ force_leg

        torques += self._geometry.joint_friction * velocities
        torques[1] += self.mirror((0.0, self._geometry.spring_shift, 0.0))[1]
        return torques

    # ---------------------------------------------------------------
    # State bookkeeping
    # ---------------------------------------------------------------
    def reset_seed(self, angles=None) -> None:
        """Re-seed the next IK solve, from the nominal posture unless angles are given."""
        self.state.seed = (self._nominal_seed if angles is None else np.asarray(angles, dtype=float)).copy()

    def commit(self, angles, foot_target) -> None:
        """Record the solution accepted this tick; it seeds the next solve."""
        self.state.angles = np.array(angles, dtype=float)
        self.state.seed = self.state.angles.copy()
        self.state.foot_target = np.array(foot_target, dtype=float)
        self.state.consecutive_failures = 0

    def set_measured_angles(self, angles) -> None:
        self.state.angles = np.array(angles, dtype=float)
