from dataclasses import dataclass, field, fields
from enum import Enum
from math import atan2, hypot
from typing import Any, Dict, List, Tuple

from quadmotion import constants
from quadmotion.configuration._leg_name import LEG_ORDER, LegName
from quadmotion.errors import ConfigurationError


class DisconnectPolicy(Enum):
    """What the control loop does when the operator input drops out mid-run."""

    CONTINUE = 'continue'
    SAFE_STOP = 'safe_stop'


class SteadyBehavior(Enum):
    """Behaviour entered once the stand-up sequence has finished."""

    PASSIVE_BALANCE = 'passive_balance'
    ORIENT_TELEOP = 'orient_teleop'
    STEADY_GAIT = 'steady_gait'


@dataclass
class QuadrupedParameters:
    """Configuration parameters for the quadruped control core."""

    # Robot dimensions (m)
    body_length: float = 0.40
    body_width: float = 0.20
    hip_link_length: float = 0.06
    upper_leg_link_length: float = 0.20
    lower_leg_link_length: float = 0.22

    # Masses (kg); one entry per leg link, hip to foot
    link_masses: List[float] = field(default_factory=lambda: [0.30, 0.50, 0.20])
    body_mass: float = 4.0

    # Joint limits (rad) for yaw, hip pitch and knee
    joint_limits: List[List[float]] = field(default_factory=lambda: [[-1.2, 1.2], [-2.0, 2.0], [-2.8, 2.8]])
    # Constant torque (N*m) offsetting the hip pitch spring
    spring_shift: float = 0.0
    # Viscous friction offset (N*m per rad/s)
    joint_friction: float = 0.0

    # Postures, feet expressed relative to the leg mount (reach) or body centre (stance)
    rest_height: float = 0.05
    rest_reach: float = 0.12
    spread_reach: float = 0.28
    stand_height: float = 0.20
    stance_x: float = 0.36
    stance_y: float = 0.20

    # Gait
    step_height: float = 0.06
    leg_swing_time: float = constants.LEG_SWING_TIME
    max_fwd_velocity: float = 0.20
    max_side_velocity: float = 0.15
    max_yaw_rate: float = 0.50

    # Control
    control_period: float = constants.CONTROL_PERIOD
    feedback_timeout: float = constants.FEEDBACK_TIMEOUT
    input_poll_interval: float = constants.INPUT_POLL_INTERVAL
    startup_seconds: float = constants.STARTUP_SECONDS
    balance_gain: float = constants.BALANCE_GAIN
    max_orient_deg: float = constants.MAX_ORIENT_DEG
    max_body_tilt: float = 0.35
    max_ik_failures: int = constants.MAX_IK_FAILURES
    max_joint_velocity: float = constants.MAX_JOINT_VELOCITY
    stand_up_requires_completion: bool = False
    steady_behavior: SteadyBehavior = SteadyBehavior.PASSIVE_BALANCE
    disconnect_policy: DisconnectPolicy = DisconnectPolicy.CONTINUE

    def __post_init__(self) -> None:
        if isinstance(self.steady_behavior, str):
            self.steady_behavior = SteadyBehavior(self.steady_behavior)
        if isinstance(self.disconnect_policy, str):
            self.disconnect_policy = DisconnectPolicy(self.disconnect_policy)
        self.validate()

    @classmethod
    def defaults(cls) -> 'QuadrupedParameters':
        return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QuadrupedParameters':
        """Build parameters from a flat mapping, ignoring nothing silently."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown parameters: {', '.join(unknown)}")
        try:
            return cls(**data)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(str(e)) from e

    def validate(self) -> None:
        positive = (
            'body_length',
            'body_width',
            'hip_link_length',
            'upper_leg_link_length',
            'lower_leg_link_length',
            'stand_height',
            'leg_swing_time',
            'control_period',
            'startup_seconds',
            'max_joint_velocity',
        )
        for name in positive:
            if getattr(self, name) <= 0:
                raise ConfigurationError(f'{name} must be positive, got {getattr(self, name)}')
        if not 0.0 < self.balance_gain <= 1.0:
            raise ConfigurationError(f'balance_gain must be in (0, 1], got {self.balance_gain}')
        if len(self.link_masses) != constants.JOINTS_PER_LEG:
            raise ConfigurationError('link_masses needs one entry per leg link')
        if len(self.joint_limits) != constants.JOINTS_PER_LEG:
            raise ConfigurationError('joint_limits needs one (min, max) pair per joint')
        for low, high in self.joint_limits:
            if low >= high:
                raise ConfigurationError(f'joint limit ({low}, {high}) is empty')
        if self.max_ik_failures < 1:
            raise ConfigurationError('max_ik_failures must be at least 1')

    # ------------------------------------------------------------------
    # Derived geometry
    # ------------------------------------------------------------------
    def hip_position(self, leg: LegName) -> Tuple[float, float]:
        """Mount point of a leg in the body frame (x forward, y left)."""
        x = self.body_length / 2.0 * (1 if leg.is_front else -1)
        y = self.body_width / 2.0 * (1 if leg.is_left else -1)
        return x, y

    def mount_angle(self, leg: LegName) -> float:
        x, y = self.hip_position(leg)
        return atan2(y, x)

    def radial_offset(self, leg: LegName) -> float:
        x, y = self.hip_position(leg)
        return hypot(x, y)

    def stance_position(self, leg: LegName) -> Tuple[float, float, float]:
        """Nominal standing foot position in the body frame."""
        x = self.stance_x * (1 if leg.is_front else -1)
        y = self.stance_y * (1 if leg.is_left else -1)
        return x, y, -self.stand_height

    def stance(self) -> Dict[LegName, Tuple[float, float, float]]:
        return {leg: self.stance_position(leg) for leg in LEG_ORDER}

    # Stand-up postures, feet relative to the leg mount (leg frame)
    def rest_foot(self) -> Tuple[float, float, float]:
        return self.hip_link_length + self.rest_reach, 0.0, -self.rest_height

    def spread_foot(self) -> Tuple[float, float, float]:
        return self.hip_link_length + self.spread_reach, 0.0, -self.rest_height

    def standing_foot(self) -> Tuple[float, float, float]:
        return self.hip_link_length + self.spread_reach, 0.0, -self.stand_height
