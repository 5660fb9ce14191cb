"""
Alternating-pair gait: one diagonal leg group swings while the other
carries the body, and the two swap every swing duration.

All foot targets are expressed in the body frame.
"""

from dataclasses import dataclass
from math import cos, pi, sin
from typing import Callable, Dict, Optional

import numpy as np

from quadmotion import labels
from quadmotion.configuration import LEG_ORDER, LegGroup, LegName, QuadrupedParameters
from quadmotion.kinematics.rotation import rot_z
from quadmotion.logger import Logger

log = Logger().setup_logger('Gait scheduler')

# (leg, body-frame foot position) -> the leg can place its foot there
Reachable = Callable[[LegName, np.ndarray], bool]

# Stance travel checked either side of the nominal stance, in swing durations:
# a foot lands half a step ahead and may then slide a whole step back
_SWEEP_SAMPLES = np.linspace(-1.5, 1.5, 13)
_LIFT_SAMPLES = (-0.5, 0.0, 0.5)
_SCALE_ITERATIONS = 6
# Scaled commands keep clear of the reach boundary; the stance slide curves under yaw
_REACH_MARGIN = 0.9


@dataclass
class GaitPhase:
    """Progress of one leg group through its swing."""

    group: LegGroup
    phase_time: float = 0.0
    is_swinging: bool = False


@dataclass
class _SwingTrajectory:
    start: np.ndarray
    end: np.ndarray


class GaitScheduler:
    """
    Without a `reachable` check the command is only clamped to the velocity
    limits. With one, it is also scaled down until every foot position the
    gait can produce from it stays reachable.
    """

    def __init__(
        self,
        parameters: QuadrupedParameters,
        stance: Optional[Dict[LegName, np.ndarray]] = None,
        reachable: Optional[Reachable] = None,
    ):
        self._parameters = parameters
        self._reachable = reachable
        self._scale_key: Optional[tuple] = None
        self._scale = 1.0
        self._nominal = {leg: np.array(parameters.stance_position(leg), dtype=float) for leg in LEG_ORDER}

        self._velocity = np.zeros(2)
        self._yaw_rate = 0.0
        self._duration = parameters.leg_swing_time
        self._phases = {group: GaitPhase(group) for group in LegGroup}
        self._swings: Dict[LegName, _SwingTrajectory] = {}
        self._targets: Dict[LegName, np.ndarray] = {}
        self._last_elapsed = 0.0

        self.reset(stance)

    # ---------------------------------------------------------------
    # Commands
    # ---------------------------------------------------------------
    def set_velocity_command(self, translation, yaw_rate: float = 0.0) -> None:
        """Body velocity (m/s, x forward, y left) and yaw rate (rad/s), clamped to the gait limits."""
        p = self._parameters
        vx, vy = float(translation[0]), float(translation[1])
        velocity = np.array(
            [
                max(-p.max_fwd_velocity, min(p.max_fwd_velocity, vx)),
                max(-p.max_side_velocity, min(p.max_side_velocity, vy)),
            ]
        )
        yaw_rate = max(-p.max_yaw_rate, min(p.max_yaw_rate, float(yaw_rate)))

        if self._reachable is not None:
            scale = self._reachable_scale(velocity, yaw_rate)
            velocity = velocity * scale
            yaw_rate = yaw_rate * scale

        self._velocity = velocity
        self._yaw_rate = yaw_rate

    @property
    def velocity_command(self) -> tuple[np.ndarray, float]:
        return self._velocity.copy(), self._yaw_rate

    # ---------------------------------------------------------------
    # Phases
    # ---------------------------------------------------------------
    def reset(self, stance: Optional[Dict[LegName, np.ndarray]] = None) -> None:
        """All legs in stance at `stance`, or at the nominal stance, with no velocity command."""
        source = stance if stance is not None else self._nominal
        self._targets = {leg: np.array(source[leg], dtype=float) for leg in LEG_ORDER}
        self._swings.clear()
        self._velocity = np.zeros(2)
        self._yaw_rate = 0.0
        for phase in self._phases.values():
            phase.phase_time = 0.0
            phase.is_swinging = False
        self._last_elapsed = 0.0

    def prepare_swing(self, group: LegGroup, duration: Optional[float] = None) -> None:
        """
        Start a swing of `group` from the current foot targets towards the
        next footholds. The other group becomes the stance group.
        """
        self._duration = duration if duration is not None else self._parameters.leg_swing_time

        self._swings = {leg: _SwingTrajectory(self._targets[leg].copy(), self._foothold(leg)) for leg in group.legs}

        self._phases[group].is_swinging = True
        self._phases[group].phase_time = 0.0
        self._phases[group.other].is_swinging = False
        self._phases[group.other].phase_time = 0.0
        self._last_elapsed = 0.0
        log.debug(f'Swing {group.name} over {self._duration:.3f}s')

    def advance(self, elapsed_in_phase: float) -> Dict[LegName, np.ndarray]:
        """Foot targets `elapsed_in_phase` seconds into the current swing."""
        elapsed = max(0.0, elapsed_in_phase)
        step = max(0.0, elapsed - self._last_elapsed)
        self._last_elapsed = max(self._last_elapsed, elapsed)

        ratio = min(1.0, elapsed / self._duration)
        for leg in LEG_ORDER:
            swing = self._swings.get(leg)
            if swing is not None:
                self._targets[leg] = self._swing_point(swing, ratio)
            else:
                self._targets[leg] = self._slide(self._targets[leg], step)

        for phase in self._phases.values():
            if phase.is_swinging:
                # wraps to 0 at the swing duration
                phase.phase_time = elapsed % self._duration

        return self.foot_targets()

    def is_phase_complete(self, elapsed: float) -> bool:
        return elapsed >= self._duration

    # ---------------------------------------------------------------
    # Queries
    # ---------------------------------------------------------------
    @property
    def duration(self) -> float:
        return self._duration

    def phase(self, group: LegGroup) -> GaitPhase:
        return self._phases[group]

    @property
    def swinging_group(self) -> Optional[LegGroup]:
        for group, phase in self._phases.items():
            if phase.is_swinging:
                return group
        return None

    def is_swinging(self, leg: LegName) -> bool:
        return leg in self._swings

    def foot_targets(self) -> Dict[LegName, np.ndarray]:
        return {leg: target.copy() for leg, target in self._targets.items()}

    # ---------------------------------------------------------------
    # Trajectories
    # ---------------------------------------------------------------
    @staticmethod
    def _displaced(point: np.ndarray, velocity: np.ndarray, yaw_rate: float, seconds: float) -> np.ndarray:
        """`point` carried along the body motion for `seconds`, height unchanged."""
        moved = rot_z(yaw_rate * seconds) @ point
        moved[0:2] += velocity * seconds
        moved[2] = point[2]
        return moved

    def _foothold(self, leg: LegName) -> np.ndarray:
        """Nominal stance shifted half a step along the commanded motion."""
        return self._displaced(self._nominal[leg], self._velocity, self._yaw_rate, self._duration / 2.0)

    def _swing_point(self, swing: _SwingTrajectory, ratio: float) -> np.ndarray:
        smooth = (1.0 - cos(pi * ratio)) / 2.0
        point = swing.start + (swing.end - swing.start) * smooth
        point[2] += self._parameters.step_height * sin(pi * ratio)
        return point

    def _slide(self, target: np.ndarray, step: float) -> np.ndarray:
        """Stance feet move opposite to the body over `step` seconds."""
        return self._displaced(target, self._velocity, self._yaw_rate, -step)

    # ---------------------------------------------------------------
    # Reach
    # ---------------------------------------------------------------
    def _reachable_scale(self, velocity: np.ndarray, yaw_rate: float) -> float:
        """Largest fraction of the command whose foot sweep stays reachable."""
        key = (float(velocity[0]), float(velocity[1]), yaw_rate)
        if key == self._scale_key:
            return self._scale

        scale = 1.0
        if not self._sweep_reachable(velocity, yaw_rate):
            low, high = 0.0, 1.0
            for _ in range(_SCALE_ITERATIONS):
                middle = (low + high) / 2.0
                if self._sweep_reachable(velocity * middle, yaw_rate * middle):
                    low = middle
                else:
                    high = middle
            scale = low * _REACH_MARGIN
            log.debug(labels.GAIT_COMMAND_SCALED.format(scale))

        self._scale_key, self._scale = key, scale
        return scale

    def _sweep_reachable(self, velocity: np.ndarray, yaw_rate: float) -> bool:
        span = max(self._duration, self._parameters.leg_swing_time)
        lift = np.array([0.0, 0.0, self._parameters.step_height])
        for leg, nominal in self._nominal.items():
            for sample in _SWEEP_SAMPLES:
                if not self._reachable(leg, self._displaced(nominal, velocity, yaw_rate, sample * span)):
                    return False
            for sample in _LIFT_SAMPLES:
                if not self._reachable(leg, self._displaced(nominal, velocity, yaw_rate, sample * span) + lift):
                    return False
        return True
