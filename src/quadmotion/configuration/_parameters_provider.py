import json
from pathlib import Path
from typing import Any, Dict

import jmespath  # http://jmespath.org/tutorial.html

from quadmotion import labels
from quadmotion.configuration._quadruped_parameters import QuadrupedParameters
from quadmotion.errors import ConfigurationError
from quadmotion.logger import Logger
from quadmotion.singleton import Singleton

log = Logger().setup_logger('Configuration')

DEFAULT_PARAMETERS_PATH = Path.home() / 'quadmotion' / 'configuration' / 'quadruped_parameters.json'

# Parameter name -> search pattern inside the nested parameter file
PARAMETER_PATTERNS = {
    'body_length': 'robot.body_length',
    'body_width': 'robot.body_width',
    'body_mass': 'robot.body_mass',
    'hip_link_length': 'robot.leg.hip_link_length',
    'upper_leg_link_length': 'robot.leg.upper_leg_link_length',
    'lower_leg_link_length': 'robot.leg.lower_leg_link_length',
    'link_masses': 'robot.leg.link_masses',
    'joint_limits': 'robot.leg.joint_limits',
    'spring_shift': 'robot.leg.spring_shift',
    'joint_friction': 'robot.leg.joint_friction',
    'rest_height': 'posture.rest_height',
    'rest_reach': 'posture.rest_reach',
    'spread_reach': 'posture.spread_reach',
    'stand_height': 'posture.stand_height',
    'stance_x': 'posture.stance_x',
    'stance_y': 'posture.stance_y',
    'step_height': 'gait.step_height',
    'leg_swing_time': 'gait.leg_swing_time',
    'max_fwd_velocity': 'gait.max_fwd_velocity',
    'max_side_velocity': 'gait.max_side_velocity',
    'max_yaw_rate': 'gait.max_yaw_rate',
    'control_period': 'control.period',
    'feedback_timeout': 'control.feedback_timeout',
    'input_poll_interval': 'control.input_poll_interval',
    'startup_seconds': 'control.startup_seconds',
    'balance_gain': 'control.balance_gain',
    'max_orient_deg': 'control.max_orient_deg',
    'max_body_tilt': 'control.max_body_tilt',
    'max_ik_failures': 'safety.max_ik_failures',
    'max_joint_velocity': 'safety.max_joint_velocity',
    'stand_up_requires_completion': 'safety.stand_up_requires_completion',
    'disconnect_policy': 'safety.disconnect_policy',
    'steady_behavior': 'behavior.steady',
}


class ParametersProvider(metaclass=Singleton):
    """Loads the quadruped parameters once and hands out the same instance."""

    def __init__(self, json_path: Path | str | None = None):
        self._json_path = Path(json_path) if json_path else DEFAULT_PARAMETERS_PATH
        self._values: Dict[str, Any] = {}

        if self._json_path.exists():
            self._values = self._load(self._json_path)
            self._parameters = QuadrupedParameters.from_dict(self._extract(self._values))
            log.info(labels.CONFIG_LOADED.format(self._json_path))
        else:
            self._parameters = QuadrupedParameters.defaults()
            log.info(labels.CONFIG_DEFAULTS.format(self._json_path))

    @property
    def parameters(self) -> QuadrupedParameters:
        return self._parameters

    def get(self, search_pattern: str) -> Any:
        """Raw lookup inside the loaded parameter file."""
        return jmespath.search(search_pattern, self._values)

    @staticmethod
    def _load(json_path: Path) -> Dict[str, Any]:
        try:
            with open(json_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log.error(labels.CONFIG_INVALID.format(json_path, e))
            raise ConfigurationError(labels.CONFIG_INVALID.format(json_path, e)) from e

        if not isinstance(data, dict):
            raise ConfigurationError(labels.CONFIG_INVALID.format(json_path, 'top level must be an object'))
        return data

    @staticmethod
    def _extract(values: Dict[str, Any]) -> Dict[str, Any]:
        extracted = {}
        for name, pattern in PARAMETER_PATTERNS.items():
            value = jmespath.search(pattern, values)
            if value is not None:
                extracted[name] = value
        return extracted
