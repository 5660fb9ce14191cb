from ._leg_name import LEG_ORDER, LegGroup, LegName
from ._parameters_provider import ParametersProvider
from ._quadruped_parameters import DisconnectPolicy, QuadrupedParameters, SteadyBehavior

__all__ = [
    "LEG_ORDER",
    "LegGroup",
    "LegName",
    "ParametersProvider",
    "QuadrupedParameters",
    "DisconnectPolicy",
    "SteadyBehavior",
]
