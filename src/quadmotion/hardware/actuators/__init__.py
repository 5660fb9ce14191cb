from ._actuator_channel import ActuatorChannel
from ._feedback_recorder import FeedbackRecorder
from ._simulated_actuator_channel import SimulatedActuatorChannel

__all__ = ["ActuatorChannel", "FeedbackRecorder", "SimulatedActuatorChannel"]
