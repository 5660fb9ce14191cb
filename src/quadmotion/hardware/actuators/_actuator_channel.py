from typing import Optional, Protocol

from quadmotion.runtime.motion_controller.models import Feedback, JointCommand


class ActuatorChannel(Protocol):
    """Transport to the twelve networked joint actuators."""

    def is_connected(self) -> bool:
        ...

    def get_feedback(self, timeout: float) -> Optional[Feedback]:
        """Latest feedback sample, or None if none arrived within `timeout` seconds."""
        ...

    def send_command(self, command: JointCommand) -> None:
        ...
