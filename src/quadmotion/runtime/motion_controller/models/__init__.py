from .feedback import Feedback
from .input_snapshot import InputSnapshot
from .joint_command import JointCommand

__all__ = [
    "Feedback",
    "InputSnapshot",
    "JointCommand",
]
