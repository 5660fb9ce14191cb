from typing import Protocol

import numpy as np


class InputDevice(Protocol):
    """Operator input polled by the InputPoller thread."""

    def update(self) -> None:
        """Consume whatever the device reported since the last call."""
        ...

    def get_translation_velocity_cmd(self) -> np.ndarray:
        ...

    def get_rotation_velocity_cmd(self) -> np.ndarray:
        ...

    def get_quit_requested(self) -> bool:
        ...

    def is_connected(self) -> bool:
        ...


class NullInputDevice:
    """Always connected, never commands anything."""

    def update(self) -> None:
        pass

    def get_translation_velocity_cmd(self) -> np.ndarray:
        return np.zeros(3)

    def get_rotation_velocity_cmd(self) -> np.ndarray:
        return np.zeros(3)

    def get_quit_requested(self) -> bool:
        return False

    def is_connected(self) -> bool:
        return True
