from ._input_device import InputDevice, NullInputDevice
from ._input_poller import InputPoller
from ._joystick_input_device import JoystickInputDevice, JsEvent

__all__ = [
    "InputDevice",
    "InputPoller",
    "JoystickInputDevice",
    "JsEvent",
    "NullInputDevice",
]
