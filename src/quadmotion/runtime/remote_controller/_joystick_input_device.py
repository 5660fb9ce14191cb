"""
Joystick input device reading Linux js_event records.

Device discovery, ioctl mapping queries and event parsing follow the
joystick API in linux/joystick.h. The parsed state is exposed through the
InputDevice accessors as normalised velocity commands.
"""

import array
import os
import struct
import time
from dataclasses import dataclass
from fcntl import ioctl
from typing import Dict, List, Optional

import numpy as np

from quadmotion import labels
from quadmotion.constants import (
    AXIS_NORMALIZATION_CONSTANT,
    DEADZONE,
    DEVICE_PATH,
    JSDEV_READ_SIZE,
    JSIOCGAXES,
    JSIOCGAXMAP,
    JSIOCGBTNMAP,
    JSIOCGBUTTONS,
    JSIOCGNAME,
    RECONNECT_RETRY_DELAY,
)
from quadmotion.logger import Logger

from ._mappings import DRIVER_CODE_TO_INPUT_NAMES, JS_EVENT_AXIS, JS_EVENT_BUTTON, JS_EVENT_INIT

log = Logger().setup_logger('Remote controller')


@dataclass
class JsEvent:
    """Represents a single event from a Linux joystick device."""

    time: int  # Event timestamp (ms)
    value: int  # Value (-32767–32767 for axes, 0/1 for buttons)
    event_type: int  # Event type bitmask (JS_EVENT_AXIS, JS_EVENT_BUTTON, etc.)
    number: int  # Axis or button index

    @classmethod
    def unpack(cls, buffer: bytes) -> 'JsEvent':
        return cls(*struct.unpack('IhBB', buffer))


class JoystickInputDevice:
    """
    Gamepad on /dev/input/<device_name>.

    Sticks drive the commands:
    - left stick: body translation (up is forward, left is left)
    - right stick: roll and pitch
    - d-pad horizontal: yaw
    - back button: quit
    """

    def __init__(self, device_name: str = 'js0', device_path: str = DEVICE_PATH):
        self.device_name = device_name
        self._device_path = device_path
        self.jsdev = None
        self.axis_codes: List[int] = []
        self.button_codes: List[int] = []
        self._state: Dict[str, float] = {}
        self._connected = False
        self._last_attempt: Optional[float] = None

    # ---------------------------------------------------------------
    # Connection
    # ---------------------------------------------------------------
    def scan(self) -> bool:
        """Look for the configured device and open it. Returns True once connected."""
        log.info(labels.REMOTE_LOOKING_FOR_DEVICES.format(self.device_name))
        self._last_attempt = time.monotonic()
        self._connected = False
        self.jsdev = None

        try:
            names = os.listdir(self._device_path)
        except OSError as e:
            log.warning(labels.REMOTE_OPEN_WARNING.format(self._device_path, e))
            return False

        if self.device_name in names:
            return self._open_device(f'{self._device_path}/{self.device_name}')
        return False

    def _open_device(self, device_path: str) -> bool:
        try:
            log.debug(labels.REMOTE_ATTEMPTING_OPEN.format(device_path))
            self.jsdev = open(device_path, 'rb')
            os.set_blocking(self.jsdev.fileno(), False)
            log.info(labels.REMOTE_OPEN_SUCCESS.format(device_path))
        except OSError as e:
            log.warning(labels.REMOTE_OPEN_WARNING.format(device_path, e))
            self.jsdev = None
            return False

        try:
            self._initialize_device_mappings()
        except OSError as e:
            log.error(labels.REMOTE_INIT_MAPPING_ERROR.format(e))
            self.disconnect()
            return False

        self._connected = True
        return True

    def _initialize_device_mappings(self) -> None:
        buf = array.array('B', [0] * 64)
        ioctl(self.jsdev, JSIOCGNAME + (0x10000 * len(buf)), buf)
        js_name = buf.tobytes().rstrip(b'\x00').decode('utf-8')
        log.info(labels.REMOTE_CONNECTED_TO.format(js_name))

        buf = array.array('B', [0])
        ioctl(self.jsdev, JSIOCGAXES, buf)
        num_axes = buf[0]

        buf = array.array('B', [0])
        ioctl(self.jsdev, JSIOCGBUTTONS, buf)
        num_buttons = buf[0]

        buf = array.array('B', [0] * 0x40)
        ioctl(self.jsdev, JSIOCGAXMAP, buf)
        self.axis_codes = list(buf[:num_axes])

        buf = array.array('H', [0] * 0x200)
        ioctl(self.jsdev, JSIOCGBTNMAP, buf)
        self.button_codes = list(buf[:num_buttons])

        log.info(
            labels.REMOTE_AXES_FOUND.format(
                num_axes,
                ", ".join(DRIVER_CODE_TO_INPUT_NAMES.get(axis, f'unknown(0x{axis:02x})') for axis in self.axis_codes),
            )
        )
        log.info(
            labels.REMOTE_BUTTONS_FOUND.format(
                num_buttons,
                ", ".join(DRIVER_CODE_TO_INPUT_NAMES.get(btn, f'unknown(0x{btn:03x})') for btn in self.button_codes),
            )
        )

    def disconnect(self) -> None:
        """Close the device connection if open."""
        if self.jsdev:
            try:
                self.jsdev.close()
            except OSError as e:
                log.warning(labels.REMOTE_CLOSE_WARNING.format(e))
            finally:
                self.jsdev = None
        self._connected = False
        self._state.clear()

    # ---------------------------------------------------------------
    # Events
    # ---------------------------------------------------------------
    def update(self) -> None:
        """Drain pending events; retry the connection when it has been lost."""
        if not self._connected:
            if self._last_attempt is None or time.monotonic() - self._last_attempt >= RECONNECT_RETRY_DELAY:
                self.scan()
            return

        try:
            while True:
                evbuf = self.jsdev.read(JSDEV_READ_SIZE)
                if not evbuf:
                    break
                self._apply_event(JsEvent.unpack(evbuf))
        except (OSError, struct.error) as e:
            log.error(labels.REMOTE_READ_ERROR.format(e))
            self.disconnect()

    def _apply_event(self, event: JsEvent) -> None:
        # Skip initialization events
        if event.event_type & JS_EVENT_INIT:
            return

        if event.event_type & JS_EVENT_BUTTON:
            if event.number < len(self.button_codes):
                button = DRIVER_CODE_TO_INPUT_NAMES.get(self.button_codes[event.number])
                if button:
                    self._state[button] = 1.0 if event.value else 0.0

        elif event.event_type & JS_EVENT_AXIS:
            if event.number < len(self.axis_codes):
                axis = DRIVER_CODE_TO_INPUT_NAMES.get(self.axis_codes[event.number])
                if axis:
                    self._state[axis] = self._normalize(event.value)

    @staticmethod
    def _normalize(value: int) -> float:
        fvalue = max(-1.0, min(1.0, round(value / AXIS_NORMALIZATION_CONSTANT, 3)))
        # Apply deadzone filter
        if abs(fvalue) < DEADZONE:
            fvalue = 0.0
        return fvalue

    def _value(self, name: str) -> float:
        return self._state.get(name, 0.0)

    # ---------------------------------------------------------------
    # InputDevice accessors
    # ---------------------------------------------------------------
    def get_translation_velocity_cmd(self) -> np.ndarray:
        # stick y grows downwards, stick x grows to the right
        return np.array([-self._value('left_stick_y'), -self._value('left_stick_x'), 0.0])

    def get_rotation_velocity_cmd(self) -> np.ndarray:
        return np.array([self._value('right_stick_x'), -self._value('right_stick_y'), -self._value('dpad_horizontal')])

    def get_quit_requested(self) -> bool:
        return self._value('back') > 0.0

    def is_connected(self) -> bool:
        return self._connected
