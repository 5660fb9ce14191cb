import io
import struct
import threading

import numpy as np
import pytest

from quadmotion.runtime.messaging import LatestValue
from quadmotion.runtime.remote_controller import InputPoller, JoystickInputDevice, JsEvent, NullInputDevice
from quadmotion.runtime.remote_controller._mappings import (
    AXIS_HAT0X,
    AXIS_LX,
    AXIS_LY,
    AXIS_LZ,
    AXIS_RZ,
    BTN_A,
    BTN_SELECT,
    JS_EVENT_AXIS,
    JS_EVENT_BUTTON,
    JS_EVENT_INIT,
)

# axis numbers as reported by the fake pad below
LEFT_X, LEFT_Y, RIGHT_Y, RIGHT_X, DPAD_X = range(5)
BUTTON_A, BUTTON_BACK = range(2)


def event_bytes(value, event_type, number):
    return struct.pack('IhBB', 0, value, event_type, number)


@pytest.fixture
def joystick():
    device = JoystickInputDevice('js_test')
    device.axis_codes = [AXIS_LX, AXIS_LY, AXIS_LZ, AXIS_RZ, AXIS_HAT0X]
    device.button_codes = [BTN_A, BTN_SELECT]
    device._connected = True
    return device


def test_event_unpacking():
    event = JsEvent.unpack(event_bytes(-1200, JS_EVENT_AXIS, 3))

    assert event.value == -1200
    assert event.event_type == JS_EVENT_AXIS
    assert event.number == 3


def test_left_stick_drives_translation(joystick):
    joystick._apply_event(JsEvent(0, -32767, JS_EVENT_AXIS, LEFT_Y))
    joystick._apply_event(JsEvent(0, 16384, JS_EVENT_AXIS, LEFT_X))

    # up on the stick is forward, right on the stick is towards -y
    np.testing.assert_allclose(joystick.get_translation_velocity_cmd(), [1.0, -0.5, 0.0])


def test_right_stick_and_dpad_drive_rotation(joystick):
    joystick._apply_event(JsEvent(0, 32767, JS_EVENT_AXIS, RIGHT_X))
    joystick._apply_event(JsEvent(0, 32767, JS_EVENT_AXIS, RIGHT_Y))
    joystick._apply_event(JsEvent(0, -32767, JS_EVENT_AXIS, DPAD_X))

    np.testing.assert_allclose(joystick.get_rotation_velocity_cmd(), [1.0, -1.0, 1.0])


def test_small_deflections_fall_in_the_deadzone(joystick):
    joystick._apply_event(JsEvent(0, 2000, JS_EVENT_AXIS, LEFT_Y))

    np.testing.assert_array_equal(joystick.get_translation_velocity_cmd(), 0.0)


def test_init_events_are_ignored(joystick):
    joystick._apply_event(JsEvent(0, 32767, JS_EVENT_AXIS | JS_EVENT_INIT, LEFT_Y))
    joystick._apply_event(JsEvent(0, 1, JS_EVENT_BUTTON | JS_EVENT_INIT, BUTTON_BACK))

    np.testing.assert_array_equal(joystick.get_translation_velocity_cmd(), 0.0)
    assert not joystick.get_quit_requested()


def test_unknown_axis_numbers_are_ignored(joystick):
    joystick._apply_event(JsEvent(0, 32767, JS_EVENT_AXIS, 42))

    np.testing.assert_array_equal(joystick.get_translation_velocity_cmd(), 0.0)
    np.testing.assert_array_equal(joystick.get_rotation_velocity_cmd(), 0.0)


def test_back_button_requests_quit(joystick):
    joystick._apply_event(JsEvent(0, 1, JS_EVENT_BUTTON, BUTTON_A))
    assert not joystick.get_quit_requested()

    joystick._apply_event(JsEvent(0, 1, JS_EVENT_BUTTON, BUTTON_BACK))
    assert joystick.get_quit_requested()

    joystick._apply_event(JsEvent(0, 0, JS_EVENT_BUTTON, BUTTON_BACK))
    assert not joystick.get_quit_requested()


def test_update_drains_pending_events(joystick):
    joystick.jsdev = io.BytesIO(
        event_bytes(-32767, JS_EVENT_AXIS, LEFT_Y) + event_bytes(0, JS_EVENT_AXIS, LEFT_Y) + event_bytes(16384, JS_EVENT_AXIS, LEFT_X)
    )

    joystick.update()

    # only the latest value of each axis counts
    np.testing.assert_allclose(joystick.get_translation_velocity_cmd(), [0.0, -0.5, 0.0])
    assert joystick.is_connected()


def test_truncated_read_disconnects(joystick):
    joystick._apply_event(JsEvent(0, -32767, JS_EVENT_AXIS, LEFT_Y))
    joystick.jsdev = io.BytesIO(b'\x00\x01\x02')

    joystick.update()

    assert not joystick.is_connected()
    assert joystick.jsdev is None
    np.testing.assert_array_equal(joystick.get_translation_velocity_cmd(), 0.0)


def test_scan_without_device_stays_disconnected(tmp_path):
    device = JoystickInputDevice('js0', device_path=str(tmp_path))

    assert not device.scan()
    assert not device.is_connected()


class FlakyDevice(NullInputDevice):
    """Reports a forward command, then fails every read."""

    def __init__(self):
        self.reads = 0

    def update(self):
        self.reads += 1
        if self.reads > 1:
            raise OSError('device unplugged')

    def get_translation_velocity_cmd(self):
        return np.array([0.5, 0.0, 0.0])


def test_poller_publishes_snapshots():
    channel = LatestValue()
    poller = InputPoller(NullInputDevice(), channel, clock=lambda: 2.5)

    snapshot = poller.poll_once()

    assert channel.get() is snapshot
    assert snapshot.connected
    assert snapshot.timestamp == 2.5
    assert not snapshot.quit_requested


def test_poller_flags_read_errors_as_disconnected():
    channel = LatestValue()
    poller = InputPoller(FlakyDevice(), channel)

    first = poller.poll_once()
    second = poller.poll_once()

    assert first.connected
    assert not second.connected
    np.testing.assert_allclose(second.translation_velocity, [0.5, 0.0, 0.0])
    assert channel.get() is second


def test_poller_thread_stops_on_request():
    channel = LatestValue()
    stop_event = threading.Event()
    poller = InputPoller(NullInputDevice(), channel, stop_event, interval=0.001)

    poller.start()
    stop_event.wait(0.05)
    poller.stop(timeout=1.0)

    assert stop_event.is_set()
    assert channel.get() is not None


def test_latest_value_keeps_only_the_newest():
    channel = LatestValue()
    assert channel.get() is None

    channel.put(1)
    channel.put(2)

    assert channel.get() == 2
    # reading does not consume
    assert channel.get() == 2


def test_latest_value_under_concurrent_puts():
    channel = LatestValue(0)

    def producer():
        for value in range(500):
            channel.put(value)

    threads = [threading.Thread(target=producer) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert channel.get() == 499
