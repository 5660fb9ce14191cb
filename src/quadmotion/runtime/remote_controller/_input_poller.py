import threading
import time
from typing import Callable, Optional

from quadmotion import constants, labels
from quadmotion.logger import Logger
from quadmotion.runtime.messaging import LatestValue
from quadmotion.runtime.motion_controller.models import InputSnapshot
from quadmotion.runtime.remote_controller._input_device import InputDevice

log = Logger().setup_logger('Input poller')


class InputPoller:
    """
    Polls an input device on its own thread and publishes the most recent
    snapshot. The control thread reads it without ever blocking.
    """

    def __init__(
        self,
        device: InputDevice,
        channel: LatestValue,
        stop_event: Optional[threading.Event] = None,
        interval: float = constants.INPUT_POLL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._device = device
        self._channel = channel
        self._stop_event = stop_event or threading.Event()
        self._interval = interval
        self._clock = clock
        self._thread: Optional[threading.Thread] = None
        self._last = InputSnapshot.idle()

    def poll_once(self) -> InputSnapshot:
        """Read the device and publish one snapshot."""
        try:
            self._device.update()
            snapshot = InputSnapshot(
                translation_velocity=self._device.get_translation_velocity_cmd(),
                rotation_velocity=self._device.get_rotation_velocity_cmd(),
                quit_requested=self._device.get_quit_requested(),
                connected=self._device.is_connected(),
                timestamp=self._clock(),
            )
        except OSError as e:
            log.error(labels.REMOTE_POLLER_ERROR.format(e))
            snapshot = self._last.disconnected()

        self._last = snapshot
        self._channel.put(snapshot)
        return snapshot

    def run(self) -> None:
        while not self._stop_event.is_set():
            self.poll_once()
            self._stop_event.wait(self._interval)

    def start(self) -> None:
        self._thread = threading.Thread(target=self.run, name='InputPoller', daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
