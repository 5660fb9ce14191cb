"""
Fixed-rate control loop running the state machine against an actuator channel.
"""

import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Optional

from quadmotion import labels
from quadmotion.configuration import DisconnectPolicy, QuadrupedParameters
from quadmotion.errors import ConnectivityFailure, PersistentUnreachableTarget
from quadmotion.hardware.actuators import ActuatorChannel, FeedbackRecorder
from quadmotion.logger import Logger
from quadmotion.runtime.messaging import LatestValue
from quadmotion.runtime.motion_controller.models import Feedback, InputSnapshot
from quadmotion.runtime.motion_controller.state import ControlStateMachine
from quadmotion.runtime.remote_controller import InputDevice

log = Logger().setup_logger('Control loop')

# A tick longer than this many periods counts as an overrun
OVERRUN_FACTOR = 1.5


@dataclass
class LoopStatistics:
    ticks: int = 0
    overruns: int = 0
    last_dt: float = 0.0
    dt_history: Deque[float] = field(default_factory=lambda: deque(maxlen=1000))

    def record(self, dt: float) -> None:
        self.ticks += 1
        self.last_dt = dt
        self.dt_history.append(dt)


@dataclass
class ControlContext:
    """Everything the control and input threads share."""

    stop_event: threading.Event = field(default_factory=threading.Event)
    input_channel: LatestValue = field(default_factory=LatestValue)
    statistics: LoopStatistics = field(default_factory=LoopStatistics)
    error: Optional[BaseException] = None


class ControlLoop:
    """
    Runs one tick per control period: read feedback, tick the state
    machine, send the command. Only the residual of each period is slept
    and overruns are never caught up.
    """

    def __init__(
        self,
        actuators: ActuatorChannel,
        state_machine: ControlStateMachine,
        context: Optional[ControlContext] = None,
        parameters: Optional[QuadrupedParameters] = None,
        input_device: Optional[InputDevice] = None,
        recorder: Optional[FeedbackRecorder] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        max_ticks: Optional[int] = None,
    ):
        self._actuators = actuators
        self._state_machine = state_machine
        self._controller = state_machine.controller
        self.context = context or ControlContext()
        self._parameters = parameters or self._controller.parameters
        self._input_device = input_device
        self._recorder = recorder
        self._clock = clock
        self._sleep = sleep
        self._max_ticks = max_ticks

        self._thread: Optional[threading.Thread] = None
        self._feedback: Optional[Feedback] = None
        self._last_snapshot = InputSnapshot.idle()
        self._input_lost = False

    @property
    def statistics(self) -> LoopStatistics:
        return self.context.statistics

    def check_connectivity(self) -> None:
        if not self._actuators.is_connected():
            log.error(labels.LOOP_ACTUATORS_UNREACHABLE)
            raise ConnectivityFailure(labels.LOOP_ACTUATORS_UNREACHABLE)
        if self._input_device is not None and not self._input_device.is_connected():
            log.error(labels.LOOP_INPUT_UNREACHABLE)
            raise ConnectivityFailure(labels.LOOP_INPUT_UNREACHABLE)

    def start(self) -> None:
        """
        Verify the collaborators are reachable and run the loop on its own thread.

        Raises:
            ConnectivityFailure: the actuators or the input device are unreachable.
        """
        self.check_connectivity()
        self._thread = threading.Thread(target=self.run, name='ControlLoop', daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self.context.stop_event.set()
        self.join(timeout)

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run(self) -> None:
        """Loop body; runs on the caller's thread when called directly."""
        period = self._parameters.control_period
        stats = self.context.statistics

        try:
            self._feedback = self._actuators.get_feedback(self._parameters.feedback_timeout)
            if self._feedback is not None:
                self._controller.initialize(self._feedback)

            previous = self._clock()
            self._state_machine.start(previous)
            log.info(labels.LOOP_STARTED.format(1.0 / period))

            while not self.context.stop_event.is_set():
                if self._max_ticks is not None and stats.ticks >= self._max_ticks:
                    break

                wait = previous + period - self._clock()
                if wait > 0:
                    self._sleep(wait)

                now = self._clock()
                dt = now - previous
                previous = now
                stats.record(dt)
                if dt > period * OVERRUN_FACTOR:
                    stats.overruns += 1
                    log.debug(labels.LOOP_OVERRUN.format(dt * 1000.0))

                if not self._tick(now, dt):
                    break
        except PersistentUnreachableTarget as e:
            log.error(labels.LOOP_PERSISTENT_FAILURE.format(e))
            self.context.error = e
        except Exception as e:
            log.error(labels.LOOP_UNEXPECTED_ERROR.format(type(e).__name__, e))
            self.context.error = e
        finally:
            self._send_safe_stop()
            self.context.stop_event.set()
            log.info(labels.LOOP_STOPPING.format(stats.ticks, stats.overruns))

    def _tick(self, now: float, dt: float) -> bool:
        """One control tick. Returns False when the session should end."""
        feedback = self._actuators.get_feedback(self._parameters.feedback_timeout)
        if feedback is None:
            log.debug(labels.LOOP_NO_FEEDBACK)
        else:
            self._feedback = feedback

        snapshot = self.context.input_channel.get()
        if snapshot is None:
            snapshot = self._last_snapshot

        if snapshot.quit_requested:
            log.info(labels.LOOP_QUIT_REQUESTED)
            return False

        if not snapshot.connected:
            if not self._input_lost:
                self._input_lost = True
                if self._parameters.disconnect_policy == DisconnectPolicy.SAFE_STOP:
                    log.warning(labels.INPUT_DISCONNECTED_SAFE_STOP)
                else:
                    log.warning(labels.INPUT_DISCONNECTED_CONTINUE)
            if self._parameters.disconnect_policy == DisconnectPolicy.SAFE_STOP:
                self._actuators.send_command(self._controller.safe_command(self._feedback))
                return True
            snapshot = self._last_snapshot
        else:
            if self._input_lost:
                self._input_lost = False
                log.info(labels.INPUT_RECONNECTED)
            self._last_snapshot = snapshot

        command = self._state_machine.tick(now, dt, feedback, snapshot)
        self._actuators.send_command(command)

        if self._recorder is not None and feedback is not None:
            self._recorder.record(now, feedback)
        return True

    def _send_safe_stop(self) -> None:
        try:
            self._actuators.send_command(self._controller.safe_command(self._feedback))
        except Exception as e:
            log.error(labels.LOOP_SAFE_STOP_FAILED.format(e))
            if self.context.error is None:
                self.context.error = e
            return
        log.info(labels.LOOP_SAFE_STOP_SENT)
