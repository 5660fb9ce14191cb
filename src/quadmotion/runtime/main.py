#!/usr/bin/env python3

import argparse
import dataclasses
import logging
import signal
import sys
from typing import List, Optional

from quadmotion import labels
from quadmotion.configuration import ParametersProvider, SteadyBehavior
from quadmotion.errors import ConnectivityFailure, QuadmotionError
from quadmotion.hardware.actuators import ActuatorChannel, FeedbackRecorder, SimulatedActuatorChannel
from quadmotion.logger import Logger
from quadmotion.runtime.control_loop import ControlContext, ControlLoop
from quadmotion.runtime.motion_controller.quadruped_controller import QuadrupedController
from quadmotion.runtime.motion_controller.state import ControlStateMachine
from quadmotion.runtime.remote_controller import InputPoller, JoystickInputDevice, NullInputDevice

log = Logger().setup_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Quadmotion locomotion runtime')
    parser.add_argument('--config', help='Path to the quadruped parameter JSON file')
    parser.add_argument('--simulate', action='store_true', help='Run against the simulated actuator channel')
    parser.add_argument('--joystick', metavar='DEVICE', help='Joystick device name under /dev/input (e.g. js0)')
    parser.add_argument(
        '--behavior',
        choices=[behavior.value for behavior in SteadyBehavior],
        help='Behavior entered once the robot has stood up',
    )
    parser.add_argument('--duration', type=float, metavar='SECONDS', help='Stop after this many seconds')
    parser.add_argument('--feedback-log', metavar='PATH', help='Record actuator feedback to a CSV file')
    parser.add_argument('--verbose', action='store_true', help='Debug logging mirrored to the console')
    return parser


def run(args: argparse.Namespace, actuators: Optional[ActuatorChannel] = None) -> int:
    """Run one control session. Returns the process exit status."""
    parameters = ParametersProvider(args.config).parameters
    if args.behavior:
        parameters = dataclasses.replace(parameters, steady_behavior=SteadyBehavior(args.behavior))
        log.info(labels.MAIN_BEHAVIOR_OVERRIDE.format(args.behavior))

    if actuators is None:
        if not args.simulate:
            raise ConnectivityFailure(labels.MAIN_NO_ACTUATOR_TRANSPORT)
        log.info(labels.MAIN_SIMULATION_MODE)
        actuators = SimulatedActuatorChannel(parameters)

    input_device = JoystickInputDevice(args.joystick) if args.joystick else NullInputDevice()
    if isinstance(input_device, JoystickInputDevice):
        input_device.scan()

    recorder = None
    if args.feedback_log:
        recorder = FeedbackRecorder(args.feedback_log)
        log.info(labels.MAIN_FEEDBACK_LOG.format(args.feedback_log))

    context = ControlContext()
    controller = QuadrupedController(parameters)
    state_machine = ControlStateMachine(controller, parameters)
    loop = ControlLoop(actuators, state_machine, context, parameters, input_device, recorder)
    poller = InputPoller(input_device, context.input_channel, context.stop_event, parameters.input_poll_interval)

    def stop(signum, _frame):
        log.info(labels.MAIN_SIGNAL_RECEIVED.format(signal.Signals(signum).name))
        context.stop_event.set()

    signal.signal(signal.SIGINT, stop)
    signal.signal(signal.SIGTERM, stop)

    try:
        loop.start()
        poller.start()
        context.stop_event.wait(args.duration)
    finally:
        context.stop_event.set()
        loop.join()
        poller.stop()
        if recorder is not None:
            recorder.close()

    if context.error is not None:
        log.error(labels.MAIN_TERMINATED_ERROR.format(context.error))
        return 1
    log.info(labels.MAIN_TERMINATED_NORMAL)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        Logger().set_level(logging.DEBUG)
        Logger().enable_console()

    log.info(labels.MAIN_STARTING)
    try:
        return run(args)
    except QuadmotionError as e:
        log.error(labels.MAIN_TERMINATED_ERROR.format(e))
        return 1
    except KeyboardInterrupt:
        log.info(labels.MAIN_TERMINATED_CTRL_C)
        return 0


if __name__ == '__main__':
    sys.exit(main())
