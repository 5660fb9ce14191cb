import numpy as np
import pytest

from quadmotion.configuration import ParametersProvider, QuadrupedParameters
from quadmotion.hardware.actuators import SimulatedActuatorChannel
from quadmotion.runtime.motion_controller.models import InputSnapshot
from quadmotion.runtime.motion_controller.quadruped_controller import QuadrupedController
from quadmotion.runtime.motion_controller.state import ControlStateMachine

PERIOD = 0.005


@pytest.fixture(autouse=True)
def fresh_parameters_provider():
    ParametersProvider.reset_instance()
    yield
    ParametersProvider.reset_instance()


@pytest.fixture
def parameters():
    return QuadrupedParameters.defaults()


@pytest.fixture
def controller(parameters):
    return QuadrupedController(parameters)


@pytest.fixture
def state_machine(controller):
    return ControlStateMachine(controller)


class Session:
    """Drives a state machine against the simulated actuators on a fixed tick grid."""

    def __init__(self, state_machine, actuators, period=PERIOD):
        self.state_machine = state_machine
        self.actuators = actuators
        self.period = period
        self.tick_index = 0
        self.snapshot = InputSnapshot.idle()

    @property
    def now(self):
        return self.tick_index * self.period

    def tick(self, dt=None):
        dt = self.period if dt is None else dt
        command = self.state_machine.tick(self.now, dt, self.actuators.get_feedback(), self.snapshot)
        self.actuators.send_command(command)
        self.tick_index += 1
        return command

    def run_until(self, seconds):
        while self.now < seconds:
            self.tick()


@pytest.fixture
def session(state_machine, parameters):
    return Session(state_machine, SimulatedActuatorChannel(parameters))
