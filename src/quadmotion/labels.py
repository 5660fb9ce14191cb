"""
Log and console strings for the Quadmotion runtime.

Centralizing them here keeps the wording consistent across the controllers.
"""

# Main
MAIN_STARTING = 'Quadmotion starting...'
MAIN_TERMINATED_CTRL_C = 'Terminated due Control+C was pressed'
MAIN_TERMINATED_NORMAL = 'Normal termination'
MAIN_TERMINATED_ERROR = 'Control session terminated: {}'
MAIN_SIGNAL_RECEIVED = 'Signal {} received, stopping the control loop'
MAIN_SIMULATION_MODE = 'Running against the simulated actuator channel'
MAIN_FEEDBACK_LOG = 'Recording feedback samples to {}'
MAIN_NO_ACTUATOR_TRANSPORT = 'No actuator transport available, run with --simulate or pass an ActuatorChannel'
MAIN_BEHAVIOR_OVERRIDE = 'Steady behavior set to {}'

# Configuration
CONFIG_LOADED = 'Loaded quadruped parameters from {}'
CONFIG_DEFAULTS = 'No parameter file at {}, using default quadruped parameters'
CONFIG_INVALID = 'Invalid quadruped parameter file {}: {}'

# Control loop
LOOP_ACTUATORS_UNREACHABLE = 'Actuator network is not reachable'
LOOP_INPUT_UNREACHABLE = 'Operator input device is not reachable'
LOOP_STARTED = 'Control loop started at {:.1f} Hz'
LOOP_STOPPING = 'Control loop stopping after {} ticks ({} overruns)'
LOOP_OVERRUN = 'Tick overran the control period: dt={:.2f}ms'
LOOP_NO_FEEDBACK = 'No actuator feedback this tick, reusing the previous sample'
LOOP_QUIT_REQUESTED = 'Operator requested quit'
LOOP_SAFE_STOP_SENT = 'Safe hold command sent to the actuators'
LOOP_SAFE_STOP_FAILED = 'Could not send the safe hold command: {}'
LOOP_PERSISTENT_FAILURE = 'Persistent IK failure, commanding safe stop: {}'
LOOP_UNEXPECTED_ERROR = 'Control loop failed with {}: {}, commanding safe stop'

# Operator input
INPUT_DISCONNECTED_CONTINUE = 'Operator input disconnected, continuing with the last command'
INPUT_DISCONNECTED_SAFE_STOP = 'Operator input disconnected, holding position until it reconnects'
INPUT_RECONNECTED = 'Operator input reconnected'

# Controller
CONTROLLER_IK_FAILED = 'IK failed for {} ({} consecutive), holding previous command: {}'
CONTROLLER_IK_RECOVERED = 'IK recovered for {} after {} failed ticks'
CONTROLLER_RESEED = 'Re-seeding {} from the nominal configuration'
GAIT_COMMAND_SCALED = 'Velocity command scaled by {:.2f} to keep every foot within reach'

# State machine
STATE_TRANSITION = 'Transition {} -> {} after {:.3f}s'
STATE_ENTER = 'Entering {} state'
STATE_REQUEST_REJECTED = 'Behavior request {} rejected while in {}'
STATE_BALANCE_TARGET = 'Balance target captured: rpy=({:.3f}, {:.3f}, {:.3f})'
STATE_PHASE_INCOMPLETE = '{} timer expired before the phase completed, waiting'

# Remote controller
REMOTE_LOOKING_FOR_DEVICES = 'Looking for connected devices: {}'
REMOTE_ATTEMPTING_OPEN = 'Attempting to open {}...'
REMOTE_OPEN_SUCCESS = '{} opened successfully.'
REMOTE_OPEN_WARNING = 'Could not open {}: {}'
REMOTE_INIT_MAPPING_ERROR = 'Failed to initialize device mappings: {}'
REMOTE_CONNECTED_TO = 'Connected to device: {}'
REMOTE_AXES_FOUND = '{} axes found: {}'
REMOTE_BUTTONS_FOUND = '{} buttons found: {}'
REMOTE_READ_ERROR = 'Error reading joystick events: {}'
REMOTE_CLOSE_WARNING = 'Error closing device: {}'
REMOTE_POLLER_ERROR = 'Input polling failed: {}'

# Actuators
ACTUATOR_RECORDER_CLOSED = 'Feedback recorder closed after {} samples'
