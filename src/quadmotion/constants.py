### Robot Constants ###
NUM_LEGS = 4
JOINTS_PER_LEG = 3
NUM_JOINTS = NUM_LEGS * JOINTS_PER_LEG

STANDARD_GRAVITY = 9.81  # m/s^2
DEFAULT_GRAVITY_DIRECTION = (0.0, 0.0, -1.0)  # body frame, robot level

# ===============================
# Control Loop Timing
# ===============================
# Control period in seconds (0.005 s is 200 Hz)
CONTROL_PERIOD = 0.005
# Maximum time to block waiting for actuator feedback each tick (seconds)
FEEDBACK_TIMEOUT = 0.002
# Delay between operator input polls (seconds)
INPUT_POLL_INTERVAL = 0.01
# Commands kept by the simulated actuators (5 s at 200 Hz)
SIMULATED_COMMAND_HISTORY = 1000

# ===============================
# Behaviour Timing
# ===============================
# Duration of each stand-up phase (seconds)
STARTUP_SECONDS = 1.9
# Duration of one leg group swing (seconds)
LEG_SWING_TIME = 0.5

# ===============================
# Balance
# ===============================
# Fraction of the angular discrepancy corrected per tick
BALANCE_GAIN = 0.031
# Operator reorientation range per axis (degrees)
MAX_ORIENT_DEG = 16.0

# ===============================
# Safety
# ===============================
# Consecutive IK failures of a single leg before commanding a safe stop
MAX_IK_FAILURES = 10
# Joint velocity bound applied to every command (rad/s)
MAX_JOINT_VELOCITY = 6.0
# Foot position tolerance used by the IK fixed point check (m)
IK_TOLERANCE = 1e-6

# ===============================
# Joystick
# ===============================
DEVICE_PATH = '/dev/input'
JSDEV_READ_SIZE = 8
AXIS_NORMALIZATION_CONSTANT = 32767.0
# Deadzone threshold for analog stick drift (0.0-1.0).
DEADZONE = 0.08
# ioctl request codes from linux/joystick.h
JSIOCGAXES = 0x80016A11
JSIOCGBUTTONS = 0x80016A12
JSIOCGNAME = 0x80006A13
JSIOCGAXMAP = 0x80406A32
JSIOCGBTNMAP = 0x84006A34
# Seconds between attempts to reopen a lost joystick
RECONNECT_RETRY_DELAY = 1.0
