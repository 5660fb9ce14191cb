##########################################################
# Linux Joystick / Gamepad Constants
#
# Source: Linux joystick API (see: linux/joystick.h)
# Event type bitmasks plus the axis and button codes
# translated to input names below.
##########################################################

# ────────────────────────────────────────────────
# Event Type Bitmask Flags
# ────────────────────────────────────────────────
JS_EVENT_BUTTON = 0x01   # Button pressed/released
JS_EVENT_AXIS   = 0x02   # Axis motion
JS_EVENT_INIT   = 0x80   # Initial state of device (synthetic event)

# ────────────────────────────────────────────────
# Axis Codes (Analog Inputs)
# ────────────────────────────────────────────────
AXIS_LX         = 0x00   # Left stick X
AXIS_LY         = 0x01   # Left stick Y
AXIS_LZ         = 0x02   # Right stick Y on most pads
AXIS_RX         = 0x03
AXIS_RY         = 0x04
AXIS_RZ         = 0x05   # Right stick X on most pads
AXIS_GAS        = 0x09   # Right trigger
AXIS_BRAKE      = 0x0A   # Left trigger
AXIS_HAT0X      = 0x10   # D-pad horizontal (-1=left, +1=right)
AXIS_HAT0Y      = 0x11   # D-pad vertical (-1=up, +1=down)

# ────────────────────────────────────────────────
# Button Codes (Digital Inputs)
# ────────────────────────────────────────────────
BTN_A           = 0x130
BTN_B           = 0x131
BTN_X           = 0x133
BTN_Y           = 0x134
BTN_TL          = 0x136
BTN_TR          = 0x137
BTN_SELECT      = 0x13A
BTN_START       = 0x13B
BTN_MODE        = 0x13C

# Mapping: driver code -> input name read by JoystickInputDevice.
DRIVER_CODE_TO_INPUT_NAMES = {
    # ───────────────
    # Axes
    # ───────────────
    AXIS_LX: "left_stick_x",
    AXIS_LY: "left_stick_y",
    AXIS_RZ: "right_stick_x",
    AXIS_LZ: "right_stick_y",
    AXIS_GAS: "right_trigger",
    AXIS_BRAKE: "left_trigger",
    AXIS_HAT0X: "dpad_horizontal",
    AXIS_HAT0Y: "dpad_vertical",
    # ───────────────
    # Buttons
    # ───────────────
    BTN_A: "a",
    BTN_B: "b",
    BTN_X: "x",
    BTN_Y: "y",
    BTN_TL: "left_bumper",
    BTN_TR: "right_bumper",
    BTN_SELECT: "back",
    BTN_START: "start",
    BTN_MODE: "guide",
}
