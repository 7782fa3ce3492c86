"""
Protocol constants for SureElec serial LCD modules.

Every command starts with the escape byte followed by an opcode and
optional parameter bytes. Responses are fixed length, ASCII encoded.
"""

from enum import Enum, IntEnum

# Command prefix
ESCAPE = 0xFE

# Sent once at open to put the module into a known state
INIT_TAG = b"Sure"

# Fixed response lengths
CAPABILITIES_LENGTH = 11
TEMPERATURE_LENGTH = 5
CONTRAST_LENGTH = 5
BRIGHTNESS_LENGTH = 7

# Offsets of the numeric field inside level responses
CONTRAST_OFFSET = 2
BRIGHTNESS_OFFSET = 4

# First byte of a temperature response when the sensor is out of range
TEMPERATURE_OUT_OF_RANGE = ord("T")

# Write-line sub-command byte between opcode and line number
WRITE_LINE_MODE = 0x01

# Level limits for contrast and brightness
LEVEL_MIN = 1
LEVEL_MAX = 255

# Framebuffer fill byte
PAD = 0x20

# Line settings
DEFAULT_BAUDRATE = 9600
READ_TIMEOUT = 1.0

# Settle delays in seconds
INIT_DELAY = 0.01
COMMAND_DELAY = 0.01
LINE_DELAY = 0.025


class Command(IntEnum):
    """Opcodes following the escape byte (Host -> LCD)."""
    WRITE_LINE = 0x47
    TOGGLE_DISPLAY = 0x64
    SET_CONTRAST = 0x50
    SET_BRIGHTNESS = 0x98
    QUERY_CAPABILITIES = 0x76
    QUERY_TEMPERATURE = 0x77
    QUERY_CONTRAST = 0x63
    QUERY_BRIGHTNESS = 0x62


class ScrollDirection(Enum):
    """Scroll directions. Only UP and DOWN have a row transform."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class TemperatureUnit(Enum):
    """Unit reported by the on-board thermal sensor."""
    CELSIUS = "C"
    FAHRENHEIT = "F"


class ReadingStatus(Enum):
    """Outcome of a sensor or setting query."""
    OK = "ok"
    OUT_OF_RANGE = "out_of_range"
    UNSUPPORTED = "unsupported"


class SessionState(Enum):
    """Device session lifecycle states."""
    UNOPENED = "unopened"
    HANDSHAKING = "handshaking"
    READY = "ready"
    CLOSED = "closed"
    FAILED = "failed"
