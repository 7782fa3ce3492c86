"""
SureElec LCD - Python driver for SureElec serial character LCD modules.

This package provides:
- Protocol constants
- Command encoding and response decoding
- Serial transport layer
- Framebuffer mirror with line writes and scrolling
- Device session (handshake, display, settings, sensors)
- Asynchronous driver wrapper
"""

from .constants import (
    ESCAPE, PAD, DEFAULT_BAUDRATE, READ_TIMEOUT,
    Command, ScrollDirection, TemperatureUnit, ReadingStatus, SessionState
)
from .exceptions import (
    SureElecError,
    TransportError, NotATerminalError, OpenFailedError, ConfigFailedError,
    WriteFailedError, ReadFailedError, TimeoutError,
    ProtocolError, CapabilityParseError, SensorParseError,
    InputError, InvalidLineError, UnsupportedDirectionError,
    SessionClosedError
)
from .codec import CommandBuilder, ResponseParser, clamp_level, parse_decimal
from .sensors import DeviceCapabilities, SensorReading
from .framebuffer import Framebuffer
from .transport import SerialTransport
from .session import DisplaySession

__version__ = "1.0.0"
__all__ = [
    # Constants
    "ESCAPE", "PAD", "DEFAULT_BAUDRATE", "READ_TIMEOUT",
    "Command", "ScrollDirection", "TemperatureUnit", "ReadingStatus", "SessionState",
    # Exceptions
    "SureElecError",
    "TransportError", "NotATerminalError", "OpenFailedError", "ConfigFailedError",
    "WriteFailedError", "ReadFailedError", "TimeoutError",
    "ProtocolError", "CapabilityParseError", "SensorParseError",
    "InputError", "InvalidLineError", "UnsupportedDirectionError",
    "SessionClosedError",
    # Codec
    "CommandBuilder", "ResponseParser", "clamp_level", "parse_decimal",
    # Data
    "DeviceCapabilities", "SensorReading",
    # Framebuffer
    "Framebuffer",
    # Transport
    "SerialTransport",
    # Session
    "DisplaySession",
]
