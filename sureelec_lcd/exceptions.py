"""
Custom exceptions for the SureElec LCD driver.
"""

from typing import Optional


class SureElecError(Exception):
    """Base exception for SureElec driver errors."""
    pass


# === Transport ===

class TransportError(SureElecError):
    """Serial line error."""
    pass


class NotATerminalError(TransportError):
    """Target path is not a character/terminal device."""

    def __init__(self, port: str):
        self.port = port
        super().__init__(f"{port} is not a terminal device")


class OpenFailedError(TransportError):
    """Serial port could not be opened."""
    pass


class ConfigFailedError(TransportError):
    """Line settings could not be applied to the port."""
    pass


class WriteFailedError(TransportError):
    """Write to the serial port failed."""

    def __init__(self, os_error: str):
        self.os_error = os_error
        super().__init__(f"Cannot write to port: {os_error}")


class ReadFailedError(TransportError):
    """Read from the serial port failed."""
    pass


class TimeoutError(TransportError):
    """No response data within the read deadline."""

    def __init__(self, timeout: float, expected: int = 0, received: int = 0):
        self.timeout = timeout
        self.expected = expected
        self.received = received
        msg = f"No answer from device within {timeout}s"
        if expected:
            msg += f" (got {received} of {expected} bytes)"
        super().__init__(msg)


# === Protocol ===

class ProtocolError(SureElecError):
    """Malformed or unparseable response."""

    def __init__(self, message: str, data: Optional[bytes] = None):
        self.data = data
        if data is not None:
            message = f"{message}: {data!r}"
        super().__init__(message)


class CapabilityParseError(ProtocolError):
    """Capability response could not be decoded."""
    pass


class SensorParseError(ProtocolError):
    """Sensor or setting response could not be decoded."""
    pass


# === Input ===

class InputError(SureElecError, ValueError):
    """Invalid argument, rejected before any I/O."""
    pass


class InvalidLineError(InputError):
    """Line number outside [1, height]."""

    def __init__(self, line: int, height: int):
        self.line = line
        self.height = height
        super().__init__(f"Line {line} out of range (1-{height})")


class UnsupportedDirectionError(InputError):
    """Scroll direction has no row transform."""
    pass


# === Session ===

class SessionClosedError(SureElecError):
    """Operation attempted on a session that is not ready."""
    pass
