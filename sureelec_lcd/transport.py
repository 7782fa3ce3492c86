"""
Serial transport layer.

Owns the serial handle, writes complete byte sequences and reads
exact byte counts with a bounded per-attempt deadline.
"""

import errno
import os
import logging
from typing import Any, Optional

import serial

from .constants import DEFAULT_BAUDRATE, READ_TIMEOUT
from .exceptions import (
    ConfigFailedError,
    NotATerminalError,
    OpenFailedError,
    ReadFailedError,
    TimeoutError,
    WriteFailedError,
)

logger = logging.getLogger(__name__)


def _is_enotty(error: Optional[BaseException]) -> bool:
    """True if ``error`` or an exception it chains from is ENOTTY."""
    while error is not None:
        if error.args and error.args[0] == errno.ENOTTY:
            return True
        error = error.__cause__ or error.__context__
    return False


class SerialTransport:
    """Raw-mode serial transport (8-N-1, no flow control, modem lines ignored)."""

    def __init__(
        self,
        port: str,
        baudrate: int = DEFAULT_BAUDRATE,
        timeout: float = READ_TIMEOUT
    ):
        """
        Initialize serial transport.

        Args:
            port: Serial device path (e.g., '/dev/ttyUSB0')
            baudrate: Line speed (default: 9600)
            timeout: Per-attempt read deadline in seconds
        """
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self._serial: Optional[Any] = None

    @classmethod
    def from_serial(cls, handle: Any, timeout: float = READ_TIMEOUT) -> 'SerialTransport':
        """
        Wrap an already opened and configured serial handle.

        Args:
            handle: Open ``serial.Serial`` (or compatible) object
            timeout: Per-attempt read deadline in seconds

        Returns:
            Transport that owns the handle
        """
        transport = cls(
            port=getattr(handle, "port", None) or "<serial>",
            baudrate=getattr(handle, "baudrate", DEFAULT_BAUDRATE),
            timeout=timeout
        )
        transport._serial = handle
        return transport

    def open(self) -> None:
        """
        Open the port and apply raw line settings.

        Raises:
            NotATerminalError: If the path is not a terminal device
            OpenFailedError: If the OS refuses to open the path
            ConfigFailedError: If line settings cannot be applied
        """
        handle = serial.Serial()
        handle.port = self.port
        try:
            handle.open()
        except (serial.SerialException, OSError) as e:
            if _is_enotty(e):
                raise NotATerminalError(self.port) from e
            raise OpenFailedError(f"Failed to open port {self.port}: {e}") from e

        self._require_terminal(handle)

        try:
            handle.apply_settings({
                "baudrate": self.baudrate,
                "bytesize": serial.EIGHTBITS,
                "parity": serial.PARITY_NONE,
                "stopbits": serial.STOPBITS_ONE,
                "xonxoff": False,
                "rtscts": False,
                "dsrdtr": False,
                "timeout": self.timeout,
            })
        except (serial.SerialException, ValueError, OSError) as e:
            handle.close()
            raise ConfigFailedError(
                f"Failed to apply port configuration to device {self.port}: {e}"
            ) from e

        self._serial = handle
        logger.info(f"Opened serial port {self.port} at {self.baudrate} bps")

    def _require_terminal(self, handle: Any) -> None:
        if not os.isatty(handle.fileno()):
            handle.close()
            raise NotATerminalError(self.port)

    def close(self) -> None:
        """Close the serial port. Safe to call more than once."""
        if self._serial is None:
            return
        try:
            self._serial.close()
        except (serial.SerialException, OSError) as e:
            logger.warning(f"Error closing {self.port}: {e}")
        finally:
            self._serial = None
            logger.info(f"Closed serial port {self.port}")

    def write_exact(self, data: bytes) -> int:
        """
        Write all of ``data``, retrying partial writes.

        Args:
            data: Bytes to send

        Returns:
            Number of bytes sent (always ``len(data)``)

        Raises:
            WriteFailedError: If the port is closed or the OS write fails
        """
        if not self.is_open:
            raise WriteFailedError("Serial port not open")

        data = bytes(data)
        sent = 0
        while sent < len(data):
            chunk = data[sent:]
            try:
                count = self._serial.write(chunk)
            except (serial.SerialException, OSError) as e:
                raise WriteFailedError(str(e)) from e
            if count is None:
                count = len(chunk)
            if count <= 0:
                raise WriteFailedError(f"wrote 0 of {len(chunk)} bytes")
            sent += count

        try:
            self._serial.flush()
        except (serial.SerialException, OSError) as e:
            raise WriteFailedError(str(e)) from e

        logger.debug(f"TX ({sent} bytes): {data.hex(' ')}")
        return sent

    def read_exact(self, count: int, timeout: Optional[float] = None) -> bytes:
        """
        Read exactly ``count`` bytes.

        Each attempt waits up to ``timeout`` seconds for data. Short reads
        are accumulated; an attempt that yields nothing ends the read.

        Args:
            count: Number of bytes expected
            timeout: Per-attempt deadline (None uses default)

        Returns:
            Received bytes

        Raises:
            TimeoutError: If an attempt elapses with no data
            ReadFailedError: If the port is closed or the OS read fails
        """
        if not self.is_open:
            raise ReadFailedError("Serial port not open")

        if timeout is None:
            timeout = self.timeout
        if self._serial.timeout != timeout:
            self._serial.timeout = timeout

        buf = bytearray()
        while len(buf) < count:
            try:
                chunk = self._serial.read(count - len(buf))
            except (serial.SerialException, OSError) as e:
                raise ReadFailedError(f"Read failed: {e}") from e

            if not chunk:
                logger.debug(f"No answer from device ({len(buf)}/{count} bytes)")
                raise TimeoutError(timeout, count, len(buf))

            buf.extend(chunk)
            logger.debug(f"RX ({len(chunk)} bytes, {len(buf)}/{count}): {bytes(chunk).hex(' ')}")

        return bytes(buf)

    def discard_input(self) -> None:
        """Drop any bytes waiting in the receive buffer."""
        if not self.is_open:
            return
        try:
            self._serial.reset_input_buffer()
        except (serial.SerialException, OSError) as e:
            raise ReadFailedError(f"Failed to flush input: {e}") from e

    @property
    def is_open(self) -> bool:
        """Check if port is open."""
        return self._serial is not None and self._serial.is_open

    def __enter__(self) -> 'SerialTransport':
        if not self.is_open:
            self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        status = "open" if self.is_open else "closed"
        return f"SerialTransport({self.port}, {self.baudrate}, {status})"
