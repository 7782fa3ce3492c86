"""
Device session.

Performs the power-on handshake, discovers capabilities once and
exposes the display operations. The protocol is half-duplex: every
operation finishes its exchange before returning.
"""

import time
import logging
from typing import Iterable, List, Optional

from .codec import CommandBuilder, ResponseParser, clamp_level
from .constants import (
    BRIGHTNESS_LENGTH,
    CAPABILITIES_LENGTH,
    COMMAND_DELAY,
    CONTRAST_LENGTH,
    DEFAULT_BAUDRATE,
    INIT_DELAY,
    LINE_DELAY,
    READ_TIMEOUT,
    TEMPERATURE_LENGTH,
    ScrollDirection,
    SessionState,
)
from .exceptions import InvalidLineError, SessionClosedError, SureElecError
from .framebuffer import Framebuffer, Text
from .sensors import DeviceCapabilities, SensorReading
from .transport import SerialTransport

logger = logging.getLogger(__name__)


class DisplaySession:
    """
    Session with one SureElec LCD module.

    Usage::

        with DisplaySession.open("/dev/ttyUSB0") as lcd:
            lcd.write_line(1, "Hello")
            print(lcd.get_temperature())
    """

    def __init__(
        self,
        transport: SerialTransport,
        log: Optional[logging.Logger] = None,
        command_delay: float = COMMAND_DELAY,
        line_delay: float = LINE_DELAY,
        init_delay: float = INIT_DELAY
    ):
        """
        Create an unopened session. Call :meth:`handshake` (or use
        :meth:`open`) before any display operation.

        Args:
            transport: Serial transport, opened or not
            log: Log sink for this session (default: module logger)
            command_delay: Settle time after commands and queries
            line_delay: Settle time after each row write
            init_delay: Settle time after the init sequence
        """
        self.transport = transport
        self.log = log or logger
        self.command_delay = command_delay
        self.line_delay = line_delay
        self.init_delay = init_delay

        self._state = SessionState.UNOPENED
        self._capabilities: Optional[DeviceCapabilities] = None
        self._framebuffer: Optional[Framebuffer] = None
        self._display_on = True
        self._contrast: Optional[int] = None
        self._brightness: Optional[int] = None

    @classmethod
    def open(
        cls,
        port: str,
        baudrate: int = DEFAULT_BAUDRATE,
        timeout: float = READ_TIMEOUT,
        **kwargs
    ) -> 'DisplaySession':
        """
        Open a port and return a ready session.

        Args:
            port: Serial device path
            baudrate: Line speed
            timeout: Per-attempt read deadline in seconds
            **kwargs: Passed to the constructor (log, delays)

        Returns:
            Session in READY state

        Raises:
            TransportError: If the port cannot be opened or configured
            CapabilityParseError: If the capability response is invalid
        """
        session = cls(SerialTransport(port, baudrate, timeout), **kwargs)
        session.handshake()
        return session

    def handshake(self) -> DeviceCapabilities:
        """
        Bring the session to READY.

        Opens the transport if needed, sends the init sequence and
        queries capabilities. Any failure leaves the session FAILED
        and the transport closed.

        Returns:
            Discovered device capabilities
        """
        if self._state != SessionState.UNOPENED:
            raise SessionClosedError(f"Cannot handshake in state {self._state.name}")

        self._state = SessionState.HANDSHAKING
        try:
            if not self.transport.is_open:
                self.transport.open()

            self.log.info(f"Sending init sequence to {self.transport.port}")
            self.transport.write_exact(CommandBuilder.build_init())
            self._settle(self.init_delay)

            caps = ResponseParser.parse_capabilities(
                self._query(CommandBuilder.build_query_capabilities(), CAPABILITIES_LENGTH)
            )
        except SureElecError as e:
            self._state = SessionState.FAILED
            self.log.error(f"Handshake with {self.transport.port} failed: {e}")
            self.transport.close()
            raise

        self._capabilities = caps
        self._framebuffer = Framebuffer(caps.width, caps.height)
        self._state = SessionState.READY
        self.log.info(f"Display ready: {caps}")
        return caps

    def close(self) -> None:
        """Release the transport and framebuffer."""
        if self._state == SessionState.CLOSED:
            return
        self.transport.close()
        self._framebuffer = None
        if self._state != SessionState.FAILED:
            self._state = SessionState.CLOSED

    # === Properties ===

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def capabilities(self) -> DeviceCapabilities:
        """Capabilities discovered during the handshake."""
        self._require_ready()
        return self._capabilities

    @property
    def width(self) -> int:
        return self.capabilities.width

    @property
    def height(self) -> int:
        return self.capabilities.height

    @property
    def framebuffer(self) -> Framebuffer:
        self._require_ready()
        return self._framebuffer

    @property
    def lines(self) -> List[str]:
        """Rows as currently believed to be on screen."""
        return self.framebuffer.lines()

    @property
    def display_on(self) -> bool:
        return self._display_on

    @property
    def contrast(self) -> Optional[int]:
        """Last contrast sent or read back."""
        return self._contrast

    @property
    def brightness(self) -> Optional[int]:
        """Last brightness sent or read back."""
        return self._brightness

    def get_device_info(self) -> DeviceCapabilities:
        """Cached capability record; no I/O."""
        return self.capabilities

    # === Display ===

    def write_line(self, line: int, text: Text) -> None:
        """
        Replace a row and send it.

        Args:
            line: 1-based row number
            text: Row content, truncated or padded to the width

        Raises:
            InvalidLineError: If line is out of range (nothing is sent)
        """
        self._require_ready()
        self._framebuffer.set_line(line, text)
        self._send_row(line)

    def write_lines(self, lines: Iterable[Text]) -> None:
        """Write consecutive rows starting at row 1."""
        self._require_ready()
        lines = list(lines)
        if len(lines) > self.height:
            raise InvalidLineError(len(lines), self.height)
        for number, text in enumerate(lines, start=1):
            self.write_line(number, text)

    def clear_display(self) -> None:
        """Blank the buffer and send every row."""
        self._require_ready()
        self._framebuffer.clear()
        for line in range(1, self.height + 1):
            self.write_line(line, "")

    def refresh(self) -> None:
        """Resend every row from the framebuffer without changing it."""
        self._require_ready()
        for line in range(1, self.height + 1):
            self._send_row(line)

    def scroll(self, direction: ScrollDirection, distance: int = 1, wrap: bool = False) -> None:
        """
        Scroll rows and repaint.

        Rows vacated by the shift are blank unless ``wrap`` is set;
        callers normally overwrite them afterwards.

        Args:
            direction: ScrollDirection.UP or ScrollDirection.DOWN
            distance: Rows to shift, clamped to [0, height]
            wrap: Rotate rows shifted out into the vacated end

        Raises:
            UnsupportedDirectionError: For LEFT/RIGHT (nothing is sent)
        """
        self._require_ready()
        self._framebuffer.scroll(direction, distance, wrap)
        self.refresh()

    def toggle_display(self) -> bool:
        """
        Toggle the display on/off.

        Returns:
            New display state (True = on)
        """
        self._require_ready()
        self.transport.write_exact(CommandBuilder.build_toggle_display())
        self._settle(self.command_delay)
        self._display_on = not self._display_on
        self.log.debug(f"Display {'on' if self._display_on else 'off'}")
        return self._display_on

    # === Settings ===

    def set_contrast(self, value: int) -> int:
        """
        Set contrast. Values are clamped to 1-255.

        Returns:
            Clamped value sent to the device
        """
        self._require_ready()
        value = clamp_level(value)
        self.transport.write_exact(CommandBuilder.build_set_contrast(value))
        self._contrast = value
        self._settle(self.command_delay)
        return value

    def set_brightness(self, value: int) -> int:
        """
        Set backlight brightness. Values are clamped to 1-255.

        Returns:
            Clamped value sent to the device
        """
        self._require_ready()
        value = clamp_level(value)
        self.transport.write_exact(CommandBuilder.build_set_brightness(value))
        self._brightness = value
        self._settle(self.command_delay)
        return value

    # === Queries ===

    def get_temperature(self) -> SensorReading:
        """
        Read the on-board thermal sensor.

        Returns:
            Reading with value and unit, OUT_OF_RANGE, or UNSUPPORTED
            when the module has no thermal sensor (no I/O is done)
        """
        self._require_ready()
        if not self._capabilities.has_thermal_sensor:
            return SensorReading.unsupported()

        reading = ResponseParser.parse_temperature(
            self._query(CommandBuilder.build_query_temperature(), TEMPERATURE_LENGTH)
        )
        self.log.debug(f"Temperature: {reading}")
        return reading

    def get_contrast(self) -> SensorReading:
        """Read the contrast setting back from the device."""
        self._require_ready()
        reading = ResponseParser.parse_contrast(
            self._query(CommandBuilder.build_query_contrast(), CONTRAST_LENGTH)
        )
        if reading.ok:
            self._contrast = reading.value
        self.log.debug(f"Contrast: {reading}")
        return reading

    def get_brightness(self) -> SensorReading:
        """Read the brightness setting back from the device."""
        self._require_ready()
        reading = ResponseParser.parse_brightness(
            self._query(CommandBuilder.build_query_brightness(), BRIGHTNESS_LENGTH)
        )
        if reading.ok:
            self._brightness = reading.value
        self.log.debug(f"Brightness: {reading}")
        return reading

    # === Helpers ===

    def _require_ready(self) -> None:
        if self._state != SessionState.READY:
            raise SessionClosedError(f"Session is {self._state.name.lower()}")

    def _send_row(self, line: int) -> None:
        self.transport.write_exact(CommandBuilder.build_write_line(line))
        self.transport.write_exact(self._framebuffer.row(line))
        self._settle(self.line_delay)

    def _query(self, command: bytes, length: int) -> bytes:
        # Late bytes from an earlier timed-out response would shift this one
        self.transport.discard_input()
        self.transport.write_exact(command)
        self._settle(self.command_delay)
        return self.transport.read_exact(length)

    @staticmethod
    def _settle(delay: float) -> None:
        if delay > 0:
            time.sleep(delay)

    def __enter__(self) -> 'DisplaySession':
        if self._state == SessionState.UNOPENED:
            self.handshake()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"DisplaySession({self.transport.port}, {self._state.name})"
