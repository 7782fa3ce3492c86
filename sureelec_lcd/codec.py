"""
Command encoding and response decoding.

Command Format: [ESC][OP][PARAM...]
- ESC: 0xFE (command prefix)
- OP: Opcode (see constants.Command)
- PARAM: Zero or more parameter bytes

Responses carry no framing; each query has a fixed response length:
- Capabilities (11): [W W][H H][RTC][ROM][LIGHT][THERM][...]
- Temperature (5):   [D D D][sep][UNIT] or 'T....' when out of range
- Contrast (5):      [..][D D D]
- Brightness (7):    [....][D D D]
All numbers are ASCII decimal.
"""

import logging

from .constants import (
    BRIGHTNESS_LENGTH,
    BRIGHTNESS_OFFSET,
    CAPABILITIES_LENGTH,
    CONTRAST_LENGTH,
    CONTRAST_OFFSET,
    ESCAPE,
    INIT_TAG,
    LEVEL_MAX,
    LEVEL_MIN,
    TEMPERATURE_LENGTH,
    TEMPERATURE_OUT_OF_RANGE,
    WRITE_LINE_MODE,
    Command,
    TemperatureUnit,
)
from .exceptions import CapabilityParseError, SensorParseError
from .sensors import DeviceCapabilities, SensorReading

logger = logging.getLogger(__name__)

# Parsed values must fit a signed 64-bit integer
_PARSE_LIMIT = 2 ** 63 - 1


def clamp_level(value: int) -> int:
    """Clamp a contrast/brightness level to 1-255."""
    if value > LEVEL_MAX:
        return LEVEL_MAX
    if value < LEVEL_MIN:
        return LEVEL_MIN
    return value


def parse_decimal(field: bytes) -> int:
    """
    Strictly parse an ASCII decimal field.

    Leading whitespace and a sign are accepted, as are trailing NUL
    bytes. Anything else after the digits is an error.

    Args:
        field: Raw response bytes

    Returns:
        Parsed integer

    Raises:
        ValueError: If the field is empty, has trailing garbage or overflows
    """
    try:
        text = bytes(field).rstrip(b"\x00").decode("ascii")
    except UnicodeDecodeError as e:
        raise ValueError(f"non-ASCII numeric field {field!r}") from e

    text = text.lstrip(" \t\n\r\v\f")
    digits = text[1:] if text[:1] in ("+", "-") else text
    if not digits or not digits.isdigit():
        raise ValueError(f"invalid numeric field {field!r}")

    value = int(text)
    if abs(value) > _PARSE_LIMIT:
        raise ValueError(f"numeric field {field!r} overflows")
    return value


class CommandBuilder:
    """Builds command sequences for transmission."""

    @staticmethod
    def build(opcode: int, *params: int) -> bytes:
        """
        Build an escaped command.

        Args:
            opcode: Command opcode
            params: Parameter bytes (0-255 each)

        Returns:
            Command bytes ready for transmission
        """
        return bytes([ESCAPE, opcode, *params])

    @staticmethod
    def build_init() -> bytes:
        """Build the handshake sequence."""
        return bytes([ESCAPE]) + INIT_TAG

    @staticmethod
    def build_write_line(line: int) -> bytes:
        """Build the write-line header; the row payload follows separately."""
        return CommandBuilder.build(Command.WRITE_LINE, WRITE_LINE_MODE, line)

    @staticmethod
    def build_toggle_display() -> bytes:
        return CommandBuilder.build(Command.TOGGLE_DISPLAY)

    @staticmethod
    def build_set_contrast(value: int) -> bytes:
        """Build SET_CONTRAST with the level clamped to 1-255."""
        return CommandBuilder.build(Command.SET_CONTRAST, clamp_level(value))

    @staticmethod
    def build_set_brightness(value: int) -> bytes:
        """Build SET_BRIGHTNESS with the level clamped to 1-255."""
        return CommandBuilder.build(Command.SET_BRIGHTNESS, clamp_level(value))

    @staticmethod
    def build_query_capabilities() -> bytes:
        return CommandBuilder.build(Command.QUERY_CAPABILITIES)

    @staticmethod
    def build_query_temperature() -> bytes:
        return CommandBuilder.build(Command.QUERY_TEMPERATURE)

    @staticmethod
    def build_query_contrast() -> bytes:
        return CommandBuilder.build(Command.QUERY_CONTRAST)

    @staticmethod
    def build_query_brightness() -> bytes:
        return CommandBuilder.build(Command.QUERY_BRIGHTNESS)


class ResponseParser:
    """Decodes fixed-length query responses."""

    @staticmethod
    def parse_capabilities(data: bytes) -> DeviceCapabilities:
        """
        Decode a capability response.

        Args:
            data: 11 response bytes

        Returns:
            DeviceCapabilities

        Raises:
            CapabilityParseError: On wrong length or invalid geometry
        """
        if len(data) != CAPABILITIES_LENGTH:
            raise CapabilityParseError(
                f"Expected {CAPABILITIES_LENGTH} bytes, got {len(data)}", data
            )

        try:
            width = parse_decimal(data[0:2])
            height = parse_decimal(data[2:4])
        except ValueError as e:
            raise CapabilityParseError(f"Invalid geometry ({e})", data) from e

        if not (1 <= width <= 99 and 1 <= height <= 99):
            raise CapabilityParseError(f"Geometry {width}x{height} out of range", data)

        # ROM size code: '1' -> 1kbit, '2' -> 2kbit, '3' -> 4kbit, ...
        rom_code = data[5] - ord("1")
        rom_size = 2 ** rom_code if rom_code >= 0 else 0

        caps = DeviceCapabilities(
            width=width,
            height=height,
            has_real_time_clock=data[4] == ord("1"),
            rom_size_kbit=rom_size,
            has_light_sensor=data[6] == ord("1"),
            has_thermal_sensor=data[7] in (ord("1"), ord("2")),
            raw=bytes(data)
        )
        logger.debug(f"Decoded capabilities: {caps}")
        return caps

    @staticmethod
    def parse_temperature(data: bytes) -> SensorReading:
        """
        Decode a temperature response.

        Args:
            data: 5 response bytes

        Returns:
            SensorReading with value and unit, or OUT_OF_RANGE

        Raises:
            SensorParseError: On wrong length or non-numeric value
        """
        if len(data) != TEMPERATURE_LENGTH:
            raise SensorParseError(
                f"Expected {TEMPERATURE_LENGTH} bytes, got {len(data)}", data
            )

        if data[0] == TEMPERATURE_OUT_OF_RANGE:
            return SensorReading.out_of_range()

        try:
            value = parse_decimal(data[0:3])
        except ValueError as e:
            raise SensorParseError("Failed to convert temperature", data) from e

        if data[4] == ord("C"):
            unit = TemperatureUnit.CELSIUS
        else:
            unit = TemperatureUnit.FAHRENHEIT
        return SensorReading.of(value, unit)

    @staticmethod
    def parse_contrast(data: bytes) -> SensorReading:
        """Decode a contrast response (value at offset 2)."""
        return ResponseParser._parse_level(data, CONTRAST_LENGTH, CONTRAST_OFFSET, "contrast")

    @staticmethod
    def parse_brightness(data: bytes) -> SensorReading:
        """Decode a brightness response (value at offset 4)."""
        return ResponseParser._parse_level(data, BRIGHTNESS_LENGTH, BRIGHTNESS_OFFSET, "brightness")

    @staticmethod
    def _parse_level(data: bytes, length: int, offset: int, name: str) -> SensorReading:
        if len(data) != length:
            raise SensorParseError(f"Expected {length} bytes, got {len(data)}", data)

        try:
            value = parse_decimal(data[offset:])
        except ValueError as e:
            raise SensorParseError(f"Failed to convert {name}", data) from e

        if not LEVEL_MIN <= value <= LEVEL_MAX:
            return SensorReading.out_of_range()
        return SensorReading.of(value)
