"""
Device capability and sensor reading structures.

Responses are ASCII encoded; decoding lives in :mod:`codec`.
"""

from dataclasses import dataclass, field
from typing import Optional

from .constants import ReadingStatus, TemperatureUnit


@dataclass(frozen=True)
class DeviceCapabilities:
    """Display geometry and optional hardware, from the capability query."""
    width: int                 # columns, 1-99
    height: int                # rows, 1-99
    has_real_time_clock: bool
    rom_size_kbit: int
    has_light_sensor: bool
    has_thermal_sensor: bool
    raw: bytes = field(default=b"", compare=False, repr=False)

    @property
    def size(self) -> int:
        """Total number of character cells."""
        return self.width * self.height

    def __str__(self) -> str:
        extras = [
            name for name, present in (
                ("RTC", self.has_real_time_clock),
                ("light", self.has_light_sensor),
                ("thermal", self.has_thermal_sensor),
            ) if present
        ]
        return (f"{self.width}x{self.height}, ROM {self.rom_size_kbit}kbit, "
                f"sensors: {', '.join(extras) or 'none'}")


@dataclass(frozen=True)
class SensorReading:
    """Result of a temperature, contrast or brightness query."""
    status: ReadingStatus
    value: Optional[int] = None
    unit: Optional[TemperatureUnit] = None

    @classmethod
    def of(cls, value: int, unit: Optional[TemperatureUnit] = None) -> 'SensorReading':
        return cls(ReadingStatus.OK, value, unit)

    @classmethod
    def out_of_range(cls) -> 'SensorReading':
        return cls(ReadingStatus.OUT_OF_RANGE)

    @classmethod
    def unsupported(cls) -> 'SensorReading':
        return cls(ReadingStatus.UNSUPPORTED)

    @property
    def ok(self) -> bool:
        """True if the reading carries a value."""
        return self.status == ReadingStatus.OK

    def to_celsius(self) -> Optional[float]:
        """
        Temperature in Celsius.

        Returns:
            Converted value, or None for readings without a temperature
        """
        if not self.ok or self.unit is None:
            return None
        if self.unit == TemperatureUnit.CELSIUS:
            return float(self.value)
        return (self.value - 32) * 5.0 / 9.0

    def __repr__(self) -> str:
        if not self.ok:
            return f"SensorReading({self.status.name})"
        suffix = self.unit.value if self.unit else ""
        return f"SensorReading({self.value}{suffix})"
