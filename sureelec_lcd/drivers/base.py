"""
Display Driver Contract

Row-addressed character displays driven from asyncio code.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

from ..framebuffer import Text


class BaseDisplayDriver(ABC):
    """
    Abstract character display driver.

    Subclasses provide row writes, a full blank and sensor read-back;
    multi-line text layout is shared here.

    Attributes:
        name: Driver identifier name
        config: Configuration dictionary
    """

    def __init__(
        self,
        name: str = "BaseDisplayDriver",
        config: Optional[Dict[str, Any]] = None
    ):
        self.name = name
        self.config = config or {}
        self._connected = False

    @abstractmethod
    async def connect(self) -> bool:
        """
        Open the display and learn its geometry.

        Returns:
            bool: True if the display is ready for writes
        """
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        ...

    @abstractmethod
    def geometry(self) -> Tuple[int, int]:
        """(width, height) in character cells."""
        ...

    @abstractmethod
    async def write_line(self, line: int, text: Text) -> None:
        """Replace one 1-based row."""
        ...

    @abstractmethod
    async def clear(self) -> None:
        """Blank every row."""
        ...

    @abstractmethod
    async def read_sensors(self) -> Dict[str, Any]:
        ...

    async def show(self, text: str) -> int:
        """
        Lay out a multi-line message, one row per newline.

        Lines past the bottom row are dropped and rows below the message
        are blanked.

        Returns:
            Number of message lines shown
        """
        _, height = self.geometry()
        lines = text.split("\n")[:height]
        for number in range(1, height + 1):
            await self.write_line(number, lines[number - 1] if number <= len(lines) else "")
        return len(lines)

    async def is_connected(self) -> bool:
        return self._connected

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, connected={self._connected})"
