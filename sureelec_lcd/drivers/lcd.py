"""
SureElec LCD Driver Module

Asynchronous wrapper around DisplaySession for applications that run
an event loop (status displays, dashboards).
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from ..constants import (
    COMMAND_DELAY,
    DEFAULT_BAUDRATE,
    LINE_DELAY,
    READ_TIMEOUT,
    ScrollDirection,
)
from ..exceptions import SureElecError
from ..framebuffer import Text
from ..session import DisplaySession
from .base import BaseDisplayDriver

logger = logging.getLogger(__name__)


class SureElecLCDDriver(BaseDisplayDriver):
    """
    Driver for SureElec character LCD modules.

    Attributes:
        port: Serial port path
        baudrate: Communication speed
        timeout: Per-attempt read deadline in seconds
    """

    def __init__(
        self,
        name: str = "SureElecLCDDriver",
        config: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize LCD driver.

        Args:
            name: Driver name
            config: Configuration with keys:
                - port: Serial port (default: "/dev/ttyUSB0")
                - baudrate: Baud rate (default: 9600)
                - timeout: Read deadline (default: 1.0)
                - command_delay: Settle time after commands (default: 0.01)
                - line_delay: Settle time after row writes (default: 0.025)
        """
        super().__init__(name=name, config=config)

        self.port: str = self.config.get("port", "/dev/ttyUSB0")
        self.baudrate: int = self.config.get("baudrate", DEFAULT_BAUDRATE)
        self.timeout: float = self.config.get("timeout", READ_TIMEOUT)
        self.command_delay: float = self.config.get("command_delay", COMMAND_DELAY)
        self.line_delay: float = self.config.get("line_delay", LINE_DELAY)

        self._session: Optional[DisplaySession] = None
        # The protocol is half-duplex; one exchange at a time
        self._lock = asyncio.Lock()

    async def connect(self) -> bool:
        """
        Open the port and run the handshake.

        Reconnecting closes the previous session first.

        Returns:
            bool: True if the display is ready
        """
        if self._session:
            await self.disconnect()

        try:
            logger.info(f"Connecting to LCD on {self.port} at {self.baudrate} bps")
            self._session = await self._run_sync(
                DisplaySession.open,
                self.port,
                self.baudrate,
                self.timeout,
                command_delay=self.command_delay,
                line_delay=self.line_delay
            )
            self._connected = True
            logger.info(f"Connected to LCD: {self._session.capabilities}")
            return True

        except SureElecError as e:
            logger.error(f"Failed to connect to LCD: {e}")
            await self.disconnect()
            return False

    async def disconnect(self) -> None:
        """Close the session."""
        if self._session:
            self._session.close()
            self._session = None

        self._connected = False
        logger.info("Disconnected from LCD")

    async def reset(self) -> None:
        """Blank the display and restore the last contrast/brightness."""
        session = self._require_session()
        await self._run_sync(session.clear_display)
        if session.contrast is not None:
            await self._run_sync(session.set_contrast, session.contrast)
        if session.brightness is not None:
            await self._run_sync(session.set_brightness, session.brightness)

    async def identify(self) -> str:
        if self._session:
            caps = self._session.capabilities
            return f"SureElec,{caps.width}x{caps.height},ROM-{caps.rom_size_kbit}kbit"
        return "SureElec,Unknown"

    # === Display Methods ===

    def geometry(self) -> Tuple[int, int]:
        session = self._require_session()
        return session.width, session.height

    async def write_line(self, line: int, text: Text) -> None:
        session = self._require_session()
        await self._run_sync(session.write_line, line, text)

    async def write_lines(self, lines: Iterable[Text]) -> None:
        session = self._require_session()
        await self._run_sync(session.write_lines, list(lines))

    async def clear(self) -> None:
        session = self._require_session()
        await self._run_sync(session.clear_display)

    async def refresh(self) -> None:
        session = self._require_session()
        await self._run_sync(session.refresh)

    async def scroll(
        self,
        direction: Union[ScrollDirection, str] = ScrollDirection.UP,
        distance: int = 1,
        wrap: bool = False
    ) -> None:
        """
        Scroll the display.

        Args:
            direction: ScrollDirection or its value ("up", "down")
            distance: Rows to shift
            wrap: Rotate rows instead of blanking them
        """
        session = self._require_session()
        await self._run_sync(session.scroll, ScrollDirection(direction), distance, wrap)

    async def toggle_display(self) -> bool:
        session = self._require_session()
        return await self._run_sync(session.toggle_display)

    async def set_contrast(self, value: int) -> int:
        session = self._require_session()
        return await self._run_sync(session.set_contrast, value)

    async def set_brightness(self, value: int) -> int:
        session = self._require_session()
        return await self._run_sync(session.set_brightness, value)

    # === Measurement Methods ===

    async def read_sensors(self) -> Dict[str, Any]:
        """
        Query temperature, contrast and brightness.

        Returns:
            Dict with one entry per query
        """
        session = self._require_session()

        temperature = await self._run_sync(session.get_temperature)
        contrast = await self._run_sync(session.get_contrast)
        brightness = await self._run_sync(session.get_brightness)

        return {
            "temperature": {
                "status": temperature.status.value,
                "value": temperature.value,
                "unit": temperature.unit.value if temperature.unit else None,
            },
            "contrast": {"status": contrast.status.value, "value": contrast.value},
            "brightness": {"status": brightness.status.value, "value": brightness.value},
        }

    # === Helper Methods ===

    def _require_session(self) -> DisplaySession:
        if not self._session:
            raise RuntimeError("Not connected to LCD")
        return self._session

    async def _run_sync(self, func, *args, **kwargs) -> Any:
        """
        Run a blocking session call in the default executor.

        Calls are serialized so exchanges never overlap on the line.
        """
        loop = asyncio.get_running_loop()
        async with self._lock:
            return await loop.run_in_executor(None, lambda: func(*args, **kwargs))
