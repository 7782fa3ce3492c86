"""Shared fakes for driver tests."""

from typing import List, Optional

import pytest

from sureelec_lcd import DisplaySession
from sureelec_lcd.exceptions import TimeoutError

# 20x4, no RTC, 2kbit ROM, no light sensor, thermal sensor
CAPS_20X4 = b"2004" + b"0" + b"2" + b"0" + b"1" + b"   "
# 16x2, no optional hardware
CAPS_16X2_BARE = b"1602" + b"0" + b"1" + b"0" + b"0" + b"   "


class FakeSerial:
    """Stands in for an open serial.Serial handle."""

    def __init__(self, chunks: Optional[List[bytes]] = None, max_write: Optional[int] = None):
        self._chunks = list(chunks or [])
        self.max_write = max_write
        self.port = "/dev/ttyFAKE"
        self.baudrate = 9600
        self.timeout = None
        self.is_open = True
        self.written: List[bytes] = []
        self.read_sizes: List[int] = []
        self.flushes = 0
        self.input_resets = 0
        self.read_error: Optional[Exception] = None
        self.write_error: Optional[Exception] = None

    def write(self, data: bytes) -> int:
        if self.write_error:
            raise self.write_error
        count = len(data) if self.max_write is None else min(self.max_write, len(data))
        self.written.append(bytes(data[:count]))
        return count

    def read(self, size: int = 1) -> bytes:
        if self.read_error:
            raise self.read_error
        self.read_sizes.append(size)
        if not self._chunks:
            return b""
        chunk = self._chunks.pop(0)
        if len(chunk) > size:
            self._chunks.insert(0, chunk[size:])
            chunk = chunk[:size]
        return chunk

    def flush(self) -> None:
        self.flushes += 1

    def reset_input_buffer(self) -> None:
        self.input_resets += 1

    def fileno(self) -> int:
        # No real descriptor, so never a terminal
        return -1

    def close(self) -> None:
        self.is_open = False


class FakeTransport:
    """Records commands and replays canned responses."""

    def __init__(self, responses: Optional[List[bytes]] = None):
        self.port = "/dev/ttyFAKE"
        self.responses = list(responses or [])
        self.written: List[bytes] = []
        self.reads: List[int] = []
        self.discards = 0
        self.opened = 0
        self.closed = 0
        self._open = False

    def open(self) -> None:
        self.opened += 1
        self._open = True

    def close(self) -> None:
        self.closed += 1
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def write_exact(self, data: bytes) -> int:
        self.written.append(bytes(data))
        return len(data)

    def read_exact(self, count: int, timeout: Optional[float] = None) -> bytes:
        self.reads.append(count)
        if not self.responses:
            raise TimeoutError(1.0, count, 0)
        return self.responses.pop(0)

    def discard_input(self) -> None:
        self.discards += 1

    def reset_log(self) -> None:
        self.written.clear()
        self.reads.clear()


def make_session(caps: bytes = CAPS_20X4, responses: Optional[List[bytes]] = None):
    transport = FakeTransport([caps] + list(responses or []))
    session = DisplaySession(transport, command_delay=0, line_delay=0, init_delay=0)
    session.handshake()
    transport.reset_log()
    return session, transport


@pytest.fixture
def session_20x4():
    return make_session()
