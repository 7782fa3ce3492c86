"""
Local mirror of the characters shown on each display row.

Rows are addressed 1-based and always hold exactly ``width`` bytes,
space padded. The buffer is sized once and never resized.
"""

import logging
from typing import List, Union

from .constants import PAD, ScrollDirection
from .exceptions import InvalidLineError, UnsupportedDirectionError

logger = logging.getLogger(__name__)

Text = Union[str, bytes, bytearray]


def to_cells(text: Text) -> bytes:
    """
    Convert text to display cell bytes.

    Strings are latin-1 encoded (unencodable characters become '?').
    Control bytes are replaced with the pad character.
    """
    if isinstance(text, str):
        data = text.encode("latin-1", errors="replace")
    else:
        data = bytes(text)
    return bytes(b if b >= PAD else PAD for b in data)


class Framebuffer:
    """Row-major ``height x width`` character grid."""

    def __init__(self, width: int, height: int):
        if width < 1 or height < 1:
            raise ValueError(f"Invalid framebuffer geometry {width}x{height}")
        self.width = width
        self.height = height
        self._rows: List[bytearray] = [self._blank() for _ in range(height)]

    def _blank(self) -> bytearray:
        return bytearray([PAD]) * self.width

    def _index(self, line: int) -> int:
        if not 1 <= line <= self.height:
            raise InvalidLineError(line, self.height)
        return line - 1

    def set_line(self, line: int, text: Text) -> bytes:
        """
        Overwrite a whole row.

        Text longer than the width is truncated; the rest of the row is
        padded so no stale characters survive.

        Args:
            line: 1-based row number
            text: Row content

        Returns:
            The row's new ``width`` bytes

        Raises:
            InvalidLineError: If line is out of range
        """
        index = self._index(line)
        cells = to_cells(text)[:self.width]
        row = self._rows[index]
        row[:len(cells)] = cells
        row[len(cells):] = bytes([PAD]) * (self.width - len(cells))
        return bytes(row)

    def row(self, line: int) -> bytes:
        """Current bytes of a row."""
        return bytes(self._rows[self._index(line)])

    def clear(self) -> None:
        """Fill the whole buffer with the pad character."""
        for row in self._rows:
            row[:] = self._blank()

    def scroll(self, direction: ScrollDirection, distance: int, wrap: bool = False) -> int:
        """
        Shift rows vertically.

        UP moves row ``distance + 1`` to row 1 and so on; DOWN is the
        inverse. Vacated rows are blanked, or with ``wrap`` receive the
        rows shifted off the other end.

        Args:
            direction: ScrollDirection.UP or ScrollDirection.DOWN
            distance: Rows to shift, clamped to [0, height]
            wrap: Rotate instead of discarding

        Returns:
            The clamped distance

        Raises:
            UnsupportedDirectionError: For LEFT/RIGHT
        """
        if direction not in (ScrollDirection.UP, ScrollDirection.DOWN):
            raise UnsupportedDirectionError(f"Scroll direction {direction} is not supported")

        distance = max(0, min(distance, self.height))
        if distance == 0:
            return 0

        rows = self._rows
        if direction == ScrollDirection.UP:
            shifted, kept = rows[:distance], rows[distance:]
            vacated = shifted if wrap else [self._blank() for _ in range(distance)]
            self._rows = kept + vacated
        else:
            kept, shifted = rows[:self.height - distance], rows[self.height - distance:]
            vacated = shifted if wrap else [self._blank() for _ in range(distance)]
            self._rows = vacated + kept

        logger.debug(f"Scrolled {direction.value} by {distance} (wrap={wrap})")
        return distance

    def lines(self) -> List[str]:
        """Decoded rows, top to bottom."""
        return [bytes(row).decode("latin-1") for row in self._rows]

    def __bytes__(self) -> bytes:
        return b"".join(bytes(row) for row in self._rows)

    def __len__(self) -> int:
        return self.width * self.height

    def __repr__(self) -> str:
        return f"Framebuffer({self.width}x{self.height})"
