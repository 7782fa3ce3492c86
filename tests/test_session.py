"""Tests for the device session."""

import logging

import pytest

from sureelec_lcd import DisplaySession
from sureelec_lcd.constants import ReadingStatus, ScrollDirection, SessionState, TemperatureUnit
from sureelec_lcd.exceptions import (
    CapabilityParseError,
    InvalidLineError,
    SensorParseError,
    SessionClosedError,
    TimeoutError,
    UnsupportedDirectionError,
    WriteFailedError,
)

from .conftest import CAPS_16X2_BARE, CAPS_20X4, FakeTransport, make_session

WRITE = b"\xFE\x47\x01"


def row_writes(written, height):
    """Pair up write-line headers and payloads."""
    pairs = [(written[i], written[i + 1]) for i in range(0, len(written), 2)]
    assert len(pairs) == height
    return pairs


class TestHandshake:
    """Open, init and capability discovery."""

    def test_handshake_sequence(self):
        transport = FakeTransport([CAPS_20X4])
        session = DisplaySession(transport, command_delay=0, line_delay=0, init_delay=0)

        caps = session.handshake()

        assert transport.opened == 1
        assert transport.written == [b"\xFESure", b"\xFE\x76"]
        assert transport.reads == [11]
        assert caps.width == 20 and caps.height == 4
        assert session.state == SessionState.READY
        assert len(session.framebuffer) == 80

    def test_framebuffer_sized_from_capabilities(self):
        session, _ = make_session(CAPS_16X2_BARE)
        assert session.framebuffer.width == 16
        assert session.framebuffer.height == 2

    def test_capability_timeout_fails_session(self):
        transport = FakeTransport([])
        session = DisplaySession(transport, command_delay=0, line_delay=0, init_delay=0)

        with pytest.raises(TimeoutError):
            session.handshake()
        assert session.state == SessionState.FAILED
        assert transport.closed == 1

    def test_bad_capabilities_fail_session(self):
        transport = FakeTransport([b"xx04" + b"0200" + b"   "])
        session = DisplaySession(transport, command_delay=0, line_delay=0, init_delay=0)

        with pytest.raises(CapabilityParseError):
            session.handshake()
        assert session.state == SessionState.FAILED
        with pytest.raises(SessionClosedError):
            session.write_line(1, "x")

    def test_write_failure_is_reported(self):
        class BrokenTransport(FakeTransport):
            def write_exact(self, data):
                raise WriteFailedError("Broken pipe")

        session = DisplaySession(BrokenTransport(), init_delay=0)
        with pytest.raises(WriteFailedError):
            session.handshake()
        assert session.state == SessionState.FAILED

    def test_handshake_only_once(self, session_20x4):
        session, _ = session_20x4
        with pytest.raises(SessionClosedError):
            session.handshake()

    def test_operations_before_open(self):
        session = DisplaySession(FakeTransport())
        with pytest.raises(SessionClosedError):
            session.refresh()

    def test_injected_logger_is_used(self, caplog):
        custom = logging.getLogger("lcd.test")
        transport = FakeTransport([CAPS_20X4])
        session = DisplaySession(transport, log=custom, command_delay=0, line_delay=0, init_delay=0)

        with caplog.at_level(logging.INFO, logger="lcd.test"):
            session.handshake()
        assert any(r.name == "lcd.test" and "Display ready" in r.message for r in caplog.records)

    def test_device_info_is_cached(self, session_20x4):
        session, transport = session_20x4

        info = session.get_device_info()

        assert info.width == 20 and info.height == 4
        assert info.raw == CAPS_20X4
        assert info is session.capabilities
        assert transport.written == []
        assert transport.reads == []


class TestWriteLine:
    """Row writes go through the framebuffer."""

    def test_short_text_padded_on_wire(self, session_20x4):
        session, transport = session_20x4

        session.write_line(2, "Hello")

        assert transport.written == [WRITE + b"\x02", b"Hello" + b" " * 15]
        assert session.lines[1] == "Hello" + " " * 15

    def test_long_text_truncated_on_wire(self, session_20x4):
        session, transport = session_20x4

        session.write_line(1, "abcdefghijklmnopqrstuvwxyz")

        assert transport.written[1] == b"abcdefghijklmnopqrst"

    @pytest.mark.parametrize("line", [0, 5, -2])
    def test_invalid_line_sends_nothing(self, session_20x4, line):
        session, transport = session_20x4

        with pytest.raises(InvalidLineError):
            session.write_line(line, "x")
        assert transport.written == []

    def test_write_lines(self, session_20x4):
        session, transport = session_20x4

        session.write_lines(["one", "two"])

        assert transport.written[0] == WRITE + b"\x01"
        assert transport.written[2] == WRITE + b"\x02"
        assert session.lines[:2] == ["one" + " " * 17, "two" + " " * 17]

    def test_write_lines_too_many(self, session_20x4):
        session, transport = session_20x4
        with pytest.raises(InvalidLineError):
            session.write_lines(["a"] * 5)
        assert transport.written == []


class TestClearAndRefresh:
    """Full-screen repaints, one transmission per row."""

    def test_clear_then_refresh(self, session_20x4):
        session, transport = session_20x4
        session.write_line(1, "stale")
        transport.reset_log()

        session.clear_display()
        session.refresh()

        for written in (transport.written[:8], transport.written[8:]):
            pairs = row_writes(written, 4)
            for number, (header, payload) in enumerate(pairs, start=1):
                assert header == WRITE + bytes([number])
                assert payload == b" " * 20

    def test_refresh_keeps_content(self, session_20x4):
        session, transport = session_20x4
        session.write_lines(["a", "b", "c", "d"])
        transport.reset_log()

        session.refresh()

        payloads = [p for _, p in row_writes(transport.written, 4)]
        assert [p[:1] for p in payloads] == [b"a", b"b", b"c", b"d"]
        assert session.lines[0].startswith("a")


class TestScroll:
    """Scroll shifts the mirror, then repaints every row."""

    def test_scroll_up_two_on_four_rows(self, session_20x4):
        session, transport = session_20x4
        session.write_lines(["r1", "r2", "r3", "r4"])
        transport.reset_log()

        session.scroll(ScrollDirection.UP, 2)

        payloads = [p for _, p in row_writes(transport.written, 4)]
        assert payloads[0].startswith(b"r3")
        assert payloads[1].startswith(b"r4")

    def test_scroll_down_wrap(self, session_20x4):
        session, _ = session_20x4
        session.write_lines(["r1", "r2", "r3", "r4"])

        session.scroll(ScrollDirection.DOWN, 1, wrap=True)

        assert [line.strip() for line in session.lines] == ["r4", "r1", "r2", "r3"]

    def test_horizontal_scroll_sends_nothing(self, session_20x4):
        session, transport = session_20x4
        with pytest.raises(UnsupportedDirectionError):
            session.scroll(ScrollDirection.LEFT, 1)
        assert transport.written == []


class TestSettings:
    """Display toggle, contrast and brightness."""

    def test_toggle_display(self, session_20x4):
        session, transport = session_20x4

        assert session.toggle_display() is False
        assert session.toggle_display() is True
        assert transport.written == [b"\xFE\x64", b"\xFE\x64"]

    def test_display_on_tracks_toggle(self, session_20x4):
        session, _ = session_20x4

        assert session.display_on is True
        session.toggle_display()
        assert session.display_on is False

    def test_set_contrast_clamps_and_caches(self, session_20x4):
        session, transport = session_20x4

        assert session.set_contrast(300) == 255
        assert session.contrast == 255
        assert session.set_contrast(0) == 1
        assert transport.written == [b"\xFE\x50\xFF", b"\xFE\x50\x01"]
        assert session.contrast == 1

    def test_set_brightness(self, session_20x4):
        session, transport = session_20x4

        session.set_brightness(254)

        assert transport.written == [b"\xFE\x98\xFE"]
        assert session.brightness == 254


class TestQueries:
    """Sensor and setting read-back."""

    def test_temperature(self):
        session, transport = make_session(responses=[b"0721C"])

        reading = session.get_temperature()

        assert transport.written == [b"\xFE\x77"]
        assert transport.reads == [5]
        assert reading.value == 72
        assert reading.unit == TemperatureUnit.CELSIUS

    def test_temperature_unsupported_without_io(self):
        session, transport = make_session(CAPS_16X2_BARE)

        reading = session.get_temperature()

        assert reading.status == ReadingStatus.UNSUPPORTED
        assert transport.written == []
        assert transport.reads == []

    def test_contrast_updates_cache(self):
        session, transport = make_session(responses=[b"\xFE\x63100"])

        reading = session.get_contrast()

        assert reading.value == 100
        assert session.contrast == 100
        assert transport.reads == [5]

    def test_brightness(self):
        session, transport = make_session(responses=[b"\xFE\x62  200"])

        assert session.get_brightness().value == 200
        assert transport.reads == [7]

    def test_parse_error_keeps_session_ready(self):
        session, _ = make_session(responses=[b"\xFE\x62 oops", b"\xFE\x62  010"])

        with pytest.raises(SensorParseError):
            session.get_brightness()
        assert session.state == SessionState.READY
        assert session.get_brightness().value == 10

    def test_queries_discard_stale_input(self):
        session, transport = make_session(responses=[b"\xFE\x63050"])
        before = transport.discards

        session.get_contrast()

        assert transport.discards == before + 1


class TestClose:
    """Explicit teardown."""

    def test_close_releases_everything(self, session_20x4):
        session, transport = session_20x4

        session.close()

        assert session.state == SessionState.CLOSED
        assert transport.closed == 1
        with pytest.raises(SessionClosedError):
            session.write_line(1, "x")
        with pytest.raises(SessionClosedError):
            session.get_contrast()
        assert transport.written == []

    def test_close_twice(self, session_20x4):
        session, transport = session_20x4
        session.close()
        session.close()
        assert transport.closed == 1

    def test_context_manager(self):
        transport = FakeTransport([CAPS_20X4])
        with DisplaySession(transport, command_delay=0, line_delay=0, init_delay=0) as session:
            assert session.state == SessionState.READY
        assert session.state == SessionState.CLOSED
