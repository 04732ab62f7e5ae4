import io

import pytest

from serial_relay.channel import IDLE_THRESHOLD, DirectionalChannel, should_flush
from serial_relay.formats import COLOR_GREEN, COLOR_RESET, PrintFormat, Renderer


@pytest.mark.parametrize("buffer", [b"\n", b"\r", b"abc\ndef", b"\rxyz", b"no end\r\n"])
def test_terminator_anywhere_flushes_immediately(buffer: bytes) -> None:
    assert should_flush(buffer, last_flush_time=10.0, now=10.0)


def test_empty_buffer_never_flushes() -> None:
    assert not should_flush(b"", last_flush_time=0.0, now=100.0)


def test_idle_flush_requires_strictly_more_than_threshold() -> None:
    assert not should_flush(b"abc", 1.0, 1.0 + 0.05)
    assert not should_flush(b"abc", 0.0, IDLE_THRESHOLD)
    assert should_flush(b"abc", 0.0, IDLE_THRESHOLD + 0.001)


def _channel(print_format: PrintFormat = PrintFormat.HEXDUMP):
    stream = io.StringIO()
    return DirectionalChannel("a->b", COLOR_GREEN, 0.0), Renderer(print_format, stream), stream


def test_newline_flushes_on_next_check_and_clears_buffer() -> None:
    channel, renderer, stream = _channel(PrintFormat.ASCII)
    channel.append(b"Hello\n")

    assert channel.maybe_flush(renderer, now=0.001)
    assert stream.getvalue() == f"{COLOR_GREEN}Hello\n{COLOR_RESET}\n"
    assert channel.buffer == bytearray()
    assert channel.last_flush_time == 0.001


def test_partial_chunk_waits_for_idle_threshold() -> None:
    channel, renderer, stream = _channel()
    channel.append(b"\x01\x02")

    assert not channel.maybe_flush(renderer, now=0.07)
    assert stream.getvalue() == ""
    assert channel.buffer == bytearray(b"\x01\x02")

    assert channel.maybe_flush(renderer, now=0.08)
    assert stream.getvalue().startswith(COLOR_GREEN + "00000000: 01 02")
    assert not channel.buffer


def test_idle_timer_restarts_after_flush() -> None:
    channel, renderer, _ = _channel()
    channel.append(b"x")
    channel.maybe_flush(renderer, now=1.0)

    channel.append(b"y")
    assert not channel.maybe_flush(renderer, now=1.05)
    assert channel.maybe_flush(renderer, now=1.1)


def test_offset_accumulates_across_flushes() -> None:
    channel, renderer, stream = _channel(PrintFormat.XXD)
    sizes = [3, 16, 21, 1]
    offsets = []

    now = 0.0
    for size in sizes:
        offsets.append(channel.offset)
        channel.append(bytes(size))
        now += 1.0
        assert channel.maybe_flush(renderer, now)

    assert offsets == [0, 3, 19, 40]
    assert channel.offset == sum(sizes)
    assert "00000028: 00" in stream.getvalue()


def test_ascii_flushes_do_not_move_offset() -> None:
    channel, renderer, _ = _channel(PrintFormat.ASCII)
    channel.append(b"line\r\n")
    channel.maybe_flush(renderer, now=0.0)

    assert channel.offset == 0
