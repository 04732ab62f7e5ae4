"""
Console renderers for relayed traffic.

Each print format turns one flushed chunk into text wrapped in a colour
marker. HexDump and XXD address their rows with a running offset that the
caller carries from one flush to the next.
"""

import sys
from enum import Enum
from typing import Callable, Dict, Optional, TextIO, Tuple

# ANSI colour markers
COLOR_GREEN = '\x1b[32m'
COLOR_BLUE = '\x1b[34m'
COLOR_RESET = '\x1b[0m'

# Bytes per HexDump / XXD row
ROW_WIDTH = 16

# ASCII control bytes that are still printed verbatim
ASCII_WHITESPACE = frozenset(b'\t\n\x0c\r')


class PrintFormat(Enum):
    """How flushed traffic is shown on the console."""
    ASCII = 'ascii'
    HEXDUMP = 'hexdump'
    XXD = 'xxd'

    @classmethod
    def parse(cls, name: str) -> 'PrintFormat':
        """
        Look up a format by name, ignoring case.

        Raises:
            ValueError: if the name is not a known format
        """
        try:
            return cls(name.strip().lower())
        except ValueError:
            choices = ', '.join(f.value for f in cls)
            raise ValueError(f"unknown print format {name!r} (choose from {choices})") from None


def is_escaped(byte: int) -> bool:
    """True for control bytes that ASCII mode shows as [XX]."""
    is_control = byte < 0x20 or byte == 0x7F
    return is_control and byte not in ASCII_WHITESPACE


def format_ascii(data: bytes, offset: int, color: str) -> Tuple[str, int]:
    """
    Render a chunk as a live transcript.

    Control bytes other than whitespace become ``[XX]``. The offset is
    returned unchanged.
    """
    text = ''.join(f"[{b:02X}]" if is_escaped(b) else chr(b) for b in data)
    return f"{color}{text}{COLOR_RESET}\n", offset


def _hex_row(row: bytes, offset: int) -> str:
    """Address, hex columns and padding for one row, without a newline."""
    hex_cols = ' '.join(f"{b:02x}" for b in row)
    padding = '   ' * (ROW_WIDTH - len(row))
    return f"{offset:08x}: {hex_cols}{padding}"


def _gutter(row: bytes) -> str:
    return ''.join(chr(b) if 0x20 <= b <= 0x7E else '.' for b in row)


def format_hexdump(data: bytes, offset: int, color: str) -> Tuple[str, int]:
    """
    Render a chunk as addressed rows of 16 hex bytes.

    Returns:
        (text, offset advanced by len(data))
    """
    lines = []
    for start in range(0, len(data), ROW_WIDTH):
        row = data[start:start + ROW_WIDTH]
        lines.append(_hex_row(row, offset) + '\n')
        offset += len(row)
    return color + ''.join(lines) + COLOR_RESET, offset


def format_xxd(data: bytes, offset: int, color: str) -> Tuple[str, int]:
    """Render a chunk like HexDump with an ASCII gutter after each row."""
    lines = []
    for start in range(0, len(data), ROW_WIDTH):
        row = data[start:start + ROW_WIDTH]
        lines.append(f"{_hex_row(row, offset)}  {_gutter(row)}\n")
        offset += len(row)
    return color + ''.join(lines) + COLOR_RESET, offset


FORMATTERS: Dict[PrintFormat, Callable[[bytes, int, str], Tuple[str, int]]] = {
    PrintFormat.ASCII: format_ascii,
    PrintFormat.HEXDUMP: format_hexdump,
    PrintFormat.XXD: format_xxd,
}


class Renderer:
    """
    Writes formatted chunks to a console stream.

    The format is fixed for the lifetime of the renderer and shared by both
    relay directions.
    """

    def __init__(self, print_format: PrintFormat = PrintFormat.ASCII,
                 stream: Optional[TextIO] = None):
        self.print_format = print_format
        self._formatter = FORMATTERS[print_format]
        self.stream = stream if stream is not None else sys.stdout
        # Characters the console cannot encode print as escapes
        if hasattr(self.stream, 'reconfigure'):
            self.stream.reconfigure(errors='backslashreplace')

    def render(self, data: bytes, offset: int, color: str) -> int:
        """
        Print one chunk in the configured format.

        Args:
            data: Flushed bytes
            offset: Running offset of the channel before this chunk
            color: Colour marker written before the chunk

        Returns:
            The channel's new running offset
        """
        text, offset = self._formatter(bytes(data), offset, color)
        self.stream.write(text)
        self.stream.flush()
        return offset
