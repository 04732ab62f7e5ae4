"""
Per-direction relay state and the flush decision.

A DirectionalChannel collects the bytes seen in one direction until a line
terminator arrives or the traffic goes idle, then hands them to the renderer.
"""

import logging
from dataclasses import dataclass, field

from .formats import Renderer

logger = logging.getLogger(__name__)

# Bytes that flush a channel as soon as they are buffered
LINE_TERMINATORS = (0x0D, 0x0A)

# Idle time after which a partial chunk is flushed anyway (seconds)
IDLE_THRESHOLD = 0.075


def should_flush(buffer: bytes, last_flush_time: float, now: float,
                 idle_threshold: float = IDLE_THRESHOLD) -> bool:
    """
    Decide whether a buffer is ready to be rendered.

    Args:
        buffer: Bytes collected since the last flush
        last_flush_time: Clock value of the last flush
        now: Current clock value
        idle_threshold: Idle time, in seconds, that forces a flush

    Returns:
        True if the buffer holds a CR or LF anywhere, or if it is non-empty
        and more than ``idle_threshold`` has elapsed since the last flush
    """
    if any(t in buffer for t in LINE_TERMINATORS):
        return True
    return len(buffer) > 0 and now - last_flush_time > idle_threshold


@dataclass
class DirectionalChannel:
    """Buffer, timer, offset and colour for one relay direction."""
    name: str
    color: str
    last_flush_time: float
    buffer: bytearray = field(default_factory=bytearray)
    offset: int = 0

    def append(self, data: bytes):
        """Add freshly read bytes to the pending chunk."""
        self.buffer.extend(data)

    def maybe_flush(self, renderer: Renderer, now: float) -> bool:
        """
        Render and clear the pending chunk if a flush is due.

        Returns:
            True if the chunk was flushed
        """
        if not should_flush(self.buffer, self.last_flush_time, now):
            return False

        logger.debug(f"Flushing {len(self.buffer)} bytes on {self.name}")
        self.offset = renderer.render(self.buffer, self.offset, self.color)
        self.buffer.clear()
        self.last_flush_time = now
        return True
