"""
Relay loop between two serial endpoints.

Polls both ports round-robin, forwards whatever one side sends to the other
unchanged, and prints the traffic of each direction through its channel.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .channel import DirectionalChannel
from .endpoint import DEFAULT_TIMEOUT, READ_CHUNK_SIZE, SerialEndpoint
from .formats import COLOR_BLUE, COLOR_GREEN, PrintFormat, Renderer

logger = logging.getLogger(__name__)


@dataclass
class RelayConfig:
    """Settings fixed at startup."""
    device_primary: str
    device_secondary: str
    baudrate: int
    print_format: PrintFormat = PrintFormat.ASCII
    timeout: float = DEFAULT_TIMEOUT
    debug: bool = False


def relay_read(source, peer, channel: DirectionalChannel,
               size: int = READ_CHUNK_SIZE) -> int:
    """
    Move one chunk from ``source`` to ``peer``.

    The bytes are buffered on ``channel`` before the write is attempted, so
    a failed write still leaves them on the display buffer.

    Returns:
        Number of bytes read (0 on timeout)

    Raises:
        ForwardingError: if the peer rejects the write
    """
    data = source.read(size)
    if not data:
        return 0

    channel.append(data)
    peer.write(data)
    return len(data)


class RelayApplication:
    """
    Main relay application class.

    Owns both endpoints and both directional channels for its lifetime.
    """

    def __init__(self, primary, secondary, renderer: Renderer,
                 clock: Callable[[], float] = time.monotonic):
        self.primary = primary
        self.secondary = secondary
        self.renderer = renderer
        self.clock = clock
        self.running = False

        start = clock()
        self.primary_to_secondary = DirectionalChannel('primary->secondary', COLOR_GREEN, start)
        self.secondary_to_primary = DirectionalChannel('secondary->primary', COLOR_BLUE, start)

    @classmethod
    def from_config(cls, config: RelayConfig) -> 'RelayApplication':
        """
        Open both ports described by ``config``.

        Raises:
            EndpointOpenError: naming the endpoint that failed to open
        """
        primary = SerialEndpoint('primary', config.device_primary,
                                 config.baudrate, config.timeout)
        try:
            secondary = SerialEndpoint('secondary', config.device_secondary,
                                       config.baudrate, config.timeout)
        except BaseException:
            primary.close()
            raise
        return cls(primary, secondary, Renderer(config.print_format))

    def step(self):
        """Run one loop iteration: poll both ports, then check both flushes."""
        relay_read(self.primary, self.secondary, self.primary_to_secondary)
        relay_read(self.secondary, self.primary, self.secondary_to_primary)

        now = self.clock()
        self.primary_to_secondary.maybe_flush(self.renderer, now)
        self.secondary_to_primary.maybe_flush(self.renderer, now)

    def run(self, max_iterations: Optional[int] = None):
        """
        Main relay loop.

        Runs until stop() is called, the process is interrupted, or
        ``max_iterations`` loop passes have completed. Data still buffered
        when the loop ends is not printed.

        Raises:
            ForwardingError: if either port cannot be written
        """
        self.running = True
        logger.info("Relay started")
        iterations = 0

        try:
            while self.running:
                self.step()
                iterations += 1
                if max_iterations is not None and iterations >= max_iterations:
                    break
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
        finally:
            self.running = False
            self.close()

    def stop(self):
        """Stop the relay after the current iteration."""
        self.running = False

    def close(self):
        """Release both ports."""
        self.primary.close()
        self.secondary.close()
        logger.info("Relay stopped")
