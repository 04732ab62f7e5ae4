"""
Serial endpoint wrapper for the relay.

Opens one side of the relay with the fixed line settings (8N1, DTR asserted)
and exposes bounded-timeout reads and blocking writes.
"""

import logging
from typing import List

import serial
from serial.tools import list_ports

logger = logging.getLogger(__name__)

# Maximum bytes pulled from a port per loop iteration
READ_CHUNK_SIZE = 256

# Read timeout applied when none is configured (seconds)
DEFAULT_TIMEOUT = 1.0


class EndpointError(Exception):
    """Base error for a relay endpoint."""

    def __init__(self, name: str, message: str):
        super().__init__(f"{name}: {message}")
        self.name = name


class EndpointOpenError(EndpointError):
    """The port could not be opened or configured."""


class ForwardingError(EndpointError):
    """Bytes could not be delivered to the peer port."""


class SerialEndpoint:
    """
    One serial port taking part in the relay.

    The port is opened on construction and closed by close() or by leaving
    a ``with`` block.
    """

    def __init__(self, name: str, port: str, baudrate: int,
                 timeout: float = DEFAULT_TIMEOUT):
        """
        Open and configure the port.

        Args:
            name: Label used in diagnostics ('primary' or 'secondary')
            port: Serial port name (e.g., 'COM3' or '/dev/ttyUSB0')
            baudrate: Baud rate
            timeout: Read timeout in seconds

        Raises:
            EndpointOpenError: if the port cannot be opened
        """
        self.name = name
        self.port = port
        try:
            self.serial = serial.Serial(
                port,
                baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=timeout,
            )
        except (serial.SerialException, ValueError) as e:
            raise EndpointOpenError(name, f"failed to open {port}: {e}") from e
        try:
            self.serial.dtr = True
        except serial.SerialException as e:
            self.serial.close()
            raise EndpointOpenError(name, f"failed to assert DTR on {port}: {e}") from e
        logger.info(f"Opened {name} port {port} @ {baudrate}bps")

    def read(self, size: int = READ_CHUNK_SIZE) -> bytes:
        """
        Read up to ``size`` bytes, waiting at most the read timeout.

        Returns:
            The bytes read; empty on timeout or on a transient read error
        """
        try:
            return self.serial.read(size)
        except serial.SerialException as e:
            logger.debug(f"Read error on {self.name} port {self.port}: {e}")
            return b''

    def write(self, data: bytes) -> int:
        """
        Write all of ``data``, blocking until it is sent.

        Raises:
            ForwardingError: if the port rejects the write or sends short
        """
        try:
            written = self.serial.write(data)
        except serial.SerialException as e:
            raise ForwardingError(self.name, f"write to {self.port} failed: {e}") from e
        if written is not None and written != len(data):
            raise ForwardingError(
                self.name,
                f"short write to {self.port}: {written} of {len(data)} bytes"
            )
        return len(data)

    def close(self):
        """Close the serial connection."""
        if self.serial.is_open:
            self.serial.close()
            logger.info(f"Closed {self.name} port {self.port}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def available_ports() -> List[str]:
    """Describe every serial port pyserial can see, one line per port."""
    ports = sorted(list_ports.comports(), key=lambda p: p.device)
    return [f"{p.device}  ({p.description})" for p in ports]

