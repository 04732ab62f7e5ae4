"""Shared fakes for relay tests."""

from __future__ import annotations

from collections import deque
from typing import Iterable

import pytest
import serial

from serial_relay import endpoint
from serial_relay.endpoint import ForwardingError


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, delta: float) -> None:
        self.current += delta


class FakeEndpoint:
    """Stands in for a SerialEndpoint: scripted reads, recorded writes."""

    def __init__(self, name: str, chunks: Iterable[bytes] = ()) -> None:
        self.name = name
        self.pending: deque[bytes] = deque(chunks)
        self.written = bytearray()
        self.fail_writes = False
        self.closed = False
        self.read_sizes: list[int] = []

    def feed(self, data: bytes) -> None:
        self.pending.append(data)

    def read(self, size: int = 256) -> bytes:
        self.read_sizes.append(size)
        if not self.pending:
            return b""
        return self.pending.popleft()

    def write(self, data: bytes) -> int:
        if self.fail_writes:
            raise ForwardingError(self.name, "write refused")
        self.written.extend(data)
        return len(data)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


class FakeSerial:
    """Replaces serial.Serial; ports in ``refused_ports`` fail to open."""

    instances: list = []
    refused_ports: set = set()
    dtr_error = None

    def __init__(self, port, baudrate, bytesize, parity, stopbits, timeout):
        if port in FakeSerial.refused_ports:
            raise serial.SerialException(f"could not open port {port}")
        self.port = port
        self.baudrate = baudrate
        self.bytesize = bytesize
        self.parity = parity
        self.stopbits = stopbits
        self.timeout = timeout
        self._dtr = False
        self.is_open = True
        self.incoming = b""
        self.read_error = None
        self.write_error = None
        self.short_by = 0
        self.sent = bytearray()
        FakeSerial.instances.append(self)

    @property
    def dtr(self):
        return self._dtr

    @dtr.setter
    def dtr(self, value):
        if FakeSerial.dtr_error:
            raise FakeSerial.dtr_error
        self._dtr = value

    def read(self, size):
        if self.read_error:
            raise self.read_error
        data, self.incoming = self.incoming[:size], self.incoming[size:]
        return data

    def write(self, data):
        if self.write_error:
            raise self.write_error
        self.sent.extend(data)
        return len(data) - self.short_by

    def close(self):
        self.is_open = False


@pytest.fixture
def fake_serial(monkeypatch):
    FakeSerial.instances = []
    FakeSerial.refused_ports = set()
    FakeSerial.dtr_error = None
    monkeypatch.setattr(endpoint.serial, "Serial", FakeSerial)
    return FakeSerial
