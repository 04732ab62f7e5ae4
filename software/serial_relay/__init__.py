"""
Serial relay sniffer.

Forwards bytes between two serial ports and prints the traffic of each
direction as ASCII, a hex dump or an xxd-style dump.
"""

from .channel import DirectionalChannel, should_flush
from .endpoint import EndpointError, EndpointOpenError, ForwardingError, SerialEndpoint
from .formats import PrintFormat, Renderer
from .relay import RelayApplication, RelayConfig, relay_read

__all__ = [
    'DirectionalChannel', 'should_flush',
    'EndpointError', 'EndpointOpenError', 'ForwardingError', 'SerialEndpoint',
    'PrintFormat', 'Renderer',
    'RelayApplication', 'RelayConfig', 'relay_read',
]
