"""
Serial Relay - command line entry point

Relays two serial ports into each other and prints the traffic of each
direction in its own colour.
"""

import argparse
import logging
from typing import List, Optional

from .endpoint import EndpointError, available_ports
from .formats import PrintFormat
from .relay import RelayApplication, RelayConfig

logger = logging.getLogger('serial_relay')


def positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def print_format(value: str) -> PrintFormat:
    try:
        return PrintFormat.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Relay two serial ports and print the traffic in between'
    )
    parser.add_argument(
        '-d', '--device-primary',
        help='The first serial device that will be relayed'
    )
    parser.add_argument(
        '-D', '--device-secondary',
        help='The second serial device that will be relayed'
    )
    parser.add_argument(
        '-b', '--baudrate',
        type=positive_int,
        help='Baud rate applied to both devices'
    )
    parser.add_argument(
        '-f', '--format',
        type=print_format,
        default=PrintFormat.ASCII,
        dest='print_format',
        help='Print format: ascii, hexdump or xxd (default: ascii)'
    )
    parser.add_argument(
        '-t', '--timeout',
        type=positive_int,
        default=1000,
        help='Read timeout in milliseconds (default: 1000)'
    )
    parser.add_argument(
        '-v', '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '-l', '--list',
        action='store_true',
        help='List available serial ports and exit'
    )
    return parser


def parse_config(argv: Optional[List[str]] = None) -> Optional[RelayConfig]:
    """
    Parse the command line.

    Returns:
        The relay settings, or None when only a port listing was requested
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list:
        return None

    missing = [flag for flag, value in (
        ('--device-primary', args.device_primary),
        ('--device-secondary', args.device_secondary),
        ('--baudrate', args.baudrate),
    ) if value is None]
    if missing:
        parser.error(f"the following arguments are required: {', '.join(missing)}")

    return RelayConfig(
        device_primary=args.device_primary,
        device_secondary=args.device_secondary,
        baudrate=args.baudrate,
        print_format=args.print_format,
        timeout=args.timeout / 1000.0,
        debug=args.debug,
    )


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    config = parse_config(argv)
    if config is None:
        ports = available_ports()
        print("Available serial ports:")
        for port in ports:
            print(f"  - {port}")
        if not ports:
            print("  (none)")
        return 0

    if config.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    print(f"Relaying between {config.device_primary!r} and "
          f"{config.device_secondary!r} @ {config.baudrate}bps")

    try:
        app = RelayApplication.from_config(config)
        app.run()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except EndpointError as e:
        logger.error(f"Relay stopped: {e}")
        return 1

    return 0
