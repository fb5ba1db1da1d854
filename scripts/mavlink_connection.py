#!/usr/bin/env python3
"""
mavlink_connection.py - MAVSDK Connection Configuration

Builds the MAVSDK connection URL for the maneuver programs from, in order
of precedence:

1. A connection URL given on the command line (e.g. udp://:14540)
2. Individual command line options (--connection-type, --udp-port, ...)
3. Environment variables
4. Defaults (UDP on port 14540, the PX4 SITL offboard port)

Connection URL formats:
    UDP:    udp://[bind_host][:bind_port]
    TCP:    tcp://[server_host][:server_port]
    Serial: serial:///path/to/serial/dev[:baudrate]

Environment Variables:
    MAVSDK_CONNECTION_URL   - Full connection URL (overrides everything below)
    MAVSDK_CONNECTION_TYPE  - "udp", "tcp" or "serial" (default: udp)
    MAVSDK_UDP_HOST         - UDP bind address (default: empty, all interfaces)
    MAVSDK_UDP_PORT         - UDP port (default: 14540)
    MAVSDK_TCP_HOST         - TCP server host (default: localhost)
    MAVSDK_TCP_PORT         - TCP server port (default: 5760)
    MAVSDK_SERIAL_DEVICE    - Serial device path (default: /dev/ttyACM0)
    MAVSDK_SERIAL_BAUD      - Serial baud rate (default: 57600)

Usage:
    python3 scripts/mavlink_connection.py udp://:14540
    python3 scripts/mavlink_connection.py -c serial --serial-device /dev/ttyUSB0
"""

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class ConnectionType(Enum):
    """MAVSDK connection types."""
    UDP = "udp"
    TCP = "tcp"
    SERIAL = "serial"


# Default configuration values
DEFAULTS = {
    "connection_type": "udp",
    "udp_host": "",
    "udp_port": 14540,
    "tcp_host": "localhost",
    "tcp_port": 5760,
    "serial_device": "/dev/ttyACM0",
    "serial_baud": 57600,
}

# URL schemes accepted by MAVSDK
VALID_SCHEMES = (
    "udp",
    "udpin",
    "udpout",
    "tcp",
    "tcpin",
    "tcpout",
    "serial",
)

USAGE = (
    "Connection URL format should be:\n"
    " For TCP : tcp://[server_host][:server_port]\n"
    " For UDP : udp://[bind_host][:bind_port]\n"
    " For Serial : serial:///path/to/serial/dev[:baudrate]\n"
    "For example, to connect to the simulator use URL: udp://:14540"
)


def validate_connection_url(url: str) -> str:
    """
    Check that a connection URL uses a scheme MAVSDK understands.

    Args:
        url: Connection URL.

    Returns:
        str: The URL, unchanged.

    Raises:
        ValueError: If the URL is malformed or the scheme is unknown.
    """
    scheme, separator, rest = url.partition("://")
    if not separator or scheme.lower() not in VALID_SCHEMES:
        raise ValueError(f"Invalid connection URL '{url}'.\n{USAGE}")
    if scheme.lower() == "serial" and not rest:
        raise ValueError(f"Serial connection URL '{url}' has no device.\n{USAGE}")
    return url


@dataclass
class ConnectionConfig:
    """
    MAVSDK connection configuration.

    Attributes:
        connection_type: Type of connection.
        url: Full connection URL; when set, the per-type fields are ignored.
        udp_host: Bind address for UDP (empty for all interfaces).
        udp_port: UDP port.
        tcp_host: TCP server host.
        tcp_port: TCP server port.
        serial_device: Serial device path.
        serial_baud: Serial baud rate.
    """
    connection_type: ConnectionType = ConnectionType.UDP
    url: Optional[str] = None
    udp_host: str = DEFAULTS["udp_host"]
    udp_port: int = DEFAULTS["udp_port"]
    tcp_host: str = DEFAULTS["tcp_host"]
    tcp_port: int = DEFAULTS["tcp_port"]
    serial_device: str = DEFAULTS["serial_device"]
    serial_baud: int = DEFAULTS["serial_baud"]

    @classmethod
    def from_env(cls) -> "ConnectionConfig":
        """
        Create configuration from environment variables.

        Returns:
            ConnectionConfig: Configuration populated from environment.

        Raises:
            ValueError: If MAVSDK_CONNECTION_TYPE or MAVSDK_CONNECTION_URL is invalid.
        """
        conn_type_str = os.environ.get(
            "MAVSDK_CONNECTION_TYPE",
            DEFAULTS["connection_type"],
        ).lower()

        try:
            conn_type = ConnectionType(conn_type_str)
        except ValueError:
            raise ValueError(
                f"Unknown connection type '{conn_type_str}'. "
                "Use 'udp', 'tcp' or 'serial'."
            ) from None

        url = os.environ.get("MAVSDK_CONNECTION_URL") or None
        if url is not None:
            validate_connection_url(url)

        return cls(
            connection_type=conn_type,
            url=url,
            udp_host=os.environ.get("MAVSDK_UDP_HOST", DEFAULTS["udp_host"]),
            udp_port=int(os.environ.get("MAVSDK_UDP_PORT", DEFAULTS["udp_port"])),
            tcp_host=os.environ.get("MAVSDK_TCP_HOST", DEFAULTS["tcp_host"]),
            tcp_port=int(os.environ.get("MAVSDK_TCP_PORT", DEFAULTS["tcp_port"])),
            serial_device=os.environ.get(
                "MAVSDK_SERIAL_DEVICE",
                DEFAULTS["serial_device"],
            ),
            serial_baud=int(os.environ.get(
                "MAVSDK_SERIAL_BAUD",
                DEFAULTS["serial_baud"],
            )),
        )

    @classmethod
    def from_args(
        cls,
        connection_url: str = None,
        connection_type: str = None,
        udp_host: str = None,
        udp_port: int = None,
        tcp_host: str = None,
        tcp_port: int = None,
        serial_device: str = None,
        serial_baud: int = None,
    ) -> "ConnectionConfig":
        """
        Create configuration from arguments with environment fallback.

        Args:
            connection_url: Full connection URL.
            connection_type: Connection type string ("udp", "tcp" or "serial").
            udp_host: UDP bind address.
            udp_port: UDP port.
            tcp_host: TCP server host.
            tcp_port: TCP server port.
            serial_device: Serial device path.
            serial_baud: Serial baud rate.

        Returns:
            ConnectionConfig: Configuration with argument overrides.

        Raises:
            ValueError: If the connection type or URL is invalid.
        """
        config = cls.from_env()

        if connection_type is not None:
            try:
                config.connection_type = ConnectionType(connection_type.lower())
            except ValueError:
                raise ValueError(
                    f"Unknown connection type '{connection_type}'. "
                    "Use 'udp', 'tcp' or 'serial'."
                ) from None
            # An explicit type on the command line wins over an env URL
            config.url = None

        if udp_host is not None:
            config.udp_host = udp_host
        if udp_port is not None:
            config.udp_port = udp_port
        if tcp_host is not None:
            config.tcp_host = tcp_host
        if tcp_port is not None:
            config.tcp_port = tcp_port
        if serial_device is not None:
            config.serial_device = serial_device
        if serial_baud is not None:
            config.serial_baud = serial_baud

        if connection_url is not None:
            config.url = validate_connection_url(connection_url)

        return config

    def get_connection_string(self) -> str:
        """
        Generate the MAVSDK connection URL.

        Returns:
            str: MAVSDK-compatible connection URL.
        """
        if self.url:
            return self.url
        if self.connection_type == ConnectionType.SERIAL:
            return f"serial://{self.serial_device}:{self.serial_baud}"
        elif self.connection_type == ConnectionType.TCP:
            return f"tcp://{self.tcp_host}:{self.tcp_port}"
        else:
            return f"udp://{self.udp_host}:{self.udp_port}"

    def __str__(self) -> str:
        """String representation showing current settings."""
        if self.url:
            return f"URL: {self.url}"
        if self.connection_type == ConnectionType.SERIAL:
            return f"SERIAL: {self.serial_device} @ {self.serial_baud} baud"
        elif self.connection_type == ConnectionType.TCP:
            return f"TCP: {self.tcp_host}:{self.tcp_port}"
        else:
            return f"UDP: {self.udp_host or '*'}:{self.udp_port}"


def add_connection_arguments(parser: argparse.ArgumentParser) -> None:
    """
    Add standard connection arguments to an argparse parser.

    Args:
        parser: Parser to add arguments to.
    """
    conn_group = parser.add_argument_group("Connection Options", USAGE)

    conn_group.add_argument(
        "connection_url",
        nargs="?",
        default=None,
        help="Connection URL, e.g. udp://:14540. "
             "Default: MAVSDK_CONNECTION_URL env or built from the options below"
    )

    conn_group.add_argument(
        "--connection-type", "-c",
        choices=[t.value for t in ConnectionType],
        default=None,
        help="Connection type. "
             f"Default: MAVSDK_CONNECTION_TYPE env or '{DEFAULTS['connection_type']}'"
    )

    conn_group.add_argument(
        "--udp-host",
        default=None,
        help="Bind address for UDP mode. "
             "Default: MAVSDK_UDP_HOST env or all interfaces"
    )

    conn_group.add_argument(
        "--udp-port",
        type=int,
        default=None,
        help=f"UDP port. Default: MAVSDK_UDP_PORT env or {DEFAULTS['udp_port']}"
    )

    conn_group.add_argument(
        "--tcp-host",
        default=None,
        help=f"TCP server host. Default: MAVSDK_TCP_HOST env or '{DEFAULTS['tcp_host']}'"
    )

    conn_group.add_argument(
        "--tcp-port",
        type=int,
        default=None,
        help=f"TCP server port. Default: MAVSDK_TCP_PORT env or {DEFAULTS['tcp_port']}"
    )

    conn_group.add_argument(
        "--serial-device",
        default=None,
        help="Serial device path. "
             f"Default: MAVSDK_SERIAL_DEVICE env or '{DEFAULTS['serial_device']}'"
    )

    conn_group.add_argument(
        "--serial-baud",
        type=int,
        default=None,
        help=f"Serial baud rate. Default: MAVSDK_SERIAL_BAUD env or {DEFAULTS['serial_baud']}"
    )


def config_from_args(args: argparse.Namespace) -> ConnectionConfig:
    """
    Build a ConnectionConfig from parsed command line arguments.

    Args:
        args: Namespace produced by a parser set up with add_connection_arguments.

    Returns:
        ConnectionConfig: Resulting configuration.
    """
    return ConnectionConfig.from_args(
        connection_url=args.connection_url,
        connection_type=args.connection_type,
        udp_host=args.udp_host,
        udp_port=args.udp_port,
        tcp_host=args.tcp_host,
        tcp_port=args.tcp_port,
        serial_device=args.serial_device,
        serial_baud=args.serial_baud,
    )


def log_connection_info(config: ConnectionConfig) -> None:
    """
    Log connection information.

    Args:
        config: ConnectionConfig to display.
    """
    logger.info("=" * 50)
    logger.info("MAVSDK Connection Configuration")
    logger.info("=" * 50)
    logger.info(f"  {config}")
    logger.info(f"  Connection URL: {config.get_connection_string()}")
    logger.info("=" * 50)


def main():
    """CLI for checking the resolved connection configuration."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    parser = argparse.ArgumentParser(
        description="MAVSDK connection helper - show the resolved connection URL"
    )
    add_connection_arguments(parser)
    args = parser.parse_args()

    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    log_connection_info(config)
    sys.exit(0)


if __name__ == "__main__":
    main()
