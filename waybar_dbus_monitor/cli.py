#
# Copyright Contributors to the waybar-dbus-monitor project
#
# SPDX-License-Identifier: LGPL-2.1-or-later

import argparse
import logging
import os
import signal
import sys
from typing import List, NamedTuple, Optional

from waybar_dbus_monitor import __version__
from waybar_dbus_monitor.config import (
    LOG_DATE_FORMAT,
    LOG_FORMAT,
    LOG_LEVEL_ENV_VAR,
    LOG_LEVELS,
    BusTarget,
    BusType,
    StatusQuery,
    get_log_level,
    make_bus_target,
    parse_status,
)
from waybar_dbus_monitor.errors import ConfigError, MonitorError
from waybar_dbus_monitor.handlers import HANDLERS, TypeHandler, get_handler_class
from waybar_dbus_monitor.monitor import Monitor

LOGGER = logging.getLogger("waybar_dbus_monitor")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


class MonitorConfig(NamedTuple):
    target: BusTarget
    handler: TypeHandler
    status_query: Optional[StatusQuery]
    bus_type: BusType
    log_level: Optional[str]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="waybar-dbus-monitor",
        description="Monitor a D-Bus signal and print its value for a status bar",
        epilog=f"Logging verbosity is read from ${LOG_LEVEL_ENV_VAR} "
        "unless --log-level is given.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--interface",
        required=True,
        help="D-Bus interface to monitor",
    )
    parser.add_argument(
        "--monitor",
        "--member",
        dest="monitor",
        required=True,
        help="D-Bus member (signal) to monitor",
    )
    parser.add_argument(
        "--path",
        default=None,
        help="Only match signals emitted on this object path (default: any path)",
    )
    parser.add_argument(
        "--status",
        default=None,
        help="Property read once at startup: '<service[/object/path]> <interface> <property>'",
    )
    parser.add_argument(
        "--bus",
        choices=[b.value for b in BusType],
        default=BusType.AUTO.value,
        help="Bus to connect to, 'auto' tries the session bus first (default: auto)",
    )
    parser.add_argument(
        "--log-level",
        choices=list(LOG_LEVELS),
        default=None,
        help=f"Logging level (default: ${LOG_LEVEL_ENV_VAR} or warning)",
    )

    subparsers = parser.add_subparsers(
        dest="type_handler", metavar="TYPE", help="Type handler for the monitored data"
    )
    subparsers.required = True
    for name, handler_class in HANDLERS.items():
        subparser = subparsers.add_parser(
            name, help=handler_class.description, description=handler_class.description
        )
        handler_class.add_arguments(subparser)

    return parser


def parse_config(argv: Optional[List[str]] = None) -> MonitorConfig:
    """Parse and validate the command line, exits with EXIT_USAGE on errors"""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        target = make_bus_target(args.interface, args.monitor, args.path)
        status_query = None
        if args.status is not None:
            status_query = parse_status(args.status, args.interface)
    except ConfigError as ex:
        parser.error(str(ex))

    handler = get_handler_class(args.type_handler).from_arguments(args)
    return MonitorConfig(target, handler, status_query, BusType(args.bus), args.log_level)


def setup_logging(level_name: Optional[str] = None) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logging.basicConfig(level=get_log_level(level_name), handlers=[handler])


def _interrupt(signum, frame):
    raise KeyboardInterrupt()


def _silence_stdout() -> None:
    # the interpreter flushes stdout again on exit
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, sys.stdout.fileno())


def main(argv: Optional[List[str]] = None) -> int:
    config = parse_config(argv)
    setup_logging(config.log_level)

    LOGGER.debug("Interface: %s", config.target.interface)
    LOGGER.debug("Member: %s", config.target.member)
    LOGGER.debug("Type handler: %r", config.handler)

    monitor = Monitor(
        config.target,
        config.handler,
        status_query=config.status_query,
        bus_type=config.bus_type,
    )
    # covers the connection retries, the monitor installs its own GLib
    # handler once connected
    previous_handler = signal.signal(signal.SIGTERM, _interrupt)
    try:
        monitor.run()
    except MonitorError as ex:
        LOGGER.error("%s", ex)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        LOGGER.info("Interrupted, shutting down...")
    except BrokenPipeError:
        LOGGER.info("Output closed by the status bar, shutting down...")
        _silence_stdout()
    finally:
        signal.signal(signal.SIGTERM, previous_handler)

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
