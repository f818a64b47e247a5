#
# Copyright Contributors to the waybar-dbus-monitor project
#
# SPDX-License-Identifier: LGPL-2.1-or-later

import logging
from typing import Type

import gi
from dasbus.connection import MessageBus, SessionMessageBus, SystemMessageBus

gi.require_version("GLib", "2.0")
from gi.repository import GLib  # noqa: E402

from waybar_dbus_monitor.config import BusType  # noqa: E402
from waybar_dbus_monitor.errors import ConnectError  # noqa: E402
from waybar_dbus_monitor.retry import RetryConfig, retry_operation  # noqa: E402

LOGGER = logging.getLogger(__name__)


def _open(bus_class: Type[MessageBus]) -> MessageBus:
    bus = bus_class()
    try:
        connection = bus.connection
    except GLib.Error as ex:
        raise ConnectError(f"D-Bus connection error: {ex.message}") from ex

    # the shared connection exits the process on close by default,
    # a lost connection is reported by the subscription instead
    connection.set_exit_on_close(False)
    return bus


def open_bus(bus_type: BusType) -> MessageBus:
    """Connect to the requested bus, 'auto' falls back from session to system bus"""
    if bus_type is BusType.SESSION:
        bus = _open(SessionMessageBus)
        LOGGER.debug("Connected to session bus")
        return bus
    if bus_type is BusType.SYSTEM:
        bus = _open(SystemMessageBus)
        LOGGER.debug("Connected to system bus")
        return bus

    try:
        bus = _open(SessionMessageBus)
        LOGGER.debug("Connected to session bus")
        return bus
    except ConnectError as session_error:
        LOGGER.debug("Failed to connect to session bus: %s", session_error)
        LOGGER.debug("Trying system bus")
        try:
            bus = _open(SystemMessageBus)
        except ConnectError as system_error:
            LOGGER.error("Failed to connect to both session and system bus")
            LOGGER.error("Session bus error: %s", session_error)
            LOGGER.error("System bus error: %s", system_error)
            raise
        LOGGER.debug("Connected to system bus")
        return bus


def connect_bus(bus_type: BusType, retry_config: RetryConfig = RetryConfig()) -> MessageBus:
    return retry_operation(lambda: open_bus(bus_type), "D-Bus connection", retry_config)
