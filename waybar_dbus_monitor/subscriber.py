#
# Copyright Contributors to the waybar-dbus-monitor project
#
# SPDX-License-Identifier: LGPL-2.1-or-later

import logging
from collections import deque
from typing import Deque, Optional

import gi
from dasbus.connection import MessageBus
from dasbus.typing import Variant

gi.require_version("GLib", "2.0")
gi.require_version("Gio", "2.0")
from gi.repository import Gio, GLib  # noqa: E402

from waybar_dbus_monitor.config import BusTarget  # noqa: E402
from waybar_dbus_monitor.errors import RecvError  # noqa: E402

LOGGER = logging.getLogger(__name__)


def build_match_rule(target: BusTarget) -> str:
    rule = f"type='signal',interface='{target.interface}',member='{target.member}'"
    if target.object_path is not None:
        rule += f",path='{target.object_path}'"
    return rule


class Subscription:
    """
    Signals matching a BusTarget, received on a single D-Bus connection.

    Iterating a subscription blocks in the GLib main context until the next
    matching signal arrives and yields its parameters in the order the bus
    delivered them. Iteration stops once the subscription was closed and
    raises RecvError once the connection was lost.
    """

    def __init__(
        self,
        connection: Gio.DBusConnection,
        target: BusTarget,
        context: Optional[GLib.MainContext] = None,
    ) -> None:
        if connection.is_closed():
            raise RecvError("D-Bus connection is already closed")

        self.target = target
        self._connection = connection
        self._context = context or GLib.MainContext.default()
        self._pending: Deque[Variant] = deque()
        self._error: Optional[RecvError] = None
        self._closed = False

        self._subscription_id = connection.signal_subscribe(
            None,
            target.interface,
            target.member,
            target.object_path,
            None,
            Gio.DBusSignalFlags.NONE,
            self._on_signal,
            None,
        )
        self._closed_handler_id = connection.connect("closed", self._on_connection_closed)

    @property
    def closed(self) -> bool:
        return self._closed

    def _on_signal(self, conn, sender, obj, interface, signal, parameters, data):
        LOGGER.debug(
            "Received %s.%s from %s on %s: %s", interface, signal, sender, obj, parameters
        )
        self._pending.append(parameters)

    def _on_connection_closed(self, conn, remote_peer_vanished, error):
        reason = error.message if error is not None else "connection closed"
        self._error = RecvError(f"D-Bus connection lost: {reason}")
        LOGGER.debug("Connection closed, remote peer vanished: %s", remote_peer_vanished)

    def __iter__(self) -> "Subscription":
        return self

    def __next__(self) -> Variant:
        while True:
            if self._closed:
                raise StopIteration
            if self._pending:
                return self._pending.popleft()
            if self._error is not None:
                raise self._error
            self._context.iteration(True)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._pending.clear()
        self._connection.signal_unsubscribe(self._subscription_id)
        self._connection.disconnect(self._closed_handler_id)
        LOGGER.debug("Removed match rule %s", build_match_rule(self.target))


def subscribe(
    bus: MessageBus, target: BusTarget, context: Optional[GLib.MainContext] = None
) -> Subscription:
    LOGGER.debug(
        "Adding match rule for interface: %s, monitor: %s", target.interface, target.member
    )
    subscription = Subscription(bus.connection, target, context)
    LOGGER.debug("Added match rule %s", build_match_rule(target))
    return subscription
