#
# Copyright Contributors to the waybar-dbus-monitor project
#
# SPDX-License-Identifier: LGPL-2.1-or-later

import logging
import signal
import sys
from enum import Enum
from typing import List, Optional, TextIO

import gi
from dasbus.connection import MessageBus
from dasbus.typing import Variant

gi.require_version("GLib", "2.0")
from gi.repository import GLib  # noqa: E402

from waybar_dbus_monitor.bus import connect_bus  # noqa: E402
from waybar_dbus_monitor.config import BusTarget, BusType, StatusQuery  # noqa: E402
from waybar_dbus_monitor.decoder import decode  # noqa: E402
from waybar_dbus_monitor.errors import DecodeError, MonitorError  # noqa: E402
from waybar_dbus_monitor.handlers import TypeHandler  # noqa: E402
from waybar_dbus_monitor.retry import RetryConfig  # noqa: E402
from waybar_dbus_monitor.status import resolve as resolve_status  # noqa: E402
from waybar_dbus_monitor.subscriber import Subscription, subscribe  # noqa: E402

LOGGER = logging.getLogger(__name__)

TERMINATION_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class State(Enum):
    STARTING = "starting"
    SEEDING_STATUS = "seeding-status"
    AWAITING_SIGNAL = "awaiting-signal"
    EMITTING = "emitting"
    TERMINATED = "terminated"


class MonitorSession:
    """The bus connection and subscription owned by a running monitor"""

    def __init__(self, bus: MessageBus) -> None:
        self.bus = bus
        self.subscription: Optional[Subscription] = None
        self.signal_source_ids: List[int] = []

    def close(self) -> None:
        for source_id in self.signal_source_ids:
            GLib.source_remove(source_id)
        self.signal_source_ids = []

        if self.subscription is not None:
            self.subscription.close()
        self.bus.disconnect()


class Monitor:
    """
    Monitor loop: seeds the output from an optional status query, then writes
    one formatted line per received signal until terminated.

    Errors never reach the output, it only carries values formatted by the
    type handler.
    """

    def __init__(
        self,
        target: BusTarget,
        handler: TypeHandler,
        status_query: Optional[StatusQuery] = None,
        bus_type: BusType = BusType.AUTO,
        output: Optional[TextIO] = None,
        retry_config: RetryConfig = RetryConfig(),
    ) -> None:
        self.target = target
        self.handler = handler
        self.status_query = status_query
        self.bus_type = bus_type
        self.output = output if output is not None else sys.stdout
        self.retry_config = retry_config

        self.state = State.STARTING
        self.session: Optional[MonitorSession] = None

    def run(self) -> None:
        """
        Run until the process is asked to terminate.

        Raises ConnectError if no bus connection could be established and
        RecvError if the connection is lost while waiting for signals.
        """
        self.state = State.STARTING
        self.session = MonitorSession(connect_bus(self.bus_type, self.retry_config))

        try:
            # signals received during the status read stay queued until the
            # main context is iterated, so they are emitted after the seed
            self.session.subscription = subscribe(self.session.bus, self.target)
            self._install_signal_handlers()

            if self.status_query is not None:
                self.state = State.SEEDING_STATUS
                self._seed_status()

            LOGGER.debug("Listening for D-Bus signals...")
            self.state = State.AWAITING_SIGNAL
            for raw in self.session.subscription:
                self._process(raw)
        finally:
            self.state = State.TERMINATED
            self.session.close()

    def _seed_status(self) -> None:
        try:
            value = resolve_status(self.session.bus, self.status_query, self.handler.type_tag)
        except MonitorError as ex:
            LOGGER.warning(
                "Could not get initial property '%s': %s", self.status_query.property, ex
            )
            return
        self._emit(self.handler.format(value))

    def _process(self, raw: Variant) -> None:
        try:
            value = decode(raw, self.handler.type_tag)
        except DecodeError as ex:
            LOGGER.error("Error processing message: %s", ex)
            return

        self.state = State.EMITTING
        self._emit(self.handler.format(value))
        self.state = State.AWAITING_SIGNAL

    def _emit(self, text: str) -> None:
        print(text, file=self.output, flush=True)

    def _install_signal_handlers(self) -> None:
        for signum in TERMINATION_SIGNALS:
            source_id = GLib.unix_signal_add(
                GLib.PRIORITY_HIGH, signum, self._on_terminate, signum
            )
            self.session.signal_source_ids.append(source_id)

    def _on_terminate(self, signum: int) -> bool:
        LOGGER.info("Received signal %d, shutting down...", signum)
        self.session.subscription.close()
        return GLib.SOURCE_CONTINUE
