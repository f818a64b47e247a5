#
# Copyright Contributors to the waybar-dbus-monitor project
#
# SPDX-License-Identifier: LGPL-2.1-or-later

from __future__ import annotations

import logging

import gi
from dasbus.client.proxy import InterfaceProxy, ObjectProxy
from dasbus.connection import MessageBus
from dasbus.error import DBusError
from dasbus.typing import Variant

gi.require_version("GLib", "2.0")
from gi.repository import GLib  # noqa: E402

from waybar_dbus_monitor.config import StatusQuery  # noqa: E402
from waybar_dbus_monitor.decoder import NormalizedValue, TypeTag, decode  # noqa: E402
from waybar_dbus_monitor.errors import StatusError  # noqa: E402

LOGGER = logging.getLogger(__name__)

DBUS_PROPERTIES_INTERFACE = "org.freedesktop.DBus.Properties"


class StatusResolver:
    """Reads the current value of a property to seed the output before any signal"""

    def __init__(self, bus: MessageBus, query: StatusQuery) -> None:
        self.bus = bus
        self.query = query

        self.cached_properties_proxy = None

    def get_properties_proxy(self) -> InterfaceProxy | ObjectProxy:
        if self.cached_properties_proxy is None:
            self.cached_properties_proxy = self.bus.get_proxy(
                self.query.service, self.query.object_path, DBUS_PROPERTIES_INTERFACE
            )

        return self.cached_properties_proxy

    def read(self) -> Variant:
        LOGGER.debug(
            "Reading property %s.%s from %s at %s",
            self.query.interface,
            self.query.property,
            self.query.service,
            self.query.object_path,
        )
        try:
            return self.get_properties_proxy().Get(self.query.interface, self.query.property)
        except DBusError as ex:
            raise StatusError(
                f"Could not get property '{self.query.property}': {ex}"
            ) from ex
        except GLib.Error as ex:
            raise StatusError(
                f"Could not get property '{self.query.property}': {ex.message}"
            ) from ex
        except TimeoutError as ex:
            # dasbus maps call timeouts of Get and of the introspection call
            raise StatusError(
                f"Could not get property '{self.query.property}': {ex}"
            ) from ex
        except AttributeError as ex:
            # raised by the proxy when the object does not implement the interface
            raise StatusError(
                f"Object {self.query.object_path} of {self.query.service} "
                f"does not implement {DBUS_PROPERTIES_INTERFACE}"
            ) from ex

    def resolve(self, expected_type: TypeTag) -> NormalizedValue:
        return decode(self.read(), expected_type)


def resolve(bus: MessageBus, query: StatusQuery, expected_type: TypeTag) -> NormalizedValue:
    return StatusResolver(bus, query).resolve(expected_type)
