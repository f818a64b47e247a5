#
# Copyright Contributors to the waybar-dbus-monitor project
#
# SPDX-License-Identifier: LGPL-2.1-or-later

import logging
import os
import re
from enum import Enum
from typing import NamedTuple, Optional

from waybar_dbus_monitor.errors import ConfigError

DEFAULT_OBJECT_PATH = "/"

LOG_LEVEL_ENV_VAR = "WAYBAR_DBUS_MONITOR_LOG"
DEFAULT_LOG_LEVEL = "warning"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

MAX_NAME_LENGTH = 255

_NAME_ELEMENT = r"[A-Za-z_][A-Za-z0-9_]*"
_INTERFACE_NAME = re.compile(rf"^{_NAME_ELEMENT}(\.{_NAME_ELEMENT})+$")
_MEMBER_NAME = re.compile(rf"^{_NAME_ELEMENT}$")
# unique (":1.42") or well-known ("org.example.Service") bus names
_BUS_NAME = re.compile(
    r"^(:[A-Za-z0-9_-]+(\.[A-Za-z0-9_-]+)+"
    r"|[A-Za-z_-][A-Za-z0-9_-]*(\.[A-Za-z_-][A-Za-z0-9_-]*)+)$"
)
_OBJECT_PATH = re.compile(r"^/([A-Za-z0-9_]+(/[A-Za-z0-9_]+)*)?$")


class BusType(Enum):
    AUTO = "auto"
    SESSION = "session"
    SYSTEM = "system"


class BusTarget(NamedTuple):
    interface: str
    member: str
    object_path: Optional[str] = None


class StatusQuery(NamedTuple):
    service: str
    object_path: str
    interface: str
    property: str


def get_env_value(env_var: str, default_value: str) -> str:
    value = os.getenv(env_var)
    if value is None:
        return default_value
    return value


def get_log_level(override: Optional[str] = None) -> int:
    """Resolve the logging level from an explicit override or the environment.

    Unknown level names fall back to the default level.
    """
    name = override or get_env_value(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL)
    return LOG_LEVELS.get(name.strip().lower(), LOG_LEVELS[DEFAULT_LOG_LEVEL])


def is_valid_interface_name(name: str) -> bool:
    return len(name) <= MAX_NAME_LENGTH and _INTERFACE_NAME.match(name) is not None


def is_valid_bus_name(name: str) -> bool:
    return len(name) <= MAX_NAME_LENGTH and _BUS_NAME.match(name) is not None


def is_valid_member_name(name: str) -> bool:
    return len(name) <= MAX_NAME_LENGTH and _MEMBER_NAME.match(name) is not None


def is_valid_object_path(path: str) -> bool:
    return _OBJECT_PATH.match(path) is not None


def make_bus_target(
    interface: str, member: str, object_path: Optional[str] = None
) -> BusTarget:
    if not interface or not is_valid_interface_name(interface):
        raise ConfigError(f"Invalid interface '{interface}'")
    if not member or not is_valid_member_name(member):
        raise ConfigError(f"Invalid monitor '{member}'")
    if object_path is not None and not is_valid_object_path(object_path):
        raise ConfigError(f"Invalid object path '{object_path}'")
    return BusTarget(interface, member, object_path)


def parse_status(value: str, default_service: str) -> StatusQuery:
    """
    Parse the --status option into a StatusQuery.

    Parameters:
    value: "<service_or_path> <interface> <property>", whitespace separated
    default_service: bus name used when the first token is a bare object path

    The first token is either "service/object/path", a bare "service" (object
    path defaults to "/") or a bare "/object/path".
    """
    tokens = value.split()
    if len(tokens) != 3:
        raise ConfigError(
            f"Invalid status format '{value}': expected "
            "'<service_or_path> <interface> <property>'"
        )

    service_and_path, interface, prop = tokens
    service, sep, path = service_and_path.partition("/")
    object_path = f"/{path}" if sep else DEFAULT_OBJECT_PATH
    if not service:
        service = default_service

    if not is_valid_bus_name(service):
        raise ConfigError(f"Invalid status service '{service}'")
    if not is_valid_object_path(object_path):
        raise ConfigError(f"Invalid status object path '{object_path}'")
    if not is_valid_interface_name(interface):
        raise ConfigError(f"Invalid status interface '{interface}'")
    if not is_valid_member_name(prop):
        raise ConfigError(f"Invalid status property '{prop}'")

    return StatusQuery(service, object_path, interface, prop)
