#
# Copyright Contributors to the waybar-dbus-monitor project
#
# SPDX-License-Identifier: LGPL-2.1-or-later

"""
Error types of the monitor.

Every error carries an ErrorCode modelled on HTTP status codes. The code only
shows up in log messages, standard output carries handler values exclusively.
"""

from enum import IntEnum


class ErrorCode(IntEnum):
    SERVICE_UNAVAILABLE = 503
    BAD_GATEWAY = 502
    NOT_FOUND = 404
    UNPROCESSABLE_ENTITY = 422

    @property
    def tag(self) -> str:
        return f"E{self.value}"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    def __str__(self) -> str:
        return f"{self.tag} ({self.description})"


_DESCRIPTIONS = {
    ErrorCode.SERVICE_UNAVAILABLE: "D-Bus interface not available",
    ErrorCode.BAD_GATEWAY: "D-Bus connection failed",
    ErrorCode.NOT_FOUND: "Interface or member not found",
    ErrorCode.UNPROCESSABLE_ENTITY: "Invalid message format",
}


class MonitorError(Exception):
    code = ErrorCode.BAD_GATEWAY
    permanent = False

    def is_permanent(self) -> bool:
        """Permanent errors are never retried"""
        return self.permanent

    def __str__(self) -> str:
        return f"{self.code.tag}: {super().__str__()}"


class ConfigError(MonitorError):
    code = ErrorCode.NOT_FOUND
    permanent = True


class ConnectError(MonitorError):
    code = ErrorCode.BAD_GATEWAY


class RecvError(MonitorError):
    code = ErrorCode.BAD_GATEWAY


class StatusError(MonitorError):
    code = ErrorCode.SERVICE_UNAVAILABLE


class DecodeError(MonitorError):
    code = ErrorCode.UNPROCESSABLE_ENTITY
    permanent = True


class TypeMismatchError(DecodeError):
    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(f"expected value of type '{expected}', got '{actual}'")
        self.expected = expected
        self.actual = actual
