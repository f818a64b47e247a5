#
# Copyright Contributors to the waybar-dbus-monitor project
#
# SPDX-License-Identifier: LGPL-2.1-or-later

"""
Conversion of raw D-Bus values into normalized values.

A raw value is either the parameters tuple of a signal, e.g. "(b)", or the
value returned by org.freedesktop.DBus.Properties.Get. Variants wrapped in
the "v" type are unwrapped before the type check.
"""

from enum import Enum
from typing import Any, Callable, Dict, NamedTuple

from dasbus.typing import Variant

from waybar_dbus_monitor.errors import TypeMismatchError

DBUS_REPRESENTATION_STRUCT_OPEN = "("
DBUS_REPRESENTATION_VARIANT = "v"


class TypeTag(Enum):
    BOOLEAN = "b"

    @property
    def signature(self) -> str:
        return self.value


class NormalizedValue(NamedTuple):
    type_tag: TypeTag
    value: Any


def boolean(value: bool) -> NormalizedValue:
    return NormalizedValue(TypeTag.BOOLEAN, bool(value))


def _first_argument(raw: Variant, expected_type: TypeTag) -> Variant:
    if raw.get_type_string().startswith(DBUS_REPRESENTATION_STRUCT_OPEN):
        if raw.n_children() != 1:
            raise TypeMismatchError(expected_type.signature, raw.get_type_string())
        raw = raw.get_child_value(0)

    while raw.get_type_string() == DBUS_REPRESENTATION_VARIANT:
        raw = raw.get_variant()

    return raw


def _decode_boolean(value: Variant) -> NormalizedValue:
    if value.get_type_string() != TypeTag.BOOLEAN.signature:
        raise TypeMismatchError(TypeTag.BOOLEAN.signature, value.get_type_string())
    return boolean(value.get_boolean())


_DECODERS: Dict[TypeTag, Callable[[Variant], NormalizedValue]] = {
    TypeTag.BOOLEAN: _decode_boolean,
}


def decode(raw: Any, expected_type: TypeTag) -> NormalizedValue:
    """Decode the first argument of a raw D-Bus value.

    Parameters:
    raw: signal parameters or property value, usually a GLib variant
    expected_type: the value type the active type handler accepts

    Returns:
    NormalizedValue: the decoded value tagged with expected_type

    Raises TypeMismatchError if the raw value is not of the expected type.
    """
    if not isinstance(raw, Variant):
        # dasbus hands out native values where it already unpacked the reply
        if expected_type is TypeTag.BOOLEAN and isinstance(raw, bool):
            return boolean(raw)
        raise TypeMismatchError(expected_type.signature, type(raw).__name__)

    return _DECODERS[expected_type](_first_argument(raw, expected_type))
