#
# Copyright Contributors to the waybar-dbus-monitor project
#
# SPDX-License-Identifier: LGPL-2.1-or-later

from argparse import ArgumentParser, Namespace
from typing import Dict, Optional, Type

from waybar_dbus_monitor.decoder import NormalizedValue, TypeTag

DEFAULT_TRUE_TEXT = "true"
DEFAULT_FALSE_TEXT = "false"


class TypeHandler:
    """
    Maps a normalized value to the text shown by the status bar.

    Concrete handlers declare the value type they accept via type_tag and are
    selected by name on the command line.
    """

    name: str = ""
    description: str = ""
    type_tag: Optional[TypeTag] = None

    @classmethod
    def add_arguments(cls, parser: ArgumentParser) -> None:
        pass

    @classmethod
    def from_arguments(cls, args: Namespace) -> "TypeHandler":
        return cls()

    def format(self, value: NormalizedValue) -> str:
        raise NotImplementedError()

    def _check_type(self, value: NormalizedValue) -> None:
        if value.type_tag is not self.type_tag:
            raise TypeError(
                f"{type(self).__name__} cannot format values of type "
                f"'{value.type_tag.name.lower()}'"
            )


class BooleanHandler(TypeHandler):

    name = "boolean"
    description = "Monitor a boolean value"
    type_tag = TypeTag.BOOLEAN

    def __init__(
        self, true_text: str = DEFAULT_TRUE_TEXT, false_text: str = DEFAULT_FALSE_TEXT
    ) -> None:
        self.true_text = true_text
        self.false_text = false_text

    @classmethod
    def add_arguments(cls, parser: ArgumentParser) -> None:
        parser.add_argument(
            "--return-true",
            default=DEFAULT_TRUE_TEXT,
            help=f"String to return when value is true (default: {DEFAULT_TRUE_TEXT})",
        )
        parser.add_argument(
            "--return-false",
            default=DEFAULT_FALSE_TEXT,
            help=f"String to return when value is false (default: {DEFAULT_FALSE_TEXT})",
        )

    @classmethod
    def from_arguments(cls, args: Namespace) -> "BooleanHandler":
        return cls(args.return_true, args.return_false)

    def format(self, value: NormalizedValue) -> str:
        self._check_type(value)
        return self.true_text if value.value else self.false_text

    def __repr__(self) -> str:
        return f"BooleanHandler(true_text={self.true_text!r}, false_text={self.false_text!r})"


HANDLERS: Dict[str, Type[TypeHandler]] = {
    BooleanHandler.name: BooleanHandler,
}


def get_handler_class(name: str) -> Type[TypeHandler]:
    if name not in HANDLERS:
        raise KeyError(f"Unknown type handler '{name}'")
    return HANDLERS[name]
