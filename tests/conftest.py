# SPDX-License-Identifier: LGPL-2.1-or-later

from collections import deque
from unittest import mock

import pytest


class FakeConnection:
    """Stands in for a Gio.DBusConnection, signals are delivered by emit_signal()"""

    def __init__(self, closed=False) -> None:
        self.subscriptions = {}
        self.closed_handlers = {}
        self.exit_on_close = True
        self._closed = closed
        self._next_id = 1

    def _new_id(self) -> int:
        new_id = self._next_id
        self._next_id += 1
        return new_id

    def is_closed(self) -> bool:
        return self._closed

    def set_exit_on_close(self, exit_on_close: bool) -> None:
        self.exit_on_close = exit_on_close

    def signal_subscribe(self, sender, interface, member, path, arg0, flags, callback, user_data):
        subscription_id = self._new_id()
        self.subscriptions[subscription_id] = dict(
            sender=sender,
            interface=interface,
            member=member,
            path=path,
            callback=callback,
            user_data=user_data,
        )
        return subscription_id

    def signal_unsubscribe(self, subscription_id: int) -> None:
        del self.subscriptions[subscription_id]

    def connect(self, signal_name: str, callback) -> int:
        assert signal_name == "closed"
        handler_id = self._new_id()
        self.closed_handlers[handler_id] = callback
        return handler_id

    def disconnect(self, handler_id: int) -> None:
        del self.closed_handlers[handler_id]

    def emit_signal(self, parameters, interface: str, member: str, path: str = "/") -> None:
        for sub in list(self.subscriptions.values()):
            if sub["interface"] != interface or sub["member"] != member:
                continue
            if sub["path"] is not None and sub["path"] != path:
                continue
            sub["callback"](self, ":1.42", path, interface, member, parameters, sub["user_data"])

    def close(self, error=None) -> None:
        self._closed = True
        for callback in list(self.closed_handlers.values()):
            callback(self, True, error)


class FakeMainContext:
    """Runs one scripted event per main context iteration"""

    def __init__(self, events=()) -> None:
        self.events = deque(events)
        self.iterations = 0

    def iteration(self, may_block: bool) -> bool:
        self.iterations += 1
        if not self.events:
            raise AssertionError("main context would block forever")
        self.events.popleft()()
        return True


@pytest.fixture
def connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def bus(connection: FakeConnection) -> mock.MagicMock:
    fake_bus = mock.MagicMock()
    fake_bus.connection = connection
    return fake_bus


# Set minimum timeout for all tests to 10 seconds.
# If some test needs bigger timeout, please override it for the specific test
# using @pytest.mark.timeout annotation
def pytest_collection_modifyitems(items):
    for item in items:
        if item.get_closest_marker('timeout') is None:
            item.add_marker(pytest.mark.timeout(10))
