# SPDX-License-Identifier: LGPL-2.1-or-later

import logging

import pytest

from waybar_dbus_monitor.config import (
    LOG_LEVEL_ENV_VAR,
    BusTarget,
    StatusQuery,
    get_log_level,
    is_valid_bus_name,
    is_valid_object_path,
    make_bus_target,
    parse_status,
)
from waybar_dbus_monitor.errors import ConfigError


@pytest.mark.parametrize(
    "value,expected",
    [
        (
            "org.example.Idle/org/example/Idle org.example.Idle Active",
            StatusQuery("org.example.Idle", "/org/example/Idle", "org.example.Idle", "Active"),
        ),
        (
            "org.example.Idle org.example.Idle Active",
            StatusQuery("org.example.Idle", "/", "org.example.Idle", "Active"),
        ),
        (
            "/org/example/Idle org.example.Idle Active",
            StatusQuery("org.example.Default", "/org/example/Idle", "org.example.Idle", "Active"),
        ),
        (
            "  org.example.Idle\torg.example.Idle   Active  ",
            StatusQuery("org.example.Idle", "/", "org.example.Idle", "Active"),
        ),
    ],
)
def test_parse_status(value: str, expected: StatusQuery):
    assert parse_status(value, "org.example.Default") == expected


@pytest.mark.parametrize(
    "value",
    [
        "",
        "org.example.Idle",
        "org.example.Idle org.example.Idle",
        "org.example.Idle org.example.Idle Active Extra",
        "org.example .Idle/org/example org.example.Idle Active",
        "org.example.Idle/org//example org.example.Idle Active",
        "org.example.Idle noninterface Active",
        "org.example.Idle org.example.Idle Not-A-Property",
    ],
)
def test_parse_status_rejects_malformed_values(value: str):
    with pytest.raises(ConfigError):
        parse_status(value, "org.example.Default")


def test_make_bus_target():
    assert make_bus_target("org.example.Idle", "StatusChanged") == BusTarget(
        "org.example.Idle", "StatusChanged", None
    )
    assert make_bus_target("org.example.Idle", "StatusChanged", "/org/example").object_path == (
        "/org/example"
    )


@pytest.mark.parametrize(
    "interface,member,path",
    [
        ("", "StatusChanged", None),
        ("Idle", "StatusChanged", None),
        ("org.example.1Idle", "StatusChanged", None),
        ("org.example.Idle", "", None),
        ("org.example.Idle", "Status.Changed", None),
        ("org.example.Idle", "StatusChanged", "org/example"),
        ("org.example.Idle", "StatusChanged", "/org/example/"),
        ("org.example.Idle", "StatusChanged", ""),
    ],
)
def test_make_bus_target_rejects_invalid_names(interface: str, member: str, path: str):
    with pytest.raises(ConfigError):
        make_bus_target(interface, member, path)


def test_config_errors_are_permanent():
    with pytest.raises(ConfigError) as excinfo:
        parse_status("just-one-token", "org.example.Default")
    assert excinfo.value.is_permanent()
    assert str(excinfo.value).startswith("E404: ")


def test_object_paths():
    assert is_valid_object_path("/")
    assert is_valid_object_path("/org/freedesktop/UPower/devices/DisplayDevice")
    assert not is_valid_object_path("/org/free-desktop")


def test_bus_names():
    assert is_valid_bus_name("org.freedesktop.UPower")
    assert is_valid_bus_name("org.example-app.Service")
    assert is_valid_bus_name(":1.42")
    assert not is_valid_bus_name("UPower")
    assert not is_valid_bus_name(":1")


def test_log_level_from_environment(monkeypatch):
    monkeypatch.delenv(LOG_LEVEL_ENV_VAR, raising=False)
    assert get_log_level() == logging.WARNING

    monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "DEBUG")
    assert get_log_level() == logging.DEBUG

    monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "chatty")
    assert get_log_level() == logging.WARNING


def test_log_level_override_wins(monkeypatch):
    monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "debug")
    assert get_log_level("error") == logging.ERROR
