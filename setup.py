#
# Copyright Contributors to the waybar-dbus-monitor project
#
# SPDX-License-Identifier: LGPL-2.1-or-later
from setuptools import setup, find_packages


def readme():
    with open("README.md") as desc:
        return desc.read()


setup(
    name="waybar-dbus-monitor",
    version="0.2.0",
    description="Monitor a D-Bus signal and print its value for status bars such as waybar",
    long_description=readme(),
    long_description_content_type="text/markdown",
    author="waybar-dbus-monitor developers",
    license="LGPL-2.1-or-later",
    install_requires=[
        "dasbus",
        "PyGObject",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-timeout",
        ],
    },
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    package_data={"waybar_dbus_monitor": ["py.typed"]},
    entry_points={
        "console_scripts": [
            "waybar-dbus-monitor=waybar_dbus_monitor.cli:main",
        ],
    },
    zip_safe=True,
    keywords=['waybar', 'python', 'D-Bus', 'status bar'],
    classifiers=[
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
    ],
    python_requires='>=3.9',
)
