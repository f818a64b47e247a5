#
# Copyright Contributors to the waybar-dbus-monitor project
#
# SPDX-License-Identifier: LGPL-2.1-or-later

import sys

from waybar_dbus_monitor.cli import main

sys.exit(main())
