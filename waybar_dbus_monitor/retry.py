#
# Copyright Contributors to the waybar-dbus-monitor project
#
# SPDX-License-Identifier: LGPL-2.1-or-later

import logging
import time
from typing import Callable, NamedTuple, TypeVar

from waybar_dbus_monitor.errors import MonitorError

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class RetryConfig(NamedTuple):
    max_attempts: int = 5
    initial_delay: float = 0.5
    max_delay: float = 5.0
    backoff_factor: float = 1.5

    def delay_for_attempt(self, attempt: int) -> float:
        """Seconds to wait before the given (0-based) attempt"""
        if attempt == 0:
            return 0.0
        return min(self.initial_delay * self.backoff_factor ** (attempt - 1), self.max_delay)


def retry_operation(
    operation: Callable[[], T],
    operation_name: str,
    config: RetryConfig = RetryConfig(),
) -> T:
    """
    Run operation until it succeeds, backing off between attempts.

    Only MonitorError is retried. Permanent errors are raised right away,
    otherwise the error of the last attempt is raised once all attempts failed.
    """
    last_error = None
    for attempt in range(config.max_attempts):
        delay = config.delay_for_attempt(attempt)
        if delay > 0:
            LOGGER.debug(
                "Retrying %s (attempt %d/%d) after %.2fs delay",
                operation_name,
                attempt + 1,
                config.max_attempts,
                delay,
            )
            time.sleep(delay)

        try:
            result = operation()
        except MonitorError as ex:
            LOGGER.debug(
                "%s failed on attempt %d/%d: %s",
                operation_name,
                attempt + 1,
                config.max_attempts,
                ex,
            )
            if ex.is_permanent():
                LOGGER.debug("Permanent error detected, stopping retries: %s", ex)
                raise
            last_error = ex
            continue

        if attempt > 0:
            LOGGER.debug("%s succeeded on attempt %d", operation_name, attempt + 1)
        return result

    raise last_error
