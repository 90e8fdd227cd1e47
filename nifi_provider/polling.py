"""Bounded polling for asynchronous NiFi operations.

Drop requests and port state changes complete on the server some time after
the request that triggered them. Both are confirmed by re-reading the remote
state a fixed number of times with a fixed pause in between.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from nifi_provider.errors import ConvergenceTimeout, NiFiError

logger = logging.getLogger(__name__)


def poll(
    check: Callable[[], bool],
    *,
    attempts: int,
    interval: float,
    description: str,
    fatal: bool = False,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Call ``check`` until it returns True or the attempt budget runs out.

    A ``NiFiError`` raised by ``check`` counts as a failed attempt. There is
    no pause after the final attempt.

    Args:
        check: Zero-argument predicate that re-reads remote state.
        attempts: Maximum number of calls to ``check``.
        interval: Seconds to sleep between attempts.
        description: Human-readable label used in log messages.
        fatal: Raise ``ConvergenceTimeout`` on exhaustion instead of returning False.
        sleep: Sleep function, injectable for tests.

    Returns:
        True if the condition held within the budget, False otherwise.
    """
    for attempt in range(1, attempts + 1):
        try:
            if check():
                logger.debug("%s confirmed (attempt %d)", description, attempt)
                return True
        except NiFiError as exc:
            logger.debug("%s check failed (attempt %d): %s", description, attempt, exc)

        logger.debug("Waiting for %s (%d/%d)...", description, attempt, attempts)
        if attempt < attempts:
            sleep(interval)

    if fatal:
        raise ConvergenceTimeout(f"{description} not confirmed after {attempts} attempts")
    logger.warning("Failed to confirm %s after %d attempts", description, attempts)
    return False
