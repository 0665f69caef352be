"""
standin Timeout Utilities

Bounded polling used by verification: a condition is checked immediately and
then at a fixed interval until it holds or the deadline passes.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Union

logger = logging.getLogger("standin.verify")

DEFAULT_POLL_INTERVAL = 0.25

_UNITS = {
    'seconds': 1.0,
    's': 1.0,
    'milliseconds': 0.001,
    'ms': 0.001,
    'minutes': 60.0,
}


@dataclass(frozen=True)
class WaitFor:
    """How long verification may wait, in seconds."""

    seconds: float

    @classmethod
    def at_most(cls, time_value: float, unit: str = 'seconds') -> 'WaitFor':
        """
        Create a wait bound from a value and a unit.

        Args:
            time_value: Amount of time
            unit: One of 'seconds', 'milliseconds' or 'minutes' (or 's', 'ms')

        Returns:
            WaitFor instance

        Raises:
            ValueError: If the unit is unknown or the value is negative
        """
        if unit not in _UNITS:
            raise ValueError(f"Unknown time unit '{unit}'. Expected one of: {', '.join(sorted(_UNITS))}")
        if time_value < 0:
            raise ValueError(f"Timeout must not be negative, got {time_value}")
        return cls(time_value * _UNITS[unit])

    @classmethod
    def of(cls, timeout: 'Timeout') -> 'WaitFor':
        """Normalize a WaitFor, a number of seconds, or None (one second) into a WaitFor."""
        if isinstance(timeout, WaitFor):
            return timeout
        if timeout is None:
            return ONE_SECOND
        return cls.at_most(float(timeout))


ONE_SECOND = WaitFor(1.0)

Timeout = Union[WaitFor, float, None]


def is_true_before(
    condition: Callable[[], bool],
    timeout: float,
    poll_interval: float = DEFAULT_POLL_INTERVAL
) -> bool:
    """
    Wait until a condition holds or the timeout elapses.

    The condition is evaluated immediately, then again after each poll interval
    (shortened so the last check lands on the deadline). The caller's thread
    sleeps between checks; no lock is taken, so the condition must read
    thread-safe state.

    Args:
        condition: Zero-argument callable returning truthy when satisfied
        timeout: Maximum time to wait, in seconds
        poll_interval: Time between checks, in seconds

    Returns:
        True as soon as the condition is observed true, False on timeout or if
        the condition or the wait itself fails
    """
    deadline = time.monotonic() + max(timeout, 0.0)

    try:
        while True:
            if condition():
                return True

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False

            time.sleep(min(poll_interval, remaining))
    except Exception as e:
        logger.debug(f"Condition check aborted: {e}")
        return False
