"""Time-bounded retry policy for status polling.

Unlike attempt-counting strategies, ``DeadlineRetry`` bounds retries by wall
clock: a loop keeps going while less than ``max_duration`` seconds have passed
since the first attempt, sleeping a constant ``delay`` between attempts. The
budget is checked only at the top of each iteration, so the last sleep may end
past the deadline.

Example:
    >>> policy = DeadlineRetry(max_duration=60.0, delay=5.0)
    >>> window = policy.start()
    >>> while not window.expired():
    ...     response = fetch()
    ...     if response.status_code != 500:
    ...         break
    ...     window.wait()
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable


@dataclass(frozen=True)
class DeadlineRetry:
    """Constant-delay retry bounded by total elapsed time.

    Attributes:
        max_duration: Wall-clock budget in seconds, measured from ``start()``
        delay: Sleep between attempts in seconds
        clock: Monotonic time source
        sleep: Blocking sleep function
    """

    max_duration: float = 60.0
    delay: float = 5.0
    clock: Callable[[], float] = field(default=time.monotonic, compare=False, repr=False)
    sleep: Callable[[float], None] = field(default=time.sleep, compare=False, repr=False)

    def start(self) -> RetryWindow:
        """Open a retry window; the budget starts now."""
        return RetryWindow(self, self.clock())


@dataclass
class RetryWindow:
    """Retry state for one polling call."""

    policy: DeadlineRetry
    started_at: float
    attempts: int = 0
    retries: int = 0

    @property
    def elapsed_seconds(self) -> float:
        return self.policy.clock() - self.started_at

    def expired(self) -> bool:
        """True once the budget is used up."""
        return self.elapsed_seconds >= self.policy.max_duration

    def begin_attempt(self) -> int:
        self.attempts += 1
        return self.attempts

    def wait(self) -> None:
        """Sleep the retry delay. Exceptions from the sleep propagate."""
        self.retries += 1
        self.policy.sleep(self.policy.delay)


__all__ = [
    "DeadlineRetry",
    "RetryWindow",
]
