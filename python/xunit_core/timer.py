"""Invoke a callable with a time limit.

The limit is enforced with ``SIGALRM``, so it is only available on platforms
that provide the signal and only from the main thread. Elsewhere the
callable runs without a limit.
"""

from __future__ import annotations

import signal
import threading
from collections.abc import Callable
from typing import Any, TypeVar

from .exceptions import TimeLimitExceededError
from .logging import log_debug

T = TypeVar("T")


class Invoker:
    """Runs callables, interrupting them once a time limit is exceeded.

    Example:
        >>> Invoker().invoke(slow_function, timeout=1.5)
        Traceback (most recent call last):
        ...
        TimeLimitExceededError: Execution aborted after 1.5 seconds
    """

    @staticmethod
    def can_invoke_with_timeout() -> bool:
        return hasattr(signal, "SIGALRM") and threading.current_thread() is threading.main_thread()

    def invoke(self, function: Callable[[], T], timeout: float = 0.0) -> T:
        """Call ``function``; raise TimeLimitExceededError after ``timeout`` seconds.

        A timeout of 0 means no limit.
        """
        if timeout <= 0 or not self.can_invoke_with_timeout():
            return function()

        def on_alarm(signum: int, frame: Any) -> None:
            raise TimeLimitExceededError(f"Execution aborted after {timeout:g} seconds")

        previous = signal.signal(signal.SIGALRM, on_alarm)
        signal.setitimer(signal.ITIMER_REAL, timeout)
        log_debug("Time limit armed", {"seconds": timeout})
        try:
            return function()
        finally:
            signal.setitimer(signal.ITIMER_REAL, 0)
            signal.signal(signal.SIGALRM, previous)


__all__ = ["Invoker"]
