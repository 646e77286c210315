"""Trailing-edge debouncing with pluggable timers.

A :class:`Debouncer` keeps at most one pending timer. Every call cancels the
pending timer and starts a new one; when a timer fires, the wrapped function
runs once with the arguments of the most recent call. There is no leading
edge and no maximum wait.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable
from typing import Any, Protocol


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Runs a callback once after a delay given in seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...


class ThreadingScheduler:
    """Fire callbacks from daemon ``threading.Timer`` threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class AsyncioScheduler:
    """Fire callbacks on an asyncio event loop.

    Args:
        loop: Loop to schedule on. Defaults to the loop running at call time.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class Debouncer:
    """Callable wrapper that coalesces bursts of calls into one.

    Args:
        fn: Function to invoke once the calls go quiet.
        wait_ms: Quiet period in milliseconds.
        scheduler: Timer source (default: :class:`ThreadingScheduler`).
    """

    def __init__(
        self,
        fn: Callable[..., Any],
        wait_ms: float,
        scheduler: Scheduler | None = None,
    ) -> None:
        if wait_ms < 0:
            raise ValueError(f"wait_ms must be >= 0, got {wait_ms}")
        self._fn = fn
        self._wait = wait_ms / 1000.0
        self._scheduler = scheduler or ThreadingScheduler()
        # Timers may fire on another thread.
        self._lock = threading.Lock()
        self._handle: Cancellable | None = None
        self._args: tuple[Any, ...] = ()
        self._kwargs: dict[str, Any] = {}
        # Bumped on every call/cancel so a timer that lost the race is ignored.
        self._generation = 0

    @property
    def wait_ms(self) -> float:
        return self._wait * 1000.0

    @property
    def pending(self) -> bool:
        """True while a call is scheduled but has not run."""
        with self._lock:
            return self._handle is not None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self._handle is not None:
                self._handle.cancel()
            self._args = args
            self._kwargs = kwargs
            self._generation += 1
            generation = self._generation
            self._handle = self._scheduler.call_later(self._wait, lambda: self._fire(generation))

    def _take(self) -> tuple[tuple[Any, ...], dict[str, Any]]:
        args, kwargs = self._args, self._kwargs
        self._handle = None
        self._args = ()
        self._kwargs = {}
        self._generation += 1
        return args, kwargs

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._handle is None:
                return
            args, kwargs = self._take()
        self._fn(*args, **kwargs)

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        with self._lock:
            if self._handle is not None:
                self._handle.cancel()
                self._take()

    def flush(self) -> bool:
        """Run the pending call now.

        Returns:
            True if a pending call was run, False if nothing was pending.
        """
        with self._lock:
            if self._handle is None:
                return False
            self._handle.cancel()
            args, kwargs = self._take()
        self._fn(*args, **kwargs)
        return True


def debounce(
    fn: Callable[..., Any],
    wait_ms: float,
    scheduler: Scheduler | None = None,
) -> Debouncer:
    """Wrap *fn* so it runs only after *wait_ms* without further calls."""
    return Debouncer(fn, wait_ms, scheduler)
