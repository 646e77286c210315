"""Debounced preview requests with stale-result suppression."""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from filter_builder.debounce import Scheduler, ThreadingScheduler, debounce
from filter_builder.filters.models import FilterConfig
from filter_builder.filters.params import FILTER_HASH_PARAM, convert_filters_to_query_params

if TYPE_CHECKING:
    from filter_builder.config import Config

logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_DEBOUNCE_MS = 300


def _is_async_callable(func: Callable[..., Any]) -> bool:
    return inspect.iscoroutinefunction(func) or inspect.iscoroutinefunction(
        getattr(func, "__call__", None)
    )


class PreviewCoordinator:
    """Throttle preview fetches while a filter is being edited.

    ``update(config)`` is called after every edit. When the config has no
    complete condition the preview is cleared right away; otherwise one
    ``fetch(params)`` is issued per quiet period of *wait_ms*. ``fetch`` may
    return a result or an awaitable. An ``async def`` fetch needs a scheduler
    that fires on the event loop, such as
    :class:`~filter_builder.debounce.AsyncioScheduler`; pairing it with the
    default thread timers raises :class:`ValueError`.

    A result reaches ``on_result`` only if its ``filterHash`` still matches
    the latest config; results of superseded requests are dropped. A failing
    fetch is logged and reported as ``None``.
    """

    def __init__(
        self,
        fetch: Callable[[dict[str, str]], Any],
        on_result: Callable[[Any], None],
        wait_ms: float = DEFAULT_PREVIEW_DEBOUNCE_MS,
        scheduler: Scheduler | None = None,
    ) -> None:
        if _is_async_callable(fetch) and (
            scheduler is None or isinstance(scheduler, ThreadingScheduler)
        ):
            raise ValueError("An async fetch needs an event-loop scheduler, not thread timers")
        self._fetch = fetch
        self._on_result = on_result
        self._lock = threading.Lock()
        self._latest_hash: str | None = None
        self._tasks: set[asyncio.Future] = set()
        self._debounced = debounce(self._run, wait_ms, scheduler)

    @classmethod
    def from_config(
        cls,
        config: Config,
        fetch: Callable[[dict[str, str]], Any],
        on_result: Callable[[Any], None],
        scheduler: Scheduler | None = None,
    ) -> PreviewCoordinator:
        """Build a coordinator using the ``[preview] debounce_ms`` setting."""
        return cls(fetch, on_result, wait_ms=config.preview_debounce_ms, scheduler=scheduler)

    @property
    def wait_ms(self) -> float:
        return self._debounced.wait_ms

    @property
    def latest_hash(self) -> str | None:
        with self._lock:
            return self._latest_hash

    @property
    def pending(self) -> bool:
        return self._debounced.pending

    def update(self, config: FilterConfig) -> None:
        params = convert_filters_to_query_params(config)
        with self._lock:
            self._latest_hash = params.get(FILTER_HASH_PARAM)
        if not params:
            self._debounced.cancel()
            self._on_result(None)
            return
        self._debounced(params)

    def cancel(self) -> None:
        self._debounced.cancel()

    def flush(self) -> bool:
        return self._debounced.flush()

    def _run(self, params: dict[str, str]) -> None:
        request_hash = params[FILTER_HASH_PARAM]
        try:
            result = self._fetch(params)
        except Exception as e:
            logger.error("Failed to load filter preview: %s", e)
            result = None

        if inspect.isawaitable(result):
            self._schedule(request_hash, result)
            return
        self._deliver(request_hash, result)

    def _schedule(self, request_hash: str, awaitable: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            logger.error(
                "Failed to load filter preview: fetch returned an awaitable off the event loop"
            )
            self._deliver(request_hash, None)
            return
        task = asyncio.ensure_future(awaitable, loop=loop)
        self._tasks.add(task)
        task.add_done_callback(lambda t: self._on_task_done(request_hash, t))

    def _on_task_done(self, request_hash: str, task: asyncio.Future) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Failed to load filter preview: %s", error)
            self._deliver(request_hash, None)
            return
        self._deliver(request_hash, task.result())

    def _deliver(self, request_hash: str, result: Any) -> None:
        with self._lock:
            current = self._latest_hash == request_hash
        if not current:
            logger.debug("Discarding stale preview for filter hash %s", request_hash)
            return
        self._on_result(result)
