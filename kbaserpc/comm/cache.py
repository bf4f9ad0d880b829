"""Resolution cache with TTL, stale-while-revalidate and single-flight fetches.

One fetch per key is ever in flight. The caller that misses starts it; every
caller that misses while it runs attaches to the same future and sees the same
outcome. Fetches run in their own task, so a waiter timing out (or a caller
being cancelled) never cancels the fetch itself.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from loguru import logger

from kbaserpc.comm.errors import CacheFetchError, CacheTimeoutError

T = TypeVar("T")
Fetcher = Callable[[], Awaitable[T]]


@dataclass(slots=True)
class CacheSettings:
    """Cache tunables, all in seconds."""

    item_lifetime: float = 1800.0
    monitoring_frequency: float = 60.0
    waiter_timeout: float = 30.0
    # Kept for configuration compatibility; waiters are woken by the fetch future.
    waiter_frequency: float = 0.1

    @classmethod
    def from_config(cls, cache_config: Any) -> "CacheSettings":
        return cls(
            item_lifetime=float(cache_config.item_lifetime),
            monitoring_frequency=float(cache_config.monitoring_frequency),
            waiter_timeout=float(cache_config.waiter_timeout),
            waiter_frequency=float(cache_config.waiter_frequency),
        )


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[T]):
    value: T
    fetched_at: float


def _consume_exception(future: asyncio.Future[Any]) -> None:
    # Background refreshes may fail with nobody awaiting them.
    if not future.cancelled():
        future.exception()


class ResolutionCache(Generic[T]):
    """Key -> value cache shared by every caller that resolves the same keys."""

    def __init__(self, settings: CacheSettings | None = None, *, clock: Callable[[], float] = time.monotonic):
        self.settings = settings or CacheSettings()
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}
        self._fetchers: dict[str, Fetcher[T]] = {}
        self._inflight: dict[str, asyncio.Future[T]] = {}
        self._tasks: set[asyncio.Task[None]] = set()
        self._monitor_task: asyncio.Task[None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    def __len__(self) -> int:
        return len(self._entries)

    def _is_entry_fresh(self, entry: CacheEntry[T]) -> bool:
        return self._clock() - entry.fetched_at < self.settings.item_lifetime

    def is_fresh(self, id: str) -> bool:
        entry = self._entries.get(id)
        return entry is not None and self._is_entry_fresh(entry)

    def is_fetching(self, id: str) -> bool:
        return id in self._inflight

    def get_item(self, id: str) -> T | None:
        """Peek at a cached value (fresh or stale) without fetching."""
        entry = self._entries.get(id)
        return entry.value if entry is not None else None

    def _abandon_loop(self) -> None:
        """Cancel the monitor, fetches and futures that belong to the previously bound loop."""
        old = self._loop
        if old is not None and not old.is_closed():
            pending = [t for t in (self._monitor_task, *self._tasks) if t is not None and not t.done()]
            pending += [f for f in self._inflight.values() if not f.done()]
            for item in pending:
                if old.is_running():
                    old.call_soon_threadsafe(item.cancel)
                else:
                    item.cancel()
        self._inflight.clear()
        self._tasks.clear()
        self._monitor_task = None

    def _bind_loop(self) -> asyncio.AbstractEventLoop:
        loop = asyncio.get_running_loop()
        if self._loop is not loop:
            # Entries survive a loop change; tasks and futures of the old loop do not.
            if self._loop is not None:
                logger.debug("resolution cache rebound to a new event loop")
                self._abandon_loop()
            self._loop = loop
        return loop

    def start(self) -> None:
        """Start the periodic monitor once; later calls are no-ops."""
        loop = self._bind_loop()
        if self._monitor_task is not None and not self._monitor_task.done():
            return
        self._monitor_task = loop.create_task(self._monitor())
        logger.debug(f"resolution cache monitor started (every {self.settings.monitoring_frequency}s)")

    async def close(self) -> None:
        """Stop the monitor and in-flight fetches, then drop every entry."""
        if self._loop is asyncio.get_running_loop():
            pending = [t for t in (self._monitor_task, *self._tasks) if t is not None and not t.done()]
            for task in pending:
                task.cancel()
            for task in pending:
                with contextlib.suppress(asyncio.CancelledError):
                    await task
            for future in self._inflight.values():
                future.cancel()
        else:
            self._abandon_loop()
        self._monitor_task = None
        self._tasks.clear()
        self._inflight.clear()
        self._entries.clear()
        self._fetchers.clear()
        self._loop = None
        logger.debug("resolution cache closed")

    async def _monitor(self) -> None:
        while True:
            await asyncio.sleep(self.settings.monitoring_frequency)
            refreshed = self.sweep()
            if refreshed:
                logger.debug(f"resolution cache monitor refreshing {refreshed}")

    def sweep(self) -> list[str]:
        """Start a background refresh for each stale entry with no fetch in flight."""
        self._bind_loop()
        refreshed: list[str] = []
        for key, entry in list(self._entries.items()):
            if self._is_entry_fresh(entry) or key in self._inflight:
                continue
            fetcher = self._fetchers.get(key)
            if fetcher is None:
                continue
            self._start_fetch(key, fetcher)
            refreshed.append(key)
        return refreshed

    async def get_item_with_wait(self, id: str, fetcher: Fetcher[T]) -> T:
        """
        Return the value for ``id``, fetching it at most once at a time.

        Fresh hit: returned immediately. Stale hit: returned immediately while a
        background refresh runs. Miss: the first caller starts the fetch and
        awaits it; later callers wait up to ``waiter_timeout`` for the same
        fetch and raise CacheTimeoutError when it runs longer.
        """
        self.start()
        self._fetchers[id] = fetcher

        entry = self._entries.get(id)
        if entry is not None:
            if not self._is_entry_fresh(entry) and id not in self._inflight:
                self._start_fetch(id, fetcher)
            return entry.value

        pending = self._inflight.get(id)
        if pending is None:
            return await asyncio.shield(self._start_fetch(id, fetcher))

        timeout = self.settings.waiter_timeout
        try:
            return await asyncio.wait_for(asyncio.shield(pending), timeout=timeout)
        except asyncio.TimeoutError as exc:
            logger.warning(f"resolution cache waiter for '{id}' timed out after {timeout}s")
            raise CacheTimeoutError(id, timeout) from exc

    def _start_fetch(self, id: str, fetcher: Fetcher[T]) -> asyncio.Future[T]:
        loop = self._bind_loop()
        future: asyncio.Future[T] = loop.create_future()
        future.add_done_callback(_consume_exception)
        self._inflight[id] = future
        task = loop.create_task(self._run_fetch(id, fetcher, future))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return future

    async def _run_fetch(self, id: str, fetcher: Fetcher[T], future: asyncio.Future[T]) -> None:
        logger.debug(f"resolution cache fetching '{id}'")
        try:
            value = await fetcher()
        except asyncio.CancelledError:
            self._release(id, future)
            future.cancel()
            raise
        except Exception as exc:
            self._release(id, future)
            if isinstance(exc, CacheFetchError):
                error = exc
            else:
                error = CacheFetchError(id, exc)
                error.__cause__ = exc
            stale = " (keeping stale entry)" if id in self._entries else ""
            logger.warning(f"resolution cache fetch for '{id}' failed{stale}: {exc}")
            if not future.done():
                future.set_exception(error)
            return

        # Swap in a new immutable entry; readers see either the old or the new one.
        self._entries[id] = CacheEntry(value=value, fetched_at=self._clock())
        self._release(id, future)
        if not future.done():
            future.set_result(value)

    def _release(self, id: str, future: asyncio.Future[T]) -> None:
        if self._inflight.get(id) is future:
            del self._inflight[id]
