"""Progress refresh signal.

A generation counter bumped after every successful completion write.
Displayed aggregates subscribe and re-fetch when the generation changes.
The signal is advisory: subscribers see the new generation eventually,
with no ordering guarantee relative to other readers.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[[int], None]


class ProgressRefresh:
    """Generation counter with change listeners."""

    def __init__(self) -> None:
        self._generation = 0
        self._listeners: list[Listener] = []

    @property
    def generation(self) -> int:
        return self._generation

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def bump(self) -> int:
        """Advance the generation and notify listeners."""
        self._generation += 1
        logger.debug("Progress refresh generation -> %d", self._generation)
        for listener in list(self._listeners):
            try:
                listener(self._generation)
            except Exception:
                # One broken view must not block the others
                logger.exception("Progress refresh listener failed")
        return self._generation


class ProgressWatcher(Generic[T]):
    """Keeps the latest result of a fetch, re-running it on every refresh.

    Usage:
        watcher = ProgressWatcher(refresh, lambda: course_progress(acc, course))
        await watcher.start()
        ...
        watcher.close()

    Fetches still in flight when the watcher is closed finish normally; their
    results are discarded. A fetch started for an older generation never
    replaces the result of a newer one.
    """

    def __init__(self, refresh: ProgressRefresh, fetch: Callable[[], Awaitable[T]]):
        self._refresh = refresh
        self._fetch = fetch
        self._unsubscribe: Callable[[], None] | None = None
        self._tasks: set[asyncio.Task] = set()
        self.closed = False
        self.latest: T | None = None
        self.error: Exception | None = None
        self.generation = -1  # generation of the accepted result

    async def start(self) -> T | None:
        self._unsubscribe = self._refresh.subscribe(self._on_refresh)
        await self._load(self._refresh.generation)
        return self.latest

    def _on_refresh(self, generation: int) -> None:
        if self.closed:
            return
        task = asyncio.get_running_loop().create_task(
            self._load(generation), name=f"progress-refresh-{generation}"
        )
        # asyncio only keeps weak references to tasks
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _load(self, generation: int) -> None:
        try:
            result = await self._fetch()
        except Exception as e:
            if self._accepts(generation):
                self.error = e
            logger.warning("Progress fetch failed: %s", e)
            return
        if not self._accepts(generation):
            logger.debug("Discarding stale progress fetch (generation %d)", generation)
            return
        self.generation = generation
        self.latest = result
        self.error = None

    def _accepts(self, generation: int) -> bool:
        return not self.closed and generation >= self.generation

    def close(self) -> None:
        self.closed = True
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None
