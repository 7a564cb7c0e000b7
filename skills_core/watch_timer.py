"""Client-side lesson watch timer.

The countdown is wall-clock based: it starts the first time a lesson is
opened, and the start timestamp is kept in a persistent mapping (the
browser's localStorage in the web client, any MutableMapping here) so a
reload does not restart it. Once the countdown reaches zero the lesson
stays completable for the rest of the session, even if it is reopened.
"""

import asyncio
import logging
import time
from typing import Callable, MutableMapping

from .config import get_required_watch_seconds

logger = logging.getLogger(__name__)

TICK_SECONDS = 1.0


def format_time(seconds: int) -> str:
    """Format seconds as m:ss."""
    minutes, remaining_seconds = divmod(max(int(seconds), 0), 60)
    return f"{minutes}:{remaining_seconds:02d}"


class WatchTimer:
    """
    Per-lesson countdown of the required watch time.

    Args:
        store: Persistent key/value storage for start timestamps
        required_seconds: Countdown length (defaults to REQUIRED_WATCH_SECONDS)
        clock: Returns the current time in seconds since the epoch
    """

    def __init__(
        self,
        store: MutableMapping[str, str],
        required_seconds: int | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.required_seconds = (
            required_seconds
            if required_seconds is not None
            else get_required_watch_seconds()
        )
        self.clock = clock
        self._elapsed: set[str] = set()

    @staticmethod
    def _key(lesson_id) -> str:
        return f"video_timer_{lesson_id}"

    def start(self, lesson_id) -> float:
        """Start the countdown if it is not running yet; returns the start time."""
        key = self._key(lesson_id)
        saved = self.store.get(key)
        if saved is not None:
            return float(saved)

        started_at = self.clock()
        self.store[key] = str(started_at)
        logger.debug("Watch timer started for lesson %s", lesson_id)
        return started_at

    def remaining(self, lesson_id) -> int:
        """Seconds left before the lesson may be completed."""
        if str(lesson_id) in self._elapsed:
            return 0

        saved = self.store.get(self._key(lesson_id))
        if saved is None:
            return self.required_seconds

        elapsed = int(self.clock() - float(saved))
        remaining = max(self.required_seconds - elapsed, 0)
        if remaining == 0:
            self._elapsed.add(str(lesson_id))
        return remaining

    def can_complete(self, lesson_id) -> bool:
        return self.remaining(lesson_id) == 0

    def reset(self, lesson_id) -> None:
        """Forget the lesson's countdown entirely."""
        self.store.pop(self._key(lesson_id), None)
        self._elapsed.discard(str(lesson_id))

    def run(
        self, lesson_id, on_tick: Callable[[int], None] | None = None
    ) -> Callable[[], None]:
        """
        Start the countdown and tick every second until it reaches zero.

        Must be called from a running event loop.

        Returns:
            A stop function; the caller must invoke it when the lesson view closes.
        """
        self.start(lesson_id)

        async def _countdown() -> None:
            while True:
                remaining = self.remaining(lesson_id)
                if on_tick is not None:
                    on_tick(remaining)
                if remaining == 0:
                    logger.debug("Watch timer elapsed for lesson %s", lesson_id)
                    return
                await asyncio.sleep(TICK_SECONDS)

        task = asyncio.get_running_loop().create_task(
            _countdown(), name=f"watch-timer-{lesson_id}"
        )

        def stop() -> None:
            if not task.done():
                task.cancel()

        return stop
