"""Per-channel debouncing with generation counters."""

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from enum import StrEnum

from jwtkit.core.logging import get_logger

logger = get_logger(__name__)

RunFactory = Callable[[int], Awaitable[None]]


class Channel(StrEnum):
    """Independent input channels of an edit session."""

    TOKEN = "token"
    CLAIMS = "claims"
    KEYS = "keys"
    ALGORITHM = "algorithm"


class ChannelDebouncer:
    """Schedules at most one pending run per channel.

    Each submission bumps the channel's generation. A run that is still
    waiting out its delay is cancelled by a newer submission; a run that has
    already started is left alone and must compare its generation with
    ``is_current`` before applying results.
    """

    def __init__(self, delays: Mapping[Channel, float]) -> None:
        self._delays = dict(delays)
        self._generations = dict.fromkeys(Channel, 0)
        self._waiting: dict[Channel, asyncio.Task[None]] = {}
        self._tasks: set[asyncio.Task[None]] = set()

    def is_current(self, channel: Channel, generation: int) -> bool:
        return self._generations[channel] == generation

    def bump(self, channel: Channel) -> int:
        """Invalidate in-flight results of ``channel`` without scheduling."""
        self._generations[channel] += 1
        return self._generations[channel]

    def submit(self, channel: Channel, run: RunFactory) -> int:
        """Schedule ``run(generation)`` after the channel's delay."""
        generation = self.bump(channel)
        waiting = self._waiting.pop(channel, None)
        if waiting is not None and not waiting.done():
            waiting.cancel()
            logger.debug("debounce_superseded", channel=str(channel))

        task = asyncio.create_task(self._run_later(channel, generation, run))
        self._waiting[channel] = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return generation

    async def _run_later(self, channel: Channel, generation: int, run: RunFactory) -> None:
        await asyncio.sleep(self._delays.get(channel, 0.0))
        if self._waiting.get(channel) is asyncio.current_task():
            del self._waiting[channel]
        await run(generation)

    async def drain(self) -> None:
        """Wait until no scheduled or running work remains."""
        while self._tasks:
            done, _ = await asyncio.wait(set(self._tasks))
            for task in done:
                if not task.cancelled():
                    task.result()

    async def aclose(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._waiting.clear()
