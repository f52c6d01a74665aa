"""Rate limiting between successive evaluator calls.

The submission coordinator calls :meth:`Throttle.wait` between answers so
the external scorer never sees a burst from one batch.  Sleep and clock
functions are injectable so tests run without real delays.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]
Clock = Callable[[], float]


class Throttle(ABC):
    """Gate that suspends the caller before the next unit of work."""

    @abstractmethod
    async def wait(self) -> None:
        ...


class NoThrottle(Throttle):
    """Never delays."""

    async def wait(self) -> None:
        return None


class FixedDelayThrottle(Throttle):
    """Sleep the full interval on every call."""

    def __init__(self, interval: float, sleep: Sleep = asyncio.sleep) -> None:
        self.interval = interval
        self._sleep = sleep

    async def wait(self) -> None:
        await self._sleep(self.interval)


class IntervalGateThrottle(Throttle):
    """Sleep only for what remains of the interval since the previous release.

    Construction counts as a release, so build one per batch right before
    the first unit of work.  There is no burst capacity: two releases are
    always at least ``interval`` apart.
    """

    def __init__(
        self,
        interval: float,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = time.monotonic,
    ) -> None:
        self.interval = interval
        self._sleep = sleep
        self._clock = clock
        self._last_release = clock()

    async def wait(self) -> None:
        remaining = self.interval - (self._clock() - self._last_release)
        if remaining > 0:
            await self._sleep(remaining)
        self._last_release = self._clock()


def create_throttle(settings) -> Throttle:
    """Build the throttle selected by ``settings.throttle_mode``."""
    interval = settings.throttle_interval_ms / 1000
    mode = settings.throttle_mode
    if mode == "none" or interval <= 0:
        throttle: Throttle = NoThrottle()
    elif mode == "gate":
        throttle = IntervalGateThrottle(interval)
    else:
        if mode != "fixed":
            logger.warning("Unknown throttle_mode %r, using fixed delay", mode)
        throttle = FixedDelayThrottle(interval)
    logger.info("Throttle: %s (interval=%.3fs)", type(throttle).__name__, interval)
    return throttle
