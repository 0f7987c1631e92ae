"""
Time sources for the polling loop.

The scheduler never calls ``datetime.now`` or ``asyncio.sleep`` directly; it
goes through a clock so that tests can drive it with virtual time.
"""
import asyncio
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Protocol


class Clock(Protocol):
    """Protocol for the scheduler's notion of time."""

    def now(self) -> datetime:
        """Return the current instant as an aware UTC datetime."""
        ...

    async def sleep(self, seconds: float) -> None:
        """Block the calling task for ``seconds``."""
        ...


class SystemClock:
    """Wall-clock time backed by asyncio."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class ManualClock:
    """
    Virtual clock that advances only when something sleeps on it.

    Every sleep is recorded in ``sleeps`` so callers can assert on how long
    the scheduler waited and in which order, without waiting in real time.
    """

    def __init__(self, start: Optional[datetime] = None):
        self.current = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.sleeps: List[float] = []

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.advance(seconds)
        # Still yield so other tasks on the loop get a turn
        await asyncio.sleep(0)
