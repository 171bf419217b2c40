"""Per-request wall-clock deadline."""
import asyncio
import time
from typing import Awaitable, Callable, TypeVar

from .errors import DeadlineExceeded

T = TypeVar("T")


class Deadline:
    """A single time budget shared by all the work done for one request."""

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        self.seconds = seconds
        self._clock = clock
        self.expires_at = clock() + seconds

    def remaining(self) -> float:
        return max(0.0, self.expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0.0

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` within the remaining budget.

        Raises:
            DeadlineExceeded: If the budget runs out first.
        """
        try:
            return await asyncio.wait_for(awaitable, timeout=self.remaining())
        except asyncio.TimeoutError:
            raise DeadlineExceeded(f"deadline of {self.seconds}s exceeded") from None
