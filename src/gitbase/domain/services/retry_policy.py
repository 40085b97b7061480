"""Retry policy for conflicting collection writes."""

import asyncio
from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with linear backoff.

    Attempt ``n`` (1-based) that fails with a conflict waits
    ``n * base_delay`` seconds before the next attempt.

    Attributes:
        max_attempts: Total number of write attempts, including the first.
        base_delay: Backoff unit in seconds. Zero disables waiting.
    """

    max_attempts: int = 3
    base_delay: float = 0.5

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay cannot be negative")

    def backoff(self, attempt: int) -> float:
        """Return the delay in seconds after the given failed attempt."""
        return attempt * self.base_delay

    def should_retry(self, attempt: int) -> bool:
        """Whether another attempt is allowed after ``attempt`` failures."""
        return attempt < self.max_attempts

    async def wait(self, attempt: int) -> None:
        delay = self.backoff(attempt)
        if delay > 0:
            await asyncio.sleep(delay)
