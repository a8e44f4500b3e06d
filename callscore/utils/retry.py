from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded attempt budget with exponential backoff between attempts."""

    max_attempts: int = 2
    base_delay_seconds: float = 1.5
    backoff_multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay_seconds < 0 or self.backoff_multiplier < 0:
            raise ValueError("delays must be non-negative")

    def delay_for(self, attempt: int) -> float:
        """Wait after failed `attempt` (1-based): base * multiplier^(attempt-1)."""
        return self.base_delay_seconds * (self.backoff_multiplier ** (attempt - 1))


async def retry_async(  # noqa: C901
    fn: Callable[[int], Awaitable[T]],
    policy: RetryPolicy,
    should_retry: Callable[[Exception], bool],
    sleep: Sleep = asyncio.sleep,
    on_retry: Callable[[int, Exception, float], None] | None = None,
) -> T:
    """Retry an async callable with exponential backoff.

    `fn` receives the 1-based attempt number. Failures rejected by
    `should_retry` are raised immediately; the last failure is raised once the
    attempt budget is spent.
    """
    last_exc: Exception | None = None
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await fn(attempt)
        except Exception as exc:
            last_exc = exc
            if not should_retry(exc) or attempt == policy.max_attempts:
                raise
            delay = policy.delay_for(attempt)
            if on_retry is not None:
                on_retry(attempt, exc, delay)
            await sleep(delay)
    if last_exc is None:
        raise RuntimeError("retry_async reached unreachable state with no captured exception")
    raise last_exc
