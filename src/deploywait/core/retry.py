"""Bounded retry with a constant delay between attempts."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from deploywait.core.logging import StructuredLogger

logger = StructuredLogger("retry")

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]
FailureHook = Callable[["RetryAttempt"], None]


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed delay and attempt bound for a retried operation."""

    delay: float
    max_attempts: int

    def __post_init__(self) -> None:
        if self.delay < 0:
            raise ValueError("delay must be >= 0")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    @classmethod
    def from_timeout(cls, timeout: float, delay: float) -> "RetryPolicy":
        """Build a policy that spends roughly ``timeout`` seconds sleeping.

        ``max_attempts`` is ``floor(timeout / delay)``, never less than one.
        """
        if delay <= 0:
            raise ValueError("delay must be > 0 to derive attempts from a timeout")
        return cls(delay=delay, max_attempts=max(1, int(timeout // delay)))

    @property
    def max_wait(self) -> float:
        """Total sleep time when every attempt fails."""
        return (self.max_attempts - 1) * self.delay


@dataclass
class RetryAttempt:
    """One execution of the guarded operation."""

    index: int
    waited: float = 0.0
    error: BaseException | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class BoundedRetrier:
    """Run an async operation until it succeeds or attempts run out.

    The first attempt runs immediately. Each later attempt is preceded by
    exactly one ``sleep(policy.delay)``. Any exception raised by the
    operation counts as a failed attempt. When the last attempt fails its
    exception is re-raised unchanged and no further sleep happens.

    ``sleep`` is injectable so tests can run without real delays.
    """

    policy: RetryPolicy
    sleep: Sleep = asyncio.sleep
    on_failure: FailureHook | None = None
    attempts: list[RetryAttempt] = field(default_factory=list, init=False)
    waited: float = field(default=0.0, init=False)

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        self.attempts = []
        self.waited = 0.0

        attempt_no = 0
        while True:
            attempt_no += 1
            attempt = RetryAttempt(index=attempt_no, waited=self.waited)
            self.attempts.append(attempt)
            try:
                return await operation()
            except Exception as e:
                attempt.error = e
                logger.debug(
                    "Attempt failed",
                    attempt=attempt_no,
                    max_attempts=self.policy.max_attempts,
                    error=str(e),
                )
                if self.on_failure is not None:
                    self.on_failure(attempt)
                if attempt_no >= self.policy.max_attempts:
                    raise

            await self.sleep(self.policy.delay)
            self.waited += self.policy.delay
