"""Tests for the bounded retrier."""

import asyncio

import pytest

from deploywait.core.retry import BoundedRetrier, RetryPolicy


class FlakyOperation:
    """Fails until its ``succeed_on``-th call, then returns the call number."""

    def __init__(self, succeed_on: int | None = None):
        self.succeed_on = succeed_on
        self.calls = 0

    async def __call__(self) -> int:
        self.calls += 1
        if self.succeed_on is not None and self.calls >= self.succeed_on:
            return self.calls
        raise RuntimeError(f"failure {self.calls}")


class TestRetryPolicy:
    """Tests for RetryPolicy."""

    def test_from_timeout_floors_attempts(self):
        assert RetryPolicy.from_timeout(60, 5).max_attempts == 12
        assert RetryPolicy.from_timeout(900, 15).max_attempts == 60
        assert RetryPolicy.from_timeout(60, 10).max_attempts == 6
        assert RetryPolicy.from_timeout(65, 10).max_attempts == 6

    def test_from_timeout_allows_at_least_one_attempt(self):
        assert RetryPolicy.from_timeout(3, 10).max_attempts == 1

    def test_from_timeout_rejects_zero_delay(self):
        with pytest.raises(ValueError):
            RetryPolicy.from_timeout(60, 0)

    def test_rejects_negative_delay(self):
        with pytest.raises(ValueError, match="delay"):
            RetryPolicy(delay=-1, max_attempts=3)

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError, match="max_attempts"):
            RetryPolicy(delay=1, max_attempts=0)

    def test_max_wait(self):
        assert RetryPolicy(delay=5, max_attempts=12).max_wait == 55


class TestBoundedRetrier:
    """Tests for BoundedRetrier."""

    def test_first_attempt_runs_without_delay(self, sleep):
        operation = FlakyOperation(succeed_on=1)
        retrier = BoundedRetrier(RetryPolicy(delay=5, max_attempts=3), sleep=sleep)

        assert asyncio.run(retrier.run(operation)) == 1
        assert operation.calls == 1
        assert sleep.calls == []

    @pytest.mark.parametrize(
        "delay,max_attempts,succeed_on",
        [(5, 12, 1), (5, 12, 4), (5, 12, 12), (15, 60, 3), (0, 4, 4), (2.5, 2, 2)],
    )
    def test_success_on_attempt_k(self, sleep, delay, max_attempts, succeed_on):
        operation = FlakyOperation(succeed_on=succeed_on)
        retrier = BoundedRetrier(RetryPolicy(delay=delay, max_attempts=max_attempts), sleep=sleep)

        result = asyncio.run(retrier.run(operation))

        assert result == succeed_on
        assert operation.calls == succeed_on
        assert sleep.calls == [delay] * (succeed_on - 1)
        assert retrier.waited == (succeed_on - 1) * delay

    @pytest.mark.parametrize("delay,max_attempts", [(5, 12), (10, 6), (0, 1), (1, 1)])
    def test_exhaustion_raises_last_error(self, sleep, delay, max_attempts):
        operation = FlakyOperation()
        retrier = BoundedRetrier(RetryPolicy(delay=delay, max_attempts=max_attempts), sleep=sleep)

        with pytest.raises(RuntimeError, match=f"failure {max_attempts}$"):
            asyncio.run(retrier.run(operation))

        assert operation.calls == max_attempts
        assert len(sleep.calls) == max_attempts - 1
        assert sleep.total == (max_attempts - 1) * delay

    def test_attempts_are_recorded(self, sleep):
        operation = FlakyOperation(succeed_on=3)
        retrier = BoundedRetrier(RetryPolicy(delay=5, max_attempts=5), sleep=sleep)

        asyncio.run(retrier.run(operation))

        assert [a.index for a in retrier.attempts] == [1, 2, 3]
        assert [a.waited for a in retrier.attempts] == [0, 5, 10]
        assert [a.succeeded for a in retrier.attempts] == [False, False, True]
        assert str(retrier.attempts[0].error) == "failure 1"

    def test_any_exception_is_retried(self, sleep):
        errors = [ConnectionError("refused"), KeyError("state"), ValueError("bad json")]

        async def operation() -> str:
            if errors:
                raise errors.pop(0)
            return "done"

        retrier = BoundedRetrier(RetryPolicy(delay=1, max_attempts=4), sleep=sleep)
        assert asyncio.run(retrier.run(operation)) == "done"
        assert len(sleep.calls) == 3

    def test_on_failure_hook(self, sleep):
        seen = []
        operation = FlakyOperation(succeed_on=3)
        retrier = BoundedRetrier(
            RetryPolicy(delay=1, max_attempts=3),
            sleep=sleep,
            on_failure=lambda attempt: seen.append(attempt.index),
        )

        asyncio.run(retrier.run(operation))

        assert seen == [1, 2]

    def test_delay_is_constant(self, sleep):
        operation = FlakyOperation()
        retrier = BoundedRetrier(RetryPolicy(delay=7, max_attempts=6), sleep=sleep)

        with pytest.raises(RuntimeError):
            asyncio.run(retrier.run(operation))

        assert set(sleep.calls) == {7}

    def test_rerun_resets_state(self, sleep):
        retrier = BoundedRetrier(RetryPolicy(delay=1, max_attempts=3), sleep=sleep)

        asyncio.run(retrier.run(FlakyOperation(succeed_on=3)))
        asyncio.run(retrier.run(FlakyOperation(succeed_on=1)))

        assert len(retrier.attempts) == 1
        assert retrier.waited == 0
