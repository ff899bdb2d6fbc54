"""Tests for retry_with_backoff."""

from typing import List, Tuple

import pytest

from tests.helpers import RecordingSleep
from utils.retry import RetryPolicy, compute_delays, retry_with_backoff


class Flaky:  # pylint: disable=too-few-public-methods
    """Operation that fails a fixed number of times before succeeding."""

    def __init__(self, failures: int, result: str = "ok") -> None:
        self.failures = failures
        self.result = result
        self.calls = 0
        self.errors: List[Exception] = []

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            error = RuntimeError(f"failure {self.calls}")
            self.errors.append(error)
            raise error
        return self.result


@pytest.mark.asyncio
@pytest.mark.parametrize("max_retries", [0, 1, 3, 5])
async def test_always_failing_operation_is_called_max_retries_plus_one(max_retries: int) -> None:
    """The last error is raised unchanged after n+1 attempts."""
    operation = Flaky(failures=100)
    sleep = RecordingSleep()

    with pytest.raises(RuntimeError) as exc:
        await retry_with_backoff(operation, RetryPolicy(max_retries=max_retries), sleep=sleep)

    assert operation.calls == max_retries + 1
    assert exc.value is operation.errors[-1]


@pytest.mark.asyncio
async def test_zero_retries_propagates_immediately() -> None:
    """max_retries=0 never sleeps."""
    operation = Flaky(failures=1)
    sleep = RecordingSleep()

    with pytest.raises(RuntimeError):
        await retry_with_backoff(operation, RetryPolicy(max_retries=0), sleep=sleep)

    assert operation.calls == 1
    assert not sleep.delays


@pytest.mark.asyncio
async def test_success_after_failures_returns_value() -> None:
    """An operation failing k < n times returns its value after k+1 calls."""
    operation = Flaky(failures=2, result="done")
    sleep = RecordingSleep()

    result = await retry_with_backoff(operation, RetryPolicy(max_retries=3), sleep=sleep)

    assert result == "done"
    assert operation.calls == 3
    assert sleep.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_first_success_consumes_no_retry() -> None:
    """A successful first attempt returns without sleeping."""
    operation = Flaky(failures=0)
    sleep = RecordingSleep()

    assert await retry_with_backoff(operation, sleep=sleep) == "ok"
    assert operation.calls == 1
    assert not sleep.delays


@pytest.mark.asyncio
async def test_delays_grow_exponentially_and_cap() -> None:
    """Total wait equals the capped geometric series."""
    policy = RetryPolicy(max_retries=5, initial_delay=1.0, max_delay=5.0, exponential_base=2.0)
    sleep = RecordingSleep()

    with pytest.raises(RuntimeError):
        await retry_with_backoff(Flaky(failures=100), policy, sleep=sleep)

    assert sleep.delays == [1.0, 2.0, 4.0, 5.0, 5.0]
    assert sleep.delays == compute_delays(policy)
    expected = sum(min(1.0 * 2.0**k, 5.0) for k in range(policy.max_retries))
    assert sum(sleep.delays) == pytest.approx(expected)


@pytest.mark.asyncio
async def test_on_retry_called_once_per_retried_failure() -> None:
    """The observer sees every retried failure but not the final one."""
    calls: List[Tuple[int, str]] = []
    policy = RetryPolicy(
        max_retries=2,
        on_retry=lambda attempt, exc: calls.append((attempt, str(exc))),
    )

    with pytest.raises(RuntimeError):
        await retry_with_backoff(Flaky(failures=100), policy, sleep=RecordingSleep())

    assert calls == [(1, "failure 1"), (2, "failure 2")]


@pytest.mark.asyncio
async def test_failing_observer_does_not_change_outcome() -> None:
    """An observer that raises is ignored."""

    def explode(_attempt: int, _exc: Exception) -> None:
        raise ValueError("observer bug")

    policy = RetryPolicy(max_retries=2, on_retry=explode)
    result = await retry_with_backoff(Flaky(failures=1), policy, sleep=RecordingSleep())
    assert result == "ok"


def test_policy_rejects_invalid_values() -> None:
    """Negative retries and a base <= 1 are rejected."""
    with pytest.raises(ValueError):
        RetryPolicy(max_retries=-1)
    with pytest.raises(ValueError):
        RetryPolicy(exponential_base=1.0)
    with pytest.raises(ValueError):
        RetryPolicy(initial_delay=-0.5)


def test_with_observer_returns_copy() -> None:
    """with_observer leaves the original policy untouched."""
    policy = RetryPolicy(max_retries=4)
    observed = policy.with_observer(lambda *_: None)
    assert policy.on_retry is None
    assert observed.on_retry is not None
    assert observed.max_retries == 4
