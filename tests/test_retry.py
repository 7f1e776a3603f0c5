import pytest

from clients.llm_client import LLMClientError
from utils.retry import backoff_delay, should_retry, with_retry


class Flaky:
    def __init__(self, errors, result="ok"):
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


@pytest.mark.asyncio
async def test_succeeds_after_transient_failures():
    fn = Flaky([LLMClientError("busy", 429), LLMClientError("down", 503)])

    assert await with_retry(fn, max_attempts=3, base_delay=0) == "ok"
    assert fn.calls == 3


@pytest.mark.asyncio
async def test_last_error_is_reraised():
    fn = Flaky([LLMClientError("down", 500)] * 3)

    with pytest.raises(LLMClientError, match="down"):
        await with_retry(fn, max_attempts=3, base_delay=0)
    assert fn.calls == 3


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 401, 402])
async def test_client_errors_are_not_retried(status):
    fn = Flaky([LLMClientError("nope", status)])

    with pytest.raises(LLMClientError):
        await with_retry(fn, max_attempts=3, base_delay=0)
    assert fn.calls == 1


@pytest.mark.asyncio
async def test_only_listed_exceptions_are_retried():
    fn = Flaky([KeyError("bug")])

    with pytest.raises(KeyError):
        await with_retry(fn, max_attempts=3, base_delay=0, retry_on=(LLMClientError,))
    assert fn.calls == 1


def test_should_retry_network_errors():
    assert should_retry(LLMClientError("offline"))
    assert not should_retry(LLMClientError("bad key", 401))


def test_backoff_is_exponential_with_bounded_jitter():
    for attempt, base in ((1, 1.0), (2, 2.0), (3, 4.0)):
        delay = backoff_delay(attempt, 1.0)
        assert base <= delay <= base * 1.3
