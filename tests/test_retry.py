"""Tests for the async retry helper."""

from __future__ import annotations

import pytest

from smartdine.utils.retry import retry_async


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch):
    async def _noop_sleep(delay):
        return None

    monkeypatch.setattr("smartdine.utils.retry.asyncio.sleep", _noop_sleep)


@pytest.mark.asyncio
async def test_retries_until_success():
    attempts = []

    async def operation():
        attempts.append(1)
        if len(attempts) < 3:
            raise ConnectionError("flaky")
        return "ok"

    assert await retry_async(operation, max_attempts=3) == "ok"
    assert len(attempts) == 3


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts():
    attempts = []

    async def operation():
        attempts.append(1)
        raise ConnectionError("down")

    with pytest.raises(ConnectionError):
        await retry_async(operation, max_attempts=2)
    assert len(attempts) == 2


@pytest.mark.asyncio
async def test_non_matching_errors_are_not_retried():
    attempts = []

    async def operation():
        attempts.append(1)
        raise ValueError("bad request")

    with pytest.raises(ValueError):
        await retry_async(operation, max_attempts=5, retry_on=(ConnectionError,))
    assert len(attempts) == 1
