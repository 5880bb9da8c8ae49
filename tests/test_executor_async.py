import asyncio

import pytest
from conftest import AsyncRecordingFactory, FakeStatusError

from turnspit import (
    DEFAULT_SCOPE,
    AllCredentialsBlockedError,
    AsyncFailoverExecutor,
    ConfigurationError,
    UpstreamAuthOrQuotaError,
    UpstreamOtherError,
)


def _executor(store):
    factory = AsyncRecordingFactory()
    return AsyncFailoverExecutor(client_factory=factory, store=store), factory


def _scripted(outcomes):
    calls = []

    async def op(client):
        calls.append(client.credential)
        await asyncio.sleep(0)
        outcome = outcomes[client.credential]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    return op, calls


@pytest.mark.asyncio
async def test_async_429_then_success(store, endpoint):
    ex, factory = _executor(store)
    op, calls = _scripted({"k1": FakeStatusError(429), "k2": "ok", "k3": "never"})
    assert await ex.run(endpoint, op, "ocr") == "ok"
    assert calls == ["k1", "k2"]
    assert store.is_blocked("k1", "ocr", ex._now())
    assert all(c.closed for c in factory.clients)


@pytest.mark.asyncio
async def test_async_400_propagates(store, endpoint):
    ex, _ = _executor(store)
    op, calls = _scripted({"k1": FakeStatusError(400), "k2": "never", "k3": "never"})
    with pytest.raises(UpstreamOtherError):
        await ex.run(endpoint, op, "s")
    assert calls == ["k1"]
    assert len(store) == 0


@pytest.mark.asyncio
async def test_async_all_blocked_fast_fail(store, endpoint):
    ex, factory = _executor(store)
    for k in endpoint.credentials:
        store.block(k, "s", ex._now())
    op, calls = _scripted({})
    with pytest.raises(AllCredentialsBlockedError):
        await ex.run(endpoint, op, "s")
    assert calls == []
    assert factory.clients == []


@pytest.mark.asyncio
async def test_async_no_endpoint(store):
    ex, _ = _executor(store)
    op, _ = _scripted({})
    with pytest.raises(ConfigurationError):
        await ex.run(None, op, "s")


@pytest.mark.asyncio
async def test_async_concurrent_runs(store, endpoint):
    ex, _ = _executor(store)

    async def op(client):
        await asyncio.sleep(0)
        raise FakeStatusError(429)

    async def one():
        try:
            await ex.run(endpoint, op, "burst")
        except (UpstreamAuthOrQuotaError, AllCredentialsBlockedError) as e:
            return type(e)

    results = await asyncio.gather(*(one() for _ in range(50)))
    assert len(results) == 50  # noqa: PLR2004
    assert all(r is not None for r in results)
    assert len(store) == len(endpoint.credentials)
    assert await one() is AllCredentialsBlockedError


@pytest.mark.asyncio
async def test_async_scope_defaults_to_global(store, endpoint):
    ex, _ = _executor(store)
    op, calls = _scripted({"k1": FakeStatusError(401), "k2": "ok", "k3": "never"})
    assert await ex.run(endpoint, op) == "ok"
    assert store.is_blocked("k1", DEFAULT_SCOPE, ex._now())
    assert DEFAULT_SCOPE == "global"
