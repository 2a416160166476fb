import asyncio
import gc

import pytest

from wirebox import Container


class Route: ...


@pytest.mark.asyncio
async def test_singleton_is_cached():
    container = Container()
    container.singleton("route", lambda: Route())

    first = await container.make("route")
    second = await container.make("route")
    third = await container.create_resolver().make("route")

    assert isinstance(first, Route)
    assert first is second is third


@pytest.mark.asyncio
async def test_singleton_class_key():
    container = Container()
    container.singleton(Route, lambda: Route())

    assert await container.make(Route) is await container.make(Route)


@pytest.mark.asyncio
async def test_concurrent_singleton_built_once():
    container = Container()
    calls = 0
    release = asyncio.Event()

    async def factory():
        nonlocal calls
        calls += 1
        await release.wait()
        return Route()

    container.singleton("route", factory)

    tasks = [asyncio.ensure_future(container.make("route")) for _ in range(5)]
    await asyncio.sleep(0)
    release.set()
    routes = await asyncio.gather(*tasks)

    assert calls == 1
    assert all(route is routes[0] for route in routes)


@pytest.mark.asyncio
async def test_concurrent_singleton_failure_is_shared_and_not_cached():
    container = Container()
    calls = 0
    release = asyncio.Event()

    async def factory():
        nonlocal calls
        calls += 1
        await release.wait()
        if calls == 1:
            raise RuntimeError("database unavailable")
        return Route()

    container.singleton("route", factory)

    tasks = [asyncio.ensure_future(container.make("route")) for _ in range(3)]
    await asyncio.sleep(0)
    release.set()
    results = await asyncio.gather(*tasks, return_exceptions=True)

    assert calls == 1
    assert all(isinstance(r, RuntimeError) for r in results)

    route = await container.make("route")
    assert isinstance(route, Route)
    assert calls == 2
    assert await container.make("route") is route


@pytest.mark.asyncio
async def test_singleton_rebind_keeps_cached_value():
    container = Container()
    container.singleton("route", lambda: Route())
    cached = await container.make("route")

    container.singleton("route", lambda: Route())
    assert await container.make("route") is cached


@pytest.mark.asyncio
async def test_singleton_sync_factory_error_propagates():
    container = Container()

    def factory():
        raise ValueError("boom")

    container.singleton("route", factory)

    with pytest.raises(ValueError):
        await container.make("route")
    with pytest.raises(ValueError):
        await container.make("route")


@pytest.mark.asyncio
async def test_failed_build_after_waiters_cancelled_is_retrieved():
    loop = asyncio.get_running_loop()
    reported = []
    loop.set_exception_handler(lambda loop, context: reported.append(context))

    container = Container()
    release = asyncio.Event()

    async def factory():
        await release.wait()
        raise RuntimeError("database unavailable")

    container.singleton("route", factory)

    try:
        waiter = asyncio.ensure_future(container.make("route"))
        await asyncio.sleep(0)
        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

        release.set()
        for _ in range(3):
            await asyncio.sleep(0)
        del waiter
        gc.collect()
    finally:
        loop.set_exception_handler(None)

    assert reported == []
    with pytest.raises(RuntimeError):
        await container.make("route")
