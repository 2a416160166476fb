import pytest

from wirebox import CONSTRUCTOR_KEY, Container


class Hash:
    def __init__(self, source: str = "constructed"):
        self.source = source


class UsersController:
    container_injections = {CONSTRUCTOR_KEY: [Hash]}

    def __init__(self, hash: Hash):
        self.hash = hash


async def source_of(container, resolver=None):
    resolver = resolver or container.create_resolver()
    return (await resolver.make(UsersController)).hash.source


@pytest.mark.asyncio
async def test_lookup_precedence():
    container = Container()
    assert await source_of(container) == "constructed"

    container.bind(Hash, lambda: Hash("factory"))
    assert await source_of(container) == "factory"

    container.bind_value(Hash, Hash("value"))
    assert await source_of(container) == "value"

    container.contextual_binding(UsersController, Hash, lambda: Hash("contextual"))
    assert await source_of(container) == "contextual"

    container.swap(Hash, lambda: Hash("swap"))
    assert await source_of(container) == "swap"

    resolver = container.create_resolver()
    resolver.bind_value(Hash, Hash("resolver"))
    assert await source_of(container, resolver) == "resolver"

    container.restore(Hash)
    assert await source_of(container) == "contextual"


@pytest.mark.asyncio
async def test_top_level_make_ignores_contextual_bindings():
    container = Container()
    container.bind(Hash, lambda: Hash("factory"))
    container.contextual_binding(UsersController, Hash, lambda: Hash("contextual"))

    assert (await container.make(Hash)).source == "factory"
