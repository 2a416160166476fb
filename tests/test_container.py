import pytest

from wirebox import Container, ContextBindingsBuilder, Resolver, Symbol
from wirebox.config import ContainerConfig
from wirebox.errors import InvalidBindingKeyError


class Route: ...


class Emitter:
    def __init__(self):
        self.events = []

    def emit(self, event, payload):
        self.events.append((event, payload))


def test_container_repr():
    container = Container()
    container.bind("route", lambda: Route())
    assert "bindings=1" in repr(container)


def test_container_config():
    emitter = Emitter()
    container = Container(emitter=emitter)
    assert container.config == ContainerConfig(emitter=emitter)
    assert container.config.emitter is emitter


def test_config_rejects_emitter_without_emit():
    with pytest.raises(TypeError):
        Container(emitter=object())  # type: ignore


def test_config_is_frozen():
    config = ContainerConfig()
    with pytest.raises(Exception):
        config.emitter = Emitter()  # type: ignore


def test_create_resolver_shares_registry():
    container = Container()
    resolver = container.create_resolver()
    assert isinstance(resolver, Resolver)
    assert resolver is not container.create_resolver()


def test_when_returns_builder():
    container = Container()
    assert isinstance(container.when(Route), ContextBindingsBuilder)


@pytest.mark.parametrize("key", [1, None, [], {}, 1.5])
def test_registration_rejects_invalid_keys(key):
    container = Container()
    for register in (container.bind, container.singleton, container.swap):
        with pytest.raises(InvalidBindingKeyError):
            register(key, lambda: None)

    with pytest.raises(InvalidBindingKeyError):
        container.bind_value(key, 1)

    with pytest.raises(InvalidBindingKeyError):
        container.resolving(key, lambda value, resolver: None)

    with pytest.raises(InvalidBindingKeyError):
        container.restore(key)

    with pytest.raises(InvalidBindingKeyError):
        container.restore_all([key])


def test_invalid_key_message():
    with pytest.raises(InvalidBindingKeyError) as exc_info:
        Container().bind(1, lambda: None)  # type: ignore

    assert "'string', 'symbol', or a 'class constructor'" in exc_info.value.message
    assert exc_info.value.code == "E_INVALID_BINDING_KEY"


def test_has_binding():
    container = Container()
    sym = Symbol("route")
    container.bind("route", lambda: Route())
    container.singleton(sym, lambda: Route())
    container.bind_value(Route, Route())

    assert container.has_binding("route")
    assert container.has_binding(sym)
    assert container.has_binding(Route)
    assert not container.has_binding("nope")
    assert container.has_all_bindings(["route", sym, Route])
    assert not container.has_all_bindings(["route", "nope"])


@pytest.mark.asyncio
async def test_make_and_call_use_fresh_resolvers():
    container = Container()
    seen = []
    container.bind("route", lambda resolver: seen.append(resolver) or Route())

    await container.make("route")
    await container.make("route")

    assert len(seen) == 2
    assert seen[0] is not seen[1]
