from typing import Any, Generic, Iterable, Union

from .config import ContainerConfig
from .errors import MissingContextualTargetError
from .interfaces import IEmitter, IFactory, IHook, RawKey, RuntimeValues
from .keys import Symbol, binding_key
from .registry import BindingRegistry
from .resolver import Resolver
from .utils.param_utils import MISSING, Maybe, is_provided
from .utils.typing_utils import T


class ContextBindingsBuilder(Generic[T]):
    """
    A fluent builder to register contextual bindings.

    ```py
    container.when(UsersController).asks_for(Hash).provide(lambda: Argon2())
    ```
    """

    __slots__ = ("_parent", "_binding", "_container")

    def __init__(self, parent: type, container: "Container"):
        self._parent = parent
        self._binding: Maybe[type[T]] = MISSING
        self._container = container

    def asks_for(self, binding: type[T]) -> "ContextBindingsBuilder[T]":
        self._binding = binding
        return self

    def provide(self, factory: IFactory[T]) -> None:
        if not is_provided(self._binding):
            raise MissingContextualTargetError(self._parent)
        self._container.contextual_binding(self._parent, self._binding, factory)


class Container:
    """
    The long-lived owner of bindings.

    ```py
    container = Container()
    container.singleton(Database, lambda: Database(dsn))
    container.bind("route", lambda resolver: Route())

    route = await container.make("route")
    service = await container.make(UserService)
    ```

    `make` and `call` use a fresh `Resolver` for every invocation,
    use `create_resolver` to scope values to a request.
    """

    def __init__(self, *, emitter: Union[IEmitter, None] = None):
        self._config = ContainerConfig(emitter=emitter)
        self._registry = BindingRegistry()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(registry={self._registry!r})"

    @property
    def config(self) -> ContainerConfig:
        return self._config

    # ================= Registration =================

    def bind(self, key: RawKey, factory: IFactory[Any]) -> None:
        """
        Register a factory, invoked on every `make`.
        Key can be a string, a `Symbol` or a class.
        """
        self._registry.bind(key, factory, singleton=False)

    def singleton(self, key: RawKey, factory: IFactory[Any]) -> None:
        """
        Same as `bind`, but the factory is invoked only once
        and its value is cached for every following `make`.
        """
        self._registry.bind(key, factory, singleton=True)

    def bind_value(self, key: RawKey, value: Any) -> None:
        """
        Register a value, preferred over a factory registered under the same key.
        """
        self._registry.bind_value(key, value)

    def alias(self, alias: Union[str, Symbol], target: RawKey) -> None:
        self._registry.alias(alias, target)

    def contextual_binding(
        self, parent: type, dependency: type, factory: IFactory[Any]
    ) -> None:
        self._registry.contextual_binding(parent, dependency, factory)

    def when(self, parent: type) -> ContextBindingsBuilder[Any]:
        return ContextBindingsBuilder(parent, self)

    def swap(self, key: RawKey, factory: IFactory[Any]) -> None:
        """
        Replace a binding or class with a fake, outranking
        every other container binding until restored.
        """
        self._registry.swap(key, factory)

    def restore(self, key: RawKey) -> None:
        self._registry.restore(key)

    def restore_all(self, keys: Union[Iterable[Any], None] = None) -> None:
        self._registry.restore_all(keys)

    def resolving(self, key: RawKey, callback: IHook[Any]) -> None:
        """
        Register a hook run after every fresh construction of `key`,
        values registered with `bind_value` never run hooks.
        """
        self._registry.hooks.register(binding_key(key), callback)

    # ================= Lookup =================

    def has_binding(self, key: Any) -> bool:
        return self._registry.has_binding(key)

    def has_all_bindings(self, keys: Iterable[Any]) -> bool:
        return self._registry.has_all_bindings(keys)

    # ================= Resolution =================

    def create_resolver(self) -> Resolver:
        return Resolver(self._registry, self._config)

    async def make(
        self, key: Any, runtime_values: Union[RuntimeValues, None] = None
    ) -> Any:
        return await self.create_resolver().make(key, runtime_values)

    async def call(
        self,
        target: Any,
        method: str,
        runtime_values: Union[RuntimeValues, None] = None,
    ) -> Any:
        return await self.create_resolver().call(target, method, runtime_values)
