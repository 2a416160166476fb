import logging
from asyncio import Future
from typing import Any, Collection, Iterable, Union

from ._type_resolve import factory_arity
from .errors import InvalidAliasKeyError, InvalidDependencyError
from .interfaces import IFactory, IHook
from .keys import BindingKey, alias_key, binding_key, classify

logger = logging.getLogger(__name__)


class Binding:
    """
    A registered factory plus its singleton flag.
    `arity` is how many of (resolver, runtime_values) the factory accepts.
    """

    __slots__ = ("key", "factory", "is_singleton", "arity")

    def __init__(
        self,
        key: BindingKey,
        factory: IFactory[Any],
        is_singleton: bool,
    ):
        self.key = key
        self.factory = factory
        self.is_singleton = is_singleton
        self.arity = factory_arity(factory)

    def __repr__(self) -> str:
        return f"Binding({self.key.describe()}, singleton={self.is_singleton})"


class HookRegistry:
    """
    A mapping of binding keys to their resolving hooks, in registration order.
    """

    __slots__ = ("_mappings",)

    def __init__(self):
        self._mappings: dict[BindingKey, list[IHook[Any]]] = {}

    def __contains__(self, key: BindingKey) -> bool:
        return key in self._mappings

    def __getitem__(self, key: BindingKey) -> list[IHook[Any]]:
        return self._mappings.get(key, []).copy()

    def register(self, key: BindingKey, hook: IHook[Any]) -> None:
        hooks = self._mappings.setdefault(key, [])
        if hook not in hooks:
            hooks.append(hook)


class BindingRegistry:
    """
    Stores bindings, values, aliases, contextual bindings and swaps.
    Owns no construction logic, the `Resolver` reads and caches into it.
    """

    __slots__ = (
        "_bindings",
        "_values",
        "_aliases",
        "_contextual",
        "_swaps",
        "_pending",
        "_waits",
        "hooks",
    )

    def __init__(self):
        self._bindings: dict[BindingKey, Binding] = {}
        self._values: dict[BindingKey, Any] = {}
        self._aliases: dict[BindingKey, BindingKey] = {}
        self._contextual: dict[type, dict[type, Binding]] = {}
        self._swaps: dict[BindingKey, Binding] = {}
        self._pending: dict[BindingKey, "Future[Any]"] = {}
        self._waits: dict[BindingKey, list[BindingKey]] = {}
        self.hooks = HookRegistry()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"bindings={len(self._bindings)}, "
            f"values={len(self._values)}, "
            f"aliases={len(self._aliases)})"
        )

    # ================= Registration =================

    def bind(self, key: Any, factory: IFactory[Any], singleton: bool = False) -> Binding:
        bkey = binding_key(key)
        binding = Binding(bkey, factory, singleton)
        self._bindings[bkey] = binding
        logger.debug("registered %r", binding)
        return binding

    def bind_value(self, key: Any, value: Any) -> None:
        bkey = binding_key(key)
        self._values[bkey] = value
        logger.debug("registered value for %s", bkey.describe())

    def alias(self, alias: Any, target: Any) -> None:
        akey = alias_key(alias)
        tkey = binding_key(target)
        if akey == tkey:
            raise InvalidAliasKeyError(
                alias, f"The container alias {akey.describe()} cannot point to itself"
            )
        self._aliases[akey] = tkey
        logger.debug("aliased %s -> %s", akey.describe(), tkey.describe())

    def contextual_binding(
        self, parent: Any, dependency: Any, factory: IFactory[Any]
    ) -> None:
        pkey, dkey = classify(parent), classify(dependency)
        if pkey is None or not pkey.is_class:
            raise InvalidDependencyError(
                parent,
                f"The parent for a contextual binding must be a class, received {parent!r}",
            )
        if dkey is None or not dkey.is_class:
            raise InvalidDependencyError(
                dependency,
                f"The dependency for a contextual binding must be a class, received {dependency!r}",
            )
        self._contextual.setdefault(parent, {})[dependency] = Binding(
            dkey, factory, False
        )
        logger.debug(
            "registered contextual binding %s for %s",
            dkey.describe(),
            pkey.describe(),
        )

    def swap(self, key: Any, factory: IFactory[Any]) -> None:
        bkey = binding_key(key)
        self._swaps[bkey] = Binding(bkey, factory, False)
        logger.debug("swapped %s", bkey.describe())

    def restore(self, key: Any) -> None:
        bkey = binding_key(key)
        self._swaps.pop(bkey, None)
        logger.debug("restored %s", bkey.describe())

    def restore_all(self, keys: Union[Iterable[Any], None] = None) -> None:
        if keys is None:
            self._swaps.clear()
            return
        for key in keys:
            self.restore(key)

    def cache(self, key: BindingKey, value: Any) -> None:
        self._values[key] = value

    # ================= Lookup =================

    def resolve_alias(self, key: BindingKey) -> BindingKey:
        "single hop, aliases are never chained"
        return self._aliases.get(key, key)

    def get_value(self, key: BindingKey) -> tuple[bool, Any]:
        if key in self._values:
            return True, self._values[key]
        return False, None

    def get_binding(self, key: BindingKey) -> Union[Binding, None]:
        return self._bindings.get(key)

    def get_swap(self, key: BindingKey) -> Union[Binding, None]:
        return self._swaps.get(key)

    def get_contextual(
        self, parent: Union[type, None], key: BindingKey
    ) -> Union[Binding, None]:
        if parent is None or not key.is_class:
            return None
        if (bindings := self._contextual.get(parent)) is None:
            return None
        return bindings.get(key.value)  # type: ignore[arg-type]

    def get_pending(self, key: BindingKey) -> Union["Future[Any]", None]:
        return self._pending.get(key)

    def set_pending(self, key: BindingKey, future: "Future[Any]") -> None:
        self._pending[key] = future

    def clear_pending(self, key: BindingKey) -> None:
        self._pending.pop(key, None)

    def add_wait(self, waiters: Iterable[BindingKey], key: BindingKey) -> None:
        "record that the singleton builds of `waiters` are blocked on the build of `key`"
        for waiter in waiters:
            self._waits.setdefault(waiter, []).append(key)

    def remove_wait(self, waiters: Iterable[BindingKey], key: BindingKey) -> None:
        for waiter in waiters:
            if (keys := self._waits.get(waiter)) is None:
                continue
            keys.remove(key)
            if not keys:
                del self._waits[waiter]

    def wait_chain(
        self, key: BindingKey, targets: Collection[BindingKey]
    ) -> Union[list[BindingKey], None]:
        """
        The chain of in-flight singleton builds, starting at `key`,
        that is blocked on one of `targets`. None when there is no such chain.
        """
        stack = [[key]]
        seen: set[BindingKey] = set()
        while stack:
            chain = stack.pop()
            current = chain[-1]
            if current in targets:
                return chain
            if current in seen:
                continue
            seen.add(current)
            for blocker in self._waits.get(current, ()):
                stack.append(chain + [blocker])
        return None

    def has_binding(self, key: Any) -> bool:
        if (bkey := classify(key)) is None:
            return False
        return bkey in self._values or bkey in self._bindings or bkey in self._aliases

    def has_all_bindings(self, keys: Iterable[Any]) -> bool:
        return all(self.has_binding(key) for key in keys)
