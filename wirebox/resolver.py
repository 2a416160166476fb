import logging
from asyncio import Future, ensure_future, shield
from contextlib import contextmanager
from contextvars import ContextVar
from inspect import isawaitable
from typing import Any, Final, Iterator, Union

from ._type_resolve import unbindable_reason
from .config import CONSTRUCTOR_KEY, RESOLVE_EVENT, ContainerConfig
from .errors import (
    CannotConstructDependenciesError,
    CannotConstructValueError,
    CyclicDependencyError,
    InvalidDependencyError,
    MethodNotFoundError,
)
from .interfaces import RuntimeValues
from .keys import BindingKey, binding_key, classify
from .provider import provide
from .registry import Binding, BindingRegistry
from .utils.typing_utils import is_primitive_wrapper

logger = logging.getLogger(__name__)

Frame = Union[Binding, BindingKey]
"""
a factory binding being invoked, or a class being constructed
"""

_RESOLUTION_PATH: Final[ContextVar[tuple[Frame, ...]]] = ContextVar(
    "wirebox_resolution_path", default=()
)


def _frame_key(frame: Frame) -> Any:
    return frame.key.value if isinstance(frame, Binding) else frame.value


def _retrieve_exception(build: "Future[Any]") -> None:
    # every waiter may have been cancelled before a failed build settles
    if not build.cancelled():
        build.exception()


class Resolver:
    """
    Resolves bindings and constructs classes against a shared `BindingRegistry`.

    Values bound on a resolver are local to it, invisible to the container
    and to sibling resolvers.

    ```py
    resolver = container.create_resolver()
    resolver.bind_value(HttpContext, ctx)
    controller = await resolver.make(UsersController)
    ```

    Lookup order for `make(key)`, first match wins:
    resolver values, swaps, contextual bindings, container values,
    container bindings, class construction.
    """

    def __init__(self, registry: BindingRegistry, config: ContainerConfig):
        self._registry = registry
        self._config = config
        self._values: dict[BindingKey, Any] = {}

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"registry={self._registry!r}, "
            f"values={len(self._values)})"
        )

    # ================= Internal =================

    @contextmanager
    def _track(self, frame: Frame) -> Iterator[None]:
        path = _RESOLUTION_PATH.get()
        self._check_cycle(frame, path)
        token = _RESOLUTION_PATH.set(path + (frame,))
        try:
            yield
        finally:
            _RESOLUTION_PATH.reset(token)

    def _check_cycle(
        self, frame: Frame, path: Union[tuple[Frame, ...], None] = None
    ) -> None:
        if path is None:
            path = _RESOLUTION_PATH.get()
        if frame in path:
            cycle = path[path.index(frame) :] + (frame,)
            raise CyclicDependencyError([_frame_key(f) for f in cycle])

    def _emit(self, key: BindingKey, value: Any) -> Any:
        if (emitter := self._config.emitter) is None:
            return None
        return emitter.emit(RESOLVE_EVENT, {"binding": key.value, "value": value})

    async def _after_construct(self, key: BindingKey, value: Any) -> None:
        "run resolving hooks in registration order, then notify the emitter"
        for hook in self._registry.hooks[key]:
            result = hook(value, self)
            if isawaitable(result):
                await result

        emitted = self._emit(key, value)
        if isawaitable(emitted):
            await emitted

    async def _invoke(
        self, binding: Binding, runtime_values: Union[RuntimeValues, None]
    ) -> Any:
        args = (self, runtime_values)[: binding.arity]
        value = binding.factory(*args)
        return await value if isawaitable(value) else value

    async def _make_binding(
        self, binding: Binding, runtime_values: Union[RuntimeValues, None]
    ) -> Any:
        with self._track(binding):
            value = await self._invoke(binding, runtime_values)
        await self._after_construct(binding.key, value)
        return value

    async def _build_singleton(
        self, binding: Binding, runtime_values: Union[RuntimeValues, None]
    ) -> Any:
        key = binding.key
        try:
            with self._track(binding):
                value = await self._invoke(binding, runtime_values)
            await self._after_construct(key, value)
            self._registry.cache(key, value)
            logger.debug("cached singleton %s", key.describe())
            return value
        finally:
            self._registry.clear_pending(key)

    def _building(self) -> tuple[BindingKey, ...]:
        "keys of the singleton builds the current resolution runs inside"
        return tuple(
            frame.key
            for frame in _RESOLUTION_PATH.get()
            if isinstance(frame, Binding) and frame.is_singleton
        )

    def _check_wait_cycle(
        self, key: BindingKey, waiters: tuple[BindingKey, ...]
    ) -> None:
        """
        Awaiting the in-flight build of `key` deadlocks when that build is,
        directly or through other builds, blocked on one of `waiters`.
        """
        if (chain := self._registry.wait_chain(key, waiters)) is None:
            return
        path = _RESOLUTION_PATH.get()
        start = next(
            i
            for i, frame in enumerate(path)
            if isinstance(frame, Binding) and frame.key == chain[-1]
        )
        cycle = [_frame_key(f) for f in path[start:]] + [k.value for k in chain]
        raise CyclicDependencyError(cycle)

    async def _make_singleton(
        self, binding: Binding, runtime_values: Union[RuntimeValues, None]
    ) -> Any:
        """
        At most one construction per singleton key is in flight,
        concurrent callers await the same build and share its result or error.
        """
        # awaiting our own in-flight build would never complete
        self._check_cycle(binding)

        key = binding.key
        if (pending := self._registry.get_pending(key)) is None:
            pending = ensure_future(self._build_singleton(binding, runtime_values))
            pending.add_done_callback(_retrieve_exception)
            self._registry.set_pending(key, pending)

        if not (waiters := self._building()):
            return await shield(pending)

        self._check_wait_cycle(key, waiters)
        self._registry.add_wait(waiters, key)
        try:
            return await shield(pending)
        finally:
            self._registry.remove_wait(waiters, key)

    async def _make_class(
        self, key: BindingKey, runtime_values: Union[RuntimeValues, None]
    ) -> Any:
        cls: type = key.value  # type: ignore[assignment]
        if is_primitive_wrapper(cls):
            raise InvalidDependencyError(cls)

        with self._track(key):
            dependencies = await provide(cls, CONSTRUCTOR_KEY, self, runtime_values)
            if reason := unbindable_reason(cls, dependencies):
                raise CannotConstructDependenciesError(cls, reason)
            value = cls(*dependencies)

        await self._after_construct(key, value)
        return value

    def _lookup_local(self, keys: tuple[BindingKey, ...]) -> tuple[bool, Any]:
        for key in keys:
            if key in self._values:
                return True, self._values[key]
        return False, None

    def _lookup_container(self, keys: tuple[BindingKey, ...]) -> tuple[bool, Any]:
        for key in keys:
            found, value = self._registry.get_value(key)
            if found:
                return True, value
        return False, None

    # =================  Public =================

    def bind_value(self, key: Any, value: Any) -> None:
        """
        Bind a value local to this resolver, it outranks every container binding.
        """
        self._values[binding_key(key)] = value

    def has_binding(self, key: Any) -> bool:
        if (bkey := classify(key)) is not None and bkey in self._values:
            return True
        return self._registry.has_binding(key)

    async def make(
        self, key: Any, runtime_values: Union[RuntimeValues, None] = None
    ) -> Any:
        """
        Resolve a binding, or construct a class with its dependencies.

        ```py
        await resolver.make("route")
        await resolver.make(Database)
        await resolver.make(UserService, [MISSING, config])
        ```
        """
        return await self.resolve_for(None, key, runtime_values)

    async def resolve_for(
        self,
        parent: Union[type, None],
        key: Any,
        runtime_values: Union[RuntimeValues, None] = None,
    ) -> Any:
        """
        Same as `make`, resolving `key` on behalf of `parent`,
        so that contextual bindings registered for `parent` apply.
        """
        if (bkey := classify(key)) is None:
            raise CannotConstructValueError(key)

        target = self._registry.resolve_alias(bkey)
        keys = (bkey,) if target == bkey else (bkey, target)

        found, value = self._lookup_local(keys)
        if found:
            return value

        for k in keys:
            if swapped := self._registry.get_swap(k):
                return await self._make_binding(swapped, runtime_values)

        if contextual := self._registry.get_contextual(parent, target):
            return await self._make_binding(contextual, runtime_values)

        found, value = self._lookup_container(keys)
        if found:
            return value

        for k in keys:
            if binding := self._registry.get_binding(k):
                if binding.is_singleton:
                    return await self._make_singleton(binding, runtime_values)
                return await self._make_binding(binding, runtime_values)

        if not target.is_class:
            raise CannotConstructValueError(key)

        return await self._make_class(target, runtime_values)

    async def call(
        self,
        target: Any,
        method: str,
        runtime_values: Union[RuntimeValues, None] = None,
    ) -> Any:
        """
        Call a method on an object, injecting its dependencies
        the same way constructor dependencies are.

        ```py
        await resolver.call(await resolver.make(UsersController), "index")
        ```
        """
        func = getattr(target, method, None) if isinstance(method, str) else None
        if not callable(func):
            raise MethodNotFoundError(target, method)

        owner = type(target)
        dependencies = await provide(owner, method, self, runtime_values)
        if reason := unbindable_reason(func, dependencies):
            raise CannotConstructDependenciesError(owner, reason, method=method)

        result = func(*dependencies)
        return await result if isawaitable(result) else result
