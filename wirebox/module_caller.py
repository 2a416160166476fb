"""
Adapters turning a class and a method name into a plain async callable
(or an object with a `handle` method) that constructs the class through
the container and calls the method with dependency injection.

```py
handler = module_caller(HomeController, "index").to_callable(container)
await handler(ctx)

# or pass a resolver at call time, to use request scoped values
handler = module_caller(HomeController, "index").to_callable()
await handler(container.create_resolver(), ctx)
```
"""

import logging
from abc import ABC, abstractmethod
from inspect import isawaitable
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Union

from .errors import MissingDefaultExportError
from .interfaces import IModuleLoader
from .utils.param_utils import MISSING, Maybe, is_provided

if TYPE_CHECKING:
    from .container import Container
    from .resolver import Resolver

logger = logging.getLogger(__name__)

AnyResolver = Union["Container", "Resolver"]


class ModuleHandler:
    __slots__ = ("_handle",)

    def __init__(self, handle: Callable[..., Awaitable[Any]]):
        self._handle = handle

    async def handle(self, *args: Any) -> Any:
        return await self._handle(*args)


class _ModuleAdapter(ABC):
    __slots__ = ("_method",)

    def __init__(self, method: str):
        self._method = method

    @abstractmethod
    async def _get_target(self) -> type: ...

    async def _invoke(self, resolver: AnyResolver, args: tuple[Any, ...]) -> Any:
        target = await self._get_target()
        instance = await resolver.make(target)
        return await resolver.call(instance, self._method, list(args))

    def to_callable(
        self, container: Union[AnyResolver, None] = None
    ) -> Callable[..., Awaitable[Any]]:
        """
        With a container, the returned function receives the method arguments,
        otherwise it receives a resolver (or container) first.
        """
        if container is not None:

            async def _bound_callable(*args: Any) -> Any:
                return await self._invoke(container, args)

            return _bound_callable

        async def _callable(resolver: AnyResolver, *args: Any) -> Any:
            return await self._invoke(resolver, args)

        return _callable

    def to_handle_method(
        self, container: Union[AnyResolver, None] = None
    ) -> ModuleHandler:
        return ModuleHandler(self.to_callable(container))


class ModuleCaller(_ModuleAdapter):
    __slots__ = ("_target",)

    def __init__(self, target: type, method: str):
        super().__init__(method)
        self._target = target

    async def _get_target(self) -> type:
        return self._target


class ModuleImporter(_ModuleAdapter):
    """
    Lazily loads a module through `loader` the first time it is needed,
    and constructs its `default` export.
    """

    __slots__ = ("_loader", "_default")

    def __init__(self, loader: IModuleLoader, method: str):
        super().__init__(method)
        self._loader = loader
        self._default: Maybe[type] = MISSING

    async def _get_target(self) -> type:
        if is_provided(self._default):
            return self._default

        module = self._loader()
        if isawaitable(module):
            module = await module

        if isinstance(module, Mapping):
            default = module.get("default", MISSING)
        else:
            default = getattr(module, "default", MISSING)
        if not is_provided(default):
            raise MissingDefaultExportError(self._loader)

        logger.debug("loaded default export %r", default)
        self._default = default
        return default


def module_caller(target: type, method: str) -> ModuleCaller:
    return ModuleCaller(target, method)


def module_importer(loader: IModuleLoader, method: str) -> ModuleImporter:
    return ModuleImporter(loader, method)
