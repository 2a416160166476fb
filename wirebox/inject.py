from typing import Any, Callable, Union

from ._type_resolve import get_positional_types, merge_positional
from .config import CONSTRUCTOR_KEY
from .errors import InvalidDependencyError
from .interfaces import IReflector
from .provider import injections
from .utils.typing_utils import T, is_class


def _reflector(
    func: Any, overrides: tuple[Any, ...], *, skip_first: bool
) -> IReflector:
    def reflect() -> list[Any]:
        reflected = get_positional_types(func, skip_first=skip_first)
        return merge_positional(reflected, overrides)

    return reflect


class MethodInjection:
    """
    Stands in for a decorated method until the owning class is created,
    then records the method's dependencies and puts the original method back.
    """

    __slots__ = ("func", "overrides")

    def __init__(self, func: Any, overrides: tuple[Any, ...]):
        self.func = func
        self.overrides = overrides

    def __set_name__(self, owner: type, name: str) -> None:
        func = self.func
        if isinstance(func, staticmethod):
            reflect = _reflector(func.__func__, self.overrides, skip_first=False)
        elif isinstance(func, classmethod):
            reflect = _reflector(func.__func__, self.overrides, skip_first=True)
        else:
            reflect = _reflector(func, self.overrides, skip_first=True)

        injections.defer(owner, name, reflect)
        setattr(owner, name, func)

    def __get__(self, instance: Any, owner: Union[type, None] = None) -> Any:
        return self.func.__get__(instance, owner)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.func(*args, **kwargs)


def inject(*overrides: Any) -> Callable[[T], T]:
    """
    Record the dependencies of a class constructor or a method, reflected
    from the parameter annotations.

    ```py
    @inject()
    class UserService:
        def __init__(self, db: Database, config: "Config"):
            ...

        @inject()
        def notify(self, mailer: Mailer): ...
    ```

    Annotations are reflected when the container first looks the
    declaration up, so string annotations may name classes defined
    later in the module. An annotation that can't be resolved by then
    raises `InvalidDependencyError` from `make` or `call`.

    Positional overrides win over the reflected types, `None` keeps the
    reflected type:

    ```py
    @inject(None, "config")
    class UserService:
        def __init__(self, db: Database, config: dict): ...
    ```

    Unannotated parameters are recorded as `object`, which can't be injected
    and must be provided as a runtime value.
    """

    def decorator(target: Any) -> Any:
        if is_class(target):
            init = target.__init__
            if init is object.__init__:
                if overrides:
                    injections.declare(
                        target, CONSTRUCTOR_KEY, merge_positional([], overrides)
                    )
                return target

            injections.defer(
                target, CONSTRUCTOR_KEY, _reflector(init, overrides, skip_first=True)
            )
            return target

        if callable(target) or isinstance(target, (staticmethod, classmethod)):
            return MethodInjection(target, overrides)

        raise InvalidDependencyError(
            target, f"@inject can only decorate classes or methods, received {target!r}"
        )

    return decorator
