from __future__ import annotations

import inspect
import logging
import threading
from typing import TYPE_CHECKING, Any, TypeVar, overload

from ._definitions import Alias, ArgumentMap, Definition, Factory, Instance, as_definition
from ._errors import CircularDependencyError, ContainerError, NotFoundError
from ._introspection import (
    identifier_for,
    import_type,
    is_constructible,
    plan_constructor,
    plan_method,
)


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from ._introspection import ParameterDescriptor

    T = TypeVar("T")

    Token = type[T] | str


_MISSING = object()


class Container:
    """Minimal IoC container.

    - register definitions: argument maps, factories, instances or aliases
    - fetch with constructor auto-wiring from type hints
    - singletons built once at registration time
    - invoke methods with injected arguments.
    """

    def __init__(
        self,
        definitions: Mapping[Token[Any], object] | None = None,
        *,
        autowire: bool = True,
    ) -> None:
        self._definitions: dict[str, Definition] = {}
        self._singletons: dict[str, object] = {}
        self._types: dict[str, type] = {}
        self._building: list[str] = []
        self._autowire = autowire
        self._lock = threading.RLock()

        for token, definition in (definitions or {}).items():
            self.register(token, definition)

    @overload
    def fetch(self, token: type[T]) -> T: ...

    @overload
    def fetch(self, token: str) -> object: ...

    def fetch(self, token: Token[T]) -> object:
        """Fetch the entry for `token`.

        - frozen singleton: returned as is
        - registered definition: a value is built from it
        - unregistered constructible class: its constructor is planned,
          registered, and built
        Anything else raises `NotFoundError`.
        """
        with self._lock:
            name = self._identify(token)

            if name in self._singletons:
                return self._singletons[name]

            if name in self._building:
                raise CircularDependencyError([*self._building[self._building.index(name) :], name])

            self._building.append(name)
            try:
                if name not in self._definitions:
                    cls = self._locate(name) if self._autowire else None
                    if cls is None:
                        msg = f"Couldn't create '{name}'"
                        raise NotFoundError(msg)

                    arguments = plan_constructor(cls)
                    self._definitions[name] = ArgumentMap(arguments, target=cls)
                    logger.debug("Auto-wired %s with %d argument(s)", name, len(arguments))

                try:
                    return self._build(name)
                except NotFoundError as exc:
                    # `name` itself is known: a missing dependency is a build error.
                    msg = f"Couldn't build '{name}': {exc}"
                    raise ContainerError(msg) from exc
            finally:
                self._building.pop()

    def get(self, token: Token[Any]) -> object:
        """Standard lookup: same as `fetch`."""
        return self.fetch(token)

    def has(self, token: object) -> bool:
        """Return True if a definition is registered for `token`.

        A True result means `fetch` will not raise `NotFoundError` for this
        identifier; it may still raise other `ContainerError`s.
        """
        if not isinstance(token, str) and not inspect.isclass(token):
            return False

        with self._lock:
            return identifier_for(token) in self._definitions

    def __contains__(self, token: object) -> bool:
        return self.has(token)

    def register(self, token: Token[Any], definition: object) -> None:
        """Register a definition for `token`.

        Example:
          container.register("cache", RedisCache)
          container.register(Settings, lambda c: Settings.from_env())
          container.register_singleton(Database, Database)
          container.register("greeting", Instance("hello"))

        """
        with self._lock:
            name = self._identify(token)
            if name in self._singletons:
                msg = "Can't set a singleton twice."
                raise ContainerError(msg)

            if inspect.isclass(definition):  # noqa: SIM102
                if self._identify(definition) == name:
                    # register(Cls, Cls) builds Cls itself rather than aliasing it.
                    self._definitions[name] = ArgumentMap(plan_constructor(definition), target=definition)
                    return
            self._definitions[name] = as_definition(definition)

    def register_singleton(self, token: Token[Any], definition: object) -> None:
        """Register `definition` and freeze the value it builds for `token`."""
        with self._lock:
            name = self._identify(token)
            previous = self._definitions.get(name, _MISSING)

            self.register(name, definition)
            try:
                instance = self.fetch(name)
            except Exception:
                if previous is _MISSING:
                    del self._definitions[name]
                else:
                    self._definitions[name] = previous
                raise

            self._singletons[name] = instance
            logger.debug("Froze singleton %s (%s)", name, type(instance).__qualname__)

    def invoke(
        self,
        target: object,
        method: str,
        presets: Mapping[str, Any] | None = None,
    ) -> Any:
        """Call `target.method` with its arguments resolved by the container.

        `target` may be an identifier (fetched first) or a live object.
        `presets` supplies literal values by parameter name.
        """
        with self._lock:
            if target is None:
                msg = "Invalid object"
                raise ContainerError(msg)

            if isinstance(target, str) or inspect.isclass(target):
                target = self.fetch(target)

            func, arguments = plan_method(target, method, presets)
            args, kwargs = self._resolve_arguments(arguments)

            return func(*args, **kwargs)

    def _build(self, name: str) -> object:
        definition = self._definitions[name]

        if isinstance(definition, ArgumentMap):
            cls = definition.target or self._locate(name)
            if cls is None:
                msg = f"'{name}' does not name a class; an argument map needs one to instantiate"
                raise ContainerError(msg)
            args, kwargs = self._resolve_arguments(definition.arguments)
            return cls(*args, **kwargs)

        if isinstance(definition, Factory):
            return self._call_factory(definition.func)

        if isinstance(definition, Instance):
            return definition.value

        if isinstance(definition, Alias):
            return self.fetch(definition.identifier)

        msg = "Invalid map"
        raise ContainerError(msg)

    def _resolve_arguments(self, arguments: Iterable[ParameterDescriptor]) -> tuple[list[Any], dict[str, Any]]:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}

        for argument in arguments:
            value = self.fetch(argument.value) if argument.needs_resolution else argument.value
            if argument.kind is inspect.Parameter.KEYWORD_ONLY:
                kwargs[argument.name] = value
            else:
                args.append(value)

        return args, kwargs

    def _call_factory(self, func: Callable[..., Any]) -> object:
        try:
            params = inspect.signature(func).parameters.values()
        except (TypeError, ValueError):
            return func(self)

        takes_container = any(
            p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD, p.VAR_POSITIONAL) for p in params
        )
        return func(self) if takes_container else func()

    def _identify(self, token: Token[Any]) -> str:
        name = identifier_for(token)
        if inspect.isclass(token):
            self._types[name] = token
        return name

    def _locate(self, name: str) -> type | None:
        cls = self._types.get(name) or import_type(name)
        if cls is None or not is_constructible(cls):
            return None
        return cls
