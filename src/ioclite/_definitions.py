from __future__ import annotations

import functools
import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ._errors import ContainerError
from ._introspection import ParameterDescriptor, identifier_for


if TYPE_CHECKING:
    from collections.abc import Callable


class Definition:
    """Base class of the recipes a container can build a value from."""

    __slots__ = ()


@dataclass(frozen=True)
class ArgumentMap(Definition):
    arguments: tuple[ParameterDescriptor, ...] = ()
    target: type | None = None


@dataclass(frozen=True)
class Factory(Definition):
    func: Callable[..., Any]


@dataclass(frozen=True)
class Instance(Definition):
    value: Any


@dataclass(frozen=True)
class Alias(Definition):
    identifier: str


def as_definition(raw: object) -> Definition:
    """Coerce a raw registration value into a definition variant.

    - `Definition` instances pass through
    - strings and classes become aliases
    - functions, methods and partials become factories
    - a non-empty sequence of `ParameterDescriptor` becomes an argument map
    - `None` is rejected
    - anything else is an instance
    """
    if isinstance(raw, Definition):
        return raw

    if raw is None:
        msg = "Invalid map"
        raise ContainerError(msg)

    if isinstance(raw, str) or inspect.isclass(raw):
        return Alias(identifier_for(raw))

    if inspect.isroutine(raw) or isinstance(raw, functools.partial):
        return Factory(raw)

    if isinstance(raw, (list, tuple)) and raw and all(isinstance(item, ParameterDescriptor) for item in raw):
        return ArgumentMap(tuple(raw))

    return Instance(raw)
