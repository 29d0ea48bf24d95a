from __future__ import annotations

import importlib
import inspect
import logging
import typing
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, get_type_hints

from ._errors import ContainerError, ResolutionError


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping


@dataclass(frozen=True)
class ParameterDescriptor:
    """One planned argument.

    `value` is a literal unless `needs_resolution` is set, in which case it is
    the identifier (or class) to fetch from the container at build time.
    """

    name: str
    value: Any
    needs_resolution: bool = False
    kind: inspect._ParameterKind = inspect.Parameter.POSITIONAL_OR_KEYWORD  # noqa: SLF001


def identifier_for(token: object) -> str:
    """Return the string identifier for a class or a string token."""
    if isinstance(token, str):
        return token

    if inspect.isclass(token):
        return f"{token.__module__}.{token.__qualname__}"

    msg = f"Invalid identifier {token!r}: expected a string or a class"
    raise ContainerError(msg)


def import_type(identifier: str) -> type | None:
    """Look up a class by its dotted `module.QualName` path, or return None."""
    parts = identifier.split(".")
    for i in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:i])
        try:
            obj: Any = importlib.import_module(module_name)
        except (ImportError, ValueError):
            continue
        except Exception as exc:
            msg = f"Importing '{module_name}' failed while looking up '{identifier}'"
            raise ContainerError(msg) from exc

        try:
            for attr in parts[i:]:
                obj = getattr(obj, attr)
        except AttributeError:
            return None

        return obj if inspect.isclass(obj) else None

    return None


def is_constructible(tp: object) -> bool:
    """True for concrete, user-defined classes the container may auto-wire."""
    return _is_user_type(tp) and not inspect.isabstract(tp) and not _is_protocol(tp)


def plan_constructor(cls: type) -> tuple[ParameterDescriptor, ...]:
    if cls.__init__ is object.__init__ and cls.__new__ is object.__new__:
        return ()

    try:
        sig = inspect.signature(cls)
        return _plan(sig, _get_init_type_hints(cls), {})
    except (ResolutionError, TypeError, ValueError) as exc:
        _raise_unreadable("__init__", cls.__qualname__, exc)


def plan_method(
    obj: object,
    method_name: str,
    presets: Mapping[str, Any] | None = None,
) -> tuple[Callable[..., Any], tuple[ParameterDescriptor, ...]]:
    """Plan the arguments of `obj.method_name`.

    Returns the bound method together with its planned arguments.
    """
    owner = obj.__qualname__ if inspect.isclass(obj) else type(obj).__qualname__
    try:
        member = getattr(obj, method_name)
        if not callable(member):
            msg = f"'{method_name}' is not callable"
            raise TypeError(msg)

        sig = inspect.signature(member)
        return member, _plan(sig, _get_callable_type_hints(member), presets or {})
    except (ResolutionError, AttributeError, TypeError, ValueError) as exc:
        _raise_unreadable(method_name, owner, exc)


def _plan(
    sig: inspect.Signature,
    hints: dict[str, Any],
    presets: Mapping[str, Any],
) -> tuple[ParameterDescriptor, ...]:
    """Plan each parameter: preset, then default, then type hint, else fail."""
    arguments: list[ParameterDescriptor] = []
    for name, p in sig.parameters.items():
        if p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD):
            continue

        if name in presets:
            arguments.append(ParameterDescriptor(name, presets[name], kind=p.kind))
            continue

        if p.default is not p.empty:
            arguments.append(ParameterDescriptor(name, p.default, kind=p.kind))
            continue

        ann = hints.get(name, p.empty)
        if ann is p.empty:
            msg = f"Could not define a value for parameter '{name}' (no preset, default or annotation)"
            raise ResolutionError(msg)

        if not _is_user_type(ann):
            ann_repr = getattr(ann, "__name__", repr(ann))
            msg = f"Parameter '{name}' is not a class (annotation: {ann_repr})"
            raise ResolutionError(msg)

        arguments.append(ParameterDescriptor(name, ann, needs_resolution=True, kind=p.kind))

    return tuple(arguments)


def _raise_unreadable(method_name: str, owner: str, exc: Exception) -> typing.NoReturn:
    msg = f"Could not read method '{method_name}' from '{owner}'"
    raise ContainerError(msg) from exc


def _is_user_type(tp: object) -> bool:
    return inspect.isclass(tp) and getattr(tp, "__module__", "") != "builtins"


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def _is_protocol(tp: object) -> bool:
        return inspect.isclass(tp) and typing.is_protocol(tp)

else:

    def _is_protocol(tp: object) -> bool:
        # Concrete subclasses of a protocol reset `_is_protocol` to False.
        return inspect.isclass(tp) and bool(getattr(tp, "_is_protocol", False)) and tp is not typing.Protocol


def _get_init_type_hints(cls: type) -> dict[str, Any]:
    try:
        init = inspect.getattr_static(cls, "__init__")
        hints = get_type_hints(init)
    except TypeError:
        hints = {}
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s (%s) type hints", exc.name, cls.__name__, cls.__qualname__)
        hints = {}
    except (AttributeError, SyntaxError) as exc:
        logger.warning("Unreadable type hints on %s (%s): %s", cls.__name__, cls.__qualname__, exc)
        hints = {}

    return hints


def _get_callable_type_hints(func: Callable[..., Any]) -> dict[str, Any]:
    target = getattr(func, "__func__", func)
    try:
        hints = get_type_hints(target)
    except TypeError:
        hints = {}
    except NameError as exc:
        logger.warning("'%s' name error retrieving %r type hints", exc.name, func)
        hints = {}
    except (AttributeError, SyntaxError) as exc:
        logger.warning("Unreadable type hints on %r: %s", func, exc)
        hints = {}

    return hints
