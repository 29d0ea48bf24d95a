"""Minimal inversion-of-control container.

This package provides a lightweight IoC container for Python. Given a class or
a string identifier it builds the full object graph, auto-wiring constructor
dependencies from type hints when no explicit definition is registered.

Exports:
- `Container`: registers definitions, fetches entries, freezes singletons and
  invokes methods with injected arguments.
- `ArgumentMap`, `Factory`, `Instance`, `Alias`: the definition variants a
  container builds values from. Raw values passed to `Container.register` are
  coerced into one of these by `as_definition`.
- `ParameterDescriptor`: one planned constructor or method argument.
- `ContainerError`, `NotFoundError`, `ResolutionError`,
  `CircularDependencyError`: the errors the container raises.
"""

from ._container import Container
from ._definitions import Alias, ArgumentMap, Definition, Factory, Instance, as_definition
from ._errors import CircularDependencyError, ContainerError, NotFoundError, ResolutionError
from ._introspection import ParameterDescriptor


__all__ = [
    "Alias",
    "ArgumentMap",
    "CircularDependencyError",
    "Container",
    "ContainerError",
    "Definition",
    "Factory",
    "Instance",
    "NotFoundError",
    "ParameterDescriptor",
    "ResolutionError",
    "as_definition",
]
