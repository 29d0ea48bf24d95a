from __future__ import annotations


class ContainerError(RuntimeError):
    """Configuration or build failure raised by the container."""


class NotFoundError(ContainerError, LookupError):
    """No definition, no singleton and no constructible class for an identifier."""


class ResolutionError(ContainerError):
    pass


class CircularDependencyError(ContainerError):
    def __init__(self, chain: list[str]) -> None:
        self.chain = list(chain)
        super().__init__(f"Circular dependency detected: {' -> '.join(self.chain)}")
