"""Exceptions raised by the container."""

from typing import Optional

__all__ = [
    "DependencyError",
    "NoDefinitionFoundError",
    "InvalidDefinitionError",
    "CircularDependencyError",
    "BeanInstantiationError",
    "InvalidArgumentError",
    "ContainerNotInitialisedError",
]


class DependencyError(Exception):
    """Base class for every error raised while resolving or building a bean.

    Attributes:
        bean_name: The name of the bean being resolved when the error occurred,
            if there was one.
    """

    def __init__(self, message: str, bean_name: Optional[str] = None):
        super().__init__(message)
        self.bean_name = bean_name

    def __str__(self) -> str:
        return self.args[0]


class NoDefinitionFoundError(DependencyError, KeyError):
    """Raised when a requested bean name has no definition."""


class InvalidDefinitionError(DependencyError):
    """Raised when a definition is structurally malformed."""


class CircularDependencyError(DependencyError):
    """Raised when building a bean requires that same bean, directly or transitively."""


class BeanInstantiationError(DependencyError):
    """Raised when a bean cannot be built, or the built instance fails its type checks."""


class InvalidArgumentError(DependencyError, ValueError):
    """Raised when a container operation is called with an unusable argument."""


class ContainerNotInitialisedError(DependencyError):
    """Raised when the process-wide container is used before ``di.init``."""
