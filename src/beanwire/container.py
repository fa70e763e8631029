"""
Module for lazily building, wiring and caching beans from their definitions.

A :class:`Container` is configured once with a mapping of bean names to
definitions and builds nothing until asked. Requesting a bean resolves its
definition, builds any beans its arguments refer to (recursively, through the same
:meth:`Container.get`), checks and configures the instance, then caches it so that
every later request for that name returns the same object.

Beans currently being built are tracked, so a bean that needs itself, directly or
through other beans, fails with a :class:`~beanwire.errors.CircularDependencyError`
instead of recursing forever.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Sequence, Union

from beanwire.bean_builder import BeanBuilder
from beanwire.definitions import DefinitionResolver
from beanwire.domain import AliasDefinition, FactoryDefinition
from beanwire.errors import (
    CircularDependencyError,
    DependencyError,
    InvalidArgumentError,
    BeanInstantiationError,
)
from beanwire.registry import ClassRegistry
from beanwire.references import resolve_references

__all__ = ["BeanContainer", "Container"]

logger = logging.getLogger(__name__)


class BeanContainer(ABC):
    """The operations a container offers its clients."""

    @abstractmethod
    def get(self, bean_name: str) -> Any:
        """Return the bean named ``bean_name``, building it on first request."""

    @abstractmethod
    def has_bean(self, bean_name: str) -> bool:
        """Whether a definition named ``bean_name`` exists."""

    @abstractmethod
    def test(self, bean_names: Optional[Sequence[str]] = None):
        """Build the given beans, or every buildable bean, to validate the configuration."""


class Container(BeanContainer):
    """A lazily-populated set of singleton beans built from definitions.

    Args:
        definitions: Raw bean definitions keyed by bean name; see
            :mod:`beanwire.definitions` for their shape.
        classes: Resolves class names used in definitions. A plain mapping of names
            to classes is wrapped in a :class:`ClassRegistry`.
        string_references: Whether ``"reference-to:..."`` strings in argument values
            are treated as references. When False, only
            :class:`~beanwire.domain.Reference` values are.

    Example:
        >>> container = Container({
        ...     "db": {"class": "app.Database"},
        ...     "users": {"class": "app.UserService", "constructor_args": ["reference-to:db"]},
        ... })
        >>> container.get("users").db is container.get("db")
        True
    """

    def __init__(
        self,
        definitions: Mapping[str, Any],
        classes: Union[ClassRegistry, Mapping[str, type], None] = None,
        string_references: bool = True,
    ):
        if not isinstance(classes, ClassRegistry):
            classes = ClassRegistry(classes)
        self._definitions = DefinitionResolver(definitions, string_references)
        self._builder = BeanBuilder(classes, self._resolve_references)
        self._beans: dict[str, Any] = {}
        self._in_progress: dict[str, None] = {}

    def get(self, bean_name: str) -> Any:
        """Return the bean named ``bean_name``, building it on first request.

        Aliases are not cached under their own name: they always forward to the
        target bean, whose own cache entry is authoritative.

        Raises:
            NoDefinitionFoundError: If ``bean_name`` (or a bean it needs) is undefined.
            InvalidDefinitionError: If a definition involved is malformed.
            CircularDependencyError: If ``bean_name`` depends on itself.
            BeanInstantiationError: If a bean cannot be built or fails its type checks.
        """
        if bean_name in self._beans:
            return self._beans[bean_name]

        with self._constructing(bean_name):
            definition = self._definitions.definition_for(bean_name)

            if isinstance(definition, AliasDefinition):
                logger.debug("Bean %r is an alias of %r", bean_name, definition.target)
                return self.get(definition.target)

            if isinstance(definition, FactoryDefinition):
                instance = self._call_factory(definition)
            else:
                instance = self._builder.build(definition)

        logger.debug("Created bean %r (%s)", bean_name, type(instance).__qualname__)
        self._beans[bean_name] = instance
        return instance

    def has_bean(self, bean_name: str) -> bool:
        return bean_name in self._definitions

    def test(self, bean_names: Optional[Sequence[str]] = None):
        """Build each named bean, or every non-abstract bean if no names are given.

        Use this to check a deployment's configuration up front: the first bean that
        cannot be built raises, exactly as :meth:`get` would.

        Raises:
            InvalidArgumentError: If ``bean_names`` is given but empty.
        """
        if bean_names is None:
            bean_names = self._definitions.names_to_test()
        elif len(bean_names) == 0:
            raise InvalidArgumentError(
                "The check list passed to the test method can't be empty"
            )

        for bean_name in bean_names:
            self.get(bean_name)

    def __contains__(self, bean_name: str) -> bool:
        return self.has_bean(bean_name)

    def __getitem__(self, bean_name: str) -> Any:
        return self.get(bean_name)

    @contextmanager
    def _constructing(self, bean_name: str) -> Iterator[None]:
        """Mark ``bean_name`` as being built for the duration of the block."""
        if bean_name in self._in_progress:
            chain = " -> ".join([*self._in_progress, bean_name])
            raise CircularDependencyError(
                f"Circular dependency found while creating bean '{bean_name}': {chain}",
                bean_name,
            )

        self._in_progress[bean_name] = None
        try:
            yield
        finally:
            del self._in_progress[bean_name]

    def _call_factory(self, definition: FactoryDefinition) -> Any:
        try:
            return definition.factory(self)
        except DependencyError:
            raise
        except Exception as e:
            raise BeanInstantiationError(
                f"Failed to create bean '{definition.name}': "
                f"factory raised {type(e).__name__}: {e}",
                definition.name,
            ) from e

    def _resolve_references(self, value: Any) -> Any:
        return resolve_references(value, self.get, self)
