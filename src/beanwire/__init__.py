"""Beanwire: a configuration-driven object graph builder.

Beanwire builds objects ("beans") from a declarative mapping of named
definitions. Each definition says which class to instantiate (or which builder
function to call), what to pass to it, and which properties to set and methods
to call on the result. Arguments may refer to other beans, which are built on
demand; every bean is built once and cached for the lifetime of its container.

Key Features:
    - Lazy construction: nothing is built until it is first requested
    - Constructor, builder, property and method injection
    - Definition inheritance through abstract parents (``extends``)
    - Aliases forwarding one bean name to another
    - Type checks on built instances (``class`` and ``instanceof``)
    - Circular dependency detection

Basic Usage:
    >>> from beanwire import make_container
    >>>
    >>> container = make_container({
    ...     "config": lambda c: {"dsn": "sqlite://"},
    ...     "database": {
    ...         "class": "app.storage.Database",
    ...         "constructor_args": ["reference-to:config"],
    ...         "init": {"prop:timeout": 30, "connect": []},
    ...     },
    ...     "db": {"alias": "database"},
    ... })
    >>> container.get("db") is container.get("database")
    True

The package consists of several modules:
    - builders: The ``make_container`` entry point
    - container: The container and its abstract interface
    - definitions: Definition lookup, inheritance and validation
    - bean_builder: Instantiation, type checks and init steps
    - references: Reference markers and their resolution
    - registry: Mapping class names to classes
    - domain: Core domain models (definitions, references)
    - errors: Framework-specific exceptions
    - di: Optional process-wide container access
"""

from beanwire.builders import make_container
from beanwire.container import BeanContainer, Container
from beanwire.domain import SELF, Reference
from beanwire.errors import (
    BeanInstantiationError,
    CircularDependencyError,
    ContainerNotInitialisedError,
    DependencyError,
    InvalidArgumentError,
    InvalidDefinitionError,
    NoDefinitionFoundError,
)
from beanwire.references import ref
from beanwire.registry import ClassRegistry

__all__ = [
    "make_container",
    "BeanContainer",
    "Container",
    "ClassRegistry",
    "Reference",
    "SELF",
    "ref",
    "DependencyError",
    "NoDefinitionFoundError",
    "InvalidDefinitionError",
    "CircularDependencyError",
    "BeanInstantiationError",
    "InvalidArgumentError",
    "ContainerNotInitialisedError",
]
