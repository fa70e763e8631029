"""Domain models used throughout the container."""

from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Optional, Union

__all__ = [
    "Reference",
    "SelfReference",
    "SELF",
    "ClassSpec",
    "InitOperation",
    "FactoryDefinition",
    "AliasDefinition",
    "BeanDefinition",
    "Definition",
]


@dataclass(frozen=True)
class Reference:
    """A value standing in for another bean, substituted when the value is used.

    Attributes:
        bean_name: The name of the bean to substitute.
    """

    bean_name: str


class SelfReference:
    """A value standing in for the container that is building the bean."""

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, SelfReference)

    def __hash__(self) -> int:
        return hash(SelfReference)

    def __repr__(self) -> str:
        return "SELF"


SELF = SelfReference()


ClassSpec = Union[str, type]
"""A type, or the name of one: either a name held by a
:class:`~beanwire.registry.ClassRegistry` or a dotted import path."""


@dataclass(frozen=True)
class InitOperation:
    """One post-construction step applied to a freshly built bean.

    Attributes:
        kind: ``"property"`` to assign an attribute, ``"call"`` to invoke a method.
        name: The attribute or method name.
        value: The value to assign, or the argument(s) to call with. May contain
            references, which are resolved just before the step runs.
    """

    kind: Literal["property", "call"]
    name: str
    value: Any


@dataclass(frozen=True)
class FactoryDefinition:
    """A bean built by calling ``factory`` with the container."""

    name: str
    factory: Callable[[Any], Any]


@dataclass(frozen=True)
class AliasDefinition:
    """A bean that forwards every request to the bean named ``target``."""

    name: str
    target: str


@dataclass(frozen=True)
class BeanDefinition:
    """A flattened, validated recipe for building and configuring a bean.

    Attributes:
        name: The bean name.
        cls: The class the instance must be (and, without a builder, is built from).
        builder: Optional callable building the instance from the constructor args.
        constructor_args: Positional (tuple) or keyword (dict) arguments, or None.
        init: Post-construction steps in declaration order.
        instanceof: Additional types the instance must satisfy.
    """

    name: str
    cls: ClassSpec
    builder: Optional[Callable[..., Any]] = None
    constructor_args: Union[tuple, dict, None] = None
    init: tuple[InitOperation, ...] = ()
    instanceof: tuple[ClassSpec, ...] = field(default_factory=tuple)


Definition = Union[FactoryDefinition, AliasDefinition, BeanDefinition]
