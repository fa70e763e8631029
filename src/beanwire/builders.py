"""High level entry point for constructing containers."""

from collections.abc import Mapping
from typing import Any, Union

from beanwire.container import Container
from beanwire.registry import ClassRegistry

__all__ = ["make_container"]


def make_container(
    definitions: Mapping[str, Any],
    classes: Union[ClassRegistry, Mapping[str, type], None] = None,
    string_references: bool = True,
) -> Container:
    """Create a :class:`Container` for the given definitions.

    Nothing is built here: beans are created the first time they are requested.
    Call :meth:`Container.test` on the result to build everything up front.

    Args:
        definitions: Raw bean definitions keyed by bean name. The mapping is copied,
            so later changes to it do not affect the container.
        classes: An optional :class:`ClassRegistry`, or mapping of class names to
            classes, used to resolve the ``class`` and ``instanceof`` entries of
            definitions. Names it does not know are imported as dotted paths.
        string_references: Whether ``"reference-to:<bean>"`` and
            ``"reference-to:self"`` strings in argument values are references.

    Returns:
        The configured :class:`Container`.

    Example:
        >>> container = make_container({"clock": {"class": "datetime.datetime",
        ...                                       "builder": datetime.now}})
        >>> container.get("clock")
    """
    return Container(definitions, classes, string_references)
