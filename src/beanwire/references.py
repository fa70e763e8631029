"""Finding and substituting bean references inside argument values.

Definitions refer to other beans through :class:`~beanwire.domain.Reference`
values (or :data:`~beanwire.domain.SELF` for the container itself), which may
sit anywhere inside constructor arguments and init values, including inside
nested lists, tuples, sets and dict values.

Definitions written as plain data can use string markers instead:
``"reference-to:db"`` and ``"reference-to:self"``. These are converted into
reference values once, by :func:`parse_references`, when the definition is
read, so that resolution never has to guess whether a string is data.
"""

import copy
from collections.abc import Mapping
from typing import Any, Callable

from beanwire.domain import SELF, Reference, SelfReference
from beanwire.errors import BeanInstantiationError

__all__ = [
    "REFERENCE_PREFIX",
    "SELF_MARKER",
    "ref",
    "parse_references",
    "resolve_references",
]

REFERENCE_PREFIX = "reference-to:"
SELF_MARKER = REFERENCE_PREFIX + "self"


def ref(bean_name: str) -> Reference:
    """Shorthand for ``Reference(bean_name)``."""
    return Reference(bean_name)


def parse_references(value: Any) -> Any:
    """Replace string reference markers in ``value`` with reference values.

    Example:
        >>> parse_references(["foo", "reference-to:db", {"me": "reference-to:self"}])
        ['foo', Reference(bean_name='db'), {'me': SELF}]
    """
    return _walk(value, _parse_marker)


def resolve_references(
    value: Any, get_bean: Callable[[str], Any], container: Any
) -> Any:
    """Substitute every reference in ``value``, depth-first and left to right.

    Args:
        value: A scalar, or a (possibly nested) list, tuple, set or mapping.
        get_bean: Looks up a bean by name; may build it.
        container: Substituted for :data:`~beanwire.domain.SELF`.

    Returns:
        ``value`` itself if it holds no references, otherwise a new value of the
        same type and shape with references replaced. ``value`` is never modified.

    Raises:
        BeanInstantiationError: If a set or other container cannot hold the
            resolved beans, for example an unhashable bean inside a set.
    """

    def substitute(item: Any) -> Any:
        if isinstance(item, SelfReference):
            return container
        if isinstance(item, Reference):
            return get_bean(item.bean_name)
        return item

    return _walk(value, substitute)


def _parse_marker(item: Any) -> Any:
    if not isinstance(item, str) or not item.startswith(REFERENCE_PREFIX):
        return item
    if item == SELF_MARKER:
        return SELF
    return Reference(item[len(REFERENCE_PREFIX):])


def _walk(value: Any, visit: Callable[[Any], Any]) -> Any:
    """Apply ``visit`` to every leaf of ``value``.

    Containers in which nothing changed are returned as they are; the others are
    rebuilt with their own type.
    """
    if isinstance(value, Mapping):
        walked = {key: _walk(item, visit) for key, item in value.items()}
        if all(walked[key] is item for key, item in value.items()):
            return value
        return _rebuilt_mapping(value, walked)

    if isinstance(value, (list, tuple, set, frozenset)):
        items = list(value)
        walked = [_walk(item, visit) for item in items]
        if all(new is old for new, old in zip(walked, items)):
            return value
        try:
            if isinstance(value, tuple) and hasattr(value, "_fields"):
                return type(value)(*walked)
            return type(value)(walked)
        except TypeError as e:
            raise BeanInstantiationError(
                f"Unable to hold resolved values in a {type(value).__name__}: {e}"
            ) from e

    return visit(value)


def _rebuilt_mapping(value: Mapping, walked: dict[Any, Any]) -> Mapping:
    if isinstance(value, dict):
        # A copy keeps dict subclass state such as a defaultdict's default_factory.
        rebuilt = copy.copy(value)
        for key, item in walked.items():
            rebuilt[key] = item
        return rebuilt
    try:
        return type(value)(walked)
    except TypeError:
        # Read-only mappings that cannot be built from a dict come back as dicts.
        return walked
