"""Lookup, inheritance flattening and validation of bean definitions.

A raw definition is either a callable, invoked with the container to produce the
bean, or a mapping with some of the fields below::

    {
        "class": "app.storage.Database",    # mandatory unless alias or abstract
        "builder": make_database,           # optional, called instead of the class
        "constructor_args": ["reference-to:config"],  # or a dict of keyword args
        "init": {"prop:timeout": 30, "connect": []},
        "instanceof": ["app.storage.Storage"],
        "extends": "base_database",         # parent must be abstract
        "abstract": False,
        "alias": "other_bean",              # must be the only field
    }

A definition that ``extends`` another is merged over its (recursively flattened)
parent, field by field; ``abstract`` is never inherited. The result is validated
and converted into one of the typed variants in :mod:`beanwire.domain`.
"""

from collections.abc import Mapping
from typing import Any, Iterable

from beanwire.domain import (
    AliasDefinition,
    BeanDefinition,
    Definition,
    FactoryDefinition,
    InitOperation,
)
from beanwire.errors import InvalidDefinitionError, NoDefinitionFoundError
from beanwire.references import parse_references

__all__ = ["DefinitionResolver", "FIELDS", "PROPERTY_PREFIX", "CALL_PREFIX"]

FIELDS = frozenset(
    {
        "class",
        "builder",
        "constructor_args",
        "init",
        "instanceof",
        "extends",
        "abstract",
        "alias",
    }
)

_FIELD_SPELLINGS = {"constructorArgs": "constructor_args"}

PROPERTY_PREFIX = "prop:"
CALL_PREFIX = "call:"


class DefinitionResolver:
    """Resolves bean names to flattened, validated definitions.

    Args:
        definitions: Raw definitions keyed by bean name. The mapping is copied.
        string_references: Whether string markers such as ``"reference-to:db"`` in
            argument values are read as references.
    """

    def __init__(self, definitions: Mapping[str, Any], string_references: bool = True):
        self._definitions = dict(definitions)
        self._string_references = string_references

    def __contains__(self, bean_name: str) -> bool:
        return bean_name in self._definitions

    def names_to_test(self) -> list[str]:
        """Names of every definition that can be built directly, in declaration order."""
        return [
            bean_name
            for bean_name, raw in self._definitions.items()
            if callable(raw) or not (isinstance(raw, Mapping) and raw.get("abstract"))
        ]

    def definition_for(self, bean_name: str) -> Definition:
        """Return the typed definition of a directly buildable bean.

        Raises:
            NoDefinitionFoundError: If there is no definition named ``bean_name``.
            InvalidDefinitionError: If the definition, or any parent, is malformed.
        """
        raw = self.resolve(bean_name)
        if callable(raw):
            return FactoryDefinition(bean_name, raw)
        if raw.get("alias"):
            return AliasDefinition(bean_name, raw["alias"])
        return self._bean_definition(bean_name, raw)

    def resolve(self, bean_name: str, abstract: bool = False, _chain: tuple = ()) -> Any:
        """Look up a raw definition and flatten its ``extends`` chain.

        Args:
            bean_name: The definition to resolve.
            abstract: True when the definition is being resolved as the parent of
                another, in which case it must be marked abstract.

        Returns:
            The callable definition, or the merged definition mapping with
            ``extends`` removed.
        """
        if bean_name not in self._definitions:
            raise NoDefinitionFoundError(
                f"Failed to locate definition for bean '{bean_name}'", bean_name
            )
        if bean_name in _chain:
            raise InvalidDefinitionError(
                f"Definition for '{bean_name}' extends itself: "
                f"{' -> '.join(_chain + (bean_name,))}",
                bean_name,
            )

        definition = self._definitions[bean_name]
        if isinstance(definition, Mapping):
            definition = _normalised(definition)
            parent_name = definition.pop("extends", None)
            if parent_name:
                parent = self.resolve(parent_name, True, _chain + (bean_name,))
                parent.pop("abstract", None)
                definition = {**parent, **definition}

        _check_definition(bean_name, definition, abstract)
        return definition

    def _bean_definition(self, bean_name: str, raw: dict[str, Any]) -> BeanDefinition:
        constructor_args = raw.get("constructor_args") or None
        if constructor_args is not None:
            if isinstance(constructor_args, Mapping):
                constructor_args = dict(constructor_args)
            elif isinstance(constructor_args, (list, tuple)):
                constructor_args = tuple(constructor_args)
            else:
                raise InvalidDefinitionError(
                    f"Definition for bean '{bean_name}' has 'constructor_args' "
                    "that are neither a list nor a mapping",
                    bean_name,
                )
            constructor_args = self._parsed(constructor_args)

        builder = raw.get("builder") or None
        if builder is not None and not callable(builder):
            raise InvalidDefinitionError(
                f"Builder for bean '{bean_name}' is not callable", bean_name
            )

        instanceof = raw.get("instanceof") or ()
        if not isinstance(instanceof, (list, tuple, set, frozenset)):
            instanceof = (instanceof,)

        return BeanDefinition(
            bean_name,
            raw["class"],
            builder,
            constructor_args,
            tuple(
                InitOperation(kind, name, self._parsed(value))
                for kind, name, value in _init_operations(bean_name, raw.get("init"))
            ),
            tuple(instanceof),
        )

    def _parsed(self, value: Any) -> Any:
        return parse_references(value) if self._string_references else value


def _normalised(definition: Mapping[str, Any]) -> dict[str, Any]:
    return {_FIELD_SPELLINGS.get(key, key): value for key, value in definition.items()}


def _check_definition(bean_name: str, definition: Any, abstract: bool):
    if abstract and not (isinstance(definition, Mapping) and definition.get("abstract")):
        raise InvalidDefinitionError(
            f"Definition for '{bean_name}' must be abstract", bean_name
        )

    if callable(definition):
        return

    if not isinstance(definition, Mapping):
        raise InvalidDefinitionError(
            f"Definition for '{bean_name}' must be a mapping or a callable, "
            f"not {type(definition).__name__}",
            bean_name,
        )

    unknown = definition.keys() - FIELDS
    if unknown:
        raise InvalidDefinitionError(
            f"Definition for '{bean_name}' has unknown entries {sorted(unknown)}",
            bean_name,
        )

    if definition.get("alias"):
        if len(definition) > 1:
            raise InvalidDefinitionError(
                f"Definition for '{bean_name}' must only have the 'alias' entry",
                bean_name,
            )
    elif not abstract:
        if definition.get("abstract"):
            raise InvalidDefinitionError(
                f"Definition for bean '{bean_name}' can not be abstract", bean_name
            )
        if not definition.get("class"):
            raise InvalidDefinitionError(
                f"Definition for bean '{bean_name}' must have a 'class' entry",
                bean_name,
            )


def _init_operations(bean_name: str, init: Any) -> Iterable[tuple[str, str, Any]]:
    """Split ``init`` entries into (kind, name, value), in declaration order.

    ``init`` may be a mapping of operation to value, or a sequence of entries when
    the same operation has to run more than once. Each entry is an
    ``(operation, value)`` pair or a single-entry mapping ``{operation: value}``.
    """
    if not init:
        return []
    entries = init.items() if isinstance(init, Mapping) else init

    operations = []
    for entry in entries:
        if isinstance(entry, Mapping):
            if len(entry) != 1:
                raise InvalidDefinitionError(
                    f"Init entry {entry!r} for bean '{bean_name}' must map exactly "
                    "one operation to its value",
                    bean_name,
                )
            pair = next(iter(entry.items()))
        elif isinstance(entry, str):
            # A two-character string would otherwise unpack as a pair.
            pair = None
        else:
            pair = entry
        try:
            operation, value = pair
        except (TypeError, ValueError):
            raise InvalidDefinitionError(
                f"Init entry {entry!r} for bean '{bean_name}' is not an (operation, value) pair",
                bean_name,
            ) from None
        if not isinstance(operation, str) or not operation:
            raise InvalidDefinitionError(
                f"Init operation {operation!r} for bean '{bean_name}' is not a name",
                bean_name,
            )

        if operation.startswith(PROPERTY_PREFIX):
            operations.append(("property", operation[len(PROPERTY_PREFIX):], value))
        elif operation.startswith(CALL_PREFIX):
            operations.append(("call", operation[len(CALL_PREFIX):], value))
        else:
            operations.append(("call", operation, value))
    return operations
