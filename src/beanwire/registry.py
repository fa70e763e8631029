"""Registration and lookup of the classes named in bean definitions."""

import importlib
import inspect
from collections.abc import Mapping
from typing import Callable, Optional

from beanwire.domain import ClassSpec
from beanwire.errors import InvalidDefinitionError

__all__ = ["ClassRegistry", "inferred_name"]


def inferred_name(target: type) -> str:
    """Derive the registry name of a class from its own name.

    Example:
        >>> inferred_name(Database)  # Returns "Database"
    """
    return target.__name__


class ClassRegistry:
    """Maps the class names used in definitions to Python types.

    A name is looked up among the explicitly registered classes first. Names that
    were never registered are treated as import paths, either ``package.module.Class``
    or ``package.module:Class`` (nested classes may follow, as in ``module:Outer.Inner``).

    Example:
        >>> classes = ClassRegistry()
        >>>
        >>> @classes.provides()
        >>> class Widget:
        ...     pass
        >>>
        >>> classes.resolve("Widget")                  # Widget
        >>> classes.resolve("collections.OrderedDict") # imported on demand
    """

    def __init__(self, classes: Optional[Mapping[str, type]] = None):
        self._classes: dict[str, type] = {}
        for name, cls in (classes or {}).items():
            self.register(name, cls)

    def register(self, name: str, cls: type):
        """Register a class explicitly under ``name``.

        Raises:
            InvalidDefinitionError: If ``cls`` is not a class, or ``name`` is already
                taken by a different class.
        """
        if not inspect.isclass(cls):
            raise InvalidDefinitionError(f"{cls!r} registered as {name!r} is not a class")
        existing = self._classes.get(name)
        if existing is not None and existing is not cls:
            raise InvalidDefinitionError(
                f"Duplicate class name {name!r} for {existing!r} and {cls!r}"
            )
        self._classes[name] = cls

    def provides(self, name: Optional[str] = None) -> Callable:
        """Decorator to register a class under ``name``, defaulting to its own name.

        Example:
            @classes.provides("storage.Cache")
            class RedisCache:
                ...
        """

        def decorator(cls):
            self.register(name or inferred_name(cls), cls)
            return cls

        return decorator

    def __contains__(self, name: str) -> bool:
        return name in self._classes

    def resolve(self, target: ClassSpec) -> type:
        """Return the class ``target`` names, or ``target`` itself if it is already a type.

        Raises:
            InvalidDefinitionError: If the name is neither registered nor importable,
                or does not name a class.
        """
        if isinstance(target, type):
            return target
        if not isinstance(target, str) or not target:
            raise InvalidDefinitionError(f"{target!r} is not a class or class name")
        if target in self._classes:
            return self._classes[target]

        resolved = _import_class(target)
        if not inspect.isclass(resolved):
            raise InvalidDefinitionError(f"{target!r} does not name a class")
        return resolved


def _import_class(path: str):
    if ":" in path:
        module_name, _, qualified_name = path.partition(":")
        return _lookup(path, _import_module(path, module_name), qualified_name)

    # Without an explicit separator, import the longest importable module prefix.
    parts = path.split(".")
    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        try:
            module = _import_module(path, module_name)
        except InvalidDefinitionError as e:
            if _is_missing(module_name, e.__cause__):
                continue
            raise
        return _lookup(path, module, ".".join(parts[split:]))

    raise InvalidDefinitionError(f"Unable to resolve class {path!r}")


def _import_module(path: str, module_name: str):
    try:
        return importlib.import_module(module_name)
    except Exception as e:
        raise InvalidDefinitionError(
            f"Unable to resolve class {path!r}: importing {module_name!r} "
            f"raised {type(e).__name__}: {e}"
        ) from e


def _is_missing(module_name: str, error: BaseException) -> bool:
    """Whether ``error`` reports ``module_name`` itself (or a parent package) as absent,
    rather than a module that ``module_name`` failed to import."""
    if not isinstance(error, ModuleNotFoundError) or error.name is None:
        return False
    return module_name == error.name or module_name.startswith(error.name + ".")


def _lookup(path: str, module, qualified_name: str):
    target = module
    for attribute in qualified_name.split("."):
        try:
            target = getattr(target, attribute)
        except AttributeError:
            raise InvalidDefinitionError(f"Unable to resolve class {path!r}") from None
    return target
