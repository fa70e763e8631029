"""Building, checking and configuring bean instances.

This module provides the BeanBuilder class, which turns a
:class:`~beanwire.domain.BeanDefinition` into a live object: it calls the
builder or the class with the resolved constructor arguments, checks the result
against the declared types, then applies the definition's ``init`` steps in
order. References inside arguments are resolved through a callback, which is how
building one bean may build others.
"""

from contextlib import contextmanager
from typing import Any, Callable

from beanwire.domain import BeanDefinition, InitOperation
from beanwire.errors import BeanInstantiationError, DependencyError
from beanwire.registry import ClassRegistry

__all__ = ["BeanBuilder"]


class BeanBuilder:
    """Build bean instances from flattened definitions.

    Args:
        classes: Resolves the class names used in definitions.
        resolve: Substitutes references in an argument value.
    """

    def __init__(self, classes: ClassRegistry, resolve: Callable[[Any], Any]):
        self._classes = classes
        self._resolve = resolve

    def build(self, definition: BeanDefinition) -> Any:
        """Instantiate, check and configure the bean ``definition`` describes."""
        instance = self.instantiate(definition)
        self.check_instance(instance, definition)
        self.configure(instance, definition)
        return instance

    def instantiate(self, definition: BeanDefinition) -> Any:
        """Call the builder, or else the class, with the resolved constructor args.

        Returns:
            Whatever the builder or class returned.

        Raises:
            BeanInstantiationError: If the builder or constructor raises.
        """
        with _naming(definition.name):
            factory = definition.builder or self._classes.resolve(definition.cls)

        args, kwargs = (), {}
        if definition.constructor_args is not None:
            with _naming(definition.name):
                resolved = self._resolve(definition.constructor_args)
            if isinstance(resolved, dict):
                kwargs = resolved
            else:
                args = resolved

        return _invoke(definition.name, factory, args, kwargs)

    def check_instance(self, instance: Any, definition: BeanDefinition):
        """Ensure ``instance`` is an instance of every ``instanceof`` type and of ``class``.

        Raises:
            BeanInstantiationError: If ``instance`` is None or fails a check.
        """
        if instance is None:
            raise BeanInstantiationError(
                f"Failed to create instance for bean '{definition.name}'",
                definition.name,
            )

        for class_spec in definition.instanceof + (definition.cls,):
            with _naming(definition.name):
                required_type = self._classes.resolve(class_spec)
            if not isinstance(instance, required_type):
                raise BeanInstantiationError(
                    f"Bean instance check failed: '{definition.name}' is not an "
                    f"instance of {required_type.__qualname__} "
                    f"(got {type(instance).__qualname__})",
                    definition.name,
                )

    def configure(self, instance: Any, definition: BeanDefinition):
        """Apply the definition's ``init`` steps to ``instance``, in order."""
        for operation in definition.init:
            self._apply(instance, definition.name, operation)

    def _apply(self, instance: Any, bean_name: str, operation: InitOperation):
        with _naming(bean_name):
            value = self._resolve(operation.value)

        if operation.kind == "property":
            try:
                setattr(instance, operation.name, value)
            except DependencyError:
                raise
            except Exception as e:
                raise BeanInstantiationError(
                    f"Failed to set property '{operation.name}' of bean '{bean_name}': {e}",
                    bean_name,
                ) from e
            return

        method = getattr(instance, operation.name, None)
        if not callable(method):
            raise BeanInstantiationError(
                f"Bean '{bean_name}' has no method '{operation.name}'", bean_name
            )
        if isinstance(value, (list, tuple)):
            _invoke(bean_name, method, value, {})
        else:
            _invoke(bean_name, method, (value,), {})


@contextmanager
def _naming(bean_name: str):
    """Attach ``bean_name`` to container errors raised without one."""
    try:
        yield
    except DependencyError as e:
        if e.bean_name is not None:
            raise
        raise type(e)(f"Bean '{bean_name}': {e}", bean_name) from e


def _invoke(bean_name: str, func: Callable, args, kwargs: dict[str, Any]) -> Any:
    try:
        return func(*args, **kwargs)
    except DependencyError:
        raise
    except Exception as e:
        raise BeanInstantiationError(
            f"Failed to create bean '{bean_name}': "
            f"{getattr(func, '__qualname__', func)} raised {type(e).__name__}: {e}",
            bean_name,
        ) from e
