"""Process-wide access to one configured container.

Prefer passing a :class:`~beanwire.container.BeanContainer` to the code that
needs it. Where that is impractical, the process can install a container here
with :func:`init` at startup and remove it with :func:`teardown` at shutdown::

    from beanwire import di

    di.init(make_container(definitions))
    try:
        di.test()
        serve(di.get("app"))
    finally:
        di.teardown()
"""

import logging
from typing import Any, Optional, Sequence

from beanwire.container import BeanContainer
from beanwire.errors import ContainerNotInitialisedError

__all__ = ["init", "teardown", "is_initialised", "get", "has_bean", "test"]

logger = logging.getLogger(__name__)

_container: Optional[BeanContainer] = None


def init(container: BeanContainer):
    """Install ``container`` as the process-wide container, replacing any other."""
    global _container
    if _container is not None and _container is not container:
        logger.debug("Replacing process-wide container %r", _container)
    _container = container
    logger.debug("Initialised process-wide container %r", container)


def teardown():
    """Remove the process-wide container; using this module afterwards raises."""
    global _container
    _container = None
    logger.debug("Tore down process-wide container")


def is_initialised() -> bool:
    return _container is not None


def get(bean_name: str) -> Any:
    return _current().get(bean_name)


def has_bean(bean_name: str) -> bool:
    return _current().has_bean(bean_name)


def test(bean_names: Optional[Sequence[str]] = None):
    _current().test(bean_names)


def _current() -> BeanContainer:
    if _container is None:
        raise ContainerNotInitialisedError(
            "No container installed: call beanwire.di.init() first"
        )
    return _container
