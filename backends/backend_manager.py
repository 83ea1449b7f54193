import logging
from typing import Dict, NamedTuple, Type

from backends.backend_base import Backend
from backends.cpu_backend import CpuBackend
from backends.python_backend import PythonBackend
from utils.enums import BackendType
from utils.errors import InvalidParameter

logger = logging.getLogger(__name__)


class BackendSpec(NamedTuple):
    cls: Type[Backend]
    priority: int


BACKENDS: Dict[str, BackendSpec] = {
    "CPU": BackendSpec(cls=CpuBackend, priority=10),
    "PYTHON": BackendSpec(cls=PythonBackend, priority=0),
}


def available_backends():
    """Backend names ordered by preference (highest priority first)."""
    return sorted(BACKENDS, key=lambda name: BACKENDS[name].priority, reverse=True)


def select_backend(kind: BackendType = BackendType.AUTO) -> Backend:
    if kind == BackendType.AUTO:
        name = available_backends()[0]
    else:
        name = kind.name
    try:
        spec = BACKENDS[name]
    except KeyError:
        raise InvalidParameter(f"Unknown backend: {kind!r}") from None
    logger.debug("Selected backend %s for %s", name, kind.name)
    return spec.cls()
