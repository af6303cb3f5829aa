"""
Storage backends.

Backends register a constructor under a type tag; create_backend looks the
tag up and rejects unknown tags explicitly.
"""

from typing import Any, Callable, Dict, List, Optional

from dbbench.core.errors import UnsupportedBackendError
from dbbench.storage.base import StorageBackend
from dbbench.storage.memory import MemoryBackend

BackendBuilder = Callable[[Dict[str, Any]], StorageBackend]

_BACKENDS: Dict[str, BackendBuilder] = {}


def register_backend(backend_type: str, builder: BackendBuilder) -> None:
    """Register (or replace) the builder for a backend type tag."""
    _BACKENDS[backend_type.strip().lower()] = builder


def available_backends() -> List[str]:
    return sorted(_BACKENDS)


def create_backend(backend_type: str, config: Optional[Dict[str, Any]] = None) -> StorageBackend:
    """
    Factory function to create the appropriate backend adapter.

    Raises:
        UnsupportedBackendError: no backend registered under backend_type
    """
    builder = _BACKENDS.get(str(backend_type or "").strip().lower())
    if builder is None:
        raise UnsupportedBackendError(backend_type)
    return builder(dict(config or {}))


register_backend(MemoryBackend.backend_type, MemoryBackend)

__all__ = [
    "StorageBackend",
    "MemoryBackend",
    "register_backend",
    "available_backends",
    "create_backend",
]
