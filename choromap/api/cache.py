"""In-memory TTL cache for results that are costly to rebuild per request."""

from __future__ import annotations

import time
from functools import wraps
from typing import Any, Callable

_registry: list[dict[Any, tuple[float, Any]]] = []


def ttl_cache(ttl: float | Callable[[], float]):
    """Cache a function's return value for *ttl* seconds per argument tuple.

    *ttl* may be a callable so the lifetime can follow live configuration.
    The wrapper gets a ``cache_clear()`` method.
    """
    def decorator(func: Callable) -> Callable:
        store: dict[Any, tuple[float, Any]] = {}
        _registry.append(store)

        @wraps(func)
        def wrapper(*args, **kwargs):
            key = (args, tuple(sorted(kwargs.items())))
            now = time.monotonic()
            hit = store.get(key)
            if hit is not None and now < hit[0]:
                return hit[1]
            lifetime = ttl() if callable(ttl) else ttl
            result = func(*args, **kwargs)
            store[key] = (now + lifetime, result)
            return result

        wrapper.cache_clear = store.clear
        return wrapper
    return decorator


def clear_all() -> int:
    """Flush every ttl_cache. Returns the number of evicted entries."""
    count = sum(len(store) for store in _registry)
    for store in _registry:
        store.clear()
    return count
