# src/cache/cache_factory.py - v3
"""Factory for state store instantiation."""

from __future__ import annotations

from smelltrack.cache.base_state_store import BaseStateStore
from smelltrack.config.settings import Settings


def create_state_store(
    settings: Settings | None = None,
    namespace: str = "default",
) -> BaseStateStore:
    """Instantiate the configured state backend.

    Args:
        settings: Application settings. Defaults to JSON backend.
        namespace: Workspace namespace the store is bound to.

    Returns:
        Configured BaseStateStore implementation.
    """
    backend = "json" if settings is None else settings.cache_backend
    cache_root = "~/.smelltrack/cache" if settings is None else str(settings.cache_root)

    if backend == "json":
        from smelltrack.cache.json_store import JsonStateStore
        return JsonStateStore(cache_root=cache_root, namespace=namespace)

    if backend == "sqlite":
        from smelltrack.cache.sqlite_store import SqliteStateStore
        db_path = f"{cache_root}/smelltrack_state.db"
        return SqliteStateStore(db_path=db_path, namespace=namespace)

    if backend == "redis":
        from smelltrack.cache.redis_store import RedisStateStore
        if settings is None or not settings.cache_redis_url:
            raise ValueError(
                "CACHE_REDIS_URL must be set when CACHE_BACKEND=redis"
            )
        return RedisStateStore(
            redis_url=settings.cache_redis_url, namespace=namespace
        )

    if backend == "memory":
        from smelltrack.cache.memory_store import MemoryStateStore
        return MemoryStateStore(namespace=namespace)

    raise ValueError(f"Unsupported cache backend: {backend!r}")
