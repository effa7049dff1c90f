"""Local cache repositories."""

from app.repositories.local.cache import LocalCacheRepository

__all__ = [
    "LocalCacheRepository",
]
