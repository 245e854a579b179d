"""Cache service module.

Provides the abstract cache interface plus Redis and in-memory backends.
"""

from .service import CacheService, InMemoryCacheService, RedisCacheService

__all__ = [
    "CacheService",
    "InMemoryCacheService",
    "RedisCacheService",
]
