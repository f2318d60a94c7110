# shared/common/cache.py
"""
Caching helpers on top of the Django cache framework.

The backend is configured per service (django-redis in production,
locmem in tests).
"""

import logging
from functools import wraps

from django.core.cache import cache

logger = logging.getLogger(__name__)


# =============================================================================
# CACHING DECORATORS
# =============================================================================

def cached(
    key_prefix: str,
    timeout: int = 300,
    key_func=None
):
    """
    Decorator for caching function results.

    Usage:
        @cached('business:slug', timeout=600, key_func=lambda slug: slug)
        def get_business(slug):
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if key_func:
                cache_key = f"{key_prefix}:{key_func(*args, **kwargs)}"
            else:
                key_parts = [str(arg) for arg in args]
                key_parts.extend([f"{k}={v}" for k, v in sorted(kwargs.items())])
                cache_key = f"{key_prefix}:{':'.join(key_parts)}"

            try:
                result = cache.get(cache_key)
            except Exception as e:
                logger.error(f"Cache read error for {cache_key}: {e}")
                result = None

            if result is not None:
                return result

            result = func(*args, **kwargs)

            try:
                cache.set(cache_key, result, timeout)
            except Exception as e:
                logger.error(f"Cache write error for {cache_key}: {e}")

            return result
        return wrapper
    return decorator


def cache_invalidate(*keys: str) -> None:
    """Delete cache keys, logging rather than raising on backend errors."""
    try:
        cache.delete_many(list(keys))
    except Exception as e:
        logger.error(f"Cache invalidation error: {e}")


class CacheKeyBuilder:
    """
    Helper class for building consistent cache keys.
    """

    def __init__(self, service_name: str):
        self.service_name = service_name

    def build(self, *parts: str) -> str:
        """Build cache key from parts"""
        return f"{self.service_name}:{':'.join(str(p) for p in parts)}"
