"""
Caching utilities for expensive report queries and public listings.

Keys carry a per-prefix generation token; invalidating a prefix replaces the
token so every key built under the old one is ignored. This works on any
cache backend. With django-redis the stale keys are also deleted eagerly.
"""
from django.core.cache import cache
from functools import wraps
import hashlib
import logging
import uuid

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
DASHBOARD_CACHE_TTL = 300  # 5 minutes
PUBLIC_PROJECTS_CACHE_TTL = 600  # 10 minutes

DASHBOARD_PREFIX = 'dashboard_kpis'
PUBLIC_PROJECTS_PREFIX = 'public_projects'


def _generation_key(prefix):
    return f"{prefix}:generation"


def _new_generation():
    return uuid.uuid4().hex[:12]


def get_generation(prefix):
    """
    Current generation token for ``prefix``. A missing token (never set, or
    culled by LocMemCache) is replaced with a fresh random one, so keys from
    an earlier generation can never be matched again.
    """
    key = _generation_key(prefix)
    generation = cache.get(key)
    if generation is None:
        cache.add(key, _new_generation(), None)
        generation = cache.get(key) or _new_generation()
    return generation


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{get_generation(prefix)}:{key_hash}"


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive queries

    Usage:
        @cached_query(cache_ttl=120, key_prefix="dashboard_kpis")
        def build_dashboard(user_id):
            return data
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(*args, **kwargs)
            cache.set(cache_key, result, cache_ttl)
            return result
        return wrapper
    return decorator


def invalidate_cache_pattern(pattern):
    """
    Invalidate all cache keys built under ``pattern``.
    """
    cache.set(_generation_key(pattern), _new_generation(), None)

    try:
        from django_redis import get_redis_connection
        redis_conn = get_redis_connection("default")
    except Exception:
        # Not a Redis cache; the generation bump is enough
        return

    try:
        keys = []
        cursor = 0
        while True:
            cursor, partial_keys = redis_conn.scan(cursor, match=f"*{pattern}:*", count=100)
            keys.extend(k for k in partial_keys if not k.decode(errors='ignore').endswith(':generation'))
            if cursor == 0:
                break
        if keys:
            redis_conn.delete(*keys)
            logger.info(f"Invalidated {len(keys)} cache keys matching pattern: {pattern}")
    except Exception as e:
        logger.warning(f"Could not invalidate cache pattern {pattern}: {str(e)}")


def get_cached_public_projects(filters_dict):
    """
    Get cached public project list for a set of filters
    Returns tuple: (cached_data, cache_key)
    """
    cache_key = make_cache_key(PUBLIC_PROJECTS_PREFIX, **filters_dict)
    return cache.get(cache_key), cache_key


def cache_public_projects(cache_key, data, ttl=PUBLIC_PROJECTS_CACHE_TTL):
    cache.set(cache_key, data, ttl)
    logger.debug(f"Cached public project list: {cache_key}")


def invalidate_public_projects_cache():
    invalidate_cache_pattern(PUBLIC_PROJECTS_PREFIX)
    logger.info("Invalidated public projects cache")


def invalidate_dashboard_cache():
    """Invalidate dashboard KPIs cache"""
    invalidate_cache_pattern(DASHBOARD_PREFIX)
    logger.info("Invalidated dashboard cache")
