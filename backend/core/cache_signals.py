"""
Cache invalidation signals
Automatically invalidate cache when data changes
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
from django.db import transaction
import logging
import threading
from contextlib import contextmanager

from .cache_utils import invalidate_dashboard_cache, invalidate_public_projects_cache

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()

# Models whose changes show up on the dashboard
DASHBOARD_MODELS = {'Lead', 'SiteVisit', 'Project', 'BlogPost', 'User'}

# Models whose changes show up in public project listings
PROJECT_LIST_MODELS = {'Project', 'ProjectCategory', 'Location'}


@contextmanager
def suspend_cache_signals():
    """
    Context manager to temporarily suspend cache invalidation signals.
    Useful for bulk operations (seeding, imports) to prevent excessive cache clearing.
    Remember to manually invalidate cache after the block!
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


@receiver([post_save, post_delete])
def invalidate_dashboard_on_change(sender, instance, **kwargs):
    """Invalidate dashboard KPIs when leads, visits, projects, posts or users change"""
    if is_suspended() or sender.__name__ not in DASHBOARD_MODELS:
        return
    try:
        # Invalidate after commit so the cache is not refilled with stale rows
        transaction.on_commit(invalidate_dashboard_cache)
    except Exception as e:
        logger.warning(f"Error in invalidate_dashboard_on_change signal: {e}")


@receiver([post_save, post_delete])
def invalidate_projects_on_change(sender, instance, **kwargs):
    """Invalidate public project listings when projects or their lookups change"""
    if is_suspended() or sender.__name__ not in PROJECT_LIST_MODELS:
        return
    try:
        transaction.on_commit(invalidate_public_projects_cache)
    except Exception as e:
        logger.warning(f"Error in invalidate_projects_on_change signal: {e}")
