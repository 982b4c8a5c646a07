"""Utility functions for audit logging and slugs"""
import logging
from django.utils.text import slugify
from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (create, update, delete, status_change, etc.)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object (e.g., project name, lead name)
    """
    try:
        audit_user = None
        if user:
            audit_user = user
        elif request and hasattr(request, 'user'):
            audit_user = request.user

        ip_address = get_client_ip(request) if request else None

        if not action or not model_name or not object_id:
            logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
            return None

        return AuditLog.objects.create(
            user=audit_user if audit_user and audit_user.is_authenticated else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=(object_name or '')[:255] or None,
            changes=changes or {},
            ip_address=ip_address
        )
    except Exception as e:
        # Don't fail the main operation if audit logging fails
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def unique_slug(model, value, instance_pk=None, field='slug', max_length=255):
    """
    Slugify ``value`` and append -2, -3, ... until it is unused on ``model``.
    The row being saved (``instance_pk``) does not count as a clash.
    """
    base = slugify(value)[:max_length] or 'item'
    candidate = base
    suffix = 2
    queryset = model.objects.all()
    if instance_pk:
        queryset = queryset.exclude(pk=instance_pk)
    while queryset.filter(**{field: candidate}).exists():
        tail = f'-{suffix}'
        candidate = f'{base[:max_length - len(tail)]}{tail}'
        suffix += 1
    return candidate


def get_by_identifier(queryset, identifier):
    """
    Fetch a row by primary key when ``identifier`` is numeric, falling back to
    the slug so digit-only slugs (a project called "2025") still resolve.
    """
    identifier = str(identifier)
    if identifier.isdigit():
        obj = queryset.filter(pk=int(identifier)).first()
        if obj is not None:
            return obj
    return queryset.filter(slug=identifier).first()
