"""
Role-based access checks for admin modules.

Request methods map onto module actions: safe methods need ``view``, POST needs
``create``, PUT/PATCH need ``edit`` and DELETE needs ``delete``.
"""
from rest_framework.permissions import BasePermission, SAFE_METHODS

METHOD_ACTIONS = {
    'GET': 'view',
    'HEAD': 'view',
    'OPTIONS': 'view',
    'POST': 'create',
    'PUT': 'edit',
    'PATCH': 'edit',
    'DELETE': 'delete',
}

# Settings documents and the module that owns each of them
SETTING_KEY_MODULES = {
    'menus': 'menus',
    'cmsPages': 'cms',
    'seoSettings': 'seo',
    'indexing': 'seo',
}


def action_for_method(method):
    return METHOD_ACTIONS.get(method.upper(), 'view')


def module_for_setting(key):
    return SETTING_KEY_MODULES.get(key, 'settings')


def user_can(user, module, action='view'):
    """True when an authenticated, active user holds ``action`` on ``module``"""
    if not user or not user.is_authenticated:
        return False
    return user.has_module_permission(module, action)


class ModulePermission(BasePermission):
    module = None
    public_read = False
    public_create = False
    message = 'You do not have permission to perform this action.'

    def has_permission(self, request, view):
        if self.public_read and request.method in SAFE_METHODS:
            return True
        if self.public_create and request.method == 'POST':
            return True
        return user_can(request.user, self.module, action_for_method(request.method))


def module_permission(module, public_read=False, public_create=False):
    """
    Build a permission class bound to one admin module.

    Usage:
        @permission_classes([module_permission('projects', public_read=True)])
    """
    name = ''.join(part.capitalize() for part in module.split('-')) + 'ModulePermission'
    return type(name, (ModulePermission,), {
        'module': module,
        'public_read': public_read,
        'public_create': public_create,
    })
