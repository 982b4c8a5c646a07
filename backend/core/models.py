from django.contrib.auth.models import AbstractUser
from django.db import models


# Admin modules that role permissions are granted against
MODULES = [
    'dashboard',
    'projects',
    'blog',
    'pages',
    'leads',
    'site-visits',
    'cms',
    'seo',
    'menus',
    'gallery',
    'testimonials',
    'analytics',
    'users',
    'settings',
]

MODULE_ACTIONS = ['view', 'create', 'edit', 'delete']

SUPER_ADMIN_ROLE = 'Super Admin'


def empty_permissions():
    return {module: {action: False for action in MODULE_ACTIONS} for module in MODULES}


def full_permissions():
    return {module: {action: True for action in MODULE_ACTIONS} for module in MODULES}


def normalize_permissions(raw):
    """
    Build a complete permission map from user input.

    Accepts either the module map ``{module: {action: bool}}`` or the legacy
    flat list of module names (``['dashboard', 'leads']`` or ``['all']``),
    where each listed module is granted every action. Raises ValueError on
    unknown modules or actions.
    """
    if raw is None:
        return empty_permissions()

    if isinstance(raw, (list, tuple)):
        if 'all' in raw:
            return full_permissions()
        unknown = [m for m in raw if m not in MODULES]
        if unknown:
            raise ValueError(f"Unknown modules: {', '.join(sorted(map(str, unknown)))}")
        result = empty_permissions()
        for module in raw:
            result[module] = {action: True for action in MODULE_ACTIONS}
        return result

    if not isinstance(raw, dict):
        raise ValueError('Permissions must be an object keyed by module')

    result = empty_permissions()
    for module, actions in raw.items():
        if module not in MODULES:
            raise ValueError(f"Unknown module: {module}")
        if not isinstance(actions, dict):
            raise ValueError(f"Permissions for '{module}' must be an object")
        for action, allowed in actions.items():
            if action not in MODULE_ACTIONS:
                raise ValueError(f"Unknown action '{action}' for module '{module}'")
            result[module][action] = bool(allowed)
    return result


class Role(models.Model):
    """Admin roles with per-module permissions"""
    name = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True)
    permissions = models.JSONField(default=empty_permissions, blank=True)
    is_system = models.BooleanField(default=False, help_text="System roles cannot be deleted")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def get_permissions(self):
        if self.name == SUPER_ADMIN_ROLE:
            return full_permissions()
        try:
            return normalize_permissions(self.permissions)
        except ValueError:
            return empty_permissions()

    class Meta:
        db_table = 'roles'
        ordering = ['name']


class User(AbstractUser):
    """Extended user model with additional fields"""
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    role = models.ForeignKey(Role, on_delete=models.SET_NULL, null=True, blank=True, related_name='users')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'

    @property
    def has_full_access(self):
        if self.is_superuser:
            return True
        if self.role_id is None:
            # Staff without a role keep the access they had before roles existed
            return self.is_staff
        return self.role.name == SUPER_ADMIN_ROLE

    def get_module_permissions(self):
        if self.has_full_access:
            return full_permissions()
        if self.role_id is None:
            return empty_permissions()
        return self.role.get_permissions()

    def has_module_permission(self, module, action='view'):
        if not self.is_active:
            return False
        if self.has_full_access:
            return True
        return self.get_module_permissions().get(module, {}).get(action, False)

    @property
    def display_name(self):
        return self.get_full_name() or self.username


class Setting(models.Model):
    """Key-addressed JSON documents (site settings, menus, SEO, CMS blocks)"""
    key = models.CharField(max_length=100, unique=True)
    value = models.JSONField(default=dict, blank=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.key

    class Meta:
        db_table = 'settings'


class AuditLog(models.Model):
    """Audit log for admin operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('login', 'Login'),
        ('status_change', 'Status Change'),
        ('note_add', 'Note Added'),
        ('note_update', 'Note Updated'),
        ('note_delete', 'Note Deleted'),
        ('settings_update', 'Settings Updated'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., project name, lead name)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_idx'),
            models.Index(fields=['action'], name='audit_logs_action_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_idx'),
        ]
