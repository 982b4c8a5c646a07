import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.shortcuts import get_object_or_404
from django.db import IntegrityError
from django.db.models import Q
from .models import Role, Setting, AuditLog, MODULES
from .permissions import module_permission, module_for_setting, user_can
from .serializers import (
    UserSerializer, UserCreateSerializer, ProfileSerializer, ChangePasswordSerializer, RoleSerializer,
    SettingSerializer, AuditLogSerializer
)
from .utils import create_audit_log

User = get_user_model()

logger = logging.getLogger('backend.core')

# Sections of the site settings document that only settings managers may read
PRIVATE_SETTING_SECTIONS = {'settings': ['mail']}


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Accepts either the username or the account email in the username field"""

    def validate(self, attrs):
        login = (attrs.get(self.username_field) or '').strip()
        if '@' in login:
            match = User.objects.filter(email__iexact=login).first()
            if match:
                attrs[self.username_field] = match.get_username()
        data = super().validate(attrs)
        # Ensure user is active
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['email'] = user.email
        token['role'] = user.role.name if user.role_id else None
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        if response.status_code == status.HTTP_200_OK:
            user = User.objects.filter(pk=response.data['user']['id']).first()
            create_audit_log(request=request, user=user, action='login', model_name='User',
                             object_id=user.pk, object_name=user.username)
            logger.info(f"User {user.username} logged in")
        return response


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Custom token refresh serializer that handles deleted users gracefully"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    """Custom token refresh view that handles deleted users gracefully"""
    serializer_class = CustomTokenRefreshSerializer


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get the current user with role and effective module permissions, or update own profile"""
    user = request.user

    if request.method == 'PATCH':
        serializer = ProfileSerializer(user, data=request.data, partial=True)
        if not serializer.is_valid():
            logger.warning(f"Profile update validation failed: {serializer.errors}")
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer.save()
        create_audit_log(request=request, action='update', model_name='User',
                         object_id=user.pk, object_name=user.username, changes=serializer.validated_data)
        logger.info(f"User {user.username} updated their profile")

    user_data = UserSerializer(user).data
    permissions = user.get_module_permissions()

    user_data['permissions'] = permissions
    user_data['is_admin'] = user.has_full_access
    for module in MODULES:
        flag = 'can_access_' + module.replace('-', '_')
        user_data[flag] = permissions[module]['view']

    return Response(user_data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password(request):
    """Change the current user's password after checking the old one"""
    serializer = ChangePasswordSerializer(data=request.data, context={'request': request})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    user = serializer.save()
    create_audit_log(request=request, action='update', model_name='User',
                     object_id=user.pk, object_name=user.username, changes={'password': 'changed'})
    logger.info(f"User {user.username} changed their password")
    return Response({'message': 'Password changed successfully'})


# User views
@api_view(['GET', 'POST'])
@permission_classes([module_permission('users')])
def user_list_create(request):
    """List all users or create a new user"""
    if request.method == 'GET':
        users = User.objects.select_related('role').order_by('username')
        role_filter = request.query_params.get('role', None)
        if role_filter:
            users = users.filter(role_id=role_filter)
        serializer = UserSerializer(users, many=True)
        return Response(serializer.data)
    else:
        serializer = UserCreateSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            logger.info(f"User {request.user.username} created user {user.username}")
            create_audit_log(request=request, action='create', model_name='User',
                             object_id=user.pk, object_name=user.username)
            return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
        logger.warning(f"User creation validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([module_permission('users')])
def user_detail(request, pk):
    """Retrieve, update or delete a user"""
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        serializer = UserSerializer(user)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = UserSerializer(user, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            changes = {k: v for k, v in request.data.items() if k != 'password'}
            create_audit_log(request=request, action='update', model_name='User',
                             object_id=user.pk, object_name=user.username, changes=changes)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if user.pk == request.user.pk:
            return Response({'error': 'You cannot delete your own account'}, status=status.HTTP_400_BAD_REQUEST)
        logger.info(f"User {request.user.username} deleting user {user.username}")
        create_audit_log(request=request, action='delete', model_name='User',
                         object_id=user.pk, object_name=user.username)
        user.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Role views
@api_view(['GET', 'POST'])
@permission_classes([module_permission('users')])
def role_list_create(request):
    """List all roles or create a new role"""
    if request.method == 'GET':
        roles = Role.objects.all()
        serializer = RoleSerializer(roles, many=True)
        return Response(serializer.data)
    else:
        serializer = RoleSerializer(data=request.data)
        if serializer.is_valid():
            try:
                role = serializer.save()
            except IntegrityError:
                return Response({'error': 'A role with this name already exists'}, status=status.HTTP_400_BAD_REQUEST)
            create_audit_log(request=request, action='create', model_name='Role',
                             object_id=role.pk, object_name=role.name)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([module_permission('users')])
def role_detail(request, pk):
    """Retrieve, update or delete a role"""
    role = get_object_or_404(Role, pk=pk)

    if request.method == 'GET':
        return Response(RoleSerializer(role).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = RoleSerializer(role, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='Role',
                             object_id=role.pk, object_name=role.name, changes=request.data)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if role.is_system:
            return Response({'error': 'System roles cannot be deleted'}, status=status.HTTP_400_BAD_REQUEST)
        if role.users.exists():
            return Response({'error': 'Role is assigned to users. Reassign them before deleting it.'},
                            status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(request=request, action='delete', model_name='Role',
                         object_id=role.pk, object_name=role.name)
        role.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Settings documents
def _public_setting_value(request, key, value):
    """Strip private sections for callers who cannot manage settings"""
    private = PRIVATE_SETTING_SECTIONS.get(key)
    if not private or not isinstance(value, dict) or user_can(request.user, 'settings', 'view'):
        return value
    return {section: data for section, data in value.items() if section not in private}


@api_view(['GET'])
@permission_classes([module_permission('settings')])
def setting_list(request):
    """All settings documents as {key: value}"""
    documents = {s.key: s.value for s in Setting.objects.all().order_by('key')}
    return Response(documents)


@api_view(['GET', 'PUT'])
@permission_classes([AllowAny])
def setting_document(request, key):
    """
    Read or replace one settings document.

    Reads are public and return {} for unknown keys so clients can initialise
    forms. Writes need edit permission on the module that owns the key.
    """
    if request.method == 'GET':
        setting = Setting.objects.filter(key=key).first()
        if not setting:
            return Response({})
        return Response(_public_setting_value(request, key, setting.value))

    module = module_for_setting(key)
    if not request.user.is_authenticated:
        return Response({'detail': 'Authentication credentials were not provided.'},
                        status=status.HTTP_401_UNAUTHORIZED)
    if not user_can(request.user, module, 'edit'):
        logger.warning(f"User {request.user.username} attempted to update setting '{key}' without '{module}' permission")
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    if not isinstance(request.data, (dict, list)):
        return Response({'error': 'Settings value must be a JSON object or array'}, status=status.HTTP_400_BAD_REQUEST)

    setting, created = Setting.objects.update_or_create(key=key, defaults={'value': request.data})
    create_audit_log(request=request, action='settings_update', model_name='Setting',
                     object_id=setting.pk, object_name=key)
    logger.info(f"User {request.user.username} {'created' if created else 'updated'} setting '{key}'")
    if created:
        return Response({'message': 'Settings created', 'key': key}, status=status.HTTP_201_CREATED)
    return Response({'message': 'Settings updated', 'key': key})


def _setting_alias(key):
    def view(request):
        setting = Setting.objects.filter(key=key).first()
        return Response(setting.value if setting else {})
    view.__name__ = f"{key}_setting"
    view.__doc__ = f"Read the '{key}' settings document"
    return api_view(['GET'])(permission_classes([AllowAny])(view))


menus_setting = _setting_alias('menus')
cms_pages_setting = _setting_alias('cmsPages')
seo_settings_setting = _setting_alias('seoSettings')


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user')

    # Non-admins only see their own entries
    if not request.user.has_full_access:
        queryset = queryset.filter(user=request.user)

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    queryset = queryset.order_by('-created_at')[:500]
    serializer = AuditLogSerializer(queryset, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_detail(request, pk):
    """Retrieve an audit log"""
    audit_log = get_object_or_404(AuditLog, pk=pk)

    if not request.user.has_full_access and audit_log.user_id != request.user.pk:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    serializer = AuditLogSerializer(audit_log)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def global_search(request):
    """Search across the modules the user can view"""
    query = request.query_params.get('q', '').strip()

    results = {
        'projects': [],
        'leads': [],
        'blog_posts': [],
        'pages': [],
    }
    if not query:
        return Response(results)

    from backend.projects.models import Project
    from backend.leads.models import Lead
    from backend.blog.models import BlogPost
    from backend.cms.models import Page
    from backend.projects.serializers import ProjectListSerializer
    from backend.leads.serializers import LeadSerializer
    from backend.blog.serializers import BlogPostSerializer
    from backend.cms.serializers import PageSerializer

    user = request.user

    if user.has_module_permission('projects'):
        projects = Project.objects.select_related('category', 'location').filter(
            Q(name__icontains=query) |
            Q(rera_number__icontains=query) |
            Q(location__name__icontains=query)
        )[:20]
        results['projects'] = ProjectListSerializer(projects, many=True).data

    if user.has_module_permission('leads'):
        leads = Lead.objects.select_related('project').filter(
            Q(name__icontains=query) |
            Q(email__icontains=query) |
            Q(phone__icontains=query) |
            Q(project_interest__icontains=query)
        )[:20]
        results['leads'] = LeadSerializer(leads, many=True).data

    if user.has_module_permission('blog'):
        posts = BlogPost.objects.select_related('category').filter(
            Q(title__icontains=query) | Q(content__icontains=query)
        )[:20]
        results['blog_posts'] = BlogPostSerializer(posts, many=True).data

    if user.has_module_permission('pages'):
        pages = Page.objects.filter(
            Q(title__icontains=query) | Q(content__icontains=query)
        )[:20]
        results['pages'] = PageSerializer(pages, many=True).data

    return Response(results)
