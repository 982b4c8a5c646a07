"""
Test suite for core: authentication, roles and permissions, settings
documents, audit logs, global search, caching helpers and management commands
"""
from io import StringIO
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase, SimpleTestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.models import (
    Role, Setting, AuditLog, MODULES, normalize_permissions, full_permissions
)
from backend.core.permissions import action_for_method, module_for_setting
from backend.core.cache_utils import (
    get_cached_public_projects, cache_public_projects, invalidate_public_projects_cache,
    cached_query, get_generation, PUBLIC_PROJECTS_PREFIX
)
from backend.core.utils import unique_slug, get_by_identifier
from backend.projects.models import Project, ProjectCategory
from backend.locations.models import Location

User = get_user_model()


class PermissionHelperTests(SimpleTestCase):
    """Test permission map normalisation and method mapping"""

    def test_legacy_module_list(self):
        perms = normalize_permissions(['dashboard', 'leads'])
        self.assertTrue(perms['leads']['delete'])
        self.assertTrue(perms['dashboard']['view'])
        self.assertFalse(perms['blog']['view'])
        self.assertEqual(set(perms.keys()), set(MODULES))

    def test_all_grants_everything(self):
        self.assertEqual(normalize_permissions(['all']), full_permissions())

    def test_partial_map_is_completed(self):
        perms = normalize_permissions({'blog': {'view': True, 'edit': True}})
        self.assertTrue(perms['blog']['edit'])
        self.assertFalse(perms['blog']['delete'])
        self.assertFalse(perms['projects']['view'])

    def test_unknown_module_rejected(self):
        with self.assertRaises(ValueError):
            normalize_permissions(['payroll'])
        with self.assertRaises(ValueError):
            normalize_permissions({'blog': {'publish': True}})

    def test_method_actions(self):
        self.assertEqual(action_for_method('GET'), 'view')
        self.assertEqual(action_for_method('post'), 'create')
        self.assertEqual(action_for_method('PATCH'), 'edit')
        self.assertEqual(action_for_method('DELETE'), 'delete')

    def test_setting_modules(self):
        self.assertEqual(module_for_setting('cmsPages'), 'cms')
        self.assertEqual(module_for_setting('seoSettings'), 'seo')
        self.assertEqual(module_for_setting('whatsapp'), 'settings')


class UserPermissionTests(TestCase):
    """Test effective module permissions on users"""

    def test_superuser_has_full_access(self):
        user = TestDataFactory.create_admin()
        self.assertTrue(user.has_module_permission('users', 'delete'))

    def test_super_admin_role_has_full_access(self):
        role = TestDataFactory.create_role(name='Super Admin', permissions=[])
        user = TestDataFactory.create_user(role=role)
        self.assertTrue(user.has_full_access)
        self.assertTrue(user.has_module_permission('settings', 'edit'))

    def test_role_limits_access(self):
        user = TestDataFactory.create_user(modules=['leads'])
        self.assertTrue(user.has_module_permission('leads', 'edit'))
        self.assertFalse(user.has_module_permission('projects', 'view'))

    def test_plain_user_without_role_has_no_access(self):
        user = TestDataFactory.create_user()
        self.assertFalse(user.has_module_permission('dashboard'))

    def test_inactive_user_has_no_access(self):
        user = TestDataFactory.create_user(modules=['leads'])
        user.is_active = False
        self.assertFalse(user.has_module_permission('leads'))


class AuthAPITests(TestCase):
    """Test login, refresh and current user endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(username='priya', email='priya@example.com',
                                                modules=['leads', 'site-visits'])

    def test_login_with_username(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'priya', 'password': 'testpass123'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['username'], 'priya')

    def test_login_with_email(self):
        response = self.client.post('/api/v1/auth/login/',
                                    {'username': 'PRIYA@example.com', 'password': 'testpass123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_login_is_audited(self):
        self.client.post('/api/v1/auth/login/', {'username': 'priya', 'password': 'testpass123'}, format='json')
        self.assertTrue(AuditLog.objects.filter(action='login', user=self.user).exists())

    def test_login_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'priya', 'password': 'wrong'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh(self):
        login = self.client.post('/api/v1/auth/login/', {'username': 'priya', 'password': 'testpass123'},
                                 format='json')
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': login.data['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_refresh_with_garbage_token(self):
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': 'not-a-token'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_reports_module_flags(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['can_access_leads'])
        self.assertTrue(response.data['can_access_site_visits'])
        self.assertFalse(response.data['can_access_projects'])
        self.assertFalse(response.data['is_admin'])
        self.assertTrue(response.data['permissions']['leads']['delete'])

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class ProfileAPITests(TestCase):
    """Test a signed-in user managing their own account"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(username='meera', email='meera@example.com',
                                                modules=['blog'])
        self.client.authenticate_user(self.user)

    def test_update_own_profile(self):
        response = self.client.patch('/api/v1/auth/me/',
                                     {'first_name': 'Meera', 'last_name': 'Nair', 'email': 'meera.nair@example.com'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], 'meera.nair@example.com')
        self.assertTrue(response.data['can_access_blog'])
        self.user.refresh_from_db()
        self.assertEqual(self.user.last_name, 'Nair')

    def test_profile_cannot_change_role_or_staff_flags(self):
        response = self.client.patch('/api/v1/auth/me/', {'is_staff': True, 'role': None}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertFalse(self.user.is_staff)
        self.assertIsNotNone(self.user.role_id)

    def test_profile_email_must_be_unique(self):
        TestDataFactory.create_user(email='taken@example.com')
        response = self.client.patch('/api/v1/auth/me/', {'email': 'TAKEN@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_profile_email_cannot_be_blank(self):
        response = self.client.patch('/api/v1/auth/me/', {'email': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_change_password(self):
        data = {'current_password': 'testpass123', 'new_password': 'N3wSecret!2025',
                'confirm_password': 'N3wSecret!2025'}
        response = self.client.post('/api/v1/auth/change-password/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('N3wSecret!2025'))

    def test_change_password_wrong_current(self):
        data = {'current_password': 'not-it', 'new_password': 'N3wSecret!2025',
                'confirm_password': 'N3wSecret!2025'}
        response = self.client.post('/api/v1/auth/change-password/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('current_password', response.data)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('testpass123'))

    def test_change_password_mismatch(self):
        data = {'current_password': 'testpass123', 'new_password': 'N3wSecret!2025',
                'confirm_password': 'Other!2025x'}
        response = self.client.post('/api/v1/auth/change-password/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('confirm_password', response.data)

    def test_change_password_runs_validators(self):
        data = {'current_password': 'testpass123', 'new_password': '123', 'confirm_password': '123'}
        response = self.client.post('/api/v1/auth/change-password/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('new_password', response.data)

    def test_change_password_requires_authentication(self):
        self.client.logout()
        response = self.client.post('/api/v1/auth/change-password/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class UserAndRoleAPITests(TestCase):
    """Test user and role management endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_user(self):
        role = TestDataFactory.create_role(name='Sales', permissions=['leads'])
        data = {
            'username': 'ravi',
            'email': 'ravi@example.com',
            'password': 'Str0ngPass!2024',
            'password_confirm': 'Str0ngPass!2024',
            'role': role.id,
        }
        response = self.client.post('/api/v1/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['role_name'], 'Sales')
        self.assertNotIn('password', response.data)
        self.assertTrue(response.data['is_staff'])

    def test_create_user_password_mismatch(self):
        data = {
            'username': 'ravi',
            'email': 'ravi@example.com',
            'password': 'Str0ngPass!2024',
            'password_confirm': 'Different!2024',
        }
        response = self.client.post('/api/v1/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cannot_delete_self(self):
        response = self.client.delete(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_user_requires_role(self):
        data = {
            'username': 'newbie',
            'email': 'newbie@example.com',
            'password': 'Str0ngPass!2024',
            'password_confirm': 'Str0ngPass!2024',
        }
        response = self.client.post('/api/v1/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('role', response.data)
        self.assertFalse(User.objects.filter(username='newbie').exists())

    def test_update_cannot_clear_role(self):
        staff = TestDataFactory.create_user(is_staff=True, modules=['leads'])
        response = self.client.patch(f'/api/v1/users/{staff.id}/', {'role': None}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        staff.refresh_from_db()
        self.assertIsNotNone(staff.role_id)
        self.client.authenticate_user(staff)
        self.assertEqual(self.client.get('/api/v1/users/').status_code, status.HTTP_403_FORBIDDEN)

    def test_users_module_required(self):
        staff = TestDataFactory.create_user(modules=['leads'])
        self.client.authenticate_user(staff)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_role_with_module_map(self):
        data = {'name': 'Editor', 'permissions': {'blog': {'view': True, 'create': True, 'edit': True}}}
        response = self.client.post('/api/v1/roles/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['permissions']['blog']['delete'])
        self.assertFalse(response.data['permissions']['leads']['view'])

    def test_create_role_unknown_module(self):
        response = self.client.post('/api/v1/roles/', {'name': 'Bad', 'permissions': ['warehouse']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_system_role_cannot_be_deleted(self):
        role = TestDataFactory.create_role(name='Staff', permissions=['leads'], is_system=True)
        response = self.client.delete(f'/api/v1/roles/{role.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Role.objects.filter(pk=role.pk).exists())

    def test_assigned_role_cannot_be_deleted(self):
        role = TestDataFactory.create_role(permissions=['leads'])
        TestDataFactory.create_user(role=role)
        response = self.client.delete(f'/api/v1/roles/{role.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_unused_role(self):
        role = TestDataFactory.create_role(permissions=['leads'])
        response = self.client.delete(f'/api/v1/roles/{role.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)


class SettingsAPITests(TestCase):
    """Test key-addressed settings documents"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        Setting.objects.create(key='settings', value={
            'website': {'name': 'Estate'},
            'mail': {'host': 'smtp.example.com', 'password': 'secret'},
        })

    def test_missing_document_returns_empty_object(self):
        response = self.client.get('/api/v1/settings/whatsapp/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {})

    def test_public_read_hides_mail_section(self):
        response = self.client.get('/api/v1/settings/settings/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['website']['name'], 'Estate')
        self.assertNotIn('mail', response.data)

    def test_settings_manager_sees_mail_section(self):
        self.client.authenticate_user(TestDataFactory.create_user(modules=['settings']))
        response = self.client.get('/api/v1/settings/settings/')
        self.assertIn('mail', response.data)

    def test_anonymous_write_rejected(self):
        response = self.client.put('/api/v1/settings/menus/', {'header': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_write_needs_owning_module(self):
        self.client.authenticate_user(TestDataFactory.create_user(modules=['blog']))
        response = self.client.put('/api/v1/settings/cmsPages/', {'home': {}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_upsert_document(self):
        user = TestDataFactory.create_user(modules=['cms'])
        self.client.authenticate_user(user)
        response = self.client.put('/api/v1/settings/cmsPages/', {'home': {'title': 'Hello'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.put('/api/v1/settings/cmsPages/', {'home': {'title': 'Welcome'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Setting.objects.get(key='cmsPages').value['home']['title'], 'Welcome')
        self.assertEqual(AuditLog.objects.filter(action='settings_update').count(), 2)

    def test_alias_endpoints(self):
        Setting.objects.create(key='menus', value={'header': [{'label': 'Home', 'url': '/'}]})
        response = self.client.get('/api/v1/menus/')
        self.assertEqual(response.data['header'][0]['label'], 'Home')
        response = self.client.get('/api/v1/seo-settings/')
        self.assertEqual(response.data, {})

    def test_setting_list_requires_permission(self):
        response = self.client.get('/api/v1/settings/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.get('/api/v1/settings/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('settings', response.data)


class AuditLogAndSearchAPITests(TestCase):

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_audit_log_filters(self):
        project = TestDataFactory.create_project(name='Lake View')
        self.client.delete(f'/api/v1/projects/{project.id}/')
        response = self.client.get('/api/v1/audit-logs/', {'model': 'Project', 'action': 'delete'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['object_name'], 'Lake View')

    def test_non_admin_only_sees_own_entries(self):
        staff = TestDataFactory.create_user(modules=['leads'])
        AuditLog.objects.create(user=self.admin, action='create', model_name='Lead', object_id='1')
        AuditLog.objects.create(user=staff, action='create', model_name='Lead', object_id='2')
        self.client.authenticate_user(staff)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual([entry['object_id'] for entry in response.data], ['2'])

    def test_search_respects_modules(self):
        project = TestDataFactory.create_project(name='Sunrise Meadows')
        TestDataFactory.create_lead(name='Sunrise Buyer', project=project)
        staff = TestDataFactory.create_user(modules=['leads'])
        self.client.authenticate_user(staff)
        response = self.client.get('/api/v1/search/', {'q': 'Sunrise'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['leads']), 1)
        self.assertEqual(response.data['projects'], [])

    def test_search_without_query(self):
        response = self.client.get('/api/v1/search/')
        self.assertEqual(response.data['projects'], [])


class CacheUtilsTests(TestCase):

    def setUp(self):
        cache.clear()

    def test_invalidation_bumps_generation(self):
        filters = {'search': '', 'category': '', 'location': '', 'status': ''}
        cached, key = get_cached_public_projects(filters)
        self.assertIsNone(cached)
        cache_public_projects(key, [{'id': 1}])
        self.assertEqual(get_cached_public_projects(filters)[0], [{'id': 1}])
        invalidate_public_projects_cache()
        self.assertIsNone(get_cached_public_projects(filters)[0])

    def test_lost_generation_does_not_revive_old_entries(self):
        filters = {'search': '', 'category': '', 'location': '', 'status': ''}
        _, key = get_cached_public_projects(filters)
        cache_public_projects(key, [{'id': 1}])
        old_generation = get_generation(PUBLIC_PROJECTS_PREFIX)
        # LocMemCache may cull the generation key like any other entry
        cache.delete(f'{PUBLIC_PROJECTS_PREFIX}:generation')
        self.assertNotEqual(get_generation(PUBLIC_PROJECTS_PREFIX), old_generation)
        self.assertIsNone(get_cached_public_projects(filters)[0])

    def test_cached_query_decorator(self):
        calls = []

        @cached_query(cache_ttl=60, key_prefix='test_query')
        def expensive(value):
            calls.append(value)
            return value * 2

        self.assertEqual(expensive(2), 4)
        self.assertEqual(expensive(2), 4)
        self.assertEqual(expensive(3), 6)
        self.assertEqual(calls, [2, 3])

    def test_unique_slug_adds_suffix(self):
        location = TestDataFactory.create_location(name='Hyderabad')
        self.assertEqual(location.slug, 'hyderabad')
        self.assertEqual(unique_slug(Location, 'Hyderabad'), 'hyderabad-2')
        self.assertEqual(unique_slug(Location, 'Hyderabad', instance_pk=location.pk), 'hyderabad')

    def test_get_by_identifier_falls_back_to_digit_slug(self):
        first = TestDataFactory.create_project(name='Green Valley')
        numeric = TestDataFactory.create_project(name='2025')
        self.assertEqual(numeric.slug, '2025')
        projects = Project.objects.all()
        self.assertEqual(get_by_identifier(projects, str(first.pk)), first)
        self.assertEqual(get_by_identifier(projects, '2025'), numeric)
        self.assertEqual(get_by_identifier(projects, 'green-valley'), first)
        self.assertIsNone(get_by_identifier(projects, 'missing'))


class ManagementCommandTests(TestCase):

    def test_create_default_roles(self):
        call_command('create_default_roles', stdout=StringIO())
        self.assertEqual(Role.objects.filter(is_system=True).count(), 3)
        staff = Role.objects.get(name='Staff').get_permissions()
        self.assertTrue(staff['leads']['edit'])
        self.assertFalse(staff['projects']['view'])
        # Running twice is harmless
        call_command('create_default_roles', stdout=StringIO())
        self.assertEqual(Role.objects.count(), 3)

    def test_seed_sample_data(self):
        call_command('seed_sample_data', stdout=StringIO())
        self.assertEqual(set(Setting.objects.values_list('key', flat=True)),
                         {'settings', 'seoSettings', 'menus', 'cmsPages'})
        self.assertEqual(ProjectCategory.objects.count(), 4)
        self.assertEqual(Location.objects.count(), 3)
        project = Project.objects.get()
        self.assertEqual(project.plot_summary['available'], 2)
        call_command('seed_sample_data', stdout=StringIO())
        self.assertEqual(Project.objects.count(), 1)
