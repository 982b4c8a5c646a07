"""
Test suite for projects: categories, listings, plot layouts and caching
"""
from django.core.cache import cache
from django.test import TestCase, SimpleTestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.models import AuditLog
from backend.projects.models import Project, normalize_plot_status, summarize_plots


class PlotHelperTests(SimpleTestCase):

    def test_normalize_plot_status(self):
        self.assertEqual(normalize_plot_status('booked'), 'Booked')
        self.assertEqual(normalize_plot_status(' AVAILABLE '), 'Available')
        self.assertIsNone(normalize_plot_status('sold'))
        self.assertIsNone(normalize_plot_status(None))

    def test_summarize_plots_is_case_insensitive(self):
        plots = [
            {'plotNumber': '1', 'status': 'available'},
            {'plotNumber': '2', 'status': 'Booked'},
            {'plotNumber': '3', 'status': 'BLOCKED'},
            {'plotNumber': '4', 'status': 'Available'},
            {'plotNumber': '5', 'status': 'unknown'},
        ]
        self.assertEqual(summarize_plots(plots), {'total': 5, 'available': 2, 'booked': 1, 'blocked': 1})

    def test_summarize_empty(self):
        self.assertEqual(summarize_plots(None), {'total': 0, 'available': 0, 'booked': 0, 'blocked': 0})


class ProjectModelTests(TestCase):

    def test_slug_is_derived_and_deduplicated(self):
        first = TestDataFactory.create_project(name='Green Valley')
        second = TestDataFactory.create_project(name='Green Valley')
        self.assertEqual(first.slug, 'green-valley')
        self.assertEqual(second.slug, 'green-valley-2')

    def test_find_plot(self):
        project = TestDataFactory.create_project()
        self.assertEqual(project.find_plot(2)['status'], 'Booked')
        self.assertIsNone(project.find_plot('99'))


class ProjectPublicAPITests(TestCase):
    """Anonymous access to project listings"""

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.hyderabad = TestDataFactory.create_location(name='Hyderabad')
        self.villas = TestDataFactory.create_category(name='Luxury Villas')
        self.active = TestDataFactory.create_project(name='Palm Grove', location=self.hyderabad,
                                                     category=self.villas)
        self.inactive = TestDataFactory.create_project(name='Old Meadows', status='Inactive')

    def test_anonymous_sees_active_only(self):
        response = self.client.get('/api/v1/projects/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        names = [p['name'] for p in response.data]
        self.assertEqual(names, ['Palm Grove'])
        self.assertEqual(response.data[0]['location_name'], 'Hyderabad')
        self.assertEqual(response.data[0]['category_name'], 'Luxury Villas')
        self.assertEqual(response.data[0]['plot_summary']['booked'], 1)

    def test_filters(self):
        TestDataFactory.create_project(name='City Centre Plots')
        response = self.client.get('/api/v1/projects/', {'location': 'hyderabad'})
        self.assertEqual([p['name'] for p in response.data], ['Palm Grove'])
        response = self.client.get('/api/v1/projects/', {'category': self.villas.id})
        self.assertEqual([p['name'] for p in response.data], ['Palm Grove'])
        response = self.client.get('/api/v1/projects/', {'search': 'centre'})
        self.assertEqual([p['name'] for p in response.data], ['City Centre Plots'])

    def test_detail_by_id_and_slug(self):
        response = self.client.get(f'/api/v1/projects/{self.active.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.get('/api/v1/projects/palm-grove/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['plots']), 3)

    def test_inactive_detail_hidden(self):
        response = self.client.get(f'/api/v1/projects/{self.inactive.slug}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_detail_by_digit_only_slug(self):
        launch = TestDataFactory.create_project(name='2025')
        self.assertEqual(launch.slug, '2025')
        response = self.client.get('/api/v1/projects/2025/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], launch.id)

    def test_public_list_is_cached(self):
        self.client.get('/api/v1/projects/')
        # Bypass signals so the cached listing is still served
        Project.objects.filter(pk=self.active.pk).update(name='Renamed')
        response = self.client.get('/api/v1/projects/')
        self.assertEqual(response.data[0]['name'], 'Palm Grove')

    def test_cache_invalidated_on_save(self):
        self.client.get('/api/v1/projects/')
        with self.captureOnCommitCallbacks(execute=True):
            self.active.name = 'Palm Grove Phase 2'
            self.active.save()
        response = self.client.get('/api/v1/projects/')
        self.assertEqual(response.data[0]['name'], 'Palm Grove Phase 2')

    def test_anonymous_cannot_create(self):
        response = self.client.post('/api/v1/projects/', {'name': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_plots_endpoint(self):
        response = self.client.get(f'/api/v1/projects/{self.active.id}/plots/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['summary'], {'total': 3, 'available': 1, 'booked': 1, 'blocked': 1})


class ProjectManagementAPITests(TestCase):
    """Project writes by users with the projects module"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user(modules=['projects'])
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.category = TestDataFactory.create_category()
        self.location = TestDataFactory.create_location()

    def _payload(self, **overrides):
        data = {
            'name': 'Silver Oak Enclave',
            'category': self.category.id,
            'location': self.location.id,
            'price': '30 Lakhs',
            'plots': [
                {'plotNumber': 'A1', 'dimensions': '30x50', 'facing': 'East', 'status': 'available'},
                {'plotNumber': 'A2', 'dimensions': '30x50', 'facing': 'West', 'status': 'BOOKED'},
            ],
            'amenities': ['Club House', 'Park'],
            'seo': {'title': 'Silver Oak Enclave'},
        }
        data.update(overrides)
        return data

    def test_create_project(self):
        response = self.client.post('/api/v1/projects/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['slug'], 'silver-oak-enclave')
        self.assertEqual(response.data['total_plots'], 2)
        self.assertEqual([p['status'] for p in response.data['plots']], ['Available', 'Booked'])
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='Project').exists())

    def test_explicit_total_plots_kept(self):
        response = self.client.post('/api/v1/projects/', self._payload(total_plots=120), format='json')
        self.assertEqual(response.data['total_plots'], 120)

    def test_duplicate_plot_numbers_rejected(self):
        plots = [{'plotNumber': '1', 'status': 'Available'}, {'plotNumber': '1', 'status': 'Booked'}]
        response = self.client.post('/api/v1/projects/', self._payload(plots=plots), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('plots', response.data)

    def test_invalid_plot_status_rejected(self):
        plots = [{'plotNumber': '1', 'status': 'Sold'}]
        response = self.client.post('/api/v1/projects/', self._payload(plots=plots), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_manager_sees_inactive(self):
        TestDataFactory.create_project(name='Hidden', status='Inactive')
        response = self.client.get('/api/v1/projects/')
        self.assertEqual([p['name'] for p in response.data], ['Hidden'])
        response = self.client.get('/api/v1/projects/', {'status': 'Active'})
        self.assertEqual(response.data, [])

    def test_update_project(self):
        project = TestDataFactory.create_project()
        response = self.client.patch(f'/api/v1/projects/{project.id}/', {'status': 'Inactive'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        project.refresh_from_db()
        self.assertEqual(project.status, 'Inactive')

    def test_update_by_digit_only_slug(self):
        project = TestDataFactory.create_project(name='2025')
        response = self.client.patch('/api/v1/projects/2025/', {'status': 'Inactive'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        project.refresh_from_db()
        self.assertEqual(project.status, 'Inactive')

    def test_update_plot_status(self):
        project = TestDataFactory.create_project()
        response = self.client.patch(f'/api/v1/projects/{project.id}/plots/1/', {'status': 'booked'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['plot']['status'], 'Booked')
        self.assertEqual(response.data['summary']['booked'], 2)
        log = AuditLog.objects.get(action='status_change', model_name='Project')
        self.assertEqual(log.changes['old_status'], 'Available')

    def test_update_missing_plot(self):
        project = TestDataFactory.create_project()
        response = self.client.patch(f'/api/v1/projects/{project.id}/plots/99/', {'status': 'Booked'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_project(self):
        project = TestDataFactory.create_project()
        response = self.client.delete(f'/api/v1/projects/{project.slug}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Project.objects.filter(pk=project.pk).exists())

    def test_other_modules_cannot_write(self):
        self.client.authenticate_user(TestDataFactory.create_user(modules=['blog']))
        response = self.client.post('/api/v1/projects/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ProjectCategoryAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(modules=['projects']))

    def test_create_category_with_auto_slug(self):
        response = self.client.post('/api/v1/project-categories/', {'name': 'Commercial Plots'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['slug'], 'commercial-plots')

    def test_category_in_use_cannot_be_deleted(self):
        project = TestDataFactory.create_project()
        response = self.client.delete(f'/api/v1/project-categories/{project.category_id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_public_category_list(self):
        TestDataFactory.create_category(name='Agricultural Land')
        self.client.logout()
        response = self.client.get('/api/v1/project-categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['name'], 'Agricultural Land')
