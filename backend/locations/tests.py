from django.test import TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.locations.models import Location


class LocationAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.manager = TestDataFactory.create_user(modules=['projects'])

    def test_public_list_hides_inactive(self):
        TestDataFactory.create_location(name='Chennai')
        TestDataFactory.create_location(name='Pune', is_active=False)
        response = self.client.get('/api/v1/locations/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([l['name'] for l in response.data], ['Chennai'])

    def test_manager_sees_all_with_project_count(self):
        chennai = TestDataFactory.create_location(name='Chennai')
        TestDataFactory.create_location(name='Pune', is_active=False)
        TestDataFactory.create_project(location=chennai)
        self.client.authenticate_user(self.manager)
        response = self.client.get('/api/v1/locations/')
        self.assertEqual(len(response.data), 2)
        self.assertEqual(response.data[0]['project_count'], 1)

    def test_create_location(self):
        self.client.authenticate_user(self.manager)
        response = self.client.post('/api/v1/locations/', {'name': 'Bangalore'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['slug'], 'bangalore')

    def test_anonymous_cannot_create(self):
        response = self.client.post('/api/v1/locations/', {'name': 'Bangalore'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_location_with_projects_cannot_be_deleted(self):
        project = TestDataFactory.create_project()
        self.client.authenticate_user(self.manager)
        response = self.client.delete(f'/api/v1/locations/{project.location_id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Location.objects.filter(pk=project.location_id).exists())
