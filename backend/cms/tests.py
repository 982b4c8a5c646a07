"""
Test suite for CMS pages, testimonials and galleries
"""
from django.test import TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class PageAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.about = TestDataFactory.create_page(title='About Us')
        self.draft = TestDataFactory.create_page(title='Careers', status='Draft')

    def test_public_sees_published_pages(self):
        response = self.client.get('/api/v1/pages/')
        self.assertEqual([p['title'] for p in response.data], ['About Us'])
        self.assertIsNotNone(response.data[0]['published_at'])

    def test_lookup_by_slug(self):
        response = self.client.get('/api/v1/pages/about-us/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.get('/api/v1/pages/careers/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_lookup_by_digit_only_slug(self):
        TestDataFactory.create_page(title='2024')
        response = self.client.get('/api/v1/pages/2024/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['title'], '2024')

    def test_editor_sees_drafts_ordered_by_title(self):
        self.client.authenticate_user(TestDataFactory.create_user(modules=['pages']))
        response = self.client.get('/api/v1/pages/')
        self.assertEqual([p['title'] for p in response.data], ['About Us', 'Careers'])

    def test_create_page(self):
        self.client.authenticate_user(TestDataFactory.create_user(modules=['pages']))
        response = self.client.post('/api/v1/pages/', {'title': 'Privacy Policy', 'status': 'Published'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['slug'], 'privacy-policy')

    def test_duplicate_slug_rejected(self):
        self.client.authenticate_user(TestDataFactory.create_user(modules=['pages']))
        response = self.client.post('/api/v1/pages/', {'title': 'About', 'slug': 'about-us'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class TestimonialAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_public_sees_active_and_filters_featured(self):
        TestDataFactory.create_testimonial(name='Anil', featured=True)
        TestDataFactory.create_testimonial(name='Kavya')
        TestDataFactory.create_testimonial(name='Hidden', status='Inactive', featured=True)
        response = self.client.get('/api/v1/testimonials/')
        self.assertEqual(len(response.data), 2)
        response = self.client.get('/api/v1/testimonials/', {'featured': 'true'})
        self.assertEqual([t['name'] for t in response.data], ['Anil'])

    def test_video_requires_url(self):
        self.client.authenticate_user(TestDataFactory.create_user(modules=['testimonials']))
        data = {'name': 'Suresh', 'rating': 5, 'type': 'video'}
        response = self.client.post('/api/v1/testimonials/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('video_url', response.data)
        data['video_url'] = 'https://youtube.com/watch?v=abc'
        response = self.client.post('/api/v1/testimonials/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_rating_bounds(self):
        self.client.authenticate_user(TestDataFactory.create_user(modules=['testimonials']))
        response = self.client.post('/api/v1/testimonials/', {'name': 'Suresh', 'rating': 6}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/testimonials/', {'name': 'Suresh', 'rating': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class GalleryAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(modules=['gallery']))

    def test_gallery_needs_an_image(self):
        response = self.client.post('/api/v1/galleries/', {'title': 'Launch Event', 'images': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/galleries/', {'title': 'Launch Event'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_gallery_for_project(self):
        project = TestDataFactory.create_project(name='Palm Grove')
        data = {'title': 'Site Photos', 'images': ['https://example.com/a.jpg', ' '], 'project': project.id}
        response = self.client.post('/api/v1/galleries/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['images'], ['https://example.com/a.jpg'])
        self.assertEqual(response.data['project_name'], 'Palm Grove')

    def test_public_sees_active_galleries(self):
        TestDataFactory.create_gallery(title='Visible')
        TestDataFactory.create_gallery(title='Hidden', is_active=False)
        self.client.logout()
        response = self.client.get('/api/v1/galleries/')
        self.assertEqual([g['title'] for g in response.data], ['Visible'])
