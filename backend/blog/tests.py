"""
Test suite for the blog: publication visibility, authorship and filters
"""
from datetime import timedelta
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.blog.models import BlogPost


class BlogPublicAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.news = TestDataFactory.create_blog_category(name='News')
        self.live = TestDataFactory.create_blog_post(title='Why Invest in Plots', category=self.news)
        self.draft = TestDataFactory.create_blog_post(title='Unfinished', status='Draft')
        self.scheduled = TestDataFactory.create_blog_post(
            title='Coming Soon', publish_date=timezone.now() + timedelta(days=3))

    def test_public_sees_live_posts_only(self):
        response = self.client.get('/api/v1/blog-posts/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['title'] for p in response.data], ['Why Invest in Plots'])
        self.assertEqual(response.data[0]['category_name'], 'News')

    def test_public_detail_by_slug(self):
        response = self.client.get('/api/v1/blog-posts/why-invest-in-plots/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.get(f'/api/v1/blog-posts/{self.scheduled.slug}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_detail_by_digit_only_slug(self):
        recap = TestDataFactory.create_blog_post(title='2024')
        self.assertEqual(recap.slug, '2024')
        response = self.client.get('/api/v1/blog-posts/2024/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['title'], '2024')

    def test_filter_by_category(self):
        response = self.client.get('/api/v1/blog-posts/', {'category': 'news'})
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/blog-posts/', {'category': self.news.id + 100})
        self.assertEqual(response.data, [])

    def test_editor_sees_all_and_filters_status(self):
        self.client.authenticate_user(TestDataFactory.create_user(modules=['blog']))
        response = self.client.get('/api/v1/blog-posts/')
        self.assertEqual(len(response.data), 3)
        response = self.client.get('/api/v1/blog-posts/', {'status': 'Draft'})
        self.assertEqual([p['title'] for p in response.data], ['Unfinished'])

    def test_newest_first(self):
        self.client.authenticate_user(TestDataFactory.create_user(modules=['blog']))
        response = self.client.get('/api/v1/blog-posts/')
        self.assertEqual(response.data[0]['title'], 'Coming Soon')


class BlogWriteAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.editor = TestDataFactory.create_user(username='meera', modules=['blog'])
        self.editor.first_name = 'Meera'
        self.editor.last_name = 'Iyer'
        self.editor.save()
        self.client.authenticate_user(self.editor)

    def test_author_defaults_to_editor(self):
        response = self.client.post('/api/v1/blog-posts/', {'title': 'Site Progress', 'status': 'Published'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['author'], 'Meera Iyer')
        self.assertEqual(response.data['slug'], 'site-progress')
        self.assertIsNotNone(response.data['publish_date'])

    def test_explicit_author_kept(self):
        response = self.client.post('/api/v1/blog-posts/', {'title': 'Guest Post', 'author': 'Guest'},
                                    format='json')
        self.assertEqual(response.data['author'], 'Guest')

    def test_blank_title_rejected(self):
        response = self.client.post('/api/v1/blog-posts/', {'title': '   '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_publish_and_delete(self):
        post = TestDataFactory.create_blog_post(status='Draft')
        response = self.client.patch(f'/api/v1/blog-posts/{post.id}/', {'status': 'Published'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.delete(f'/api/v1/blog-posts/{post.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(BlogPost.objects.filter(pk=post.pk).exists())

    def test_anonymous_cannot_write(self):
        self.client.logout()
        response = self.client.post('/api/v1/blog-posts/', {'title': 'Spam'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_deleting_category_keeps_posts(self):
        category = TestDataFactory.create_blog_category()
        post = TestDataFactory.create_blog_post(category=category)
        response = self.client.delete(f'/api/v1/blog-categories/{category.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        post.refresh_from_db()
        self.assertIsNone(post.category)
