"""
Test suite for reports: analytics aggregation, event capture, the
analytics report and the cached dashboard
"""
from datetime import datetime, timedelta, timezone as dt_timezone
from django.core.cache import cache
from django.test import TestCase, SimpleTestCase
from django.utils import timezone
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.leads.models import Lead
from backend.reports.models import AnalyticsEvent
from backend.reports.aggregation import (
    cutoff_for_range, filter_by_date_range, conversion_rate, count_by, distribution,
    leads_over_time, heat_band, project_performance, plot_status_summary
)

NOW = datetime(2025, 6, 30, 12, 0, tzinfo=dt_timezone.utc)


class AggregationTests(SimpleTestCase):
    """Pure aggregation functions"""

    def test_cutoff_for_range(self):
        self.assertEqual(cutoff_for_range('7days', NOW), NOW - timedelta(days=7))
        self.assertEqual(cutoff_for_range('90days', NOW), NOW - timedelta(days=90))
        self.assertIsNone(cutoff_for_range('all', NOW))
        self.assertIsNone(cutoff_for_range('yesterday', NOW))

    def test_filter_by_date_range(self):
        items = [
            {'id': 1, 'created_at': NOW - timedelta(days=1)},
            {'id': 2, 'created_at': NOW - timedelta(days=10)},
            {'id': 3, 'created_at': None},
            {'id': 4, 'created_at': '2025-06-29T08:00:00+00:00'},
        ]
        self.assertEqual([i['id'] for i in filter_by_date_range(items, '7days', NOW)], [1, 4])
        self.assertEqual([i['id'] for i in filter_by_date_range(items, '30days', NOW)], [1, 2, 4])
        self.assertEqual(len(filter_by_date_range(items, 'all', NOW)), 4)

    def test_filter_by_custom_field(self):
        items = [{'visited': NOW - timedelta(days=2)}, {'visited': NOW - timedelta(days=20)}]
        self.assertEqual(len(filter_by_date_range(items, '7days', NOW, field='visited')), 1)

    def test_conversion_rate(self):
        self.assertEqual(conversion_rate(1, 3), 33.33)
        self.assertEqual(conversion_rate(5, 0), 0.0)

    def test_count_by_uses_default(self):
        leads = [{'source': 'Website'}, {'source': None}, {'source': 'Website'}, {}]
        self.assertEqual(count_by(leads, 'source', 'Direct'), {'Website': 2, 'Direct': 2})

    def test_distribution_sorting_and_percentages(self):
        leads = [{'status': 'New'}, {'status': 'Lost'}, {'status': 'New'}, {'status': 'Contacted'}]
        self.assertEqual(distribution(leads, 'status', 'New'), [
            {'label': 'New', 'count': 2, 'percentage': 50.0},
            {'label': 'Contacted', 'count': 1, 'percentage': 25.0},
            {'label': 'Lost', 'count': 1, 'percentage': 25.0},
        ])
        self.assertEqual(distribution([], 'status', 'New'), [])

    def test_leads_over_time(self):
        leads = [
            {'created_at': NOW},
            {'created_at': NOW - timedelta(days=2)},
            {'created_at': NOW + timedelta(hours=1)},
            {'created_at': None},
        ]
        self.assertEqual(leads_over_time(leads), [
            {'date': '2025-06-28', 'count': 1},
            {'date': '2025-06-30', 'count': 2},
        ])

    def test_heat_band(self):
        self.assertEqual(heat_band(5.01), 'high')
        self.assertEqual(heat_band(5), 'medium')
        self.assertEqual(heat_band(2.5), 'medium')
        self.assertEqual(heat_band(2), 'low')

    def test_project_performance(self):
        projects = [{'id': 1, 'name': 'Alpha'}, {'id': 2, 'name': 'Beta'}, {'id': 3, 'name': 'Gamma'}]
        leads = [
            {'project': 1, 'project_interest': ''},
            {'project': None, 'project_interest': 'Alpha'},
            {'project': 2, 'project_interest': 'Beta'},
        ]
        events = (
            [{'event_type': 'project_view', 'project': 1}] * 20 +
            [{'event_type': 'project_view', 'project': 2}] * 10 +
            [{'event_type': 'brochure_download', 'project': 1}] * 3 +
            [{'event_type': 'click_to_call', 'project': 2}] +
            [{'event_type': 'page_view', 'project': None}] * 50
        )
        rows = project_performance(projects, leads, events)
        self.assertEqual([r['project_name'] for r in rows], ['Alpha', 'Beta', 'Gamma'])
        alpha, beta, gamma = rows
        self.assertEqual((alpha['views'], alpha['leads'], alpha['downloads']), (20, 2, 3))
        self.assertEqual(alpha['conversion_rate'], 10.0)
        self.assertEqual(alpha['heat'], 'high')
        self.assertEqual(alpha['heat_intensity'], 100.0)
        self.assertEqual(alpha['rank'], 1)
        self.assertEqual(beta['calls'], 1)
        self.assertEqual(beta['heat_intensity'], 50.0)
        self.assertEqual(beta['heat'], 'high')
        self.assertEqual((gamma['views'], gamma['conversion_rate'], gamma['heat']), (0, 0.0, 'low'))
        self.assertEqual(gamma['rank'], 3)

    def test_project_performance_without_views(self):
        rows = project_performance([{'id': 2, 'name': 'Zeta'}, {'id': 1, 'name': 'Eta'}], [], [])
        self.assertEqual([r['project_name'] for r in rows], ['Eta', 'Zeta'])
        self.assertEqual(rows[0]['heat_intensity'], 0)

    def test_plot_status_summary(self):
        projects = [
            {'plots': [{'status': 'Available'}, {'status': 'booked'}]},
            {'plots': [{'status': 'Blocked'}, {'status': 'available'}]},
            {'plots': []},
        ]
        self.assertEqual(plot_status_summary(projects),
                         {'total': 4, 'available': 2, 'booked': 1, 'blocked': 1})


class AnalyticsEventAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.project = TestDataFactory.create_project()

    def test_record_page_view(self):
        response = self.client.post('/api/v1/analytics/events/', {'event_type': 'page_view', 'path': '/about'},
                                    format='json', HTTP_REFERER='https://google.com/')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        event = AnalyticsEvent.objects.get()
        self.assertEqual(event.referrer, 'https://google.com/')

    def test_project_event_needs_project(self):
        response = self.client.post('/api/v1/analytics/events/', {'event_type': 'project_view'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/analytics/events/',
                                    {'event_type': 'project_view', 'project': self.project.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_unknown_event_type(self):
        response = self.client.post('/api/v1/analytics/events/', {'event_type': 'scroll'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_non_object_payload_rejected(self):
        response = self.client.post('/api/v1/analytics/events/', [{'event_type': 'page_view'}], format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(AnalyticsEvent.objects.exists())


class AnalyticsReportAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(modules=['analytics']))
        self.project = TestDataFactory.create_project(name='Palm Grove')

    def test_report_is_limited_to_range(self):
        for _ in range(4):
            TestDataFactory.create_event('page_view')
        TestDataFactory.create_event('project_view', project=self.project)
        TestDataFactory.create_event('click_to_call', project=self.project)
        old_event = TestDataFactory.create_event('page_view')
        AnalyticsEvent.objects.filter(pk=old_event.pk).update(created_at=timezone.now() - timedelta(days=40))

        TestDataFactory.create_lead(project=self.project, source='Website')
        old_lead = TestDataFactory.create_lead(source='Exit Intent Popup')
        Lead.objects.filter(pk=old_lead.pk).update(created_at=timezone.now() - timedelta(days=40))

        response = self.client.get('/api/v1/reports/analytics/', {'range': '30days'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_page_views'], 4)
        self.assertEqual(response.data['total_leads'], 1)
        self.assertEqual(response.data['conversion_rate'], 25.0)
        self.assertEqual(response.data['phone_calls'], 1)
        self.assertEqual(response.data['lead_sources'][0]['label'], 'Website')
        self.assertEqual(response.data['project_performance'][0]['leads'], 1)

        response = self.client.get('/api/v1/reports/analytics/', {'range': 'all'})
        self.assertEqual(response.data['total_page_views'], 5)
        self.assertEqual(response.data['total_leads'], 2)

    def test_invalid_range(self):
        response = self.client.get('/api/v1/reports/analytics/', {'range': 'forever'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_requires_analytics_module(self):
        self.client.authenticate_user(TestDataFactory.create_user(modules=['leads']))
        response = self.client.get('/api/v1/reports/analytics/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class DashboardAPITests(TestCase):

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(modules=['dashboard']))
        self.project = TestDataFactory.create_project()

    def test_dashboard_counts(self):
        lead = TestDataFactory.create_lead(project=self.project)
        TestDataFactory.create_lead(status='Converted')
        TestDataFactory.create_site_visit(lead=lead)
        TestDataFactory.create_blog_post()
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['counts']['projects'], 1)
        self.assertEqual(response.data['counts']['leads'], 2)
        self.assertEqual(response.data['counts']['new_leads'], 1)
        self.assertEqual(response.data['counts']['blog_posts'], 1)
        self.assertEqual(response.data['lead_status_counts']['Converted'], 1)
        self.assertEqual(response.data['plot_summary'], {'total': 3, 'available': 1, 'booked': 1, 'blocked': 1})
        self.assertEqual(len(response.data['recent_leads']), 2)
        self.assertEqual(len(response.data['upcoming_visits']), 1)

    def test_dashboard_is_cached_until_leads_change(self):
        self.client.get('/api/v1/reports/dashboard/')
        Lead.objects.create(name='Bulk import', phone='9000000001')
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.data['counts']['leads'], 0)

        with self.captureOnCommitCallbacks(execute=True):
            TestDataFactory.create_lead()
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.data['counts']['leads'], 2)

    def test_requires_dashboard_module(self):
        self.client.authenticate_user(TestDataFactory.create_user(modules=['blog']))
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
