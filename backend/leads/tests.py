"""
Test suite for leads: public capture, staff workflow, notes,
public tracking and site visit scheduling
"""
from datetime import timedelta
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.models import AuditLog
from backend.leads.models import Lead, SiteVisit, STATUS_MESSAGES, status_message


class StatusMessageTests(TestCase):

    def test_known_and_unknown_statuses(self):
        self.assertEqual(status_message('Converted'), 'Congratulations! Your booking has been confirmed.')
        self.assertEqual(status_message('Archived'), STATUS_MESSAGES['New'])


class PublicLeadCaptureTests(TestCase):
    """Enquiries submitted from the public site"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.project = TestDataFactory.create_project(name='Palm Grove')

    def test_anonymous_lead_is_new(self):
        data = {'name': 'Arjun', 'phone': '9876543210', 'status': 'Converted', 'source': 'Exit Intent Popup'}
        response = self.client.post('/api/v1/leads/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'New')
        self.assertEqual(response.data['source'], 'Exit Intent Popup')

    def test_source_defaults_to_website(self):
        response = self.client.post('/api/v1/leads/', {'name': 'Arjun', 'email': 'arjun@example.com'},
                                    format='json')
        self.assertEqual(response.data['source'], 'Website')

    def test_email_or_phone_required(self):
        response = self.client.post('/api/v1/leads/', {'name': 'Arjun', 'message': 'Call me'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('contact', response.data)

    def test_project_linked_by_interest(self):
        data = {'name': 'Arjun', 'phone': '9876543210', 'project_interest': 'palm grove'}
        response = self.client.post('/api/v1/leads/', data, format='json')
        self.assertEqual(response.data['project'], self.project.id)
        self.assertEqual(response.data['project_name'], 'Palm Grove')

    def test_project_interest_filled_from_project(self):
        data = {'name': 'Arjun', 'phone': '9876543210', 'project': self.project.id}
        response = self.client.post('/api/v1/leads/', data, format='json')
        self.assertEqual(response.data['project_interest'], 'Palm Grove')

    def test_unknown_interest_left_unlinked(self):
        data = {'name': 'Arjun', 'phone': '9876543210', 'project_interest': 'Something Else'}
        response = self.client.post('/api/v1/leads/', data, format='json')
        self.assertIsNone(response.data['project'])

    def test_anonymous_cannot_list(self):
        response = self.client.get('/api/v1/leads/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class LeadManagementAPITests(TestCase):
    """Staff lead workflow"""

    def setUp(self):
        self.staff = TestDataFactory.create_user(modules=['leads'])
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)

    def test_manual_lead_keeps_status_and_source(self):
        data = {'name': 'Walk-in', 'phone': '9000000000', 'status': 'Qualified', 'source': 'Manual'}
        response = self.client.post('/api/v1/leads/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'Qualified')
        self.assertEqual(response.data['source'], 'Manual')

    def test_list_is_paginated_with_status_counts(self):
        for _ in range(3):
            TestDataFactory.create_lead(status='New')
        TestDataFactory.create_lead(status='Converted')
        response = self.client.get('/api/v1/leads/', {'limit': 2, 'status': 'New'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(len(response.data['results']), 2)
        self.assertEqual(response.data['total_pages'], 2)
        self.assertEqual(response.data['next'], 2)
        # Tab counts ignore the status filter
        self.assertEqual(response.data['status_counts']['New'], 3)
        self.assertEqual(response.data['status_counts']['Converted'], 1)
        self.assertEqual(response.data['status_counts']['All'], 4)

    def test_list_filters(self):
        TestDataFactory.create_lead(name='Ramesh Kumar', source='Exit Intent Popup')
        TestDataFactory.create_lead(name='Sita')
        response = self.client.get('/api/v1/leads/', {'search': 'ramesh'})
        self.assertEqual(response.data['count'], 1)
        response = self.client.get('/api/v1/leads/', {'source': 'exit intent popup'})
        self.assertEqual(response.data['results'][0]['name'], 'Ramesh Kumar')
        tomorrow = (timezone.localdate() + timedelta(days=1)).isoformat()
        response = self.client.get('/api/v1/leads/', {'date_from': tomorrow})
        self.assertEqual(response.data['count'], 0)

    def test_invalid_page_params(self):
        response = self.client.get('/api/v1/leads/', {'page': 'abc'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_status_change_is_audited(self):
        lead = TestDataFactory.create_lead()
        response = self.client.patch(f'/api/v1/leads/{lead.id}/', {'status': 'Contacted'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        log = AuditLog.objects.get(action='status_change', model_name='Lead')
        self.assertEqual(log.changes, {'old_status': 'New', 'new_status': 'Contacted'})

    def test_invalid_status_rejected(self):
        lead = TestDataFactory.create_lead()
        response = self.client.patch(f'/api/v1/leads/{lead.id}/', {'status': 'Archived'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_clearing_both_contacts_rejected(self):
        lead = TestDataFactory.create_lead()
        response = self.client.patch(f'/api/v1/leads/{lead.id}/', {'email': '', 'phone': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_detail_includes_notes_and_visits(self):
        lead = TestDataFactory.create_lead(project=TestDataFactory.create_project())
        TestDataFactory.create_lead_note(lead, text='First call', user=self.staff)
        TestDataFactory.create_lead_note(lead, text='Second call', user=self.staff)
        TestDataFactory.create_site_visit(lead=lead)
        response = self.client.get(f'/api/v1/leads/{lead.id}/')
        self.assertEqual([n['text'] for n in response.data['notes']], ['First call', 'Second call'])
        self.assertEqual(len(response.data['site_visits']), 1)

    def test_delete_lead(self):
        lead = TestDataFactory.create_lead()
        response = self.client.delete(f'/api/v1/leads/{lead.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Lead.objects.filter(pk=lead.pk).exists())

    def test_other_modules_cannot_read_leads(self):
        self.client.authenticate_user(TestDataFactory.create_user(modules=['blog']))
        response = self.client.get('/api/v1/leads/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class LeadNoteAPITests(TestCase):

    def setUp(self):
        self.staff = TestDataFactory.create_user(modules=['leads'])
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)
        self.lead = TestDataFactory.create_lead()

    def test_add_note(self):
        response = self.client.post(f'/api/v1/leads/{self.lead.id}/notes/', {'text': ' Interested in corner plot '},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['text'], 'Interested in corner plot')
        self.assertEqual(response.data['created_by'], self.staff.id)
        self.assertTrue(AuditLog.objects.filter(action='note_add').exists())

    def test_empty_note_rejected(self):
        response = self.client.post(f'/api/v1/leads/{self.lead.id}/notes/', {'text': '   '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_edit_and_delete_note(self):
        note = TestDataFactory.create_lead_note(self.lead, user=self.staff)
        url = f'/api/v1/leads/{self.lead.id}/notes/{note.id}/'
        response = self.client.patch(url, {'text': 'Updated'}, format='json')
        self.assertEqual(response.data['text'], 'Updated')
        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertTrue(AuditLog.objects.filter(action='note_delete').exists())

    def test_note_of_other_lead_not_found(self):
        other = TestDataFactory.create_lead()
        note = TestDataFactory.create_lead_note(other)
        response = self.client.patch(f'/api/v1/leads/{self.lead.id}/notes/{note.id}/', {'text': 'x'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class LeadTrackingTests(TestCase):
    """Public enquiry tracking"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.lead = TestDataFactory.create_lead(name='Arjun', phone='9876543210', email='Arjun@Example.com',
                                                status='Contacted')
        TestDataFactory.create_lead_note(self.lead, text='Brochure shared on WhatsApp')

    def test_track_by_phone(self):
        response = self.client.get('/api/v1/leads/track/', {'q': '9876543210'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'Contacted')
        self.assertEqual(response.data['status_message'], STATUS_MESSAGES['Contacted'])
        self.assertEqual(response.data['notes'][0]['text'], 'Brochure shared on WhatsApp')
        self.assertNotIn('assigned_to', response.data)

    def test_track_by_email_case_insensitive(self):
        response = self.client.get('/api/v1/leads/track/', {'q': 'arjun@example.com'})
        self.assertEqual(response.data['id'], self.lead.id)

    def test_track_by_id(self):
        response = self.client.get('/api/v1/leads/track/', {'q': str(self.lead.id)})
        self.assertEqual(response.data['name'], 'Arjun')

    def test_contact_details_are_masked(self):
        response = self.client.get('/api/v1/leads/track/', {'q': str(self.lead.id)})
        self.assertEqual(response.data['phone'], '******3210')
        self.assertEqual(response.data['email'], 'A****@Example.com')

    def test_most_recent_match_wins(self):
        newer = TestDataFactory.create_lead(phone='9876543210', status='Qualified')
        response = self.client.get('/api/v1/leads/track/', {'q': '9876543210'})
        self.assertEqual(response.data['id'], newer.id)

    def test_blank_query(self):
        response = self.client.get('/api/v1/leads/track/', {'q': '  '})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_no_match(self):
        response = self.client.get('/api/v1/leads/track/', {'q': 'nobody@example.com'})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class SiteVisitAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user(modules=['site-visits', 'leads'])
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.project = TestDataFactory.create_project(name='Palm Grove')
        self.tomorrow = timezone.localdate() + timedelta(days=1)

    def test_schedule_from_lead(self):
        lead = TestDataFactory.create_lead(name='Arjun', phone='9876543210', project=self.project)
        data = {'lead': lead.id, 'visit_date': self.tomorrow.isoformat(), 'visit_time': '11:00'}
        response = self.client.post('/api/v1/site-visits/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['customer_name'], 'Arjun')
        self.assertEqual(response.data['customer_phone'], '9876543210')
        self.assertEqual(response.data['project'], self.project.id)
        lead.refresh_from_db()
        self.assertEqual(lead.status, 'Site Visit Scheduled')

    def test_converted_lead_keeps_status(self):
        lead = TestDataFactory.create_lead(project=self.project, status='Converted')
        data = {'lead': lead.id, 'visit_date': self.tomorrow.isoformat(), 'visit_time': '11:00'}
        self.client.post('/api/v1/site-visits/', data, format='json')
        lead.refresh_from_db()
        self.assertEqual(lead.status, 'Converted')

    def test_required_fields(self):
        response = self.client.post('/api/v1/site-visits/', {'visit_date': self.tomorrow.isoformat(),
                                                             'visit_time': '11:00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        for field in ('customer_name', 'customer_phone', 'project'):
            self.assertIn(field, response.data)

    def test_past_date_rejected(self):
        data = {
            'customer_name': 'Walk-in',
            'customer_phone': '9000000000',
            'project': self.project.id,
            'visit_date': (timezone.localdate() - timedelta(days=1)).isoformat(),
            'visit_time': '11:00',
        }
        response = self.client.post('/api/v1/site-visits/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('visit_date', response.data)

    def test_list_ordering_and_upcoming(self):
        later = TestDataFactory.create_site_visit(project=self.project, visit_date=self.tomorrow + timedelta(days=5))
        sooner = TestDataFactory.create_site_visit(project=self.project, visit_date=self.tomorrow)
        TestDataFactory.create_site_visit(project=self.project, visit_date=self.tomorrow, status='Cancelled')
        past = TestDataFactory.create_site_visit(project=self.project, visit_date=timezone.localdate() - timedelta(days=3),
                                                 status='Completed')
        response = self.client.get('/api/v1/site-visits/')
        self.assertEqual(response.data[0]['id'], past.id)
        response = self.client.get('/api/v1/site-visits/', {'upcoming': 'true'})
        self.assertEqual([v['id'] for v in response.data], [sooner.id, later.id])

    def test_complete_visit(self):
        visit = TestDataFactory.create_site_visit(project=self.project)
        response = self.client.patch(f'/api/v1/site-visits/{visit.id}/', {'status': 'Completed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(AuditLog.objects.filter(action='status_change', model_name='SiteVisit').exists())

    def test_existing_past_visit_can_be_updated(self):
        visit = TestDataFactory.create_site_visit(project=self.project,
                                                  visit_date=timezone.localdate() - timedelta(days=2))
        response = self.client.patch(f'/api/v1/site-visits/{visit.id}/', {'status': 'No Show'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(SiteVisit.objects.get(pk=visit.pk).status, 'No Show')

    def test_requires_site_visits_module(self):
        self.client.authenticate_user(TestDataFactory.create_user(modules=['leads']))
        response = self.client.get('/api/v1/site-visits/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
