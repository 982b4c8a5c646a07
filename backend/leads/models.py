from django.conf import settings
from django.db import models

LEAD_STATUSES = ['New', 'Contacted', 'Qualified', 'Site Visit Scheduled', 'Converted', 'Lost']

# Shown to customers on the public tracking page
STATUS_MESSAGES = {
    'New': 'We have received your enquiry and will contact you shortly.',
    'Contacted': 'Our team has contacted you. Please check your phone or email.',
    'Qualified': 'Your enquiry has been qualified. We are preparing details for you.',
    'Site Visit Scheduled': 'Your site visit has been scheduled. Details have been shared with you.',
    'Converted': 'Congratulations! Your booking has been confirmed.',
    'Lost': 'This enquiry is currently on hold. Contact us if you are still interested.',
}

# Leads in these statuses move to "Site Visit Scheduled" when a visit is booked
PRE_VISIT_STATUSES = ['New', 'Contacted', 'Qualified']


def status_message(status):
    return STATUS_MESSAGES.get(status, STATUS_MESSAGES['New'])


class Lead(models.Model):
    STATUS_CHOICES = [(s, s) for s in LEAD_STATUSES]

    name = models.CharField(max_length=150)
    email = models.EmailField(blank=True, db_index=True)
    phone = models.CharField(max_length=20, blank=True, db_index=True)
    project = models.ForeignKey('projects.Project', on_delete=models.SET_NULL, null=True, blank=True,
                                related_name='leads')
    project_interest = models.CharField(max_length=255, blank=True)
    message = models.TextField(blank=True)
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default='New', db_index=True)
    source = models.CharField(max_length=100, default='Website', db_index=True)
    assigned_to = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name='assigned_leads')
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.status})"

    @property
    def status_message(self):
        return status_message(self.status)

    class Meta:
        db_table = 'leads'
        ordering = ['-created_at']


class LeadNote(models.Model):
    lead = models.ForeignKey(Lead, on_delete=models.CASCADE, related_name='notes')
    text = models.TextField()
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='lead_notes')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Note on {self.lead_id}: {self.text[:40]}"

    class Meta:
        db_table = 'lead_notes'
        ordering = ['created_at', 'id']


class SiteVisit(models.Model):
    STATUS_CHOICES = [
        ('Scheduled', 'Scheduled'),
        ('Confirmed', 'Confirmed'),
        ('Completed', 'Completed'),
        ('Cancelled', 'Cancelled'),
        ('No Show', 'No Show'),
    ]

    lead = models.ForeignKey(Lead, on_delete=models.SET_NULL, null=True, blank=True, related_name='site_visits')
    customer_name = models.CharField(max_length=150, blank=True)
    customer_phone = models.CharField(max_length=20, blank=True)
    customer_email = models.EmailField(blank=True)
    project = models.ForeignKey('projects.Project', on_delete=models.CASCADE, related_name='site_visits')
    visit_date = models.DateField(db_index=True)
    visit_time = models.TimeField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='Scheduled', db_index=True)
    notes = models.TextField(blank=True)
    assigned_to = models.CharField(max_length=150, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.customer_name} - {self.visit_date} {self.visit_time}"

    class Meta:
        db_table = 'site_visits'
        ordering = ['visit_date', 'visit_time']
