from django.db import models

EVENT_TYPES = ['page_view', 'project_view', 'brochure_download', 'click_to_call', 'share_click']

# Events that only make sense against a project
PROJECT_EVENT_TYPES = ['project_view', 'brochure_download']


class AnalyticsEvent(models.Model):
    """A visitor interaction recorded by the public site"""
    EVENT_CHOICES = [(e, e.replace('_', ' ').title()) for e in EVENT_TYPES]

    event_type = models.CharField(max_length=30, choices=EVENT_CHOICES, db_index=True)
    path = models.CharField(max_length=500, blank=True)
    project = models.ForeignKey('projects.Project', on_delete=models.SET_NULL, null=True, blank=True,
                                related_name='analytics_events')
    session_id = models.CharField(max_length=100, blank=True)
    referrer = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    def __str__(self):
        return f"{self.event_type} {self.path or self.project_id} @ {self.created_at}"

    class Meta:
        db_table = 'analytics_events'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['event_type', 'created_at'], name='analytics_type_created_idx'),
        ]
