from django.contrib import admin
from .models import AnalyticsEvent


@admin.register(AnalyticsEvent)
class AnalyticsEventAdmin(admin.ModelAdmin):
    list_display = ['event_type', 'path', 'project', 'session_id', 'created_at']
    list_filter = ['event_type', 'created_at']
    search_fields = ['path', 'session_id', 'referrer']
    date_hierarchy = 'created_at'
