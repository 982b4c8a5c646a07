from django.contrib import admin
from .models import Lead, LeadNote, SiteVisit


class LeadNoteInline(admin.TabularInline):
    model = LeadNote
    extra = 0
    readonly_fields = ['created_by', 'created_at']


@admin.register(Lead)
class LeadAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'email', 'project', 'status', 'source', 'assigned_to', 'created_at']
    list_filter = ['status', 'source', 'project', 'created_at']
    search_fields = ['name', 'phone', 'email', 'project_interest']
    inlines = [LeadNoteInline]
    date_hierarchy = 'created_at'


@admin.register(SiteVisit)
class SiteVisitAdmin(admin.ModelAdmin):
    list_display = ['customer_name', 'customer_phone', 'project', 'visit_date', 'visit_time', 'status']
    list_filter = ['status', 'project', 'visit_date']
    search_fields = ['customer_name', 'customer_phone', 'customer_email']
