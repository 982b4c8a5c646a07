import django_filters
from django.db.models import Q
from django.utils import timezone
from .models import Lead, SiteVisit

UPCOMING_VISIT_STATUSES = ['Scheduled', 'Confirmed']


class LeadFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search', label='Search')
    status = django_filters.CharFilter(field_name='status', lookup_expr='iexact')
    source = django_filters.CharFilter(field_name='source', lookup_expr='iexact')
    project = django_filters.NumberFilter(field_name='project_id')
    assigned_to = django_filters.NumberFilter(field_name='assigned_to_id')
    date_from = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    date_to = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')

    class Meta:
        model = Lead
        fields = ['search', 'status', 'source', 'project', 'assigned_to', 'date_from', 'date_to']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) |
            Q(email__icontains=value) |
            Q(phone__icontains=value) |
            Q(project_interest__icontains=value)
        )


class SiteVisitFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(field_name='status', lookup_expr='iexact')
    project = django_filters.NumberFilter(field_name='project_id')
    lead = django_filters.NumberFilter(field_name='lead_id')
    date_from = django_filters.DateFilter(field_name='visit_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='visit_date', lookup_expr='lte')
    upcoming = django_filters.BooleanFilter(method='filter_upcoming')

    class Meta:
        model = SiteVisit
        fields = ['status', 'project', 'lead', 'date_from', 'date_to', 'upcoming']

    def filter_upcoming(self, queryset, name, value):
        if not value:
            return queryset
        return queryset.filter(visit_date__gte=timezone.localdate(), status__in=UPCOMING_VISIT_STATUSES)
