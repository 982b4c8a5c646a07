import django_filters
from django.db.models import Q
from .models import Project


class ProjectFilter(django_filters.FilterSet):
    """
    Filters for the project listing. ``category`` and ``location`` accept
    either an id or a slug.
    """
    search = django_filters.CharFilter(method='filter_search', label='Search')
    category = django_filters.CharFilter(method='filter_category', label='Category')
    location = django_filters.CharFilter(method='filter_location', label='Location')
    status = django_filters.CharFilter(field_name='status', lookup_expr='iexact')

    class Meta:
        model = Project
        fields = ['search', 'category', 'location', 'status']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) |
            Q(description__icontains=value) |
            Q(location__name__icontains=value) |
            Q(category__name__icontains=value)
        )

    def filter_category(self, queryset, name, value):
        if value.isdigit():
            return queryset.filter(category_id=int(value))
        return queryset.filter(category__slug=value)

    def filter_location(self, queryset, name, value):
        if value.isdigit():
            return queryset.filter(location_id=int(value))
        return queryset.filter(location__slug=value)
