import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from django.contrib.auth import get_user_model
from django.db.models import Count
from django.utils import timezone
from backend.core.cache_utils import cached_query, DASHBOARD_CACHE_TTL, DASHBOARD_PREFIX
from backend.core.permissions import module_permission
from backend.blog.models import BlogPost
from backend.leads.models import Lead, SiteVisit, LEAD_STATUSES
from backend.leads.serializers import LeadSerializer, SiteVisitSerializer
from backend.leads.filters import UPCOMING_VISIT_STATUSES
from backend.projects.models import Project
from .aggregation import (
    RANGE_DAYS, cutoff_for_range, filter_by_date_range, conversion_rate, count_by,
    distribution, leads_over_time, project_performance, plot_status_summary
)
from .models import AnalyticsEvent
from .serializers import AnalyticsEventSerializer

User = get_user_model()

logger = logging.getLogger('backend.reports')


@api_view(['POST'])
@permission_classes([AllowAny])
def record_event(request):
    """Record a visitor interaction from the public site"""
    if not isinstance(request.data, dict):
        return Response({'error': 'Expected a JSON object'}, status=status.HTTP_400_BAD_REQUEST)
    data = request.data.copy()
    if not data.get('referrer'):
        data['referrer'] = request.META.get('HTTP_REFERER', '')[:500]
    serializer = AnalyticsEventSerializer(data=data)
    if serializer.is_valid():
        event = serializer.save()
        return Response({'id': event.pk, 'event_type': event.event_type}, status=status.HTTP_201_CREATED)
    logger.warning(f"Analytics event rejected: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


def build_analytics_report(range_key, now=None):
    now = now or timezone.now()
    cutoff = cutoff_for_range(range_key, now)

    events = AnalyticsEvent.objects.all()
    if cutoff is not None:
        events = events.filter(created_at__gte=cutoff)
    events = list(events.values('event_type', 'project', 'created_at'))

    leads = filter_by_date_range(
        Lead.objects.values('id', 'project', 'project_interest', 'status', 'source', 'created_at'),
        range_key, now)
    visits = filter_by_date_range(SiteVisit.objects.values('id', 'status', 'created_at'), range_key, now)
    projects = list(Project.objects.values('id', 'name', 'slug'))

    event_counts = count_by(events, 'event_type', 'unknown')
    total_page_views = event_counts.get('page_view', 0)

    return {
        'range': range_key,
        'total_page_views': total_page_views,
        'total_leads': len(leads),
        'conversion_rate': conversion_rate(len(leads), total_page_views),
        'site_visits': len(visits),
        'phone_calls': event_counts.get('click_to_call', 0),
        'event_counts': event_counts,
        'project_performance': project_performance(projects, leads, events),
        'lead_sources': distribution(leads, 'source', 'Direct'),
        'lead_status': distribution(leads, 'status', 'New'),
        'visit_status': distribution(visits, 'status', 'Scheduled'),
        'leads_over_time': leads_over_time(leads),
    }


@api_view(['GET'])
@permission_classes([module_permission('analytics')])
def analytics_report(request):
    """
    Site analytics for ``range`` (7days, 30days, 90days or all).

    Events, leads and site visits are all limited to the window.
    """
    range_key = request.query_params.get('range', '7days')
    if range_key != 'all' and range_key not in RANGE_DAYS:
        return Response({'error': f"range must be one of: {', '.join(list(RANGE_DAYS) + ['all'])}"},
                        status=status.HTTP_400_BAD_REQUEST)
    try:
        return Response(build_analytics_report(range_key))
    except Exception as e:
        logger.error(f"Error building analytics report: {str(e)}", exc_info=True)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


@cached_query(cache_ttl=DASHBOARD_CACHE_TTL, key_prefix=DASHBOARD_PREFIX)
def build_dashboard():
    today = timezone.localdate()

    lead_counts = {s: 0 for s in LEAD_STATUSES}
    for row in Lead.objects.order_by().values('status').annotate(count=Count('id')):
        lead_counts[row['status']] = row['count']

    upcoming = SiteVisit.objects.select_related('project', 'lead').filter(
        visit_date__gte=today, status__in=UPCOMING_VISIT_STATUSES
    ).order_by('visit_date', 'visit_time')

    return {
        'counts': {
            'projects': Project.objects.count(),
            'active_projects': Project.objects.filter(status='Active').count(),
            'leads': sum(lead_counts.values()),
            'new_leads': lead_counts['New'],
            'blog_posts': BlogPost.objects.count(),
            'published_posts': BlogPost.objects.filter(status='Published').count(),
            'users': User.objects.count(),
            'upcoming_visits': upcoming.count(),
        },
        'plot_summary': plot_status_summary(Project.objects.values('plots')),
        'lead_status_counts': lead_counts,
        'recent_leads': list(LeadSerializer(
            Lead.objects.select_related('project', 'assigned_to').order_by('-created_at')[:5], many=True).data),
        'upcoming_visits': list(SiteVisitSerializer(upcoming[:5], many=True).data),
        'generated_at': timezone.now(),
    }


@api_view(['GET'])
@permission_classes([module_permission('dashboard')])
def dashboard(request):
    """Dashboard KPIs, cached until leads, projects, posts, visits or users change"""
    try:
        return Response(build_dashboard())
    except Exception as e:
        logger.error(f"Error building dashboard: {str(e)}", exc_info=True)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
