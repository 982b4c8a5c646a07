"""
Aggregations behind the analytics report.

These work on plain sequences of dicts (or model instances) that the views
have already loaded, so they can be tested without a database.
"""
from collections import Counter
from datetime import date, datetime, timedelta
from django.utils.dateparse import parse_datetime
from backend.projects.models import summarize_plots

RANGE_DAYS = {
    '7days': 7,
    '30days': 30,
    '90days': 90,
}


def _value(item, key):
    if isinstance(item, dict):
        return item.get(key)
    return getattr(item, key, None)


def _as_datetime(value):
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        return parse_datetime(value)
    return None


def cutoff_for_range(range_key, now):
    """Start of the reporting window, or None for ``all`` and unknown keys"""
    days = RANGE_DAYS.get(range_key)
    if not days:
        return None
    return now - timedelta(days=days)


def filter_by_date_range(items, range_key, now, field='created_at'):
    cutoff = cutoff_for_range(range_key, now)
    if cutoff is None:
        return list(items)
    kept = []
    for item in items:
        when = _as_datetime(_value(item, field))
        if when is None:
            continue
        # Naive dates compare against a naive cutoff
        if (when.tzinfo is None) != (cutoff.tzinfo is None):
            when = when.replace(tzinfo=cutoff.tzinfo)
        if when >= cutoff:
            kept.append(item)
    return kept


def conversion_rate(conversions, views):
    if not views:
        return 0.0
    return round(conversions / views * 100, 2)


def count_by(items, key, default):
    counts = Counter()
    for item in items:
        counts[_value(item, key) or default] += 1
    return dict(counts)


def distribution(items, key, default):
    """Share of each value of ``key`` as [{label, count, percentage}]"""
    items = list(items)
    total = len(items)
    rows = [
        {'label': label, 'count': count, 'percentage': round(count / total * 100, 1)}
        for label, count in count_by(items, key, default).items()
    ]
    return sorted(rows, key=lambda r: (-r['count'], str(r['label'])))


def leads_over_time(leads, field='created_at'):
    per_day = Counter()
    for lead in leads:
        when = _as_datetime(_value(lead, field))
        if when is not None:
            per_day[when.date().isoformat()] += 1
    return [{'date': day, 'count': per_day[day]} for day in sorted(per_day)]


def heat_band(rate):
    if rate > 5:
        return 'high'
    if rate > 2:
        return 'medium'
    return 'low'


def _lead_matches(lead, project_id, project_name):
    if _value(lead, 'project') == project_id and project_id is not None:
        return True
    interest = (_value(lead, 'project_interest') or '').strip().lower()
    return bool(interest) and interest == (project_name or '').strip().lower()


def project_performance(projects, leads, events):
    """
    Per-project funnel: views, leads, brochure downloads, calls and shares,
    with conversion rate, relative heat intensity and rank by views.
    """
    events_by_project = Counter()
    for event in events:
        project_id = _value(event, 'project')
        if project_id is not None:
            events_by_project[(project_id, _value(event, 'event_type'))] += 1

    leads = list(leads)
    rows = []
    for project in projects:
        project_id = _value(project, 'id')
        name = _value(project, 'name')
        views = events_by_project[(project_id, 'project_view')]
        lead_count = sum(1 for lead in leads if _lead_matches(lead, project_id, name))
        rate = conversion_rate(lead_count, views)
        rows.append({
            'project_id': project_id,
            'project_name': name,
            'slug': _value(project, 'slug'),
            'views': views,
            'leads': lead_count,
            'downloads': events_by_project[(project_id, 'brochure_download')],
            'calls': events_by_project[(project_id, 'click_to_call')],
            'shares': events_by_project[(project_id, 'share_click')],
            'conversion_rate': rate,
            'heat': heat_band(rate),
        })

    max_views = max((r['views'] for r in rows), default=0)
    rows.sort(key=lambda r: (-r['views'], str(r['project_name'])))
    for rank, row in enumerate(rows, start=1):
        row['heat_intensity'] = round(row['views'] / max_views * 100, 1) if max_views else 0
        row['rank'] = rank
    return rows


def plot_status_summary(projects):
    totals = {'total': 0, 'available': 0, 'booked': 0, 'blocked': 0}
    for project in projects:
        for key, count in summarize_plots(_value(project, 'plots')).items():
            totals[key] += count
    return totals
