import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from django.core.paginator import Paginator
from django.shortcuts import get_object_or_404
from django.db import transaction
from django.db.models import Count, Q
from backend.core.permissions import module_permission, user_can
from backend.core.utils import create_audit_log
from .models import Lead, LeadNote, SiteVisit, LEAD_STATUSES, PRE_VISIT_STATUSES
from .serializers import LeadSerializer, LeadDetailSerializer, LeadNoteSerializer, SiteVisitSerializer
from .filters import LeadFilter, SiteVisitFilter

logger = logging.getLogger('backend.leads')

DEFAULT_PAGE_SIZE = 50


def _status_counts(queryset):
    counts = {s: 0 for s in LEAD_STATUSES}
    for row in queryset.order_by().values('status').annotate(count=Count('id')):
        counts[row['status']] = row['count']
    counts['All'] = sum(counts.values())
    return counts


@api_view(['GET', 'POST'])
@permission_classes([module_permission('leads', public_create=True)])
def lead_list_create(request):
    """
    Capture a lead or list leads.

    Anyone may POST an enquiry. Visitors always create New leads and only
    choose the source; staff with lead create access may also set status
    and assignment for manual entries.

    The listing is paginated (``page``, ``limit``) and carries
    ``status_counts`` for every status, computed without the status filter
    so the dashboard tabs keep their totals.
    """
    if request.method == 'GET':
        filterset = LeadFilter(request.query_params, queryset=Lead.objects.select_related('project', 'assigned_to'))
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)

        tab_params = request.query_params.copy()
        tab_params.pop('status', None)
        status_counts = _status_counts(LeadFilter(tab_params, queryset=Lead.objects.all()).qs)

        try:
            page = max(int(request.query_params.get('page', 1)), 1)
            limit = max(int(request.query_params.get('limit', DEFAULT_PAGE_SIZE)), 1)
        except ValueError:
            return Response({'error': 'page and limit must be integers'}, status=status.HTTP_400_BAD_REQUEST)

        queryset = filterset.qs.order_by('-created_at', '-id')
        paginator = Paginator(queryset, limit)
        page_obj = paginator.get_page(page)

        return Response({
            'results': LeadSerializer(page_obj, many=True).data,
            'count': paginator.count,
            'next': page_obj.next_page_number() if page_obj.has_next() else None,
            'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
            'page': page_obj.number,
            'page_size': limit,
            'total_pages': paginator.num_pages,
            'status_counts': status_counts,
        })

    try:
        serializer = LeadSerializer(data=request.data)
        if not serializer.is_valid():
            logger.warning(f"Lead submission rejected: {serializer.errors}")
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        if user_can(request.user, 'leads', 'create'):
            lead = serializer.save()
            create_audit_log(request=request, action='create', model_name='Lead',
                             object_id=lead.pk, object_name=lead.name)
            logger.info(f"Lead {lead.pk} entered manually by {request.user.username}")
        else:
            source = (serializer.validated_data.get('source') or '').strip() or 'Website'
            lead = serializer.save(status='New', source=source, assigned_to=None)
            logger.info(f"Lead {lead.pk} captured from {source}")

        return Response(LeadSerializer(lead).data, status=status.HTTP_201_CREATED)
    except Exception as e:
        logger.error(f"Unexpected error in lead_list_create: {str(e)}", exc_info=True)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([module_permission('leads')])
def lead_detail(request, pk):
    """Retrieve (with notes and site visits), update or delete a lead"""
    lead = get_object_or_404(
        Lead.objects.select_related('project', 'assigned_to').prefetch_related(
            'notes__created_by', 'site_visits__project'),
        pk=pk
    )

    if request.method == 'GET':
        return Response(LeadDetailSerializer(lead).data)

    if request.method in ('PUT', 'PATCH'):
        old_status = lead.status
        serializer = LeadSerializer(lead, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            if lead.status != old_status:
                create_audit_log(request=request, action='status_change', model_name='Lead',
                                 object_id=lead.pk, object_name=lead.name,
                                 changes={'old_status': old_status, 'new_status': lead.status})
                logger.info(f"Lead {lead.pk} moved from {old_status} to {lead.status} by {request.user.username}")
            else:
                create_audit_log(request=request, action='update', model_name='Lead',
                                 object_id=lead.pk, object_name=lead.name, changes=request.data)
            return Response(LeadDetailSerializer(lead).data)
        logger.warning(f"Lead update validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    logger.info(f"User {request.user.username} deleting lead {lead.pk} ({lead.name})")
    create_audit_log(request=request, action='delete', model_name='Lead',
                     object_id=lead.pk, object_name=lead.name)
    lead.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([module_permission('leads')])
def lead_note_list_create(request, pk):
    """List a lead's notes (oldest first) or add one"""
    lead = get_object_or_404(Lead, pk=pk)

    if request.method == 'GET':
        notes = lead.notes.select_related('created_by').order_by('created_at', 'id')
        return Response(LeadNoteSerializer(notes, many=True).data)

    serializer = LeadNoteSerializer(data=request.data)
    if serializer.is_valid():
        note = serializer.save(lead=lead, created_by=request.user)
        create_audit_log(request=request, action='note_add', model_name='Lead',
                         object_id=lead.pk, object_name=lead.name, changes={'note_id': note.pk})
        return Response(LeadNoteSerializer(note).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([module_permission('leads')])
def lead_note_detail(request, pk, note_id):
    note = get_object_or_404(LeadNote.objects.select_related('lead', 'created_by'), pk=note_id, lead_id=pk)

    if request.method == 'GET':
        return Response(LeadNoteSerializer(note).data)

    if request.method in ('PUT', 'PATCH'):
        serializer = LeadNoteSerializer(note, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='note_update', model_name='Lead',
                             object_id=note.lead_id, object_name=note.lead.name, changes={'note_id': note.pk})
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request=request, action='note_delete', model_name='Lead',
                     object_id=note.lead_id, object_name=note.lead.name, changes={'note_id': note.pk})
    note.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


def mask_phone(phone):
    """Keep only the last four digits of a phone number"""
    if not phone:
        return phone
    return '*' * max(len(phone) - 4, 0) + phone[-4:]


def mask_email(email):
    """Mask the local part of an email, keeping its first letter"""
    if not email or '@' not in email:
        return email
    local, domain = email.split('@', 1)
    return f"{local[:1]}{'*' * max(len(local) - 1, 0)}@{domain}"


@api_view(['GET'])
@permission_classes([AllowAny])
def lead_track(request):
    """
    Public enquiry tracking.

    ``q`` is matched against phone, email (case-insensitive) or, when
    numeric, the enquiry id. The most recent match wins.
    """
    query = request.query_params.get('q', '').strip()
    if not query:
        return Response({'error': 'Enter your phone number, email or enquiry id'},
                        status=status.HTTP_400_BAD_REQUEST)

    match = Q(phone=query) | Q(email__iexact=query)
    if query.isdigit():
        match |= Q(pk=int(query))
    lead = Lead.objects.filter(match).order_by('-created_at', '-id').first()
    if not lead:
        logger.info("Lead tracking lookup found no enquiry")
        return Response({'error': 'No enquiry found for the details provided'}, status=status.HTTP_404_NOT_FOUND)

    notes = [{'text': n.text, 'date': n.created_at} for n in lead.notes.order_by('created_at', 'id')]
    return Response({
        'id': lead.pk,
        'name': lead.name,
        'phone': mask_phone(lead.phone),
        'email': mask_email(lead.email),
        'project_interest': lead.project_interest or (lead.project.name if lead.project_id else ''),
        'status': lead.status,
        'status_message': lead.status_message,
        'submitted_at': lead.created_at,
        'notes': notes,
    })


# Site visit views
@api_view(['GET', 'POST'])
@permission_classes([module_permission('site-visits')])
def site_visit_list_create(request):
    """List site visits (soonest first) or schedule one"""
    if request.method == 'GET':
        filterset = SiteVisitFilter(request.query_params,
                                    queryset=SiteVisit.objects.select_related('project', 'lead'))
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        visits = filterset.qs.order_by('visit_date', 'visit_time', 'id')
        return Response(SiteVisitSerializer(visits, many=True).data)

    serializer = SiteVisitSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Site visit validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        visit = serializer.save()
        lead = visit.lead
        if lead and lead.status in PRE_VISIT_STATUSES:
            old_status = lead.status
            lead.status = 'Site Visit Scheduled'
            lead.save(update_fields=['status', 'updated_at'])
            create_audit_log(request=request, action='status_change', model_name='Lead',
                             object_id=lead.pk, object_name=lead.name,
                             changes={'old_status': old_status, 'new_status': lead.status,
                                      'site_visit': visit.pk})

    create_audit_log(request=request, action='create', model_name='SiteVisit',
                     object_id=visit.pk, object_name=visit.customer_name)
    logger.info(f"Site visit {visit.pk} scheduled for {visit.visit_date} by {request.user.username}")
    return Response(SiteVisitSerializer(visit).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([module_permission('site-visits')])
def site_visit_detail(request, pk):
    visit = get_object_or_404(SiteVisit.objects.select_related('project', 'lead'), pk=pk)

    if request.method == 'GET':
        return Response(SiteVisitSerializer(visit).data)

    if request.method in ('PUT', 'PATCH'):
        old_status = visit.status
        serializer = SiteVisitSerializer(visit, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            action = 'status_change' if visit.status != old_status else 'update'
            create_audit_log(request=request, action=action, model_name='SiteVisit',
                             object_id=visit.pk, object_name=visit.customer_name, changes=request.data)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request=request, action='delete', model_name='SiteVisit',
                     object_id=visit.pk, object_name=visit.customer_name)
    visit.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)
