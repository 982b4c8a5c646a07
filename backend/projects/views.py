import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from django.shortcuts import get_object_or_404
from django.db import IntegrityError
from backend.core.permissions import module_permission, user_can
from backend.core.utils import create_audit_log, get_by_identifier
from backend.core.cache_utils import get_cached_public_projects, cache_public_projects
from .models import Project, ProjectCategory, normalize_plot_status, PLOT_STATUSES
from .serializers import ProjectSerializer, ProjectListSerializer, ProjectCategorySerializer
from .filters import ProjectFilter

logger = logging.getLogger('backend.projects')

PUBLIC_FILTER_PARAMS = ['search', 'category', 'location', 'status']


def _visible_projects(request):
    queryset = Project.objects.select_related('category', 'location')
    if not user_can(request.user, 'projects', 'view'):
        queryset = queryset.filter(status='Active')
    return queryset


# Project category views
@api_view(['GET', 'POST'])
@permission_classes([module_permission('projects', public_read=True)])
def category_list_create(request):
    """List project categories (public) or create a new one"""
    if request.method == 'GET':
        categories = ProjectCategory.objects.all()
        return Response(ProjectCategorySerializer(categories, many=True).data)

    serializer = ProjectCategorySerializer(data=request.data)
    if serializer.is_valid():
        try:
            category = serializer.save()
        except IntegrityError as e:
            logger.error(f"IntegrityError creating project category: {str(e)}", exc_info=True)
            return Response({'error': 'A category with this slug already exists'}, status=status.HTTP_400_BAD_REQUEST)
        logger.info(f"Project category '{category.name}' created by {request.user.username}")
        create_audit_log(request=request, action='create', model_name='ProjectCategory',
                         object_id=category.pk, object_name=category.name)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    logger.warning(f"Project category validation failed: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([module_permission('projects', public_read=True)])
def category_detail(request, pk):
    """Retrieve, update or delete a project category"""
    category = get_object_or_404(ProjectCategory, pk=pk)

    if request.method == 'GET':
        return Response(ProjectCategorySerializer(category).data)

    if request.method in ('PUT', 'PATCH'):
        serializer = ProjectCategorySerializer(category, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='ProjectCategory',
                             object_id=category.pk, object_name=category.name, changes=request.data)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    # DELETE
    if category.projects.exists():
        return Response({'error': 'Category has projects. Move or delete them first.'},
                        status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request=request, action='delete', model_name='ProjectCategory',
                     object_id=category.pk, object_name=category.name)
    category.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Project views
@api_view(['GET', 'POST'])
@permission_classes([module_permission('projects', public_read=True)])
def project_list_create(request):
    """
    List projects or create a new project.

    Anonymous visitors and users without project access only see Active
    projects; their listings are served from the public project cache.
    """
    try:
        if request.method == 'GET':
            is_manager = user_can(request.user, 'projects', 'view')
            cache_key = None
            if not is_manager:
                filters_dict = {k: request.query_params.get(k, '') for k in PUBLIC_FILTER_PARAMS}
                cached_data, cache_key = get_cached_public_projects(filters_dict)
                if cached_data is not None:
                    return Response(cached_data)

            filterset = ProjectFilter(request.query_params, queryset=_visible_projects(request))
            if not filterset.is_valid():
                return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
            queryset = filterset.qs.order_by('-created_at')
            data = ProjectListSerializer(queryset, many=True).data

            if cache_key:
                cache_public_projects(cache_key, data)
            return Response(data)

        logger.info(f"User {request.user.username} creating project '{request.data.get('name')}'")
        serializer = ProjectSerializer(data=request.data)
        if serializer.is_valid():
            try:
                project = serializer.save()
            except IntegrityError as e:
                logger.error(f"IntegrityError creating project: {str(e)}", exc_info=True)
                return Response({'error': 'A project with this slug already exists'}, status=status.HTTP_400_BAD_REQUEST)
            logger.info(f"Project '{project.name}' created successfully by {request.user.username}")
            create_audit_log(request=request, action='create', model_name='Project',
                             object_id=project.pk, object_name=project.name)
            return Response(ProjectSerializer(project).data, status=status.HTTP_201_CREATED)

        logger.warning(f"Project creation validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    except Exception as e:
        logger.error(f"Unexpected error in project_list_create: {str(e)}", exc_info=True)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([module_permission('projects', public_read=True)])
def project_detail(request, identifier):
    """Retrieve a project by id or slug, update it or delete it"""
    if request.method == 'GET':
        project = get_by_identifier(_visible_projects(request), identifier)
        if not project:
            return Response({'error': 'Project not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(ProjectSerializer(project).data)

    project = get_by_identifier(Project.objects.all(), identifier)
    if project is None:
        return Response({'error': 'Project not found'}, status=status.HTTP_404_NOT_FOUND)

    if request.method in ('PUT', 'PATCH'):
        serializer = ProjectSerializer(project, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            try:
                serializer.save()
            except IntegrityError as e:
                logger.error(f"IntegrityError updating project {project.pk}: {str(e)}", exc_info=True)
                return Response({'error': 'A project with this slug already exists'}, status=status.HTTP_400_BAD_REQUEST)
            create_audit_log(request=request, action='update', model_name='Project',
                             object_id=project.pk, object_name=project.name,
                             changes={k: v for k, v in request.data.items() if k != 'plots'})
            logger.info(f"Project {project.pk} updated by {request.user.username}")
            return Response(serializer.data)
        logger.warning(f"Project update validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    # DELETE
    logger.info(f"User {request.user.username} deleting project {project.pk} ({project.name})")
    create_audit_log(request=request, action='delete', model_name='Project',
                     object_id=project.pk, object_name=project.name)
    project.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([module_permission('projects', public_read=True)])
def project_plots(request, pk):
    """Plot layout of a project with per-status counts"""
    project = _visible_projects(request).filter(pk=pk).first()
    if not project:
        return Response({'error': 'Project not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response({
        'project': project.pk,
        'total_plots': project.total_plots,
        'plots': project.plots,
        'summary': project.plot_summary,
    })


@api_view(['PATCH'])
@permission_classes([module_permission('projects')])
def project_plot_status(request, pk, plot_number):
    """Change the status of a single plot"""
    project = get_object_or_404(Project, pk=pk)
    new_status = normalize_plot_status(request.data.get('status'))
    if not new_status:
        return Response({'error': f"Status must be one of: {', '.join(PLOT_STATUSES)}"},
                        status=status.HTTP_400_BAD_REQUEST)

    plots = [dict(p) for p in project.plots or []]
    for plot in plots:
        if str(plot.get('plotNumber')) == str(plot_number):
            old_status = plot.get('status')
            plot['status'] = new_status
            break
    else:
        return Response({'error': f'Plot {plot_number} not found'}, status=status.HTTP_404_NOT_FOUND)

    project.plots = plots
    project.save(update_fields=['plots', 'updated_at'])
    create_audit_log(request=request, action='status_change', model_name='Project',
                     object_id=project.pk, object_name=project.name,
                     changes={'plot': plot_number, 'old_status': old_status, 'new_status': new_status})
    logger.info(f"Plot {plot_number} of project {project.pk} set to {new_status} by {request.user.username}")
    return Response({
        'plot': project.find_plot(plot_number),
        'summary': project.plot_summary,
    })
