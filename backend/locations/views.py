import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from django.shortcuts import get_object_or_404
from django.db import IntegrityError
from django.db.models import Count
from backend.core.permissions import module_permission, user_can
from .models import Location
from .serializers import LocationSerializer

logger = logging.getLogger('backend.locations')


@api_view(['GET', 'POST'])
@permission_classes([module_permission('projects', public_read=True)])
def location_list_create(request):
    """List locations (public) or create a new location"""
    try:
        if request.method == 'GET':
            locations = Location.objects.annotate(project_count=Count('projects'))
            # Inactive locations are only listed for project managers
            if not user_can(request.user, 'projects', 'view'):
                locations = locations.filter(is_active=True)
            serializer = LocationSerializer(locations, many=True)
            return Response(serializer.data)

        logger.info(f"User {request.user.username} creating location with data: {request.data}")
        serializer = LocationSerializer(data=request.data)
        if serializer.is_valid():
            try:
                location = serializer.save()
                logger.info(f"Location '{location.name}' created successfully by {request.user.username}")
                return Response(serializer.data, status=status.HTTP_201_CREATED)
            except IntegrityError as e:
                logger.error(f"IntegrityError creating location: {str(e)}", exc_info=True)
                return Response({'error': 'A location with this slug already exists'}, status=status.HTTP_400_BAD_REQUEST)

        logger.warning(f"Location creation validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    except Exception as e:
        logger.error(f"Unexpected error in location_list_create: {str(e)}", exc_info=True)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([module_permission('projects', public_read=True)])
def location_detail(request, pk):
    """Retrieve, update or delete a location"""
    location = get_object_or_404(Location, pk=pk)

    if request.method == 'GET':
        if not location.is_active and not user_can(request.user, 'projects', 'view'):
            return Response({'error': 'Location not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(LocationSerializer(location).data)

    if request.method in ('PUT', 'PATCH'):
        serializer = LocationSerializer(location, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            logger.info(f"Location {pk} updated by {request.user.username}")
            return Response(serializer.data)
        logger.warning(f"Location update validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    # DELETE
    if location.projects.exists():
        return Response({'error': 'Location has projects. Move or delete them first.'},
                        status=status.HTTP_400_BAD_REQUEST)
    logger.info(f"User {request.user.username} deleting location {pk} ({location.name})")
    location.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)
