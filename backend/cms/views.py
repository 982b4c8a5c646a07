import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from django.shortcuts import get_object_or_404
from django.db import IntegrityError
from backend.core.permissions import module_permission, user_can
from backend.core.utils import create_audit_log, get_by_identifier
from .models import Page, Testimonial, Gallery
from .serializers import PageSerializer, TestimonialSerializer, GallerySerializer

logger = logging.getLogger('backend.cms')

TRUE_VALUES = ('true', '1', 'yes')


# Page views
@api_view(['GET', 'POST'])
@permission_classes([module_permission('pages', public_read=True)])
def page_list_create(request):
    """List pages (published only for visitors) or create one"""
    if request.method == 'GET':
        pages = Page.objects.all()
        if not user_can(request.user, 'pages', 'view'):
            pages = pages.filter(status='Published')
        status_filter = request.query_params.get('status')
        if status_filter:
            pages = pages.filter(status=status_filter)
        return Response(PageSerializer(pages.order_by('title'), many=True).data)

    serializer = PageSerializer(data=request.data)
    if serializer.is_valid():
        try:
            page = serializer.save()
        except IntegrityError as e:
            logger.error(f"IntegrityError creating page: {str(e)}", exc_info=True)
            return Response({'error': 'A page with this slug already exists'}, status=status.HTTP_400_BAD_REQUEST)
        logger.info(f"Page '{page.title}' created by {request.user.username}")
        create_audit_log(request=request, action='create', model_name='Page',
                         object_id=page.pk, object_name=page.title)
        return Response(PageSerializer(page).data, status=status.HTTP_201_CREATED)
    logger.warning(f"Page validation failed: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([module_permission('pages', public_read=True)])
def page_detail(request, identifier):
    """Retrieve a page by id or slug, update it or delete it"""
    if request.method == 'GET':
        pages = Page.objects.all()
        if not user_can(request.user, 'pages', 'view'):
            pages = pages.filter(status='Published')
        page = get_by_identifier(pages, identifier)
        if not page:
            return Response({'error': 'Page not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(PageSerializer(page).data)

    page = get_by_identifier(Page.objects.all(), identifier)
    if page is None:
        return Response({'error': 'Page not found'}, status=status.HTTP_404_NOT_FOUND)

    if request.method in ('PUT', 'PATCH'):
        serializer = PageSerializer(page, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='Page',
                             object_id=page.pk, object_name=page.title,
                             changes={k: v for k, v in request.data.items() if k != 'content'})
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request=request, action='delete', model_name='Page',
                     object_id=page.pk, object_name=page.title)
    page.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Testimonial views
@api_view(['GET', 'POST'])
@permission_classes([module_permission('testimonials', public_read=True)])
def testimonial_list_create(request):
    if request.method == 'GET':
        testimonials = Testimonial.objects.select_related('project')
        if not user_can(request.user, 'testimonials', 'view'):
            testimonials = testimonials.filter(status='Active')
        featured = request.query_params.get('featured')
        if featured is not None and featured != '':
            testimonials = testimonials.filter(featured=featured.lower() in TRUE_VALUES)
        project_filter = request.query_params.get('project')
        if project_filter:
            testimonials = testimonials.filter(project_id=project_filter)
        return Response(TestimonialSerializer(testimonials, many=True).data)

    serializer = TestimonialSerializer(data=request.data)
    if serializer.is_valid():
        testimonial = serializer.save()
        create_audit_log(request=request, action='create', model_name='Testimonial',
                         object_id=testimonial.pk, object_name=testimonial.name)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    logger.warning(f"Testimonial validation failed: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([module_permission('testimonials', public_read=True)])
def testimonial_detail(request, pk):
    testimonial = get_object_or_404(Testimonial, pk=pk)

    if request.method == 'GET':
        if testimonial.status != 'Active' and not user_can(request.user, 'testimonials', 'view'):
            return Response({'error': 'Testimonial not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(TestimonialSerializer(testimonial).data)

    if request.method in ('PUT', 'PATCH'):
        serializer = TestimonialSerializer(testimonial, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='Testimonial',
                             object_id=testimonial.pk, object_name=testimonial.name, changes=request.data)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request=request, action='delete', model_name='Testimonial',
                     object_id=testimonial.pk, object_name=testimonial.name)
    testimonial.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Gallery views
@api_view(['GET', 'POST'])
@permission_classes([module_permission('gallery', public_read=True)])
def gallery_list_create(request):
    if request.method == 'GET':
        galleries = Gallery.objects.select_related('project')
        if not user_can(request.user, 'gallery', 'view'):
            galleries = galleries.filter(is_active=True)
        project_filter = request.query_params.get('project')
        if project_filter:
            galleries = galleries.filter(project_id=project_filter)
        return Response(GallerySerializer(galleries, many=True).data)

    serializer = GallerySerializer(data=request.data)
    if serializer.is_valid():
        gallery = serializer.save()
        create_audit_log(request=request, action='create', model_name='Gallery',
                         object_id=gallery.pk, object_name=gallery.title)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    logger.warning(f"Gallery validation failed: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([module_permission('gallery', public_read=True)])
def gallery_detail(request, pk):
    gallery = get_object_or_404(Gallery, pk=pk)

    if request.method == 'GET':
        if not gallery.is_active and not user_can(request.user, 'gallery', 'view'):
            return Response({'error': 'Gallery not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(GallerySerializer(gallery).data)

    if request.method in ('PUT', 'PATCH'):
        serializer = GallerySerializer(gallery, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='Gallery',
                             object_id=gallery.pk, object_name=gallery.title)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request=request, action='delete', model_name='Gallery',
                     object_id=gallery.pk, object_name=gallery.title)
    gallery.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)
