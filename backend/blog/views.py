import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from django.shortcuts import get_object_or_404
from django.db import IntegrityError
from django.utils import timezone
from backend.core.permissions import module_permission, user_can
from backend.core.utils import create_audit_log, get_by_identifier
from .models import BlogCategory, BlogPost
from .serializers import BlogCategorySerializer, BlogPostSerializer
from .filters import BlogPostFilter

logger = logging.getLogger('backend.blog')


def _visible_posts(request):
    """Editors see every post; everyone else only posts that are live"""
    queryset = BlogPost.objects.select_related('category')
    if not user_can(request.user, 'blog', 'view'):
        queryset = queryset.filter(status='Published', publish_date__lte=timezone.now())
    return queryset


@api_view(['GET', 'POST'])
@permission_classes([module_permission('blog', public_read=True)])
def blog_category_list_create(request):
    """List blog categories (public) or create one"""
    if request.method == 'GET':
        return Response(BlogCategorySerializer(BlogCategory.objects.all(), many=True).data)

    serializer = BlogCategorySerializer(data=request.data)
    if serializer.is_valid():
        try:
            category = serializer.save()
        except IntegrityError as e:
            logger.error(f"IntegrityError creating blog category: {str(e)}", exc_info=True)
            return Response({'error': 'A category with this slug already exists'}, status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(request=request, action='create', model_name='BlogCategory',
                         object_id=category.pk, object_name=category.name)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([module_permission('blog', public_read=True)])
def blog_category_detail(request, pk):
    category = get_object_or_404(BlogCategory, pk=pk)

    if request.method == 'GET':
        return Response(BlogCategorySerializer(category).data)

    if request.method in ('PUT', 'PATCH'):
        serializer = BlogCategorySerializer(category, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='BlogCategory',
                             object_id=category.pk, object_name=category.name, changes=request.data)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    # Posts keep their content and lose the category
    create_audit_log(request=request, action='delete', model_name='BlogCategory',
                     object_id=category.pk, object_name=category.name)
    category.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([module_permission('blog', public_read=True)])
def blog_post_list_create(request):
    """List blog posts (newest first) or create a post"""
    try:
        if request.method == 'GET':
            filterset = BlogPostFilter(request.query_params, queryset=_visible_posts(request))
            if not filterset.is_valid():
                return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
            posts = filterset.qs.order_by('-publish_date', '-created_at')
            return Response(BlogPostSerializer(posts, many=True).data)

        logger.info(f"User {request.user.username} creating blog post '{request.data.get('title')}'")
        serializer = BlogPostSerializer(data=request.data, context={'request': request})
        if serializer.is_valid():
            try:
                post = serializer.save()
            except IntegrityError as e:
                logger.error(f"IntegrityError creating blog post: {str(e)}", exc_info=True)
                return Response({'error': 'A post with this slug already exists'}, status=status.HTTP_400_BAD_REQUEST)
            create_audit_log(request=request, action='create', model_name='BlogPost',
                             object_id=post.pk, object_name=post.title)
            return Response(BlogPostSerializer(post).data, status=status.HTTP_201_CREATED)

        logger.warning(f"Blog post validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    except Exception as e:
        logger.error(f"Unexpected error in blog_post_list_create: {str(e)}", exc_info=True)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([module_permission('blog', public_read=True)])
def blog_post_detail(request, identifier):
    """Retrieve a post by id or slug, update it or delete it"""
    if request.method == 'GET':
        post = get_by_identifier(_visible_posts(request), identifier)
        if not post:
            return Response({'error': 'Post not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(BlogPostSerializer(post).data)

    post = get_by_identifier(BlogPost.objects.all(), identifier)
    if post is None:
        return Response({'error': 'Post not found'}, status=status.HTTP_404_NOT_FOUND)

    if request.method in ('PUT', 'PATCH'):
        old_status = post.status
        serializer = BlogPostSerializer(post, data=request.data, partial=request.method == 'PATCH',
                                        context={'request': request})
        if serializer.is_valid():
            serializer.save()
            action = 'status_change' if post.status != old_status else 'update'
            create_audit_log(request=request, action=action, model_name='BlogPost',
                             object_id=post.pk, object_name=post.title,
                             changes={k: v for k, v in request.data.items() if k != 'content'})
            return Response(serializer.data)
        logger.warning(f"Blog post update validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    logger.info(f"User {request.user.username} deleting blog post {post.pk} ({post.title})")
    create_audit_log(request=request, action='delete', model_name='BlogPost',
                     object_id=post.pk, object_name=post.title)
    post.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)
