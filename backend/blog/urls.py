from django.urls import path
from .views import (
    blog_category_list_create, blog_category_detail,
    blog_post_list_create, blog_post_detail
)

urlpatterns = [
    path('blog-categories/', blog_category_list_create, name='blog-category-list-create'),
    path('blog-categories/<int:pk>/', blog_category_detail, name='blog-category-detail'),
    path('blog-posts/', blog_post_list_create, name='blog-post-list-create'),
    path('blog-posts/<str:identifier>/', blog_post_detail, name='blog-post-detail'),
]
