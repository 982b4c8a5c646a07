from django.urls import path
from .views import (
    page_list_create, page_detail,
    testimonial_list_create, testimonial_detail,
    gallery_list_create, gallery_detail
)

urlpatterns = [
    path('pages/', page_list_create, name='page-list-create'),
    path('pages/<str:identifier>/', page_detail, name='page-detail'),
    path('testimonials/', testimonial_list_create, name='testimonial-list-create'),
    path('testimonials/<int:pk>/', testimonial_detail, name='testimonial-detail'),
    path('galleries/', gallery_list_create, name='gallery-list-create'),
    path('galleries/<int:pk>/', gallery_detail, name='gallery-detail'),
]
