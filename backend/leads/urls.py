from django.urls import path
from .views import (
    lead_list_create, lead_detail, lead_track,
    lead_note_list_create, lead_note_detail,
    site_visit_list_create, site_visit_detail
)

urlpatterns = [
    path('leads/', lead_list_create, name='lead-list-create'),
    path('leads/track/', lead_track, name='lead-track'),
    path('leads/<int:pk>/', lead_detail, name='lead-detail'),
    path('leads/<int:pk>/notes/', lead_note_list_create, name='lead-note-list-create'),
    path('leads/<int:pk>/notes/<int:note_id>/', lead_note_detail, name='lead-note-detail'),
    path('site-visits/', site_visit_list_create, name='site-visit-list-create'),
    path('site-visits/<int:pk>/', site_visit_detail, name='site-visit-detail'),
]
