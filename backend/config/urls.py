"""
URL configuration for the estate backend.

Every app mounts its endpoints under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "Estate Admin Panel"
admin.site.site_title = "Estate Admin Portal"
admin.site.index_title = "Website and lead management"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('backend.core.urls')),
    path('api/v1/', include('backend.locations.urls')),
    path('api/v1/', include('backend.projects.urls')),
    path('api/v1/', include('backend.blog.urls')),
    path('api/v1/', include('backend.cms.urls')),
    path('api/v1/', include('backend.leads.urls')),
    path('api/v1/', include('backend.reports.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
    re_path(r'^static/(?P<path>.*)$', serve, {'document_root': settings.STATIC_ROOT}),
]
