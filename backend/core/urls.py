from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, user_me, change_password,
    user_list_create, user_detail,
    role_list_create, role_detail,
    setting_list, setting_document,
    menus_setting, cms_pages_setting, seo_settings_setting,
    audit_log_list, audit_log_detail,
    global_search
)

urlpatterns = [
    # Auth endpoints
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),
    path('auth/change-password/', change_password, name='change-password'),

    # User and role endpoints
    path('users/', user_list_create, name='user-list-create'),
    path('users/<int:pk>/', user_detail, name='user-detail'),
    path('roles/', role_list_create, name='role-list-create'),
    path('roles/<int:pk>/', role_detail, name='role-detail'),

    # Settings documents
    path('settings/', setting_list, name='setting-list'),
    path('settings/<str:key>/', setting_document, name='setting-document'),
    path('menus/', menus_setting, name='menus-setting'),
    path('cms-pages/', cms_pages_setting, name='cms-pages-setting'),
    path('seo-settings/', seo_settings_setting, name='seo-settings-setting'),

    # AuditLog endpoints
    path('audit-logs/', audit_log_list, name='audit-log-list'),
    path('audit-logs/<int:pk>/', audit_log_detail, name='audit-log-detail'),

    # Global search endpoint
    path('search/', global_search, name='global-search'),
]
