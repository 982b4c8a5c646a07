from django.urls import path
from . import views

urlpatterns = [
    path('analytics/events/', views.record_event, name='analytics-event-create'),
    path('reports/analytics/', views.analytics_report, name='analytics-report'),
    path('reports/dashboard/', views.dashboard, name='dashboard'),
]
