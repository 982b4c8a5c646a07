from django.urls import path
from .views import (
    category_list_create, category_detail,
    project_list_create, project_detail,
    project_plots, project_plot_status
)

urlpatterns = [
    path('project-categories/', category_list_create, name='project-category-list-create'),
    path('project-categories/<int:pk>/', category_detail, name='project-category-detail'),
    path('projects/', project_list_create, name='project-list-create'),
    path('projects/<int:pk>/plots/', project_plots, name='project-plots'),
    path('projects/<int:pk>/plots/<str:plot_number>/', project_plot_status, name='project-plot-status'),
    path('projects/<str:identifier>/', project_detail, name='project-detail'),
]
