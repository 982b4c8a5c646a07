from django.contrib import admin
from .models import Page, Testimonial, Gallery


@admin.register(Page)
class PageAdmin(admin.ModelAdmin):
    list_display = ['title', 'slug', 'status', 'published_at', 'updated_at']
    list_filter = ['status']
    search_fields = ['title', 'content']
    prepopulated_fields = {'slug': ('title',)}


@admin.register(Testimonial)
class TestimonialAdmin(admin.ModelAdmin):
    list_display = ['name', 'company', 'rating', 'type', 'featured', 'status']
    list_filter = ['status', 'type', 'featured', 'rating']
    search_fields = ['name', 'company', 'testimonial']


@admin.register(Gallery)
class GalleryAdmin(admin.ModelAdmin):
    list_display = ['title', 'project', 'is_active', 'created_at']
    list_filter = ['is_active', 'project']
    search_fields = ['title', 'description']
