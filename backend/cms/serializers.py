from rest_framework import serializers
from .models import Page, Testimonial, Gallery


class PageSerializer(serializers.ModelSerializer):
    slug = serializers.SlugField(max_length=255, required=False, allow_blank=True)

    class Meta:
        model = Page
        fields = ['id', 'title', 'slug', 'content', 'status', 'meta_title', 'meta_description',
                  'published_at', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_slug(self, value):
        if value and Page.objects.filter(slug=value).exclude(pk=getattr(self.instance, 'pk', None)).exists():
            raise serializers.ValidationError('A page with this slug already exists')
        return value


class TestimonialSerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source='project.name', read_only=True, default=None)

    class Meta:
        model = Testimonial
        fields = ['id', 'name', 'designation', 'company', 'image', 'rating', 'testimonial',
                  'project', 'project_name', 'type', 'video_url', 'featured', 'status',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, attrs):
        testimonial_type = attrs.get('type', getattr(self.instance, 'type', 'text'))
        video_url = attrs.get('video_url', getattr(self.instance, 'video_url', ''))
        if testimonial_type == 'video' and not video_url:
            raise serializers.ValidationError({'video_url': 'Video testimonials need a video URL'})
        return attrs


class GallerySerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source='project.name', read_only=True, default=None)
    images = serializers.JSONField()

    class Meta:
        model = Gallery
        fields = ['id', 'title', 'description', 'images', 'project', 'project_name', 'is_active',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_images(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError('Images must be a list of URLs')
        images = [img.strip() for img in value if isinstance(img, str) and img.strip()]
        if not images:
            raise serializers.ValidationError('At least one image is required')
        return images
