from rest_framework import serializers
from .models import Location


class LocationSerializer(serializers.ModelSerializer):
    slug = serializers.SlugField(max_length=100, required=False, allow_blank=True)
    project_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Location
        fields = ['id', 'name', 'slug', 'is_active', 'project_count', 'created_at', 'updated_at']

    def validate_slug(self, value):
        if value and Location.objects.filter(slug=value).exclude(pk=getattr(self.instance, 'pk', None)).exists():
            raise serializers.ValidationError('A location with this slug already exists')
        return value
