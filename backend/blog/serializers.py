from rest_framework import serializers
from .models import BlogCategory, BlogPost


class BlogCategorySerializer(serializers.ModelSerializer):
    slug = serializers.SlugField(max_length=100, required=False, allow_blank=True)
    post_count = serializers.SerializerMethodField()

    class Meta:
        model = BlogCategory
        fields = ['id', 'name', 'slug', 'post_count', 'created_at', 'updated_at']

    def get_post_count(self, obj):
        return obj.posts.count()

    def validate_slug(self, value):
        if value and BlogCategory.objects.filter(slug=value).exclude(pk=getattr(self.instance, 'pk', None)).exists():
            raise serializers.ValidationError('A category with this slug already exists')
        return value


class BlogPostSerializer(serializers.ModelSerializer):
    slug = serializers.SlugField(max_length=255, required=False, allow_blank=True)
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)

    class Meta:
        model = BlogPost
        fields = [
            'id', 'title', 'slug', 'category', 'category_name', 'content', 'excerpt',
            'featured_image', 'meta_description', 'status', 'publish_date', 'author',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Title is required')
        return value

    def validate_slug(self, value):
        if value and BlogPost.objects.filter(slug=value).exclude(pk=getattr(self.instance, 'pk', None)).exists():
            raise serializers.ValidationError('A post with this slug already exists')
        return value

    def create(self, validated_data):
        if not validated_data.get('author'):
            request = self.context.get('request')
            user = getattr(request, 'user', None)
            validated_data['author'] = (user.display_name if user and user.is_authenticated else '') or 'Admin'
        return super().create(validated_data)
