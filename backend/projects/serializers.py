from rest_framework import serializers
from .models import Project, ProjectCategory, PLOT_STATUSES, normalize_plot_status


class ProjectCategorySerializer(serializers.ModelSerializer):
    slug = serializers.SlugField(max_length=100, required=False, allow_blank=True)

    class Meta:
        model = ProjectCategory
        fields = ['id', 'name', 'slug', 'created_at', 'updated_at']

    def validate_slug(self, value):
        if value and ProjectCategory.objects.filter(slug=value).exclude(pk=getattr(self.instance, 'pk', None)).exists():
            raise serializers.ValidationError('A category with this slug already exists')
        return value


class PlotSerializer(serializers.Serializer):
    plotNumber = serializers.CharField(max_length=50)
    dimensions = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    facing = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    price = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    status = serializers.CharField(max_length=20, required=False, default='Available')

    def validate_status(self, value):
        status = normalize_plot_status(value)
        if not status:
            raise serializers.ValidationError(f"Status must be one of: {', '.join(PLOT_STATUSES)}")
        return status


def _validate_string_list(value, label):
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise serializers.ValidationError(f'{label} must be a list of strings')
    return [v.strip() for v in value if v.strip()]


class ProjectSerializer(serializers.ModelSerializer):
    slug = serializers.SlugField(max_length=255, required=False, allow_blank=True)
    category_name = serializers.CharField(source='category.name', read_only=True)
    location_name = serializers.CharField(source='location.name', read_only=True)
    plots = serializers.JSONField(required=False)
    plot_summary = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = [
            'id', 'name', 'slug', 'category', 'category_name', 'location', 'location_name',
            'description', 'price', 'offer_price', 'total_plots', 'plots', 'plot_summary',
            'images', 'featured_image', 'video_url', 'brochure_pdf', 'map_embed_url', 'rera_number',
            'amenities', 'location_advantages', 'why_invest', 'seo', 'schema', 'status',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def get_plot_summary(self, obj):
        return obj.plot_summary

    def validate_slug(self, value):
        if value and Project.objects.filter(slug=value).exclude(pk=getattr(self.instance, 'pk', None)).exists():
            raise serializers.ValidationError('A project with this slug already exists')
        return value

    def validate_plots(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError('Plots must be a list')
        plot_serializer = PlotSerializer(data=value, many=True)
        if not plot_serializer.is_valid():
            raise serializers.ValidationError(plot_serializer.errors)
        plots = [dict(plot) for plot in plot_serializer.validated_data]
        numbers = [p['plotNumber'] for p in plots]
        duplicates = sorted({n for n in numbers if numbers.count(n) > 1})
        if duplicates:
            raise serializers.ValidationError(f"Duplicate plot numbers: {', '.join(duplicates)}")
        return plots

    def validate_images(self, value):
        return _validate_string_list(value, 'Images')

    def validate_amenities(self, value):
        return _validate_string_list(value, 'Amenities')

    def validate_location_advantages(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError('Location advantages must be a list')
        return value

    def validate_why_invest(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError('Why invest must be a list')
        return value

    def validate_seo(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError('SEO data must be an object')
        return value

    def validate_schema(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError('Schema data must be an object')
        return value

    def validate(self, attrs):
        # total_plots follows the plot list unless the client sets it explicitly
        if 'plots' in attrs and 'total_plots' not in self.initial_data:
            attrs['total_plots'] = len(attrs['plots'])
        return attrs


class ProjectListSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True)
    location_name = serializers.CharField(source='location.name', read_only=True)
    plot_summary = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = [
            'id', 'name', 'slug', 'category', 'category_name', 'location', 'location_name',
            'price', 'offer_price', 'total_plots', 'plot_summary', 'featured_image',
            'rera_number', 'status', 'created_at', 'updated_at'
        ]

    def get_plot_summary(self, obj):
        return obj.plot_summary
