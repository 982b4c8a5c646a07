from rest_framework import serializers
from .models import AnalyticsEvent, PROJECT_EVENT_TYPES


class AnalyticsEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = AnalyticsEvent
        fields = ['id', 'event_type', 'path', 'project', 'session_id', 'referrer', 'created_at']
        read_only_fields = ['created_at']

    def validate(self, attrs):
        if attrs.get('event_type') in PROJECT_EVENT_TYPES and not attrs.get('project'):
            raise serializers.ValidationError({'project': f"A project is required for {attrs['event_type']} events"})
        return attrs
