from rest_framework import serializers
from django.utils import timezone
from backend.projects.models import Project
from .models import Lead, LeadNote, SiteVisit


class LeadNoteSerializer(serializers.ModelSerializer):
    created_by_name = serializers.SerializerMethodField()

    class Meta:
        model = LeadNote
        fields = ['id', 'lead', 'text', 'created_by', 'created_by_name', 'created_at', 'updated_at']
        read_only_fields = ['lead', 'created_by', 'created_at', 'updated_at']

    def get_created_by_name(self, obj):
        return obj.created_by.display_name if obj.created_by else None

    def validate_text(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Note text cannot be empty')
        return value


class SiteVisitSerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source='project.name', read_only=True)
    lead_name = serializers.CharField(source='lead.name', read_only=True, default=None)

    class Meta:
        model = SiteVisit
        fields = [
            'id', 'lead', 'lead_name', 'customer_name', 'customer_phone', 'customer_email',
            'project', 'project_name', 'visit_date', 'visit_time', 'status', 'notes',
            'assigned_to', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']
        extra_kwargs = {'project': {'required': False}}

    def _current(self, attrs, field):
        if field in attrs:
            return attrs[field]
        return getattr(self.instance, field, None)

    def validate(self, attrs):
        lead = self._current(attrs, 'lead')

        # Customer details and project default to the linked lead's
        if lead:
            for field, lead_field in (('customer_name', 'name'), ('customer_phone', 'phone'),
                                      ('customer_email', 'email')):
                if not self._current(attrs, field):
                    attrs[field] = getattr(lead, lead_field)
            if not self._current(attrs, 'project') and lead.project_id:
                attrs['project'] = lead.project

        errors = {}
        for field, label in (('customer_name', 'Customer name'), ('customer_phone', 'Customer phone'),
                             ('project', 'Project'), ('visit_date', 'Visit date'),
                             ('visit_time', 'Visit time')):
            if not self._current(attrs, field):
                errors[field] = f'{label} is required'
        if errors:
            raise serializers.ValidationError(errors)

        visit_date = attrs.get('visit_date')
        rescheduled = self.instance is None or (visit_date and visit_date != self.instance.visit_date)
        if visit_date and rescheduled and visit_date < timezone.localdate():
            raise serializers.ValidationError({'visit_date': 'Visits cannot be scheduled in the past'})
        return attrs


class LeadSerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source='project.name', read_only=True, default=None)
    assigned_to_name = serializers.SerializerMethodField()
    status_message = serializers.CharField(read_only=True)

    class Meta:
        model = Lead
        fields = [
            'id', 'name', 'email', 'phone', 'project', 'project_name', 'project_interest',
            'message', 'status', 'status_message', 'source', 'assigned_to', 'assigned_to_name',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def get_assigned_to_name(self, obj):
        return obj.assigned_to.display_name if obj.assigned_to else None

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Name is required')
        return value

    def validate_phone(self, value):
        return value.strip()

    def validate(self, attrs):
        email = attrs.get('email', getattr(self.instance, 'email', ''))
        phone = attrs.get('phone', getattr(self.instance, 'phone', ''))
        if not (email or '').strip() and not (phone or '').strip():
            raise serializers.ValidationError({'contact': 'Provide an email address or a phone number'})

        # Link the project named in the enquiry, or describe the linked one
        interest = (attrs.get('project_interest') or '').strip()
        project = attrs.get('project')
        if project is None and interest and not getattr(self.instance, 'project_id', None):
            match = Project.objects.filter(name__iexact=interest).first()
            if match:
                attrs['project'] = match
        elif project is not None and not interest and not getattr(self.instance, 'project_interest', ''):
            attrs['project_interest'] = project.name
        return attrs


class LeadDetailSerializer(LeadSerializer):
    notes = LeadNoteSerializer(many=True, read_only=True)
    site_visits = SiteVisitSerializer(many=True, read_only=True)

    class Meta(LeadSerializer.Meta):
        fields = LeadSerializer.Meta.fields + ['notes', 'site_visits']
