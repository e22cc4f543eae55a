import bleach
from django.conf import settings
from rest_framework import serializers

from frontdesk.choices import AGE_MAX, AGE_MIN, BLOOD_GROUPS, GENDERS, NAME_MIN_LENGTH
from frontdesk.models import Patient


class PatientCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    age = serializers.IntegerField(min_value=AGE_MIN, max_value=AGE_MAX, error_messages={
        'min_value': f'Age must be between {AGE_MIN} and {AGE_MAX}',
        'max_value': f'Age must be between {AGE_MIN} and {AGE_MAX}',
    })
    gender = serializers.ChoiceField(choices=GENDERS)
    bloodGroup = serializers.ChoiceField(choices=BLOOD_GROUPS)
    # identifiers are compared byte for byte, never trimmed
    fingerprintData = serializers.CharField(trim_whitespace=False)
    medicalDocument = serializers.FileField(required=False, allow_null=True, allow_empty_file=False)

    def validate_name(self, v):
        v = bleach.clean((v or '').strip(), tags=set(), strip=True)
        if len(v) < NAME_MIN_LENGTH:
            raise serializers.ValidationError(f'Name must be at least {NAME_MIN_LENGTH} characters')
        return v

    def validate_medicalDocument(self, f):
        if not f:
            return None
        if f.size > settings.UPLOAD_MAX_MB * 1024 * 1024:
            raise serializers.ValidationError(f'Document exceeds {settings.UPLOAD_MAX_MB} MB')
        content_type = getattr(f, 'content_type', '') or ''
        if not any(content_type.startswith(t) for t in settings.ALLOWED_UPLOAD_TYPES):
            raise serializers.ValidationError(f'Unsupported document type: {content_type or "unknown"}')
        return f


class PatientScanSerializer(serializers.Serializer):
    fingerprintData = serializers.CharField(trim_whitespace=False)


class PatientSerializer(serializers.ModelSerializer):
    bloodGroup = serializers.CharField(source='blood_group')
    medicalDocument = serializers.SerializerMethodField()
    fingerprintData = serializers.CharField(source='fingerprint_data')
    createdAt = serializers.DateTimeField(source='created_at')

    class Meta:
        model = Patient
        fields = ['id', 'name', 'age', 'gender', 'bloodGroup', 'medicalDocument', 'fingerprintData', 'createdAt']

    def get_medicalDocument(self, obj) -> str:
        if not obj.medical_document:
            return ''
        url = obj.medical_document.url
        request = self.context.get('request')
        return request.build_absolute_uri(url) if request else url
