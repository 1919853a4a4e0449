from django.conf import settings
from rest_framework import serializers


def validate_upload(f):
    size_mb = (f.size or 0) / (1024 * 1024)
    if size_mb > settings.UPLOAD_MAX_MB:
        raise serializers.ValidationError('File too large')
    ctype = getattr(f, 'content_type', '') or ''
    if not any(ctype.startswith(prefix) for prefix in settings.ALLOWED_UPLOAD_TYPES):
        raise serializers.ValidationError('Unsupported file type')
    return f


class RecordUploadSerializer(serializers.Serializer):
    appointmentId = serializers.IntegerField(min_value=1)
    file = serializers.FileField(validators=[validate_upload])


class RecordUpdateSerializer(serializers.Serializer):
    appointmentId = serializers.IntegerField(min_value=1, required=False)
    file = serializers.FileField(validators=[validate_upload], required=False)


class RecordListQuerySerializer(serializers.Serializer):
    appointmentId = serializers.IntegerField(min_value=1, required=False)
