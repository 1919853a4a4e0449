from rest_framework import serializers

from clinic.models import Doctor
from .common import PageQuerySerializer, clean_text


class DoctorSerializer(serializers.ModelSerializer):
    class Meta:
        model = Doctor
        fields = ['id', 'name', 'specialization', 'schedule', 'created_at']
        read_only_fields = ['id', 'created_at']

    def validate_name(self, v):
        v = clean_text(v)
        if len(v) < 2:
            raise serializers.ValidationError("Name can't be empty")
        return v

    def validate_specialization(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError("Specialization can't be empty")
        return v


class DoctorListQuerySerializer(PageQuerySerializer):
    q = serializers.CharField(max_length=64, required=False, allow_blank=True)
    specialization = serializers.CharField(max_length=255, required=False)
