from rest_framework import serializers

from clinic.models import Service
from .common import clean_text


class ServiceSerializer(serializers.ModelSerializer):
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, coerce_to_string=False)

    class Meta:
        model = Service
        fields = ['id', 'name', 'price', 'status']
        read_only_fields = ['id']

    def validate_name(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError("Name can't be empty")
        return v


class TopServicesQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(required=False, min_value=1, max_value=50, default=5)
