import bleach
from rest_framework import serializers


def clean_text(v):
    return bleach.clean((v or '').strip(), strip=True)


class PageQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1)
    pageSize = serializers.IntegerField(required=False, min_value=1)
    # Older clients send ``limit`` instead of ``pageSize``.
    limit = serializers.IntegerField(required=False, min_value=1)

    def validate(self, attrs):
        if 'pageSize' not in attrs and 'limit' in attrs:
            attrs['pageSize'] = attrs['limit']
        return attrs


class PeriodQuerySerializer(serializers.Serializer):
    at = serializers.DateTimeField(required=False)
